"""Context extraction from the triggering pull_request event."""

from __future__ import annotations

import json
from pathlib import Path

from reviewapps_core.models import RequestContext, parse_action


class EventError(ValueError):
    """The CI event payload is missing or is not a pull request event."""


def load_event(event_path: str | None) -> dict:
    """Read the webhook payload GitHub Actions writes to GITHUB_EVENT_PATH."""
    if not event_path:
        raise EventError("GITHUB_EVENT_PATH is not set; no event payload to read.")
    path = Path(event_path)
    if not path.exists():
        raise EventError(f"Event payload not found: {event_path}")
    try:
        return json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as e:
        raise EventError(f"Event payload is not valid JSON: {e}") from e


def _split_repository(event: dict, fallback: str | None) -> tuple[str, str]:
    repository = event.get("repository") or {}
    owner = (repository.get("owner") or {}).get("login")
    name = repository.get("name")
    if owner and name:
        return owner, name

    full_name = fallback or ""
    if "/" not in full_name:
        raise EventError("Cannot determine repository owner/name from the event or GITHUB_REPOSITORY.")
    owner, _, name = full_name.partition("/")
    return owner, name


def extract_context(
    event: dict,
    action: str | None,
    pipeline_id: str | None,
    repository: str | None = None,
) -> RequestContext:
    """Build the immutable RequestContext for this run.

    ``repository`` ("owner/name") is only used when the payload carries no
    repository object.
    """
    pr = event.get("pull_request")
    if not pr:
        raise EventError("Event payload has no pull_request; this must run on pull_request events.")

    try:
        head = pr["head"]
        is_fork = bool((head.get("repo") or {}).get("fork", False))
        branch_ref = head["ref"]
        commit_sha = head["sha"]
        pr_number = int(pr["number"])
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise EventError(f"Malformed pull_request payload: {e!r}") from e

    owner, name = _split_repository(event, repository)

    return RequestContext(
        pr_number=pr_number,
        branch_ref=branch_ref,
        commit_sha=commit_sha,
        is_fork=is_fork,
        repo_owner=owner,
        repo_name=name,
        pipeline_id=pipeline_id or "",
        requested_action=parse_action(action),
    )
