"""Create, update or destroy the review app for one pull request.

Each handler takes the request context and the platform client explicitly.
Errors from either remote are caught at the handler boundary, reported with
their full detail and turned into a failed Outcome; nothing is retried or
rolled back.
"""

from __future__ import annotations

import json

import requests
from github import GithubException

from reviewapps_core.gh.source import SourceControlError, get_repo, resolve_tarball
from reviewapps_core.heroku.client import HerokuClient, HerokuError
from reviewapps_core.locator import find_review_app, locate_review_app
from reviewapps_core.models import (
    ACTION_CREATE,
    ACTION_DESTROY,
    ACTION_UPDATE,
    Outcome,
    RequestContext,
    SourceReference,
)
from reviewapps_core.reporting import Reporter

_MISSING_GITHUB_TOKEN = "Couldn't connect to GitHub, make sure the GITHUB_TOKEN secret is set"


def _resolve_source(ctx: RequestContext, github_token: str | None, reporter: Reporter) -> SourceReference:
    if not github_token:
        raise SourceControlError(_MISSING_GITHUB_TOKEN)
    reporter.debug("init GitHub client")
    try:
        repo = get_repo(ctx.repo_full_name, token=github_token)
        return resolve_tarball(repo, ref=ctx.branch_ref, version=ctx.commit_sha)
    except GithubException as e:
        raise SourceControlError(f"GitHub request failed: {e}", status=e.status, data=e.data) from e
    except requests.RequestException as e:
        raise SourceControlError(f"GitHub request failed ({type(e).__name__}): {e}") from e


def _failed(ctx: RequestContext, reporter: Reporter, message: str, error: BaseException | None = None) -> Outcome:
    reporter.error(message, error)
    return Outcome(action=ctx.requested_action, status="failed", detail=message)


def destroy_review_app(ctx: RequestContext, heroku: HerokuClient, reporter: Reporter) -> Outcome:
    """Delete the PR's review app, errored or not. A missing app is a no-op."""
    reporter.info("Fetching Review Apps list")
    try:
        app = find_review_app(heroku, ctx.pipeline_id, ctx.pr_number, reporter)
        if app is None:
            reporter.info(f"No review app found for PR #{ctx.pr_number}, nothing to destroy")
            return Outcome(action=ACTION_DESTROY, status="skipped", detail="no review app")
        reporter.info("Destroying Review App")
        heroku.delete_review_app(app.id)
    except HerokuError as e:
        return _failed(ctx, reporter, "Error while destroying review app", e)

    reporter.info("Review App destroyed")
    return Outcome(action=ACTION_DESTROY, status="destroyed", app_id=app.id)


def create_review_app(
    ctx: RequestContext, heroku: HerokuClient, github_token: str | None, reporter: Reporter
) -> Outcome:
    """Create a review app from the PR head tarball.

    Existing review apps for the PR are not checked for; the platform decides
    what a duplicate create means.
    """
    try:
        source = _resolve_source(ctx, github_token, reporter)
    except SourceControlError as e:
        return _failed(ctx, reporter, "Couldn't resolve the source tarball", e)

    payload = {
        "branch": ctx.branch_ref,
        "pipeline": ctx.pipeline_id,
        "source_blob": source.to_source_blob(),
        "pr_number": ctx.pr_number,
    }
    reporter.info("Creating Review App")
    reporter.debug(json.dumps(payload))
    try:
        response = heroku.create_review_app(
            branch=ctx.branch_ref,
            pipeline_id=ctx.pipeline_id,
            source_blob=source.to_source_blob(),
            pr_number=ctx.pr_number,
        )
    except HerokuError as e:
        return _failed(ctx, reporter, "Error while creating review app", e)

    reporter.debug(json.dumps(response, default=str))
    reporter.info("Review App created")
    app_id = response.get("id") if isinstance(response, dict) else None
    return Outcome(action=ACTION_CREATE, status="created", app_id=app_id)


def update_review_app(
    ctx: RequestContext, heroku: HerokuClient, github_token: str | None, reporter: Reporter
) -> Outcome:
    """Post a new build of the PR head to its existing, non-errored review app."""
    if not github_token:
        return _failed(ctx, reporter, _MISSING_GITHUB_TOKEN)

    try:
        app = locate_review_app(heroku, ctx.pipeline_id, ctx.pr_number, reporter)
    except HerokuError as e:
        return _failed(ctx, reporter, "Error while looking up review app", e)
    if app is None:
        return _failed(ctx, reporter, f"No usable review app for PR #{ctx.pr_number}; nothing to update")

    try:
        source = _resolve_source(ctx, github_token, reporter)
    except SourceControlError as e:
        return _failed(ctx, reporter, "Couldn't resolve the source tarball", e)

    reporter.info("Updating Review App")
    reporter.debug(json.dumps({"app": app.build_target, "source_blob": source.to_source_blob()}))
    try:
        response = heroku.create_build(app.build_target, source.to_source_blob())
    except HerokuError as e:
        return _failed(ctx, reporter, "Error while updating build", e)

    reporter.debug(json.dumps(response, default=str))
    reporter.info("Review App updated")
    return Outcome(action=ACTION_UPDATE, status="updated", app_id=app.build_target)


def reconcile(ctx: RequestContext, heroku: HerokuClient, github_token: str | None, reporter: Reporter) -> Outcome:
    """Dispatch the requested action. Unknown actions are a debug-level no-op."""
    action = ctx.requested_action
    if action == ACTION_DESTROY:
        return destroy_review_app(ctx, heroku, reporter)
    if action == ACTION_CREATE:
        return create_review_app(ctx, heroku, github_token, reporter)
    if action == ACTION_UPDATE:
        return update_review_app(ctx, heroku, github_token, reporter)

    reporter.debug("Invalid action, no action was performed, use one of 'create', 'update' or 'destroy'")
    return Outcome(action=action, status="skipped", detail="unknown action")
