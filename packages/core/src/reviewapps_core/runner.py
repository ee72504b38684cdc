"""One review-app run: event -> context -> platform client -> reconcile."""

from __future__ import annotations

import json

from reviewapps_core.config import ConfigError, require
from reviewapps_core.event import EventError, extract_context
from reviewapps_core.heroku.client import HerokuClient
from reviewapps_core.models import Outcome, parse_action
from reviewapps_core.reconciler import reconcile
from reviewapps_core.reporting import Reporter


def build_heroku_client(config: dict) -> HerokuClient:
    token = require(
        config,
        "heroku_api_token",
        "Couldn't connect to Heroku, make sure the HEROKU_API_TOKEN is set",
    )
    return HerokuClient(
        token=token,
        base_url=config.get("heroku_api_url") or "https://api.heroku.com",
        timeout=config.get("request_timeout", 30),
    )


def run_action(
    config: dict,
    event: dict,
    reporter: Reporter | None = None,
    heroku: HerokuClient | None = None,
) -> Outcome:
    """Run the reconciliation for the pull request in ``event``.

    Fork PRs return before any client is built or any network call is made.
    Configuration and event problems are reported and returned as a failed
    Outcome, like remote errors.
    """
    reporter = reporter or Reporter()
    action = parse_action(config.get("action"))

    try:
        ctx = extract_context(
            event,
            action=config.get("action"),
            pipeline_id=config.get("pipeline_id"),
            repository=config.get("repository"),
        )
    except EventError as e:
        reporter.error(str(e))
        return Outcome(action=action, status="failed", detail=str(e))

    reporter.debug(json.dumps(ctx.to_dict()))

    if ctx.is_fork:
        reporter.info("PRs from forked repos can't trigger this action")
        return Outcome(action=ctx.requested_action, status="skipped", detail="fork")

    try:
        require(config, "pipeline_id", "No pipeline configured, make sure HEROKU_PIPELINE_ID is set")
        if heroku is None:
            reporter.debug("connecting to heroku")
            heroku = build_heroku_client(config)
    except ConfigError as e:
        reporter.error(str(e))
        return Outcome(action=ctx.requested_action, status="failed", detail=str(e))

    return reconcile(ctx, heroku, config.get("github_token"), reporter)
