"""run command: reconcile the review app for the triggering pull request."""

from __future__ import annotations

import click

from reviewapps_core.event import EventError, load_event
from reviewapps_core.reporting import Reporter
from reviewapps_core.runner import run_action


@click.command("run")
@click.option(
    "--action",
    default=None,
    help="create, update or destroy. Defaults to the INPUT_ACTION input; other values do nothing.",
)
@click.option(
    "--event",
    "event_path",
    default=None,
    help="Path to the pull_request event JSON. Defaults to GITHUB_EVENT_PATH.",
)
@click.option("--pipeline", "pipeline_id", default=None, help="Heroku pipeline id. Overrides HEROKU_PIPELINE_ID.")
@click.option(
    "--fail-on-error",
    is_flag=True,
    help="Exit with status 1 when the run reports an error.",
)
@click.option("--verbose", "-v", is_flag=True, help="Print debug lines outside GitHub Actions.")
@click.pass_context
def run_cmd(
    ctx,
    action: str | None,
    event_path: str | None,
    pipeline_id: str | None,
    fail_on_error: bool,
    verbose: bool,
):
    """Create, update or destroy the Heroku review app for a pull request.

    Meant to run inside a GitHub Actions pull_request workflow. PRs from
    forked repositories never touch Heroku.

    \b
    Required environment variables:
      HEROKU_API_TOKEN     Heroku Platform API token
      HEROKU_PIPELINE_ID   Pipeline the review apps belong to (or --pipeline)
      GITHUB_TOKEN         Needed by create and update to locate the tarball
    """
    config = dict(ctx.obj["config"])
    overrides = {
        "action": action,
        "event_path": event_path,
        "pipeline_id": pipeline_id,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})
    if fail_on_error:
        config["fail_on_error"] = True

    reporter = Reporter(verbose=verbose)

    try:
        event = load_event(config.get("event_path"))
    except EventError as e:
        raise click.UsageError(str(e))

    outcome = run_action(config, event, reporter=reporter)

    if outcome.failed and config.get("fail_on_error"):
        ctx.exit(1)
