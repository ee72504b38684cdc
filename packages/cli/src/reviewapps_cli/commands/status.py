"""status command: list a pipeline's review apps and find the one for a PR."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewapps_core.config import ConfigError, require
from reviewapps_core.heroku.client import HerokuError
from reviewapps_core.locator import match_review_app
from reviewapps_core.runner import build_heroku_client

console = Console()

_STATUS_STYLE = {
    "created": "green",
    "creating": "cyan",
    "pending": "cyan",
    "deleting": "yellow",
    "errored": "red",
}


@click.command("status")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number to look up.")
@click.option("--pipeline", "pipeline_id", default=None, help="Heroku pipeline id. Overrides HEROKU_PIPELINE_ID.")
@click.pass_context
def status_cmd(ctx, pr_number: int, pipeline_id: str | None):
    """Show the review apps in a pipeline and whether a PR's app is usable.

    Read-only: nothing is created, built or deleted.
    """
    config = dict(ctx.obj["config"])
    if pipeline_id:
        config["pipeline_id"] = pipeline_id

    try:
        pipeline_id = require(
            config, "pipeline_id", "No pipeline configured. Set HEROKU_PIPELINE_ID or pass --pipeline."
        )
        heroku = build_heroku_client(config)
    except ConfigError as e:
        raise click.UsageError(str(e))

    try:
        review_apps = heroku.list_review_apps(pipeline_id)
    except HerokuError as e:
        raise click.ClickException(str(e))

    if not review_apps:
        console.print("[yellow]No review apps in this pipeline.[/yellow]")
        return

    match = match_review_app(review_apps, pr_number)
    if match is None:
        console.print(f"[yellow]No review app found for PR #{pr_number}.[/yellow]")
    elif match.is_errored:
        console.print(f"[red]Review app for PR #{pr_number} is errored and cannot be built on.[/red]")
    else:
        console.print(f"[green]Review app for PR #{pr_number}: {match.id} ({match.status})[/green]")

    table = Table(title=f"Review Apps: {pipeline_id}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=6)
    table.add_column("Branch", max_width=40)
    table.add_column("Status", width=12)
    table.add_column("Review App", width=36)
    table.add_column("", width=2)

    for app in review_apps:
        style = _STATUS_STYLE.get(app.status, "white")
        marker = ""
        if app is match:
            marker = "✘" if app.is_errored else "✔"
        table.add_row(
            f"#{app.pr_number}" if app.pr_number is not None else "—",
            app.branch[:40],
            f"[{style}]{app.status}[/{style}]",
            app.id,
            marker,
        )

    console.print(table)
