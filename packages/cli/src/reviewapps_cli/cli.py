"""CLI entry point for reviewapps.

Commands:
  run      create, update or destroy the review app for the triggering PR
  status   show the pipeline's review apps and which one belongs to a PR
"""

from __future__ import annotations

import importlib.metadata

import click

from reviewapps_cli.commands.run import run_cmd
from reviewapps_cli.commands.status import status_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("reviewapps"),
    prog_name="reviewapps",
)
@click.option(
    "--config",
    "config_path",
    default=".reviewapps.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVIEWAPPS_CONFIG",
)
@click.pass_context
def main(ctx: click.Context, config_path: str):
    """Heroku review apps for GitHub pull requests, driven from CI."""
    from reviewapps_core.config import load_config

    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path)


main.add_command(run_cmd)
main.add_command(status_cmd)
