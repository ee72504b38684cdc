"""Run reporting for the CI log.

Inside GitHub Actions, debug/notice/error lines are written as workflow
commands so they show up as annotations. Elsewhere they go through a rich
console. Reports are never acted on programmatically beyond the exit status.
"""

from __future__ import annotations

import json
import logging
import os

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


def _escape_command_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def serialize_error(error: BaseException) -> str:
    """Full, JSON-encoded detail of an error for the CI log."""
    to_dict = getattr(error, "to_dict", None)
    detail = to_dict() if callable(to_dict) else {"message": str(error)}
    detail = {"type": type(error).__name__, **detail}
    return json.dumps(detail, default=str, sort_keys=True)


class Reporter:
    def __init__(
        self,
        console: Console | None = None,
        workflow_commands: bool | None = None,
        verbose: bool = False,
    ):
        self.console = console or Console(highlight=False)
        if workflow_commands is None:
            workflow_commands = os.environ.get("GITHUB_ACTIONS") == "true"
        self.workflow_commands = workflow_commands
        self.verbose = verbose
        self.notices: list[str] = []
        self.errors: list[str] = []

    def debug(self, message: str) -> None:
        logger.debug("debug: %s", message)
        if self.workflow_commands:
            self._command("debug", message)
        elif self.verbose:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def info(self, message: str) -> None:
        logger.debug("info: %s", message)
        if self.workflow_commands:
            self.console.out(message, highlight=False)
        else:
            self.console.print(escape(message))

    def notice(self, message: str) -> None:
        self.notices.append(message)
        logger.debug("notice: %s", message)
        if self.workflow_commands:
            self._command("notice", message)
        else:
            self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def error(self, message: str, error: BaseException | None = None) -> None:
        """Report an error; when ``error`` is given its serialized detail follows."""
        self.errors.append(message)
        logger.debug("error: %s", message)
        if self.workflow_commands:
            self._command("error", message)
        else:
            self.console.print(f"[red]{escape(message)}[/red]")
        if error is not None:
            detail = serialize_error(error)
            if self.workflow_commands:
                self._command("error", detail)
            else:
                self.console.print(f"[red]{escape(detail)}[/red]")

    def _command(self, name: str, message: str) -> None:
        self.console.out(f"::{name}::{_escape_command_data(message)}", highlight=False)
