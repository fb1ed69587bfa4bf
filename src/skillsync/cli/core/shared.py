# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.text import Text

from ...core.logging import fail as core_fail
from ...core.logging import info as core_info
from ...core.logging import ok as core_ok
from ...core.logging import section as core_section
from ...core.logging import warn as core_warn


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings."""

    console: Console
    use_emoji: bool
    use_color: bool = True
    debug_enabled: bool = False
    _key_value_re: re.Pattern[str] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")

    def fail(self, message: str) -> None:
        """Log a failure message honouring emoji preferences."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self._color())

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences."""

        core_warn(message, use_emoji=self.use_emoji, use_color=self._color())

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self._color())

    def info(self, message: str) -> None:
        """Log an informational message honouring emoji preferences."""

        core_info(message, use_emoji=self.use_emoji, use_color=self._color())

    def section(self, title: str) -> None:
        """Print a section divider titled ``title``."""

        core_section(title, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper.

        Args:
            message: Text written to standard output.
        """

        typer.echo(message)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        Args:
            message: Debug payload; ``key=value`` pairs are highlighted.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in self._key_value_re.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            text.append(match.group(1), style="bold magenta")
            text.append("=", style="dim")
            text.append(match.group(2), style="bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)

    def _color(self) -> bool | None:
        return None if self.use_color else False


class _RichDebugHandler(logging.Handler):
    """Forward library ``logging`` records to :meth:`CLILogger.debug`."""

    def __init__(self, logger: CLILogger) -> None:
        super().__init__(level=logging.DEBUG)
        self._logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        self._logger.debug(f"{record.name}: {record.getMessage()}")


def unexpected_failure(logger: CLILogger, exc: Exception, *, context: str) -> typer.Exit:
    """Report an unanticipated ``exc`` and return the exit to raise.

    Must be called from inside the ``except`` block handling ``exc`` so the
    traceback printed in debug mode is the active one.

    Args:
        logger: CLI logger used for output.
        exc: Exception that escaped the command.
        context: Prefix describing what was being attempted.

    Returns:
        typer.Exit: Exit carrying status ``1``.
    """

    logger.fail(f"{context}: {type(exc).__name__}: {exc}")
    if logger.debug_enabled:
        logger.console.print_exception()
    return typer.Exit(code=1)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` configured for the provided emoji preference.

    When ``debug`` is enabled, records from the ``skillsync`` library loggers
    are routed through the returned logger.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Logger instance bound to a dedicated Rich console.
    """

    console = Console(no_color=no_color, highlight=False)
    cli_logger = CLILogger(console=console, use_emoji=emoji, use_color=not no_color, debug_enabled=debug)
    library_logger = logging.getLogger("skillsync")
    for handler in [item for item in library_logger.handlers if isinstance(item, _RichDebugHandler)]:
        library_logger.removeHandler(handler)
    if debug:
        library_logger.addHandler(_RichDebugHandler(cli_logger))
        library_logger.setLevel(logging.DEBUG)
    return cli_logger


__all__ = ["CLIError", "CLILogger", "build_cli_logger", "unexpected_failure"]
