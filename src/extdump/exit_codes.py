"""Standardized CLI exit codes for extdump.

Exit code scheme:

    0  SUCCESS        -- reports written, every unit classified
    1  GENERAL_ERROR  -- unexpected failure, crash, unhandled exception
    2  USAGE_ERROR    -- invalid arguments (Click default)
    6  PARTIAL        -- reports written, but at least one unit was dropped
                         because classifying it hit a defect

Missing solutions, unloadable projects and unavailable compilations are
logged and do not change the exit code: the reports still describe
everything that could be read.
"""

from __future__ import annotations

import sys

import click

# ---------------------------------------------------------------------------
# Exit code constants
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE: int = 2
EXIT_PARTIAL: int = 6

DESCRIPTIONS: dict[int, str] = {
    EXIT_SUCCESS: "success",
    EXIT_ERROR: "unexpected error",
    EXIT_USAGE: "invalid usage (bad arguments or flags)",
    EXIT_PARTIAL: "partial results (one or more units failed to classify)",
}


class ExtDumpError(click.ClickException):
    """Base class for extdump errors with exit codes."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def format_message(self) -> str:
        return self.message


def exit_with(code: int, message: str | None = None) -> None:
    """Print an optional message to stderr and exit with the given code."""
    if message:
        click.echo(f"Error: {message}", err=True)
    sys.exit(code)
