"""Click CLI entry point."""

import logging
import os
import sys

# Fix Unicode output on Windows consoles (cp1253, cp1252, etc.)
if sys.platform == "win32" and not os.environ.get("PYTHONIOENCODING"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import click

from extdump.config import load_settings
from extdump.exit_codes import DESCRIPTIONS, EXIT_PARTIAL, EXIT_USAGE, ExtDumpError, exit_with

LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


class ClickEchoHandler(logging.Handler):
    """Route log records to stderr through ``click.echo``."""

    def emit(self, record):
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def configure_logging(level: int) -> logging.Logger:
    logger = logging.getLogger("extdump")
    for handler in list(logger.handlers):
        if isinstance(handler, ClickEchoHandler):
            logger.removeHandler(handler)
    handler = ClickEchoHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


@click.command()
@click.version_option(package_name="extdump")
@click.argument("search_directory", required=False, type=click.Path(file_okay=False))
def cli(search_directory):
    """Report extension methods declared in the C# solutions of SEARCH_DIRECTORY.

    Every *.sln file directly inside SEARCH_DIRECTORY (default: the current
    directory) is loaded and the two reports, Report-extension-types.csv
    and Report-extension-methods.csv, are written to the current directory.
    """
    try:
        settings = load_settings()
    except ValueError as exc:
        raise ExtDumpError(str(exc), EXIT_USAGE)
    configure_logging(settings.log_level)

    from extdump.pipeline import run

    search_directory = os.path.abspath(search_directory or os.getcwd())
    result = run(search_directory, os.getcwd(), settings)

    click.echo(f"Wrote {result.type_rows} type row(s) to {result.type_report}")
    click.echo(f"Wrote {result.method_rows} method row(s) to {result.method_report}")
    if result.defects:
        exit_with(
            EXIT_PARTIAL,
            f"{DESCRIPTIONS[EXIT_PARTIAL]}: {', '.join(result.defects)}",
        )
