"""Runtime settings read from ``EXTDUMP_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_SOLUTION_PATTERN = "*.sln"
DEFAULT_CONFIGURATION = "Debug"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.INFO
    solution_pattern: str = DEFAULT_SOLUTION_PATTERN
    configuration: str = DEFAULT_CONFIGURATION


def _parse_level(value: str) -> int:
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def load_settings(environ=None) -> Settings:
    """Build ``Settings`` from *environ* (defaults to ``os.environ``).

    Raises ``ValueError`` for an unrecognised ``EXTDUMP_LOG_LEVEL``.
    """
    env = os.environ if environ is None else environ
    return Settings(
        log_level=_parse_level(env.get("EXTDUMP_LOG_LEVEL", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL),
        solution_pattern=env.get("EXTDUMP_SOLUTION_PATTERN") or DEFAULT_SOLUTION_PATTERN,
        configuration=env.get("EXTDUMP_CONFIGURATION") or DEFAULT_CONFIGURATION,
    )
