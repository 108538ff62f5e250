"""Minimal comma-separated writer used by both reports.

String fields containing a comma or a space are wrapped in double quotes.
Embedded double quotes are always doubled.  Newlines do not trigger
quoting.  Non-string values are written with ``str()`` and never quoted.
"""

from __future__ import annotations

from typing import Iterable, TextIO

SEPARATOR = ","
QUOTE = '"'
LINE_TERMINATOR = "\n"

_QUOTE_TRIGGERS = (SEPARATOR, " ")


def encode_field(value) -> str:
    if isinstance(value, str):
        text = value.replace(QUOTE, QUOTE + QUOTE)
        if any(ch in value for ch in _QUOTE_TRIGGERS):
            return f"{QUOTE}{text}{QUOTE}"
        return text
    if value is None:
        return ""
    return str(value)


def format_row(parts: Iterable) -> str:
    return SEPARATOR.join(encode_field(p) for p in parts)


def write_row(stream: TextIO, *parts) -> None:
    stream.write(format_row(parts) + LINE_TERMINATOR)
