"""Stable identity for project-like compilation units.

The workspace can hand out the same project more than once, for instance
when two solutions share it or when it is reachable both as a solution entry
and as somebody's project reference.  ``ProjectUnit`` is the key the
pipeline uses to process each one exactly once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .frameworks import is_known_target_framework

_PATH_SEPARATORS = re.compile(r"[\\/]+")


@dataclass(frozen=True, eq=False)
class ProjectUnit:
    """(path, logical name, build-target label).

    The path compares case-insensitively, like a file-system path; the
    name and label compare exactly.
    """

    file_path: str
    name: str
    target_framework: str = ""

    def _key(self) -> tuple[str, str, str]:
        return (self.file_path.casefold(), self.name, self.target_framework)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectUnit):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


def split_display_name(display_name: str) -> tuple[str, str]:
    """``"MyLib (net9.0)"`` -> ``("MyLib", "net9.0")``; no suffix -> label ``""``."""
    if display_name.endswith(")"):
        open_paren = display_name.rfind("(")
        if open_paren >= 0:
            return display_name[:open_paren].rstrip(), display_name[open_paren + 1:-1]
    return display_name, ""


def target_framework_from_output_path(output_file_path: str | None) -> str:
    """Find the build-target label nearest the compiled artifact.

    The directory segments are scanned from the last one backward, so for
    ``bin/Debug/net8.0-windows/MyLib.dll`` the label is ``net8.0-windows``.
    """
    if not output_file_path:
        return ""
    segments = [s for s in _PATH_SEPARATORS.split(output_file_path) if s]
    for segment in reversed(segments[:-1]):
        if is_known_target_framework(segment):
            return segment
    return ""


def resolve_unit(project) -> ProjectUnit:
    """Derive the unit identity of a workspace project.

    *project* needs ``name``, ``file_path`` and ``output_file_path``.
    """
    name, target_framework = split_display_name(project.name)
    if not target_framework:
        target_framework = target_framework_from_output_path(project.output_file_path)
    return ProjectUnit(project.file_path, name, target_framework)
