"""Project-load progress events and the logging reporter for them."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from datetime import timedelta

log = logging.getLogger(__name__)


class ProjectLoadOperation(enum.Enum):
    EVALUATE = "Evaluate"
    BUILD = "Build"
    RESOLVE = "Resolve"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProjectLoadProgress:
    operation: ProjectLoadOperation
    elapsed: timedelta
    file_path: str
    target_framework: str | None = None


def format_elapsed(elapsed: timedelta) -> str:
    """Seconds and seven fractional digits, e.g. ``0.0123450``."""
    return f"{elapsed.seconds % 60}.{elapsed.microseconds * 10:07d}"


class ProjectLoadProgressReporter:
    """Logs each progress event and records resolved target frameworks.

    Paths compare case-insensitively.  ``Resolve`` events add their target
    framework to the project's list; the first one for a project creates
    the entry even when it carries no framework.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._log = logger or log
        self._lock = threading.Lock()
        self._frameworks: dict[str, tuple[str, list[str]]] = {}

    def __call__(self, progress: ProjectLoadProgress) -> None:
        self.report(progress)

    def report(self, progress: ProjectLoadProgress) -> None:
        if progress.operation is ProjectLoadOperation.RESOLVE:
            key = progress.file_path.casefold()
            with self._lock:
                entry = self._frameworks.get(key)
                if entry is None:
                    frameworks = [progress.target_framework] if progress.target_framework else []
                    self._frameworks[key] = (progress.file_path, frameworks)
                elif progress.target_framework:
                    entry[1].append(progress.target_framework)

        if progress.target_framework is not None:
            self._log.info(
                "[%s] (%s): %s - %s",
                progress.operation, format_elapsed(progress.elapsed),
                progress.target_framework, progress.file_path,
            )
        else:
            self._log.info(
                "[%s] (%s): %s",
                progress.operation, format_elapsed(progress.elapsed), progress.file_path,
            )

    @property
    def project_target_frameworks(self) -> dict[str, list[str]]:
        return {path: list(frameworks) for path, frameworks in self._frameworks.values()}
