"""Drive a run: find solutions, load projects, classify, write reports."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from extdump.analysis import (
    ExtensionContainerRecord,
    ProjectUnit,
    UnhandledTypeKindError,
    discover_containers,
    resolve_unit,
)
from extdump.config import Settings
from extdump.exit_codes import EXIT_PARTIAL, EXIT_SUCCESS
from extdump.frontend import (
    CompilationError,
    ProjectLoadError,
    ProjectLoadProgressReporter,
    Workspace,
)
from extdump.output.reports import ReportAggregator

log = logging.getLogger(__name__)

_PATH_SEPARATORS = re.compile(r"[\\/]+")


@dataclass
class RunResult:
    solutions: list[Path] = field(default_factory=list)
    units_processed: int = 0
    units_reported: int = 0
    duplicates_skipped: int = 0
    load_failures: list[str] = field(default_factory=list)
    unavailable: list[str] = field(default_factory=list)
    defects: list[str] = field(default_factory=list)
    type_rows: int = 0
    method_rows: int = 0
    type_report: Path | None = None
    method_report: Path | None = None

    @property
    def exit_code(self) -> int:
        return EXIT_PARTIAL if self.defects else EXIT_SUCCESS


def discover_solutions(directory: str | Path, pattern: str = "*.sln") -> list[Path]:
    """Solution files directly inside *directory*, sorted.  Not recursive."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(p.resolve() for p in directory.glob(pattern) if p.is_file())


def is_reference_assembly_project(file_path: str | None) -> bool:
    """Projects under a ``ref`` directory build reference assemblies only."""
    if not file_path:
        return True
    return "ref" in _PATH_SEPARATORS.split(file_path)[:-1]


def classify_assembly(assembly) -> list[ExtensionContainerRecord]:
    """Find and fully classify every extension container of *assembly*.

    Method classification happens here rather than while writing, so a
    receiver the classifier cannot handle raises before any row exists.
    """
    containers = discover_containers(assembly)
    method_count = sum(len(c.extension_methods) for c in containers)
    log.debug("Classified %d extension method(s) in %d container(s)", method_count, len(containers))
    return containers


def run(
    search_directory: str | Path,
    output_directory: str | Path | None = None,
    settings: Settings | None = None,
) -> RunResult:
    settings = settings or Settings()
    search_directory = Path(search_directory).resolve()
    output_directory = Path(output_directory) if output_directory is not None else Path.cwd()

    result = RunResult(solutions=discover_solutions(search_directory, settings.solution_pattern))
    if not result.solutions:
        log.critical("Did not find any solution files in %s", search_directory)

    aggregator = ReportAggregator()
    processed: set[ProjectUnit] = set()

    with Workspace(settings.configuration) as workspace:
        for solution_path in result.solutions:
            log.info("Loading solution: %s", solution_path)
            reporter = ProjectLoadProgressReporter()
            try:
                solution = workspace.open_solution(solution_path, reporter)
            except ProjectLoadError as exc:
                log.error("Failed to load solution %s: %s", solution_path, exc)
                result.load_failures.append(str(solution_path))
                continue
            except Exception:
                log.exception("Failed to load solution %s", solution_path)
                result.load_failures.append(str(solution_path))
                continue

            for project_path, frameworks in reporter.project_target_frameworks.items():
                log.debug("Resolved %s: %s", project_path, ", ".join(frameworks) or "no target framework")

            for failure in solution.failures:
                log.error("Failed to load project %s: %s", failure.path, failure.message)
                result.load_failures.append(failure.path)

            for project in solution.projects:
                if is_reference_assembly_project(project.file_path):
                    log.debug("Skipping reference assembly project %s", project.file_path)
                    continue

                unit = resolve_unit(project)
                if unit in processed:
                    result.duplicates_skipped += 1
                    continue
                processed.add(unit)
                _process_project(project, unit, aggregator, result)

            workspace.close_solution()

    result.units_reported = len(aggregator)
    result.type_report, result.method_report = aggregator.write(output_directory)
    result.type_rows = len(aggregator.type_rows())
    result.method_rows = len(aggregator.method_rows())
    return result


def _process_project(project, unit: ProjectUnit, aggregator: ReportAggregator, result: RunResult) -> None:
    log.info("Processing %s ...", project.name)
    result.units_processed += 1

    try:
        compilation = project.get_compilation()
    except CompilationError as exc:
        log.error("Could not get compilation for %s: %s", project.name, exc)
        result.unavailable.append(project.name)
        return
    except Exception:
        log.exception("Could not get compilation for %s", project.name)
        result.unavailable.append(project.name)
        return
    if compilation is None:
        log.error("Could not get compilation for %s", project.name)
        result.unavailable.append(project.name)
        return

    try:
        containers = classify_assembly(compilation.assembly)
    except UnhandledTypeKindError:
        log.exception("Classification failed for %s; its rows are omitted", project.name)
        result.defects.append(project.name)
        return

    log.info("Found %d type(s) containing extension methods", len(containers))
    if containers:
        aggregator.add(unit, compilation.identity, containers)
