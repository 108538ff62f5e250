"""Open solutions into projects and compile projects into symbol graphs."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Callable

import networkx as nx

from extdump.symbols import AssemblyIdentity, AssemblySymbol

from .binder import Binder
from .msbuild import ProjectFile, ProjectLoadError, read_project, read_solution
from .parser import parse_file
from .progress import ProjectLoadOperation, ProjectLoadProgress

log = logging.getLogger(__name__)

ProgressCallback = Callable[[ProjectLoadProgress], None]


class CompilationError(Exception):
    """A project's sources could not be read."""


@dataclass(frozen=True)
class WorkspaceFailure:
    path: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Compilation:
    project_name: str
    assembly: AssemblySymbol
    document_count: int

    @property
    def identity(self) -> AssemblyIdentity:
        return self.assembly.identity


@dataclass(eq=False)
class Project:
    """One buildable flavour of a project file: one target framework."""

    name: str
    file_path: str
    output_file_path: str
    language: str
    identity: AssemblyIdentity
    target_framework: str | None = None
    documents: list[str] = field(default_factory=list)
    project_references: list[str] = field(default_factory=list)
    implicit_usings: bool = False
    _compilation: Compilation | None = field(default=None, init=False, repr=False)

    @property
    def assembly_name(self) -> str:
        return self.identity.name

    def get_compilation(self) -> Compilation | None:
        """Bind the project's C# documents.

        Returns None when the project is not C#.  Raises
        ``CompilationError`` when a document cannot be read.
        """
        if self.language != "C#":
            return None
        if self._compilation is not None:
            return self._compilation

        binder = Binder(self.identity, implicit_usings=self.implicit_usings)
        for document in self.documents:
            try:
                tree, source = parse_file(document)
            except OSError as exc:
                raise CompilationError(f"{self.name}: cannot read {document}: {exc.strerror or exc}") from exc
            binder.add_document(tree, source, document)

        self._compilation = Compilation(self.name, binder.bind(), len(self.documents))
        return self._compilation


@dataclass
class Solution:
    file_path: str
    projects: list[Project] = field(default_factory=list)
    failures: list[WorkspaceFailure] = field(default_factory=list)
    reference_graph: nx.DiGraph = field(default_factory=nx.DiGraph)


class Workspace:
    """Loads solutions; holds at most one open solution at a time."""

    def __init__(self, configuration: str = "Debug"):
        self.configuration = configuration
        self.current_solution: Solution | None = None

    def __enter__(self) -> Workspace:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close_solution()

    def close_solution(self) -> None:
        self.current_solution = None

    def open_solution(self, path: str | Path, progress: ProgressCallback | None = None) -> Solution:
        """Read the solution at *path* and every project it reaches.

        Raises ``ProjectLoadError`` when the solution file itself cannot be
        read; project-level problems become ``WorkspaceFailure`` entries.
        """
        path = os.path.abspath(str(path))
        entries = read_solution(path)
        solution = Solution(path)
        graph = solution.reference_graph

        evaluated: dict[str, ProjectFile] = {}
        pending = [e.path for e in entries]
        for entry in entries:
            graph.add_node(_key(entry.path), path=entry.path)

        while pending:
            project_path = pending.pop(0)
            key = _key(project_path)
            if key in evaluated or graph.nodes.get(key, {}).get("failed"):
                continue
            graph.add_node(key, path=project_path)

            start = time.perf_counter()
            try:
                project_file = read_project(project_path, self.configuration)
            except ProjectLoadError as exc:
                graph.nodes[key]["failed"] = True
                solution.failures.append(WorkspaceFailure(project_path, str(exc)))
                continue
            _report(progress, ProjectLoadOperation.EVALUATE, start, project_path)

            evaluated[key] = project_file
            for reference in project_file.project_references:
                graph.add_edge(key, _key(reference))
                graph.nodes[_key(reference)].setdefault("path", reference)
                pending.append(reference)

        visited: set[str] = set()
        for entry in entries:
            for key in nx.dfs_preorder_nodes(graph, _key(entry.path)):
                if key in visited:
                    continue
                visited.add(key)
                project_file = evaluated.get(key)
                if project_file is not None:
                    solution.projects.extend(self._load_flavours(project_file, progress, solution))

        log.info(
            "Opened %s: %d project(s), %d failure(s)",
            path, len(solution.projects), len(solution.failures),
        )
        self.current_solution = solution
        return solution

    def _load_flavours(self, project_file: ProjectFile, progress, solution: Solution) -> list[Project]:
        frameworks = project_file.target_frameworks
        multi_targeted = len(frameworks) > 1
        stem = Path(project_file.path).stem
        projects = []

        for framework in frameworks or [None]:
            start = time.perf_counter()
            flavour = project_file
            if multi_targeted:
                try:
                    flavour = read_project(project_file.path, self.configuration, framework)
                except ProjectLoadError as exc:
                    solution.failures.append(WorkspaceFailure(project_file.path, str(exc)))
                    continue
            _report(progress, ProjectLoadOperation.BUILD, start, project_file.path, framework)

            projects.append(Project(
                name=f"{stem} ({framework})" if multi_targeted else stem,
                file_path=project_file.path,
                output_file_path=flavour.output_file_path,
                language=flavour.language,
                identity=AssemblyIdentity(flavour.assembly_name, flavour.version),
                target_framework=framework,
                documents=list(flavour.compile_items),
                project_references=list(flavour.project_references),
                implicit_usings=flavour.implicit_usings,
            ))
            _report(progress, ProjectLoadOperation.RESOLVE, start, project_file.path, framework)
        return projects


def _key(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


def _report(progress, operation, start, file_path, target_framework=None) -> None:
    if progress is None:
        return
    elapsed = timedelta(seconds=time.perf_counter() - start)
    progress(ProjectLoadProgress(operation, elapsed, file_path, target_framework))
