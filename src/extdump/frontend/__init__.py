"""C# front-end: solution loading and declaration binding."""

from .binder import Binder, compile_sources
from .library import MetadataLibrary
from .msbuild import ProjectFile, ProjectLoadError, SolutionEntry, read_project, read_solution
from .progress import ProjectLoadOperation, ProjectLoadProgress, ProjectLoadProgressReporter
from .workspace import (
    Compilation,
    CompilationError,
    Project,
    Solution,
    Workspace,
    WorkspaceFailure,
)

__all__ = [
    "Binder",
    "Compilation",
    "CompilationError",
    "MetadataLibrary",
    "Project",
    "ProjectFile",
    "ProjectLoadError",
    "ProjectLoadOperation",
    "ProjectLoadProgress",
    "ProjectLoadProgressReporter",
    "Solution",
    "SolutionEntry",
    "Workspace",
    "WorkspaceFailure",
    "compile_sources",
    "read_project",
    "read_solution",
]
