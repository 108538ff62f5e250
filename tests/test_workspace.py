"""Tests for opening solutions into projects and compiling them."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))
from conftest import STRING_EXTENSIONS, write_project, write_solution

from extdump.analysis import discover_containers
from extdump.frontend import (
    CompilationError,
    Project,
    ProjectLoadOperation,
    ProjectLoadProgressReporter,
    Workspace,
)
from extdump.symbols import AssemblyIdentity


class _Recorder(list):
    def __call__(self, progress):
        self.append(progress)


# ===========================================================================
# Opening solutions
# ===========================================================================


class TestOpenSolution:
    def test_single_target_project(self, tmp_path):
        lib = write_project(tmp_path, "MyLib", {"Ext.cs": STRING_EXTENSIONS})
        solution_path = write_solution(tmp_path, "App", [lib])

        with Workspace() as workspace:
            solution = workspace.open_solution(solution_path)
            assert workspace.current_solution is solution

        assert workspace.current_solution is None
        assert [p.name for p in solution.projects] == ["MyLib"]
        project = solution.projects[0]
        assert project.file_path == str(lib)
        assert project.language == "C#"
        assert project.target_framework == "net8.0"
        assert project.identity == AssemblyIdentity("MyLib", "1.0.0.0")
        assert Path(project.output_file_path).parent.name == "net8.0"
        assert [Path(d).name for d in project.documents] == ["Ext.cs"]

    def test_multi_target_project_names(self, tmp_path):
        lib = write_project(tmp_path, "MyLib", {"Ext.cs": STRING_EXTENSIONS}, tfm="net8.0;net9.0")
        solution_path = write_solution(tmp_path, "App", [lib])

        solution = Workspace().open_solution(solution_path)

        assert [p.name for p in solution.projects] == ["MyLib (net8.0)", "MyLib (net9.0)"]
        assert [p.target_framework for p in solution.projects] == ["net8.0", "net9.0"]
        assert [Path(p.output_file_path).parent.name for p in solution.projects] == ["net8.0", "net9.0"]

    def test_progress_events(self, tmp_path):
        lib = write_project(tmp_path, "MyLib", {}, tfm="net8.0;net9.0")
        solution_path = write_solution(tmp_path, "App", [lib])
        recorder = _Recorder()

        Workspace().open_solution(solution_path, recorder)

        assert [e.operation for e in recorder] == [
            ProjectLoadOperation.EVALUATE,
            ProjectLoadOperation.BUILD,
            ProjectLoadOperation.RESOLVE,
            ProjectLoadOperation.BUILD,
            ProjectLoadOperation.RESOLVE,
        ]
        assert [e.target_framework for e in recorder] == [None, "net8.0", "net8.0", "net9.0", "net9.0"]
        assert all(e.file_path == str(lib) for e in recorder)

    def test_reporter_collects_frameworks(self, tmp_path):
        lib = write_project(tmp_path, "MyLib", {}, tfm="net8.0;net9.0")
        solution_path = write_solution(tmp_path, "App", [lib])
        reporter = ProjectLoadProgressReporter()

        Workspace().open_solution(solution_path, reporter)

        assert reporter.project_target_frameworks == {str(lib): ["net8.0", "net9.0"]}

    def test_referenced_project_outside_solution_is_loaded(self, tmp_path):
        core = write_project(tmp_path, "Core", {"Ext.cs": STRING_EXTENSIONS})
        app = write_project(tmp_path, "App", {}, references=[r"..\Core\Core.csproj"])
        solution_path = write_solution(tmp_path, "App", [app])

        solution = Workspace().open_solution(solution_path)

        assert [p.name for p in solution.projects] == ["App", "Core"]
        assert solution.reference_graph.number_of_edges() == 1
        assert solution.projects[1].file_path == str(core)

    def test_shared_reference_loaded_once(self, tmp_path):
        write_project(tmp_path, "Core", {})
        first = write_project(tmp_path, "First", {}, references=[r"..\Core\Core.csproj"])
        second = write_project(tmp_path, "Second", {}, references=[r"..\Core\Core.csproj"])
        solution_path = write_solution(tmp_path, "App", [first, second])

        solution = Workspace().open_solution(solution_path)

        assert [p.name for p in solution.projects] == ["First", "Core", "Second"]

    def test_missing_project_becomes_failure(self, tmp_path):
        lib = write_project(tmp_path, "MyLib", {})
        solution_path = write_solution(tmp_path, "App", [lib, tmp_path / "Gone" / "Gone.csproj"])

        solution = Workspace().open_solution(solution_path)

        assert [p.name for p in solution.projects] == ["MyLib"]
        assert len(solution.failures) == 1
        assert solution.failures[0].path.endswith("Gone.csproj")


# ===========================================================================
# Compilations
# ===========================================================================


class TestGetCompilation:
    def test_binds_documents(self, tmp_path):
        lib = write_project(tmp_path, "MyLib", {"Ext.cs": STRING_EXTENSIONS})
        solution = Workspace().open_solution(write_solution(tmp_path, "App", [lib]))
        project = solution.projects[0]

        compilation = project.get_compilation()

        assert compilation.document_count == 1
        assert compilation.identity.name == "MyLib"
        assert [c.display_text for c in discover_containers(compilation.assembly)] == ["MyLib.StringExtensions"]
        assert project.get_compilation() is compilation

    def test_byte_order_mark_is_ignored(self, tmp_path):
        lib = write_project(tmp_path, "MyLib", {})
        (lib.parent / "Ext.cs").write_bytes(b"\xef\xbb\xbf" + STRING_EXTENSIONS.encode("utf-8"))
        solution = Workspace().open_solution(write_solution(tmp_path, "App", [lib]))

        compilation = solution.projects[0].get_compilation()
        assert len(discover_containers(compilation.assembly)) == 1

    def test_non_csharp_project_has_no_compilation(self):
        project = Project(
            name="Lib",
            file_path="/src/Lib/Lib.fsproj",
            output_file_path="/src/Lib/bin/Debug/net8.0/Lib.dll",
            language="F#",
            identity=AssemblyIdentity("Lib"),
        )
        assert project.get_compilation() is None

    def test_unreadable_document(self, tmp_path):
        project = Project(
            name="Lib",
            file_path=str(tmp_path / "Lib.csproj"),
            output_file_path=str(tmp_path / "bin" / "Lib.dll"),
            language="C#",
            identity=AssemblyIdentity("Lib"),
            documents=[str(tmp_path / "Missing.cs")],
        )
        with pytest.raises(CompilationError):
            project.get_compilation()
