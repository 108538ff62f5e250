"""Tests for report aggregation, ordering and rendering."""

from __future__ import annotations

import io
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from conftest import add_extension, make_assembly, make_container, read_report

from extdump.analysis import ProjectUnit, discover_containers
from extdump.output.reports import (
    METHOD_REPORT_HEADERS,
    METHOD_REPORT_NAME,
    TYPE_REPORT_HEADERS,
    TYPE_REPORT_NAME,
    ReportAggregator,
)
from extdump.symbols import Accessibility, AssemblyIdentity, NamedTypeSymbol, TypeKind

ASSEMBLY = '"MyLib, Version=1.0.0.0, Culture=neutral, PublicKeyToken=null"'


def _unit(name, target_framework="net8.0"):
    return ProjectUnit(f"/src/{name}/{name}.csproj", name, target_framework)


def _point_assembly(library):
    """One public container, two extension methods: generic over int, plain over a struct."""
    assembly = make_assembly()
    namespace = assembly.global_namespace.get_or_add_namespace("MyLib")
    point = namespace.add_type(NamedTypeSymbol("Point", namespace, TypeKind.STRUCT, Accessibility.PUBLIC))
    container = make_container(assembly, "PointExtensions")
    add_extension(container, "Move", point)
    add_extension(
        container,
        "Bump",
        library.special_type("int"),
        type_parameters=["T"],
        parameters=[("value", lambda t: t)],
    )
    return assembly


def _render(aggregator):
    type_stream, method_stream = io.StringIO(), io.StringIO()
    counts = aggregator.render(type_stream, method_stream)
    return counts, type_stream.getvalue().splitlines(), method_stream.getvalue().splitlines()


# ===========================================================================
# Rendering
# ===========================================================================


class TestRender:
    def test_headers_only_when_empty(self):
        counts, type_lines, method_lines = _render(ReportAggregator())
        assert counts == (0, 0)
        assert type_lines == [",".join(TYPE_REPORT_HEADERS)]
        assert method_lines == [",".join(METHOD_REPORT_HEADERS)]

    def test_header_text(self):
        assert ",".join(TYPE_REPORT_HEADERS) == (
            "Assembly,TargetFramework,Type,IsPublic,ExtensionMethodCount,"
            "ContainsNonExtensionMembers,AllExtensionsHaveSameThisParameterType"
        )
        assert ",".join(METHOD_REPORT_HEADERS) == (
            "Assembly,TargetFramework,Type,Method,IsPublic,IsGeneric,ReducedFormParameterCount,"
            "ThisParameterType,ThisParameterUsesTypeParameter,ThisParameterIsErrorType,"
            "ThisParameterIsGenericType,ThisParameterIsValueType,ThisParameterIsRefKind"
        )

    def test_one_container_two_methods(self, library):
        assembly = _point_assembly(library)
        aggregator = ReportAggregator()
        aggregator.add(_unit("MyLib"), assembly.identity, discover_containers(assembly))

        counts, type_lines, method_lines = _render(aggregator)

        assert counts == (1, 2)
        assert type_lines[1:] == [f"{ASSEMBLY},net8.0,MyLib.PointExtensions,True,2,False,False"]
        assert method_lines[1:] == [
            f'{ASSEMBLY},net8.0,MyLib.PointExtensions,"void Bump<T>(this int source, T value)",'
            "True,True,1,int,False,False,False,True,None",
            f'{ASSEMBLY},net8.0,MyLib.PointExtensions,"void Move(this MyLib.Point source)",'
            "True,False,0,MyLib.Point,False,False,False,True,None",
        ]

    def test_type_rows_and_method_rows_agree_with_render(self, library):
        assembly = _point_assembly(library)
        aggregator = ReportAggregator()
        aggregator.add(_unit("MyLib"), assembly.identity, discover_containers(assembly))

        type_rows = aggregator.type_rows()
        method_rows = aggregator.method_rows()
        assert len(type_rows) == 1
        assert type_rows[0].extension_method_count == len(method_rows) == 2
        assert all(row.type == type_rows[0].type for row in method_rows)

    def test_empty_label_written_as_empty_cell(self, library):
        assembly = _point_assembly(library)
        aggregator = ReportAggregator()
        aggregator.add(_unit("MyLib", ""), assembly.identity, discover_containers(assembly))

        _, type_lines, _ = _render(aggregator)
        assert type_lines[1].startswith(f"{ASSEMBLY},,MyLib.PointExtensions,")


# ===========================================================================
# Ordering
# ===========================================================================


class TestOrdering:
    def test_containers_sorted_by_display_text(self, library):
        assembly = make_assembly()
        for namespace, name in (("B", "Foo"), ("A", "Bar")):
            container = make_container(assembly, name, namespace=namespace)
            add_extension(container, "Ext", library.special_type("int"))

        aggregator = ReportAggregator()
        aggregator.add(_unit("MyLib"), assembly.identity, discover_containers(assembly))

        assert [row.type for row in aggregator.type_rows()] == ["A.Bar", "B.Foo"]

    def test_sorting_is_ordinal(self, library):
        assembly = make_assembly()
        for name in ("alpha", "Beta"):
            container = make_container(assembly, name, namespace="")
            add_extension(container, "Ext", library.special_type("int"))

        aggregator = ReportAggregator()
        aggregator.add(_unit("MyLib"), assembly.identity, discover_containers(assembly))

        assert [row.type for row in aggregator.type_rows()] == ["Beta", "alpha"]

    def test_units_sorted_by_name(self, library):
        aggregator = ReportAggregator()
        for name in ("Zed", "Alpha"):
            assembly = make_assembly(name)
            container = make_container(assembly, "Extensions", namespace=name)
            add_extension(container, "Ext", library.special_type("int"))
            aggregator.add(_unit(name), assembly.identity, discover_containers(assembly))

        assert [row.type for row in aggregator.type_rows()] == ["Alpha.Extensions", "Zed.Extensions"]
        assert [r.unit.name for r in aggregator.results] == ["Zed", "Alpha"]

    def test_same_name_units_keep_processing_order(self, library):
        aggregator = ReportAggregator()
        for label in ("net9.0", "net8.0"):
            assembly = make_assembly()
            container = make_container(assembly, "Extensions")
            add_extension(container, "Ext", library.special_type("int"))
            aggregator.add(_unit("MyLib", label), assembly.identity, discover_containers(assembly))

        assert [row.target_framework for row in aggregator.type_rows()] == ["net9.0", "net8.0"]

    def test_methods_sorted_by_display_text(self, library):
        assembly = make_assembly()
        container = make_container(assembly, "Extensions")
        add_extension(container, "Zap", library.special_type("int"))
        add_extension(container, "Apply", library.special_type("int"))

        aggregator = ReportAggregator()
        aggregator.add(_unit("MyLib"), assembly.identity, discover_containers(assembly))

        assert [row.method for row in aggregator.method_rows()] == [
            "void Apply(this int source)",
            "void Zap(this int source)",
        ]


# ===========================================================================
# Writing
# ===========================================================================


class TestWrite:
    def test_writes_both_files(self, tmp_path, library):
        assembly = _point_assembly(library)
        aggregator = ReportAggregator()
        aggregator.add(_unit("MyLib"), AssemblyIdentity("MyLib", "2.1.0.0"), discover_containers(assembly))

        type_path, method_path = aggregator.write(tmp_path)

        assert type_path == tmp_path / TYPE_REPORT_NAME
        assert method_path == tmp_path / METHOD_REPORT_NAME
        type_lines = read_report(type_path)
        assert len(type_lines) == 2
        assert type_lines[1].startswith('"MyLib, Version=2.1.0.0, Culture=neutral, PublicKeyToken=null",')
        assert len(read_report(method_path)) == 3

    def test_lines_end_with_lf(self, tmp_path):
        type_path, _ = ReportAggregator().write(tmp_path)
        assert type_path.read_bytes().endswith(b"Type\n")

    def test_overwrites_existing_reports(self, tmp_path):
        (tmp_path / TYPE_REPORT_NAME).write_text("stale\nstale\nstale\n")
        type_path, _ = ReportAggregator().write(tmp_path)
        assert read_report(type_path) == [",".join(TYPE_REPORT_HEADERS)]
