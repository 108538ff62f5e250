"""Aggregate per-unit results and render the two extension reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Iterator, Sequence, TextIO

from extdump.analysis import ExtensionContainerRecord, ProjectUnit
from extdump.symbols import AssemblyIdentity, RefKind

from .csv_writer import write_row

log = logging.getLogger(__name__)

TYPE_REPORT_NAME = "Report-extension-types.csv"
METHOD_REPORT_NAME = "Report-extension-methods.csv"

TYPE_REPORT_HEADERS = (
    "Assembly",
    "TargetFramework",
    "Type",
    "IsPublic",
    "ExtensionMethodCount",
    "ContainsNonExtensionMembers",
    "AllExtensionsHaveSameThisParameterType",
)

METHOD_REPORT_HEADERS = (
    "Assembly",
    "TargetFramework",
    "Type",
    "Method",
    "IsPublic",
    "IsGeneric",
    "ReducedFormParameterCount",
    "ThisParameterType",
    "ThisParameterUsesTypeParameter",
    "ThisParameterIsErrorType",
    "ThisParameterIsGenericType",
    "ThisParameterIsValueType",
    "ThisParameterIsRefKind",
)


@dataclass(frozen=True)
class UnitResult:
    unit: ProjectUnit
    assembly: AssemblyIdentity
    containers: Sequence[ExtensionContainerRecord]


@dataclass(frozen=True)
class TypeReportRow:
    assembly: str
    target_framework: str
    type: str
    is_public: bool
    extension_method_count: int
    contains_non_extension_members: bool
    all_extensions_have_same_this_parameter_type: bool


@dataclass(frozen=True)
class MethodReportRow:
    assembly: str
    target_framework: str
    type: str
    method: str
    is_public: bool
    is_generic: bool
    reduced_form_parameter_count: int
    this_parameter_type: str
    this_parameter_uses_type_parameter: bool
    this_parameter_is_error_type: bool
    this_parameter_is_generic_type: bool
    this_parameter_is_value_type: bool
    this_parameter_ref_kind: RefKind


def _cells(row) -> tuple:
    return tuple(getattr(row, f.name) for f in fields(row))


class ReportAggregator:
    """Collects unit results in processing order and renders them sorted.

    Units sort by logical project name, containers by display text within a
    unit, and methods by display text within a container.  All comparisons
    are ordinal and stable.
    """

    def __init__(self) -> None:
        self._results: list[UnitResult] = []

    def add(self, unit: ProjectUnit, assembly: AssemblyIdentity, containers) -> UnitResult:
        result = UnitResult(unit, assembly, tuple(containers))
        self._results.append(result)
        return result

    def __len__(self) -> int:
        return len(self._results)

    @property
    def results(self) -> list[UnitResult]:
        return list(self._results)

    def sorted_results(self) -> list[UnitResult]:
        return sorted(self._results, key=lambda r: r.unit.name)

    def iter_rows(self) -> Iterator[tuple[TypeReportRow, list[MethodReportRow]]]:
        """One sorted traversal feeding both tables."""
        for result in self.sorted_results():
            assembly_display = result.assembly.display_name
            target_framework = result.unit.target_framework

            for container in sorted(result.containers, key=lambda c: c.display_text):
                type_row = TypeReportRow(
                    assembly=assembly_display,
                    target_framework=target_framework,
                    type=container.display_text,
                    is_public=container.is_public,
                    extension_method_count=len(container.extension_methods),
                    contains_non_extension_members=container.has_non_extension_members,
                    all_extensions_have_same_this_parameter_type=container.all_methods_share_receiver_type,
                )
                method_rows = [
                    MethodReportRow(
                        assembly=assembly_display,
                        target_framework=target_framework,
                        type=container.display_text,
                        method=method.display_text,
                        is_public=method.is_public,
                        is_generic=method.is_generic,
                        reduced_form_parameter_count=method.reduced_parameter_count,
                        this_parameter_type=method.receiver_display_text,
                        this_parameter_uses_type_parameter=method.receiver_uses_method_type_parameter,
                        this_parameter_is_error_type=method.receiver_is_error_type,
                        this_parameter_is_generic_type=method.receiver_is_generic_type,
                        this_parameter_is_value_type=method.receiver_is_value_type,
                        this_parameter_ref_kind=method.receiver_passing_mode,
                    )
                    for method in sorted(container.extension_methods, key=lambda m: m.display_text)
                ]
                yield type_row, method_rows

    def type_rows(self) -> list[TypeReportRow]:
        return [type_row for type_row, _ in self.iter_rows()]

    def method_rows(self) -> list[MethodReportRow]:
        return [row for _, method_rows in self.iter_rows() for row in method_rows]

    def render(self, type_stream: TextIO, method_stream: TextIO) -> tuple[int, int]:
        """Write headers and rows; returns (type rows, method rows) written."""
        write_row(type_stream, *TYPE_REPORT_HEADERS)
        write_row(method_stream, *METHOD_REPORT_HEADERS)

        type_count = method_count = 0
        for type_row, method_rows in self.iter_rows():
            write_row(type_stream, *_cells(type_row))
            type_count += 1
            for method_row in method_rows:
                write_row(method_stream, *_cells(method_row))
                method_count += 1
        return type_count, method_count

    def write(self, directory: str | Path) -> tuple[Path, Path]:
        directory = Path(directory)
        type_path = directory / TYPE_REPORT_NAME
        method_path = directory / METHOD_REPORT_NAME

        with open(type_path, "w", encoding="utf-8", newline="") as type_stream, \
                open(method_path, "w", encoding="utf-8", newline="") as method_stream:
            type_count, method_count = self.render(type_stream, method_stream)

        log.info("Wrote %d type row(s) to %s", type_count, type_path)
        log.info("Wrote %d method row(s) to %s", method_count, method_path)
        return type_path, method_path
