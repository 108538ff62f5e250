"""Shared test fixtures and helpers for extdump tests.

Provides:
- CliRunner fixture: cli_runner
- Symbol builders: make_assembly(), make_container(), add_extension()
- Solution writers: write_project(), write_solution(), and the
  solution_factory fixture for custom solution layouts
- CSV helpers: read_report()
"""

from __future__ import annotations

import logging
import uuid

import pytest
from click.testing import CliRunner

from extdump.frontend import MetadataLibrary
from extdump.symbols import (
    Accessibility,
    AssemblyIdentity,
    AssemblySymbol,
    MethodSymbol,
    NamedTypeSymbol,
    ParameterSymbol,
    RefKind,
    TypeKind,
    TypeParameterSymbol,
)

CSHARP_PROJECT_TYPE = "FAE04EC0-301F-11D3-BF4B-00C04F79EFBC"

# ===========================================================================
# CliRunner helpers
# ===========================================================================


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner for in-process CLI testing."""
    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        # Click 8.2+ removed mix_stderr; stderr is always captured separately.
        return CliRunner()


@pytest.fixture
def restore_extdump_logger():
    """Undo the handler/propagation changes the CLI makes to the package logger."""
    logger = logging.getLogger("extdump")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


# ===========================================================================
# Symbol builders
# ===========================================================================


@pytest.fixture(scope="session")
def library():
    """Framework types: special types (int, string, ...) and generic BCL types."""
    return MetadataLibrary()


def make_assembly(name="MyLib", version="1.0.0.0"):
    return AssemblySymbol(AssemblyIdentity(name, version))


def make_container(
    assembly,
    name,
    namespace="MyLib",
    *,
    access=Accessibility.PUBLIC,
    is_static=True,
    kind=TypeKind.CLASS,
    type_parameters=(),
):
    """Declare a top-level type in *namespace* of *assembly*."""
    ns = assembly.global_namespace.get_or_add_namespace(namespace)
    symbol = NamedTypeSymbol(name, ns, kind, access, is_static=is_static)
    for tp_name in type_parameters:
        symbol.add_type_parameter(TypeParameterSymbol(tp_name))
    ns.add_type(symbol)
    return symbol


def add_extension(
    container,
    name,
    receiver,
    *,
    access=Accessibility.PUBLIC,
    ref_kind=RefKind.NONE,
    type_parameters=(),
    parameters=(),
    return_type=None,
    receiver_name="source",
):
    """Add an extension method to *container* and return it.

    *receiver* is either a type symbol or a callable taking the method's
    type parameters and returning the receiver type, for receivers that
    mention them.  *parameters* are extra ``(name, type)`` pairs.
    """
    method = MethodSymbol(
        name, access, return_type=return_type, is_static=True, is_extension_method=True,
    )
    tps = [method.add_type_parameter(TypeParameterSymbol(tp_name)) for tp_name in type_parameters]
    if callable(receiver):
        receiver = receiver(*tps)
    method.add_parameter(ParameterSymbol(receiver_name, receiver, ref_kind, is_this=True))
    for param_name, param_type in parameters:
        if callable(param_type):
            param_type = param_type(*tps)
        method.add_parameter(ParameterSymbol(param_name, param_type))
    container.add_member(method)
    return method


# ===========================================================================
# Solution writers
# ===========================================================================


SDK_PROJECT = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <{tfm_property}>{tfm}</{tfm_property}>
{extra}  </PropertyGroup>
{items}</Project>
"""


def write_project(directory, name, sources, *, tfm="net8.0", extra_properties=None, references=()):
    """Write ``<directory>/<name>/<name>.csproj`` plus its C# sources.

    *sources* maps a relative file name to its text.  A ``;`` in *tfm*
    makes the project multi-targeted.  Returns the project path.
    """
    project_dir = directory / name
    project_dir.mkdir(parents=True, exist_ok=True)
    for relative, text in sources.items():
        path = project_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    extra = "".join(
        f"    <{key}>{value}</{key}>\n" for key, value in (extra_properties or {}).items()
    )
    items = ""
    if references:
        items = "  <ItemGroup>\n" + "".join(
            f'    <ProjectReference Include="{ref}" />\n' for ref in references
        ) + "  </ItemGroup>\n"

    project_path = project_dir / f"{name}.csproj"
    project_path.write_text(
        SDK_PROJECT.format(
            tfm_property="TargetFrameworks" if ";" in tfm else "TargetFramework",
            tfm=tfm,
            extra=extra,
            items=items,
        ),
        encoding="utf-8",
    )
    return project_path


def write_solution(directory, name, project_paths):
    """Write a classic ``.sln`` listing *project_paths* relative to *directory*."""
    lines = [
        "",
        "Microsoft Visual Studio Solution File, Format Version 12.00",
        "# Visual Studio Version 17",
    ]
    for project_path in project_paths:
        relative = str(project_path.relative_to(directory)).replace("/", "\\")
        guid = str(uuid.uuid4()).upper()
        lines.append(
            f'Project("{{{CSHARP_PROJECT_TYPE}}}") = "{project_path.stem}", "{relative}", "{{{guid}}}"'
        )
        lines.append("EndProject")
    lines.append("Global")
    lines.append("EndGlobal")
    path = directory / f"{name}.sln"
    path.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return path


@pytest.fixture
def solution_factory(tmp_path):
    """Build a search directory holding one solution with the given projects.

    Usage::

        root = solution_factory({"MyLib": {"Ext.cs": "..."}})
        root = solution_factory({"MyLib": {...}}, tfm="net8.0;net9.0")
    """

    def _create(projects, *, solution="App", tfm="net8.0", extra_properties=None):
        root = tmp_path / "src"
        root.mkdir(exist_ok=True)
        paths = [
            write_project(root, name, sources, tfm=tfm, extra_properties=extra_properties)
            for name, sources in projects.items()
        ]
        write_solution(root, solution, paths)
        return root

    return _create


# ===========================================================================
# Report helpers
# ===========================================================================


def read_report(path):
    """Return the report's lines without the trailing newline."""
    return path.read_text(encoding="utf-8").splitlines()


STRING_EXTENSIONS = """\
using System;

namespace MyLib;

public static class StringExtensions
{
    public static int WordCount(this string text) => text.Split(' ').Length;
}
"""
