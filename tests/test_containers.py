"""Tests for container classification and namespace discovery."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from conftest import add_extension, make_assembly, make_container

from extdump.analysis import (
    classify_type,
    contains_extension_methods,
    contains_non_extension_members,
    discover_containers,
)
from extdump.symbols import (
    Accessibility,
    FieldSymbol,
    MethodSymbol,
    NamedTypeSymbol,
    ParameterSymbol,
    TypeKind,
)

# ===========================================================================
# Container predicates
# ===========================================================================


class TestContainerPredicates:
    def test_type_without_extensions_is_not_a_container(self, library):
        assembly = make_assembly()
        helpers = make_container(assembly, "Helpers")
        method = MethodSymbol("Twice", Accessibility.PUBLIC, is_static=True)
        method.add_parameter(ParameterSymbol("x", library.special_type("int")))
        helpers.add_member(method)

        assert contains_extension_methods(helpers) is False
        assert classify_type(helpers) is None

    def test_might_contain_flag_short_circuits(self, library):
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "Twice", library.special_type("int"))
        container.might_contain_extension_methods = False
        assert contains_extension_methods(container) is False

    def test_parameterless_extension_flag_does_not_qualify(self):
        container = make_container(make_assembly(), "Extensions")
        container.add_member(
            MethodSymbol("Broken", Accessibility.PUBLIC, is_static=True, is_extension_method=True)
        )
        assert contains_extension_methods(container) is False

    def test_private_field_counts_as_non_extension_member(self, library):
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "Twice", library.special_type("int"))
        assert contains_non_extension_members(container) is False

        container.add_member(
            FieldSymbol("_cache", library.special_type("string"), Accessibility.PRIVATE, is_static=True)
        )
        assert contains_non_extension_members(container) is True

    def test_helper_method_counts_as_non_extension_member(self, library):
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "Twice", library.special_type("int"))
        helper = MethodSymbol("Check", Accessibility.PRIVATE, is_static=True)
        helper.add_parameter(ParameterSymbol("x", library.special_type("int")))
        container.add_member(helper)

        record = classify_type(container)
        assert record.has_non_extension_members is True
        assert len(record.extension_methods) == 1


# ===========================================================================
# Container records
# ===========================================================================


class TestContainerRecord:
    def test_display_text_is_fully_qualified(self, library):
        container = make_container(make_assembly(), "StringExtensions", namespace="MyLib.Text")
        add_extension(container, "Shout", library.special_type("string"))
        record = classify_type(container)

        assert record.display_text == "MyLib.Text.StringExtensions"
        assert str(record) == "MyLib.Text.StringExtensions"

    def test_is_public_reads_declared_accessibility(self, library):
        container = make_container(make_assembly(), "Extensions", access=Accessibility.INTERNAL)
        add_extension(container, "Twice", library.special_type("int"))
        assert classify_type(container).is_public is False

    def test_extension_methods_in_declaration_order(self, library):
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "Zeta", library.special_type("int"))
        add_extension(container, "Alpha", library.special_type("int"))
        names = [m.symbol.name for m in classify_type(container).extension_methods]
        assert names == ["Zeta", "Alpha"]

    def test_same_receiver_type(self, library):
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "Twice", library.special_type("int"))
        add_extension(container, "Half", library.special_type("int"))
        record = classify_type(container)

        assert len(record.receiver_types) == 1
        assert record.all_methods_share_receiver_type is True

    def test_different_receiver_types(self, library):
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "Twice", library.special_type("int"))
        add_extension(container, "Shout", library.special_type("string"))
        assert classify_type(container).all_methods_share_receiver_type is False

    def test_receivers_compare_by_identity_not_text(self, library):
        """Two generic methods each extending their own ``T`` have two receiver types."""
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "First", lambda t: t, type_parameters=["T"])
        add_extension(container, "Last", lambda t: t, type_parameters=["T"])
        record = classify_type(container)

        texts = {m.receiver_display_text for m in record.extension_methods}
        assert texts == {"T"}
        assert len(record.receiver_types) == 2
        assert record.all_methods_share_receiver_type is False

    def test_records_are_memoized(self, library):
        container = make_container(make_assembly(), "Extensions")
        add_extension(container, "Twice", library.special_type("int"))
        record = classify_type(container)
        assert record.extension_methods is record.extension_methods
        assert record.receiver_types is record.receiver_types


# ===========================================================================
# Namespace walk
# ===========================================================================


class TestDiscoverContainers:
    def test_walks_nested_namespaces_in_order(self, library):
        assembly = make_assembly()
        first = make_container(assembly, "A", namespace="MyLib")
        second = make_container(assembly, "B", namespace="MyLib.Inner.Deep")
        third = make_container(assembly, "C", namespace="Other")
        for container in (first, second, third):
            add_extension(container, "Ext", library.special_type("int"))

        found = [record.display_text for record in discover_containers(assembly)]
        assert found == ["MyLib.A", "MyLib.Inner.Deep.B", "Other.C"]

    def test_global_namespace_types(self, library):
        assembly = make_assembly()
        container = make_container(assembly, "GlobalExtensions", namespace="")
        add_extension(container, "Ext", library.special_type("int"))

        found = discover_containers(assembly)
        assert [r.display_text for r in found] == ["GlobalExtensions"]

    def test_nested_types_are_never_entered(self, library):
        assembly = make_assembly()
        outer = make_container(assembly, "Outer", is_static=False)
        nested = NamedTypeSymbol("Inner", None, TypeKind.CLASS, Accessibility.PUBLIC, is_static=True)
        outer.add_member(nested)
        add_extension(nested, "Ext", library.special_type("int"))

        assert discover_containers(assembly) == []

    def test_types_without_extensions_are_skipped(self, library):
        assembly = make_assembly()
        make_container(assembly, "Empty")
        container = make_container(assembly, "Extensions")
        add_extension(container, "Ext", library.special_type("int"))

        found = discover_containers(assembly)
        assert [r.symbol for r in found] == [container]

    def test_starts_from_a_namespace(self, library):
        assembly = make_assembly()
        make_container(assembly, "A", namespace="Left")
        right = make_container(assembly, "B", namespace="Right")
        add_extension(right, "Ext", library.special_type("int"))

        namespace = assembly.global_namespace.lookup_namespace("Right")
        assert [r.display_text for r in discover_containers(namespace)] == ["Right.B"]
