"""Discover extension containers in an assembly's namespace tree."""

from __future__ import annotations

from extdump.symbols import AssemblySymbol, NamespaceSymbol, SymbolVisitor

from .containers import ExtensionContainerRecord, classify_type


class _ExtensionContainerCollector(SymbolVisitor):
    """Pre-order walk over namespaces.

    Types are tested but never entered: nested types cannot declare
    extension methods, so only namespace members are candidates.
    """

    def __init__(self) -> None:
        self.containers: list[ExtensionContainerRecord] = []

    def visit_assembly(self, symbol):
        symbol.global_namespace.accept(self)

    def visit_namespace(self, symbol):
        for member in symbol.get_members():
            member.accept(self)

    def visit_named_type(self, symbol):
        record = classify_type(symbol)
        if record is not None:
            self.containers.append(record)


def discover_containers(root: AssemblySymbol | NamespaceSymbol) -> list[ExtensionContainerRecord]:
    collector = _ExtensionContainerCollector()
    root.accept(collector)
    return collector.containers
