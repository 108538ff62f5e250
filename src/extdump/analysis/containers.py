"""Container-level classification: which types hold extension methods."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from extdump.symbols import Accessibility, MethodSymbol, NamedTypeSymbol, Symbol, TypeSymbol

from .methods import ExtensionMethodRecord, classify_method


def is_qualifying_extension_method(member: Symbol) -> bool:
    """An extension method the classifier can describe.

    A declaration the front-end flags as an extension but which has no
    parameters has no receiver, so it does not qualify.
    """
    return (
        isinstance(member, MethodSymbol)
        and member.is_extension_method
        and len(member.parameters) > 0
    )


def get_extension_methods(type_symbol: NamedTypeSymbol) -> list[MethodSymbol]:
    return [m for m in type_symbol.get_members() if is_qualifying_extension_method(m)]


def contains_extension_methods(type_symbol: NamedTypeSymbol) -> bool:
    if not type_symbol.might_contain_extension_methods:
        return False
    return any(is_qualifying_extension_method(m) for m in type_symbol.get_members())


def contains_non_extension_members(type_symbol: NamedTypeSymbol) -> bool:
    # Shape only: accessibility plays no part, a private field counts.
    return any(not is_qualifying_extension_method(m) for m in type_symbol.get_members())


def _distinct_by_identity(types) -> tuple[TypeSymbol, ...]:
    seen: dict[int, TypeSymbol] = {}
    for t in types:
        seen.setdefault(id(t), t)
    return tuple(seen.values())


@dataclass(frozen=True)
class ExtensionContainerRecord:
    """A type holding at least one extension method.

    The method list and receiver-type set are computed on first access and
    kept for the life of the record.
    """

    symbol: NamedTypeSymbol

    @property
    def is_public(self) -> bool:
        return self.symbol.declared_accessibility is Accessibility.PUBLIC

    @cached_property
    def extension_methods(self) -> tuple[ExtensionMethodRecord, ...]:
        return tuple(classify_method(m) for m in get_extension_methods(self.symbol))

    @cached_property
    def has_non_extension_members(self) -> bool:
        return contains_non_extension_members(self.symbol)

    @cached_property
    def receiver_types(self) -> tuple[TypeSymbol, ...]:
        return _distinct_by_identity(m.receiver_type for m in self.extension_methods)

    @property
    def all_methods_share_receiver_type(self) -> bool:
        return len(self.receiver_types) == 1

    @cached_property
    def display_text(self) -> str:
        return self.symbol.to_display_string()

    def __str__(self) -> str:
        return self.display_text


def classify_type(type_symbol: NamedTypeSymbol) -> ExtensionContainerRecord | None:
    if not contains_extension_methods(type_symbol):
        return None
    return ExtensionContainerRecord(type_symbol)
