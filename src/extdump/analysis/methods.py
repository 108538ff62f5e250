"""Per-method classification of extension methods."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from extdump.symbols import (
    Accessibility,
    ArrayTypeSymbol,
    MethodSymbol,
    NamedTypeSymbol,
    ParameterSymbol,
    PointerTypeSymbol,
    RefKind,
    TypeKind,
    TypeParameterSymbol,
    TypeSymbol,
)


class UnhandledTypeKindError(RuntimeError):
    """The receiver walk met a type shape it has no rule for.

    This is a defect in the classifier, not bad input: the assembly being
    classified must not produce report rows.
    """

    def __init__(self, type_symbol: TypeSymbol, method: MethodSymbol | None = None):
        where = f" in {method.to_display_string()}" if method is not None else ""
        super().__init__(
            f"Unhandled type kind {type_symbol.type_kind.value} "
            f"({type_symbol.to_display_string()}){where}"
        )
        self.type_symbol = type_symbol
        self.method = method


def uses_method_type_parameter(type_symbol: TypeSymbol, method: MethodSymbol) -> bool:
    """Does *type_symbol* mention one of *method*'s own type parameters?

    Walks generic type arguments, array elements and pointer targets.  A type
    parameter only counts when it is literally one the method declares, so
    ``this List<T> source`` inside a generic class is False when ``T``
    belongs to the class.
    """
    if isinstance(type_symbol, NamedTypeSymbol):
        if type_symbol.is_generic_type:
            for argument in type_symbol.type_arguments:
                if uses_method_type_parameter(argument, method):
                    return True
        return False
    if isinstance(type_symbol, TypeParameterSymbol):
        return any(tp is type_symbol for tp in method.type_parameters)
    if isinstance(type_symbol, ArrayTypeSymbol):
        return uses_method_type_parameter(type_symbol.element_type, method)
    if isinstance(type_symbol, PointerTypeSymbol):
        return uses_method_type_parameter(type_symbol.pointed_at_type, method)
    raise UnhandledTypeKindError(type_symbol, method)


@dataclass(frozen=True)
class ExtensionMethodRecord:
    symbol: MethodSymbol
    receiver_parameter: ParameterSymbol
    is_public: bool
    is_generic: bool
    reduced_parameter_count: int
    receiver_uses_method_type_parameter: bool
    receiver_is_error_type: bool
    receiver_is_generic_type: bool
    receiver_is_value_type: bool
    receiver_passing_mode: RefKind

    @property
    def receiver_type(self) -> TypeSymbol:
        return self.receiver_parameter.type

    @cached_property
    def receiver_display_text(self) -> str:
        return self.receiver_parameter.type_display_string()

    @cached_property
    def display_text(self) -> str:
        return self.symbol.to_display_string()

    def __str__(self) -> str:
        return self.display_text


def classify_method(method: MethodSymbol) -> ExtensionMethodRecord:
    """Compute every report attribute of one extension method.

    Raises ``ValueError`` for a method without parameters and
    ``UnhandledTypeKindError`` when the receiver's type cannot be walked.
    """
    if not method.parameters:
        raise ValueError(f"{method.to_display_string()} has no receiver parameter")

    receiver = method.parameters[0]
    receiver_type = receiver.type
    container = method.containing_symbol

    return ExtensionMethodRecord(
        symbol=method,
        receiver_parameter=receiver,
        is_public=(
            method.declared_accessibility is Accessibility.PUBLIC
            and container is not None
            and container.declared_accessibility is Accessibility.PUBLIC
        ),
        is_generic=method.is_generic_method,
        reduced_parameter_count=len(method.parameters) - 1,
        receiver_uses_method_type_parameter=uses_method_type_parameter(receiver_type, method),
        receiver_is_error_type=receiver_type.type_kind is TypeKind.ERROR,
        receiver_is_generic_type=isinstance(receiver_type, NamedTypeSymbol) and receiver_type.is_generic_type,
        receiver_is_value_type=receiver_type.is_value_type,
        receiver_passing_mode=receiver.ref_kind,
    )
