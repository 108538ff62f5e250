"""Interning for derived type symbols.

Arrays, pointers, function pointers and error types are created on demand
while binding.  The factory hands back the same object for the same shape so
that identity comparison stays meaningful across a compilation.
"""

from __future__ import annotations

from .model import (
    ArrayTypeSymbol,
    DynamicTypeSymbol,
    ErrorTypeSymbol,
    FunctionPointerTypeSymbol,
    PointerTypeSymbol,
    TypeSymbol,
)


class TypeFactory:
    def __init__(self) -> None:
        self._arrays: dict[tuple[TypeSymbol, int], ArrayTypeSymbol] = {}
        self._pointers: dict[TypeSymbol, PointerTypeSymbol] = {}
        self._function_pointers: dict[str, FunctionPointerTypeSymbol] = {}
        self._errors: dict[tuple, ErrorTypeSymbol] = {}
        self.dynamic = DynamicTypeSymbol()

    def array_of(self, element_type: TypeSymbol, rank: int = 1) -> ArrayTypeSymbol:
        key = (element_type, rank)
        array = self._arrays.get(key)
        if array is None:
            array = self._arrays[key] = ArrayTypeSymbol(element_type, rank)
        return array

    def pointer_to(self, pointed_at_type: TypeSymbol) -> PointerTypeSymbol:
        pointer = self._pointers.get(pointed_at_type)
        if pointer is None:
            pointer = self._pointers[pointed_at_type] = PointerTypeSymbol(pointed_at_type)
        return pointer

    def function_pointer(self, signature: str) -> FunctionPointerTypeSymbol:
        signature = " ".join(signature.split())
        pointer = self._function_pointers.get(signature)
        if pointer is None:
            pointer = self._function_pointers[signature] = FunctionPointerTypeSymbol(signature)
        return pointer

    def error_type(self, name: str, type_arguments=(), containing_type=None) -> ErrorTypeSymbol:
        """Unbound *name*, optionally nested in another unbound type."""
        args = tuple(type_arguments)
        key = (containing_type, name, args)
        error = self._errors.get(key)
        if error is None:
            error = self._errors[key] = ErrorTypeSymbol(name, args, containing_type)
        return error
