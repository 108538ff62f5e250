"""Symbol graph model shared by the front-end and the classifiers."""

from .factory import TypeFactory
from .model import (
    Accessibility,
    ArrayTypeSymbol,
    AssemblyIdentity,
    AssemblySymbol,
    DynamicTypeSymbol,
    ErrorTypeSymbol,
    EventSymbol,
    FieldSymbol,
    FunctionPointerTypeSymbol,
    MethodKind,
    MethodSymbol,
    NamedTypeSymbol,
    NamespaceSymbol,
    ParameterSymbol,
    PointerTypeSymbol,
    PropertySymbol,
    RefKind,
    Symbol,
    TypeKind,
    TypeParameterSymbol,
    TypeSymbol,
)
from .visitor import SymbolVisitor

__all__ = [
    "Accessibility",
    "ArrayTypeSymbol",
    "AssemblyIdentity",
    "AssemblySymbol",
    "DynamicTypeSymbol",
    "ErrorTypeSymbol",
    "EventSymbol",
    "FieldSymbol",
    "FunctionPointerTypeSymbol",
    "MethodKind",
    "MethodSymbol",
    "NamedTypeSymbol",
    "NamespaceSymbol",
    "ParameterSymbol",
    "PointerTypeSymbol",
    "PropertySymbol",
    "RefKind",
    "Symbol",
    "SymbolVisitor",
    "TypeFactory",
    "TypeKind",
    "TypeParameterSymbol",
    "TypeSymbol",
]
