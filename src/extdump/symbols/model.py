"""Read-only symbol model for one C# compilation.

The shapes mirror the compiler's own symbol API closely enough that the
classifiers in ``extdump.analysis`` can be written against them directly:
namespaces hold types, types hold members, methods hold parameters, and
every type expression is one of a small, closed set of type symbols.

Symbol identity is object identity.  Constructed generic types are interned
on their definition (see ``NamedTypeSymbol.construct``) and the remaining
derived types are interned by ``extdump.symbols.factory.TypeFactory``, so two
references to the same instantiation are the same object even when two
different instantiations happen to render the same text.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from .visitor import SymbolVisitor


class Accessibility(enum.Enum):
    NOT_APPLICABLE = "NotApplicable"
    PRIVATE = "Private"
    PROTECTED_AND_INTERNAL = "ProtectedAndInternal"
    PROTECTED = "Protected"
    INTERNAL = "Internal"
    PROTECTED_OR_INTERNAL = "ProtectedOrInternal"
    PUBLIC = "Public"

    def __str__(self) -> str:
        return self.value


class RefKind(enum.Enum):
    """How a parameter is passed."""

    NONE = "None"
    REF = "Ref"
    OUT = "Out"
    IN = "In"
    REF_READONLY_PARAMETER = "RefReadOnlyParameter"

    def __str__(self) -> str:
        return self.value


class TypeKind(enum.Enum):
    CLASS = "Class"
    STRUCT = "Struct"
    INTERFACE = "Interface"
    ENUM = "Enum"
    DELEGATE = "Delegate"
    ERROR = "Error"
    TYPE_PARAMETER = "TypeParameter"
    ARRAY = "Array"
    POINTER = "Pointer"
    DYNAMIC = "Dynamic"
    FUNCTION_POINTER = "FunctionPointer"


class MethodKind(enum.Enum):
    ORDINARY = "Ordinary"
    CONSTRUCTOR = "Constructor"
    STATIC_CONSTRUCTOR = "StaticConstructor"
    DESTRUCTOR = "Destructor"
    OPERATOR = "UserDefinedOperator"
    CONVERSION = "Conversion"


_REF_KIND_KEYWORDS = {
    RefKind.REF: "ref",
    RefKind.OUT: "out",
    RefKind.IN: "in",
    RefKind.REF_READONLY_PARAMETER: "ref readonly",
}


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------


class Symbol:
    """Common base: a name, a containing symbol and a declared accessibility."""

    def __init__(
        self,
        name: str,
        containing_symbol: Symbol | None = None,
        declared_accessibility: Accessibility = Accessibility.NOT_APPLICABLE,
    ):
        self.name = name
        self.containing_symbol = containing_symbol
        self.declared_accessibility = declared_accessibility

    def accept(self, visitor: SymbolVisitor):
        return visitor.default_visit(self)

    def to_display_string(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.to_display_string()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.to_display_string()}>"


class TypeSymbol(Symbol):
    """Any symbol that can appear as a type expression."""

    type_kind: TypeKind = TypeKind.ERROR

    @property
    def is_value_type(self) -> bool:
        return False


# ---------------------------------------------------------------------------
# Namespaces and assemblies
# ---------------------------------------------------------------------------


class NamespaceSymbol(Symbol):
    def __init__(self, name: str = "", containing_symbol: NamespaceSymbol | None = None):
        super().__init__(name, containing_symbol)
        self._namespaces: dict[str, NamespaceSymbol] = {}
        self._types: dict[tuple[str, int], NamedTypeSymbol] = {}
        self._members: list[Symbol] = []

    @property
    def is_global_namespace(self) -> bool:
        return self.containing_symbol is None

    @property
    def qualified_name(self) -> str:
        if self.is_global_namespace:
            return ""
        parent = self.containing_symbol.qualified_name
        return f"{parent}.{self.name}" if parent else self.name

    def get_members(self) -> list[Symbol]:
        """Nested namespaces and top-level types, in declaration order."""
        return list(self._members)

    def get_namespace_members(self) -> list[NamespaceSymbol]:
        return list(self._namespaces.values())

    def get_type_members(self) -> list[NamedTypeSymbol]:
        return list(self._types.values())

    def get_or_add_namespace(self, dotted_name: str) -> NamespaceSymbol:
        current = self
        for part in dotted_name.split("."):
            part = part.strip()
            if not part:
                continue
            child = current._namespaces.get(part)
            if child is None:
                child = NamespaceSymbol(part, current)
                current._namespaces[part] = child
                current._members.append(child)
            current = child
        return current

    def lookup_namespace(self, dotted_name: str) -> NamespaceSymbol | None:
        current = self
        for part in dotted_name.split("."):
            if not part:
                continue
            current = current._namespaces.get(part)
            if current is None:
                return None
        return current

    def add_type(self, type_symbol: NamedTypeSymbol) -> NamedTypeSymbol:
        self._types[(type_symbol.name, type_symbol.arity)] = type_symbol
        self._members.append(type_symbol)
        return type_symbol

    def get_type(self, name: str, arity: int = 0) -> NamedTypeSymbol | None:
        return self._types.get((name, arity))

    def iter_namespaces(self) -> Iterator[NamespaceSymbol]:
        """Yield this namespace and every nested namespace, pre-order."""
        yield self
        for child in self._namespaces.values():
            yield from child.iter_namespaces()

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_namespace(self)

    def to_display_string(self) -> str:
        return self.qualified_name or "<global namespace>"


@dataclass(frozen=True)
class AssemblyIdentity:
    name: str
    version: str = "1.0.0.0"
    culture: str = "neutral"
    public_key_token: str | None = None

    @property
    def display_name(self) -> str:
        token = self.public_key_token or "null"
        return f"{self.name}, Version={self.version}, Culture={self.culture}, PublicKeyToken={token}"

    def __str__(self) -> str:
        return self.display_name


class AssemblySymbol(Symbol):
    def __init__(self, identity: AssemblyIdentity, global_namespace: NamespaceSymbol | None = None):
        super().__init__(identity.name)
        self.identity = identity
        self.global_namespace = global_namespace or NamespaceSymbol()

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_assembly(self)

    def to_display_string(self) -> str:
        return self.identity.display_name


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class NamedTypeSymbol(TypeSymbol):
    """A class, struct, interface, enum or delegate, bound or constructed.

    A definition carries its own type parameters as its type arguments.
    ``construct`` returns the interned instantiation for a given argument
    tuple and containing type; constructed types share the definition's
    members.  A nested type reached through ``Outer<int>`` keeps that
    constructed outer type as its ``containing_type``.
    """

    def __init__(
        self,
        name: str,
        containing_symbol: Symbol | None = None,
        type_kind: TypeKind = TypeKind.CLASS,
        declared_accessibility: Accessibility = Accessibility.INTERNAL,
        *,
        is_static: bool = False,
        is_abstract: bool = False,
        special_keyword: str | None = None,
    ):
        super().__init__(name, containing_symbol, declared_accessibility)
        self.type_kind = type_kind
        self.is_static = is_static
        self.is_abstract = is_abstract
        self.special_keyword = special_keyword
        self.type_parameters: list[TypeParameterSymbol] = []
        self._type_arguments: tuple[TypeSymbol, ...] | None = None
        self.original_definition: NamedTypeSymbol = self
        self.might_contain_extension_methods = True
        self._members: list[Symbol] = []
        self._containing_type: NamedTypeSymbol | None = None
        self._constructed: dict[tuple, NamedTypeSymbol] = {}

    @property
    def arity(self) -> int:
        return len(self.original_definition.type_parameters)

    @property
    def type_arguments(self) -> tuple[TypeSymbol, ...]:
        if self._type_arguments is None:
            return tuple(self.type_parameters)
        return self._type_arguments

    @property
    def containing_type(self) -> NamedTypeSymbol | None:
        if self._containing_type is not None:
            return self._containing_type
        container = self.original_definition.containing_symbol
        return container if isinstance(container, NamedTypeSymbol) else None

    @property
    def is_generic_type(self) -> bool:
        """True when this type or a containing type has type arguments."""
        if self.type_arguments:
            return True
        containing_type = self.containing_type
        return containing_type is not None and containing_type.is_generic_type

    @property
    def is_definition(self) -> bool:
        return self.original_definition is self

    @property
    def is_value_type(self) -> bool:
        return self.type_kind in (TypeKind.STRUCT, TypeKind.ENUM)

    @property
    def is_top_level(self) -> bool:
        return isinstance(self.containing_symbol, NamespaceSymbol)

    @property
    def metadata_name(self) -> str:
        """Dotted name of the definition without type arguments."""
        container = self.original_definition.containing_symbol
        if isinstance(container, NamespaceSymbol):
            prefix = container.qualified_name
        elif isinstance(container, NamedTypeSymbol):
            prefix = container.metadata_name
        else:
            prefix = ""
        return f"{prefix}.{self.name}" if prefix else self.name

    def add_type_parameter(self, type_parameter: TypeParameterSymbol) -> TypeParameterSymbol:
        type_parameter.ordinal = len(self.type_parameters)
        type_parameter.containing_symbol = self
        self.type_parameters.append(type_parameter)
        return type_parameter

    def add_member(self, member: Symbol) -> Symbol:
        member.containing_symbol = self
        self.original_definition._members.append(member)
        return member

    def get_members(self, name: str | None = None) -> list[Symbol]:
        members = self.original_definition._members
        if name is None:
            return list(members)
        return [m for m in members if m.name == name]

    def get_type_members(self, name: str | None = None, arity: int | None = None) -> list[NamedTypeSymbol]:
        return [
            m for m in self.original_definition._members
            if isinstance(m, NamedTypeSymbol)
            and (name is None or m.name == name)
            and (arity is None or m.arity == arity)
        ]

    def construct(self, type_arguments, containing_type: NamedTypeSymbol | None = None) -> NamedTypeSymbol:
        """Instantiate the definition with *type_arguments*.

        *containing_type* defaults to this type's own containing type; pass a
        constructed outer type to reach ``Outer<int>.Inner``.
        """
        definition = self.original_definition
        args = tuple(type_arguments)
        if len(args) != definition.arity:
            raise ValueError(
                f"{definition.metadata_name} takes {definition.arity} type argument(s), got {len(args)}"
            )
        if containing_type is None:
            containing_type = self._containing_type
        if containing_type is definition.containing_type:
            containing_type = None
        if containing_type is None and args == tuple(definition.type_parameters):
            return definition
        key = (containing_type, args)
        constructed = definition._constructed.get(key)
        if constructed is None:
            constructed = _ConstructedNamedTypeSymbol(definition, args, containing_type)
            definition._constructed[key] = constructed
        return constructed

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_named_type(self)

    def to_display_string(self) -> str:
        if self.special_keyword:
            return self.special_keyword
        args = self.type_arguments
        metadata_name = self.metadata_name
        if metadata_name == "System.Nullable" and args:
            return f"{args[0].to_display_string()}?"
        if metadata_name == "System.ValueTuple" and len(args) > 1:
            return "(" + ", ".join(a.to_display_string() for a in args) + ")"
        container = self.containing_type or self.original_definition.containing_symbol
        if isinstance(container, NamedTypeSymbol):
            prefix = container.to_display_string() + "."
        elif isinstance(container, NamespaceSymbol) and container.qualified_name:
            prefix = container.qualified_name + "."
        else:
            prefix = ""
        text = prefix + self.name
        if args:
            text += "<" + ", ".join(a.to_display_string() for a in args) + ">"
        return text


class _ConstructedNamedTypeSymbol(NamedTypeSymbol):
    def __init__(
        self,
        definition: NamedTypeSymbol,
        type_arguments: tuple[TypeSymbol, ...],
        containing_type: NamedTypeSymbol | None = None,
    ):
        super().__init__(
            definition.name,
            definition.containing_symbol,
            definition.type_kind,
            definition.declared_accessibility,
            is_static=definition.is_static,
            is_abstract=definition.is_abstract,
            special_keyword=definition.special_keyword,
        )
        self.original_definition = definition
        self._type_arguments = type_arguments
        self._containing_type = containing_type
        self.might_contain_extension_methods = False


class ErrorTypeSymbol(NamedTypeSymbol):
    """A type reference that could not be bound; displays the name as written."""

    def __init__(
        self,
        name: str,
        type_arguments: tuple[TypeSymbol, ...] = (),
        containing_type: NamedTypeSymbol | None = None,
    ):
        super().__init__(name, None, TypeKind.ERROR, Accessibility.NOT_APPLICABLE)
        self._type_arguments = tuple(type_arguments)
        self._containing_type = containing_type
        self.might_contain_extension_methods = False

    @property
    def arity(self) -> int:
        return len(self._type_arguments)

    @property
    def is_value_type(self) -> bool:
        return False

    @property
    def metadata_name(self) -> str:
        return self.name

    def construct(self, type_arguments, containing_type=None) -> NamedTypeSymbol:
        raise TypeError(f"Cannot construct unbound type {self.name}")

    def to_display_string(self) -> str:
        text = self.name
        if self._containing_type is not None:
            text = f"{self._containing_type.to_display_string()}.{text}"
        if self._type_arguments:
            text += "<" + ", ".join(a.to_display_string() for a in self._type_arguments) + ">"
        return text


class TypeParameterSymbol(TypeSymbol):
    """A generic placeholder declared by a type or a method.

    ``constraints`` holds keyword constraints (``"class"``, ``"struct"``,
    ``"new()"``, ...) as strings and type constraints as type symbols.
    """

    type_kind = TypeKind.TYPE_PARAMETER

    def __init__(self, name: str, variance: str | None = None):
        super().__init__(name)
        self.variance = variance
        self.ordinal = 0
        self.constraints: list[str | TypeSymbol] = []

    @property
    def declaring_method(self) -> MethodSymbol | None:
        return self.containing_symbol if isinstance(self.containing_symbol, MethodSymbol) else None

    @property
    def is_value_type(self) -> bool:
        return any(c in ("struct", "unmanaged") for c in self.constraints if isinstance(c, str))

    def constraint_clause(self) -> str:
        if not self.constraints:
            return ""
        parts = [c if isinstance(c, str) else c.to_display_string() for c in self.constraints]
        return f"where {self.name} : {', '.join(parts)}"

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_type_parameter(self)


class ArrayTypeSymbol(TypeSymbol):
    type_kind = TypeKind.ARRAY

    def __init__(self, element_type: TypeSymbol, rank: int = 1):
        super().__init__("Array")
        self.element_type = element_type
        self.rank = rank

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_array_type(self)

    def to_display_string(self) -> str:
        return f"{self.element_type.to_display_string()}[{',' * (self.rank - 1)}]"


class PointerTypeSymbol(TypeSymbol):
    type_kind = TypeKind.POINTER

    def __init__(self, pointed_at_type: TypeSymbol):
        super().__init__("Pointer")
        self.pointed_at_type = pointed_at_type

    @property
    def is_value_type(self) -> bool:
        return True

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_pointer_type(self)

    def to_display_string(self) -> str:
        return f"{self.pointed_at_type.to_display_string()}*"


class DynamicTypeSymbol(TypeSymbol):
    type_kind = TypeKind.DYNAMIC

    def __init__(self):
        super().__init__("dynamic")

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_dynamic_type(self)


class FunctionPointerTypeSymbol(TypeSymbol):
    type_kind = TypeKind.FUNCTION_POINTER

    def __init__(self, signature: str):
        super().__init__(signature)

    @property
    def is_value_type(self) -> bool:
        return True

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_function_pointer_type(self)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


class ParameterSymbol(Symbol):
    def __init__(
        self,
        name: str,
        type: TypeSymbol,
        ref_kind: RefKind = RefKind.NONE,
        *,
        is_this: bool = False,
        is_params: bool = False,
        default_value: str | None = None,
        nullable_annotated: bool = False,
    ):
        super().__init__(name)
        self.type = type
        self.ref_kind = ref_kind
        self.is_this = is_this
        self.is_params = is_params
        self.default_value = default_value
        self.nullable_annotated = nullable_annotated
        self.ordinal = 0

    @property
    def is_optional(self) -> bool:
        return self.default_value is not None

    def type_display_string(self) -> str:
        text = self.type.to_display_string()
        if self.nullable_annotated and not text.endswith("?"):
            text += "?"
        return text

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_parameter(self)

    def to_display_string(self) -> str:
        words = []
        if self.is_this:
            words.append("this")
        if self.is_params:
            words.append("params")
        keyword = _REF_KIND_KEYWORDS.get(self.ref_kind)
        if keyword:
            words.append(keyword)
        words.append(self.type_display_string())
        if self.name:
            words.append(self.name)
        text = " ".join(words)
        if self.default_value is not None:
            text = f"[{text} = {self.default_value}]"
        return text


class MethodSymbol(Symbol):
    """A method, constructor, operator or destructor.

    ``is_extension_method`` is set by whoever builds the graph; it is the
    front-end's own verdict and is not re-derived here.
    """

    def __init__(
        self,
        name: str,
        declared_accessibility: Accessibility = Accessibility.PRIVATE,
        *,
        return_type: TypeSymbol | None = None,
        method_kind: MethodKind = MethodKind.ORDINARY,
        is_static: bool = False,
        is_extension_method: bool = False,
        is_implicitly_declared: bool = False,
        returns_by_ref: str | None = None,
    ):
        super().__init__(name, None, declared_accessibility)
        self.return_type = return_type
        self.method_kind = method_kind
        self.is_static = is_static
        self.is_extension_method = is_extension_method
        self.is_implicitly_declared = is_implicitly_declared
        self.returns_by_ref = returns_by_ref
        self.return_nullable_annotated = False
        self.type_parameters: list[TypeParameterSymbol] = []
        self.parameters: list[ParameterSymbol] = []

    @property
    def containing_type(self) -> NamedTypeSymbol | None:
        return self.containing_symbol if isinstance(self.containing_symbol, NamedTypeSymbol) else None

    @property
    def is_generic_method(self) -> bool:
        return len(self.type_parameters) > 0

    def add_type_parameter(self, type_parameter: TypeParameterSymbol) -> TypeParameterSymbol:
        type_parameter.ordinal = len(self.type_parameters)
        type_parameter.containing_symbol = self
        self.type_parameters.append(type_parameter)
        return type_parameter

    def add_parameter(self, parameter: ParameterSymbol) -> ParameterSymbol:
        parameter.ordinal = len(self.parameters)
        parameter.containing_symbol = self
        self.parameters.append(parameter)
        return parameter

    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_method(self)

    def to_display_string(self) -> str:
        params = ", ".join(p.to_display_string() for p in self.parameters)
        if self.method_kind in (MethodKind.CONSTRUCTOR, MethodKind.STATIC_CONSTRUCTOR):
            owner = self.containing_type
            owner_name = owner.name if owner is not None else self.name
            return f"{owner_name}({params})"
        returns = self.return_type.to_display_string() if self.return_type is not None else "void"
        if self.return_nullable_annotated and not returns.endswith("?"):
            returns += "?"
        if self.returns_by_ref:
            returns = f"{self.returns_by_ref} {returns}"
        name = self.name
        if self.type_parameters:
            name += "<" + ", ".join(tp.name for tp in self.type_parameters) + ">"
        text = f"{returns} {name}({params})"
        clauses = [tp.constraint_clause() for tp in self.type_parameters]
        clauses = [c for c in clauses if c]
        if clauses:
            text += " " + " ".join(clauses)
        return text


class _ValueMemberSymbol(Symbol):
    def __init__(
        self,
        name: str,
        type: TypeSymbol | None,
        declared_accessibility: Accessibility = Accessibility.PRIVATE,
        *,
        is_static: bool = False,
    ):
        super().__init__(name, None, declared_accessibility)
        self.type = type
        self.is_static = is_static

    def to_display_string(self) -> str:
        type_text = self.type.to_display_string() if self.type is not None else "?"
        return f"{type_text} {self.name}"


class FieldSymbol(_ValueMemberSymbol):
    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_field(self)


class PropertySymbol(_ValueMemberSymbol):
    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_property(self)


class EventSymbol(_ValueMemberSymbol):
    def accept(self, visitor: SymbolVisitor):
        return visitor.visit_event(self)
