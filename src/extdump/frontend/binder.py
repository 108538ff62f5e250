"""Bind C# declarations parsed by tree-sitter into the symbol model.

Binding runs in two passes over every document of a project:

1. *declare*: namespaces and named types (including nested and partial
   ones) are entered into the assembly's namespace tree, and using
   directives are attached to the scope they were written in;
2. *bind*: members are created for each type declaration and every type
   written in a signature is resolved against the declared types, the
   scope's usings and the well-known framework types.

Only declarations are bound.  Method bodies, attributes and initializer
expressions are never looked at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from extdump.symbols import (
    Accessibility,
    AssemblyIdentity,
    AssemblySymbol,
    ErrorTypeSymbol,
    EventSymbol,
    FieldSymbol,
    MethodKind,
    MethodSymbol,
    NamedTypeSymbol,
    ParameterSymbol,
    PropertySymbol,
    RefKind,
    TypeFactory,
    TypeKind,
    TypeParameterSymbol,
    TypeSymbol,
)

from .library import IMPLICIT_USINGS, MetadataLibrary
from .parser import node_text, parse_source

log = logging.getLogger(__name__)

TYPE_DECLARATIONS = {
    "class_declaration": TypeKind.CLASS,
    "struct_declaration": TypeKind.STRUCT,
    "interface_declaration": TypeKind.INTERFACE,
    "enum_declaration": TypeKind.ENUM,
    "record_declaration": TypeKind.CLASS,
    "record_struct_declaration": TypeKind.STRUCT,
    "delegate_declaration": TypeKind.DELEGATE,
}

MODIFIER_KEYWORDS = frozenset({
    "public", "private", "protected", "internal", "static", "abstract",
    "sealed", "partial", "readonly", "unsafe", "file", "virtual", "override",
    "extern", "new", "async", "const", "volatile", "required",
})

PARAMETER_KEYWORDS = frozenset({"this", "ref", "out", "in", "params", "readonly", "scoped"})

CONSTRAINT_KEYWORDS = frozenset({"class", "class?", "struct", "unmanaged", "notnull", "new()", "default"})

_OPERATOR_NAMES = {
    "+": "op_Addition",
    "-": "op_Subtraction",
    "*": "op_Multiply",
    "/": "op_Division",
    "%": "op_Modulus",
    "&": "op_BitwiseAnd",
    "|": "op_BitwiseOr",
    "^": "op_ExclusiveOr",
    "<<": "op_LeftShift",
    ">>": "op_RightShift",
    ">>>": "op_UnsignedRightShift",
    "==": "op_Equality",
    "!=": "op_Inequality",
    "<": "op_LessThan",
    ">": "op_GreaterThan",
    "<=": "op_LessThanOrEqual",
    ">=": "op_GreaterThanOrEqual",
    "!": "op_LogicalNot",
    "~": "op_OnesComplement",
    "++": "op_Increment",
    "--": "op_Decrement",
    "true": "op_True",
    "false": "op_False",
}

_UNARY_OPERATOR_NAMES = {
    "+": "op_UnaryPlus",
    "-": "op_UnaryNegation",
}


# ---------------------------------------------------------------------------
# Syntax helpers
# ---------------------------------------------------------------------------


def _compact(text: str) -> str:
    return "".join(text.split())


def _written(names: list[str]) -> str:
    return ".".join(names).replace("::.", "::")


def _modifiers(node, source: bytes) -> set[str]:
    mods = set()
    for child in node.children:
        if child.type == "modifier":
            mods.update(node_text(child, source).split())
        elif not child.is_named and child.type in MODIFIER_KEYWORDS:
            mods.add(child.type)
    return mods


def _accessibility(mods: set[str], default: Accessibility) -> Accessibility:
    if {"private", "protected"} <= mods:
        return Accessibility.PROTECTED_AND_INTERNAL
    if {"protected", "internal"} <= mods:
        return Accessibility.PROTECTED_OR_INTERNAL
    if "private" in mods:
        return Accessibility.PRIVATE
    if "protected" in mods:
        return Accessibility.PROTECTED
    if "internal" in mods:
        return Accessibility.INTERNAL
    if "public" in mods:
        return Accessibility.PUBLIC
    return default


def _has_explicit_accessibility(mods: set[str]) -> bool:
    return bool(mods & {"public", "private", "protected", "internal"})


def _default_member_accessibility(container: NamedTypeSymbol) -> Accessibility:
    if container.type_kind in (TypeKind.INTERFACE, TypeKind.ENUM):
        return Accessibility.PUBLIC
    return Accessibility.PRIVATE


def _child_of_type(node, *types):
    for child in node.children:
        if child.type in types:
            return child
    return None


def _name_node(node):
    name = node.child_by_field_name("name")
    if name is not None:
        return name
    return _child_of_type(node, "identifier")


def _type_parameter_nodes(node) -> list:
    type_parameter_list = node.child_by_field_name("type_parameters") or _child_of_type(node, "type_parameter_list")
    if type_parameter_list is None:
        return []
    return [c for c in type_parameter_list.children if c.type == "type_parameter"]


def _declare_type_parameter(node, source: bytes) -> TypeParameterSymbol:
    name = node_text(_name_node(node), source)
    variance = None
    for child in node.children:
        if child.type in ("in", "out"):
            variance = child.type
        elif child.type == "variance_modifier":
            variance = node_text(child, source)
    return TypeParameterSymbol(name, variance)


def _namespace_name(node, source: bytes) -> str:
    name = node.child_by_field_name("name")
    if name is None:
        name = _child_of_type(node, "qualified_name", "identifier")
    return _compact(node_text(name, source))


def _parameter_nodes(node) -> list:
    parameter_list = node.child_by_field_name("parameters") or _child_of_type(node, "parameter_list")
    if parameter_list is None:
        return []
    parameters = []
    loose = None
    for child in parameter_list.children:
        if child.type in ("parameter", "parameter_array"):
            parameters.append(child)
        elif child.type == "params" and not child.is_named:
            # Newer grammars leave ``params <type> <name>`` unwrapped.
            loose = _LooseParameter([child])
            parameters.append(loose)
        elif child.type in (",", ")"):
            loose = None
        elif loose is not None:
            loose.children.append(child)
    return parameters


class _LooseParameter:
    """Stands in for a ``parameter_array`` node over unwrapped siblings."""

    type = "parameter_array"

    def __init__(self, children):
        self.children = children

    @property
    def named_children(self):
        return [c for c in self.children if c.is_named]

    def child_by_field_name(self, name):
        return None


def _type_field(node):
    return node.child_by_field_name("type") or node.child_by_field_name("returns")


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


@dataclass
class _Scope:
    """Using directives in effect at one namespace level of one file."""

    namespace: str
    parent: _Scope | None = None
    usings: list[str] = field(default_factory=list)
    aliases: dict[str, tuple] = field(default_factory=dict)

    @property
    def is_compilation_unit(self) -> bool:
        return self.parent is None

    def chain(self):
        scope = self
        while scope is not None:
            yield scope
            scope = scope.parent


@dataclass
class _TypeDeclaration:
    symbol: NamedTypeSymbol
    node: object
    source: bytes
    scope: _Scope
    enclosing: tuple[NamedTypeSymbol, ...]


@dataclass(frozen=True)
class _Context:
    scope: _Scope
    source: bytes
    enclosing: tuple[NamedTypeSymbol, ...] = ()
    method: MethodSymbol | None = None
    use_aliases: bool = True


# ---------------------------------------------------------------------------
# Binder
# ---------------------------------------------------------------------------


class Binder:
    """Builds one ``AssemblySymbol`` from any number of C# documents."""

    def __init__(
        self,
        identity: AssemblyIdentity,
        *,
        implicit_usings: bool = False,
        library: MetadataLibrary | None = None,
    ):
        self.assembly = AssemblySymbol(identity)
        self.library = library or MetadataLibrary()
        self.types = TypeFactory()
        self.implicit_usings = implicit_usings
        self._declarations: list[_TypeDeclaration] = []
        self._global_usings: list[str] = []
        self._global_aliases: dict[str, tuple] = {}
        self._bound = False

    # -- pass 1 -------------------------------------------------------------

    def add_document(self, tree, source: bytes, path: str = "<source>") -> None:
        if self._bound:
            raise RuntimeError("Cannot add documents after binding")
        scope = _Scope("")
        self._declare_children(tree.root_node, source, scope, ())
        log.debug("Declared %s", path)

    def _declare_children(self, node, source, scope, enclosing):
        for child in node.children:
            if child.type == "using_directive":
                self._declare_using(child, source, scope)
            elif child.type == "namespace_declaration":
                inner = self._enter_namespace(child, source, scope)
                body = child.child_by_field_name("body") or _child_of_type(child, "declaration_list")
                if body is not None:
                    self._declare_children(body, source, inner, enclosing)
            elif child.type == "file_scoped_namespace_declaration":
                # Later siblings belong to the namespace too; some grammar
                # releases nest them under the declaration instead.
                scope = self._enter_namespace(child, source, scope)
                self._declare_children(child, source, scope, enclosing)
            elif child.type in TYPE_DECLARATIONS:
                self._declare_type(child, source, scope, enclosing)
            elif child.type == "declaration_list" and node.type == "file_scoped_namespace_declaration":
                self._declare_children(child, source, scope, enclosing)

    def _enter_namespace(self, node, source, scope: _Scope) -> _Scope:
        name = _namespace_name(node, source)
        for part in name.split("."):
            qualified = f"{scope.namespace}.{part}" if scope.namespace else part
            scope = _Scope(qualified, scope)
        self.assembly.global_namespace.get_or_add_namespace(scope.namespace)
        return scope

    def _declare_using(self, node, source, scope: _Scope) -> None:
        is_global = any(c.type == "global" for c in node.children)
        if any(c.type == "static" for c in node.children):
            return

        alias = None
        name_equals = _child_of_type(node, "name_equals")
        if name_equals is not None:
            alias = node_text(_child_of_type(name_equals, "identifier"), source)
        elif any(c.type == "=" for c in node.children):
            alias = node_text(node.child_by_field_name("alias") or _child_of_type(node, "identifier"), source)

        named = [c for c in node.named_children if c.type not in ("name_equals", "comment")]
        if not named:
            return
        target = named[-1]

        if alias:
            entry = (target, source, scope)
            if is_global:
                self._global_aliases[alias] = entry
            else:
                scope.aliases[alias] = entry
            return

        namespace = _compact(node_text(target, source))
        if namespace.startswith("global::"):
            namespace = namespace[len("global::"):]
        if is_global:
            self._global_usings.append(namespace)
        else:
            scope.usings.append(namespace)

    def _declare_type(self, node, source, scope, enclosing) -> NamedTypeSymbol | None:
        name_node = _name_node(node)
        if name_node is None:
            return None
        name = node_text(name_node, source)
        kind = TYPE_DECLARATIONS[node.type]
        if node.type == "record_declaration" and _child_of_type(node, "struct") is not None:
            kind = TypeKind.STRUCT

        mods = _modifiers(node, source)
        type_parameter_nodes = _type_parameter_nodes(node)
        arity = len(type_parameter_nodes)

        if enclosing:
            container = enclosing[0]
            default_access = _default_member_accessibility(container)
            existing = container.get_type_members(name, arity)
            symbol = existing[0] if existing else None
        else:
            container = self.assembly.global_namespace.get_or_add_namespace(scope.namespace)
            default_access = Accessibility.INTERNAL
            symbol = container.get_type(name, arity)

        if symbol is None:
            symbol = NamedTypeSymbol(
                name,
                container,
                kind,
                _accessibility(mods, default_access),
                is_static="static" in mods,
                is_abstract="abstract" in mods,
            )
            for tp_node in type_parameter_nodes:
                symbol.add_type_parameter(_declare_type_parameter(tp_node, source))
            if enclosing:
                container.add_member(symbol)
            else:
                container.add_type(symbol)
        else:
            # Another part of a partial type.
            if _has_explicit_accessibility(mods):
                symbol.declared_accessibility = _accessibility(mods, default_access)
            symbol.is_static = symbol.is_static or "static" in mods
            symbol.is_abstract = symbol.is_abstract or "abstract" in mods

        self._declarations.append(_TypeDeclaration(symbol, node, source, scope, enclosing))

        body = node.child_by_field_name("body") or _child_of_type(node, "declaration_list")
        if body is not None and kind is not TypeKind.ENUM:
            nested = (symbol,) + enclosing
            for child in body.children:
                if child.type in TYPE_DECLARATIONS:
                    self._declare_type(child, source, scope, nested)
        return symbol

    # -- pass 2 -------------------------------------------------------------

    def bind(self) -> AssemblySymbol:
        if self._bound:
            return self.assembly
        self._bound = True

        for declaration in self._declarations:
            self._bind_declaration(declaration)

        seen: set[int] = set()
        for declaration in self._declarations:
            symbol = declaration.symbol
            if id(symbol) in seen:
                continue
            seen.add(id(symbol))
            self._add_implicit_members(symbol)
            symbol.might_contain_extension_methods = _might_contain_extension_methods(symbol)

        log.debug(
            "Bound %s: %d type declaration(s)",
            self.assembly.identity.name, len(self._declarations),
        )
        return self.assembly

    def _bind_declaration(self, declaration: _TypeDeclaration) -> None:
        symbol, node, source = declaration.symbol, declaration.node, declaration.source
        ctx = _Context(declaration.scope, source, (symbol,) + declaration.enclosing)

        self._bind_constraints(node, ctx, symbol.type_parameters)

        if symbol.type_kind is TypeKind.DELEGATE:
            self._bind_delegate(node, ctx, symbol)
            return

        if symbol.type_kind is TypeKind.ENUM:
            body = node.child_by_field_name("body") or _child_of_type(node, "enum_member_declaration_list")
            if body is not None:
                for child in body.children:
                    if child.type == "enum_member_declaration":
                        member_name = _name_node(child)
                        if member_name is not None:
                            symbol.add_member(FieldSymbol(
                                node_text(member_name, source), symbol, Accessibility.PUBLIC, is_static=True,
                            ))
            return

        primary = _child_of_type(node, "parameter_list")
        if primary is not None:
            self._bind_primary_constructor(node, ctx, symbol)

        body = node.child_by_field_name("body") or _child_of_type(node, "declaration_list")
        if body is None:
            return
        for child in body.children:
            binder = self._MEMBER_BINDERS.get(child.type)
            if binder is not None:
                binder(self, child, ctx, symbol)

    # -- members ------------------------------------------------------------

    def _new_method(self, node, ctx, container, name, kind, mods) -> tuple[MethodSymbol, _Context]:
        default_access = _default_member_accessibility(container)
        if node.child_by_field_name("explicit_interface_specifier") or _child_of_type(node, "explicit_interface_specifier"):
            default_access = Accessibility.PRIVATE
        method = MethodSymbol(
            name,
            _accessibility(mods, default_access),
            method_kind=kind,
            is_static="static" in mods,
        )
        method.containing_symbol = container
        for tp_node in _type_parameter_nodes(node):
            method.add_type_parameter(_declare_type_parameter(tp_node, ctx.source))
        return method, replace(ctx, method=method)

    def _bind_method(self, node, ctx, container):
        name_node = _name_node(node)
        if name_node is None:
            return
        name = node_text(name_node, ctx.source)
        explicit = node.child_by_field_name("explicit_interface_specifier") or _child_of_type(node, "explicit_interface_specifier")
        if explicit is not None:
            name = _compact(node_text(explicit, ctx.source)).rstrip(".") + "." + name

        mods = _modifiers(node, ctx.source)
        method, mctx = self._new_method(node, ctx, container, name, MethodKind.ORDINARY, mods)
        # Constraints first: a struct-constrained T? binds to Nullable<T>.
        self._bind_constraints(node, mctx, method.type_parameters)
        self._bind_return_type(_type_field(node), mctx, method)
        self._bind_parameters(node, mctx, method)

        method.is_extension_method = (
            method.is_static
            and bool(method.parameters)
            and method.parameters[0].is_this
            and container.is_static
            and not container.is_generic_type
            and container.is_top_level
        )
        container.add_member(method)

    def _bind_constructor(self, node, ctx, container):
        mods = _modifiers(node, ctx.source)
        is_static = "static" in mods
        kind = MethodKind.STATIC_CONSTRUCTOR if is_static else MethodKind.CONSTRUCTOR
        method, mctx = self._new_method(node, ctx, container, ".cctor" if is_static else ".ctor", kind, mods)
        if is_static:
            method.declared_accessibility = Accessibility.PRIVATE
        self._bind_parameters(node, mctx, method)
        container.add_member(method)

    def _bind_destructor(self, node, ctx, container):
        method = MethodSymbol("Finalize", Accessibility.PROTECTED, method_kind=MethodKind.DESTRUCTOR)
        container.add_member(method)

    def _bind_operator(self, node, ctx, container):
        op_node = node.child_by_field_name("operator")
        op = _compact(node_text(op_node, ctx.source)) if op_node is not None else ""
        parameters = _parameter_nodes(node)
        if len(parameters) == 1 and op in _UNARY_OPERATOR_NAMES:
            name = _UNARY_OPERATOR_NAMES[op]
        else:
            name = _OPERATOR_NAMES.get(op, f"op_{op}")
        mods = _modifiers(node, ctx.source)
        method, mctx = self._new_method(node, ctx, container, name, MethodKind.OPERATOR, mods)
        self._bind_return_type(_type_field(node), mctx, method)
        self._bind_parameters(node, mctx, method)
        container.add_member(method)

    def _bind_conversion_operator(self, node, ctx, container):
        name = "op_Implicit" if _child_of_type(node, "implicit") is not None else "op_Explicit"
        mods = _modifiers(node, ctx.source)
        method, mctx = self._new_method(node, ctx, container, name, MethodKind.CONVERSION, mods)
        self._bind_return_type(_type_field(node), mctx, method)
        self._bind_parameters(node, mctx, method)
        container.add_member(method)

    def _bind_variables(self, node, ctx, container, member_type):
        declaration = _child_of_type(node, "variable_declaration")
        if declaration is None:
            return
        mods = _modifiers(node, ctx.source)
        access = _accessibility(mods, _default_member_accessibility(container))
        is_static = "static" in mods or "const" in mods
        type_symbol = self.bind_type(_type_field(declaration), ctx)
        for declarator in declaration.children:
            if declarator.type != "variable_declarator":
                continue
            name_node = _name_node(declarator)
            if name_node is not None:
                container.add_member(member_type(
                    node_text(name_node, ctx.source), type_symbol, access, is_static=is_static,
                ))

    def _bind_field(self, node, ctx, container):
        self._bind_variables(node, ctx, container, FieldSymbol)

    def _bind_event_field(self, node, ctx, container):
        self._bind_variables(node, ctx, container, EventSymbol)

    def _bind_value_member(self, node, ctx, container, member_type, name=None):
        if name is None:
            name_node = _name_node(node)
            if name_node is None:
                return
            name = node_text(name_node, ctx.source)
        mods = _modifiers(node, ctx.source)
        container.add_member(member_type(
            name,
            self.bind_type(_type_field(node), ctx),
            _accessibility(mods, _default_member_accessibility(container)),
            is_static="static" in mods,
        ))

    def _bind_property(self, node, ctx, container):
        self._bind_value_member(node, ctx, container, PropertySymbol)

    def _bind_event(self, node, ctx, container):
        self._bind_value_member(node, ctx, container, EventSymbol)

    def _bind_indexer(self, node, ctx, container):
        self._bind_value_member(node, ctx, container, PropertySymbol, name="this[]")

    _MEMBER_BINDERS = {
        "method_declaration": _bind_method,
        "constructor_declaration": _bind_constructor,
        "destructor_declaration": _bind_destructor,
        "operator_declaration": _bind_operator,
        "conversion_operator_declaration": _bind_conversion_operator,
        "field_declaration": _bind_field,
        "event_field_declaration": _bind_event_field,
        "property_declaration": _bind_property,
        "event_declaration": _bind_event,
        "indexer_declaration": _bind_indexer,
    }

    def _bind_primary_constructor(self, node, ctx, container):
        ctor = MethodSymbol(".ctor", Accessibility.PUBLIC, method_kind=MethodKind.CONSTRUCTOR)
        ctor.containing_symbol = container
        self._bind_parameters(node, ctx, ctor)
        container.add_member(ctor)
        if node.type in ("record_declaration", "record_struct_declaration"):
            for parameter in ctor.parameters:
                container.add_member(PropertySymbol(parameter.name, parameter.type, Accessibility.PUBLIC))

    def _bind_delegate(self, node, ctx, symbol):
        invoke = MethodSymbol("Invoke", Accessibility.PUBLIC)
        invoke.containing_symbol = symbol
        self._bind_return_type(_type_field(node), ctx, invoke)
        self._bind_parameters(node, ctx, invoke)
        symbol.add_member(invoke)

    def _add_implicit_members(self, symbol: NamedTypeSymbol) -> None:
        if symbol.type_kind is TypeKind.STRUCT:
            has_parameterless = any(
                isinstance(m, MethodSymbol)
                and m.method_kind is MethodKind.CONSTRUCTOR
                and not m.parameters
                for m in symbol.get_members()
            )
            if not has_parameterless:
                symbol.add_member(MethodSymbol(
                    ".ctor", Accessibility.PUBLIC,
                    method_kind=MethodKind.CONSTRUCTOR, is_implicitly_declared=True,
                ))
        elif symbol.type_kind is TypeKind.CLASS and not symbol.is_static:
            has_constructor = any(
                isinstance(m, MethodSymbol) and m.method_kind is MethodKind.CONSTRUCTOR
                for m in symbol.get_members()
            )
            if not has_constructor:
                access = Accessibility.PROTECTED if symbol.is_abstract else Accessibility.PUBLIC
                symbol.add_member(MethodSymbol(
                    ".ctor", access,
                    method_kind=MethodKind.CONSTRUCTOR, is_implicitly_declared=True,
                ))

    # -- signatures ---------------------------------------------------------

    def _bind_return_type(self, type_node, ctx, method: MethodSymbol) -> None:
        if type_node is not None and type_node.type == "ref_type":
            method.returns_by_ref = "ref readonly" if _child_of_type(type_node, "readonly") else "ref"
            type_node = type_node.child_by_field_name("type") or type_node.named_children[-1]
        method.return_type = self.bind_type(type_node, ctx)
        method.return_nullable_annotated = self._is_nullable_annotation(type_node, method.return_type)

    def _bind_parameters(self, node, ctx, method: MethodSymbol) -> None:
        for param_node in _parameter_nodes(node):
            method.add_parameter(self._bind_parameter(param_node, ctx))

    def _bind_parameter(self, node, ctx) -> ParameterSymbol:
        source = ctx.source
        keywords = set()
        default_value = None
        after_equals = False
        for child in node.children:
            if child.type in ("modifier", "parameter_modifier"):
                keywords.update(node_text(child, source).split())
            elif not child.is_named and child.type in PARAMETER_KEYWORDS:
                keywords.add(child.type)
            elif child.type == "equals_value_clause":
                value = child.named_children
                default_value = node_text(value[0], source) if value else ""
            elif child.type == "=":
                after_equals = True
            elif after_equals and child.is_named and default_value is None:
                default_value = node_text(child, source)

        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        if type_node is None or name_node is None:
            named = [c for c in node.named_children
                     if c.type not in ("attribute_list", "modifier", "parameter_modifier", "equals_value_clause")]
            if type_node is None and named:
                type_node = named[0]
            if name_node is None:
                identifiers = [c for c in named if c.type == "identifier" and c != type_node]
                name_node = identifiers[-1] if identifiers else None

        if "ref" in keywords and "readonly" in keywords:
            ref_kind = RefKind.REF_READONLY_PARAMETER
        elif "ref" in keywords:
            ref_kind = RefKind.REF
        elif "out" in keywords:
            ref_kind = RefKind.OUT
        elif "in" in keywords:
            ref_kind = RefKind.IN
        else:
            ref_kind = RefKind.NONE

        type_symbol = self.bind_type(type_node, ctx)
        return ParameterSymbol(
            node_text(name_node, source),
            type_symbol,
            ref_kind,
            is_this="this" in keywords,
            is_params="params" in keywords or node.type == "parameter_array",
            default_value=default_value,
            nullable_annotated=self._is_nullable_annotation(type_node, type_symbol),
        )

    def _is_nullable_annotation(self, type_node, type_symbol) -> bool:
        if type_node is None or type_node.type != "nullable_type":
            return False
        return not (
            isinstance(type_symbol, NamedTypeSymbol)
            and type_symbol.original_definition is self.library.nullable
        )

    def _bind_constraints(self, node, ctx, type_parameters) -> None:
        by_name = {tp.name: tp for tp in type_parameters}
        for clause in node.children:
            if clause.type != "type_parameter_constraints_clause":
                continue
            target_node = clause.child_by_field_name("target") or _child_of_type(clause, "identifier")
            target = by_name.get(node_text(target_node, ctx.source))
            if target is None or target.constraints:
                continue
            for constraint in clause.named_children:
                if constraint == target_node:
                    continue
                target.constraints.append(self._bind_constraint(constraint, ctx))

    def _bind_constraint(self, node, ctx):
        text = _compact(node_text(node, ctx.source))
        if text in CONSTRAINT_KEYWORDS or node.type == "constructor_constraint":
            return "new()" if text.startswith("new") else text
        while node.type in ("type_parameter_constraint", "type_constraint"):
            inner = node.child_by_field_name("type") or (node.named_children[0] if node.named_children else None)
            if inner is None:
                break
            node = inner
        return self.bind_type(node, ctx)

    # -- type resolution ----------------------------------------------------

    def bind_type(self, node, ctx: _Context) -> TypeSymbol:
        """Resolve the type expression *node* in *ctx*.

        Never fails: anything that cannot be resolved becomes an error type
        carrying the name as written.
        """
        if node is None:
            return self.library.special_type("void")
        kind = node.type
        source = ctx.source

        if kind == "predefined_type":
            keyword = node_text(node, source)
            if keyword == "dynamic":
                return self.types.dynamic
            return self.library.special_type(keyword) or self.types.error_type(keyword)
        if kind in ("identifier", "generic_name", "qualified_name", "alias_qualified_name"):
            return self._bind_name(node, ctx)
        if kind == "nullable_type":
            underlying = self.bind_type(node.child_by_field_name("type") or node.named_children[0], ctx)
            if underlying.is_value_type and not isinstance(underlying, ErrorTypeSymbol):
                if isinstance(underlying, NamedTypeSymbol) and underlying.original_definition is self.library.nullable:
                    return underlying
                return self.library.nullable.construct([underlying])
            return underlying
        if kind == "array_type":
            element = self.bind_type(node.child_by_field_name("type") or node.named_children[0], ctx)
            for rank_node in node.children:
                if rank_node.type == "array_rank_specifier":
                    element = self.types.array_of(element, node_text(rank_node, source).count(",") + 1)
            return element
        if kind == "pointer_type":
            return self.types.pointer_to(self.bind_type(node.child_by_field_name("type") or node.named_children[0], ctx))
        if kind == "function_pointer_type":
            return self.types.function_pointer(node_text(node, source))
        if kind == "tuple_type":
            elements = [
                self.bind_type(e.child_by_field_name("type") or e.named_children[0], ctx)
                for e in node.named_children if e.type == "tuple_element"
            ]
            tuple_definition = self.library.value_tuple(len(elements))
            if tuple_definition is None or len(elements) > 7:
                return self.types.error_type(_compact(node_text(node, source)))
            return tuple_definition.construct(elements)
        if kind in ("ref_type", "scoped_type"):
            inner = node.child_by_field_name("type") or node.named_children[-1]
            return self.bind_type(inner, ctx)
        if kind == "implicit_type":
            return self.types.error_type("var")

        log.debug("Unrecognised type syntax %s: %s", kind, node_text(node, source))
        return self.types.error_type(_compact(node_text(node, source)))

    def _name_parts(self, node, source) -> list[tuple[str, list]]:
        if node.type == "qualified_name":
            qualifier = node.child_by_field_name("qualifier")
            name = node.child_by_field_name("name")
            if qualifier is None or name is None:
                named = node.named_children
                qualifier, name = named[0], named[-1]
            return self._name_parts(qualifier, source) + self._name_parts(name, source)
        if node.type == "alias_qualified_name":
            alias = node.child_by_field_name("alias") or node.named_children[0]
            name = node.child_by_field_name("name") or node.named_children[-1]
            return [(node_text(alias, source) + "::", [])] + self._name_parts(name, source)
        if node.type == "generic_name":
            identifier = node.child_by_field_name("name") or _child_of_type(node, "identifier")
            arguments = _child_of_type(node, "type_argument_list")
            args = list(arguments.named_children) if arguments is not None else []
            return [(node_text(identifier, source), args)]
        return [(node_text(node, source), [])]

    def _bind_name(self, node, ctx: _Context) -> TypeSymbol:
        parts = self._name_parts(node, ctx.source)
        names = [name for name, _ in parts]
        arguments = [tuple(self.bind_type(a, ctx) for a in args) for _, args in parts]

        if len(parts) == 1:
            resolved = self._lookup_simple(names[0], len(arguments[0]), ctx)
            if isinstance(resolved, NamedTypeSymbol) and not isinstance(resolved, ErrorTypeSymbol) and arguments[0]:
                resolved = resolved.construct(arguments[0])
        else:
            resolved = self._lookup_qualified(names, arguments, ctx)
        if resolved is not None:
            return resolved

        if names == ["dynamic"] and not arguments[0]:
            return self.types.dynamic
        return self._error_type(names, arguments)

    def _error_type(self, names, arguments) -> ErrorTypeSymbol:
        """Unbound ``A.B<int>.C`` as written, one nested error type per generic part."""
        container = None
        pending: list[str] = []
        for name, args in zip(names, arguments):
            pending.append(name)
            if args:
                container = self.types.error_type(_written(pending), args, container)
                pending = []
        if pending or container is None:
            return self.types.error_type(_written(pending), (), container)
        return container

    def _lookup_simple(self, name: str, arity: int, ctx: _Context) -> TypeSymbol | None:
        if arity == 0:
            if ctx.method is not None:
                for tp in ctx.method.type_parameters:
                    if tp.name == name:
                        return tp
            for enclosing in ctx.enclosing:
                for tp in enclosing.type_parameters:
                    if tp.name == name:
                        return tp
        for enclosing in ctx.enclosing:
            nested = enclosing.get_type_members(name, arity)
            if nested:
                return nested[0]

        for scope in ctx.scope.chain():
            found = self._lookup_in_namespace(scope.namespace, name, arity)
            if found is not None:
                return found
            if arity == 0 and ctx.use_aliases:
                alias = self._aliases(scope).get(name)
                if alias is not None:
                    resolved = self._resolve_alias(alias)
                    if resolved is not None:
                        return resolved
            for namespace in self._usings(scope):
                found = self._lookup_in_namespace(namespace, name, arity)
                if found is not None:
                    return found

        if arity == 0 and name in ("nint", "nuint"):
            return self.library.special_type(name)
        return None

    def _lookup_qualified(self, names, arguments, ctx: _Context) -> TypeSymbol | None:
        if names[0].endswith("::"):
            if names[0] != "global::":
                return None
            return self._lookup_path([""], names[1:], arguments[1:])

        # Leftmost part naming a type: descend into nested types.
        head = self._lookup_simple(names[0], len(arguments[0]), replace(ctx, method=None))
        if isinstance(head, NamedTypeSymbol) and not isinstance(head, ErrorTypeSymbol):
            if arguments[0]:
                head = head.construct(arguments[0])
            return self._descend(head, names[1:], arguments[1:])
        if arguments[0]:
            return None

        # Leftmost part naming a namespace or a namespace alias.
        roots = []
        for scope in ctx.scope.chain():
            roots.append(f"{scope.namespace}.{names[0]}" if scope.namespace else names[0])
            alias = self._aliases(scope).get(names[0])
            if alias is not None:
                target, source, _ = alias
                roots.append(_compact(node_text(target, source)).replace("global::", ""))
        return self._lookup_path(roots, names[1:], arguments[1:], rooted=True)

    def _lookup_path(self, roots, names, arguments, rooted=False):
        """Resolve ``root.names[0]...names[-1]`` for the first root that works."""
        for root in roots:
            for split in range(len(names) - 1, -1, -1):
                if any(arguments[:split]):
                    continue
                namespace_parts = ([root] if root else []) + names[:split]
                namespace = ".".join(namespace_parts)
                if rooted and not self._namespace_exists(namespace):
                    continue
                head = self._lookup_in_namespace(namespace, names[split], len(arguments[split]))
                if head is None:
                    continue
                if arguments[split]:
                    head = head.construct(arguments[split])
                found = self._descend(head, names[split + 1:], arguments[split + 1:])
                if found is not None:
                    return found
        return None

    def _descend(self, head: NamedTypeSymbol, names, arguments) -> NamedTypeSymbol | None:
        current = head
        for name, args in zip(names, arguments):
            nested = current.get_type_members(name, len(args))
            if not nested:
                return None
            current = nested[0].construct(args, containing_type=current)
        return current

    def _namespace_exists(self, namespace: str) -> bool:
        return (
            self.assembly.global_namespace.lookup_namespace(namespace) is not None
            or self.library.lookup_namespace(namespace) is not None
        )

    def _lookup_in_namespace(self, namespace: str, name: str, arity: int) -> NamedTypeSymbol | None:
        ns = self.assembly.global_namespace.lookup_namespace(namespace) if namespace else self.assembly.global_namespace
        if ns is not None:
            found = ns.get_type(name, arity)
            if found is not None:
                return found
        return self.library.lookup_type(namespace, name, arity)

    def _usings(self, scope: _Scope) -> list[str]:
        if not scope.is_compilation_unit:
            return scope.usings
        usings = scope.usings + self._global_usings
        if self.implicit_usings:
            usings = usings + list(IMPLICIT_USINGS)
        return usings

    def _aliases(self, scope: _Scope) -> dict[str, tuple]:
        if not scope.is_compilation_unit:
            return scope.aliases
        return {**self._global_aliases, **scope.aliases}

    def _resolve_alias(self, alias) -> TypeSymbol | None:
        target, source, scope = alias
        # Alias targets are bound without the aliases of their own scope.
        ctx = _Context(scope, source, use_aliases=False)
        resolved = self.bind_type(target, ctx)
        if isinstance(resolved, ErrorTypeSymbol):
            return None
        return resolved


def _might_contain_extension_methods(symbol: NamedTypeSymbol) -> bool:
    if not (symbol.is_static and not symbol.is_generic_type and symbol.is_top_level):
        return False
    return any(
        isinstance(m, MethodSymbol) and m.parameters and m.parameters[0].is_this
        for m in symbol.get_members()
    )


def compile_sources(
    sources,
    assembly_name: str = "Test",
    *,
    version: str = "1.0.0.0",
    implicit_usings: bool = False,
) -> AssemblySymbol:
    """Bind in-memory C# *sources* (strings or bytes) into an assembly."""
    binder = Binder(AssemblyIdentity(assembly_name, version), implicit_usings=implicit_usings)
    if isinstance(sources, (str, bytes)):
        sources = [sources]
    for index, text in enumerate(sources):
        data = text.encode("utf-8") if isinstance(text, str) else text
        binder.add_document(parse_source(data), data, f"<source {index}>")
    return binder.bind()
