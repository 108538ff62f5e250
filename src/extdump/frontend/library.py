"""Well-known framework types available to every compilation.

Projects are bound without their referenced assemblies, so the handful of
BCL types that show up constantly in extension-method signatures are
declared here with enough shape (namespace, arity, kind) for display and
value-type checks.  Anything not listed binds to an error type.
"""

from __future__ import annotations

from extdump.symbols import (
    Accessibility,
    AssemblyIdentity,
    AssemblySymbol,
    NamedTypeSymbol,
    NamespaceSymbol,
    TypeKind,
    TypeParameterSymbol,
)

C, S, I, E, D = TypeKind.CLASS, TypeKind.STRUCT, TypeKind.INTERFACE, TypeKind.ENUM, TypeKind.DELEGATE

# keyword -> (System.<name>, kind)
SPECIAL_TYPES: dict[str, tuple[str, TypeKind]] = {
    "bool": ("Boolean", S),
    "byte": ("Byte", S),
    "sbyte": ("SByte", S),
    "char": ("Char", S),
    "decimal": ("Decimal", S),
    "double": ("Double", S),
    "float": ("Single", S),
    "int": ("Int32", S),
    "uint": ("UInt32", S),
    "long": ("Int64", S),
    "ulong": ("UInt64", S),
    "short": ("Int16", S),
    "ushort": ("UInt16", S),
    "nint": ("IntPtr", S),
    "nuint": ("UIntPtr", S),
    "object": ("Object", C),
    "string": ("String", C),
    "void": ("Void", S),
}

# namespace -> [(name, arities, kind)]
WELL_KNOWN_TYPES: dict[str, list[tuple[str, tuple[int, ...], TypeKind]]] = {
    "System": [
        ("Nullable", (1,), S),
        ("Span", (1,), S),
        ("ReadOnlySpan", (1,), S),
        ("Memory", (1,), S),
        ("ReadOnlyMemory", (1,), S),
        ("ArraySegment", (1,), S),
        ("ValueTuple", (1, 2, 3, 4, 5, 6, 7, 8), S),
        ("Tuple", (1, 2, 3, 4, 5, 6, 7, 8), C),
        ("Func", (1, 2, 3, 4, 5, 6, 7, 8, 9), D),
        ("Action", (0, 1, 2, 3, 4, 5, 6, 7, 8), D),
        ("Predicate", (1,), D),
        ("Comparison", (1,), D),
        ("EventHandler", (0, 1), D),
        ("Lazy", (1,), C),
        ("IComparable", (0, 1), I),
        ("IEquatable", (1,), I),
        ("IDisposable", (0,), I),
        ("IAsyncDisposable", (0,), I),
        ("IFormattable", (0,), I),
        ("IServiceProvider", (0,), I),
        ("IObservable", (1,), I),
        ("IObserver", (1,), I),
        ("Exception", (0,), C),
        ("Type", (0,), C),
        ("Uri", (0,), C),
        ("Array", (0,), C),
        ("Delegate", (0,), C),
        ("Attribute", (0,), C),
        ("Enum", (0,), C),
        ("EventArgs", (0,), C),
        ("DateTime", (0,), S),
        ("DateTimeOffset", (0,), S),
        ("DateOnly", (0,), S),
        ("TimeOnly", (0,), S),
        ("TimeSpan", (0,), S),
        ("Guid", (0,), S),
        ("Index", (0,), S),
        ("Range", (0,), S),
        ("StringComparison", (0,), E),
        ("StringComparer", (0,), C),
    ],
    "System.Collections": [
        ("IEnumerable", (0,), I),
        ("IEnumerator", (0,), I),
        ("ICollection", (0,), I),
        ("IList", (0,), I),
        ("IDictionary", (0,), I),
        ("ArrayList", (0,), C),
        ("Hashtable", (0,), C),
    ],
    "System.Collections.Generic": [
        ("IEnumerable", (1,), I),
        ("IEnumerator", (1,), I),
        ("IAsyncEnumerable", (1,), I),
        ("ICollection", (1,), I),
        ("IReadOnlyCollection", (1,), I),
        ("IList", (1,), I),
        ("IReadOnlyList", (1,), I),
        ("ISet", (1,), I),
        ("IReadOnlySet", (1,), I),
        ("IDictionary", (2,), I),
        ("IReadOnlyDictionary", (2,), I),
        ("IComparer", (1,), I),
        ("IEqualityComparer", (1,), I),
        ("List", (1,), C),
        ("Dictionary", (2,), C),
        ("HashSet", (1,), C),
        ("SortedSet", (1,), C),
        ("SortedDictionary", (2,), C),
        ("Queue", (1,), C),
        ("Stack", (1,), C),
        ("LinkedList", (1,), C),
        ("KeyValuePair", (2,), S),
    ],
    "System.Collections.Immutable": [
        ("ImmutableArray", (1,), S),
        ("ImmutableList", (1,), C),
        ("ImmutableHashSet", (1,), C),
        ("ImmutableDictionary", (2,), C),
        ("IImmutableList", (1,), I),
    ],
    "System.Linq": [
        ("IQueryable", (0, 1), I),
        ("IOrderedQueryable", (1,), I),
        ("IOrderedEnumerable", (1,), I),
        ("IGrouping", (2,), I),
        ("ILookup", (2,), I),
    ],
    "System.Threading": [
        ("CancellationToken", (0,), S),
    ],
    "System.Threading.Tasks": [
        ("Task", (0, 1), C),
        ("ValueTask", (0, 1), S),
    ],
    "System.Text": [
        ("StringBuilder", (0,), C),
        ("Encoding", (0,), C),
    ],
    "System.IO": [
        ("Stream", (0,), C),
        ("TextReader", (0,), C),
        ("TextWriter", (0,), C),
        ("FileInfo", (0,), C),
        ("DirectoryInfo", (0,), C),
    ],
    "System.Net.Http": [
        ("HttpClient", (0,), C),
        ("HttpContent", (0,), C),
        ("HttpResponseMessage", (0,), C),
    ],
}

# Namespaces imported by the SDK when <ImplicitUsings> is enabled.
IMPLICIT_USINGS = (
    "System",
    "System.Collections.Generic",
    "System.IO",
    "System.Linq",
    "System.Net.Http",
    "System.Threading",
    "System.Threading.Tasks",
)


def _type_parameter_names(arity: int) -> list[str]:
    if arity == 1:
        return ["T"]
    return [f"T{i}" for i in range(1, arity + 1)]


class MetadataLibrary:
    """A small stand-in for the framework reference assemblies."""

    def __init__(self) -> None:
        self.assembly = AssemblySymbol(
            AssemblyIdentity("System.Runtime", "9.0.0.0", public_key_token="b03f5f7f11d50a3a")
        )
        self._special: dict[str, NamedTypeSymbol] = {}
        system = self.assembly.global_namespace.get_or_add_namespace("System")
        for keyword, (name, kind) in SPECIAL_TYPES.items():
            self._special[keyword] = system.add_type(
                NamedTypeSymbol(name, system, kind, Accessibility.PUBLIC, special_keyword=keyword)
            )

        for namespace_name, entries in WELL_KNOWN_TYPES.items():
            namespace = self.assembly.global_namespace.get_or_add_namespace(namespace_name)
            for name, arities, kind in entries:
                for arity in arities:
                    type_symbol = NamedTypeSymbol(name, namespace, kind, Accessibility.PUBLIC)
                    for tp_name in _type_parameter_names(arity):
                        type_symbol.add_type_parameter(TypeParameterSymbol(tp_name))
                    namespace.add_type(type_symbol)

    def special_type(self, keyword: str) -> NamedTypeSymbol | None:
        return self._special.get(keyword)

    def lookup_namespace(self, dotted_name: str) -> NamespaceSymbol | None:
        return self.assembly.global_namespace.lookup_namespace(dotted_name)

    def lookup_type(self, namespace: str, name: str, arity: int = 0) -> NamedTypeSymbol | None:
        ns = self.lookup_namespace(namespace) if namespace else self.assembly.global_namespace
        if ns is None:
            return None
        return ns.get_type(name, arity)

    @property
    def nullable(self) -> NamedTypeSymbol:
        return self.lookup_type("System", "Nullable", 1)

    def value_tuple(self, arity: int) -> NamedTypeSymbol | None:
        return self.lookup_type("System", "ValueTuple", arity)
