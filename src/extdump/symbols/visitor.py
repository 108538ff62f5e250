"""Visitor dispatch over the symbol model.

Each symbol's ``accept`` calls the handler for its own node kind.  Every
handler falls back to ``default_visit``, which does nothing; subclasses
override only the kinds they care about.
"""

from __future__ import annotations


class SymbolVisitor:
    def visit(self, symbol):
        if symbol is None:
            return None
        return symbol.accept(self)

    def default_visit(self, symbol):
        return None

    def visit_assembly(self, symbol):
        return self.default_visit(symbol)

    def visit_namespace(self, symbol):
        return self.default_visit(symbol)

    def visit_named_type(self, symbol):
        return self.default_visit(symbol)

    def visit_type_parameter(self, symbol):
        return self.default_visit(symbol)

    def visit_array_type(self, symbol):
        return self.default_visit(symbol)

    def visit_pointer_type(self, symbol):
        return self.default_visit(symbol)

    def visit_dynamic_type(self, symbol):
        return self.default_visit(symbol)

    def visit_function_pointer_type(self, symbol):
        return self.default_visit(symbol)

    def visit_method(self, symbol):
        return self.default_visit(symbol)

    def visit_parameter(self, symbol):
        return self.default_visit(symbol)

    def visit_field(self, symbol):
        return self.default_visit(symbol)

    def visit_property(self, symbol):
        return self.default_visit(symbol)

    def visit_event(self, symbol):
        return self.default_visit(symbol)
