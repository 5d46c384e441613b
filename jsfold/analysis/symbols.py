"""
Symbol Table
============

Session-scoped facts gathered while rewriting: names bound to literal values,
names bound to arrays of literals, and names bound to functions whose body is
a single `return`.

The namespace is flat. Obfuscator output rarely relies on block scoping, so
redeclaration simply overwrites the earlier entry (last write wins) and
nothing is ever removed during a session.
"""

from typing import Any, Dict, List, Union

from jsfold.tree.nodes import FunctionDeclaration, FunctionExpression


class _Missing:
    def __repr__(self):
        return '<missing>'


# Returned by lookups for unknown names; None and UNDEFINED are real values.
MISSING = _Missing()

FunctionNode = Union[FunctionDeclaration, FunctionExpression]


class SymbolTable:
    """Name -> value facts for one rewrite session."""

    def __init__(self):
        self.constants: Dict[str, Any] = {}
        self.arrays: Dict[str, List[Any]] = {}
        self.functions: Dict[str, FunctionNode] = {}

    def __repr__(self):
        return (
            f"SymbolTable(constants={len(self.constants)}, "
            f"arrays={len(self.arrays)}, functions={len(self.functions)})"
        )

    def record_constant(self, name: str, value: Any) -> bool:
        """Bind *name* to a literal value. Returns True if the name is new."""
        is_new = name not in self.constants
        self.constants[name] = value
        return is_new

    def lookup_constant(self, name: str, default: Any = MISSING) -> Any:
        return self.constants.get(name, default)

    def has_constant(self, name: str) -> bool:
        return name in self.constants

    def record_array(self, name: str, values: List[Any]) -> bool:
        """Bind *name* to a sequence of literal values. Returns True if the name is new."""
        is_new = name not in self.arrays
        self.arrays[name] = list(values)
        return is_new

    def lookup_array(self, name: str, default: Any = MISSING) -> Any:
        return self.arrays.get(name, default)

    def record_function(self, name: str, fn: FunctionNode) -> bool:
        """Bind *name* to a trivial-return function. Returns True if the name is new."""
        is_new = name not in self.functions
        self.functions[name] = fn
        return is_new

    def lookup_function(self, name: str, default: Any = MISSING) -> Any:
        return self.functions.get(name, default)
