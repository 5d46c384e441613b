"""
Mutation Scan
=============

Collects the names a program writes to after declaring them. A name in this
set is not a constant, whatever its declarator says, so the capture rules
leave it alone.

Counted as writes:
  - assignment targets (``x = ...``, ``x += ...``), except ``x = x``
  - update operands (``x++``, ``--x``)
  - ``for (x in ...)`` targets
  - member writes through the name (``x[0] = ...``, ``delete x.y``)
  - calls of in-place array methods (``x.push(...)``, ``x.shift()``)
"""

from typing import Optional, Set

from jsfold.tree.nodes import (
    AssignmentExpression, CallExpression, ForInStatement, Identifier,
    MemberExpression, Node, UnaryExpression, UpdateExpression,
    VariableDeclaration,
)
from jsfold.tree.walk import walk

ARRAY_MUTATORS = frozenset({
    'push', 'pop', 'shift', 'unshift', 'splice', 'reverse', 'sort',
    'fill', 'copyWithin',
})


def _root_name(node: Node) -> Optional[str]:
    """Name of the variable at the base of a member chain."""
    while isinstance(node, MemberExpression):
        node = node.object
    if isinstance(node, Identifier):
        return node.name
    return None


def _property_name(member: MemberExpression) -> Optional[str]:
    prop = member.property
    if not member.computed and isinstance(prop, Identifier):
        return prop.name
    value = getattr(prop, 'value', None)
    return value if isinstance(value, str) else None


def collect_mutated_names(tree: Node) -> Set[str]:
    """Return the set of names written anywhere in *tree*."""
    mutated: Set[str] = set()

    def mark(target: Node):
        name = _root_name(target)
        if name is not None:
            mutated.add(name)

    for node in walk(tree):
        if isinstance(node, AssignmentExpression):
            left, right = node.left, node.right
            if (node.operator == '=' and isinstance(left, Identifier)
                    and isinstance(right, Identifier) and left.name == right.name):
                continue
            mark(left)
        elif isinstance(node, UpdateExpression):
            mark(node.argument)
        elif isinstance(node, ForInStatement):
            left = node.left
            if isinstance(left, VariableDeclaration):
                for decl in left.declarations:
                    mutated.add(decl.id.name)
            else:
                mark(left)
        elif isinstance(node, UnaryExpression) and node.operator == 'delete':
            if isinstance(node.argument, MemberExpression):
                mark(node.argument)
        elif isinstance(node, CallExpression) and isinstance(node.callee, MemberExpression):
            if _property_name(node.callee) in ARRAY_MUTATORS:
                mark(node.callee.object)
    return mutated
