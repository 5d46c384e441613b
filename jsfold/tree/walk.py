"""Walking, querying and whole-tree helpers for the node model."""

import dataclasses
import math
from typing import Any, Dict, Iterator, Optional, Tuple

from jsfold.errors import UnsupportedNodeError
from jsfold.tree.nodes import (
    FUNCTION_TYPES, LOOP_TYPES, NODE_TYPES,
    AssignmentExpression, BreakStatement, CatchClause, ContinueStatement,
    ForInStatement, Identifier, LabeledStatement, Literal, MemberExpression,
    Node, Property, RegExpLiteral, ReturnStatement, SwitchStatement,
    ThisExpression, UnaryExpression, UpdateExpression, VariableDeclarator,
)
from jsfold.tree.values import INTEGER_LIMIT, UNDEFINED, is_literal_value, is_number


def check_node(node: Any) -> Node:
    """Raise UnsupportedNodeError unless *node* belongs to the node model."""
    if type(node) not in NODE_TYPES:
        kind = getattr(node, 'type', None) or type(node).__name__
        raise UnsupportedNodeError(kind, getattr(node, 'loc', None))
    return node


def iter_child_slots(node: Node) -> Iterator[Tuple[str, Optional[int], Node]]:
    """Yield ``(field, index, child)`` for every non-empty child slot.

    ``index`` is None for single-node slots.
    """
    for name in node._fields:
        value = getattr(node, name)
        if value is None:
            continue
        if isinstance(value, list):
            for i, item in enumerate(value):
                if item is not None:
                    yield name, i, item
        else:
            yield name, None, value


def iter_child_nodes(node: Node) -> Iterator[Node]:
    for _, _, child in iter_child_slots(node):
        yield child


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of *node* and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_child_nodes(current))))


def walk_with_parents(node: Node, parent: Optional[Node] = None, field: Optional[str] = None):
    """Pre-order traversal yielding ``(node, parent, field)``."""
    stack = [(node, parent, field)]
    while stack:
        current, owner, slot = stack.pop()
        yield current, owner, slot
        children = [(child, current, name) for name, _, child in iter_child_slots(current)]
        stack.extend(reversed(children))


def walk_scope(node: Node) -> Iterator[Node]:
    """Like walk(), but does not enter nested functions below *node*."""
    stack = list(reversed(list(iter_child_nodes(node))))
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, FUNCTION_TYPES):
            continue
        stack.extend(reversed(list(iter_child_nodes(current))))


def is_reference(parent: Optional[Node], field: Optional[str]) -> bool:
    """True when an Identifier in ``parent.field`` reads a variable
    (as opposed to declaring it or naming a property or a label)."""
    if parent is None:
        return True
    if isinstance(parent, VariableDeclarator):
        return field != 'id'
    if isinstance(parent, FUNCTION_TYPES):
        return field not in ('id', 'params')
    if isinstance(parent, MemberExpression):
        return field != 'property' or parent.computed
    if isinstance(parent, Property):
        return field != 'key' or parent.computed
    if isinstance(parent, CatchClause):
        return field != 'param'
    if isinstance(parent, (LabeledStatement, BreakStatement, ContinueStatement)):
        return field != 'label'
    return True


def is_write_target(parent: Optional[Node], field: Optional[str]) -> bool:
    """True when the child in ``parent.field`` is assigned to or deleted."""
    if isinstance(parent, AssignmentExpression):
        return field == 'left'
    if isinstance(parent, UpdateExpression):
        return True
    if isinstance(parent, ForInStatement):
        return field == 'left'
    if isinstance(parent, UnaryExpression):
        return parent.operator == 'delete'
    return False


def contains_return(node: Node) -> bool:
    """Does *node* contain a `return` belonging to the enclosing function?"""
    return any(isinstance(n, ReturnStatement) for n in walk_scope(node))


def uses_function_context(node: Node) -> bool:
    """Does *node* read `this` or `arguments` of the enclosing function?"""
    for n in walk_scope(node):
        if isinstance(n, ThisExpression):
            return True
        if isinstance(n, Identifier) and n.name == 'arguments':
            return True
    return False


def has_loop_exit(node: Node) -> bool:
    """Does *node* contain a break/continue that would leave an enclosing loop?

    Unlabeled jumps nested in inner loops (or unlabeled breaks inside
    switches) stay local; labeled jumps are always counted.
    """
    stack = [(child, False, False) for child in iter_child_nodes(node)]
    while stack:
        current, in_loop, in_switch = stack.pop()
        if isinstance(current, FUNCTION_TYPES):
            continue
        if isinstance(current, BreakStatement):
            if current.label is not None or not (in_loop or in_switch):
                return True
        elif isinstance(current, ContinueStatement):
            if current.label is not None or not in_loop:
                return True
        inner_loop = in_loop or isinstance(current, LOOP_TYPES)
        inner_switch = in_switch or isinstance(current, SwitchStatement)
        stack.extend((child, inner_loop, inner_switch) for child in iter_child_nodes(current))
    return False


def rename_identifier(tree: Node, old: str, new: str) -> int:
    """Rename every binding and reference called *old* to *new*.

    Property names and labels are left alone. Returns the number of
    identifiers renamed.
    """
    renamed = 0
    for node, parent, field in walk_with_parents(tree):
        if not isinstance(node, Identifier) or node.name != old:
            continue
        if isinstance(parent, MemberExpression) and field == 'property' and not parent.computed:
            continue
        if isinstance(parent, Property) and field == 'key' and not parent.computed:
            continue
        if isinstance(parent, (LabeledStatement, BreakStatement, ContinueStatement)):
            continue
        node.name = new
        renamed += 1
    return renamed


def _literal_dict(node: Literal) -> Dict[str, Any]:
    value = node.value
    if not is_literal_value(value):
        raise UnsupportedNodeError(f"Literal[{type(value).__name__}]", node.loc)
    if value is UNDEFINED:
        return {'type': 'Identifier', 'name': 'undefined'}
    if isinstance(value, float) and math.isnan(value):
        return {'type': 'Identifier', 'name': 'NaN'}
    if is_number(value) and (value < 0 or math.copysign(1, value) < 0):
        # ESTree has no negative number literals
        return {
            'type': 'UnaryExpression', 'operator': '-', 'prefix': True,
            'argument': _literal_dict(Literal(-value, loc=node.loc)),
        }
    if isinstance(value, float) and math.isinf(value):
        return {'type': 'Identifier', 'name': 'Infinity'}
    if isinstance(value, float) and value.is_integer() and value <= INTEGER_LIMIT:
        value = int(value)
    return {'type': 'Literal', 'value': value}


def to_dict(node: Optional[Node]) -> Any:
    """Convert a tree into an ESTree-shaped, JSON-serializable dict."""
    if node is None:
        return None
    check_node(node)
    if isinstance(node, Literal):
        result = _literal_dict(node)
    elif isinstance(node, RegExpLiteral):
        result = {
            'type': 'Literal',
            'value': None,
            'regex': {'pattern': node.pattern, 'flags': node.flags},
        }
    else:
        result = {'type': node.type}
        for f in dataclasses.fields(node):
            if f.name == 'loc':
                continue
            value = getattr(node, f.name)
            if isinstance(value, list):
                result[f.name] = [to_dict(item) for item in value]
            elif isinstance(value, Node):
                result[f.name] = to_dict(value)
            else:
                result[f.name] = value
        if isinstance(node, UnaryExpression):
            result['prefix'] = True
    if node.loc is not None:
        result['loc'] = {'start': {'line': node.loc[0], 'column': node.loc[1]}}
    return result
