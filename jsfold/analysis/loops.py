"""
Loop Trip Analysis
==================

Decides whether a loop is statically known to run its body exactly once.
Obfuscators emit such loops as opaque wrappers:

    do { S } while (false);
    for (var i = 0; i < 1; i++) { S }

Only literal-driven loops are recognised; anything that depends on runtime
values is reported as unknown.
"""

import operator
from typing import Callable, Dict, Optional, Tuple

from jsfold.analysis.mutations import collect_mutated_names
from jsfold.tree.nodes import (
    AssignmentExpression, BinaryExpression, DoWhileStatement, ForStatement,
    Identifier, Literal, Node, UpdateExpression, VariableDeclaration,
)
from jsfold.tree.values import is_number, js_truthy

_COMPARISONS: Dict[str, Callable[[float, float], bool]] = {
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    '!=': operator.ne,
    '!==': operator.ne,
}

# Stop simulating once this many iterations have been counted.
_SIMULATION_LIMIT = 2


def _counter_init(init: Optional[Node]) -> Optional[Tuple[str, float]]:
    """Extract ``(name, start)`` from ``var i = N`` or ``i = N``."""
    if isinstance(init, VariableDeclaration) and len(init.declarations) == 1:
        decl = init.declarations[0]
        if isinstance(decl.init, Literal) and is_number(decl.init.value):
            return decl.id.name, decl.init.value
    if (isinstance(init, AssignmentExpression) and init.operator == '='
            and isinstance(init.left, Identifier)
            and isinstance(init.right, Literal) and is_number(init.right.value)):
        return init.left.name, init.right.value
    return None


def _counter_test(test: Optional[Node], name: str) -> Optional[Callable[[float], bool]]:
    if not isinstance(test, BinaryExpression) or test.operator not in _COMPARISONS:
        return None
    compare = _COMPARISONS[test.operator]
    left, right = test.left, test.right
    if (isinstance(left, Identifier) and left.name == name
            and isinstance(right, Literal) and is_number(right.value)):
        bound = right.value
        return lambda value: compare(value, bound)
    if (isinstance(right, Identifier) and right.name == name
            and isinstance(left, Literal) and is_number(left.value)):
        bound = left.value
        return lambda value: compare(bound, value)
    return None


def _counter_step(update: Optional[Node], name: str) -> Optional[float]:
    if isinstance(update, UpdateExpression):
        if isinstance(update.argument, Identifier) and update.argument.name == name:
            return 1 if update.operator == '++' else -1
        return None
    if (isinstance(update, AssignmentExpression) and update.operator in ('+=', '-=')
            and isinstance(update.left, Identifier) and update.left.name == name
            and isinstance(update.right, Literal) and is_number(update.right.value)):
        step = update.right.value
        return step if update.operator == '+=' else -step
    return None


def count_for_iterations(loop: ForStatement) -> Optional[int]:
    """Number of body executions (capped at 2), or None when unknown."""
    counter = _counter_init(loop.init)
    if counter is None:
        return None
    name, value = counter
    test = _counter_test(loop.test, name)
    step = _counter_step(loop.update, name)
    if test is None or step is None:
        return None
    if name in collect_mutated_names(loop.body):
        return None
    count = 0
    while test(value) and count < _SIMULATION_LIMIT:
        count += 1
        value += step
    return count


def executes_once(loop: Node) -> bool:
    """True when *loop* is known to run its body exactly one time."""
    if isinstance(loop, DoWhileStatement):
        return isinstance(loop.test, Literal) and not js_truthy(loop.test.value)
    if isinstance(loop, ForStatement):
        return count_for_iterations(loop) == 1
    return False
