"""
Hoisting and Deduplication
==========================

Structural passes run once, after the fixpoint rewrite has finished.

``hoist_function_declarations`` lifts function declarations found anywhere
in the program to the front of ``Program.body`` in first-seen order and
drops spurious duplicates. Obfuscated bundles that went through wrapper
unwrapping often carry the same helper several times; a copy nested very
deep is almost always one of those artefacts, while a shallow copy may be a
deliberate redefinition and is left where it is for a human to reconcile.
The depth cut-off is a heuristic (``RewriteConfig.dedup_depth_threshold``).

``collapse_self_reassigning_factories`` removes one layer of the lazy
string-table pattern:

    function table() {
        var items = ['a', 'b'];
        table = function () { return items; };
        return table();
    }

becomes

    function table() {
        var items = ['a', 'b'];
        return items;
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from jsfold.config import RewriteConfig
from jsfold.tree.nodes import (
    ArrayExpression, AssignmentExpression, CallExpression, ExpressionStatement,
    FunctionDeclaration, Identifier, Node, Program, ReturnStatement,
    VariableDeclaration,
)
from jsfold.tree.walk import iter_child_slots, walk

logger = logging.getLogger(__name__)


@dataclass
class HoistReport:
    """What the hoisting pass did, by function name."""
    hoisted: List[str] = field(default_factory=list)
    discarded: List[Tuple[str, int]] = field(default_factory=list)     # (name, depth)
    unresolved: List[Tuple[str, int]] = field(default_factory=list)    # (name, depth)
    pinned: List[str] = field(default_factory=list)                    # not in a statement list


def _detach(parent: Node, field_name: str, node: Node) -> None:
    container = getattr(parent, field_name)
    for i, item in enumerate(container):
        if item is node:
            del container[i]
            return


def hoist_function_declarations(program: Program, config: Optional[RewriteConfig] = None) -> HoistReport:
    """
    Move function declarations to the top of *program* and drop deep duplicates.

    The first declaration of each name is lifted in first-seen (source)
    order. A later declaration of the same name nested deeper than the
    configured threshold is discarded together with its body; shallower
    duplicates are left in place and listed in ``HoistReport.unresolved``.
    Declarations sitting in a single-statement slot (``if (x) function f(){}``)
    cannot be detached and stay where they are.
    """
    config = config or RewriteConfig()
    threshold = config.dedup_depth_threshold
    report = HoistReport()
    visited: Set[Node] = set()
    first_seen: Dict[str, FunctionDeclaration] = {}
    lifted: List[FunctionDeclaration] = []
    detach: List[Tuple[Node, str, FunctionDeclaration]] = []

    stack: List[Tuple[Node, Optional[Node], Optional[str], bool, int]] = [
        (program, None, None, False, 0)
    ]
    while stack:
        node, parent, field_name, in_list, depth = stack.pop()
        if node in visited:
            continue
        visited.add(node)

        if isinstance(node, FunctionDeclaration):
            name = node.id.name
            if name not in first_seen:
                first_seen[name] = node
                if in_list:
                    lifted.append(node)
                    detach.append((parent, field_name, node))
                    report.hoisted.append(name)
                else:
                    report.pinned.append(name)
            elif depth > threshold and in_list:
                detach.append((parent, field_name, node))
                report.discarded.append((name, depth))
                continue
            else:
                report.unresolved.append((name, depth))
                logger.warning(
                    "Duplicate declaration of %s at depth %d left in place", name, depth,
                )

        children = [
            (child, node, slot, index is not None, depth + 1)
            for slot, index, child in iter_child_slots(node)
        ]
        stack.extend(reversed(children))

    for parent, field_name, node in detach:
        _detach(parent, field_name, node)
    program.body[:0] = lifted

    logger.debug(
        "Hoisted %d declarations, discarded %d duplicates, %d unresolved",
        len(report.hoisted), len(report.discarded), len(report.unresolved),
    )
    return report


def _reassigns(statement: Node, name: str) -> bool:
    if not isinstance(statement, ExpressionStatement):
        return False
    expr = statement.expression
    return (
        isinstance(expr, AssignmentExpression)
        and expr.operator == '='
        and isinstance(expr.left, Identifier)
        and expr.left.name == name
    )


def _local_array_name(statement: Node) -> Optional[str]:
    if isinstance(statement, VariableDeclaration) and statement.declarations:
        declarator = statement.declarations[0]
        if isinstance(declarator.init, ArrayExpression):
            return declarator.id.name
    return None


def _returns_self_call(statement: Node, name: str) -> bool:
    if not isinstance(statement, ReturnStatement):
        return False
    call = statement.argument
    return (
        isinstance(call, CallExpression)
        and isinstance(call.callee, Identifier)
        and call.callee.name == name
    )


def collapse_self_reassigning_factories(program: Program) -> List[str]:
    """
    Short-circuit array factories that reassign themselves on first call.

    For every function declaration that (1) reassigns its own name in a
    top-level statement of its body, (2) ends with ``return <itself>()``
    and (3) starts by declaring a local array, the reassignment is deleted
    and the trailing return hands back the local array instead. Functions
    matching only part of the pattern are left untouched.

    Returns the names of the collapsed functions.
    """
    collapsed = []
    for node in list(walk(program)):
        if not isinstance(node, FunctionDeclaration):
            continue
        name = node.id.name
        body = node.body.body
        if len(body) < 3 or not _returns_self_call(body[-1], name):
            continue
        local = _local_array_name(body[0])
        if local is None:
            continue
        index = next(
            (i for i, stmt in enumerate(body[:-1]) if _reassigns(stmt, name)), None
        )
        if index is None:
            continue
        del body[index]
        body[-1].argument = Identifier(local, loc=body[-1].argument.loc)
        collapsed.append(name)
        logger.debug("Collapsed self-reassigning factory %s onto %s", name, local)
    return collapsed
