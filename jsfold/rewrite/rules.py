"""
Rewrite Rules
=============

The ordered catalog of local rewrite rules applied by the fixpoint driver.

Each rule is a pure function ``transform(node, ctx)`` over one node. It may
return:

    None              no change
    Node              replacement for the node
    list of nodes     statements spliced in place of the node
    Signal.REMOVE     delete the node from its statement list
    Signal.NOTED      nothing changed in the tree, but the symbol table
                      learned a new name (another pass may use it)

Rules never keep references to the nodes they see beyond their own call and
deep-copy any subtree they place at more than one site.

Default order:
     1. self_assignment            x = x;                    -> (removed)
     2. logical_to_conditional     a && b / a || b           -> a ? b : false / a ? true : b
     3. capture_declarator         var x = 1 / var a = [..]  -> symbol table
     4. substitute_identifier      x                         -> 1
     5. fold_binary_plus           1 + 2 / 'a' + 'b'         -> 3 / 'ab'
     6. simplify_conditional       if (true) A else B        -> A
     7. inline_zero_delay_timer    setTimeout(function(){S}, 0); -> {S}
     8. capture_trivial_function   function f(a){return E}   -> symbol table
     9. inline_trivial_return      f(1)                      -> E[a := 1]
    10. fold_array_member          a[1]                      -> literal
    11. unwrap_iife                (function(){S})();        -> S
    12. unwrap_single_pass_loop    do { S } while (false)    -> S
    13. prune_named                declarations/calls of configured names -> (removed)
"""

import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from jsfold.analysis.loops import executes_once
from jsfold.analysis.symbols import MISSING, SymbolTable
from jsfold.config import RewriteConfig
from jsfold.tree.nodes import (
    FUNCTION_TYPES,
    ArrayExpression, AssignmentExpression, BinaryExpression, BlockStatement,
    CallExpression, ConditionalExpression, DoWhileStatement, EmptyStatement,
    ExpressionStatement, ForStatement, FunctionDeclaration, FunctionExpression,
    Identifier, IfStatement, Literal, LogicalExpression, MemberExpression,
    Node, ReturnStatement, ThisExpression, VariableDeclaration,
    VariableDeclarator,
)
from jsfold.tree.path import NodePath
from jsfold.tree.values import UNDEFINED, as_array_index, is_number, js_add, js_truthy
from jsfold.tree.walk import (
    contains_return, has_loop_exit, is_reference, is_write_target,
    iter_child_slots, uses_function_context, walk, walk_with_parents,
)


class Signal(Enum):
    """Non-node outcomes of a rule application."""
    REMOVE = auto()
    NOTED = auto()


@dataclass
class RuleContext:
    """Everything a rule may consult besides the node itself."""
    path: NodePath
    symbols: SymbolTable
    config: RewriteConfig
    mutated: FrozenSet[str] = frozenset()

    @property
    def parent(self) -> Optional[Node]:
        return self.path.parent

    @property
    def field(self) -> Optional[str]:
        return self.path.field

    def is_constant_name(self, name: str) -> bool:
        """False when mutation tracking says *name* is written elsewhere."""
        return not (self.config.track_mutations and name in self.mutated)


@dataclass
class RewriteRule:
    """
    A single named rewrite.

    The driver only calls ``apply`` for nodes whose type is listed in
    ``node_types`` and bumps ``applications`` each time an outcome is
    committed to the tree or the symbol table.
    """
    name: str
    transform: Callable[[Node, RuleContext], Any]
    node_types: Tuple[type, ...]
    description: str = ''
    enabled: bool = True
    applications: int = 0

    def matches(self, node: Node) -> bool:
        return self.enabled and isinstance(node, self.node_types)

    def apply(self, node: Node, ctx: RuleContext) -> Any:
        return self.transform(node, ctx)


# ---- Shared helpers ----

def _declares_lexical(block: BlockStatement) -> bool:
    return any(
        isinstance(stmt, VariableDeclaration) and stmt.kind in ('let', 'const')
        for stmt in block.body
    )


def _is_pure(node: Node) -> bool:
    return isinstance(node, (Literal, Identifier))


def _single_return(fn: Node) -> Optional[ReturnStatement]:
    """The lone `return` of a function whose body is exactly one return."""
    body = fn.body.body
    if len(body) == 1 and isinstance(body[0], ReturnStatement):
        return body[0]
    return None


def _literal_elements(elements: List[Optional[Node]], partial: bool) -> Optional[List[Any]]:
    values = []
    for element in elements:
        if element is None:
            values.append(UNDEFINED)
        elif isinstance(element, Literal):
            values.append(element.value)
        elif partial:
            values.append(UNDEFINED)
        else:
            return None
    return values


def _substitute(node: Node, mapping: Dict[str, Node]) -> Node:
    """Replace parameter references inside a private copy of an expression."""
    if isinstance(node, Identifier) and node.name in mapping:
        return copy.deepcopy(mapping[node.name])
    for name, index, child in list(iter_child_slots(node)):
        if isinstance(child, Identifier) and not is_reference(node, name):
            continue
        new = _substitute(child, mapping)
        if new is child:
            continue
        if index is None:
            setattr(node, name, new)
        else:
            getattr(node, name)[index] = new
    return node


def _instantiate(fn: Node, expr: Node, args: List[Node]) -> Optional[Node]:
    """Returned expression of *fn* with parameters bound to *args*, or None
    when the substitution cannot be done without changing evaluation."""
    own_name = fn.id.name if fn.id is not None else None
    params = [p.name for p in fn.params]
    uses = dict.fromkeys(params, 0)
    for node, parent, field in walk_with_parents(expr):
        if isinstance(node, FUNCTION_TYPES) or isinstance(node, ThisExpression):
            return None
        if not isinstance(node, Identifier):
            continue
        if node.name == 'arguments' or (own_name is not None and node.name == own_name):
            return None
        if node.name in uses and is_reference(parent, field):
            if is_write_target(parent, field):
                return None
            uses[node.name] += 1

    if any(not _is_pure(arg) for arg in args[len(params):]):
        return None
    mapping = {}
    for i, name in enumerate(params):
        arg = args[i] if i < len(args) else Literal(UNDEFINED)
        if uses[name] != 1 and not _is_pure(arg):
            return None
        mapping[name] = arg
    return _substitute(copy.deepcopy(expr), mapping)


# ---- Rules ----

def remove_self_assignment(node: ExpressionStatement, ctx: RuleContext):
    expr = node.expression
    if (isinstance(expr, AssignmentExpression) and expr.operator == '='
            and isinstance(expr.left, Identifier) and isinstance(expr.right, Identifier)
            and expr.left.name == expr.right.name):
        return Signal.REMOVE
    return None


def logical_to_conditional(node: LogicalExpression, ctx: RuleContext):
    if node.operator == '&&':
        return ConditionalExpression(node.left, node.right, Literal(False), loc=node.loc)
    if node.operator == '||':
        return ConditionalExpression(node.left, Literal(True), node.right, loc=node.loc)
    return None


def capture_declarator(node: VariableDeclarator, ctx: RuleContext):
    name = node.id.name
    if not ctx.is_constant_name(name):
        return None
    init = node.init
    if isinstance(init, Literal):
        learned = ctx.symbols.record_constant(name, init.value)
    elif isinstance(init, ArrayExpression):
        values = _literal_elements(init.elements, ctx.config.capture_partial_arrays)
        if values is None:
            return None
        learned = ctx.symbols.record_array(name, values)
    else:
        return None
    return Signal.NOTED if learned else None


def substitute_identifier(node: Identifier, ctx: RuleContext):
    if not is_reference(ctx.parent, ctx.field) or is_write_target(ctx.parent, ctx.field):
        return None
    if not ctx.is_constant_name(node.name):
        return None
    value = ctx.symbols.lookup_constant(node.name)
    if value is MISSING:
        return None
    return Literal(value, loc=node.loc)


def fold_binary_plus(node: BinaryExpression, ctx: RuleContext):
    if node.operator != '+':
        return None
    if isinstance(node.left, Literal) and isinstance(node.right, Literal):
        return Literal(js_add(node.left.value, node.right.value), loc=node.loc)
    return None


def simplify_conditional(node, ctx: RuleContext):
    if not isinstance(node.test, Literal):
        return None
    branch = node.consequent if js_truthy(node.test.value) else node.alternate
    if isinstance(node, ConditionalExpression):
        return branch
    if branch is None:
        return EmptyStatement(loc=node.loc)
    if (ctx.config.splice_blocks and ctx.path.in_sequence
            and isinstance(branch, BlockStatement) and not _declares_lexical(branch)):
        return list(branch.body)
    return branch


def inline_zero_delay_timer(node: ExpressionStatement, ctx: RuleContext):
    call = node.expression
    if not isinstance(call, CallExpression) or len(call.arguments) != 2:
        return None
    callee = call.callee
    if not isinstance(callee, Identifier) or callee.name not in ctx.config.deferred_callees:
        return None
    fn, delay = call.arguments
    if not isinstance(fn, FunctionExpression) or fn.params:
        return None
    if not (isinstance(delay, Literal) and is_number(delay.value) and delay.value == 0):
        return None
    if contains_return(fn.body) or uses_function_context(fn.body):
        return None
    if ctx.path.in_sequence and not _declares_lexical(fn.body):
        return list(fn.body.body) or Signal.REMOVE
    return fn.body


def capture_trivial_function(node, ctx: RuleContext):
    if isinstance(node, FunctionDeclaration):
        name, fn = node.id.name, node
    elif isinstance(node.init, FunctionExpression):
        name, fn = node.id.name, node.init
    else:
        return None
    if not ctx.is_constant_name(name) or _single_return(fn) is None:
        return None
    if ctx.symbols.lookup_function(name) is fn:
        return None
    return Signal.NOTED if ctx.symbols.record_function(name, fn) else None


def inline_trivial_return(node: CallExpression, ctx: RuleContext):
    callee = node.callee
    if isinstance(callee, FunctionExpression):
        fn = callee
    elif isinstance(callee, Identifier) and ctx.is_constant_name(callee.name):
        fn = ctx.symbols.lookup_function(callee.name)
        if fn is MISSING:
            return None
    else:
        return None
    ret = _single_return(fn)
    if ret is None:
        return None
    expr = ret.argument if ret.argument is not None else Literal(UNDEFINED)
    return _instantiate(fn, expr, node.arguments)


def fold_array_member(node: MemberExpression, ctx: RuleContext):
    if not node.computed or is_write_target(ctx.parent, ctx.field):
        return None
    if not isinstance(node.object, Identifier) or not isinstance(node.property, Literal):
        return None
    name = node.object.name
    if not ctx.is_constant_name(name):
        return None
    values = ctx.symbols.lookup_array(name)
    if values is MISSING:
        return None
    index = as_array_index(node.property.value)
    if index is None:
        return None
    value = values[index] if 0 <= index < len(values) else UNDEFINED
    return Literal(value, loc=node.loc)


def unwrap_iife(node: ExpressionStatement, ctx: RuleContext):
    call = node.expression
    if not isinstance(call, CallExpression) or not isinstance(call.callee, FunctionExpression):
        return None
    fn = call.callee
    if call.arguments or fn.params or not ctx.path.in_sequence:
        return None
    if contains_return(fn.body) or uses_function_context(fn.body):
        return None
    if fn.id is not None and any(
            isinstance(n, Identifier) and n.name == fn.id.name for n in walk(fn.body)):
        return None
    body = list(fn.body.body)
    # Directive prologue ('use strict') means nothing once spliced mid-program.
    while (body and isinstance(body[0], ExpressionStatement)
           and isinstance(body[0].expression, Literal)
           and isinstance(body[0].expression.value, str)):
        body.pop(0)
    if not body:
        return Signal.REMOVE
    return body


def unwrap_single_pass_loop(node, ctx: RuleContext):
    body = node.body
    if not isinstance(body, BlockStatement) or len(body.body) != 1:
        return None
    if has_loop_exit(body) or not executes_once(node):
        return None
    statement = body.body[0]
    if not isinstance(node, ForStatement):
        return statement
    # the update still runs once after the body
    statements = [statement]
    if node.init is not None:
        init = node.init
        if not isinstance(init, VariableDeclaration):
            init = ExpressionStatement(init, loc=init.loc)
        statements.insert(0, init)
    if node.update is not None:
        statements.append(ExpressionStatement(node.update, loc=node.update.loc))
    return statements if len(statements) > 1 else statement


def prune_named(node, ctx: RuleContext):
    names = ctx.config.prune_names
    if not names:
        return None
    if isinstance(node, VariableDeclaration):
        if node.declarations and node.declarations[0].id.name in names:
            return Signal.REMOVE
        return None
    call = node.expression
    if (isinstance(call, CallExpression) and isinstance(call.callee, Identifier)
            and call.callee.name in names):
        return Signal.REMOVE
    return None


_CATALOG = (
    ('self_assignment', remove_self_assignment, (ExpressionStatement,),
     "Drop `x = x;` statements."),
    ('logical_to_conditional', logical_to_conditional, (LogicalExpression,),
     "Rewrite && and || into conditional expressions."),
    ('capture_declarator', capture_declarator, (VariableDeclarator,),
     "Record literal and literal-array initializers."),
    ('substitute_identifier', substitute_identifier, (Identifier,),
     "Replace references to captured constants with literals."),
    ('fold_binary_plus', fold_binary_plus, (BinaryExpression,),
     "Fold `+` over two literals."),
    ('simplify_conditional', simplify_conditional, (IfStatement, ConditionalExpression),
     "Pick the live branch of a literal test."),
    ('inline_zero_delay_timer', inline_zero_delay_timer, (ExpressionStatement,),
     "Run zero-delay deferred callbacks inline."),
    ('capture_trivial_function', capture_trivial_function,
     (FunctionDeclaration, VariableDeclarator),
     "Record functions whose body is a single return."),
    ('inline_trivial_return', inline_trivial_return, (CallExpression,),
     "Replace calls of single-return functions with the returned expression."),
    ('fold_array_member', fold_array_member, (MemberExpression,),
     "Index into captured literal arrays."),
    ('unwrap_iife', unwrap_iife, (ExpressionStatement,),
     "Splice the body of a bare immediately-invoked wrapper into its scope."),
    ('unwrap_single_pass_loop', unwrap_single_pass_loop, (ForStatement, DoWhileStatement),
     "Replace loops that provably run once with their body."),
    ('prune_named', prune_named, (VariableDeclaration, ExpressionStatement),
     "Delete declarations and call statements of configured names."),
)

RULE_NAMES = tuple(entry[0] for entry in _CATALOG)


def default_rules(config: Optional[RewriteConfig] = None) -> List[RewriteRule]:
    """Fresh instances of the standard rules, in driver order."""
    disabled = set(config.disabled_rules) if config is not None else set()
    unknown = disabled - set(RULE_NAMES)
    if unknown:
        raise ValueError(f"unknown rule names: {sorted(unknown)}")
    return [
        RewriteRule(name, transform, node_types, description, enabled=name not in disabled)
        for name, transform, node_types, description in _CATALOG
    ]
