"""
Node Model
==========

A closed set of dataclass node kinds mirroring the ESTree shapes produced
for ES5 programs. Every kind lists its child slots in ``_fields`` (the same
convention as the stdlib ``ast`` module), which is what the walker, the
fixpoint driver and the code generator dispatch on.

Nodes compare and hash by identity: the traversal keeps visited sets keyed
by node objects, and two structurally equal subtrees are still different
positions in the tree.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional, Tuple

from jsfold.tree.values import UNDEFINED


@dataclass(eq=False)
class Node:
    """Base class for all node kinds."""
    _fields: ClassVar[Tuple[str, ...]] = ()
    loc: Optional[Tuple[int, int]] = field(default=None, kw_only=True, repr=False)

    @property
    def type(self) -> str:
        return type(self).__name__


# ---- Program and statements ----

@dataclass(eq=False)
class Program(Node):
    body: List[Node] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('body',)


@dataclass(eq=False)
class EmptyStatement(Node):
    pass


@dataclass(eq=False)
class BlockStatement(Node):
    body: List[Node] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('body',)


@dataclass(eq=False)
class ExpressionStatement(Node):
    expression: Node
    _fields: ClassVar[Tuple[str, ...]] = ('expression',)


@dataclass(eq=False)
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Optional[Node] = None
    _fields: ClassVar[Tuple[str, ...]] = ('test', 'consequent', 'alternate')


@dataclass(eq=False)
class LabeledStatement(Node):
    label: 'Identifier'
    body: Node
    _fields: ClassVar[Tuple[str, ...]] = ('label', 'body')


@dataclass(eq=False)
class BreakStatement(Node):
    label: Optional['Identifier'] = None
    _fields: ClassVar[Tuple[str, ...]] = ('label',)


@dataclass(eq=False)
class ContinueStatement(Node):
    label: Optional['Identifier'] = None
    _fields: ClassVar[Tuple[str, ...]] = ('label',)


@dataclass(eq=False)
class ReturnStatement(Node):
    argument: Optional[Node] = None
    _fields: ClassVar[Tuple[str, ...]] = ('argument',)


@dataclass(eq=False)
class ThrowStatement(Node):
    argument: Node
    _fields: ClassVar[Tuple[str, ...]] = ('argument',)


@dataclass(eq=False)
class TryStatement(Node):
    block: BlockStatement
    handler: Optional['CatchClause'] = None
    finalizer: Optional[BlockStatement] = None
    _fields: ClassVar[Tuple[str, ...]] = ('block', 'handler', 'finalizer')


@dataclass(eq=False)
class CatchClause(Node):
    param: 'Identifier'
    body: BlockStatement
    _fields: ClassVar[Tuple[str, ...]] = ('param', 'body')


@dataclass(eq=False)
class SwitchStatement(Node):
    discriminant: Node
    cases: List['SwitchCase'] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('discriminant', 'cases')


@dataclass(eq=False)
class SwitchCase(Node):
    test: Optional[Node]          # None for `default:`
    consequent: List[Node] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('test', 'consequent')


@dataclass(eq=False)
class WhileStatement(Node):
    test: Node
    body: Node
    _fields: ClassVar[Tuple[str, ...]] = ('test', 'body')


@dataclass(eq=False)
class DoWhileStatement(Node):
    body: Node
    test: Node
    _fields: ClassVar[Tuple[str, ...]] = ('body', 'test')


@dataclass(eq=False)
class ForStatement(Node):
    init: Optional[Node]
    test: Optional[Node]
    update: Optional[Node]
    body: Node
    _fields: ClassVar[Tuple[str, ...]] = ('init', 'test', 'update', 'body')


@dataclass(eq=False)
class ForInStatement(Node):
    left: Node
    right: Node
    body: Node
    _fields: ClassVar[Tuple[str, ...]] = ('left', 'right', 'body')


@dataclass(eq=False)
class FunctionDeclaration(Node):
    id: 'Identifier'
    params: List['Identifier'] = field(default_factory=list)
    body: BlockStatement = field(default_factory=BlockStatement)
    _fields: ClassVar[Tuple[str, ...]] = ('id', 'params', 'body')


@dataclass(eq=False)
class VariableDeclaration(Node):
    kind: str = 'var'
    declarations: List['VariableDeclarator'] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('declarations',)


@dataclass(eq=False)
class VariableDeclarator(Node):
    id: 'Identifier'
    init: Optional[Node] = None
    _fields: ClassVar[Tuple[str, ...]] = ('id', 'init')


# ---- Expressions ----

@dataclass(eq=False)
class Identifier(Node):
    name: str


@dataclass(eq=False)
class Literal(Node):
    value: Any = UNDEFINED


@dataclass(eq=False)
class RegExpLiteral(Node):
    pattern: str
    flags: str = ''


@dataclass(eq=False)
class ThisExpression(Node):
    pass


@dataclass(eq=False)
class ArrayExpression(Node):
    elements: List[Optional[Node]] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('elements',)


@dataclass(eq=False)
class ObjectExpression(Node):
    properties: List['Property'] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('properties',)


@dataclass(eq=False)
class Property(Node):
    key: Node
    value: Node
    computed: bool = False
    _fields: ClassVar[Tuple[str, ...]] = ('key', 'value')


@dataclass(eq=False)
class FunctionExpression(Node):
    id: Optional[Identifier] = None
    params: List[Identifier] = field(default_factory=list)
    body: BlockStatement = field(default_factory=BlockStatement)
    _fields: ClassVar[Tuple[str, ...]] = ('id', 'params', 'body')


@dataclass(eq=False)
class UnaryExpression(Node):
    operator: str
    argument: Node
    _fields: ClassVar[Tuple[str, ...]] = ('argument',)


@dataclass(eq=False)
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool = False
    _fields: ClassVar[Tuple[str, ...]] = ('argument',)


@dataclass(eq=False)
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node
    _fields: ClassVar[Tuple[str, ...]] = ('left', 'right')


@dataclass(eq=False)
class LogicalExpression(Node):
    operator: str
    left: Node
    right: Node
    _fields: ClassVar[Tuple[str, ...]] = ('left', 'right')


@dataclass(eq=False)
class AssignmentExpression(Node):
    operator: str
    left: Node
    right: Node
    _fields: ClassVar[Tuple[str, ...]] = ('left', 'right')


@dataclass(eq=False)
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node
    _fields: ClassVar[Tuple[str, ...]] = ('test', 'consequent', 'alternate')


@dataclass(eq=False)
class CallExpression(Node):
    callee: Node
    arguments: List[Node] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('callee', 'arguments')


@dataclass(eq=False)
class NewExpression(Node):
    callee: Node
    arguments: List[Node] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('callee', 'arguments')


@dataclass(eq=False)
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False
    _fields: ClassVar[Tuple[str, ...]] = ('object', 'property')


@dataclass(eq=False)
class SequenceExpression(Node):
    expressions: List[Node] = field(default_factory=list)
    _fields: ClassVar[Tuple[str, ...]] = ('expressions',)


FUNCTION_TYPES = (FunctionDeclaration, FunctionExpression)

LOOP_TYPES = (ForStatement, ForInStatement, WhileStatement, DoWhileStatement)

STATEMENT_TYPES = (
    EmptyStatement, BlockStatement, ExpressionStatement, IfStatement,
    LabeledStatement, BreakStatement, ContinueStatement, ReturnStatement,
    ThrowStatement, TryStatement, SwitchStatement, WhileStatement,
    DoWhileStatement, ForStatement, ForInStatement, FunctionDeclaration,
    VariableDeclaration,
)

# Every kind the driver, the rules and the generator accept.
NODE_TYPES = frozenset({
    Program, CatchClause, SwitchCase, VariableDeclarator, Property,
    Identifier, Literal, RegExpLiteral, ThisExpression, ArrayExpression,
    ObjectExpression, FunctionExpression, UnaryExpression, UpdateExpression,
    BinaryExpression, LogicalExpression, AssignmentExpression,
    ConditionalExpression, CallExpression, NewExpression, MemberExpression,
    SequenceExpression,
} | set(STATEMENT_TYPES))
