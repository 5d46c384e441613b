"""
Tree model: node kinds, JavaScript value semantics, node paths and walkers.
"""

from jsfold.tree.nodes import (
    Node,
    Program,
    EmptyStatement,
    BlockStatement,
    ExpressionStatement,
    IfStatement,
    LabeledStatement,
    BreakStatement,
    ContinueStatement,
    ReturnStatement,
    ThrowStatement,
    TryStatement,
    CatchClause,
    SwitchStatement,
    SwitchCase,
    WhileStatement,
    DoWhileStatement,
    ForStatement,
    ForInStatement,
    FunctionDeclaration,
    VariableDeclaration,
    VariableDeclarator,
    Identifier,
    Literal,
    RegExpLiteral,
    ThisExpression,
    ArrayExpression,
    ObjectExpression,
    Property,
    FunctionExpression,
    UnaryExpression,
    UpdateExpression,
    BinaryExpression,
    LogicalExpression,
    AssignmentExpression,
    ConditionalExpression,
    CallExpression,
    NewExpression,
    MemberExpression,
    SequenceExpression,
    FUNCTION_TYPES,
    LOOP_TYPES,
    NODE_TYPES,
    STATEMENT_TYPES,
)
from jsfold.tree.path import NodePath
from jsfold.tree.values import UNDEFINED, js_add, js_truthy, js_to_string
from jsfold.tree.walk import (
    is_reference,
    iter_child_nodes,
    rename_identifier,
    to_dict,
    walk,
)
