"""
ESTree Adapter
==============

Parses JavaScript text with ``esprima`` and converts the resulting ESTree
objects into jsfold's own node model. Conversion dispatches on the ESTree
``type`` string: each supported kind has a ``_convert_<Type>`` method, and a
kind without one is rejected with ``UnsupportedNodeError`` carrying the
source position, so ES2015+ constructs (arrow functions, classes, template
literals, destructuring) fail loudly instead of being silently dropped.
"""

import logging
from typing import Any, List, Optional, Tuple

import esprima
from esprima.error_handler import Error as EsprimaError

from jsfold.errors import ParseError, UnsupportedNodeError
from jsfold.tree import nodes as js

logger = logging.getLogger(__name__)

_MAX_SAFE_INTEGER = 2 ** 53


def _attr(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _location(node: Any) -> Optional[Tuple[int, int]]:
    start = _attr(_attr(node, 'loc'), 'start')
    if start is None:
        return None
    return (_attr(start, 'line'), _attr(start, 'column'))


def _number(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < _MAX_SAFE_INTEGER:
        return int(value)
    return value


class EstreeConverter:
    """Convert esprima node objects into ``jsfold.tree`` nodes."""

    def convert(self, node: Any) -> js.Node:
        kind = _attr(node, 'type')
        method = getattr(self, '_convert_' + str(kind), None)
        if method is None:
            raise UnsupportedNodeError(str(kind), _location(node))
        result = method(node)
        result.loc = _location(node)
        return result

    def convert_optional(self, node: Any) -> Optional[js.Node]:
        return None if node is None else self.convert(node)

    def convert_list(self, items: Any) -> List[js.Node]:
        return [self.convert(item) for item in (items or [])]

    def _unsupported(self, node: Any, what: str):
        raise UnsupportedNodeError(what, _location(node))

    # ---- Program and statements ----

    def _convert_Program(self, node):
        return js.Program(self.convert_list(node.body))

    def _convert_EmptyStatement(self, node):
        return js.EmptyStatement()

    def _convert_BlockStatement(self, node):
        return js.BlockStatement(self.convert_list(node.body))

    def _convert_ExpressionStatement(self, node):
        return js.ExpressionStatement(self.convert(node.expression))

    def _convert_IfStatement(self, node):
        return js.IfStatement(
            self.convert(node.test),
            self.convert(node.consequent),
            self.convert_optional(node.alternate),
        )

    def _convert_LabeledStatement(self, node):
        return js.LabeledStatement(self.convert(node.label), self.convert(node.body))

    def _convert_BreakStatement(self, node):
        return js.BreakStatement(self.convert_optional(node.label))

    def _convert_ContinueStatement(self, node):
        return js.ContinueStatement(self.convert_optional(node.label))

    def _convert_ReturnStatement(self, node):
        return js.ReturnStatement(self.convert_optional(node.argument))

    def _convert_ThrowStatement(self, node):
        return js.ThrowStatement(self.convert(node.argument))

    def _convert_TryStatement(self, node):
        return js.TryStatement(
            self.convert(node.block),
            self.convert_optional(node.handler),
            self.convert_optional(node.finalizer),
        )

    def _convert_CatchClause(self, node):
        return js.CatchClause(self._identifier(node.param), self.convert(node.body))

    def _convert_SwitchStatement(self, node):
        return js.SwitchStatement(self.convert(node.discriminant), self.convert_list(node.cases))

    def _convert_SwitchCase(self, node):
        return js.SwitchCase(self.convert_optional(node.test), self.convert_list(node.consequent))

    def _convert_WhileStatement(self, node):
        return js.WhileStatement(self.convert(node.test), self.convert(node.body))

    def _convert_DoWhileStatement(self, node):
        return js.DoWhileStatement(self.convert(node.body), self.convert(node.test))

    def _convert_ForStatement(self, node):
        return js.ForStatement(
            self.convert_optional(node.init),
            self.convert_optional(node.test),
            self.convert_optional(node.update),
            self.convert(node.body),
        )

    def _convert_ForInStatement(self, node):
        return js.ForInStatement(self.convert(node.left), self.convert(node.right), self.convert(node.body))

    def _convert_FunctionDeclaration(self, node):
        self._check_plain_function(node)
        return js.FunctionDeclaration(
            self._identifier(node.id), self._params(node.params), self.convert(node.body),
        )

    def _convert_VariableDeclaration(self, node):
        return js.VariableDeclaration(node.kind, self.convert_list(node.declarations))

    def _convert_VariableDeclarator(self, node):
        return js.VariableDeclarator(self._identifier(node.id), self.convert_optional(node.init))

    # ---- Expressions ----

    def _convert_Identifier(self, node):
        return js.Identifier(node.name)

    def _convert_Literal(self, node):
        regex = _attr(node, 'regex')
        if regex is not None:
            return js.RegExpLiteral(_attr(regex, 'pattern'), _attr(regex, 'flags') or '')
        return js.Literal(_number(node.value))

    def _convert_ThisExpression(self, node):
        return js.ThisExpression()

    def _convert_ArrayExpression(self, node):
        return js.ArrayExpression([self.convert_optional(item) for item in node.elements])

    def _convert_ObjectExpression(self, node):
        return js.ObjectExpression(self.convert_list(node.properties))

    def _convert_Property(self, node):
        if _attr(node, 'kind', 'init') != 'init':
            self._unsupported(node, f"Property[{node.kind}]")
        if _attr(node, 'method') or _attr(node, 'shorthand'):
            self._unsupported(node, 'Property[shorthand]')
        return js.Property(
            self.convert(node.key), self.convert(node.value), bool(_attr(node, 'computed')),
        )

    def _convert_FunctionExpression(self, node):
        self._check_plain_function(node)
        return js.FunctionExpression(
            self.convert_optional(node.id), self._params(node.params), self.convert(node.body),
        )

    def _convert_UnaryExpression(self, node):
        return js.UnaryExpression(node.operator, self.convert(node.argument))

    def _convert_UpdateExpression(self, node):
        return js.UpdateExpression(node.operator, self.convert(node.argument), bool(node.prefix))

    def _convert_BinaryExpression(self, node):
        return js.BinaryExpression(node.operator, self.convert(node.left), self.convert(node.right))

    def _convert_LogicalExpression(self, node):
        return js.LogicalExpression(node.operator, self.convert(node.left), self.convert(node.right))

    def _convert_AssignmentExpression(self, node):
        return js.AssignmentExpression(node.operator, self.convert(node.left), self.convert(node.right))

    def _convert_ConditionalExpression(self, node):
        return js.ConditionalExpression(
            self.convert(node.test), self.convert(node.consequent), self.convert(node.alternate),
        )

    def _convert_CallExpression(self, node):
        return js.CallExpression(self.convert(node.callee), self.convert_list(node.arguments))

    def _convert_NewExpression(self, node):
        return js.NewExpression(self.convert(node.callee), self.convert_list(node.arguments))

    def _convert_MemberExpression(self, node):
        return js.MemberExpression(
            self.convert(node.object), self.convert(node.property), bool(node.computed),
        )

    def _convert_SequenceExpression(self, node):
        return js.SequenceExpression(self.convert_list(node.expressions))

    # ---- Helpers ----

    def _identifier(self, node) -> js.Identifier:
        if _attr(node, 'type') != 'Identifier':
            self._unsupported(node, str(_attr(node, 'type')))
        return self.convert(node)

    def _params(self, params) -> List[js.Identifier]:
        return [self._identifier(param) for param in (params or [])]

    def _check_plain_function(self, node):
        if _attr(node, 'generator'):
            self._unsupported(node, 'GeneratorFunction')
        if _attr(node, 'async') or _attr(node, 'isAsync'):
            self._unsupported(node, 'AsyncFunction')


def parse(source: str) -> js.Program:
    """
    Parse ES5 script text into a ``Program``.

    Raises:
        ParseError: the text is not syntactically valid.
        UnsupportedNodeError: the text uses a construct outside the node model.
    """
    try:
        estree = esprima.parseScript(source, {'loc': True})
    except EsprimaError as exc:
        line = getattr(exc, 'lineNumber', None)
        column = getattr(exc, 'column', None)
        message = getattr(exc, 'description', None) or str(exc)
        raise ParseError(message, line, column) from exc

    program = EstreeConverter().convert(estree)
    logger.debug("Parsed %d top-level statements", len(program.body))
    return program
