"""
JavaScript Code Generator
=========================

Renders a jsfold tree as ES5 source with escodegen.

The tree is checked against the node model and exported to ESTree with
``to_dict``, which also spells the values a Literal cannot carry in source
(``undefined``, ``NaN``, ``Infinity``, negative numbers). The dicts are then
rebuilt as esprima node objects, the form escodegen walks, with the flags
esprima itself sets on function and property nodes.

GeneratorOptions map onto escodegen's ``format`` options:

    compact       -> format.compact
    quote_style   -> format.quotes
    indent_style  -> format.indent.style

A consequent that ends in an ``if`` without ``else`` is braced before
printing, so a following ``else`` keeps its owner.
"""

import logging
from typing import Any, Dict

import escodegen
from esprima import nodes as estree

from jsfold.config import GeneratorOptions
from jsfold.tree.nodes import Node
from jsfold.tree.walk import to_dict

logger = logging.getLogger(__name__)

_FUNCTION_FLAGS = {'generator': False, 'expression': False, 'async': False, 'isAsync': False}

# Fields esprima fills in for ES5 input and escodegen reads back.
_ESPRIMA_DEFAULTS: Dict[str, Dict[str, Any]] = {
    'Program': {'sourceType': 'script'},
    'FunctionDeclaration': _FUNCTION_FLAGS,
    'FunctionExpression': _FUNCTION_FLAGS,
    'Property': {'kind': 'init', 'method': False, 'shorthand': False},
    'ForInStatement': {'each': False},
}

_SINGLE_BODY = ('WhileStatement', 'ForStatement', 'ForInStatement', 'LabeledStatement')


def _ends_in_open_if(statement: Dict[str, Any]) -> bool:
    """True when *statement* ends in an ``if`` with no ``else`` that a
    following ``else`` would attach to."""
    while True:
        if statement['type'] == 'IfStatement':
            if statement.get('alternate') is None:
                return True
            statement = statement['alternate']
        elif statement['type'] in _SINGLE_BODY:
            statement = statement['body']
        else:
            return False


def _esprima_node(data: Any) -> Any:
    """Rebuild an ESTree dict (recursively) as esprima node objects."""
    if isinstance(data, list):
        return [_esprima_node(item) for item in data]
    if not isinstance(data, dict):
        return data
    kind = data.get('type')
    if kind == 'IfStatement' and data.get('alternate') is not None:
        consequent = data['consequent']
        if consequent['type'] != 'BlockStatement' and _ends_in_open_if(consequent):
            data = dict(data, consequent={'type': 'BlockStatement', 'body': [consequent]})
    fields = dict(_ESPRIMA_DEFAULTS.get(kind, {}))
    fields.update((key, _esprima_node(value)) for key, value in data.items() if key != 'loc')
    node = estree.Node()
    node.__dict__.update(fields)
    return node


def format_options(options: GeneratorOptions) -> Dict[str, Any]:
    """escodegen options for *options*."""
    return {
        'format': {
            'indent': {'style': options.indent_style, 'base': 0},
            'quotes': options.quote_style,
            'compact': options.compact,
        },
    }


class CodeGenerator:
    """
    Generates JavaScript source from a jsfold tree.

    Usage:
        gen = CodeGenerator(GeneratorOptions(compact=True))
        text = gen.generate(program)
    """

    def __init__(self, options=None):
        self.options = GeneratorOptions.coerce(options)
        self.escodegen_options = format_options(self.options)

    def generate(self, node: Node) -> str:
        """Generate source for a Program, a statement or an expression."""
        logger.debug("Generating %s (compact=%s)", node.type, self.options.compact)
        tree = _esprima_node(to_dict(node))
        return escodegen.generate(tree, self.escodegen_options)


def generate(tree: Node, options=None) -> str:
    """
    Render *tree* as JavaScript source.

    Args:
        tree: A Program, a statement or an expression node.
        options: GeneratorOptions, a mapping of its fields (``quoteStyle`` and
            ``indentStyle`` spellings accepted), or None for the defaults.

    Raises:
        UnsupportedNodeError: the tree contains a node outside the model.
    """
    return CodeGenerator(options).generate(tree)
