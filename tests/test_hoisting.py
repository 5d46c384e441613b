"""
Tests for the structural passes: declaration hoisting with deduplication,
and the self-reassigning factory collapse.
"""

import logging

from jsfold.config import RewriteConfig
from jsfold.rewrite.hoisting import (
    HoistReport,
    collapse_self_reassigning_factories,
    hoist_function_declarations,
)
from jsfold.tree.nodes import (
    ArrayExpression, AssignmentExpression, BlockStatement, CallExpression,
    ExpressionStatement, FunctionDeclaration, FunctionExpression, Identifier,
    IfStatement, Literal, Program, ReturnStatement, VariableDeclaration,
    VariableDeclarator,
)


def ident(name):
    return Identifier(name)


def stmt(expr):
    return ExpressionStatement(expr)


def fn(name, *body):
    return FunctionDeclaration(ident(name), [], BlockStatement(list(body)))


def call(name):
    return stmt(CallExpression(ident(name), []))


def factory(name, local='items', reassign=True, array=True, tail=None):
    init = ArrayExpression([Literal('a'), Literal('b')]) if array else Literal('a')
    body = [VariableDeclaration('var', [VariableDeclarator(ident(local), init)])]
    if reassign:
        getter = FunctionExpression(None, [], BlockStatement([ReturnStatement(ident(local))]))
        body.append(stmt(AssignmentExpression('=', ident(name), getter)))
    body.append(tail or ReturnStatement(CallExpression(ident(name), [])))
    return FunctionDeclaration(ident(name), [], BlockStatement(body))


def names(statements):
    return [s.id.name for s in statements if isinstance(s, FunctionDeclaration)]


# ═══════════════════════════════════════════════════════════════════
#  Hoisting and Deduplication
# ═══════════════════════════════════════════════════════════════════

class TestHoisting:
    """Function declarations move to the top of the program."""

    def test_three_declarations_two_sharing_a_name(self):
        first_a = fn('a')
        b = fn('b')
        dup_a = fn('a', call('stale'))
        branch = IfStatement(ident('c'), BlockStatement([b, dup_a]))
        program = Program([call('start'), first_a, branch])

        report = hoist_function_declarations(program, RewriteConfig(dedup_depth_threshold=2))

        assert program.body[0] is first_a
        assert program.body[1] is b
        assert names(program.body) == ['a', 'b']
        assert branch.consequent.body == []
        assert report.hoisted == ['a', 'b']
        assert report.discarded == [('a', 3)]
        assert report.unresolved == []

    def test_first_seen_order(self):
        inner = fn('inner')
        outer = fn('outer', inner)
        late = fn('late')
        program = Program([call('x'), outer, call('y'), late])
        hoist_function_declarations(program)
        assert program.body[:3] == [outer, inner, late]
        assert outer.body.body == []
        assert [s.expression.callee.name for s in program.body[3:]] == ['x', 'y']

    def test_shallow_duplicate_left_in_place(self, caplog):
        first = fn('a')
        dup = fn('a', call('other'))
        block = BlockStatement([dup])
        program = Program([first, block])
        with caplog.at_level(logging.WARNING, logger='jsfold.rewrite.hoisting'):
            report = hoist_function_declarations(program)
        assert program.body == [first, block]
        assert block.body == [dup]
        assert report.unresolved == [('a', 2)]
        assert report.discarded == []
        assert any('Duplicate declaration of a' in r.getMessage() for r in caplog.records)

    def test_top_level_duplicate_is_unresolved(self):
        first, second = fn('a'), fn('a')
        program = Program([first, second])
        report = hoist_function_declarations(program)
        assert program.body == [first, second]
        assert report.unresolved == [('a', 1)]

    def test_threshold_zero_discards_top_level_duplicate(self):
        first, second = fn('a'), fn('a')
        program = Program([first, second])
        report = hoist_function_declarations(program, RewriteConfig(dedup_depth_threshold=0))
        assert program.body == [first]
        assert report.discarded == [('a', 1)]

    def test_declaration_in_single_slot_is_pinned(self):
        pinned = fn('f')
        node = IfStatement(ident('c'), pinned)
        program = Program([node])
        report = hoist_function_declarations(program)
        assert node.consequent is pinned
        assert report.pinned == ['f']
        assert report.hoisted == []

    def test_discarded_body_not_searched(self):
        nested = fn('helper')
        dup = fn('a', nested)
        program = Program([fn('a'), BlockStatement([BlockStatement([dup])])])
        report = hoist_function_declarations(program, RewriteConfig(dedup_depth_threshold=1))
        assert report.discarded == [('a', 3)]
        assert 'helper' not in report.hoisted

    def test_no_declarations(self):
        program = Program([call('x')])
        report = hoist_function_declarations(program)
        assert report == HoistReport()
        assert len(program.body) == 1


# ═══════════════════════════════════════════════════════════════════
#  Factory Collapse
# ═══════════════════════════════════════════════════════════════════

class TestFactoryCollapse:
    """Self-reassigning array factories lose one layer of indirection."""

    def test_collapsed(self):
        table = factory('table')
        program = Program([table])
        assert collapse_self_reassigning_factories(program) == ['table']
        body = table.body.body
        assert len(body) == 2
        assert isinstance(body[0], VariableDeclaration)
        assert isinstance(body[1], ReturnStatement)
        assert isinstance(body[1].argument, Identifier)
        assert body[1].argument.name == 'items'

    def test_nested_factory(self):
        table = factory('table')
        program = Program([fn('outer', table)])
        assert collapse_self_reassigning_factories(program) == ['table']

    def test_without_reassignment_untouched(self):
        table = factory('table', reassign=False)
        program = Program([table])
        assert collapse_self_reassigning_factories(program) == []
        assert isinstance(table.body.body[-1].argument, CallExpression)

    def test_without_local_array_untouched(self):
        table = factory('table', array=False)
        program = Program([table])
        assert collapse_self_reassigning_factories(program) == []
        assert len(table.body.body) == 3

    def test_other_tail_untouched(self):
        table = factory('table', tail=ReturnStatement(ident('items')))
        program = Program([table])
        assert collapse_self_reassigning_factories(program) == []
        assert len(table.body.body) == 3
