"""
Tests for the analysis helpers: symbol table, mutation scan, loop trips.
"""

from jsfold.tree.nodes import (
    ArrayExpression, AssignmentExpression, BinaryExpression, BlockStatement,
    CallExpression, DoWhileStatement, ExpressionStatement, ForInStatement,
    ForStatement, Identifier, Literal, MemberExpression, Program,
    UnaryExpression, UpdateExpression, VariableDeclaration, VariableDeclarator,
)


def ident(name):
    return Identifier(name)


def lit(value):
    return Literal(value)


def stmt(expr):
    return ExpressionStatement(expr)


def var(name, init=None):
    return VariableDeclaration('var', [VariableDeclarator(ident(name), init)])


def for_loop(start, op, bound, update, body=None):
    return ForStatement(
        var('i', lit(start)),
        BinaryExpression(op, ident('i'), lit(bound)),
        update,
        body or BlockStatement([stmt(CallExpression(ident('f'), []))]),
    )


# ═══════════════════════════════════════════════════════════════════
#  Symbol Table
# ═══════════════════════════════════════════════════════════════════

class TestSymbolTable:
    """Flat, last-write-wins name bindings."""

    def test_constant_roundtrip(self):
        from jsfold.analysis.symbols import MISSING, SymbolTable
        table = SymbolTable()
        assert table.lookup_constant('x') is MISSING
        assert table.record_constant('x', 1) is True
        assert table.lookup_constant('x') == 1
        assert table.has_constant('x')

    def test_last_write_wins(self):
        from jsfold.analysis.symbols import SymbolTable
        table = SymbolTable()
        table.record_constant('x', 1)
        assert table.record_constant('x', 2) is False
        assert table.lookup_constant('x') == 2

    def test_none_is_a_value(self):
        from jsfold.analysis.symbols import SymbolTable
        from jsfold.tree.values import UNDEFINED
        table = SymbolTable()
        table.record_constant('n', None)
        table.record_constant('u', UNDEFINED)
        assert table.lookup_constant('n') is None
        assert table.lookup_constant('u') is UNDEFINED

    def test_arrays_are_copied(self):
        from jsfold.analysis.symbols import SymbolTable
        table = SymbolTable()
        values = [10, 20]
        table.record_array('a', values)
        values.append(30)
        assert table.lookup_array('a') == [10, 20]
        assert table.lookup_array('b', None) is None

    def test_namespaces_are_separate(self):
        from jsfold.analysis.symbols import MISSING, SymbolTable
        table = SymbolTable()
        table.record_array('a', [1])
        assert table.lookup_constant('a') is MISSING
        assert table.lookup_function('a') is MISSING
        assert 'arrays=1' in repr(table)


# ═══════════════════════════════════════════════════════════════════
#  Mutation Scan
# ═══════════════════════════════════════════════════════════════════

class TestMutationScan:
    """Names written after declaration."""

    def test_assignments_and_updates(self):
        from jsfold.analysis.mutations import collect_mutated_names
        program = Program([
            var('a', lit(1)),
            stmt(AssignmentExpression('=', ident('a'), lit(2))),
            stmt(UpdateExpression('++', ident('b'))),
            stmt(AssignmentExpression('+=', ident('c'), lit(1))),
        ])
        assert collect_mutated_names(program) == {'a', 'b', 'c'}

    def test_self_assignment_is_not_a_write(self):
        from jsfold.analysis.mutations import collect_mutated_names
        program = Program([stmt(AssignmentExpression('=', ident('x'), ident('x')))])
        assert collect_mutated_names(program) == set()

    def test_member_writes_mark_the_root(self):
        from jsfold.analysis.mutations import collect_mutated_names
        deep = MemberExpression(MemberExpression(ident('o'), ident('p')), lit(0), computed=True)
        program = Program([
            stmt(AssignmentExpression('=', deep, lit(1))),
            stmt(UnaryExpression('delete', MemberExpression(ident('d'), ident('k')))),
        ])
        assert collect_mutated_names(program) == {'o', 'd'}

    def test_array_mutator_calls(self):
        from jsfold.analysis.mutations import collect_mutated_names
        push = CallExpression(MemberExpression(ident('arr'), ident('push')), [lit(1)])
        shift = CallExpression(MemberExpression(ident('q'), lit('shift'), computed=True), [])
        read = CallExpression(MemberExpression(ident('s'), ident('slice')), [])
        program = Program([stmt(push), stmt(shift), stmt(read)])
        assert collect_mutated_names(program) == {'arr', 'q'}

    def test_for_in_targets(self):
        from jsfold.analysis.mutations import collect_mutated_names
        loop = ForInStatement(var('k'), ident('obj'), BlockStatement([]))
        assert collect_mutated_names(Program([loop])) == {'k'}


# ═══════════════════════════════════════════════════════════════════
#  Loop Trip Analysis
# ═══════════════════════════════════════════════════════════════════

class TestLoopTrips:
    """Statically single-pass loops."""

    def test_counting_loops(self):
        from jsfold.analysis.loops import count_for_iterations
        assert count_for_iterations(for_loop(0, '<', 1, UpdateExpression('++', ident('i')))) == 1
        assert count_for_iterations(for_loop(0, '<', 0, UpdateExpression('++', ident('i')))) == 0
        assert count_for_iterations(for_loop(0, '<', 10, UpdateExpression('++', ident('i')))) == 2
        assert count_for_iterations(for_loop(5, '>', 4, UpdateExpression('--', ident('i')))) == 1
        step = AssignmentExpression('+=', ident('i'), lit(10))
        assert count_for_iterations(for_loop(0, '<', 5, step)) == 1

    def test_unknown_loops(self):
        from jsfold.analysis.loops import count_for_iterations
        loop = ForStatement(None, None, None, BlockStatement([]))
        assert count_for_iterations(loop) is None
        runtime_bound = ForStatement(
            var('i', lit(0)),
            BinaryExpression('<', ident('i'), ident('n')),
            UpdateExpression('++', ident('i')),
            BlockStatement([]),
        )
        assert count_for_iterations(runtime_bound) is None

    def test_body_writing_counter_is_unknown(self):
        from jsfold.analysis.loops import count_for_iterations
        body = BlockStatement([stmt(AssignmentExpression('=', ident('i'), lit(-5)))])
        loop = for_loop(0, '<', 1, UpdateExpression('++', ident('i')), body)
        assert count_for_iterations(loop) is None

    def test_executes_once(self):
        from jsfold.analysis.loops import executes_once
        body = BlockStatement([stmt(ident('x'))])
        assert executes_once(DoWhileStatement(body, lit(False)))
        assert executes_once(DoWhileStatement(body, lit(0)))
        assert not executes_once(DoWhileStatement(body, lit(True)))
        assert not executes_once(DoWhileStatement(body, ident('x')))
        assert executes_once(for_loop(0, '<', 1, UpdateExpression('++', ident('i'))))
        assert not executes_once(ArrayExpression([]))
