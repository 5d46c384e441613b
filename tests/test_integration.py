"""
Integration tests for jsfold.

End-to-end runs of the full pipeline on small obfuscated programs:
  parse -> rename -> fixpoint rewrite -> factory collapse -> hoist -> generate
"""

import pytest

from jsfold import Deobfuscator, RewriteConfig, deobfuscate
from jsfold.errors import ParseError, UnsupportedNodeError


STRING_TABLE = """
var _0x = ['log', 'hello', ' world'];
console[_0x[0]](_0x[1] + _0x[2]);
"""

WRAPPED = """
(function () {
    'use strict';
    var greeting = 'hi';
    if ('' + 'x') {
        say(greeting);
    } else {
        never();
    }
})();
"""

FACTORY = """
function table() {
    var items = ['a', 'b'];
    table = function () { return items; };
    return table();
}
"""


# ═══════════════════════════════════════════════════════════════════
#  Folding and Propagation
# ═══════════════════════════════════════════════════════════════════

class TestEndToEnd:
    """Whole-pipeline output for characteristic patterns."""

    def test_constant_propagation(self):
        out = deobfuscate("var k = 'a' + 'b'; console.log(k);")
        assert out == "var k = 'ab';\nconsole.log('ab');"

    def test_string_table(self):
        result = Deobfuscator().run(STRING_TABLE)
        assert result.compact_code == (
            "var _0x=['log','hello',' world'];"
            "console['log']('hello world');"
        )
        assert result.code.endswith("console['log']('hello world');")

    def test_dead_branch_spliced(self):
        assert deobfuscate("if ('' + 'x') { a(); } else { b(); }") == 'a();'

    def test_wrapper_unwrapped(self):
        out = deobfuscate(WRAPPED)
        assert out == "var greeting = 'hi';\nsay('hi');"

    def test_trivial_function_inlined(self):
        out = deobfuscate('function add(a, b) { return a + b; } var r = add(1, 2);')
        assert out == 'function add(a, b) {\n    return a + b;\n}\nvar r = 3;'

    def test_zero_delay_timer(self):
        assert deobfuscate('setTimeout(function () { go(); }, 0);') == 'go();'

    def test_zero_delay_timer_among_statements(self):
        out = deobfuscate('a(); setTimeout(function () { b(); c(); }, 0); d();')
        assert out == 'a();\nb();\nc();\nd();'

    def test_single_pass_for_loop_keeps_update(self):
        out = deobfuscate('for (var i = 0; i < 1; i++) { f(i); } log(i);')
        assert out == 'var i = 0;\nf(i);\ni++;\nlog(i);'

    def test_addition_beyond_exact_integers(self):
        assert deobfuscate('log(9007199254740992 + 1);') == 'log(9007199254740992);'

    def test_small_number_concatenation(self):
        assert deobfuscate("log('a' + 0.00001);") == "log('a0.00001');"

    def test_numeric_string_index(self):
        result = Deobfuscator().run("var t = ['x', 'y']; f(t['1']);")
        assert result.compact_code == "var t=['x','y'];f('y');"

    def test_logical_rewritten(self):
        assert deobfuscate('var y = a && b;') == 'var y = a ? b : false;'

    def test_self_assignment_and_single_pass_loop(self):
        assert deobfuscate('x = x; do { f(); } while (false);') == 'f();'

    def test_mutated_name_not_propagated(self):
        out = deobfuscate('var n = 1; n = 2; use(n);')
        assert out == 'var n = 1;\nn = 2;\nuse(n);'


# ═══════════════════════════════════════════════════════════════════
#  Structural Passes
# ═══════════════════════════════════════════════════════════════════

class TestStructuralPasses:
    """Hoisting and factory collapse as seen from the pipeline."""

    def test_declarations_hoisted(self):
        out = deobfuscate('start(); function start() { go(); }')
        assert out == 'function start() {\n    go();\n}\nstart();'

    def test_hoisted_out_of_unwrapped_wrapper(self):
        out = deobfuscate('(function () { helper(); function helper() { go(); } })();')
        assert out == 'function helper() {\n    go();\n}\nhelper();'

    def test_factory_collapsed(self):
        result = Deobfuscator().run(FACTORY)
        assert result.collapsed == ['table']
        assert result.compact_code == "function table(){var items=['a','b'];return items;}"


# ═══════════════════════════════════════════════════════════════════
#  Session Options
# ═══════════════════════════════════════════════════════════════════

class TestSessionOptions:
    """Config and generator options flowing through a session."""

    def test_result_fields(self):
        result = Deobfuscator().run("var a = 1;")
        assert result.compact_code == 'var a=1;'
        assert result.rewrite.converged
        assert result.hoist.hoisted == []
        assert result.wall_time_seconds >= 0

    def test_renames(self):
        config = RewriteConfig(renames={'_0x1': 'strings'})
        result = Deobfuscator(config).run("var _0x1 = ['x']; f(_0x1[0]);")
        assert result.renamed == {'_0x1': 2}
        assert result.code == "var strings = ['x'];\nf('x');"

    def test_prune(self):
        config = RewriteConfig(prune_names=('debugProtect',))
        out = deobfuscate('var debugProtect = 1; debugProtect(); go();', config)
        assert out == 'go();'

    def test_disabled_rule(self):
        config = RewriteConfig(disabled_rules=('fold_binary_plus',))
        assert deobfuscate("use('a' + 'b');", config) == "use('a' + 'b');"

    def test_double_quotes(self):
        out = deobfuscate("var s = 'a' + 'b';", generator_options={'quoteStyle': 'double'})
        assert out == 'var s = "ab";'

    def test_idempotent(self):
        once = deobfuscate(STRING_TABLE)
        assert deobfuscate(once) == once

    def test_parse_error(self):
        with pytest.raises(ParseError):
            deobfuscate('var = ;')

    def test_unsupported_syntax(self):
        with pytest.raises(UnsupportedNodeError):
            deobfuscate('var f = () => 1;')
