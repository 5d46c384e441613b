"""
jsfold: Fixpoint AST Rewriting for Obfuscated JavaScript
========================================================

jsfold parses obfuscated JavaScript into a syntax tree, then applies a set of
local simplification rules until no rule changes the tree any more: constants
and literal arrays are recorded and substituted, string concatenations folded,
trivial wrappers inlined and dead branches dropped. A final structural pass
hoists function declarations and discards deeply nested duplicates.

Core Components:
    - tree: node model, JavaScript value semantics, node paths
    - analysis: symbol table, mutation scan, loop trip counts
    - rewrite: rule catalog, fixpoint driver, hoisting pass
    - frontend / backend: parsing and code generation

Usage:
    >>> import jsfold
    >>> print(jsfold.deobfuscate("var a = 'he' + 'llo'; log(a);"))
    var a = 'hello';
    log('hello');

    >>> deob = jsfold.Deobfuscator(jsfold.RewriteConfig(max_iterations=20))
    >>> result = deob.run(source)
    >>> result.rewrite.converged
    True
"""

__version__ = "1.0.0"

from jsfold.config import GeneratorOptions, RewriteConfig
from jsfold.errors import (
    JsfoldError,
    NonConvergenceError,
    NonConvergenceWarning,
    ParseError,
    StructuralError,
    UnsupportedNodeError,
)
from jsfold.analysis import SymbolTable
from jsfold.rewrite import (
    ConvergenceStatus,
    FixpointRewriter,
    HoistReport,
    RewriteResult,
    RewriteRule,
    default_rules,
    hoist_function_declarations,
    collapse_self_reassigning_factories,
)
from jsfold.frontend import parse
from jsfold.backend import generate
from jsfold.pipeline import DeobfuscationResult, Deobfuscator, deobfuscate

__all__ = [
    'GeneratorOptions',
    'RewriteConfig',
    'JsfoldError',
    'NonConvergenceError',
    'NonConvergenceWarning',
    'ParseError',
    'StructuralError',
    'UnsupportedNodeError',
    'SymbolTable',
    'ConvergenceStatus',
    'FixpointRewriter',
    'HoistReport',
    'RewriteResult',
    'RewriteRule',
    'default_rules',
    'hoist_function_declarations',
    'collapse_self_reassigning_factories',
    'parse',
    'generate',
    'DeobfuscationResult',
    'Deobfuscator',
    'deobfuscate',
]
