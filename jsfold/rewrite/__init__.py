"""
Rewriting engine: the rule catalog, the fixpoint driver and the structural
hoisting passes.
"""

from jsfold.rewrite.rules import (
    RULE_NAMES,
    RewriteRule,
    RuleContext,
    Signal,
    default_rules,
)
from jsfold.rewrite.fixpoint import (
    ConvergenceStatus,
    FixpointRewriter,
    PassStats,
    RewriteResult,
)
from jsfold.rewrite.hoisting import (
    HoistReport,
    collapse_self_reassigning_factories,
    hoist_function_declarations,
)

__all__ = [
    'RULE_NAMES',
    'RewriteRule',
    'RuleContext',
    'Signal',
    'default_rules',
    'ConvergenceStatus',
    'FixpointRewriter',
    'PassStats',
    'RewriteResult',
    'HoistReport',
    'collapse_self_reassigning_factories',
    'hoist_function_declarations',
]
