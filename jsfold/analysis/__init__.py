"""
Analysis helpers consulted by the rewrite rules: the session symbol table,
the mutation scan and loop trip analysis.
"""

from jsfold.analysis.symbols import MISSING, SymbolTable
from jsfold.analysis.mutations import ARRAY_MUTATORS, collect_mutated_names
from jsfold.analysis.loops import count_for_iterations, executes_once

__all__ = [
    'MISSING',
    'SymbolTable',
    'ARRAY_MUTATORS',
    'collect_mutated_names',
    'count_for_iterations',
    'executes_once',
]
