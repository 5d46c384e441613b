"""
Deobfuscation Pipeline
======================

One rewrite session from source text to source text:

    1. parse the input into a Program
    2. apply the configured identifier renames
    3. run the fixpoint rewriter with the standard rules
    4. collapse self-reassigning array factories
    5. hoist and deduplicate function declarations
    6. generate pretty and compact output

Each session owns its symbol table; nothing is shared between sessions, so
independent ``Deobfuscator.run`` calls may run on separate threads.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from jsfold.analysis.symbols import SymbolTable
from jsfold.backend.codegen import generate
from jsfold.config import GeneratorOptions, RewriteConfig
from jsfold.frontend.parser import parse
from jsfold.rewrite.fixpoint import FixpointRewriter, RewriteResult
from jsfold.rewrite.hoisting import (
    HoistReport,
    collapse_self_reassigning_factories,
    hoist_function_declarations,
)
from jsfold.rewrite.rules import RewriteRule
from jsfold.tree.nodes import Program
from jsfold.tree.walk import rename_identifier
from jsfold.utils.helpers import Timer, recursion_limit

logger = logging.getLogger(__name__)

# Left-nested `+` chains in string-table bundles go thousands of levels deep.
RECURSION_LIMIT = 50_000


@dataclass
class DeobfuscationResult:
    """Everything one session produced."""
    code: str
    compact_code: str
    tree: Program = field(repr=False)
    rewrite: RewriteResult
    hoist: HoistReport
    collapsed: List[str]
    renamed: Dict[str, int] = field(default_factory=dict)
    wall_time_seconds: float = 0.0


class Deobfuscator:
    """
    Parse, simplify and regenerate obfuscated JavaScript.

    Usage:
        deob = Deobfuscator(RewriteConfig(renames={'_0x3f2a': 'strings'}))
        result = deob.run(source)
        print(result.code)
    """

    def __init__(
        self,
        config: Optional[RewriteConfig] = None,
        generator_options=None,
        rules: Optional[Iterable[RewriteRule]] = None,
    ):
        self.config = config or RewriteConfig()
        self.generator_options = GeneratorOptions.coerce(generator_options)
        self._rules = list(rules) if rules is not None else None

    def transform(self, program: Program) -> DeobfuscationResult:
        """Run steps 2-6 on an already parsed program, editing it in place."""
        with Timer() as timer, recursion_limit(RECURSION_LIMIT):
            renamed = {}
            for old, new in self.config.renames.items():
                renamed[old] = rename_identifier(program, old, new)
                logger.debug("Renamed %d occurrences of %s to %s", renamed[old], old, new)

            rewriter = FixpointRewriter(self._rules, self.config)
            rewrite = rewriter.rewrite(program, SymbolTable())
            collapsed = collapse_self_reassigning_factories(program)
            hoist = hoist_function_declarations(program, self.config)

            compact_options = GeneratorOptions(
                compact=True,
                quote_style=self.generator_options.quote_style,
                indent_style='',
            )
            code = generate(program, self.generator_options)
            compact_code = generate(program, compact_options)

        logger.info(
            "Deobfuscated in %d passes (%d changes, %s)",
            rewrite.iterations, rewrite.total_changes, rewrite.status.name.lower(),
        )
        return DeobfuscationResult(
            code=code,
            compact_code=compact_code,
            tree=program,
            rewrite=rewrite,
            hoist=hoist,
            collapsed=collapsed,
            renamed=renamed,
            wall_time_seconds=timer.elapsed_s,
        )

    def run(self, source: str) -> DeobfuscationResult:
        """
        Deobfuscate *source*.

        Raises:
            ParseError: *source* is not valid JavaScript.
            UnsupportedNodeError: *source* uses syntax outside the node model.
            NonConvergenceError: strict mode only.
        """
        with recursion_limit(RECURSION_LIMIT):
            program = parse(source)
        return self.transform(program)


def deobfuscate(source: str, config: Optional[RewriteConfig] = None, generator_options=None) -> str:
    """Deobfuscate *source* and return the pretty-printed result."""
    return Deobfuscator(config, generator_options).run(source).code
