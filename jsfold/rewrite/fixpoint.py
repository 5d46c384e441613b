"""
Fixpoint Driver
===============

Applies the rule set to a tree until nothing changes.

One pass is a pre-order walk of the whole tree. At each node every enabled
rule whose node types match is tried in catalog order:

    - a replacement becomes the current node for the rules that follow it,
      and its children are walked afterwards;
    - spliced statements take the node's place in its list and are walked
      as fresh nodes;
    - a removed node ends processing of that position.

A pass keeps a visited set keyed by node identity so that a node reachable
again after an edit is processed at most once per pass.

Passes repeat while the previous pass changed the tree or taught the symbol
table a new name. Termination is not proven for arbitrary rule sets, so the
loop is bounded by ``RewriteConfig.max_iterations``; hitting the bound is
reported as ``ConvergenceStatus.MAX_ITERATIONS`` with the partially
simplified tree left in place.
"""

import logging
import warnings
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from jsfold.analysis.mutations import collect_mutated_names
from jsfold.analysis.symbols import SymbolTable
from jsfold.config import RewriteConfig
from jsfold.errors import NonConvergenceError, NonConvergenceWarning, StructuralError
from jsfold.rewrite.rules import RewriteRule, RuleContext, Signal, default_rules
from jsfold.tree.nodes import Node
from jsfold.tree.path import NodePath
from jsfold.tree.walk import check_node
from jsfold.utils.helpers import Timer

logger = logging.getLogger(__name__)


class ConvergenceStatus(Enum):
    """Status of fixpoint iteration."""
    CONVERGED = auto()           # A pass made no change
    MAX_ITERATIONS = auto()      # Iteration cap reached while still changing


@dataclass
class PassStats:
    """Counters for a single traversal pass."""
    changes: int = 0
    facts: int = 0
    skipped: int = 0
    visited: int = 0


@dataclass
class RewriteResult:
    """Outcome of a fixpoint rewrite session."""
    status: ConvergenceStatus
    iterations: int
    changes_history: List[int]
    total_changes: int
    facts_learned: int
    skipped_applications: int
    rule_applications: Dict[str, int]
    wall_time_seconds: float
    symbols: SymbolTable = field(repr=False, default_factory=SymbolTable)

    @property
    def converged(self) -> bool:
        return self.status is ConvergenceStatus.CONVERGED


class _Pass:
    """One pre-order walk applying every rule at every node."""

    def __init__(
        self,
        rules: List[RewriteRule],
        symbols: SymbolTable,
        config: RewriteConfig,
        mutated: FrozenSet[str],
    ):
        self.rules = rules
        self.symbols = symbols
        self.config = config
        self.mutated = mutated
        self.visited: Set[Node] = set()
        self.stats = PassStats()

    def visit(self, path: NodePath) -> None:
        node = path.node
        if node in self.visited:
            return
        check_node(node)
        self.visited.add(node)
        self.stats.visited += 1

        for rule in self.rules:
            if not rule.matches(node):
                continue
            ctx = RuleContext(path, self.symbols, self.config, self.mutated)
            try:
                outcome = rule.apply(node, ctx)
                if outcome is None:
                    continue
                if outcome is Signal.NOTED:
                    rule.applications += 1
                    self.stats.facts += 1
                    continue
                if outcome is Signal.REMOVE:
                    path.remove()
                elif isinstance(outcome, list):
                    path.replace_with_many(outcome)
                else:
                    path.replace(outcome)
            except StructuralError as exc:
                self.stats.skipped += 1
                logger.debug("Skipping rule %s on %s: %s", rule.name, node.type, exc)
                continue

            rule.applications += 1
            self.stats.changes += 1
            if path.removed:
                return
            node = path.node
            check_node(node)
            self.visited.add(node)

        self._visit_children(path)

    def _visit_children(self, path: NodePath) -> None:
        node = path.node
        for name in node._fields:
            value = getattr(node, name)
            if isinstance(value, list):
                self._visit_list(node, name, value, path)
            elif value is not None:
                self.visit(NodePath(value, node, name, None, path))

    def _visit_list(self, owner: Node, name: str, items: list, parent_path: NodePath) -> None:
        i = 0
        while i < len(items):
            item = items[i]
            if item is None:
                i += 1
                continue
            child_path = NodePath(item, owner, name, i, parent_path)
            self.visit(child_path)
            # Removed or spliced: whatever now sits at index i is unvisited.
            if not child_path.removed:
                i += 1


class FixpointRewriter:
    """
    Runs rewrite passes over a tree until a fixed point is reached.

    Usage:
        rewriter = FixpointRewriter(config=RewriteConfig(max_iterations=50))
        result = rewriter.rewrite(program)
        if not result.converged:
            ...  # program is simplified as far as the cap allowed
    """

    def __init__(
        self,
        rules: Optional[Iterable[RewriteRule]] = None,
        config: Optional[RewriteConfig] = None,
    ):
        self.config = config or RewriteConfig()
        self.rules = list(rules) if rules is not None else default_rules(self.config)

    def run_pass(self, tree: Node, symbols: SymbolTable) -> PassStats:
        """Perform a single traversal pass over *tree*."""
        mutated = frozenset(collect_mutated_names(tree)) if self.config.track_mutations else frozenset()
        walker = _Pass(self.rules, symbols, self.config, mutated)
        walker.visit(NodePath(tree))
        return walker.stats

    def rewrite(self, tree: Node, symbols: Optional[SymbolTable] = None) -> RewriteResult:
        """
        Rewrite *tree* in place until no rule fires.

        Args:
            tree: Root node, normally a Program.
            symbols: Symbol table to use; a fresh one is created if omitted.

        Returns:
            RewriteResult with per-pass change counts and per-rule totals.

        Raises:
            UnsupportedNodeError: a node outside the node model was reached.
            NonConvergenceError: only in strict mode, when the cap is hit.
        """
        symbols = symbols if symbols is not None else SymbolTable()
        check_node(tree)
        before = {rule.name: rule.applications for rule in self.rules}

        history: List[int] = []
        facts = 0
        skipped = 0
        status = ConvergenceStatus.MAX_ITERATIONS
        with Timer() as timer:
            for iteration in range(1, self.config.max_iterations + 1):
                stats = self.run_pass(tree, symbols)
                history.append(stats.changes)
                facts += stats.facts
                skipped += stats.skipped
                logger.debug(
                    "Pass %d: %d changes, %d new facts, %d skipped, %d nodes",
                    iteration, stats.changes, stats.facts, stats.skipped, stats.visited,
                )
                if stats.changes == 0 and stats.facts == 0:
                    status = ConvergenceStatus.CONVERGED
                    break

        applications = {
            rule.name: rule.applications - before.get(rule.name, 0)
            for rule in self.rules
        }
        result = RewriteResult(
            status=status,
            iterations=len(history),
            changes_history=history,
            total_changes=sum(history),
            facts_learned=facts,
            skipped_applications=skipped,
            rule_applications=applications,
            wall_time_seconds=timer.elapsed_s,
            symbols=symbols,
        )

        if status is ConvergenceStatus.MAX_ITERATIONS:
            last = history[-1] if history else 0
            if self.config.strict:
                raise NonConvergenceError(result.iterations, last)
            logger.warning(
                "Rewrite stopped after %d passes without reaching a fixed point "
                "(%d changes in the last pass)", result.iterations, last,
            )
            warnings.warn(
                f"rewrite did not converge after {result.iterations} passes",
                NonConvergenceWarning,
                stacklevel=2,
            )
        else:
            logger.debug(
                "Converged after %d passes with %d changes",
                result.iterations, result.total_changes,
            )
        return result
