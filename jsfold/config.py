"""Configuration objects for a rewrite session and for code generation."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple, Union


@dataclass
class RewriteConfig:
    """
    Knobs for one rewrite session.

    Attributes:
        max_iterations: Hard cap on fixpoint passes before giving up.
        dedup_depth_threshold: Duplicate function declarations nested deeper
            than this are discarded by the hoisting pass; shallower ones are
            left in place and reported.
        deferred_callees: Callee names treated as "run this later" primitives
            by the zero-delay inlining rule.
        track_mutations: Skip capturing names that are written elsewhere.
        capture_partial_arrays: Also capture arrays holding non-literal
            elements, with those elements degraded to `undefined`.
        splice_blocks: Splice a surviving if-branch block into the enclosing
            statement list instead of keeping the braces.
        disabled_rules: Names of rules to leave out of the default set.
        prune_names: Declarations and call statements of these names are
            deleted outright.
        renames: Identifiers renamed before rewriting starts.
        strict: Raise NonConvergenceError instead of warning.
    """
    max_iterations: int = 100
    dedup_depth_threshold: int = 100
    deferred_callees: Tuple[str, ...] = ('setTimeout',)
    track_mutations: bool = True
    capture_partial_arrays: bool = False
    splice_blocks: bool = True
    disabled_rules: Tuple[str, ...] = ()
    prune_names: Tuple[str, ...] = ()
    renames: Dict[str, str] = field(default_factory=dict)
    strict: bool = False

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.dedup_depth_threshold < 0:
            raise ValueError(
                f"dedup_depth_threshold must be non-negative, got {self.dedup_depth_threshold}"
            )
        self.deferred_callees = tuple(self.deferred_callees)
        self.disabled_rules = tuple(self.disabled_rules)
        self.prune_names = tuple(self.prune_names)


QUOTE_STYLES = ('single', 'double')


@dataclass
class GeneratorOptions:
    """Code generation options.

    Attributes:
        compact: Emit minimal whitespace.
        quote_style: 'single' or 'double' quotes for string literals.
        indent_style: Text used for one level of indentation.
    """
    compact: bool = False
    quote_style: str = 'single'
    indent_style: str = '    '

    def __post_init__(self):
        if self.quote_style not in QUOTE_STYLES:
            raise ValueError(
                f"quote_style must be one of {QUOTE_STYLES}, got {self.quote_style!r}"
            )

    @classmethod
    def coerce(cls, options: Union['GeneratorOptions', Mapping[str, Any], None]) -> 'GeneratorOptions':
        """Accept an instance, None, or a mapping using either
        ``quote_style`` or ``quoteStyle`` spellings."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        aliases = {'quoteStyle': 'quote_style', 'indentStyle': 'indent_style'}
        kwargs = {aliases.get(key, key): value for key, value in dict(options).items()}
        return cls(**kwargs)

