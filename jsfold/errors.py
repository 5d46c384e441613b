"""Exception types raised across jsfold."""

from typing import Optional, Tuple


class JsfoldError(Exception):
    """Base class for every error raised by jsfold."""


class StructuralError(JsfoldError):
    """A tree edit was requested that the node's position cannot support.

    The fixpoint driver treats this as fatal to a single rule application
    only: the rule is skipped for that node and the pass continues.
    """


class UnsupportedNodeError(JsfoldError):
    """A node kind outside the closed node model reached a rule, the
    driver, the parser adapter or the code generator."""

    def __init__(self, kind: str, loc: Optional[Tuple[int, int]] = None):
        self.kind = kind
        self.loc = loc
        where = f" at line {loc[0]}, column {loc[1]}" if loc else ""
        super().__init__(f"unsupported node kind {kind!r}{where}")


class NonConvergenceError(JsfoldError):
    """Raised instead of a warning when strict mode is enabled and the
    rewrite did not reach a fixed point within the iteration cap."""

    def __init__(self, iterations: int, last_changes: int):
        self.iterations = iterations
        self.last_changes = last_changes
        super().__init__(
            f"rewrite did not converge after {iterations} passes "
            f"({last_changes} changes in the last pass)"
        )


class NonConvergenceWarning(UserWarning):
    """Issued when the iteration cap is reached; the partially simplified
    tree is still returned."""


class ParseError(JsfoldError):
    """The input text is not valid ES5 source."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        super().__init__(message)
