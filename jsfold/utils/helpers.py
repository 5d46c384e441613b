"""Utility helpers for jsfold."""

import sys
import time
from contextlib import contextmanager


class Timer:
    """High-resolution wall clock timer."""

    def __init__(self):
        self.start_ns = 0
        self.end_ns = 0

    def __enter__(self):
        self.start_ns = time.perf_counter_ns()
        return self

    def __exit__(self, *exc):
        self.end_ns = time.perf_counter_ns()

    @property
    def elapsed_ns(self) -> int:
        return self.end_ns - self.start_ns

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_ns / 1_000_000.0

    @property
    def elapsed_s(self) -> float:
        return self.elapsed_ns / 1_000_000_000.0


@contextmanager
def recursion_limit(limit: int):
    """
    Temporarily raise the interpreter recursion limit.

    Obfuscated sources often contain very long left-nested `+` chains, and
    the walker, the driver and the generator recurse once per nesting level.
    The limit is never lowered below its current value.
    """
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous, limit))
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


def format_duration(seconds: float) -> str:
    """Format a duration into a human-readable string."""
    ns = seconds * 1_000_000_000
    if ns < 1_000:
        return f"{ns:.0f} ns"
    elif ns < 1_000_000:
        return f"{ns / 1_000:.1f} µs"
    elif ns < 1_000_000_000:
        return f"{ns / 1_000_000:.2f} ms"
    else:
        return f"{ns / 1_000_000_000:.3f} s"
