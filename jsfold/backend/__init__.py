"""
Backend: jsfold trees back to JavaScript source text.
"""

from jsfold.backend.codegen import CodeGenerator, generate

__all__ = ['CodeGenerator', 'generate']
