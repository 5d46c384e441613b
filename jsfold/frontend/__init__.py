"""
Frontend: JavaScript source text to jsfold trees.
"""

from jsfold.frontend.parser import EstreeConverter, parse

__all__ = ['EstreeConverter', 'parse']
