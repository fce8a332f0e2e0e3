"""
xylo AST Transformers
=====================

Specialized transformers for different AST node types.
"""

from .base import XyloTransformer
from .literals import LiteralParser
from .expressions import BinaryExpressionParser
from .definitions import DefinitionParser

__all__ = [
    'XyloTransformer',
    'LiteralParser',
    'BinaryExpressionParser',
    'DefinitionParser',
]
