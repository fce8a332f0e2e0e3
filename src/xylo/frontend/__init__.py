"""
Frontend: program text to AST.
"""

from .parser import Parser, XyloIndenter

__all__ = ['Parser', 'XyloIndenter']
