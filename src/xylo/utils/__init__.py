"""
xylo utilities package
"""

from .io_utils import read_source_file, write_png

__all__ = ["read_source_file", "write_png"]
