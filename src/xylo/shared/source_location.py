"""
Source Location (Span)

Line/column span of a construct in a xylo program, used by diagnostics.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Source location of an AST node or a diagnostic.

    Lines and columns are 1-based, as reported by Lark. `start`/`end` are
    character offsets into the source text; `end_line`/`end_column` are 0
    when the span end is unknown.
    """
    file: str
    line: int
    column: int
    start: int = 0
    end: int = 0
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"
