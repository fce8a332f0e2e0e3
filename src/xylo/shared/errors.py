"""
Error Reporting

Diagnostics for xylo programs, rendered in the rustc style:

    error[E0061]: `petal` takes 1 argument but 2 were given
     --> flower.xylo:4:11
      |
    4 | root = petal 3 4
      |        ^^^^^
      |
      = help: remove the extra argument

Every failure is surfaced as an exception from this module. Nothing is
recovered locally and there are no warnings.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .source_location import SourceLocation


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set or XYLO_COLOR says so)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get("XYLO_COLOR", "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    if explicit in ("1", "true", "yes", "always"):
        return True
    return sys.stderr.isatty()


_BOLD = "\033[1m"
_RED = "\033[31m"
_BLUE = "\033[34m"
_CYAN = "\033[36m"
_RESET = "\033[0m"


def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color or not codes:
        return text
    return "".join(codes) + text + _RESET


# ---------------------------------------------------------------------------
# Diagnostic record and formatter
# ---------------------------------------------------------------------------

@dataclass
class Error:
    """A single diagnostic."""
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


def _caret_width(code_line: str, col_start: int, location: SourceLocation) -> int:
    if location.end_line == location.line and location.end_column > location.column:
        return location.end_column - location.column
    width = 0
    for ch in code_line[col_start:]:
        if ch in " \t()[],;":
            break
        width += 1
    return max(1, width)


def _format_diagnostic(error: Error, source_files: Dict[str, str], color: bool = False) -> str:
    """Render one diagnostic, with a source snippet when the file text is known."""
    code_str = f"[{error.code}]" if error.code else ""
    out: List[str] = [
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    ]

    loc = error.location
    gutter = 1
    if loc is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
    else:
        source = source_files.get(loc.file)
        src_lines = source.split("\n") if source is not None else []
        if 1 <= loc.line <= len(src_lines):
            gutter = len(str(loc.line))
            pad = " " * gutter
            code_line = src_lines[loc.line - 1]
            col_start = max(loc.column, 1) - 1
            carets = " " * col_start + "^" * _caret_width(code_line, col_start, loc)
            if error.label:
                carets += f" {error.label}"
            out.append(_style(f"{pad}--> ", _BOLD, _BLUE, color=color) + str(loc))
            out.append(_style(f"{pad} |", _BOLD, _BLUE, color=color))
            out.append(_style(f"{loc.line} | ", _BOLD, _BLUE, color=color) + code_line)
            out.append(_style(f"{pad} | ", _BOLD, _BLUE, color=color) + _style(carets, _BOLD, _RED, color=color))
        else:
            out.append(_style(" --> ", _BOLD, _BLUE, color=color) + str(loc))

    if error.help or error.note:
        pad = " " * (gutter + 1)
        out.append(_style(f"{pad}|", _BOLD, _BLUE, color=color))
        if error.help:
            out.append(_style(f"{pad}= ", _BOLD, _CYAN, color=color) + _style("help: ", _BOLD, color=color) + error.help)
        if error.note:
            out.append(_style(f"{pad}= ", _BOLD, _CYAN, color=color) + _style("note: ", _BOLD, color=color) + error.note)
    return "\n".join(out)


class ErrorReporter:
    """Collects diagnostics for one compilation/run and formats them."""

    def __init__(self, source_files: Optional[Dict[str, str]] = None):
        self.source_files = dict(source_files or {})
        self.errors: List[Error] = []

    def report_error(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        note: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(message=message, location=location, code=code,
                                 help=help, note=note, label=label))

    def report_exception(self, exc: "XyloError") -> None:
        """Record a raised xylo error as a diagnostic."""
        if isinstance(exc, XyloSourceError):
            if exc.source_code is not None and exc.location is not None:
                self.source_files.setdefault(exc.location.file, exc.source_code)
            self.report_error(exc.message, exc.location, code=exc.error_code,
                              help=exc.help_text, note=exc.note_text, label=exc.label_text)
        else:
            self.report_error(exc.message, exc.location)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use_color = _use_color() if color is None else color
        return _format_diagnostic(error, self.source_files, color=use_color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        use_color = _use_color() if color is None else color
        parts = [self.format_error(e, color=use_color) for e in self.errors]
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(_style("error", _BOLD, _RED, color=use_color) + _style(f": {summary}", _BOLD, color=use_color))
        return "\n\n".join(parts)

    def print_errors(self) -> None:
        if self.errors:
            print(self.format_all_errors(), file=sys.stderr)


# ============================================================================
# Exception Classes
# ============================================================================

class XyloError(Exception):
    """Base exception for all xylo errors"""

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self):
        if self.location:
            return f"{self.message} ({self.location})"
        return self.message


class XyloSourceError(XyloError):
    """
    Error in a xylo program, parse-time or run-time, with rich formatting.

    `str()` renders the full diagnostic; `.message` is the bare message.
    """

    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 error_code: str = "E0001",
                 category: str = "runtime",
                 source_code: Optional[str] = None,
                 help: Optional[str] = None,
                 note: Optional[str] = None,
                 label: Optional[str] = None):
        super().__init__(message, location)
        self.error_code = error_code
        self.category = category
        self.source_code = source_code
        self.help_text = help
        self.note_text = note
        self.label_text = label

    def to_diagnostic(self) -> Error:
        return Error(message=self.message, location=self.location, code=self.error_code,
                     help=self.help_text, note=self.note_text, label=self.label_text)

    def __str__(self):
        source_files: Dict[str, str] = {}
        if self.source_code is not None and self.location is not None:
            source_files[self.location.file] = self.source_code
        return _format_diagnostic(self.to_diagnostic(), source_files, color=False)


class ParseError(XyloSourceError):
    """Malformed program text. Never partially recovered."""

    def __init__(self, message: str, location: Optional[SourceLocation] = None, **kwargs):
        kwargs.setdefault("error_code", "E0001")
        kwargs.setdefault("category", "syntax")
        super().__init__(message, location, **kwargs)

    @property
    def line(self) -> int:
        return self.location.line if self.location else 0

    @property
    def column(self) -> int:
        return self.location.column if self.location else 0


class RuntimeErrorKind(Enum):
    UNDEFINED_NAME = "undefined_name"
    ARITY_MISMATCH = "arity_mismatch"
    TYPE_MISMATCH = "type_mismatch"
    DIVISION_BY_ZERO = "division_by_zero"
    RECURSION_LIMIT_EXCEEDED = "recursion_limit_exceeded"
    INVALID_DIMENSIONS = "invalid_dimensions"


class XyloRuntimeError(XyloSourceError):
    """
    Evaluation failure.

    `context` names the definition or call site being evaluated when the
    error was raised; the evaluator fills it in on the way out when the
    raising site did not know it.
    """
    kind: RuntimeErrorKind = RuntimeErrorKind.TYPE_MISMATCH
    default_code = "E0308"

    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 context: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", self.default_code)
        kwargs.setdefault("category", "runtime")
        super().__init__(message, location, **kwargs)
        self.context = context
        if context and not self.note_text:
            self.note_text = f"while evaluating `{context}`"

    def with_context(self, context: str, location: Optional[SourceLocation] = None,
                     source_code: Optional[str] = None) -> "XyloRuntimeError":
        if self.context is None:
            self.context = context
            if not self.note_text:
                self.note_text = f"while evaluating `{context}`"
        if self.location is None and location is not None:
            self.location = location
        if self.source_code is None:
            self.source_code = source_code
        return self


class UndefinedName(XyloRuntimeError):
    kind = RuntimeErrorKind.UNDEFINED_NAME
    default_code = "E0425"

    def __init__(self, name: str, location: Optional[SourceLocation] = None, **kwargs):
        kwargs.setdefault("label", "not found in this scope")
        super().__init__(f"cannot find `{name}` in this scope", location, **kwargs)
        self.name = name


class ArityMismatch(XyloRuntimeError):
    kind = RuntimeErrorKind.ARITY_MISMATCH
    default_code = "E0061"

    def __init__(self, name: str, expected: int, given: int,
                 location: Optional[SourceLocation] = None, **kwargs):
        plural = "argument" if expected == 1 else "arguments"
        verb = "was" if given == 1 else "were"
        super().__init__(f"`{name}` takes {expected} {plural} but {given} {verb} given", location, **kwargs)
        self.name = name
        self.expected = expected
        self.given = given


class TypeMismatch(XyloRuntimeError):
    kind = RuntimeErrorKind.TYPE_MISMATCH
    default_code = "E0308"


class DivisionByZero(XyloRuntimeError):
    kind = RuntimeErrorKind.DIVISION_BY_ZERO
    default_code = "E0080"

    def __init__(self, message: str = "attempt to divide by zero", location: Optional[SourceLocation] = None, **kwargs):
        super().__init__(message, location, **kwargs)


class RecursionLimitExceeded(XyloRuntimeError):
    kind = RuntimeErrorKind.RECURSION_LIMIT_EXCEEDED
    default_code = "E0275"

    def __init__(self, limit: int, location: Optional[SourceLocation] = None, **kwargs):
        kwargs.setdefault("help", "add a base case or raise the recursion ceiling (--max-depth)")
        super().__init__(f"recursion limit of {limit} calls exceeded", location, **kwargs)
        self.limit = limit


class InvalidDimensions(XyloRuntimeError):
    kind = RuntimeErrorKind.INVALID_DIMENSIONS
    default_code = "E0600"

    def __init__(self, width, height, **kwargs):
        super().__init__(f"canvas dimensions must be positive integers, got {width}x{height}", None, **kwargs)
        self.width = width
        self.height = height


class XyloImplementationError(Exception):
    """
    Bug in the interpreter itself, never in the user's program.
    """

    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
