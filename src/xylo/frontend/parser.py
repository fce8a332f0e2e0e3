"""
Parser

Source text -> AST (`Program`). Lark LALR parser with an indentation-aware
post-lexer; failures are reported as `ParseError` with line and column, and
no partial tree is ever returned.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from lark import Lark, Token
from lark.exceptions import LarkError, UnexpectedInput, VisitError
from lark.indenter import DedentError, Indenter

from ..shared.errors import ParseError, XyloSourceError
from ..shared.nodes import Program
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_PARSER_CACHE_FILE, DEFAULT_SOURCE_NAME, INDENT_TAB_LENGTH
from .transformers.base import XyloTransformer

logger = logging.getLogger("xylo.frontend.parser")


class XyloIndenter(Indenter):
    """
    Indentation post-lexer.

    On top of Lark's INDENT/DEDENT tracking:
    - a newline followed by a continuation token (`else`, `then`, `->`, `:`,
      `|>`) that does not dedent is dropped, so the line continues the
      previous one;
    - every _DEDENT is followed by a synthetic _NL, so a construct ending in
      an indented block is terminated like a single-line one.
    """
    NL_type = '_NL'
    OPEN_PAREN_types = ['_LPAR', '_LSQB']
    CLOSE_PAREN_types = ['_RPAR', '_RSQB']
    INDENT_type = '_INDENT'
    DEDENT_type = '_DEDENT'
    CONTINUATION_types = frozenset(['_ELSE', '_THEN', '_ARROW', '_COLON', '_PIPE'])
    tab_len = INDENT_TAB_LENGTH
    last_newline: Optional[Token] = None

    def _indent_of(self, token: Token) -> int:
        indent_str = token.rsplit('\n', 1)[-1]
        return indent_str.count(' ') + indent_str.count('\t') * self.tab_len

    def _join_continuations(self, stream: Iterator[Token]) -> Iterator[Token]:
        pending: Optional[Token] = None
        for token in stream:
            if pending is not None:
                joins = (
                    token.type in self.CONTINUATION_types
                    and (self.paren_level > 0 or self._indent_of(pending) >= self.indent_level[-1])
                )
                if not joins:
                    yield pending
                pending = None
            if token.type == self.NL_type:
                pending = token
            else:
                yield token
        if pending is not None:
            yield pending

    def _close_blocks(self, stream: Iterator[Token]) -> Iterator[Token]:
        dedent: Optional[Token] = None
        for token in stream:
            if dedent is not None and token.type not in self.CONTINUATION_types:
                yield Token.new_borrow_pos(self.NL_type, '', dedent)
            dedent = token if token.type == self.DEDENT_type else None
            yield token
        if dedent is not None:
            yield Token.new_borrow_pos(self.NL_type, '', dedent)

    def handle_NL(self, token: Token) -> Iterator[Token]:
        self.last_newline = token
        return super().handle_NL(token)

    def process(self, stream):
        self.paren_level = 0
        self.indent_level = [0]
        self.last_newline = None
        return self._close_blocks(self._process(self._join_continuations(stream)))


class Parser:
    """
    Parser for xylo programs.

    One instance can parse many sources; the Lark tables are built once and
    cached on disk between processes.
    """

    def __init__(self, cache_file: Optional[str] = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / "grammar.lark"
        self.indenter = XyloIndenter()
        self.parser = Lark.open(
            str(grammar_path),
            start='program',
            parser='lalr',
            lexer='basic',              # the post-lexer looks one token ahead
            postlex=self.indenter,
            cache=cache_file if cache_file else False,
            propagate_positions=True,
            maybe_placeholders=False,
        )
        self.transformer = XyloTransformer()
        logger.debug("grammar loaded from %s", grammar_path)

    def parse(self, source: str, source_file: str = DEFAULT_SOURCE_NAME) -> Program:
        """
        Parse source code to a Program.

        Raises ParseError on malformed input.
        """
        text = source if source.endswith("\n") else source + "\n"
        try:
            self.transformer.current_file = source_file
            tree = self.parser.parse(text)
            program = self.transformer.transform(tree)
        except VisitError as e:
            if isinstance(e.orig_exc, XyloSourceError):
                error = e.orig_exc
                if error.source_code is None:
                    error.source_code = source
                raise error from None
            raise ParseError(f"malformed program: {e.orig_exc}", None, source_code=source) from e
        except UnexpectedInput as e:
            raise self._convert_error(e, source, source_file) from e
        except DedentError as e:
            raise self._layout_error(e, source, source_file) from e
        except LarkError as e:
            raise ParseError(f"malformed program: {e}", None, source_code=source) from e

        program.source = source
        logger.debug("parsed %d definitions from %s", len(program.definitions), source_file)
        return program

    def _convert_error(self, e: UnexpectedInput, source: str, source_file: str) -> ParseError:
        line = getattr(e, 'line', -1)
        column = getattr(e, 'column', -1)
        if line is None or line < 1:
            lines = source.rstrip("\n").split("\n")
            line, column = len(lines), len(lines[-1]) + 1
        location = SourceLocation(file=source_file, line=line, column=max(column or 1, 1))

        token = getattr(e, 'token', None)
        if token is not None:
            if token.type == '$END':
                message = "unexpected end of input"
            elif token.type in ('_NL', '_INDENT', '_DEDENT'):
                message = "unexpected line break or indentation"
            else:
                message = f"unexpected `{token}`"
        elif getattr(e, 'char', None):
            message = f"unexpected character `{e.char}`"
        else:
            message = "syntax error"

        expected = sorted(getattr(e, 'expected', None) or getattr(e, 'allowed', None) or [])
        note = f"expected one of: {', '.join(expected[:8])}" if expected else None
        return ParseError(message, location, source_code=source, note=note)

    def _layout_error(self, e: DedentError, source: str, source_file: str) -> ParseError:
        """Point at the first token of the line whose indentation matches no open block."""
        token = self.indenter.last_newline
        if token is None:
            return ParseError(f"invalid layout: {e}", None, source_code=source)
        column = self.indenter._indent_of(token) + 1
        location = SourceLocation(file=source_file, line=token.end_line, column=column)
        return ParseError(
            "unindent does not match any outer indentation level", location,
            source_code=source, note=str(e),
        )
