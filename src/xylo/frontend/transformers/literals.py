"""
Literal Parser - numbers, hex colors and strings
"""

from lark.lexer import Token

from ...shared import ColorLiteral, Literal, ParseError, SourceLocation
from ...utils.config import (
    DECIMAL_SEPARATOR, HEX_PREFIX, SCIENTIFIC_NOTATION_INDICATOR, STRING_QUOTE_CHAR,
)

_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '"': '"', '\\': '\\', '0': '\0'}


class LiteralParser:
    """Turns literal tokens into AST nodes"""

    @staticmethod
    def parse_number(token: Token, location: SourceLocation) -> Literal:
        """Integers stay arbitrary-precision ints; a fraction or exponent makes a float"""
        text = str(token)
        if DECIMAL_SEPARATOR in text or SCIENTIFIC_NOTATION_INDICATOR in text.lower():
            return Literal(value=float(text), location=location)
        return Literal(value=int(text), location=location)

    @staticmethod
    def parse_hex_color(token: Token, location: SourceLocation) -> ColorLiteral:
        """0xRGB, 0xRGBA, 0xRRGGBB or 0xRRGGBBAA"""
        digits = str(token)[len(HEX_PREFIX):]
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) not in (6, 8):
            raise ParseError(
                f"invalid color literal `{token}`",
                location,
                help="use 0xRGB, 0xRGBA, 0xRRGGBB or 0xRRGGBBAA",
            )
        channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        if len(channels) == 3:
            channels.append(255)
        red, green, blue, alpha = channels
        return ColorLiteral(red, green, blue, alpha, location=location)

    @staticmethod
    def parse_string(token: Token, location: SourceLocation) -> Literal:
        body = str(token)
        if body.startswith(STRING_QUOTE_CHAR) and body.endswith(STRING_QUOTE_CHAR):
            body = body[1:-1]
        out = []
        chars = iter(body)
        for ch in chars:
            if ch == '\\':
                escaped = next(chars, '\\')
                out.append(_ESCAPES.get(escaped, escaped))
            else:
                out.append(ch)
        return Literal(value="".join(out), location=location)
