"""
Operator and primitive kinds shared by the parser, evaluator and renderer.
"""

from enum import Enum


class BinaryOp(Enum):
    """Binary operators, valued by their surface spelling."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POW = "**"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    AND = "&&"
    OR = "||"
    RANGE = ".."
    RANGE_INCLUSIVE = "..="
    CONCAT = "++"
    PREPEND = "+>"
    APPEND = "<+"
    COMPOSE = ":"


class UnaryOp(Enum):
    NEG = "-"
    NOT = "!"


class ShapeKind(Enum):
    """
    Primitive shape kinds.

    EMPTY is listed for the surface literal only; it evaluates to the
    `Empty` shape, never to a primitive. PATH has no literal; it is built
    by the path builtins (`move_to`, `line_to`, ...).
    """
    SQUARE = "SQUARE"
    CIRCLE = "CIRCLE"
    TRIANGLE = "TRIANGLE"
    FILL = "FILL"
    EMPTY = "EMPTY"
    PATH = "PATH"


class BlendMode(Enum):
    """How a primitive's color combines with what is already painted."""
    SOURCE_OVER = "source_over"
    DESTINATION_OVER = "destination_over"
    CLEAR = "clear"
    SOURCE = "source"
    DESTINATION = "destination"
    SOURCE_IN = "source_in"
    DESTINATION_IN = "destination_in"
    SOURCE_OUT = "source_out"
    DESTINATION_OUT = "destination_out"
    SOURCE_ATOP = "source_atop"
    DESTINATION_ATOP = "destination_atop"
    XOR = "xor"
    PLUS = "plus"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    DARKEN = "darken"
    LIGHTEN = "lighten"
    COLOR_DODGE = "color_dodge"
    COLOR_BURN = "color_burn"
    HARD_LIGHT = "hard_light"
    SOFT_LIGHT = "soft_light"
    DIFFERENCE = "difference"
    EXCLUSION = "exclusion"


class FillRule(Enum):
    WINDING = "winding"
    EVEN_ODD = "even_odd"


class LineCap(Enum):
    BUTT = "butt"
    ROUND = "round"
    SQUARE = "square"


class LineJoin(Enum):
    MITER = "miter"
    ROUND = "round"
    BEVEL = "bevel"
