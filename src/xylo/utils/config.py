"""
Configuration constants to replace magic numbers throughout xylo
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Union

# Program structure
ENTRY_POINT_NAME = "root"
SOURCE_FILE_EXTENSION = ".xylo"
DEFAULT_SOURCE_NAME = "<input>"

# Parser configuration constants (cache under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "xylo_grammar.lark.cache")
INDENT_TAB_LENGTH = 4

# Literal constants
STRING_QUOTE_CHAR = '"'
HEX_PREFIX = "0x"
DECIMAL_SEPARATOR = "."
SCIENTIFIC_NOTATION_INDICATOR = "e"
DEFAULT_DEFINITION_WEIGHT = 1.0

# Evaluation
DEFAULT_MAX_DEPTH = 20000  # nested user-function calls before RecursionLimitExceeded
MAX_INT_BITS = 1 << 20  # size of the largest integer `*` and `**` may produce

# Determinism
DEFAULT_SEED = 0
SEED_DIGEST_BYTES = 16  # Philox keys are 128-bit
NOISE_TABLE_SIZE = 256

# Rasterization
SUPERSAMPLE_FACTOR = 4  # per-axis subsamples per pixel for anti-aliasing
MIN_CIRCLE_SEGMENTS = 16
MAX_CIRCLE_SEGMENTS = 512
CIRCLE_SEGMENT_PIXELS = 2.0  # target device-space length of one circle segment
DEFAULT_COLOR_RGBA = (1.0, 1.0, 1.0, 1.0)
DEFAULT_STROKE_WIDTH = 0.05  # shape units, scaled with the primitive
DEFAULT_MITER_LIMIT = 4.0  # miter length over line width, as in SVG

# CLI
DEFAULT_CANVAS_SIZE = 512
DEFAULT_OUTPUT_SUFFIX = ".png"

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"


@dataclass(frozen=True)
class GenerationConfig:
    """Per-run settings handed from the CLI/tests to the runtime."""
    seed: Union[int, str] = DEFAULT_SEED
    width: int = DEFAULT_CANVAS_SIZE
    height: int = DEFAULT_CANVAS_SIZE
    max_depth: int = DEFAULT_MAX_DEPTH
