"""
xylo: a small functional language for generative art.

    import xylo

    pixels = xylo.generate('''
    root = FILL : petals 12
    petals n = collect (for i in 0..n -> rotate (i * 360 / n) (t 0.5 0 (ss 0.2 CIRCLE)))
    ''', seed=7, width=256, height=256)

`pixels` is a (height, width, 4) uint8 RGBA array. The same program, seed
and size always give the same bytes.
"""

from typing import Optional, Union

import numpy as np

from .backends.raster import render, validate_dimensions
from .compiler.driver import CompilationResult, XyloCompiler
from .runtime.determinism import Seed
from .runtime.evaluator import Evaluator, evaluate
from .runtime.runtime import ExecutionResult, XyloRuntime
from .shared import (
    ArityMismatch, DivisionByZero, InvalidDimensions, ParseError, Program, RecursionLimitExceeded,
    TypeMismatch, UndefinedName, XyloError, XyloRuntimeError,
)
from .utils.config import DEFAULT_MAX_DEPTH, DEFAULT_SOURCE_NAME, GenerationConfig

__version__ = "0.3.0"

_compiler: Optional[XyloCompiler] = None


def _default_compiler() -> XyloCompiler:
    global _compiler
    if _compiler is None:
        _compiler = XyloCompiler()
    return _compiler


def parse(source: str, source_file: str = DEFAULT_SOURCE_NAME) -> Program:
    """Parse and validate a program. Raises ParseError or TypeMismatch."""
    return _default_compiler().load(source, source_file)


def generate(program: Union[str, Program], seed: Seed = 0, width: int = 512, height: int = 512,
             max_depth: int = DEFAULT_MAX_DEPTH) -> np.ndarray:
    """
    Evaluate `root` and rasterize it.

    `program` is source text or an already parsed Program. Dimensions are
    checked before anything is parsed or evaluated. Raises on any error;
    there is no partial image.
    """
    validate_dimensions(width, height)
    if isinstance(program, str):
        program = parse(program)
    shape = Evaluator(program, seed, width, height, max_depth).evaluate_root()
    return render(shape, width, height)


__all__ = [
    "parse", "evaluate", "render", "generate", "Evaluator",
    "XyloCompiler", "CompilationResult", "XyloRuntime", "ExecutionResult", "GenerationConfig",
    "Program", "XyloError", "XyloRuntimeError", "ParseError", "UndefinedName", "ArityMismatch",
    "TypeMismatch", "DivisionByZero", "RecursionLimitExceeded", "InvalidDimensions",
]
