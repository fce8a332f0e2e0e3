"""
Runtime

Thin facade over evaluation and rasterization: takes a compilation result
and per-run settings, returns the pixel buffer or the error. Used by the
CLI and the test-suite, which want errors as values.
"""

import logging
from dataclasses import replace
from typing import Any, List, Optional

import numpy as np

from ..backends.raster import render, validate_dimensions
from ..compiler.driver import CompilationResult
from ..geometry import Shape
from ..shared.errors import XyloError
from ..utils.config import GenerationConfig
from .evaluator import Evaluator

logger = logging.getLogger("xylo.runtime.runtime")


class ExecutionResult:
    """Outcome of one run: the image and the root shape, or the error."""

    def __init__(self, value: Optional[np.ndarray] = None, shape: Optional[Shape] = None,
                 error: Optional[Exception] = None, stats: Optional[dict] = None):
        self.value = value
        self.shape = shape
        self.error = error
        self.stats = stats if stats is not None else {}

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def errors(self) -> List[str]:
        if self.error:
            return [str(self.error)]
        return []


class XyloRuntime:
    """
    Runs compiled programs. Every `execute` gets a fresh evaluator, so no
    state leaks between runs.
    """

    def __init__(self, config: Optional[GenerationConfig] = None):
        self.config = config if config is not None else GenerationConfig()

    def execute(self, compilation_result: CompilationResult, config: Optional[GenerationConfig] = None,
                **overrides: Any) -> ExecutionResult:
        """
        Evaluate `root` and render it.

        Settings come from `config` (or the runtime's own), with keyword
        overrides: `seed`, `width`, `height`, `max_depth`.
        """
        settings = config if config is not None else self.config
        if overrides:
            settings = replace(settings, **overrides)
        if not compilation_result.success or compilation_result.program is None:
            return ExecutionResult(error=RuntimeError("Compilation failed"))

        try:
            validate_dimensions(settings.width, settings.height)
            evaluator = Evaluator(compilation_result.program, settings.seed,
                                  settings.width, settings.height, settings.max_depth)
            shape = evaluator.evaluate_root()
            pixels = render(shape, settings.width, settings.height)
        except XyloError as e:
            logger.debug("run failed: %s", e.message)
            return ExecutionResult(error=e)

        stats = {"calls": evaluator.calls, "depth": evaluator.deepest, "draws": evaluator.random.draws}
        logger.info("generated %dx%d image (seed %r): %d calls, depth %d",
                    settings.width, settings.height, settings.seed, stats["calls"], stats["depth"])
        return ExecutionResult(value=pixels, shape=shape, stats=stats)
