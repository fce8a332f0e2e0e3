"""
Rasterizer Interface

The bridge walks shapes and composites colors; turning polygons into
per-pixel coverage is delegated to a `Rasterizer`.
"""

from abc import ABC, abstractmethod
from typing import NamedTuple, Sequence

import numpy as np


class Coverage(NamedTuple):
    """Coverage in 0..1 for the canvas window starting at (top, left)."""
    top: int
    left: int
    values: np.ndarray


class Rasterizer(ABC):
    """
    Scan-conversion primitive.

    Implementations must be deterministic: the same polygons and canvas size
    always give bit-identical coverage.
    """

    @abstractmethod
    def coverage(self, polygons: Sequence[np.ndarray], width: int, height: int,
                 even_odd: bool = False, anti_alias: bool = True) -> Coverage:
        """
        Coverage of a set of closed polygons.

        Each polygon is an (N, 2) array of device coordinates, x to the right
        and y down, pixel (i, j) spanning [j, j + 1] x [i, i + 1]. Polygons
        combine by union, or by exclusive-or when `even_odd` is set. Without
        `anti_alias` every pixel is either covered or not. The result window
        is clipped to the canvas and may be empty.
        """
        raise NotImplementedError
