"""
Rasterization bridge.

`render(shape, width, height)` paints a finished shape into an RGBA buffer:

- shape space has its origin at the canvas center, y up, and one unit is
  half the smaller canvas dimension, so `translate 0.5 0 SQUARE` on a
  100x100 canvas covers x 50..100, y 25..75;
- primitives are painted by ascending z value and, for equal z, in tree
  order, later on top;
- each primitive is filled or stroked, then composited into a float64
  premultiplied accumulator with its blend mode (source-over by default);
- FILL covers every pixel whatever its transform;
- the result is (height, width, 4) uint8 with straight alpha, transparent
  where nothing was painted.

Polygon scan conversion uses Pillow on a supersampled mask.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np
from PIL import Image, ImageDraw

from ..geometry import Affine, Color, Primitive, Shape, Stroke, outline_polygons, walk
from ..shared.errors import InvalidDimensions
from ..shared.types import BlendMode, ShapeKind
from ..utils.config import (
    CIRCLE_SEGMENT_PIXELS, MAX_CIRCLE_SEGMENTS, MIN_CIRCLE_SEGMENTS, SUPERSAMPLE_FACTOR,
)
from .base import Coverage, Rasterizer
from .blend import CLEARING_MODES, blend

logger = logging.getLogger("xylo.backends.raster")

# keeps far off-canvas vertices inside Pillow's integer coordinate range
_COORDINATE_LIMIT = 1.0e7


def validate_dimensions(width, height) -> None:
    for size in (width, height):
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise InvalidDimensions(width, height)


def device_transform(width: int, height: int) -> Affine:
    """Shape space -> device pixels: centered, y up, unit = min(w, h) / 2."""
    unit = min(width, height) / 2.0
    return Affine(sx=unit, sy=-unit, tx=width / 2.0, ty=height / 2.0)


def circle_segments(matrix: Affine, radius: float = 0.5) -> int:
    """Segments for a circle of `radius` local units, about CIRCLE_SEGMENT_PIXELS each on screen."""
    wanted = 2.0 * math.pi * radius * matrix.scale_factor() / CIRCLE_SEGMENT_PIXELS
    if not math.isfinite(wanted):
        return MAX_CIRCLE_SEGMENTS
    return int(min(max(math.ceil(wanted), MIN_CIRCLE_SEGMENTS), MAX_CIRCLE_SEGMENTS))


class PillowRasterizer(Rasterizer):
    """Pillow polygon fill at `factor` x `factor` samples per pixel."""

    def __init__(self, factor: int = SUPERSAMPLE_FACTOR):
        self.factor = factor

    def coverage(self, polygons: Sequence[np.ndarray], width: int, height: int,
                 even_odd: bool = False, anti_alias: bool = True) -> Coverage:
        empty = Coverage(0, 0, np.zeros((0, 0)))
        rings = [p for p in polygons if len(p) >= 3 and np.all(np.isfinite(p))]
        if not rings:
            return empty
        points = np.vstack(rings)
        left = max(int(math.floor(max(points[:, 0].min(), -1.0))), 0)
        top = max(int(math.floor(max(points[:, 1].min(), -1.0))), 0)
        right = min(int(math.ceil(min(points[:, 0].max(), width + 1.0))), width)
        bottom = min(int(math.ceil(min(points[:, 1].max(), height + 1.0))), height)
        if right <= left or bottom <= top:
            return empty

        f = self.factor if anti_alias else 1
        cols, rows = right - left, bottom - top
        size = (cols * f, rows * f)
        if even_odd:
            inside = np.zeros((rows * f, cols * f), dtype=bool)
            for ring in rings:
                mask = Image.new("L", size, 0)
                ImageDraw.Draw(mask).polygon(self._local(ring, left, top, f), fill=255)
                inside ^= np.asarray(mask) > 0
            samples = inside.astype(np.float64)
        else:
            mask = Image.new("L", size, 0)
            draw = ImageDraw.Draw(mask)
            for ring in rings:
                draw.polygon(self._local(ring, left, top, f), fill=255)
            samples = np.asarray(mask, dtype=np.float64) / 255.0
        return Coverage(top, left, samples.reshape(rows, f, cols, f).mean(axis=(1, 3)))

    @staticmethod
    def _local(ring: np.ndarray, left: int, top: int, f: int) -> List[tuple]:
        # sample centers sit at half-integer mask coordinates
        local = (ring - (left, top)) * f - 0.5
        local = np.clip(local, -_COORDINATE_LIMIT, _COORDINATE_LIMIT)
        return [tuple(p) for p in local.tolist()]


class Canvas:
    """Premultiplied float accumulator."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 4), dtype=np.float64)

    def composite(self, color: Color, coverage: np.ndarray, top: int = 0, left: int = 0,
                  mode: BlendMode = BlendMode.SOURCE_OVER) -> None:
        """Blend `color` into the window at (top, left), weighted by `coverage`."""
        rows, cols = coverage.shape
        if rows == 0 or cols == 0:
            return
        source = np.array([color.red, color.green, color.blue, 1.0]) * color.alpha
        window = self.pixels[top:top + rows, left:left + cols]
        weight = coverage[..., np.newaxis]
        window += weight * (blend(mode, source, window) - window)

    def fill(self, color: Color, mode: BlendMode = BlendMode.SOURCE_OVER) -> None:
        self.composite(color, np.ones((self.height, self.width)), mode=mode)

    def to_rgba8(self) -> np.ndarray:
        """Straight-alpha uint8 RGBA."""
        alpha = self.pixels[..., 3:4]
        with np.errstate(divide="ignore", invalid="ignore"):
            rgb = np.where(alpha > 0.0, self.pixels[..., :3] / alpha, 0.0)
        out = np.concatenate((rgb, alpha), axis=2)
        return np.round(np.clip(out, 0.0, 1.0) * 255.0).astype(np.uint8)


def render(shape: Shape, width: int, height: int, rasterizer: Optional[Rasterizer] = None) -> np.ndarray:
    """Rasterize a shape to an (height, width, 4) uint8 RGBA array."""
    validate_dimensions(width, height)
    if rasterizer is None:
        rasterizer = PillowRasterizer()
    canvas = Canvas(width, height)
    drawn = skipped = 0

    # sorted() is stable, so equal z keeps tree order
    items = sorted(walk(shape, device_transform(width, height)), key=lambda pair: pair[0].z)
    for item, matrix in items:
        if _paint(canvas, rasterizer, item, matrix):
            drawn += 1
        else:
            skipped += 1

    logger.debug("rendered %dx%d: %d primitives drawn, %d degenerate or off-canvas",
                 width, height, drawn, skipped)
    return canvas.to_rgba8()


def _paint(canvas: Canvas, rasterizer: Rasterizer, item: Primitive, matrix: Affine) -> bool:
    if item.kind is ShapeKind.FILL:
        canvas.fill(item.color, item.blend)
        return True
    if item.color.alpha <= 0.0 and item.blend not in CLEARING_MODES:
        return False
    if matrix.determinant == 0.0:
        return False
    segments = circle_segments(matrix)
    arc_segments = circle_segments(matrix, item.style.width / 2.0) if isinstance(item.style, Stroke) else 0
    polygons, even_odd = outline_polygons(item, segments, arc_segments)
    device = [matrix.apply(polygon) for polygon in polygons]
    window = rasterizer.coverage(device, canvas.width, canvas.height, even_odd, item.anti_alias)
    if window.values.size == 0:
        return False
    canvas.composite(item.color, window.values, window.top, window.left, item.blend)
    return True
