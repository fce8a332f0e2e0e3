"""
Path segments and their flattening into polylines.

A path is a sequence of segments in shape space:

    MoveTo(x, y)                     start a new subpath
    LineTo(x, y)
    QuadTo(x1, y1, x, y)             quadratic Bezier, one control point
    CubicTo(x1, y1, x2, y2, x, y)    cubic Bezier, two control points
    Close()                          join back to the subpath start

Drawing before any MoveTo starts at the origin. After Close the pen is back
at the start of the closed subpath.
"""

from typing import List, NamedTuple, Sequence, Tuple, Union

import numpy as np


class MoveTo(NamedTuple):
    x: float
    y: float


class LineTo(NamedTuple):
    x: float
    y: float


class QuadTo(NamedTuple):
    x1: float
    y1: float
    x: float
    y: float


class CubicTo(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float
    x: float
    y: float


class Close(NamedTuple):
    pass


PathSegment = Union[MoveTo, LineTo, QuadTo, CubicTo, Close]

# (points, closed)
Polyline = Tuple[np.ndarray, bool]


def _quad_points(p0, segment: QuadTo, steps: int) -> List[Tuple[float, float]]:
    t = np.linspace(0.0, 1.0, steps + 1)[1:, np.newaxis]
    p0 = np.asarray(p0)
    p1 = np.array((segment.x1, segment.y1))
    p2 = np.array((segment.x, segment.y))
    points = (1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t ** 2 * p2
    return [tuple(p) for p in points.tolist()]


def _cubic_points(p0, segment: CubicTo, steps: int) -> List[Tuple[float, float]]:
    t = np.linspace(0.0, 1.0, steps + 1)[1:, np.newaxis]
    p0 = np.asarray(p0)
    p1 = np.array((segment.x1, segment.y1))
    p2 = np.array((segment.x2, segment.y2))
    p3 = np.array((segment.x, segment.y))
    points = ((1 - t) ** 3 * p0 + 3 * (1 - t) ** 2 * t * p1
              + 3 * (1 - t) * t ** 2 * p2 + t ** 3 * p3)
    return [tuple(p) for p in points.tolist()]


def flatten(segments: Sequence[PathSegment], steps: int = 16) -> List[Polyline]:
    """
    Split a path into subpaths and flatten every curve into `steps` lines.
    Subpaths with fewer than two points are dropped.
    """
    polylines: List[Polyline] = []
    points: List[Tuple[float, float]] = [(0.0, 0.0)]

    def finish(closed: bool) -> None:
        if len(points) > 1:
            polylines.append((np.array(points, dtype=np.float64), closed))

    for segment in segments:
        if isinstance(segment, MoveTo):
            finish(False)
            points = [(segment.x, segment.y)]
        elif isinstance(segment, LineTo):
            points.append((segment.x, segment.y))
        elif isinstance(segment, QuadTo):
            points.extend(_quad_points(points[-1], segment, steps))
        elif isinstance(segment, CubicTo):
            points.extend(_cubic_points(points[-1], segment, steps))
        elif isinstance(segment, Close):
            finish(True)
            points = [points[0]]
        else:
            raise TypeError(f"not a path segment: {segment!r}")
    finish(False)
    return polylines

