"""
Paint styles and stroke outlines.

A primitive is either filled (`Fill`, with a fill rule) or stroked
(`Stroke`). A stroke is drawn as the union of simple polygons built in the
primitive's own space:

- one quad per segment, `width` wide and centered on it;
- a join at every corner (miter, round or bevel; a miter whose length is
  more than `miter_limit` line widths falls back to bevel, as in SVG);
- a cap at both ends of every open polyline (butt, round or square).

The polygons are transformed with the primitive, so scaling a stroked shape
scales its line width too. Dashing splits each polyline into open runs
before the outline is built.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple, Union

import numpy as np

from ..shared.types import FillRule, LineCap, LineJoin
from ..utils.config import DEFAULT_MITER_LIMIT, DEFAULT_STROKE_WIDTH
from .path import Polyline

_EPSILON = 1e-12


@dataclass(frozen=True)
class Fill:
    rule: FillRule = FillRule.WINDING


@dataclass(frozen=True)
class Stroke:
    width: float = DEFAULT_STROKE_WIDTH
    cap: LineCap = LineCap.BUTT
    join: LineJoin = LineJoin.MITER
    miter_limit: float = DEFAULT_MITER_LIMIT
    dash: Tuple[float, ...] = ()
    dash_offset: float = 0.0


Style = Union[Fill, Stroke]

DEFAULT_FILL = Fill()
DEFAULT_STROKE = Stroke()


def stroke_polygons(polylines: Sequence[Polyline], stroke: Stroke, arc_segments: int = 16) -> List[np.ndarray]:
    """Polygons whose union is the stroked outline of `polylines`."""
    half = stroke.width / 2.0
    if half <= 0.0:
        return []
    polygons: List[np.ndarray] = []
    for points, closed in polylines:
        for run, run_closed in _dash(points, closed, stroke):
            polygons.extend(_outline(run, run_closed, half, stroke, arc_segments))
    return polygons


# =============================================================================
# Dashing
# =============================================================================

def _dash(points: np.ndarray, closed: bool, stroke: Stroke) -> Iterator[Polyline]:
    if not stroke.dash:
        yield points, closed
        return
    pattern = list(stroke.dash)
    if len(pattern) % 2:
        pattern *= 2
    if closed:
        points = np.vstack((points, points[:1]))

    index, phase = 0, stroke.dash_offset % math.fsum(pattern)
    while phase >= pattern[index]:
        phase -= pattern[index]
        index = (index + 1) % len(pattern)
    remaining = pattern[index] - phase
    on = index % 2 == 0
    run = [points[0]] if on else []

    for start, end in zip(points[:-1], points[1:]):
        length = math.hypot(*(end - start))
        travelled = 0.0
        while length - travelled > remaining:
            travelled += remaining
            point = start + (end - start) * (travelled / length)
            if on:
                run.append(point)
                yield np.array(run), False
                run = []
            else:
                run = [point]
            on = not on
            index = (index + 1) % len(pattern)
            remaining = pattern[index]
        remaining -= length - travelled
        if on:
            run.append(end)
    if on and run:
        yield np.array(run), False


# =============================================================================
# Outline pieces
# =============================================================================

def _distinct(points: np.ndarray, closed: bool) -> np.ndarray:
    keep = [points[0]]
    for point in points[1:]:
        if math.hypot(*(point - keep[-1])) > _EPSILON:
            keep.append(point)
    if closed and len(keep) > 1 and math.hypot(*(keep[-1] - keep[0])) <= _EPSILON:
        keep.pop()
    return np.array(keep)


def _unit(vector: np.ndarray) -> np.ndarray:
    return vector / math.hypot(*vector)


def _left(unit: np.ndarray) -> np.ndarray:
    return np.array((-unit[1], unit[0]))


def _disc(center: np.ndarray, radius: float, segments: int) -> np.ndarray:
    angles = np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False)
    return center + radius * np.column_stack((np.cos(angles), np.sin(angles)))


def _outline(points: np.ndarray, closed: bool, half: float, stroke: Stroke, arc_segments: int) -> List[np.ndarray]:
    points = _distinct(points, closed)
    if len(points) == 1:
        # a zero-length run only shows through its caps
        if closed:
            return []
        return _cap(points[0], np.array((1.0, 0.0)), half, stroke.cap, arc_segments) + \
            _cap(points[0], np.array((-1.0, 0.0)), half, stroke.cap, arc_segments)

    count = len(points)
    polygons = []
    for i in range(count if closed else count - 1):
        start, end = points[i], points[(i + 1) % count]
        normal = _left(_unit(end - start)) * half
        polygons.append(np.array([start + normal, end + normal, end - normal, start - normal]))

    for i in range(count) if closed else range(1, count - 1):
        incoming = _unit(points[i] - points[i - 1])
        outgoing = _unit(points[(i + 1) % count] - points[i])
        polygons.extend(_join(points[i], incoming, outgoing, half, stroke, arc_segments))

    if not closed:
        polygons.extend(_cap(points[0], _unit(points[0] - points[1]), half, stroke.cap, arc_segments))
        polygons.extend(_cap(points[-1], _unit(points[-1] - points[-2]), half, stroke.cap, arc_segments))
    return polygons


def _join(vertex, incoming, outgoing, half: float, stroke: Stroke, arc_segments: int) -> List[np.ndarray]:
    cross = incoming[0] * outgoing[1] - incoming[1] * outgoing[0]
    dot = float(incoming @ outgoing)
    if abs(cross) <= _EPSILON and dot > 0.0:
        return []
    if stroke.join is LineJoin.ROUND:
        return [_disc(vertex, half, arc_segments)]

    # the outer side of a left turn is on the right
    side = -1.0 if cross > 0.0 else 1.0
    before = _left(incoming) * half * side
    after = _left(outgoing) * half * side
    bevel = np.array([vertex, vertex + before, vertex + after])
    if stroke.join is LineJoin.BEVEL:
        return [bevel]

    cos_half = math.sqrt(max(0.0, (1.0 + dot) / 2.0))
    if cos_half <= _EPSILON or 1.0 / cos_half > stroke.miter_limit:
        return [bevel]
    tip = vertex + _unit(before + after) * (half / cos_half)
    return [np.array([vertex, vertex + before, tip, vertex + after])]


def _cap(end, outward, half: float, cap: LineCap, arc_segments: int) -> List[np.ndarray]:
    if cap is LineCap.BUTT:
        return []
    if cap is LineCap.ROUND:
        return [_disc(end, half, arc_segments)]
    normal = _left(outward) * half
    extension = outward * half
    return [np.array([end + normal, end + normal + extension, end - normal + extension, end - normal])]
