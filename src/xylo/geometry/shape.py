"""
Shape algebra.

Shapes are immutable trees:

- `Empty`                       draws nothing
- `Primitive(kind, color, ...)` unit-space primitive centered at the origin,
                                or a path in shape space, with its paint
                                style, z value and blend mode
- `Transformed(child, matrix)`  child drawn under an affine transform
- `Group(children)`             children painted in order, later on top

Composition keeps groups flat and drops `Empty`, so `a : (b : c)` and
`(a : b) : c` build the same `Group([a, b, c])`. Two untransformed paths
that end up next to each other are joined into one path, which keeps the
style of the back one. Every walk over a tree is
iterative; recursive programs produce trees far deeper than Python's own
recursion limit.
"""

import math
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from ..shared.errors import TypeMismatch
from ..shared.types import BlendMode, FillRule, ShapeKind
from .color import Color, WHITE
from .path import PathSegment, Polyline, flatten
from .stroke import DEFAULT_FILL, Stroke, Style, stroke_polygons
from .transform import Affine, IDENTITY

_TRIANGLE_VERTICES = np.array([
    (0.0, 0.5),
    (-0.25 * math.sqrt(3.0), -0.25),
    (0.25 * math.sqrt(3.0), -0.25),
])
_SQUARE_BOUNDARY = np.array([
    (0.5, 0.0), (0.5, 0.5), (-0.5, 0.5), (-0.5, -0.5), (0.5, -0.5), (0.5, 0.0),
])


class Shape:
    """Base of the shape variants. Equality is structural."""

    def __eq__(self, other):
        if not isinstance(other, Shape):
            return NotImplemented
        return shapes_equal(self, other)

    __hash__ = None


@dataclass(frozen=True, eq=False)
class Empty(Shape):
    def __repr__(self) -> str:
        return "Empty"


@dataclass(frozen=True, eq=False, repr=False)
class Primitive(Shape):
    kind: ShapeKind
    color: Color = WHITE
    style: Style = DEFAULT_FILL
    z: float = 0.0
    blend: BlendMode = BlendMode.SOURCE_OVER
    anti_alias: bool = True
    segments: Tuple[PathSegment, ...] = ()

    def __repr__(self) -> str:
        return f"Primitive({self.kind.value}, {self.color})"

    @property
    def paint_key(self) -> tuple:
        # segment tuples compare by value alone, so MoveTo(1, 2) == LineTo(1, 2)
        segments = tuple((type(s).__name__, tuple(s)) for s in self.segments)
        return (self.kind, self.color, self.style, self.z, self.blend, self.anti_alias, segments)


@dataclass(frozen=True, eq=False, repr=False)
class Transformed(Shape):
    child: Shape
    matrix: Affine

    def __repr__(self) -> str:
        return f"Transformed({type(self.child).__name__}, {self.matrix})"


@dataclass(frozen=True, eq=False, repr=False)
class Group(Shape):
    children: Tuple[Shape, ...]

    def __repr__(self) -> str:
        return f"Group({len(self.children)} children)"


EMPTY = Empty()


# =============================================================================
# Construction
# =============================================================================

def primitive(kind: ShapeKind) -> Shape:
    if kind is ShapeKind.EMPTY:
        return EMPTY
    return Primitive(kind)


def path(segments: Sequence[PathSegment]) -> Shape:
    return Primitive(ShapeKind.PATH, segments=tuple(segments))


def _is_path(shape: Shape) -> bool:
    return isinstance(shape, Primitive) and shape.kind is ShapeKind.PATH


def _push(children: List[Shape], shape: Shape) -> None:
    if children and _is_path(children[-1]) and _is_path(shape):
        children[-1] = replace(children[-1], segments=children[-1].segments + shape.segments)
    else:
        children.append(shape)


def compose(*shapes: Shape) -> Shape:
    """Layer shapes back to front. Groups are spliced in, Empty is dropped."""
    children: List[Shape] = []
    for shape in shapes:
        if isinstance(shape, Empty):
            continue
        if isinstance(shape, Group):
            for child in shape.children:
                _push(children, child)
        else:
            _push(children, shape)
    if not children:
        return EMPTY
    if len(children) == 1:
        return children[0]
    return Group(tuple(children))


def transform(shape: Shape, matrix: Affine) -> Shape:
    """
    Wrap `shape` in `matrix`. The new matrix applies after any the shape
    already carries; adjacent transforms are multiplied into one node.
    """
    if isinstance(shape, Empty):
        return EMPTY
    if isinstance(shape, Transformed):
        return Transformed(shape.child, matrix @ shape.matrix)
    return Transformed(shape, matrix)


def map_primitives(shape: Shape, fn: Callable[[Primitive], Shape]) -> Shape:
    """Rebuild the tree with every primitive replaced by fn(primitive)."""
    stack: List[Tuple[Shape, bool]] = [(shape, False)]
    built: List[Shape] = []
    while stack:
        node, expanded = stack.pop()
        if isinstance(node, Primitive):
            built.append(fn(node))
        elif isinstance(node, Transformed):
            if expanded:
                built.append(Transformed(built.pop(), node.matrix))
            else:
                stack.append((node, True))
                stack.append((node.child, False))
        elif isinstance(node, Group):
            if expanded:
                count = len(node.children)
                children = tuple(built[-count:])
                del built[-count:]
                built.append(Group(children))
            else:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.children))
        else:
            built.append(node)
    return built[0]


def recolor(shape: Shape, color: Color) -> Shape:
    return map_primitives(shape, lambda p: replace(p, color=color))


def with_alpha(shape: Shape, alpha: float) -> Shape:
    return map_primitives(shape, lambda p: replace(p, color=p.color.with_alpha(alpha)))


def restyle(shape: Shape, change: Callable[[Style], Style]) -> Shape:
    """Replace the paint style of every primitive except FILL, which has no outline."""
    return map_primitives(
        shape, lambda p: p if p.kind is ShapeKind.FILL else replace(p, style=change(p.style)))


# =============================================================================
# Traversal
# =============================================================================

def walk(shape: Shape, root: Affine = IDENTITY) -> Iterator[Tuple[Primitive, Affine]]:
    """
    Yield (primitive, accumulated matrix) in paint order.

    Each stack entry carries the matrix in force for its subtree, so leaving
    a subtree restores the parent's matrix without an explicit pop.
    """
    stack: List[Tuple[Shape, Affine]] = [(shape, root)]
    while stack:
        node, matrix = stack.pop()
        if isinstance(node, Primitive):
            yield node, matrix
        elif isinstance(node, Transformed):
            stack.append((node.child, matrix @ node.matrix))
        elif isinstance(node, Group):
            stack.extend((child, matrix) for child in reversed(node.children))


def count_primitives(shape: Shape) -> int:
    return sum(1 for _ in walk(shape))


def shapes_equal(a: Shape, b: Shape) -> bool:
    pairs: List[Tuple[Shape, Shape]] = [(a, b)]
    while pairs:
        left, right = pairs.pop()
        if left is right:
            continue
        if type(left) is not type(right):
            return False
        if isinstance(left, Primitive):
            if left.paint_key != right.paint_key:
                return False
        elif isinstance(left, Transformed):
            if left.matrix != right.matrix:
                return False
            pairs.append((left.child, right.child))
        elif isinstance(left, Group):
            if len(left.children) != len(right.children):
                return False
            pairs.extend(zip(left.children, right.children))
    return True


# =============================================================================
# Geometry of primitives
# =============================================================================

def unit_outline(kind: ShapeKind, segments: int = 64) -> np.ndarray:
    """Counter-clockwise outline polygon of a primitive in unit space."""
    if kind is ShapeKind.SQUARE:
        return _SQUARE_BOUNDARY[1:5].copy()
    if kind is ShapeKind.TRIANGLE:
        return _TRIANGLE_VERTICES.copy()
    if kind is ShapeKind.CIRCLE:
        angles = np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False)
        return 0.5 * np.column_stack((np.cos(angles), np.sin(angles)))
    raise ValueError(f"{kind.value} has no outline")


def boundary_point(kind: ShapeKind, fraction: float) -> Tuple[float, float]:
    """
    Point at arc-length `fraction` (mod 1) along a primitive's boundary,
    counter-clockwise from its rightmost point on the x axis (the top
    vertex for TRIANGLE).
    """
    t = float(fraction) % 1.0
    if kind is ShapeKind.CIRCLE:
        angle = 2.0 * math.pi * t
        return 0.5 * math.cos(angle), 0.5 * math.sin(angle)
    if kind is ShapeKind.SQUARE:
        path = _SQUARE_BOUNDARY
    elif kind is ShapeKind.TRIANGLE:
        path = np.vstack((_TRIANGLE_VERTICES, _TRIANGLE_VERTICES[:1]))
    else:
        raise ValueError(f"{kind.value} has no boundary")
    lengths = np.hypot(*np.diff(path, axis=0).T)
    target = t * lengths.sum()
    for i, length in enumerate(lengths):
        if target <= length or i == len(lengths) - 1:
            ratio = target / length if length else 0.0
            start, end = path[i], path[i + 1]
            return (float(start[0] + (end[0] - start[0]) * ratio),
                    float(start[1] + (end[1] - start[1]) * ratio))
        target -= length
    raise AssertionError("unreachable")


def path_shift(shape: Shape, fraction: float) -> Shape:
    """
    Move a primitive so the point `fraction` of the way around its boundary
    sits on the local origin. Used to chain shapes edge to edge.
    """
    if isinstance(shape, Empty):
        return EMPTY
    matrix = IDENTITY
    node = shape
    if isinstance(node, Transformed):
        matrix, node = node.matrix, node.child
    if not isinstance(node, Primitive) or node.kind in (ShapeKind.FILL, ShapeKind.PATH):
        found = node.kind.value if isinstance(node, Primitive) else type(node).__name__
        raise TypeMismatch(f"path_shift needs a SQUARE, CIRCLE or TRIANGLE, found {found}")
    x, y = matrix.apply_point(*boundary_point(node.kind, fraction))
    return transform(shape, Affine.translation(-x, -y))


def collect(shapes: Iterable[Shape]) -> Shape:
    return compose(*shapes)


def primitive_polylines(item: Primitive, segments: int = 64) -> List[Polyline]:
    """Closed outline of a basic primitive, or the flattened subpaths of a path."""
    if item.kind is ShapeKind.PATH:
        return flatten(item.segments, max(8, segments // 4))
    return [(unit_outline(item.kind, segments), True)]


def outline_polygons(item: Primitive, segments: int = 64, arc_segments: int = 16):
    """
    Local-space polygons to scan-convert for `item`, and whether they combine
    by the even-odd rule (True) or by union.
    """
    polylines = primitive_polylines(item, segments)
    if isinstance(item.style, Stroke):
        return stroke_polygons(polylines, item.style, arc_segments), False
    rings = [points for points, _ in polylines if len(points) >= 3]
    return rings, item.style.rule is FillRule.EVEN_ODD
