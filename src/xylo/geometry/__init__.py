"""
Geometry: affine transforms, colors, paths, paint styles and the shape algebra.
"""

from .transform import Affine, IDENTITY, finite_float
from .color import Color, WHITE, BLACK
from .path import PathSegment, MoveTo, LineTo, QuadTo, CubicTo, Close, flatten
from .stroke import Fill, Stroke, Style, DEFAULT_FILL, DEFAULT_STROKE, stroke_polygons
from .shape import (
    Shape, Empty, Primitive, Transformed, Group, EMPTY,
    primitive, path, compose, transform, recolor, with_alpha, restyle, map_primitives,
    walk, count_primitives, shapes_equal, unit_outline, boundary_point,
    path_shift, collect, primitive_polylines, outline_polygons,
)
