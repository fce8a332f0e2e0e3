#!/usr/bin/env python3
"""
Tests for the shape algebra: composition, transforms, traversal and
primitive geometry.
"""

import math

import numpy as np
import pytest

from xylo.geometry import (
    DEFAULT_STROKE, EMPTY, IDENTITY, WHITE, Affine, Close, Color, CubicTo, Fill, Group, LineTo, MoveTo,
    Primitive, QuadTo, Stroke, Transformed, boundary_point, collect, compose, count_primitives, flatten,
    map_primitives, outline_polygons, path, path_shift, primitive, recolor, restyle, shapes_equal,
    stroke_polygons, transform, unit_outline, walk, with_alpha,
)
from xylo.shared import FillRule, LineCap, ShapeKind, TypeMismatch
from tests.test_utils import assert_float_close

SQUARE = Primitive(ShapeKind.SQUARE)
CIRCLE = Primitive(ShapeKind.CIRCLE)
TRIANGLE = Primitive(ShapeKind.TRIANGLE)
RED = Color(1.0, 0.0, 0.0)


def nested(depth: int):
    """SQUARE : T(SQUARE : T(...)), `depth` primitives deep."""
    shape = EMPTY
    for _ in range(depth):
        shape = compose(SQUARE, transform(shape, Affine.scaling(0.9, 0.9)))
    return shape


class TestComposition:

    def test_group_keeps_order(self):
        group = compose(SQUARE, CIRCLE)
        assert isinstance(group, Group)
        assert group.children == (SQUARE, CIRCLE)

    def test_nested_groups_are_flattened(self):
        right = compose(SQUARE, compose(CIRCLE, TRIANGLE))
        left = compose(compose(SQUARE, CIRCLE), TRIANGLE)
        assert right.children == (SQUARE, CIRCLE, TRIANGLE)
        assert shapes_equal(left, right)

    def test_empty_is_identity(self):
        assert compose(EMPTY, SQUARE) is SQUARE
        assert compose(SQUARE, EMPTY) is SQUARE
        assert compose(EMPTY, EMPTY) is EMPTY
        assert compose() is EMPTY

    def test_transformed_groups_are_not_flattened(self):
        inner = transform(compose(SQUARE, CIRCLE), Affine.translation(1, 0))
        group = compose(TRIANGLE, inner)
        assert group.children == (TRIANGLE, inner)

    def test_collect(self):
        assert collect([SQUARE, CIRCLE]) == compose(SQUARE, CIRCLE)
        assert collect([]) is EMPTY
        assert collect(iter([EMPTY, SQUARE])) is SQUARE

    def test_empty_literal_kind(self):
        assert primitive(ShapeKind.EMPTY) is EMPTY
        assert primitive(ShapeKind.FILL) == Primitive(ShapeKind.FILL)
        assert primitive(ShapeKind.SQUARE).color == WHITE


class TestTransform:

    def test_wraps_child(self):
        moved = transform(SQUARE, Affine.translation(1, 2))
        assert isinstance(moved, Transformed)
        assert moved.child is SQUARE
        assert moved.matrix == Affine.translation(1, 2)

    def test_adjacent_transforms_multiply(self):
        first, second = Affine.rotation(30), Affine.translation(1, 0)
        shape = transform(transform(SQUARE, first), second)
        assert shape.child is SQUARE
        assert shape.matrix == second @ first

    def test_transform_of_empty(self):
        assert transform(EMPTY, Affine.scaling(2, 2)) is EMPTY


class TestTraversal:

    def test_walk_paint_order_and_matrices(self):
        move = Affine.translation(1, 0)
        shape = compose(SQUARE, transform(compose(CIRCLE, TRIANGLE), move))
        visited = list(walk(shape))
        assert [p.kind for p, _ in visited] == [ShapeKind.SQUARE, ShapeKind.CIRCLE, ShapeKind.TRIANGLE]
        assert [m for _, m in visited] == [IDENTITY, move, move]

    def test_walk_root_matrix(self):
        root = Affine.scaling(10, 10)
        [(item, matrix)] = list(walk(transform(SQUARE, Affine.translation(1, 0)), root))
        assert item is SQUARE
        assert matrix.apply_point(0.0, 0.0) == (10.0, 0.0)

    def test_walk_empty(self):
        assert list(walk(EMPTY)) == []

    def test_deep_trees_do_not_recurse(self):
        shape = nested(5000)
        assert count_primitives(shape) == 5000
        assert shapes_equal(shape, nested(5000))
        assert not shapes_equal(shape, nested(4999))
        recolored = recolor(shape, RED)
        assert all(p.color == RED for p, _ in walk(recolored))


class TestEquality:

    def test_structural(self):
        assert transform(SQUARE, Affine.rotation(90)) == transform(Primitive(ShapeKind.SQUARE), Affine.rotation(90))
        assert SQUARE != CIRCLE
        assert SQUARE != Primitive(ShapeKind.SQUARE, RED)
        assert compose(SQUARE, CIRCLE) != compose(CIRCLE, SQUARE)
        assert SQUARE != 1

    def test_shapes_are_unhashable(self):
        with pytest.raises(TypeError):
            hash(SQUARE)

    def test_shallow_repr(self):
        assert repr(compose(SQUARE, CIRCLE)) == "Group(2 children)"
        assert repr(EMPTY) == "Empty"


class TestRecoloring:

    def test_recolor_keeps_structure(self):
        shape = compose(SQUARE, transform(CIRCLE, Affine.translation(1, 0)))
        recolored = recolor(shape, RED)
        assert isinstance(recolored, Group)
        assert recolored.children[1].matrix == Affine.translation(1, 0)
        assert [p.color for p, _ in walk(recolored)] == [RED, RED]

    def test_with_alpha(self):
        shape = with_alpha(compose(SQUARE, Primitive(ShapeKind.CIRCLE, RED)), 0.25)
        colors = [p.color for p, _ in walk(shape)]
        assert [c.alpha for c in colors] == [0.25, 0.25]
        assert colors[1].red == 1.0 and colors[1].green == 0.0

    def test_map_primitives_can_replace(self):
        shape = map_primitives(compose(SQUARE, CIRCLE), lambda p: TRIANGLE)
        assert [p.kind for p, _ in walk(shape)] == [ShapeKind.TRIANGLE, ShapeKind.TRIANGLE]

    def test_map_keeps_empty(self):
        assert map_primitives(EMPTY, lambda p: TRIANGLE) is EMPTY


class TestPrimitiveGeometry:

    def test_square_outline(self):
        outline = unit_outline(ShapeKind.SQUARE)
        assert outline.shape == (4, 2)
        assert np.abs(outline).max() == 0.5

    def test_triangle_outline_inscribed(self):
        outline = unit_outline(ShapeKind.TRIANGLE)
        assert outline.shape == (3, 2)
        assert_float_close(np.hypot(outline[:, 0], outline[:, 1]), np.full(3, 0.5))
        assert tuple(outline[0]) == (0.0, 0.5)

    def test_circle_outline(self):
        outline = unit_outline(ShapeKind.CIRCLE, 32)
        assert outline.shape == (32, 2)
        assert_float_close(np.hypot(outline[:, 0], outline[:, 1]), np.full(32, 0.5))

    def test_fill_has_no_outline(self):
        with pytest.raises(ValueError):
            unit_outline(ShapeKind.FILL)

    def test_square_boundary(self):
        cases = [(0.0, (0.5, 0.0)), (0.25, (0.0, 0.5)), (0.5, (-0.5, 0.0)), (0.75, (0.0, -0.5)),
                 (1.0, (0.5, 0.0)), (1.125, (0.5, 0.5))]
        for fraction, expected in cases:
            assert_float_close(np.array(boundary_point(ShapeKind.SQUARE, fraction)), np.array(expected),
                               msg=str(fraction))

    def test_circle_and_triangle_boundary(self):
        x, y = boundary_point(ShapeKind.CIRCLE, 0.25)
        assert_float_close(x, 0.0, abs_tol=1e-12)
        assert_float_close(y, 0.5)
        assert boundary_point(ShapeKind.TRIANGLE, 0.0) == (0.0, 0.5)
        x, y = boundary_point(ShapeKind.TRIANGLE, 1.0 / 3.0)
        assert_float_close(x, -0.25 * math.sqrt(3.0))
        assert_float_close(y, -0.25)


class TestPathShift:

    def test_moves_boundary_point_to_origin(self):
        shifted = path_shift(SQUARE, 0.0)
        assert shifted == transform(SQUARE, Affine.translation(-0.5, 0.0))

    def test_follows_wrapping_transform(self):
        scaled = transform(CIRCLE, Affine.scaling(2, 2))
        shifted = path_shift(scaled, 0.5)
        [(item, matrix)] = list(walk(shifted))
        # the circle's leftmost point now sits on the origin
        x, y = matrix.apply_point(-0.5, 0.0)
        assert_float_close(x, 0.0, abs_tol=1e-12)
        assert_float_close(y, 0.0, abs_tol=1e-12)

    def test_empty_stays_empty(self):
        assert path_shift(EMPTY, 0.3) is EMPTY

    def test_rejects_groups_and_fill(self):
        with pytest.raises(TypeMismatch, match="found Group"):
            path_shift(compose(SQUARE, CIRCLE), 0.1)
        with pytest.raises(TypeMismatch, match="found FILL"):
            path_shift(Primitive(ShapeKind.FILL), 0.1)


class TestPaths:

    def test_flatten_lines_and_subpaths(self):
        polylines = flatten([MoveTo(0, 0), LineTo(1, 0), LineTo(1, 1), Close(), MoveTo(2, 2), LineTo(3, 2)])
        assert [closed for _, closed in polylines] == [True, False]
        assert polylines[0][0].tolist() == [[0, 0], [1, 0], [1, 1]]
        assert polylines[1][0].tolist() == [[2, 2], [3, 2]]

    def test_drawing_starts_at_the_origin(self):
        [(points, closed)] = flatten([LineTo(1, 0)])
        assert points.tolist() == [[0, 0], [1, 0]] and not closed

    def test_close_returns_the_pen(self):
        [first, second] = flatten([MoveTo(1, 1), LineTo(2, 1), Close(), LineTo(1, 2)])
        assert second[0].tolist() == [[1, 1], [1, 2]]

    def test_lone_points_are_dropped(self):
        assert flatten([MoveTo(1, 1), MoveTo(2, 2)]) == []
        assert flatten([]) == []

    def test_curves_end_on_their_endpoint(self):
        [(quad, _)] = flatten([QuadTo(0.5, 1.0, 1.0, 0.0)], steps=8)
        assert len(quad) == 9
        assert quad[-1].tolist() == [1.0, 0.0]
        assert_float_close(quad[4][1], 0.5)
        [(cubic, _)] = flatten([CubicTo(0, 1, 1, 1, 1, 0)], steps=4)
        assert cubic[-1].tolist() == [1.0, 0.0]
        assert_float_close(cubic[2][1], 0.75)

    def test_adjacent_paths_merge(self):
        shape = compose(path([MoveTo(0, 0)]), path([LineTo(1, 0)]), path([Close()]))
        assert shape == path([MoveTo(0, 0), LineTo(1, 0), Close()])
        assert count_primitives(compose(path([LineTo(1, 0)]), SQUARE, path([LineTo(0, 1)]))) == 3


class TestStyles:

    def test_restyle_skips_fill(self):
        shape = restyle(compose(primitive(ShapeKind.FILL), SQUARE), lambda style: DEFAULT_STROKE)
        assert [item.style for item, _ in walk(shape)] == [Fill(), DEFAULT_STROKE]

    def test_style_is_part_of_equality(self):
        assert restyle(SQUARE, lambda style: Stroke(width=0.1)) != SQUARE
        assert restyle(SQUARE, lambda style: Fill()) == SQUARE

    def test_fill_outline_rule(self):
        polygons, even_odd = outline_polygons(SQUARE)
        assert len(polygons) == 1 and not even_odd
        holed = restyle(SQUARE, lambda style: Fill(FillRule.EVEN_ODD))
        assert outline_polygons(holed)[1]

    def test_open_path_has_nothing_to_fill(self):
        polygons, _ = outline_polygons(path([MoveTo(0, 0), LineTo(1, 0)]))
        assert polygons == []


class TestStrokeOutlines:

    def test_segment_quad_is_centered(self):
        [quad] = stroke_polygons([(np.array([(0.0, 0.0), (1.0, 0.0)]), False)], Stroke(width=0.2))
        assert sorted(map(tuple, np.round(quad, 12).tolist())) == [(0.0, -0.1), (0.0, 0.1), (1.0, -0.1), (1.0, 0.1)]

    def test_closed_outline_has_a_join_per_corner(self):
        square = unit_outline(ShapeKind.SQUARE)
        polygons = stroke_polygons([(square, True)], Stroke(width=0.1))
        assert len(polygons) == 8

    def test_caps(self):
        line = [(np.array([(0.0, 0.0), (1.0, 0.0)]), False)]
        assert len(stroke_polygons(line, Stroke(cap=LineCap.SQUARE))) == 3
        [_, start, end] = stroke_polygons(line, Stroke(width=0.2, cap=LineCap.ROUND), arc_segments=12)
        assert start.shape == (12, 2)
        assert_float_close(float(np.abs(end - (1.0, 0.0)).max()), 0.1)

    def test_sharp_miter_falls_back_to_bevel(self):
        spike = [(np.array([(0.0, 0.0), (1.0, 0.0), (0.0, 0.05)]), False)]
        [_, _, join] = stroke_polygons(spike, Stroke(width=0.1))
        assert len(join) == 3

    def test_dashing_splits_runs(self):
        line = [(np.array([(0.0, 0.0), (1.0, 0.0)]), False)]
        quads = stroke_polygons(line, Stroke(dash=(0.2, 0.1)))
        # on for 0.2, off for 0.1: runs start at 0, 0.3, 0.6 and 0.9
        assert len(quads) == 4
        starts = sorted(round(float(q[:, 0].min()), 9) for q in quads)
        assert starts == [0.0, 0.3, 0.6, 0.9]

    def test_odd_dash_patterns_repeat(self):
        line = [(np.array([(0.0, 0.0), (1.0, 0.0)]), False)]
        assert len(stroke_polygons(line, Stroke(dash=(0.25,)))) == 2

    def test_zero_width_has_no_outline(self):
        assert stroke_polygons([(unit_outline(ShapeKind.SQUARE), True)], Stroke(width=0.0)) == []
