"""Tests for vecpath/geometry.py model types."""
import pytest

from vecpath.errors import MalformedPolySegment
from vecpath.geometry import (
    ArcSegment, CubicBezierSegment, FillRule, LineSegment, PathFigure,
    PathGeometry, PathSize, Point, PolyCubicBezierSegment, PolyLineSegment,
    PolyQuadraticBezierSegment, QuadraticBezierSegment, SegmentKind,
    SweepDirection, validate_segment,
)


P1, P2, P3 = Point(1, 2), Point(3, 4), Point(5, 6)


class TestPoint:
    def test_defaults_to_origin(self):
        assert Point() == Point(0.0, 0.0)

    def test_arithmetic(self):
        assert Point(1, 2) + Point(3, 4) == Point(4, 6)
        assert Point(3, 4) - Point(1, 2) == Point(2, 2)
        assert Point(1, 2) * 2 == Point(2, 4)
        assert 2 * Point(1, 2) == Point(2, 4)

    def test_to_tuple_is_the_only_unpacking(self):
        assert Point(1, 2).to_tuple() == (1, 2)
        with pytest.raises(TypeError):
            tuple(Point(1, 2))

    def test_distance(self):
        assert Point(0, 0).distance_to(Point(3, 4)) == pytest.approx(5.0)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            Point(1, 2).x = 5


class TestSegmentPoints:
    def test_line(self):
        assert LineSegment(P1).get_points() == [P1]

    def test_cubic(self):
        assert CubicBezierSegment(P1, P2, P3).get_points() == [P1, P2, P3]

    def test_quadratic(self):
        assert QuadraticBezierSegment(P1, P2).get_points() == [P1, P2]

    def test_arc_returns_only_end_point(self):
        arc = ArcSegment(P1, PathSize(10, 20), 90, True, SweepDirection.CLOCKWISE)
        assert arc.get_points() == [P1]

    def test_poly_variants(self):
        assert PolyLineSegment([P1, P2]).get_points() == [P1, P2]
        assert PolyCubicBezierSegment([P1, P2, P3]).get_points() == [P1, P2, P3]
        assert PolyQuadraticBezierSegment([P1, P2]).get_points() == [P1, P2]

    def test_poly_points_stored_as_tuple(self):
        segment = PolyLineSegment([P1, P2])
        assert segment.points == (P1, P2)

    def test_flags_default_true(self):
        segment = LineSegment(P1)
        assert segment.is_stroked is True
        assert segment.is_smooth_join is True

    def test_kinds(self):
        assert LineSegment(P1).kind is SegmentKind.LINE
        assert ArcSegment(P1).kind is SegmentKind.ARC
        assert PolyQuadraticBezierSegment().kind is SegmentKind.POLY_QUADRATIC_BEZIER


class TestValidateSegment:
    def test_well_formed(self):
        validate_segment(PolyCubicBezierSegment([P1, P2, P3, P1, P2, P3]))
        validate_segment(PolyQuadraticBezierSegment([P1, P2, P3, P1]))
        validate_segment(LineSegment(P1))

    def test_poly_cubic_bad_count(self):
        with pytest.raises(MalformedPolySegment, match="4 points"):
            validate_segment(PolyCubicBezierSegment([P1, P2, P3, P1]))

    def test_poly_quadratic_odd_count(self):
        with pytest.raises(MalformedPolySegment) as exc:
            validate_segment(PolyQuadraticBezierSegment([P1] * 5))
        assert exc.value.count == 5
        assert exc.value.stride == 2

    def test_empty_poly_rejected(self):
        with pytest.raises(MalformedPolySegment):
            validate_segment(PolyCubicBezierSegment([]))

    def test_empty_poly_line_allowed(self):
        validate_segment(PolyLineSegment([]))


class TestFigureAndGeometry:
    def test_figure_defaults(self):
        figure = PathFigure()
        assert figure.start_point == Point(0, 0)
        assert figure.segments == []
        assert figure.is_filled and figure.is_closed

    def test_figures_do_not_share_segments(self):
        a, b = PathFigure(), PathFigure()
        a.segments.append(LineSegment(P1))
        assert b.segments == []

    def test_figure_points(self):
        figure = PathFigure(P1, [LineSegment(P2), QuadraticBezierSegment(P3, P1)])
        assert figure.get_points() == [P1, P2, P3, P1]

    def test_geometry_points_in_order(self):
        geometry = PathGeometry([
            PathFigure(P1, [LineSegment(P2)]),
            PathFigure(P3, []),
        ])
        assert geometry.get_points() == [P1, P2, P3]
        assert geometry.get_segment_count() == 1

    def test_empty_geometry_valid(self):
        geometry = PathGeometry()
        geometry.validate()
        assert geometry.is_empty
        assert geometry.fill_rule is FillRule.EVEN_ODD

    def test_validate_reports_bad_segment(self):
        geometry = PathGeometry([PathFigure(P1, [PolyCubicBezierSegment([P1, P2])])])
        with pytest.raises(MalformedPolySegment):
            geometry.validate()
