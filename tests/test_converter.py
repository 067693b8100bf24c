"""Tests for vecpath/converter.py."""
import logging

import pytest
from ezdxf.path import Command

from vecpath.builder import GeometryBuilder
from vecpath.converter import (
    EzdxfPathBackend, PathConverter, RecordingBackend, arc_to_cubics,
    convert_geometry, elevate_quadratic,
)
from vecpath.errors import MalformedPolySegment, UnsupportedSegment
from vecpath.geometry import (
    ArcSegment, PathSize, Point, SegmentKind, SweepDirection,
)


def _cubic_at(p0, c1, c2, p3, t):
    mt = 1 - t
    x = mt ** 3 * p0.x + 3 * mt * mt * t * c1.x + 3 * mt * t * t * c2.x + t ** 3 * p3.x
    y = mt ** 3 * p0.y + 3 * mt * mt * t * c1.y + 3 * mt * t * t * c2.y + t ** 3 * p3.y
    return Point(x, y)


def _quad_at(p0, p1, p2, t):
    mt = 1 - t
    return Point(mt * mt * p0.x + 2 * mt * t * p1.x + t * t * p2.x,
                 mt * mt * p0.y + 2 * mt * t * p1.y + t * t * p2.y)


def _assert_point(actual, expected, abs=1e-9):
    assert actual.x == pytest.approx(expected.x, abs=abs)
    assert actual.y == pytest.approx(expected.y, abs=abs)


def _end_to_end_geometry():
    builder = GeometryBuilder()
    builder.begin_figure(Point(0, 0))
    builder.line_to(Point(10, 0))
    builder.bezier_to(Point(10, 10), Point(0, 10), Point(0, 0))
    return builder.geometry


def _arc_geometry(leading_figure=True):
    builder = GeometryBuilder()
    if leading_figure:
        builder.begin_figure(Point(20, 20)).line_to(Point(30, 20))
    builder.begin_figure(Point(0, 0), is_closed=False)
    builder.line_to(Point(1, 0))
    builder.arc_to(Point(11, 0), PathSize(5, 5))
    return builder.geometry


# ============================================================
# Degree elevation
# ============================================================

class TestElevateQuadratic:
    @pytest.mark.parametrize("p0, p1, p2", [
        (Point(0, 0), Point(5, 10), Point(10, 0)),
        (Point(-3, 2), Point(7, -1), Point(4, 8)),
        (Point(1, 1), Point(1, 1), Point(5, 5)),
    ])
    def test_endpoints_and_shape(self, p0, p1, p2):
        c1, c2, end = elevate_quadratic(p0, p1, p2)
        assert end == p2
        _assert_point(_cubic_at(p0, c1, c2, end, 0.0), p0)
        _assert_point(_cubic_at(p0, c1, c2, end, 1.0), p2)
        for t in (0.25, 0.5, 0.75):
            _assert_point(_cubic_at(p0, c1, c2, end, t), _quad_at(p0, p1, p2, t))

    def test_initial_tangent_parallel(self):
        p0, p1, p2 = Point(0, 0), Point(4, 3), Point(10, 0)
        c1, _, _ = elevate_quadratic(p0, p1, p2)
        d_cubic = c1 - p0
        d_quad = p1 - p0
        assert d_cubic.x * d_quad.y - d_cubic.y * d_quad.x == pytest.approx(0.0)
        assert d_cubic.x * d_quad.x + d_cubic.y * d_quad.y > 0

    def test_formula(self):
        c1, c2, _ = elevate_quadratic(Point(0, 0), Point(3, 6), Point(9, 0))
        _assert_point(c1, Point(2, 4))
        _assert_point(c2, Point(5, 4))


# ============================================================
# Arc approximation
# ============================================================

class TestArcToCubics:
    def test_semicircle_split_in_two(self):
        arc = ArcSegment(Point(10, 0), PathSize(5, 5), 0, False, SweepDirection.CLOCKWISE)
        curves = arc_to_cubics(Point(0, 0), arc)
        assert len(curves) == 2
        _assert_point(curves[0][2], Point(5, -5))
        assert curves[1][2] == Point(10, 0)

    def test_counter_clockwise_other_side(self):
        arc = ArcSegment(Point(10, 0), PathSize(5, 5), 0, False,
                         SweepDirection.COUNTER_CLOCKWISE)
        curves = arc_to_cubics(Point(0, 0), arc)
        _assert_point(curves[0][2], Point(5, 5))

    def test_points_stay_on_circle(self):
        start = Point(0, 0)
        arc = ArcSegment(Point(10, 0), PathSize(5, 5), 0, False, SweepDirection.CLOCKWISE)
        current = start
        for c1, c2, end in arc_to_cubics(start, arc):
            for t in (0.25, 0.5, 0.75):
                p = _cubic_at(current, c1, c2, end, t)
                assert p.distance_to(Point(5, 0)) == pytest.approx(5.0, rel=1e-3)
            current = end

    def test_small_radius_scaled_up(self):
        arc = ArcSegment(Point(10, 0), PathSize(1, 1), 0, False, SweepDirection.CLOCKWISE)
        curves = arc_to_cubics(Point(0, 0), arc)
        _assert_point(curves[0][2], Point(5, -5))

    def test_large_arc_piece_count(self):
        arc = ArcSegment(Point(10, 0), PathSize(10, 10), 0, True, SweepDirection.CLOCKWISE)
        assert len(arc_to_cubics(Point(0, 0), arc)) == 4

    def test_rotated_ellipse_ends_exactly(self):
        arc = ArcSegment(Point(7, 3), PathSize(6, 3), 30, True,
                         SweepDirection.COUNTER_CLOCKWISE)
        curves = arc_to_cubics(Point(-2, 1), arc)
        assert curves[-1][2] == Point(7, 3)

    def test_zero_radius_is_straight(self):
        arc = ArcSegment(Point(9, 0), PathSize(0, 5))
        (c1, c2, end), = arc_to_cubics(Point(0, 0), arc)
        _assert_point(c1, Point(3, 0))
        _assert_point(c2, Point(6, 0))
        assert end == Point(9, 0)

    def test_coincident_endpoints_dropped(self):
        assert arc_to_cubics(Point(1, 1), ArcSegment(Point(1, 1), PathSize(5, 5))) == []


# ============================================================
# PathConverter
# ============================================================

class TestPathConverter:
    def test_end_to_end_call_order(self):
        backend = RecordingBackend()
        count = convert_geometry(_end_to_end_geometry(), backend)
        assert backend.names == ["move_to", "line_to", "cubic_to", "close"]
        assert count == 4
        assert backend.calls[0] == ("move_to", (Point(0, 0),))
        assert backend.calls[2] == ("cubic_to", (Point(10, 10), Point(0, 10), Point(0, 0)))

    def test_open_figure_not_closed(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False).line_to(Point(1, 1))
        backend = RecordingBackend()
        convert_geometry(builder.geometry, backend)
        assert backend.names == ["move_to", "line_to"]

    def test_empty_geometry(self):
        backend = RecordingBackend()
        assert convert_geometry(GeometryBuilder().geometry, backend) == 0
        assert backend.calls == []

    def test_quadratic_elevated_without_quad_to(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False)
        builder.quadratic_bezier_to(Point(3, 6), Point(9, 0))
        backend = RecordingBackend()
        convert_geometry(builder.geometry, backend)
        name, (c1, c2, end) = backend.calls[1]
        assert name == "cubic_to"
        _assert_point(c1, Point(2, 4))
        _assert_point(c2, Point(5, 4))
        assert end == Point(9, 0)

    def test_quadratic_forwarded_with_quad_to(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False)
        builder.quadratic_bezier_to(Point(3, 6), Point(9, 0))
        backend = RecordingBackend(supports_quad=True)
        convert_geometry(builder.geometry, backend)
        assert backend.calls[1] == ("quad_to", (Point(3, 6), Point(9, 0)))

    def test_poly_line(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False)
        builder.poly_line_to([Point(1, 0), Point(1, 1), Point(0, 1)])
        backend = RecordingBackend()
        convert_geometry(builder.geometry, backend)
        assert backend.names == ["move_to", "line_to", "line_to", "line_to"]

    def test_poly_cubic_triples(self):
        points = [Point(i, i) for i in range(1, 7)]
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False).poly_bezier_to(points)
        backend = RecordingBackend()
        convert_geometry(builder.geometry, backend)
        assert backend.calls[1:] == [
            ("cubic_to", tuple(points[0:3])),
            ("cubic_to", tuple(points[3:6])),
        ]

    def test_poly_quadratic_pairs_continue_from_previous_end(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False)
        builder.poly_quadratic_bezier_to([Point(3, 6), Point(9, 0), Point(12, 6), Point(18, 0)])
        backend = RecordingBackend()
        convert_geometry(builder.geometry, backend)
        assert backend.names == ["move_to", "cubic_to", "cubic_to"]
        _, (c1, c2, end) = backend.calls[2]
        _assert_point(c1, Point(11, 4))
        _assert_point(c2, Point(14, 4))
        assert end == Point(18, 0)

    def test_current_point_follows_poly_segments(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False)
        builder.poly_line_to([Point(3, 0)])
        builder.quadratic_bezier_to(Point(6, 6), Point(9, 0))
        backend = RecordingBackend()
        convert_geometry(builder.geometry, backend)
        _, (c1, _, _) = backend.calls[2]
        _assert_point(c1, Point(5, 4))

    def test_arc_forwarded_with_arc_to(self):
        backend = RecordingBackend(supports_arc=True)
        convert_geometry(_arc_geometry(leading_figure=False), backend)
        assert backend.calls[2] == (
            "arc_to", (Point(11, 0), PathSize(5, 5), 0.0, False, SweepDirection.CLOCKWISE))

    def test_unsupported_arc_makes_no_calls(self):
        backend = RecordingBackend()
        with pytest.raises(UnsupportedSegment) as exc:
            convert_geometry(_arc_geometry(), backend)
        assert exc.value.kind is SegmentKind.ARC
        assert backend.calls == []

    def test_approximated_arc(self):
        backend = RecordingBackend()
        convert_geometry(_arc_geometry(leading_figure=False), backend, approximate_arcs=True)
        assert backend.names == ["move_to", "line_to", "cubic_to", "cubic_to"]
        assert backend.calls[-1][1][2] == Point(11, 0)

    def test_plan_does_not_draw(self):
        backend = RecordingBackend()
        calls = PathConverter(backend).plan(_end_to_end_geometry())
        assert [name for name, _ in calls] == ["move_to", "line_to", "cubic_to", "close"]
        assert backend.calls == []

    def test_capabilities_detected(self):
        assert not PathConverter(RecordingBackend()).supports_quad
        assert PathConverter(RecordingBackend(supports_quad=True)).supports_quad
        assert PathConverter(RecordingBackend(supports_arc=True)).supports_arc


# --- Malformed poly segments ---

def _malformed_geometry():
    builder = GeometryBuilder()
    builder.begin_figure(Point(0, 0)).line_to(Point(1, 0))
    builder.begin_figure(Point(0, 0), is_closed=False)
    builder.poly_quadratic_bezier_to([Point(i, i) for i in range(1, 6)])
    return builder.geometry


def test_malformed_poly_strict():
    backend = RecordingBackend()
    with pytest.raises(MalformedPolySegment):
        convert_geometry(_malformed_geometry(), backend)
    assert backend.calls == []


def test_malformed_poly_truncated_when_not_strict(caplog):
    backend = RecordingBackend()
    with caplog.at_level(logging.WARNING, logger="vecpath.converter"):
        convert_geometry(_malformed_geometry(), backend, strict=False)
    assert backend.names == ["move_to", "line_to", "close", "move_to", "cubic_to", "cubic_to"]
    assert "Dropping 1 trailing point" in caplog.text


def test_short_poly_cubic_not_strict_draws_nothing():
    builder = GeometryBuilder()
    builder.begin_figure(Point(0, 0), is_closed=False)
    builder.poly_bezier_to([Point(1, 1), Point(2, 2)])
    backend = RecordingBackend()
    convert_geometry(builder.geometry, backend, strict=False)
    assert backend.names == ["move_to"]


# ============================================================
# ezdxf backend
# ============================================================

class TestEzdxfPathBackend:
    def test_one_path_per_figure(self):
        geometry = _end_to_end_geometry()
        builder = GeometryBuilder(geometry)
        builder.begin_figure(Point(50, 50), is_closed=False).line_to(Point(60, 50))

        backend = EzdxfPathBackend()
        convert_geometry(geometry, backend)

        assert len(backend.paths) == 2
        assert backend.closed == [True, False]
        first = backend.paths[0]
        assert [cmd.type for cmd in first] == [Command.LINE_TO, Command.CURVE4_TO]
        assert first.start.isclose((0, 0))
        assert backend.paths[1].end.isclose((60, 50))

    def test_quadratic_kept_as_curve3(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0), is_closed=False)
        builder.quadratic_bezier_to(Point(5, 5), Point(10, 0))
        backend = EzdxfPathBackend()
        convert_geometry(builder.geometry, backend)
        assert [cmd.type for cmd in backend.paths[0]] == [Command.CURVE3_TO]

    def test_close_adds_closing_line(self):
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0)).line_to(Point(10, 0)).line_to(Point(10, 10))
        backend = EzdxfPathBackend()
        convert_geometry(builder.geometry, backend)
        path = backend.paths[0]
        assert len(path) == 3
        assert path.is_closed

    def test_arc_requires_approximation(self):
        with pytest.raises(UnsupportedSegment):
            convert_geometry(_arc_geometry(), EzdxfPathBackend())

    def test_arc_approximated(self):
        backend = EzdxfPathBackend()
        convert_geometry(_arc_geometry(leading_figure=False), backend, approximate_arcs=True)
        path = backend.paths[0]
        assert path.end.isclose((11, 0))
        assert min(v.y for v in path.flattening(0.01)) == pytest.approx(-5.0, abs=0.01)
