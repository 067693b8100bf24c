"""
Geometry Builder

Ordered, stateful construction of a PathGeometry mirroring classic path
drawing APIs (BeginFigure, LineTo, ArcTo, BezierTo, ...).
"""

from typing import Iterable, Optional

from .errors import NoCurrentFigure
from .geometry import (
    ArcSegment, CubicBezierSegment, FillRule, LineSegment, PathFigure,
    PathGeometry, PathSegment, PathSize, Point, PolyCubicBezierSegment,
    PolyLineSegment, PolyQuadraticBezierSegment, QuadraticBezierSegment,
    SweepDirection,
)


class GeometryBuilder:
    """
    Append figures and segments to a PathGeometry.

    The only mutable state is the index of the current figure. A builder is
    bound to one geometry and is not safe for concurrent use.

    Usage:
        builder = GeometryBuilder()
        builder.begin_figure(Point(0, 0))
        builder.line_to(Point(10, 0)).bezier_to(
            Point(10, 10), Point(0, 10), Point(0, 0))
        geometry = builder.geometry
    """

    def __init__(self, geometry: Optional[PathGeometry] = None,
                 fill_rule: FillRule = FillRule.EVEN_ODD):
        """
        Initialize builder.

        Args:
            geometry: Existing geometry to append to. If None, an empty
                      geometry with the given fill rule is created.
            fill_rule: Fill rule of the new geometry
        """
        self.geometry = geometry if geometry is not None else PathGeometry(fill_rule=fill_rule)
        self._current_figure_index: Optional[int] = None

    @property
    def current_figure(self) -> Optional[PathFigure]:
        if self._current_figure_index is None:
            return None
        return self.geometry.figures[self._current_figure_index]

    def _require_figure(self, operation: str) -> PathFigure:
        figure = self.current_figure
        if figure is None:
            raise NoCurrentFigure(operation)
        return figure

    def _append(self, operation: str, segment: PathSegment) -> 'GeometryBuilder':
        self._require_figure(operation).segments.append(segment)
        return self

    def begin_figure(self, start_point: Point, is_filled: bool = True,
                     is_closed: bool = True) -> 'GeometryBuilder':
        """Append a new figure and make it current"""
        self.geometry.figures.append(PathFigure(
            start_point=start_point,
            segments=[],
            is_filled=is_filled,
            is_closed=is_closed,
        ))
        self._current_figure_index = len(self.geometry.figures) - 1
        return self

    def set_closed_state(self, is_closed: bool) -> 'GeometryBuilder':
        """Set the closed flag of the current figure"""
        self._require_figure("set_closed_state").is_closed = is_closed
        return self

    def line_to(self, point: Point, is_stroked: bool = True,
                is_smooth_join: bool = True) -> 'GeometryBuilder':
        return self._append("line_to", LineSegment(point, is_stroked, is_smooth_join))

    def arc_to(self, point: Point, size: PathSize, rotation_angle: float = 0.0,
               is_large_arc: bool = False,
               sweep_direction: SweepDirection = SweepDirection.CLOCKWISE,
               is_stroked: bool = True,
               is_smooth_join: bool = True) -> 'GeometryBuilder':
        return self._append("arc_to", ArcSegment(
            point, size, rotation_angle, is_large_arc, sweep_direction,
            is_stroked, is_smooth_join))

    def bezier_to(self, point1: Point, point2: Point, point3: Point,
                  is_stroked: bool = True,
                  is_smooth_join: bool = True) -> 'GeometryBuilder':
        return self._append("bezier_to", CubicBezierSegment(
            point1, point2, point3, is_stroked, is_smooth_join))

    def quadratic_bezier_to(self, point1: Point, point2: Point,
                            is_stroked: bool = True,
                            is_smooth_join: bool = True) -> 'GeometryBuilder':
        return self._append("quadratic_bezier_to", QuadraticBezierSegment(
            point1, point2, is_stroked, is_smooth_join))

    def poly_line_to(self, points: Iterable[Point], is_stroked: bool = True,
                     is_smooth_join: bool = True) -> 'GeometryBuilder':
        return self._append("poly_line_to", PolyLineSegment(
            tuple(points), is_stroked, is_smooth_join))

    def poly_bezier_to(self, points: Iterable[Point], is_stroked: bool = True,
                       is_smooth_join: bool = True) -> 'GeometryBuilder':
        # Point counts are checked on conversion, not here
        return self._append("poly_bezier_to", PolyCubicBezierSegment(
            tuple(points), is_stroked, is_smooth_join))

    def poly_quadratic_bezier_to(self, points: Iterable[Point],
                                 is_stroked: bool = True,
                                 is_smooth_join: bool = True) -> 'GeometryBuilder':
        return self._append("poly_quadratic_bezier_to", PolyQuadraticBezierSegment(
            tuple(points), is_stroked, is_smooth_join))
