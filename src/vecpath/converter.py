"""
Backend Path Converter

Lowers a PathGeometry onto a drawing backend that only offers a small
capability set: move, line, cubic bezier, close and optionally quadratic
bezier and elliptical arc.

The whole geometry is planned before the backend sees the first call, so a
geometry the backend cannot represent leaves the backend untouched.
"""

import logging
import math
from typing import Any, Callable, List, Optional, Protocol, Tuple

import numpy as np
from ezdxf.path import Path as DxfPath

from .errors import UnsupportedSegment
from .geometry import (
    ArcSegment, PathFigure, PathGeometry, PathSize, Point, SegmentKind,
    SweepDirection, validate_segment,
)

logger = logging.getLogger(__name__)

Call = Tuple[str, Tuple[Any, ...]]


class PathBackend(Protocol):
    """
    Minimal drawing surface.

    Backends may additionally provide:
        quad_to(control, end)
        arc_to(point, size, rotation_angle, is_large_arc, sweep_direction)
    Their presence is detected at conversion time.
    """

    def move_to(self, point: Point) -> None: ...

    def line_to(self, point: Point) -> None: ...

    def cubic_to(self, control1: Point, control2: Point, end: Point) -> None: ...

    def close(self) -> None: ...


def _has_capability(backend: Any, name: str) -> bool:
    return callable(getattr(backend, name, None))


def elevate_quadratic(p0: Point, p1: Point, p2: Point) -> Tuple[Point, Point, Point]:
    """
    Degree-elevate a quadratic bezier to a cubic one.

    Args:
        p0: Current point (start of the curve)
        p1: Quadratic control point
        p2: End point

    Returns:
        (control1, control2, end) of the equivalent cubic
    """
    c1 = p0 + (p1 - p0) * (2.0 / 3.0)
    c2 = c1 + (p2 - p0) * (1.0 / 3.0)
    return c1, c2, p2


def arc_to_cubics(start: Point, arc: ArcSegment) -> List[Tuple[Point, Point, Point]]:
    """
    Approximate an elliptical arc with cubic beziers.

    Uses the SVG endpoint to center parameterization; the sweep is split into
    pieces of at most 90 degrees.

    Args:
        start: Current point
        arc: Arc segment ending at arc.point

    Returns:
        List of (control1, control2, end). A zero radius yields a single
        straight cubic, coincident endpoints yield an empty list.
    """
    end = arc.point
    if start.x == end.x and start.y == end.y:
        return []

    rx = abs(arc.size.width)
    ry = abs(arc.size.height)
    if rx == 0.0 or ry == 0.0:
        c1 = start + (end - start) * (1.0 / 3.0)
        c2 = start + (end - start) * (2.0 / 3.0)
        return [(c1, c2, end)]

    phi = math.radians(arc.rotation_angle)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    rotation = np.array([[cos_phi, -sin_phi], [sin_phi, cos_phi]])

    p_start = np.array([start.x, start.y])
    p_end = np.array([end.x, end.y])
    x1p, y1p = rotation.T @ ((p_start - p_end) / 2.0)

    # Scale up radii that cannot span the endpoints
    lam = (x1p / rx) ** 2 + (y1p / ry) ** 2
    if lam > 1.0:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    sweep = arc.sweep_direction is SweepDirection.CLOCKWISE
    num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    coef = math.sqrt(max(0.0, num / den))
    if arc.is_large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx
    center = rotation @ np.array([cxp, cyp]) + (p_start + p_end) / 2.0

    theta1 = math.atan2((y1p - cyp) / ry, (x1p - cxp) / rx)
    theta2 = math.atan2((-y1p - cyp) / ry, (-x1p - cxp) / rx)
    delta = theta2 - theta1
    if sweep and delta < 0:
        delta += 2 * math.pi
    elif not sweep and delta > 0:
        delta -= 2 * math.pi

    count = max(1, int(math.ceil(abs(delta) / (math.pi / 2) - 1e-9)))
    step = delta / count
    k = 4.0 / 3.0 * math.tan(step / 4.0)

    angles = theta1 + step * np.arange(count + 1)
    cos_a, sin_a = np.cos(angles), np.sin(angles)
    on_curve = np.stack([cos_a, sin_a], axis=1)
    tangent = np.stack([-sin_a, cos_a], axis=1)

    # Unit circle control points -> ellipse in user space
    transform = rotation @ np.diag([rx, ry])
    ctrl1 = (on_curve[:-1] + k * tangent[:-1]) @ transform.T + center
    ctrl2 = (on_curve[1:] - k * tangent[1:]) @ transform.T + center
    ends = on_curve[1:] @ transform.T + center

    curves = []
    for i in range(count):
        curve_end = end if i == count - 1 else Point(float(ends[i][0]), float(ends[i][1]))
        curves.append((
            Point(float(ctrl1[i][0]), float(ctrl1[i][1])),
            Point(float(ctrl2[i][0]), float(ctrl2[i][1])),
            curve_end,
        ))
    return curves


class PathConverter:
    """
    Convert geometry to backend drawing calls.

    Usage:
        converter = PathConverter(backend)
        converter.convert(geometry)

        # Arcs on a backend without arc_to
        PathConverter(backend, approximate_arcs=True).convert(geometry)
    """

    def __init__(self, backend: PathBackend, approximate_arcs: bool = False,
                 strict: bool = True):
        """
        Initialize converter.

        Args:
            backend: Drawing surface receiving the calls
            approximate_arcs: Replace arcs by cubic beziers when the backend
                              has no arc_to instead of failing
            strict: Reject poly bezier segments with a point count that is
                    not a positive multiple of their stride. If False,
                    trailing points are dropped with a warning.
        """
        self.backend = backend
        self.approximate_arcs = approximate_arcs
        self.strict = strict
        self.supports_quad = _has_capability(backend, "quad_to")
        self.supports_arc = _has_capability(backend, "arc_to")

    def convert(self, geometry: PathGeometry) -> int:
        """
        Emit the drawing calls for every figure of the geometry.

        Returns:
            Number of backend calls made

        Raises:
            UnsupportedSegment: Arc without arc_to and approximation disabled
            MalformedPolySegment: Bad poly point count in strict mode
        """
        calls = self.plan(geometry)
        for name, args in calls:
            getattr(self.backend, name)(*args)
        return len(calls)

    def plan(self, geometry: PathGeometry) -> List[Call]:
        """Lower the geometry to a list of (method name, args) without drawing"""
        calls: List[Call] = []
        for figure in geometry.figures:
            self._plan_figure(figure, calls)
        return calls

    def _plan_figure(self, figure: PathFigure, calls: List[Call]):
        current = figure.start_point
        calls.append(("move_to", (current,)))

        for segment in figure.segments:
            kind = segment.kind

            if kind is SegmentKind.LINE:
                calls.append(("line_to", (segment.point,)))
                current = segment.point

            elif kind is SegmentKind.CUBIC_BEZIER:
                calls.append(("cubic_to", (segment.point1, segment.point2, segment.point3)))
                current = segment.point3

            elif kind is SegmentKind.QUADRATIC_BEZIER:
                current = self._plan_quad(current, segment.point1, segment.point2, calls)

            elif kind is SegmentKind.POLY_LINE:
                for point in segment.points:
                    calls.append(("line_to", (point,)))
                    current = point

            elif kind is SegmentKind.POLY_CUBIC_BEZIER:
                points = self._usable_points(segment)
                for i in range(0, len(points), 3):
                    calls.append(("cubic_to", (points[i], points[i + 1], points[i + 2])))
                    current = points[i + 2]

            elif kind is SegmentKind.POLY_QUADRATIC_BEZIER:
                points = self._usable_points(segment)
                for i in range(0, len(points), 2):
                    current = self._plan_quad(current, points[i], points[i + 1], calls)

            elif kind is SegmentKind.ARC:
                current = self._plan_arc(current, segment, calls)

            else:
                raise UnsupportedSegment(kind)

        if figure.is_closed:
            calls.append(("close", ()))

    def _plan_quad(self, current: Point, control: Point, end: Point,
                   calls: List[Call]) -> Point:
        if self.supports_quad:
            calls.append(("quad_to", (control, end)))
        else:
            calls.append(("cubic_to", elevate_quadratic(current, control, end)))
        return end

    def _plan_arc(self, current: Point, arc: ArcSegment, calls: List[Call]) -> Point:
        if self.supports_arc:
            calls.append(("arc_to", (arc.point, arc.size, arc.rotation_angle,
                                     arc.is_large_arc, arc.sweep_direction)))
        elif self.approximate_arcs:
            for curve in arc_to_cubics(current, arc):
                calls.append(("cubic_to", curve))
        else:
            raise UnsupportedSegment(SegmentKind.ARC)
        return arc.point

    def _usable_points(self, segment) -> Tuple[Point, ...]:
        if self.strict:
            validate_segment(segment)
            return segment.points
        count = len(segment.points)
        usable = count - count % segment.stride
        if usable != count:
            logger.warning(
                "Dropping %d trailing point(s) of %s segment with %d points",
                count - usable, segment.kind.value, count,
            )
        return segment.points[:usable]


def convert_geometry(geometry: PathGeometry, backend: PathBackend, **options) -> int:
    """
    Convert geometry with a one-off PathConverter.

    Args:
        geometry: Geometry to draw
        backend: Drawing surface
        **options: PathConverter options (approximate_arcs, strict)

    Returns:
        Number of backend calls made
    """
    return PathConverter(backend, **options).convert(geometry)


class RecordingBackend:
    """Backend that records calls as (name, args) tuples"""

    def __init__(self, supports_quad: bool = False, supports_arc: bool = False):
        self.calls: List[Call] = []
        # Hide optional capabilities from attribute detection
        if not supports_quad:
            self.quad_to: Optional[Callable] = None
        if not supports_arc:
            self.arc_to: Optional[Callable] = None

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def move_to(self, point: Point):
        self.calls.append(("move_to", (point,)))

    def line_to(self, point: Point):
        self.calls.append(("line_to", (point,)))

    def cubic_to(self, control1: Point, control2: Point, end: Point):
        self.calls.append(("cubic_to", (control1, control2, end)))

    def quad_to(self, control: Point, end: Point):
        self.calls.append(("quad_to", (control, end)))

    def arc_to(self, point: Point, size: PathSize, rotation_angle: float,
               is_large_arc: bool, sweep_direction: SweepDirection):
        self.calls.append(("arc_to", (point, size, rotation_angle,
                                      is_large_arc, sweep_direction)))

    def close(self):
        self.calls.append(("close", ()))


class EzdxfPathBackend:
    """
    Collect ezdxf Path objects, one per figure.

    ezdxf paths have no elliptical arc command, so arcs need
    approximate_arcs=True on the converter.
    """

    def __init__(self):
        self.paths: List[DxfPath] = []
        self.closed: List[bool] = []
        self._path: Optional[DxfPath] = None

    def move_to(self, point: Point):
        self._path = DxfPath(start=point.to_tuple())
        self.paths.append(self._path)
        self.closed.append(False)

    def line_to(self, point: Point):
        self._path.line_to(point.to_tuple())

    def cubic_to(self, control1: Point, control2: Point, end: Point):
        self._path.curve4_to(end.to_tuple(), control1.to_tuple(), control2.to_tuple())

    def quad_to(self, control: Point, end: Point):
        self._path.curve3_to(end.to_tuple(), control.to_tuple())

    def close(self):
        self._path.close()
        self.closed[-1] = True
