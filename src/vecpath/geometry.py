"""
Path Geometry Model

Backend independent representation of vector path outlines:
a PathGeometry owns PathFigures, a PathFigure owns PathSegments.

Segments are immutable values. Figures and geometries are only mutated by
GeometryBuilder while a geometry is being constructed; serializers, converters
and encoders treat them as read-only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Tuple, Union
import math

from .errors import MalformedPolySegment


class SweepDirection(Enum):
    """Traversal direction of an elliptical arc"""
    CLOCKWISE = "Clockwise"
    COUNTER_CLOCKWISE = "CounterClockwise"


class FillRule(Enum):
    """Rule deciding which regions of a self-intersecting path are inside"""
    NON_ZERO = "NonZero"
    EVEN_ODD = "EvenOdd"


class SegmentKind(Enum):
    """Segment variant tag used for dispatch"""
    LINE = "Line"
    CUBIC_BEZIER = "CubicBezier"
    QUADRATIC_BEZIER = "QuadraticBezier"
    ARC = "Arc"
    POLY_LINE = "PolyLine"
    POLY_CUBIC_BEZIER = "PolyCubicBezier"
    POLY_QUADRATIC_BEZIER = "PolyQuadraticBezier"


@dataclass(frozen=True)
class Point:
    """2D point with x, y coordinates"""
    x: float = 0.0
    y: float = 0.0

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Point':
        return Point(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def distance_to(self, other: 'Point') -> float:
        """Calculate distance to another point"""
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class PathSize:
    """Arc radii"""
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class LineSegment:
    """Straight line to point"""
    point: Point
    is_stroked: bool = True
    is_smooth_join: bool = True

    kind: ClassVar[SegmentKind] = SegmentKind.LINE

    def get_points(self) -> List[Point]:
        return [self.point]


@dataclass(frozen=True)
class CubicBezierSegment:
    """Cubic bezier with two control points (point1, point2) ending at point3"""
    point1: Point
    point2: Point
    point3: Point
    is_stroked: bool = True
    is_smooth_join: bool = True

    kind: ClassVar[SegmentKind] = SegmentKind.CUBIC_BEZIER

    def get_points(self) -> List[Point]:
        return [self.point1, self.point2, self.point3]


@dataclass(frozen=True)
class QuadraticBezierSegment:
    """Quadratic bezier with control point point1 ending at point2"""
    point1: Point
    point2: Point
    is_stroked: bool = True
    is_smooth_join: bool = True

    kind: ClassVar[SegmentKind] = SegmentKind.QUADRATIC_BEZIER

    def get_points(self) -> List[Point]:
        return [self.point1, self.point2]


@dataclass(frozen=True)
class ArcSegment:
    """Elliptical arc to point, in SVG endpoint parameterization"""
    point: Point
    size: PathSize = PathSize()
    rotation_angle: float = 0.0  # in degrees
    is_large_arc: bool = False
    sweep_direction: SweepDirection = SweepDirection.CLOCKWISE
    is_stroked: bool = True
    is_smooth_join: bool = True

    kind: ClassVar[SegmentKind] = SegmentKind.ARC

    def get_points(self) -> List[Point]:
        return [self.point]


@dataclass(frozen=True)
class PolyLineSegment:
    """Connected lines through points"""
    points: Tuple[Point, ...] = ()
    is_stroked: bool = True
    is_smooth_join: bool = True

    kind: ClassVar[SegmentKind] = SegmentKind.POLY_LINE

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))

    def get_points(self) -> List[Point]:
        return list(self.points)


@dataclass(frozen=True)
class PolyCubicBezierSegment:
    """Chain of cubic beziers, three points per curve"""
    points: Tuple[Point, ...] = ()
    is_stroked: bool = True
    is_smooth_join: bool = True

    kind: ClassVar[SegmentKind] = SegmentKind.POLY_CUBIC_BEZIER
    stride: ClassVar[int] = 3

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))

    def get_points(self) -> List[Point]:
        return list(self.points)


@dataclass(frozen=True)
class PolyQuadraticBezierSegment:
    """Chain of quadratic beziers, two points per curve"""
    points: Tuple[Point, ...] = ()
    is_stroked: bool = True
    is_smooth_join: bool = True

    kind: ClassVar[SegmentKind] = SegmentKind.POLY_QUADRATIC_BEZIER
    stride: ClassVar[int] = 2

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))

    def get_points(self) -> List[Point]:
        return list(self.points)


PathSegment = Union[
    LineSegment,
    CubicBezierSegment,
    QuadraticBezierSegment,
    ArcSegment,
    PolyLineSegment,
    PolyCubicBezierSegment,
    PolyQuadraticBezierSegment,
]


def validate_segment(segment: PathSegment) -> None:
    """
    Check that a poly bezier segment has a whole number of curves.

    Raises:
        MalformedPolySegment: point count is not a positive multiple of the stride
    """
    stride = getattr(segment, "stride", None)
    if stride is None:
        return
    count = len(segment.points)
    if count == 0 or count % stride != 0:
        raise MalformedPolySegment(segment.kind, count, stride)


@dataclass
class PathFigure:
    """A start point followed by connected segments"""
    start_point: Point = field(default_factory=Point)
    segments: List[PathSegment] = field(default_factory=list)
    is_filled: bool = True
    is_closed: bool = True

    def get_points(self) -> List[Point]:
        points = [self.start_point]
        for segment in self.segments:
            points.extend(segment.get_points())
        return points


@dataclass
class PathGeometry:
    """Container for all figures of a path"""
    figures: List[PathFigure] = field(default_factory=list)
    fill_rule: FillRule = FillRule.EVEN_ODD

    def get_points(self) -> List[Point]:
        points = []
        for figure in self.figures:
            points.extend(figure.get_points())
        return points

    def get_segment_count(self) -> int:
        """Return total number of segments"""
        return sum(len(figure.segments) for figure in self.figures)

    def validate(self) -> None:
        """Validate every segment, see validate_segment()"""
        for figure in self.figures:
            for segment in figure.segments:
                validate_segment(segment)

    @property
    def is_empty(self) -> bool:
        return not self.figures
