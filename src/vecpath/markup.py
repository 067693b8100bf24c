"""
Path Markup Module

Renders geometry to the SVG path data and XAML path mini-languages and parses
that markup back into a PathGeometry.

Both flavors share one grammar (M, L, C, Q, A, z) and one number format:
invariant, '.' as decimal separator, no grouping, integral values without a
fractional part. XAML additionally carries the fill rule as an 'F0'/'F1'
prefix.
"""

from enum import Enum
from typing import Iterable, Optional
import math
import re

from .builder import GeometryBuilder
from .errors import PathMarkupError
from .geometry import (
    FillRule, PathFigure, PathGeometry, PathSegment, PathSize, Point,
    SegmentKind, SweepDirection,
)


class MarkupFlavor(Enum):
    """Target markup dialect"""
    SVG = "svg"
    XAML = "xaml"


def format_number(value: float) -> str:
    """
    Format a number independent of locale.

    Raises:
        ValueError: value is NaN or infinite
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Number not representable in path markup: {value}")
    if value == 0.0:
        return "0"  # also folds -0.0
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def format_point(point: Point) -> str:
    return f"{format_number(point.x)},{format_number(point.y)}"


def format_size(size: PathSize) -> str:
    return f"{format_number(size.width)},{format_number(size.height)}"


def _format_points(points: Iterable[Point]) -> str:
    return " ".join(format_point(p) for p in points)


def segment_to_markup(segment: PathSegment) -> str:
    """Render a single segment"""
    kind = segment.kind

    if kind is SegmentKind.LINE:
        return "L" + format_point(segment.point)

    elif kind is SegmentKind.CUBIC_BEZIER:
        return "C" + _format_points(segment.get_points())

    elif kind is SegmentKind.QUADRATIC_BEZIER:
        return "Q" + _format_points(segment.get_points())

    elif kind is SegmentKind.ARC:
        return "A{} {} {} {} {}".format(
            format_size(segment.size),
            format_number(segment.rotation_angle),
            "1" if segment.is_large_arc else "0",
            "1" if segment.sweep_direction is SweepDirection.CLOCKWISE else "0",
            format_point(segment.point),
        )

    elif kind is SegmentKind.POLY_LINE:
        if not segment.points:
            return ""
        return "L" + _format_points(segment.points)

    elif kind is SegmentKind.POLY_CUBIC_BEZIER:
        # Flat point list after a single letter, trailing points included
        if len(segment.points) < 3:
            return ""
        return "C" + _format_points(segment.points)

    elif kind is SegmentKind.POLY_QUADRATIC_BEZIER:
        if len(segment.points) < 2:
            return ""
        return "Q" + _format_points(segment.points)

    raise TypeError(f"Unknown segment type: {type(segment).__name__}")


def figure_to_markup(figure: PathFigure) -> str:
    """Render 'M' + start point, the segments, and 'z' when closed"""
    parts = ["M", format_point(figure.start_point)]
    parts.extend(segment_to_markup(segment) for segment in figure.segments)
    if figure.is_closed:
        parts.append("z")
    return "".join(parts)


def geometry_to_markup(geometry: PathGeometry,
                       flavor: MarkupFlavor = MarkupFlavor.SVG) -> str:
    """
    Render all figures of a geometry in order.

    Args:
        geometry: Geometry to render
        flavor: SVG path data or XAML path markup

    Returns:
        Markup string, empty for a geometry without figures
    """
    body = "".join(figure_to_markup(figure) for figure in geometry.figures)
    if not body:
        return ""
    # EvenOdd is the XAML default, only NonZero needs the prefix
    if flavor is MarkupFlavor.XAML and geometry.fill_rule is FillRule.NON_ZERO:
        return "F1 " + body
    return body


def to_svg_path_data(geometry: PathGeometry) -> str:
    return geometry_to_markup(geometry, MarkupFlavor.SVG)


def to_xaml_path_markup(geometry: PathGeometry) -> str:
    return geometry_to_markup(geometry, MarkupFlavor.XAML)


_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_FILL_RULE_RE = re.compile(r"\s*F\s*([01])")
_WHITESPACE = " \t\r\n"
_NUMBER_START = "+-.0123456789"


class _PathScanner:
    """Cursor over path markup text"""

    def __init__(self, text: str, index: int = 0):
        self.text = text
        self.index = index

    def error(self, reason: str = "Unexpected token", index: Optional[int] = None):
        raise PathMarkupError(self.text, self.index if index is None else index, reason)

    def has_more(self) -> bool:
        return self.index < len(self.text)

    def _skip_whitespace(self, index: int) -> int:
        while index < len(self.text) and self.text[index] in _WHITESPACE:
            index += 1
        return index

    def _skip_separators(self, index: int) -> int:
        index = self._skip_whitespace(index)
        if index < len(self.text) and self.text[index] == ",":
            index = self._skip_whitespace(index + 1)
        return index

    def next_command(self) -> Optional[str]:
        self.index = self._skip_whitespace(self.index)
        if not self.has_more():
            return None
        ch = self.text[self.index]
        if not ch.isalpha():
            self.error()
        self.index += 1
        return ch

    def at_number(self) -> bool:
        index = self._skip_separators(self.index)
        return index < len(self.text) and self.text[index] in _NUMBER_START

    def read_number(self) -> float:
        self.index = self._skip_separators(self.index)
        match = _NUMBER_RE.match(self.text, self.index)
        if match is None:
            self.error("Expected number")
        start = self.index
        self.index = match.end()
        value = float(match.group())
        if not math.isfinite(value):
            self.error("Number out of range", start)
        return value

    def read_flag(self) -> bool:
        self.index = self._skip_separators(self.index)
        if self.has_more() and self.text[self.index] in "01":
            self.index += 1
            return self.text[self.index - 1] == "1"
        self.error("Expected arc flag")


class _PathMarkupParser:
    """
    Drive a GeometryBuilder from path markup.

    Figures start open; 'z' closes the current figure. Drawing commands after
    'z' without a new 'M' start a figure at the last start point.
    """

    def __init__(self, text: str, builder: GeometryBuilder):
        self.builder = builder
        self.scanner = _PathScanner(text)
        self.last_start = Point(0, 0)
        self.last_point = Point(0, 0)
        self.second_last_point = Point(0, 0)
        self.figure_started = False

    def _read_point(self, cmd: str) -> Point:
        x = self.scanner.read_number()
        y = self.scanner.read_number()
        if cmd.islower():
            return Point(x + self.last_point.x, y + self.last_point.y)
        return Point(x, y)

    def _reflect(self) -> Point:
        return Point(2 * self.last_point.x - self.second_last_point.x,
                     2 * self.last_point.y - self.second_last_point.y)

    def _ensure_figure(self):
        if not self.figure_started:
            self.builder.begin_figure(self.last_start, is_filled=True, is_closed=False)
            self.figure_started = True

    def parse(self):
        scanner = self.scanner
        builder = self.builder
        first = True
        last_cmd = " "

        while True:
            cmd = scanner.next_command()
            if cmd is None:
                break

            if first:
                if cmd not in "Mm":
                    scanner.error("Path data must start with a move command", scanner.index - 1)
                first = False

            upper = cmd.upper()

            if upper == "M":
                self.last_point = self._read_point(cmd)
                builder.begin_figure(self.last_point, is_filled=True, is_closed=False)
                self.figure_started = True
                self.last_start = self.last_point
                last_cmd = "M"
                # Extra coordinate pairs are implicit line commands
                while scanner.at_number():
                    self.last_point = self._read_point(cmd)
                    builder.line_to(self.last_point, is_smooth_join=False)
                    last_cmd = "L"

            elif upper in "LHV":
                self._ensure_figure()
                while True:
                    if upper == "L":
                        self.last_point = self._read_point(cmd)
                    elif upper == "H":
                        x = scanner.read_number()
                        if cmd == "h":
                            x += self.last_point.x
                        self.last_point = Point(x, self.last_point.y)
                    else:
                        y = scanner.read_number()
                        if cmd == "v":
                            y += self.last_point.y
                        self.last_point = Point(self.last_point.x, y)
                    builder.line_to(self.last_point, is_smooth_join=False)
                    if not scanner.at_number():
                        break
                last_cmd = "L"

            elif upper in "CS":
                self._ensure_figure()
                while True:
                    if upper == "S":
                        control1 = self._reflect() if last_cmd == "C" else self.last_point
                    else:
                        control1 = self._read_point(cmd)
                    self.second_last_point = self._read_point(cmd)
                    self.last_point = self._read_point(cmd)
                    builder.bezier_to(control1, self.second_last_point, self.last_point,
                                      is_smooth_join=False)
                    last_cmd = "C"
                    if not scanner.at_number():
                        break

            elif upper in "QT":
                self._ensure_figure()
                while True:
                    if upper == "T":
                        self.second_last_point = self._reflect() if last_cmd == "Q" else self.last_point
                    else:
                        self.second_last_point = self._read_point(cmd)
                    self.last_point = self._read_point(cmd)
                    builder.quadratic_bezier_to(self.second_last_point, self.last_point,
                                                is_smooth_join=False)
                    last_cmd = "Q"
                    if not scanner.at_number():
                        break

            elif upper == "A":
                self._ensure_figure()
                while True:
                    width = scanner.read_number()
                    height = scanner.read_number()
                    rotation = scanner.read_number()
                    is_large = scanner.read_flag()
                    sweep = scanner.read_flag()
                    self.last_point = self._read_point(cmd)
                    builder.arc_to(
                        self.last_point,
                        PathSize(width, height),
                        rotation,
                        is_large,
                        SweepDirection.CLOCKWISE if sweep else SweepDirection.COUNTER_CLOCKWISE,
                        is_smooth_join=False,
                    )
                    if not scanner.at_number():
                        break
                last_cmd = "A"

            elif upper == "Z":
                self._ensure_figure()
                builder.set_closed_state(True)
                self.figure_started = False
                self.last_point = self.last_start
                last_cmd = "Z"

            else:
                scanner.error(index=scanner.index - 1)


def parse_path_markup(text: str, fill_rule: FillRule = FillRule.EVEN_ODD) -> PathGeometry:
    """
    Parse SVG path data or XAML path markup into a new geometry.

    Args:
        text: Path data, e.g. "M0,0 L10,0 C10,10 0,10 0,0 z"
        fill_rule: Fill rule used unless the text starts with 'F0'/'F1'

    Returns:
        PathGeometry built through GeometryBuilder

    Raises:
        PathMarkupError: Text is not valid path markup

    Markup rendered from poly segments with an incomplete trailing group
    (e.g. five poly-quadratic points) does not parse back.
    """
    start = 0
    match = _FILL_RULE_RE.match(text)
    if match:
        fill_rule = FillRule.NON_ZERO if match.group(1) == "1" else FillRule.EVEN_ODD
        start = match.end()

    builder = GeometryBuilder(fill_rule=fill_rule)
    parser = _PathMarkupParser(text, builder)
    parser.scanner.index = start
    parser.parse()
    return builder.geometry
