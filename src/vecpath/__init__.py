"""
vecpath

A vector path geometry kernel for 2D drawing applications.
Builds backend independent path outlines and converts them to SVG/XAML
markup, drawing backend calls and DXF.

Key Features:
- Geometry model with lines, beziers, arcs and their poly variants
- Fluent geometry builder and SVG/XAML path markup parser
- Backend converter with quadratic degree elevation and arc approximation
- Version gated DXF group-code encoder (R12 and later)
- ezdxf based DXF document writer
"""

__version__ = "1.0.0"
__author__ = ""

# Errors
from .errors import (
    VecPathError,
    NoCurrentFigure,
    UnsupportedSegment,
    MalformedPolySegment,
    OrthographicArrayMismatch,
    PathMarkupError,
)

# Geometry model
from .geometry import (
    Point,
    PathSize,
    SweepDirection,
    FillRule,
    SegmentKind,
    LineSegment,
    CubicBezierSegment,
    QuadraticBezierSegment,
    ArcSegment,
    PolyLineSegment,
    PolyCubicBezierSegment,
    PolyQuadraticBezierSegment,
    PathSegment,
    PathFigure,
    PathGeometry,
    validate_segment,
)

# Construction
from .builder import GeometryBuilder

# Markup
from .markup import (
    MarkupFlavor,
    format_number,
    geometry_to_markup,
    to_svg_path_data,
    to_xaml_path_markup,
    parse_path_markup,
)

# Backend conversion
from .converter import (
    PathBackend,
    PathConverter,
    RecordingBackend,
    EzdxfPathBackend,
    convert_geometry,
    elevate_quadratic,
    arc_to_cubics,
)

# DXF writing
from .dxf_writer import (
    GeometryDxfWriter,
    create_dxf_from_geometries,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "VecPathError",
    "NoCurrentFigure",
    "UnsupportedSegment",
    "MalformedPolySegment",
    "OrthographicArrayMismatch",
    "PathMarkupError",
    # Geometry model
    "Point",
    "PathSize",
    "SweepDirection",
    "FillRule",
    "SegmentKind",
    "LineSegment",
    "CubicBezierSegment",
    "QuadraticBezierSegment",
    "ArcSegment",
    "PolyLineSegment",
    "PolyCubicBezierSegment",
    "PolyQuadraticBezierSegment",
    "PathSegment",
    "PathFigure",
    "PathGeometry",
    "validate_segment",
    # Construction
    "GeometryBuilder",
    # Markup
    "MarkupFlavor",
    "format_number",
    "geometry_to_markup",
    "to_svg_path_data",
    "to_xaml_path_markup",
    "parse_path_markup",
    # Backend conversion
    "PathBackend",
    "PathConverter",
    "RecordingBackend",
    "EzdxfPathBackend",
    "convert_geometry",
    "elevate_quadratic",
    "arc_to_cubics",
    # DXF writing
    "GeometryDxfWriter",
    "create_dxf_from_geometries",
]
