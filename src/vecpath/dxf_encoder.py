"""
DXF Entity Encoder

Writes entities (LINE, LWPOLYLINE, TEXT) and table records (LTYPE, DIMSTYLE,
UCS) as ASCII DXF group-code text: alternating lines of group code and value.

Output is version gated. For R12 (AC1009) and older neither handles nor
subclass markers (code 100) are written; newer versions get both.
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import List, Optional, Sequence

from .errors import OrthographicArrayMismatch, UnsupportedSegment
from .geometry import PathFigure, Point, SegmentKind, SweepDirection

logger = logging.getLogger(__name__)


class DxfAcadVer(IntEnum):
    """AutoCAD drawing database versions"""
    AC1006 = 1006  # R10
    AC1009 = 1009  # R11 and R12
    AC1012 = 1012  # R13
    AC1014 = 1014  # R14
    AC1015 = 1015  # AutoCAD 2000
    AC1018 = 1018  # AutoCAD 2004
    AC1021 = 1021  # AutoCAD 2007
    AC1024 = 1024  # AutoCAD 2010
    AC1027 = 1027  # AutoCAD 2013
    AC1032 = 1032  # AutoCAD 2018


# Last version without handles and subclass markers
LEGACY_VERSION = DxfAcadVer.AC1009


class DxfDefaultColors(IntEnum):
    ByBlock = 0
    ByLayer = 256
    Default = 7


class DxfLwpolylineFlags(IntFlag):
    Default = 0
    Closed = 1
    Plinegen = 128


class DxfTextGenerationFlags(IntFlag):
    Default = 0
    MirroredInX = 2
    MirroredInY = 4


class DxfHorizontalTextJustification(IntEnum):
    Default = 0  # left
    Center = 1
    Right = 2
    Aligned = 3
    Middle = 4
    Fit = 5


class DxfVerticalTextJustification(IntEnum):
    Baseline = 0
    Bottom = 1
    Middle = 2
    Top = 3


class DxfLtypeStandardFlags(IntFlag):
    Default = 0
    XrefDependent = 16
    XrefResolved = 32
    Referenced = 64


class DxfDimstyleStandardFlags(IntFlag):
    Default = 0
    XrefDependent = 16
    XrefResolved = 32
    Referenced = 64


class DxfUcsStandardFlags(IntFlag):
    Default = 0
    XrefDependent = 16
    XrefResolved = 32
    Referenced = 64


class DxfOrthographicType(IntEnum):
    Top = 1
    Bottom = 2
    Front = 3
    Back = 4
    Left = 5
    Right = 6


class DxfSubclassMarker:
    """Values written with group code 100"""
    Entity = "AcDbEntity"
    Line = "AcDbLine"
    Polyline = "AcDbPolyline"
    Text = "AcDbText"
    SymbolTable = "AcDbSymbolTable"
    SymbolTableRecord = "AcDbSymbolTableRecord"
    LinetypeTableRecord = "AcDbLinetypeTableRecord"
    DimStyleTable = "AcDbDimStyleTable"
    DimStyleTableRecord = "AcDbDimStyleTableRecord"
    UcsTableRecord = "AcDbUCSTableRecord"


@dataclass
class DxfVector3:
    """3D point or direction"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


def format_float(value: float) -> str:
    """Shortest round-trip representation, always with a decimal point"""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Non-finite value cannot be written to DXF: {value}")
    text = repr(value)
    if "." not in text:
        mantissa, sep, exponent = text.partition("e")
        text = mantissa + ".0" + sep + exponent
    return text


class DxfObject:
    """
    Group-code buffer shared by all encoders.

    Subclasses implement create(), which resets the buffer, emits the full
    code sequence and returns build(). Every emitting method returns self so
    calls can be chained.
    """

    def __init__(self, version: DxfAcadVer, id: int = 0):
        self.version = DxfAcadVer(version)
        self.id = id
        self._lines: List[str] = []

    @property
    def is_versioned(self) -> bool:
        """True when handles and subclass markers are written"""
        return self.version > LEGACY_VERSION

    def add(self, code: int, value) -> 'DxfObject':
        """
        Append one code/value pair.

        Args:
            code: DXF group code
            value: str, bool ("1"/"0"), int or float

        Raises:
            TypeError: Unsupported value type
        """
        if isinstance(value, bool):
            text = "1" if value else "0"
        elif isinstance(value, int):
            text = str(int(value))
        elif isinstance(value, float):
            text = format_float(value)
        elif isinstance(value, str):
            text = value
        else:
            raise TypeError(f"Unsupported DXF value type: {type(value).__name__}")
        self._lines.append(str(code))
        self._lines.append(text)
        return self

    def add_vector(self, code: int, vector: DxfVector3) -> 'DxfObject':
        """Append x/y/z using code, code + 10, code + 20"""
        self.add(code, float(vector.x))
        self.add(code + 10, float(vector.y))
        self.add(code + 20, float(vector.z))
        return self

    def append(self, text: str) -> 'DxfObject':
        """Append a pre-built block of group codes"""
        text = text.rstrip("\n")
        if text:
            self._lines.append(text)
        return self

    def handle(self, id: int, code: int = 5) -> 'DxfObject':
        if self.is_versioned:
            self.add(code, format(id, "X"))
        return self

    def subclass(self, name: str) -> 'DxfObject':
        if self.is_versioned:
            self.add(100, name)
        return self

    def entity(self) -> 'DxfObject':
        """Entity preamble: handle and AcDbEntity marker"""
        self.handle(self.id)
        self.subclass(DxfSubclassMarker.Entity)
        return self

    def reset(self) -> 'DxfObject':
        self._lines = []
        return self

    def build(self) -> str:
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"

    def defaults(self):
        """Set all attributes to their default values"""

    def create(self) -> str:
        raise NotImplementedError

    def _set_attribs(self, attribs: dict):
        for name, value in attribs.items():
            if not hasattr(self, name):
                raise AttributeError(f"{type(self).__name__} has no attribute '{name}'")
            setattr(self, name, value)


class DxfLine(DxfObject):
    """LINE entity"""

    def __init__(self, version: DxfAcadVer, id: int = 0, **attribs):
        super().__init__(version, id)
        self.defaults()
        self._set_attribs(attribs)

    def defaults(self):
        self.layer = "0"
        self.color = DxfDefaultColors.ByLayer
        self.thickness = 0.0
        self.start_point = DxfVector3(0.0, 0.0, 0.0)
        self.end_point = DxfVector3(0.0, 0.0, 0.0)
        self.extrusion_direction = DxfVector3(0.0, 0.0, 1.0)

    def create(self) -> str:
        self.reset()
        self.add(0, "LINE")
        self.entity()
        self.add(8, self.layer)
        self.add(62, int(self.color))
        self.subclass(DxfSubclassMarker.Line)
        self.add(39, float(self.thickness))
        self.add_vector(10, self.start_point)
        self.add_vector(11, self.end_point)
        self.add_vector(210, self.extrusion_direction)
        return self.build()


@dataclass
class DxfLwpolylineVertex:
    """LWPOLYLINE vertex, bulge describes the segment to the next vertex"""
    x: float = 0.0
    y: float = 0.0
    start_width: float = 0.0
    end_width: float = 0.0
    bulge: float = 0.0


def arc_bulge(start: Point, end: Point, radius: float, is_large_arc: bool,
              sweep_direction: SweepDirection) -> float:
    """
    Bulge of a circular arc between two points.

    A radius too small to span the chord is scaled up to half the chord.
    Clockwise sweeps give a positive bulge.
    """
    chord = start.distance_to(end)
    if chord == 0.0:
        return 0.0
    radius = max(abs(radius), chord / 2.0)
    angle = 2.0 * math.asin(min(1.0, chord / (2.0 * radius)))
    if is_large_arc:
        angle = 2.0 * math.pi - angle
    bulge = math.tan(angle / 4.0)
    return bulge if sweep_direction is SweepDirection.CLOCKWISE else -bulge


class DxfLwpolyline(DxfObject):
    """LWPOLYLINE entity"""

    def __init__(self, version: DxfAcadVer, id: int = 0, **attribs):
        super().__init__(version, id)
        self.defaults()
        self._set_attribs(attribs)

    def defaults(self):
        self.layer = "0"
        self.color = DxfDefaultColors.ByLayer
        self.polyline_flags = DxfLwpolylineFlags.Default
        self.constant_width = 0.0
        self.elevation = 0.0
        self.thickness = 0.0
        self.vertices: List[DxfLwpolylineVertex] = []
        self.extrusion_direction = DxfVector3(0.0, 0.0, 1.0)

    def create(self) -> str:
        self.reset()
        self.add(0, "LWPOLYLINE")
        self.entity()
        self.add(8, self.layer)
        self.add(62, int(self.color))
        self.subclass(DxfSubclassMarker.Polyline)
        self.add(90, len(self.vertices))
        self.add(70, int(self.polyline_flags))
        self.add(43, float(self.constant_width))
        self.add(38, float(self.elevation))
        self.add(39, float(self.thickness))

        for vertex in self.vertices:
            self.add(10, float(vertex.x))
            self.add(20, float(vertex.y))
            # Per-vertex widths only apply without a constant width
            if self.constant_width == 0.0:
                self.add(40, float(vertex.start_width))
                self.add(41, float(vertex.end_width))
            self.add(42, float(vertex.bulge))

        self.add_vector(210, self.extrusion_direction)
        return self.build()

    @classmethod
    def from_figure(cls, version: DxfAcadVer, id: int, figure: PathFigure,
                    **attribs) -> 'DxfLwpolyline':
        """
        Encode a figure made of lines and circular arcs.

        Args:
            version: Target version
            id: Entity handle
            figure: Figure with line, poly-line and circular arc segments
            **attribs: Entity attributes (layer, color, ...)

        Raises:
            UnsupportedSegment: Bezier segments or non-circular arcs
        """
        vertices = [DxfLwpolylineVertex(figure.start_point.x, figure.start_point.y)]
        current = figure.start_point

        for segment in figure.segments:
            kind = segment.kind
            if kind is SegmentKind.LINE:
                points = [segment.point]
            elif kind is SegmentKind.POLY_LINE:
                points = list(segment.points)
            elif kind is SegmentKind.ARC:
                width, height = abs(segment.size.width), abs(segment.size.height)
                if not math.isclose(width, height):
                    raise UnsupportedSegment(kind, "Elliptical arcs cannot be encoded as bulges")
                if current == segment.point:
                    continue
                vertices[-1].bulge = arc_bulge(
                    current, segment.point, width, segment.is_large_arc,
                    segment.sweep_direction)
                points = [segment.point]
            else:
                raise UnsupportedSegment(kind)

            for point in points:
                vertices.append(DxfLwpolylineVertex(point.x, point.y))
                current = point

        flags = DxfLwpolylineFlags.Default
        if figure.is_closed:
            flags |= DxfLwpolylineFlags.Closed
            first, last = vertices[0], vertices[-1]
            if len(vertices) > 1 and (first.x, first.y) == (last.x, last.y):
                vertices.pop()

        polyline = cls(version, id, **attribs)
        polyline.polyline_flags = flags
        polyline.vertices = vertices
        return polyline


class DxfText(DxfObject):
    """TEXT entity"""

    def __init__(self, version: DxfAcadVer, id: int = 0, **attribs):
        super().__init__(version, id)
        self.defaults()
        self._set_attribs(attribs)

    def defaults(self):
        self.layer = "0"
        self.color = DxfDefaultColors.ByLayer
        self.thickness = 0.0
        self.first_alignment = DxfVector3(0.0, 0.0, 0.0)
        self.text_height = 1.0
        self.default_value = ""
        self.text_rotation = 0.0
        self.scale_factor_x = 1.0
        self.oblique_angle = 0.0
        self.text_style = "Standard"
        self.text_generation_flags = DxfTextGenerationFlags.Default
        self.horizontal_text_justification = DxfHorizontalTextJustification.Default
        self.second_alignment = DxfVector3(0.0, 0.0, 0.0)
        self.extrusion_direction = DxfVector3(0.0, 0.0, 1.0)
        self.vertical_text_justification = DxfVerticalTextJustification.Baseline

    def create(self) -> str:
        self.reset()
        self.add(0, "TEXT")
        self.entity()
        # layer and color lead the entity group, as for LINE; thickness follows AcDbText
        self.add(8, self.layer)
        self.add(62, int(self.color))
        self.subclass(DxfSubclassMarker.Text)
        self.add(39, float(self.thickness))
        self.add_vector(10, self.first_alignment)
        self.add(40, float(self.text_height))
        self.add(1, self.default_value)
        self.add(50, float(self.text_rotation))
        self.add(41, float(self.scale_factor_x))
        self.add(51, float(self.oblique_angle))
        self.add(7, self.text_style)
        self.add(71, int(self.text_generation_flags))
        self.add(72, int(self.horizontal_text_justification))
        self.add_vector(11, self.second_alignment)
        self.add_vector(210, self.extrusion_direction)
        # AcDbText appears twice; readers expect 73 in the second group
        self.subclass(DxfSubclassMarker.Text)
        self.add(73, int(self.vertical_text_justification))
        return self.build()


class DxfLtype(DxfObject):
    """LTYPE table record"""

    def __init__(self, version: DxfAcadVer, id: int = 0, **attribs):
        super().__init__(version, id)
        self.defaults()
        self._set_attribs(attribs)

    def defaults(self):
        self.name = ""
        self.ltype_standard_flags = DxfLtypeStandardFlags.Default
        self.description = ""
        self.dash_lengths: List[float] = []
        self.pattern_length = 0.0

    def create(self) -> str:
        self.reset()
        self.add(0, "LTYPE")
        self.handle(self.id)
        self.subclass(DxfSubclassMarker.SymbolTableRecord)
        self.subclass(DxfSubclassMarker.LinetypeTableRecord)
        self.add(2, self.name)
        self.add(70, int(self.ltype_standard_flags))
        self.add(3, self.description)
        self.add(72, 65)  # always 'A'
        self.add(73, len(self.dash_lengths))
        self.add(40, float(self.pattern_length))
        for length in self.dash_lengths:
            self.add(49, float(length))
            if self.is_versioned:
                self.add(74, 0)  # simple dash, no embedded shape or text
        return self.build()


# (attribute, group code, default)
_DIMSTYLE_VARIABLES = [
    ("dimpost", 3, ""),
    ("dimapost", 4, ""),
]

# Block names were replaced by handle references in R13
_DIMSTYLE_LEGACY_VARIABLES = [
    ("dimblk", 5, ""),
    ("dimblk1", 6, ""),
    ("dimblk2", 7, ""),
]

_DIMSTYLE_COMMON_VARIABLES = [
    ("dimscale", 40, 1.0),
    ("dimasz", 41, 0.18),
    ("dimexo", 42, 0.0625),
    ("dimdli", 43, 0.38),
    ("dimexe", 44, 0.18),
    ("dimrnd", 45, 0.0),
    ("dimdle", 46, 0.0),
    ("dimtp", 47, 0.0),
    ("dimtm", 48, 0.0),
    ("dimtxt", 140, 0.18),
    ("dimcen", 141, 0.09),
    ("dimtsz", 142, 0.0),
    ("dimaltf", 143, 25.4),
    ("dimlfac", 144, 1.0),
    ("dimtvp", 145, 0.0),
    ("dimtfac", 146, 1.0),
    ("dimgap", 147, 0.09),
    ("dimtol", 71, False),
    ("dimlim", 72, False),
    ("dimtih", 73, True),
    ("dimtoh", 74, True),
    ("dimse1", 75, False),
    ("dimse2", 76, False),
    ("dimtad", 77, 0),
    ("dimzin", 78, 0),
    ("dimalt", 170, False),
    ("dimaltd", 171, 2),
    ("dimtofl", 172, False),
    ("dimsah", 173, False),
    ("dimtix", 174, False),
    ("dimsoxd", 175, False),
    ("dimclrd", 176, DxfDefaultColors.ByBlock),
    ("dimclre", 177, DxfDefaultColors.ByBlock),
    ("dimclrt", 178, DxfDefaultColors.ByBlock),
]

# Added in R13
_DIMSTYLE_VERSIONED_VARIABLES = [
    ("dimadec", 179, 0),
    ("dimdec", 271, 4),
    ("dimtdec", 272, 4),
    ("dimaltu", 273, 2),
    ("dimalttd", 274, 2),
    ("dimaunit", 275, 0),
    ("dimjust", 280, 0),
    ("dimsd1", 281, False),
    ("dimsd2", 282, False),
    ("dimtolj", 283, 1),
    ("dimtzin", 284, 0),
    ("dimaltz", 285, 0),
    ("dimalttz", 286, 0),
    ("dimupt", 288, False),
]


class DxfDimstyle(DxfObject):
    """DIMSTYLE table record, the handle uses code 105"""

    def __init__(self, version: DxfAcadVer, id: int = 0, **attribs):
        super().__init__(version, id)
        self.defaults()
        self._set_attribs(attribs)

    def defaults(self):
        self.name = "Standard"
        self.dimstyle_standard_flags = DxfDimstyleStandardFlags.Default
        for table in (_DIMSTYLE_VARIABLES, _DIMSTYLE_LEGACY_VARIABLES,
                      _DIMSTYLE_COMMON_VARIABLES, _DIMSTYLE_VERSIONED_VARIABLES):
            for attr, _, default in table:
                setattr(self, attr, default)

    def _add_variables(self, table):
        for attr, code, _ in table:
            self.add(code, getattr(self, attr))

    def create(self) -> str:
        self.reset()
        self.add(0, "DIMSTYLE")
        # Code 5 is DIMBLK in this record
        self.handle(self.id, 105)
        self.subclass(DxfSubclassMarker.SymbolTableRecord)
        self.subclass(DxfSubclassMarker.DimStyleTableRecord)
        self.add(2, self.name)
        self.add(70, int(self.dimstyle_standard_flags))
        self._add_variables(_DIMSTYLE_VARIABLES)
        if not self.is_versioned:
            self._add_variables(_DIMSTYLE_LEGACY_VARIABLES)
        self._add_variables(_DIMSTYLE_COMMON_VARIABLES)
        if self.is_versioned:
            self._add_variables(_DIMSTYLE_VERSIONED_VARIABLES)
        return self.build()


class DxfUcs(DxfObject):
    """UCS table record"""

    def __init__(self, version: DxfAcadVer, id: int = 0, **attribs):
        super().__init__(version, id)
        self.defaults()
        self._set_attribs(attribs)

    def defaults(self):
        self.name = ""
        self.ucs_standard_flags = DxfUcsStandardFlags.Default
        self.origin = DxfVector3(0.0, 0.0, 0.0)
        self.x_axis_direction = DxfVector3(1.0, 0.0, 0.0)
        self.y_axis_direction = DxfVector3(0.0, 1.0, 0.0)
        self.elevation = 0.0
        self.orthographic_type: Optional[Sequence[DxfOrthographicType]] = None
        self.orthographic_origin: Optional[Sequence[DxfVector3]] = None

    def validate(self):
        """
        Raises:
            OrthographicArrayMismatch: Type and origin arrays differ in length
        """
        if self.orthographic_type is None or self.orthographic_origin is None:
            return
        if len(self.orthographic_type) != len(self.orthographic_origin):
            raise OrthographicArrayMismatch(
                len(self.orthographic_type), len(self.orthographic_origin))

    def create(self) -> str:
        self.reset()
        self.add(0, "UCS")
        self.handle(self.id)
        self.subclass(DxfSubclassMarker.SymbolTableRecord)
        self.subclass(DxfSubclassMarker.UcsTableRecord)
        self.add(2, self.name)
        self.add(70, int(self.ucs_standard_flags))
        self.add_vector(10, self.origin)
        self.add_vector(11, self.x_axis_direction)
        self.add_vector(12, self.y_axis_direction)

        if self.is_versioned:
            self.add(79, 0)
            self.add(146, float(self.elevation))

        types, origins = self.orthographic_type, self.orthographic_origin
        if types is not None and origins is not None:
            if len(types) == len(origins):
                for ortho_type, ortho_origin in zip(types, origins):
                    self.add(71, int(ortho_type))
                    self.add_vector(13, ortho_origin)
            else:
                # Mismatched arrays skip the whole block, output stays readable
                logger.warning(
                    "UCS %r: orthographic type/origin count mismatch (%d != %d), "
                    "orthographic data not written",
                    self.name, len(types), len(origins),
                )
        return self.build()


class DxfTable(DxfObject):
    """Symbol table wrapping its records in TABLE/ENDTAB"""

    def __init__(self, version: DxfAcadVer, id: int = 0, name: str = "",
                 entries: Optional[Sequence[DxfObject]] = None):
        super().__init__(version, id)
        self.name = name
        self.entries = list(entries) if entries is not None else []

    def create(self) -> str:
        self.reset()
        count = len(self.entries)
        self.add(0, "TABLE")
        self.add(2, self.name)
        self.handle(self.id)
        self.subclass(DxfSubclassMarker.SymbolTable)
        self.add(70, count)
        if self.name == "DIMSTYLE":
            self.subclass(DxfSubclassMarker.DimStyleTable)
            if self.is_versioned:
                self.add(71, count)
        for entry in self.entries:
            self.append(entry.create())
        self.add(0, "ENDTAB")
        return self.build()


class DxfHeader(DxfObject):
    """HEADER section with the drawing version and next free handle"""

    def __init__(self, version: DxfAcadVer, id: int = 0, handseed: int = 0):
        super().__init__(version, id)
        self.handseed = handseed

    def create(self) -> str:
        self.reset()
        self.add(0, "SECTION")
        self.add(2, "HEADER")
        self.add(9, "$ACADVER")
        self.add(1, self.version.name)
        if self.is_versioned:
            self.add(9, "$HANDSEED")
            self.add(5, format(self.handseed, "X"))
        self.add(0, "ENDSEC")
        return self.build()
