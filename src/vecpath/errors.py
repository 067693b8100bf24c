"""
Error types

All errors raised by the geometry kernel derive from VecPathError so callers
can catch them in one place. They are programmer/data errors: nothing here is
transient and nothing is retried.
"""

from typing import Optional


class VecPathError(Exception):
    """Base error of the package."""


class NoCurrentFigure(VecPathError):
    """A segment was appended before any figure was begun."""

    def __init__(self, operation: str = ""):
        message = "No current figure, call begin_figure() first"
        if operation:
            message = f"{operation}: {message}"
        super().__init__(message)
        self.operation = operation


class UnsupportedSegment(VecPathError):
    """
    The target cannot represent a segment kind.

    Attributes:
        kind: SegmentKind of the offending segment
    """

    def __init__(self, kind, message: Optional[str] = None):
        self.kind = kind
        name = getattr(kind, "value", kind)
        super().__init__(message or f"Not supported segment type: {name}")


class MalformedPolySegment(VecPathError, ValueError):
    """A poly segment whose point count is not a positive multiple of its stride."""

    def __init__(self, kind, count: int, stride: int):
        self.kind = kind
        self.count = count
        self.stride = stride
        name = getattr(kind, "value", kind)
        super().__init__(
            f"{name} segment has {count} points, expected a positive multiple of {stride}"
        )


class OrthographicArrayMismatch(VecPathError, ValueError):
    """UCS orthographic type and origin arrays differ in length."""

    def __init__(self, types_count: int, origins_count: int):
        self.types_count = types_count
        self.origins_count = origins_count
        super().__init__(
            f"Orthographic type/origin count mismatch: {types_count} != {origins_count}"
        )


class PathMarkupError(VecPathError, ValueError):
    """Path markup text could not be parsed."""

    def __init__(self, text: str, index: int, reason: str = "Unexpected token"):
        self.text = text
        self.index = index
        super().__init__(f"{reason} in path data {text!r} at index {index}")
