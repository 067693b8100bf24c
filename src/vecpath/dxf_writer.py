"""
DXF Writer Module

Renders PathGeometry objects into DXF drawings using the ezdxf library.
Figures become splines and polylines (polylines only for R12); closed,
filled figures additionally get a solid hatch.
"""

import io
import logging
from typing import Iterable, List

import ezdxf
from ezdxf import path as ezpath

from .converter import EzdxfPathBackend, PathConverter
from .dxf_encoder import DxfDefaultColors
from .geometry import PathGeometry

logger = logging.getLogger(__name__)


class GeometryDxfWriter:
    """
    Write path geometry to DXF format.

    Usage:
        writer = GeometryDxfWriter("R2010")
        writer.create_document()
        writer.add_geometry(geometry, layer="OUTLINE")
        writer.save("drawing.dxf")
    """

    # DXF version mapping
    VERSION_MAP = {
        "R12": "R12",
        "R2000": "R2000",
        "R2004": "R2004",
        "R2007": "R2007",
        "R2010": "R2010",
        "R2013": "R2013",
        "R2018": "R2018",
    }

    def __init__(self, version: str = "R2010", approximate_arcs: bool = False):
        """
        Initialize DXF writer.

        Args:
            version: DXF version (R12, R2000, R2004, R2007, R2010, R2013, R2018)
            approximate_arcs: Convert arc segments to cubic beziers. Without
                              it geometries containing arcs are rejected.
        """
        if version not in self.VERSION_MAP:
            logger.warning("Unknown DXF version %r, using R2010", version)
        self.version = self.VERSION_MAP.get(version, "R2010")
        self.approximate_arcs = approximate_arcs
        self.doc = None
        self.msp = None
        self.layers_created = set()

    @property
    def supports_hatches(self) -> bool:
        return self.version != "R12"

    def create_document(self) -> "ezdxf.document.Drawing":
        """
        Create a new empty DXF document.

        Returns:
            ezdxf Drawing object
        """
        self.doc = ezdxf.new(self.version)
        self.msp = self.doc.modelspace()
        self.layers_created = {"0"}
        logger.debug("Created %s document", self.version)
        return self.doc

    def _get_or_create_layer(self, layer_name: str) -> str:
        if not layer_name:
            return "0"
        if layer_name not in self.layers_created:
            if layer_name not in self.doc.layers:
                self.doc.layers.add(layer_name)
            self.layers_created.add(layer_name)
        return layer_name

    def add_geometry(self, geometry: PathGeometry, layer: str = "0",
                     color: int = DxfDefaultColors.ByLayer) -> int:
        """
        Render a geometry into modelspace.

        Args:
            geometry: Geometry to render
            layer: Target layer, created when missing
            color: AutoCAD color index, 256 = BYLAYER

        Returns:
            Number of entities added

        Raises:
            UnsupportedSegment: Geometry has arcs and approximate_arcs is off
            MalformedPolySegment: Poly segment with a bad point count
        """
        if self.doc is None:
            self.create_document()

        backend = EzdxfPathBackend()
        PathConverter(backend, approximate_arcs=self.approximate_arcs).convert(geometry)

        attribs = {"layer": self._get_or_create_layer(layer), "color": int(color)}
        paths = [p for p in backend.paths if len(p)]

        if self.version == "R12":
            entities = ezpath.render_polylines2d(self.msp, paths, dxfattribs=attribs)
        else:
            entities = ezpath.render_splines_and_polylines(self.msp, paths, dxfattribs=attribs)
        count = len(entities)

        if self.supports_hatches:
            # Paths and figures are parallel, one path per figure
            fill_paths = [
                p for p, closed, figure in zip(backend.paths, backend.closed, geometry.figures)
                if closed and figure.is_filled and len(p)
            ]
            if fill_paths:
                count += len(ezpath.render_hatches(self.msp, fill_paths, dxfattribs=attribs))

        logger.debug("Added %d entities for %d figures on layer %s",
                     count, len(geometry.figures), attribs["layer"])
        return count

    def add_geometries(self, geometries: Iterable[PathGeometry], layer: str = "0",
                       color: int = DxfDefaultColors.ByLayer) -> int:
        return sum(self.add_geometry(g, layer, color) for g in geometries)

    def save(self, filepath: str):
        """
        Save the DXF document to file.

        Args:
            filepath: Output file path
        """
        if self.doc:
            self.doc.saveas(filepath, encoding='utf-8')

    def save_to_bytes(self) -> bytes:
        """
        Save the DXF document to bytes.

        Returns:
            DXF file content as bytes
        """
        if self.doc:
            stream = io.StringIO()
            self.doc.write(stream)
            return stream.getvalue().encode(self.doc.output_encoding)
        return b""


def create_dxf_from_geometries(geometries: List[PathGeometry], output_path: str,
                               version: str = "R2010", layer: str = "0",
                               approximate_arcs: bool = False) -> str:
    """
    Convenience function to create a DXF file from geometries.

    Args:
        geometries: Geometries to render
        output_path: Output DXF file path
        version: DXF version
        layer: Layer for all entities
        approximate_arcs: Convert arcs to cubic beziers

    Returns:
        Path to created DXF file
    """
    writer = GeometryDxfWriter(version, approximate_arcs=approximate_arcs)
    writer.create_document()
    writer.add_geometries(geometries, layer=layer)
    writer.save(output_path)
    return output_path
