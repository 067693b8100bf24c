"""
Command Line Interface for vecpath

Usage:
    vecpath paths.txt output.dxf
    vecpath paths.txt --output output.xaml --format xaml
    vecpath paths.txt --dxf-version R12 --approximate-arcs

The input file holds one SVG path data (or XAML path markup) string per line.
Blank lines and lines starting with '#' are ignored.
"""

import logging
import os
import sys
from typing import List, Optional

import click

from . import __version__
from .dxf_writer import GeometryDxfWriter
from .errors import VecPathError
from .geometry import PathGeometry
from .markup import MarkupFlavor, geometry_to_markup, parse_path_markup

FORMAT_EXTENSIONS = {
    "dxf": ".dxf",
    "svg": ".svg.txt",
    "xaml": ".xaml.txt",
}


def read_geometries(input_file: str) -> List[PathGeometry]:
    """Parse every non-empty, non-comment line of a path data file"""
    geometries = []
    with open(input_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            geometries.append(parse_path_markup(line))
    return geometries


def write_markup(geometries: List[PathGeometry], out_path: str, flavor: MarkupFlavor):
    with open(out_path, "w", encoding="utf-8") as f:
        for geometry in geometries:
            f.write(geometry_to_markup(geometry, flavor) + "\n")


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_file", type=click.Path(), required=False)
@click.option(
    "-o", "--output",
    type=click.Path(),
    help="Output file path (alternative to positional argument)"
)
@click.option(
    "-f", "--format",
    type=click.Choice(["dxf", "svg", "xaml"], case_sensitive=False),
    default="dxf",
    help="Output format (default: dxf)"
)
@click.option(
    "--dxf-version",
    type=click.Choice(list(GeometryDxfWriter.VERSION_MAP)),
    default="R2010",
    envvar="VECPATH_DXF_VERSION",
    show_envvar=True,
    help="Target DXF version (default: R2010)"
)
@click.option(
    "--layer",
    default="0",
    help="DXF layer for all entities (default: 0)"
)
@click.option(
    "--approximate-arcs",
    is_flag=True,
    help="Convert arcs to cubic bezier curves for DXF output"
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Suppress progress output"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging"
)
@click.version_option(version=__version__)
def main(
    input_file: str,
    output_file: Optional[str],
    output: Optional[str],
    format: str,
    dxf_version: str,
    layer: str,
    approximate_arcs: bool,
    quiet: bool,
    verbose: bool,
):
    """
    Convert SVG path data to DXF, SVG path data or XAML path markup.

    \b
    Examples:
        vecpath paths.txt                      # Convert to paths.dxf
        vecpath paths.txt out.dxf              # Convert to specified output
        vecpath paths.txt -f xaml              # Normalize to XAML markup
        vecpath paths.txt --dxf-version R12    # Legacy DXF with polylines
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    format = format.lower()

    # Determine output path
    out_path = output or output_file
    if out_path is None:
        out_path = os.path.splitext(input_file)[0] + FORMAT_EXTENSIONS[format]

    if not quiet:
        click.echo(f"Converting: {input_file}")
        click.echo(f"Output: {out_path}")

    try:
        geometries = read_geometries(input_file)

        if format == "dxf":
            writer = GeometryDxfWriter(dxf_version, approximate_arcs=approximate_arcs)
            writer.create_document()
            entities = writer.add_geometries(geometries, layer=layer)
            writer.save(out_path)
        else:
            flavor = MarkupFlavor.SVG if format == "svg" else MarkupFlavor.XAML
            write_markup(geometries, out_path, flavor)
            entities = sum(g.get_segment_count() for g in geometries)
    except (VecPathError, OSError) as e:
        click.echo(click.style(f"\n✗ Conversion failed: {e}", fg="red"), err=True)
        sys.exit(1)

    if not quiet:
        click.echo(click.style("\n✓ Conversion successful!", fg="green"))
        click.echo(f"  Paths processed: {len(geometries)}")
        click.echo(f"  {'Entities' if format == 'dxf' else 'Segments'}: {entities}")
    sys.exit(0)


if __name__ == "__main__":
    main()
