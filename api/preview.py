"""
SVG preview images for trail geometries.

Renders a trail's lines as a small north-up schematic, used as the fallback
card image when a trail has no photo. Pure function, no I/O.
"""

from __future__ import annotations

from typing import Any

from shapely.errors import ShapelyError
from shapely.geometry import LineString, MultiLineString, shape
from shapely.geometry.base import BaseGeometry

PADDING = 12
BACKGROUND = "#f3f4f6"
STROKE = "#2563eb"
PLACEHOLDER_TEXT = "No geometry"


def _svg_open(width: int, height: int) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<rect width="100%" height="100%" fill="{BACKGROUND}"/>'
    )


def placeholder_svg(width: int = 360, height: int = 180) -> str:
    """Return the preview shown when a trail has no usable geometry."""
    return (
        _svg_open(width, height)
        + '<text x="50%" y="50%" dominant-baseline="middle" text-anchor="middle" '
        f'font-family="system-ui" font-size="12" fill="#6b7280">{PLACEHOLDER_TEXT}</text>'
        "</svg>"
    )


def _lines(geom: BaseGeometry) -> list[list[tuple[float, float]]]:
    """Collect the coordinate lists of every line part of a geometry."""
    if isinstance(geom, LineString):
        return [[(c[0], c[1]) for c in geom.coords]]
    if isinstance(geom, MultiLineString):
        return [[(c[0], c[1]) for c in part.coords] for part in geom.geoms]
    if hasattr(geom, "geoms"):
        lines = []
        for part in geom.geoms:
            lines.extend(_lines(part))
        return lines
    return []


def render_preview(
    geometry: dict[str, Any] | None, width: int = 360, height: int = 180
) -> str:
    """
    Render a GeoJSON line geometry as an SVG document.

    Coordinates are fitted into the image with fixed padding and one uniform
    scale factor, centred, with the Y axis flipped so north is up.

    Args:
        geometry: GeoJSON LineString, MultiLineString or GeometryCollection
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        str: SVG markup. The "No geometry" placeholder when the geometry is
        missing, empty or cannot be parsed
    """
    if not geometry:
        return placeholder_svg(width, height)

    try:
        geom = shape(geometry)
        lines = [line for line in _lines(geom) if line]
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError, AttributeError):
        return placeholder_svg(width, height)

    points = [pt for line in lines for pt in line]
    if not points:
        return placeholder_svg(width, height)

    min_x = min(x for x, _ in points)
    max_x = max(x for x, _ in points)
    min_y = min(y for _, y in points)
    max_y = max(y for _, y in points)
    dx = max_x - min_x
    dy = max_y - min_y

    # A zero span (vertical or horizontal line) does not constrain the scale
    scale = min(
        (width - 2 * PADDING) / dx if dx else float("inf"),
        (height - 2 * PADDING) / dy if dy else float("inf"),
    )
    if scale == float("inf"):
        scale = 1.0
    offset_x = (width - dx * scale) / 2
    offset_y = (height - dy * scale) / 2

    paths = []
    for line in lines:
        if len(line) < 2:
            continue
        commands = []
        for i, (x, y) in enumerate(line):
            px = offset_x + (x - min_x) * scale
            py = offset_y + (max_y - y) * scale  # invert Y
            commands.append(f"{'M' if i == 0 else 'L'}{px:.2f} {py:.2f}")
        paths.append(
            f'<path d="{" ".join(commands)}" fill="none" stroke="{STROKE}" '
            'stroke-width="3" stroke-linecap="round" stroke-linejoin="round"/>'
        )
    if not paths:
        return placeholder_svg(width, height)

    return _svg_open(width, height) + f"<g>{''.join(paths)}</g></svg>"
