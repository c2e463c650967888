"""
Coordinate reference system and axis-order heuristics for WFS trail geometries.

The Maa-amet POI WFS service may answer an EPSG:4326 request with L-EST97
(EPSG:3301, metres) coordinates, and some layers deliver EPSG:4326 pairs as
(lat, lon). Neither case is flagged in the response, so both are detected from
the coordinate values of the first point.

All functions take and return GeoJSON geometry dicts and never mutate their input.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple

GEOGRAPHIC_SRID = 4326
PROJECTED_SRID = 3301

# Estonia lies roughly at lon 21..29, lat 57..60. Swapped pairs land in this box.
SWAP_X_RANGE = (50.0, 70.0)
SWAP_Y_RANGE = (10.0, 40.0)


class ReferenceSystem(str, Enum):
    GEOGRAPHIC = "geographic"
    PROJECTED = "projected"


class TaggedGeometry(NamedTuple):
    """A geometry together with the SRID its coordinates are expressed in."""

    geometry: dict[str, Any] | None
    srid: int


def first_coordinate(geometry: dict[str, Any] | None) -> list[float] | None:
    """
    Return the first coordinate pair of the first line of a geometry.

    Args:
        geometry: GeoJSON LineString or MultiLineString dict

    Returns:
        The first position, or None for other types and empty or malformed input
    """
    if not isinstance(geometry, dict):
        return None

    coordinates = geometry.get("coordinates")
    try:
        if geometry.get("type") == "LineString":
            first = coordinates[0]
        elif geometry.get("type") == "MultiLineString":
            first = coordinates[0][0]
        else:
            return None
    except (IndexError, KeyError, TypeError):
        return None

    if not isinstance(first, (list, tuple)) or len(first) < 2:
        return None
    return list(first)


def infer_reference_system(geometry: dict[str, Any] | None) -> ReferenceSystem:
    """
    Classify a geometry's coordinates as geographic (lon/lat) or projected.

    Anything outside lon +-180 / lat +-90 on the first coordinate pair is taken
    to be projected. Missing or unreadable geometry defaults to geographic.
    """
    first = first_coordinate(geometry)
    if first is None:
        return ReferenceSystem.GEOGRAPHIC

    try:
        x, y = float(first[0]), float(first[1])
    except (TypeError, ValueError):
        return ReferenceSystem.GEOGRAPHIC

    if abs(x) > 180 or abs(y) > 90:
        return ReferenceSystem.PROJECTED
    return ReferenceSystem.GEOGRAPHIC


def _swap_needed(coord: Any) -> bool:
    if not isinstance(coord, (list, tuple)) or len(coord) < 2:
        return False
    try:
        x, y = float(coord[0]), float(coord[1])
    except (TypeError, ValueError):
        return False
    return (
        SWAP_X_RANGE[0] <= x <= SWAP_X_RANGE[1]
        and SWAP_Y_RANGE[0] <= y <= SWAP_Y_RANGE[1]
    )


def _swap(coord: list[Any]) -> list[Any]:
    return [coord[1], coord[0], *coord[2:]]


def repair_axis_order(geometry: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Swap (lat, lon) pairs back to (lon, lat) when the first point looks swapped.

    The decision is made once per line geometry from its first point, and then
    applied to every pair. GeometryCollection members are checked one by one.

    Note:
        Genuine coordinates that fall inside the trigger box (x in [50, 70],
        y in [10, 40]) are swapped as well. Such points are outside Estonia, so
        the importer accepts the false positive.
    """
    if not isinstance(geometry, dict):
        return geometry

    geom_type = geometry.get("type")
    coordinates = geometry.get("coordinates")

    if geom_type == "LineString":
        if _swap_needed(first_coordinate(geometry)):
            return {**geometry, "coordinates": [_swap(c) for c in coordinates]}
        return geometry

    if geom_type == "MultiLineString":
        if _swap_needed(first_coordinate(geometry)):
            return {
                **geometry,
                "coordinates": [[_swap(c) for c in line] for line in coordinates],
            }
        return geometry

    if geom_type == "GeometryCollection":
        members = geometry.get("geometries") or []
        return {**geometry, "geometries": [repair_axis_order(g) for g in members]}

    return geometry


def normalize_geometry(
    geometry: dict[str, Any] | None,
    geographic_srid: int = GEOGRAPHIC_SRID,
    projected_srid: int = PROJECTED_SRID,
) -> TaggedGeometry:
    """
    Apply the per-feature coordinate policy and tag the result with its SRID.

    Projected geometries pass through untouched for reprojection in PostGIS.
    Geographic geometries get their axis order repaired first.

    Args:
        geometry: Raw GeoJSON geometry from the WFS response
        geographic_srid: SRID used for lon/lat coordinates
        projected_srid: SRID assumed for projected coordinates

    Returns:
        TaggedGeometry: The geometry to store and the SRID to set on it
    """
    if geometry is None:
        return TaggedGeometry(None, geographic_srid)

    if infer_reference_system(geometry) is ReferenceSystem.PROJECTED:
        return TaggedGeometry(geometry, projected_srid)

    return TaggedGeometry(repair_axis_order(geometry), geographic_srid)
