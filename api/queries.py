"""
Database query functions for the API.

These functions execute SQL queries and return formatted results
ready for API responses.
"""

import json
from typing import Any

from sqlalchemy import text

from api.database import get_db_engine

TRACK_COLUMNS = """
    t.id::text AS id,
    t.source,
    t.source_id,
    t.name_et,
    t.name_en,
    t.county_et,
    t.county_en,
    t.municipality_et,
    t.municipality_en,
    t.location_et,
    t.location_en,
    t.description_et,
    t.description_en,
    t.length_km::float8 AS length_km,
    COALESCE(t.cover_image_url, t.image_url, '/tracks/' || t.id::text || '/preview.svg')
        AS display_image_url,
    CASE WHEN t.start_point IS NULL THEN NULL ELSE ST_Y(t.start_point) END AS start_lat,
    CASE WHEN t.start_point IS NULL THEN NULL ELSE ST_X(t.start_point) END AS start_lng,
    t.featured
"""


def _format_track(row: Any) -> dict[str, Any]:
    return {
        "id": row.id,
        "source": row.source,
        "source_id": row.source_id,
        "name_et": row.name_et,
        "name_en": row.name_en,
        "county_et": row.county_et,
        "county_en": row.county_en,
        "municipality_et": row.municipality_et,
        "municipality_en": row.municipality_en,
        "location_et": row.location_et,
        "location_en": row.location_en,
        "description_et": row.description_et,
        "description_en": row.description_en,
        "length_km": float(row.length_km) if row.length_km is not None else None,
        "image_url": row.display_image_url,
        "start_lat": float(row.start_lat) if row.start_lat is not None else None,
        "start_lng": float(row.start_lng) if row.start_lng is not None else None,
        "featured": bool(row.featured),
    }


def _parse_geometry(value: Any) -> dict[str, Any] | None:
    """psycopg2 decodes json columns to dicts; accept text as well."""
    if value is None:
        return None
    if isinstance(value, str):
        return json.loads(value)
    return value


def fetch_tracks(
    featured: bool | None = None,
    county: str | None = None,
    min_length: float | None = None,
    max_length: float | None = None,
) -> dict[str, Any]:
    """
    Fetch trails from the database with optional filters.

    Args:
        featured: Only featured (True) or only non-featured (False) trails (optional)
        county: Case-insensitive substring of the Estonian county name (optional)
        min_length: Minimum trail length in kilometres (optional)
        max_length: Maximum trail length in kilometres (optional)

    Returns:
        Dictionary containing:
            - track_count: int
            - total_km: float
            - tracks: list of track dictionaries

    Example:
        >>> fetch_tracks(min_length=5)
        {
            'track_count': 128,
            'total_km': 1402.3,
            'tracks': [...]
        }
    """
    engine = get_db_engine()

    query = f"SELECT {TRACK_COLUMNS} FROM tracks t WHERE 1=1"
    params: dict[str, Any] = {}

    if featured is not None:
        query += " AND t.featured = :featured"
        params["featured"] = featured

    if county is not None:
        query += " AND t.county_et ILIKE :county"
        params["county"] = f"%{county}%"

    if min_length is not None:
        query += " AND t.length_km >= :min_length"
        params["min_length"] = min_length

    if max_length is not None:
        query += " AND t.length_km <= :max_length"
        params["max_length"] = max_length

    query += " ORDER BY t.name_et ASC"

    with engine.connect() as conn:
        result = conn.execute(text(query), params)
        rows = result.fetchall()

    tracks = [_format_track(row) for row in rows]
    total_km = sum(track["length_km"] or 0.0 for track in tracks)

    return {
        "track_count": len(tracks),
        "total_km": round(total_km, 2),
        "tracks": tracks,
    }


def fetch_track(track_id: str) -> dict[str, Any] | None:
    """
    Fetch a single trail including its GeoJSON geometry.

    Args:
        track_id: Trail UUID

    Returns:
        Track dictionary with a "geometry" key, or None if not found
    """
    engine = get_db_engine()

    query = f"""
    SELECT {TRACK_COLUMNS},
        CASE WHEN t.geom IS NULL THEN NULL ELSE ST_AsGeoJSON(t.geom)::json END
            AS geometry_geojson
    FROM tracks t
    WHERE t.id = CAST(:track_id AS uuid)
    """

    with engine.connect() as conn:
        row = conn.execute(text(query), {"track_id": track_id}).fetchone()

    if row is None:
        return None

    track = _format_track(row)
    track["geometry"] = _parse_geometry(row.geometry_geojson)
    return track


def fetch_track_geometry(track_id: str) -> tuple[bool, dict[str, Any] | None]:
    """
    Fetch only the GeoJSON geometry of a trail.

    Args:
        track_id: Trail UUID

    Returns:
        (found, geometry): found is False when no trail has this id; geometry
        is None when the trail exists but has no geometry
    """
    engine = get_db_engine()

    query = """
    SELECT CASE WHEN geom IS NULL THEN NULL ELSE ST_AsGeoJSON(geom)::json END
        AS geometry_geojson
    FROM tracks
    WHERE id = CAST(:track_id AS uuid)
    """

    with engine.connect() as conn:
        row = conn.execute(text(query), {"track_id": track_id}).fetchone()

    if row is None:
        return False, None
    return True, _parse_geometry(row.geometry_geojson)
