#!/usr/bin/env python3
"""
Database Content Check

Prints a short report of what the tracks table holds: rows per WFS layer,
how many trails have geometry, the length range and the featured count.
Useful after an import to confirm that every requested layer arrived.

Usage:
    python -m scripts.database.check_db
"""

import os
import sys

import pandas as pd
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.engine import Engine

# Load .env before local imports that need env vars
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

from scripts.database.db_writer import (
    TRACKS_TABLE,
    DatabaseWriter,
    get_postgres_engine,
)
from utils.logging import setup_database_logging

LAYER_SUMMARY_QUERY = f"""
SELECT
    source,
    raw_props->>'typename' AS typename,
    COUNT(*) AS tracks,
    COUNT(geom) AS with_geometry,
    ROUND(COALESCE(SUM(length_km), 0)::numeric, 2) AS total_km,
    MIN(length_km) AS min_km,
    MAX(length_km) AS max_km
FROM {TRACKS_TABLE}
GROUP BY source, raw_props->>'typename'
ORDER BY source, typename
"""


def layer_summary(engine: Engine) -> pd.DataFrame:
    """
    Summarize stored trails per source and WFS layer.

    Args:
        engine: SQLAlchemy engine for the trails database

    Returns:
        pd.DataFrame: One row per (source, typename)
    """
    with engine.connect() as conn:
        return pd.read_sql(text(LAYER_SUMMARY_QUERY), conn)


def featured_count(engine: Engine) -> int:
    with engine.connect() as conn:
        result = conn.execute(
            text(f"SELECT COUNT(*) FROM {TRACKS_TABLE} WHERE featured")
        )
        return int(result.scalar() or 0)
def main() -> int:
    logger = setup_database_logging()

    try:
        engine = get_postgres_engine()
        writer = DatabaseWriter(engine, logger)
        total = writer.count_tracks()
        summary = layer_summary(engine)
        featured = featured_count(engine)
    except Exception as e:
        logger.error(f"❌ Database check failed: {e}")
        return 1

    if not total:
        logger.warning(f"⚠️  {TRACKS_TABLE} is empty")
    else:
        logger.info(f"Tracks per layer:\n{summary.to_string(index=False)}")
        logger.info(f"Total tracks: {total}")

        missing_geometry = int((summary["tracks"] - summary["with_geometry"]).sum())
        if missing_geometry:
            logger.warning(f"⚠️  {missing_geometry} tracks have no geometry")

    logger.info(f"Featured tracks: {featured}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
