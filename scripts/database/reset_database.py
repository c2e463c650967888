#!/usr/bin/env python3
"""
Database Reset Script

This script drops the tracks table and recreates it from sql/schema/tracks.sql.
Use this when you want to start fresh before a full WFS import.

Usage:
    python -m scripts.database.reset_database

This will:
1. Drop the tracks table
2. Recreate it (with the PostGIS extension and indexes) from the SQL schema file
3. Log the resulting columns for verification
"""

import os
import sys

from dotenv import load_dotenv

# Load .env before local imports that need env vars
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

from scripts.database.db_writer import TRACKS_TABLE, DatabaseWriter, get_postgres_engine
from utils.logging import setup_database_logging


def main() -> int:
    """Main function to reset the database."""
    logger = setup_database_logging()

    try:
        logger.info("Starting database reset process...")

        engine = get_postgres_engine()
        writer = DatabaseWriter(engine, logger)

        writer.reset_database()

        info = writer.get_table_info(TRACKS_TABLE)
        if info["exists"]:
            logger.info(f"Created {TRACKS_TABLE} with columns: {', '.join(info['columns'])}")
        else:
            logger.warning(f"⚠️  Table {TRACKS_TABLE} was not found after reset")
            return 1

    except Exception as e:
        logger.error(f"❌ Database reset failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
