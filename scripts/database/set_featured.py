#!/usr/bin/env python3
"""
Mark featured trails.

Features the first trails by Estonian name so the landing page has something
to show. Earlier featured flags are cleared.

Usage:
    python -m scripts.database.set_featured [--count 3]
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Load .env before local imports that need env vars
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

from config.settings import config
from scripts.database.db_writer import DatabaseWriter, get_postgres_engine
from utils.logging import setup_database_logging


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Mark the first trails as featured")
    parser.add_argument(
        "--count",
        type=int,
        default=config.FEATURED_TRACK_COUNT,
        help=f"Number of trails to feature (default: {config.FEATURED_TRACK_COUNT})",
    )
    args = parser.parse_args(argv)

    logger = setup_database_logging()

    if args.count < 0:
        logger.error("--count must not be negative")
        return 1

    try:
        writer = DatabaseWriter(get_postgres_engine(), logger)
        updated = writer.set_featured(args.count)
    except Exception as e:
        logger.error(f"❌ Failed to set featured tracks: {e}")
        return 1

    logger.info(f"✅ {updated} tracks featured")
    return 0


if __name__ == "__main__":
    sys.exit(main())
