"""
Integration test fixtures and configuration.

This module provides pytest fixtures for integration testing with a real PostGIS database.
The fixtures handle database lifecycle management, schema creation, and cleanup.

Key fixtures:
- test_db_engine: SQLAlchemy engine connected to test database
- test_db: Database with the tracks table created and dropped after each test
- test_db_writer: DatabaseWriter instance for test operations

Running integration tests:
    pytest tests/integration -v -m integration

Tests are skipped when the test database cannot be reached.
"""

import os
import time

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from scripts.database.db_writer import DatabaseWriter
from utils.logging import setup_logging


def wait_for_db(engine: Engine, max_retries: int = 5, retry_delay: float = 1.0) -> bool:
    """
    Wait for database to be ready by attempting connections.

    Args:
        engine: SQLAlchemy engine to test
        max_retries: Maximum number of connection attempts
        retry_delay: Delay between retries in seconds

    Returns:
        bool: True once a connection succeeds, False if it never does
    """
    for attempt in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            print(f"✅ Database ready after {attempt + 1} attempt(s)")
            return True
        except Exception:
            if attempt < max_retries - 1:
                print(f"⏳ Waiting for database (attempt {attempt + 1}/{max_retries})...")
                time.sleep(retry_delay)
    return False


@pytest.fixture(scope="session")
def test_db_engine() -> Engine:
    """
    Create a SQLAlchemy engine for the test database.

    Environment Variables:
        POSTGRES_TEST_HOST: Test database host (default: localhost)
        POSTGRES_TEST_PORT: Test database port (default: 5434)
        POSTGRES_TEST_DB: Test database name (default: rajad_test)
        POSTGRES_TEST_USER: Test database user (default: postgres)
        POSTGRES_TEST_PASSWORD: Test database password (default: test_password)
    """
    host = os.getenv("POSTGRES_TEST_HOST", "localhost")
    port = os.getenv("POSTGRES_TEST_PORT", "5434")
    db = os.getenv("POSTGRES_TEST_DB", "rajad_test")
    user = os.getenv("POSTGRES_TEST_USER", "postgres")
    password = os.getenv("POSTGRES_TEST_PASSWORD", "test_password")

    engine = create_engine(f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{db}")

    if not wait_for_db(engine):
        engine.dispose()
        pytest.skip("PostGIS test database is not reachable")

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_db_engine: Engine) -> Engine:
    """
    Provide a clean tracks table for each test.

    The table is created from sql/schema/tracks.sql before the test and
    dropped afterwards, so tests never see each other's rows.
    """
    logger = setup_logging(logger_name="test_db", log_level="INFO")
    writer = DatabaseWriter(test_db_engine, logger)

    writer.drop_tracks_table()
    writer.ensure_tracks_table()

    yield test_db_engine

    writer.drop_tracks_table()


@pytest.fixture
def test_db_writer(test_db: Engine) -> DatabaseWriter:
    """Provide a DatabaseWriter connected to the clean test database."""
    logger = setup_logging(logger_name="test_writer", log_level="DEBUG")
    return DatabaseWriter(test_db, logger)
