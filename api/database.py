"""
Database engine for the API.

The API shares the importer's connection settings, so the engine is built with
the same get_postgres_engine() the database writer uses. It is created lazily
on first use and disposed when the application shuts down.
"""

from sqlalchemy.engine import Engine

from scripts.database.db_writer import get_postgres_engine

_engine: Engine | None = None


def get_db_engine() -> Engine:
    """
    Return the shared engine, creating it on first call.

    Raises:
        ValueError: If database credentials are not configured
    """
    global _engine

    if _engine is None:
        _engine = get_postgres_engine()

    return _engine


def dispose_db_engine() -> None:
    """Close pooled connections and forget the shared engine."""
    global _engine

    if _engine is not None:
        _engine.dispose()
        _engine = None
