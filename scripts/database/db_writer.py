"""
Database Writer for the Rajad trails project

This module provides the database side of the WFS trail import: table creation,
the per-feature trail upsert, and a few maintenance helpers used by the scripts
in this package.

Key Features:
- PostGIS geometry repair, line extraction and reprojection at write time
- Derived trail length and start point computed by PostGIS, never in Python
- Idempotent upsert keyed on (source, source_id)
- One short transaction per trail, no long-lived locks
- Table creation from sql/schema/tracks.sql

Example Usage:
    # Initialize writer
    engine = get_postgres_engine()
    writer = DatabaseWriter(engine, logger)

    # Make sure the tracks table exists
    writer.ensure_tracks_table()

    # Upsert one trail
    writer.upsert_trail(
        "maaamet_poi_wfs", "poi_matkarada_j:123", fields, tagged_geometry, props
    )
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any, Dict

from geoalchemy2 import Geography, Geometry
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Engine,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    cast,
    create_engine,
    func,
    inspect,
    literal,
    select,
    text,
    update,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID, insert
from sqlalchemy.exc import SQLAlchemyError

from config.settings import config
from scripts.collectors.exceptions import PersistenceError

if TYPE_CHECKING:
    from scripts.collectors.coordinate_heuristics import TaggedGeometry
    from scripts.collectors.field_mapper import MappedFields

TRACKS_TABLE = "tracks"

# Columns overwritten when an existing (source, source_id) row is imported again
UPSERT_COLUMNS = [
    "name_et",
    "name_en",
    "county_et",
    "county_en",
    "municipality_et",
    "municipality_en",
    "location_et",
    "location_en",
    "description_et",
    "description_en",
    "length_km",
    "start_point",
    "geom",
    "raw_props",
]


def get_postgres_engine() -> Engine:
    """
    Create a SQLAlchemy engine for PostgreSQL/PostGIS using configuration.

    Returns:
        Engine: SQLAlchemy engine instance configured for PostgreSQL/PostGIS

    Raises:
        ValueError: If any required configuration is missing
    """
    config.validate_for_database_operations()

    conn_str = config.get_database_url()
    return create_engine(conn_str, pool_pre_ping=True)


class DatabaseWriter:
    """
    Database writer for trail records.

    The writer holds no state besides the engine and table metadata. Each
    public write opens its own transaction, so a failure never leaves a
    transaction open across features or layers.
    """

    def __init__(self, engine: Engine, logger: logging.Logger | None = None):
        """
        Initialize the database writer.

        Args:
            engine (Engine): SQLAlchemy engine for database connections
            logger (logging.Logger | None): Logger instance for operation tracking.
                                            If None, creates a default logger.
        """
        self.engine = engine
        self.logger = logger or logging.getLogger(__name__)
        self.metadata = MetaData()

        self._define_table_schemas()

    def _define_table_schemas(self) -> None:
        """
        Define the SQLAlchemy table for tracks.

        The table is created from sql/schema/tracks.sql; this definition mirrors
        it so statements can be built with SQLAlchemy Core.
        """
        self.tracks_table = Table(
            TRACKS_TABLE,
            self.metadata,
            Column(
                "id",
                UUID(as_uuid=False),
                primary_key=True,
                server_default=text("gen_random_uuid()"),
            ),
            Column("source", String(50), nullable=False),
            Column("source_id", Text, nullable=False),
            Column("name_et", Text, nullable=False),
            Column("name_en", Text),
            Column("county_et", Text),
            Column("county_en", Text),
            Column("municipality_et", Text),
            Column("municipality_en", Text),
            Column("location_et", Text),
            Column("location_en", Text),
            Column("description_et", Text),
            Column("description_en", Text),
            Column("length_km", Numeric(10, 2)),
            Column("image_url", Text),
            Column("cover_image_url", Text),
            Column("featured", Boolean, nullable=False, server_default=text("FALSE")),
            Column("start_point", Geometry(geometry_type="POINT", srid=4326)),
            Column("geom", Geometry(geometry_type="GEOMETRY", srid=4326)),
            Column("raw_props", JSONB),
            Column(
                "created_at",
                DateTime(timezone=True),
                nullable=False,
                server_default=text("NOW()"),
            ),
            Column(
                "updated_at",
                DateTime(timezone=True),
                nullable=False,
                server_default=text("NOW()"),
            ),
            UniqueConstraint("source", "source_id", name="uq_tracks_source_source_id"),
            extend_existing=True,
        )

    def _load_sql_schema(self, table_name: str) -> str:
        """
        Load SQL schema from file.

        Args:
            table_name (str): Name of the table (without .sql extension)

        Returns:
            str: SQL content from the schema file

        Raises:
            FileNotFoundError: If SQL schema file is missing
            ValueError: If SQL schema file is empty
        """
        # Project root is two levels up from scripts/database/
        project_root = os.path.join(os.path.dirname(__file__), "..", "..")
        sql_path = os.path.join(project_root, "sql", "schema", f"{table_name}.sql")

        if not os.path.exists(sql_path):
            self.logger.error(f"Schema file missing: {sql_path}")
            raise FileNotFoundError(f"SQL schema file not found: {sql_path}")

        with open(sql_path, "r", encoding="utf-8") as f:
            sql_content = f.read().strip()

        if not sql_content:
            self.logger.error(f"Invalid schema file: {sql_path}")
            raise ValueError(f"SQL schema file is empty: {sql_path}")

        return sql_content

    def ensure_tracks_table(self) -> None:
        """
        Create the tracks table, its indexes and the PostGIS extension if missing.

        Raises:
            SQLAlchemyError: If table creation fails
        """
        sql_content = self._load_sql_schema(TRACKS_TABLE)
        try:
            with self.engine.begin() as conn:
                conn.execute(text(sql_content))
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to create table {TRACKS_TABLE}: {e}")
            raise

        self.logger.info(f"Ensured {TRACKS_TABLE} table exists in database")

    def drop_tracks_table(self) -> None:
        """Drop the tracks table and everything that depends on it."""
        try:
            with self.engine.begin() as conn:
                conn.execute(text(f"DROP TABLE IF EXISTS {TRACKS_TABLE} CASCADE"))
        except SQLAlchemyError as e:
            self.logger.error(f"Error dropping table {TRACKS_TABLE}: {e}")
            raise

        self.logger.info(f"Dropped table: {TRACKS_TABLE}")

    def reset_database(self) -> None:
        """
        Drop and recreate the tracks table.

        Raises:
            Exception: If any error occurs during the reset process
        """
        self.logger.info("Starting database reset...")
        self.drop_tracks_table()
        self.ensure_tracks_table()
        self.logger.info("✅ Database reset completed successfully!")

    def _geometry_expressions(
        self, tagged_geometry: TaggedGeometry
    ) -> tuple[Any, Any, Any]:
        """
        Build the PostGIS expressions for geom, length_km and start_point.

        The incoming GeoJSON is tagged with its detected SRID, made valid,
        reduced to its line parts and reprojected to EPSG:4326.
        """
        if tagged_geometry.geometry is None:
            return None, None, None

        geojson = json.dumps(tagged_geometry.geometry)
        geom_in = func.ST_CollectionExtract(
            func.ST_MakeValid(
                func.ST_SetSRID(
                    func.ST_GeomFromGeoJSON(literal(geojson, Text)),
                    tagged_geometry.srid,
                )
            ),
            2,
        )
        geom = func.ST_Transform(geom_in, 4326)
        length_m = func.ST_Length(cast(geom, Geography(geometry_type=None)))
        length_km = func.round(cast(length_m / 1000, Numeric), 2)
        start_point = func.ST_StartPoint(func.ST_GeometryN(func.ST_LineMerge(geom), 1))
        return geom, length_km, start_point

    def build_upsert_statement(
        self,
        source: str,
        source_id: str,
        fields: MappedFields,
        tagged_geometry: TaggedGeometry,
        raw_properties: Dict[str, Any],
    ):
        """
        Build the INSERT ... ON CONFLICT statement for one trail.

        Args:
            source (str): Track source tag
            source_id (str): Stable identifier within the source
            fields (MappedFields): Mapped bilingual fields
            tagged_geometry (TaggedGeometry): Geometry with its detected SRID
            raw_properties (Dict[str, Any]): Original properties plus typename

        Returns:
            The SQLAlchemy insert statement
        """
        geom, length_km, start_point = self._geometry_expressions(tagged_geometry)

        values = {
            "source": source,
            "source_id": source_id,
            **fields.model_dump(),
            "length_km": length_km,
            "start_point": start_point,
            "geom": geom,
            "raw_props": raw_properties,
        }

        stmt = insert(self.tracks_table).values(**values)
        update_cols = {col: stmt.excluded[col] for col in UPSERT_COLUMNS}
        update_cols["updated_at"] = func.now()
        return stmt.on_conflict_do_update(
            index_elements=["source", "source_id"], set_=update_cols
        )

    def upsert_trail(
        self,
        source: str,
        source_id: str,
        fields: MappedFields,
        tagged_geometry: TaggedGeometry,
        raw_properties: Dict[str, Any],
    ) -> None:
        """
        Insert a trail or overwrite the existing row with the same key.

        PostGIS validates, reprojects and measures the geometry; nothing about
        length or start point is computed in Python.

        Raises:
            PersistenceError: If the database rejects the row
        """
        stmt = self.build_upsert_statement(
            source, source_id, fields, tagged_geometry, raw_properties
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(source_id, e) from e

    def count_tracks(self, source: str | None = None) -> int:
        """
        Count stored trails, optionally for one source.

        Args:
            source (str | None): Restrict the count to this source tag

        Returns:
            int: Number of rows
        """
        query = select(func.count()).select_from(self.tracks_table)
        if source is not None:
            query = query.where(self.tracks_table.c.source == source)

        with self.engine.connect() as conn:
            return int(conn.execute(query).scalar() or 0)

    def set_featured(self, limit: int) -> int:
        """
        Mark the first trails by Estonian name as featured.

        Any previously featured trail outside that selection is cleared in the
        same transaction.

        Args:
            limit (int): Number of trails to feature

        Returns:
            int: Number of rows updated
        """
        first_ids = (
            select(self.tracks_table.c.id)
            .order_by(self.tracks_table.c.name_et.asc())
            .limit(limit)
        )
        clear_stmt = (
            update(self.tracks_table)
            .where(self.tracks_table.c.featured.is_(True))
            .values(featured=False)
        )
        stmt = (
            update(self.tracks_table)
            .where(self.tracks_table.c.id.in_(first_ids))
            .values(featured=True)
        )

        with self.engine.begin() as conn:
            conn.execute(clear_stmt)
            result = conn.execute(stmt)

        self.logger.info(f"Marked {result.rowcount} tracks as featured")
        return result.rowcount

    def get_table_info(self, table_name: str = TRACKS_TABLE) -> Dict[str, Any]:
        """
        Get information about a table including row count and schema.

        Args:
            table_name (str): Name of the table to inspect

        Returns:
            Dict[str, Any]: Dictionary containing table information including
                           row_count, columns, and primary_keys
        """
        inspector = inspect(self.engine)

        info: Dict[str, Any] = {
            "exists": table_name in inspector.get_table_names(),
            "row_count": 0,
            "columns": [],
            "primary_keys": [],
        }

        if info["exists"]:
            try:
                with self.engine.connect() as conn:
                    result = conn.execute(text(f"SELECT COUNT(*) FROM {table_name}"))
                    info["row_count"] = result.scalar()

                info["columns"] = [
                    col["name"] for col in inspector.get_columns(table_name)
                ]

                pk_constraint = inspector.get_pk_constraint(table_name)
                info["primary_keys"] = pk_constraint.get("constrained_columns", [])

            except SQLAlchemyError as e:
                self.logger.warning(
                    f"Could not get complete info for table {table_name}: {e}"
                )

        return info
