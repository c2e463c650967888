"""
Configuration settings for the Rajad trails project.

This module centralizes all configuration values and provides a single source of truth for all
configurable parameters.
"""

import os
from typing import Optional


def _env_flag(value: str | None) -> bool:
    return str(value or "").strip().lower() in ("true", "1")


class Config:
    """
    Central configuration class for the Rajad trails project.

    This class consolidates all configuration values including WFS settings,
    database connections, file paths, and processing parameters.
    """

    # WFS Configuration
    APP_NAME: str = "rajad-webapp"
    APP_VERSION: str = "1.0"
    WFS_ENDPOINT: str = "https://teenus.maaamet.ee/ows/huviobjektid-poi"
    WFS_VERSION: str = "2.0.0"
    WFS_OUTPUT_FORMAT: str = "application/json; subtype=geojson"
    WFS_SRS_NAME: str = "EPSG:3301"
    WFS_PAGE_SIZE: int = 5000
    WFS_TYPE_NAMES: list = []  # Empty means every verified layer
    ALLOW_UNVERIFIED_LAYERS: bool = False

    # Request Settings
    REQUEST_TIMEOUT: float = 60.0
    PAGE_DELAY_SECONDS: float = 0.0

    # Retry Configuration
    FETCH_MAX_RETRIES: int = 2
    FETCH_RETRY_DELAY: float = 5.0

    # Spatial reference systems
    GEOGRAPHIC_SRID: int = 4326
    PROJECTED_SRID: int = 3301  # L-EST97 / Estonian Coordinate System of 1997

    # Destination
    TRACK_SOURCE: str = "maaamet_poi_wfs"
    FEATURED_TRACK_COUNT: int = 3

    # Database Configuration
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "rajad"
    DB_USER: str = "postgres"
    DB_PASSWORD: Optional[str] = None
    DB_SSLMODE: Optional[str] = None

    # File Paths
    WFS_IMPORT_LOG_FILE: str = "logs/wfs_importer.log"
    API_LOG_FILE: str = "logs/api.log"
    DB_MAINTENANCE_LOG_FILE: str = "logs/database.log"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024  # 5MB
    LOG_BACKUP_COUNT: int = 3

    def __init__(self):
        """Initialize configuration by loading from environment variables."""
        self._load_from_env()

    def _load_from_env(self):
        """Load configuration values from environment variables."""
        # WFS settings
        endpoint = os.getenv("MAAAMET_POI_WFS")
        if endpoint:
            self.WFS_ENDPOINT = endpoint

        type_names = os.getenv("MAAAMET_POI_TYPENAMES")
        if type_names:
            self.WFS_TYPE_NAMES = [t.strip() for t in type_names.split(",") if t.strip()]

        srs_name = os.getenv("MAAAMET_SRS")
        if srs_name:
            self.WFS_SRS_NAME = srs_name

        page_size = os.getenv("WFS_PAGE_SIZE")
        if page_size:
            self.WFS_PAGE_SIZE = int(page_size)

        self.ALLOW_UNVERIFIED_LAYERS = _env_flag(os.getenv("ALLOW_UNVERIFIED_LAYERS"))

        request_timeout = os.getenv("REQUEST_TIMEOUT")
        if request_timeout:
            self.REQUEST_TIMEOUT = float(request_timeout)

        page_delay = os.getenv("PAGE_DELAY_SECONDS")
        if page_delay:
            self.PAGE_DELAY_SECONDS = float(page_delay)

        max_retries = os.getenv("FETCH_MAX_RETRIES")
        if max_retries:
            self.FETCH_MAX_RETRIES = int(max_retries)

        retry_delay = os.getenv("FETCH_RETRY_DELAY")
        if retry_delay:
            self.FETCH_RETRY_DELAY = float(retry_delay)

        # Database settings
        database_url = os.getenv("DATABASE_URL")
        if database_url:
            self.DATABASE_URL = database_url

        db_host = os.getenv("POSTGRES_HOST")
        if db_host:
            self.DB_HOST = db_host

        db_port = os.getenv("POSTGRES_PORT")
        if db_port:
            self.DB_PORT = int(db_port)

        db_name = os.getenv("POSTGRES_DB")
        if db_name:
            self.DB_NAME = db_name

        db_user = os.getenv("POSTGRES_USER")
        if db_user:
            self.DB_USER = db_user

        db_password = os.getenv("POSTGRES_PASSWORD")
        if db_password:
            self.DB_PASSWORD = db_password

        db_sslmode = os.getenv("POSTGRES_SSLMODE")
        if db_sslmode:
            self.DB_SSLMODE = db_sslmode

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            self.LOG_LEVEL = log_level

    def validate_for_database_operations(self):
        """
        Validate the configuration needed to open a database connection.

        Raises:
            ValueError: If neither DATABASE_URL nor POSTGRES_PASSWORD is set.
        """
        if not self.DATABASE_URL and not self.DB_PASSWORD:
            raise ValueError(
                "DATABASE_URL or POSTGRES_PASSWORD environment variable is required. "
                "Please set it in your .env file or environment."
            )

    def get_database_url(self) -> str:
        """
        Generate database connection URL.

        Returns:
            str: PostgreSQL connection URL
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        url = f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        if self.DB_SSLMODE:
            url += f"?sslmode={self.DB_SSLMODE}"
        return url


# Global configuration instance
config = Config()
