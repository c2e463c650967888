"""
Centralized logging configuration for the Rajad trails project.

Every entry point (the WFS importer, the database scripts and the API) gets a
named logger that writes to the console and to its own rotating log file.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from config.settings import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Default log file per named logger
LOG_FILES = {
    "wfs_importer": config.WFS_IMPORT_LOG_FILE,
    "database": config.DB_MAINTENANCE_LOG_FILE,
    "api": config.API_LOG_FILE,
}


def _file_handler(
    log_file: str, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    logger_name: str | None = None,
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> logging.Logger:
    """
    Configure a logger with console output and a rotating log file.

    Calling it again for the same logger replaces its handlers, so repeated
    setup never duplicates output.

    Args:
        log_level (str, optional): Logging level name. If None, uses config.LOG_LEVEL
        log_file (str, optional): Path to log file. If None, looked up in LOG_FILES
            by logger_name, falling back to logs/<logger_name>.log
        logger_name (str, optional): Name for the logger. If None, uses root logger
        max_bytes (int, optional): Rotation size. If None, uses config.LOG_MAX_BYTES
        backup_count (int, optional): Rotated files kept. If None, uses config.LOG_BACKUP_COUNT

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> from utils.logging import setup_logging
        >>> logger = setup_logging("DEBUG", logger_name="wfs_importer")
        >>> logger.info("Importing poi_rmk_matkarada_j")
    """
    log_level = (log_level or config.LOG_LEVEL).upper()
    if max_bytes is None:
        max_bytes = config.LOG_MAX_BYTES
    if backup_count is None:
        backup_count = config.LOG_BACKUP_COUNT
    if log_file is None:
        log_file = LOG_FILES.get(logger_name, f"logs/{logger_name or 'default'}.log")

    logger = logging.getLogger(logger_name) if logger_name else logging.getLogger()
    logger.setLevel(getattr(logging, log_level))
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        file_handler = _file_handler(log_file, max_bytes, backup_count)
    except OSError as e:
        logger.warning(f"Failed to setup file logging to {log_file}: {e}")
        logger.info("Continuing with console logging only")
    else:
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.debug(f"Logging configured - Level: {log_level}, File: {log_file}")

    return logger


def setup_wfs_importer_logging(log_level: str | None = None) -> logging.Logger:
    """
    Convenience function to set up logging for the WFS trail importer.

    Args:
        log_level (str, optional): Logging level. If None, uses config default

    Returns:
        logging.Logger: Configured logger for the importer
    """
    return setup_logging(log_level=log_level, logger_name="wfs_importer")


def setup_database_logging(log_level: str | None = None) -> logging.Logger:
    """Set up logging for the database maintenance scripts."""
    return setup_logging(log_level=log_level, logger_name="database")


def setup_api_logging(log_level: str | None = None) -> logging.Logger:
    """Set up logging for the HTTP API."""
    return setup_logging(log_level=log_level, logger_name="api")
