"""Exceptions raised by the WFS trail ingestion pipeline.

The orchestrator decides how far each error reaches:

- ConfigurationError stops the whole run before any network call.
- TransportError and PersistenceError stop only the layer being imported.
- ImportCancelled ends the current layer as cancelled.
"""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for ingestion pipeline errors."""


class ConfigurationError(IngestionError):
    """Requested layers are not in the verified registry and no override was given."""

    def __init__(self, rejected: list[str]):
        self.rejected = list(rejected)
        super().__init__(
            f"Refusing to import unverified layer(s): {', '.join(self.rejected)}. "
            "Add them to scripts/collectors/verified_layers.py or set "
            "ALLOW_UNVERIFIED_LAYERS=true to override."
        )


class TransportError(IngestionError):
    """A page request failed: network error, timeout, bad status or bad payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Network failures and server errors are worth another attempt; 4xx are not."""
        return self.status_code is None or self.status_code >= 500


class PersistenceError(IngestionError):
    """The database rejected a single trail upsert."""

    def __init__(self, source_id: str, cause: Exception):
        self.source_id = source_id
        self.cause = cause
        super().__init__(f"Failed to upsert trail '{source_id}': {cause}")


class ImportCancelled(IngestionError):
    """Cancellation was requested while the importer was waiting to retry."""
