"""
Maa-amet POI WFS Trail Importer

This module imports hiking trail geometries from the Maa- ja Ruumiamet POI WFS
service into the PostGIS `tracks` table. Find the service at:
https://teenus.maaamet.ee/ows/huviobjektid-poi

Key Features:
- Allow-list of audited layers, enforced before any network call
- Paginated GetFeature requests with retry for network and server errors
- Detection of projected (L-EST97) coordinates and swapped lon/lat axis order
- Stable trail identities, so re-running the import never duplicates a trail
- Idempotent upsert of each trail, one short transaction per feature
- Per-layer failure isolation and a structured run report
- Cancellation between pages and layers (Ctrl+C in the CLI)

Data Processing Pipeline (per layer):
1. Request a page of features at the current offset
2. For every feature: derive the stable id, map bilingual fields,
   normalise the geometry and tag its SRID
3. Upsert the feature; PostGIS repairs, reprojects and measures the geometry
4. Advance the offset; stop on an empty page or a page shorter than requested
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from datetime import datetime, timezone
from enum import Enum

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

# Load .env before local imports that need env vars
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

from config.settings import Config, config
from scripts.collectors.coordinate_heuristics import normalize_geometry
from scripts.collectors.exceptions import (
    ConfigurationError,
    ImportCancelled,
    PersistenceError,
    TransportError,
)
from scripts.collectors.field_mapper import map_properties
from scripts.collectors.identity import as_feature, stable_id
from scripts.collectors.verified_layers import (
    find_unverified,
    get_layer,
    list_verified_layers,
    verified_type_names,
)
from scripts.collectors.wfs_client import WFSClient
from scripts.collectors.wfs_schemas import RemoteFeature
from scripts.database.db_writer import DatabaseWriter, get_postgres_engine
from utils.logging import setup_wfs_importer_logging


class IngestionSettings(BaseModel):
    """Explicit settings for one import run."""

    endpoint: str = Field(
        default=Config.WFS_ENDPOINT, description="WFS service URL"
    )
    type_names: list[str] = Field(
        default_factory=verified_type_names,
        description="Layers to import, in order. Defaults to every verified layer",
    )
    allow_unverified: bool = Field(
        default=False, description="Permit layers missing from the verified registry"
    )
    page_size: int = Field(
        default=Config.WFS_PAGE_SIZE, gt=0, description="Features requested per page"
    )
    srs_name: str = Field(
        default=Config.WFS_SRS_NAME, description="Reference system hint sent to WFS"
    )
    request_timeout: float = Field(
        default=Config.REQUEST_TIMEOUT, gt=0, description="Per-request timeout (s)"
    )
    page_delay: float = Field(
        default=Config.PAGE_DELAY_SECONDS, ge=0, description="Pause between pages (s)"
    )
    fetch_max_retries: int = Field(
        default=Config.FETCH_MAX_RETRIES, ge=0, description="Retries per failed page"
    )
    fetch_retry_delay: float = Field(
        default=Config.FETCH_RETRY_DELAY, ge=0, description="Pause before a retry (s)"
    )
    source: str = Field(
        default=Config.TRACK_SOURCE, description="Source tag stored on every trail"
    )
    geographic_srid: int = Field(default=Config.GEOGRAPHIC_SRID)
    projected_srid: int = Field(default=Config.PROJECTED_SRID)

    @classmethod
    def from_config(cls, cfg: Config) -> IngestionSettings:
        """Build settings from the environment-backed project configuration."""
        return cls(
            endpoint=cfg.WFS_ENDPOINT,
            type_names=list(cfg.WFS_TYPE_NAMES) or verified_type_names(),
            allow_unverified=cfg.ALLOW_UNVERIFIED_LAYERS,
            page_size=cfg.WFS_PAGE_SIZE,
            srs_name=cfg.WFS_SRS_NAME,
            request_timeout=cfg.REQUEST_TIMEOUT,
            page_delay=cfg.PAGE_DELAY_SECONDS,
            fetch_max_retries=cfg.FETCH_MAX_RETRIES,
            fetch_retry_delay=cfg.FETCH_RETRY_DELAY,
            source=cfg.TRACK_SOURCE,
            geographic_srid=cfg.GEOGRAPHIC_SRID,
            projected_srid=cfg.PROJECTED_SRID,
        )


class LayerStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class LayerResult(BaseModel):
    """Outcome of importing one layer."""

    type_name: str
    status: LayerStatus
    imported: int = Field(default=0, ge=0, description="Features persisted")
    pages: int = Field(default=0, ge=0, description="Pages fetched")
    error_type: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is LayerStatus.DONE


class ImportReport(BaseModel):
    """Aggregated outcome of an import run."""

    started_at: str
    finished_at: str | None = None
    layers: list[LayerResult] = Field(default_factory=list)

    @property
    def total_imported(self) -> int:
        return sum(layer.imported for layer in self.layers)

    @property
    def succeeded(self) -> list[LayerResult]:
        return [layer for layer in self.layers if layer.ok]

    @property
    def failed(self) -> list[LayerResult]:
        return [layer for layer in self.layers if layer.status is LayerStatus.FAILED]

    @property
    def remote_unreachable(self) -> bool:
        """True when every layer failed on transport, i.e. WFS was never usable."""
        return bool(self.layers) and all(
            layer.status is LayerStatus.FAILED
            and layer.error_type == TransportError.__name__
            for layer in self.layers
        )


class WFSTrailImporter:
    """
    Import trails from verified WFS layers into the tracks table.

    Layers and pages are processed strictly one after another: a page is only
    requested once every feature of the previous page is persisted, so no two
    writes for the same (source, source_id) can overlap.
    """

    def __init__(
        self,
        settings: IngestionSettings,
        db_writer: DatabaseWriter | None = None,
        client: WFSClient | None = None,
        cancel_event: threading.Event | None = None,
        log_level: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the importer.

        Args:
            settings (IngestionSettings): Run settings
            db_writer (DatabaseWriter | None): Storage collaborator. If None, one
                is created from the configured database
            client (WFSClient | None): Page fetcher. If None, one is created from
                the settings
            cancel_event (threading.Event | None): Set it to stop the run between
                pages, layers and retry waits
            log_level (str | None): Logging level for the default logger
            logger (logging.Logger | None): Logger to use instead of the default
        """
        self.settings = settings
        self.logger = logger or setup_wfs_importer_logging(log_level)
        self.cancel_event = cancel_event or threading.Event()

        self._owns_client = client is None
        self.client = client or WFSClient(
            endpoint=settings.endpoint,
            srs_name=settings.srs_name,
            timeout=settings.request_timeout,
            logger=self.logger,
        )
        self.db_writer = db_writer or DatabaseWriter(get_postgres_engine(), self.logger)

        self.logger.info(
            f"WFS Trail Importer initialized - Endpoint: {settings.endpoint}, "
            f"Page size: {settings.page_size}, Allow unverified: {settings.allow_unverified}"
        )

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def close(self) -> None:
        """Close the HTTP session if this importer created the client."""
        if self._owns_client:
            self.client.close()

    def resolve_layers(self) -> list[str]:
        """
        Check the requested layers against the verified registry.

        Returns:
            list[str]: Layers to import, in request order

        Raises:
            ConfigurationError: If unverified layers are requested without override
        """
        requested = list(self.settings.type_names)
        unverified = find_unverified(requested)

        if unverified and not self.settings.allow_unverified:
            raise ConfigurationError(unverified)

        if unverified:
            self.logger.warning(
                f"Importing unverified layer(s) by override: {', '.join(unverified)}"
            )
        return requested

    def fetch_page_with_retry(self, type_name: str, offset: int) -> list[RemoteFeature]:
        """
        Fetch one page, retrying network failures and server errors.

        Args:
            type_name: Layer to fetch
            offset: Start index of the page

        Returns:
            list[RemoteFeature]: Features of the page

        Raises:
            TransportError: When the request keeps failing or fails with a 4xx
        """
        max_retries = self.settings.fetch_max_retries
        retry_delay = self.settings.fetch_retry_delay

        last_error: TransportError | None = None
        for attempt in range(max_retries + 1):  # +1 for initial attempt
            if attempt > 0:
                self.logger.info(
                    f"Retry attempt {attempt}/{max_retries} for {type_name} "
                    f"startIndex={offset} after {retry_delay}s delay"
                )
                if self.cancel_event.wait(retry_delay):
                    raise ImportCancelled(
                        f"Cancelled while retrying {type_name} startIndex={offset}"
                    )

            try:
                return self.client.fetch_page(type_name, self.settings.page_size, offset)
            except TransportError as e:
                if not e.retryable:
                    raise
                last_error = e
                self.logger.warning(
                    f"Page request for {type_name} failed (attempt {attempt + 1}): {e}"
                )

        self.logger.error(f"Max retries exceeded for {type_name} startIndex={offset}")
        raise last_error

    def import_feature(self, type_name: str, feature: RemoteFeature) -> str:
        """
        Map, normalise and persist a single feature.

        Returns:
            str: The feature's source id

        Raises:
            PersistenceError: If the upsert is rejected
        """
        feature = as_feature(feature)
        source_id = stable_id(type_name, feature)
        fields = map_properties(type_name, feature, source_id=source_id)
        tagged = normalize_geometry(
            feature.geometry,
            geographic_srid=self.settings.geographic_srid,
            projected_srid=self.settings.projected_srid,
        )
        raw_properties = {"typename": type_name, **feature.properties}

        self.db_writer.upsert_trail(
            self.settings.source, source_id, fields, tagged, raw_properties
        )
        return source_id

    def import_layer(self, type_name: str) -> LayerResult:
        """
        Import every page of one layer.

        Errors never escape: they end this layer and are recorded on the result,
        together with the number of features persisted before the failure.

        Args:
            type_name: Layer to import

        Returns:
            LayerResult: Status and counters for the layer
        """
        layer = get_layer(type_name)
        if layer is not None:
            self.logger.info(f"==> {type_name} ({layer.title_en})")
        else:
            self.logger.info(f"==> {type_name} (unverified)")
        page_size = self.settings.page_size
        offset = 0
        result = LayerResult(type_name=type_name, status=LayerStatus.DONE)

        try:
            while True:
                if self.cancelled:
                    result.status = LayerStatus.CANCELLED
                    self.logger.warning(f"Import of {type_name} cancelled")
                    break

                features = self.fetch_page_with_retry(type_name, offset)
                result.pages += 1
                if not features:
                    break

                for feature in features:
                    self.import_feature(type_name, feature)
                    result.imported += 1

                offset += len(features)
                self.logger.info(
                    f"  +{len(features)} (total {result.imported}) from {type_name}"
                )

                # A short page is taken as the end of the layer
                if len(features) < page_size:
                    break

                if self.settings.page_delay:
                    self.cancel_event.wait(self.settings.page_delay)

        except ImportCancelled as e:
            result.status = LayerStatus.CANCELLED
            self.logger.warning(str(e))
        except (TransportError, PersistenceError) as e:
            result.status = LayerStatus.FAILED
            result.error_type = type(e).__name__
            result.error = str(e)
        except Exception as e:
            result.status = LayerStatus.FAILED
            result.error_type = type(e).__name__
            result.error = str(e)
            self.logger.exception(f"Unexpected error importing {type_name}")

        if result.status is LayerStatus.DONE:
            self.logger.info(f"  ✅ Imported {result.imported} feature(s) from {type_name}")
        elif result.status is LayerStatus.FAILED:
            self.logger.error(
                f"  ❌ Failed to import {type_name} after {result.imported} feature(s): "
                f"{result.error}"
            )
        return result

    def run(self) -> ImportReport:
        """
        Run the import over every requested layer.

        Returns:
            ImportReport: Per-layer results and totals

        Raises:
            ConfigurationError: If unverified layers are requested without override
        """
        layers = self.resolve_layers()
        report = ImportReport(started_at=datetime.now(timezone.utc).isoformat())

        self.logger.info(f"Importing from WFS: {self.settings.endpoint}")
        self.logger.info(f"TypeNames: {', '.join(layers)}")

        for type_name in layers:
            if self.cancelled:
                report.layers.append(
                    LayerResult(type_name=type_name, status=LayerStatus.CANCELLED)
                )
                continue
            report.layers.append(self.import_layer(type_name))

        report.finished_at = datetime.now(timezone.utc).isoformat()
        self._log_summary(report)
        return report

    def _log_summary(self, report: ImportReport) -> None:
        self.logger.info("Import summary:")
        for layer in report.layers:
            line = f"  {layer.type_name}: {layer.status.value}, {layer.imported} feature(s)"
            if layer.error:
                line += f" ({layer.error_type}: {layer.error})"
            self.logger.info(line)
        self.logger.info(
            f"✅ Import finished: {report.total_imported} feature(s), "
            f"{len(report.succeeded)}/{len(report.layers)} layer(s) succeeded"
        )


def print_verified_layers() -> None:
    for layer in list_verified_layers():
        print(f"{layer.type_name}\t{layer.title_en}\t{layer.provider}")


def main(argv: list[str] | None = None) -> int:
    """
    Main function to run the WFS trail importer.

    Examples:
        # Import every verified layer
        python scripts/collectors/wfs_trail_importer.py

        # Import selected layers with a smaller page size
        python scripts/collectors/wfs_trail_importer.py --layers poi_rmk_matkarada_j --page-size 1000

        # Import a layer that is not in the verified registry
        python scripts/collectors/wfs_trail_importer.py --layers poi_new_j --allow-unverified

        # Show the verified registry
        python scripts/collectors/wfs_trail_importer.py --list-layers

    Returns:
        int: 0 on success, 1 on refused layers or when no layer could reach WFS
    """
    parser = argparse.ArgumentParser(description="Maa-amet POI WFS Trail Importer")
    parser.add_argument(
        "--layers", type=str, help="Comma-separated list of WFS typeNames to import"
    )
    parser.add_argument(
        "--allow-unverified",
        action="store_true",
        default=None,
        help="Allow layers that are not in the verified registry",
    )
    parser.add_argument("--page-size", type=int, help="Features requested per page")
    parser.add_argument("--srs-name", type=str, help="Reference system hint for WFS")
    parser.add_argument("--endpoint", type=str, help="WFS service URL")
    parser.add_argument(
        "--list-layers", action="store_true", help="List verified layers and exit"
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")

    args = parser.parse_args(argv)

    if args.list_layers:
        print_verified_layers()
        return 0

    settings = IngestionSettings.from_config(config)
    overrides: dict[str, object] = {}
    if args.layers:
        overrides["type_names"] = [t.strip() for t in args.layers.split(",") if t.strip()]
    if args.allow_unverified:
        overrides["allow_unverified"] = True
    if args.page_size:
        overrides["page_size"] = args.page_size
    if args.srs_name:
        overrides["srs_name"] = args.srs_name
    if args.endpoint:
        overrides["endpoint"] = args.endpoint

    logger = setup_wfs_importer_logging(args.log_level)

    if overrides:
        try:
            settings = IngestionSettings.model_validate(
                {**settings.model_dump(), **overrides}
            )
        except ValidationError as e:
            logger.error(f"Invalid import settings: {e}")
            return 1

    # Refuse unverified layers before touching the database or the network
    unverified = find_unverified(settings.type_names)
    if unverified and not settings.allow_unverified:
        logger.error(str(ConfigurationError(unverified)))
        return 1

    cancel_event = threading.Event()

    def _request_cancel(signum, frame):
        logger.warning("Interrupt received, stopping after the current feature batch")
        cancel_event.set()

    signal.signal(signal.SIGINT, _request_cancel)

    try:
        importer = WFSTrailImporter(settings, cancel_event=cancel_event, logger=logger)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        report = importer.run()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    finally:
        importer.close()

    if report.remote_unreachable:
        logger.error("No layer could be fetched from the WFS service")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
