"""
Paged GetFeature client for the Maa-amet POI WFS service.

One call fetches one window of one layer. Failures surface as TransportError
and are never retried here; the importer owns the retry policy.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from config.settings import config
from scripts.collectors.exceptions import TransportError
from scripts.collectors.wfs_schemas import RemoteFeature, WFSFeatureCollection


class WFSClient:
    """
    A thin client for paginated WFS 2.0.0 GetFeature requests.

    The srsName parameter is only a hint: the service may answer in a different
    reference system, which is why geometries go through the coordinate
    heuristics afterwards.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        srs_name: str | None = None,
        output_format: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the WFS client.

        Args:
            endpoint: WFS service URL. Defaults to config.WFS_ENDPOINT
            srs_name: Requested reference system. Defaults to config.WFS_SRS_NAME
            output_format: Requested encoding. Defaults to config.WFS_OUTPUT_FORMAT
            timeout: Per-request timeout in seconds. Defaults to config.REQUEST_TIMEOUT
            session: Optional requests session to reuse
            logger: Logger instance. If None, uses the module logger
        """
        self.endpoint = endpoint or config.WFS_ENDPOINT
        self.srs_name = srs_name or config.WFS_SRS_NAME
        self.output_format = output_format or config.WFS_OUTPUT_FORMAT
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.logger = logger or logging.getLogger(__name__)

        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": f"{config.APP_NAME}/{config.APP_VERSION}"}
        )

    def build_params(self, layer: str, page_size: int, offset: int) -> dict[str, Any]:
        """Build the GetFeature query parameters for one page."""
        return {
            "service": "WFS",
            "version": config.WFS_VERSION,
            "request": "GetFeature",
            "typeNames": layer,
            "srsName": self.srs_name,
            "outputFormat": self.output_format,
            "count": str(page_size),
            "startIndex": str(offset),
        }

    def fetch_page(self, layer: str, page_size: int, offset: int) -> list[RemoteFeature]:
        """
        Fetch one page of features from a WFS layer.

        Args:
            layer: WFS typeName
            page_size: Maximum number of features to request
            offset: Index of the first feature in the window

        Returns:
            list[RemoteFeature]: Features in the window. Empty when the service
            reports no more features

        Raises:
            TransportError: On network failure, timeout, non-success status, or
                a response body that is not a GeoJSON FeatureCollection
        """
        params = self.build_params(layer, page_size, offset)
        self.logger.debug(f"GetFeature {layer} startIndex={offset} count={page_size}")

        try:
            response = self.session.get(
                self.endpoint, params=params, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"WFS request for {layer} timed out after {self.timeout}s: {e}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"WFS request for {layer} failed: {e}") from e

        if not response.ok:
            raise TransportError(
                f"WFS request failed ({response.status_code}): {response.reason}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"WFS response for {layer} is not valid JSON: {e}",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise TransportError(
                f"WFS response for {layer} is not a GeoJSON object",
                status_code=response.status_code,
            )

        try:
            collection = WFSFeatureCollection.model_validate(data)
        except ValidationError as e:
            raise TransportError(
                f"WFS response for {layer} is not a valid FeatureCollection: {e}",
                status_code=response.status_code,
            ) from e

        return collection.features

    def close(self) -> None:
        self.session.close()
