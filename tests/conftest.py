"""
Shared test fixtures and configuration for the Rajad trails test suite.

This file contains pytest fixtures that can be used across all test modules.
Fixtures defined here are automatically available to all test files.
"""

import logging
import os
from collections import namedtuple
from unittest.mock import MagicMock, Mock

import pytest
from dotenv import load_dotenv

# Load test environment variables (if any)
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


@pytest.fixture(autouse=True)
def setup_test_environment():
    """
    Set up test environment variables.

    This fixture automatically runs before each test to ensure the test
    environment is properly configured.
    """
    if not os.getenv("POSTGRES_PASSWORD"):
        os.environ["POSTGRES_PASSWORD"] = "test_password"

    yield

    if os.getenv("POSTGRES_PASSWORD") == "test_password":
        del os.environ["POSTGRES_PASSWORD"]


@pytest.fixture
def test_logger():
    """Provide a quiet logger for components that require one."""
    logger = logging.getLogger("rajad_tests")
    logger.addHandler(logging.NullHandler())
    return logger


@pytest.fixture
def sample_line_feature():
    """
    Provide a realistic WFS trail feature in EPSG:4326.

    Matches the shape of a Maa-amet POI GeoJSON feature with a natural key.
    """
    return {
        "type": "Feature",
        "id": "poi_rmk_matkarada_j.17",
        "geometry": {
            "type": "LineString",
            "coordinates": [[25.10, 59.40], [25.12, 59.41], [25.15, 59.42]],
        },
        "properties": {
            "tunnus": "17",
            "nimi": "Viru raba matkarada",
            "maakond": "Harju maakond",
            "omavalitsus": "Kuusalu vald",
            "kirjeldus": "Laudtee läbi raba",
        },
    }


@pytest.fixture
def sample_projected_feature():
    """Provide a WFS trail feature delivered in L-EST97 (EPSG:3301) metres."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "MultiLineString",
            "coordinates": [
                [[542000.0, 6589000.0], [542500.0, 6589400.0]],
                [[542500.0, 6589400.0], [543100.0, 6589900.0]],
            ],
        },
        "properties": {"OBJECTID": 4021.0, "NIMI": "Oandu matkarada"},
    }


@pytest.fixture
def sample_keyless_feature():
    """Provide a feature with no natural key and no feature id."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": [[26.70, 58.30], [26.72, 58.31]],
        },
        "properties": {"nimi": "Emajõe luhaniidu rada", "pikkus": 2.4},
    }


def make_features(count, layer="poi_matkarada_j", start=0):
    """Build `count` minimal features with sequential natural keys."""
    return [
        {
            "type": "Feature",
            "geometry": {
                "type": "LineString",
                "coordinates": [[25.0, 58.5], [25.01, 58.51]],
            },
            "properties": {"tunnus": str(start + i), "nimi": f"{layer} rada {start + i}"},
        }
        for i in range(count)
    ]


@pytest.fixture
def feature_factory():
    """Provide the feature page builder to tests."""
    return make_features


# API Test Fixtures


@pytest.fixture
def mock_db_engine():
    """
    Provide a mock SQLAlchemy engine for API tests.

    Returns a Mock engine with connection context manager configured.
    Use this to avoid real database connections during API testing.
    """
    mock_engine = MagicMock()
    mock_connection = MagicMock()
    mock_result = MagicMock()

    # Configure connection context manager
    mock_engine.connect.return_value.__enter__.return_value = mock_connection
    mock_engine.connect.return_value.__exit__.return_value = None

    # Configure execute to return mock result
    mock_connection.execute.return_value = mock_result
    mock_result.fetchall.return_value = []
    mock_result.fetchone.return_value = None

    return mock_engine


TrackRow = namedtuple(
    "TrackRow",
    [
        "id",
        "source",
        "source_id",
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
        "display_image_url",
        "start_lat",
        "start_lng",
        "featured",
    ],
)

TrackDetailRow = namedtuple("TrackDetailRow", TrackRow._fields + ("geometry_geojson",))


@pytest.fixture
def sample_track_rows():
    """
    Provide rows as returned by the tracks listing query.

    Two trails: one with a cover image and one falling back to the SVG preview.
    """
    return [
        TrackRow(
            id="0d6c3a52-7e59-4b3a-9e4e-1d0f1c2b3a4d",
            source="maaamet_poi_wfs",
            source_id="poi_rmk_matkarada_j:17",
            name_et="Viru raba matkarada",
            name_en="Viru raba matkarada",
            county_et="Harju maakond",
            county_en="Harju maakond",
            municipality_et="Kuusalu vald",
            municipality_en="Kuusalu vald",
            location_et="Harju maakond, Kuusalu vald",
            location_en="Harju maakond, Kuusalu vald",
            description_et="Laudtee läbi raba",
            description_en="Laudtee läbi raba",
            length_km=3.5,
            display_image_url="https://example.org/viru.jpg",
            start_lat=59.4,
            start_lng=25.1,
            featured=True,
        ),
        TrackRow(
            id="5b0f3c1e-7f6a-4c41-9a3e-2f8e1d0c9b7a",
            source="maaamet_poi_wfs",
            source_id="poi_matkarada_j:a1b2",
            name_et="Oandu matkarada",
            name_en="Oandu matkarada",
            county_et="Lääne-Viru maakond",
            county_en="Lääne-Viru maakond",
            municipality_et=None,
            municipality_en=None,
            location_et="Lääne-Viru maakond",
            location_en="Lääne-Viru maakond",
            description_et=None,
            description_en=None,
            length_km=None,
            display_image_url="/tracks/5b0f3c1e-7f6a-4c41-9a3e-2f8e1d0c9b7a/preview.svg",
            start_lat=None,
            start_lng=None,
            featured=False,
        ),
    ]


@pytest.fixture
def sample_track_detail_row(sample_track_rows):
    """Provide a detail row with GeoJSON geometry for the first sample trail."""
    return TrackDetailRow(
        *sample_track_rows[0],
        geometry_geojson={
            "type": "MultiLineString",
            "coordinates": [[[25.1, 59.4], [25.12, 59.41]]],
        },
    )


@pytest.fixture
def mock_page_client():
    """Provide a mock WFS client whose pages are set per test."""
    client = Mock()
    client.fetch_page.return_value = []
    return client
