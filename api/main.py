"""
Rajad Trails API

A FastAPI application that serves Estonian hiking trails imported from the
Maa-amet points-of-interest WFS service.

The API only reads the tracks table; data is written by the WFS trail
importer (scripts/collectors/wfs_trail_importer.py).

Usage:
    Start the development server:
        $ uvicorn api.main:app --reload

    The API will be available at:
        - Interactive docs (Swagger UI): http://localhost:8000/docs
        - Alternative docs (ReDoc): http://localhost:8000/redoc
        - OpenAPI schema: http://localhost:8000/openapi.json
"""

import os
import uuid
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Path, Query, Response
from sqlalchemy import text

# Load .env before local imports that need env vars
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

from api.database import dispose_db_engine, get_db_engine
from api.models import TrackDetail, TracksResponse
from api.preview import render_preview
from api.queries import fetch_track, fetch_track_geometry, fetch_tracks
from config.settings import config
from utils.logging import setup_api_logging

logger = setup_api_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    dispose_db_engine()


# Create FastAPI app with metadata for OpenAPI documentation
app = FastAPI(
    title="Rajad Trails API",
    description="""
    API for exploring Estonian hiking trails published by the Estonian Land Board
    (Maa-amet) points-of-interest WFS service.
    """,
    version=config.APP_VERSION,
    contact={
        "name": "Rajad",
    },
    lifespan=lifespan,
)


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint returning API information and available endpoints.

    Returns basic metadata about the API and links to documentation.
    """
    return {
        "name": "Rajad Trails API",
        "version": config.APP_VERSION,
        "description": "Query Estonian hiking trails imported from the Maa-amet POI WFS",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
        "endpoints": {
            "tracks": "/tracks",
            "track": "/tracks/{track_id}",
            "track_preview": "/tracks/{track_id}/preview.svg",
            "health_check": "/health",
        },
    }


@app.get(
    "/tracks",
    response_model=TracksResponse,
    tags=["Tracks"],
    summary="Get trails",
    description="""
    Returns imported hiking trails ordered by Estonian name.

    Supports filtering by featured status, county and length.
    """,
)
async def get_tracks(
    featured: bool | None = Query(
        default=None,
        description="Filter by featured status: true=featured only, false=not featured, omit=all",
    ),
    county: str | None = Query(
        default=None,
        description="Case-insensitive match on the county name (e.g., 'Harju')",
        min_length=1,
        max_length=100,
    ),
    min_length: float | None = Query(
        default=None,
        description="Minimum trail length in kilometres (e.g., 5.0)",
        ge=0,
    ),
    max_length: float | None = Query(
        default=None,
        description="Maximum trail length in kilometres (e.g., 20.0)",
        ge=0,
    ),
):
    """
    Get trails with optional filters.

    Each trail carries an `image_url`: the cover image if one is set, otherwise
    the trail photo, otherwise the generated SVG preview.

    **Example queries:**
    - All trails: `/tracks`
    - Featured trails for the landing page: `/tracks?featured=true`
    - Trails in Harju county: `/tracks?county=Harju`
    - Short walks: `/tracks?max_length=5`
    """
    if min_length is not None and max_length is not None and min_length > max_length:
        raise HTTPException(
            status_code=400,
            detail="min_length must not be greater than max_length",
        )

    try:
        return fetch_tracks(
            featured=featured,
            county=county,
            min_length=min_length,
            max_length=max_length,
        )

    except Exception as e:
        logger.error(f"Error retrieving tracks: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Error retrieving tracks: {str(e)}",
        )


@app.get(
    "/tracks/{track_id}",
    response_model=TrackDetail,
    tags=["Tracks"],
    summary="Get a single trail",
    responses={404: {"description": "Trail not found"}},
)
async def get_track(
    track_id: uuid.UUID = Path(..., description="Trail UUID"),
):
    """
    Get one trail with its GeoJSON geometry (EPSG:4326).

    **Example usage:**
    - `/tracks/5b0f3c1e-7f6a-4c41-9a3e-2f8e1d0c9b7a`
    """
    try:
        track = fetch_track(str(track_id))
    except Exception as e:
        logger.error(f"Error retrieving track {track_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Error retrieving track: {str(e)}",
        )

    if track is None:
        raise HTTPException(status_code=404, detail=f"Track '{track_id}' not found")

    return track


@app.get(
    "/tracks/{track_id}/preview.svg",
    tags=["Tracks"],
    summary="Get an SVG preview of a trail",
    responses={
        200: {
            "content": {"image/svg+xml": {}},
            "description": "SVG drawing of the trail lines",
        },
        404: {"description": "Trail not found"},
    },
)
async def get_track_preview(
    track_id: uuid.UUID = Path(..., description="Trail UUID"),
    width: int = Query(default=360, ge=64, le=2048, description="Image width in pixels"),
    height: int = Query(default=180, ge=64, le=2048, description="Image height in pixels"),
):
    """
    Get a schematic SVG drawing of a trail.

    Trails without usable geometry get a "No geometry" placeholder image.
    """
    try:
        found, geometry = fetch_track_geometry(str(track_id))
    except Exception as e:
        logger.error(f"Error retrieving geometry for track {track_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Error retrieving track preview: {str(e)}",
        )

    if not found:
        raise HTTPException(status_code=404, detail=f"Track '{track_id}' not found")

    svg = render_preview(geometry, width=width, height=height)
    return Response(
        content=svg,
        media_type="image/svg+xml; charset=utf-8",
        headers={"Cache-Control": "public, max-age=86400"},
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint to verify API and database connectivity.

    Returns the status of the API server and database connection.
    Useful for monitoring and load balancer health checks.
    """
    try:
        engine = get_db_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "database": "connected",
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e),
        }
