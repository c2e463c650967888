"""
Pydantic models for API request/response validation.

These models define the structure of API responses and automatically
generate OpenAPI schema definitions.
"""

from typing import Any

from pydantic import BaseModel, Field


class Track(BaseModel):
    """
    Individual trail information.

    Represents one imported trail with bilingual metadata but no geometry.
    """

    id: str = Field(
        ...,
        description="Trail UUID",
        examples=["5b0f3c1e-7f6a-4c41-9a3e-2f8e1d0c9b7a"],
    )
    source: str = Field(..., description="Ingestion source tag", examples=["maaamet_poi_wfs"])
    source_id: str = Field(
        ...,
        description="Identifier of the trail within its source (layer-prefixed)",
        examples=["poi_rmk_matkarada_j:1234"],
    )
    name_et: str = Field(..., description="Estonian name", examples=["Suure raba matkarada"])
    name_en: str | None = Field(None, description="English name (defaults to Estonian)")
    county_et: str | None = Field(None, description="County", examples=["Harju maakond"])
    county_en: str | None = Field(None)
    municipality_et: str | None = Field(None, description="Municipality")
    municipality_en: str | None = Field(None)
    location_et: str | None = Field(
        None, description="County and municipality", examples=["Harju maakond, Kuusalu vald"]
    )
    location_en: str | None = Field(None)
    description_et: str | None = Field(None, description="Estonian description")
    description_en: str | None = Field(None)
    length_km: float | None = Field(
        None, description="Trail length in kilometres", ge=0, examples=[5.4]
    )
    image_url: str | None = Field(
        None,
        description="Image to show for the trail: cover image, photo, or the SVG preview",
        examples=["/tracks/5b0f3c1e-7f6a-4c41-9a3e-2f8e1d0c9b7a/preview.svg"],
    )
    start_lat: float | None = Field(None, description="Latitude of the trail start")
    start_lng: float | None = Field(None, description="Longitude of the trail start")
    featured: bool = Field(False, description="Whether the trail is featured")


class TrackDetail(Track):
    """Single trail with its geometry."""

    geometry: dict[str, Any] | None = Field(
        None, description="Trail geometry as GeoJSON (EPSG:4326)"
    )


class TracksResponse(BaseModel):
    """
    Response model for the trails listing.

    Contains summary statistics and a list of trails.
    """

    track_count: int = Field(..., description="Number of trails returned", ge=0, examples=[412])
    total_km: float = Field(
        ..., description="Total length of all returned trails", ge=0, examples=[2310.7]
    )
    tracks: list[Track] = Field(..., description="Trails ordered by Estonian name")
