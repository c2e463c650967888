"""Pydantic schemas for Maa-amet POI WFS GeoJSON responses.

These validate the structure of each GetFeature page before the features enter
the ingestion pipeline. Property bags are left open: keys differ per layer and
per data provider, so only the envelope is checked here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RemoteFeature(BaseModel):
    """A single GeoJSON Feature from a WFS layer.

    Geometry is kept as the raw GeoJSON dict because its reference system and
    axis order are unknown until the coordinate heuristics have looked at it.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="Feature", description="GeoJSON object type")
    id: str | int | float | None = Field(
        default=None, description="Feature identifier assigned by the WFS server"
    )
    geometry: dict[str, Any] | None = Field(
        default=None, description="GeoJSON geometry in an unknown reference system"
    )
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Layer-specific attribute bag"
    )

    @field_validator("properties", mode="before")
    @classmethod
    def default_properties(cls, v: Any) -> Any:
        """Treat a null property bag as empty."""
        return {} if v is None else v

    @field_validator("geometry", mode="before")
    @classmethod
    def drop_untyped_geometry(cls, v: Any) -> Any:
        """Discard geometry objects that carry no GeoJSON type.

        Args:
            v: The raw geometry value

        Returns:
            The geometry dict, or None when it cannot be a GeoJSON geometry
        """
        if isinstance(v, dict) and not isinstance(v.get("type"), str):
            return None
        return v


class WFSFeatureCollection(BaseModel):
    """Validates one page of a WFS GetFeature GeoJSON response."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="FeatureCollection", description="GeoJSON object type")
    features: list[RemoteFeature] = Field(
        default_factory=list, description="Features in the requested window"
    )
    numberMatched: int | str | None = Field(
        default=None, description="Total features matched, or 'unknown'"
    )
    numberReturned: int | None = Field(
        default=None, description="Features in this page"
    )

    @field_validator("features", mode="before")
    @classmethod
    def default_features(cls, v: Any) -> Any:
        return [] if v is None else v
