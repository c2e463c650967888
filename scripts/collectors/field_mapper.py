"""
Map WFS property bags onto the bilingual columns of the tracks table.

Each destination column has an ordered chain of candidate source keys. Keys
differ in case and language between layers and providers, so the first usable
value wins. Nothing here raises on missing data: absent attributes only leave
columns empty, and the name falls back to the trail's source id.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from scripts.collectors.identity import as_feature, pick, stable_id
from scripts.collectors.wfs_schemas import RemoteFeature

FIELD_CANDIDATES: dict[str, tuple[str, ...]] = {
    "name_et": ("nimi", "NIMI", "name", "NAME"),
    "name_en": ("name_en", "NAME_EN", "nimi_en", "NIMI_EN"),
    "county_et": ("maakond", "MAAKOND"),
    "municipality_et": ("omavalitsus", "OMAVALITSUS"),
    "description_et": ("kirjeldus", "KIRJELDUS", "info", "INFO"),
    "description_en": ("kirjeldus_en", "KIRJELDUS_EN", "info_en", "INFO_EN"),
}


class MappedFields(BaseModel):
    """Typed destination fields for one trail."""

    name_et: str = Field(..., description="Estonian name, or the source id")
    name_en: str = Field(..., description="English name, defaults to name_et")
    county_et: str | None = Field(default=None, description="Maakond")
    county_en: str | None = Field(default=None)
    municipality_et: str | None = Field(default=None, description="Omavalitsus")
    municipality_en: str | None = Field(default=None)
    location_et: str | None = Field(
        default=None, description="County and municipality joined with a comma"
    )
    location_en: str | None = Field(default=None)
    description_et: str | None = Field(default=None, description="Kirjeldus")
    description_en: str | None = Field(default=None)


def lookup(properties: Mapping[str, Any], field: str) -> str | None:
    """Resolve one destination field through its candidate chain."""
    value = pick(properties, FIELD_CANDIDATES[field])
    return None if value is None else str(value).strip()


def join_location(county: str | None, municipality: str | None) -> str | None:
    """
    Build the combined location string.

    Args:
        county: County name, if any
        municipality: Municipality name, if any

    Returns:
        "county, municipality" when both are present, whichever one is present
        otherwise, or None
    """
    return ", ".join(part for part in (county, municipality) if part) or None


def map_properties(
    layer_name: str,
    feature: RemoteFeature | Mapping[str, Any],
    source_id: str | None = None,
) -> MappedFields:
    """
    Project a feature's property bag onto the tracks table columns.

    Args:
        layer_name: WFS typeName the feature came from
        feature: The remote feature
        source_id: Precomputed identity; derived with stable_id() when omitted

    Returns:
        MappedFields: Destination values for the upsert
    """
    feature = as_feature(feature)
    properties = feature.properties

    if source_id is None:
        source_id = stable_id(layer_name, feature)

    name_et = lookup(properties, "name_et") or source_id
    county = lookup(properties, "county_et")
    municipality = lookup(properties, "municipality_et")
    location = join_location(county, municipality)
    description_et = lookup(properties, "description_et")

    # No official English attributes exist in most POI layers
    return MappedFields(
        name_et=name_et,
        name_en=lookup(properties, "name_en") or name_et,
        county_et=county,
        county_en=county,
        municipality_et=municipality,
        municipality_en=municipality,
        location_et=location,
        location_en=location,
        description_et=description_et,
        description_en=lookup(properties, "description_en") or description_et,
    )
