"""
Verified trail layers.

The project imports only from explicit, documented layers of the Maa- ja Ruumiamet
Geoportaal POI WFS service, so that every trail's provenance is traceable. Layers
not listed here are refused by the importer unless the allow-list override is set.

If you need more layers, add them here so they stay audited.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field


class LayerDescriptor(BaseModel):
    """Metadata for one audited WFS feature layer."""

    model_config = ConfigDict(frozen=True)

    type_name: str = Field(..., min_length=1, description="WFS typeName of the layer")
    title_et: str = Field(..., description="Estonian layer title")
    title_en: str = Field(..., description="English layer title")
    provider: str = Field(..., description="Organisation that maintains the data")
    metadata_url: str = Field(..., description="Geoportaal metadata page")


VERIFIED_TRAIL_LAYERS: tuple[LayerDescriptor, ...] = (
    LayerDescriptor(
        type_name="poi_matkarada_j",
        title_et="Matkarada",
        title_en="Hiking trail",
        provider="Maa- ja Ruumiamet (POI andmestik, mitme allika koond)",
        metadata_url="https://teenus.maaamet.ee/ows/huviobjektid-poi?layer=poi_matkarada_j&request=GetMetadata",
    ),
    LayerDescriptor(
        type_name="poi_rmk_matkarada_j",
        title_et="RMK matkarada",
        title_en="RMK hiking trail",
        provider="Riigimetsa Majandamise Keskus (RMK)",
        metadata_url="https://geoportaal.maaamet.ee/index.php?fatlayerid=poi_rmk_matkarada_j&lang_id=1&page_id=912&plugin_act=getfatlayerid",
    ),
    LayerDescriptor(
        type_name="poi_rmk_matkatee_j",
        title_et="RMK matkatee",
        title_en="RMK hiking route",
        provider="Riigimetsa Majandamise Keskus (RMK)",
        metadata_url="https://geoportaal.maaamet.ee/index.php?fatlayerid=poi_rmk_matkatee_j&lang_id=1&page_id=912&plugin_act=getfatlayerid",
    ),
    LayerDescriptor(
        type_name="poi_kea_matkarada_j",
        title_et="KeA/KOV matkarada",
        title_en="Environmental Board / municipalities hiking trail",
        provider="Keskkonnaamet (KeA) ja omavalitsused (KOV)",
        metadata_url="https://geoportaal.maaamet.ee/index.php?fatlayerid=poi_kea_matkarada_j&lang_id=1&page_id=912&plugin_act=getfatlayerid",
    ),
    LayerDescriptor(
        type_name="poi_eestiterviserada_j",
        title_et="Terviserada",
        title_en="Health trail",
        provider="SA Eesti Terviserajad",
        metadata_url="https://geoportaal.maaamet.ee/index.php?fatlayerid=poi_eestiterviserada_j&lang_id=1&page_id=912&plugin_act=getfatlayerid",
    ),
)


def list_verified_layers() -> list[LayerDescriptor]:
    """Return the verified layers in registry order."""
    return list(VERIFIED_TRAIL_LAYERS)


def verified_type_names() -> list[str]:
    """Return the typeNames of all verified layers in registry order."""
    return [layer.type_name for layer in VERIFIED_TRAIL_LAYERS]


def get_layer(type_name: str) -> LayerDescriptor | None:
    """Look up a verified layer by typeName."""
    for layer in VERIFIED_TRAIL_LAYERS:
        if layer.type_name == type_name:
            return layer
    return None


def find_unverified(type_names: Iterable[str]) -> list[str]:
    """
    Return the requested typeNames that are missing from the registry.

    Args:
        type_names: Layer identifiers requested for import

    Returns:
        list[str]: Unverified identifiers, in request order, without duplicates
    """
    verified = set(verified_type_names())
    rejected: list[str] = []
    for name in type_names:
        if name not in verified and name not in rejected:
            rejected.append(name)
    return rejected
