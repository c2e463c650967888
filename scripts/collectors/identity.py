"""
Stable identity for WFS trail features.

POI layers have no guaranteed primary key: some publish `tunnus`, some only an
OBJECTID, some nothing at all. The identity derived here is the upsert key
together with the track source, so it must come out identical on every run for
the same remote feature.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from typing import Any

from scripts.collectors.wfs_schemas import RemoteFeature

NATURAL_KEY_CANDIDATES = (
    "tunnus",
    "TUNNUS",
    "objectid",
    "OBJECTID",
    "id",
    "ID",
    "fid",
    "FID",
)
NAME_CANDIDATES = ("nimi", "NIMI", "name", "NAME")


def pick(properties: Mapping[str, Any] | None, keys: Sequence[str]) -> Any:
    """
    Return the first usable value among candidate property keys.

    A value is usable when it is not None and not blank once converted to a
    string.

    Args:
        properties: Feature property bag (may be None)
        keys: Candidate keys in priority order

    Returns:
        The raw value found, or None
    """
    if not properties:
        return None
    for key in keys:
        value = properties.get(key)
        if value is not None and str(value).strip() != "":
            return value
    return None


def format_key(value: Any) -> str:
    """Render a natural key value; integral floats lose their '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def canonical_geometry(geometry: Mapping[str, Any] | None) -> str:
    """Serialize a geometry deterministically for hashing."""
    return json.dumps(
        geometry or {}, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def as_feature(feature: RemoteFeature | Mapping[str, Any]) -> RemoteFeature:
    if isinstance(feature, RemoteFeature):
        return feature
    return RemoteFeature.model_validate(feature)


def stable_id(layer_name: str, feature: RemoteFeature | Mapping[str, Any]) -> str:
    """
    Derive the source-scoped identifier for a feature.

    Natural keys are tried first, then the WFS feature id. Without either, the
    id is a SHA-1 digest of the canonical geometry followed by the feature name,
    so unrelated attribute edits upstream do not create a new trail.

    Args:
        layer_name: WFS typeName the feature came from
        feature: The remote feature

    Returns:
        str: "<layer_name>:<key or hex digest>"

    Example:
        >>> stable_id("poi_matkarada_j", {"properties": {"tunnus": "123"}})
        'poi_matkarada_j:123'
    """
    feature = as_feature(feature)
    properties = feature.properties

    raw = pick(properties, NATURAL_KEY_CANDIDATES)
    if raw is None and feature.id is not None and str(feature.id).strip() != "":
        raw = feature.id
    if raw is not None:
        return f"{layer_name}:{format_key(raw)}"

    digest = hashlib.sha1()
    digest.update(canonical_geometry(feature.geometry).encode("utf-8"))
    digest.update(str(pick(properties, NAME_CANDIDATES) or "").encode("utf-8"))
    return f"{layer_name}:{digest.hexdigest()}"
