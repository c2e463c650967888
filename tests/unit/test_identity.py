"""
Unit tests for identity.py module.

Tests cover natural key selection, the WFS feature id fallback and the content
hash used for features with no identifier at all.
"""

import copy

from scripts.collectors.identity import (
    canonical_geometry,
    format_key,
    pick,
    stable_id,
)
from scripts.collectors.wfs_schemas import RemoteFeature


class TestPick:
    """Test cases for candidate key lookup."""

    def test_first_usable_value_wins(self):
        assert pick({"tunnus": "", "TUNNUS": "9", "id": "1"}, ("tunnus", "TUNNUS", "id")) == "9"

    def test_none_and_blank_are_skipped(self):
        assert pick({"a": None, "b": "  "}, ("a", "b")) is None

    def test_empty_properties(self):
        assert pick(None, ("a",)) is None
        assert pick({}, ("a",)) is None

    def test_zero_is_usable(self):
        assert pick({"objectid": 0}, ("objectid",)) == 0


class TestFormatKey:
    def test_integral_float(self):
        assert format_key(4021.0) == "4021"

    def test_non_integral_float(self):
        assert format_key(12.5) == "12.5"

    def test_string_and_int(self):
        assert format_key("abc") == "abc"
        assert format_key(7) == "7"


class TestStableId:
    """Test cases for stable_id."""

    def test_natural_key(self):
        feature = {"properties": {"tunnus": "123"}}
        assert stable_id("poi_matkarada_j", feature) == "poi_matkarada_j:123"

    def test_natural_key_priority(self):
        feature = {"properties": {"OBJECTID": 5, "tunnus": "T-1", "fid": 9}}
        assert stable_id("poi_matkarada_j", feature) == "poi_matkarada_j:T-1"

    def test_upper_case_objectid_float(self, sample_projected_feature):
        assert (
            stable_id("poi_rmk_matkatee_j", sample_projected_feature)
            == "poi_rmk_matkatee_j:4021"
        )

    def test_feature_id_fallback(self):
        feature = {"id": "poi_matkarada_j.88", "properties": {"nimi": "Rada"}}
        assert stable_id("poi_matkarada_j", feature) == "poi_matkarada_j:poi_matkarada_j.88"

    def test_accepts_remote_feature(self, sample_line_feature):
        feature = RemoteFeature.model_validate(sample_line_feature)
        assert stable_id("poi_rmk_matkarada_j", feature) == "poi_rmk_matkarada_j:17"

    def test_hash_fallback_is_deterministic(self, sample_keyless_feature):
        first = stable_id("poi_matkarada_j", sample_keyless_feature)
        second = stable_id("poi_matkarada_j", copy.deepcopy(sample_keyless_feature))

        assert first == second
        prefix, digest = first.split(":", 1)
        assert prefix == "poi_matkarada_j"
        assert len(digest) == 40

    def test_hash_ignores_key_order(self, sample_keyless_feature):
        reordered = copy.deepcopy(sample_keyless_feature)
        reordered["geometry"] = {
            "coordinates": sample_keyless_feature["geometry"]["coordinates"],
            "type": "LineString",
        }

        assert stable_id("poi_matkarada_j", reordered) == stable_id(
            "poi_matkarada_j", sample_keyless_feature
        )

    def test_hash_changes_with_geometry(self, sample_keyless_feature):
        moved = copy.deepcopy(sample_keyless_feature)
        moved["geometry"]["coordinates"][0] = [26.71, 58.30]

        assert stable_id("poi_matkarada_j", moved) != stable_id(
            "poi_matkarada_j", sample_keyless_feature
        )

    def test_hash_changes_with_name(self, sample_keyless_feature):
        renamed = copy.deepcopy(sample_keyless_feature)
        renamed["properties"]["nimi"] = "Teine rada"

        assert stable_id("poi_matkarada_j", renamed) != stable_id(
            "poi_matkarada_j", sample_keyless_feature
        )

    def test_hash_ignores_unrelated_properties(self, sample_keyless_feature):
        edited = copy.deepcopy(sample_keyless_feature)
        edited["properties"]["pikkus"] = 2.5

        assert stable_id("poi_matkarada_j", edited) == stable_id(
            "poi_matkarada_j", sample_keyless_feature
        )

    def test_layer_prefix_separates_layers(self, sample_keyless_feature):
        assert stable_id("poi_matkarada_j", sample_keyless_feature) != stable_id(
            "poi_kea_matkarada_j", sample_keyless_feature
        )

    def test_feature_without_geometry_or_properties(self):
        result = stable_id("poi_matkarada_j", {"geometry": None, "properties": None})
        assert result.startswith("poi_matkarada_j:")
        assert result == stable_id("poi_matkarada_j", {})


class TestCanonicalGeometry:
    def test_compact_sorted_json(self):
        assert (
            canonical_geometry({"type": "LineString", "coordinates": [[1, 2]]})
            == '{"coordinates":[[1,2]],"type":"LineString"}'
        )

    def test_missing_geometry(self):
        assert canonical_geometry(None) == "{}"
