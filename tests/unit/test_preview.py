"""
Unit tests for the SVG trail preview renderer.
"""

import re

import pytest

from api.preview import PADDING, PLACEHOLDER_TEXT, placeholder_svg, render_preview


def path_points(svg):
    """Extract every (x, y) pair drawn in the SVG paths."""
    return [
        (float(x), float(y))
        for x, y in re.findall(r"[ML](-?\d+\.\d+) (-?\d+\.\d+)", svg)
    ]


class TestPlaceholder:
    @pytest.mark.parametrize(
        "geometry",
        [
            None,
            {},
            {"type": "LineString", "coordinates": []},
            {"type": "LineString"},
            {"type": "LineString", "coordinates": "garbage"},
            {"type": "Unknown", "coordinates": [[0, 0], [1, 1]]},
            {"type": "Point", "coordinates": [25.0, 58.5]},
        ],
    )
    def test_unusable_geometry(self, geometry):
        svg = render_preview(geometry)

        assert PLACEHOLDER_TEXT in svg
        assert "<path" not in svg

    def test_placeholder_dimensions(self):
        svg = placeholder_svg(200, 100)
        assert 'width="200"' in svg
        assert 'height="100"' in svg


class TestRenderPreview:
    def test_linestring(self):
        geometry = {"type": "LineString", "coordinates": [[25.0, 58.0], [26.0, 59.0]]}

        svg = render_preview(geometry)

        assert svg.startswith("<?xml")
        assert svg.count("<path") == 1
        assert PLACEHOLDER_TEXT not in svg

    def test_one_path_per_line(self):
        geometry = {
            "type": "MultiLineString",
            "coordinates": [
                [[25.0, 58.0], [25.5, 58.5]],
                [[25.5, 58.5], [26.0, 58.2]],
            ],
        }

        assert render_preview(geometry).count("<path") == 2

    def test_geometry_collection(self):
        geometry = {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "LineString", "coordinates": [[25.0, 58.0], [25.5, 58.5]]},
                {"type": "Point", "coordinates": [25.0, 58.0]},
            ],
        }

        assert render_preview(geometry).count("<path") == 1

    def test_points_fit_inside_padding(self):
        geometry = {
            "type": "LineString",
            "coordinates": [[25.0, 58.0], [25.3, 58.9], [26.0, 58.4]],
        }

        points = path_points(render_preview(geometry, width=360, height=180))

        assert points
        for x, y in points:
            assert PADDING - 0.01 <= x <= 360 - PADDING + 0.01
            assert PADDING - 0.01 <= y <= 180 - PADDING + 0.01

    def test_north_is_up(self):
        geometry = {"type": "LineString", "coordinates": [[25.0, 58.0], [25.0, 59.0]]}

        (_, y_south), (_, y_north) = path_points(render_preview(geometry))

        assert y_north < y_south

    def test_uniform_scale_is_centred(self):
        """A horizontal line is centred vertically."""
        geometry = {"type": "LineString", "coordinates": [[0.0, 10.0], [10.0, 10.0]]}

        (x1, y1), (x2, y2) = path_points(render_preview(geometry, width=360, height=180))

        assert y1 == y2 == 90.0
        assert x1 == PADDING
        assert x2 == 360 - PADDING

    def test_custom_size(self):
        geometry = {"type": "LineString", "coordinates": [[25.0, 58.0], [26.0, 59.0]]}

        svg = render_preview(geometry, width=800, height=400)

        assert 'viewBox="0 0 800 400"' in svg
