"""Tests for the pre-export correction passes."""

import math

import pytest

from vectors.corrections import (
    decompose_multi_geometries,
    fix_kml_nan_elevation,
    split_multi_geometries,
)

NAN = math.nan


def _collection(*geometries):
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": f"f{i}", "geometry": g, "properties": {"name": f"n{i}"}}
            for i, g in enumerate(geometries)
        ],
    }


def _coords(collection, idx=0):
    return collection["features"][idx]["geometry"]["coordinates"]


@pytest.mark.unit
class TestFixKmlNanElevation:

    def test_point(self):
        fixed = fix_kml_nan_elevation(_collection({"type": "Point", "coordinates": [1.0, 2.0, NAN]}))
        assert _coords(fixed) == [1.0, 2.0]

    def test_point_with_real_elevation_untouched(self):
        fixed = fix_kml_nan_elevation(_collection({"type": "Point", "coordinates": [1.0, 2.0, 30.0]}))
        assert _coords(fixed) == [1.0, 2.0, 30.0]

    def test_line_first_vertex_decides_for_all(self):
        line = {"type": "LineString", "coordinates": [[0.0, 0.0, NAN], [1.0, 1.0, 5.0]]}
        fixed = fix_kml_nan_elevation(_collection(line))
        assert _coords(fixed) == [[0.0, 0.0], [1.0, 1.0]]

    def test_line_nan_after_first_vertex_survives(self):
        line = {"type": "LineString", "coordinates": [[0.0, 0.0, 5.0], [1.0, 1.0, NAN]]}
        fixed = fix_kml_nan_elevation(_collection(line))
        assert len(_coords(fixed)[1]) == 3

    def test_polygon_rings_decided_separately(self):
        polygon = {"type": "Polygon", "coordinates": [
            [[0.0, 0.0, NAN], [0.0, 1.0, NAN], [1.0, 0.0, NAN], [0.0, 0.0, NAN]],
            [[0.1, 0.1, 2.0], [0.2, 0.1, 2.0], [0.1, 0.2, 2.0], [0.1, 0.1, 2.0]],
        ]}
        fixed = fix_kml_nan_elevation(_collection(polygon))
        outer, hole = _coords(fixed)
        assert all(len(c) == 2 for c in outer)
        assert all(len(c) == 3 for c in hole)

    def test_multipolygon_first_ring_decides_for_part(self):
        multi = {"type": "MultiPolygon", "coordinates": [
            [
                [[0.0, 0.0, NAN], [0.0, 1.0, NAN], [1.0, 0.0, NAN], [0.0, 0.0, NAN]],
                [[0.1, 0.1, 3.0], [0.2, 0.1, 3.0], [0.1, 0.2, 3.0], [0.1, 0.1, 3.0]],
            ],
            [[[5.0, 5.0, 1.0], [5.0, 6.0, 1.0], [6.0, 5.0, 1.0], [5.0, 5.0, 1.0]]],
        ]}
        fixed = fix_kml_nan_elevation(_collection(multi))
        first, second = _coords(fixed)
        assert all(len(c) == 2 for ring in first for c in ring)
        assert all(len(c) == 3 for ring in second for c in ring)

    def test_multilinestring_untouched(self):
        multi = {"type": "MultiLineString", "coordinates": [[[0.0, 0.0, NAN], [1.0, 1.0, NAN]]]}
        fixed = fix_kml_nan_elevation(_collection(multi))
        assert len(_coords(fixed)[0][0]) == 3

    def test_two_value_coordinates_untouched(self):
        line = {"type": "LineString", "coordinates": [[0.0, 0.0], [1.0, 1.0, NAN]]}
        fixed = fix_kml_nan_elevation(_collection(line))
        assert _coords(fixed)[0] == [0.0, 0.0]
        assert len(_coords(fixed)[1]) == 3

    def test_input_not_modified(self):
        collection = _collection({"type": "Point", "coordinates": [1.0, 2.0, NAN]})
        fix_kml_nan_elevation(collection)
        assert len(_coords(collection)) == 3


@pytest.mark.unit
class TestDecompose:

    def test_split_assigns_part_ids(self):
        multi = {"type": "MultiPolygon", "coordinates": [
            [[[0, 0], [0, 1], [1, 1], [0, 0]]],
            [[[2, 2], [2, 3], [3, 3], [2, 2]]],
            [[[4, 4], [4, 5], [5, 5], [4, 4]]],
        ]}
        collection = _collection(multi)
        collection["features"][0]["id"] = "A"
        split = split_multi_geometries(collection)
        assert [f["id"] for f in split["features"]] == ["A0", "A1", "A2"]
        assert all(f["geometry"]["type"] == "Polygon" for f in split["features"])
        assert split["features"][2]["geometry"]["coordinates"] == [[[4, 4], [4, 5], [5, 5], [4, 4]]]

    def test_split_copies_properties(self):
        multi = {"type": "MultiPoint", "coordinates": [[0, 0], [1, 1]]}
        split = split_multi_geometries(_collection(multi))
        assert [f["properties"] for f in split["features"]] == [{"name": "n0"}, {"name": "n0"}]
        split["features"][0]["properties"]["name"] = "changed"
        assert split["features"][1]["properties"]["name"] == "n0"

    def test_simple_features_pass_through(self):
        line = {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}
        split = split_multi_geometries(_collection(line))
        assert split["features"][0]["id"] == "f0"
        assert split["features"][0]["geometry"] == line

    def test_decompose_drops_ids(self):
        collection = _collection(
            {"type": "Point", "coordinates": [0, 0]},
            {"type": "MultiLineString", "coordinates": [[[0, 0], [1, 1]], [[2, 2], [3, 3]]]},
        )
        result = decompose_multi_geometries(collection)
        assert len(result["features"]) == 3
        assert all("id" not in f for f in result["features"])
        assert collection["features"][0]["id"] == "f0"

    def test_multipoint_of_three(self):
        collection = _collection({"type": "MultiPoint", "coordinates": [[0, 0], [1, 1], [2, 2]]})
        collection["features"][0]["id"] = "A"
        assert [f["id"] for f in split_multi_geometries(collection)["features"]] == ["A0", "A1", "A2"]
        result = decompose_multi_geometries(collection)
        assert [f["geometry"]["type"] for f in result["features"]] == ["Point"] * 3
        assert not any("id" in f for f in result["features"])
