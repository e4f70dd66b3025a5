"""Tests for the GeoJSON parser and exporter."""

import json

import pytest

from vectors.errors import UnsupportedFormatError
from vectors.exporters.geojson import export_geojson
from vectors.geometry import GeometryKind, Point
from vectors.layer import Feature, Layer
from vectors.parsers.geojson import parse_geojson
from vectors.style import LineStyle

SAMPLE = {
    "type": "FeatureCollection",
    "name": "sample",
    "features": [
        {"type": "Feature", "id": "hq", "geometry": {"type": "Point", "coordinates": [-122.4, 37.7]},
         "properties": {"name": "HQ"}},
        {"type": "Feature", "geometry": {"type": "MultiLineString",
                                         "coordinates": [[[0, 0], [1, 1]], [[2, 2], [3, 3]]]},
         "properties": None},
        {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[0, 0], [1, 1]]}},
        {"type": "Feature", "geometry": {"type": "GeometryCollection", "geometries": []}},
        {"type": "Feature", "id": 7, "geometry": {"type": "Point", "coordinates": [1, 2, 30]}},
    ],
}


@pytest.mark.unit
class TestParseGeoJSON:

    def test_feature_collection(self):
        layer = parse_geojson(json.dumps(SAMPLE))
        assert layer.name == "sample"
        assert layer.source_format == "geojson"
        assert list(layer.features) == ["hq", "geojson-1", "7"]

    def test_malformed_and_unsupported_geometries_skipped(self):
        layer = parse_geojson(json.dumps(SAMPLE))
        kinds = [f.kind for f in layer.get_features()]
        assert kinds == [GeometryKind.POINT, GeometryKind.MULTI_LINE_STRING, GeometryKind.POINT]

    def test_properties_and_elevation(self):
        layer = parse_geojson(json.dumps(SAMPLE))
        assert layer.get_feature("hq").properties == {"name": "HQ"}
        assert layer.get_feature("geojson-1").properties == {}
        assert layer.get_feature("7").geometry.coordinates == [1, 2, 30]

    def test_single_feature(self):
        layer = parse_geojson(json.dumps(SAMPLE["features"][0]))
        assert list(layer.features) == ["hq"]

    def test_bare_geometry(self):
        layer = parse_geojson(json.dumps({"type": "LineString", "coordinates": [[0, 0], [1, 1]]}))
        assert layer.get_feature("geojson-0").kind is GeometryKind.LINE_STRING

    def test_duplicate_ids(self):
        doc = {"type": "FeatureCollection", "features": [
            {"type": "Feature", "id": "a", "geometry": {"type": "Point", "coordinates": [0, 0]}},
            {"type": "Feature", "id": "a", "geometry": {"type": "Point", "coordinates": [1, 1]}},
        ]}
        assert list(parse_geojson(json.dumps(doc)).features) == ["a", "a-1"]

    def test_empty_collection(self):
        layer = parse_geojson('{"type": "FeatureCollection", "features": []}')
        assert layer.is_empty()

    @pytest.mark.parametrize("content", [
        "not json",
        "[1, 2, 3]",
        '{"type": "Topology"}',
    ])
    def test_invalid(self, content):
        with pytest.raises(UnsupportedFormatError):
            parse_geojson(content)


@pytest.mark.unit
class TestExportGeoJSON:

    def test_identity_mapping(self, mixed_layer):
        out = export_geojson(mixed_layer)
        assert out["type"] == "FeatureCollection"
        assert [f["id"] for f in out["features"]] == ["p", "l", "a"]
        assert out["features"][0]["geometry"] == {"type": "Point", "coordinates": [1.0, 2.0]}
        assert out["features"][0]["properties"] == {"name": "HQ"}
        assert "style" not in out["features"][0]

    def test_include_style(self, mixed_layer):
        mixed_layer.get_feature("l").style = LineStyle(color="#ff0000", width=2)
        out = export_geojson(mixed_layer, include_style=True)
        assert out["features"][1]["style"] == {"strokeColor": "#ff0000", "lineWidth": 2}
        assert "style" not in out["features"][0]

    def test_roundtrip(self, mixed_layer):
        layer = parse_geojson(json.dumps(export_geojson(mixed_layer)))
        assert list(layer.features) == ["p", "l", "a"]
        assert layer.get_feature("a").geometry.coordinates == \
            mixed_layer.get_feature("a").geometry.coordinates

    def test_empty_layer(self):
        assert export_geojson(Layer(name="e")) == {"type": "FeatureCollection", "features": []}

    def test_properties_are_copied(self):
        layer = Layer(name="x")
        layer.add_features(Feature("f", Point([0, 0]), {"k": 1}))
        out = export_geojson(layer)
        out["features"][0]["properties"]["k"] = 2
        assert layer.get_feature("f").properties["k"] == 1
