"""Tests for geometry variants and coordinate validation."""

import pytest

from vectors.errors import MalformedGeometryError, UnknownGeometryKindError
from vectors.geometry import (
    GeometryKind,
    LineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    geometry_from_geojson,
    make_geometry,
    normalize_coordinates,
    rectangle,
)


@pytest.mark.unit
class TestGeometryKind:

    @pytest.mark.parametrize("kind,depth", [
        (GeometryKind.POINT, 0),
        (GeometryKind.MULTI_POINT, 1),
        (GeometryKind.LINE_STRING, 1),
        (GeometryKind.MULTI_LINE_STRING, 2),
        (GeometryKind.POLYGON, 2),
        (GeometryKind.MULTI_POLYGON, 3),
    ])
    def test_depth(self, kind, depth):
        assert kind.depth == depth

    def test_base_of_multi_kinds(self):
        assert GeometryKind.MULTI_POLYGON.base is GeometryKind.POLYGON
        assert GeometryKind.MULTI_POINT.is_multi
        assert GeometryKind.LINE_STRING.base is GeometryKind.LINE_STRING
        assert not GeometryKind.LINE_STRING.is_multi

    def test_parse_name(self):
        assert GeometryKind.parse("MultiLineString") is GeometryKind.MULTI_LINE_STRING

    def test_parse_unknown_raises(self):
        with pytest.raises(UnknownGeometryKindError):
            GeometryKind.parse("Circle")


@pytest.mark.unit
class TestNormalizeCoordinates:

    def test_returns_list_copy(self):
        src = ((1, 2), (3, 4))
        out = normalize_coordinates(src, 1)
        assert out == [[1, 2], [3, 4]]
        assert isinstance(out[0], list)

    def test_depth_mismatch(self):
        with pytest.raises(MalformedGeometryError):
            normalize_coordinates([1.0, 2.0], 1)

    def test_single_number_leaf(self):
        with pytest.raises(MalformedGeometryError):
            normalize_coordinates([[1.0]], 1)

    def test_bool_is_not_a_number(self):
        with pytest.raises(MalformedGeometryError):
            normalize_coordinates([True, 2.0], 0)

    def test_keeps_trailing_values(self):
        assert normalize_coordinates([1.0, 2.0, 30.5], 0) == [1.0, 2.0, 30.5]


@pytest.mark.unit
class TestGeometry:

    def test_construction_copies_input(self):
        coords = [[0.0, 0.0], [1.0, 1.0]]
        line = LineString(coords)
        coords[0][0] = 99.0
        assert line.coordinates[0][0] == 0.0

    def test_malformed_polygon_rejected(self):
        with pytest.raises(MalformedGeometryError):
            Polygon([[0.0, 0.0], [1.0, 1.0]])

    def test_extent(self):
        poly = MultiPolygon([
            [[[0, 0], [0, 2], [2, 2], [0, 0]]],
            [[[5, -1], [6, -1], [6, 3], [5, -1]]],
        ])
        assert poly.extent() == (0, -1, 6, 3)

    def test_extent_of_empty_multi(self):
        assert MultiPoint([]).extent() is None

    def test_to_geojson(self):
        assert Point([1.5, 2.5]).to_geojson() == {"type": "Point", "coordinates": [1.5, 2.5]}


@pytest.mark.unit
class TestFactories:

    def test_make_geometry(self):
        geom = make_geometry("MultiPoint", [[0, 0], [1, 1]])
        assert isinstance(geom, MultiPoint)
        assert geom.kind is GeometryKind.MULTI_POINT

    def test_make_geometry_unknown_kind(self):
        with pytest.raises(UnknownGeometryKindError):
            make_geometry("GeometryCollection", [])

    def test_from_geojson_missing_coordinates(self):
        with pytest.raises(MalformedGeometryError):
            geometry_from_geojson({"type": "Point"})

    def test_rectangle_is_closed(self):
        ring = rectangle((0, 0, 2, 1)).coordinates[0]
        assert len(ring) == 5
        assert ring[0] == ring[-1] == [0, 0]
        assert [2, 1] in ring
