"""Tests for feature measurements and number formatting."""

import pytest

from vectors.geometry import GeometryKind, LineString, MultiLineString, MultiPoint, Point, Polygon
from vectors.layer import Feature
from vectors.measure import FeatureInfo, format_number, measure

# One degree of longitude along the equator on the WGS84 ellipsoid
EQUATOR_DEGREE_M = 111319.49


@pytest.mark.unit
class TestFormatNumber:

    @pytest.mark.parametrize("value,expected", [
        (0, "0"),
        (0.5, "0,5"),
        (12.346, "12,35"),
        (0.125, "0,13"),
        (2.5, "2,5"),
        (1000, "1.000"),
        (1234567.891, "1.234.567,89"),
        (999.999, "1.000"),
    ])
    def test_format(self, value, expected):
        assert format_number(value) == expected


@pytest.mark.unit
class TestMeasure:

    def test_point_coordinates_rounded(self):
        info = measure(Feature("p", Point([1.23456, -7.65432])), "EPSG:3857")
        assert info.kind is GeometryKind.POINT
        assert (info.x, info.y) == (1.235, -7.654)
        assert info.length_m is None
        assert info.area_m2 is None

    def test_multipoint_uses_first_point(self):
        info = measure(Feature("mp", MultiPoint([[1.0, 2.0], [3.0, 4.0]])), "EPSG:3857")
        assert (info.x, info.y) == (1.0, 2.0)

    def test_line_length(self):
        info = measure(Feature("l", LineString([[0.0, 0.0], [1.0, 0.0]])), "EPSG:4326")
        assert info.length_m == pytest.approx(EQUATOR_DEGREE_M, rel=1e-4)
        assert info.length_km == pytest.approx(EQUATOR_DEGREE_M / 1000, rel=1e-4)

    def test_multiline_length_is_summed(self):
        multi = MultiLineString([[[0.0, 0.0], [1.0, 0.0]], [[10.0, 0.0], [12.0, 0.0]]])
        info = measure(Feature("ml", multi), "EPSG:4326")
        assert info.length_m == pytest.approx(3 * EQUATOR_DEGREE_M, rel=1e-4)

    def test_line_from_web_mercator(self):
        line = LineString([[0.0, 0.0], [1000.0, 0.0]])
        info = measure(Feature("l", line), "EPSG:3857")
        assert info.length_m == pytest.approx(1000.0, rel=1e-3)

    def test_polygon_area_minus_hole(self):
        outer = [[0.0, 0.0], [0.0, 2000.0], [2000.0, 2000.0], [2000.0, 0.0], [0.0, 0.0]]
        hole = [[500.0, 500.0], [500.0, 1500.0], [1500.0, 1500.0], [1500.0, 500.0], [500.0, 500.0]]
        info = measure(Feature("a", Polygon([outer, hole])), "EPSG:3857")
        assert info.area_m2 == pytest.approx(3_000_000, rel=0.01)
        assert info.area_ha == pytest.approx(300, rel=0.01)
        assert info.area_km2 == pytest.approx(3, rel=0.01)

    def test_empty_info_properties(self):
        info = FeatureInfo(kind=GeometryKind.POINT)
        assert info.length_km is None
        assert info.area_ha is None
