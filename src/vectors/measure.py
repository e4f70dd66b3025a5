"""Feature info shown for the selected feature: coordinates, length or area.

Lengths and areas are geodesic (WGS84 ellipsoid), computed after
reprojecting the feature to EPSG:4326.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from pyproj import Geod

from vectors.geometry import GeometryKind
from vectors.layer import Feature
from vectors.reproject import CoordinateReprojector, PyprojTransform

_GEOD = Geod(ellps="WGS84")


@dataclass
class FeatureInfo:
    kind: GeometryKind
    x: float | None = None
    y: float | None = None
    length_m: float | None = None
    area_m2: float | None = None

    @property
    def length_km(self) -> float | None:
        return None if self.length_m is None else self.length_m / 1000

    @property
    def area_ha(self) -> float | None:
        return None if self.area_m2 is None else self.area_m2 / 10_000

    @property
    def area_km2(self) -> float | None:
        return None if self.area_m2 is None else self.area_m2 / 1_000_000


def format_number(x: float) -> str:
    """Two decimals, comma decimal separator, dot thousands separator."""
    num = math.floor(x * 100 + 0.5) / 100
    whole, _, frac = str(num).partition(".")
    whole = re.sub(r"\B(?=(\d{3})+(?!\d))", ".", whole)
    if frac.strip("0"):
        return f"{whole},{frac}"
    return whole


def _line_length(line: list) -> float:
    lons = [c[0] for c in line]
    lats = [c[1] for c in line]
    if len(lons) < 2:
        return 0.0
    return _GEOD.line_length(lons, lats)


def _ring_area(ring: list) -> float:
    lons = [c[0] for c in ring]
    lats = [c[1] for c in ring]
    if len(lons) < 3:
        return 0.0
    area, _ = _GEOD.polygon_area_perimeter(lons, lats)
    return abs(area)


def _polygon_area(rings: list) -> float:
    if not rings:
        return 0.0
    outer = _ring_area(rings[0])
    holes = sum(_ring_area(r) for r in rings[1:])
    return max(outer - holes, 0.0)


def measure(
    feature: Feature,
    source_crs: str,
    reprojector: CoordinateReprojector | None = None,
) -> FeatureInfo:
    """Compute the info panel values for ``feature``.

    Args:
        feature: Feature whose coordinates are in ``source_crs``.
        source_crs: CRS of the feature coordinates (the map CRS).
        reprojector: Reprojector targeting EPSG:4326; a pyproj one by default.
    """
    kind = feature.kind
    info = FeatureInfo(kind=kind)

    if kind.base is GeometryKind.POINT:
        first = next(feature.geometry.iter_coordinates(), None)
        if first is not None:
            info.x = round(first[0], 3)
            info.y = round(first[1], 3)
        return info

    reprojector = reprojector or CoordinateReprojector(PyprojTransform("EPSG:4326"))
    wgs84 = reprojector.reproject_geometry(feature.geometry, source_crs)

    if kind is GeometryKind.LINE_STRING:
        info.length_m = _line_length(wgs84.coordinates)
    elif kind is GeometryKind.MULTI_LINE_STRING:
        info.length_m = sum(_line_length(line) for line in wgs84.coordinates)
    elif kind is GeometryKind.POLYGON:
        info.area_m2 = _polygon_area(wgs84.coordinates)
    elif kind is GeometryKind.MULTI_POLYGON:
        info.area_m2 = sum(_polygon_area(poly) for poly in wgs84.coordinates)
    return info
