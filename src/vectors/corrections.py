"""Corrective passes applied to a WGS84 GeoJSON FeatureCollection before export.

Both passes work on GeoJSON dicts (the shared export intermediate) and
return new collections; the input is never modified.
"""

from __future__ import annotations

import copy
import math

_MULTI_TO_SIMPLE = {
    "MultiPoint": "Point",
    "MultiLineString": "LineString",
    "MultiPolygon": "Polygon",
}


def _trailing_nan(coord: list) -> bool:
    if len(coord) <= 2:
        return False
    last = coord[-1]
    return isinstance(last, float) and math.isnan(last)


def _strip_trailing(coords: list) -> None:
    """Drop the value after x, y from every coordinate (in place)."""
    for coord in coords:
        if len(coord) > 2:
            coord.pop()


def fix_kml_nan_elevation(collection: dict) -> dict:
    """Strip NaN elevations some drawing tools append, before KML serialization.

    One sample coordinate decides for a whole run of coordinates:

        Point         the coordinate itself
        LineString    first vertex, decides for the whole line
        Polygon       first vertex of each ring, decides for that ring
        MultiPolygon  first vertex of a part's first ring, decides for the part

    MultiPoint and MultiLineString are left alone. Coordinates after the
    sample are not inspected individually, so a NaN appearing only further
    along a line survives this pass.
    """
    fixed = copy.deepcopy(collection)
    for feature in fixed.get("features", []):
        geometry = feature.get("geometry") or {}
        kind = geometry.get("type")
        coords = geometry.get("coordinates")
        if not coords:
            continue

        if kind == "Point":
            if _trailing_nan(coords):
                coords.pop()
        elif kind == "LineString":
            if _trailing_nan(coords[0]):
                _strip_trailing(coords)
        elif kind == "Polygon":
            for ring in coords:
                if ring and _trailing_nan(ring[0]):
                    _strip_trailing(ring)
        elif kind == "MultiPolygon":
            for polygon in coords:
                if polygon and polygon[0] and _trailing_nan(polygon[0][0]):
                    for ring in polygon:
                        _strip_trailing(ring)
    return fixed


def split_multi_geometries(collection: dict) -> dict:
    """Split Multi* features into simple ones; part ``i`` of ``A`` gets id ``A{i}``."""
    features: list[dict] = []
    for original in collection.get("features", []):
        geometry = original.get("geometry") or {}
        simple_type = _MULTI_TO_SIMPLE.get(geometry.get("type"))
        if simple_type is None:
            features.append(copy.deepcopy(original))
            continue
        for idx, part in enumerate(geometry.get("coordinates") or []):
            features.append({
                "type": "Feature",
                "id": f"{original.get('id')}{idx}",
                "geometry": {"type": simple_type, "coordinates": copy.deepcopy(part)},
                "properties": dict(original.get("properties") or {}),
            })

    result = {k: v for k, v in collection.items() if k != "features"}
    result["features"] = features
    return result


def decompose_multi_geometries(collection: dict) -> dict:
    """Prepare a collection for Shapefile output.

    Multi* features are split (see ``split_multi_geometries``), then every
    feature loses its ``id`` key so it cannot clash with the attribute
    schema.
    """
    result = split_multi_geometries(collection)
    for feature in result["features"]:
        feature.pop("id", None)
    return result
