"""Parse GeoJSON (RFC 7946) to Layer using stdlib json.

Handles FeatureCollection, Feature and bare geometry objects with any of the
six simple/multi geometry kinds. Passes through the properties dict.
Coordinates are already in [lng, lat] order.
"""

from __future__ import annotations

import json

from loguru import logger

from vectors.errors import MalformedGeometryError, UnsupportedFormatError
from vectors.geometry import GeometryKind, geometry_from_geojson
from vectors.layer import Feature, Layer

_GEOMETRY_TYPES = {kind.value for kind in GeometryKind}


def parse_geojson(geojson_string: str) -> Layer:
    """Parse a GeoJSON string into a Layer.

    Args:
        geojson_string: Raw GeoJSON content (string).

    Returns:
        Layer with parsed features. Features with unsupported or malformed
        geometries are skipped.

    Raises:
        UnsupportedFormatError: If the content is not a GeoJSON object.
    """
    try:
        data = json.loads(geojson_string)
    except (json.JSONDecodeError, TypeError) as e:
        raise UnsupportedFormatError(f"Invalid GeoJSON: {e}") from e
    if not isinstance(data, dict):
        raise UnsupportedFormatError("GeoJSON root must be an object")

    features: list[Feature] = []

    if data.get("type") == "FeatureCollection":
        raw_features = data.get("features", [])
        for idx, raw in enumerate(raw_features):
            feature = _parse_feature(raw, idx)
            if feature is not None:
                features.append(feature)
    elif data.get("type") == "Feature":
        feature = _parse_feature(data, 0)
        if feature is not None:
            features.append(feature)
    elif data.get("type") in _GEOMETRY_TYPES:
        feature = _parse_feature({"type": "Feature", "geometry": data}, 0)
        if feature is not None:
            features.append(feature)
    else:
        raise UnsupportedFormatError(f"Not a GeoJSON object: type={data.get('type')!r}")

    layer = Layer(name=data.get("name", "") or "", source_format="geojson")
    for idx, feature in enumerate(features):
        if feature.feature_id in layer.features:
            feature.feature_id = f"{feature.feature_id}-{idx}"
        layer.add_features(feature)
    return layer


def _parse_feature(raw: dict, idx: int) -> Feature | None:
    """Parse a single GeoJSON Feature dict into a Feature."""
    if not isinstance(raw, dict):
        return None

    geometry = raw.get("geometry")
    if not isinstance(geometry, dict) or geometry.get("type") not in _GEOMETRY_TYPES:
        return None

    try:
        geom = geometry_from_geojson(geometry)
    except MalformedGeometryError as e:
        logger.warning(f"Skipping GeoJSON feature {idx}: {e}")
        return None

    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}

    feature_id = raw.get("id", f"geojson-{idx}")
    if not isinstance(feature_id, str):
        feature_id = str(feature_id)

    return Feature(
        feature_id=feature_id,
        geometry=geom,
        properties=properties,
    )
