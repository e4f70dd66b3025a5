"""Export Layer to GeoJSON dict (RFC 7946 compliant).

GeoJSON is the in-memory form, so this is an identity mapping of ids,
geometries and properties. It is also the intermediate every other
exporter starts from.
"""

from __future__ import annotations

from vectors.layer import Feature, Layer
from vectors.style import style_to_dict


def export_geojson(layer: Layer, include_style: bool = False) -> dict:
    """Export a Layer to a GeoJSON FeatureCollection dict.

    Args:
        layer: The Layer to export.
        include_style: Add each feature's style as a ``style`` foreign member.

    Returns:
        Dict representing a valid GeoJSON FeatureCollection.
    """
    features = []
    for feature in layer.get_features():
        gj_feature = _feature_to_geojson(feature)
        if include_style and feature.style is not None:
            gj_feature["style"] = style_to_dict(feature.style)
        features.append(gj_feature)

    return {
        "type": "FeatureCollection",
        "features": features,
    }


def _feature_to_geojson(feature: Feature) -> dict:
    """Convert a Feature to a GeoJSON Feature dict."""
    return {
        "type": "Feature",
        "id": feature.feature_id,
        "geometry": feature.geometry.to_geojson(),
        "properties": dict(feature.properties),
    }
