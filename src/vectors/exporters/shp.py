"""Export a WGS84 GeoJSON FeatureCollection to a zipped Shapefile bundle.

A Shapefile holds a single simple geometry type, so the collection must
already be decomposed (no Multi* kinds). Features are grouped into
``points``, ``lines`` and ``polygons`` shapefiles inside a folder named
after the layer. Written with pyshp.
"""

from __future__ import annotations

import io
import zipfile

import shapefile
from pyproj import CRS

from vectors.errors import UnsupportedFormatError

_GROUPS = {
    "Point": ("points", shapefile.POINT),
    "LineString": ("lines", shapefile.POLYLINE),
    "Polygon": ("polygons", shapefile.POLYGON),
}

# dBase limits
_FIELD_NAME_LEN = 10
_FIELD_SIZE = 254


def _field_names(features: list[dict]) -> dict[str, str]:
    """Map property keys to unique dBase field names."""
    names: dict[str, str] = {}
    used: set[str] = set()
    for feature in features:
        for key in (feature.get("properties") or {}):
            if key in names:
                continue
            base = str(key)[:_FIELD_NAME_LEN] or "field"
            candidate = base
            n = 1
            while candidate.lower() in used:
                suffix = str(n)
                candidate = base[:_FIELD_NAME_LEN - len(suffix)] + suffix
                n += 1
            used.add(candidate.lower())
            names[key] = candidate
    return names


def _record_value(value) -> str:
    if value is None:
        return ""
    return str(value)[:_FIELD_SIZE]


def _write_group(features: list[dict], shape_type: int) -> dict[str, bytes]:
    """Write one shapefile group and return its component files."""
    shp, shx, dbf = io.BytesIO(), io.BytesIO(), io.BytesIO()
    fields = _field_names(features)

    with shapefile.Writer(shp=shp, shx=shx, dbf=dbf, shapeType=shape_type) as writer:
        if fields:
            for field_name in fields.values():
                writer.field(field_name, "C", size=_FIELD_SIZE)
        else:
            writer.field("name", "C", size=_FIELD_SIZE)

        for feature in features:
            coords = feature["geometry"]["coordinates"]
            if shape_type == shapefile.POINT:
                writer.point(coords[0], coords[1])
            elif shape_type == shapefile.POLYLINE:
                writer.line([[c[:2] for c in coords]])
            else:
                writer.poly([[c[:2] for c in ring] for ring in coords])

            properties = feature.get("properties") or {}
            if fields:
                writer.record(*[_record_value(properties.get(k)) for k in fields])
            else:
                writer.record("")

    return {"shp": shp.getvalue(), "shx": shx.getvalue(), "dbf": dbf.getvalue()}


def export_shapefile(collection: dict, folder: str) -> bytes:
    """Bundle a decomposed FeatureCollection into a zip archive.

    Args:
        collection: FeatureCollection with only Point, LineString and
            Polygon features, in EPSG:4326.
        folder: Folder name inside the archive (the layer name).

    Returns:
        Zip archive bytes.

    Raises:
        UnsupportedFormatError: If a feature has a geometry type Shapefile
            cannot hold.
    """
    grouped: dict[str, list[dict]] = {}
    for feature in collection.get("features", []):
        kind = (feature.get("geometry") or {}).get("type")
        if kind not in _GROUPS:
            raise UnsupportedFormatError(f"Shapefile cannot hold geometry type: {kind}")
        grouped.setdefault(kind, []).append(feature)

    prj = CRS.from_epsg(4326).to_wkt(version="WKT1_ESRI")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for kind, features in grouped.items():
            group, shape_type = _GROUPS[kind]
            for ext, data in _write_group(features, shape_type).items():
                archive.writestr(f"{folder}/{group}.{ext}", data)
            archive.writestr(f"{folder}/{group}.prj", prj)
    return buffer.getvalue()
