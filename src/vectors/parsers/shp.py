"""Parse a zipped Shapefile bundle to Layer using pyshp.

Every ``.shp`` in the archive is read together with its sibling ``.dbf``,
``.shx`` and ``.prj``; all groups are united into one layer. When a
``.prj`` is present, coordinates are reprojected from its CRS to WGS84.
"""

from __future__ import annotations

import io
import posixpath
import struct
import zipfile

import shapefile
from loguru import logger
from pyproj.exceptions import CRSError

from vectors.errors import MalformedGeometryError, UnsupportedFormatError
from vectors.geometry import geometry_from_geojson
from vectors.layer import Feature, Layer
from vectors.reproject import CoordinateReprojector, PyprojTransform


def parse_shapefile_zip(data: bytes) -> Layer:
    """Parse a zip archive of one or more shapefiles into a Layer.

    Raises:
        UnsupportedFormatError: If the archive is unreadable or holds no
            shapefile.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise UnsupportedFormatError(f"Invalid zip archive: {e}") from e

    with archive:
        members = {
            name.lower(): name for name in archive.namelist()
            if not name.startswith("__MACOSX/") and not name.endswith("/")
        }
        shp_names = sorted(name for name in members if name.endswith(".shp"))
        if not shp_names:
            raise UnsupportedFormatError("Zip archive contains no .shp file")

        reprojector = CoordinateReprojector(PyprojTransform("EPSG:4326"))
        layer = Layer(name="", source_format="shp")
        for shp_name in shp_names:
            stem = shp_name[:-4]

            def read(ext: str) -> bytes | None:
                member = members.get(f"{stem}.{ext}")
                return archive.read(member) if member else None

            group = posixpath.basename(members[shp_name])[:-4]
            for feature in _read_group(group, read, reprojector):
                layer.add_features(feature)
    return layer


def _read_group(group: str, read, reprojector: CoordinateReprojector) -> list[Feature]:
    shp_bytes, dbf_bytes, shx_bytes = read("shp"), read("dbf"), read("shx")
    prj_bytes = read("prj")
    source_crs = prj_bytes.decode("utf-8", errors="replace").strip() if prj_bytes else None

    files = {"shp": io.BytesIO(shp_bytes)}
    if dbf_bytes:
        files["dbf"] = io.BytesIO(dbf_bytes)
    if shx_bytes:
        files["shx"] = io.BytesIO(shx_bytes)

    try:
        reader = shapefile.Reader(**files)
        shapes = reader.shapes()
        records = reader.records() if dbf_bytes else [None] * len(shapes)
    except (shapefile.ShapefileException, struct.error) as e:
        raise UnsupportedFormatError(f"Unreadable shapefile {group}: {e}") from e

    features = []
    for idx, (shape, record) in enumerate(zip(shapes, records)):
        if shape.shapeType == shapefile.NULL:
            continue
        try:
            geometry = geometry_from_geojson(shape.__geo_interface__)
            if source_crs:
                geometry = reprojector.reproject_geometry(geometry, source_crs)
        except MalformedGeometryError as e:
            logger.warning(f"Skipping shape {idx} of {group}: {e}")
            continue
        except CRSError as e:
            raise UnsupportedFormatError(f"Unknown projection in {group}.prj: {e}") from e

        features.append(Feature(
            feature_id=f"{group}-{idx}",
            geometry=geometry,
            properties=_record_properties(record),
        ))
    return features


def _record_properties(record) -> dict:
    if record is None:
        return {}
    properties = {}
    for key, value in record.as_dict().items():
        if hasattr(value, "isoformat"):
            value = value.isoformat()
        elif isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        properties[key] = value
    return properties
