"""FormatConverter: import and export pipelines for vector layers.

Export: map CRS -> EPSG:4326 reprojection, GeoJSON intermediate, then a
format-specific corrective pass and serializer.

    geojson  json.dumps, no correction
    kml      fix_kml_nan_elevation, then KML
    gpx      no correction
    shp      decompose_multi_geometries, then zipped Shapefile bundle

Import: size guard, extension dispatch, parse to WGS84 features, reproject
into the map CRS. Zero features is an empty result, not an error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger

from vectors.config import settings
from vectors.corrections import decompose_multi_geometries, fix_kml_nan_elevation
from vectors.errors import FileTooLargeError, UnsupportedFormatError
from vectors.exporters.geojson import export_geojson
from vectors.exporters.gpx import export_gpx
from vectors.exporters.kml import export_kml
from vectors.exporters.shp import export_shapefile
from vectors.layer import Feature, Layer
from vectors.parsers.geojson import parse_geojson
from vectors.parsers.gpx import parse_gpx
from vectors.parsers.kml import parse_kml
from vectors.parsers.shp import parse_shapefile_zip
from vectors.reproject import CoordinateReprojector, ProjectionService, PyprojTransform

EXPORT_FORMATS = ("geojson", "kml", "gpx", "shp")
IMPORT_EXTENSIONS = ("geojson", "kml", "gpx", "zip")

_TEXT_PARSERS = {
    "geojson": parse_geojson,
    "kml": parse_kml,
    "gpx": parse_gpx,
}


@dataclass
class ExportedFile:
    filename: str
    media_type: str
    content: bytes


@dataclass
class ImportResult:
    name: str
    source_format: str
    features: list[Feature] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.features


def normalize_extension(extension: str) -> str:
    return extension.strip().lstrip(".").lower()


def check_size(size: int, limit: int) -> None:
    """Raise FileTooLargeError when ``size`` exceeds ``limit`` bytes."""
    if size > limit:
        raise FileTooLargeError(size, limit)


class FormatConverter:
    """Converts layers to and from GeoJSON, KML, GPX and zipped Shapefile."""

    def __init__(
        self,
        map_crs: str | None = None,
        export_crs: str | None = None,
        max_upload_bytes: int | None = None,
        service_factory: Callable[[str], ProjectionService] = PyprojTransform,
    ) -> None:
        self.map_crs = map_crs or settings.map_crs
        self.export_crs = export_crs or settings.export_crs
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes
        self._to_export = CoordinateReprojector(service_factory(self.export_crs))
        self._to_map = CoordinateReprojector(service_factory(self.map_crs))

    # -- export -------------------------------------------------------------

    def to_geojson(self, layer: Layer, include_style: bool = False) -> dict:
        """Layer as a GeoJSON FeatureCollection reprojected to the export CRS."""
        projected = Layer(name=layer.name, legend=layer.legend)
        for feature in layer.get_features():
            projected.add_features(Feature(
                feature_id=feature.feature_id,
                geometry=self._to_export.reproject_geometry(feature.geometry, self.map_crs),
                properties=feature.properties,
                style=feature.style,
            ))
        return export_geojson(projected, include_style=include_style)

    def export_layer(self, layer: Layer, fmt: str) -> ExportedFile:
        """Serialize ``layer`` in one of the export formats.

        Raises:
            UnsupportedFormatError: If ``fmt`` is not geojson, kml, gpx or shp.
        """
        fmt = normalize_extension(fmt)
        if fmt not in EXPORT_FORMATS:
            raise UnsupportedFormatError(f"Unsupported export format: {fmt}")

        collection = self.to_geojson(layer, include_style=(fmt == "kml"))

        if fmt == "geojson":
            exported = ExportedFile(
                f"{layer.name}.geojson", "application/json",
                json.dumps(collection).encode("utf-8"),
            )
        elif fmt == "kml":
            kml = export_kml(fix_kml_nan_elevation(collection), name=layer.legend)
            exported = ExportedFile(
                f"{layer.name}.kml", "application/vnd.google-earth.kml+xml",
                kml.encode("utf-8"),
            )
        elif fmt == "gpx":
            exported = ExportedFile(
                f"{layer.name}.gpx", "application/gpx+xml",
                export_gpx(collection).encode("utf-8"),
            )
        else:
            bundle = export_shapefile(decompose_multi_geometries(collection), folder=layer.name)
            exported = ExportedFile(f"{layer.name}.zip", "application/zip", bundle)

        logger.info(
            f"Exported {len(collection['features'])} features of {layer.name} as {fmt}"
        )
        return exported

    # -- import -------------------------------------------------------------

    def import_bytes(self, content: bytes, extension: str, name: str = "") -> ImportResult:
        """Parse file content into features in the map CRS.

        Args:
            content: Raw file bytes.
            extension: File extension (".kml", "gpx", ...).
            name: Name for the result, usually the file stem.

        Raises:
            FileTooLargeError: If ``content`` exceeds the upload ceiling.
            UnsupportedFormatError: If the extension is unknown or the
                content cannot be parsed.
        """
        check_size(len(content), self.max_upload_bytes)

        ext = normalize_extension(extension)
        if ext not in IMPORT_EXTENSIONS:
            raise UnsupportedFormatError(f"Unsupported file extension: .{ext}")

        if ext == "zip":
            parsed = parse_shapefile_zip(content)
        else:
            try:
                text = content.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise UnsupportedFormatError(f"File is not UTF-8 text: {e}") from e
            parsed = _TEXT_PARSERS[ext](text)

        features = []
        for feature in parsed.get_features():
            feature.geometry = self._to_map.reproject_geometry(feature.geometry, self.export_crs)
            features.append(feature)

        result = ImportResult(
            name=name or parsed.name,
            source_format=parsed.source_format,
            features=features,
        )
        if result.is_empty:
            logger.info(f"No geometries found in {name or 'file'}.{ext}")
        else:
            logger.info(f"Imported {len(features)} features from {name or 'file'}.{ext}")
        return result
