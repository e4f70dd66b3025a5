"""Vector layers for a web map: draw, edit, style, import and export.

Supports GeoJSON (RFC 7946), KML 2.2, GPX 1.1 and zipped ESRI Shapefiles.
Reprojection uses pyproj; Shapefiles are read and written with pyshp.
"""

from vectors.control import VectorsControl
from vectors.converter import ExportedFile, FormatConverter, ImportResult
from vectors.emphasis import EmphasisEngine
from vectors.geometry import Geometry, GeometryKind, make_geometry
from vectors.interaction import InteractionStateMachine, Mode
from vectors.layer import Feature, Layer
from vectors.manager import LayerManager
from vectors.style import DashPreset, StyleEngine

__all__ = [
    "DashPreset",
    "EmphasisEngine",
    "ExportedFile",
    "Feature",
    "FormatConverter",
    "Geometry",
    "GeometryKind",
    "ImportResult",
    "InteractionStateMachine",
    "Layer",
    "LayerManager",
    "Mode",
    "StyleEngine",
    "VectorsControl",
    "make_geometry",
]
