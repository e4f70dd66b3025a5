"""Parse KML 2.2 XML to Layer using only xml.etree.ElementTree.

Handles Placemark/Point, Placemark/LineString, Placemark/Polygon and
Placemark/MultiGeometry. A MultiGeometry whose children share one type
becomes the matching Multi* kind; a mixed one yields one feature per child.
Extracts name, description, ExtendedData and inline styles.
KML coordinate format: "lng,lat[,alt] lng,lat[,alt]" (longitude first).
Coordinates are stored as [lng, lat] or [lng, lat, alt] (GeoJSON convention).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from vectors.config import settings
from vectors.errors import UnsupportedFormatError
from vectors.geometry import Geometry, GeometryKind, make_geometry
from vectors.layer import Feature, Layer
from vectors.style import LineStyle, PointStyle, PolygonStyle, Style

_SIMPLE_TAGS = ("Point", "LineString", "Polygon")

_MULTI_KINDS = {
    "Point": GeometryKind.MULTI_POINT,
    "LineString": GeometryKind.MULTI_LINE_STRING,
    "Polygon": GeometryKind.MULTI_POLYGON,
}


def parse_kml(kml_string: str) -> Layer:
    """Parse a KML XML string into a Layer.

    Args:
        kml_string: Raw KML XML content.

    Returns:
        Layer with parsed features.

    Raises:
        UnsupportedFormatError: If the content is not well-formed KML.
    """
    try:
        root = ET.fromstring(kml_string)
    except ET.ParseError as e:
        raise UnsupportedFormatError(f"Invalid KML: {e}") from e

    ns = _detect_namespace(root)
    if _local_name(root.tag) != "kml":
        raise UnsupportedFormatError(f"Not a KML document: root <{_local_name(root.tag)}>")

    doc_name = ""
    doc = _find_child(root, "Document", ns)
    if doc is not None:
        doc_name = _get_direct_text(doc, "name", ns)

    layer = Layer(name=doc_name, source_format="kml")
    for idx, pm in enumerate(root.iter(f"{ns}Placemark")):
        for feature in _parse_placemark(pm, ns, idx):
            layer.add_features(feature)
    return layer


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


def _detect_namespace(root: ET.Element) -> str:
    """Detect KML namespace from root element tag."""
    tag = root.tag
    if "{" in tag:
        return tag.split("}")[0] + "}"
    return ""


def _find_child(parent: ET.Element, tag: str, ns: str) -> ET.Element | None:
    """Find a direct or nested child element by tag."""
    return parent.find(f".//{ns}{tag}")


def _get_text(parent: ET.Element, tag: str, ns: str) -> str:
    """Get text content of a (possibly nested) child element."""
    elem = _find_child(parent, tag, ns)
    if elem is not None and elem.text:
        return elem.text.strip()
    return ""


def _get_direct_text(parent: ET.Element, tag: str, ns: str) -> str:
    elem = parent.find(f"{ns}{tag}")
    if elem is not None and elem.text:
        return elem.text.strip()
    return ""


def _parse_placemark(pm: ET.Element, ns: str, idx: int) -> list[Feature]:
    """Parse a single Placemark element into zero or more Features."""
    properties: dict = {}
    name = _get_direct_text(pm, "name", ns)
    if name:
        properties["name"] = name
    description = _get_direct_text(pm, "description", ns)
    if description:
        properties["description"] = description
    properties.update(_parse_extended_data(pm, ns))

    style_elem = _find_child(pm, "Style", ns)

    geometries = _parse_geometries(pm, ns)
    features = []
    for n, geometry in enumerate(geometries):
        feature_id = f"kml-{idx}" if len(geometries) == 1 else f"kml-{idx}-{n}"
        features.append(Feature(
            feature_id=feature_id,
            geometry=geometry,
            properties=dict(properties),
            style=_parse_style(style_elem, geometry.kind, ns),
        ))
    return features


def _parse_geometries(pm: ET.Element, ns: str) -> list[Geometry]:
    """Collect the geometries of a Placemark."""
    multi = _find_child(pm, "MultiGeometry", ns)
    if multi is None:
        for tag in _SIMPLE_TAGS:
            elem = _find_child(pm, tag, ns)
            if elem is not None:
                coords = _parse_simple(elem, tag, ns)
                return [make_geometry(tag, coords)] if coords else []
        return []

    parts: list[tuple[str, list]] = []
    for elem in multi.iter():
        tag = _local_name(elem.tag)
        if tag in _SIMPLE_TAGS:
            coords = _parse_simple(elem, tag, ns)
            if coords:
                parts.append((tag, coords))
    if not parts:
        return []

    tags = {tag for tag, _ in parts}
    if len(tags) == 1:
        kind = _MULTI_KINDS[tags.pop()]
        return [make_geometry(kind, [coords for _, coords in parts])]
    return [make_geometry(tag, coords) for tag, coords in parts]


def _parse_simple(elem: ET.Element, tag: str, ns: str) -> list:
    if tag == "Point":
        coords = _parse_coordinates_list(elem, ns)
        return coords[0] if coords else []
    if tag == "LineString":
        return _parse_coordinates_list(elem, ns)
    return _parse_polygon_rings(elem, ns)


def _parse_coordinate_string(coord_str: str) -> list[list[float]]:
    """Parse KML coordinate string: 'lng,lat[,alt] lng,lat[,alt] ...'"""
    coords = []
    for token in coord_str.strip().split():
        parts = token.strip().split(",")
        if len(parts) >= 2:
            try:
                coord = [float(parts[0]), float(parts[1])]
                if len(parts) >= 3 and parts[2]:
                    coord.append(float(parts[2]))
                coords.append(coord)
            except ValueError:
                continue
    return coords


def _parse_coordinates_list(geom_elem: ET.Element, ns: str) -> list[list[float]]:
    coord_elem = _find_child(geom_elem, "coordinates", ns)
    if coord_elem is None or not coord_elem.text:
        return []
    return _parse_coordinate_string(coord_elem.text)


def _parse_polygon_rings(polygon_elem: ET.Element, ns: str) -> list[list[list[float]]]:
    """Parse polygon rings (outer boundary + optional inner boundaries)."""
    rings = []

    outer = _find_child(polygon_elem, "outerBoundaryIs", ns)
    if outer is not None:
        coords = _parse_coordinates_list(outer, ns)
        if coords:
            rings.append(coords)

    for inner in polygon_elem.findall(f".//{ns}innerBoundaryIs"):
        coords = _parse_coordinates_list(inner, ns)
        if coords:
            rings.append(coords)

    return rings


def _parse_extended_data(pm: ET.Element, ns: str) -> dict:
    data: dict = {}
    ext = pm.find(f"{ns}ExtendedData")
    if ext is None:
        return data
    for item in ext.findall(f"{ns}Data"):
        key = item.get("name")
        if key:
            data[key] = _get_direct_text(item, "value", ns)
    return data


def rgb_from_kml(color: str) -> tuple[str, float] | None:
    """Convert KML "aabbggrr" to ("#rrggbb", opacity)."""
    color = color.strip().lstrip("#")
    if len(color) != 8:
        return None
    try:
        alpha = int(color[0:2], 16) / 255
    except ValueError:
        return None
    bb, gg, rr = color[2:4], color[4:6], color[6:8]
    return f"#{rr}{gg}{bb}".lower(), round(alpha, 2)


def _parse_style(style_elem: ET.Element | None, kind: GeometryKind, ns: str) -> Style | None:
    """Turn an inline KML Style into the style for ``kind``."""
    if style_elem is None:
        return None

    icon_elem = _find_child(style_elem, "IconStyle", ns)
    line_elem = _find_child(style_elem, "LineStyle", ns)
    poly_elem = _find_child(style_elem, "PolyStyle", ns)
    icon = rgb_from_kml(_get_text(icon_elem, "color", ns)) if icon_elem is not None else None
    line = rgb_from_kml(_get_text(line_elem, "color", ns)) if line_elem is not None else None
    fill = rgb_from_kml(_get_text(poly_elem, "color", ns)) if poly_elem is not None else None

    width = float(settings.default_thickness)
    if line_elem is not None:
        try:
            width = float(_get_text(line_elem, "width", ns))
        except ValueError:
            pass

    base = kind.base
    if base is GeometryKind.POINT and icon:
        return PointStyle(radius=settings.default_thickness, fill_color=icon[0])
    if base is GeometryKind.LINE_STRING and line:
        return LineStyle(color=line[0], width=width)
    if base is GeometryKind.POLYGON and (fill or line):
        fill_color, opacity = fill or (line[0], settings.polygon_fill_opacity)
        return PolygonStyle(
            fill_color=fill_color,
            fill_opacity=opacity,
            stroke_color=line[0] if line else fill_color,
            stroke_width=int(width),
        )
    return None
