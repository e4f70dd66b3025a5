"""Export a WGS84 GeoJSON FeatureCollection to a KML 2.2 XML string.

Uses only xml.etree.ElementTree (stdlib).
KML coordinates are in "lng,lat[,alt]" order (longitude first).
Colours are written in KML's aabbggrr hex order.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

_SCALARS = (str, int, float, bool)


def export_kml(collection: dict, name: str = "") -> str:
    """Export a FeatureCollection dict to a KML XML string.

    Args:
        collection: GeoJSON FeatureCollection with WGS84 coordinates.
            Features may carry a ``style`` foreign member.
        name: Document name.

    Returns:
        KML XML string.
    """
    kml = ET.Element("kml")
    kml.set("xmlns", "http://www.opengis.net/kml/2.2")

    doc = ET.SubElement(kml, "Document")

    name_elem = ET.SubElement(doc, "name")
    name_elem.text = name

    for feature in collection.get("features", []):
        pm = ET.SubElement(doc, "Placemark")
        _write_placemark(pm, feature)

    return ET.tostring(kml, encoding="unicode", xml_declaration=True)


def _write_placemark(pm: ET.Element, feature: dict) -> None:
    """Write a GeoJSON feature as a KML Placemark element."""
    properties = feature.get("properties") or {}

    feat_name = properties.get("name", feature.get("id", ""))
    name_elem = ET.SubElement(pm, "name")
    name_elem.text = str(feat_name)

    desc = properties.get("description", "")
    if desc:
        desc_elem = ET.SubElement(pm, "description")
        desc_elem.text = str(desc)

    extra = {
        k: v for k, v in properties.items()
        if k not in ("name", "description") and isinstance(v, _SCALARS)
    }
    if extra:
        ext = ET.SubElement(pm, "ExtendedData")
        for key, value in extra.items():
            data = ET.SubElement(ext, "Data")
            data.set("name", key)
            value_elem = ET.SubElement(data, "value")
            value_elem.text = str(value)

    if feature.get("style"):
        _write_style(pm, feature["style"])

    _write_geometry(pm, feature.get("geometry") or {})


def kml_color(color: str | None, opacity: float = 1.0) -> str | None:
    """Convert "#rrggbb" to KML "aabbggrr"; None for anything else."""
    if not color or not color.startswith("#") or len(color) != 7:
        return None
    rr, gg, bb = color[1:3], color[3:5], color[5:7]
    alpha = max(0, min(255, round(opacity * 255)))
    return f"{alpha:02x}{bb}{gg}{rr}".lower()


def _write_style(pm: ET.Element, style: dict) -> None:
    """Write a Style element from a style dict."""
    style_elem = ET.SubElement(pm, "Style")

    icon_color = kml_color(style.get("color"))
    if icon_color:
        icon_style = ET.SubElement(style_elem, "IconStyle")
        color_elem = ET.SubElement(icon_style, "color")
        color_elem.text = icon_color

    stroke_color = kml_color(style.get("strokeColor"))
    if stroke_color or "lineWidth" in style:
        line_style = ET.SubElement(style_elem, "LineStyle")
        if stroke_color:
            color_elem = ET.SubElement(line_style, "color")
            color_elem.text = stroke_color
        if "lineWidth" in style:
            width_elem = ET.SubElement(line_style, "width")
            width_elem.text = str(style["lineWidth"])

    fill_color = kml_color(style.get("fillColor"), style.get("opacity", 1.0))
    if fill_color:
        poly_style = ET.SubElement(style_elem, "PolyStyle")
        color_elem = ET.SubElement(poly_style, "color")
        color_elem.text = fill_color


def _coords_to_string(coord: list) -> str:
    """Convert [lng, lat] or [lng, lat, alt] to 'lng,lat[,alt]'."""
    return ",".join(str(v) for v in coord)


def _write_geometry(parent: ET.Element, geometry: dict) -> None:
    kind = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if coordinates is None:
        return

    if kind == "Point":
        _write_point(parent, coordinates)
    elif kind == "LineString":
        _write_linestring(parent, coordinates)
    elif kind == "Polygon":
        _write_polygon(parent, coordinates)
    elif kind == "MultiPoint":
        multi = ET.SubElement(parent, "MultiGeometry")
        for point in coordinates:
            _write_point(multi, point)
    elif kind == "MultiLineString":
        multi = ET.SubElement(parent, "MultiGeometry")
        for line in coordinates:
            _write_linestring(multi, line)
    elif kind == "MultiPolygon":
        multi = ET.SubElement(parent, "MultiGeometry")
        for polygon in coordinates:
            _write_polygon(multi, polygon)


def _write_point(parent: ET.Element, coordinates: list) -> None:
    """Write a Point geometry element."""
    point = ET.SubElement(parent, "Point")
    coords_elem = ET.SubElement(point, "coordinates")
    coords_elem.text = _coords_to_string(coordinates)


def _write_linestring(parent: ET.Element, coordinates: list) -> None:
    """Write a LineString geometry element."""
    ls = ET.SubElement(parent, "LineString")
    coords_elem = ET.SubElement(ls, "coordinates")
    coords_elem.text = " ".join(_coords_to_string(c) for c in coordinates)


def _write_ring(parent: ET.Element, boundary: str, ring: list) -> None:
    elem = ET.SubElement(parent, boundary)
    linear_ring = ET.SubElement(elem, "LinearRing")
    coords_elem = ET.SubElement(linear_ring, "coordinates")
    coords_elem.text = " ".join(_coords_to_string(c) for c in ring)


def _write_polygon(parent: ET.Element, coordinates: list) -> None:
    """Write a Polygon geometry element."""
    polygon = ET.SubElement(parent, "Polygon")

    if coordinates:
        # First ring is outer boundary, the rest are holes
        _write_ring(polygon, "outerBoundaryIs", coordinates[0])
        for inner_ring in coordinates[1:]:
            _write_ring(polygon, "innerBoundaryIs", inner_ring)
