"""Parse GPX 1.1 XML to Layer using xml.etree.ElementTree.

Handles wpt (waypoint), trk/trkseg/trkpt (track points), rte/rtept (route points).
Extracts name, desc, time, ele (elevation).

GPX uses lat/lon attributes on elements (latitude first).
Coordinates are stored as [lng, lat] or [lng, lat, ele] (GeoJSON convention);
elevation is only kept when the point has one.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from vectors.errors import UnsupportedFormatError
from vectors.geometry import GeometryKind, make_geometry
from vectors.layer import Feature, Layer


def parse_gpx(gpx_string: str) -> Layer:
    """Parse a GPX XML string into a Layer.

    Args:
        gpx_string: Raw GPX XML content.

    Returns:
        Layer with parsed features.

    Raises:
        UnsupportedFormatError: If the content is not well-formed GPX.
    """
    try:
        root = ET.fromstring(gpx_string)
    except ET.ParseError as e:
        raise UnsupportedFormatError(f"Invalid GPX: {e}") from e

    ns = _detect_namespace(root)
    if root.tag != f"{ns}gpx":
        raise UnsupportedFormatError(f"Not a GPX document: root <{root.tag}>")

    metadata = root.find(f"{ns}metadata")
    layer = Layer(
        name=_get_child_text(metadata if metadata is not None else root, "name", ns),
        source_format="gpx",
    )
    idx = 0

    for wpt in root.findall(f"{ns}wpt"):
        feature = _parse_waypoint(wpt, ns, idx)
        if feature is not None:
            layer.add_features(feature)
            idx += 1

    for trk in root.findall(f"{ns}trk"):
        feature = _parse_track(trk, ns, idx)
        if feature is not None:
            layer.add_features(feature)
            idx += 1

    for rte in root.findall(f"{ns}rte"):
        feature = _parse_route(rte, ns, idx)
        if feature is not None:
            layer.add_features(feature)
            idx += 1

    return layer


def _detect_namespace(root: ET.Element) -> str:
    """Detect GPX namespace from root tag."""
    tag = root.tag
    if "{" in tag:
        return tag.split("}")[0] + "}"
    return ""


def _get_child_text(parent: ET.Element, tag: str, ns: str) -> str:
    """Get text of a direct child element."""
    elem = parent.find(f"{ns}{tag}")
    if elem is not None and elem.text:
        return elem.text.strip()
    return ""


def _parse_lat_lon_ele(elem: ET.Element, ns: str) -> list[float]:
    """Extract [lng, lat] or [lng, lat, ele] from an element with lat/lon attributes."""
    try:
        lat = float(elem.get("lat"))
        lon = float(elem.get("lon"))
    except (ValueError, TypeError):
        return []

    coord = [lon, lat]
    ele_text = _get_child_text(elem, "ele", ns)
    if ele_text:
        try:
            coord.append(float(ele_text))
        except ValueError:
            pass
    return coord


def _describe(elem: ET.Element, ns: str) -> dict:
    properties: dict = {}
    name = _get_child_text(elem, "name", ns)
    if name:
        properties["name"] = name
    desc = _get_child_text(elem, "desc", ns)
    if desc:
        properties["description"] = desc
    return properties


def _parse_waypoint(wpt: ET.Element, ns: str, idx: int) -> Feature | None:
    """Parse a wpt element into a Point Feature."""
    coords = _parse_lat_lon_ele(wpt, ns)
    if not coords:
        return None

    properties = _describe(wpt, ns)
    time_str = _get_child_text(wpt, "time", ns)
    if time_str:
        properties["time"] = time_str

    return Feature(
        feature_id=f"gpx-wpt-{idx}",
        geometry=make_geometry(GeometryKind.POINT, coords),
        properties=properties,
    )


def _parse_track(trk: ET.Element, ns: str, idx: int) -> Feature | None:
    """Parse a trk element into a LineString, or a MultiLineString for several segments."""
    segments: list[list[list[float]]] = []
    timestamps: list[str] = []

    for seg in trk.findall(f"{ns}trkseg"):
        segment = []
        for trkpt in seg.findall(f"{ns}trkpt"):
            coord = _parse_lat_lon_ele(trkpt, ns)
            if coord:
                segment.append(coord)
                timestamps.append(_get_child_text(trkpt, "time", ns))
        if segment:
            segments.append(segment)

    if not segments:
        return None

    properties = _describe(trk, ns)
    if any(timestamps):
        properties["timestamps"] = timestamps

    if len(segments) == 1:
        geometry = make_geometry(GeometryKind.LINE_STRING, segments[0])
    else:
        geometry = make_geometry(GeometryKind.MULTI_LINE_STRING, segments)

    return Feature(
        feature_id=f"gpx-trk-{idx}",
        geometry=geometry,
        properties=properties,
    )


def _parse_route(rte: ET.Element, ns: str, idx: int) -> Feature | None:
    """Parse a rte element into a LineString Feature."""
    coordinates: list[list[float]] = []
    for rtept in rte.findall(f"{ns}rtept"):
        coord = _parse_lat_lon_ele(rtept, ns)
        if coord:
            coordinates.append(coord)

    if not coordinates:
        return None

    return Feature(
        feature_id=f"gpx-rte-{idx}",
        geometry=make_geometry(GeometryKind.LINE_STRING, coordinates),
        properties=_describe(rte, ns),
    )
