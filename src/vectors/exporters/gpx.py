"""Export a WGS84 GeoJSON FeatureCollection to a GPX 1.1 XML string.

Uses only xml.etree.ElementTree (stdlib).
GPX uses lat/lon attributes on elements (latitude first in attributes).
Internal coordinates are [lng, lat, alt] (GeoJSON convention), so they are
swapped on output.

    Point            -> <wpt>
    MultiPoint       -> one <wpt> per point
    LineString       -> <trk> with one <trkseg>
    MultiLineString  -> <trk> with one <trkseg> per line
    Polygon          -> <trk> with one <trkseg> per ring
    MultiPolygon     -> one <trk> per polygon
"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET


def export_gpx(collection: dict, creator: str = "vectors") -> str:
    """Export a FeatureCollection dict to a GPX 1.1 XML string."""
    gpx = ET.Element("gpx")
    gpx.set("version", "1.1")
    gpx.set("creator", creator)
    gpx.set("xmlns", "http://www.topografix.com/GPX/1/1")

    for feature in collection.get("features", []):
        geometry = feature.get("geometry") or {}
        kind = geometry.get("type")
        coords = geometry.get("coordinates")
        if coords is None:
            continue
        properties = feature.get("properties") or {}

        if kind == "Point":
            _write_waypoint(gpx, coords, properties)
        elif kind == "MultiPoint":
            for point in coords:
                _write_waypoint(gpx, point, properties)
        elif kind == "LineString":
            _write_track(gpx, [coords], properties)
        elif kind in ("MultiLineString", "Polygon"):
            _write_track(gpx, coords, properties)
        elif kind == "MultiPolygon":
            for polygon in coords:
                _write_track(gpx, polygon, properties)

    return ET.tostring(gpx, encoding="unicode", xml_declaration=True)


def _set_position(elem: ET.Element, coord: list) -> None:
    elem.set("lat", str(coord[1]))  # lat is index 1
    elem.set("lon", str(coord[0]))  # lng is index 0
    if len(coord) >= 3 and not math.isnan(coord[2]):
        ele = ET.SubElement(elem, "ele")
        ele.text = str(coord[2])


def _write_waypoint(parent: ET.Element, coord: list, properties: dict) -> None:
    """Write one coordinate as a <wpt> element."""
    if len(coord) < 2:
        return

    wpt = ET.SubElement(parent, "wpt")
    _set_position(wpt, coord)

    name = properties.get("name", "")
    if name:
        name_elem = ET.SubElement(wpt, "name")
        name_elem.text = str(name)

    desc = properties.get("description", "")
    if desc:
        desc_elem = ET.SubElement(wpt, "desc")
        desc_elem.text = str(desc)


def _write_track(parent: ET.Element, segments: list, properties: dict) -> None:
    """Write a list of coordinate runs as a <trk> with one <trkseg> each."""
    trk = ET.SubElement(parent, "trk")

    name = properties.get("name", "")
    if name:
        name_elem = ET.SubElement(trk, "name")
        name_elem.text = str(name)

    timestamps = properties.get("timestamps", [])

    for segment in segments:
        trkseg = ET.SubElement(trk, "trkseg")
        for i, coord in enumerate(segment):
            if len(coord) < 2:
                continue

            trkpt = ET.SubElement(trkseg, "trkpt")
            _set_position(trkpt, coord)

            if len(segments) == 1 and i < len(timestamps) and timestamps[i]:
                time_elem = ET.SubElement(trkpt, "time")
                time_elem.text = timestamps[i]
