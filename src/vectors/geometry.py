"""Geometry variants: one class per GeoJSON geometry kind.

Each kind has a fixed coordinate nesting depth:

    Point                    [x, y]                       depth 0
    MultiPoint, LineString   [[x, y], ...]                depth 1
    MultiLineString, Polygon [[[x, y], ...], ...]         depth 2
    MultiPolygon             [[[[x, y], ...], ...], ...]  depth 3

A leaf is a coordinate of at least two numbers. A trailing value after
x, y (elevation, or a NaN sentinel some drawing tools append) is kept.
Construction validates and copies the coordinate tree, so a Geometry never
shares lists with its input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator

from vectors.errors import MalformedGeometryError, UnknownGeometryKindError


class GeometryKind(str, Enum):
    """GeoJSON geometry type names."""

    POINT = "Point"
    MULTI_POINT = "MultiPoint"
    LINE_STRING = "LineString"
    MULTI_LINE_STRING = "MultiLineString"
    POLYGON = "Polygon"
    MULTI_POLYGON = "MultiPolygon"

    @property
    def depth(self) -> int:
        return _DEPTHS[self]

    @property
    def is_multi(self) -> bool:
        return self in _BASE_KINDS

    @property
    def base(self) -> GeometryKind:
        """Simple kind of a multi kind; simple kinds return themselves."""
        return _BASE_KINDS.get(self, self)

    @classmethod
    def parse(cls, value: str | GeometryKind) -> GeometryKind:
        """Look up a kind by its GeoJSON name.

        Raises:
            UnknownGeometryKindError: If the name is not one of the six kinds.
        """
        try:
            return cls(value)
        except ValueError:
            raise UnknownGeometryKindError(f"Unknown geometry kind: {value!r}") from None


_DEPTHS = {
    GeometryKind.POINT: 0,
    GeometryKind.MULTI_POINT: 1,
    GeometryKind.LINE_STRING: 1,
    GeometryKind.MULTI_LINE_STRING: 2,
    GeometryKind.POLYGON: 2,
    GeometryKind.MULTI_POLYGON: 3,
}

_BASE_KINDS = {
    GeometryKind.MULTI_POINT: GeometryKind.POINT,
    GeometryKind.MULTI_LINE_STRING: GeometryKind.LINE_STRING,
    GeometryKind.MULTI_POLYGON: GeometryKind.POLYGON,
}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_coordinates(node, depth: int, kind: GeometryKind | str = "") -> list:
    """Validate a coordinate tree against a nesting depth and return a list copy.

    Raises:
        MalformedGeometryError: On a depth mismatch or a non-numeric leaf.
    """
    if not isinstance(node, (list, tuple)):
        raise MalformedGeometryError(
            f"{kind or 'Geometry'}: expected a list at depth {depth}, got {type(node).__name__}"
        )
    if depth == 0:
        if len(node) < 2 or not all(_is_number(v) for v in node):
            raise MalformedGeometryError(
                f"{kind or 'Geometry'}: coordinate must hold at least two numbers, got {node!r}"
            )
        return [v for v in node]
    return [normalize_coordinates(child, depth - 1, kind) for child in node]


def iter_leaves(node: list, depth: int) -> Iterator[list]:
    """Yield every coordinate of a tree of the given depth."""
    if depth == 0:
        yield node
        return
    for child in node:
        yield from iter_leaves(child, depth - 1)


@dataclass
class Geometry:
    """Base of the geometry variants. Use a concrete subclass."""

    coordinates: list

    kind: ClassVar[GeometryKind]

    def __post_init__(self) -> None:
        self.coordinates = normalize_coordinates(
            self.coordinates, self.kind.depth, self.kind.value
        )

    def iter_coordinates(self) -> Iterator[list]:
        return iter_leaves(self.coordinates, self.kind.depth)

    def extent(self) -> tuple[float, float, float, float] | None:
        """Bounding box (minx, miny, maxx, maxy), or None without coordinates."""
        xs: list[float] = []
        ys: list[float] = []
        for coord in self.iter_coordinates():
            xs.append(coord[0])
            ys.append(coord[1])
        if not xs:
            return None
        return (min(xs), min(ys), max(xs), max(ys))

    def copy(self) -> Geometry:
        return type(self)(self.coordinates)

    def to_geojson(self) -> dict:
        return {"type": self.kind.value, "coordinates": self.copy().coordinates}


class Point(Geometry):
    kind = GeometryKind.POINT


class MultiPoint(Geometry):
    kind = GeometryKind.MULTI_POINT


class LineString(Geometry):
    kind = GeometryKind.LINE_STRING


class MultiLineString(Geometry):
    kind = GeometryKind.MULTI_LINE_STRING


class Polygon(Geometry):
    kind = GeometryKind.POLYGON


class MultiPolygon(Geometry):
    kind = GeometryKind.MULTI_POLYGON


GEOMETRY_CLASSES: dict[GeometryKind, type[Geometry]] = {
    GeometryKind.POINT: Point,
    GeometryKind.MULTI_POINT: MultiPoint,
    GeometryKind.LINE_STRING: LineString,
    GeometryKind.MULTI_LINE_STRING: MultiLineString,
    GeometryKind.POLYGON: Polygon,
    GeometryKind.MULTI_POLYGON: MultiPolygon,
}


def make_geometry(kind: str | GeometryKind, coordinates) -> Geometry:
    """Build the variant for ``kind``.

    Raises:
        UnknownGeometryKindError: If ``kind`` is not a known kind.
        MalformedGeometryError: If ``coordinates`` do not fit the kind.
    """
    return GEOMETRY_CLASSES[GeometryKind.parse(kind)](coordinates)


def geometry_from_geojson(data: dict) -> Geometry:
    """Build a geometry from a GeoJSON geometry dict."""
    if not isinstance(data, dict):
        raise MalformedGeometryError(f"GeoJSON geometry must be an object, got {data!r}")
    if data.get("coordinates") is None:
        raise MalformedGeometryError(f"{data.get('type')}: missing coordinates")
    return make_geometry(data.get("type", ""), data["coordinates"])


def rectangle(extent: tuple[float, float, float, float]) -> Polygon:
    """Closed rectangular polygon covering ``extent``."""
    minx, miny, maxx, maxy = extent
    return Polygon([[
        [minx, miny], [maxx, miny], [maxx, maxy], [minx, maxy], [minx, miny],
    ]])
