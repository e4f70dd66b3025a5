"""Coordinate reprojection across nested geometry coordinate trees.

The reprojector only walks structure: it rebuilds the tree with the same
shape and hands every coordinate to a projection service. The per-coordinate
math lives in the service (pyproj by default).
"""

from __future__ import annotations

from typing import Protocol

from pyproj import CRS, Transformer

from vectors.geometry import Geometry, GeometryKind, make_geometry, normalize_coordinates


class ProjectionService(Protocol):
    """Transforms one coordinate from ``source_crs`` into the service's target CRS."""

    def transform_coordinate(self, source_crs: str, coord: list) -> list:
        ...


class PyprojTransform:
    """Projection service backed by pyproj, with a fixed target CRS.

    One Transformer is built per source CRS and reused. Values after x, y
    (elevation, sentinels) are carried through untouched.
    """

    def __init__(self, target_crs: str = "EPSG:4326") -> None:
        self.target_crs = target_crs
        self._target = CRS.from_user_input(target_crs)
        self._transformers: dict[str, Transformer | None] = {}

    def _transformer(self, source_crs: str) -> Transformer | None:
        if source_crs not in self._transformers:
            source = CRS.from_user_input(source_crs)
            if source == self._target:
                self._transformers[source_crs] = None
            else:
                self._transformers[source_crs] = Transformer.from_crs(
                    source, self._target, always_xy=True
                )
        return self._transformers[source_crs]

    def transform_coordinate(self, source_crs: str, coord: list) -> list:
        transformer = self._transformer(source_crs)
        if transformer is None:
            return list(coord)
        x, y = transformer.transform(coord[0], coord[1])
        return [x, y, *coord[2:]]


class CoordinateReprojector:
    """Rebuilds coordinate trees through a ProjectionService."""

    def __init__(self, service: ProjectionService) -> None:
        self.service = service

    def reproject(self, kind, coordinates, source_crs: str) -> list:
        """Reproject a coordinate tree of the given geometry kind.

        Args:
            kind: GeometryKind or GeoJSON type name.
            coordinates: Coordinate tree whose depth must match ``kind``.
            source_crs: CRS the coordinates are currently in.

        Returns:
            A new tree of identical shape with every coordinate transformed.

        Raises:
            MalformedGeometryError: If the nesting does not match ``kind``.
        """
        kind = GeometryKind.parse(kind)
        tree = normalize_coordinates(coordinates, kind.depth, kind.value)
        return self._walk(tree, kind.depth, source_crs)

    def reproject_geometry(self, geometry: Geometry, source_crs: str) -> Geometry:
        coords = self._walk(geometry.coordinates, geometry.kind.depth, source_crs)
        return make_geometry(geometry.kind, coords)

    def _walk(self, node: list, depth: int, source_crs: str) -> list:
        if depth == 0:
            return self.service.transform_coordinate(source_crs, node)
        return [self._walk(child, depth - 1, source_crs) for child in node]
