"""Feature and Layer dataclasses for the vector layer system.

Coordinates live in the map CRS (see ``settings.map_crs``) and follow the
GeoJSON axis order: [x, y] or [x, y, z].
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vectors.geometry import Geometry, GeometryKind
from vectors.style import Style


@dataclass
class Feature:
    """A single drawn or imported feature.

    Attributes:
        feature_id: Identifier, unique within the owning layer.
        geometry: One of the geometry variants.
        properties: Arbitrary key-value metadata, passed through on conversion.
        style: Optional style derived by the StyleEngine.
    """

    feature_id: str
    geometry: Geometry
    properties: dict = field(default_factory=dict)
    style: Style | None = None

    @property
    def kind(self) -> GeometryKind:
        return self.geometry.kind


@dataclass
class Layer:
    """A named, ordered collection of features.

    Attributes:
        name: Unique layer name (also the key in the LayerManager).
        legend: Display name; defaults to ``name``.
        geometry_kind: Declared kind for layers created empty for drawing.
        source_format: Where the features came from ("draw", "kml", ...).
        features: Features keyed by id, in insertion order.
        visible: Whether the layer is currently rendered.
        z_index: Draw order (higher = on top).
        metadata: Arbitrary key-value metadata about the layer.
    """

    name: str
    legend: str = ""
    geometry_kind: GeometryKind | None = None
    source_format: str = "draw"
    features: dict[str, Feature] = field(default_factory=dict)
    visible: bool = True
    z_index: int = 0
    metadata: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.legend:
            self.legend = self.name

    def add_features(self, *features: Feature) -> None:
        for feature in features:
            self.features[feature.feature_id] = feature

    def remove_features(self, *features: Feature) -> None:
        for feature in features:
            self.features.pop(feature.feature_id, None)

    def get_features(self) -> list[Feature]:
        return list(self.features.values())

    def get_feature(self, feature_id: str) -> Feature | None:
        return self.features.get(feature_id)

    def clear(self) -> None:
        self.features.clear()

    def is_empty(self) -> bool:
        return not self.features

    def __contains__(self, feature: Feature) -> bool:
        return self.features.get(feature.feature_id) is feature

    def extent(self) -> tuple[float, float, float, float] | None:
        """Union bounding box of all features, or None for an empty layer."""
        boxes = [f.geometry.extent() for f in self.features.values()]
        boxes = [b for b in boxes if b is not None]
        if not boxes:
            return None
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    def geometry_class(self) -> str | None:
        """Classify the layer as "point", "line" or "polygon"."""
        kind = self.geometry_kind
        if kind is None and self.features:
            kind = next(iter(self.features.values())).kind
        if kind is None:
            return None
        name = kind.value.lower()
        if "point" in name:
            return "point"
        if "polygon" in name:
            return "polygon"
        if "line" in name:
            return "line"
        return None
