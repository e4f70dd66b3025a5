"""Highlight artifact drawn around the currently selected feature.

The highlight layer holds at most one feature. Points get an enlarged red
ring; every other kind gets a red rectangle around its extent.
"""

from __future__ import annotations

from vectors.config import settings
from vectors.geometry import GeometryKind, rectangle
from vectors.layer import Feature, Layer
from vectors.style import LineStyle, PointStyle

EMPHASIS_ID = "emphasis"


class EmphasisEngine:
    """Maintains the single emphasis artifact in a highlight layer."""

    def __init__(self, highlight_layer: Layer | None = None) -> None:
        self.layer = highlight_layer or Layer(name=settings.highlight_layer_name)

    @property
    def current(self) -> Feature | None:
        return self.layer.get_feature(EMPHASIS_ID)

    def clear(self) -> None:
        self.layer.clear()

    def compute(self, feature: Feature | None) -> Feature | None:
        """Replace the emphasis artifact with one for ``feature``.

        Returns:
            The new artifact, or None when ``feature`` is None or has no
            coordinates.
        """
        self.clear()
        if feature is None:
            return None

        if feature.kind.base is GeometryKind.POINT:
            emphasis = Feature(
                feature_id=EMPHASIS_ID,
                geometry=feature.geometry.copy(),
                style=PointStyle(
                    radius=settings.emphasis_point_radius,
                    fill_color=None,
                    stroke_color=settings.emphasis_color,
                    stroke_width=settings.emphasis_stroke_width,
                ),
            )
        else:
            extent = feature.geometry.extent()
            if extent is None:
                return None
            emphasis = Feature(
                feature_id=EMPHASIS_ID,
                geometry=rectangle(extent),
                style=LineStyle(
                    color=settings.emphasis_color,
                    width=settings.emphasis_stroke_width,
                ),
            )

        self.layer.add_features(emphasis)
        return emphasis
