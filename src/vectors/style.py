"""Feature styles derived from geometry kind and the current drawing parameters.

Points are drawn as circles (radius = thickness) with a white outline, lines
as strokes with an optional dash pattern, polygons as a translucent fill with
a stroke of the same colour.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from vectors.config import settings
from vectors.geometry import GeometryKind


class DashPreset(Enum):
    """Line dash presets. Values are stroke/gap lengths in pixels."""

    CONTINUOUS = None
    DOTTED = (1, 15)
    DASHED = (10, 15)
    DASH_DOT = (1, 15, 20, 15)

    @property
    def pattern(self) -> tuple[int, ...] | None:
        return self.value

    @classmethod
    def from_pattern(cls, pattern) -> DashPreset:
        """Classify an arbitrary dash pattern into the closest preset."""
        if not pattern:
            return cls.CONTINUOUS
        if len(pattern) > 2:
            return cls.DASH_DOT
        if pattern[0] > 2:
            return cls.DASHED
        if pattern[0] < 2:
            return cls.DOTTED
        return cls.CONTINUOUS


@dataclass(frozen=True)
class PointStyle:
    radius: float
    fill_color: str | None
    stroke_color: str = "white"
    stroke_width: int = 2


@dataclass(frozen=True)
class LineStyle:
    color: str
    width: float
    dash_pattern: tuple[int, ...] | None = None


@dataclass(frozen=True)
class PolygonStyle:
    fill_color: str
    stroke_color: str
    stroke_width: int
    fill_opacity: float = 0.2


Style = Union[PointStyle, LineStyle, PolygonStyle]


@dataclass(frozen=True)
class StyleParams:
    """Current drawing parameters picked by the user."""

    color: str
    thickness: float
    dash: DashPreset = DashPreset.CONTINUOUS


def _point_style(params: StyleParams) -> PointStyle:
    return PointStyle(radius=params.thickness, fill_color=params.color)


def _line_style(params: StyleParams) -> LineStyle:
    return LineStyle(
        color=params.color,
        width=params.thickness,
        dash_pattern=params.dash.pattern,
    )


def _polygon_style(params: StyleParams) -> PolygonStyle:
    return PolygonStyle(
        fill_color=params.color,
        fill_opacity=settings.polygon_fill_opacity,
        stroke_color=params.color,
        stroke_width=int(params.thickness),
    )


_BUILDERS = {
    GeometryKind.POINT: _point_style,
    GeometryKind.MULTI_POINT: _point_style,
    GeometryKind.LINE_STRING: _line_style,
    GeometryKind.MULTI_LINE_STRING: _line_style,
    GeometryKind.POLYGON: _polygon_style,
    GeometryKind.MULTI_POLYGON: _polygon_style,
}


class StyleEngine:
    """Holds the current style parameters and derives styles from them."""

    def __init__(self, params: StyleParams | None = None) -> None:
        self.params = params or StyleParams(
            color=settings.default_color,
            thickness=settings.default_thickness,
        )

    def derive_style(self, kind, params: StyleParams | None = None) -> Style:
        """Build the style for a geometry kind.

        Args:
            kind: GeometryKind or GeoJSON type name.
            params: Parameters to use instead of the current ones.

        Raises:
            UnknownGeometryKindError: If ``kind`` is not a geometry kind.
        """
        builder = _BUILDERS[GeometryKind.parse(kind)]
        return builder(params or self.params)

    def set_color(self, color: str) -> None:
        self.params = replace(self.params, color=color)

    def set_thickness(self, thickness: float) -> None:
        self.params = replace(self.params, thickness=thickness)

    def select_dash(self, preset: DashPreset) -> DashPreset:
        """Activate a dash preset; re-selecting the active one reverts to continuous.

        Returns:
            The preset now in effect.
        """
        if preset is DashPreset.CONTINUOUS or preset is self.params.dash:
            new = DashPreset.CONTINUOUS
        else:
            new = preset
        self.params = replace(self.params, dash=new)
        return new

    def adopt(self, style: Style | None) -> None:
        """Load an existing feature style into the current parameters."""
        if style is None:
            return
        if isinstance(style, PointStyle):
            self.params = replace(
                self.params,
                color=style.fill_color or self.params.color,
                thickness=style.radius or 6,
            )
        elif isinstance(style, LineStyle):
            self.params = StyleParams(
                color=style.color,
                thickness=style.width or 6,
                dash=DashPreset.from_pattern(style.dash_pattern),
            )
        elif isinstance(style, PolygonStyle):
            self.params = replace(
                self.params,
                color=style.fill_color,
                thickness=style.stroke_width or 6,
            )


def style_to_dict(style: Style | None) -> dict | None:
    """Flatten a style into the rendering-hint dict used on export."""
    if style is None:
        return None
    if isinstance(style, PointStyle):
        out = {"radius": style.radius, "strokeColor": style.stroke_color,
               "lineWidth": style.stroke_width}
        if style.fill_color:
            out["color"] = style.fill_color
        return out
    if isinstance(style, LineStyle):
        out = {"strokeColor": style.color, "lineWidth": style.width}
        if style.dash_pattern:
            out["lineDash"] = list(style.dash_pattern)
        return out
    return {
        "fillColor": style.fill_color,
        "opacity": style.fill_opacity,
        "strokeColor": style.stroke_color,
        "lineWidth": style.stroke_width,
    }
