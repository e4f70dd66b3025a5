"""Interaction state machine for draw / edit / select modes.

Modes:
  IDLE -> DRAWING(layer)            start_draw
  IDLE -> EDITING(layer)            start_edit (layer must have features)
  EDITING -> SELECTING(layer, f)    on_feature_selected
  SELECTING -> EDITING | IDLE       delete_active_feature (IDLE if layer empty)
  any -> IDLE                       reset, or re-issuing the same start_* on
                                    the same layer

Entering a mode always force-exits the current one first: the active feature
and emphasis are cleared and every low-level interaction handle is released.
The session is owned by one machine instance; nothing here is global.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from loguru import logger

from vectors.emphasis import EmphasisEngine
from vectors.errors import EmptyLayerError, InvalidTransitionError
from vectors.geometry import Geometry, GeometryKind
from vectors.layer import Feature, Layer
from vectors.style import DashPreset, StyleEngine


class Mode(Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    EDITING = "editing"
    SELECTING = "selecting"


class InteractionHandles(Protocol):
    """Low-level draw/select/modify handlers owned by the host map."""

    def add_draw_interaction(self, layer: Layer) -> None: ...

    def remove_draw_interaction(self) -> None: ...

    def activate_selection(self, layer: Layer) -> None: ...

    def remove_edit_interaction(self) -> None: ...

    def remove_select_interaction(self) -> None: ...


class NullInteractionHandles:
    """Headless handles: no map attached, calls are only logged."""

    def add_draw_interaction(self, layer: Layer) -> None:
        logger.debug(f"Draw interaction added on {layer.name}")

    def remove_draw_interaction(self) -> None:
        logger.debug("Draw interaction removed")

    def activate_selection(self, layer: Layer) -> None:
        logger.debug(f"Selection activated on {layer.name}")

    def remove_edit_interaction(self) -> None:
        logger.debug("Edit interaction removed")

    def remove_select_interaction(self) -> None:
        logger.debug("Select interaction removed")


@dataclass
class InteractionSession:
    """Mutable record of the current interaction."""

    mode: Mode = Mode.IDLE
    active_layer: Layer | None = None
    active_feature: Feature | None = None
    geometry_kind: GeometryKind | None = None
    emphasis_feature: Feature | None = None

    def clear(self) -> None:
        self.mode = Mode.IDLE
        self.active_layer = None
        self.active_feature = None
        self.geometry_kind = None
        self.emphasis_feature = None

    def snapshot(self) -> dict:
        return {
            "mode": self.mode.value,
            "layer": self.active_layer.name if self.active_layer else None,
            "feature": self.active_feature.feature_id if self.active_feature else None,
            "geometry": self.geometry_kind.value if self.geometry_kind else None,
        }


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class InteractionStateMachine:
    """Owns the interaction session and mediates every mode transition."""

    def __init__(
        self,
        style: StyleEngine,
        emphasis: EmphasisEngine,
        handles: InteractionHandles | None = None,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self.style = style
        self.emphasis = emphasis
        self.handles = handles or NullInteractionHandles()
        self.clock = clock
        self.session = InteractionSession()

    # -- queries ------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.session.mode

    @property
    def active_layer(self) -> Layer | None:
        return self.session.active_layer

    @property
    def active_feature(self) -> Feature | None:
        return self.session.active_feature

    def _is_editing(self, layer: Layer | None = None) -> bool:
        if self.session.mode not in (Mode.EDITING, Mode.SELECTING):
            return False
        return layer is None or self.session.active_layer is layer

    # -- mode transitions ---------------------------------------------------

    def start_draw(self, layer: Layer) -> Mode:
        """Enter drawing on ``layer``; drawing on it again cancels back to idle."""
        if self.session.mode is Mode.DRAWING and self.session.active_layer is layer:
            self._exit()
            logger.info(f"Drawing on {layer.name} cancelled")
            return self.session.mode

        self._exit()
        self.session.mode = Mode.DRAWING
        self.session.active_layer = layer
        self.handles.add_draw_interaction(layer)
        logger.info(f"Drawing on {layer.name}")
        return self.session.mode

    def start_edit(self, layer: Layer) -> Mode:
        """Enter editing on ``layer``; editing it again cancels back to idle.

        Raises:
            EmptyLayerError: If ``layer`` has no features. The session is
                left untouched.
        """
        if self._is_editing(layer):
            self._exit()
            logger.info(f"Editing on {layer.name} finished")
            return self.session.mode

        if layer.is_empty():
            logger.warning(f"Layer {layer.name} has no features to edit")
            raise EmptyLayerError(layer.name)

        self._exit()
        self._enter_edit(layer)
        return self.session.mode

    def reset(self) -> None:
        """Return to idle from any mode, releasing every handle."""
        self._exit()

    # -- interaction events -------------------------------------------------

    def on_feature_selected(self, feature: Feature) -> Feature:
        """Make ``feature`` the live feature while editing."""
        if not self._is_editing():
            raise InvalidTransitionError(
                f"Feature selected while {self.session.mode.value}"
            )
        layer = self.session.active_layer
        if feature not in layer:
            raise InvalidTransitionError(
                f"Feature {feature.feature_id} is not in layer {layer.name}"
            )

        self.session.mode = Mode.SELECTING
        self._set_active(feature)
        self.style.adopt(feature.style)
        return feature

    def on_feature_created(self, feature: Feature) -> Feature:
        """Register a feature just drawn by the draw interaction."""
        if self.session.mode is not Mode.DRAWING:
            raise InvalidTransitionError(
                f"Feature created while {self.session.mode.value}"
            )
        layer = self.session.active_layer
        feature.feature_id = self._new_feature_id(layer)
        feature.style = self.style.derive_style(feature.kind)
        layer.add_features(feature)
        self._set_active(feature)
        logger.info(f"Feature {feature.feature_id} ({feature.kind.value}) added to {layer.name}")
        return feature

    def on_feature_modified(self, geometry: Geometry | None = None) -> Feature:
        """Re-apply the current style after the modify interaction changed a feature.

        ``geometry``, when given, replaces the selected feature's geometry.
        """
        feature = self.session.active_feature
        if self.session.mode is not Mode.SELECTING or feature is None:
            raise InvalidTransitionError(
                f"Feature modified while {self.session.mode.value}"
            )
        if geometry is not None:
            feature.geometry = geometry
        feature.style = self.style.derive_style(feature.kind)
        self._refresh_emphasis()
        return feature

    def apply_style(self, color: str | None = None, thickness: float | None = None) -> None:
        """Change the drawing colour/thickness and restyle the live feature."""
        if color is not None:
            self.style.set_color(color)
        if thickness is not None:
            self.style.set_thickness(thickness)
        self._restyle_active()

    def select_dash(self, preset: DashPreset) -> DashPreset:
        """Toggle a dash preset and restyle the live feature."""
        current = self.style.select_dash(preset)
        self._restyle_active()
        return current

    def delete_active_feature(self) -> None:
        """Remove the live feature from its layer.

        While editing, edit mode is re-entered on the same layer, or left
        for idle if the layer is now empty.
        """
        feature = self.session.active_feature
        layer = self.session.active_layer
        if feature is None or layer is None:
            raise InvalidTransitionError("No active feature to delete")

        layer.remove_features(feature)
        self.session.active_feature = None
        self.session.geometry_kind = None
        self._refresh_emphasis()
        logger.info(f"Feature {feature.feature_id} deleted from {layer.name}")

        if self._is_editing():
            self._exit()
            if layer.is_empty():
                logger.warning(f"Layer {layer.name} has no features left to edit")
            else:
                self._enter_edit(layer)

    # -- internals ----------------------------------------------------------

    def _enter_edit(self, layer: Layer) -> None:
        self.session.mode = Mode.EDITING
        self.session.active_layer = layer
        self.handles.activate_selection(layer)
        logger.info(f"Editing {layer.name}")

    def _exit(self) -> None:
        self.session.active_feature = None
        self.session.geometry_kind = None
        self._refresh_emphasis()
        self.handles.remove_draw_interaction()
        self.handles.remove_edit_interaction()
        self.handles.remove_select_interaction()
        self.session.clear()

    def _set_active(self, feature: Feature) -> None:
        self.session.active_feature = feature
        self.session.geometry_kind = feature.kind
        self._refresh_emphasis()

    def _refresh_emphasis(self) -> None:
        self.session.emphasis_feature = self.emphasis.compute(self.session.active_feature)

    def _restyle_active(self) -> None:
        feature = self.session.active_feature
        if feature is not None:
            feature.style = self.style.derive_style(feature.kind)

    def _new_feature_id(self, layer: Layer) -> str:
        stamp = self.clock()
        while f"{layer.name}.{stamp}" in layer.features:
            stamp += 1
        return f"{layer.name}.{stamp}"
