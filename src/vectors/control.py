"""VectorsControl: the entry point a map UI talks to.

Wires the layer registry, highlight layer, style and emphasis engines,
interaction state machine and format converter together. Layer-level
actions (toggle, zoom, download, delete) reset any running interaction
first, as clicking another layer action does in the panel.
"""

from __future__ import annotations

import asyncio
import os
from typing import Callable

from loguru import logger

from vectors.config import settings
from vectors.converter import ExportedFile, FormatConverter, check_size
from vectors.emphasis import EmphasisEngine
from vectors.errors import FileTooLargeError, UnsupportedFormatError
from vectors.geometry import Geometry, GeometryKind
from vectors.interaction import (
    InteractionHandles,
    InteractionStateMachine,
    Mode,
    _epoch_millis,
)
from vectors.layer import Feature, Layer
from vectors.manager import LayerManager
from vectors.measure import FeatureInfo, measure
from vectors.style import DashPreset, StyleEngine


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


class VectorsControl:
    """Facade over layers, interactions and conversions for one map."""

    def __init__(
        self,
        manager: LayerManager | None = None,
        handles: InteractionHandles | None = None,
        style: StyleEngine | None = None,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self.layers = manager or LayerManager()
        self.highlight = Layer(name=settings.highlight_layer_name, source_format="highlight")
        self.style = style or StyleEngine()
        self.emphasis = EmphasisEngine(self.highlight)
        self.interactions = InteractionStateMachine(self.style, self.emphasis, handles, clock)
        self.clock = clock
        self._pending_file: str | None = None

    @property
    def converter(self) -> FormatConverter:
        return self.layers.converter

    def _layer(self, name: str) -> Layer:
        layer = self.layers.get_layer(name)
        if layer is None:
            raise KeyError(f"Layer not found: {name}")
        return layer

    # -- layers -------------------------------------------------------------

    def add_new_layer(self, kind: str | GeometryKind) -> Layer:
        """Create an empty drawing layer for ``kind`` and start drawing on it."""
        kind = GeometryKind.parse(kind)
        stamp = self.clock()
        while self.layers.get_layer(f"temp_{stamp}") is not None:
            stamp += 1
        layer = Layer(name=f"temp_{stamp}", geometry_kind=kind)
        self.layers.add_layer(layer)
        self.interactions.start_draw(layer)
        return layer

    def rename_layer(self, name: str, legend: str) -> bool:
        return self.layers.set_legend(name, legend)

    def reorder_layers(self, names: list[str]) -> None:
        self.layers.reorder(names)

    def toggle_visibility(self, name: str) -> bool:
        self.reset()
        return self.layers.toggle_visibility(name)

    def zoom_to(self, name: str) -> tuple[float, float, float, float] | None:
        """Extent to fit the map to, or None for a layer without features."""
        self.reset()
        extent = self.layers.extent(name)
        if extent is None:
            logger.info(f"Layer {name} has no extent to zoom to")
        return extent

    def download(self, name: str, fmt: str) -> ExportedFile:
        self.reset()
        return self.layers.export_layer(name, fmt)

    def delete_layer(self, name: str) -> bool:
        self.reset()
        return self.layers.remove_layer(name)

    # -- interactions -------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.interactions.mode

    def start_draw(self, name: str) -> Mode:
        return self.interactions.start_draw(self._layer(name))

    def start_edit(self, name: str) -> Mode:
        return self.interactions.start_edit(self._layer(name))

    def reset(self) -> None:
        self.interactions.reset()

    def delete_active_feature(self) -> None:
        self.interactions.delete_active_feature()

    def on_feature_selected(self, feature_id: str) -> Feature:
        layer = self.interactions.active_layer
        feature = layer.get_feature(feature_id) if layer is not None else None
        if feature is None:
            raise KeyError(f"Feature not found: {feature_id}")
        return self.interactions.on_feature_selected(feature)

    def on_feature_created(self, geometry: Geometry, properties: dict | None = None) -> Feature:
        feature = Feature(feature_id="", geometry=geometry, properties=properties or {})
        return self.interactions.on_feature_created(feature)

    def on_feature_modified(self, geometry: Geometry | None = None) -> Feature:
        """Apply a modified geometry (if given) to the live feature and restyle it."""
        return self.interactions.on_feature_modified(geometry)

    def apply_style(self, color: str | None = None, thickness: float | None = None) -> None:
        self.interactions.apply_style(color=color, thickness=thickness)

    def select_dash(self, preset: DashPreset) -> DashPreset:
        return self.interactions.select_dash(preset)

    def feature_info(self) -> FeatureInfo | None:
        feature = self.interactions.active_feature
        if feature is None:
            return None
        return measure(feature, self.converter.map_crs)

    # -- file intake --------------------------------------------------------

    def change_file(self, path: str | None) -> Layer | None:
        """Select a file to load; a later call replaces the pending file.

        Returns:
            The new layer, or None when no file was given or the file holds
            no geometries.

        Raises:
            FileTooLargeError: The pending file is cleared.
            UnsupportedFormatError: Unknown extension or unparseable content.
        """
        self._pending_file = path
        if not path:
            return None
        self._check_pending_size(path)
        return self.load_layer()

    def load_layer(self) -> Layer | None:
        path = self._pending_file
        if not path:
            return None
        return self._load(_read_bytes(path), path)

    async def change_file_async(self, path: str) -> Layer | None:
        """Like change_file, reading the bytes off the event loop thread.

        If another file is selected while this one is being read, the result
        is discarded and None returned.
        """
        self._pending_file = path
        self._check_pending_size(path)
        loop = asyncio.get_event_loop()
        content = await loop.run_in_executor(None, _read_bytes, path)
        if self._pending_file != path:
            logger.info(f"Load of {path} superseded by {self._pending_file}")
            return None
        return self._load(content, path)

    def import_upload(self, content: bytes, filename: str) -> Layer | None:
        """Load an uploaded file's bytes into a new layer."""
        return self._load(content, filename)

    def _check_pending_size(self, path: str) -> None:
        try:
            check_size(os.path.getsize(path), self.converter.max_upload_bytes)
        except FileTooLargeError as e:
            self._pending_file = None
            logger.warning(f"File {path} rejected: {e}")
            raise

    def _load(self, content: bytes, filename: str) -> Layer | None:
        stem, ext = os.path.splitext(os.path.basename(filename))
        try:
            result = self.converter.import_bytes(content, ext, name=stem)
        except (FileTooLargeError, UnsupportedFormatError) as e:
            logger.warning(f"Could not load {filename}: {e}")
            raise
        if result.is_empty:
            return None
        return self.layers.add_result(result)
