"""LayerManager: registry of the map's vector layers.

Manages the lifecycle of Layer objects: add, remove, get, list, legend,
visibility and draw order, import from file and export to a format.
"""

from __future__ import annotations

import os

from loguru import logger

from vectors.config import settings
from vectors.converter import ExportedFile, FormatConverter, ImportResult, check_size
from vectors.layer import Layer

RESERVED_NAMES = ("selectLayer", "__draw__")


class LayerManager:
    """Registry of map layers."""

    def __init__(self, converter: FormatConverter | None = None) -> None:
        self._layers: dict[str, Layer] = {}
        self.converter = converter or FormatConverter()

    def add_layer(self, layer: Layer) -> str:
        """Add a layer to the registry, on top of the existing ones.

        Returns:
            The name of the added layer.
        """
        if self._layers and layer.z_index == 0:
            layer.z_index = max(l.z_index for l in self._layers.values()) + 1
        self._layers[layer.name] = layer
        return layer.name

    def remove_layer(self, name: str) -> bool:
        """Remove a layer from the registry.

        Returns:
            True if the layer was removed, False if it didn't exist.
        """
        if name in self._layers:
            del self._layers[name]
            return True
        return False

    def get_layer(self, name: str) -> Layer | None:
        return self._layers.get(name)

    def _require(self, name: str) -> Layer:
        layer = self._layers.get(name)
        if layer is None:
            raise KeyError(f"Layer not found: {name}")
        return layer

    def list_layers(self) -> list[Layer]:
        """All layers, topmost first."""
        return sorted(self._layers.values(), key=lambda l: l.z_index, reverse=True)

    def editable_layers(self) -> list[Layer]:
        """Layers the user can draw on, topmost first.

        The highlight layer and reserved layers are excluded, as are layers
        whose geometry class cannot be determined.
        """
        reserved = set(RESERVED_NAMES) | {settings.highlight_layer_name}
        return [
            layer for layer in self.list_layers()
            if layer.name not in reserved and layer.geometry_class() is not None
        ]

    def set_visibility(self, name: str, visible: bool) -> None:
        """Set the visibility of a layer.

        Raises:
            KeyError: If the layer is not found.
        """
        self._require(name).visible = visible

    def toggle_visibility(self, name: str) -> bool:
        layer = self._require(name)
        layer.visible = not layer.visible
        return layer.visible

    def set_legend(self, name: str, legend: str) -> bool:
        """Rename a layer's legend. Blank legends are ignored."""
        layer = self._require(name)
        legend = legend.strip()
        if not legend:
            return False
        layer.legend = legend
        return True

    def reorder(self, names: list[str]) -> None:
        """Restack layers: the first name goes on top, each next one below it."""
        layers = [self._require(n) for n in names]
        if not layers:
            return
        z = max(l.z_index for l in layers)
        for layer in layers:
            layer.z_index = z
            z -= 1

    def extent(self, name: str) -> tuple[float, float, float, float] | None:
        return self._require(name).extent()

    def import_file(self, path: str) -> Layer | None:
        """Import a file into a new layer named after the file.

        Returns:
            The new Layer (also registered), or None when the file holds no
            geometries.

        Raises:
            FileTooLargeError: Checked from the file size before reading.
            UnsupportedFormatError: Unknown extension or unparseable content.
        """
        check_size(os.path.getsize(path), self.converter.max_upload_bytes)

        stem, ext = os.path.splitext(os.path.basename(path))
        with open(path, "rb") as f:
            content = f.read()

        result = self.converter.import_bytes(content, ext, name=stem)
        if result.is_empty:
            return None
        return self.add_result(result)

    def add_result(self, result: ImportResult) -> Layer:
        """Register an ImportResult as a new layer."""
        name = result.name or "import"
        base, n = name, 1
        while name in self._layers:
            name = f"{base}_{n}"
            n += 1
        layer = Layer(name=name, source_format=result.source_format)
        layer.add_features(*result.features)
        self.add_layer(layer)
        logger.info(f"Layer {name} added with {len(result.features)} features")
        return layer

    def export_layer(self, name: str, fmt: str) -> ExportedFile:
        """Export a layer in the given format.

        Raises:
            KeyError: If the layer is not found.
            UnsupportedFormatError: If the format is not supported.
        """
        return self.converter.export_layer(self._require(name), fmt)
