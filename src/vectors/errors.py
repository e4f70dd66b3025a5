"""Exception hierarchy for the vector layer system.

User-facing conditions (too large, unsupported, empty layer) are reported
as warnings by the caller; the interaction session is never left half
transitioned when one of these is raised.
"""

from __future__ import annotations


class VectorsError(Exception):
    """Base class for all vector layer errors."""


class MalformedGeometryError(VectorsError, ValueError):
    """Coordinate nesting does not match the geometry kind."""


class UnsupportedFormatError(VectorsError, ValueError):
    """Unknown extension/format or content that could not be parsed."""


class UnknownGeometryKindError(VectorsError, ValueError):
    """Styling or conversion requested for an unrecognized geometry kind."""


class FileTooLargeError(VectorsError):
    """Input file exceeds the upload ceiling. Raised before any parse."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"File of {size} bytes exceeds the {limit} byte limit")
        self.size = size
        self.limit = limit


class EmptyLayerError(VectorsError):
    """Edit requested on a layer without features."""

    def __init__(self, layer_name: str) -> None:
        super().__init__(f"Layer has no features to edit: {layer_name}")
        self.layer_name = layer_name


class InvalidTransitionError(VectorsError):
    """Interaction event received in a mode that does not accept it."""
