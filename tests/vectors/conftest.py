"""Shared fixtures for vector layer tests."""

from __future__ import annotations

import pytest

from vectors.emphasis import EmphasisEngine
from vectors.geometry import LineString, Point, Polygon
from vectors.interaction import InteractionStateMachine
from vectors.layer import Feature, Layer
from vectors.style import StyleEngine


class RecordingHandles:
    """Interaction handles that record every call instead of touching a map."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def add_draw_interaction(self, layer: Layer) -> None:
        self.calls.append(("add_draw", layer.name))

    def remove_draw_interaction(self) -> None:
        self.calls.append(("remove_draw",))

    def activate_selection(self, layer: Layer) -> None:
        self.calls.append(("select", layer.name))

    def remove_edit_interaction(self) -> None:
        self.calls.append(("remove_edit",))

    def remove_select_interaction(self) -> None:
        self.calls.append(("remove_select",))

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FixedClock:
    """Millisecond clock that returns the same instant until advanced."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def handles():
    return RecordingHandles()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def machine(handles, clock):
    return InteractionStateMachine(StyleEngine(), EmphasisEngine(), handles, clock=clock)


@pytest.fixture
def road_layer():
    """Line layer with two features."""
    layer = Layer(name="roads")
    layer.add_features(
        Feature("r1", LineString([[0.0, 0.0], [10.0, 10.0]])),
        Feature("r2", LineString([[5.0, 5.0], [20.0, 0.0]])),
    )
    return layer


@pytest.fixture
def mixed_layer():
    layer = Layer(name="mixed")
    layer.add_features(
        Feature("p", Point([1.0, 2.0]), {"name": "HQ"}),
        Feature("l", LineString([[0.0, 0.0], [3.0, 4.0]])),
        Feature("a", Polygon([[[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0], [0.0, 0.0]]])),
    )
    return layer
