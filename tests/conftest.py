"""Shared fakes: recording voices and an in-memory marker canvas."""

from __future__ import annotations

import pytest

from lanefall.noise import NoiseSource
from lanefall.voices import VoiceBank

HEADER = "user_played,instrument_name,velocity,pitch,start,end"


class RecordingVoice:
    """Voice stub that remembers every trigger."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, float, float]] = []

    def trigger_attack_release(self, note: str, duration: float, velocity: float) -> None:
        self.calls.append((note, duration, velocity))


class FakeCanvas:
    """MarkerCanvas stub tracking live markers and every call made on them."""

    def __init__(self) -> None:
        self.live: dict[int, dict] = {}
        self.created = 0
        self.removed: list[int] = []
        self.moves: dict[int, list[float]] = {}
        self._next = 0

    def create_marker(self, column: int, colour: str) -> int:
        self._next += 1
        self.created += 1
        self.live[self._next] = {"column": column, "colour": colour, "visible": False}
        self.moves[self._next] = []
        return self._next

    def move_marker(self, marker_id: int, y: float) -> None:
        self.moves[marker_id].append(y)

    def show_marker(self, marker_id: int) -> None:
        self.live[marker_id]["visible"] = True

    def hide_marker(self, marker_id: int) -> None:
        self.live[marker_id]["visible"] = False

    def remove_marker(self, marker_id: int) -> None:
        del self.live[marker_id]
        self.removed.append(marker_id)


@pytest.fixture
def piano() -> RecordingVoice:
    return RecordingVoice()


@pytest.fixture
def voices(piano: RecordingVoice) -> VoiceBank:
    return VoiceBank({"piano": piano})


@pytest.fixture
def noise() -> NoiseSource:
    return NoiseSource(seed=42)


@pytest.fixture
def canvas() -> FakeCanvas:
    return FakeCanvas()


def dataset(*rows: str) -> list[str]:
    return [HEADER, *rows]
