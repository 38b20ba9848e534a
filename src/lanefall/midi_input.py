"""Input sources: computer keyboard lanes and an optional MIDI controller."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import pygame

from lanefall.config import DEFAULT_LANE_KEYS, NUM_COLUMNS

try:
    import rtmidi
    _HAS_RTMIDI = True
except ImportError:
    _HAS_RTMIDI = False

logger = logging.getLogger(__name__)


@dataclass
class LanePress:
    code: int  # raw key code, resolved to a lane by the InputMatcher
    timestamp_ms: int  # pygame.time.get_ticks() when the press arrived


class MidiDeviceError(Exception):
    """Raised when no MIDI device is found or connection fails."""


@runtime_checkable
class InputSource(Protocol):
    """Common interface for MIDI and keyboard input sources."""
    def poll(self) -> LanePress | None: ...
    def close(self) -> None: ...


def lane_key_codes(keys: Sequence[str] = DEFAULT_LANE_KEYS) -> list[int]:
    """pygame key constants for the lane letters, left to right."""
    return [ord(key.lower()) for key in keys]


class KeyboardInput:
    """Collects key presses from the pygame event stream."""

    def __init__(self, ignored: Sequence[int] = (pygame.K_ESCAPE,)) -> None:
        self._ignored = set(ignored)
        self._events: list[LanePress] = []

    def feed_event(self, event: pygame.event.Event) -> None:
        """Call from the game loop for each pygame event."""
        if event.type == pygame.KEYDOWN and event.key not in self._ignored:
            self._events.append(LanePress(code=event.key, timestamp_ms=pygame.time.get_ticks()))

    def poll(self) -> LanePress | None:
        if self._events:
            return self._events.pop(0)
        return None

    def close(self) -> None:
        self._events.clear()


class MidiInput:
    """Plays the lanes from a MIDI keyboard: a note-on presses lane ``pitch % 4``."""

    def __init__(self, lane_codes: Sequence[int], port_index: int | None = None) -> None:
        if not _HAS_RTMIDI:
            raise MidiDeviceError("python-rtmidi is not installed")
        if len(lane_codes) != NUM_COLUMNS:
            raise ValueError(f"expected {NUM_COLUMNS} lane codes, got {len(lane_codes)}")
        self.midi_in = rtmidi.MidiIn()
        self._lane_codes = list(lane_codes)
        self._port_index = port_index
        self._open = False

    def open(self) -> None:
        """Open the configured port, or the first one when none was given."""
        ports = self.midi_in.get_ports()
        index = self._port_index or 0
        if not 0 <= index < len(ports):
            raise MidiDeviceError(f"MIDI port {index} not available ({len(ports)} found)")
        self.midi_in.open_port(index)
        self._open = True
        logger.info("Lanes also follow MIDI port %s", ports[index])

    def poll(self) -> LanePress | None:
        """Non-blocking poll for the next note-on. Other messages are dropped."""
        if not self._open:
            return None
        while True:
            msg = self.midi_in.get_message()
            if msg is None:
                return None
            data, _delta = msg
            status = data[0] & 0xF0
            if status == 0x90 and len(data) > 2 and data[2] > 0:
                return LanePress(
                    code=self._lane_codes[data[1] % NUM_COLUMNS],
                    timestamp_ms=pygame.time.get_ticks(),
                )

    def close(self) -> None:
        if self._open:
            self.midi_in.close_port()
            self._open = False
