"""Deterministic noise source used to pick penalty notes."""

from __future__ import annotations

import math
import time
from collections.abc import Sequence

from lanefall.config import (
    LCG_INCREMENT,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    MIDI_NOTE_MAX,
    MIDI_NOTE_MIN,
    PENALTY_DURATION_SPAN,
    PENALTY_MIN_DURATION,
    PENALTY_MIN_VELOCITY,
    PENALTY_VELOCITY_SPAN,
)
from lanefall.models import PenaltyNote
from lanefall.voices import PlaybackError


class NoiseSource:
    """Linear congruential generator producing floats in [0, 1).

    The seed is the only state and is never exposed; the same initial seed
    always yields the same sequence.
    """

    def __init__(self, seed: int) -> None:
        self._seed = int(seed) % LCG_MODULUS

    @classmethod
    def from_clock(cls) -> NoiseSource:
        return cls(int(time.time() * 1000))

    def next(self) -> float:
        self._seed = (self._seed * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._seed / LCG_MODULUS

    def take(self, count: int) -> list[float]:
        return [self.next() for _ in range(count)]


def pick_penalty(noise: NoiseSource, instruments: Sequence[str]) -> PenaltyNote:
    """Draw a random audible note to play in place of a missed one.

    The first draw picks both the instrument and the pitch, so the two are
    correlated.
    """
    if not instruments:
        raise PlaybackError("no instruments available for a penalty note")

    value = noise.next()
    instrument = instruments[min(int(value * len(instruments)), len(instruments) - 1)]
    span = MIDI_NOTE_MAX - MIDI_NOTE_MIN + 1
    pitch = min(MIDI_NOTE_MIN + math.floor(value * span), MIDI_NOTE_MAX)

    duration = round(PENALTY_MIN_DURATION + noise.next() * PENALTY_DURATION_SPAN, 2)
    velocity = PENALTY_MIN_VELOCITY + noise.next() * PENALTY_VELOCITY_SPAN

    return PenaltyNote(
        instrument=instrument,
        pitch=pitch,
        duration=duration,
        velocity=velocity,
    )
