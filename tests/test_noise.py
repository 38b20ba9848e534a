"""Tests for the deterministic noise source and penalty picks."""

import pytest

from lanefall.config import MIDI_NOTE_MAX, MIDI_NOTE_MIN
from lanefall.noise import NoiseSource, pick_penalty
from lanefall.voices import PlaybackError


def test_same_seed_same_sequence():
    assert NoiseSource(1234).take(50) == NoiseSource(1234).take(50)


def test_values_in_unit_interval():
    assert all(0.0 <= v < 1.0 for v in NoiseSource(99).take(500))


def test_recurrence():
    noise = NoiseSource(1)
    expected_seed = (1 * 67890 + 34086315) % 12345
    assert noise.next() == expected_seed / 12345


def test_penalty_ranges():
    noise = NoiseSource(7)
    instruments = ["piano", "violin", "flute"]
    for _ in range(200):
        penalty = pick_penalty(noise, instruments)
        assert penalty.instrument in instruments
        assert MIDI_NOTE_MIN <= penalty.pitch <= MIDI_NOTE_MAX
        assert 0.1 <= penalty.duration <= 0.5
        assert 0.5 <= penalty.velocity < 1.0


def test_penalty_uses_three_draws():
    reference = NoiseSource(5)
    first, second, third = reference.take(3)
    penalty = pick_penalty(NoiseSource(5), ["piano"])
    assert penalty.pitch == MIDI_NOTE_MIN + int(first * 88)
    assert penalty.duration == round(0.1 + second * 0.4, 2)
    assert penalty.velocity == pytest.approx(0.5 + third * 0.5)


def test_penalty_without_instruments():
    with pytest.raises(PlaybackError):
        pick_penalty(NoiseSource(5), [])
