"""Tests for note naming and the voice bank."""

import pytest

from lanefall.voices import (
    PlaybackError,
    SilentVoice,
    Voice,
    VoiceBank,
    midi_to_frequency,
    midi_to_note_name,
    note_name_to_midi,
)

from conftest import RecordingVoice


def test_note_names():
    assert midi_to_note_name(60) == "C4"
    assert midi_to_note_name(64) == "E4"
    assert midi_to_note_name(21) == "A0"
    assert midi_to_note_name(61) == "C#4"


def test_note_name_round_trip_over_piano_range():
    for pitch in range(21, 109):
        assert note_name_to_midi(midi_to_note_name(pitch)) == pitch


def test_flats_and_bad_names():
    assert note_name_to_midi("Bb3") == 58
    assert note_name_to_midi("Cb4") == 59
    with pytest.raises(ValueError):
        note_name_to_midi("H2")


def test_frequency():
    assert midi_to_frequency(69) == pytest.approx(440.0)
    assert midi_to_frequency(64) == pytest.approx(329.628, rel=1e-4)


def test_bank_triggers_by_instrument():
    voice = RecordingVoice()
    bank = VoiceBank({"piano": voice})
    bank.trigger("piano", 64, 0.5, 0.8)
    assert voice.calls == [("E4", 0.5, 0.8)]
    assert bank.instruments == ["piano"]
    assert "piano" in bank and len(bank) == 1


def test_bank_missing_instrument():
    with pytest.raises(PlaybackError):
        VoiceBank().trigger("kazoo", 60, 0.5, 0.5)


def test_voice_protocol():
    assert isinstance(SilentVoice(), Voice)
    assert isinstance(RecordingVoice(), Voice)
