"""Tests for core data models."""

import pytest

from lanefall.config import COLUMN_COLOURS, PRE_ROLL_MS
from lanefall.models import InputEvent, NoteRecord, Outcome, ScheduledNote, Verdict, column_for_pitch


@pytest.mark.parametrize("pitch", range(128))
def test_column_is_pitch_mod_four(pitch):
    column = column_for_pitch(pitch)
    assert column == pitch % 4
    assert column in COLUMN_COLOURS


def test_same_pitch_class_shares_lane_and_colour():
    for pitch in range(124):
        assert column_for_pitch(pitch) == column_for_pitch(pitch + 4)
        assert COLUMN_COLOURS[column_for_pitch(pitch)] == COLUMN_COLOURS[column_for_pitch(pitch + 4)]


def test_scheduled_note_from_record():
    record = NoteRecord(user_played=True, instrument="piano", velocity=0.5, pitch=66, start=1.0, end=1.5)
    note = ScheduledNote.from_record(record)
    assert note.column == 2
    assert note.release_deadline == pytest.approx(0.984)
    assert note.duration == pytest.approx(0.5)
    assert note.expected_ms == pytest.approx(1000 + PRE_ROLL_MS)


def test_verdict_outcome():
    note = ScheduledNote.from_record(
        NoteRecord(user_played=True, instrument="piano", velocity=0.5, pitch=64, start=1.0, end=1.5)
    )
    event = InputEvent(column=0, time_ms=2950)
    assert Verdict(note, True, True, event).outcome == Outcome.HIT
    assert Verdict(note, True, False, event).outcome == Outcome.PENALTY
    assert Verdict(note, False, True, event).outcome == Outcome.PENALTY
    assert Verdict(note, True, True, event).offset_ms == pytest.approx(-50)


def test_unmapped_input_event():
    assert not InputEvent(column=None, time_ms=10).mapped
    assert InputEvent(column=3, time_ms=10).mapped
