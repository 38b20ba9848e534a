"""Tests for dataset loading and MIDI conversion."""

import mido
import pytest

from lanefall.song_loader import (
    CSV_HEADER,
    SongLoadError,
    instrument_for_program,
    load_song_lines,
    midi_to_lines,
)
from lanefall.timeline import build


def _write_midi(path, tempo=500_000):
    mid = mido.MidiFile(ticks_per_beat=480)
    melody = mido.MidiTrack()
    melody.append(mido.MetaMessage("set_tempo", tempo=tempo, time=0))
    melody.append(mido.Message("program_change", program=0, channel=0, time=0))
    melody.append(mido.Message("note_on", note=64, velocity=100, channel=0, time=480))
    melody.append(mido.Message("note_off", note=64, velocity=0, channel=0, time=240))
    mid.tracks.append(melody)

    backing = mido.MidiTrack()
    backing.append(mido.Message("program_change", program=41, channel=1, time=0))
    backing.append(mido.Message("note_on", note=48, velocity=80, channel=1, time=0))
    backing.append(mido.Message("note_on", note=48, velocity=0, channel=1, time=960))
    backing.append(mido.Message("note_on", note=36, velocity=90, channel=9, time=0))
    mid.tracks.append(backing)
    mid.save(str(path))


def test_csv_lines_round_through_builder(tmp_path):
    path = tmp_path / "song.csv"
    path.write_text(f"{CSV_HEADER}\nTrue,piano,64,64,1.0,1.5\n", encoding="utf-8")
    notes = build(load_song_lines(path))
    assert len(notes) == 1 and notes[0].user_played


def test_midi_conversion(tmp_path):
    path = tmp_path / "song.mid"
    _write_midi(path)
    lines = midi_to_lines(path, user_tracks={0})
    assert lines[0] == CSV_HEADER
    notes = build(lines)
    assert [(n.pitch, n.user_played, n.instrument) for n in notes] == [
        (48, False, "violin"),
        (64, True, "piano"),
    ]
    melody = notes[1]
    assert melody.start == pytest.approx(0.5)
    assert melody.end == pytest.approx(0.75)
    assert melody.velocity == pytest.approx(100 / 127)
    assert notes[0].end == pytest.approx(1.0)


def test_midi_tempo_changes_apply_to_all_tracks(tmp_path):
    path = tmp_path / "slow.mid"
    _write_midi(path, tempo=1_000_000)
    notes = build(midi_to_lines(path))
    assert notes[0].end == pytest.approx(2.0)
    assert notes[1].start == pytest.approx(1.0)


def test_instrument_for_program():
    assert instrument_for_program(0) == "piano"
    assert instrument_for_program(65) == "saxophone"
    assert instrument_for_program(34) == "bass-electric"
    assert instrument_for_program(120) == "piano"


def test_unsupported_format(tmp_path):
    path = tmp_path / "song.txt"
    path.write_text("x")
    with pytest.raises(SongLoadError):
        load_song_lines(path)


def test_missing_file(tmp_path):
    with pytest.raises(SongLoadError):
        load_song_lines(tmp_path / "nope.csv")


def _write_type1_midi(path):
    mid = mido.MidiFile(type=1, ticks_per_beat=480)
    conductor = mido.MidiTrack()
    conductor.append(mido.MetaMessage("set_tempo", tempo=500_000, time=0))
    mid.tracks.append(conductor)
    melody = mido.MidiTrack()
    melody.append(mido.Message("note_on", note=64, velocity=100, channel=0, time=0))
    melody.append(mido.Message("note_off", note=64, velocity=0, channel=0, time=480))
    mid.tracks.append(melody)
    mid.save(str(path))


def test_default_user_track_skips_conductor_track(tmp_path):
    path = tmp_path / "type1.mid"
    _write_type1_midi(path)
    notes = build(load_song_lines(path))
    assert [(n.pitch, n.user_played) for n in notes] == [(64, True)]


def test_user_tracks_without_notes_are_reported(tmp_path, caplog):
    path = tmp_path / "type1.mid"
    _write_type1_midi(path)
    notes = build(midi_to_lines(path, user_tracks={0}))
    assert not any(n.user_played for n in notes)
    assert "hold no notes to play" in caplog.text
