"""Load note datasets from CSV files, or convert them from MIDI files."""

from __future__ import annotations

import bisect
import logging
from collections.abc import Collection
from pathlib import Path

import mido

from lanefall.config import GM_PROGRAMS

logger = logging.getLogger(__name__)

CSV_HEADER = "user_played,instrument_name,velocity,pitch,start,end"
_PERCUSSION_CHANNEL = 9

# GM program family (program // 8) -> closest instrument name
_FAMILY_INSTRUMENTS = {
    0: "piano",
    4: "bass-electric",
    5: "violin",
    6: "violin",
    7: "trumpet",
    8: "saxophone",
    9: "flute",
}
_PROGRAM_INSTRUMENTS = {program: name for name, program in GM_PROGRAMS.items()}


class SongLoadError(Exception):
    """Raised when a song file cannot be read or converted."""


def instrument_for_program(program: int) -> str:
    """Map a General MIDI program number to one of the dataset instrument names."""
    if program in _PROGRAM_INSTRUMENTS:
        return _PROGRAM_INSTRUMENTS[program]
    return _FAMILY_INSTRUMENTS.get(program // 8, "piano")


def load_song_lines(file_path: str | Path, user_tracks: Collection[int] | None = None) -> list[str]:
    """Load a .csv dataset or a .mid/.midi file as dataset lines.

    Args:
        file_path: Path to the song.
        user_tracks: For MIDI files, indices of the tracks the player plays.
            Defaults to the first track with pitched notes.

    Raises:
        SongLoadError: If the file cannot be read or parsed.
    """
    path = Path(file_path)
    try:
        if path.suffix.lower() == ".csv":
            return load_lines(path)
        elif path.suffix.lower() in (".mid", ".midi"):
            return midi_to_lines(path, user_tracks)
        else:
            raise SongLoadError(f"Unsupported file format: {path.suffix}")
    except SongLoadError:
        raise
    except Exception as exc:
        raise SongLoadError(f"Failed to load {path.name}: {exc}") from exc


def load_lines(path: str | Path) -> list[str]:
    return Path(path).read_text(encoding="utf-8").splitlines()


def _tempo_map(mid: mido.MidiFile) -> list[tuple[int, int]]:
    """(absolute_tick, tempo) pairs from every track, sorted by tick."""
    changes: list[tuple[int, int]] = [(0, 500_000)]  # default 120 BPM
    for track in mid.tracks:
        tick = 0
        for msg in track:
            tick += msg.time
            if msg.type == "set_tempo":
                changes.append((tick, msg.tempo))
    changes.sort(key=lambda c: c[0])
    return changes


class _TickClock:
    """Converts absolute ticks to seconds across tempo changes."""

    def __init__(self, tempo_map: list[tuple[int, int]], ticks_per_beat: int) -> None:
        self._ticks = [tick for tick, _ in tempo_map]
        self._tempos = [tempo for _, tempo in tempo_map]
        self._ticks_per_beat = ticks_per_beat
        self._seconds = [0.0]
        for i in range(1, len(tempo_map)):
            delta = self._ticks[i] - self._ticks[i - 1]
            self._seconds.append(
                self._seconds[-1] + mido.tick2second(delta, ticks_per_beat, self._tempos[i - 1])
            )

    def seconds(self, tick: int) -> float:
        i = bisect.bisect_right(self._ticks, tick) - 1
        return self._seconds[i] + mido.tick2second(tick - self._ticks[i], self._ticks_per_beat, self._tempos[i])


def _is_pitched_note_on(msg: mido.Message) -> bool:
    return msg.type == "note_on" and msg.velocity > 0 and msg.channel != _PERCUSSION_CHANNEL


def first_note_track(mid: mido.MidiFile) -> int | None:
    """Index of the first track with pitched notes.

    Type 1 files usually open with a tempo-only conductor track.
    """
    for index, track in enumerate(mid.tracks):
        if any(_is_pitched_note_on(msg) for msg in track):
            return index
    return None


def midi_to_lines(path: str | Path, user_tracks: Collection[int] | None = None) -> list[str]:
    """Convert a Standard MIDI File into dataset lines (header first).

    Without ``user_tracks`` the first track holding pitched notes is the
    player's part.
    """
    mid = mido.MidiFile(str(path))
    if user_tracks is None:
        first = first_note_track(mid)
        user_tracks = () if first is None else (first,)
        logger.info("Playing MIDI track %s of %s", first, Path(path).name)
    clock = _TickClock(_tempo_map(mid), mid.ticks_per_beat)
    rows: list[tuple[float, int, str]] = []

    for track_idx, track in enumerate(mid.tracks):
        user_played = track_idx in user_tracks
        programs: dict[int, int] = {}
        pending: dict[tuple[int, int], tuple[int, int]] = {}  # (channel, pitch) -> (start_tick, velocity)
        tick = 0

        def close(key: tuple[int, int], end_tick: int) -> None:
            start_tick, velocity = pending.pop(key)
            channel, pitch = key
            instrument = instrument_for_program(programs.get(channel, 0))
            start = clock.seconds(start_tick)
            end = clock.seconds(end_tick)
            rows.append((start, pitch, f"{user_played},{instrument},{velocity},{pitch},{start:.6f},{end:.6f}"))

        for msg in track:
            tick += msg.time
            if msg.type == "program_change":
                programs[msg.channel] = msg.program
            elif msg.type == "note_on" and msg.velocity > 0:
                if msg.channel == _PERCUSSION_CHANNEL:
                    continue  # no pitched voice
                key = (msg.channel, msg.note)
                # Close any existing note on the same pitch (overlapping notes)
                if key in pending:
                    close(key, tick)
                pending[key] = (tick, msg.velocity)
            elif msg.type in ("note_off", "note_on"):
                key = (msg.channel, msg.note)
                if key in pending:
                    close(key, tick)

        for key in list(pending):
            close(key, tick)

    rows.sort(key=lambda r: (r[0], r[1]))
    if not any(row.startswith("True,") for _, _, row in rows):
        logger.warning("MIDI tracks %s of %s hold no notes to play", sorted(user_tracks), Path(path).name)
    return [CSV_HEADER] + [row for _, _, row in rows]
