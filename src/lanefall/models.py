"""Core data models shared across the engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from lanefall.config import NUM_COLUMNS, PRE_ROLL_MS, TICK_RATE_MS


class Outcome(Enum):
    HIT = auto()
    PENALTY = auto()


def column_for_pitch(pitch: int) -> int:
    """Lane index for a MIDI pitch. Notes sharing ``pitch % 4`` share a lane."""
    return pitch % NUM_COLUMNS


@dataclass(frozen=True)
class NoteRecord:
    """A single parsed line of the note dataset."""

    user_played: bool
    instrument: str
    velocity: float  # 0.0-1.0
    pitch: int  # MIDI note number
    start: float  # seconds from song start
    end: float  # seconds from song start


@dataclass(frozen=True)
class ScheduledNote:
    """A NoteRecord annotated with its lane and release deadline."""

    user_played: bool
    instrument: str
    velocity: float
    pitch: int
    start: float
    end: float
    column: int
    release_deadline: float  # seconds

    @classmethod
    def from_record(cls, record: NoteRecord) -> ScheduledNote:
        return cls(
            user_played=record.user_played,
            instrument=record.instrument,
            velocity=record.velocity,
            pitch=record.pitch,
            start=record.start,
            end=record.end,
            column=column_for_pitch(record.pitch),
            release_deadline=record.start - TICK_RATE_MS / 1000.0,
        )

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def expected_ms(self) -> float:
        """Instant (ms after game start) at which the note should be played."""
        return self.start * 1000.0 + PRE_ROLL_MS


@dataclass(frozen=True)
class InputEvent:
    column: int | None  # None when the key is not bound to a lane
    time_ms: int  # ms after game start

    @property
    def mapped(self) -> bool:
        return self.column is not None


@dataclass(frozen=True)
class Verdict:
    note: ScheduledNote
    timing_ok: bool
    column_ok: bool
    input_event: InputEvent | None = None

    @property
    def correct(self) -> bool:
        return self.timing_ok and self.column_ok

    @property
    def outcome(self) -> Outcome:
        return Outcome.HIT if self.correct else Outcome.PENALTY

    @property
    def offset_ms(self) -> float | None:
        """Negative = early, positive = late."""
        if self.input_event is None:
            return None
        return self.input_event.time_ms - self.note.expected_ms


@dataclass(frozen=True)
class PenaltyNote:
    instrument: str
    pitch: int
    duration: float  # seconds
    velocity: float  # 0.0-1.0


@dataclass
class GameState:
    ended: bool = False
