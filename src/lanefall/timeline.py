"""Timeline builder: parse raw note lines into lane-assigned ScheduledNotes."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from lanefall.models import NoteRecord, ScheduledNote

logger = logging.getLogger(__name__)

FIELD_COUNT = 6


class ParseError(ValueError):
    """Raised when a dataset line cannot be turned into a NoteRecord."""

    def __init__(self, line_number: int, reason: str, text: str = "") -> None:
        self.line_number = line_number
        self.reason = reason
        self.text = text
        super().__init__(f"line {line_number}: {reason} ({text.strip()!r})")


@dataclass
class Timeline:
    notes: list[ScheduledNote] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)
    instruments: set[str] = field(default_factory=set)
    missing_instruments: list[str] = field(default_factory=list)

    @property
    def user_notes(self) -> list[ScheduledNote]:
        return [n for n in self.notes if n.user_played]

    @property
    def background_notes(self) -> list[ScheduledNote]:
        return [n for n in self.notes if not n.user_played]


def _parse_float(value: str, name: str, line_number: int, text: str) -> float:
    try:
        result = float(value)
    except ValueError:
        raise ParseError(line_number, f"{name} is not a number", text) from None
    if not math.isfinite(result):
        raise ParseError(line_number, f"{name} is not finite", text)
    return result


def _parse_int(value: str, name: str, line_number: int, text: str) -> int:
    try:
        return int(value)
    except ValueError:
        pass
    # Some exports write pitches as "64.0"
    number = _parse_float(value, name, line_number, text)
    if not number.is_integer():
        raise ParseError(line_number, f"{name} is not an integer", text)
    return int(number)


def parse_line(text: str, line_number: int) -> NoteRecord:
    """Parse one dataset line. ``line_number`` is 1-based and only used for errors."""
    fields = [f.strip() for f in text.split(",")]
    if len(fields) != FIELD_COUNT:
        raise ParseError(line_number, f"expected {FIELD_COUNT} fields, got {len(fields)}", text)

    user_played, instrument, velocity, pitch, start, end = fields
    if not instrument:
        raise ParseError(line_number, "instrument name is empty", text)

    raw_velocity = _parse_float(velocity, "velocity", line_number, text)
    start_s = _parse_float(start, "start", line_number, text)
    end_s = _parse_float(end, "end", line_number, text)
    if start_s < 0:
        raise ParseError(line_number, "start is negative", text)
    if end_s < start_s:
        raise ParseError(line_number, "end is before start", text)

    return NoteRecord(
        user_played=user_played == "True",
        instrument=instrument,
        velocity=max(0.0, min(1.0, raw_velocity / 127.0)),
        pitch=_parse_int(pitch, "pitch", line_number, text),
        start=start_s,
        end=end_s,
    )


def build_timeline(
    lines: Iterable[str],
    available_instruments: Iterable[str] | None = None,
) -> Timeline:
    """Build a Timeline, skipping (and collecting) malformed records.

    Args:
        lines: Dataset lines; the first one is a header and is ignored.
        available_instruments: Names of the loaded voices. When given, any
            instrument referenced by the dataset but missing here is logged
            once and listed in ``Timeline.missing_instruments``.
    """
    timeline = Timeline()

    for index, text in enumerate(lines):
        if index == 0 or not text.strip():
            continue
        try:
            record = parse_line(text, index + 1)
        except ParseError as exc:
            logger.warning("Skipping malformed note record: %s", exc)
            timeline.errors.append(exc)
            continue
        timeline.instruments.add(record.instrument)
        timeline.notes.append(ScheduledNote.from_record(record))

    timeline.notes.sort(key=lambda n: (n.start, n.pitch))

    if available_instruments is not None:
        available = set(available_instruments)
        timeline.missing_instruments = sorted(timeline.instruments - available)
        if timeline.missing_instruments:
            logger.warning(
                "No voice loaded for instruments %s; their notes will be silent",
                ", ".join(timeline.missing_instruments),
            )

    return timeline


def build(lines: Iterable[str]) -> list[ScheduledNote]:
    """Strict variant: the first malformed record raises ParseError."""
    timeline = build_timeline(lines)
    if timeline.errors:
        raise timeline.errors[0]
    return timeline.notes
