"""Input matching: turn key presses into verdicts against user-played notes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping

from lanefall.config import DEBOUNCE_MS, DEFAULT_LANE_KEYS, TIMING_MARGIN_MS
from lanefall.event_queue import ScheduledEvent
from lanefall.models import InputEvent, ScheduledNote, Verdict
from lanefall.scheduler import EventScheduler

logger = logging.getLogger(__name__)


def lane_key_map(keys: Iterable[str] = DEFAULT_LANE_KEYS) -> dict[int, int]:
    """Map key codes to lanes, left to right.

    Letter keys use their lowercase code point, which is also the pygame key
    constant (``pygame.K_h == ord("h")``).
    """
    return {ord(key.lower()): column for column, key in enumerate(keys)}


def evaluate_input(
    note: ScheduledNote,
    event: InputEvent,
    expected_ms: float,
    margin_ms: float = TIMING_MARGIN_MS,
) -> Verdict:
    """Grade a single key press against a note's expected instant."""
    return Verdict(
        note=note,
        timing_ok=abs(event.time_ms - expected_ms) <= margin_ms,
        column_ok=event.column == note.column,
        input_event=event,
    )


class InputMatcher:
    """Debounces key presses and pairs each with the next unresolved user note.

    Key events arriving less than ``debounce_ms`` apart collapse into the last
    one of the burst. The surviving press is paired with the earliest user note
    that has not been hit and whose timing window is still open. Within a
    chord, the note in the pressed lane wins. Once every window is behind the
    press it is paired with the most recent note instead, which can only yield
    a timing miss. Input before the scheduler has started is ignored.
    """

    def __init__(
        self,
        scheduler: EventScheduler,
        key_map: Mapping[int, int] | None = None,
        debounce_ms: float = DEBOUNCE_MS,
        margin_ms: float = TIMING_MARGIN_MS,
    ) -> None:
        self._scheduler = scheduler
        self._queue = scheduler.queue
        self._key_map = dict(key_map) if key_map is not None else lane_key_map()
        self._debounce_ms = debounce_ms
        self._margin_ms = margin_ms
        self._notes = scheduler.user_notes  # already in start order
        self._resolved: set[int] = set()
        self._pending: InputEvent | None = None
        self._pending_flush: ScheduledEvent | None = None
        self._listeners: list[Callable[[Verdict], None]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def resolved_count(self) -> int:
        return len(self._resolved)

    def on_verdict(self, callback: Callable[[Verdict], None]) -> None:
        self._listeners.append(callback)

    def map_key(self, raw_code: int, time_ms: float) -> InputEvent:
        return InputEvent(column=self._key_map.get(raw_code), time_ms=max(0, int(time_ms)))

    def on_key(self, raw_code: int, time_ms: float) -> InputEvent:
        """Accept a raw key press at ``time_ms`` after game start."""
        event = self.map_key(raw_code, time_ms)
        if self._closed:
            return event
        self.on_input(event)
        return event

    def on_input(self, event: InputEvent) -> None:
        if self._closed:
            return
        if not self._scheduler.started:
            logger.debug("Ignoring key at %dms before the song started", event.time_ms)
            return
        if self._pending_flush is not None:
            self._pending_flush.cancel()
        self._pending = event
        self._pending_flush = self._queue.schedule_at(
            event.time_ms + self._debounce_ms, self._flush, "input-debounce"
        )

    def close(self) -> None:
        """Stop accepting input. A press still waiting out its debounce is dropped."""
        self._closed = True
        if self._pending_flush is not None:
            self._pending_flush.cancel()
        self._pending = None
        self._pending_flush = None

    def _flush(self) -> None:
        event, self._pending, self._pending_flush = self._pending, None, None
        if event is None or self._closed:
            return
        if not event.mapped:
            logger.debug("Ignoring unmapped key at %dms", event.time_ms)
            return
        verdict = self.judge(event)
        if verdict is None:
            logger.debug("Key at %dms has no user note to match", event.time_ms)
            return
        for callback in self._listeners:
            callback(verdict)

    def judge(self, event: InputEvent) -> Verdict | None:
        index = self._pair(event)
        if index is None:
            return None
        note = self._notes[index]
        expected_ms = self._scheduler.sound_due_ms(note)
        verdict = evaluate_input(note, event, expected_ms, self._margin_ms)
        if index in self._resolved and verdict.timing_ok:
            # A note scores once; a repeat press on it counts as off-time.
            verdict = Verdict(note=note, timing_ok=False, column_ok=verdict.column_ok, input_event=event)
        if verdict.correct:
            self._resolved.add(index)
        logger.debug(
            "Key lane %s at %dms vs note lane %d at %.0fms: timing=%s column=%s",
            event.column, event.time_ms, note.column, expected_ms, verdict.timing_ok, verdict.column_ok,
        )
        return verdict

    def _pair(self, event: InputEvent) -> int | None:
        latest_passed: int | None = None
        for index, note in enumerate(self._notes):
            expected_ms = self._scheduler.sound_due_ms(note)
            if index not in self._resolved and expected_ms + self._margin_ms >= event.time_ms:
                return self._chord_choice(index, expected_ms, event.column)
            if expected_ms <= event.time_ms:
                latest_passed = index
        return latest_passed

    def _chord_choice(self, first: int, expected_ms: float, column: int | None) -> int:
        """Among unresolved notes due at ``expected_ms``, the one in the pressed lane."""
        for index in range(first, len(self._notes)):
            note = self._notes[index]
            if self._scheduler.sound_due_ms(note) != expected_ms:
                break
            if index not in self._resolved and note.column == column:
                return index
        return first
