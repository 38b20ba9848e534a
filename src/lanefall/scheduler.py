"""Event scheduler: fans each note out into sound and animation triggers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from lanefall.config import (
    BOTTOM_ROW,
    COLUMN_COLOURS,
    FALL_DIVISOR,
    FALL_MULTIPLIER,
    NOTE_RADIUS,
    PRE_ROLL_MS,
    TICK_RATE_MS,
)
from lanefall.event_queue import EventQueue, ScheduledEvent
from lanefall.models import ScheduledNote

if TYPE_CHECKING:
    from lanefall.coordinator import PlaybackCoordinator

logger = logging.getLogger(__name__)


@runtime_checkable
class MarkerCanvas(Protocol):
    """Surface that shows one circular marker per falling note."""

    def create_marker(self, column: int, colour: str) -> int: ...
    def move_marker(self, marker_id: int, y: float) -> None: ...
    def show_marker(self, marker_id: int) -> None: ...
    def hide_marker(self, marker_id: int) -> None: ...
    def remove_marker(self, marker_id: int) -> None: ...


def animation_duration_ms(note: ScheduledNote) -> float:
    """Fall time for a note's marker, from its remaining distance to the bottom row."""
    return (BOTTOM_ROW - note.start) / FALL_DIVISOR * FALL_MULTIPLIER


class MarkerAnimation:
    """One falling marker: created at start, moved every tick, removed exactly once."""

    def __init__(
        self,
        note: ScheduledNote,
        queue: EventQueue,
        canvas: MarkerCanvas,
        start_ms: float,
        duration_ms: float,
    ) -> None:
        self.note = note
        self.start_ms = start_ms
        self.duration_ms = duration_ms
        self.ticks = 0
        self._queue = queue
        self._canvas = canvas
        self._marker: int | None = None
        self._pending: list[ScheduledEvent] = []
        self._done = False

    @property
    def end_ms(self) -> float:
        return self.start_ms + self.duration_ms

    @property
    def finished(self) -> bool:
        return self._done

    def begin(self) -> None:
        self._marker = self._canvas.create_marker(self.note.column, COLUMN_COLOURS[self.note.column])
        self._canvas.show_marker(self._marker)
        self._pending.append(self._queue.schedule_at(self.end_ms, self._finish, "animation-end"))
        self._schedule_tick(0)

    def _schedule_tick(self, index: int) -> None:
        due = self.start_ms + TICK_RATE_MS * (index + 1)
        if due >= self.end_ms:
            return
        self._pending.append(
            self._queue.schedule_at(due, lambda: self._tick(index), "animation-tick")
        )

    def _tick(self, index: int) -> None:
        if self._done or self._marker is None:
            return
        elapsed = index * TICK_RATE_MS
        y = elapsed / self.duration_ms * (BOTTOM_ROW + NOTE_RADIUS)
        self._canvas.move_marker(self._marker, y)
        self.ticks += 1
        self._schedule_tick(index + 1)

    def _finish(self) -> None:
        self._release()

    def cancel(self) -> None:
        """Stop early. The marker is still removed."""
        self._release()

    def _release(self) -> None:
        if self._done:
            return
        self._done = True
        for event in self._pending:
            event.cancel()
        self._pending.clear()
        if self._marker is not None:
            marker, self._marker = self._marker, None
            self._canvas.remove_marker(marker)


class EventScheduler:
    """Schedules every note's triggers relative to one shared game-start origin.

    Per note:
      * sound trigger at ``pre_roll + start``: background notes are played,
        user-played notes are published to ``on_user_note`` listeners;
      * animation start ``animation_duration`` earlier (user-played notes only),
        followed by a tick stream that ends on its own.

    After the last note trigger has fired, ``on_last_note`` listeners are
    called with the instant it fired.
    """

    def __init__(
        self,
        notes: Iterable[ScheduledNote],
        queue: EventQueue,
        coordinator: PlaybackCoordinator | None = None,
        canvas: MarkerCanvas | None = None,
        pre_roll_ms: float = PRE_ROLL_MS,
    ) -> None:
        self.notes = sorted(notes, key=lambda n: (n.start, n.pitch))
        self.queue = queue
        self.coordinator = coordinator
        self.canvas = canvas
        self.pre_roll_ms = pre_roll_ms
        self.origin_ms: float | None = None
        self.animations: list[MarkerAnimation] = []
        self._events: list[ScheduledEvent] = []
        self._user_note_listeners: list[Callable[[ScheduledNote], None]] = []
        self._last_note_listeners: list[Callable[[float], None]] = []
        self._latest_user_note: ScheduledNote | None = None

    @property
    def user_notes(self) -> list[ScheduledNote]:
        return [n for n in self.notes if n.user_played]

    @property
    def latest_user_note(self) -> ScheduledNote | None:
        """Most recent user-played note whose trigger has fired."""
        return self._latest_user_note

    def on_user_note(self, callback: Callable[[ScheduledNote], None]) -> None:
        self._user_note_listeners.append(callback)

    def on_last_note(self, callback: Callable[[float], None]) -> None:
        self._last_note_listeners.append(callback)

    @property
    def started(self) -> bool:
        return self.origin_ms is not None

    def _origin(self) -> float:
        if self.origin_ms is None:
            raise RuntimeError("EventScheduler has not been started")
        return self.origin_ms

    def sound_due_ms(self, note: ScheduledNote) -> float:
        return self._origin() + self.pre_roll_ms + note.start * 1000.0

    def last_note_due_ms(self) -> float:
        latest = max((n.start for n in self.notes), default=0.0)
        return self._origin() + self.pre_roll_ms + latest * 1000.0

    def start(self, origin_ms: float = 0.0) -> None:
        if self.origin_ms is not None:
            raise RuntimeError("EventScheduler can only be started once")
        self.origin_ms = origin_ms
        canvas = self.canvas

        for note in self.notes:
            sound_ms = self.sound_due_ms(note)
            self._events.append(
                self.queue.schedule_at(sound_ms, lambda n=note: self._sound(n), "sound")
            )
            if note.user_played and canvas is not None:
                duration = animation_duration_ms(note)
                if duration <= 0:
                    logger.debug("No fall animation for note at %.2fs (past bottom row)", note.start)
                    continue
                self._events.append(
                    self.queue.schedule_at(
                        sound_ms - duration,
                        lambda n=note, d=duration: self._start_animation(n, d, canvas),
                        "animation-start",
                    )
                )

        # Scheduled last so it fires after every note due at the same instant.
        self._events.append(
            self.queue.schedule_at(self.last_note_due_ms(), self._last_note, "last-note")
        )
        logger.debug(
            "Scheduled %d notes (%d user-played) from origin %.0fms",
            len(self.notes), len(self.user_notes), origin_ms,
        )

    def stop(self) -> None:
        """Cancel everything still pending, releasing all live markers."""
        for event in self._events:
            event.cancel()
        self._events.clear()
        for animation in self.animations:
            animation.cancel()

    def _sound(self, note: ScheduledNote) -> None:
        if note.user_played:
            self._latest_user_note = note
            for callback in self._user_note_listeners:
                callback(note)
        elif self.coordinator is not None:
            self.coordinator.play_background(note)

    def _start_animation(self, note: ScheduledNote, duration_ms: float, canvas: MarkerCanvas) -> None:
        animation = MarkerAnimation(note, self.queue, canvas, self.queue.now_ms, duration_ms)
        self.animations = [a for a in self.animations if not a.finished]
        self.animations.append(animation)
        animation.begin()

    def _last_note(self) -> None:
        for callback in self._last_note_listeners:
            callback(self.queue.now_ms)
