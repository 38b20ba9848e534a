"""Virtual clock and priority event queue driving every timed trigger."""

from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class VirtualClock:
    """Milliseconds since game start. Only the event queue moves it forward."""

    def __init__(self, now_ms: float = 0.0) -> None:
        self._now_ms = float(now_ms)

    @property
    def now_ms(self) -> float:
        return self._now_ms

    def _advance_to(self, now_ms: float) -> None:
        if now_ms > self._now_ms:
            self._now_ms = float(now_ms)


@dataclass(order=True)
class ScheduledEvent:
    due_ms: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    label: str = field(compare=False, default="")
    cancelled: bool = field(compare=False, default=False)

    def cancel(self) -> None:
        self.cancelled = True


class EventQueue:
    """Events keyed by due instant, dispatched one at a time in due order.

    Events due at the same instant fire in the order they were scheduled.
    A handler may schedule further events; those due at or before the
    dispatch horizon fire within the same ``run_until`` call.
    """

    def __init__(self, clock: VirtualClock | None = None) -> None:
        self.clock = clock or VirtualClock()
        self._heap: list[ScheduledEvent] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return sum(1 for event in self._heap if not event.cancelled)

    @property
    def now_ms(self) -> float:
        return self.clock.now_ms

    def schedule_at(self, due_ms: float, callback: Callable[[], None], label: str = "") -> ScheduledEvent:
        event = ScheduledEvent(due_ms=float(due_ms), sequence=next(self._counter), callback=callback, label=label)
        heapq.heappush(self._heap, event)
        return event

    def schedule_in(self, delay_ms: float, callback: Callable[[], None], label: str = "") -> ScheduledEvent:
        return self.schedule_at(self.clock.now_ms + delay_ms, callback, label)

    def next_due_ms(self) -> float | None:
        while self._heap and self._heap[0].cancelled:
            heapq.heappop(self._heap)
        return self._heap[0].due_ms if self._heap else None

    def run_until(self, now_ms: float) -> int:
        """Dispatch every event due at or before ``now_ms``. Returns the number fired."""
        fired = 0
        while self._heap and self._heap[0].due_ms <= now_ms:
            event = heapq.heappop(self._heap)
            if event.cancelled:
                continue
            self.clock._advance_to(event.due_ms)
            logger.debug("t=%.0fms fire %s", event.due_ms, event.label or event.callback)
            event.callback()
            fired += 1
        self.clock._advance_to(now_ms)
        return fired

    def run_all(self) -> int:
        """Drain the queue completely, advancing the clock to the last event."""
        fired = 0
        while (due := self.next_due_ms()) is not None:
            fired += self.run_until(due)
        return fired

    def clear(self) -> None:
        self._heap.clear()
