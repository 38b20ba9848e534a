"""Game-end detection: a one-way Running -> Ended state machine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum, auto

from lanefall.config import SETTLE_DELAY_MS
from lanefall.event_queue import EventQueue, ScheduledEvent
from lanefall.models import GameState

logger = logging.getLogger(__name__)


class Phase(Enum):
    RUNNING = auto()
    ENDED = auto()


class GameEndDetector:
    """Ends the game ``settle_delay_ms`` after the last note trigger has fired.

    On the transition every ``on_end`` callback runs once (closing input,
    showing the end screen) and ``state.ended`` becomes true for good.
    """

    def __init__(
        self,
        queue: EventQueue,
        state: GameState | None = None,
        settle_delay_ms: float = SETTLE_DELAY_MS,
    ) -> None:
        self._queue = queue
        self.state = state or GameState()
        self.settle_delay_ms = settle_delay_ms
        self.phase = Phase.RUNNING
        self.ended_at_ms: float | None = None
        self._armed: ScheduledEvent | None = None
        self._listeners: list[Callable[[GameState], None]] = []

    @property
    def ended(self) -> bool:
        return self.phase is Phase.ENDED

    def on_end(self, callback: Callable[[GameState], None]) -> None:
        self._listeners.append(callback)

    def arm(self, last_note_ms: float) -> None:
        """Called once the last note trigger has fired at ``last_note_ms``."""
        if self._armed is not None:
            raise RuntimeError("GameEndDetector is already armed")
        self._armed = self._queue.schedule_at(last_note_ms + self.settle_delay_ms, self._end, "game-end")

    def _end(self) -> None:
        if self.phase is Phase.ENDED:
            return
        self.phase = Phase.ENDED
        self.ended_at_ms = self._queue.now_ms
        self.state.ended = True
        logger.info("Game ended at %.0fms", self.ended_at_ms)
        for callback in self._listeners:
            callback(self.state)
