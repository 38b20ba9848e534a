"""Game session: wires timeline, scheduler, matcher, score and game end together."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from lanefall.config import PRE_ROLL_MS, SETTLE_DELAY_MS
from lanefall.coordinator import PlaybackCoordinator
from lanefall.event_queue import EventQueue
from lanefall.game_end import GameEndDetector
from lanefall.matcher import InputMatcher
from lanefall.models import GameState, InputEvent, ScheduledNote, Verdict
from lanefall.noise import NoiseSource
from lanefall.scheduler import EventScheduler, MarkerCanvas
from lanefall.scoring import ScoreAggregator
from lanefall.timeline import Timeline, build_timeline
from lanefall.voices import VoiceBank

logger = logging.getLogger(__name__)


class GameSession:
    """One play-through of a song on a single virtual clock.

    Time is milliseconds since game start. ``advance_to`` dispatches every
    trigger due by then; ``press`` feeds a raw key code.
    """

    def __init__(
        self,
        notes: Iterable[ScheduledNote],
        voices: VoiceBank,
        noise: NoiseSource,
        canvas: MarkerCanvas | None = None,
        key_map: Mapping[int, int] | None = None,
        pre_roll_ms: float = PRE_ROLL_MS,
        settle_delay_ms: float = SETTLE_DELAY_MS,
    ) -> None:
        self.queue = EventQueue()
        self.state = GameState()
        self.voices = voices
        self.coordinator = PlaybackCoordinator(voices, noise)
        self.scheduler = EventScheduler(
            notes, self.queue, coordinator=self.coordinator, canvas=canvas, pre_roll_ms=pre_roll_ms
        )
        self.matcher = InputMatcher(self.scheduler, key_map=key_map)
        self.score = ScoreAggregator()
        self.game_end = GameEndDetector(self.queue, self.state, settle_delay_ms=settle_delay_ms)
        self.verdicts: list[Verdict] = []

        self.matcher.on_verdict(self._on_verdict)
        self.scheduler.on_last_note(self.game_end.arm)
        self.game_end.on_end(lambda _state: self.matcher.close())
        self._started = False

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        voices: VoiceBank,
        noise: NoiseSource,
        **kwargs,
    ) -> tuple[GameSession, Timeline]:
        timeline = build_timeline(lines, available_instruments=voices.instruments)
        return cls(timeline.notes, voices, noise, **kwargs), timeline

    @property
    def now_ms(self) -> float:
        return self.queue.now_ms

    @property
    def ended(self) -> bool:
        return self.state.ended

    def start(self) -> None:
        if self._started:
            raise RuntimeError("GameSession already started")
        self._started = True
        self.scheduler.start(origin_ms=0.0)

    def advance_to(self, now_ms: float) -> int:
        return self.queue.run_until(now_ms)

    def run_to_end(self) -> None:
        """Dispatch everything left, including the game-end transition."""
        self.queue.run_all()

    def press(self, raw_code: int, time_ms: float | None = None) -> InputEvent:
        """Feed a key press; it is judged once its debounce window has passed."""
        when = self.now_ms if time_ms is None else time_ms
        return self.matcher.on_key(raw_code, when)

    def stop(self) -> None:
        self.matcher.close()
        self.scheduler.stop()

    def _on_verdict(self, verdict: Verdict) -> None:
        if self.state.ended:
            return
        self.verdicts.append(verdict)
        self.score.apply(verdict)
        self.coordinator.handle_verdict(verdict)
