"""Playback coordinator: routes note triggers and verdicts to the voices."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lanefall.models import PenaltyNote, ScheduledNote, Verdict
from lanefall.noise import NoiseSource, pick_penalty
from lanefall.voices import PlaybackError, VoiceBank

logger = logging.getLogger(__name__)


class PlaybackCoordinator:
    """Plays background notes, correct hits, and penalty notes.

    A missing voice never propagates: the single trigger is skipped and
    logged, and the timeline carries on.
    """

    def __init__(
        self,
        voices: VoiceBank,
        noise: NoiseSource,
        penalty_instruments: Sequence[str] | None = None,
    ) -> None:
        self.voices = voices
        self.noise = noise
        self._penalty_instruments = list(penalty_instruments) if penalty_instruments is not None else None
        self.skipped = 0

    @property
    def penalty_instruments(self) -> list[str]:
        if self._penalty_instruments is not None:
            return self._penalty_instruments
        return self.voices.instruments

    def play_background(self, note: ScheduledNote) -> None:
        self._play(note.instrument, note.pitch, note.duration, note.velocity)

    def play_note(self, note: ScheduledNote) -> None:
        self._play(note.instrument, note.pitch, note.duration, note.velocity)

    def play_penalty(self) -> PenaltyNote | None:
        try:
            penalty = pick_penalty(self.noise, self.penalty_instruments)
        except PlaybackError as exc:
            logger.warning("Skipping penalty note: %s", exc)
            self.skipped += 1
            return None
        self._play(penalty.instrument, penalty.pitch, penalty.duration, penalty.velocity)
        return penalty

    def handle_verdict(self, verdict: Verdict) -> None:
        if verdict.correct:
            self.play_note(verdict.note)
        else:
            self.play_penalty()

    def _play(self, instrument: str, pitch: int, duration: float, velocity: float) -> None:
        try:
            self.voices.trigger(instrument, pitch, duration, velocity)
        except PlaybackError as exc:
            logger.warning("Skipping trigger: %s", exc)
            self.skipped += 1
