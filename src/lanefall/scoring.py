"""Score aggregation: a running fold over verdicts."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from lanefall.models import Verdict


def fold(verdicts: Iterable[Verdict], initial: int = 0) -> int:
    """Score after a sequence of verdicts: one point per fully correct press."""
    score = initial
    for verdict in verdicts:
        score += 1 if verdict.correct else 0
    return score


class ScoreAggregator:
    """Owns the score. Only ``apply`` changes it, and only upwards."""

    def __init__(self) -> None:
        self._score = 0
        self._penalties = 0
        self._listeners: list[Callable[[int], None]] = []

    @property
    def score(self) -> int:
        return self._score

    @property
    def penalties(self) -> int:
        return self._penalties

    def subscribe(self, callback: Callable[[int], None]) -> None:
        """Register an observer. It is called with the current score right away."""
        self._listeners.append(callback)
        callback(self._score)

    def apply(self, verdict: Verdict) -> int:
        if verdict.correct:
            self._score += 1
            for callback in self._listeners:
                callback(self._score)
        else:
            self._penalties += 1
        return self._score
