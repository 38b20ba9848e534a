"""Tests for score aggregation."""

import itertools

from lanefall.models import InputEvent, NoteRecord, ScheduledNote, Verdict
from lanefall.scoring import ScoreAggregator, fold

NOTE = ScheduledNote.from_record(
    NoteRecord(user_played=True, instrument="piano", velocity=0.5, pitch=64, start=1.0, end=1.5)
)


def _verdicts():
    combos = list(itertools.product([True, False], repeat=2)) * 5
    return [Verdict(NOTE, t, c, InputEvent(0, 3000)) for t, c in combos]


def test_observer_sees_initial_zero():
    seen = []
    ScoreAggregator().subscribe(seen.append)
    assert seen == [0]


def test_score_counts_fully_correct_verdicts():
    verdicts = _verdicts()
    aggregator = ScoreAggregator()
    history = [aggregator.apply(v) for v in verdicts]
    correct = sum(1 for v in verdicts if v.timing_ok and v.column_ok)
    assert aggregator.score == correct == 5
    assert aggregator.penalties == len(verdicts) - correct
    assert history == sorted(history)
    assert all(b - a in (0, 1) for a, b in zip([0] + history, history))


def test_fold_matches_aggregator():
    verdicts = _verdicts()
    aggregator = ScoreAggregator()
    for v in verdicts:
        aggregator.apply(v)
    assert fold(verdicts) == aggregator.score
    assert fold([]) == 0


def test_observer_notified_only_on_change():
    seen = []
    aggregator = ScoreAggregator()
    aggregator.subscribe(seen.append)
    aggregator.apply(Verdict(NOTE, False, True))
    aggregator.apply(Verdict(NOTE, True, True))
    assert seen == [0, 1]
