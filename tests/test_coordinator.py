"""Tests for routing verdicts to the voices."""

import pytest

from lanefall.coordinator import PlaybackCoordinator
from lanefall.models import InputEvent, Verdict
from lanefall.noise import NoiseSource
from lanefall.timeline import build
from lanefall.voices import VoiceBank

from conftest import RecordingVoice, dataset


@pytest.fixture
def note():
    return build(dataset("True,piano,64,64,1.0,1.5"))[0]


def test_correct_verdict_plays_the_note(voices, piano, noise, note):
    coordinator = PlaybackCoordinator(voices, noise)
    coordinator.handle_verdict(Verdict(note, True, True, InputEvent(0, 3000)))
    assert piano.calls == [("E4", pytest.approx(0.5), pytest.approx(64 / 127))]


@pytest.mark.parametrize("timing_ok, column_ok", [(True, False), (False, True), (False, False)])
def test_every_other_verdict_plays_one_penalty(voices, piano, note, timing_ok, column_ok):
    coordinator = PlaybackCoordinator(voices, NoiseSource(3))
    coordinator.handle_verdict(Verdict(note, timing_ok, column_ok, InputEvent(1, 3000)))
    assert len(piano.calls) == 1
    name, duration, velocity = piano.calls[0]
    assert 0.1 <= duration <= 0.5
    assert 0.5 <= velocity < 1.0


def test_penalty_is_reproducible_for_a_seed(note):
    runs = []
    for _ in range(2):
        voice = RecordingVoice()
        coordinator = PlaybackCoordinator(VoiceBank({"piano": voice}), NoiseSource(77))
        for _ in range(5):
            coordinator.play_penalty()
        runs.append(voice.calls)
    assert runs[0] == runs[1]


def test_penalty_picks_among_loaded_voices():
    voices = {name: RecordingVoice() for name in ("piano", "violin", "flute")}
    coordinator = PlaybackCoordinator(VoiceBank(voices), NoiseSource(11))
    for _ in range(30):
        penalty = coordinator.play_penalty()
        assert penalty.instrument in voices
    assert sum(len(v.calls) for v in voices.values()) == 30


def test_missing_voice_is_skipped(noise, caplog):
    coordinator = PlaybackCoordinator(VoiceBank(), noise)
    note = build(dataset("False,kazoo,64,64,1.0,1.5"))[0]
    coordinator.play_background(note)
    assert coordinator.play_penalty() is None
    assert coordinator.skipped == 2
    assert "kazoo" in caplog.text
