"""Instrument voices: the audio capability the game plays notes through."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
_FLATS = {"Db": "C#", "Eb": "D#", "Gb": "F#", "Ab": "G#", "Bb": "A#"}
_NOTE_RE = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")


class PlaybackError(RuntimeError):
    """Raised when a note cannot be played, e.g. its instrument has no voice."""


class AudioInitError(RuntimeError):
    """Raised when the synth or SoundFont cannot be loaded."""


def midi_to_note_name(pitch: int) -> str:
    """MIDI number to scientific pitch name (60 -> "C4", 64 -> "E4")."""
    return f"{_NOTE_NAMES[pitch % 12]}{pitch // 12 - 1}"


def note_name_to_midi(name: str) -> int:
    match = _NOTE_RE.match(name.strip())
    if match is None:
        raise ValueError(f"Invalid note name: {name!r}")
    letter, accidental, octave = match.groups()
    key = letter.upper() + accidental
    key = _FLATS.get(key, key)
    if key not in _NOTE_NAMES:
        # Cb, Fb, E#, B# wrap across the natural semitone
        base = _NOTE_NAMES.index(letter.upper())
        offset = 1 if accidental == "#" else -1
        return (int(octave) + 1) * 12 + base + offset
    return (int(octave) + 1) * 12 + _NOTE_NAMES.index(key)


def midi_to_frequency(pitch: int) -> float:
    return 440.0 * 2.0 ** ((pitch - 69) / 12.0)


@runtime_checkable
class Voice(Protocol):
    """Anything that can sound a note for a duration at a velocity."""

    def trigger_attack_release(self, note: str, duration: float, velocity: float) -> None: ...


class VoiceBank(Mapping[str, Voice]):
    """Voices addressable by instrument name."""

    def __init__(self, voices: Mapping[str, Voice] | None = None) -> None:
        self._voices: dict[str, Voice] = dict(voices or {})

    def __getitem__(self, instrument: str) -> Voice:
        return self._voices[instrument]

    def __iter__(self) -> Iterator[str]:
        return iter(self._voices)

    def __len__(self) -> int:
        return len(self._voices)

    def add(self, instrument: str, voice: Voice) -> None:
        self._voices[instrument] = voice

    @property
    def instruments(self) -> list[str]:
        return list(self._voices)

    def trigger(self, instrument: str, pitch: int, duration: float, velocity: float) -> None:
        """Play a MIDI pitch on the named instrument.

        Raises:
            PlaybackError: If no voice is loaded for ``instrument``.
        """
        voice = self._voices.get(instrument)
        if voice is None:
            raise PlaybackError(f"No voice loaded for instrument {instrument!r}")
        voice.trigger_attack_release(midi_to_note_name(pitch), duration, velocity)


class SilentVoice:
    """Voice that plays nothing; used with --silent and when audio is unavailable."""

    def trigger_attack_release(self, note: str, duration: float, velocity: float) -> None:
        logger.debug("silent %s for %.2fs at %.2f", note, duration, velocity)
