"""Audio synthesis via FluidSynth + SoundFonts."""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterable
from pathlib import Path

import fluidsynth

from lanefall.config import GM_PROGRAMS
from lanefall.voices import AudioInitError, VoiceBank, note_name_to_midi

logger = logging.getLogger(__name__)

_PERCUSSION_CHANNEL = 9


def _detect_audio_driver() -> str:
    """Auto-detect the appropriate FluidSynth audio driver for the platform."""
    if sys.platform == "linux":
        return "pulseaudio"
    elif sys.platform == "darwin":
        return "coreaudio"
    elif sys.platform == "win32":
        return "dsound"
    return "alsa"


class AudioEngine:
    """Wraps FluidSynth; one MIDI channel per instrument voice."""

    def __init__(
        self,
        soundfont_path: str | Path,
        gain: float = 0.8,
        driver: str | None = None,
    ) -> None:
        try:
            self.fs = fluidsynth.Synth(gain=gain)
            self.fs.start(driver=driver or _detect_audio_driver())
            self._sfid = self.fs.sfload(str(soundfont_path))
        except Exception as exc:
            raise AudioInitError(f"Cannot start FluidSynth with {soundfont_path}: {exc}") from exc
        if self._sfid == -1:
            raise AudioInitError(f"Cannot load SoundFont {soundfont_path}")
        self._channels: dict[str, int] = {}
        self._pending_offs: list[tuple[float, int, int]] = []  # (off_time, pitch, channel)

    def load_voices(self, instruments: Iterable[str]) -> VoiceBank:
        """Assign a channel and GM program to each known instrument name."""
        bank = VoiceBank()
        for name in instruments:
            program = GM_PROGRAMS.get(name)
            if program is None:
                logger.warning("No General MIDI program for instrument %r", name)
                continue
            channel = self._next_channel()
            if channel is None:
                logger.warning("Out of MIDI channels, %r not loaded", name)
                continue
            self.fs.program_select(channel, self._sfid, 0, program)
            self._channels[name] = channel
            bank.add(name, FluidSynthVoice(self, channel))
        return bank

    def _next_channel(self) -> int | None:
        used = set(self._channels.values())
        for channel in range(16):
            if channel != _PERCUSSION_CHANNEL and channel not in used:
                return channel
        return None

    def play(self, channel: int, pitch: int, duration: float, velocity: float) -> None:
        self.fs.noteon(channel, pitch, max(1, min(127, round(velocity * 127))))
        off_time = time.time() + duration
        self._pending_offs.append((off_time, pitch, channel))

    def flush_pending_offs(self) -> None:
        """Call each frame to release notes whose duration has elapsed."""
        now = time.time()
        remaining: list[tuple[float, int, int]] = []
        for off_time, pitch, channel in self._pending_offs:
            if now >= off_time:
                self.fs.noteoff(channel, pitch)
            else:
                remaining.append((off_time, pitch, channel))
        self._pending_offs = remaining

    def all_notes_off(self) -> None:
        for channel in self._channels.values():
            for pitch in range(128):
                self.fs.noteoff(channel, pitch)
        self._pending_offs.clear()

    def shutdown(self) -> None:
        self.all_notes_off()
        self.fs.delete()


class FluidSynthVoice:
    def __init__(self, engine: AudioEngine, channel: int) -> None:
        self._engine = engine
        self.channel = channel

    def trigger_attack_release(self, note: str, duration: float, velocity: float) -> None:
        self._engine.play(self.channel, note_name_to_midi(note), duration, velocity)
