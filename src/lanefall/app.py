"""Top-level application: initializes pygame, manages screens, and runs the game loop."""

from __future__ import annotations

import logging

import pygame

from lanefall.config import FPS, WINDOW_HEIGHT, WINDOW_TITLE, WINDOW_WIDTH
from lanefall.midi_input import KeyboardInput, MidiDeviceError, MidiInput, lane_key_codes
from lanefall.settings import GameSettings
from lanefall.timeline import build_timeline
from lanefall.views.base import ViewContext, ViewManager
from lanefall.views.game_view import GameView
from lanefall.views.title_view import TitleView
from lanefall.voices import AudioInitError, SilentVoice, VoiceBank

logger = logging.getLogger(__name__)


class App:
    def __init__(
        self,
        song_lines: list[str],
        song_title: str = "",
        settings: GameSettings | None = None,
        seed: int | None = None,
        silent: bool = False,
        midi_port: int | None = None,
    ) -> None:
        self.settings = settings or GameSettings()

        # Audio is loaded before the window opens so a bad SoundFont stops startup.
        self._audio = None if silent else self._load_audio(self.settings)
        if self._audio is None:
            voices = VoiceBank({name: SilentVoice() for name in self.settings.instruments})
        else:
            voices = self._audio.load_voices(self.settings.instruments)
        self.timeline = build_timeline(song_lines, available_instruments=voices.instruments)

        pygame.init()
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()

        self._keyboard_input = KeyboardInput()
        midi_input = self._try_midi(self.settings, midi_port) if midi_port is not None else None

        context = ViewContext(
            screen_size=(WINDOW_WIDTH, WINDOW_HEIGHT),
            voices=voices,
            audio=self._audio,
            keyboard_input=self._keyboard_input,
            midi_input=midi_input,
            settings=self.settings,
            song_title=song_title,
            timeline=self.timeline,
            seed=seed,
        )

        self.views = ViewManager(context)
        self.views.register(TitleView)
        self.views.register(GameView)
        self.views.switch("title")

    def run(self) -> None:
        running = True
        while running:
            dt = self.clock.tick(FPS) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                else:
                    self._keyboard_input.feed_event(event)
                    if not self.views.handle_event(event):
                        running = False
            if running:
                if not self.views.update(dt):
                    running = False
            self.views.draw(self.screen)
            pygame.display.flip()

        self._cleanup()
        pygame.quit()

    def _cleanup(self) -> None:
        self.views.close()
        if self._audio is not None:
            self._audio.shutdown()

    @staticmethod
    def _load_audio(settings: GameSettings):
        if not settings.soundfont:
            raise AudioInitError("No SoundFont configured; pass --soundfont or use --silent")
        try:
            # Imported lazily: pyfluidsynth needs the native FluidSynth library.
            from lanefall.audio import AudioEngine
        except ImportError as exc:
            raise AudioInitError(f"FluidSynth is not available: {exc}") from exc
        return AudioEngine(settings.soundfont, gain=settings.gain)

    @staticmethod
    def _try_midi(settings: GameSettings, port: int):
        try:
            mi = MidiInput(lane_key_codes(settings.lane_keys), port_index=port)
            mi.open()
            return mi
        except MidiDeviceError as exc:
            logger.warning("MIDI input unavailable: %s", exc)
            return None
