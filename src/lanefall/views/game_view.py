"""Gameplay view: drives a GameSession from the pygame clock."""

from __future__ import annotations

import logging

import pygame

from lanefall.config import CANVAS_WIDTH
from lanefall.matcher import lane_key_map
from lanefall.midi_input import InputSource
from lanefall.noise import NoiseSource
from lanefall.renderer import colors as colors_mod
from lanefall.renderer.hud import render_game_over, render_hud
from lanefall.renderer.lanes import PygameCanvas
from lanefall.session import GameSession
from lanefall.views.base import ViewAction, ViewContext

logger = logging.getLogger(__name__)

HUD_HEIGHT = 70


class GameView:
    name = "game"

    def __init__(self) -> None:
        self._context: ViewContext | None = None
        self._session: GameSession | None = None
        self._canvas: PygameCanvas | None = None
        self._start_ticks = 0
        self._hud_pos = (10, 10)

    def on_enter(self, context: ViewContext) -> None:
        self._context = context
        width, _ = context.screen_size
        self._hud_pos = (10, 8)
        self._canvas = PygameCanvas((width // 2 - CANVAS_WIDTH // 2, HUD_HEIGHT))

        noise = NoiseSource(context.seed) if context.seed is not None else NoiseSource.from_clock()
        timeline = context.timeline
        self._session = GameSession(
            timeline.notes,
            context.voices,
            noise,
            canvas=self._canvas,
            key_map=lane_key_map(context.settings.lane_keys),
        )
        logger.info(
            "Starting %s: %d notes, %d user-played, %d skipped lines",
            context.song_title, len(timeline.notes), len(timeline.user_notes), len(timeline.errors),
        )
        if context.keyboard_input:
            context.keyboard_input.close()
        self._start_ticks = pygame.time.get_ticks()
        self._session.start()

    def on_exit(self) -> None:
        if self._session:
            self._session.stop()
        if self._canvas:
            self._canvas.clear()
        if self._context and self._context.audio:
            self._context.audio.all_notes_off()

    def handle_event(self, event: pygame.event.Event) -> ViewAction | None:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            return ViewAction(kind="quit")
        ended = self._session is not None and self._session.ended
        if event.type == pygame.KEYDOWN and event.key == pygame.K_r and ended:
            return ViewAction(kind="switch", target="game")
        return None

    def update(self, dt: float) -> ViewAction | None:
        session = self._session
        if session is None or self._context is None:
            return None

        for source in self._input_sources():
            while (press := source.poll()) is not None:
                session.press(press.code, press.timestamp_ms - self._start_ticks)

        session.advance_to(pygame.time.get_ticks() - self._start_ticks)

        if self._context.audio:
            self._context.audio.flush_pending_offs()
        return None

    def _input_sources(self) -> list[InputSource]:
        if self._context is None:
            return []
        sources = (self._context.midi_input, self._context.keyboard_input)
        return [source for source in sources if source is not None]

    def draw(self, surface: pygame.Surface) -> None:
        if self._session is None or self._canvas is None or self._context is None:
            return

        surface.fill(colors_mod.BG)
        self._canvas.draw(surface)
        render_hud(surface, self._session.score.score, self._context.settings.lane_keys, *self._hud_pos)

        if self._session.ended:
            render_game_over(surface, self._session.score.score, self._session.score.penalties)
