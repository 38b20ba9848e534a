"""Title screen: waits for a click so audio starts on a user gesture."""

from __future__ import annotations

import pygame

from lanefall.renderer import colors as colors_mod
from lanefall.views.base import ViewAction, ViewContext


class TitleView:
    name = "title"

    def __init__(self) -> None:
        self._context: ViewContext | None = None
        self._font: pygame.font.Font | None = None
        self._title_font: pygame.font.Font | None = None

    def on_enter(self, context: ViewContext) -> None:
        self._context = context
        self._font = pygame.font.SysFont("monospace", 18)
        self._title_font = pygame.font.SysFont("monospace", 36)

    def on_exit(self) -> None:
        pass

    def handle_event(self, event: pygame.event.Event) -> ViewAction | None:
        if event.type == pygame.MOUSEBUTTONDOWN:
            return ViewAction(kind="switch", target="game")
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return ViewAction(kind="quit")
            if event.key in (pygame.K_RETURN, pygame.K_SPACE):
                return ViewAction(kind="switch", target="game")
        return None

    def update(self, dt: float) -> ViewAction | None:
        return None

    def draw(self, surface: pygame.Surface) -> None:
        if not self._font or not self._title_font or not self._context:
            return

        surface.fill(colors_mod.BG)
        w, h = surface.get_size()

        title = self._title_font.render("LaneFall", True, colors_mod.LANE_COLORS["green"])
        surface.blit(title, (w // 2 - title.get_width() // 2, 60))

        song = self._font.render(self._context.song_title or "Untitled", True, colors_mod.HUD_TEXT)
        surface.blit(song, (w // 2 - song.get_width() // 2, 120))

        keys = " ".join(k.upper() for k in self._context.settings.lane_keys)
        for i, line in enumerate(("Click to start", f"Lanes: {keys}", "Esc: quit")):
            text = self._font.render(line, True, colors_mod.HUD_TEXT)
            surface.blit(text, (w // 2 - text.get_width() // 2, h // 2 + i * 28))
