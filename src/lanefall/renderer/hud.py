"""Heads-up display: score, key legend and the game-over banner."""

from __future__ import annotations

from collections.abc import Sequence

import pygame

from lanefall.config import COLUMN_COLOURS
from lanefall.renderer import colors as colors_mod


def render_hud(surface: pygame.Surface, score: int, lane_keys: Sequence[str], x: int, y: int) -> None:
    font = pygame.font.SysFont("monospace", 20)

    text = font.render(f"Score: {score}", True, colors_mod.HUD_TEXT)
    surface.blit(text, (x, y))

    key_x = x
    for column, key in enumerate(lane_keys):
        color = colors_mod.LANE_COLORS[COLUMN_COLOURS[column]]
        label = font.render(key.upper(), True, color)
        surface.blit(label, (key_x, y + 28))
        key_x += label.get_width() + 12


def render_game_over(surface: pygame.Surface, score: int, misses: int = 0) -> None:
    w, h = surface.get_size()
    shade = pygame.Surface((w, h), pygame.SRCALPHA)
    shade.fill((0, 0, 0, 160))
    surface.blit(shade, (0, 0))

    title_font = pygame.font.SysFont("monospace", 36)
    font = pygame.font.SysFont("monospace", 20)
    title = title_font.render("Game Over", True, colors_mod.GAME_OVER)
    surface.blit(title, (w // 2 - title.get_width() // 2, h // 2 - 50))
    for i, line in enumerate((f"Final score: {score}", f"Misses: {misses}", "R: replay   Esc: quit")):
        detail = font.render(line, True, colors_mod.HUD_TEXT)
        surface.blit(detail, (w // 2 - detail.get_width() // 2, h // 2 + 5 + i * 26))
