"""Playfield rendering: four lanes and their falling markers."""

from __future__ import annotations

import itertools
from dataclasses import dataclass

import pygame

from lanefall.config import BOTTOM_ROW, CANVAS_HEIGHT, CANVAS_WIDTH, COLUMN_POSITIONS, NOTE_RADIUS
from lanefall.renderer import colors as colors_mod


@dataclass
class Marker:
    column: int
    colour: str
    y: float = 0.0
    visible: bool = False


class PygameCanvas:
    """MarkerCanvas backed by a pygame surface region.

    Markers are plain records; ``draw`` paints whatever is live at the time.
    """

    def __init__(self, origin: tuple[int, int] = (0, 0)) -> None:
        self.rect = pygame.Rect(origin[0], origin[1], CANVAS_WIDTH, CANVAS_HEIGHT)
        self.markers: dict[int, Marker] = {}
        self._ids = itertools.count(1)

    def create_marker(self, column: int, colour: str) -> int:
        marker_id = next(self._ids)
        self.markers[marker_id] = Marker(column=column, colour=colour)
        return marker_id

    def move_marker(self, marker_id: int, y: float) -> None:
        self.markers[marker_id].y = y

    def show_marker(self, marker_id: int) -> None:
        self.markers[marker_id].visible = True

    def hide_marker(self, marker_id: int) -> None:
        self.markers[marker_id].visible = False

    def remove_marker(self, marker_id: int) -> None:
        self.markers.pop(marker_id, None)

    def clear(self) -> None:
        self.markers.clear()

    def column_x(self, column: int) -> int:
        return self.rect.x + int(COLUMN_POSITIONS[column] * CANVAS_WIDTH)

    def draw(self, surface: pygame.Surface) -> None:
        pygame.draw.rect(surface, colors_mod.PLAYFIELD, self.rect)
        for column in range(len(COLUMN_POSITIONS)):
            x = self.column_x(column)
            pygame.draw.line(surface, colors_mod.LANE_LINE, (x, self.rect.top), (x, self.rect.bottom))
        y_bottom = self.rect.y + BOTTOM_ROW
        pygame.draw.line(surface, colors_mod.BOTTOM_ROW_LINE, (self.rect.left, y_bottom), (self.rect.right, y_bottom), 2)

        for marker in self.markers.values():
            if not marker.visible:
                continue
            color = colors_mod.LANE_COLORS.get(marker.colour, (0, 0, 0))
            center = (self.column_x(marker.column), self.rect.y + int(marker.y))
            pygame.draw.circle(surface, color, center, int(NOTE_RADIUS))
