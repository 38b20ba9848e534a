"""View protocol, the shared ViewContext, and the ViewManager that switches views."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

import pygame

from lanefall.settings import GameSettings
from lanefall.timeline import Timeline
from lanefall.voices import VoiceBank

if TYPE_CHECKING:
    from lanefall.audio import AudioEngine
    from lanefall.midi_input import InputSource

logger = logging.getLogger(__name__)


@dataclass
class ViewContext:
    """Everything a view needs to run a song: voices, inputs, settings and the parsed timeline."""

    screen_size: tuple[int, int]
    voices: VoiceBank
    audio: AudioEngine | None = None
    keyboard_input: InputSource | None = None
    midi_input: InputSource | None = None
    settings: GameSettings = field(default_factory=GameSettings)
    song_title: str = ""
    timeline: Timeline = field(default_factory=Timeline)
    seed: int | None = None


@dataclass
class ViewAction:
    """Returned by a view to leave it: switch to another view or quit the app."""

    kind: Literal["switch", "quit"]
    target: str | None = None
    overrides: dict[str, Any] | None = None


@runtime_checkable
class View(Protocol):
    name: str

    def on_enter(self, context: ViewContext) -> None: ...
    def on_exit(self) -> None: ...
    def handle_event(self, event: pygame.event.Event) -> ViewAction | None: ...
    def update(self, dt: float) -> ViewAction | None: ...
    def draw(self, surface: pygame.Surface) -> None: ...


class ViewManager:
    """Holds one active view and forwards the game loop to it.

    ``handle_event`` and ``update`` return False once the active view asks
    to quit.
    """

    def __init__(self, context: ViewContext) -> None:
        self._factories: dict[str, type] = {}
        self._context = context
        self._active: View | None = None

    def register(self, view_cls: type) -> None:
        self._factories[view_cls.name] = view_cls

    @property
    def active_view(self) -> View | None:
        return self._active

    def switch(self, view_name: str, **overrides: Any) -> None:
        if view_name not in self._factories:
            raise KeyError(f"No view registered as {view_name!r}")
        self.close()
        view = self._factories[view_name]()
        view.on_enter(self._context_with(overrides))
        self._active = view
        logger.debug("Switched to view %s", view_name)

    def close(self) -> None:
        if self._active is not None:
            self._active.on_exit()
            self._active = None

    def handle_event(self, event: pygame.event.Event) -> bool:
        if self._active is None:
            return False
        return self._apply(self._active.handle_event(event))

    def update(self, dt: float) -> bool:
        if self._active is None:
            return False
        return self._apply(self._active.update(dt))

    def draw(self, surface: pygame.Surface) -> None:
        if self._active is not None:
            self._active.draw(surface)

    def _apply(self, action: ViewAction | None) -> bool:
        if action is None:
            return True
        if action.kind == "quit":
            return False
        self.switch(action.target, **(action.overrides or {}))
        return True

    def _context_with(self, overrides: dict[str, Any]) -> ViewContext:
        if not overrides:
            return self._context
        known = {f.name for f in dataclasses.fields(ViewContext)}
        return dataclasses.replace(
            self._context, **{k: v for k, v in overrides.items() if k in known}
        )
