"""User settings persisted as JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from lanefall.config import DEFAULT_INSTRUMENTS, DEFAULT_LANE_KEYS, NUM_COLUMNS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".lanefall" / "settings.json"


@dataclass
class GameSettings:
    soundfont: str = ""
    gain: float = 0.8
    lane_keys: list[str] = field(default_factory=lambda: list(DEFAULT_LANE_KEYS))
    instruments: list[str] = field(default_factory=lambda: list(DEFAULT_INSTRUMENTS))

    def validated(self) -> GameSettings:
        """Fall back to the default lane keys unless there are four distinct letters."""
        keys = [str(k).lower() for k in self.lane_keys]
        if len(keys) != NUM_COLUMNS or len(set(keys)) != NUM_COLUMNS or not all(
            len(k) == 1 and k.isalpha() for k in keys
        ):
            logger.warning("Invalid lane keys %r, using %s", self.lane_keys, "".join(DEFAULT_LANE_KEYS))
            keys = list(DEFAULT_LANE_KEYS)
        return GameSettings(
            soundfont=self.soundfont,
            gain=max(0.0, min(10.0, float(self.gain))),
            lane_keys=keys,
            instruments=list(self.instruments),
        )


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> GameSettings:
    """Load settings from disk, returning defaults if absent or unreadable."""
    if not path.exists():
        return GameSettings()
    try:
        data = json.loads(path.read_text())
        return GameSettings(**{
            k: v for k, v in data.items()
            if k in GameSettings.__dataclass_fields__
        }).validated()
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return GameSettings()


def save_settings(settings: GameSettings, path: Path = DEFAULT_SETTINGS_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(settings), indent=2))
