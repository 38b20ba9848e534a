"""Entry point for `python -m lanefall` or the `lanefall` console script."""

import argparse
import logging
import sys
from pathlib import Path

from lanefall.settings import DEFAULT_SETTINGS_PATH, load_settings
from lanefall.song_loader import SongLoadError, load_song_lines

logger = logging.getLogger("lanefall")


def main() -> None:
    parser = argparse.ArgumentParser(description="LaneFall: four-lane rhythm game")
    parser.add_argument("song", help="Note dataset (.csv) or MIDI file (.mid)")
    parser.add_argument("--user-track", type=int, action="append", default=None,
                        help="MIDI track the player plays (repeatable, default: first track with notes)")
    parser.add_argument("--soundfont", default=None, help="SoundFont (.sf2) used for all instruments")
    parser.add_argument("--seed", type=int, default=None, help="Seed for penalty notes (default: clock)")
    parser.add_argument("--silent", action="store_true", help="Run without audio")
    parser.add_argument("--midi-port", type=int, default=None, help="Play the lanes from a MIDI input port")
    parser.add_argument("--settings", type=Path, default=DEFAULT_SETTINGS_PATH, help="Settings JSON file")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = load_settings(args.settings)
    if args.soundfont:
        settings.soundfont = args.soundfont

    try:
        lines = load_song_lines(args.song, user_tracks=args.user_track)
    except SongLoadError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    from lanefall.app import App
    from lanefall.voices import AudioInitError

    try:
        app = App(
            lines,
            song_title=Path(args.song).stem,
            settings=settings,
            seed=args.seed,
            silent=args.silent,
            midi_port=args.midi_port,
        )
    except AudioInitError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    app.run()


if __name__ == "__main__":
    main()
