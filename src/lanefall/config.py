"""Global constants and default settings."""

WINDOW_WIDTH = 400
WINDOW_HEIGHT = 520
FPS = 60
WINDOW_TITLE = "LaneFall"

# Playfield (pixels)
CANVAS_WIDTH = 200
CANVAS_HEIGHT = 400
BOTTOM_ROW = 350
NOTE_RADIUS = 0.07 * CANVAS_WIDTH
COLUMN_POSITIONS = (0.2, 0.4, 0.6, 0.8)  # marker x as a fraction of canvas width
NUM_COLUMNS = 4

# Virtual clock (milliseconds)
TICK_RATE_MS = 16
PRE_ROLL_MS = 2000
SETTLE_DELAY_MS = 2000

# Fall speed mapping: duration_ms = (BOTTOM_ROW - start) / FALL_DIVISOR * FALL_MULTIPLIER
FALL_DIVISOR = 1.25
FALL_MULTIPLIER = 4

# Input
TIMING_MARGIN_MS = 150
DEBOUNCE_MS = 50
DEFAULT_LANE_KEYS = ("h", "j", "k", "l")

# Linear congruential generator for penalty notes
LCG_MULTIPLIER = 67890
LCG_INCREMENT = 34086315
LCG_MODULUS = 12345

# Piano range (standard 88 keys: A0 = MIDI 21, C8 = MIDI 108)
MIDI_NOTE_MIN = 21
MIDI_NOTE_MAX = 108

# Penalty note ranges
PENALTY_MIN_DURATION = 0.1
PENALTY_DURATION_SPAN = 0.4
PENALTY_MIN_VELOCITY = 0.5
PENALTY_VELOCITY_SPAN = 0.5

# Instruments loaded at startup
DEFAULT_INSTRUMENTS = (
    "bass-electric",
    "violin",
    "piano",
    "trumpet",
    "saxophone",
    "trombone",
    "flute",
)

# Lane colours, left to right
COLUMN_COLOURS = {0: "green", 1: "red", 2: "blue", 3: "yellow"}

# General MIDI programs (0-based) for the instrument names used by datasets
GM_PROGRAMS = {
    "piano": 0,
    "bass-electric": 33,
    "violin": 40,
    "trumpet": 56,
    "trombone": 57,
    "saxophone": 65,
    "flute": 73,
}
