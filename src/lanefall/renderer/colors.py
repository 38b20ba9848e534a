"""Color palette."""

# RGB tuples
BG = (18, 18, 24)
PLAYFIELD = (28, 28, 38)
LANE_LINE = (60, 60, 76)
BOTTOM_ROW_LINE = (200, 200, 210)
HUD_TEXT = (220, 220, 220)
GAME_OVER = (220, 60, 60)

LANE_COLORS = {
    "green": (80, 200, 100),
    "red": (220, 60, 60),
    "blue": (66, 135, 245),
    "yellow": (240, 210, 60),
}
