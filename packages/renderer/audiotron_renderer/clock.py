"""Large-digit clock drawn with eight custom sprites.

Each digit is three cells wide and all four rows tall. The sprites occupy
slots 0-7 and must be loaded from ``CLOCK_SPRITES`` before a clock state is shown.
"""

from __future__ import annotations

from datetime import datetime

from audiotron_display.models import LCD_HEIGHT, LCD_WIDTH
from audiotron_display.state import DisplayState

from .sprites import Sprite

LOWER_HALF = 0
UPPER_HALF = 1
LOWER_HALF_EDGE = 2
UPPER_HALF_EDGE = 3
FULL_BLOCK = 4
FULL_BLOCK_EDGE = 5
LOWER_RIGHT = 6
RIGHT_LOWER_EDGE = 7

CLOCK_SPRITES: dict[int, Sprite] = {
    LOWER_HALF: (0x00, 0x00, 0x00, 0x00, 0x00, 0x3F, 0x3F, 0x3F),
    UPPER_HALF: (0x3F, 0x3F, 0x3F, 0x00, 0x00, 0x00, 0x00, 0x00),
    LOWER_HALF_EDGE: (0x00, 0x00, 0x00, 0x00, 0x00, 0x0F, 0x0F, 0x0F),
    UPPER_HALF_EDGE: (0x0F, 0x0F, 0x0F, 0x00, 0x00, 0x00, 0x00, 0x00),
    FULL_BLOCK: (0x3F,) * 8,
    FULL_BLOCK_EDGE: (0x0F,) * 8,
    LOWER_RIGHT: (0x01, 0x03, 0x07, 0x0F, 0x1F, 0x3F, 0x3F, 0x3F),
    RIGHT_LOWER_EDGE: (0x01, 0x03, 0x07, 0x0F, 0x0F, 0x0F, 0x0F, 0x0F),
}

COLON = 0xBB

_GLYPH_CELLS = {
    "L": LOWER_HALF,
    "U": UPPER_HALF,
    "l": LOWER_HALF_EDGE,
    "u": UPPER_HALF_EDGE,
    "F": FULL_BLOCK,
    "f": FULL_BLOCK_EDGE,
    "R": LOWER_RIGHT,
    "r": RIGHT_LOWER_EDGE,
}

# One string per row; a space leaves the cell untouched.
_DIGITS = {
    0: ("rFF", "f F", "f F", "fFF"),
    1: ("  R", "  F", "  F", "  F"),
    2: ("rFF", "lLF", "fUU", "fFF"),
    3: ("rFF", "lLF", "uUF", "fFF"),
    4: ("r F", "fLF", "uUF", "  F"),
    5: ("rFF", "fLL", "uUF", "fFF"),
    6: ("rFF", "fLL", "fUF", "fFF"),
    7: ("rFF", "  F", "  F", "  F"),
    8: ("rFF", "fLF", "fUF", "fFF"),
    9: ("rFF", "fLF", "uUF", "  F"),
}


def blit_digit(state: DisplayState, digit: int, x: int) -> None:
    """Draw ``digit`` with its left edge at column ``x``; cells off the display are clipped."""
    for y, pattern in enumerate(_DIGITS[digit]):
        for dx, glyph in enumerate(pattern):
            col = x + dx
            if glyph != " " and 0 <= col < LCD_WIDTH and y < LCD_HEIGHT:
                state[y][col] = _GLYPH_CELLS[glyph]


def _colon(state: DisplayState, col: int) -> None:
    state[1][col] = COLON
    state[2][col] = COLON


def clock_view(now: datetime, twelve_hour: bool = True) -> DisplayState:
    """Render H:MM:SS for ``now``.

    In 12-hour mode a leading 1 is drawn as its single right-hand column in
    column 0, and column 19 carries the am/pm marker. In 24-hour mode the six
    digits and two colons fill the whole width.
    """
    state = DisplayState()
    if twelve_hour:
        hour = now.hour % 12 or 12
        if hour >= 10:
            blit_digit(state, 1, -2)
            hour -= 10
        blit_digit(state, hour, 1)
        _colon(state, 4)
        blit_digit(state, now.minute // 10, 5)
        blit_digit(state, now.minute % 10, 8)
        _colon(state, 11)
        blit_digit(state, now.second // 10, 12)
        blit_digit(state, now.second % 10, 15)
        state[2][19] = ord("a") if now.hour < 12 else ord("p")
        state[3][19] = ord("m")
    else:
        x = 0
        for i, value in enumerate((now.hour, now.minute, now.second)):
            if i:
                _colon(state, x)
                x += 1
            blit_digit(state, value // 10, x)
            blit_digit(state, value % 10, x + 3)
            x += 6
    return state
