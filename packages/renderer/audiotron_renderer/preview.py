"""Render a DisplayState to an image for debugging without hardware."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

from PIL import Image, ImageDraw, ImageFont

from audiotron_display.charset import to_unicode
from audiotron_display.models import LCD_HEIGHT, LCD_WIDTH, SPRITE_SLOTS
from audiotron_display.state import SPACE, DisplayState

from .sprites import SPRITE_HEIGHT, SPRITE_WIDTH, validate_sprite

BACKGROUND = (24, 72, 160)
PIXEL_ON = (235, 245, 255)
PIXEL_OFF = (40, 90, 180)
CELL_GAP = 1
BORDER = 4


def cell_origin(col: int, row: int, scale: int) -> tuple[int, int]:
    x = BORDER * scale + col * (SPRITE_WIDTH + CELL_GAP) * scale
    y = BORDER * scale + row * (SPRITE_HEIGHT + CELL_GAP) * scale
    return x, y


def render_image(
    state: DisplayState,
    sprites: Mapping[int, Sequence[int]] | None = None,
    scale: int = 4,
) -> Image.Image:
    """Draw ``state`` as the LCD would show it.

    Cells holding sprite codes 0-7 use ``sprites`` when given. Other codes are
    drawn with Pillow's built-in font, so the result only approximates the
    module's character ROM.
    """
    scale = max(1, int(scale))
    width = (2 * BORDER + LCD_WIDTH * (SPRITE_WIDTH + CELL_GAP) - CELL_GAP) * scale
    height = (2 * BORDER + LCD_HEIGHT * (SPRITE_HEIGHT + CELL_GAP) - CELL_GAP) * scale
    img = Image.new("RGB", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()
    glyphs = {index: validate_sprite(rows) for index, rows in (sprites or {}).items()}

    for row_index, row in enumerate(state):
        for col_index, code in enumerate(row):
            x0, y0 = cell_origin(col_index, row_index, scale)
            x1 = x0 + SPRITE_WIDTH * scale - 1
            y1 = y0 + SPRITE_HEIGHT * scale - 1
            draw.rectangle((x0, y0, x1, y1), fill=PIXEL_OFF)
            if code < SPRITE_SLOTS:
                rows = glyphs.get(code)
                if rows is None:
                    continue
                for y, mask in enumerate(rows):
                    for x in range(SPRITE_WIDTH):
                        if mask & (1 << (SPRITE_WIDTH - 1 - x)):
                            px, py = x0 + x * scale, y0 + y * scale
                            draw.rectangle((px, py, px + scale - 1, py + scale - 1), fill=PIXEL_ON)
            elif code != SPACE:
                draw.text((x0 + scale, y0), to_unicode(bytes([code]), "?"), fill=PIXEL_ON, font=font)
    return img


def save_preview(
    state: DisplayState,
    path: str | Path,
    sprites: Mapping[int, Sequence[int]] | None = None,
    scale: int = 4,
) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    render_image(state, sprites, scale).save(out, format="PNG")
    return out
