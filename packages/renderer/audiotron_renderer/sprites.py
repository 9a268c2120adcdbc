"""Sprite bitmaps for the module's eight programmable character slots."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from PIL import Image

from audiotron_display.errors import InvalidSpriteError
from audiotron_display.models import SPRITE_ROWS

SPRITE_WIDTH = 6
SPRITE_HEIGHT = SPRITE_ROWS
ROW_MASK = (1 << SPRITE_WIDTH) - 1

Sprite = tuple[int, ...]


def validate_sprite(rows: Sequence[int]) -> Sprite:
    if len(rows) != SPRITE_HEIGHT:
        raise InvalidSpriteError(f"sprite needs {SPRITE_HEIGHT} rows, got {len(rows)}")
    for row in rows:
        if not 0 <= row <= ROW_MASK:
            raise InvalidSpriteError(f"sprite row 0x{row:02X} uses more than {SPRITE_WIDTH} bits")
    return tuple(rows)


def parse_sprite_rows(text: str) -> Sprite:
    """Parse eight row masks such as ``"0x01,0x03,..."`` or ``"01 03 07 ..."``.

    Bare tokens are read as hex; ``0x``/``0b`` prefixes are honoured.
    """
    tokens = [t for t in re.split(r"[\s,]+", text.strip()) if t]
    rows = []
    for token in tokens:
        try:
            rows.append(int(token, 0) if token[:2].lower() in ("0x", "0b") else int(token, 16))
        except ValueError as exc:
            raise InvalidSpriteError(f"bad sprite row {token!r}") from exc
    return validate_sprite(rows)


def sprite_from_image(source: Image.Image | str | Path, threshold: int = 128, invert: bool = False) -> Sprite:
    """Convert a 6x8 image to row masks.

    Dark pixels are lit segments unless ``invert`` is set. Larger images are
    scaled down with nearest-neighbour sampling first.
    """
    image = source if isinstance(source, Image.Image) else Image.open(source)
    if image.size != (SPRITE_WIDTH, SPRITE_HEIGHT):
        image = image.resize((SPRITE_WIDTH, SPRITE_HEIGHT), Image.Resampling.NEAREST)
    gray = image.convert("L")
    rows = []
    for y in range(SPRITE_HEIGHT):
        mask = 0
        for x in range(SPRITE_WIDTH):
            lit = gray.getpixel((x, y)) < threshold
            if lit != invert:
                mask |= 1 << (SPRITE_WIDTH - 1 - x)
        rows.append(mask)
    return tuple(rows)


def sprite_to_image(rows: Sequence[int], on=(0, 0, 0), off=(255, 255, 255)) -> Image.Image:
    sprite = validate_sprite(rows)
    img = Image.new("RGB", (SPRITE_WIDTH, SPRITE_HEIGHT), off)
    px = img.load()
    for y, mask in enumerate(sprite):
        for x in range(SPRITE_WIDTH):
            if mask & (1 << (SPRITE_WIDTH - 1 - x)):
                px[x, y] = on
    return img
