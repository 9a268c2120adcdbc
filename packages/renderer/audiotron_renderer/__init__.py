"""View collaborators for the CFA635 driver: sprites, clock, text layout, previews."""

from .clock import CLOCK_SPRITES, blit_digit, clock_view
from .preview import render_image, save_preview
from .sprites import parse_sprite_rows, sprite_from_image, sprite_to_image, validate_sprite
from .text import ellipsize, put_wrapped

__all__ = [
    "CLOCK_SPRITES",
    "blit_digit",
    "clock_view",
    "ellipsize",
    "parse_sprite_rows",
    "put_wrapped",
    "render_image",
    "save_preview",
    "sprite_from_image",
    "sprite_to_image",
    "validate_sprite",
]
