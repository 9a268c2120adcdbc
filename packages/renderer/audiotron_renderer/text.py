"""Text layout helpers working in device bytes."""

from __future__ import annotations

from audiotron_display.models import LCD_HEIGHT, LCD_WIDTH
from audiotron_display.state import Writer


def put_wrapped(writer: Writer, col: int, row: int, data: bytes) -> tuple[int, int]:
    """Write ``data`` from (col, row), continuing at column 0 of following rows.

    Whatever does not fit above the last row is dropped. Returns the position
    just after the last byte written.
    """
    data = bytes(data)
    while data and row < LCD_HEIGHT:
        room = LCD_WIDTH - col
        chunk, data = data[:room], data[room:]
        writer.write(col, row, chunk)
        col += len(chunk)
        if col >= LCD_WIDTH:
            col = 0
            row += 1
    return col, row


def ellipsize(data: bytes, width: int = LCD_WIDTH, ellipsis: int = 0x2E) -> bytes:
    """Fit ``data`` into ``width`` cells; when cut, the last cell holds ``ellipsis``."""
    data = bytes(data)
    if len(data) <= width:
        return data
    return data[: width - 1] + bytes([ellipsis])
