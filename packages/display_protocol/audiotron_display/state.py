"""LCD contents as a value, and minimal updates between two of them."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from .models import LCD_HEIGHT, LCD_WIDTH

SPACE = 0x20


class Writer(Protocol):
    def write(self, col: int, row: int, data: bytes) -> None: ...


@dataclass(frozen=True)
class RowWrite:
    col: int
    row: int
    data: bytes


class DisplayState:
    """The 4x20 grid of device character codes shown on the LCD."""

    __slots__ = ("_rows",)

    def __init__(self, rows: list[bytes | bytearray] | None = None) -> None:
        if rows is None:
            self._rows = [bytearray([SPACE] * LCD_WIDTH) for _ in range(LCD_HEIGHT)]
            return
        if len(rows) != LCD_HEIGHT or any(len(r) != LCD_WIDTH for r in rows):
            raise ValueError(f"display state must be {LCD_HEIGHT} rows of {LCD_WIDTH} bytes")
        self._rows = [bytearray(r) for r in rows]

    @classmethod
    def cleared(cls) -> "DisplayState":
        return cls()

    def copy(self) -> "DisplayState":
        return DisplayState(self._rows)

    def __getitem__(self, row: int) -> bytearray:
        return self._rows[row]

    def __iter__(self) -> Iterator[bytearray]:
        return iter(self._rows)

    def __len__(self) -> int:
        return LCD_HEIGHT

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DisplayState):
            return NotImplemented
        return self._rows == other._rows

    __hash__ = None  # type: ignore[assignment]

    def put(self, col: int, row: int, data: bytes) -> None:
        """Copy bytes into one row starting at ``col``, dropping any overflow."""
        if not (0 <= col < LCD_WIDTH and 0 <= row < LCD_HEIGHT):
            raise IndexError(f"position ({col}, {row}) is off the display")
        chunk = bytes(data[: LCD_WIDTH - col])
        self._rows[row][col : col + len(chunk)] = chunk

    def write(self, col: int, row: int, data: bytes) -> None:
        """Same as ``put``; lets layout helpers draw into a state or onto a module."""
        self.put(col, row, data)

    def __repr__(self) -> str:
        lines = ", ".join(bytes(r).hex() for r in self._rows)
        return f"DisplayState({lines})"


def cleared() -> DisplayState:
    return DisplayState.cleared()


def diff(old: DisplayState, new: DisplayState) -> list[RowWrite]:
    """One write per changed row, spanning first to last differing cell."""
    writes: list[RowWrite] = []
    for y in range(LCD_HEIGHT):
        a, b = old[y], new[y]
        first = 0
        while first < LCD_WIDTH and a[first] == b[first]:
            first += 1
        if first == LCD_WIDTH:
            continue
        last = LCD_WIDTH - 1
        while last > first and a[last] == b[last]:
            last -= 1
        writes.append(RowWrite(col=first, row=y, data=bytes(b[first : last + 1])))
    return writes


def diff_and_apply(old: DisplayState, new: DisplayState, writer: Writer) -> int:
    """Send the writes that turn ``old`` into ``new``; returns how many were sent."""
    if old == new:
        return 0
    writes = diff(old, new)
    for w in writes:
        writer.write(w.col, w.row, w.data)
    return len(writes)
