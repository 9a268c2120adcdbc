"""CRC-16/X-25 helpers for CFA635 packets.

Polynomial 0x1021 (reflected 0x8408), initial value 0xFFFF, reflected in and
out, final XOR 0xFFFF. The CRC is appended little-endian.
"""

from __future__ import annotations


def _build_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ 0x8408 if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _build_table()


def crc16_x25(data: bytes) -> int:
    crc = 0xFFFF
    for b in data:
        crc = (crc >> 8) ^ _TABLE[(crc ^ b) & 0xFF]
    return crc ^ 0xFFFF


def append_crc(data: bytes) -> bytes:
    """Return ``data`` followed by its little-endian CRC."""
    return bytes(data) + crc16_x25(data).to_bytes(2, "little")


def strip_crc(data: bytes) -> tuple[bytes, bool]:
    """Split off a trailing little-endian CRC and check it.

    Returns the bytes without the CRC and whether the CRC matched. Buffers
    shorter than the CRC itself are reported as invalid.
    """
    if len(data) < 2:
        return bytes(data), False
    body = bytes(data[:-2])
    expected = int.from_bytes(data[-2:], "little")
    return body, crc16_x25(body) == expected
