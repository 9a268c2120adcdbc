"""Packet reassembly from the CFA635 byte stream.

Each packet is ``type, length, data[length], crc_lo, crc_hi``. Once the type
byte has arrived the rest of the packet must follow within the packet timeout;
otherwise the partial packet is dropped and the framer waits for a new type
byte. Over-long length bytes and CRC failures are dropped the same way. None
of these are surfaced as exceptions: the framer is a background stream, so it
logs, counts, and carries on.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Optional

from .crc import strip_crc
from .errors import ConnectionClosedError, TransportError
from .models import MAX_DATA_LENGTH, Packet

logger = logging.getLogger(__name__)

PACKET_TIMEOUT_S = 0.25

# read_byte(timeout) -> byte, None on timeout; raises EOFError once the stream ends.
ReadByte = Callable[[Optional[float]], Optional[int]]


@dataclass
class FramerStats:
    packets: int = 0
    crc_failures: int = 0
    length_errors: int = 0
    timeouts: int = 0


class PacketFramer:
    def __init__(
        self,
        read_byte: ReadByte,
        timeout: float = PACKET_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._read_byte = read_byte
        self.timeout = timeout
        self._clock = clock
        self.stats = FramerStats()

    def packets(self) -> Iterator[Packet]:
        """Yield verified packets until the byte stream ends."""
        while True:
            try:
                packet = self.read_packet()
            except EOFError:
                logger.debug("byte stream ended", extra={"event": "framer_eof"})
                return
            if packet is not None:
                yield packet

    def read_packet(self) -> Packet | None:
        """Read one packet attempt; None means it was dropped."""
        typ = self._read_byte(None)
        deadline = self._clock() + self.timeout

        length = self._next_before(deadline)
        if length is None:
            return self._timed_out(typ)
        if length > MAX_DATA_LENGTH:
            self.stats.length_errors += 1
            logger.warning(
                "dropped packet type=0x%02X: data length %d exceeds %d",
                typ,
                length,
                MAX_DATA_LENGTH,
                extra={"event": "packet_length_error"},
            )
            return None

        frame = bytearray((typ, length))
        for _ in range(length + 2):
            b = self._next_before(deadline)
            if b is None:
                return self._timed_out(typ)
            frame.append(b)

        body, ok = strip_crc(frame)
        if not ok:
            self.stats.crc_failures += 1
            logger.warning(
                "dropped packet type=0x%02X: CRC failure",
                typ,
                extra={"event": "packet_crc_failure"},
            )
            return None

        self.stats.packets += 1
        return Packet(type=body[0], data=bytes(body[2:]))

    def _next_before(self, deadline: float) -> int | None:
        remaining = deadline - self._clock()
        if remaining <= 0:
            return None
        return self._read_byte(remaining)

    def _timed_out(self, typ: int) -> None:
        self.stats.timeouts += 1
        logger.warning(
            "dropped packet type=0x%02X: timed out after %.0f ms",
            typ,
            self.timeout * 1000,
            extra={"event": "packet_timeout"},
        )
        return None


class TransportByteSource:
    """Buffers transport reads and hands them out one byte at a time."""

    def __init__(self, transport, clock: Callable[[], float] = time.monotonic) -> None:
        self._transport = transport
        self._clock = clock
        self._buffer: deque[int] = deque()

    def read_byte(self, timeout: float | None = None) -> int | None:
        deadline = None if timeout is None else self._clock() + timeout
        while not self._buffer:
            if deadline is not None and self._clock() >= deadline:
                return None
            try:
                chunk = self._transport.read()
            except ConnectionClosedError as exc:
                raise EOFError(str(exc)) from exc
            except TransportError as exc:
                logger.error("serial read failed: %s", exc, extra={"event": "transport_read_error"})
                raise EOFError(str(exc)) from exc
            self._buffer.extend(chunk)
        return self._buffer.popleft()


def iter_byte_source(data: Iterable[int]) -> ReadByte:
    """Adapt an in-memory byte sequence; it never times out."""
    it = iter(data)

    def read_byte(timeout: float | None = None) -> int | None:
        try:
            return next(it)
        except StopIteration:
            raise EOFError("end of buffer") from None

    return read_byte
