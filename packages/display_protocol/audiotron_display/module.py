"""Command/response handling for a connected CFA635 module.

Example::

    with Module.open("/dev/ttyUSB0") as lcd:
        lcd.clear()
        lcd.write(0, 0, transliterate("Hello, world!"))

The wire format carries no request identifiers. Responses are paired with
requests purely by arrival order, which is only sound because a single lock
keeps at most one command in flight for the whole write-and-wait round trip.
A response that arrives after its command timed out is discarded at the start
of the next command; one that arrives later still, while the next command is
already waiting, will be taken as that command's answer. Callers should treat
repeated timeouts as a dead connection rather than retrying.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Sequence
from typing import Callable

from .crc import append_crc
from .errors import (
    CommandFailedError,
    CommandTimeoutError,
    ConnectionClosedError,
    IndexOutOfRangeError,
    InvalidSpriteError,
    PayloadTooLargeError,
    ReportTimeoutError,
)
from .framer import PACKET_TIMEOUT_S, PacketFramer, TransportByteSource
from .models import (
    LCD_HEIGHT,
    LCD_WIDTH,
    LED_COUNT,
    MAX_DATA_LENGTH,
    MAX_PING_LENGTH,
    SPRITE_ROWS,
    SPRITE_SLOTS,
    Command,
    Packet,
    Report,
)
from .router import END_OF_STREAM, PacketRouter
from .transport import DEFAULT_BAUD, DisplayTransport

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT_S = 0.25
REPORT_QUEUE_SIZE = 64
RESPONSE_QUEUE_SIZE = 4


class Module:
    """Handle to a CFA635 module over a byte transport.

    The transport needs ``write(bytes)``, ``read() -> bytes`` (empty when
    nothing arrived within its poll interval, ``ConnectionClosedError`` once
    closed), and ``close()``. A background thread owns the read side for the
    lifetime of the connection.
    """

    def __init__(
        self,
        transport,
        command_timeout: float = COMMAND_TIMEOUT_S,
        packet_timeout: float = PACKET_TIMEOUT_S,
        report_queue_size: int = REPORT_QUEUE_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self.command_timeout = command_timeout
        self._lock = threading.Lock()
        self._reports: queue.Queue = queue.Queue(maxsize=max(1, report_queue_size))
        self._responses: queue.Queue = queue.Queue(maxsize=RESPONSE_QUEUE_SIZE)
        self.router = PacketRouter(self._reports, self._responses)
        self.framer = PacketFramer(
            TransportByteSource(transport, clock=clock).read_byte,
            timeout=packet_timeout,
            clock=clock,
        )
        self._closed = False
        self._reader = threading.Thread(target=self._read_loop, name="cfa635-reader", daemon=True)
        self._reader.start()

    @classmethod
    def open(cls, port: str, baud: int = DEFAULT_BAUD, **kwargs) -> "Module":
        transport = DisplayTransport()
        transport.open(port=port, baud=baud)
        transport.flush_input()
        logger.info("opened %s at %d baud", port, baud, extra={"event": "module_open"})
        return cls(transport, **kwargs)

    def __enter__(self) -> "Module":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the transport; the reader thread then winds down."""
        if self._closed:
            return
        self._closed = True
        self._transport.close()
        if self._reader is not threading.current_thread():
            self._reader.join(timeout=1.0)
        logger.info("module closed", extra={"event": "module_closed"})

    def _read_loop(self) -> None:
        try:
            for packet in self.framer.packets():
                self.router.route(packet)
        finally:
            self.router.close()
            logger.debug("reader stopped", extra={"event": "reader_stopped"})

    # Reports

    def read_report(self, timeout: float | None = None) -> Report | None:
        """Block until the module sends a report.

        Returns None once the connection has ended. Raises
        ``ReportTimeoutError`` only if ``timeout`` is given and expires.
        """
        try:
            item = self._reports.get(timeout=timeout)
        except queue.Empty:
            raise ReportTimeoutError(f"no report within {timeout:.3f} s") from None
        if item is END_OF_STREAM:
            self._reports.put_nowait(END_OF_STREAM)
            return None
        return item

    # Commands

    def raw_command(self, code: int, payload: bytes = b"") -> tuple[int, bytes]:
        """Send one command and return ``(response_code, response_payload)``."""
        if not 0 <= code <= 0xFF:
            raise IndexOutOfRangeError(f"command code must be 0-255, got {code}")
        if len(payload) > MAX_DATA_LENGTH:
            raise PayloadTooLargeError(f"payload is {len(payload)} bytes, limit {MAX_DATA_LENGTH}")
        packet = append_crc(bytes([code, len(payload)]) + bytes(payload))

        with self._lock:
            self._discard_stale_responses()
            self._transport.write(packet)
            try:
                item = self._responses.get(timeout=self.command_timeout)
            except queue.Empty:
                logger.warning(
                    "command 0x%02X timed out after %.0f ms",
                    code,
                    self.command_timeout * 1000,
                    extra={"event": "command_timeout"},
                )
                raise CommandTimeoutError(f"command 0x{code:02X} timed out") from None

        if item is END_OF_STREAM:
            self._responses.put_nowait(END_OF_STREAM)
            raise ConnectionClosedError("connection to module closed")
        response: Packet = item
        return response.type, response.data

    def _discard_stale_responses(self) -> None:
        while True:
            try:
                item = self._responses.get_nowait()
            except queue.Empty:
                return
            if item is END_OF_STREAM:
                self._responses.put_nowait(END_OF_STREAM)
                raise ConnectionClosedError("connection to module closed")
            logger.warning("discarded late response %r", item, extra={"event": "stale_response"})

    def _simple(self, command: Command, payload: bytes, want_payload: bytes = b"") -> None:
        code, data = self.raw_command(command, payload)
        if code != command.response or ((want_payload or data) and data != want_payload):
            raise CommandFailedError(
                f"{command.name} failed: got response 0x{code:02X} with payload {data.hex() or '(empty)'}"
            )

    def ping(self, payload: bytes = b"") -> None:
        """Ping with up to 16 bytes, which the module must echo back."""
        payload = bytes(payload)
        if len(payload) > MAX_PING_LENGTH:
            raise PayloadTooLargeError(f"ping payload is {len(payload)} bytes, limit {MAX_PING_LENGTH}")
        self._simple(Command.PING, payload, payload)

    def clear(self) -> None:
        """Clear the LCD; afterwards every cell holds 0x20."""
        self._simple(Command.CLEAR, b"")

    def set_sprite(self, index: int, rows: Sequence[int]) -> None:
        """Define sprite ``index`` (0-7) from eight 6-bit row masks."""
        if not 0 <= index < SPRITE_SLOTS:
            raise IndexOutOfRangeError(f"sprite index must be 0-{SPRITE_SLOTS - 1}, got {index}")
        if len(rows) != SPRITE_ROWS:
            raise InvalidSpriteError(f"sprite needs {SPRITE_ROWS} rows, got {len(rows)}")
        for row in rows:
            if not 0 <= row <= 0b0011_1111:
                raise InvalidSpriteError(f"sprite row 0x{row:02X} uses more than 6 bits")
        self._simple(Command.SET_CHARACTER, bytes([index, *rows]))

    def set_backlight(self, lcd: int, keypad: int) -> None:
        """Set LCD and keypad backlight brightness, each 0-100."""
        if not (0 <= lcd <= 100 and 0 <= keypad <= 100):
            raise IndexOutOfRangeError(f"backlight must be 0-100, got lcd={lcd} keypad={keypad}")
        self._simple(Command.SET_BACKLIGHT, bytes([lcd, keypad]))

    def write(self, col: int, row: int, data: bytes) -> None:
        """Write device bytes at a position; overflow is truncated, never wrapped."""
        if not (0 <= col < LCD_WIDTH and 0 <= row < LCD_HEIGHT):
            raise IndexOutOfRangeError(f"position ({col}, {row}) is off the {LCD_WIDTH}x{LCD_HEIGHT} display")
        data = bytes(data[: LCD_WIDTH - col])
        self._simple(Command.WRITE, bytes([col, row]) + data)

    def set_led(self, index: int, green: bool, duty: int) -> None:
        """Set the red or green half of LED ``index`` (0-3, top to bottom)."""
        if not 0 <= index < LED_COUNT:
            raise IndexOutOfRangeError(f"LED index must be 0-{LED_COUNT - 1}, got {index}")
        if not 0 <= duty <= 100:
            raise IndexOutOfRangeError(f"LED duty cycle must be 0-100, got {duty}")
        gpio = 11 - 2 * index
        if not green:
            gpio += 1
        self._simple(Command.SET_LED, bytes([gpio, duty]))
