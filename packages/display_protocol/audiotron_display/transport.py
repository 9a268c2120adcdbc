"""Serial transport for USB-attached CFA635 modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import serial
from serial.tools import list_ports

from .errors import ConnectionClosedError, TransportError
from .models import SerialDevice

DEFAULT_BAUD = 115200
READ_POLL_MS = 50

_DEVICE_MARKERS = ("CFA635", "CRYSTALFONTZ")
CRYSTALFONTZ_VID = 0x223B


@dataclass
class SerialConfig:
    port: str
    baud: int = DEFAULT_BAUD
    poll_ms: int = READ_POLL_MS
    write_timeout_ms: int = 500


class DisplayTransport:
    """Thin wrapper over pyserial with the module's fixed 8N1 settings."""

    def __init__(self) -> None:
        self._serial: Any | None = None
        self.config: SerialConfig | None = None

    @property
    def is_open(self) -> bool:
        ser = self._serial
        return bool(ser is not None and ser.is_open)

    def open(self, port: str, baud: int = DEFAULT_BAUD, poll_ms: int = READ_POLL_MS) -> None:
        if self.is_open:
            return
        self.config = SerialConfig(port=port, baud=baud, poll_ms=poll_ms)
        try:
            self._serial = serial.Serial(
                port=port,
                baudrate=baud,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=max(poll_ms, 1) / 1000,
                write_timeout=self.config.write_timeout_ms / 1000,
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            self._serial = None
            raise TransportError(f"could not open {port}: {exc}") from exc

    def close(self) -> None:
        ser = self._serial
        self._serial = None
        if ser is None:
            return
        if hasattr(ser, "cancel_read"):
            # Wakes a reader thread blocked in read().
            ser.cancel_read()
        ser.close()

    def write(self, payload: bytes) -> int:
        ser = self._serial
        if ser is None or not ser.is_open:
            raise ConnectionClosedError("serial port is not open")
        try:
            written = int(ser.write(payload))
            ser.flush()
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"serial write failed: {exc}") from exc
        if written != len(payload):
            raise TransportError(f"short write: {written}/{len(payload)} bytes")
        return written

    def read(self) -> bytes:
        """Return the bytes available after waiting at most one poll interval."""
        ser = self._serial
        if ser is None or not ser.is_open:
            raise ConnectionClosedError("serial port is not open")
        try:
            data = bytes(ser.read(1))
            if data and ser.in_waiting:
                data += bytes(ser.read(ser.in_waiting))
        except (serial.SerialException, OSError, TypeError) as exc:
            if self._serial is None:
                raise ConnectionClosedError("serial port closed during read") from exc
            raise TransportError(f"serial read failed: {exc}") from exc
        return data

    def flush_input(self) -> None:
        if self.is_open:
            self._serial.reset_input_buffer()

    @staticmethod
    def discover() -> list[SerialDevice]:
        devices: list[SerialDevice] = []
        for item in list_ports.comports():
            devices.append(
                SerialDevice(
                    device=item.device,
                    description=item.description or "",
                    hwid=item.hwid or "",
                    vid=item.vid,
                    pid=item.pid,
                )
            )
        return devices


def is_compatible(device: SerialDevice) -> bool:
    if device.vid == CRYSTALFONTZ_VID:
        return True
    text = f"{device.description} {device.hwid}".upper()
    return any(marker in text for marker in _DEVICE_MARKERS)


def auto_select_device(devices: list[SerialDevice]) -> SerialDevice | None:
    """Pick the first port that identifies itself as a Crystalfontz module."""
    for d in devices:
        if is_compatible(d):
            return d
    return None
