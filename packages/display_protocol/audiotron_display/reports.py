"""Decoding of device-initiated report packets."""

from __future__ import annotations

from .errors import (
    FanDisconnectedError,
    MalformedReportError,
    SensorFaultError,
    UnknownKeyError,
    UnknownReportTypeError,
)
from .models import FanSpeed, Key, KeyActivity, Packet, Report, ReportType, Temperature


def decode_key_activity(data: bytes) -> KeyActivity:
    """Codes 1-6 are presses of keys 1-6; codes 7-12 are their releases."""
    if len(data) < 1:
        raise MalformedReportError("failed to read key activity report: empty payload")
    code = data[0]
    if code == 0 or code > 12:
        raise UnknownKeyError(f"failed to read key activity report: unknown key code {code}")
    pressed = code <= 6
    return KeyActivity(key=Key(code if pressed else code - 6), pressed=pressed)


def decode_fan_speed(data: bytes) -> FanSpeed:
    if len(data) < 4:
        raise MalformedReportError(f"failed to read fan speed report: payload is {len(data)} bytes")
    if data[1] == 0 and data[2] == 0 and data[3] == 0:
        raise FanDisconnectedError(f"failed to read fan speed report: no fan board on sensor {data[0]}")
    return FanSpeed(
        sensor_index=data[0],
        tach_cycles=data[1],
        timer_ticks=int.from_bytes(data[2:4], "big"),
    )


def decode_temperature(data: bytes) -> Temperature:
    if len(data) < 4:
        raise MalformedReportError(f"failed to read temperature report: payload is {len(data)} bytes")
    if data[3] == 0:
        raise SensorFaultError(f"failed to read temperature report: sensor {data[0]} error")
    return Temperature(sensor_index=data[0], celsius=int.from_bytes(data[1:3], "big") / 16)


_DECODERS = {
    ReportType.KEY_ACTIVITY: decode_key_activity,
    ReportType.FAN_SPEED: decode_fan_speed,
    ReportType.TEMPERATURE: decode_temperature,
}


def decode_report(packet: Packet) -> Report:
    """Convert a report packet into a KeyActivity, FanSpeed, or Temperature."""
    try:
        decoder = _DECODERS[ReportType(packet.type)]
    except ValueError:
        raise UnknownReportTypeError(f"failed to read report: unknown type 0x{packet.type:02X}") from None
    return decoder(packet.data)
