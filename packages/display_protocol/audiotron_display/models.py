"""Typed models for CFA635 packets, commands, and reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

LCD_WIDTH = 20
LCD_HEIGHT = 4
MAX_DATA_LENGTH = 22
MAX_PING_LENGTH = 16
SPRITE_SLOTS = 8
SPRITE_ROWS = 8
LED_COUNT = 4

RESPONSE_FLAG = 0x40
CLASS_MASK = 0b1100_0000
REPORT_CLASS = 0b10


class Command(IntEnum):
    PING = 0x00
    CLEAR = 0x06
    SET_CHARACTER = 0x09
    SET_BACKLIGHT = 0x0E
    WRITE = 0x1F
    SET_LED = 0x22

    @property
    def response(self) -> int:
        return int(self) | RESPONSE_FLAG


class ReportType(IntEnum):
    KEY_ACTIVITY = 0x80
    FAN_SPEED = 0x81
    TEMPERATURE = 0x82


class Key(IntEnum):
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4
    ENTER = 5
    EXIT = 6


@dataclass(frozen=True)
class Packet:
    """A CRC-verified packet with the CRC stripped."""

    type: int
    data: bytes

    @property
    def is_report(self) -> bool:
        return (self.type & CLASS_MASK) >> 6 == REPORT_CLASS

    def __repr__(self) -> str:
        return f"Packet(type=0x{self.type:02X}, data={self.data.hex(' ') if self.data else '(empty)'})"


@dataclass(frozen=True)
class KeyActivity:
    key: Key
    pressed: bool


@dataclass(frozen=True)
class FanSpeed:
    sensor_index: int
    tach_cycles: int
    timer_ticks: int


@dataclass(frozen=True)
class Temperature:
    sensor_index: int
    celsius: float


Report = Union[KeyActivity, FanSpeed, Temperature]


@dataclass(frozen=True)
class SerialDevice:
    device: str
    description: str
    hwid: str
    vid: int | None
    pid: int | None
