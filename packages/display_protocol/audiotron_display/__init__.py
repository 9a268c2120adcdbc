"""Driver for Crystalfontz CFA635 character LCD modules."""

from .charset import Encoder, encode_char, to_unicode, transliterate
from .crc import append_crc, crc16_x25, strip_crc
from .errors import (
    CFA635Error,
    CommandFailedError,
    CommandTimeoutError,
    CommandValidationError,
    ConnectionClosedError,
    IndexOutOfRangeError,
    InvalidSpriteError,
    PayloadTooLargeError,
    ReportDecodeError,
    ReportTimeoutError,
    TransportError,
)
from .framer import FramerStats, PacketFramer
from .models import Command, FanSpeed, Key, KeyActivity, Packet, Report, ReportType, SerialDevice, Temperature
from .module import Module
from .replay import ReplayEvent, ReplayReport, ReplayRunner
from .state import DisplayState, RowWrite, cleared, diff, diff_and_apply
from .transport import DisplayTransport, auto_select_device, is_compatible

__all__ = [
    "CFA635Error",
    "Command",
    "CommandFailedError",
    "CommandTimeoutError",
    "CommandValidationError",
    "ConnectionClosedError",
    "DisplayState",
    "DisplayTransport",
    "Encoder",
    "FanSpeed",
    "FramerStats",
    "IndexOutOfRangeError",
    "InvalidSpriteError",
    "Key",
    "KeyActivity",
    "Module",
    "Packet",
    "PacketFramer",
    "PayloadTooLargeError",
    "ReplayEvent",
    "ReplayReport",
    "ReplayRunner",
    "Report",
    "ReportDecodeError",
    "ReportTimeoutError",
    "ReportType",
    "RowWrite",
    "SerialDevice",
    "Temperature",
    "TransportError",
    "append_crc",
    "auto_select_device",
    "cleared",
    "crc16_x25",
    "diff",
    "diff_and_apply",
    "encode_char",
    "is_compatible",
    "strip_crc",
    "to_unicode",
    "transliterate",
]
