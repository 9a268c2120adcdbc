"""Replay/analysis utilities for captured serial transcripts.

A transcript is JSON lines, one capture chunk per line::

    {"dir": "host_to_device", "hex": "1F 05 00 00 48 69 21 ..."}
    {"dir": "device_to_host", "hex": "5F 00 ..."}

Each direction is concatenated and run through the real packet framer, so a
replay reports exactly what the driver would have accepted or dropped.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ReportDecodeError
from .framer import FramerStats, PacketFramer, iter_byte_source
from .models import Command, Packet, ReportType
from .reports import decode_report

_HEX_CLEAN = re.compile(r"[^0-9a-fA-F]")

HOST_TO_DEVICE = "host_to_device"
DEVICE_TO_HOST = "device_to_host"


@dataclass(frozen=True)
class ReplayEvent:
    line: int
    direction: str
    payload: bytes


@dataclass
class ReplayReport:
    total_events: int = 0
    host_to_device_bytes: int = 0
    device_to_host_bytes: int = 0
    commands: dict[str, int] = field(default_factory=dict)
    responses: dict[str, int] = field(default_factory=dict)
    reports: dict[str, int] = field(default_factory=dict)
    unanswered_commands: int = 0
    host_framing: FramerStats = field(default_factory=FramerStats)
    device_framing: FramerStats = field(default_factory=FramerStats)
    errors: list[str] = field(default_factory=list)


def _name(code: int) -> str:
    try:
        return Command(code).name
    except ValueError:
        return f"0x{code:02X}"


def _bump(counter: dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


class ReplayRunner:
    @staticmethod
    def _decode_hex(value: str) -> bytes:
        cleaned = _HEX_CLEAN.sub("", value)
        if len(cleaned) % 2 == 1:
            cleaned = cleaned[:-1]
        if not cleaned:
            return b""
        return bytes.fromhex(cleaned)

    def _parse_line(self, line_no: int, line: str) -> ReplayEvent | None:
        stripped = line.strip()
        if not stripped:
            return None
        obj = json.loads(stripped)
        direction = obj.get("dir") or obj.get("direction") or "unknown"
        hex_value = obj.get("hex") or obj.get("payload_hex") or ""
        return ReplayEvent(line=line_no, direction=direction, payload=self._decode_hex(str(hex_value)))

    def parse(self, transcript_path: Path) -> list[ReplayEvent]:
        events: list[ReplayEvent] = []
        for idx, line in enumerate(transcript_path.read_text(encoding="utf-8").splitlines(), start=1):
            event = self._parse_line(idx, line)
            if event is not None:
                events.append(event)
        return events

    @staticmethod
    def _frame(data: bytes) -> tuple[list[Packet], FramerStats]:
        # A capture has no timing, so the packet timeout never fires.
        framer = PacketFramer(iter_byte_source(data), clock=lambda: 0.0)
        return list(framer.packets()), framer.stats

    def run(self, transcript_path: Path, strict: bool = True) -> ReplayReport:
        events = self.parse(transcript_path)
        report = ReplayReport(total_events=len(events))

        host = bytearray()
        device = bytearray()
        for event in events:
            if event.direction == HOST_TO_DEVICE:
                host += event.payload
            elif event.direction == DEVICE_TO_HOST:
                device += event.payload
            else:
                report.errors.append(f"line {event.line}: unknown direction {event.direction!r}")
        report.host_to_device_bytes = len(host)
        report.device_to_host_bytes = len(device)

        commands, report.host_framing = self._frame(bytes(host))
        for packet in commands:
            _bump(report.commands, _name(packet.type))

        responses = 0
        packets, report.device_framing = self._frame(bytes(device))
        for packet in packets:
            if packet.is_report:
                try:
                    decode_report(packet)
                except ReportDecodeError as exc:
                    report.errors.append(str(exc))
                    continue
                _bump(report.reports, ReportType(packet.type).name)
            else:
                responses += 1
                label = _name(packet.type & 0x3F)
                if packet.type & 0xC0 == 0xC0:
                    label += "_ERROR"
                _bump(report.responses, label)
        report.unanswered_commands = max(0, len(commands) - responses)

        if strict:
            for stats, side in ((report.host_framing, "host"), (report.device_framing, "device")):
                if stats.crc_failures:
                    report.errors.append(f"{side}_crc_failures")
                if stats.length_errors:
                    report.errors.append(f"{side}_length_errors")
                if stats.timeouts:
                    report.errors.append(f"{side}_timeouts")
            if report.unanswered_commands:
                report.errors.append("unanswered_commands")

        return report
