"""Splits verified packets into the report and response streams."""

from __future__ import annotations

import logging
import queue
from typing import Any

from .errors import ReportDecodeError
from .models import Packet
from .reports import decode_report

logger = logging.getLogger(__name__)

# Placed on both queues once the packet stream has ended.
END_OF_STREAM = object()


class PacketRouter:
    """Delivers reports and responses on independent bounded queues.

    Puts never block: when a consumer falls behind, the oldest queued item is
    discarded to make room, so a stalled report reader cannot hold up command
    responses and vice versa.
    """

    def __init__(self, reports: queue.Queue, responses: queue.Queue) -> None:
        self.reports = reports
        self.responses = responses
        self.dropped_reports = 0
        self.dropped_responses = 0
        self.decode_errors = 0

    def route(self, packet: Packet) -> None:
        if packet.is_report:
            try:
                report = decode_report(packet)
            except ReportDecodeError as exc:
                self.decode_errors += 1
                logger.warning("dropped report: %s", exc, extra={"event": "report_decode_error"})
                return
            if not _offer(self.reports, report):
                self.dropped_reports += 1
                logger.warning("report queue full, dropped oldest report", extra={"event": "report_dropped"})
        else:
            if not _offer(self.responses, packet):
                self.dropped_responses += 1
                logger.warning("response queue full, dropped oldest response", extra={"event": "response_dropped"})

    def close(self) -> None:
        _offer(self.reports, END_OF_STREAM)
        _offer(self.responses, END_OF_STREAM)


def _offer(q: queue.Queue, item: Any) -> bool:
    """Enqueue without blocking; returns False if an older item was evicted."""
    try:
        q.put_nowait(item)
        return True
    except queue.Full:
        pass
    try:
        q.get_nowait()
    except queue.Empty:
        pass
    try:
        q.put_nowait(item)
    except queue.Full:
        logger.error("could not enqueue item after eviction", extra={"event": "queue_contention"})
    return False
