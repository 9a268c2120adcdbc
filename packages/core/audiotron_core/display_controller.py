"""Pushes rendered views to a connected module with minimal traffic."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from audiotron_display import DisplayState, Module, auto_select_device, diff_and_apply
from audiotron_display.charset import to_unicode, transliterate
from audiotron_display.errors import TransportError
from audiotron_display.models import LCD_HEIGHT, LCD_WIDTH
from audiotron_display.transport import DisplayTransport
from audiotron_renderer.text import ellipsize, put_wrapped

from .config import AppConfig

logger = logging.getLogger(__name__)

_MAX_EVENTS = 1000


@dataclass
class ControllerStatus:
    connected: bool = False
    port: str | None = None
    brightness: int | None = None
    pushes: int = 0
    writes: int = 0
    reports: int = 0
    last_error: str | None = None


def open_module(cfg: AppConfig) -> tuple[Module, str]:
    port = cfg.device.port
    if not port:
        selected = auto_select_device(DisplayTransport.discover())
        if selected is None:
            raise TransportError("no compatible display found")
        port = selected.device
    module = Module.open(
        port,
        baud=cfg.device.baud,
        command_timeout=cfg.protocol.command_timeout_ms / 1000,
        packet_timeout=cfg.protocol.packet_timeout_ms / 1000,
        report_queue_size=cfg.protocol.report_queue_size,
    )
    return module, port


class DisplayController:
    """Owns a Module and the last state it was sent.

    ``push`` only sends the rows that changed and only touches the backlight
    when the requested brightness differs from the last one sent. After a
    failed push or an error message, and until ``reset`` first runs, the LCD
    contents are unknown and the next push rewrites every row.
    """

    def __init__(self, module: Module, port: str | None = None, keypad_brightness: int = 0) -> None:
        self.module = module
        self.keypad_brightness = keypad_brightness
        self._state: DisplayState | None = None
        self._status = ControllerStatus(connected=True, port=port)
        self._lock = threading.RLock()
        self._events: list[dict[str, Any]] = []
        self._watcher: threading.Thread | None = None

    @classmethod
    def from_config(cls, cfg: AppConfig) -> "DisplayController":
        module, port = open_module(cfg)
        return cls(module, port=port, keypad_brightness=cfg.display.keypad_brightness)

    @property
    def status(self) -> ControllerStatus:
        return self._status

    @property
    def state(self) -> DisplayState | None:
        return None if self._state is None else self._state.copy()

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        with self._lock:
            return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event}
        row.update(fields)
        with self._lock:
            self._events.append(row)
            if len(self._events) > _MAX_EVENTS:
                self._events = self._events[-_MAX_EVENTS:]

    def reset(self) -> None:
        """Clear the LCD and forget what was shown."""
        with self._lock:
            self.module.clear()
            self._state = DisplayState()
            self._log_event("clear")

    def load_sprites(self, sprites: Mapping[int, Sequence[int]]) -> None:
        with self._lock:
            for index, rows in sorted(sprites.items()):
                self.module.set_sprite(index, rows)
            self._log_event("sprites_loaded", slots=sorted(sprites))

    def set_brightness(self, brightness: float) -> bool:
        """Send the backlight level if it changed; returns whether a command went out."""
        level = max(0, min(100, int(round(brightness))))
        with self._lock:
            if level == self._status.brightness:
                return False
            self.module.set_backlight(level, self.keypad_brightness)
            self._status.brightness = level
            self._log_event("brightness", level=level)
            return True

    def push(self, state: DisplayState, brightness: float | None = None) -> int:
        """Bring the LCD to ``state``; returns the number of row writes sent."""
        with self._lock:
            try:
                if self._state is None:
                    for y in range(LCD_HEIGHT):
                        self.module.write(0, y, bytes(state[y]))
                    count = LCD_HEIGHT
                else:
                    count = diff_and_apply(self._state, state, self.module)
                self._state = state.copy()
                if brightness is not None:
                    self.set_brightness(brightness)
            except Exception as exc:
                self._state = None
                self._status.last_error = str(exc)
                self._log_event("push_error", error=str(exc))
                logger.warning("push failed, next push redraws everything: %s", exc, extra={"event": "push_error"})
                raise
            self._status.pushes += 1
            self._status.writes += count
            if count:
                self._log_event("push", writes=count)
            return count

    def watch_reports(self) -> threading.Thread:
        """Start a daemon thread that logs reports until the connection ends."""
        if self._watcher is not None:
            return self._watcher

        def _run() -> None:
            while True:
                report = self.module.read_report()
                if report is None:
                    break
                with self._lock:
                    self._status.reports += 1
                    self._log_event("report", report=repr(report))
                logger.info("report: %r", report, extra={"event": "report"})
            logger.debug("report watcher stopped", extra={"event": "report_watcher_stopped"})

        self._watcher = threading.Thread(target=_run, name="cfa635-reports", daemon=True)
        self._watcher.start()
        return self._watcher

    def show_error(self, message: str) -> None:
        """Put ``message`` on the LCD, wrapped from the top-left."""
        with self._lock:
            self._state = None
            put_wrapped(self.module, 0, 0, ellipsize(transliterate(message), LCD_WIDTH * LCD_HEIGHT))
            self._log_event("error_shown", message=message)

    def describe(self) -> list[str]:
        with self._lock:
            if self._state is None:
                return []
            return [to_unicode(bytes(row), "#") for row in self._state]

    def close(self) -> None:
        with self._lock:
            self.module.close()
            self._status.connected = False
            self._log_event("disconnect")
