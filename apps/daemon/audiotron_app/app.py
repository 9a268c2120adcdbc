"""Clock daemon run loop."""

from __future__ import annotations

import signal
import threading
from datetime import datetime
from typing import Callable

from audiotron_core.config import AppConfig
from audiotron_core.display_controller import DisplayController
from audiotron_core.logging_setup import get_logger
from audiotron_display.errors import CFA635Error
from audiotron_renderer.clock import CLOCK_SPRITES, clock_view

TICK_S = 0.01


def _install_signal_handlers(stop: threading.Event) -> None:
    def _stop(signum, _frame) -> None:
        get_logger().info("signal %d received, stopping", signum, extra={"event": "signal_stop"})
        stop.set()

    signal.signal(signal.SIGINT, _stop)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _stop)


def prepare_display(controller: DisplayController) -> None:
    """LEDs off, screen cleared, clock sprites loaded."""
    controller.module.set_led(0, False, 0)
    controller.module.set_led(0, True, 0)
    controller.reset()
    controller.load_sprites(CLOCK_SPRITES)


def run_clock(
    controller: DisplayController,
    cfg: AppConfig,
    stop: threading.Event,
    now: Callable[[], datetime] = datetime.now,
    tick: float = TICK_S,
) -> int:
    """Redraw the clock until ``stop`` is set; returns the number of frames pushed."""
    frames = 0
    while not stop.is_set():
        controller.push(clock_view(now(), twelve_hour=cfg.display.twelve_hour), brightness=cfg.display.brightness)
        frames += 1
        stop.wait(tick)
    return frames


def run_daemon(
    cfg: AppConfig,
    stop: threading.Event | None = None,
    controller_factory: Callable[[AppConfig], DisplayController] = DisplayController.from_config,
    now: Callable[[], datetime] = datetime.now,
    tick: float = TICK_S,
) -> int:
    logger = get_logger()
    if stop is None:
        stop = threading.Event()
        _install_signal_handlers(stop)

    controller = controller_factory(cfg)
    logger.info("display connected on %s", controller.status.port, extra={"event": "daemon_start"})
    controller.watch_reports()
    try:
        try:
            prepare_display(controller)
            frames = run_clock(controller, cfg, stop, now=now, tick=tick)
        except Exception as exc:
            logger.exception("daemon failed", extra={"event": "daemon_failed"})
            try:
                controller.show_error(f"error: {exc}")
            except CFA635Error:
                logger.warning("could not show error on display", extra={"event": "show_error_failed"})
            raise
        controller.module.set_backlight(0, 0)
        controller.reset()
        logger.info("daemon stopped after %d frames", frames, extra={"event": "daemon_stop"})
    finally:
        controller.close()
    return 0
