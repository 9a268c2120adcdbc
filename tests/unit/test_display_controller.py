import queue
import sys
import time
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from audiotron_core.display_controller import DisplayController
from audiotron_display.errors import CommandTimeoutError
from audiotron_display.models import Key, KeyActivity
from audiotron_display.state import DisplayState


class FakeModule:
    def __init__(self):
        self.calls = []
        self.reports = queue.Queue()
        self.fail_writes = False
        self.closed = False

    def write(self, col, row, data):
        if self.fail_writes:
            raise CommandTimeoutError("write timed out")
        self.calls.append(("write", col, row, bytes(data)))

    def clear(self):
        self.calls.append(("clear",))

    def set_backlight(self, lcd, keypad):
        self.calls.append(("backlight", lcd, keypad))

    def set_sprite(self, index, rows):
        self.calls.append(("sprite", index, tuple(rows)))

    def read_report(self, timeout=None):
        return self.reports.get(timeout=timeout)

    def close(self):
        self.closed = True
        self.reports.put(None)


def text_state(row, col, text):
    state = DisplayState()
    state.put(col, row, text)
    return state


class DisplayControllerTests(unittest.TestCase):
    def setUp(self):
        self.module = FakeModule()
        self.controller = DisplayController(self.module, port="/dev/lcd")

    def tearDown(self):
        self.controller.close()

    def test_first_push_without_reset_writes_every_row(self):
        self.assertEqual(self.controller.push(DisplayState()), 4)
        self.assertEqual([c[0] for c in self.module.calls], ["write"] * 4)

    def test_push_sends_only_changes(self):
        self.controller.reset()
        self.controller.push(text_state(0, 0, b"12:00"))
        self.module.calls.clear()

        count = self.controller.push(text_state(0, 0, b"12:01"))
        self.assertEqual(count, 1)
        self.assertEqual(self.module.calls, [("write", 4, 0, b"1")])

        self.module.calls.clear()
        self.assertEqual(self.controller.push(text_state(0, 0, b"12:01")), 0)
        self.assertEqual(self.module.calls, [])

    def test_backlight_only_on_change(self):
        self.controller.reset()
        self.controller.push(DisplayState(), brightness=20.4)
        self.controller.push(DisplayState(), brightness=19.6)
        self.controller.push(DisplayState(), brightness=-5)
        backlight = [c for c in self.module.calls if c[0] == "backlight"]
        self.assertEqual(backlight, [("backlight", 20, 0), ("backlight", 0, 0)])

    def test_failed_push_forces_full_redraw(self):
        self.controller.reset()
        self.module.fail_writes = True
        with self.assertRaises(CommandTimeoutError):
            self.controller.push(text_state(1, 0, b"x"))
        self.assertIsNone(self.controller.state)
        self.assertEqual(self.controller.status.last_error, "write timed out")

        self.module.fail_writes = False
        self.assertEqual(self.controller.push(text_state(1, 0, b"x")), 4)

    def test_load_sprites_in_slot_order(self):
        self.controller.load_sprites({1: [0] * 8, 0: [0x3F] * 8})
        self.assertEqual([c[1] for c in self.module.calls], [0, 1])

    def test_show_error_wraps_message(self):
        self.controller.reset()
        self.module.calls.clear()
        self.controller.show_error("error: something went badly wrong")
        writes = [c for c in self.module.calls if c[0] == "write"]
        self.assertEqual(writes[0], ("write", 0, 0, b"error: something wen"))
        self.assertEqual(writes[1], ("write", 0, 1, b"t badly wrong"))
        self.assertIsNone(self.controller.state)

    def test_show_error_ellipsizes_overlong_message(self):
        self.controller.show_error("x" * 100)
        writes = [c for c in self.module.calls if c[0] == "write"]
        self.assertEqual([w[2] for w in writes], [0, 1, 2, 3])
        self.assertEqual(writes[3], ("write", 0, 3, b"x" * 19 + b"."))

    def test_report_count_waits_for_controller_lock(self):
        watcher = self.controller.watch_reports()
        with self.controller._lock:
            self.module.reports.put(KeyActivity(key=Key.UP, pressed=True))
            time.sleep(0.1)
            self.assertEqual(self.controller.status.reports, 0)
        self.module.reports.put(None)
        watcher.join(timeout=2)
        self.assertEqual(self.controller.status.reports, 1)

    def test_watch_reports_counts_and_records(self):
        watcher = self.controller.watch_reports()
        self.module.reports.put(KeyActivity(key=Key.ENTER, pressed=True))
        self.module.reports.put(None)
        watcher.join(timeout=2)
        self.assertFalse(watcher.is_alive())
        self.assertEqual(self.controller.status.reports, 1)
        self.assertTrue(any(e["event"] == "report" for e in self.controller.recent_events()))

    def test_describe_shows_text(self):
        self.controller.reset()
        self.controller.push(text_state(2, 3, b"Hi"))
        self.assertEqual(self.controller.describe()[2], "   Hi" + " " * 15)


if __name__ == "__main__":
    unittest.main()
