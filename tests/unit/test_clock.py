import sys
import unittest
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from audiotron_display.state import DisplayState
from audiotron_renderer.clock import (
    CLOCK_SPRITES,
    COLON,
    FULL_BLOCK,
    FULL_BLOCK_EDGE,
    LOWER_RIGHT,
    RIGHT_LOWER_EDGE,
    blit_digit,
    clock_view,
)


class ClockTests(unittest.TestCase):
    def test_sprites_fit_six_bits(self):
        self.assertEqual(sorted(CLOCK_SPRITES), list(range(8)))
        for rows in CLOCK_SPRITES.values():
            self.assertEqual(len(rows), 8)
            self.assertTrue(all(0 <= r <= 0x3F for r in rows))

    def test_digit_eight_layout(self):
        state = DisplayState()
        blit_digit(state, 8, 0)
        self.assertEqual(bytes(state[0][:3]), bytes([RIGHT_LOWER_EDGE, FULL_BLOCK, FULL_BLOCK]))
        self.assertEqual(bytes(state[3][:3]), bytes([FULL_BLOCK_EDGE, FULL_BLOCK, FULL_BLOCK]))

    def test_digit_clipped_at_left_edge(self):
        state = DisplayState()
        blit_digit(state, 1, -2)
        self.assertEqual(state[0][0], LOWER_RIGHT)
        self.assertEqual([state[y][0] for y in range(1, 4)], [FULL_BLOCK] * 3)
        self.assertEqual(bytes(state[0][1:]), b" " * 19)

    def test_twelve_hour_morning(self):
        state = clock_view(datetime(2024, 1, 1, 9, 41, 7))
        self.assertEqual(state[0][0], 0x20)
        self.assertEqual(state[1][4], COLON)
        self.assertEqual(state[2][11], COLON)
        self.assertEqual(state[2][19], ord("a"))
        self.assertEqual(state[3][19], ord("m"))
        self.assertEqual(state[0][18], 0x20)

    def test_twelve_hour_afternoon_with_leading_one(self):
        state = clock_view(datetime(2024, 1, 1, 23, 0, 0))
        self.assertEqual(state[0][0], LOWER_RIGHT)
        self.assertEqual(state[2][19], ord("p"))

    def test_midnight_is_twelve(self):
        state = clock_view(datetime(2024, 1, 1, 0, 0, 0))
        self.assertEqual(state[0][0], LOWER_RIGHT)
        self.assertEqual(state[2][19], ord("a"))

    def test_twenty_four_hour_fills_width(self):
        state = clock_view(datetime(2024, 1, 1, 23, 59, 58), twelve_hour=False)
        self.assertEqual(state[1][6], COLON)
        self.assertEqual(state[1][13], COLON)
        self.assertEqual(state[3][19], FULL_BLOCK)
        self.assertNotIn(ord("m"), bytes(state[3]))

    def test_only_sprite_codes_colons_and_marker(self):
        state = clock_view(datetime(2024, 6, 1, 12, 34, 56))
        allowed = set(range(8)) | {0x20, COLON, ord("a"), ord("p"), ord("m")}
        for row in state:
            self.assertTrue(set(row) <= allowed)

    def test_each_second_changes_view(self):
        a = clock_view(datetime(2024, 1, 1, 10, 10, 10))
        b = clock_view(datetime(2024, 1, 1, 10, 10, 11))
        self.assertNotEqual(a, b)


if __name__ == "__main__":
    unittest.main()
