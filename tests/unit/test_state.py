import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))

from audiotron_display.state import DisplayState, RowWrite, cleared, diff, diff_and_apply


class RecordingWriter:
    def __init__(self):
        self.calls = []

    def write(self, col, row, data):
        self.calls.append((col, row, bytes(data)))


class DisplayStateTests(unittest.TestCase):
    def test_cleared_is_all_spaces(self):
        state = cleared()
        self.assertEqual(len(state), 4)
        for row in state:
            self.assertEqual(bytes(row), b" " * 20)

    def test_value_semantics(self):
        a = DisplayState()
        b = a.copy()
        b.put(0, 0, b"x")
        self.assertNotEqual(a, b)
        self.assertEqual(bytes(a[0][:1]), b" ")
        self.assertEqual(a, DisplayState.cleared())

    def test_put_truncates(self):
        state = DisplayState()
        state.put(17, 1, b"abcdef")
        self.assertEqual(bytes(state[1][17:]), b"abc")
        self.assertEqual(bytes(state[2]), b" " * 20)

    def test_put_off_display(self):
        with self.assertRaises(IndexError):
            DisplayState().put(20, 0, b"x")

    def test_wrong_shape_rejected(self):
        with self.assertRaises(ValueError):
            DisplayState([b" " * 20] * 3)
        with self.assertRaises(ValueError):
            DisplayState([b" " * 19] * 4)


class DiffTests(unittest.TestCase):
    def test_identical_states_send_nothing(self):
        state = DisplayState()
        state.put(0, 0, b"12:34")
        writer = RecordingWriter()
        self.assertEqual(diff_and_apply(state, state.copy(), writer), 0)
        self.assertEqual(writer.calls, [])

    def test_single_span_per_row(self):
        for row in range(4):
            for a in range(20):
                for b in range(a + 1, 21):
                    old = DisplayState()
                    new = DisplayState()
                    new[row][a:b] = b"#" * (b - a)
                    writer = RecordingWriter()
                    diff_and_apply(old, new, writer)
                    self.assertEqual(writer.calls, [(a, row, b"#" * (b - a))])

    def test_matching_cells_inside_span_are_kept(self):
        old = DisplayState()
        new = DisplayState()
        new.put(2, 0, b"a b")
        self.assertEqual(diff(old, new), [RowWrite(col=2, row=0, data=b"a b")])

    def test_rows_written_top_to_bottom(self):
        old = DisplayState()
        new = DisplayState()
        new.put(5, 3, b"z")
        new.put(0, 1, b"y")
        self.assertEqual([w.row for w in diff(old, new)], [1, 3])

    def test_applying_diff_reaches_target(self):
        old = DisplayState()
        old.put(0, 0, b"Hello there, world!!")
        new = DisplayState()
        new.put(0, 0, b"Hello where, world!?")
        new.put(4, 2, b"xyz")
        target = old.copy()
        diff_and_apply(old, new, target)
        self.assertEqual(target, new)


if __name__ == "__main__":
    unittest.main()
