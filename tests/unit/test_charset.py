import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))

from audiotron_display.charset import REPLACEMENT, Encoder, encode_char, to_unicode, transliterate

FIXTURE = ROOT / "tests" / "fixtures" / "cfa635_charset.json"


def _load_fixture():
    return json.loads(FIXTURE.read_text(encoding="utf-8"))


class TransliterateTests(unittest.TestCase):
    def test_identity_ranges(self):
        fixture = _load_fixture()
        for lo, hi in fixture["identity_ranges"]:
            for cp in range(lo, hi + 1):
                self.assertEqual(encode_char(cp), cp)
        self.assertEqual(transliterate("A"), b"\x41")
        self.assertEqual(transliterate("Hello, world!"), b"Hello, world!")

    def test_compatibility_table_matches_fixture(self):
        fixture = _load_fixture()
        for cp, byte in fixture["table"].items():
            self.assertEqual(encode_char(int(cp)), byte, f"U+{int(cp):04X}")

    def test_many_to_one(self):
        self.assertEqual(transliterate("ß"), b"\xbe")
        self.assertEqual(transliterate("β"), b"\xbe")

    def test_unmapped_becomes_replacement(self):
        self.assertEqual(REPLACEMENT, 0x60)
        self.assertEqual(transliterate("\U0001F600"), bytes([REPLACEMENT]))
        self.assertEqual(transliterate("\x00\x07"), bytes([REPLACEMENT, REPLACEMENT]))

    def test_never_emits_sprite_codes(self):
        fixture = _load_fixture()
        codepoints = [int(cp) for cp in fixture["table"]] + list(range(0x0, 0x3000, 7))
        out = transliterate("".join(chr(cp) for cp in codepoints))
        self.assertEqual(len(out), len(codepoints))
        self.assertFalse(any(b < 0x10 for b in out))

    def test_one_byte_per_code_point(self):
        text = "Café → naïve ♫"
        self.assertEqual(len(transliterate(text)), len(text))

    def test_to_unicode_round_trips_identity(self):
        self.assertEqual(to_unicode(b"Clock 12"), "Clock 12")
        self.assertEqual(to_unicode(b"\x00", unknown="#"), "#")


class EncoderTests(unittest.TestCase):
    def test_split_multibyte_sequence_waits_for_more_input(self):
        raw = "ß!".encode("utf-8")
        enc = Encoder()
        self.assertEqual(enc.feed(raw[:1]), b"")
        self.assertTrue(enc.pending)
        self.assertEqual(enc.feed(raw[1:]), b"\xbe!")
        self.assertFalse(enc.pending)

    def test_byte_at_a_time_matches_whole(self):
        text = "♪ Ångström \U0001F3B5 ok"
        raw = text.encode("utf-8")
        enc = Encoder()
        out = b"".join(enc.feed(raw[i : i + 1]) for i in range(len(raw)))
        out += enc.feed(b"", final=True)
        self.assertEqual(out, transliterate(text))

    def test_invalid_utf8_maps_to_replacement(self):
        enc = Encoder()
        self.assertEqual(enc.feed(b"A\xffB"), bytes([0x41, REPLACEMENT, 0x42]))

    def test_truncated_sequence_flushed_on_final(self):
        enc = Encoder()
        self.assertEqual(enc.feed(b"\xe2\x99"), b"")
        self.assertEqual(enc.feed(b"", final=True), bytes([REPLACEMENT]))

    def test_reset_drops_pending(self):
        enc = Encoder()
        enc.feed(b"\xc3")
        enc.reset()
        self.assertFalse(enc.pending)
        self.assertEqual(enc.feed(b"Z"), b"Z")


if __name__ == "__main__":
    unittest.main()
