"""Unicode to CFA635 character-set transliteration.

The module's ROM character set only partly overlaps ASCII. Text is mapped one
code point to one byte: a fixed set of ASCII ranges passes through unchanged,
everything else goes through a many-to-one table of look-alike characters, and
whatever is left becomes the inverted question mark (0x60).

Nothing is ever mapped into 0x00-0x0F, which address the programmable sprite
slots.
"""

from __future__ import annotations

import codecs

REPLACEMENT = 0x60  # ¿

_IDENTITY_RANGES = (
    (0x20, 0x23),
    (0x25, 0x3F),
    (0x41, 0x5A),
    (0x61, 0x7A),
)

# (device byte, code points that render as it)
_CHARSET_TABLE: tuple[tuple[int, str], ...] = (
    (0x10, "\u23f5\u25b6\u25b8\u25ba\u2bc8"),  # ⏵▶▸►⯈
    (0x11, "\u23f4\u25c0\u2bc7"),  # ⏴◀⯇
    (0x12, "\u23eb"),  # ⏫
    (0x13, "\u23ec"),  # ⏬
    (0x14, "\u00ab\u226a\u300a"),  # «≪《
    (0x15, "\u00bb\u226b\u300b"),  # »≫》
    (0x16, "\u2196\u2b09\u2b66"),  # ↖⬉⭦
    (0x17, "\u2197\u2b08\u2b67"),  # ↗⬈⭧
    (0x18, "\u2199\u2b0b\u2b69"),  # ↙⬋⭩
    (0x19, "\u2198\u2b0a\u2b68"),  # ↘⬊⭨
    (0x1A, "\u23f6\u25b2\u25b4"),  # ⏶▲▴
    (0x1B, "\u23f7\u25bc\u25be"),  # ⏷▼▾
    (0x1C, "\u21b2\u21b5\u23ce\u2b90"),  # ↲↵⏎⮐
    (0x1D, "^\u02c4\u02c6\u2303"),  # ^˄ˆ⌃
    (0x1E, "\u1d5b"),  # ᵛ
    (0x20, "\u00a0\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a\u202f\u2060\u3000"),  # spaces
    (0x21, "\u01c3"),  # ǃ
    (0x22, "\u02ba\u02dd\u05f4\u2033\u3003"),  # ʺ˝״″〃
    (0x23, "\u2114\u2317\u266f\u29e3"),  # ℔⌗♯⧣
    (0x24, "\u00a4"),  # ¤
    (0x25, "\u066a\u2052"),  # ٪⁒
    (0x27, "\u02b9\u02bc\u02c8\u05f3\u2018\u2019\u2032\ua78c"),  # ʹʼˈ׳‘’′ꞌ
    (0x2A, "\u066d\u2217\u26b9"),  # ٭∗⚹
    (0x2B, "\u02d6"),  # ˖
    (0x2C, "\u201a"),  # ‚
    (0x2D, "\u02d7\u2010\u2011\u2012\u2013\u2212\U00010191"),  # ˗‐‑‒–−𐆑
    (0x2E, "\u2024"),  # ․
    (0x2F, "\u2044\u2215\u27cb"),  # ⁄∕⟋
    (0x3A, "\u0589\u05c3\u1361\u2236\ua789"),  # ։׃፡∶꞉
    (0x3B, "\u037e"),  # ;
    (0x3C, "\u02c2\u2039\u2329\u27e8\u3008"),  # ˂‹〈⟨〈
    (0x3D, "\u1400\u2e40\u30a0\ua78a\U00010190\U0001f7f0"),  # ᐀⹀゠꞊𐆐🟰
    (0x3E, "\u02c3\u203a\u232a\u27e9\u3009"),  # ˃›〉⟩〉
    (0x40, "\u00a1"),  # ¡
    (0x5B, "\u00c4"),  # Ä
    (0x5C, "\u00d6"),  # Ö
    (0x5D, "\u00d1"),  # Ñ
    (0x5E, "\u00dc"),  # Ü
    (0x5D, "\u00a7"),  # §
    (0x60, "\u00bf"),  # ¿
    (0x7B, "\u00e4"),  # ä
    (0x7C, "\u00f6"),  # ö
    (0x7D, "\u00f1"),  # ñ
    (0x7E, "\u00fc"),  # ü
    (0x7F, "\u00e0"),  # à
    (0x80, "\u00b0\u02da\u1d3c\u1d52\u2070"),  # °˚ᴼᵒ⁰
    (0x81, "\u00b9"),  # ¹
    (0x82, "\u00b2"),  # ²
    (0x83, "\u00b3"),  # ³
    (0x84, "\u2074"),  # ⁴
    (0x85, "\u2075"),  # ⁵
    (0x86, "\u2076"),  # ⁶
    (0x87, "\u2077"),  # ⁷
    (0x88, "\u2078"),  # ⁸
    (0x89, "\u2079"),  # ⁹
    (0x8A, "\u00bd"),  # ½
    (0x8B, "\u00bc"),  # ¼
    (0x8C, "\u00b1"),  # ±
    (0x8D, "\u2265"),  # ≥
    (0x8E, "\u2264"),  # ≤
    (0x8F, "\u00b5\u03bc"),  # µμ
    (0x90, "\u266a\U0001d160"),  # ♪𝅘𝅥𝅮
    (0x91, "\u266c"),  # ♬
    (0x92, "\U0001f514\U0001f56d"),  # 🔔🕭
    (0x93, "\u2665\u2764\U0001f499\U0001f49a\U0001f49b\U0001f49c\U0001f5a4\U0001f90e\U0001f9e1"),  # ♥❤💙💚💛💜🖤🤎🧡
    (0x94, "\u25c6\u2666"),  # ◆♦
    (0x95, "\U00010382"),  # 𐎂
    (0x96, "\u300c"),  # 「
    (0x97, "\u300d"),  # 」
    (0x98, "\u201c\u275d"),  # “❝
    (0x99, "\u201d\u275e"),  # ”❞
    (0x9C, "\u0251\u03b1"),  # ɑα
    (0x9D, "\u025b\u03b5"),  # ɛε
    (0x9E, "\u03b4"),  # δ
    (0x9F, "\u221e"),  # ∞
    (0xA0, "@"),  # @
    (0xA1, "\u00a3"),  # £
    (0xA2, "$"),  # $
    (0xA3, "\u00a5"),  # ¥
    (0xA4, "\u00e8"),  # è
    (0xA5, "\u00e9"),  # é
    (0xA6, "\u00f9"),  # ù
    (0xA7, "\u00ec"),  # ì
    (0xA8, "\u00f2"),  # ò
    (0xA9, "\u00c7"),  # Ç
    (0xAA, "\u1d56"),  # ᵖ
    (0xAB, "\u00d8"),  # Ø
    (0xAC, "\u00f8"),  # ø
    (0xAD, "\u02b3"),  # ʳ
    (0xAE, "\u00c5\u212b"),  # ÅÅ
    (0xAF, "\u00e5"),  # å
    (0xB0, "\u0394\u2206\u2302"),  # Δ∆⌂
    (0xB1, "\u00a2\u023c\u20b5"),  # ¢ȼ₵
    (0xB2, "\u03a6"),  # Φ
    (0xB3, "\u03c4"),  # τ
    (0xB4, "\u03bb"),  # λ
    (0xB5, "\u03a9\u2126"),  # ΩΩ
    (0xB6, "\u03c0"),  # π
    (0xB7, "\u03a8"),  # Ψ
    (0xB8, "\u01a9\u03a3\u2211"),  # ƩΣ∑
    (0xB9, "\u0398\u03f4\u03b8"),  # Θϴθ
    (0xBA, "\u039e"),  # Ξ
    (0xBB, "\u23fa\u26ab\u2b24\U0001f534"),  # ⏺⚫⬤🔴
    (0xBC, "\u00c6"),  # Æ
    (0xBD, "\u00e6\u04d5"),  # æӕ
    (0xBE, "\u00df\u03b2"),  # ßβ
    (0xBF, "\u00c9"),  # É
    (0xC0, "\u0393"),  # Γ
    (0xC1, "\u039b"),  # Λ
    (0xC2, "\u03a0\u220f"),  # Π∏
    (0xC3, "\u03a5\u03d3"),  # Υϓ
    (0xC4, "_\u02cd"),  # _ˍ
    (0xC5, "\u00c8"),  # È
    (0xC6, "\u00ca"),  # Ê
    (0xC7, "\u00ea"),  # ê
    (0xC8, "\u00e7"),  # ç
    (0xC9, "\u011f\u01e7"),  # ğǧ
    (0xCA, "\u015e"),  # Ş
    (0xCB, "\u015f\u0219"),  # şș
    (0xCC, "\u0130"),  # İ
    (0xCD, "\u0131"),  # ı
    (0xCE, "~\u02dc\u2053\u223c\u301c\uff5e"),  # ~˜⁓∼〜～
    (0xCF, "\u25c7\u25ca\u2662"),  # ◇◊♢
    (0xD5, "\u0192"),  # ƒ
    (0xD6, "\u2588"),  # █
    (0xD7, "\u2589\u258a"),  # ▉▊
    (0xD8, "\u258b\u258c"),  # ▋▌
    (0xD9, "\u258d"),  # ▍
    (0xDA, "\u258e\u258f"),  # ▎▏
    (0xDB, "\u20a7"),  # ₧
    (0xDC, "\u25e6"),  # ◦
    (0xDD, "\u2022\u22c5"),  # •⋅
    (0xDE, "\u2191\u2b06\u2b61"),  # ↑⬆⭡
    (0xDF, "\u2192\u2b95\u2b62"),  # →⮕⭢
    (0xE0, "\u2193\u2b07\u2b63"),  # ↓⬇⭣
    (0xE1, "\u2190\u2b05\u2b60"),  # ←⬅⭠
    (0xE2, "\u00c1"),  # Á
    (0xE3, "\u00cd"),  # Í
    (0xE4, "\u00d3"),  # Ó
    (0xE5, "\u00da"),  # Ú
    (0xE6, "\u00dd"),  # Ý
    (0xE7, "\u00e1"),  # á
    (0xE8, "\u00ed"),  # í
    (0xE9, "\u00f3"),  # ó
    (0xEA, "\u00fa"),  # ú
    (0xEB, "\u00fd"),  # ý
    (0xEC, "\u00d4"),  # Ô
    (0xED, "\u00f4"),  # ô
    (0xF0, "\u010c"),  # Č
    (0xF1, "\u011a"),  # Ě
    (0xF2, "\u0158"),  # Ř
    (0xF3, "\u0160"),  # Š
    (0xF4, "\u017d"),  # Ž
    (0xF5, "\u010d"),  # č
    (0xF6, "\u011b"),  # ě
    (0xF7, "\u0159"),  # ř
    (0xF8, "\u0161"),  # š
    (0xF9, "\u017e"),  # ž
    (0xFA, "["),  # [
    (0xFB, "\\"),  # backslash
    (0xFC, "]"),  # ]
    (0xFD, "{"),  # {
    (0xFE, "|"),  # |
    (0xFF, "}"),  # }
)


def _build_encode_map() -> dict[int, int]:
    mapping: dict[int, int] = {}
    for lo, hi in _IDENTITY_RANGES:
        for cp in range(lo, hi + 1):
            mapping[cp] = cp
    for byte, chars in _CHARSET_TABLE:
        for ch in chars:
            mapping.setdefault(ord(ch), byte)
    return mapping


_ENCODE = _build_encode_map()


def _build_decode_map() -> dict[int, str]:
    decoded: dict[int, str] = {}
    for lo, hi in _IDENTITY_RANGES:
        for cp in range(lo, hi + 1):
            decoded[cp] = chr(cp)
    for byte, chars in _CHARSET_TABLE:
        decoded.setdefault(byte, chars[0])
    return decoded


_DECODE = _build_decode_map()


def encode_char(cp: int | str) -> int:
    """Map a single code point (or one-character string) to a device byte."""
    if isinstance(cp, str):
        cp = ord(cp)
    return _ENCODE.get(cp, REPLACEMENT)


def transliterate(text: str) -> bytes:
    """Convert text to device bytes, one byte per code point."""
    return bytes(_ENCODE.get(ord(ch), REPLACEMENT) for ch in text)


def to_unicode(data: bytes, unknown: str = "\ufffd") -> str:
    """Best-effort inverse for logging and previews; sprite slots become ``unknown``."""
    return "".join(_DECODE.get(b, unknown) for b in data)


class Encoder:
    """Streaming transliterator for chunked UTF-8 input.

    An incomplete multi-byte sequence at the end of a chunk is held back until
    the next call supplies the rest of it. Bytes that can never form valid
    UTF-8 come out as the replacement character.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, chunk: bytes, final: bool = False) -> bytes:
        return transliterate(self._decoder.decode(chunk, final=final))

    @property
    def pending(self) -> bool:
        """True while a partial UTF-8 sequence is buffered."""
        buffered, _ = self._decoder.getstate()
        return bool(buffered)

    def reset(self) -> None:
        self._decoder.reset()
