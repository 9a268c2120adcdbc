import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "display_protocol"))

from audiotron_display.crc import append_crc
from audiotron_display.errors import ConnectionClosedError
from audiotron_display.framer import PacketFramer, TransportByteSource, iter_byte_source
from audiotron_display.models import Packet


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class ScriptedBytes:
    """Delivers (delay_seconds, byte) items against a fake clock."""

    def __init__(self, clock, items):
        self.clock = clock
        self.items = list(items)

    def read_byte(self, timeout=None):
        if not self.items:
            raise EOFError("script exhausted")
        delay, value = self.items[0]
        if timeout is not None and delay > timeout:
            self.clock.now += timeout
            self.items[0] = (delay - timeout, value)
            return None
        self.clock.now += delay
        self.items.pop(0)
        return value


def packet(typ, data=b""):
    return append_crc(bytes([typ, len(data)]) + bytes(data))


def spaced(raw, delay):
    return [(delay, b) for b in raw]


class FramerTests(unittest.TestCase):
    def test_single_packet_in_memory(self):
        framer = PacketFramer(iter_byte_source(packet(0x40, b"hi")), clock=lambda: 0.0)
        self.assertEqual(list(framer.packets()), [Packet(type=0x40, data=b"hi")])
        self.assertEqual(framer.stats.packets, 1)

    def test_byte_by_byte_with_delays_under_timeout(self):
        clock = FakeClock()
        raw = packet(0x1F | 0x40, b"")  + packet(0x80, b"\x01")
        source = ScriptedBytes(clock, spaced(raw, 0.04))
        framer = PacketFramer(source.read_byte, timeout=0.25, clock=clock)
        self.assertEqual(
            list(framer.packets()),
            [Packet(type=0x5F, data=b""), Packet(type=0x80, data=b"\x01")],
        )
        self.assertEqual(framer.stats.timeouts, 0)

    def test_idle_gap_before_type_byte_is_not_a_timeout(self):
        clock = FakeClock()
        items = [(5.0, 0x46)] + spaced(packet(0x46)[1:], 0.01)
        framer = PacketFramer(ScriptedBytes(clock, items).read_byte, clock=clock)
        self.assertEqual(list(framer.packets()), [Packet(type=0x46, data=b"")])

    def test_bad_crc_dropped_then_recovers(self):
        bad = bytearray(packet(0x40, b"abc"))
        bad[-1] ^= 0xFF
        data = bytes(bad) + packet(0x46)
        framer = PacketFramer(iter_byte_source(data), clock=lambda: 0.0)
        self.assertEqual(list(framer.packets()), [Packet(type=0x46, data=b"")])
        self.assertEqual(framer.stats.crc_failures, 1)

    def test_oversized_length_dropped(self):
        data = bytes([0x40, 23]) + packet(0x4E)
        framer = PacketFramer(iter_byte_source(data), clock=lambda: 0.0)
        self.assertEqual(list(framer.packets()), [Packet(type=0x4E, data=b"")])
        self.assertEqual(framer.stats.length_errors, 1)

    def test_max_length_accepted(self):
        payload = bytes(range(22))
        framer = PacketFramer(iter_byte_source(packet(0x40, payload)), clock=lambda: 0.0)
        self.assertEqual(list(framer.packets()), [Packet(type=0x40, data=payload)])

    def test_stall_mid_packet_times_out_and_resyncs(self):
        clock = FakeClock()
        partial = packet(0x40, b"abcd")[:4]
        items = spaced(partial, 0.01) + [(1.0, packet(0x46)[0])] + spaced(packet(0x46)[1:], 0.01)
        framer = PacketFramer(ScriptedBytes(clock, items).read_byte, timeout=0.25, clock=clock)
        self.assertEqual(list(framer.packets()), [Packet(type=0x46, data=b"")])
        self.assertEqual(framer.stats.timeouts, 1)

    def test_total_packet_time_is_bounded(self):
        clock = FakeClock()
        raw = packet(0x40, bytes(10))
        # Each gap is short but the packet as a whole takes longer than the timeout.
        items = spaced(raw, 0.03) + spaced(packet(0x46), 0.0)
        framer = PacketFramer(ScriptedBytes(clock, items).read_byte, timeout=0.25, clock=clock)
        delivered = list(framer.packets())
        self.assertNotIn(Packet(type=0x40, data=bytes(10)), delivered)
        self.assertEqual(framer.stats.timeouts, 1)


class FakeTransport:
    def __init__(self, chunks):
        self.chunks = list(chunks)

    def read(self):
        if not self.chunks:
            raise ConnectionClosedError("closed")
        return self.chunks.pop(0)


class TransportByteSourceTests(unittest.TestCase):
    def test_chunks_become_bytes_and_close_is_eof(self):
        source = TransportByteSource(FakeTransport([b"", packet(0x46)[:2], packet(0x46)[2:]]))
        framer = PacketFramer(source.read_byte)
        self.assertEqual(list(framer.packets()), [Packet(type=0x46, data=b"")])

    def test_timeout_when_transport_stays_quiet(self):
        clock = FakeClock()

        class Quiet:
            def read(self):
                clock.now += 0.05
                return b""

        source = TransportByteSource(Quiet(), clock=clock)
        self.assertIsNone(source.read_byte(0.2))


if __name__ == "__main__":
    unittest.main()
