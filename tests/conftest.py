"""Shared fixtures: scripted in-memory transport, fake clock, frame builder."""

import struct

import pytest

from kiwiclient.errors import ReceiveError
from kiwiclient.models import KiwiSettings
from kiwiclient.transport import FrameKind, TransportFrame


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class ScriptedTransport:
    """Replays a fixed list of frames; exceptions in the list are raised.

    When the script runs out, a server close (1000) is reported. With
    ``closes_early`` the connection reports itself closed from the first
    receive on while the remaining frames are still handed out, the way a
    websocket behaves once the peer's close frame has been read ahead.
    """

    def __init__(self, frames=(), clock=None, step=0.0, open_error=None,
                 closes_early=False):
        self.frames = list(frames)
        self.clock = clock
        self.step = step
        self.open_error = open_error
        self.closes_early = closes_early
        self.opened_uri = None
        self.origin = None
        self.sent = []
        self.closed_with = []
        self.release_count = 0
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self, uri, origin=None):
        if self.open_error is not None:
            raise self.open_error
        self.opened_uri = uri
        self.origin = origin
        self._open = True

    def send_text(self, text):
        if not self._open:
            raise ReceiveError("send on closed connection")
        self.sent.append(text)

    def receive(self, timeout=None):
        if self.clock is not None:
            self.clock.advance(self.step)
        if self.closes_early:
            self._open = False
        if not self.frames:
            self._open = False
            return TransportFrame(FrameKind.CLOSE, close_code=1000, close_reason="end of script")
        item = self.frames.pop(0)
        if isinstance(item, Exception):
            self._open = False
            raise item
        if item is not None and item.kind is FrameKind.CLOSE:
            self._open = False
        return item

    def close(self, code=1000, reason=""):
        self.closed_with.append((code, reason))
        self._open = False

    def release(self):
        self.release_count += 1


def build_data_frame(sequence, iq=(), flags=0, smeter=0, trailing=b""):
    """Build a raw data frame from (I, Q) int16 pairs."""
    flat = [v for pair in iq for v in pair]
    header = struct.pack("<HBB", sequence, flags, smeter)
    return header + struct.pack(f"<{len(flat)}h", *flat) + trailing


def data(sequence, iq=((100, -100),), **kwargs):
    return TransportFrame(FrameKind.BINARY, build_data_frame(sequence, iq, **kwargs))


def text(line):
    return TransportFrame(FrameKind.TEXT, line.encode("utf-8"))


@pytest.fixture
def settings():
    return KiwiSettings(host="kiwi.example.net", port=8073, sample_rate=12000,
                        center_freq_hz=7050000.0)


@pytest.fixture
def clock():
    return FakeClock()
