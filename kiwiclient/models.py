"""Data structures for session settings and decoded audio packets."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .common import CLIENT_IDENT, KIWI_PORT, DEFAULT_SAMPLE_RATE
from .protocol import build_websocket_uri


@dataclass(frozen=True)
class KiwiSettings:
    """Immutable per-session configuration."""
    host:           str
    port:           int = KIWI_PORT
    sample_rate:    int = DEFAULT_SAMPLE_RATE    # used for both in= and out=
    center_freq_hz: float = 0.0
    password:       Optional[str] = None
    ident:          str = CLIENT_IDENT

    def __post_init__(self):
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 < self.port <= 0xFFFF:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.center_freq_hz < 0:
            raise ValueError(f"center_freq_hz must be >= 0, got {self.center_freq_hz}")

    @property
    def center_freq_khz(self) -> float:
        return self.center_freq_hz / 1e3

    def websocket_uri(self) -> str:
        """Return a connection URI carrying a freshly generated session token."""
        return build_websocket_uri(self.host, self.port)


@dataclass(frozen=True)
class AudioPacket:
    """One decoded IQ data frame.

    ``buffer`` is the assembled frame itself; the sample payload is the
    window ``buffer[payload_offset:payload_offset + payload_length]`` and
    is never copied by the decoder.
    """
    sequence:       int         # 16-bit, wraps at 65536
    flags:          int
    smeter:         int
    sample_pairs:   int
    rms:            float
    buffer:         bytes
    payload_offset: int
    payload_length: int

    @property
    def payload(self) -> memoryview:
        start = self.payload_offset
        return memoryview(self.buffer)[start:start + self.payload_length]

    @property
    def iq(self) -> np.ndarray:
        """Raw little-endian int16 I/Q pairs as a (pairs, 2) view."""
        raw = np.frombuffer(self.buffer, dtype="<i2",
                            count=self.sample_pairs * 2,
                            offset=self.payload_offset)
        return raw.reshape(self.sample_pairs, 2)

    def samples(self) -> np.ndarray:
        """Normalized complex64 samples, I + jQ in [-1, 1)."""
        iq = self.iq.astype(np.float32) / 32768.0
        return (iq[:, 0] + 1j * iq[:, 1]).astype(np.complex64)
