"""Decoder for KiwiSDR IQ data frames."""

import math
import struct

import numpy as np

from .common import HEADER_SIZE
from .errors import MalformedFrame
from .models import AudioPacket

_HEADER = struct.Struct("<HBB")

FULL_SCALE = 32768.0


def parse_audio_packet(message: bytes) -> AudioPacket:
    """Decode one assembled data frame.

    Layout (little-endian)::

        +-----------+-------+--------+----------------------------------+
        | sequence  | flags | smeter | I0 Q0 I1 Q1 ... (int16 each)     |
        | 2 bytes   | 1     | 1      | 4 bytes per complex pair         |
        +-----------+-------+--------+----------------------------------+

    Trailing bytes that do not fill a whole pair are ignored. A frame with
    no complete pair reports ``rms == 0.0``.
    """
    if len(message) < HEADER_SIZE:
        raise MalformedFrame(
            f"Data frame needs at least {HEADER_SIZE} bytes, got {len(message)}"
        )

    sequence, flags, smeter = _HEADER.unpack_from(message, 0)

    payload_length = len(message) - HEADER_SIZE
    sample_pairs = payload_length // 4

    rms = 0.0
    if sample_pairs:
        # View into the frame; only the float temporary is allocated
        raw = np.frombuffer(message, dtype="<i2",
                            count=sample_pairs * 2, offset=HEADER_SIZE)
        norm = raw.astype(np.float64) / FULL_SCALE
        rms = math.sqrt(float(np.dot(norm, norm)) / (2.0 * sample_pairs))

    return AudioPacket(
        sequence=sequence,
        flags=flags,
        smeter=smeter,
        sample_pairs=sample_pairs,
        rms=rms,
        buffer=message,
        payload_offset=HEADER_SIZE,
        payload_length=payload_length,
    )
