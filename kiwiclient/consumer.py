"""Receivers for decoded IQ packets."""

import queue
from abc import ABC, abstractmethod
from collections import deque
from typing import Optional

from .common import log
from .models import AudioPacket

GAP_HISTORY = 100

SEQ_MASK = 0xFFFF
SEQ_HALF = 0x8000    # forward steps at or beyond this are really backwards


class AudioConsumer(ABC):
    """Accepts decoded packets, one call per data frame, in arrival order.

    Called from the session loop; implementations must not block.
    """

    @abstractmethod
    def on_iq_block(self, packet: AudioPacket) -> None:
        ...


class ConsoleIqConsumer(AudioConsumer):
    """
    Tracks sequence continuity and logs a summary line every
    ``print_every`` packets.
    """

    def __init__(self, sample_rate: int, print_every: int = 10):
        self.sample_rate   = sample_rate
        self.print_every   = max(1, print_every)
        self.packet_count  = 0
        self.sample_count  = 0
        self.missed_count  = 0
        self.gap_count     = 0
        self.reorder_count = 0
        self.gaps: deque = deque(maxlen=GAP_HISTORY)    # most recent (expected, got)
        self._last_seq: Optional[int] = None

    def on_iq_block(self, packet: AudioPacket) -> None:
        if self._last_seq is None or self._check_sequence(packet.sequence):
            self._last_seq = packet.sequence

        self.packet_count += 1
        self.sample_count += packet.sample_pairs
        if self.packet_count % self.print_every:
            return

        log.info(f"SEQ={packet.sequence} flags=0x{packet.flags:02X} S={packet.smeter}  "
                 f"IQ: {packet.sample_pairs} @ {self.sample_rate} Hz, RMS={packet.rms:.3f}")

    def _check_sequence(self, sequence: int) -> bool:
        """Record a gap or reorder. Returns False for a stale (old or duplicate) packet."""
        expected = (self._last_seq + 1) & SEQ_MASK
        if sequence == expected:
            return True
        step = (sequence - expected) & SEQ_MASK
        if step >= SEQ_HALF:
            self.reorder_count += 1
            log.warning(f"Out-of-order packet: expected {expected}, got {sequence}")
            return False
        self.missed_count += step
        self.gap_count += 1
        self.gaps.append((expected, sequence))
        log.warning(f"Packet gap: expected {expected}, got {sequence} "
                    f"({step} packets missed)")
        return True


class QueueConsumer(AudioConsumer):
    """
    Hands packets to another thread through a bounded FIFO.
    A full queue drops the packet rather than stalling the receive loop.
    """

    def __init__(self, maxsize: int = 200):
        self.out_q      = queue.Queue(maxsize=maxsize)
        self.drop_count = 0

    def on_iq_block(self, packet: AudioPacket) -> None:
        try:
            self.out_q.put_nowait(packet)
        except queue.Full:
            self.drop_count += 1
            log.warning(f"IQ queue full, dropping packet {packet.sequence} "
                        f"(total drops: {self.drop_count})")

    def get(self, timeout: float = 1.0) -> Optional[AudioPacket]:
        """Block until a packet arrives or timeout. Returns AudioPacket or None."""
        try:
            return self.out_q.get(timeout=timeout)
        except queue.Empty:
            return None
