"""KiwiSDR IQ streaming session: connect, handshake, receive loop, teardown."""

import time
from enum import Enum
from typing import Callable, Optional

from .audio import parse_audio_packet
from .common import HEADER_SIZE, KEEPALIVE_INTERVAL_S, RECEIVE_TIMEOUT_S, log
from .errors import AuthenticationRejected, KiwiConnectionError, ReceiveError
from .models import KiwiSettings
from .protocol import (
    KEEPALIVE_COMMAND,
    build_handshake,
    is_auth_failure,
    is_control_message,
)
from .transport import NORMAL_CLOSURE, FrameKind, WebSocketTransport


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    STREAMING = "streaming"
    CLOSING = "closing"
    CLOSED = "closed"
    FAILED = "failed"


class ExitReason(Enum):
    SERVER_CLOSE = "server_close"
    RECEIVE_ERROR = "receive_error"
    AUTH_REJECTED = "auth_rejected"


class KiwiSession:
    """
    One connection to a KiwiSDR sound channel in IQ mode.

    The receive loop is single-threaded: keepalive check, one receive,
    then classify/decode/deliver. Decoded packets are handed to the
    consumer synchronously and in arrival order, so a slow consumer
    stalls reception.

    Usage::

        with KiwiSession(settings, consumer) as session:
            session.connect()
            session.run()
    """

    def __init__(self, settings: KiwiSettings, consumer,
                 transport=None,
                 clock: Callable[[], float] = time.monotonic,
                 keepalive_interval: float = KEEPALIVE_INTERVAL_S,
                 receive_timeout: Optional[float] = RECEIVE_TIMEOUT_S):
        self.settings           = settings
        self.consumer           = consumer
        self._deliver           = getattr(consumer, "on_iq_block", consumer)
        self._transport         = transport or WebSocketTransport()
        self._clock             = clock
        self.keepalive_interval = keepalive_interval
        self.receive_timeout    = receive_timeout

        self.state              = SessionState.DISCONNECTED
        self.error: Optional[Exception] = None
        self.exit_reason: Optional[ExitReason] = None
        self._last_keepalive: Optional[float] = None
        self._assembler         = bytearray()
        self._message_kind: Optional[FrameKind] = None
        self._released          = False

        self.packets_delivered  = 0
        self.control_lines      = 0
        self.frames_discarded   = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()

    def connect(self):
        if self.state is not SessionState.DISCONNECTED:
            raise RuntimeError(f"Cannot connect from state {self.state.value}")
        uri = self.settings.websocket_uri()
        log.info(f"Connecting to {uri}")
        try:
            self._transport.open(uri, origin=f"http://{self.settings.host}")
        except KiwiConnectionError as e:
            self.state = SessionState.FAILED
            self.error = e
            log.error(str(e))
            raise
        self.state = SessionState.CONNECTED
        log.info("Connected")

    def run(self) -> ExitReason:
        """Send the handshake and stream until the connection ends.

        Fatal conditions are logged and left on ``self.error``; the
        connection is closed before returning on every path.
        """
        if self.state is not SessionState.CONNECTED:
            raise RuntimeError(f"Cannot stream from state {self.state.value}")
        self.state = SessionState.STREAMING
        try:
            self.exit_reason = self._stream()
        finally:
            self.close("bye")
            if isinstance(self.error, ReceiveError):
                self.state = SessionState.FAILED
        return self.exit_reason

    def connect_and_stream(self) -> ExitReason:
        self.connect()
        return self.run()

    def close(self, reason: str = "bye"):
        """Graceful close handshake. No-op unless connected or streaming."""
        if self.state not in (SessionState.CONNECTED, SessionState.STREAMING):
            return
        self.state = SessionState.CLOSING
        self._transport.close(NORMAL_CLOSURE, reason)
        self.state = SessionState.CLOSED
        log.info(f"Session closed ({reason})")

    def dispose(self):
        """Close if still open, then release transport and buffers. Runs once."""
        if self._released:
            return
        self._released = True
        try:
            self.close("dispose")
        finally:
            self._transport.release()
            self._assembler = bytearray()

    def _stream(self) -> ExitReason:
        try:
            for command in build_handshake(self.settings):
                self._transport.send_text(command)
        except ReceiveError as e:
            return self._fail(e)
        # the handshake ends with a keepalive
        self._last_keepalive = self._clock()
        log.info(f"Handshake sent, IQ at {self.settings.center_freq_khz:.3f} kHz, "
                 f"{self.settings.sample_rate} Hz")

        # Buffered messages are still returned after the peer closes; the
        # loop ends only on the CLOSE frame or a transport error.
        while True:
            try:
                self._maybe_send_keepalive()
                frame = self._transport.receive(self.receive_timeout)
            except ReceiveError as e:
                return self._fail(e)

            if frame is None:
                continue

            if frame.kind is FrameKind.CLOSE:
                log.info(f"Server initiated close: {frame.close_code} {frame.close_reason}")
                return ExitReason.SERVER_CLOSE

            if not self._assembler:
                self._message_kind = frame.kind
            self._assembler += frame.data
            if not frame.final:
                continue

            message = bytes(self._assembler)
            self._assembler.clear()

            if is_control_message(self._message_kind, message):
                line = message.decode("utf-8", errors="replace").strip()
                if is_auth_failure(line):
                    self.error = AuthenticationRejected(line)
                    log.error(f"Password rejected by server: {line}")
                    return ExitReason.AUTH_REJECTED
                self.control_lines += 1
                log.info(line)
                continue

            if len(message) < HEADER_SIZE:
                self.frames_discarded += 1
                continue

            self._deliver(parse_audio_packet(message))
            self.packets_delivered += 1

    def _maybe_send_keepalive(self):
        if not self._transport.is_open:
            return
        now = self._clock()
        if (self._last_keepalive is not None
                and now - self._last_keepalive < self.keepalive_interval):
            return
        self._transport.send_text(KEEPALIVE_COMMAND)
        self._last_keepalive = now

    def _fail(self, error: ReceiveError) -> ExitReason:
        self.error = error
        log.error(f"Receive error: {error}")
        return ExitReason.RECEIVE_ERROR
