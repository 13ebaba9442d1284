"""Websocket transport for the KiwiSDR sound channel."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.protocol import State
from websockets.sync.client import connect

from .common import USER_AGENT, log
from .errors import KiwiConnectionError, ReceiveError

NORMAL_CLOSURE = 1000


class FrameKind(Enum):
    TEXT = "text"
    BINARY = "binary"
    CLOSE = "close"


@dataclass
class TransportFrame:
    """One physical read from the transport."""
    kind:         FrameKind
    data:         bytes = b""
    final:        bool = True       # False while more fragments of the message follow
    close_code:   Optional[int] = None
    close_reason: str = ""


class WebSocketTransport:
    """
    Thin wrapper around a synchronous ``websockets`` client connection.
    Surfaces connect and read failures as package errors and reports a
    server close handshake as a CLOSE frame instead of raising.
    """

    def __init__(self, user_agent: str = USER_AGENT,
                 open_timeout: float = 10.0,
                 close_timeout: float = 5.0):
        self.user_agent    = user_agent
        self.open_timeout  = open_timeout
        self.close_timeout = close_timeout
        self._ws           = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._ws.protocol.state is State.OPEN

    def open(self, uri: str, origin: Optional[str] = None):
        try:
            self._ws = connect(
                uri,
                origin=origin,
                user_agent_header=self.user_agent,
                compression=None,
                open_timeout=self.open_timeout,
                close_timeout=self.close_timeout,
            )
        except (OSError, WebSocketException) as e:
            raise KiwiConnectionError(f"Could not connect to {uri}: {e}") from e

    def send_text(self, text: str):
        if self._ws is None:
            raise ReceiveError("Transport is not open")
        log.debug(f"TX: {text.strip()}")
        try:
            self._ws.send(text)
        except (OSError, ConnectionClosed) as e:
            raise ReceiveError(f"Send failed: {e}") from e

    def receive(self, timeout: Optional[float] = None) -> Optional[TransportFrame]:
        """
        Wait for one message. Returns None if ``timeout`` elapses first,
        a CLOSE frame if the peer closed the connection, else the message.
        Raises ReceiveError on abnormal termination.
        """
        if self._ws is None:
            raise ReceiveError("Transport is not open")
        try:
            message = self._ws.recv(timeout=timeout)
        except TimeoutError:
            return None
        except ConnectionClosed as e:
            if e.rcvd is None:
                raise ReceiveError(f"Connection lost: {e}") from e
            return TransportFrame(FrameKind.CLOSE,
                                  close_code=e.rcvd.code,
                                  close_reason=e.rcvd.reason)
        except OSError as e:
            raise ReceiveError(f"Receive failed: {e}") from e

        if isinstance(message, str):
            return TransportFrame(FrameKind.TEXT, message.encode("utf-8"))
        return TransportFrame(FrameKind.BINARY, bytes(message))

    def close(self, code: int = NORMAL_CLOSURE, reason: str = ""):
        if not self.is_open:
            return
        try:
            self._ws.close(code=code, reason=reason)
        except OSError as e:
            log.warning(f"Error during close handshake: {e}")

    def release(self):
        if self._ws is None:
            return
        try:
            self._ws.socket.close()
        except OSError as e:
            log.debug(f"Error releasing socket: {e}")
        finally:
            self._ws = None
