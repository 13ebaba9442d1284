"""KiwiSDR IQ streaming client package."""

from .common import (
    KIWI_PORT,
    DEFAULT_SAMPLE_RATE,
    KEEPALIVE_INTERVAL_S,
    log,
)
from .errors import (
    KiwiError,
    KiwiConnectionError,
    ReceiveError,
    AuthenticationRejected,
    MalformedFrame,
)
from .models import KiwiSettings, AudioPacket
from .protocol import (
    build_handshake,
    build_websocket_uri,
    is_auth_failure,
    is_control_message,
    new_session_token,
)
from .audio import parse_audio_packet
from .transport import FrameKind, TransportFrame, WebSocketTransport
from .consumer import AudioConsumer, ConsoleIqConsumer, QueueConsumer
from .session import ExitReason, KiwiSession, SessionState

__all__ = [
	"KIWI_PORT",
	"DEFAULT_SAMPLE_RATE",
	"KEEPALIVE_INTERVAL_S",
	"log",
	"KiwiError",
	"KiwiConnectionError",
	"ReceiveError",
	"AuthenticationRejected",
	"MalformedFrame",
	"KiwiSettings",
	"AudioPacket",
	"build_handshake",
	"build_websocket_uri",
	"is_auth_failure",
	"is_control_message",
	"new_session_token",
	"parse_audio_packet",
	"FrameKind",
	"TransportFrame",
	"WebSocketTransport",
	"AudioConsumer",
	"ConsoleIqConsumer",
	"QueueConsumer",
	"ExitReason",
	"KiwiSession",
	"SessionState",
]
