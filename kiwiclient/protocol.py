"""KiwiSDR sound-channel protocol rules.

The session opens ``ws://<host>:<port>/ws/kiwi/<token>/SND`` and then
configures the channel with newline-terminated ``SET`` commands. The
server replies with text (or binary frames tagged ``MSG ``) for control
traffic and untagged binary frames for IQ data.
"""

import random

from .common import (
    AGC_DEFAULTS,
    CONTROL_PREFIX,
    PASSBAND_HIGH_HZ,
    PASSBAND_LOW_HZ,
)
from .transport import FrameKind

KEEPALIVE_COMMAND = "SET keepalive\n"

_rng = random.SystemRandom()


def new_session_token() -> str:
    """Random 63-bit non-negative integer rendered as decimal text."""
    return str(_rng.getrandbits(63))


def build_websocket_uri(host: str, port: int) -> str:
    return f"ws://{host}:{port}/ws/kiwi/{new_session_token()}/SND"


def build_handshake(settings) -> list[str]:
    """Return the ordered SET commands that configure an IQ session.

    Auth must be first: the server ignores configuration sent before it.
    The trailing keepalive also serves as the first keepalive of the session.
    """
    if settings.password:
        auth = f"SET auth t=kiwi p={settings.password}\n"
    else:
        auth = "SET auth t=kiwi\n"

    rate = settings.sample_rate
    agc = " ".join(f"{key}={value}" for key, value in AGC_DEFAULTS.items())
    return [
        auth,
        f"SET AR OK in={rate} out={rate}\n",
        "SET compression=0\n",
        f"SET ident_user={settings.ident}\n",
        "SET squelch=0 max=0\n",
        f"SET agc=1 {agc}\n",
        f"SET mod=iq low_cut={PASSBAND_LOW_HZ} high_cut={PASSBAND_HIGH_HZ} "
        f"freq={settings.center_freq_hz / 1e3:.3f}\n",
        KEEPALIVE_COMMAND,
    ]


def is_control_message(kind: FrameKind, message: bytes) -> bool:
    """True for text frames and for binary frames starting with ``MSG ``."""
    if kind is FrameKind.TEXT:
        return True
    return message[:len(CONTROL_PREFIX)] == CONTROL_PREFIX


def is_auth_failure(line: str) -> bool:
    return "auth" in line and "failed" in line
