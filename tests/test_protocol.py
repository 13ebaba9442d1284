"""Tests for handshake building and frame classification."""

import re

from kiwiclient.models import KiwiSettings
from kiwiclient.protocol import (
    KEEPALIVE_COMMAND,
    build_handshake,
    build_websocket_uri,
    is_auth_failure,
    is_control_message,
    new_session_token,
)
from kiwiclient.transport import FrameKind


def test_handshake_exact_commands(settings):
    """Passwordless handshake should match the wire tokens in order."""
    assert build_handshake(settings) == [
        "SET auth t=kiwi\n",
        "SET AR OK in=12000 out=12000\n",
        "SET compression=0\n",
        "SET ident_user=KiwiClient\n",
        "SET squelch=0 max=0\n",
        "SET agc=1 hang=0 thresh=-110 slope=6 decay=1000 manGain=50\n",
        "SET mod=iq low_cut=-6000 high_cut=6000 freq=7050.000\n",
        "SET keepalive\n",
    ]


def test_handshake_with_password():
    """A password should appear in the auth command, which stays first."""
    s = KiwiSettings(host="h", sample_rate=20250, center_freq_hz=14074000.0,
                     password="secret")
    commands = build_handshake(s)
    assert len(commands) == 8
    assert commands[0] == "SET auth t=kiwi p=secret\n"
    assert commands[1] == "SET AR OK in=20250 out=20250\n"
    assert commands[-1] == KEEPALIVE_COMMAND


def test_handshake_empty_password_uses_passwordless_form():
    s = KiwiSettings(host="h", password="")
    assert build_handshake(s)[0] == "SET auth t=kiwi\n"


def test_handshake_frequency_three_decimals():
    """Frequency is sent in kHz with exactly three decimals."""
    s = KiwiSettings(host="h", center_freq_hz=10000123.4)
    mod = build_handshake(s)[6]
    assert mod.endswith("freq=10000.123\n")


def test_handshake_commands_newline_terminated(settings):
    for command in build_handshake(settings):
        assert command.startswith("SET ")
        assert command.endswith("\n")


def test_control_text_frame():
    """Any text-tagged frame is control, whatever its content."""
    assert is_control_message(FrameKind.TEXT, b"")
    assert is_control_message(FrameKind.TEXT, b"\x01\x02\x03\x04\x05")


def test_control_binary_msg_prefix():
    assert is_control_message(FrameKind.BINARY, b"MSG audio_rate=12000")
    assert is_control_message(FrameKind.BINARY, b"MSG ")


def test_binary_data_not_control():
    assert not is_control_message(FrameKind.BINARY, b"\x00\x01\x02\x03\x04\x05")
    assert not is_control_message(FrameKind.BINARY, b"MSGX more")
    assert not is_control_message(FrameKind.BINARY, b"msg lowercase")


def test_short_binary_not_control():
    """Binary frames shorter than the prefix are never control."""
    assert not is_control_message(FrameKind.BINARY, b"MSG")
    assert not is_control_message(FrameKind.BINARY, b"")


def test_auth_failure_substrings():
    assert is_auth_failure("auth failed: bad password")
    assert is_auth_failure("failed auth")
    assert not is_auth_failure("audio OK")
    assert not is_auth_failure("auth ok")
    assert not is_auth_failure("AUTH FAILED")


def test_session_token_is_63_bit_decimal():
    for _ in range(50):
        token = new_session_token()
        assert token.isdigit()
        assert 0 <= int(token) < 2 ** 63


def test_websocket_uri_format():
    uri = build_websocket_uri("kiwi.example.net", 8073)
    assert re.fullmatch(r"ws://kiwi\.example\.net:8073/ws/kiwi/\d+/SND", uri)


def test_websocket_uri_fresh_token_each_call(settings):
    """Each connection attempt should get its own session token."""
    uris = {settings.websocket_uri() for _ in range(20)}
    assert len(uris) == 20
