"""Exception types raised by the KiwiSDR client."""


class KiwiError(Exception):
    """Base class for every client error."""


class KiwiConnectionError(KiwiError, ConnectionError):
    """The websocket could not be opened. The session never starts."""


class ReceiveError(KiwiError):
    """The transport failed while streaming."""


class AuthenticationRejected(KiwiError):
    """The server answered the auth command with a failure line."""

    def __init__(self, line: str):
        super().__init__(f"Authentication rejected: {line}")
        self.line = line


class MalformedFrame(KiwiError, ValueError):
    """A data frame too short to carry the 4-byte header."""
