from __future__ import annotations


class RconError(Exception):
    """Base class for everything this package raises on its own."""


class MalformedPacketError(RconError, ValueError):
    pass


class ConnectionClosedError(RconError, ConnectionError):
    """The peer closed the stream before a complete frame arrived."""


class ResponseDecodeError(RconError, ValueError):
    def __init__(self, payload: bytes, reason: str):
        super().__init__(f"reply payload is not valid UTF-8: {reason}")
        self.payload = payload


class SessionPoisonedError(RconError):
    """A previous read or write failed part way; the session cannot be reused."""


class AuthenticationError(RconError):
    pass
