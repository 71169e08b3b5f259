"""Remote console (RCON) client.

Layers, bottom up:
- packet: length-prefixed frame codec, tolerant of partial input
- session: read/write accumulators and request id bookkeeping over a transport
- client: authenticate / execute on top of a session
"""

from .client import RconClient
from .errors import (
    AuthenticationError,
    ConnectionClosedError,
    MalformedPacketError,
    RconError,
    ResponseDecodeError,
    SessionPoisonedError,
)
from .packet import Packet
from .session import Session
from .transport import SocketTransport, Transport

__all__ = [
    "AuthenticationError",
    "ConnectionClosedError",
    "MalformedPacketError",
    "Packet",
    "RconClient",
    "RconError",
    "ResponseDecodeError",
    "Session",
    "SessionPoisonedError",
    "SocketTransport",
    "Transport",
]
