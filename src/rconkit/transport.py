from __future__ import annotations

import socket
from typing import Protocol

from .constants import DEFAULT_READ_SIZE


class Transport(Protocol):
    """Byte stream a Session talks through.

    ``recv_into`` appends whatever is available to ``buf`` and returns the
    count (0 means the peer closed). ``send`` may accept fewer bytes than
    offered and returns how many it took.
    """

    def recv_into(self, buf: bytearray) -> int: ...

    def send(self, data: memoryview) -> int: ...


class SocketTransport:
    def __init__(self, sock: socket.socket, read_size: int = DEFAULT_READ_SIZE):
        self.sock = sock
        self.read_size = read_size

    @classmethod
    def connect(cls, host: str, port: int, timeout_ms: int = 0) -> "SocketTransport":
        timeout = timeout_ms / 1000.0 if timeout_ms > 0 else None
        sock = socket.create_connection((host, port), timeout=timeout)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        return cls(sock)

    def recv_into(self, buf: bytearray) -> int:
        chunk = self.sock.recv(self.read_size)
        buf += chunk
        return len(chunk)

    def send(self, data: memoryview) -> int:
        return self.sock.send(data)

    def close(self) -> None:
        self.sock.close()
