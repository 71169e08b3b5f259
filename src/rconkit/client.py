from __future__ import annotations

import logging
from typing import Optional, Union

from .constants import (
    AUTH_FAILED_ID,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_MS,
    SERVERDATA_AUTH,
    SERVERDATA_EXECCOMMAND,
)
from .errors import AuthenticationError, ResponseDecodeError
from .session import Session
from .transport import SocketTransport, Transport

logger = logging.getLogger(__name__)

Text = Union[str, bytes]


def _as_bytes(data: Text) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


class RconClient:
    def __init__(self, transport: Transport):
        self.transport = transport
        self.session = Session(transport)

    @classmethod
    def connect(
        cls,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> "RconClient":
        logger.debug("connecting to %s:%d", host, port)
        return cls(SocketTransport.connect(host, port, timeout_ms=timeout_ms))

    def authenticate(self, credential: Text) -> bool:
        """Send the credential; False only when the server answers with id -1.

        Any other reply id counts as success, including one that does not
        match the request just sent.
        """
        self.session.queue_write(SERVERDATA_AUTH, _as_bytes(credential))
        self.session.flush()
        reply = self.session.receive_one()
        ok = reply.request_id != AUTH_FAILED_ID
        logger.info("authentication %s", "accepted" if ok else "rejected")
        return ok

    def execute(self, command: Text) -> str:
        request_id = self.session.queue_write(SERVERDATA_EXECCOMMAND, _as_bytes(command))
        self.session.flush()
        reply = self.session.receive_one()
        if reply.request_id != request_id:
            logger.debug("reply id %d does not match request id %d", reply.request_id, request_id)
        try:
            return reply.payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ResponseDecodeError(reply.payload, str(exc)) from exc

    def command(self, text: str) -> str:
        return self.execute(text)

    def login(self, password: Text) -> None:
        if not self.authenticate(password):
            raise AuthenticationError("server rejected the password")

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "RconClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
