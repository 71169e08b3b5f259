from __future__ import annotations

import logging
from typing import Optional, Union

from .constants import INT32_MAX, MAX_FRAME_LENGTH
from .errors import ConnectionClosedError, SessionPoisonedError
from .packet import Packet
from .transport import Transport

logger = logging.getLogger(__name__)


class Session:
    """Framing state for one connection.

    Owns the read and write accumulators and the request id counter. Only one
    request may be in flight at a time. If a read or flush fails (or is
    interrupted) the buffers are left as they were at that moment, so the
    session marks itself poisoned and refuses further use.
    """

    def __init__(self, transport: Transport, max_frame_length: Optional[int] = MAX_FRAME_LENGTH):
        self.transport = transport
        self.max_frame_length = max_frame_length
        self.read_buf = bytearray()
        self.write_buf = bytearray()
        self.next_request_id = 0
        self.poisoned = False

    def _check_usable(self) -> None:
        if self.poisoned:
            raise SessionPoisonedError("session was left inconsistent by an earlier failure")

    def queue_write(self, type_id: int, payload: Union[bytes, bytearray]) -> int:
        """Encode a packet into the write buffer and return its request id."""
        self._check_usable()
        request_id = self.next_request_id
        Packet(request_id=request_id, type_id=type_id, payload=bytes(payload)).write_to(self.write_buf)
        self.next_request_id = 0 if request_id >= INT32_MAX else request_id + 1
        logger.debug("queued packet id=%d type=%d len=%d", request_id, type_id, len(payload))
        return request_id

    def flush(self) -> None:
        self._check_usable()
        try:
            view = memoryview(self.write_buf)
            sent = 0
            try:
                while sent < len(view):
                    n = self.transport.send(view[sent:])
                    if n == 0:
                        raise ConnectionClosedError(f"transport accepted no bytes with {len(view) - sent} left to send")
                    sent += n
            finally:
                view.release()
        except BaseException:
            self.poisoned = True
            raise
        logger.debug("flushed %d bytes", sent)
        self.write_buf.clear()

    def receive_one(self) -> Packet:
        self._check_usable()
        try:
            while True:
                result = Packet.read_from(self.read_buf, self.max_frame_length)
                if result is not None:
                    packet, consumed = result
                    del self.read_buf[:consumed]
                    logger.debug(
                        "received packet id=%d type=%d len=%d",
                        packet.request_id,
                        packet.type_id,
                        len(packet.payload),
                    )
                    return packet
                if self.transport.recv_into(self.read_buf) == 0:
                    raise ConnectionClosedError(
                        f"unexpected end of stream with {len(self.read_buf)} bytes buffered"
                    )
        except BaseException:
            self.poisoned = True
            raise
