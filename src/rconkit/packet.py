from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .constants import HEADER_FORMAT, HEADER_LEN, LENGTH_PREFIX, MAX_FRAME_LENGTH, TRAILER
from .errors import MalformedPacketError

_HEADER = struct.Struct(HEADER_FORMAT)
_LENGTH = struct.Struct("<i")

Buffer = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True, slots=True)
class Packet:
    request_id: int
    type_id: int
    payload: bytes = b""

    @property
    def length(self) -> int:
        """Value of the length field: everything after the prefix itself."""
        return len(self.payload) + HEADER_LEN

    def write_to(self, sink: bytearray) -> None:
        sink += _HEADER.pack(self.length, self.request_id, self.type_id)
        sink += self.payload
        sink += TRAILER

    def to_bytes(self) -> bytes:
        out = bytearray()
        self.write_to(out)
        return bytes(out)

    @staticmethod
    def read_from(buf: Buffer, max_length: Optional[int] = MAX_FRAME_LENGTH) -> Optional[Tuple["Packet", int]]:
        """Carve one packet off the front of ``buf``.

        Returns ``(packet, consumed)`` or ``None`` when ``buf`` does not yet
        hold a whole frame. ``buf`` itself is never modified, so a ``None``
        result can simply be retried once more bytes have arrived. A length field
        above ``max_length`` is rejected up front rather than buffered.
        """
        if len(buf) < LENGTH_PREFIX:
            return None
        (length,) = _LENGTH.unpack_from(buf, 0)
        if length < HEADER_LEN:
            raise MalformedPacketError(f"length field {length} is below the {HEADER_LEN} byte minimum")
        if max_length is not None and length > max_length:
            raise MalformedPacketError(f"length field {length} exceeds the {max_length} byte limit")
        total = LENGTH_PREFIX + length
        if len(buf) < total:
            return None

        _, request_id, type_id = _HEADER.unpack_from(buf, 0)
        payload_start = _HEADER.size
        payload_end = total - len(TRAILER)
        payload = bytes(buf[payload_start:payload_end])
        return Packet(request_id=request_id, type_id=type_id, payload=payload), total
