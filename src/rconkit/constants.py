from __future__ import annotations

LENGTH_PREFIX = 4
HEADER_FORMAT = "<iii"  # length, request_id, type_id
HEADER_LEN = 10  # request_id + type_id + trailer, counted by the length field
TRAILER = b"\x00\x00"

SERVERDATA_EXECCOMMAND = 2
SERVERDATA_AUTH = 3

AUTH_FAILED_ID = -1
INT32_MAX = 2**31 - 1

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 25575
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_READ_SIZE = 4096
MAX_FRAME_LENGTH = 1 << 20
