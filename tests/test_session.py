from __future__ import annotations

import struct

import pytest

from fakes import FakeTransport, decode_all, frames
from rconkit.constants import INT32_MAX
from rconkit.errors import ConnectionClosedError, MalformedPacketError, SessionPoisonedError
from rconkit.packet import Packet
from rconkit.session import Session


def test_request_ids_count_up_from_zero():
    t = FakeTransport()
    s = Session(t)
    ids = [s.queue_write(2, b"cmd%d" % i) for i in range(5)]
    assert ids == [0, 1, 2, 3, 4]
    assert [p.request_id for p in decode_all(s.write_buf)] == [0, 1, 2, 3, 4]
    assert t.send_calls == 0
    assert t.sent == b""


def test_request_id_wraps_to_zero():
    s = Session(FakeTransport())
    s.next_request_id = INT32_MAX
    assert s.queue_write(2, b"a") == INT32_MAX
    assert s.queue_write(2, b"b") == 0
    assert s.next_request_id == 1


def test_flush_retries_partial_sends():
    t = FakeTransport(send_limit=3)
    s = Session(t)
    s.queue_write(3, b"testpwd")
    s.queue_write(2, b"save-off")
    expected = bytes(s.write_buf)

    s.flush()

    assert t.sent == expected
    assert t.send_calls == -(-len(expected) // 3)
    assert s.write_buf == b""


def test_flush_error_propagates_and_poisons():
    t = FakeTransport()
    t.send_error = BrokenPipeError("gone")
    s = Session(t)
    s.queue_write(2, b"list")
    with pytest.raises(BrokenPipeError):
        s.flush()
    assert s.poisoned
    with pytest.raises(SessionPoisonedError):
        s.queue_write(2, b"list")
    with pytest.raises(SessionPoisonedError):
        s.receive_one()


def test_receive_one_reassembles_byte_by_byte():
    reply = Packet(0, 0, b"There are 0 of a max of 20 players online")
    raw = reply.to_bytes()
    t = FakeTransport([raw[i : i + 1] for i in range(len(raw))])
    s = Session(t)
    assert s.receive_one() == reply
    assert t.reads == len(raw)
    assert s.read_buf == b""


def test_receive_one_keeps_following_frame_buffered():
    first, second = Packet(1, 0, b"one"), Packet(2, 0, b"two")
    t = FakeTransport([frames(first, second)])
    s = Session(t)
    assert s.receive_one() == first
    assert s.read_buf == second.to_bytes()
    assert s.receive_one() == second
    assert t.reads == 1


def test_close_mid_frame_is_connection_closed():
    raw = Packet(0, 0, b"abcdef").to_bytes()
    assert len(raw) == 20
    t = FakeTransport([raw[:5]])
    s = Session(t)
    with pytest.raises(ConnectionClosedError) as info:
        s.receive_one()
    assert "5 bytes" in str(info.value)
    assert isinstance(info.value, ConnectionError)
    assert s.poisoned


def test_close_before_any_bytes():
    with pytest.raises(ConnectionClosedError):
        Session(FakeTransport()).receive_one()


def test_read_error_propagates_unchanged():
    err = ConnectionResetError("reset by peer")
    s = Session(FakeTransport([b"\x0e\x00", err]))
    with pytest.raises(ConnectionResetError) as info:
        s.receive_one()
    assert info.value is err
    assert s.poisoned


def test_malformed_length_poisons_session():
    s = Session(FakeTransport([b"\x02\x00\x00\x00" + b"\x00" * 10]))
    with pytest.raises(MalformedPacketError):
        s.receive_one()
    with pytest.raises(SessionPoisonedError):
        s.receive_one()


def test_interrupted_read_poisons_session():
    s = Session(FakeTransport([KeyboardInterrupt()]))
    with pytest.raises(KeyboardInterrupt):
        s.receive_one()
    assert s.poisoned


def test_flush_zero_byte_send_is_connection_closed():
    t = FakeTransport(send_limit=0)
    s = Session(t)
    s.queue_write(2, b"list")
    with pytest.raises(ConnectionClosedError):
        s.flush()
    assert t.send_calls == 1
    assert s.poisoned


def test_oversized_length_is_rejected_without_buffering():
    header = struct.pack("<iii", 2**31 - 1, 0, 0)
    t = FakeTransport([header])
    s = Session(t)
    with pytest.raises(MalformedPacketError):
        s.receive_one()
    assert t.reads == 1


def test_frame_limit_can_be_raised():
    reply = Packet(0, 0, b"x" * 64)
    s = Session(FakeTransport([reply.to_bytes()]), max_frame_length=None)
    assert s.receive_one() == reply
