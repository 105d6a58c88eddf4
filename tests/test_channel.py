import ipaddress
import socket
import time

import pytest

from calorimeter.channel import Channel, ChannelClosedError, ChannelError


@pytest.fixture
def server():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    yield srv
    srv.close()


@pytest.fixture
def connected(server):
    port = server.getsockname()[1]
    channel = Channel()
    channel.open("127.0.0.1", port, 1000)
    conn, _ = server.accept()
    yield channel, conn
    channel.close()
    conn.close()


def test_send_and_receive_round_trip(connected):
    channel, conn = connected
    assert channel.send(b"hello", 1000) == 5
    assert conn.recv(16) == b"hello"
    conn.sendall(b"world")
    assert channel.recv(5, 1000) == b"world"


def test_open_with_integer_address(server):
    port = server.getsockname()[1]
    addr = int(ipaddress.IPv4Address("127.0.0.1"))
    with Channel() as channel:
        channel.open(addr, port, 1000)
        assert channel.is_open() is True
    assert channel.is_open() is False


def test_recv_returns_partial_data_on_timeout(connected):
    channel, conn = connected
    conn.sendall(b"abc")
    start = time.monotonic()
    data = channel.recv(10, 200)
    assert data == b"abc"
    assert time.monotonic() - start >= 0.15


def test_recv_stops_when_peer_closes(connected):
    channel, conn = connected
    conn.sendall(b"xy")
    conn.close()
    assert channel.recv(10, 2000) == b"xy"


def test_default_timeout_used_when_none_given(connected):
    channel, _ = connected
    channel.set_default_timeout(100)
    assert channel.default_timeout_ms == 100
    assert channel.recv(4) == b""


def test_send_empty_returns_zero(connected):
    channel, _ = connected
    assert channel.send(b"", 100) == 0


def test_closed_channel_raises():
    channel = Channel()
    assert channel.is_open() is False
    with pytest.raises(ChannelClosedError):
        channel.recv(4, 10)
    with pytest.raises(ChannelClosedError):
        channel.send(b"x", 10)


def test_closed_error_is_channel_error():
    channel = Channel()
    with pytest.raises(ChannelError):
        channel.recv(1, 10)


def test_negative_size_rejected(connected):
    channel, _ = connected
    with pytest.raises(ValueError):
        channel.recv(-1, 10)


def test_open_refused_raises_after_retries():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    channel = Channel()
    with pytest.raises(ChannelError):
        channel.open("127.0.0.1", port, 150)
    assert channel.is_open() is False


def test_close_is_idempotent(connected):
    channel, _ = connected
    channel.close()
    channel.close()
    assert channel.is_open() is False