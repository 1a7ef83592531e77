import io
import socket

import pytest

from byterelay.core.exceptions import SetupError
from byterelay.infrastructure.endpoints import (
    FileEndpoint,
    connect_sink,
    open_file_source,
    open_listener,
)


def test_open_file_source_reads_file(tmp_path):
    path = tmp_path / "input.bin"
    path.write_bytes(b"hello world")

    with open_file_source(str(path)) as source:
        buffer = bytearray(64)
        n = source.read_into(memoryview(buffer))

    assert buffer[:n] == b"hello world"
    assert source.closed


def test_open_missing_file_is_setup_error(tmp_path):
    with pytest.raises(SetupError, match="Cannot open"):
        open_file_source(str(tmp_path / "missing.bin"))


def test_borrowed_stream_is_not_closed():
    stream = io.BytesIO()
    endpoint = FileEndpoint(stream, name="<stdout>", owned=False, flush=True)
    assert endpoint.write(memoryview(b"abc")) == 3
    endpoint.close()
    endpoint.close()
    assert endpoint.closed
    assert not stream.closed
    assert stream.getvalue() == b"abc"


def test_owned_file_is_closed_once():
    stream = io.BytesIO(b"x")
    endpoint = FileEndpoint(stream, name="file")
    endpoint.close()
    endpoint.close()
    assert stream.closed


@pytest.mark.parametrize("ip", ["not-an-ip", "256.1.1.1", "::1"])
def test_invalid_address_is_setup_error(ip):
    with pytest.raises(SetupError, match="Invalid IP address"):
        open_listener(ip, 0)
    with pytest.raises(SetupError, match="Invalid IP address"):
        connect_sink(ip, 5000)


def test_listener_poll_timeout_returns_none():
    with open_listener("127.0.0.1", 0, poll_interval=0.01) as listener:
        assert listener.address.host == "127.0.0.1"
        assert listener.address.port > 0
        assert listener.accept() is None


def test_listener_accepts_client():
    with open_listener("127.0.0.1", 0, poll_interval=1.0) as listener:
        with socket.create_connection(("127.0.0.1", listener.address.port)) as client:
            client_port = client.getsockname()[1]
            client.sendall(b"hi")
            source, peer = listener.accept()
            with source:
                buffer = bytearray(8)
                n = source.read_into(memoryview(buffer))

    assert buffer[:n] == b"hi"
    assert str(peer) == f"127.0.0.1:{client_port}"


def test_bind_conflict_is_setup_error():
    with open_listener("127.0.0.1", 0) as first:
        port = first.address.port
        # SO_REUSEADDR does not allow two listeners on the same port
        with pytest.raises(SetupError, match="Cannot listen"):
            open_listener("127.0.0.1", port)


def test_connect_refused_is_setup_error():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()

    with pytest.raises(SetupError, match="Cannot connect"):
        connect_sink("127.0.0.1", port)


def test_connect_sink_writes_to_peer():
    server = socket.create_server(("127.0.0.1", 0))
    try:
        sink = connect_sink("127.0.0.1", server.getsockname()[1])
        conn, _ = server.accept()
        with conn, sink:
            assert sink.write(memoryview(b"data")) == 4
            assert conn.recv(16) == b"data"
    finally:
        server.close()
