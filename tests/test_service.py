import re
import socket
import threading
import time

import pytest

from byterelay.core.exceptions import ConflictError, SetupError
from byterelay.domain.relay.cancellation import CancellationFlag
from byterelay.domain.relay.models import AcceptorReport, RelayConfig, TransferStats
from byterelay.domain.relay.service import RelayService


def _free_port() -> int:
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


def test_one_shot_file_to_stdout(tmp_path, capsysbinary):
    path = tmp_path / "greeting.txt"
    path.write_bytes(b"hello world")

    stats = RelayService(RelayConfig(file_name=str(path))).run()

    assert isinstance(stats, TransferStats)
    assert stats.bytes_transferred == 11
    assert capsysbinary.readouterr().out == b"hello world"


def test_one_shot_buffer_size_four(tmp_path, capsysbinary):
    path = tmp_path / "ten.bin"
    path.write_bytes(b"0123456789")

    stats = RelayService(RelayConfig(file_name=str(path), buffer_size=4)).run()

    assert stats.reads == 3
    assert capsysbinary.readouterr().out == b"0123456789"


def test_one_shot_file_to_outbound_socket(tmp_path):
    path = tmp_path / "payload.bin"
    payload = bytes(range(256)) * 40
    path.write_bytes(payload)

    server = socket.create_server(("127.0.0.1", 0))
    received = bytearray()

    def collect():
        conn, _ = server.accept()
        with conn:
            while data := conn.recv(4096):
                received.extend(data)

    thread = threading.Thread(target=collect, daemon=True)
    thread.start()
    try:
        config = RelayConfig(file_name=str(path), ip_out="127.0.0.1", port_out=server.getsockname()[1])
        RelayService(config).run()
        thread.join(timeout=5)
    finally:
        server.close()

    assert bytes(received) == payload


def test_conflicting_options_fail_before_io(tmp_path, monkeypatch):
    def no_sockets(*args, **kwargs):
        raise AssertionError("socket opened")

    monkeypatch.setattr(socket, "socket", no_sockets)
    config = RelayConfig(file_name=str(tmp_path / "in.txt"), ip_in="127.0.0.1")

    with pytest.raises(ConflictError):
        RelayService(config).run()


def test_missing_input_file_is_setup_error(tmp_path):
    with pytest.raises(SetupError):
        RelayService(RelayConfig(file_name=str(tmp_path / "nope"))).run()


def test_server_mode_relays_sessions_until_cancelled(capsysbinary, clean_telemetry):
    port = _free_port()
    flag = CancellationFlag()
    config = RelayConfig(ip_in="127.0.0.1", port_in=port, accept_poll_interval=0.05)
    service = RelayService(config, flag=flag)

    def clients():
        for index, message in enumerate((b"ping", b"pong")):
            for _ in range(100):
                try:
                    conn = socket.create_connection(("127.0.0.1", port))
                    break
                except ConnectionRefusedError:
                    time.sleep(0.02)
            with conn:
                conn.sendall(message)
            deadline = time.monotonic() + 5
            while clean_telemetry.count_events("session.closed") <= index and time.monotonic() < deadline:
                time.sleep(0.01)
        flag.cancel()

    thread = threading.Thread(target=clients, daemon=True)
    thread.start()
    report = service.run()
    thread.join(timeout=5)

    assert isinstance(report, AcceptorReport)
    assert report.sessions == 2
    out = capsysbinary.readouterr().out
    status = re.compile(rb"(Accepted from|Closing) 127\.0\.0\.1:\d+\n")
    assert len(re.findall(rb"Accepted from 127\.0\.0\.1:\d+\n", out)) == 2
    assert len(re.findall(rb"Closing 127\.0\.0\.1:\d+\n", out)) == 2
    assert status.sub(b"", out) == b"pingpong"
