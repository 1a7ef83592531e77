"""
Endpoint implementations and the resolver that opens them
"""
import ipaddress
import socket
import sys
from typing import BinaryIO, Optional, Tuple

from ..core.constants import DEFAULT_ACCEPT_POLL_INTERVAL, DEFAULT_BACKLOG
from ..core.exceptions import SetupError
from ..core.interfaces import Listener, PeerAddress, Sink, Source
from ..core.logging import get_logger

logger = get_logger(__name__)


# ============================================================
# File / standard stream endpoints
# ============================================================

class FileEndpoint(Source, Sink):
    """
    Binary file object used as a source or a sink.

    Standard streams are borrowed (owned=False): close() marks the endpoint
    closed but leaves the process stream open.
    """

    def __init__(self, fileobj: BinaryIO, name: str, owned: bool = True, flush: bool = False):
        self._file = fileobj
        self.name = name
        self._owned = owned
        self._flush = flush
        self._closed = False
        self._read_into = getattr(fileobj, "readinto1", None) or fileobj.readinto

    def read_into(self, view: memoryview) -> int:
        n = self._read_into(view)
        # Non-blocking raw files return None when no data is ready
        return n or 0

    def write(self, view: memoryview) -> int:
        n = self._file.write(view)
        if self._flush:
            self._file.flush()
        return n or 0

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owned:
            self._file.close()
        elif self._flush:
            self._file.flush()

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"FileEndpoint({self.name!r})"


# ============================================================
# Socket endpoints
# ============================================================

class SocketEndpoint(Source, Sink):
    """Connected TCP socket used as a source (accepted client) or a sink (outbound)"""

    def __init__(self, sock: socket.socket, name: str):
        self._sock = sock
        self.name = name
        self._closed = False

    def read_into(self, view: memoryview) -> int:
        return self._sock.recv_into(view)

    def write(self, view: memoryview) -> int:
        return self._sock.send(view)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"SocketEndpoint({self.name!r})"


class TcpListener(Listener):
    """
    Listening TCP socket.

    The socket carries a poll timeout so that a blocked accept() returns
    periodically and the caller can observe a cancellation flag; Python
    restarts accept() after a signal handler runs instead of failing it.
    """

    def __init__(self, sock: socket.socket, name: str):
        self._sock = sock
        self.name = name
        self._closed = False

    @property
    def address(self) -> PeerAddress:
        host, port = self._sock.getsockname()[:2]
        return PeerAddress(host, port)

    def accept(self) -> Optional[Tuple[Source, PeerAddress]]:
        try:
            conn, addr = self._sock.accept()
        except socket.timeout:
            return None
        conn.settimeout(None)
        peer = PeerAddress(addr[0], addr[1])
        return SocketEndpoint(conn, name=f"client {peer}"), peer

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"TcpListener({self.name!r})"


# ============================================================
# Resolver
# ============================================================

def _parse_ipv4(ip: str) -> str:
    """Validate a dotted-quad IPv4 address"""
    try:
        return str(ipaddress.IPv4Address(ip))
    except ValueError as e:
        raise SetupError(f"Invalid IP address {ip!r}: {e}") from e


def open_file_source(path: str) -> FileEndpoint:
    """
    Open a file for reading.

    Raises:
        SetupError: If the file cannot be opened
    """
    try:
        fileobj = open(path, "rb")
    except OSError as e:
        raise SetupError(f"Cannot open {path}: {e.strerror or e}") from e
    logger.debug(f"Opened input file {path}")
    return FileEndpoint(fileobj, name=path)


def stdin_source() -> FileEndpoint:
    """Borrow the process standard input as a source"""
    return FileEndpoint(sys.stdin.buffer, name="<stdin>", owned=False)


def stdout_sink() -> FileEndpoint:
    """Borrow the process standard output as a sink"""
    return FileEndpoint(sys.stdout.buffer, name="<stdout>", owned=False, flush=True)


def open_listener(
    ip: str,
    port: int,
    backlog: int = DEFAULT_BACKLOG,
    poll_interval: float = DEFAULT_ACCEPT_POLL_INTERVAL,
) -> TcpListener:
    """
    Bind and listen on ip:port.

    Args:
        ip: IPv4 address to bind
        port: TCP port (0 picks an ephemeral port)
        backlog: Listen queue length
        poll_interval: Seconds accept() blocks before returning None

    Raises:
        SetupError: If the address is invalid or bind/listen fails
    """
    host = _parse_ipv4(ip)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
        sock.settimeout(poll_interval)
    except OSError as e:
        sock.close()
        raise SetupError(f"Cannot listen on {host}:{port}: {e.strerror or e}") from e

    listener = TcpListener(sock, name=f"{host}:{port}")
    logger.info(f"Listening on {listener.address}")
    return listener


def connect_sink(ip: str, port: int) -> SocketEndpoint:
    """
    Connect to ip:port for outbound relaying.

    Raises:
        SetupError: If the address is invalid or the connection fails
    """
    host = _parse_ipv4(ip)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((host, port))
    except OSError as e:
        sock.close()
        raise SetupError(f"Cannot connect to {host}:{port}: {e.strerror or e}") from e

    logger.info(f"Connected to {host}:{port}")
    return SocketEndpoint(sock, name=f"{host}:{port}")
