"""
byterelay - single-session byte-stream relay

Moves bytes from a file, standard input or inbound TCP clients into standard
output or an outbound TCP connection:
- One-shot mode: copy one source into one sink
- Server mode: accept clients one at a time and relay each into the sink
- Ctrl-C / SIGTERM stop accepting new clients; an in-flight transfer finishes
"""

__version__ = "0.1.0"

from .core import (
    RelayError,
    ConfigError,
    ConversionError,
    ConflictError,
    SetupError,
    TransferError,
    AcceptError,
    PeerAddress,
    parse_port,
    parse_size,
)

from .domain.relay import (
    RelayConfig,
    RelayService,
    SessionAcceptor,
    SessionState,
    CancellationFlag,
    TransferStats,
    AcceptorReport,
    copy_stream,
    signal_subscription,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "RelayError",
    "ConfigError",
    "ConversionError",
    "ConflictError",
    "SetupError",
    "TransferError",
    "AcceptError",
    # Conversion
    "parse_port",
    "parse_size",
    # Relay
    "PeerAddress",
    "RelayConfig",
    "RelayService",
    "SessionAcceptor",
    "SessionState",
    "CancellationFlag",
    "TransferStats",
    "AcceptorReport",
    "copy_stream",
    "signal_subscription",
]
