"""
Relay domain module
"""
from .models import RelayConfig, TransferStats, AcceptorReport, SessionState
from .copy import copy_stream
from .cancellation import CancellationFlag, signal_subscription
from .acceptor import SessionAcceptor
from .service import RelayService

__all__ = [
    "RelayConfig",
    "TransferStats",
    "AcceptorReport",
    "SessionState",
    "copy_stream",
    "CancellationFlag",
    "signal_subscription",
    "SessionAcceptor",
    "RelayService",
]
