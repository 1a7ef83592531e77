"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import Endpoint, Source, Sink, Listener, PeerAddress
from .telemetry import Telemetry, get_telemetry
from .conversion import parse_port, parse_size

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "Endpoint",
    "Source",
    "Sink",
    "Listener",
    "PeerAddress",
    "Telemetry",
    "get_telemetry",
    "parse_port",
    "parse_size",
]
