"""
Relay domain models
"""
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any

from ...core.constants import (
    DEFAULT_ACCEPT_POLL_INTERVAL,
    DEFAULT_BACKLOG,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    MAX_PORT,
)


class SessionState(str, Enum):
    """Session acceptor state"""
    WAITING = "waiting"
    TRANSFERRING = "transferring"
    STOPPED = "stopped"


@dataclass
class TransferStats:
    """Outcome of one copy"""
    bytes_transferred: int = 0
    reads: int = 0
    writes: int = 0


@dataclass
class AcceptorReport:
    """Summary of a server-mode run"""
    sessions: int = 0
    failed_sessions: int = 0
    bytes_transferred: int = 0


@dataclass
class RelayConfig:
    """Fully resolved relay configuration"""
    file_name: Optional[str] = None
    ip_in: Optional[str] = None
    ip_out: Optional[str] = None
    port_in: int = DEFAULT_PORT
    port_out: int = DEFAULT_PORT
    buffer_size: int = DEFAULT_BUFFER_SIZE
    verbose: bool = False
    backlog: int = DEFAULT_BACKLOG
    accept_poll_interval: float = DEFAULT_ACCEPT_POLL_INTERVAL
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[Path] = None

    @property
    def server_mode(self) -> bool:
        return self.ip_in is not None

    def validate(self) -> None:
        """Validate configuration"""
        from ...core.exceptions import ConfigError, ConflictError

        if self.file_name and self.ip_in:
            raise ConflictError("Conflicting options: can't pass -i and a filename")
        if self.buffer_size <= 0:
            raise ConfigError(f"Invalid buffer_size: {self.buffer_size}")
        for label, port in (("port_in", self.port_in), ("port_out", self.port_out)):
            if not (0 <= port <= MAX_PORT):
                raise ConfigError(f"Invalid {label}: {port}")
        if self.backlog <= 0:
            raise ConfigError(f"Invalid backlog: {self.backlog}")
        if not math.isfinite(self.accept_poll_interval) or self.accept_poll_interval <= 0:
            raise ConfigError(f"Invalid accept_poll_interval: {self.accept_poll_interval}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "file_name": self.file_name,
            "ip_in": self.ip_in,
            "ip_out": self.ip_out,
            "port_in": self.port_in,
            "port_out": self.port_out,
            "buffer_size": self.buffer_size,
            "verbose": self.verbose,
            "backlog": self.backlog,
            "accept_poll_interval": self.accept_poll_interval,
            "log_level": self.log_level,
            "log_file": str(self.log_file) if self.log_file else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelayConfig":
        """Create from dictionary"""
        log_file = data.get("log_file")
        return cls(
            file_name=data.get("file_name"),
            ip_in=data.get("ip_in"),
            ip_out=data.get("ip_out"),
            port_in=data.get("port_in", DEFAULT_PORT),
            port_out=data.get("port_out", DEFAULT_PORT),
            buffer_size=data.get("buffer_size", DEFAULT_BUFFER_SIZE),
            verbose=data.get("verbose", False),
            backlog=data.get("backlog", DEFAULT_BACKLOG),
            accept_poll_interval=data.get("accept_poll_interval", DEFAULT_ACCEPT_POLL_INTERVAL),
            log_level=data.get("log_level", DEFAULT_LOG_LEVEL),
            log_file=Path(log_file).expanduser() if log_file else None,
        )
