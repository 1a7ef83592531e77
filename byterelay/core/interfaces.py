"""
Core interfaces for the endpoints the relay moves bytes between
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class PeerAddress:
    """Address of an accepted client"""
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class Endpoint(ABC):
    """Open byte channel, closed exactly once by its owner"""

    name: str = "endpoint"

    @abstractmethod
    def close(self) -> None:
        """Release the underlying handle (idempotent)"""
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether close() has been called"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Source(Endpoint):
    """Endpoint supporting sequential reads"""

    @abstractmethod
    def read_into(self, view: memoryview) -> int:
        """
        Read up to len(view) bytes into view.

        Returns:
            Number of bytes read, 0 at end of stream
        """
        pass


class Sink(Endpoint):
    """Endpoint supporting sequential writes"""

    @abstractmethod
    def write(self, view: memoryview) -> int:
        """
        Write some prefix of view.

        Returns:
            Number of bytes accepted, which may be fewer than len(view)
        """
        pass


class Listener(Endpoint):
    """Listening endpoint handing out one client Source per connection"""

    @abstractmethod
    def accept(self) -> Optional[Tuple[Source, PeerAddress]]:
        """
        Wait for the next client.

        Returns:
            (client source, peer address), or None if the poll interval
            elapsed without a connection
        """
        pass
