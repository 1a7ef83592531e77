import io
from typing import List, Optional, Sequence, Tuple

import pytest
from rich.console import Console

from byterelay.core.interfaces import Listener, PeerAddress, Sink, Source
from byterelay.core.telemetry import get_telemetry


class MemorySource(Source):
    """Source over bytes, optionally failing on chosen read calls"""

    def __init__(self, data: bytes, name: str = "memory-source", failures: Optional[dict] = None):
        self._data = io.BytesIO(data)
        self.name = name
        self._failures = dict(failures or {})
        self.read_calls = 0
        self._closed = False
        self.close_calls = 0

    def read_into(self, view: memoryview) -> int:
        self.read_calls += 1
        exc = self._failures.pop(self.read_calls, None)
        if exc is not None:
            raise exc
        return self._data.readinto(view)

    def close(self) -> None:
        self.close_calls += 1
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


class MemorySink(Sink):
    """Sink collecting bytes, accepting at most max_write bytes per call"""

    def __init__(self, name: str = "memory-sink", max_write: Optional[int] = None,
                 failures: Optional[dict] = None):
        self.data = bytearray()
        self.name = name
        self.max_write = max_write
        self._failures = dict(failures or {})
        self.write_calls = 0
        self.chunk_sizes: List[int] = []
        self._closed = False

    def write(self, view: memoryview) -> int:
        self.write_calls += 1
        exc = self._failures.pop(self.write_calls, None)
        if exc is not None:
            raise exc
        n = len(view) if self.max_write is None else min(self.max_write, len(view))
        self.data += view[:n]
        self.chunk_sizes.append(n)
        return n

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


class ScriptedListener(Listener):
    """
    Listener replaying a script of accept outcomes.

    Each entry is a (Source, PeerAddress) pair, None for a poll timeout, or an
    exception instance to raise. When the script runs out, the listener raises
    InterruptedError so a test can never hang.
    """

    def __init__(self, script: Sequence, name: str = "scripted"):
        self._script = list(script)
        self.name = name
        self.accept_calls = 0
        self._closed = False

    def accept(self) -> Optional[Tuple[Source, PeerAddress]]:
        self.accept_calls += 1
        if not self._script:
            raise InterruptedError("script exhausted")
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


@pytest.fixture(autouse=True)
def clean_telemetry():
    telemetry = get_telemetry()
    telemetry.clear()
    yield telemetry
    telemetry.clear()


@pytest.fixture
def console_output():
    buffer = io.StringIO()
    console = Console(file=buffer, highlight=False, soft_wrap=True, color_system=None)
    return console, buffer
