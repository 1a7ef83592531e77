"""
Cancellation flag and the signal subscription that sets it
"""
import signal
from contextlib import contextmanager
from typing import Dict, Iterator, Sequence

from ...core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationFlag:
    """
    Monotonic shutdown flag.

    Moves from not-cancelled to cancelled exactly once and is never reset.
    cancel() is a single attribute store so it is safe to call from a signal
    handler.
    """

    __slots__ = ("_cancelled",)

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def __bool__(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancellationFlag(cancelled={self._cancelled})"


@contextmanager
def signal_subscription(
    flag: CancellationFlag,
    signals: Sequence[int] = DEFAULT_SIGNALS,
) -> Iterator[CancellationFlag]:
    """
    Route the given signals to flag.cancel() for the duration of the block.

    Previous handlers are restored on exit. Must be entered from the main
    thread, as with signal.signal().

    Args:
        flag: Flag to set when a signal arrives
        signals: Signal numbers to subscribe (default SIGINT, SIGTERM)
    """
    def _handler(signum, frame):
        flag.cancel()

    previous: Dict[int, object] = {}
    try:
        for signum in signals:
            previous[signum] = signal.signal(signum, _handler)
        yield flag
    finally:
        for signum, handler in previous.items():
            # None means the previous handler was not installed from Python
            signal.signal(signum, signal.SIG_DFL if handler is None else handler)
        if flag.is_cancelled:
            logger.info("Shutdown requested")
