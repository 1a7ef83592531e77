"""
Copy engine: moves every byte of a source into a sink
"""
from typing import Callable, TypeVar

from ...core.exceptions import TransferError, is_retryable
from ...core.interfaces import Sink, Source
from ...core.logging import get_logger
from ...core.telemetry import get_telemetry
from .models import TransferStats

logger = get_logger(__name__)
telemetry = get_telemetry()

T = TypeVar("T")


def _retrying(operation: str, endpoint_name: str, call: Callable[[], T]) -> T:
    """
    Invoke call, re-invoking it while it fails with a retryable error.

    Raises:
        TransferError: For any other OSError
    """
    while True:
        try:
            return call()
        except OSError as e:
            if is_retryable(e):
                logger.debug(f"{operation} on {endpoint_name} interrupted, retrying")
                continue
            raise TransferError(operation, endpoint_name, e) from e


def _write_all(sink: Sink, chunk: memoryview, stats: TransferStats) -> None:
    """Write chunk completely, resubmitting the remainder after short writes"""
    remaining = chunk
    while remaining:
        written = _retrying("write", sink.name, lambda: sink.write(remaining))
        stats.writes += 1
        if written <= 0:
            raise TransferError("write", sink.name, OSError("sink accepted no data"))
        if written < len(remaining):
            logger.debug(f"Short write to {sink.name}: {written}/{len(remaining)} bytes")
        remaining = remaining[written:]


def copy_stream(source: Source, sink: Sink, buffer_size: int) -> TransferStats:
    """
    Copy source into sink until source reaches end of stream.

    Bytes arrive in the sink in the order they were read, without gaps or
    duplication. On failure, data already written stays written.

    Args:
        source: Readable endpoint
        sink: Writable endpoint
        buffer_size: Maximum bytes per read

    Returns:
        TransferStats for the completed copy

    Raises:
        ValueError: If buffer_size is not positive
        TransferError: If a read or write fails with a non-retryable error
    """
    if buffer_size <= 0:
        raise ValueError(f"buffer_size must be positive, got {buffer_size}")

    stats = TransferStats()
    buffer = bytearray(buffer_size)

    with memoryview(buffer) as view:
        while True:
            n = _retrying("read", source.name, lambda: source.read_into(view))
            if n == 0:
                break

            stats.reads += 1
            with view[:n] as chunk:
                _write_all(sink, chunk, stats)
            stats.bytes_transferred += n
            logger.debug(f"Relayed {n} bytes {source.name} -> {sink.name}")

    telemetry.record_metric("transfer.bytes", stats.bytes_transferred)
    return stats
