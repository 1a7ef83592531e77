"""
Session acceptor: serves one client at a time until cancelled
"""
from typing import Callable, Optional

from rich.console import Console

from ...core.exceptions import AcceptError, TransferError
from ...core.interfaces import Listener, PeerAddress, Sink, Source
from ...core.logging import get_logger, get_stdout_console
from ...core.telemetry import get_telemetry
from .cancellation import CancellationFlag
from .copy import copy_stream
from .models import AcceptorReport, SessionState, TransferStats

logger = get_logger(__name__)
telemetry = get_telemetry()

CopyFunc = Callable[[Source, Sink, int], TransferStats]


class SessionAcceptor:
    """
    Accept loop that relays each client into a fixed sink.

    States:
    - WAITING: blocked in accept (or between poll timeouts)
    - TRANSFERRING: copying the current client into the sink
    - STOPPED: terminal, after cancellation or an interrupted accept

    Sessions never overlap: the next accept only happens after the previous
    client's copy has returned and its endpoint has been closed. A failed
    transfer ends that session only.
    """

    def __init__(
        self,
        listener: Listener,
        sink: Sink,
        buffer_size: int,
        flag: CancellationFlag,
        console: Optional[Console] = None,
        copy: CopyFunc = copy_stream,
    ):
        """
        Initialize acceptor.

        Args:
            listener: Open listening endpoint
            sink: Sink every client is relayed into
            buffer_size: Copy buffer size per session
            flag: Cancellation flag checked between sessions
            console: Console for the Accepted/Closing lines (default stdout)
            copy: Copy engine
        """
        self.listener = listener
        self.sink = sink
        self.buffer_size = buffer_size
        self.flag = flag
        self.console = console or get_stdout_console()
        self._copy = copy
        self.state = SessionState.WAITING

    def run(self) -> AcceptorReport:
        """
        Serve clients until the flag is set or accept is interrupted.

        Returns:
            AcceptorReport for the run

        Raises:
            AcceptError: If accept fails for any reason other than an interruption
        """
        report = AcceptorReport()
        try:
            while not self.flag.is_cancelled:
                self.state = SessionState.WAITING
                try:
                    accepted = self.listener.accept()
                except InterruptedError:
                    logger.info("Accept interrupted, stopping")
                    break
                except OSError as e:
                    raise AcceptError(f"Accept failed on {self.listener.name}: {e}") from e

                if accepted is None:
                    continue

                client, peer = accepted
                if self.flag.is_cancelled:
                    logger.info(f"Cancelled while accepting, dropping {peer}")
                    self._close(client, peer)
                    break
                self._serve(client, peer, report)
        finally:
            self.state = SessionState.STOPPED

        logger.info(
            f"Acceptor stopped after {report.sessions} session(s), "
            f"{report.failed_sessions} failed"
        )
        return report

    def _serve(self, client: Source, peer: PeerAddress, report: AcceptorReport) -> None:
        """Run one transfer session and always close the client"""
        self.state = SessionState.TRANSFERRING
        try:
            self.console.print(f"Accepted from {peer}", markup=False)
            telemetry.record_event("session.accepted")
            stats = self._copy(client, self.sink, self.buffer_size)
        except TransferError as e:
            report.failed_sessions += 1
            logger.warning(f"Session with {peer} failed: {e}")
            telemetry.record_event("session.failed")
        else:
            report.bytes_transferred += stats.bytes_transferred
        finally:
            try:
                self.console.print(f"Closing {peer}", markup=False)
            finally:
                self._close(client, peer)
                report.sessions += 1
                telemetry.record_event("session.closed")

    @staticmethod
    def _close(client: Source, peer: PeerAddress) -> None:
        try:
            client.close()
        except OSError as e:
            logger.warning(f"Error closing {peer}: {e}")
