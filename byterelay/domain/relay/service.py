"""
Relay domain service - top-level flow
"""
from contextlib import ExitStack, nullcontext
from typing import Optional, Union

from rich.console import Console

from ...core.interfaces import Sink, Source
from ...core.logging import get_logger
from ...core.telemetry import get_telemetry
from ...infrastructure.endpoints import (
    connect_sink,
    open_file_source,
    open_listener,
    stdin_source,
    stdout_sink,
)
from .acceptor import SessionAcceptor
from .cancellation import CancellationFlag, signal_subscription
from .copy import copy_stream
from .models import AcceptorReport, RelayConfig, TransferStats

logger = get_logger(__name__)
telemetry = get_telemetry()


class RelayService:
    """
    Relay service - pure relay logic.

    Resolves the configured endpoints, runs either a single copy (one-shot
    mode) or the session acceptor (server mode), and closes every endpoint it
    opened on every exit path. No direct dependency on the CLI.
    """

    def __init__(
        self,
        config: RelayConfig,
        flag: Optional[CancellationFlag] = None,
        console: Optional[Console] = None,
        handle_signals: bool = True,
    ):
        """
        Initialize relay service.

        Args:
            config: Resolved relay configuration
            flag: Cancellation flag (a fresh one if omitted)
            console: Console for session status lines
            handle_signals: Route SIGINT/SIGTERM to the flag while serving
        """
        self.config = config
        self.flag = flag or CancellationFlag()
        self.console = console
        self.handle_signals = handle_signals

    def run(self) -> Union[TransferStats, AcceptorReport]:
        """
        Run the relay.

        Returns:
            TransferStats in one-shot mode, AcceptorReport in server mode

        Raises:
            ConfigError: If the configuration is inconsistent (before any I/O)
            SetupError: If an endpoint cannot be opened
            TransferError: If the one-shot copy fails
            AcceptError: If the listening endpoint fails
        """
        self.config.validate()
        if self.config.server_mode:
            return self.run_server()
        return self.run_one_shot()

    def run_one_shot(self) -> TransferStats:
        """Copy the configured source into the configured sink once"""
        with ExitStack() as stack:
            source = stack.enter_context(self._open_source())
            sink = stack.enter_context(self._open_sink())
            stats = copy_stream(source, sink, self.config.buffer_size)

        logger.info(f"Transferred {stats.bytes_transferred} bytes in {stats.reads} read(s)")
        telemetry.record_event("relay.one_shot")
        return stats

    def run_server(self) -> AcceptorReport:
        """Accept clients on the configured address until cancelled"""
        cfg = self.config
        with ExitStack() as stack:
            listener = stack.enter_context(
                open_listener(
                    cfg.ip_in,
                    cfg.port_in,
                    backlog=cfg.backlog,
                    poll_interval=cfg.accept_poll_interval,
                )
            )
            sink = stack.enter_context(self._open_sink())
            stack.enter_context(
                signal_subscription(self.flag) if self.handle_signals else nullcontext(self.flag)
            )

            acceptor = SessionAcceptor(
                listener,
                sink,
                cfg.buffer_size,
                self.flag,
                console=self.console,
            )
            report = acceptor.run()

        telemetry.record_event("relay.server")
        telemetry.record_metric("relay.server.sessions", report.sessions)
        return report

    def _open_source(self) -> Source:
        if self.config.file_name:
            return open_file_source(self.config.file_name)
        return stdin_source()

    def _open_sink(self) -> Sink:
        if self.config.ip_out:
            return connect_sink(self.config.ip_out, self.config.port_out)
        return stdout_sink()
