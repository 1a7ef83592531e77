"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from rich.markup import escape

from ... import __version__
from ...core.constants import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_PORT,
    ExitCode,
)
from ...core.exceptions import (
    AcceptError,
    ConfigError,
    ConversionError,
    RelayError,
    SetupError,
    TransferError,
)
from ...core.logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from ...domain.relay import RelayService
from ..config.loader import ConfigLoader

logger = get_logger(__name__)
stderr_console = get_stderr_console()

# Config key -> flag shown in diagnostics
OPTION_LABELS = {
    "ip_in": "-i",
    "ip_out": "-o",
    "port_in": "-p",
    "port_out": "-P",
    "buffer_size": "-b",
}

# Most specific class first
EXIT_CODES = (
    (ConversionError, ExitCode.INVALID_NUMBER),
    (ConfigError, ExitCode.USAGE_ERROR),
    (SetupError, ExitCode.SETUP_ERROR),
    (TransferError, ExitCode.TRANSFER_ERROR),
    (AcceptError, ExitCode.ACCEPT_ERROR),
)

app = typer.Typer(
    name="byterelay",
    add_completion=False,
    help="Relay a byte stream from a file, stdin or TCP clients to stdout or a TCP peer",
    pretty_exceptions_enable=False,
)


def exit_code_for(error: RelayError) -> ExitCode:
    """Map a relay error to its process exit code"""
    for error_type, code in EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return ExitCode.SETUP_ERROR


def _version_callback(value: bool) -> None:
    if value:
        get_stdout_console().print(f"byterelay {__version__}")
        raise typer.Exit()


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def main(
    file: Optional[str] = typer.Argument(
        None,
        metavar="[FILE]",
        help="Input file (default: stdin). Cannot be combined with -i",
        show_default=False,
    ),
    ip_in: Optional[str] = typer.Option(
        None, "-i",
        metavar="IP",
        help="Input IP address: listen for clients and relay each one (server mode)",
    ),
    ip_out: Optional[str] = typer.Option(
        None, "-o",
        metavar="IP",
        help="Output IP address: connect and relay into it (default: stdout)",
    ),
    port_in: Optional[str] = typer.Option(
        None, "-p",
        metavar="PORT",
        help=f"Input port (default: {DEFAULT_PORT})",
    ),
    port_out: Optional[str] = typer.Option(
        None, "-P",
        metavar="PORT",
        help=f"Output port (default: {DEFAULT_PORT})",
    ),
    buffer_size: Optional[str] = typer.Option(
        None, "-b",
        metavar="SIZE",
        help=f"Size of the read/write buffer in bytes (default: {DEFAULT_BUFFER_SIZE})",
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose",
        help="Verbose: trace every read/write",
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Configuration file path (TOML, [relay] table)",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file",
        help="Log file path",
    ),
    version: bool = typer.Option(
        False, "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """
    Relay bytes from FILE (or stdin) to stdout, or with -i accept TCP clients
    one at a time and relay each of them. With -o the output goes to a TCP
    peer instead of stdout. Ctrl-C stops accepting new clients.

    Examples:
        byterelay notes.txt
        byterelay -b 4096 -o 10.0.0.2 -P 7000 < data.bin
        byterelay -i 0.0.0.0 -p 5000 > received.bin
    """
    try:
        loader = ConfigLoader(labels=OPTION_LABELS)
        raw = loader.load(
            toml_path=config_file,
            cli_overrides={
                "file_name": file,
                "ip_in": ip_in,
                "ip_out": ip_out,
                "port_in": port_in,
                "port_out": port_out,
                "buffer_size": buffer_size,
                "verbose": True if verbose else None,
                "log_level": log_level,
                "log_file": str(log_file) if log_file else None,
            },
        )
        config = loader.build(raw)

        level = "DEBUG" if config.verbose else config.log_level
        setup_logging(level=level, log_file=config.log_file)
        logger.debug(f"Configuration: {config.to_dict()}")

        RelayService(config).run()

    except RelayError as e:
        code = exit_code_for(e)
        logger.debug(f"Exiting with {code.name}: {e}")
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(int(code))
    except Exception as e:
        logger.exception("Relay failed")
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(int(ExitCode.SETUP_ERROR))


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
