"""CLI commands for jsoncall.

``call`` is the client: build one request envelope, send it over TCP, print the
``Ok`` result on stdout or the ``Err`` payload on stderr. ``serve`` runs the
example service that speaks the same envelope.
"""

from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from jsoncall import __logo__, __version__
from jsoncall.cli.shared.logging_utils import configure_logging
from jsoncall.client import call as rpc_call
from jsoncall.config.loader import load_config
from jsoncall.config.schema import Config
from jsoncall.envelope import parse_argument
from jsoncall.utils.exceptions import ProtocolError, TransportError

EXIT_OK = 0
EXIT_REMOTE_ERROR = 1
EXIT_TRANSPORT_ERROR = 3
EXIT_PROTOCOL_ERROR = 4

app = typer.Typer(
    name="jsoncall",
    help=f"{__logo__} jsoncall - call envelope RPC services over raw TCP",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} jsoncall v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
):
    """jsoncall - call envelope RPC services over raw TCP."""
    pass


def _load_config(config_path: Path | None) -> Config:
    try:
        return load_config(config_path)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e


def _file_level(config: Config, verbose: bool) -> str | None:
    if not config.log_to_file:
        return None
    return "DEBUG" if verbose else config.log_level


# ============================================================================
# Call
# ============================================================================


@app.command(context_settings={"ignore_unknown_options": True})
def call(
    address: str = typer.Argument(..., help="Server host name or IP address"),
    port: int = typer.Argument(..., min=0, max=65535, help="Server TCP port"),
    method: str = typer.Argument(..., help="RPC method name (request key and result key)"),
    args: list[str] = typer.Argument(None, help="Arguments as raw JSON fragments, e.g. '\"Ada\"' 42"),
    auto_quote: bool = typer.Option(
        None, "--auto-quote/--no-auto-quote", help="Send arguments that are not valid JSON as JSON strings"
    ),
    half_close: bool = typer.Option(
        None, "--half-close/--no-half-close", help="Shut down the write side after sending the request"
    ),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.jsoncall/config.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print request/response debug logs on stderr"),
):
    """Call METHOD on ADDRESS:PORT and print the result."""
    config = _load_config(config_path)
    configure_logging("DEBUG" if verbose else None, _file_level(config, verbose), name="call")

    quote = config.auto_quote if auto_quote is None else auto_quote
    arguments = [parse_argument(arg, auto_quote=quote) for arg in args or []]

    try:
        reply = rpc_call(
            address,
            port,
            method,
            arguments,
            half_close=config.half_close if half_close is None else half_close,
            chunk_size=config.chunk_size,
        )
    except TransportError as e:
        logger.debug("Call failed: {}", e.to_dict())
        err_console.print(f"[red]Transport error:[/red] {escape(e.message)}")
        raise typer.Exit(EXIT_TRANSPORT_ERROR) from e
    except ProtocolError as e:
        logger.debug("Call failed: {}", e.to_dict())
        err_console.print(f"[red]Protocol error:[/red] {escape(e.message)}")
        if e.details.get("response"):
            err_console.print(f"[dim]Response: {escape(e.details['response'])}[/dim]")
        raise typer.Exit(EXIT_PROTOCOL_ERROR) from e

    if reply.ok:
        typer.echo(reply.to_json(), nl=False)
        return
    typer.echo(reply.to_json(), err=True, nl=False)
    raise typer.Exit(EXIT_REMOTE_ERROR)


# ============================================================================
# Serve
# ============================================================================


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Listen address (default from config: 127.0.0.1)"),
    port: int = typer.Option(None, "--port", "-p", min=0, max=65535, help="Listen port (default from config: 5959)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.jsoncall/config.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Run the example service (hello, add) in the foreground."""
    from jsoncall.server import serve as run_server

    config = _load_config(config_path)
    configure_logging(
        "DEBUG" if verbose else config.log_level,
        _file_level(config, verbose),
        name="serve",
    )
    host = host or config.serve.host
    port = config.serve.port if port is None else port
    console.print(f"{__logo__} Serving example service on [cyan]{host}:{port}[/cyan] (Ctrl+C to stop)")
    try:
        run_server(host, port)
    except OSError as e:
        err_console.print(f"[red]Cannot listen on {host}:{port}:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        console.print("\nGoodbye!")


if __name__ == "__main__":
    app()
