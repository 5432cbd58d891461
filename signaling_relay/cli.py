"""
Command line interface for the signaling relay.

Provides commands for running the server and inspecting the effective
configuration.
"""

import logging
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from signaling_relay import __version__
from signaling_relay.settings import app_settings

typer_app = typer.Typer(
    name="signaling-relay",
    help="WebSocket signaling relay - run the server and inspect its configuration",
    add_completion=False,
)
console = Console()


def _fail(message: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            f"[red]✗ {message}[/red]",
            border_style="red",
            title="Error",
        )
    )
    console.print()
    raise typer.Exit(code=1)


@typer_app.command(name="serve")
def serve(
    host: Optional[str] = typer.Option(
        None, "--host", "-h", help="Bind address (default: HOST setting)"
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        min=1,
        max=65535,
        help="Listening port (default: PORT setting)",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Root log level (default: LOG_LEVEL setting)"
    ),
):
    """
    Run the signaling relay.

    Exits with code 1 if the server cannot start, e.g. when the port is
    already in use.

    Examples:
        signaling-relay serve
        signaling-relay serve --port 9000 --log-level debug
    """
    host = host or app_settings.HOST
    port = port or app_settings.PORT

    if log_level:
        level = log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise typer.BadParameter(
                f"Unknown log level: {log_level}", param_hint="--log-level"
            )
        logging.getLogger().setLevel(level)

    console.print(
        Panel.fit(
            f"[bold cyan]Signaling relay {__version__}[/bold cyan]\n\n"
            f"ws://{host}:{port}{app_settings.WS_PATH}",
            border_style="cyan",
        )
    )

    config = uvicorn.Config(
        "signaling_relay:application",
        factory=True,
        host=host,
        port=port,
        # Logging is configured by signaling_relay.logging
        log_config=None,
    )
    server = uvicorn.Server(config)

    try:
        server.run()
    except SystemExit as exc:
        # uvicorn exits with 1 when binding fails
        if exc.code:
            _fail(f"Failed to start server on {host}:{port}")
        raise

    if not server.started:
        _fail(f"Failed to start server on {host}:{port}")


@typer_app.command(name="config")
def show_config():
    """
    Display the effective configuration.

    Values come from environment variables, falling back to defaults.

    Example:
        PORT=9000 signaling-relay config
    """
    table = Table("Setting", "Value", title="Signaling relay configuration")

    for name, value in app_settings.model_dump().items():
        table.add_row(f"[cyan]{name}[/cyan]", str(value))

    console.print()
    console.print(table)
    console.print()


if __name__ == "__main__":
    typer_app()
