"""
CLI tool for running and inspecting the relay.

Provides commands for starting the server and viewing the effective
configuration.
"""

import logging

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chat_relay.settings import app_settings
from chat_relay.uvicorn_filters import ExcludeMetricsFilter

typer_app = typer.Typer(
    name="chat-relay",
    help="WebSocket broadcast relay - run the server and inspect its settings",
    add_completion=False,
)
console = Console()


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(
        app_settings.HOST, "--host", help="Interface to bind"
    ),
    port: int = typer.Option(
        app_settings.PORT, "--port", "-p", help="Port to listen on"
    ),
    reload: bool = typer.Option(
        False, "--reload", help="Restart the server on code changes"
    ),
):
    """
    Start the relay under uvicorn.

    The WebSocket endpoint is served at WS_PATH; /health and /metrics are
    kept out of the access log.

    Example:
        chat-relay serve --port 9000
    """
    logging.getLogger("uvicorn.access").addFilter(ExcludeMetricsFilter())

    console.print(
        Panel.fit(
            f"[bold cyan]Chat relay[/bold cyan]\n\n"
            f"ws://{host}:{port}{app_settings.WS_PATH}",
            border_style="cyan",
        )
    )

    uvicorn.run(
        "chat_relay:application",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@typer_app.command(name="settings")
def show_settings():
    """
    Display the effective relay configuration.

    Values come from the environment, falling back to defaults.

    Example:
        WS_OVERSIZE_POLICY=close chat-relay settings
    """
    console.print()
    table = Table(
        "Setting",
        "Value",
        title="Relay Settings",
        show_lines=True,
    )

    for name, value in app_settings.model_dump().items():
        table.add_row(f"[cyan]{name}[/cyan]", str(value))

    console.print(table)
    console.print()


if __name__ == "__main__":
    typer_app()
