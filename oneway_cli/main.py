#!/usr/bin/env python3
"""
OneWay CLI - Unidirectional state management

Main entrypoint for the oneway command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from oneway.config import OneWayConfig
from oneway.logging_config import setup_logging
from oneway.metrics import start_metrics_server
from oneway_cli.commands import demo

app = typer.Typer(
    name="oneway",
    help="Unidirectional state management CLI",
    add_completion=False,
)

console = Console()


@app.callback()
def startup():
    """Configure logging and the metrics server from ONEWAY_* variables."""
    config = OneWayConfig.from_env()
    setup_logging(level=config.log_level, fmt=config.log_format)
    start_metrics_server(enabled=config.metrics_enabled, port=config.metrics_port)


app.command(name="demo")(demo.demo_command)


@app.command()
def version():
    """Show version information."""
    from oneway_cli import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]OneWay[/bold]", f"v{__version__}")
    table.add_row("Delivery", "asyncio")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
