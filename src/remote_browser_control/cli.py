"""Command line interface for remote-browser-control."""

from __future__ import annotations

import asyncio
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import load_config
from .factory import build_surface
from .server import serve_stdio

app = typer.Typer(help="Remote Browser Control entry point")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("remote-browser-control"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


def _collect_overrides(
    headless: Optional[bool],
    prefix: Optional[str],
    notifications: Optional[str],
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if headless is not None:
        overrides["browser"] = {"headless": headless}
    if prefix is not None:
        overrides["catalog"] = {"prefix": prefix}
    if notifications is not None:
        overrides["notifications"] = {"channel": notifications}
    return overrides


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to YAML configuration."),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", help="Path to an .env file with default configuration values."),
]
PrefixOption = Annotated[
    Optional[str],
    typer.Option("--prefix", help="Name prefix for catalog actions."),
]


@app.command()
def tools(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    prefix: PrefixOption = None,
) -> None:
    """List the actions exposed by the catalog."""

    config = load_config(config_path, env_file=env_file, **_collect_overrides(None, prefix, None))
    surface = build_surface(config)
    table = Table(title="Actions")
    table.add_column("Name")
    table.add_column("Capability")
    table.add_column("Session mode")
    for definition in surface.catalog:
        table.add_row(definition.name, definition.capability.value, definition.mode.value)
    Console().print(table)


@app.command()
def serve(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    headless: Annotated[
        Optional[bool],
        typer.Option("--headless/--headed", help="Run the browser in headless mode (or headed)."),
    ] = None,
    prefix: PrefixOption = None,
    notifications: Annotated[
        Optional[str],
        typer.Option("--notifications", help="Notification channel: log, console or none."),
    ] = None,
) -> None:
    """Serve the action catalog over MCP stdio."""

    overrides = _collect_overrides(headless, prefix, notifications)
    config = load_config(config_path, env_file=env_file, **overrides)
    asyncio.run(serve_stdio(config))


if __name__ == "__main__":
    app()
