#!/usr/bin/env python3
"""Command line diagnostics for dbpool datasources."""
import pathlib
from typing import Optional

import typer
from typing_extensions import Annotated

from dbpool.common.errors import DatasourceConfigurationError
from dbpool.common.settings import settings
from dbpool.cli.console import print_error
from dbpool.cli.commands.drivers import list_drivers
from dbpool.cli.commands.show import show_datasources

app = typer.Typer(
    name="dbpool",
    help="Inspect named datasources and their resolved settings.",
    no_args_is_help=True,
    add_completion=False,
)

ConfigOption = Annotated[Optional[pathlib.Path], typer.Option("--config", help="Path to datasource config YAML")]


@app.callback()
def global_callback(
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Environment name (e.g. dev, prod).")] = None,
):
    """
    dbpool CLI Entry Point.
    """
    if env:
        settings.configure_env(env)


@app.command()
def show(config: ConfigOption = None):
    """Show effective and configured settings for each datasource."""
    try:
        show_datasources(config)
    except (DatasourceConfigurationError, FileNotFoundError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1)


@app.command()
def drivers(
    show_all: Annotated[bool, typer.Option("--all", help="Include server databases recognised in URLs")] = False,
):
    """List the driver catalog and which drivers are installed."""
    list_drivers(show_all)


if __name__ == "__main__":
    app()
