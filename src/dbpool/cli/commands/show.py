import pathlib
from typing import Optional

from rich.markup import escape
from rich.table import Table

from dbpool.cli.console import console, print_success
from dbpool.configs import ConfigManager
from dbpool.datasources import DatasourceRegistry

MASK = "********"


def _display(value: Optional[str], secret: bool = False) -> str:
    if value is None:
        return "[dim]-[/dim]"
    if secret and value:
        return MASK
    if not value:
        return '[dim]""[/dim]'
    return escape(value)


def show_datasources(config_path: Optional[pathlib.Path] = None) -> None:
    """Displays effective and configured values for every datasource."""
    manager = ConfigManager()
    if config_path is not None:
        datasources = manager.load_datasources(config_path)
    elif manager.datasource_path.exists():
        datasources = manager.load_datasources()
    else:
        # No file at all still yields the in-memory default datasource
        datasources = {}
    registry = DatasourceRegistry(datasources)

    for configuration in registry.list_configurations():
        table = Table(title=f"Data source '{configuration.name}'")
        table.add_column("Setting", style="cyan", no_wrap=True)
        table.add_column("Effective", style="green")
        table.add_column("Configured", style="magenta")

        rows = [
            ("driver_class_name", configuration.driver_class_name, configuration.configured_driver_class_name, False),
            ("url", configuration.url, configuration.configured_url, False),
            ("username", configuration.username, configuration.configured_username, False),
            ("password", configuration.password, configuration.configured_password, True),
            ("validation_query", configuration.validation_query, configuration.configured_validation_query, False),
        ]
        for setting, effective, configured, secret in rows:
            table.add_row(setting, _display(effective, secret), _display(configured, secret))
        if configuration.jndi_name:
            table.add_row("jndi_name", configuration.jndi_name, configuration.jndi_name)

        console.print(table)

    print_success(f"Resolved {len(registry.list_names())} data source(s)")
