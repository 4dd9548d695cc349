from rich.table import Table

from dbpool.cli.console import console
from dbpool.datasources.drivers import EMBEDDED_DRIVERS, KNOWN_DATABASES, is_driver_available


def list_drivers(show_all: bool = False) -> None:
    """Displays the driver catalog and whether each driver is installed."""
    catalog = KNOWN_DATABASES if show_all else EMBEDDED_DRIVERS

    table = Table(title="Database Drivers")
    table.add_column("Database", style="cyan", no_wrap=True)
    table.add_column("Driver", style="magenta")
    table.add_column("Embedded")
    table.add_column("Validation Query")
    table.add_column("Status")

    for descriptor in catalog:
        status = "[green]Installed[/green]" if is_driver_available(descriptor) else "[yellow]Missing[/yellow]"
        table.add_row(
            descriptor.name,
            descriptor.driver_class_name,
            "yes" if descriptor.embedded else "no",
            descriptor.validation_query,
            status,
        )

    console.print(table)
