"""Named datasource settings with in-memory defaults, pooled through SQLAlchemy."""
from dbpool.common.errors import DatasourceConfigurationError, NoDriverAvailable
from dbpool.datasources import (
    DatasourceConfig,
    DatasourceConfiguration,
    DatasourceRegistry,
    SettingsResolver,
    create_engine,
)

__all__ = [
    "DatasourceConfig",
    "DatasourceConfiguration",
    "DatasourceConfigurationError",
    "DatasourceRegistry",
    "NoDriverAvailable",
    "SettingsResolver",
    "create_engine",
]
