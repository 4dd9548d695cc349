"""Datasource configuration, default resolution and engine creation."""
from dbpool.datasources.config import DatasourceConfiguration
from dbpool.datasources.drivers import EMBEDDED_DRIVERS, KNOWN_DATABASES, DriverDescriptor
from dbpool.datasources.models import PRIMARY_NAME, DatasourceConfig
from dbpool.datasources.pool import create_engine, engine_options, engine_url
from dbpool.datasources.registry import DatasourceRegistry
from dbpool.datasources.resolver import EffectiveSettings, SettingsResolver

__all__ = [
    "DatasourceConfig",
    "DatasourceConfiguration",
    "DatasourceRegistry",
    "DriverDescriptor",
    "EffectiveSettings",
    "EMBEDDED_DRIVERS",
    "KNOWN_DATABASES",
    "PRIMARY_NAME",
    "SettingsResolver",
    "create_engine",
    "engine_options",
    "engine_url",
]
