"""
Effective value resolution for datasource settings.

A configured value always wins. When a value is missing the resolver derives
one, either from the database an explicit URL points at or from the first
embedded driver that is installed, in which case every named datasource gets
its own in-memory database.
"""
from __future__ import annotations

import dataclasses
from typing import Callable, Optional, Sequence

from dbpool.common.errors import NoDriverAvailable, UnknownSettingError
from dbpool.common.logger import get_logger
from dbpool.datasources.drivers import (
    EMBEDDED_DRIVERS,
    KNOWN_DATABASES,
    DriverDescriptor,
    first_available,
    infer_driver_class_name,
    is_driver_available,
)
from dbpool.datasources.models import DatasourceConfig

logger = get_logger(__name__)

FIELDS = ("driver_class_name", "url", "username", "password", "validation_query")


def has_text(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


@dataclasses.dataclass(frozen=True)
class EffectiveSettings:
    """
    Values actually used at runtime for one datasource.

    Attributes:
        driver: The embedded driver the resolver selected, or None when the
            URL was configured explicitly.
    """
    driver_class_name: str
    url: str
    username: str
    password: str
    validation_query: str
    driver: Optional[DriverDescriptor] = None


class SettingsResolver:
    """
    Computes effective settings for a named datasource.

    Resolution is pure: it reads the raw config and checks which drivers are
    importable, and never mutates either.
    """

    def __init__(
        self,
        config: DatasourceConfig,
        catalog: Sequence[DriverDescriptor] = EMBEDDED_DRIVERS,
        known_databases: Sequence[DriverDescriptor] = KNOWN_DATABASES,
        is_available: Callable[[DriverDescriptor], bool] = is_driver_available,
    ):
        """
        Args:
            config: Raw datasource configuration.
            catalog: Embedded drivers, ordered by preference.
            known_databases: Databases recognised in explicit URLs.
            is_available: Predicate telling whether a driver can be loaded.
        """
        self.config = config
        self._catalog = tuple(catalog)
        self._known_databases = tuple(known_databases)
        self._is_available = is_available

    @property
    def name(self) -> str:
        return self.config.name

    def resolve(self, field: str) -> str:
        """
        Returns the effective value of ``field``.

        Raises:
            UnknownSettingError: If ``field`` is not a resolvable setting.
            NoDriverAvailable: If a default is needed and no driver can be loaded.
        """
        if field not in FIELDS:
            raise UnknownSettingError(field, self.name)
        raw = getattr(self.config, field)
        if has_text(raw):
            return raw
        return getattr(self, f"_default_{field}")()

    def resolve_all(self) -> EffectiveSettings:
        values = {field: self.resolve(field) for field in FIELDS}
        return EffectiveSettings(driver=self.selected_driver(), **values)

    def selected_driver(self) -> Optional[DriverDescriptor]:
        """
        Returns the embedded driver the resolver chose, or None when the URL is explicit.

        Credential and validation defaults are only safe to apply for a driver
        chosen here; an explicit URL may point anywhere.
        """
        if has_text(self.config.url):
            return None
        configured = self.config.driver_class_name
        if has_text(configured):
            for descriptor in self._catalog:
                if descriptor.embedded and descriptor.driver_class_name == configured:
                    return descriptor
        descriptor = first_available(self._catalog, self._is_available)
        if descriptor is None:
            raise NoDriverAvailable(self.name, tuple(d.driver_class_name for d in self._catalog))
        return descriptor

    def _default_driver_class_name(self) -> str:
        url = self.config.url
        if not has_text(url):
            return self.selected_driver().driver_class_name

        inferred = infer_driver_class_name(url, self._known_databases)
        if inferred:
            return inferred
        descriptor = first_available(self._catalog, self._is_available)
        if descriptor is None:
            logger.warning("Could not determine a driver for data source '%s' from its URL", self.name)
            return ""
        return descriptor.driver_class_name

    def _default_url(self) -> str:
        return self.selected_driver().in_memory_url(self.name)

    def _default_username(self) -> str:
        descriptor = self.selected_driver()
        return descriptor.default_username if descriptor else ""

    def _default_password(self) -> str:
        descriptor = self.selected_driver()
        return descriptor.default_password if descriptor else ""

    def _default_validation_query(self) -> str:
        descriptor = self.selected_driver()
        return descriptor.validation_query if descriptor else ""
