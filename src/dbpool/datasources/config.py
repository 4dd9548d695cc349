from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence

from dbpool.common.logger import datasource_context, get_logger
from dbpool.datasources.drivers import EMBEDDED_DRIVERS, DriverDescriptor, is_driver_available
from dbpool.datasources.models import PRIMARY_NAME, DatasourceConfig, normalize_keys
from dbpool.datasources.resolver import EffectiveSettings, SettingsResolver

logger = get_logger(__name__)


class DatasourceConfiguration:
    """
    Connection and pool settings for one named datasource.

    If the url, driver, username, password or validation query are missing,
    sensible defaults are provided when possible. If nothing beyond the name
    is configured, an in-memory database is configured from the embedded
    drivers that are installed.

    Each setting has an effective accessor (``url``) and a configured
    accessor (``configured_url``) returning the raw value, possibly None.
    """

    def __init__(
        self,
        name: str = PRIMARY_NAME,
        *,
        catalog: Sequence[DriverDescriptor] = EMBEDDED_DRIVERS,
        is_available: Callable[[DriverDescriptor], bool] = is_driver_available,
        config: Optional[DatasourceConfig] = None,
        **properties: Any,
    ):
        """
        Args:
            name: Name of the datasource, unique within the registry.
            catalog: Embedded drivers, ordered by preference.
            is_available: Predicate telling whether a driver can be loaded.
            config: Already validated raw configuration. When given, ``name``
                and ``properties`` are ignored.
            **properties: Raw settings and pool tuning properties.
        """
        self._catalog = tuple(catalog)
        self._is_available = is_available
        if config is None:
            config = DatasourceConfig.model_validate({**properties, "name": name})
        self._config = config
        self._effective: Optional[EffectiveSettings] = None
        logger.info("Configured data source '%s'", config.name)

    @classmethod
    def from_config(cls, config: DatasourceConfig, **kwargs: Any) -> "DatasourceConfiguration":
        return cls(config.name, config=config, **kwargs)

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> DatasourceConfig:
        return self._config

    @property
    def resolver(self) -> SettingsResolver:
        return SettingsResolver(self._config, catalog=self._catalog, is_available=self._is_available)

    def post_construct(self) -> EffectiveSettings:
        """Resolves every setting once so misconfiguration fails at startup."""
        with datasource_context(self.name):
            self._effective = self.resolver.resolve_all()
            logger.debug(
                "Resolved driver=%s url=%s username=%s validation_query=%s",
                self._effective.driver_class_name,
                self._effective.url,
                self._effective.username,
                self._effective.validation_query,
            )
        return self._effective

    @property
    def effective(self) -> EffectiveSettings:
        if self._effective is None:
            return self.post_construct()
        return self._effective

    def _update(self, **changes: Any) -> None:
        self._config = self._config.model_copy(update=changes)
        self._effective = None

    # Effective values

    @property
    def driver_class_name(self) -> str:
        return self.effective.driver_class_name

    @property
    def url(self) -> str:
        return self.effective.url

    @property
    def username(self) -> str:
        return self.effective.username

    @property
    def password(self) -> str:
        return self.effective.password

    @property
    def validation_query(self) -> str:
        return self.effective.validation_query

    # Configured values

    @property
    def configured_driver_class_name(self) -> Optional[str]:
        return self._config.driver_class_name

    @property
    def configured_url(self) -> Optional[str]:
        return self._config.url

    @property
    def configured_username(self) -> Optional[str]:
        return self._config.username

    @property
    def configured_password(self) -> Optional[str]:
        return self._config.password

    @property
    def configured_validation_query(self) -> Optional[str]:
        return self._config.validation_query

    # Setters

    def set_driver_class_name(self, value: Optional[str]) -> None:
        self._update(driver_class_name=value)

    def set_url(self, value: Optional[str]) -> None:
        self._update(url=value)

    def set_username(self, value: Optional[str]) -> None:
        self._update(username=value)

    def set_password(self, value: Optional[str]) -> None:
        self._update(password=value)

    def set_validation_query(self, value: Optional[str]) -> None:
        self._update(validation_query=value)

    def set_db_properties(self, db_properties: Optional[Dict[str, Any]]) -> None:
        db_properties = normalize_keys(db_properties)
        logger.info("db_properties for '%s': %s", self.name, sorted(db_properties))
        self._update(db_properties=db_properties)

    @property
    def db_properties(self) -> Dict[str, Any]:
        return dict(self._config.db_properties)

    @property
    def pool_properties(self) -> Dict[str, Any]:
        return dict(self._config.pool)

    @property
    def jndi_name(self) -> Optional[str]:
        return self._config.jndi_name

    @jndi_name.setter
    def jndi_name(self, value: Optional[str]) -> None:
        self._update(jndi_name=value)

    def __repr__(self) -> str:
        return f"DatasourceConfiguration(name={self.name!r}, url={self._config.url!r})"
