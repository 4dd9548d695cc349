from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy.engine import Engine

from dbpool.common.errors import DatasourceNotFoundError, DuplicateDatasourceError
from dbpool.common.logger import datasource_context, get_logger
from dbpool.datasources.config import DatasourceConfiguration
from dbpool.datasources.models import PRIMARY_NAME, DatasourceConfig
from dbpool.datasources.pool import create_engine

logger = get_logger(__name__)

DatasourceInput = Union[Mapping[str, Any], Iterable[DatasourceConfig], None]


class DatasourceRegistry:
    """
    Manages the named datasource configurations and their engines.

    Acts as the factory for DatasourceConfiguration objects and the cache for
    SQLAlchemy engines. Every configuration is resolved when it is registered,
    so a datasource that cannot be configured fails at startup.
    """

    def __init__(self, datasources: DatasourceInput = None, **configuration_kwargs: Any):
        """
        Initializes the registry.

        Args:
            datasources: Either a mapping of name to raw properties (or
                DatasourceConfig), or an iterable of DatasourceConfig. When
                empty, a single in-memory ``default`` datasource is registered.
            **configuration_kwargs: Forwarded to every DatasourceConfiguration
                (``catalog``, ``is_available``).
        """
        self._configuration_kwargs = configuration_kwargs
        self._configurations: Dict[str, DatasourceConfiguration] = {}
        self._engines: Dict[str, Engine] = {}

        configs = list(self._to_configs(datasources))
        if not configs:
            configs = [DatasourceConfig(name=PRIMARY_NAME)]
        for config in configs:
            self.register(config)

    @staticmethod
    def _to_configs(datasources: DatasourceInput) -> Iterable[DatasourceConfig]:
        if not datasources:
            return []
        if isinstance(datasources, Mapping):
            configs = []
            for name, raw in datasources.items():
                if isinstance(raw, DatasourceConfig):
                    configs.append(raw.model_copy(update={"name": name}))
                else:
                    configs.append(DatasourceConfig.model_validate({**(raw or {}), "name": name}))
            return configs
        return datasources

    def register(self, config: DatasourceConfig) -> DatasourceConfiguration:
        """
        Registers and resolves a datasource.

        Raises:
            DuplicateDatasourceError: If the name is already registered.
            NoDriverAvailable: If no driver can be found for the datasource.
        """
        if config.name in self._configurations:
            raise DuplicateDatasourceError(config.name)

        configuration = DatasourceConfiguration.from_config(config, **self._configuration_kwargs)
        with datasource_context(config.name):
            configuration.post_construct()
        self._configurations[config.name] = configuration
        return configuration

    def get_configuration(self, name: str = PRIMARY_NAME) -> DatasourceConfiguration:
        if name not in self._configurations:
            raise DatasourceNotFoundError(name)
        return self._configurations[name]

    def get_by_jndi_name(self, jndi_name: str) -> DatasourceConfiguration:
        for configuration in self._configurations.values():
            if configuration.jndi_name == jndi_name:
                return configuration
        raise DatasourceNotFoundError(jndi_name)

    def get_engine(self, name: str = PRIMARY_NAME) -> Engine:
        """
        Retrieves (or creates) the pooled engine for a datasource.

        Args:
            name: The name of the datasource.

        Returns:
            The SQLAlchemy engine.
        """
        configuration = self.get_configuration(name)
        if name not in self._engines:
            self._engines[name] = create_engine(configuration)
        return self._engines[name]

    def list_names(self) -> List[str]:
        return list(self._configurations)

    def list_configurations(self) -> List[DatasourceConfiguration]:
        """Returns a list of all registered configurations."""
        return list(self._configurations.values())

    def dispose(self, name: Optional[str] = None) -> None:
        """Disposes cached engines, releasing their pooled connections."""
        names = [name] if name else list(self._engines)
        for engine_name in names:
            engine = self._engines.pop(engine_name, None)
            if engine is not None:
                logger.info("Disposing engine for data source '%s'", engine_name)
                engine.dispose()
