from .datasources import DatasourceFileConfig
from .manager import ConfigManager, load_datasources

__all__ = ["ConfigManager", "DatasourceFileConfig", "load_datasources"]
