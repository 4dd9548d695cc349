import pathlib
from typing import Dict, Optional

import yaml
from pydantic import ValidationError

from dbpool.common.logger import get_logger
from dbpool.common.settings import settings
from dbpool.datasources.models import DatasourceConfig
from .datasources import DatasourceFileConfig

logger = get_logger(__name__)


class ConfigManager:
    """
    Reads datasource configuration files.
    """

    def __init__(self, project_root: Optional[pathlib.Path] = None):
        """
        Args:
            project_root: Optional override for project root.
                          If None, paths are resolved against the CWD.
        """
        self.project_root = project_root
        root = self.project_root or pathlib.Path.cwd()
        self._ds_path = root / settings.datasource_config_path

    @property
    def datasource_path(self) -> pathlib.Path:
        return self._ds_path

    def load_datasources(self, path: Optional[pathlib.Path] = None) -> Dict[str, DatasourceConfig]:
        """
        Loads datasource configurations from YAML.

        Args:
            path: Path to the YAML file. Defaults to the configured path.

        Returns:
            A dictionary mapping datasource names to their raw configuration.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If the file is not valid YAML or fails validation.
        """
        target_path = path or self._ds_path

        if not target_path.exists():
            raise FileNotFoundError(f"Datasource config not found: {target_path}")

        try:
            raw = yaml.safe_load(target_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML from {target_path}: {e}") from e

        if not isinstance(raw, dict):
            raise ValueError(f"Datasource config must be a YAML mapping: {target_path}")

        try:
            file_config = DatasourceFileConfig.model_validate(raw)
        except ValidationError as e:
            raise ValueError(f"Datasource Configuration Invalid: {e}") from e

        logger.info("Loaded %d datasource(s) from %s", len(file_config.datasources), target_path)
        return file_config.datasources


def load_datasources(path: pathlib.Path) -> Dict[str, DatasourceConfig]:
    """Loads datasource configurations from ``path``."""
    return ConfigManager().load_datasources(path)
