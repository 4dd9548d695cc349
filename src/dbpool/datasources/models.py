import re
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PRIMARY_NAME = "default"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def normalize_key(key: str) -> str:
    """Normalizes ``driverClassName`` and ``driver-class-name`` to ``driver_class_name``."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).replace("-", "_").replace(".", "_").lower()


def normalize_keys(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected a mapping of properties, got {type(raw).__name__}")
    return {normalize_key(str(k)): v for k, v in raw.items()}


class DatasourceConfig(BaseModel):
    """
    Raw configuration for a single named datasource.

    Only the values supplied by configuration input are held here; defaults
    are computed by the resolver. Keys that are not connection settings are
    pool tuning properties and are kept in ``pool`` unchanged.
    """
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str = PRIMARY_NAME
    driver_class_name: Optional[str] = None
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    validation_query: Optional[str] = None
    jndi_name: Optional[str] = None
    db_properties: Dict[str, Any] = Field(default_factory=dict)
    pool: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fold_properties(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = normalize_keys(data)
        # Alias used by pool property files
        if "data_source_jndi" in data and "jndi_name" not in data:
            data["jndi_name"] = data.pop("data_source_jndi")
        pool = normalize_keys(data.pop("pool", None))
        for key in list(data):
            if key not in cls.model_fields:
                pool[key] = data.pop(key)
        data["pool"] = pool
        data["db_properties"] = normalize_keys(data.get("db_properties"))
        return data
