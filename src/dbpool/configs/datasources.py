from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from dbpool.datasources.models import DatasourceConfig


class DatasourceFileConfig(BaseModel):
    """File-level schema for datasources.yaml."""
    version: int = Field(1, description="Schema version")
    datasources: Dict[str, DatasourceConfig] = Field(default_factory=dict)

    @field_validator("datasources", mode="before")
    @classmethod
    def _name_entries(cls, value: Any) -> Any:
        # Entries are keyed by name; an empty entry declares a bare in-memory datasource
        if not isinstance(value, dict):
            return value
        named = {}
        for name, raw in value.items():
            if raw is None:
                raw = {}
            if isinstance(raw, dict):
                raw = {**raw, "name": str(name)}
            named[str(name)] = raw
        return named
