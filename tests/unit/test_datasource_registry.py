from unittest.mock import patch

import pytest

from dbpool.common.errors import (
    DatasourceNotFoundError,
    DuplicateDatasourceError,
    ErrorCode,
    NoDriverAvailable,
)
from dbpool.datasources.models import DatasourceConfig
from dbpool.datasources.registry import DatasourceRegistry


def test_empty_registry_has_default_datasource(sqlite_only):
    registry = DatasourceRegistry(is_available=sqlite_only)

    assert registry.list_names() == ["default"]
    assert "file:default" in registry.get_configuration().url


def test_registry_builds_one_configuration_per_name(sqlite_only):
    registry = DatasourceRegistry(
        {
            "default": {},
            "warehouse": {"url": "postgresql://wh/app", "username": "etl", "maxActive": 20},
            "cache": None,
        },
        is_available=sqlite_only,
    )

    assert registry.list_names() == ["default", "warehouse", "cache"]
    warehouse = registry.get_configuration("warehouse")
    assert warehouse.driver_class_name == "psycopg2"
    assert warehouse.username == "etl"
    assert warehouse.password == ""
    assert warehouse.pool_properties == {"max_active": 20}
    assert "file:cache" in registry.get_configuration("cache").url


def test_mapping_key_names_the_datasource(sqlite_only):
    registry = DatasourceRegistry({"real": DatasourceConfig(name="ignored")}, is_available=sqlite_only)
    assert registry.list_names() == ["real"]


def test_registry_accepts_config_list(sqlite_only):
    registry = DatasourceRegistry(
        [DatasourceConfig(name="a"), DatasourceConfig(name="b")],
        is_available=sqlite_only,
    )
    assert [c.name for c in registry.list_configurations()] == ["a", "b"]


def test_duplicate_names_are_rejected(sqlite_only):
    with pytest.raises(DuplicateDatasourceError) as exc:
        DatasourceRegistry([DatasourceConfig(name="a"), DatasourceConfig(name="a")], is_available=sqlite_only)
    assert exc.value.error_code == ErrorCode.DUPLICATE_DATASOURCE


def test_unresolvable_datasource_fails_startup(no_drivers):
    with pytest.raises(NoDriverAvailable):
        DatasourceRegistry({"default": {}}, is_available=no_drivers)


def test_explicit_url_registers_without_drivers(no_drivers):
    registry = DatasourceRegistry({"ext": {"url": "mysql://db/app"}}, is_available=no_drivers)
    assert registry.get_configuration("ext").driver_class_name == "pymysql"


def test_unknown_name_raises_not_found(sqlite_only):
    registry = DatasourceRegistry(is_available=sqlite_only)

    with pytest.raises(DatasourceNotFoundError) as exc:
        registry.get_configuration("missing")
    assert isinstance(exc.value, KeyError)
    assert str(exc.value) == "Unknown datasource: missing"
    assert exc.value.datasource == "missing"
    assert exc.value.error_code == ErrorCode.DATASOURCE_NOT_FOUND


def test_lookup_by_jndi_name(sqlite_only):
    registry = DatasourceRegistry(
        {"default": {"jndiName": "jdbc/default"}, "other": {"jndi_name": "jdbc/other"}},
        is_available=sqlite_only,
    )

    assert registry.get_by_jndi_name("jdbc/other").name == "other"
    with pytest.raises(DatasourceNotFoundError):
        registry.get_by_jndi_name("jdbc/none")


def test_engine_is_created_once_and_cached(sqlite_only):
    registry = DatasourceRegistry(is_available=sqlite_only)
    with patch("dbpool.datasources.registry.create_engine") as factory:
        first = registry.get_engine()
        second = registry.get_engine()

    assert first is second
    factory.assert_called_once_with(registry.get_configuration())


def test_dispose_releases_engines(sqlite_only):
    registry = DatasourceRegistry({"a": {}, "b": {}}, is_available=sqlite_only)
    with patch("dbpool.datasources.registry.create_engine") as factory:
        engine_a = registry.get_engine("a")
        registry.get_engine("b")

        registry.dispose("a")
        engine_a.dispose.assert_called_once()
        registry.get_engine("a")
        assert factory.call_count == 3

        registry.dispose()
    assert factory.return_value.dispose.call_count >= 2


def test_real_engine_round_trip(sqlite_only):
    from sqlalchemy import text

    registry = DatasourceRegistry(
        {"roundtrip": {"maxActive": 4, "maxOverflow": 2, "maxWait": 1000}},
        is_available=sqlite_only,
    )
    try:
        with registry.get_engine("roundtrip").connect() as conn:
            assert conn.execute(text("SELECT 1")).scalar() == 1
    finally:
        registry.dispose()


def test_configuration_errors_name_the_datasource():
    error = DuplicateDatasourceError("orders")

    assert str(error) == "Error configuring data source 'orders'. Datasource name is already registered"
    assert error.datasource == "orders"
    assert str(NoDriverAvailable()).startswith("No URL or driver class name specified")
