import pytest

from dbpool.datasources.drivers import DUCKDB, SQLITE


def _only(*descriptors):
    names = {d.driver_class_name for d in descriptors}
    return lambda descriptor: descriptor.driver_class_name in names


@pytest.fixture
def sqlite_only():
    """Availability predicate simulating an environment with only SQLite installed."""
    return _only(SQLITE)


@pytest.fixture
def duckdb_only():
    """Availability predicate simulating an environment with only DuckDB installed."""
    return _only(DUCKDB)


@pytest.fixture
def no_drivers():
    """Availability predicate simulating an environment with no embedded driver."""
    return lambda descriptor: False
