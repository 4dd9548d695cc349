from __future__ import annotations

import dataclasses
import importlib.util
from typing import Any, Callable, Iterable, Optional, Tuple

from dbpool.common.logger import get_logger

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class DriverDescriptor:
    """
    A database driver known to the resolver.

    Attributes:
        name: Human readable database name.
        driver_class_name: Importable DBAPI module backing the driver.
        backends: SQLAlchemy backend names that identify this database in a URL.
        url_template: In-memory URL with a ``{name}`` placeholder. Only embedded
            databases have one.
        default_username: Username to use when none is configured.
        default_password: Password to use when none is configured.
        validation_query: Cheap statement used to validate pooled connections.
        required_modules: Additional modules that must be importable, e.g. a
            SQLAlchemy dialect plugin.
        connect_args: DBAPI connect arguments applied to the in-memory
            database. Configured db_properties override them.
    """
    name: str
    driver_class_name: str
    backends: Tuple[str, ...]
    url_template: Optional[str] = None
    default_username: str = ""
    default_password: str = ""
    validation_query: str = "SELECT 1"
    required_modules: Tuple[str, ...] = ()
    connect_args: Tuple[Tuple[str, Any], ...] = ()

    @property
    def embedded(self) -> bool:
        return self.url_template is not None

    @property
    def modules(self) -> Tuple[str, ...]:
        return (self.driver_class_name,) + self.required_modules

    def in_memory_url(self, datasource_name: str) -> str:
        """Returns an in-memory URL isolated to ``datasource_name``."""
        if self.url_template is None:
            raise ValueError(f"{self.name} has no in-memory URL")
        return self.url_template.format(name=datasource_name)

    def matches(self, url: str) -> bool:
        return url_backend(url) in self.backends


SQLITE = DriverDescriptor(
    name="SQLite",
    driver_class_name="sqlite3",
    backends=("sqlite",),
    url_template="sqlite+pysqlite:///file:{name}?mode=memory&cache=shared&uri=true",
    # Pooled connections are handed between threads
    connect_args=(("check_same_thread", False),),
)

DUCKDB = DriverDescriptor(
    name="DuckDB",
    driver_class_name="duckdb",
    backends=("duckdb",),
    url_template="duckdb:///:memory:{name}",
    required_modules=("duckdb_engine",),
)

# Ordered by preference.
EMBEDDED_DRIVERS: Tuple[DriverDescriptor, ...] = (SQLITE, DUCKDB)

KNOWN_DATABASES: Tuple[DriverDescriptor, ...] = EMBEDDED_DRIVERS + (
    DriverDescriptor(name="PostgreSQL", driver_class_name="psycopg2", backends=("postgresql", "postgres")),
    DriverDescriptor(name="MySQL", driver_class_name="pymysql", backends=("mysql",)),
    DriverDescriptor(name="MariaDB", driver_class_name="mariadb", backends=("mariadb",)),
    DriverDescriptor(name="SQL Server", driver_class_name="pyodbc", backends=("mssql",)),
    DriverDescriptor(
        name="Oracle",
        driver_class_name="oracledb",
        backends=("oracle",),
        validation_query="SELECT 1 FROM DUAL",
    ),
)

# SQLAlchemy driver names whose DBAPI module is named differently.
DRIVER_MODULES = {
    "pysqlite": "sqlite3",
    "mysqldb": "MySQLdb",
    "mysqlconnector": "mysql.connector",
    "mariadbconnector": "mariadb",
    "cx_oracle": "cx_Oracle",
}


def url_backend(url: str) -> str:
    """Returns the backend part of a SQLAlchemy URL (``postgresql`` for ``postgresql+psycopg2://``)."""
    scheme = url.partition("://")[0]
    return scheme.partition("+")[0].strip().lower()


def url_driver(url: str) -> str:
    """Returns the driver part of a SQLAlchemy URL, or an empty string when none is given."""
    scheme = url.partition("://")[0]
    return scheme.partition("+")[2].strip().lower()


def is_driver_available(descriptor: DriverDescriptor) -> bool:
    """Checks whether every module the descriptor needs can be imported."""
    for module in descriptor.modules:
        try:
            if importlib.util.find_spec(module) is None:
                return False
        except (ImportError, ValueError):
            # find_spec imports parent packages of dotted names
            return False
    return True


def first_available(
    catalog: Iterable[DriverDescriptor],
    is_available: Callable[[DriverDescriptor], bool] = is_driver_available,
) -> Optional[DriverDescriptor]:
    """Returns the first descriptor in ``catalog`` whose driver can be loaded."""
    for descriptor in catalog:
        if is_available(descriptor):
            return descriptor
        logger.debug("Driver %s (%s) is not installed", descriptor.name, descriptor.driver_class_name)
    return None


def find_database(url: str, catalog: Iterable[DriverDescriptor] = KNOWN_DATABASES) -> Optional[DriverDescriptor]:
    """Finds the known database a URL points at."""
    for descriptor in catalog:
        if descriptor.matches(url):
            return descriptor
    return None


def infer_driver_class_name(url: str, catalog: Iterable[DriverDescriptor] = KNOWN_DATABASES) -> Optional[str]:
    """
    Infers the DBAPI module from a URL.

    An explicit ``+driver`` suffix wins over the database's default driver,
    so ``postgresql+asyncpg://`` yields ``asyncpg``.
    """
    descriptor = find_database(url, catalog)
    if descriptor is None:
        return None
    driver = url_driver(url)
    if driver:
        return DRIVER_MODULES.get(driver, driver)
    return descriptor.driver_class_name
