"""Maps a DatasourceConfiguration onto SQLAlchemy engine and pool arguments."""
from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import DisconnectionError
from sqlalchemy.pool import QueuePool

from dbpool.common.logger import get_logger
from dbpool.datasources.config import DatasourceConfiguration

logger = get_logger(__name__)


def _millis(value: Any) -> float:
    return float(value) / 1000.0


_SECONDS = float

_BOOL_STRINGS = {"true": True, "yes": True, "1": True, "false": False, "no": False, "0": False}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        try:
            return _BOOL_STRINGS[value.strip().lower()]
        except KeyError:
            raise ValueError(f"Not a boolean: {value!r}") from None
    return bool(value)


# Pool property -> (create_engine keyword, converter)
POOL_PROPERTY_MAP = {
    "max_active": ("pool_size", int),
    "pool_size": ("pool_size", int),
    "max_overflow": ("max_overflow", int),
    "max_wait": ("pool_timeout", _millis),
    "pool_timeout": ("pool_timeout", _SECONDS),
    "max_age": ("pool_recycle", _millis),
    "pool_recycle": ("pool_recycle", _SECONDS),
    "pool_pre_ping": ("pool_pre_ping", _as_bool),
    "pool_use_lifo": ("pool_use_lifo", _as_bool),
    "pool_reset_on_return": ("pool_reset_on_return", str),
    "echo": ("echo", _as_bool),
    "echo_pool": ("echo_pool", _as_bool),
    "isolation_level": ("isolation_level", str),
}

# Consumed by create_engine() itself rather than passed to SQLAlchemy.
_LOCAL_PROPERTIES = {"test_on_borrow"}


def engine_url(configuration: DatasourceConfiguration) -> URL:
    """
    Returns the effective URL with effective credentials applied.

    Credentials already present in the URL are left alone.
    """
    url = make_url(configuration.url)
    if configuration.username and not url.username:
        url = url.set(username=configuration.username)
    if configuration.password and not url.password:
        url = url.set(password=configuration.password)
    return url


def engine_options(configuration: DatasourceConfiguration) -> Dict[str, Any]:
    """
    Translates pool tuning properties into ``create_engine`` keyword arguments.

    Unrecognised properties are passed through unchanged. When the URL is a
    defaulted in-memory database, a ``QueuePool`` is requested explicitly so
    the pool sizing properties apply to it as well.
    """
    options: Dict[str, Any] = {}
    for key, value in configuration.pool_properties.items():
        if key in _LOCAL_PROPERTIES:
            continue
        if key in POOL_PROPERTY_MAP:
            target, convert = POOL_PROPERTY_MAP[key]
            options[target] = convert(value)
        else:
            options[key] = value

    driver = configuration.effective.driver
    connect_args = dict(driver.connect_args) if driver is not None else {}
    connect_args.update(configuration.db_properties)
    if connect_args:
        options["connect_args"] = connect_args
    if driver is not None:
        # SQLite would otherwise pick SingletonThreadPool for mode=memory
        options.setdefault("poolclass", QueuePool)
    return options


def validates_on_borrow(configuration: DatasourceConfiguration) -> bool:
    return _as_bool(configuration.pool_properties.get("test_on_borrow", False))


def _install_validation(engine: Engine, query: str, name: str) -> None:
    @event.listens_for(engine, "checkout")
    def _validate(dbapi_connection, connection_record, connection_proxy):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute(query)
        except Exception as exc:
            logger.warning("Validation query failed for data source '%s': %s", name, exc)
            raise DisconnectionError(f"Validation query failed: {exc}") from exc
        finally:
            cursor.close()


def create_engine(configuration: DatasourceConfiguration) -> Engine:
    """
    Builds a pooled SQLAlchemy engine for a datasource.

    When ``test_on_borrow`` is set, the validation query runs on every
    checkout and a failure makes the pool retry with a fresh connection.
    """
    url = engine_url(configuration)
    options = engine_options(configuration)
    logger.info(
        "Creating engine for data source '%s' (%s)",
        configuration.name,
        url.render_as_string(hide_password=True),
    )
    engine = sa_create_engine(url, **options)
    query = configuration.validation_query
    if validates_on_borrow(configuration) and query:
        _install_validation(engine, query, configuration.name)
    return engine
