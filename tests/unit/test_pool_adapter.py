import warnings

import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool, StaticPool

from dbpool.datasources.config import DatasourceConfiguration
from dbpool.datasources.pool import (
    create_engine,
    engine_options,
    engine_url,
    validates_on_borrow,
)


def _configuration(sqlite_only, name="pool", **properties):
    return DatasourceConfiguration(name, is_available=sqlite_only, **properties)


def _server_configuration(sqlite_only, **properties):
    return _configuration(sqlite_only, url="postgresql://db/app", **properties)


class TestEngineOptions:

    def test_pool_style_properties_are_translated(self, sqlite_only):
        configuration = _server_configuration(
            sqlite_only,
            maxActive=10,
            maxOverflow="5",
            maxWait=2500,
            maxAge=60000,
            echo="false",
        )

        assert engine_options(configuration) == {
            "pool_size": 10,
            "max_overflow": 5,
            "pool_timeout": 2.5,
            "pool_recycle": 60.0,
            "echo": False,
        }

    def test_sqlalchemy_style_properties_use_seconds(self, sqlite_only):
        configuration = _server_configuration(sqlite_only, pool_timeout=30, pool_recycle="3600", pool_pre_ping="yes")

        assert engine_options(configuration) == {
            "pool_timeout": 30.0,
            "pool_recycle": 3600.0,
            "pool_pre_ping": True,
        }

    def test_unrecognised_properties_pass_through(self, sqlite_only):
        configuration = _server_configuration(sqlite_only, hide_parameters=True)
        assert engine_options(configuration) == {"hide_parameters": True}

    def test_test_on_borrow_is_not_forwarded(self, sqlite_only):
        configuration = _server_configuration(sqlite_only, testOnBorrow="true")

        assert engine_options(configuration) == {}
        assert validates_on_borrow(configuration)

    def test_db_properties_become_connect_args(self, sqlite_only):
        configuration = _server_configuration(sqlite_only, db_properties={"timeout": 5})
        assert engine_options(configuration) == {"connect_args": {"timeout": 5}}

    def test_in_memory_default_requests_queue_pool(self, sqlite_only):
        options = engine_options(_configuration(sqlite_only))

        assert options["poolclass"] is QueuePool
        assert options["connect_args"] == {"check_same_thread": False}

    def test_db_properties_override_driver_connect_args(self, sqlite_only):
        configuration = _configuration(sqlite_only, db_properties={"checkSameThread": True, "timeout": 5})

        assert engine_options(configuration)["connect_args"] == {"check_same_thread": True, "timeout": 5}

    def test_explicit_poolclass_is_kept(self, sqlite_only):
        configuration = _configuration(sqlite_only, poolclass=StaticPool)
        assert engine_options(configuration)["poolclass"] is StaticPool

    def test_explicit_url_leaves_pool_choice_to_sqlalchemy(self, sqlite_only):
        configuration = _configuration(sqlite_only, url="sqlite://")
        assert "poolclass" not in engine_options(configuration)

    def test_invalid_boolean_is_rejected(self, sqlite_only):
        configuration = _configuration(sqlite_only, echo="sometimes")
        with pytest.raises(ValueError):
            engine_options(configuration)


class TestEngineUrl:

    def test_effective_credentials_are_applied(self, sqlite_only):
        configuration = _configuration(
            sqlite_only,
            url="postgresql://db.internal/app",
            username="app",
            password="s3cret",
        )

        url = engine_url(configuration)

        assert url.username == "app"
        assert url.password == "s3cret"
        assert url.host == "db.internal"

    def test_credentials_in_url_win(self, sqlite_only):
        configuration = _configuration(
            sqlite_only,
            url="postgresql://owner:pw@db.internal/app",
            username="app",
        )

        assert engine_url(configuration).username == "owner"

    def test_empty_credentials_are_not_added(self, sqlite_only):
        url = engine_url(_configuration(sqlite_only))

        assert url.username is None
        assert url.password is None
        assert url.query["mode"] == "memory"


class TestCreateEngine:

    def test_default_datasource_connects_to_in_memory_sqlite(self, sqlite_only):
        engine = create_engine(_configuration(sqlite_only, name="engine_default"))
        try:
            with engine.connect() as conn:
                assert conn.execute(text("SELECT 1")).scalar() == 1
        finally:
            engine.dispose()

    def test_default_datasource_accepts_pool_sizing(self, sqlite_only):
        configuration = _configuration(
            sqlite_only,
            name="engine_sized",
            maxActive=10,
            maxOverflow=5,
            maxWait=30000,
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            engine = create_engine(configuration)
        try:
            assert isinstance(engine.pool, QueuePool)
            assert engine.pool.size() == 10
            assert engine.pool.timeout() == 30.0
            with engine.connect() as conn:
                assert conn.execute(text("SELECT 1")).scalar() == 1
        finally:
            engine.dispose()

    def test_default_datasource_is_shared_across_pooled_connections(self, sqlite_only):
        engine = create_engine(_configuration(sqlite_only, name="engine_shared", maxActive=2))
        try:
            with engine.begin() as conn:
                conn.execute(text("CREATE TABLE shared (id INTEGER)"))
                conn.execute(text("INSERT INTO shared VALUES (1)"))
            with engine.connect() as first, engine.connect() as second:
                assert first.execute(text("SELECT count(*) FROM shared")).scalar() == 1
                assert second.execute(text("SELECT count(*) FROM shared")).scalar() == 1
        finally:
            engine.dispose()

    def test_validation_query_runs_on_checkout(self, sqlite_only):
        configuration = _configuration(
            sqlite_only,
            name="engine_validated",
            validation_query="SELECT 7",
            test_on_borrow=True,
        )
        engine = create_engine(configuration)
        try:
            with engine.connect() as conn:
                assert conn.execute(text("SELECT 2")).scalar() == 2
        finally:
            engine.dispose()

    def test_failing_validation_query_invalidates_connection(self, sqlite_only, tmp_path, caplog):
        configuration = _configuration(
            sqlite_only,
            name="engine_broken",
            url=f"sqlite:///{tmp_path / 'broken.db'}",
            validation_query="SELECT * FROM missing_table",
            test_on_borrow=True,
        )
        engine = create_engine(configuration)
        try:
            with pytest.raises(SQLAlchemyError):
                with engine.connect():
                    pass
            assert "Validation query failed" in caplog.text
            assert "missing_table" in caplog.text
        finally:
            engine.dispose()

    def test_isolated_databases_per_name(self, sqlite_only):
        first = create_engine(_configuration(sqlite_only, name="iso_first"))
        second = create_engine(_configuration(sqlite_only, name="iso_second"))
        try:
            with first.begin() as conn:
                conn.execute(text("CREATE TABLE marker (id INTEGER)"))
            with second.connect() as conn:
                tables = conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'")).fetchall()
            assert tables == []
        finally:
            first.dispose()
            second.dispose()
