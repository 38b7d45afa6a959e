"""Pytest configuration for sqlalchemy-removable."""

import pytest
from sqlalchemy import MetaData, create_engine, event

from removable import set_config


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "db: mark test as hitting a SQLite database")


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Give every test default settings, unaffected by the environment."""
    for name in (
        "REMOVABLE_DEFAULT_COLUMN_NAME",
        "REMOVABLE_DEFAULT_VALIDATE",
        "REMOVABLE_TIMEZONE",
        "REMOVABLE_LOG_MUTATIONS",
    ):
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def engine_factory(tmp_path):
    """Build file-backed SQLite engines with working SAVEPOINTs."""
    engines = []

    def factory(metadata: MetaData):
        engine = create_engine(f"sqlite:///{tmp_path / 'removable.db'}")

        # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; take it over.
        @event.listens_for(engine, "connect")
        def do_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN")

        metadata.create_all(engine)
        engines.append(engine)
        return engine

    yield factory

    for engine in engines:
        engine.dispose()
