"""Database engine construction and schema helpers."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase

from messenger.core.settings import Settings, settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import messenger.models  # noqa: E402,F401


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def enable_sqlite_immediate_transactions(engine: Engine) -> None:
    """Open every SQLite transaction with ``BEGIN IMMEDIATE``.

    pysqlite defers BEGIN until the first write, so rows read under
    ``with_for_update()`` would otherwise be read without any lock. Taking
    the write lock up front serializes read-modify-write transactions.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(connection: Any) -> None:
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(app_settings: Settings | None = None) -> Engine:
    """Create an engine for the configured database.

    SQLite connections get a busy timeout equal to the store timeout and
    enforce foreign keys, which the cascade and account deletion rules rely on.
    Their transactions take the database write lock when they begin.
    """
    app_settings = app_settings or settings
    url = make_url(app_settings.effective_database_url)
    is_sqlite = url.get_backend_name() == "sqlite"

    connect_args: dict[str, Any] = {}
    if is_sqlite:
        connect_args = {
            "check_same_thread": False,
            "timeout": app_settings.store_timeout_seconds,
        }

    engine = create_engine(
        url,
        pool_pre_ping=True,
        echo=app_settings.sql_debug,
        connect_args=connect_args,
    )
    if is_sqlite:
        enable_sqlite_foreign_keys(engine)
        enable_sqlite_immediate_transactions(engine)
    return engine


def create_tables(engine: Engine) -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables(engine: Engine) -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
