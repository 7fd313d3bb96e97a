"""Database connection helpers for the workflow archiver."""

from __future__ import annotations

import os
from typing import Any, Dict

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError

from ..config import DB_URI_ENV_VARS

_ENGINE_CACHE: Dict[str, Engine] = {}


def resolve_database_url(preferred: str | None = None) -> str:
    """Return the connection string for the workflow database."""

    if preferred:
        return preferred
    for env_name in DB_URI_ENV_VARS:
        value = os.getenv(env_name)
        if value:
            return value
    raise RuntimeError(
        "No workflow database configured; set db_uri or one of "
        + ", ".join(DB_URI_ENV_VARS)
    )


def _with_psycopg_driver(database_url: str) -> str:
    """Pin bare ``postgresql://`` URLs to the psycopg 3 driver."""

    try:
        url = make_url(database_url)
    except ArgumentError:
        return database_url
    if url.drivername != "postgresql":
        return database_url
    return url.set(drivername="postgresql+psycopg").render_as_string(hide_password=False)


def _is_sqlite_file(engine: Engine) -> bool:
    if engine.dialect.name != "sqlite":
        return False
    database = engine.url.database or ""
    if database in ("", ":memory:"):
        return False
    return engine.url.query.get("mode") != "memory"


def _set_wal_journal(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def prepare_engine(engine: Engine) -> Engine:
    """Make ``engine`` safe for a streamed read alongside archive writes.

    The selector keeps its cursor open while each archive transaction
    commits on another pooled connection. A SQLite file in rollback-journal
    mode refuses that commit, so file databases are switched to WAL. The
    journal mode persists in the file; the ``connect`` hook covers a file
    that is recreated under a live engine. Other backends are untouched.
    """

    if not _is_sqlite_file(engine):
        return engine
    if not event.contains(engine, "connect", _set_wal_journal):
        event.listen(engine, "connect", _set_wal_journal)
        with engine.connect() as connection:
            connection.exec_driver_sql("PRAGMA journal_mode=WAL")
    return engine


def get_engine(url: str | None = None) -> Engine:
    """Return a cached, prepared engine for the workflow database."""

    requested = resolve_database_url(url)
    engine = _ENGINE_CACHE.get(requested)
    if engine is None:
        engine = prepare_engine(create_engine(_with_psycopg_driver(requested), future=True))
        _ENGINE_CACHE[requested] = engine
    return engine


def dispose_engines() -> None:
    """Dispose every cached engine; the caller owns pool teardown."""

    for engine in set(_ENGINE_CACHE.values()):
        engine.dispose()
    _ENGINE_CACHE.clear()


__all__ = [
    "dispose_engines",
    "get_engine",
    "prepare_engine",
    "resolve_database_url",
]
