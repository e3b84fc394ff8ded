from __future__ import annotations

import os
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base


Base = declarative_base()

# Execution option read by the ``begin`` hook below.
BEGIN_MODE_OPTION = "sqlite_begin"


def sqlite_url(path: str | os.PathLike[str]) -> str:
    return f"sqlite+pysqlite:///{os.fspath(path)}"


def create_sqlite_engine(
    path: str | os.PathLike[str],
    *,
    lock_timeout: float = 30.0,
    echo: bool = False,
) -> Engine:
    """
    Create an engine for the SQLite file at ``path``.

    ``lock_timeout`` becomes the driver's busy timeout: a connection waiting
    on another writer's lock gives up after that many seconds.

    pysqlite's own transaction handling is switched off so that SQLAlchemy
    emits ``BEGIN`` itself. Connections carrying the ``sqlite_begin``
    execution option (see :func:`exclusive`) start with that locking mode.
    """

    engine = create_engine(
        sqlite_url(path),
        future=True,
        echo=echo,
        connect_args={"timeout": lock_timeout, "check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection: Any, _record: Any) -> None:  # type: ignore[unused-variable]
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn: Any) -> None:  # type: ignore[unused-variable]
        mode = conn.get_execution_options().get(BEGIN_MODE_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


def exclusive(engine: Engine) -> Engine:
    """Return a view of ``engine`` whose transactions take the write lock up front."""
    return engine.execution_options(**{BEGIN_MODE_OPTION: "EXCLUSIVE"})


def is_lock_timeout(exc: BaseException) -> bool:
    """True if ``exc`` is SQLite giving up on a busy lock."""
    if not isinstance(exc, OperationalError):
        return False
    message = str(exc.orig) if exc.orig is not None else str(exc)
    return "database is locked" in message or "database is busy" in message
