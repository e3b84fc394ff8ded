from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Select, delete, func, literal_column, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from paster.domain.models import NewPaste, Paste


logger = logging.getLogger(__name__)

# SQLite strftime format with millisecond fractions ("SS.SSS").
_MILLISECOND_FORMAT = "%Y-%m-%d %H:%M:%f"

# Newest first; rows sharing a timestamp come back in reverse insertion order.
_NEWEST_FIRST = (Paste.created_at.desc(), literal_column("paste.rowid").desc())


def _sqlite_timestamp(value: datetime) -> str:
    """Render ``value`` in UTC the way SQLAlchemy stores DateTime on SQLite."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    # Rounded down to whole milliseconds so the cutoff never runs ahead of now.
    return value.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3] + "000"


def _contains(column, pattern: Optional[str]) -> Optional[ColumnElement[bool]]:
    """``LIKE '%pattern%'`` for a given filter, ``None`` when unconstrained."""
    if pattern is None or pattern == "":
        return None
    return column.contains(pattern)


class PasteRepository:
    """
    Repository for the ``paste`` table.

    All SQL touching pastes is built here. The caller owns the session and
    its transaction, and is responsible for committing.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def id_exists(self, paste_id: str) -> bool:
        stmt = select(Paste.id).where(Paste.id == paste_id)
        return self._session.execute(stmt).first() is not None

    def create_paste(
        self,
        *,
        paste_id: str,
        new_paste: NewPaste,
        created_at: datetime,
    ) -> Paste:
        """Add a paste row under ``paste_id`` and flush it."""

        paste = Paste(
            id=paste_id,
            title=new_paste.title,
            author=new_paste.author,
            language=new_paste.language,
            code=new_paste.code,
            created_at=created_at,
            visible=new_paste.visible,
            duration=new_paste.duration,
        )
        self._session.add(paste)
        self._session.flush()
        return paste

    def get_paste_by_id(self, paste_id: str) -> Optional[Paste]:
        """Return a Paste by its id, or ``None`` if not found."""

        stmt: Select[tuple[Paste]] = select(Paste).where(Paste.id == paste_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def list_recent(self, limit: int) -> list[Paste]:
        stmt: Select[tuple[Paste]] = (
            select(Paste)
            .where(Paste.visible.is_(True))
            .order_by(*_NEWEST_FIRST)
            .limit(limit)
        )
        return list(self._session.execute(stmt).scalars())

    def search(
        self,
        limit: int,
        *,
        title: Optional[str] = None,
        author: Optional[str] = None,
        language: Optional[str] = None,
    ) -> list[Paste]:
        """
        Visible pastes matching every given filter, newest first.

        A filter that is ``None`` or empty adds no clause at all.
        """

        stmt: Select[tuple[Paste]] = select(Paste).where(Paste.visible.is_(True))
        for clause in (
            _contains(Paste.title, title),
            _contains(Paste.author, author),
            _contains(Paste.language, language),
        ):
            if clause is not None:
                stmt = stmt.where(clause)

        stmt = stmt.order_by(*_NEWEST_FIRST).limit(limit)
        return list(self._session.execute(stmt).scalars())

    def delete_expired(self, now: datetime) -> int:
        """
        Delete every paste whose lifetime has elapsed at ``now``.

        Expiry is ``created_at + duration <= now``, evaluated by SQLite at
        millisecond precision. Returns the number of deleted rows.
        """

        expires_at = func.strftime(
            _MILLISECOND_FORMAT,
            Paste.created_at,
            func.printf("+%d seconds", Paste.duration),
        )
        cutoff = func.strftime(_MILLISECOND_FORMAT, _sqlite_timestamp(now))
        stmt = (
            delete(Paste)
            .where(expires_at <= cutoff)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)
