from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, validates

from paster.db import Base
from paster.domain.durations import DEFAULT_AUTHOR, DEFAULT_DURATION, DEFAULT_TITLE
from paster.domain.languages import DEFAULT_LANGUAGE


class Paste(Base):
    """Paste row persisted via SQLAlchemy."""

    __tablename__ = "paste"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )
    visible: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("1"),
    )
    duration: Mapped[int] = mapped_column(Integer, nullable=False)

    @validates("id", "title", "author", "language", "code", "created_at", "visible", "duration")
    def _validate_immutable(self, key: str, value):
        """
        Pastes are append-then-expire: a column may be set once on a new
        instance, and any later attempt to change it raises.
        """

        current = self.__dict__.get(key)
        if current is not None and current != value:
            raise ValueError(f"Paste {key} is immutable and cannot be modified.")
        return value


@dataclass(frozen=True)
class NewPaste:
    """Caller-supplied fields of a paste. The store assigns id and created_at."""

    code: str
    title: str = DEFAULT_TITLE
    author: str = DEFAULT_AUTHOR
    language: str = DEFAULT_LANGUAGE
    duration: int = DEFAULT_DURATION
    visible: bool = True


@dataclass(frozen=True)
class PasteRecord:
    """A stored paste as returned by the store. Never an ORM entity."""

    id: str
    title: str
    author: str
    language: str
    code: str
    created_at: datetime
    duration: int
    visible: bool

    @property
    def expires_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.duration)

    def is_expired(self, now: datetime | None = None) -> bool:
        if now is None:
            now = datetime.now(timezone.utc)
        return now >= self.expires_at
