from __future__ import annotations

import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from paster.db import Base, create_sqlite_engine, exclusive, is_lock_timeout
from paster.domain.identifiers import IdGenerator
from paster.domain.models import NewPaste, Paste, PasteRecord
from paster.errors import (
    IdSpaceExhausted,
    InvalidPasteParameters,
    LockTimeout,
    PasteStoreError,
    StorageReadFailed,
    StorageUnavailable,
    StorageWriteFailed,
    StoreClosedError,
)
from paster.observability import get_correlation_id
from paster.repositories.paste_repository import PasteRepository


logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 30.0

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _paste_to_record(paste: Paste) -> PasteRecord:
    """Convert a Paste ORM entity to an immutable record."""
    return PasteRecord(
        id=paste.id,
        title=paste.title,
        author=paste.author,
        language=paste.language,
        code=paste.code,
        created_at=_as_utc(paste.created_at),
        duration=int(paste.duration),
        visible=bool(paste.visible),
    )


def _validate_new_paste(new_paste: NewPaste) -> None:
    for field in ("title", "author", "language", "code"):
        if not isinstance(getattr(new_paste, field), str):
            raise InvalidPasteParameters(f"{field} must be a string.")

    duration = new_paste.duration
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
        raise InvalidPasteParameters("duration must be a positive number of seconds.")

    if not isinstance(new_paste.visible, bool):
        raise InvalidPasteParameters("visible must be a boolean.")


def _validate_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidPasteParameters("limit must be a positive integer.")


class PasteStore:
    """
    Durable store of pastes backed by one SQLite file.

    Obtain one with :meth:`open` and release it with :meth:`close`. Each
    operation checks out its own session, so a single store may be shared
    between threads. Writers (``insert``, ``sweep``) run inside an EXCLUSIVE
    transaction; contending callers wait up to the configured lock timeout
    and then fail with ``LockTimeout``.

    Returns :class:`PasteRecord` values; no ORM entities escape this class.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        path: str,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._engine: Optional[Engine] = engine
        self._path = path
        self._id_generator = id_generator or IdGenerator()
        self._clock = clock or _utc_now
        self._read_sessions: sessionmaker[Session] = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        self._write_sessions: sessionmaker[Session] = sessionmaker(
            bind=exclusive(engine), autoflush=False, expire_on_commit=False
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        *,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        echo: bool = False,
    ) -> PasteStore:
        """
        Open the database at ``path``, creating the file and schema if needed.

        Schema creation runs inside an exclusive transaction so that processes
        racing to initialize the same file do not trip over each other.
        Raises ``StorageUnavailable`` on failure.
        """

        path = os.fspath(path)
        if not path or path == ":memory:":
            raise StorageUnavailable("A database file path is required.")

        logger.info(
            "Opening paste database",
            extra={"event": "store_open", "database_path": path},
        )

        engine = create_sqlite_engine(path, lock_timeout=lock_timeout, echo=echo)
        try:
            with exclusive(engine).begin() as conn:
                Base.metadata.create_all(conn)
        except SQLAlchemyError as exc:
            engine.dispose()
            logger.warning(
                "Unable to open paste database",
                extra={
                    "event": "store_open_failed",
                    "database_path": path,
                    "error_type": type(exc).__name__,
                },
            )
            raise StorageUnavailable(f"Unable to open database {path}: {exc}") from exc

        return cls(engine, path=path, id_generator=id_generator, clock=clock)

    def close(self) -> None:
        """Release the database handle. Closing twice is a no-op."""

        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info(
            "Closed paste database",
            extra={"event": "store_closed", "database_path": self._path},
        )

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._engine is None

    def __enter__(self) -> PasteStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._engine is None:
            raise StoreClosedError(f"Paste store {self._path} is closed.")

    def _now(self) -> datetime:
        # Truncated to whole milliseconds, the precision of SQLite date math.
        now = _as_utc(self._clock())
        return now.replace(microsecond=now.microsecond - now.microsecond % 1000)

    def _failure(
        self,
        operation: str,
        exc: SQLAlchemyError,
        error_cls: type[PasteStoreError],
    ) -> PasteStoreError:
        """Log a driver failure and map it onto the store's error taxonomy."""

        if is_lock_timeout(exc):
            error_cls = LockTimeout
        logger.warning(
            "Paste store %s failed",
            operation,
            extra={
                "event": f"paste_{operation}_failed",
                "error_type": error_cls.__name__,
                "database_path": self._path,
                "correlation_id": get_correlation_id(),
            },
        )
        return error_cls(f"{operation} failed: {exc}")

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    def insert(self, new_paste: NewPaste) -> str:
        """
        Persist ``new_paste`` and return its freshly minted id.

        Id minting and the insert share one exclusive transaction, so no other
        writer can claim the same id in between. On any failure nothing is
        written and no id is returned.
        """

        self._ensure_open()
        try:
            _validate_new_paste(new_paste)
        except InvalidPasteParameters:
            logger.warning(
                "Invalid paste parameters",
                extra={
                    "event": "paste_create_invalid_parameters",
                    "correlation_id": get_correlation_id(),
                },
            )
            raise

        session = self._write_sessions()
        try:
            paste_repo = PasteRepository(session=session)
            paste_id = self._id_generator.mint(paste_repo.id_exists)
            paste_repo.create_paste(
                paste_id=paste_id,
                new_paste=new_paste,
                created_at=self._now(),
            )
            session.commit()
        except IdSpaceExhausted:
            session.rollback()
            logger.error(
                "Paste id space exhausted",
                extra={
                    "event": "paste_id_space_exhausted",
                    "error_type": IdSpaceExhausted.__name__,
                    "attempts": self._id_generator.max_attempts,
                    "correlation_id": get_correlation_id(),
                },
            )
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise self._failure("insert", exc, StorageWriteFailed) from exc
        finally:
            session.close()

        logger.info(
            "Paste created",
            extra={
                "event": "paste_created",
                "paste_id": paste_id,
                "duration": new_paste.duration,
                "correlation_id": get_correlation_id(),
            },
        )
        return paste_id

    def sweep(self) -> int:
        """
        Delete every expired paste in one transaction.

        Returns how many pastes were removed; zero when nothing had expired.
        """

        self._ensure_open()
        session = self._write_sessions()
        try:
            count = PasteRepository(session=session).delete_expired(self._now())
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise self._failure("sweep", exc, StorageWriteFailed) from exc
        finally:
            session.close()

        logger.info(
            "Expired pastes swept",
            extra={"event": "paste_sweep", "count": count, "database_path": self._path},
        )
        return count

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def get(self, paste_id: str) -> Optional[PasteRecord]:
        """
        Look a paste up by id, regardless of its visibility.

        Returns ``None`` when no such paste exists.
        """

        self._ensure_open()
        session = self._read_sessions()
        try:
            paste = PasteRepository(session=session).get_paste_by_id(paste_id)
            return None if paste is None else _paste_to_record(paste)
        except SQLAlchemyError as exc:
            raise self._failure("get", exc, StorageReadFailed) from exc
        finally:
            session.close()

    def recent(self, limit: int) -> list[PasteRecord]:
        """Up to ``limit`` visible pastes, newest first."""

        self._ensure_open()
        _validate_limit(limit)
        session = self._read_sessions()
        try:
            pastes = PasteRepository(session=session).list_recent(limit)
            return [_paste_to_record(p) for p in pastes]
        except SQLAlchemyError as exc:
            raise self._failure("recent", exc, StorageReadFailed) from exc
        finally:
            session.close()

    def search(
        self,
        limit: int,
        *,
        title: Optional[str] = None,
        author: Optional[str] = None,
        language: Optional[str] = None,
    ) -> list[PasteRecord]:
        """
        Up to ``limit`` visible pastes whose fields contain the given values.

        Omitted (``None`` or empty) filters match everything. Matching is
        SQLite ``LIKE``: case-insensitive for ASCII, with ``%`` and ``_``
        acting as wildcards.
        """

        self._ensure_open()
        _validate_limit(limit)
        session = self._read_sessions()
        try:
            pastes = PasteRepository(session=session).search(
                limit,
                title=title,
                author=author,
                language=language,
            )
            return [_paste_to_record(p) for p in pastes]
        except SQLAlchemyError as exc:
            raise self._failure("search", exc, StorageReadFailed) from exc
        finally:
            session.close()
