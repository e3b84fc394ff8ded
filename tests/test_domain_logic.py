from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from paster.db import Base
from paster.domain.durations import (
    DAY,
    DEFAULT_DURATION,
    HOUR,
    MONTH,
    WEEK,
    parse_duration,
    ttl,
)
from paster.domain.identifiers import ID_ALPHABET, IdGenerator
from paster.domain.languages import DEFAULT_LANGUAGE, LANGUAGES, is_known_language
from paster.domain.models import NewPaste, Paste, PasteRecord
from paster.errors import IdSpaceExhausted
from paster.repositories.paste_repository import PasteRepository


NOW = datetime(2026, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="function")
def engine() -> Generator:
    """
    Create a fresh in-memory SQLite engine for each test function.

    This keeps repository tests focused on query behavior while using a real
    database session.
    """

    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    with SessionLocal() as session:
        yield session
        session.rollback()


@pytest.fixture
def paste_repo(session: Session) -> PasteRepository:
    return PasteRepository(session=session)


def _add(
    repo: PasteRepository,
    paste_id: str,
    *,
    created_at: datetime = NOW,
    **fields,
) -> Paste:
    return repo.create_paste(
        paste_id=paste_id,
        new_paste=NewPaste(code=fields.pop("code", "print(1)"), **fields),
        created_at=created_at,
    )


# ---------------------------------------------------------------------------
# 1. Id generation.
# ---------------------------------------------------------------------------


def test_candidate_ids_use_alphabet_and_length() -> None:
    generator = IdGenerator()
    for _ in range(50):
        candidate = generator.candidate()
        assert len(candidate) == 12
        assert set(candidate) <= set(ID_ALPHABET)


def test_mint_returns_first_free_candidate() -> None:
    draws = iter("xxy")
    generator = IdGenerator(alphabet="xy", length=1, choice=lambda _seq: next(draws))
    assert generator.mint(lambda candidate: candidate == "x") == "y"


def test_mint_gives_up_after_max_attempts() -> None:
    calls: list[str] = []

    def _always_taken(candidate: str) -> bool:
        calls.append(candidate)
        return True

    generator = IdGenerator(max_attempts=30)
    with pytest.raises(IdSpaceExhausted):
        generator.mint(_always_taken)
    assert len(calls) == 30


@pytest.mark.parametrize(
    "kwargs",
    [{"alphabet": ""}, {"length": 0}, {"max_attempts": 0}],
)
def test_id_generator_rejects_degenerate_settings(kwargs) -> None:
    with pytest.raises(ValueError):
        IdGenerator(**kwargs)


# ---------------------------------------------------------------------------
# 2. Durations and remaining lifetime.
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("label", "seconds"),
    [
        ("hour", HOUR),
        ("day", DAY),
        ("week", WEEK),
        ("month", MONTH),
        (" Week ", WEEK),
        ("fortnight", MONTH),
        (None, DEFAULT_DURATION),
        ("", DEFAULT_DURATION),
    ],
)
def test_parse_duration(label, seconds: int) -> None:
    assert parse_duration(label) == seconds


@pytest.mark.parametrize(
    ("elapsed", "duration", "expected"),
    [
        (0, HOUR, "1 hour(s)"),
        (30 * 60, HOUR, "30 minute(s)"),
        (0, DAY, "1 day(s)"),
        (HOUR, DAY, "23 hour(s)"),
        (DAY, WEEK, "6 day(s)"),
        (2 * HOUR, HOUR, "0 minute(s)"),
    ],
)
def test_ttl(elapsed: int, duration: int, expected: str) -> None:
    assert ttl(NOW, duration, NOW + timedelta(seconds=elapsed)) == expected


def test_ttl_accepts_naive_datetimes_as_utc() -> None:
    naive = NOW.replace(tzinfo=None)
    assert ttl(naive, HOUR, naive + timedelta(minutes=15)) == "45 minute(s)"


def test_record_expiry_helpers() -> None:
    record = PasteRecord(
        id="abc",
        title="t",
        author="a",
        language="cpp",
        code="",
        created_at=NOW,
        duration=HOUR,
        visible=True,
    )
    assert record.expires_at == NOW + timedelta(hours=1)
    assert not record.is_expired(NOW + timedelta(minutes=59))
    assert record.is_expired(NOW + timedelta(hours=1))


# ---------------------------------------------------------------------------
# 3. Languages and defaults.
# ---------------------------------------------------------------------------


def test_known_languages() -> None:
    assert DEFAULT_LANGUAGE == LANGUAGES[0] == "nohighlight"
    assert is_known_language("cpp")
    assert is_known_language("python")
    assert not is_known_language("klingon")


def test_new_paste_defaults() -> None:
    paste = NewPaste(code="x")
    assert paste.title == "Untitled"
    assert paste.author == "Anonymous"
    assert paste.language == "nohighlight"
    assert paste.duration == DAY
    assert paste.visible is True


# ---------------------------------------------------------------------------
# 4. Stored pastes cannot be modified.
# ---------------------------------------------------------------------------


def test_paste_fields_are_immutable(session: Session, paste_repo: PasteRepository) -> None:
    paste = _add(paste_repo, "immutable001", title="first")

    with pytest.raises(ValueError):
        paste.code = "new content"
    with pytest.raises(ValueError):
        paste.title = "second"
    with pytest.raises(ValueError):
        paste.visible = False


# ---------------------------------------------------------------------------
# 5. Repository queries.
# ---------------------------------------------------------------------------


def test_id_exists(session: Session, paste_repo: PasteRepository) -> None:
    _add(paste_repo, "present00001")
    assert paste_repo.id_exists("present00001")
    assert not paste_repo.id_exists("absent000001")


def test_server_default_created_at(session: Session) -> None:
    paste = Paste(
        id="serverdflt01",
        title="t",
        author="a",
        language="cpp",
        code="",
        duration=HOUR,
    )
    session.add(paste)
    session.commit()
    session.refresh(paste)

    assert paste.created_at is not None
    assert paste.visible is True


def test_search_omits_unconstrained_filters(
    session: Session, paste_repo: PasteRepository
) -> None:
    _add(paste_repo, "one000000000", author="markand", language="cpp")
    _add(paste_repo, "two000000000", author="other", language="cpp")
    session.commit()

    assert {p.id for p in paste_repo.search(10)} == {"one000000000", "two000000000"}
    assert [p.id for p in paste_repo.search(10, author="markand")] == ["one000000000"]


def test_delete_expired_logic(session: Session, paste_repo: PasteRepository) -> None:
    _add(paste_repo, "expired00001", created_at=NOW - timedelta(hours=2), duration=HOUR)
    _add(paste_repo, "boundary0001", created_at=NOW - timedelta(hours=1), duration=HOUR)
    _add(paste_repo, "stillhere001", created_at=NOW - timedelta(minutes=59), duration=HOUR)
    session.commit()

    assert paste_repo.delete_expired(NOW) == 2
    session.commit()

    assert not paste_repo.id_exists("expired00001")
    assert not paste_repo.id_exists("boundary0001")
    assert paste_repo.id_exists("stillhere001")
