from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest

from paster.store import PasteStore


class FakeClock:
    """Deterministic stand-in for the store's UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "paster.db"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(db_path: Path) -> Generator[PasteStore, None, None]:
    """A store on a fresh file, using the real clock."""

    store = PasteStore.open(db_path)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def clocked_store(db_path: Path, clock: FakeClock) -> Generator[PasteStore, None, None]:
    """A store whose timestamps come from ``clock``."""

    store = PasteStore.open(db_path, clock=clock)
    try:
        yield store
    finally:
        store.close()
