from __future__ import annotations

import sqlite3
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from paster import create_app
from paster.api.pastes import STORE_EXTENSION
from paster.domain.durations import DAY, HOUR
from paster.domain.models import NewPaste
from paster.store import PasteStore
from paster.worker.sweep_worker import EXTENSION_KEY, SweepWorker, start_sweep_worker

from .conftest import FakeClock


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def _seed(db_path: Path) -> tuple[str, str]:
    clock = FakeClock(datetime.now(timezone.utc) - timedelta(hours=2))
    with PasteStore.open(db_path, clock=clock) as seeding:
        expired = seeding.insert(NewPaste(code="old", duration=HOUR))
        alive = seeding.insert(NewPaste(code="new", duration=DAY))
    return expired, alive


def test_worker_sweeps_expired_pastes(db_path: Path) -> None:
    expired, alive = _seed(db_path)

    worker = SweepWorker(str(db_path), interval=0.05)
    with PasteStore.open(db_path) as store:
        worker.start()
        try:
            assert _wait_for(lambda: store.get(expired) is None)
            assert store.get(alive) is not None
        finally:
            worker.stop(timeout=5)

    assert not worker.running


def test_worker_start_is_idempotent(db_path: Path) -> None:
    PasteStore.open(db_path).close()
    worker = SweepWorker(str(db_path), interval=0.05)
    worker.start()
    try:
        first = worker._thread
        worker.start()
        assert worker._thread is first
    finally:
        worker.stop(timeout=5)


def test_worker_exits_when_database_unavailable(tmp_path: Path) -> None:
    worker = SweepWorker(str(tmp_path / "missing" / "paster.db"), interval=0.05)
    worker.start()
    assert _wait_for(lambda: not worker.running)
    worker.stop(timeout=5)


def test_sweep_once_logs_instead_of_raising(db_path: Path) -> None:
    store = PasteStore.open(db_path)
    store.close()
    worker = SweepWorker(str(db_path))
    # A closed store raises StoreClosedError, a PasteStoreError.
    assert worker.sweep_once(store) is None


def test_start_sweep_worker_registers_one_worker(tmp_path: Path) -> None:
    app = create_app(
        "testing",
        DATABASE_PATH=str(tmp_path / "paster.db"),
        SWEEP_WORKER_ENABLED=True,
        SWEEP_INTERVAL_SECONDS=0.05,
    )
    worker = app.extensions[EXTENSION_KEY]
    try:
        assert worker.running
        assert start_sweep_worker(app) is worker
    finally:
        worker.stop(timeout=5)
        app.extensions[STORE_EXTENSION].close()


def test_sweep_once_survives_unexpected_errors(
    store: PasteStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _boom(self):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(PasteStore, "sweep", _boom)
    worker = SweepWorker(store.path)
    assert worker.sweep_once(store) is None


def test_worker_keeps_running_through_lock_timeouts(db_path: Path) -> None:
    expired, _ = _seed(db_path)
    worker = SweepWorker(str(db_path), interval=0.05, lock_timeout=0.1)

    with PasteStore.open(db_path, lock_timeout=0.1) as store:
        worker.start()
        try:
            assert _wait_for(lambda: store.get(expired) is None)

            blocker = sqlite3.connect(db_path, isolation_level=None)
            try:
                blocker.execute("BEGIN EXCLUSIVE")
                assert worker.sweep_once(store) is None
                time.sleep(0.5)
                assert worker.running
                blocker.execute("ROLLBACK")
            finally:
                blocker.close()

            # Sweeping resumes once the lock is released.
            expired, alive = _seed(db_path)
            assert _wait_for(lambda: store.get(expired) is None)
            assert store.get(alive) is not None
            assert worker.running
        finally:
            worker.stop(timeout=5)
