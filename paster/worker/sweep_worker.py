from __future__ import annotations

import logging
import threading
from typing import Optional

from flask import Flask

from paster.errors import StorageUnavailable
from paster.store import DEFAULT_LOCK_TIMEOUT, PasteStore


logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 60.0

EXTENSION_KEY = "paster.sweep_worker"


class SweepWorker:
    """
    Background thread that periodically deletes expired pastes.

    The worker opens its own :class:`PasteStore` on the same file, so a long
    sweep never holds a connection the request path is waiting on.
    """

    def __init__(
        self,
        database_path: str,
        *,
        interval: float = POLL_INTERVAL_SECONDS,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self.database_path = database_path
        self.interval = interval
        self.lock_timeout = lock_timeout
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sweep thread. Starting a running worker does nothing."""

        with self._lock:
            if self.running:
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._sweep_loop,
                name="sweep-worker",
                daemon=True,
            )
            self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        with self._lock:
            thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)

    def sweep_once(self, store: PasteStore) -> Optional[int]:
        """Run a single sweep, logging rather than raising any failure."""

        try:
            return store.sweep()
        except Exception as exc:
            logger.exception(
                "Error in sweep worker loop",
                extra={
                    "event": "sweep_worker_error",
                    "error_type": type(exc).__name__,
                    "correlation_id": "sweep-worker",
                },
            )
            return None

    def _sweep_loop(self) -> None:
        try:
            store = PasteStore.open(self.database_path, lock_timeout=self.lock_timeout)
        except StorageUnavailable:
            logger.exception(
                "Sweep worker: database unavailable; worker not started",
                extra={
                    "event": "sweep_worker_unavailable",
                    "database_path": self.database_path,
                    "correlation_id": "sweep-worker",
                },
            )
            return

        logger.info(
            "Sweep worker started",
            extra={
                "event": "sweep_worker_started",
                "database_path": self.database_path,
                "correlation_id": "sweep-worker",
            },
        )
        try:
            while not self._stop.is_set():
                self.sweep_once(store)
                self._stop.wait(self.interval)
        finally:
            store.close()


def start_sweep_worker(app: Flask) -> SweepWorker:
    """
    Start the sweep worker for ``app`` in a background thread.

    This function is idempotent and will only start a single worker per app.
    """

    worker = app.extensions.get(EXTENSION_KEY)
    if worker is None:
        worker = SweepWorker(
            app.config["DATABASE_PATH"],
            interval=float(app.config.get("SWEEP_INTERVAL_SECONDS", POLL_INTERVAL_SECONDS)),
            lock_timeout=float(app.config.get("LOCK_TIMEOUT_SECONDS", DEFAULT_LOCK_TIMEOUT)),
        )
        app.extensions[EXTENSION_KEY] = worker
    worker.start()
    return worker
