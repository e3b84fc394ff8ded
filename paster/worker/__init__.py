from __future__ import annotations

"""
Background workers.

Currently only the expiration sweep, which runs on its own store handle.
"""

from .sweep_worker import SweepWorker, start_sweep_worker

__all__ = ["SweepWorker", "start_sweep_worker"]
