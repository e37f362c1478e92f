from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True)
class ExportSnapshot:
    value: float = 0.0
    last_update: float | None = None  # monotonic clock reading


class SnapshotReading(NamedTuple):
    value: float
    elapsed_seconds: int | None


class ExportCache:
    """
    Single-slot store for the latest net export.

    The sampler is the only writer. Request handlers read concurrently.
    Value and timestamp are replaced together as one immutable snapshot under
    the lock, so a reader never pairs a value with another write's timestamp.
    The lock is never held across network I/O.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot = ExportSnapshot()

    def write(self, value: float, now: float | None = None) -> None:
        snapshot = ExportSnapshot(
            value=float(value),
            last_update=self._clock() if now is None else now,
        )
        with self._lock:
            self._snapshot = snapshot

    def snapshot(self) -> ExportSnapshot:
        with self._lock:
            return self._snapshot

    def read_snapshot(self, now: float | None = None) -> SnapshotReading:
        snapshot = self.snapshot()
        if snapshot.last_update is None:
            return SnapshotReading(value=snapshot.value, elapsed_seconds=None)
        now = self._clock() if now is None else now
        elapsed = max(0, int(now - snapshot.last_update))
        return SnapshotReading(value=snapshot.value, elapsed_seconds=elapsed)
