from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol, Union

from .cache import ExportCache
from .client import FeedError
from .model import FlowRecord, net_export

log = logging.getLogger(__name__)


class FlowSource(Protocol):
    def fetch_records(self) -> list[FlowRecord]: ...


@dataclass(frozen=True)
class Success:
    value: float
    records: int


@dataclass(frozen=True)
class Skipped:
    reason: str


CycleOutcome = Union[Success, Skipped]


class Sampler:
    """
    Background loop that keeps the export cache fresh.

    Each cycle fetches the whole feed, sums the signed boundary-crossing
    flows for ``country`` and publishes the result. A failed fetch skips the
    cycle and leaves the cache untouched. The wait between cycles is a plain
    delay, so the effective period is the interval plus fetch latency.

    The first cycle runs as soon as the loop starts.
    """

    def __init__(
        self,
        *,
        source: FlowSource,
        cache: ExportCache,
        country: str,
        interval_seconds: float = 60.0,
    ) -> None:
        self.source = source
        self.cache = cache
        self.country = country
        self.interval_seconds = float(interval_seconds)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_cycle(self) -> CycleOutcome:
        try:
            records = self.source.fetch_records()
        except FeedError as exc:
            log.info("Skipping cycle: %s", exc)
            return Skipped(reason=str(exc))

        value = net_export(records, self.country)
        self.cache.write(value)
        log.info("Net export %s: %.1f MW (%d flows)", self.country, value, len(records))
        return Success(value=value, records=len(records))

    def run_forever(self) -> None:
        self._loop(self._stop)

    def _loop(self, stop: threading.Event) -> None:
        while not stop.is_set():
            try:
                self.run_cycle()
            except Exception:
                log.exception("Sampler cycle failed unexpectedly; retrying next tick")
            if stop.wait(self.interval_seconds):
                break

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running and not self._stop.is_set():
            return
        # A thread left over from a timed-out stop() keeps its own, already set,
        # event and exits after its in-flight fetch.
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, args=(self._stop,), name="gridexport-sampler", daemon=True
        )
        self._thread.start()
        log.info(
            "Sampler started: country=%s interval=%ss", self.country, self.interval_seconds
        )

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None
