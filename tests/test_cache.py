from __future__ import annotations

import threading

from conftest import FakeClock
from gridexport.cache import ExportCache, ExportSnapshot


def test_reading_before_first_write_has_no_update(cache: ExportCache) -> None:
    reading = cache.read_snapshot()
    assert reading.value == 0.0
    assert reading.elapsed_seconds is None


def test_elapsed_is_whole_seconds_since_write(cache: ExportCache, clock: FakeClock) -> None:
    cache.write(70.0)
    assert cache.read_snapshot() == (70.0, 0)

    clock.advance(1.9)
    assert cache.read_snapshot().elapsed_seconds == 1

    clock.advance(60.2)
    assert cache.read_snapshot() == (70.0, 62)


def test_elapsed_is_non_decreasing_until_next_write(cache: ExportCache, clock: FakeClock) -> None:
    cache.write(5.0)
    seen = []
    for _ in range(10):
        clock.advance(0.7)
        seen.append(cache.read_snapshot().elapsed_seconds)
    assert seen == sorted(seen)
    assert all(s is not None and s >= 0 for s in seen)

    cache.write(6.0)
    assert cache.read_snapshot() == (6.0, 0)


def test_explicit_timestamps_are_used(cache: ExportCache) -> None:
    cache.write(-12.5, now=500.0)
    assert cache.snapshot() == ExportSnapshot(value=-12.5, last_update=500.0)
    assert cache.read_snapshot(now=530.4) == (-12.5, 30)
    # A clock that went backwards still reports a non-negative age.
    assert cache.read_snapshot(now=499.0).elapsed_seconds == 0


def test_readers_never_see_a_torn_snapshot() -> None:
    cache = ExportCache()
    stop = threading.Event()
    torn: list[ExportSnapshot] = []

    def writer() -> None:
        for i in range(20_000):
            cache.write(float(i), now=float(i))
        stop.set()

    def reader() -> None:
        while not stop.is_set():
            snap = cache.snapshot()
            if snap.last_update is not None and snap.value != snap.last_update:
                torn.append(snap)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in readers:
        t.start()
    writer()
    for t in readers:
        t.join()

    assert torn == []
    assert cache.snapshot() == ExportSnapshot(value=19_999.0, last_update=19_999.0)
