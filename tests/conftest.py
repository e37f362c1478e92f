from __future__ import annotations

import pytest

from gridexport.cache import ExportCache
from gridexport.client import FeedError
from gridexport.model import FlowRecord


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """Returns queued results in order; an exception in the queue is raised."""

    def __init__(self, *results: list[FlowRecord] | Exception) -> None:
        self.results = list(results)
        self.calls = 0

    def fetch_records(self) -> list[FlowRecord]:
        self.calls += 1
        result = self.results.pop(0) if self.results else FeedError("no more results")
        if isinstance(result, Exception):
            raise result
        return result


def rec(area_out: str, area_in: str, value: float) -> FlowRecord:
    return FlowRecord(area_out=area_out, area_in=area_in, value=value)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ExportCache:
    return ExportCache(clock=clock)


@pytest.fixture
def sample_records() -> list[FlowRecord]:
    return [rec("SE3", "NO1", 100.0), rec("DK1", "SE4", 30.0), rec("SE2", "SE1", 50.0)]
