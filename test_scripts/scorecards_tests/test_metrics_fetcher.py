# Tests for the bounded per-subject fan-out
from __future__ import annotations

import asyncio
import threading
import time
from datetime import datetime
from typing import Dict, List

import pytest

from scorecards.services.metrics_fetcher import SubjectMetricsFetcher
from scorecards.services.scoring import SubjectRawMetrics, WindowSpec, resolve_window

WINDOW = resolve_window("2025-03-01", "2025-03-29")


class FakeSource:
    def __init__(self, metrics: Dict[int, SubjectRawMetrics], fail_for=()):
        self.metrics = metrics
        self.fail_for = set(fail_for)
        self.calls: List[int] = []
        self.seen_now: List[datetime] = []
        self._lock = threading.Lock()

    def fetch(self, subject_id: int, window: WindowSpec, now: datetime) -> SubjectRawMetrics:
        with self._lock:
            self.calls.append(subject_id)
            self.seen_now.append(now)
        if subject_id in self.fail_for:
            raise RuntimeError("task store unavailable")
        return self.metrics[subject_id]


class SlowSource:
    """Records how many fetches overlap."""

    def __init__(self, delay: float = 0.05):
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def fetch(self, subject_id: int, window: WindowSpec, now: datetime) -> SubjectRawMetrics:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self.delay)
        with self._lock:
            self.active -= 1
        return SubjectRawMetrics(completed=subject_id)


class BlockingSource:
    def __init__(self):
        self.release = threading.Event()
        self.started = threading.Event()

    def fetch(self, subject_id: int, window: WindowSpec, now: datetime) -> SubjectRawMetrics:
        self.started.set()
        self.release.wait(timeout=5)
        return SubjectRawMetrics(completed=1)


def test_fetch_all_returns_metrics_keyed_by_subject():
    source = FakeSource({1: SubjectRawMetrics(completed=3), 2: SubjectRawMetrics(pending=4)})
    fetcher = SubjectMetricsFetcher(source, max_concurrency=4)

    outcomes = asyncio.run(fetcher.fetch_all([1, 2], WINDOW))

    assert outcomes[1].metrics.completed == 3
    assert outcomes[2].metrics.pending == 4
    assert not outcomes[1].degraded and not outcomes[2].degraded


def test_failing_subject_degrades_to_zero():
    source = FakeSource({1: SubjectRawMetrics(completed=3), 3: SubjectRawMetrics(completed=1)}, fail_for={2})
    fetcher = SubjectMetricsFetcher(source, max_concurrency=2)

    outcomes = asyncio.run(fetcher.fetch_all([1, 2, 3], WINDOW))

    assert set(outcomes) == {1, 2, 3}
    assert outcomes[2].degraded
    assert outcomes[2].metrics == SubjectRawMetrics.zero()
    assert outcomes[1].metrics.completed == 3


def test_overdue_reference_defaults_to_window_end():
    source = FakeSource({1: SubjectRawMetrics()})
    asyncio.run(SubjectMetricsFetcher(source).fetch_all([1], WINDOW))
    assert source.seen_now == [WINDOW.to]


def test_duplicate_subjects_fetched_once():
    source = FakeSource({7: SubjectRawMetrics(completed=2)})
    outcomes = asyncio.run(SubjectMetricsFetcher(source).fetch_all([7, 7, 7], WINDOW))
    assert source.calls == [7]
    assert list(outcomes) == [7]


def test_empty_subject_list():
    source = FakeSource({})
    assert asyncio.run(SubjectMetricsFetcher(source).fetch_all([], WINDOW)) == {}
    assert source.calls == []


def test_concurrency_is_bounded():
    source = SlowSource(delay=0.05)
    fetcher = SubjectMetricsFetcher(source, max_concurrency=2)

    outcomes = asyncio.run(fetcher.fetch_all(range(1, 7), WINDOW))

    assert len(outcomes) == 6
    assert 1 <= source.max_active <= 2


def test_cancellation_discards_the_batch():
    source = BlockingSource()
    fetcher = SubjectMetricsFetcher(source, max_concurrency=2)

    async def cancel_midway():
        task = asyncio.create_task(fetcher.fetch_all([1, 2, 3], WINDOW))
        while not source.started.is_set():
            await asyncio.sleep(0.01)
        task.cancel()
        try:
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            source.release.set()

    asyncio.run(cancel_midway())
