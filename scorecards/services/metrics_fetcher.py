# performance_scorecards/scorecards/services/metrics_fetcher.py
"""
Per-subject raw metric retrieval.

Each subject's counters come from independent read-only queries. The fetcher
fans them out concurrently (bounded by a semaphore) and joins them before
anything is normalized, because normalization needs the whole cohort.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Protocol, Tuple

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session

from scorecards.config import settings
from scorecards.db.models import Task, TaskStatus
from scorecards.services.scoring.interfaces import SubjectRawMetrics, WindowSpec

logger = logging.getLogger("scorecards.services.metrics")


class TaskMetricsSource(Protocol):
    """Blocking task-store query for one subject's counters."""

    def fetch(self, subject_id: int, window: WindowSpec, now: datetime) -> SubjectRawMetrics:  # pragma: no cover - interface only
        ...


class SqlTaskMetricsSource:
    """TaskMetricsSource over the tasks table.

    Every call opens its own session so calls can run in parallel threads.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def fetch(self, subject_id: int, window: WindowSpec, now: datetime) -> SubjectRawMetrics:
        has_due = Task.due_date.is_not(None)

        completed_stmt = select(
            func.count(Task.id),
            func.coalesce(func.sum(case((has_due, 1), else_=0)), 0),
            func.coalesce(
                func.sum(case((and_(has_due, Task.completed_at <= Task.due_date), 1), else_=0)),
                0,
            ),
        ).where(
            Task.assignee_id == subject_id,
            Task.status == TaskStatus.COMPLETED.value,
            Task.completed_at >= window.from_,
            Task.completed_at <= window.to,
        )

        open_stmt = select(
            func.count(Task.id),
            func.coalesce(func.sum(case((and_(has_due, Task.due_date < now), 1), else_=0)), 0),
        ).where(
            Task.assignee_id == subject_id,
            Task.status != TaskStatus.COMPLETED.value,
        )

        with self.session_factory() as db:
            completed, due_with_date, on_time = db.execute(completed_stmt).one()
            pending, overdue_open = db.execute(open_stmt).one()

        return SubjectRawMetrics(
            completed=int(completed or 0),
            due_with_date=int(due_with_date or 0),
            on_time=int(on_time or 0),
            pending=int(pending or 0),
            overdue_open=int(overdue_open or 0),
        )


@dataclass(frozen=True)
class FetchOutcome:
    metrics: SubjectRawMetrics
    degraded: bool = False


class SubjectMetricsFetcher:
    """Fan-out/fan-in of per-subject metric queries.

    - At most ``max_concurrency`` queries are in flight at once.
    - A failing subject degrades to zero metrics; the batch still completes.
    - Cancelling the awaiting task cancels the batch; nothing partial is returned.
    """

    def __init__(self, source: TaskMetricsSource, max_concurrency: Optional[int] = None):
        self.source = source
        self.max_concurrency = max(1, max_concurrency or settings.SCORECARD_FETCH_CONCURRENCY)

    async def fetch_all(
        self,
        subject_ids: Iterable[int],
        window: WindowSpec,
        now: Optional[datetime] = None,
    ) -> Dict[int, FetchOutcome]:
        """
        Fetch raw metrics for every subject.

        Args:
            subject_ids: subjects of the cohort (duplicates are fetched once)
            window: shared window for completion counters
            now: reference instant for "overdue"; defaults to the window end

        Returns:
            Mapping subject_id -> FetchOutcome, one entry per distinct subject
        """
        reference = now or window.to
        unique_ids = list(dict.fromkeys(subject_ids))
        if not unique_ids:
            return {}

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _fetch_one(subject_id: int) -> Tuple[int, FetchOutcome]:
            async with semaphore:
                try:
                    metrics = await asyncio.to_thread(self.source.fetch, subject_id, window, reference)
                except Exception as e:
                    logger.warning(
                        "scorecards.fetch.subject_failed",
                        extra={"subject_id": subject_id, "error": str(e)},
                    )
                    return subject_id, FetchOutcome(metrics=SubjectRawMetrics.zero(), degraded=True)
            return subject_id, FetchOutcome(metrics=metrics)

        results = await asyncio.gather(*(_fetch_one(sid) for sid in unique_ids))
        outcomes = dict(results)

        degraded = sum(1 for o in outcomes.values() if o.degraded)
        logger.debug(
            "scorecards.fetch.done",
            extra={"count": len(outcomes), "degraded": degraded},
        )
        return outcomes


__all__ = [
    "TaskMetricsSource",
    "SqlTaskMetricsSource",
    "FetchOutcome",
    "SubjectMetricsFetcher",
]
