# performance_scorecards/scorecards/services/scorecard_export.py

from __future__ import annotations

import csv
import io
from typing import Iterable, List

from scorecards.services.scoring.interfaces import ScoreResult, WindowSpec
from scorecards.services.scoring.ranking import Ranking

CSV_HEADERS: List[str] = [
    "username",
    "email",
    "department",
    "score",
    "onTimeRate",
    "throughput",
    "completionRate",
    "pending",
    "overdueRate",
]

RANKING_CSV_HEADERS: List[str] = [
    "rankType",
    "rank",
    "username",
    "email",
    "department",
    "score",
    "onTimeRate",
    "throughput",
    "completionRate",
    "overdueRate",
]


def export_scorecards_csv(results: Iterable[ScoreResult]) -> str:
    """Render employee scorecards as CSV (one row per subject, header first)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in results:
        writer.writerow(
            [
                r.subject.username,
                r.subject.email or "",
                r.subject.department_name or "",
                r.score,
                r.derived.on_time_rate,
                f"{r.derived.throughput:.2f}",
                r.derived.completion_rate,
                r.raw.pending,
                r.derived.overdue_rate_pct,
            ]
        )
    return buffer.getvalue()


def export_rankings_csv(ranking: Ranking) -> str:
    """Render a ranking as CSV: top slice rows, then low slice rows, each numbered from 1."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(RANKING_CSV_HEADERS)
    for rank_type, slice_ in (("top", ranking.top), ("low", ranking.low)):
        for position, r in enumerate(slice_, start=1):
            writer.writerow(
                [
                    rank_type,
                    position,
                    r.subject.username,
                    r.subject.email or "",
                    r.subject.department_name or "",
                    r.score,
                    r.derived.on_time_rate,
                    f"{r.derived.throughput:.2f}",
                    r.derived.completion_rate,
                    r.derived.overdue_rate_pct,
                ]
            )
    return buffer.getvalue()


def export_filename(scope_label: str, window: WindowSpec, prefix: str = "hr-scorecards") -> str:
    """e.g. hr-scorecards-department-3-2024-01-01-to-2024-03-31.csv"""
    safe_scope = scope_label.replace(":", "-")
    return (
        f"{prefix}-{safe_scope}-"
        f"{window.from_.date().isoformat()}-to-{window.to.date().isoformat()}.csv"
    )


__all__ = [
    "CSV_HEADERS",
    "RANKING_CSV_HEADERS",
    "export_scorecards_csv",
    "export_rankings_csv",
    "export_filename",
]
