# performance_scorecards/scorecards/services/scoring/ranking.py
"""
Ranking and cohort summaries.

Ordering contract: score descending, ties broken by subject id ascending.
"""
from __future__ import annotations

import math
from collections import OrderedDict
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from scorecards.services.scoring.interfaces import ScoreResult
from scorecards.services.scoring.utils import clamp, parse_number, round_half_up

DEFAULT_RANK_LIMIT = 10
MAX_RANK_LIMIT = 50


class RankingSummary(BaseModel):
    count: int = 0
    avg_score: Optional[int] = None
    top_cutoff: Optional[int] = None
    low_cutoff: Optional[int] = None


class Ranking(BaseModel):
    top: List[ScoreResult] = Field(default_factory=list)
    low: List[ScoreResult] = Field(default_factory=list)
    summary: RankingSummary = Field(default_factory=RankingSummary)


class ScorecardSummary(BaseModel):
    count: int = 0
    avg_score: Optional[int] = None
    top_performer: Optional[str] = None


class DepartmentSummary(BaseModel):
    count: int = 0
    avg_score: Optional[int] = None


class DepartmentRollup(BaseModel):
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    headcount: int
    avg_score: int
    best_score: int
    worst_score: int


def clamp_limit(
    value: object,
    default: int = DEFAULT_RANK_LIMIT,
    max_limit: int = MAX_RANK_LIMIT,
) -> int:
    """Clamp a top/low slice size into [1, max_limit]. Missing or non-numeric -> default."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number: Optional[float] = float(value)
    else:
        number = parse_number(None if value is None else str(value))
    if number is None or math.isnan(number) or number == 0:
        number = float(default)
    return int(clamp(number, 1, max_limit))


def sort_results(results: Sequence[ScoreResult]) -> List[ScoreResult]:
    return sorted(results, key=lambda r: (-r.score, r.subject.id))


def average_score(results: Sequence[ScoreResult]) -> Optional[int]:
    if not results:
        return None
    return round_half_up(sum(r.score for r in results) / len(results))


def rank(
    results: Sequence[ScoreResult],
    top_n: int = DEFAULT_RANK_LIMIT,
    low_n: int = DEFAULT_RANK_LIMIT,
) -> Ranking:
    """
    Extract the top and low slices of a cohort.

    - top: best ``top_n`` subjects, best first
    - low: worst ``low_n`` subjects, worst first
    - cutoffs: score of the last element of each slice
    Slices are never padded; an empty cohort yields an empty ranking.
    """
    if not results:
        return Ranking()

    ordered = sort_results(results)
    top = ordered[:top_n]
    low = list(reversed(ordered[-low_n:])) if low_n > 0 else []

    summary = RankingSummary(
        count=len(ordered),
        avg_score=average_score(ordered),
        top_cutoff=top[-1].score if top else None,
        low_cutoff=low[-1].score if low else None,
    )
    return Ranking(top=top, low=low, summary=summary)


def summarize_scorecards(results: Sequence[ScoreResult]) -> ScorecardSummary:
    if not results:
        return ScorecardSummary()
    ordered = sort_results(results)
    return ScorecardSummary(
        count=len(ordered),
        avg_score=average_score(ordered),
        top_performer=ordered[0].subject.username,
    )


def _rolled_up(results: Sequence[ScoreResult]) -> List[ScoreResult]:
    return [r for r in results if not r.subject.department_archived]


def rank_departments(results: Sequence[ScoreResult]) -> List[DepartmentRollup]:
    """Roll subject scores up per department, best average first (name breaks ties).

    Archived departments are left out of the rollup.
    """
    groups: "OrderedDict[Tuple[Optional[int], Optional[str]], List[int]]" = OrderedDict()
    for r in _rolled_up(results):
        key = (r.subject.department_id, r.subject.department_name)
        groups.setdefault(key, []).append(r.score)

    rollups = [
        DepartmentRollup(
            department_id=dept_id,
            department_name=dept_name,
            headcount=len(scores),
            avg_score=round_half_up(sum(scores) / len(scores)),
            best_score=max(scores),
            worst_score=min(scores),
        )
        for (dept_id, dept_name), scores in groups.items()
    ]
    rollups.sort(key=lambda d: (-d.avg_score, d.department_name or "", d.department_id or 0))
    return rollups


def department_summary(rollups: Sequence[DepartmentRollup], results: Sequence[ScoreResult]) -> DepartmentSummary:
    return DepartmentSummary(count=len(rollups), avg_score=average_score(_rolled_up(results)))


__all__ = [
    "DEFAULT_RANK_LIMIT",
    "MAX_RANK_LIMIT",
    "RankingSummary",
    "Ranking",
    "ScorecardSummary",
    "DepartmentRollup",
    "DepartmentSummary",
    "clamp_limit",
    "sort_results",
    "average_score",
    "rank",
    "summarize_scorecards",
    "rank_departments",
    "department_summary",
]
