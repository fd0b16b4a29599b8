# performance_scorecards/scorecards/api/schemas/scorecards.py

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

from scorecards.services.scoring.interfaces import ScoreResult, Subject, WindowSpec
from scorecards.services.scoring.ranking import DepartmentRollup


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _SummaryModel(CamelModel):
    """Summaries of an empty cohort serialize as just {"count": 0}."""

    count: int = 0

    @model_serializer(mode="wrap")
    def _drop_empty_fields(self, handler) -> Dict[str, Any]:
        data = handler(self)
        if self.count == 0:
            return {k: v for k, v in data.items() if v is not None}
        return data


class ScorecardMetricsOut(CamelModel):
    completed: int
    pending: int
    overdue_open: int
    weeks: int
    throughput: float
    on_time_rate: int
    completion_rate: int
    overdue_rate: int

    @classmethod
    def from_result(cls, r: ScoreResult, throughput_digits: Optional[int] = None) -> "ScorecardMetricsOut":
        throughput = r.derived.throughput
        if throughput_digits is not None:
            throughput = round(throughput, throughput_digits)
        return cls(
            completed=r.raw.completed,
            pending=r.raw.pending,
            overdue_open=r.raw.overdue_open,
            weeks=r.weeks,
            throughput=throughput,
            on_time_rate=r.derived.on_time_rate,
            completion_rate=r.derived.completion_rate,
            overdue_rate=r.derived.overdue_rate_pct,
        )


class ScorecardItemOut(CamelModel):
    user_id: int
    username: str
    email: Optional[str] = None
    department: Optional[str] = None
    metrics: ScorecardMetricsOut
    score: int
    degraded: bool = False

    @classmethod
    def from_result(cls, r: ScoreResult) -> "ScorecardItemOut":
        return cls(
            user_id=r.subject.id,
            username=r.subject.username,
            email=r.subject.email,
            department=r.subject.department_name,
            metrics=ScorecardMetricsOut.from_result(r),
            score=r.score,
            degraded=r.degraded,
        )


class ScorecardSummaryOut(_SummaryModel):
    avg_score: Optional[int] = None
    top_performer: Optional[str] = None


class ScorecardsResponse(CamelModel):
    items: List[ScorecardItemOut] = Field(default_factory=list)
    summary: ScorecardSummaryOut = Field(default_factory=ScorecardSummaryOut)


class RankingItemOut(CamelModel):
    user_id: int
    username: str
    email: Optional[str] = None
    department: Optional[str] = None
    score: int
    on_time_rate: int
    throughput: float
    completion_rate: int
    pending: int
    overdue_rate: int

    @classmethod
    def from_result(cls, r: ScoreResult) -> "RankingItemOut":
        return cls(
            user_id=r.subject.id,
            username=r.subject.username,
            email=r.subject.email,
            department=r.subject.department_name,
            score=r.score,
            on_time_rate=r.derived.on_time_rate,
            throughput=r.derived.throughput,
            completion_rate=r.derived.completion_rate,
            pending=r.raw.pending,
            overdue_rate=r.derived.overdue_rate_pct,
        )


class RankingSummaryOut(_SummaryModel):
    avg_score: Optional[int] = None
    top_cutoff: Optional[int] = None
    low_cutoff: Optional[int] = None


class RankingsResponse(CamelModel):
    top: List[RankingItemOut] = Field(default_factory=list)
    low: List[RankingItemOut] = Field(default_factory=list)
    summary: RankingSummaryOut = Field(default_factory=RankingSummaryOut)


class DepartmentItemOut(CamelModel):
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    headcount: int
    avg_score: int
    best_score: int
    worst_score: int

    @classmethod
    def from_rollup(cls, d: DepartmentRollup) -> "DepartmentItemOut":
        return cls.model_validate(d.model_dump())


class DepartmentSummaryOut(_SummaryModel):
    avg_score: Optional[int] = None


class DepartmentRankingsResponse(CamelModel):
    items: List[DepartmentItemOut] = Field(default_factory=list)
    summary: DepartmentSummaryOut = Field(default_factory=DepartmentSummaryOut)


class SelfUserOut(CamelModel):
    id: int
    username: str
    email: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def from_subject(cls, s: Subject) -> "SelfUserOut":
        return cls(id=s.id, username=s.username, email=s.email, department=s.department_name)


class RangeOut(CamelModel):
    from_: datetime = Field(alias="from")
    to: datetime
    days: int
    weeks: int

    @classmethod
    def from_window(cls, w: WindowSpec) -> "RangeOut":
        return cls(from_=w.from_, to=w.to, days=w.days, weeks=w.weeks)


class SelfScorecardResponse(CamelModel):
    user: SelfUserOut
    range: RangeOut
    metrics: ScorecardMetricsOut
    score: int
