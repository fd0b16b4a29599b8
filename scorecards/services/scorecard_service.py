# performance_scorecards/scorecards/services/scorecard_service.py

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from scorecards.services.metrics_fetcher import SqlTaskMetricsSource, SubjectMetricsFetcher
from scorecards.services.scope import (
    EmployeeScope,
    ScopeQuery,
    ScopeResolver,
    SqlSubjectDirectory,
)
from scorecards.services.scoring import (
    ScoreCalculator,
    ScoreResult,
    Subject,
    WeightSet,
    WindowSpec,
    get_normalizer,
    select_mode,
)
from scorecards.services.scoring.ranking import (
    DepartmentRollup,
    DepartmentSummary,
    Ranking,
    ScorecardSummary,
    department_summary,
    rank,
    rank_departments,
    sort_results,
    summarize_scorecards,
)

logger = logging.getLogger("scorecards.services.scorecards")


class Scorecards(BaseModel):
    items: List[ScoreResult] = Field(default_factory=list)
    summary: ScorecardSummary = Field(default_factory=ScorecardSummary)


class DepartmentRanking(BaseModel):
    items: List[DepartmentRollup] = Field(default_factory=list)
    summary: DepartmentSummary = Field(default_factory=DepartmentSummary)


class SelfScorecard(BaseModel):
    subject: Subject
    window: WindowSpec
    result: ScoreResult


class ScorecardService:
    """Performance Index engine shared by every scorecard view.

    Responsibilities:
    - Resolve the requested scope into a cohort of subjects
    - Fetch raw metrics for the whole cohort (bounded fan-out, single join)
    - Normalize throughput across the cohort and score each subject
    - Rank / summarize the cohort for the calling view

    Holds no state between calls; every method works on a fresh cohort.
    """

    def __init__(self, resolver: ScopeResolver, fetcher: SubjectMetricsFetcher):
        self.resolver = resolver
        self.fetcher = fetcher

    @classmethod
    def from_session_factory(
        cls,
        session_factory: Callable[[], Session],
        max_concurrency: Optional[int] = None,
    ) -> "ScorecardService":
        return cls(
            resolver=ScopeResolver(SqlSubjectDirectory(session_factory)),
            fetcher=SubjectMetricsFetcher(SqlTaskMetricsSource(session_factory), max_concurrency=max_concurrency),
        )

    async def score_cohort(
        self,
        scope: ScopeQuery,
        window: WindowSpec,
        weights: WeightSet,
        *,
        self_view: bool = False,
    ) -> List[ScoreResult]:
        """Score every subject in scope. Returns results sorted best first."""
        subjects = await asyncio.to_thread(self.resolver.resolve, scope)
        if not subjects:
            logger.info("scorecards.cohort.empty", extra={"scope": scope.describe()})
            return []

        logger.info(
            "scorecards.cohort.start",
            extra={"scope": scope.describe(), "total": len(subjects), "weeks": window.weeks},
        )

        # Join barrier: normalization needs every subject's metrics.
        outcomes = await self.fetcher.fetch_all([s.id for s in subjects], window)

        throughputs = [outcomes[s.id].metrics.completed / window.weeks for s in subjects]
        mode = select_mode(len(subjects), self_view=self_view)
        norms = get_normalizer(mode).normalize(throughputs)
        calculator = ScoreCalculator(weights)

        results: List[ScoreResult] = []
        for subject, throughput, norm in zip(subjects, throughputs, norms):
            outcome = outcomes[subject.id]
            score, derived = calculator.compute(outcome.metrics, throughput, norm)
            results.append(
                ScoreResult(
                    subject=subject,
                    raw=outcome.metrics,
                    derived=derived,
                    weeks=window.weeks,
                    score=score,
                    degraded=outcome.degraded,
                )
            )

        ordered = sort_results(results)
        logger.info(
            "scorecards.cohort.done",
            extra={
                "scope": scope.describe(),
                "mode": mode.value,
                "count": len(ordered),
                "degraded": sum(1 for r in ordered if r.degraded),
            },
        )
        return ordered

    async def build_scorecards(self, scope: ScopeQuery, window: WindowSpec, weights: WeightSet) -> Scorecards:
        results = await self.score_cohort(scope, window, weights)
        return Scorecards(items=results, summary=summarize_scorecards(results))

    async def build_rankings(
        self,
        scope: ScopeQuery,
        window: WindowSpec,
        weights: WeightSet,
        top_n: int,
        low_n: int,
    ) -> Ranking:
        results = await self.score_cohort(scope, window, weights)
        return rank(results, top_n=top_n, low_n=low_n)

    async def build_department_rankings(
        self,
        scope: ScopeQuery,
        window: WindowSpec,
        weights: WeightSet,
    ) -> DepartmentRanking:
        results = await self.score_cohort(scope, window, weights)
        rollups = rank_departments(results)
        return DepartmentRanking(items=rollups, summary=department_summary(rollups, results))

    async def build_self_scorecard(self, user_id: int, window: WindowSpec, weights: WeightSet) -> SelfScorecard:
        """Scorecard for one employee on the single-subject curve (raises SubjectNotFoundError)."""
        results = await self.score_cohort(EmployeeScope(user_id), window, weights, self_view=True)
        result = results[0]
        return SelfScorecard(subject=result.subject, window=window, result=result)


__all__ = [
    "Scorecards",
    "DepartmentRanking",
    "SelfScorecard",
    "ScorecardService",
]
