# performance_scorecards/scorecards/api/routes/scorecards.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from scorecards.api.deps import get_current_user_id, get_scorecard_service, require_shared_secret
from scorecards.api.schemas.scorecards import (
    DepartmentItemOut,
    DepartmentRankingsResponse,
    DepartmentSummaryOut,
    RangeOut,
    RankingItemOut,
    RankingsResponse,
    RankingSummaryOut,
    ScorecardItemOut,
    ScorecardMetricsOut,
    ScorecardsResponse,
    ScorecardSummaryOut,
    SelfScorecardResponse,
    SelfUserOut,
)
from scorecards.config import settings
from scorecards.services.errors import ScopeResolutionError, SubjectNotFoundError
from scorecards.services.scope import parse_scope
from scorecards.services.scorecard_export import export_filename, export_rankings_csv, export_scorecards_csv
from scorecards.services.scorecard_service import ScorecardService
from scorecards.services.scoring import WeightPreset, WeightSet, WindowSpec, resolve_window
from scorecards.services.scoring.ranking import clamp_limit
from scorecards.services.scoring.utils import parse_number
from scorecards.services.scoring.weights import resolve_weights


router = APIRouter(
    prefix="/analytics/hr/scorecards",
    tags=["scorecards"],
    dependencies=[Depends(require_shared_secret)],
)


class ScorecardQuery:
    """Shared query parameters. Everything is optional and parsed leniently."""

    def __init__(
        self,
        from_: Optional[str] = Query(default=None, alias="from"),
        to: Optional[str] = Query(default=None),
        department: Optional[str] = Query(default=None),
        w_on_time: Optional[str] = Query(default=None, alias="wOnTime"),
        w_throughput: Optional[str] = Query(default=None, alias="wThroughput"),
        w_completion: Optional[str] = Query(default=None, alias="wCompletion"),
        w_penalty: Optional[str] = Query(default=None, alias="wPenalty"),
    ):
        self.from_ = from_
        self.to = to
        self.department = department
        self.w_on_time = w_on_time
        self.w_throughput = w_throughput
        self.w_completion = w_completion
        self.w_penalty = w_penalty

    def window(self) -> WindowSpec:
        return resolve_window(self.from_, self.to, default_days=settings.SCORECARD_DEFAULT_WINDOW_DAYS)

    def weights(self, preset: WeightPreset) -> WeightSet:
        return resolve_weights(
            preset,
            on_time=parse_number(self.w_on_time),
            throughput=parse_number(self.w_throughput),
            completion=parse_number(self.w_completion),
            penalty=parse_number(self.w_penalty),
        )


def _scope_error(e: Exception) -> HTTPException:
    if isinstance(e, SubjectNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=502, detail=f"Failed to resolve scorecard scope: {e}")


@router.get("/employees", response_model=ScorecardsResponse)
async def employee_scorecards(
    q: ScorecardQuery = Depends(),
    service: ScorecardService = Depends(get_scorecard_service),
) -> ScorecardsResponse:
    """
    Performance Index for every active employee in scope, best first.
    """
    try:
        cards = await service.build_scorecards(
            parse_scope(department=q.department), q.window(), q.weights(WeightPreset.MANAGER)
        )
    except (ScopeResolutionError, SubjectNotFoundError) as e:
        raise _scope_error(e) from e

    return ScorecardsResponse(
        items=[ScorecardItemOut.from_result(r) for r in cards.items],
        summary=ScorecardSummaryOut(**cards.summary.model_dump()),
    )


@router.get("/employees.csv", response_class=Response)
async def employee_scorecards_csv(
    q: ScorecardQuery = Depends(),
    service: ScorecardService = Depends(get_scorecard_service),
) -> Response:
    """
    Same cohort as /employees, rendered as a CSV download.
    """
    scope = parse_scope(department=q.department)
    window = q.window()
    try:
        cards = await service.build_scorecards(scope, window, q.weights(WeightPreset.MANAGER))
    except (ScopeResolutionError, SubjectNotFoundError) as e:
        raise _scope_error(e) from e

    headers = {"Content-Disposition": f'attachment; filename="{export_filename(scope.describe(), window)}"'}
    return Response(content=export_scorecards_csv(cards.items), media_type="text/csv; charset=utf-8", headers=headers)


@router.get("/rankings", response_model=RankingsResponse)
async def employee_rankings(
    q: ScorecardQuery = Depends(),
    top: Optional[str] = Query(default=None),
    low: Optional[str] = Query(default=None),
    service: ScorecardService = Depends(get_scorecard_service),
) -> RankingsResponse:
    """
    Top and bottom performers. low[0] is the weakest employee.
    """
    top_n = clamp_limit(top, default=settings.SCORECARD_RANK_DEFAULT, max_limit=settings.SCORECARD_RANK_MAX)
    low_n = clamp_limit(low, default=settings.SCORECARD_RANK_DEFAULT, max_limit=settings.SCORECARD_RANK_MAX)
    try:
        ranking = await service.build_rankings(
            parse_scope(department=q.department),
            q.window(),
            q.weights(WeightPreset.MANAGER),
            top_n=top_n,
            low_n=low_n,
        )
    except (ScopeResolutionError, SubjectNotFoundError) as e:
        raise _scope_error(e) from e

    return RankingsResponse(
        top=[RankingItemOut.from_result(r) for r in ranking.top],
        low=[RankingItemOut.from_result(r) for r in ranking.low],
        summary=RankingSummaryOut(**ranking.summary.model_dump()),
    )


@router.get("/rankings.csv", response_class=Response)
async def employee_rankings_csv(
    q: ScorecardQuery = Depends(),
    top: Optional[str] = Query(default=None),
    low: Optional[str] = Query(default=None),
    service: ScorecardService = Depends(get_scorecard_service),
) -> Response:
    """
    Same slices as /rankings, rendered as a CSV download (top rows first).
    """
    scope = parse_scope(department=q.department)
    window = q.window()
    try:
        ranking = await service.build_rankings(
            scope,
            window,
            q.weights(WeightPreset.MANAGER),
            top_n=clamp_limit(top, default=settings.SCORECARD_RANK_DEFAULT, max_limit=settings.SCORECARD_RANK_MAX),
            low_n=clamp_limit(low, default=settings.SCORECARD_RANK_DEFAULT, max_limit=settings.SCORECARD_RANK_MAX),
        )
    except (ScopeResolutionError, SubjectNotFoundError) as e:
        raise _scope_error(e) from e

    filename = export_filename(scope.describe(), window, prefix="employee-rankings")
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=export_rankings_csv(ranking), media_type="text/csv; charset=utf-8", headers=headers)


@router.get("/departments", response_model=DepartmentRankingsResponse)
async def department_rankings(
    q: ScorecardQuery = Depends(),
    service: ScorecardService = Depends(get_scorecard_service),
) -> DepartmentRankingsResponse:
    """
    Department rollup of employee scores, best average first.
    """
    try:
        ranking = await service.build_department_rankings(
            parse_scope(department=q.department), q.window(), q.weights(WeightPreset.MANAGER)
        )
    except (ScopeResolutionError, SubjectNotFoundError) as e:
        raise _scope_error(e) from e

    return DepartmentRankingsResponse(
        items=[DepartmentItemOut.from_rollup(d) for d in ranking.items],
        summary=DepartmentSummaryOut(**ranking.summary.model_dump()),
    )


@router.get("/me", response_model=SelfScorecardResponse)
async def my_scorecard(
    q: ScorecardQuery = Depends(),
    user_id: int = Depends(get_current_user_id),
    service: ScorecardService = Depends(get_scorecard_service),
) -> SelfScorecardResponse:
    """
    Scorecard of the calling employee (self-view weights, single-subject normalization).
    """
    window = q.window()
    try:
        card = await service.build_self_scorecard(user_id, window, q.weights(WeightPreset.SELF))
    except (ScopeResolutionError, SubjectNotFoundError) as e:
        raise _scope_error(e) from e

    return SelfScorecardResponse(
        user=SelfUserOut.from_subject(card.subject),
        range=RangeOut.from_window(card.window),
        metrics=ScorecardMetricsOut.from_result(card.result, throughput_digits=2),
        score=card.result.score,
    )
