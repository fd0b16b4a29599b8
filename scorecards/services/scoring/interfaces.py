# performance_scorecards/scorecards/services/scoring/interfaces.py

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator

from scorecards.services.scoring.utils import clamp, round_half_up


class NormalizationMode(str, Enum):
    """How throughput is mapped onto [0, 1] for a cohort.

    COHORT: min-max across the subjects compared in one request.
    SINGLE_SUBJECT: self-view curve with nothing to compare against.
    """
    COHORT = "COHORT"
    SINGLE_SUBJECT = "SINGLE_SUBJECT"


class WeightPreset(str, Enum):
    """Named weight configurations (see Settings.SCORECARD_WEIGHTS_*)."""
    MANAGER = "MANAGER"
    SELF = "SELF"


class WeightSet(BaseModel):
    """Percent-style weights, each independently clamped to [0, 100]."""
    model_config = ConfigDict(frozen=True)

    on_time: float = 0.0
    throughput: float = 0.0
    completion: float = 0.0
    penalty: float = 0.0

    @field_validator("on_time", "throughput", "completion", "penalty", mode="before")
    @classmethod
    def clamp_weight(cls, v: Optional[float]) -> float:
        return clamp(v, 0.0, 100.0)

    def with_overrides(
        self,
        on_time: Optional[float] = None,
        throughput: Optional[float] = None,
        completion: Optional[float] = None,
        penalty: Optional[float] = None,
    ) -> "WeightSet":
        """Return a copy where every non-None override replaces the preset value."""
        return WeightSet(
            on_time=self.on_time if on_time is None else on_time,
            throughput=self.throughput if throughput is None else throughput,
            completion=self.completion if completion is None else completion,
            penalty=self.penalty if penalty is None else penalty,
        )


class WindowSpec(BaseModel):
    """Resolved time window shared by every subject of one request."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: datetime = Field(alias="from")
    to: datetime
    days: int = Field(ge=1)
    weeks: int = Field(ge=1)


class SubjectRawMetrics(BaseModel):
    """Raw task counters for one subject within a window.

    completed: tasks completed inside the window
    due_with_date: completed tasks that carried a due date
    on_time: due_with_date tasks completed on or before the due date
    pending: currently open tasks (no window filter)
    overdue_open: pending tasks whose due date has passed
    """
    model_config = ConfigDict(frozen=True)

    completed: NonNegativeInt = 0
    due_with_date: NonNegativeInt = 0
    on_time: NonNegativeInt = 0
    pending: NonNegativeInt = 0
    overdue_open: NonNegativeInt = 0

    @classmethod
    def zero(cls) -> "SubjectRawMetrics":
        return cls()


class SubjectDerivedMetrics(BaseModel):
    """Read-time view derived from raw metrics and the cohort throughput range."""
    model_config = ConfigDict(frozen=True)

    on_time_rate: int
    completion_rate: int
    throughput: float
    throughput_norm: float
    overdue_rate: float  # 0..1 fraction; reported x100 via overdue_rate_pct

    @property
    def overdue_rate_pct(self) -> int:
        return round_half_up(self.overdue_rate * 100)


class Subject(BaseModel):
    """An employee as returned by the user/department directory."""
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: Optional[str] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    department_archived: bool = False


class ScoreResult(BaseModel):
    """Performance Index for one subject of a cohort.

    degraded: metrics could not be fetched and were replaced by zeros
    """
    subject: Subject
    raw: SubjectRawMetrics
    derived: SubjectDerivedMetrics
    weeks: int
    score: int = Field(ge=0, le=100)
    degraded: bool = False


class ThroughputNormalizer(Protocol):
    """Protocol that all throughput normalizers must satisfy."""

    mode: NormalizationMode

    def normalize(self, throughputs: Sequence[float]) -> List[float]:  # pragma: no cover - interface only
        ...


__all__ = [
    "NormalizationMode",
    "WeightPreset",
    "WeightSet",
    "WindowSpec",
    "SubjectRawMetrics",
    "SubjectDerivedMetrics",
    "Subject",
    "ScoreResult",
    "ThroughputNormalizer",
]
