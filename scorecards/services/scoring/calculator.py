# performance_scorecards/scorecards/services/scoring/calculator.py

from __future__ import annotations

from typing import Tuple

from scorecards.services.scoring.interfaces import SubjectDerivedMetrics, SubjectRawMetrics, WeightSet
from scorecards.services.scoring.utils import clamp, round_half_up, safe_div


class ScoreCalculator:
    """Performance Index calculator.

    base    = w_on_time% * on_time_rate
            + w_throughput% * (throughput_norm * 100)
            + w_completion% * completion_rate
    penalty = w_penalty% * (overdue_rate * 100)
    score   = clamp(round(base - penalty), 0, 100)

    - completion_rate: completed / (completed + pending), 0 when both are 0
    - on_time_rate: on_time / due_with_date, 0 when nothing had a due date
    - overdue_rate: overdue_open / (overdue_open + pending), kept as a 0..1 fraction
    """

    def __init__(self, weights: WeightSet):
        self.weights = weights

    def compute(
        self,
        raw: SubjectRawMetrics,
        throughput: float,
        throughput_norm: float,
    ) -> Tuple[int, SubjectDerivedMetrics]:
        w = self.weights

        total_work = raw.completed + raw.pending
        completion_rate = round_half_up(safe_div(raw.completed, total_work) * 100) if total_work > 0 else 0
        on_time_rate = round_half_up(safe_div(raw.on_time, raw.due_with_date) * 100) if raw.due_with_date > 0 else 0

        overdue_base = raw.overdue_open + raw.pending
        overdue_rate = safe_div(raw.overdue_open, overdue_base)

        base = (
            (w.on_time / 100) * on_time_rate
            + (w.throughput / 100) * (throughput_norm * 100)
            + (w.completion / 100) * completion_rate
        )
        penalty = (w.penalty / 100) * (overdue_rate * 100)
        score = int(clamp(round_half_up(base - penalty), 0, 100))

        derived = SubjectDerivedMetrics(
            on_time_rate=on_time_rate,
            completion_rate=completion_rate,
            throughput=throughput,
            throughput_norm=throughput_norm,
            overdue_rate=overdue_rate,
        )
        return score, derived


def compute_score(
    raw: SubjectRawMetrics,
    throughput: float,
    throughput_norm: float,
    weights: WeightSet,
) -> Tuple[int, SubjectDerivedMetrics]:
    """Functional shortcut for ScoreCalculator(weights).compute(...)."""
    return ScoreCalculator(weights).compute(raw, throughput, throughput_norm)


__all__ = ["ScoreCalculator", "compute_score"]
