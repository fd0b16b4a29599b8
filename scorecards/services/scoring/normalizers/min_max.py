# performance_scorecards/scorecards/services/scoring/normalizers/min_max.py

from __future__ import annotations

from typing import List, Sequence

from scorecards.services.scoring.interfaces import NormalizationMode

NEUTRAL_NORM = 0.5


class MinMaxThroughputNormalizer:
    """Cohort normalizer.

    throughput_norm = (t - t_min) / (t_max - t_min)
    - A zero range (single subject, or everybody tied) maps every subject to 0.5.
    """

    mode = NormalizationMode.COHORT

    def normalize(self, throughputs: Sequence[float]) -> List[float]:
        if not throughputs:
            return []

        t_min = min(throughputs)
        t_max = max(throughputs)
        t_range = t_max - t_min
        if t_range <= 0:
            return [NEUTRAL_NORM for _ in throughputs]

        return [(t - t_min) / t_range for t in throughputs]


__all__ = ["MinMaxThroughputNormalizer", "NEUTRAL_NORM"]
