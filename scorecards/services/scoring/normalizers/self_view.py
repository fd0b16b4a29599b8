# performance_scorecards/scorecards/services/scoring/normalizers/self_view.py

from __future__ import annotations

from typing import List, Sequence

from scorecards.services.scoring.interfaces import NormalizationMode

# throughput at which the curve reaches 0.75 (half of the upper band)
HALF_SATURATION = 5.0


class SelfViewThroughputNormalizer:
    """Single-subject normalizer used by the self view.

    There is no cohort to compare against, so throughput is mapped onto an
    asymmetric curve around the neutral midpoint:
    - t > 0:  0.5 + min(0.5, t / (t + 5))
    - t == 0: 0.25

    Kept separate from the min-max normalizer on purpose; the two modes give
    different numbers for the same throughput and are candidates for unification.
    """

    mode = NormalizationMode.SINGLE_SUBJECT

    def normalize(self, throughputs: Sequence[float]) -> List[float]:
        return [self._normalize_one(t) for t in throughputs]

    @staticmethod
    def _normalize_one(throughput: float) -> float:
        if throughput > 0:
            return 0.5 + min(0.5, throughput / (throughput + HALF_SATURATION))
        return 0.5 - 0.25


__all__ = ["SelfViewThroughputNormalizer"]
