# performance_scorecards/scorecards/services/scoring/registry.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from scorecards.services.scoring.interfaces import NormalizationMode, ThroughputNormalizer
from scorecards.services.scoring.normalizers import MinMaxThroughputNormalizer, SelfViewThroughputNormalizer


@dataclass(frozen=True)
class NormalizerInfo:
    mode: NormalizationMode
    label: str
    description: str
    normalizer: ThroughputNormalizer


THROUGHPUT_NORMALIZERS: Dict[NormalizationMode, NormalizerInfo] = {
    NormalizationMode.COHORT: NormalizerInfo(
        mode=NormalizationMode.COHORT,
        label="Cohort min-max",
        description="(t - min) / (max - min); 0.5 when the range is zero",
        normalizer=MinMaxThroughputNormalizer(),
    ),
    NormalizationMode.SINGLE_SUBJECT: NormalizerInfo(
        mode=NormalizationMode.SINGLE_SUBJECT,
        label="Self view",
        description="0.5 + min(0.5, t / (t + 5)) when t > 0, else 0.25",
        normalizer=SelfViewThroughputNormalizer(),
    ),
}


def get_normalizer(mode: NormalizationMode) -> ThroughputNormalizer:
    info = THROUGHPUT_NORMALIZERS.get(mode)
    if not info:
        raise ValueError(f"Unknown normalization mode: {mode}")
    return info.normalizer


def select_mode(cohort_size: int, self_view: bool = False) -> NormalizationMode:
    """Self view of exactly one subject uses the single-subject curve; everything else is a cohort."""
    if self_view and cohort_size == 1:
        return NormalizationMode.SINGLE_SUBJECT
    return NormalizationMode.COHORT


__all__ = [
    "NormalizerInfo",
    "THROUGHPUT_NORMALIZERS",
    "get_normalizer",
    "select_mode",
]
