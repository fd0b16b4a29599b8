from .interfaces import (
    NormalizationMode,
    WeightPreset,
    WeightSet,
    WindowSpec,
    SubjectRawMetrics,
    SubjectDerivedMetrics,
    Subject,
    ScoreResult,
    ThroughputNormalizer,
)
from .registry import (
    NormalizerInfo,
    THROUGHPUT_NORMALIZERS,
    get_normalizer,
    select_mode,
)
from .calculator import ScoreCalculator, compute_score
from .window import resolve_window

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
    "NormalizerInfo",
    "THROUGHPUT_NORMALIZERS",
    "get_normalizer",
    "select_mode",
    "ScoreCalculator",
    "compute_score",
    "resolve_window",
]
