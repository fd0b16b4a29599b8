# performance_scorecards/scorecards/services/scoring/normalizers/__init__.py

from .min_max import MinMaxThroughputNormalizer
from .self_view import SelfViewThroughputNormalizer

__all__ = ["MinMaxThroughputNormalizer", "SelfViewThroughputNormalizer"]
