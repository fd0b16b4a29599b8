# performance_scorecards/scorecards/services/scoring/weights.py

from __future__ import annotations

from typing import Optional

from scorecards.config import Settings, WeightSettings, settings as default_settings
from scorecards.services.scoring.interfaces import WeightPreset, WeightSet


def _preset_settings(preset: WeightPreset, cfg: Settings) -> WeightSettings:
    if preset == WeightPreset.MANAGER:
        return cfg.SCORECARD_WEIGHTS_MANAGER
    if preset == WeightPreset.SELF:
        return cfg.SCORECARD_WEIGHTS_SELF
    raise ValueError(f"Unknown weight preset: {preset}")


def preset_weights(preset: WeightPreset, cfg: Optional[Settings] = None) -> WeightSet:
    """Look up the configured WeightSet for a named preset."""
    values = _preset_settings(preset, cfg or default_settings)
    return WeightSet(
        on_time=values.on_time,
        throughput=values.throughput,
        completion=values.completion,
        penalty=values.penalty,
    )


def resolve_weights(
    preset: WeightPreset,
    *,
    on_time: Optional[float] = None,
    throughput: Optional[float] = None,
    completion: Optional[float] = None,
    penalty: Optional[float] = None,
    cfg: Optional[Settings] = None,
) -> WeightSet:
    """Preset weights with caller overrides applied (each override clamped to [0, 100])."""
    return preset_weights(preset, cfg).with_overrides(
        on_time=on_time,
        throughput=throughput,
        completion=completion,
        penalty=penalty,
    )


__all__ = ["preset_weights", "resolve_weights"]
