from __future__ import annotations

"""Profile derivation settings (hyperparameters) using Pydantic."""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator

from . import constants as C


class ProfileSettings(BaseModel):
    """Tunable numbers for profile derivation.

    - axis_min / axis_max: native axis range (neutral default is the midpoint)
    - rank_weights: weight per rank 1..4 (all > 0)
    - wc_warm_max: palette threshold for the style label (4 or 5 in the field)
    - confidence_*: consistency scoring normalizer and sparse-data fallback
    - count_all_work: whether "all of these work" votes count toward axes
    """

    axis_min: float = C.AXIS_MIN
    axis_max: float = C.AXIS_MAX

    rank_weights: Dict[int, float] = Field(default_factory=lambda: dict(C.RANK_WEIGHTS))
    pick_weight: float = Field(C.PICK_WEIGHT, gt=0)
    count_all_work: bool = True

    ct_contemporary_max: float = C.CT_CONTEMPORARY_MAX
    ct_transitional_max: float = C.CT_TRANSITIONAL_MAX
    wc_warm_max: float = C.WC_WARM_MAX
    ml_minimal_max: float = C.ML_MINIMAL_MAX
    ml_layered_min: float = C.ML_LAYERED_MIN
    tag_low: float = C.TAG_LOW
    tag_high: float = C.TAG_HIGH

    confidence_normalizer: float = Field(C.CONFIDENCE_NORMALIZER, gt=0)
    confidence_min_samples: int = Field(C.CONFIDENCE_MIN_SAMPLES, ge=1)
    sparse_confidence: float = Field(C.SPARSE_CONFIDENCE, ge=0, le=1)

    top_regions: int = Field(C.TOP_REGIONS, ge=1)
    top_materials: int = Field(C.TOP_MATERIALS, ge=1)

    divergence_flag_gap: int = Field(C.DIVERGENCE_FLAG_GAP, ge=0)
    divergence_significant_gap: int = Field(C.DIVERGENCE_SIGNIFICANT_GAP, ge=1)

    @field_validator("rank_weights")
    @classmethod
    def _ranks_complete(cls, v: Dict[int, float]) -> Dict[int, float]:
        if sorted(v.keys()) != list(range(1, C.OPTIONS_PER_QUAD + 1)):
            raise ValueError("rank_weights must define ranks 1..4")
        if any(w <= 0 for w in v.values()):
            raise ValueError("rank weights must be > 0")
        return v

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> "ProfileSettings":
        if self.axis_max <= self.axis_min:
            raise ValueError("axis_max must be > axis_min")
        if self.ct_transitional_max < self.ct_contemporary_max:
            raise ValueError("ct_transitional_max must be >= ct_contemporary_max")
        if self.ml_layered_min <= self.ml_minimal_max:
            raise ValueError("ml_layered_min must be > ml_minimal_max")
        return self

    @property
    def neutral(self) -> float:
        return (self.axis_min + self.axis_max) / 2


def settings_from_config(cfg: Dict[str, Any] | None) -> ProfileSettings:
    """Build settings from the `profile:` section of a validated config."""
    section = dict((cfg or {}).get("profile", {}) or {})
    return ProfileSettings.model_validate(section)
