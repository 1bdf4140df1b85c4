from __future__ import annotations

"""Consistency (confidence) scoring from the spread of contributing values."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .aggregate import Sample, weighted_mean
from .scale import round_half_up
from .settings import ProfileSettings


def weighted_std(values: Sequence[float], weights: Optional[Sequence[float]] = None) -> float:
    """Population standard deviation around the (weighted) mean."""
    if len(values) == 0:
        return 0.0
    v = np.asarray(values, dtype=float)
    w = np.ones_like(v) if weights is None else np.asarray(weights, dtype=float)
    if w.sum() <= 0:
        return 0.0
    mean = float(np.average(v, weights=w))
    return float(np.sqrt(np.average((v - mean) ** 2, weights=w)))


def consistency(
    values: Sequence[float],
    weights: Optional[Sequence[float]] = None,
    settings: Optional[ProfileSettings] = None,
) -> float:
    """1 for perfectly tight preferences, falling towards 0 as they spread.

    Too few samples report the sparse-data default instead of a score.
    """
    s = settings or ProfileSettings()
    if len(values) < s.confidence_min_samples:
        return s.sparse_confidence
    return max(0.0, 1.0 - weighted_std(values, weights) / s.confidence_normalizer)


@dataclass(frozen=True)
class ComplexityProfile:
    optimal: float
    range_min: float
    range_max: float
    consistency: float

    def to_json(self) -> dict:
        return {
            "optimal": self.optimal,
            "range": {"min": self.range_min, "max": self.range_max},
            "consistency": self.consistency,
        }


def complexity_profile(samples: Iterable[Sample], settings: Optional[ProfileSettings] = None) -> ComplexityProfile:
    """Preferred visual complexity and how tightly it is held.

    The optimum is the weighted mean over every contributing option. The
    spread only looks at the options the user actually favoured (single
    picks and the top two of a ranking), measured around that optimum.
    Options without a complexity score count as the axis midpoint.
    """
    s = settings or ProfileSettings()
    values: List[float] = []
    weights: List[float] = []
    favoured: List[float] = []
    for sample in samples:
        c = sample.attributes.complexity
        value = float(c) if c is not None else s.neutral
        values.append(value)
        weights.append(sample.weight)
        if sample.rank is None or sample.rank <= 2:
            favoured.append(value)
    optimal = weighted_mean(values, weights, s.neutral)
    spread = float(np.sqrt(np.mean((np.asarray(favoured) - optimal) ** 2))) if favoured else 0.0
    if len(favoured) < s.confidence_min_samples:
        held = s.sparse_confidence
    else:
        held = max(0.0, 1.0 - spread / s.confidence_normalizer)
    return ComplexityProfile(
        optimal=round_half_up(optimal, 1),
        range_min=max(s.axis_min, round_half_up(optimal - spread, 1)),
        range_max=min(s.axis_max, round_half_up(optimal + spread, 1)),
        consistency=held,
    )
