from __future__ import annotations

"""Weighted axis aggregation.

Selections are first resolved into weighted samples (one per contributing
option), then every axis is a weighted mean over those samples:

    mean(axis) = sum(value * weight) / sum(weight)

- "None of these appeal" contributes nothing.
- "All of these work" contributes the quad baseline with the pick weight.
- A ranking contributes all four options, weighted by rank.
- A single pick contributes the chosen option with the pick weight.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from ..app.explain import trace as xtrace
from .settings import ProfileSettings

if TYPE_CHECKING:
    from ..library.quads import Attributes, QuadLibrary
    from ..session.models import Selection


@dataclass(frozen=True)
class Sample:
    category: str
    quad_id: str
    option_index: int
    attributes: "Attributes"
    weight: float
    rank: Optional[int] = None
    kind: str = "pick"  # pick | ranked | all_work

    @property
    def preferred(self) -> bool:
        """Whether this sample stands for the user's choice in its quad."""
        return self.rank is None or self.rank == 1


def collect_samples(
    selections: Iterable[Tuple[str, "Selection"]],
    library: "QuadLibrary",
    settings: Optional[ProfileSettings] = None,
) -> List[Sample]:
    """Resolve (category, selection) pairs into weighted samples."""
    settings = settings or ProfileSettings()
    out: List[Sample] = []
    for category, sel in selections:
        if sel.is_none_appeal:
            continue
        quad = library.get(sel.quad_id)
        if quad is None:
            xtrace("selection_skipped", {"quad": sel.quad_id, "reason": "unknown_quad"})
            continue
        if sel.is_all_work:
            if settings.count_all_work:
                out.append(Sample(category, sel.quad_id, sel.selected_index, quad.metadata, settings.pick_weight, kind="all_work"))
            continue
        if sel.is_ranked:
            for idx, rank in sel.ranked_options():
                opt = quad.option(idx)
                weight = settings.rank_weights.get(rank)
                if opt is None or weight is None:
                    xtrace("selection_skipped", {"quad": sel.quad_id, "option": idx, "reason": "unresolvable_rank"})
                    continue
                out.append(Sample(category, sel.quad_id, idx, opt.attributes, weight, rank=rank, kind="ranked"))
            continue
        opt = quad.option(sel.selected_index)
        if opt is None:
            xtrace("selection_skipped", {"quad": sel.quad_id, "option": sel.selected_index, "reason": "unknown_option"})
            continue
        out.append(Sample(category, sel.quad_id, opt.index, opt.attributes, settings.pick_weight))
    return out


def axis_series(samples: Iterable[Sample], axis: str) -> Tuple[List[float], List[float]]:
    """Values and weights of the samples that carry a score on `axis`."""
    values: List[float] = []
    weights: List[float] = []
    for s in samples:
        v = s.attributes.axis(axis)
        if v is None or s.weight <= 0:
            continue
        values.append(v)
        weights.append(s.weight)
    return values, weights


def weighted_mean(values: List[float], weights: List[float], default: float) -> float:
    total_weight = sum(weights)
    if total_weight <= 0:
        return default
    return sum(v * w for v, w in zip(values, weights)) / total_weight


def weighted_axis_mean(samples: Iterable[Sample], axis: str, settings: Optional[ProfileSettings] = None) -> float:
    """Weighted mean of one axis; the axis midpoint when nothing qualifies."""
    settings = settings or ProfileSettings()
    values, weights = axis_series(samples, axis)
    return weighted_mean(values, weights, settings.neutral)


def weighted_contribution(value: float, rank: int, settings: Optional[ProfileSettings] = None) -> float:
    """How much one ranked option adds to an axis numerator."""
    settings = settings or ProfileSettings()
    return float(value) * settings.rank_weights[rank]
