from __future__ import annotations

"""Region / material frequency tables and ranked material affinities."""

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from . import constants as C
from .aggregate import Sample
from .scale import round_half_up


def frequency_tables(samples: Iterable[Sample]) -> Tuple[Dict[str, int], Dict[str, int]]:
    """Count regions and materials of the preferred option of each quad.

    Returned dicts keep first-encountered order, which `top_n` relies on
    for tie-breaking.
    """
    regions: Dict[str, int] = {}
    materials: Dict[str, int] = {}
    for s in samples:
        if not s.preferred:
            continue
        a = s.attributes
        if a.region:
            regions[a.region] = regions.get(a.region, 0) + 1
        for m in a.materials:
            materials[m] = materials.get(m, 0) + 1
    return regions, materials


def top_n(counts: Mapping[str, int], n: int) -> List[Tuple[str, int]]:
    """Highest counts first; equal counts stay in insertion order."""
    return sorted(counts.items(), key=lambda kv: -kv[1])[:n]


def material_affinities(samples: Iterable[Sample]) -> Dict[str, List[Dict[str, object]]]:
    """Mean rank weight per material across ranked options, split into tiers.

    Only ranked samples are considered; single picks carry no signal about
    the options that were passed over.
    """
    totals: Dict[str, List[float]] = {}
    for s in samples:
        if s.rank is None:
            continue
        for m in s.attributes.materials:
            acc = totals.setdefault(m, [0.0, 0])
            acc[0] += s.weight
            acc[1] += 1
    scored = [
        {"material": m, "score": round_half_up(total / count, 2), "frequency": int(count)}
        for m, (total, count) in totals.items()
    ]
    scored.sort(key=lambda x: -float(x["score"]))
    return {
        "primary": [x for x in scored if float(x["score"]) > C.AFFINITY_PRIMARY_MIN][:5],
        "secondary": [x for x in scored if C.AFFINITY_SECONDARY_MIN <= float(x["score"]) <= C.AFFINITY_PRIMARY_MIN][:5],
        "aversions": [x for x in scored if float(x["score"]) < C.AFFINITY_AVERSION_MAX][:3],
    }


def dominant_style(samples: Iterable[Sample], fallback: Optional[str] = C.FALLBACK_STYLE) -> Optional[str]:
    """Most frequent style code among preferred options (first seen wins ties)."""
    counts: Dict[str, int] = {}
    for s in samples:
        if not s.preferred or s.kind == "all_work":
            continue
        code = s.attributes.style_code
        if code:
            counts[code] = counts.get(code, 0) + 1
    if not counts:
        return fallback
    return top_n(counts, 1)[0][0]
