from __future__ import annotations

"""Partner comparison: overall/category alignment and flagged style divergences."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from . import constants as C
from .derive import DerivedProfile
from .scale import round_half_up
from .settings import ProfileSettings

_COMPARED_AXES = ("ct", "ml", "wc")


def style_position(code: str) -> int:
    """1-based position on the AS1..AS9 scale; unknown codes sit mid-scale."""
    try:
        return C.STYLE_ORDER.index(code) + 1
    except ValueError:
        return 5


def style_gap(code_a: str, code_b: str) -> int:
    return abs(style_position(code_a) - style_position(code_b))


def alignment_percent(differences: List[float]) -> int:
    """100 for identical five-point values, 0 for opposite ends."""
    if not differences:
        return 100
    avg = sum(differences) / len(differences)
    return int(max(0.0, round_half_up(100 - (avg / C.FIVE_POINT_MAX * 100))))


@dataclass(frozen=True)
class Divergence:
    category_id: str
    category_name: str
    style_p: str
    style_s: str
    gap: int
    significant: bool

    @property
    def severity(self) -> str:
        return "significant" if self.significant else "notable"

    @property
    def prompt(self) -> str:
        if self.significant:
            return (
                f"Significant divergence ({self.gap} positions apart). "
                "This warrants detailed discussion about design direction for this space."
            )
        return f"Notable difference ({self.gap} positions apart). Consider discussing preferences to find common ground."

    def to_json(self) -> Dict[str, Any]:
        return {
            "category": self.category_id,
            "categoryName": self.category_name,
            "styleP": self.style_p,
            "labelP": C.STYLE_LABELS.get(self.style_p, "Unknown"),
            "styleS": self.style_s,
            "labelS": C.STYLE_LABELS.get(self.style_s, "Unknown"),
            "gap": self.gap,
            "severity": self.severity,
            "prompt": self.prompt,
        }


@dataclass(frozen=True)
class AlignmentReport:
    overall_alignment: int
    axis_differences: Dict[str, float]
    category_alignment: Dict[str, int] = field(default_factory=dict)
    divergences: List[Divergence] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "overallAlignment": self.overall_alignment,
            "axisDifferences": dict(self.axis_differences),
            "categoryAlignment": dict(self.category_alignment),
            "significantDifferences": [d.to_json() for d in self.divergences],
        }


def compare_profiles(
    profile_p: DerivedProfile,
    profile_s: DerivedProfile,
    settings: Optional[ProfileSettings] = None,
    category_names: Optional[Mapping[str, str]] = None,
) -> AlignmentReport:
    """Compare a principal's and a secondary's profiles."""
    s = settings or ProfileSettings()
    names = category_names or {}

    diffs = {a: round_half_up(abs(profile_p.five_point(a) - profile_s.five_point(a)), 1) for a in _COMPARED_AXES}
    overall = alignment_percent(list(diffs.values()))

    category_alignment: Dict[str, int] = {}
    divergences: List[Divergence] = []
    for cid, mp in profile_p.categories.items():
        ms = profile_s.categories.get(cid)
        if ms is None:
            continue
        category_alignment[cid] = alignment_percent([abs(mp.ct - ms.ct), abs(mp.ml - ms.ml), abs(mp.wc - ms.wc)])
        gap = style_gap(mp.dominant_style, ms.dominant_style)
        if gap > s.divergence_flag_gap:
            divergences.append(
                Divergence(
                    category_id=cid,
                    category_name=names.get(cid, cid.replace("_", " ").title()),
                    style_p=mp.dominant_style,
                    style_s=ms.dominant_style,
                    gap=gap,
                    significant=gap >= s.divergence_significant_gap,
                )
            )
    return AlignmentReport(
        overall_alignment=overall,
        axis_differences=diffs,
        category_alignment=category_alignment,
        divergences=divergences,
    )
