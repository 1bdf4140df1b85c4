from __future__ import annotations

"""Derived profile assembly.

`derive_profile` is a pure projection of a session: the same selections
always produce the same profile, so callers recompute instead of storing it.
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple

from ..app.explain import trace as xtrace
from . import constants as C
from .aggregate import Sample, axis_series, collect_samples, weighted_mean
from .classify import classify_style, style_tags
from .confidence import ComplexityProfile, complexity_profile, consistency
from .preferences import dominant_style, frequency_tables, material_affinities, top_n
from .scale import to_five_point
from .settings import ProfileSettings

if TYPE_CHECKING:
    from ..library.quads import QuadLibrary
    from ..session.models import Selection, Session


@dataclass(frozen=True)
class AxisScore:
    key: str
    label: str
    value: float
    confidence: float
    samples: int

    def to_json(self) -> Dict[str, Any]:
        return {"value": self.value, "confidence": self.confidence, "label": self.label, "samples": self.samples}


@dataclass(frozen=True)
class CategoryMetrics:
    category_id: str
    ct: float
    ml: float
    wc: float
    dominant_style: str
    selections: int
    skipped: int

    @property
    def dominant_label(self) -> str:
        return C.STYLE_LABELS.get(self.dominant_style, "Unknown")

    def to_json(self) -> Dict[str, Any]:
        return {
            "ct": self.ct,
            "ml": self.ml,
            "wc": self.wc,
            "dominantStyle": self.dominant_style,
            "dominantLabel": self.dominant_label,
            "selections": self.selections,
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class DerivedProfile:
    axes: Dict[str, AxisScore]
    style_label: str
    style_tags: List[str]
    region_preferences: Dict[str, int]
    material_preferences: Dict[str, int]
    top_regions: List[Tuple[str, int]]
    top_materials: List[Tuple[str, int]]
    material_affinities: Dict[str, List[Dict[str, Any]]]
    complexity: ComplexityProfile
    categories: Dict[str, CategoryMetrics] = field(default_factory=dict)
    sample_size: int = 0
    total_selections: int = 0
    methodology: str = C.METHODOLOGY
    axis_min: float = C.AXIS_MIN
    axis_max: float = C.AXIS_MAX

    @property
    def avg_ct(self) -> float:
        return self.axes["ct"].value

    @property
    def avg_ml(self) -> float:
        return self.axes["ml"].value

    @property
    def avg_wc(self) -> float:
        return self.axes["wc"].value

    def five_point(self, axis: str) -> float:
        return to_five_point(self.axes[axis].value, self.axis_min, self.axis_max)

    def to_metrics_json(self) -> Dict[str, Any]:
        """Profile in the web client's `metrics` shape plus five-point fields."""
        return {
            "avgCT": self.avg_ct,
            "avgML": self.avg_ml,
            "avgWC": self.avg_wc,
            "regionPreferences": dict(self.region_preferences),
            "materialPreferences": dict(self.material_preferences),
            "styleLabel": self.style_label,
            "ctScale5": self.five_point("ct"),
            "mlScale5": self.five_point("ml"),
            "wcScale5": self.five_point("wc"),
            "confidence": {k: a.confidence for k, a in self.axes.items()},
            "styleAxes": {k: a.to_json() for k, a in self.axes.items()},
            "styleTags": list(self.style_tags),
            "topRegions": [[k, v] for k, v in self.top_regions],
            "topMaterials": [[k, v] for k, v in self.top_materials],
            "materialAffinities": self.material_affinities,
            "complexity": self.complexity.to_json(),
            "categoryMetrics": {cid: m.to_json() for cid, m in self.categories.items()},
            "sampleSize": self.sample_size,
            "totalSelections": self.total_selections,
            "methodology": self.methodology,
        }


def _category_metrics(category_id: str, samples: List[Sample], selections: List["Selection"], settings: ProfileSettings) -> CategoryMetrics:
    def five(axis: str) -> float:
        values, weights = axis_series(samples, axis)
        if not values:
            return C.FIVE_POINT_NEUTRAL
        return to_five_point(weighted_mean(values, weights, settings.neutral), settings.axis_min, settings.axis_max)

    return CategoryMetrics(
        category_id=category_id,
        ct=five("ct"),
        ml=five("ml"),
        wc=five("wc"),
        dominant_style=dominant_style(samples) or C.FALLBACK_STYLE,
        selections=len(selections),
        skipped=sum(1 for s in selections if s.is_none_appeal),
    )


def derive_from_selections(
    selections: Iterable[Tuple[str, "Selection"]],
    library: "QuadLibrary",
    settings: Optional[ProfileSettings] = None,
) -> DerivedProfile:
    settings = settings or ProfileSettings()
    pairs = list(selections)
    samples = collect_samples(pairs, library, settings)

    axes: Dict[str, AxisScore] = {}
    for key, label in C.AXES.items():
        values, weights = axis_series(samples, key)
        axes[key] = AxisScore(
            key=key,
            label=label,
            value=weighted_mean(values, weights, settings.neutral),
            confidence=consistency(values, weights, settings),
            samples=len(values),
        )

    regions, materials = frequency_tables(samples)

    by_category: Dict[str, List[Sample]] = {}
    sels_by_category: Dict[str, List["Selection"]] = {}
    for cid, sel in pairs:
        sels_by_category.setdefault(cid, []).append(sel)
        by_category.setdefault(cid, [])
    for s in samples:
        by_category.setdefault(s.category, []).append(s)
    categories = {
        cid: _category_metrics(cid, by_category[cid], sels_by_category.get(cid, []), settings) for cid in by_category
    }

    ct, ml, wc = axes["ct"].value, axes["ml"].value, axes["wc"].value
    return DerivedProfile(
        axes=axes,
        style_label=classify_style(ct, wc, ml, settings),
        style_tags=style_tags(ct, wc, ml, settings),
        region_preferences=regions,
        material_preferences=materials,
        top_regions=top_n(regions, settings.top_regions),
        top_materials=top_n(materials, settings.top_materials),
        material_affinities=material_affinities(samples),
        complexity=complexity_profile(samples, settings),
        categories=categories,
        sample_size=sum(1 for s in samples if s.preferred),
        total_selections=len(pairs),
        axis_min=settings.axis_min,
        axis_max=settings.axis_max,
    )


def derive_profile(session: "Session", library: "QuadLibrary", settings: Optional[ProfileSettings] = None) -> DerivedProfile:
    """Derive the full profile from every selection in the session."""
    profile = derive_from_selections(session.iter_selections(), library, settings)
    # Categories with no answers yet still get a neutral card, in session order
    categories: Dict[str, CategoryMetrics] = {}
    for cid in session.progress:
        categories[cid] = profile.categories.get(cid) or CategoryMetrics(
            category_id=cid,
            ct=C.FIVE_POINT_NEUTRAL,
            ml=C.FIVE_POINT_NEUTRAL,
            wc=C.FIVE_POINT_NEUTRAL,
            dominant_style=C.FALLBACK_STYLE,
            selections=0,
            skipped=0,
        )
    profile = replace(profile, categories=categories)
    xtrace(
        "profile_derived",
        {"session": session.session_id, "label": profile.style_label, "samples": profile.sample_size},
    )
    return profile
