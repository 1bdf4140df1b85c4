from .settings import ProfileSettings, settings_from_config
from .aggregate import Sample, collect_samples, weighted_axis_mean, weighted_contribution
from .classify import classify_style, style_tags
from .confidence import ComplexityProfile, complexity_profile, consistency, weighted_std
from .preferences import dominant_style, frequency_tables, material_affinities, top_n
from .scale import round_half_up, to_five_point
from .derive import AxisScore, CategoryMetrics, DerivedProfile, derive_from_selections, derive_profile
from .compare import AlignmentReport, Divergence, alignment_percent, compare_profiles, style_gap, style_position

__all__ = [
    "ProfileSettings",
    "settings_from_config",
    "Sample",
    "collect_samples",
    "weighted_axis_mean",
    "weighted_contribution",
    "classify_style",
    "style_tags",
    "ComplexityProfile",
    "complexity_profile",
    "consistency",
    "weighted_std",
    "dominant_style",
    "frequency_tables",
    "material_affinities",
    "top_n",
    "round_half_up",
    "to_five_point",
    "AxisScore",
    "CategoryMetrics",
    "DerivedProfile",
    "derive_from_selections",
    "derive_profile",
    "AlignmentReport",
    "Divergence",
    "alignment_percent",
    "compare_profiles",
    "style_gap",
    "style_position",
]
