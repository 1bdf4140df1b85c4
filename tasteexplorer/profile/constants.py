from __future__ import annotations

"""Weights, ranges and thresholds for profile derivation.

Every number the derivation uses lives here; `ProfileSettings` takes its
defaults from these names and the `profile:` config section may override them.
"""

from typing import Dict

# Sentinel selection indices
ALL_WORK = -1  # "All of these work for me"
NONE_APPEAL = -2  # "None of these appeal to me"

OPTIONS_PER_QUAD = 4

# Native axis scale shared by ct / ml / wc / complexity
AXIS_MIN = 1.0
AXIS_MAX = 9.0
NEUTRAL_VALUE = (AXIS_MIN + AXIS_MAX) / 2

AXES: Dict[str, str] = {
    "ct": "Style Era",
    "ml": "Material Complexity",
    "wc": "Color Temperature",
}

AXIS_POLES: Dict[str, tuple[str, str]] = {
    "ct": ("Contemporary", "Traditional"),
    "ml": ("Minimal", "Layered"),
    "wc": ("Warm", "Cool"),
}

# Ranking weights (1st .. 4th); a single pick weighs PICK_WEIGHT
RANK_WEIGHTS: Dict[int, float] = {1: 4.0, 2: 2.5, 3: 1.0, 4: 0.25}
PICK_WEIGHT = 1.0

# Style label thresholds
CT_CONTEMPORARY_MAX = 3.0
CT_TRANSITIONAL_MAX = 6.0
WC_WARM_MAX = 4.0
ML_MINIMAL_MAX = 3.0
ML_LAYERED_MIN = 7.0

# Style tag thresholds
TAG_LOW = 3.0
TAG_HIGH = 7.0

# Consistency scoring
CONFIDENCE_NORMALIZER = 5.0
CONFIDENCE_MIN_SAMPLES = 5
SPARSE_CONFIDENCE = 0.5

# Display tables
TOP_REGIONS = 5
TOP_MATERIALS = 8

# Material affinity tiers (mean rank weight)
AFFINITY_PRIMARY_MIN = 2.5
AFFINITY_SECONDARY_MIN = 1.5
AFFINITY_AVERSION_MAX = 1.0

# Five-point display scale
FIVE_POINT_MAX = 5.0
FIVE_POINT_NEUTRAL = 2.5

# Partner divergence on the AS1..AS9 style scale
DIVERGENCE_FLAG_GAP = 2  # flagged when gap > this
DIVERGENCE_SIGNIFICANT_GAP = 4  # significant when gap >= this

STYLE_LABELS: Dict[str, str] = {
    "AS1": "Avant-Contemporary",
    "AS2": "Architectural Modern",
    "AS3": "Curated Minimalism",
    "AS4": "Nordic Contemporary",
    "AS5": "Mid-Century Refined",
    "AS6": "Modern Classic",
    "AS7": "Classical Contemporary",
    "AS8": "Formal Classical",
    "AS9": "Heritage Estate",
}
STYLE_ORDER = list(STYLE_LABELS.keys())
FALLBACK_STYLE = "AS6"

METHODOLOGY = "quad_selection_v2"
