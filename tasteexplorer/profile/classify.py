from __future__ import annotations

"""Style label and tag classification from averaged axes."""

from typing import List, Optional

from .settings import ProfileSettings


def classify_style(ct: float, wc: float, ml: float, settings: Optional[ProfileSettings] = None) -> str:
    """Composite label such as "Contemporary Warm Minimal" or "Transitional".

    All bounds are inclusive: ct == ct_contemporary_max is still contemporary.
    """
    s = settings or ProfileSettings()
    if ct <= s.ct_contemporary_max:
        label = "Contemporary Warm" if wc <= s.wc_warm_max else "Contemporary Cool"
    elif ct <= s.ct_transitional_max:
        label = "Transitional"
    else:
        label = "Traditional Warm" if wc <= s.wc_warm_max else "Traditional Classic"

    if ml <= s.ml_minimal_max:
        label += " Minimal"
    elif ml >= s.ml_layered_min:
        label += " Layered"
    return label


def style_tags(ct: float, wc: float, ml: float, settings: Optional[ProfileSettings] = None) -> List[str]:
    s = settings or ProfileSettings()
    tags: List[str] = []
    if ct <= s.tag_low:
        tags.append("contemporary")
    elif ct >= s.tag_high:
        tags.append("traditional")
    else:
        tags.append("transitional")

    if ml <= s.tag_low:
        tags.append("minimal")
    elif ml >= s.tag_high:
        tags.append("layered")

    if wc <= s.tag_low:
        tags.append("warm_palette")
    elif wc >= s.tag_high:
        tags.append("cool_palette")
    return tags
