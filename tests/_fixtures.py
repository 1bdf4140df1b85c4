"""Shared test fixtures: a small quad library and selection builders."""

from __future__ import annotations

import itertools
from typing import List, Optional

from tasteexplorer.library import library_from_dict
from tasteexplorer.session.models import Selection

LIBRARY_DATA = {
    "categories": {
        "living": {"code": "LV", "name": "Living", "order": 1},
        "kitchens": {"code": "KT", "name": "Kitchens", "order": 2},
        "studio": {"code": "ST", "name": "Studio", "order": 3},
    },
    "quads": {
        "L-1": {
            "category": "living",
            "title": "Contemporary Warm",
            "subtitle": "Great Room",
            "metadata": {"ct": 2, "ml": 3, "wc": 3, "region": "california_modern", "materials": ["oak", "brass"], "complexity": 3},
        },
        "L-2": {
            "category": "living",
            "title": "Traditional",
            "subtitle": "Salon",
            "metadata": {"ct": 8, "ml": 7, "wc": 4, "region": "english_traditional", "materials": ["oak", "brass", "marble"]},
        },
        "L-3": {
            "category": "living",
            "title": "Transitional",
            "subtitle": "Family Room",
            "metadata": {"ct": 5, "ml": 5, "wc": 6, "region": "french_country", "materials": ["marble", "linen"]},
        },
        "K-1": {
            "category": "kitchens",
            "title": "Mixed",
            "subtitle": "Chef Kitchen",
            "metadata": {"ct": 3, "ml": 2, "wc": 7, "region": "scandinavian", "materials": ["oak"]},
            "options": [{}, {"ct": 9, "wc": 2, "materials": ["mahogany"]}, {"ct": 1}, {"ml": 9}],
        },
        "K-2": {
            "category": "kitchens",
            "title": "Rustic",
            "subtitle": "Farmhouse",
            "metadata": {"ct": 6, "ml": 6, "wc": 5, "region": "tuscan", "materials": ["terracotta"]},
        },
    },
}


def make_library():
    return library_from_dict(LIBRARY_DATA)


def fake_clock(start: int = 1_000, step: int = 250):
    counter = itertools.count(start, step)
    return lambda: next(counter)


def pick(quad_id: str, index: int, ranking: Optional[List[int]] = None) -> Selection:
    return Selection(quad_id=quad_id, selected_index=index, timestamp=0, ranking=ranking)


def rank(quad_id: str, order: List[int]) -> Selection:
    return Selection(quad_id=quad_id, selected_index=order[0], timestamp=0, ranking=order)
