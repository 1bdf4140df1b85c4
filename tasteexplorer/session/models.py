from __future__ import annotations

"""Session records: selections, per-category progress and the session root.

JSON keys follow the web client's field names so exported sessions stay
interchangeable with it.
"""

import random
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..profile.constants import ALL_WORK, NONE_APPEAL, OPTIONS_PER_QUAD


def now_ms() -> int:
    return int(time.time() * 1000)


def new_session_id(ts_ms: Optional[int] = None) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"session_{ts_ms if ts_ms is not None else now_ms()}_{suffix}"


@dataclass
class Selection:
    quad_id: str
    selected_index: int
    timestamp: int
    time_spent: Optional[int] = None
    ranking: Optional[List[int]] = None  # option indices, 1st..4th

    def __post_init__(self) -> None:
        if self.ranking is not None:
            order = [int(i) for i in self.ranking]
            if sorted(order) != list(range(OPTIONS_PER_QUAD)):
                raise ValueError(f"ranking must order options 0..3 exactly once: {self.ranking}")
            self.ranking = order
            self.selected_index = order[0]
        elif self.selected_index not in (ALL_WORK, NONE_APPEAL) and not 0 <= self.selected_index < OPTIONS_PER_QUAD:
            raise ValueError(f"selected_index out of range: {self.selected_index}")

    @property
    def is_none_appeal(self) -> bool:
        return self.ranking is None and self.selected_index == NONE_APPEAL

    @property
    def is_all_work(self) -> bool:
        return self.ranking is None and self.selected_index == ALL_WORK

    @property
    def is_ranked(self) -> bool:
        return self.ranking is not None

    def ranked_options(self) -> List[Tuple[int, int]]:
        """(option index, rank) pairs; empty for unranked selections."""
        if self.ranking is None:
            return []
        return [(idx, pos + 1) for pos, idx in enumerate(self.ranking)]

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "quadId": self.quad_id,
            "selectedIndex": self.selected_index,
            "timestamp": self.timestamp,
        }
        if self.time_spent is not None:
            data["timeSpent"] = self.time_spent
        if self.ranking is not None:
            data["ranking"] = list(self.ranking)
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Selection":
        ranking = data.get("ranking")
        time_spent = data.get("timeSpent")
        return cls(
            quad_id=str(data["quadId"]),
            selected_index=int(data["selectedIndex"]),
            timestamp=int(data.get("timestamp", 0)),
            time_spent=int(time_spent) if time_spent is not None else None,
            ranking=[int(i) for i in ranking] if ranking is not None else None,
        )


@dataclass
class CategoryProgress:
    category_id: str
    total_quads: int
    completed_quads: int = 0
    selections: List[Selection] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return len(self.selections) >= self.total_quads

    def add(self, selection: Selection) -> None:
        if len(self.selections) >= self.total_quads:
            raise ValueError(f"Category '{self.category_id}' already has {self.total_quads} selections")
        self.selections.append(selection)
        self.completed_quads = len(self.selections)

    def to_json(self) -> Dict[str, Any]:
        return {
            "categoryId": self.category_id,
            "totalQuads": self.total_quads,
            "completedQuads": self.completed_quads,
            "selections": [s.to_json() for s in self.selections],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CategoryProgress":
        selections = [Selection.from_json(s) for s in data.get("selections", [])]
        total = int(data["totalQuads"])
        if len(selections) > total:
            raise ValueError(f"Category '{data.get('categoryId')}' holds more selections than quads")
        return cls(
            category_id=str(data["categoryId"]),
            total_quads=total,
            completed_quads=len(selections),
            selections=selections,
        )


@dataclass
class Session:
    session_id: str
    started_at: int
    last_updated_at: int
    progress: Dict[str, CategoryProgress] = field(default_factory=dict)
    client_id: Optional[str] = None
    completed_at: Optional[int] = None
    current_category: Optional[str] = None
    current_quad_index: int = 0

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    def iter_selections(self) -> Iterator[Tuple[str, Selection]]:
        for cid, prog in self.progress.items():
            for sel in prog.selections:
                yield cid, sel

    @property
    def total_selections(self) -> int:
        return sum(len(p.selections) for p in self.progress.values())

    @property
    def total_quads(self) -> int:
        return sum(p.total_quads for p in self.progress.values())

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "sessionId": self.session_id,
            "startedAt": self.started_at,
            "lastUpdatedAt": self.last_updated_at,
            "progress": {cid: p.to_json() for cid, p in self.progress.items()},
            "currentQuadIndex": self.current_quad_index,
        }
        if self.client_id is not None:
            data["clientId"] = self.client_id
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
        if self.current_category is not None:
            data["currentCategory"] = self.current_category
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Session":
        progress = {str(cid): CategoryProgress.from_json(p) for cid, p in dict(data["progress"]).items()}
        completed_at = data.get("completedAt")
        client_id = data.get("clientId")
        current_category = data.get("currentCategory")
        return cls(
            session_id=str(data["sessionId"]),
            started_at=int(data["startedAt"]),
            last_updated_at=int(data.get("lastUpdatedAt", data["startedAt"])),
            progress=progress,
            client_id=str(client_id) if client_id is not None else None,
            completed_at=int(completed_at) if completed_at is not None else None,
            current_category=str(current_category) if current_category is not None else None,
            current_quad_index=int(data.get("currentQuadIndex", 0) or 0),
        )
