from __future__ import annotations

"""Per-quad enabled/disabled flags (admin toggles), persisted as JSON."""

import json
from pathlib import Path
from typing import Dict

from .quads import QuadLibrary


class QuadVisibility:
    """Enabled state per quad id, seeded from the library's `enabled` flags."""

    def __init__(self, library: QuadLibrary, path: str | Path | None = None) -> None:
        self.library = library
        self.path = Path(path) if path else None
        self.state: Dict[str, bool] = {qid: q.enabled for qid, q in library.quads.items()}
        if self.path is not None:
            self.state.update(_load(self.path))

    def is_enabled(self, quad_id: str) -> bool:
        return self.state.get(quad_id, False) is not False

    def toggle(self, quad_id: str) -> bool:
        if quad_id not in self.library.quads:
            raise KeyError(f"Unknown quad id: {quad_id}")
        self.state[quad_id] = not self.is_enabled(quad_id)
        self.save()
        return self.state[quad_id]

    def set_enabled(self, quad_id: str, enabled: bool) -> None:
        if quad_id not in self.library.quads:
            raise KeyError(f"Unknown quad id: {quad_id}")
        self.state[quad_id] = bool(enabled)
        self.save()

    def set_category(self, category_id: str, enabled: bool) -> int:
        """Enable or disable every quad in a category; returns how many changed."""
        if category_id not in self.library.categories:
            raise KeyError(f"Unknown category: {category_id}")
        changed = 0
        for q in self.library.quads_by_category(category_id):
            if self.is_enabled(q.quad_id) != bool(enabled):
                changed += 1
            self.state[q.quad_id] = bool(enabled)
        self.save()
        return changed

    def enabled_count(self, category_id: str | None = None) -> int:
        quads = self.library.quads_by_category(category_id) if category_id else self.library.quads.values()
        return sum(1 for q in quads if self.is_enabled(q.quad_id))

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(self.state, f, indent=2)


def _load(path: Path) -> Dict[str, bool]:
    # Corrupt or foreign files fall back to library defaults
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): bool(v) for k, v in data.items()}
