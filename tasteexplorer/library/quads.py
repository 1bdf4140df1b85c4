from __future__ import annotations

"""Quad library: categories, quads and their four options.

Loads the static reference data from a YAML resource. Every option carries
an attribute tuple (axes + categorical tags); options without their own
attributes inherit the quad's baseline metadata.
"""

import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

from ..profile.constants import ALL_WORK, OPTIONS_PER_QUAD, STYLE_ORDER


def derive_style_code(ct: float) -> str:
    """Map a contemporary/traditional score onto the AS1..AS9 style scale."""
    pos = int(math.floor(float(ct) + 0.5))
    pos = max(1, min(len(STYLE_ORDER), pos))
    return STYLE_ORDER[pos - 1]


@dataclass(frozen=True)
class Attributes:
    ct: float
    ml: float
    wc: float
    region: str = ""
    materials: tuple[str, ...] = ()
    complexity: Optional[float] = None
    hominess: Optional[float] = None
    style_code: str = ""

    def axis(self, name: str) -> Optional[float]:
        value = getattr(self, name, None)
        return float(value) if isinstance(value, (int, float)) else None

    def merged(self, overrides: Mapping[str, Any]) -> "Attributes":
        """Return a copy with per-position overrides applied."""
        if not overrides:
            return self
        changes: Dict[str, Any] = {}
        for k in ("ct", "ml", "wc", "complexity", "hominess"):
            if k in overrides:
                changes[k] = float(overrides[k])
        if "region" in overrides:
            changes["region"] = str(overrides["region"])
        if "materials" in overrides:
            changes["materials"] = tuple(str(m) for m in overrides["materials"] or ())
        if "style_code" in overrides:
            changes["style_code"] = str(overrides["style_code"])
        elif "ct" in overrides:
            changes["style_code"] = derive_style_code(changes["ct"])
        return replace(self, **changes)

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "ct": self.ct,
            "ml": self.ml,
            "wc": self.wc,
            "region": self.region,
            "materials": list(self.materials),
            "styleCode": self.style_code,
        }
        if self.complexity is not None:
            data["complexity"] = self.complexity
        if self.hominess is not None:
            data["hominess"] = self.hominess
        return data

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Attributes":
        ct = float(data["ct"])
        complexity = data.get("complexity")
        hominess = data.get("hominess")
        return cls(
            ct=ct,
            ml=float(data["ml"]),
            wc=float(data["wc"]),
            region=str(data.get("region", "")),
            materials=tuple(str(m) for m in data.get("materials", []) or ()),
            complexity=float(complexity) if complexity is not None else None,
            hominess=float(hominess) if hominess is not None else None,
            style_code=str(data.get("style_code") or data.get("styleCode") or derive_style_code(ct)),
        )


@dataclass(frozen=True)
class Category:
    id: str
    code: str
    name: str
    description: str = ""
    order: int = 0


@dataclass(frozen=True)
class Option:
    quad_id: str
    index: int
    attributes: Attributes


@dataclass(frozen=True)
class Quad:
    quad_id: str
    category: str
    title: str
    subtitle: str
    metadata: Attributes
    options: tuple[Option, ...]
    enabled: bool = True

    def option(self, index: int) -> Optional[Option]:
        if 0 <= index < len(self.options):
            return self.options[index]
        return None


def _build_quad(quad_id: str, raw: Mapping[str, Any]) -> Quad:
    base = Attributes.from_json(raw["metadata"])
    overrides = list(raw.get("options") or [])
    if len(overrides) > OPTIONS_PER_QUAD:
        raise ValueError(f"Quad {quad_id} declares more than {OPTIONS_PER_QUAD} options")
    options = []
    for i in range(OPTIONS_PER_QUAD):
        ov = overrides[i] if i < len(overrides) else None
        options.append(Option(quad_id=quad_id, index=i, attributes=base.merged(ov or {})))
    return Quad(
        quad_id=quad_id,
        category=str(raw["category"]),
        title=str(raw.get("title", "")),
        subtitle=str(raw.get("subtitle", "")),
        metadata=base,
        options=tuple(options),
        enabled=bool(raw.get("enabled", True)),
    )


@dataclass
class QuadLibrary:
    categories: Dict[str, Category] = field(default_factory=dict)
    quads: Dict[str, Quad] = field(default_factory=dict)

    @property
    def category_order(self) -> List[str]:
        return [c.id for c in sorted(self.categories.values(), key=lambda c: c.order)]

    def ordered_categories(self) -> List[Category]:
        return [self.categories[cid] for cid in self.category_order]

    def get(self, quad_id: str) -> Optional[Quad]:
        return self.quads.get(quad_id)

    def resolve(self, quad_id: str, index: int) -> Optional[Attributes]:
        """Attributes for an option; ALL_WORK resolves to the quad baseline."""
        quad = self.quads.get(quad_id)
        if quad is None:
            return None
        if index == ALL_WORK:
            return quad.metadata
        opt = quad.option(index)
        return opt.attributes if opt is not None else None

    def quads_by_category(self, category_id: str) -> List[Quad]:
        return sorted((q for q in self.quads.values() if q.category == category_id), key=lambda q: q.quad_id)

    def enabled_for_category(self, category_id: str, visibility: Optional[Mapping[str, bool]] = None) -> List[Quad]:
        if visibility is None:
            return [q for q in self.quads_by_category(category_id) if q.enabled]
        return [q for q in self.quads_by_category(category_id) if visibility.get(q.quad_id, q.enabled) is not False]

    def enabled_quads(self, visibility: Optional[Mapping[str, bool]] = None) -> List[Quad]:
        out: List[Quad] = []
        for cid in self.category_order:
            out.extend(self.enabled_for_category(cid, visibility))
        return out

    def category_for_quad(self, quad_id: str) -> Optional[Category]:
        quad = self.quads.get(quad_id)
        return self.categories.get(quad.category) if quad else None

    def stats(self) -> Dict[str, Any]:
        by_category = []
        for cat in self.ordered_categories():
            n = len(self.quads_by_category(cat.id))
            by_category.append({"category": cat.id, "quadCount": n, "imageCount": n * OPTIONS_PER_QUAD})
        return {
            "totalCategories": len(self.categories),
            "totalQuads": len(self.quads),
            "totalImages": len(self.quads) * OPTIONS_PER_QUAD,
            "byCategory": by_category,
        }

    def search(self, terms: Iterable[str]) -> List[Quad]:
        """Quads whose title, subtitle, materials or region mention any term."""
        lowered = [t.lower() for t in terms if t]
        hits = []
        for q in self.quads.values():
            m = q.metadata
            text = f"{q.title} {q.subtitle} {' '.join(m.materials)} {m.region}".lower()
            if any(t in text for t in lowered):
                hits.append(q)
        return hits

    def by_style(
        self,
        *,
        ct_min: Optional[float] = None,
        ct_max: Optional[float] = None,
        wc_min: Optional[float] = None,
        wc_max: Optional[float] = None,
        region: Optional[str] = None,
        material: Optional[str] = None,
    ) -> List[Quad]:
        out = []
        for q in self.quads.values():
            m = q.metadata
            if ct_min is not None and m.ct < ct_min:
                continue
            if ct_max is not None and m.ct > ct_max:
                continue
            if wc_min is not None and m.wc < wc_min:
                continue
            if wc_max is not None and m.wc > wc_max:
                continue
            if region and m.region != region:
                continue
            if material and material not in m.materials:
                continue
            out.append(q)
        return out


def library_from_dict(data: Mapping[str, Any]) -> QuadLibrary:
    categories: Dict[str, Category] = {}
    for i, (cid, c) in enumerate((data.get("categories") or {}).items()):
        c = c or {}
        categories[cid] = Category(
            id=cid,
            code=str(c.get("code", cid[:2].upper())),
            name=str(c.get("name", cid.replace("_", " ").title())),
            description=str(c.get("description", "")),
            order=int(c.get("order", i + 1)),
        )
    quads: Dict[str, Quad] = {}
    for qid, raw in (data.get("quads") or {}).items():
        quad = _build_quad(str(qid), raw)
        if quad.category not in categories:
            raise ValueError(f"Quad {qid} references unknown category '{quad.category}'")
        quads[quad.quad_id] = quad
    return QuadLibrary(categories=categories, quads=quads)


def _default_library_path() -> Path:
    return Path(__file__).resolve().parents[1] / "resources" / "quads.yml"


def load_library(path: str | Path | None = None) -> QuadLibrary:
    p = Path(path) if path else _default_library_path()
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return library_from_dict(data)


def image_url(base_url: str, quad_id: str, index: int) -> str:
    return f"{base_url.rstrip('/')}/{quad_id}_{index}.png"
