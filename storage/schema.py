from __future__ import annotations

"""Schema constants and Pydantic models for Parquet-backed selection history."""

from datetime import datetime, timezone
from typing import List, Literal, Optional

import pandas as pd
from pandas.api.types import CategoricalDtype
from pydantic import BaseModel, Field, field_validator, model_validator

# --- Constants ---

KINDS = {"pick", "ranked", "all_work", "none_appeal"}
SENTINEL_KIND = {-1: "all_work", -2: "none_appeal"}


def _cat_dtype(categories: set[str]) -> CategoricalDtype:
    return CategoricalDtype(categories=sorted(categories), ordered=False)


DTYPES = {
    "session_id": "string",
    # timezone-aware UTC timestamps
    "session_start": pd.DatetimeTZDtype(tz="UTC"),
    "client_id": "string",
    "category": "string",
    "quad_id": "string",
    "position": "UInt16",
    "selected_index": "Int8",
    "kind": _cat_dtype(KINDS),
    "ranking": "string",
    "time_spent_ms": "UInt32",
}

META_DTYPES = {
    "session_id": "string",
    "session_start": pd.DatetimeTZDtype(tz="UTC"),
    "completed_at": pd.DatetimeTZDtype(tz="UTC"),
    "client_id": "string",
    "app_version": "string",
    "style_label": "string",
    "total_selections": "UInt16",
}


def _utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return v
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


# --- Pydantic models ---

class SelectionRow(BaseModel):
    session_id: str
    session_start: datetime
    client_id: Optional[str] = None
    category: str
    quad_id: str
    position: int = Field(ge=0, le=65535)
    selected_index: int = Field(ge=-2, le=3)
    kind: Literal["pick", "ranked", "all_work", "none_appeal"]
    ranking: Optional[str] = None  # "2,0,1,3"
    time_spent_ms: Optional[int] = Field(default=None, ge=0, le=4294967295)

    @field_validator("session_start")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return _utc(v)

    @model_validator(mode="after")
    def _kind_matches_index(self) -> "SelectionRow":
        expected = SENTINEL_KIND.get(self.selected_index)
        if expected is not None and self.kind != expected:
            raise ValueError(f"selected_index {self.selected_index} requires kind '{expected}'")
        if expected is None and self.kind not in ("pick", "ranked"):
            raise ValueError(f"kind '{self.kind}' requires a sentinel selected_index")
        if (self.kind == "ranked") != (self.ranking is not None):
            raise ValueError("ranking is set exactly when kind is 'ranked'")
        return self

    @staticmethod
    def format_ranking(order: Optional[List[int]]) -> Optional[str]:
        return ",".join(str(i) for i in order) if order is not None else None


class SessionMeta(BaseModel):
    session_id: str
    session_start: datetime
    completed_at: Optional[datetime] = None
    client_id: Optional[str] = None
    app_version: Optional[str] = None
    style_label: Optional[str] = None
    total_selections: int = Field(default=0, ge=0, le=65535)

    @field_validator("session_start", "completed_at")
    @classmethod
    def _ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _utc(v)
