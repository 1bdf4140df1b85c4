from __future__ import annotations

"""Parquet-backed store for selection history using pandas + pyarrow.

Unit of data: (session × quad) selection rows, plus one metadata row per
session.
"""

from pathlib import Path

import pandas as pd
import pyarrow  # noqa: F401  # parquet engine

from .schema import DTYPES, META_DTYPES, SelectionRow, SessionMeta


DATA_FILE = "selections.parquet"
META_FILE = "sessions.parquet"


def _empty_df(dtypes: dict = DTYPES) -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in dtypes.items()})


def init_store(data_dir: Path) -> None:
    """Ensure data directory and empty Parquet files with correct schema exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    if not (data_dir / DATA_FILE).exists():
        _empty_df().to_parquet(data_dir / DATA_FILE, engine="pyarrow", compression="zstd")
    if not (data_dir / META_FILE).exists():
        _empty_df(META_DTYPES).to_parquet(data_dir / META_FILE, engine="pyarrow", compression="zstd")


def _fix_dtypes(df: pd.DataFrame, dtypes: dict = DTYPES) -> pd.DataFrame:
    for col, dt in dtypes.items():
        if col not in df.columns:
            df[col] = pd.Series(index=df.index, dtype=dt)
        elif isinstance(dt, pd.DatetimeTZDtype):
            df[col] = pd.to_datetime(df[col], utc=True)
        else:
            df[col] = df[col].astype(dt)
    return df[list(dtypes.keys())]


def validate_records(records: list[SelectionRow]) -> pd.DataFrame:
    """Validate a list of SelectionRow and return a DataFrame with proper dtypes."""
    if not isinstance(records, list):
        raise TypeError("records must be a list[SelectionRow]")
    rows = [r if isinstance(r, SelectionRow) else SelectionRow.model_validate(r) for r in records]
    df = pd.DataFrame([r.model_dump() for r in rows], columns=list(DTYPES.keys()))
    return _fix_dtypes(df)


def append_selections(df_new: pd.DataFrame, data_path: Path) -> None:
    """Append rows to the selections table.

    Rows for a session already in the table are replaced, so re-recording a
    session is idempotent.
    """
    f = Path(data_path) / DATA_FILE
    df_old = pd.read_parquet(f, engine="pyarrow") if f.exists() else _empty_df()
    df_new = _fix_dtypes(df_new.copy())
    if not df_old.empty and not df_new.empty:
        replaced = set(df_new["session_id"].dropna().astype(str))
        df_old = df_old[~df_old["session_id"].astype("string").isin(replaced)]
    frames = [d for d in (df_old, df_new) if not d.empty]
    combined = pd.concat(frames, ignore_index=True) if frames else _empty_df()
    combined = _fix_dtypes(combined)
    Path(data_path).mkdir(parents=True, exist_ok=True)
    combined.to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def upsert_session_meta(meta: SessionMeta, data_path: Path) -> None:
    """Insert or update a single session metadata row keyed by session_id."""
    f = Path(data_path) / META_FILE
    row = SessionMeta.model_validate(meta).model_dump()
    df_new = _fix_dtypes(pd.DataFrame([row]), META_DTYPES)
    if f.exists():
        df = pd.read_parquet(f, engine="pyarrow")
        if "session_id" in df.columns and not df.empty:
            df = df[df["session_id"].astype("string") != row["session_id"]]
        df = pd.concat([d for d in (df, df_new) if not d.empty], ignore_index=True)
    else:
        df = df_new
    Path(data_path).mkdir(parents=True, exist_ok=True)
    _fix_dtypes(df, META_DTYPES).to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def load_all(data_path: Path) -> pd.DataFrame:
    """Load every stored selection row with dtypes enforced.

    Adds:
    - skipped: bool = kind is none_appeal
    """
    f = Path(data_path) / DATA_FILE
    if not f.exists():
        return _empty_df().assign(skipped=pd.Series(dtype="bool"))
    df = _fix_dtypes(pd.read_parquet(f, engine="pyarrow"))
    df["skipped"] = (df["kind"].astype("string") == "none_appeal").fillna(False).astype(bool)
    return df


def load_sessions(data_path: Path) -> pd.DataFrame:
    f = Path(data_path) / META_FILE
    if not f.exists():
        return _empty_df(META_DTYPES)
    return _fix_dtypes(pd.read_parquet(f, engine="pyarrow"), META_DTYPES).sort_values("session_start").reset_index(drop=True)


def choice_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per-category pick position distribution and skip rate.

    Columns: category, selections, pos_0..pos_3 (share of picks/first ranks
    landing on each option position), all_work_rate, skip_rate.
    """
    cols = ["category", "selections", "pos_0", "pos_1", "pos_2", "pos_3", "all_work_rate", "skip_rate"]
    if df.empty:
        return pd.DataFrame(columns=cols)
    g = df.assign(
        category=df["category"].astype("string"),
        kind=df["kind"].astype("string"),
        selected_index=df["selected_index"].astype("Int64"),
    )
    totals = g.groupby("category").size().rename("selections")
    chosen = g[g["kind"].isin(["pick", "ranked"])]
    if chosen.empty:
        positions = pd.DataFrame(0, index=totals.index, columns=range(4))
    else:
        positions = (
            chosen.groupby(["category", "selected_index"]).size().unstack("selected_index", fill_value=0)
            .reindex(columns=range(4), fill_value=0)
        )
    picked = positions.sum(axis=1).where(lambda s: s > 0, other=1)
    shares = positions.div(picked, axis=0)
    shares.columns = [f"pos_{i}" for i in shares.columns]
    rates = g.groupby("category")["kind"].agg(
        all_work_rate=lambda k: float((k == "all_work").mean()),
        skip_rate=lambda k: float((k == "none_appeal").mean()),
    )
    out = pd.concat([totals, shares, rates], axis=1).fillna(0.0)
    out["selections"] = out["selections"].astype(int)
    return out.reset_index().rename(columns={"index": "category"})[cols]


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    """Export a DataFrame to line-delimited JSON (NDJSON) for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")
