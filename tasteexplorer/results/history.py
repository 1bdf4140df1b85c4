from __future__ import annotations

"""Bridge from a finished session to the Parquet selection history."""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from storage import (
    SelectionRow,
    SessionMeta,
    append_selections,
    init_store,
    upsert_session_meta,
    validate_records,
)

from ..app.explain import trace as xtrace
from ..session.models import Session


def _ms_to_dt(ms: Optional[int]) -> Optional[datetime]:
    if ms is None:
        return None
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)


def _kind(sel) -> str:
    if sel.is_ranked:
        return "ranked"
    if sel.is_all_work:
        return "all_work"
    if sel.is_none_appeal:
        return "none_appeal"
    return "pick"


def session_rows(session: Session) -> List[SelectionRow]:
    start = _ms_to_dt(session.started_at)
    rows: List[SelectionRow] = []
    for cid, prog in session.progress.items():
        for pos, sel in enumerate(prog.selections):
            rows.append(
                SelectionRow(
                    session_id=session.session_id,
                    session_start=start,
                    client_id=session.client_id,
                    category=cid,
                    quad_id=sel.quad_id,
                    position=pos,
                    selected_index=sel.selected_index,
                    kind=_kind(sel),
                    ranking=SelectionRow.format_ranking(sel.ranking),
                    time_spent_ms=sel.time_spent,
                )
            )
    return rows


def record_session(
    session: Session,
    history_dir: str | Path,
    *,
    style_label: Optional[str] = None,
    app_version: Optional[str] = None,
) -> int:
    """Append the session's selections and metadata; returns the row count."""
    data_dir = Path(history_dir)
    init_store(data_dir)
    rows = session_rows(session)
    append_selections(validate_records(rows), data_dir)
    upsert_session_meta(
        SessionMeta(
            session_id=session.session_id,
            session_start=_ms_to_dt(session.started_at),
            completed_at=_ms_to_dt(session.completed_at),
            client_id=session.client_id,
            app_version=app_version,
            style_label=style_label,
            total_selections=session.total_selections,
        ),
        data_dir,
    )
    xtrace("history_recorded", {"session": session.session_id, "rows": len(rows), "dir": str(data_dir)})
    return len(rows)
