from .schema import KINDS, DTYPES, META_DTYPES, SelectionRow, SessionMeta
from .store import (
    init_store,
    validate_records,
    append_selections,
    upsert_session_meta,
    load_all,
    load_sessions,
    choice_summary,
    export_ndjson,
)

__all__ = [
    "KINDS",
    "DTYPES",
    "META_DTYPES",
    "SelectionRow",
    "SessionMeta",
    "init_store",
    "validate_records",
    "append_selections",
    "upsert_session_meta",
    "load_all",
    "load_sessions",
    "choice_summary",
    "export_ndjson",
]
