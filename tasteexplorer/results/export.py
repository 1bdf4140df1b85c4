from __future__ import annotations

"""Client-facing JSON export of a session and its derived profile."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..app.explain import trace as xtrace
from ..profile.derive import DerivedProfile
from ..session.models import Session
from ..session.persist import iso_now


def build_export(session: Session, profile: DerivedProfile, exported_at: Optional[str] = None) -> Dict[str, Any]:
    return {
        "session": session.to_json(),
        "metrics": profile.to_metrics_json(),
        "exportedAt": exported_at or iso_now(),
    }


def export_filename(session: Session) -> str:
    return f"taste-profile-{session.session_id}.json"


def write_export(session: Session, profile: DerivedProfile, out_dir: str | Path) -> Path:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / export_filename(session)
    with path.open("w", encoding="utf-8") as f:
        json.dump(build_export(session, profile), f, indent=2)
    xtrace("export_written", {"session": session.session_id, "path": str(path)})
    print(f"📝 Export written: {path}")
    return path
