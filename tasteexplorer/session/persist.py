from __future__ import annotations

"""JSON persistence for the in-progress session and completed client profiles.

Layout:
- current session: one JSON file (the session's own JSON form)
- profile store: `<dir>/taste_profile_<clientId>.json` holding
  {"clientId", "session", "metrics", "savedAt"}

Reads are best-effort: a missing, unreadable or malformed file is treated as
absent. Writes raise on I/O errors.
"""

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Session

PROFILE_PREFIX = "taste_profile_"
_CLIENT_RE = re.compile(r"^(.+)-([PS])$")


def _read_json(path: Path) -> Optional[Any]:
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return None


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    tmp.replace(path)


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# --- current session ---

def save_session(session: Session, path: str | Path) -> None:
    _write_json(Path(path), session.to_json())


def load_session(path: str | Path) -> Optional[Session]:
    """Load the saved session, or None when absent or corrupt."""
    data = _read_json(Path(path))
    if not isinstance(data, dict):
        return None
    try:
        return Session.from_json(data)
    except (KeyError, TypeError, ValueError, AttributeError):
        return None


def clear_session(path: str | Path) -> bool:
    p = Path(path)
    if p.exists():
        p.unlink()
        return True
    return False


# --- client ids ---

@dataclass(frozen=True)
class ClientId:
    base_name: str
    role: Optional[str]  # "P" | "S" | None

    @property
    def is_couple(self) -> bool:
        return self.role is not None


def parse_client_id(client_id: str) -> ClientId:
    """Split `Thornwood-P` into (Thornwood, P); ids without a role suffix are single clients."""
    m = _CLIENT_RE.match(client_id)
    if m:
        return ClientId(base_name=m.group(1), role=m.group(2))
    return ClientId(base_name=client_id, role=None)


def partner_client_id(client_id: str) -> Optional[str]:
    parsed = parse_client_id(client_id)
    if not parsed.is_couple:
        return None
    return f"{parsed.base_name}-{'S' if parsed.role == 'P' else 'P'}"


def own_role_label(client_id: str) -> str:
    role = parse_client_id(client_id).role
    return {"P": "Principal", "S": "Secondary"}.get(role or "", "Client")


def partner_role_label(client_id: str) -> str:
    role = parse_client_id(client_id).role
    return {"P": "Secondary", "S": "Principal"}.get(role or "", "Partner")


# --- profile store ---

def _profile_path(store_dir: str | Path, client_id: str) -> Path:
    safe = re.sub(r"[^A-Za-z0-9_.-]", "_", client_id)
    return Path(store_dir) / f"{PROFILE_PREFIX}{safe}.json"


def save_profile(store_dir: str | Path, client_id: str, session: Session, metrics: Dict[str, Any]) -> Path:
    path = _profile_path(store_dir, client_id)
    _write_json(
        path,
        {"clientId": client_id, "session": session.to_json(), "metrics": metrics, "savedAt": iso_now()},
    )
    return path


def load_profile(store_dir: str | Path, client_id: str) -> Optional[Dict[str, Any]]:
    data = _read_json(_profile_path(store_dir, client_id))
    if not isinstance(data, dict) or not isinstance(data.get("session"), dict):
        return None
    return data


def partner_profile(store_dir: str | Path, client_id: str) -> Optional[Dict[str, Any]]:
    partner = partner_client_id(client_id)
    if partner is None:
        return None
    return load_profile(store_dir, partner)


def list_profiles(store_dir: str | Path) -> List[str]:
    d = Path(store_dir)
    if not d.is_dir():
        return []
    ids = []
    for p in sorted(d.glob(f"{PROFILE_PREFIX}*.json")):
        data = _read_json(p)
        if isinstance(data, dict) and data.get("clientId"):
            ids.append(str(data["clientId"]))
    return ids
