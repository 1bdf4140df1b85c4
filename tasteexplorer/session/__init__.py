from .models import CategoryProgress, Selection, Session, new_session_id, now_ms
from .persist import (
    ClientId,
    clear_session,
    list_profiles,
    load_profile,
    load_session,
    own_role_label,
    parse_client_id,
    partner_client_id,
    partner_profile,
    partner_role_label,
    save_profile,
    save_session,
)

__all__ = [
    "CategoryProgress",
    "Selection",
    "Session",
    "new_session_id",
    "now_ms",
    "ClientId",
    "clear_session",
    "list_profiles",
    "load_profile",
    "load_session",
    "own_role_label",
    "parse_client_id",
    "partner_client_id",
    "partner_profile",
    "partner_role_label",
    "save_profile",
    "save_session",
]
