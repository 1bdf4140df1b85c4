"""taste-explorer package initialization.

Re-exports the pieces most callers need: the quad library, session records
and the profile engine. The interactive front end lives in `tasteexplorer.app`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .library import QuadLibrary, QuadVisibility, load_library  # noqa: E402
from .profile import (  # noqa: E402
    DerivedProfile,
    ProfileSettings,
    compare_profiles,
    derive_from_selections,
    derive_profile,
)
from .session import Selection, Session, load_session, save_session  # noqa: E402

__all__ = [
    "__version__",
    "QuadLibrary",
    "QuadVisibility",
    "load_library",
    "DerivedProfile",
    "ProfileSettings",
    "compare_profiles",
    "derive_from_selections",
    "derive_profile",
    "Selection",
    "Session",
    "load_session",
    "save_session",
]
