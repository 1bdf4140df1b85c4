from __future__ import annotations

"""Session Manager: walks a session through categories and quads.

Owns the single mutable Session; every recorded selection moves the cursor
and reports which view comes next (exploration, category-complete or
analysis). Front-end agnostic: the terminal CLI drives it, tests drive it
directly.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from ..library.quads import Quad, QuadLibrary
from ..profile.constants import ALL_WORK, NONE_APPEAL
from ..profile.scale import round_half_up
from ..session.models import CategoryProgress, Selection, Session, new_session_id, now_ms
from .explain import trace as xtrace


@dataclass(frozen=True)
class Transition:
    view: str  # exploration | category-complete | analysis
    category: Optional[str]
    next_category: Optional[str] = None


class SessionManager:
    def __init__(
        self,
        library: QuadLibrary,
        visibility: Optional[Mapping[str, bool]] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.library = library
        self.visibility = dict(visibility) if visibility is not None else None
        self.clock = clock
        self.session: Optional[Session] = None
        self._quad_started = clock()
        self._quads_cache: Dict[str, List[Quad]] = {}

    # --- lifecycle ---

    def quads_for(self, category_id: str) -> List[Quad]:
        if category_id not in self._quads_cache:
            self._quads_cache[category_id] = self.library.enabled_for_category(category_id, self.visibility)
        return self._quads_cache[category_id]

    def start_session(self, client_id: Optional[str] = None) -> Session:
        ts = self.clock()
        progress: Dict[str, CategoryProgress] = {}
        for cid in self.library.category_order:
            progress[cid] = CategoryProgress(category_id=cid, total_quads=len(self.quads_for(cid)))
        first = next((cid for cid, p in progress.items() if p.total_quads > 0), None)
        self.session = Session(
            session_id=new_session_id(ts),
            started_at=ts,
            last_updated_at=ts,
            progress=progress,
            client_id=client_id,
            current_category=first,
            current_quad_index=0,
            completed_at=ts if first is None else None,
        )
        self._quad_started = ts
        xtrace("session_started", {"session": self.session.session_id, "client": client_id, "quads": self.session.total_quads})
        return self.session

    def resume(self, session: Session) -> None:
        """Continue a previously saved, unfinished session.

        The enabled quads may have changed since the session was saved, so
        each category's target is rebuilt as its answered selections plus
        the enabled quads still unanswered, and the cursor moves to the first
        unanswered quad. A session with nothing left to answer completes here.
        """
        if session.is_complete:
            raise ValueError(f"Session {session.session_id} is already complete")
        self.session = session
        for cid, prog in session.progress.items():
            pending = self._pending(cid)
            prog.total_quads = len(prog.selections) + len(pending)
        ts = self.clock()
        self._quad_started = ts

        current = session.current_category
        if current is None or not self._pending(current):
            current = self._next_category(current or "")
        if current is None:
            session.current_category = None
            session.current_quad_index = 0
            session.completed_at = ts
            xtrace("session_completed", {"session": session.session_id, "selections": session.total_selections})
            return
        session.current_category = current
        session.current_quad_index = self._cursor(current)
        xtrace("session_resumed", {"session": session.session_id, "category": current, "quads": session.total_quads})

    def reset(self) -> None:
        self.session = None

    # --- cursor ---

    def _require(self) -> Session:
        if self.session is None:
            raise RuntimeError("No active session; call start_session() first")
        return self.session

    @property
    def is_complete(self) -> bool:
        return self.session is not None and self.session.is_complete

    def current_quad(self) -> Optional[Quad]:
        s = self._require()
        if s.is_complete or s.current_category is None:
            return None
        quads = self.quads_for(s.current_category)
        if 0 <= s.current_quad_index < len(quads):
            return quads[s.current_quad_index]
        return None

    def overall_progress(self) -> int:
        """Percent of quads answered across all categories."""
        s = self._require()
        total = s.total_quads
        if total == 0:
            return 100 if s.is_complete else 0
        return int(round_half_up(s.total_selections / total * 100))

    def jump_to_category(self, category_id: str) -> None:
        s = self._require()
        if category_id not in s.progress:
            raise KeyError(f"Unknown category: {category_id}")
        if not self.quads_for(category_id):
            raise ValueError(f"Category '{category_id}' has no enabled quads")
        s.current_category = category_id
        s.current_quad_index = self._cursor(category_id)
        s.last_updated_at = self.clock()
        self._quad_started = s.last_updated_at

    def _pending(self, category_id: str) -> List[Quad]:
        """Enabled quads of a category that have no selection yet."""
        s = self._require()
        prog = s.progress.get(category_id)
        answered = {sel.quad_id for sel in prog.selections} if prog else set()
        return [q for q in self.quads_for(category_id) if q.quad_id not in answered]

    def _cursor(self, category_id: str) -> int:
        """Index of the first unanswered enabled quad; the last quad when none is left."""
        quads = self.quads_for(category_id)
        pending = {q.quad_id for q in self._pending(category_id)}
        for i, quad in enumerate(quads):
            if quad.quad_id in pending:
                return i
        return max(0, len(quads) - 1)

    def _next_category(self, after: str) -> Optional[str]:
        s = self._require()
        order = list(s.progress.keys())
        start = order.index(after) + 1 if after in order else 0
        for cid in order[start:] + order[:start]:
            if self._pending(cid) and not s.progress[cid].is_complete:
                return cid
        return None

    # --- recording ---

    def _record(self, selected_index: int, ranking: Optional[List[int]] = None) -> Transition:
        s = self._require()
        if s.is_complete:
            raise ValueError("Session is complete; start a new session to record more selections")
        quad = self.current_quad()
        if quad is None or s.current_category is None:
            raise ValueError("No quad is pending in the current category")
        ts = self.clock()
        selection = Selection(
            quad_id=quad.quad_id,
            selected_index=selected_index,
            timestamp=ts,
            time_spent=max(0, ts - self._quad_started),
            ranking=ranking,
        )
        category = s.current_category
        s.progress[category].add(selection)
        s.last_updated_at = ts
        self._quad_started = ts
        xtrace("selection_recorded", {"quad": quad.quad_id, "index": selection.selected_index, "ranking": ranking})

        if self._pending(category) and not s.progress[category].is_complete:
            s.current_quad_index = self._cursor(category)
            return Transition("exploration", category, category)

        nxt = self._next_category(category)
        if nxt is None:
            s.completed_at = ts
            xtrace("session_completed", {"session": s.session_id, "selections": s.total_selections})
            return Transition("analysis", category, None)
        s.current_category = nxt
        s.current_quad_index = self._cursor(nxt)
        return Transition("category-complete", category, nxt)

    def record_selection(self, index: int) -> Transition:
        """Record a single pick (0-3) or one of the ALL_WORK / NONE_APPEAL sentinels."""
        return self._record(int(index))

    def record_ranking(self, order: List[int]) -> Transition:
        """Record a full 1st..4th ordering of the current quad's options."""
        order = [int(i) for i in order]
        return self._record(order[0] if order else -1, ranking=order)

    def all_work(self) -> Transition:
        return self._record(ALL_WORK)

    def none_appeal(self) -> Transition:
        return self._record(NONE_APPEAL)
