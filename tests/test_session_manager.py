import unittest

from tasteexplorer.app.session_manager import SessionManager
from tasteexplorer.library import library_from_dict
from tasteexplorer.profile import derive_profile
from tasteexplorer.profile.constants import ALL_WORK, NONE_APPEAL
from tasteexplorer.session import Session

from ._fixtures import fake_clock, make_library


class SessionManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.library = make_library()
        self.sm = SessionManager(self.library, clock=fake_clock())

    def test_start_builds_progress_in_category_order(self) -> None:
        session = self.sm.start_session("Thornwood-P")
        self.assertEqual(list(session.progress), ["living", "kitchens", "studio"])
        self.assertEqual(session.total_quads, 5)
        self.assertEqual(session.current_category, "living")
        self.assertEqual(session.client_id, "Thornwood-P")
        self.assertTrue(session.session_id.startswith("session_"))
        self.assertEqual(self.sm.current_quad().quad_id, "L-1")

    def test_walks_categories_and_completes(self) -> None:
        self.sm.start_session()
        self.assertEqual(self.sm.record_selection(0).view, "exploration")
        self.assertEqual(self.sm.overall_progress(), 20)
        self.sm.record_ranking([2, 0, 1, 3])
        t = self.sm.none_appeal()
        self.assertEqual((t.view, t.category, t.next_category), ("category-complete", "living", "kitchens"))
        self.assertEqual(self.sm.current_quad().quad_id, "K-1")
        self.sm.all_work()
        t = self.sm.record_selection(3)
        self.assertEqual(t.view, "analysis")
        self.assertTrue(self.sm.is_complete)
        self.assertIsNotNone(self.sm.session.completed_at)
        self.assertEqual(self.sm.overall_progress(), 100)
        self.assertIsNone(self.sm.current_quad())

        living = self.sm.session.progress["living"].selections
        self.assertEqual([s.selected_index for s in living], [0, 2, NONE_APPEAL])
        self.assertEqual(living[1].ranking, [2, 0, 1, 3])
        self.assertEqual(self.sm.session.progress["kitchens"].selections[0].selected_index, ALL_WORK)

        with self.assertRaises(ValueError):
            self.sm.record_selection(0)

    def test_time_spent_measured_from_previous_event(self) -> None:
        self.sm.start_session()
        self.sm.record_selection(1)
        self.assertEqual(self.sm.session.progress["living"].selections[0].time_spent, 250)

    def test_invalid_ranking_leaves_cursor(self) -> None:
        self.sm.start_session()
        with self.assertRaises(ValueError):
            self.sm.record_ranking([0, 0, 1, 2])
        with self.assertRaises(ValueError):
            self.sm.record_selection(7)
        self.assertEqual(self.sm.session.total_selections, 0)
        self.assertEqual(self.sm.current_quad().quad_id, "L-1")

    def test_jump_and_return(self) -> None:
        self.sm.start_session()
        self.sm.jump_to_category("kitchens")
        self.assertEqual(self.sm.current_quad().quad_id, "K-1")
        self.sm.record_selection(0)
        t = self.sm.record_selection(0)
        self.assertEqual((t.view, t.next_category), ("category-complete", "living"))
        self.assertEqual(self.sm.current_quad().quad_id, "L-1")
        with self.assertRaises(KeyError):
            self.sm.jump_to_category("attic")
        with self.assertRaises(ValueError):
            self.sm.jump_to_category("studio")

    def test_visibility_hides_quads(self) -> None:
        sm = SessionManager(self.library, {"L-2": False}, clock=fake_clock())
        session = sm.start_session()
        self.assertEqual(session.progress["living"].total_quads, 2)
        sm.record_selection(0)
        self.assertEqual(sm.current_quad().quad_id, "L-3")

    def test_library_without_quads_completes_immediately(self) -> None:
        empty = library_from_dict({"categories": {"studio": {"name": "Studio"}}})
        sm = SessionManager(empty, clock=fake_clock())
        session = sm.start_session()
        self.assertTrue(session.is_complete)
        self.assertIsNone(sm.current_quad())

    def test_resume_rejects_completed_session(self) -> None:
        self.sm.start_session()
        for _ in range(5):
            self.sm.record_selection(0)
        with self.assertRaises(ValueError):
            SessionManager(self.library).resume(self.sm.session)

    def _saved_after_first_pick(self):
        self.sm.start_session()
        self.sm.record_selection(0)
        return Session.from_json(self.sm.session.to_json())

    def _answer_all(self, sm: SessionManager):
        asked = []
        while not sm.is_complete:
            asked.append(sm.current_quad().quad_id)
            sm.record_selection(0)
        return asked

    def test_resume_after_answered_quad_is_disabled(self) -> None:
        saved = self._saved_after_first_pick()
        sm = SessionManager(self.library, {"L-1": False}, clock=fake_clock())
        sm.resume(saved)
        self.assertEqual(sm.current_quad().quad_id, "L-2")
        self.assertEqual(saved.progress["living"].total_quads, 3)
        self.assertEqual(self._answer_all(sm), ["L-2", "L-3", "K-1", "K-2"])
        self.assertEqual(sm.overall_progress(), 100)

    def test_resume_after_pending_quad_is_disabled(self) -> None:
        saved = self._saved_after_first_pick()
        sm = SessionManager(self.library, {"L-2": False}, clock=fake_clock())
        sm.resume(saved)
        self.assertEqual(saved.progress["living"].total_quads, 2)
        self.assertEqual(self._answer_all(sm), ["L-3", "K-1", "K-2"])

    def test_resume_with_nothing_left_enabled_completes(self) -> None:
        saved = self._saved_after_first_pick()
        hidden = {qid: False for qid in ("L-2", "L-3", "K-1", "K-2")}
        sm = SessionManager(self.library, hidden, clock=fake_clock())
        sm.resume(saved)
        self.assertTrue(sm.is_complete)
        self.assertIsNone(sm.current_quad())

    def test_progress_rounds_half_up(self) -> None:
        quads = {f"A-{i}": {"category": "attic", "metadata": {"ct": 5, "ml": 5, "wc": 5}} for i in range(1, 9)}
        sm = SessionManager(library_from_dict({"categories": {"attic": {"name": "Attic"}}, "quads": quads}), clock=fake_clock())
        sm.start_session()
        sm.record_selection(0)
        self.assertEqual(sm.overall_progress(), 13)

    def test_in_progress_session_derives(self) -> None:
        self.sm.start_session()
        self.sm.record_selection(0)
        profile = derive_profile(self.sm.session, self.library)
        self.assertEqual(profile.avg_ct, 2.0)
        self.assertEqual(profile.categories["kitchens"].selections, 0)

    def test_requires_started_session(self) -> None:
        with self.assertRaises(RuntimeError):
            self.sm.current_quad()


if __name__ == "__main__":
    unittest.main()
