import json
import tempfile
import unittest
from pathlib import Path

from tasteexplorer.app.session_manager import SessionManager
from tasteexplorer.session import (
    CategoryProgress,
    Selection,
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

from ._fixtures import fake_clock, make_library


class SessionFileTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.path = self.dir / "current_session.json"
        sm = SessionManager(make_library(), clock=fake_clock())
        sm.start_session("Thornwood-P")
        sm.record_selection(1)
        sm.record_ranking([3, 2, 1, 0])
        self.session = sm.session

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_saved_session_loads_back(self) -> None:
        save_session(self.session, self.path)
        loaded = load_session(self.path)
        self.assertEqual(loaded, self.session)
        raw = json.loads(self.path.read_text())
        self.assertEqual(raw["clientId"], "Thornwood-P")
        self.assertEqual(raw["progress"]["living"]["selections"][1]["ranking"], [3, 2, 1, 0])

    def test_missing_or_corrupt_session_is_absent(self) -> None:
        self.assertIsNone(load_session(self.path))
        self.path.write_text("{not json")
        self.assertIsNone(load_session(self.path))
        self.path.write_text("[1, 2, 3]")
        self.assertIsNone(load_session(self.path))
        self.path.write_text(json.dumps({"sessionId": "x"}))
        self.assertIsNone(load_session(self.path))

    def test_session_with_bad_ranking_is_absent(self) -> None:
        data = self.session.to_json()
        data["progress"]["living"]["selections"][1]["ranking"] = [0, 0, 0, 0]
        self.path.write_text(json.dumps(data))
        self.assertIsNone(load_session(self.path))

    def test_session_with_more_selections_than_quads_is_absent(self) -> None:
        data = self.session.to_json()
        data["progress"]["living"]["totalQuads"] = 1
        self.path.write_text(json.dumps(data))
        self.assertIsNone(load_session(self.path))

    def test_progress_refuses_selections_past_its_target(self) -> None:
        prog = CategoryProgress("x", 1)
        first = Selection(quad_id="X-1", selected_index=0, timestamp=1)
        prog.add(first)
        self.assertTrue(prog.is_complete)
        with self.assertRaises(ValueError):
            prog.add(Selection(quad_id="X-2", selected_index=1, timestamp=2))
        self.assertEqual(prog.selections, [first])
        self.assertEqual(prog.completed_quads, 1)

    def test_clear_session(self) -> None:
        save_session(self.session, self.path)
        self.assertTrue(clear_session(self.path))
        self.assertFalse(clear_session(self.path))

    def test_selection_json_omits_unset_fields(self) -> None:
        data = Selection(quad_id="L-1", selected_index=-2, timestamp=5).to_json()
        self.assertEqual(data, {"quadId": "L-1", "selectedIndex": -2, "timestamp": 5})


class ProfileStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        sm = SessionManager(make_library(), clock=fake_clock())
        sm.start_session("Thornwood-P")
        self.session = sm.session

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_client_ids(self) -> None:
        parsed = parse_client_id("Thornwood-P")
        self.assertEqual((parsed.base_name, parsed.role, parsed.is_couple), ("Thornwood", "P", True))
        self.assertFalse(parse_client_id("Solo").is_couple)
        self.assertEqual(partner_client_id("Thornwood-P"), "Thornwood-S")
        self.assertEqual(partner_client_id("Thornwood-S"), "Thornwood-P")
        self.assertIsNone(partner_client_id("Solo"))
        self.assertEqual(own_role_label("Thornwood-S"), "Secondary")
        self.assertEqual(partner_role_label("Thornwood-S"), "Principal")
        self.assertEqual(own_role_label("Solo"), "Client")

    def test_profiles_saved_by_client(self) -> None:
        path = save_profile(self.dir, "Thornwood-P", self.session, {"styleLabel": "Transitional"})
        self.assertEqual(path.name, "taste_profile_Thornwood-P.json")
        data = load_profile(self.dir, "Thornwood-P")
        self.assertEqual(data["metrics"]["styleLabel"], "Transitional")
        self.assertTrue(data["savedAt"].endswith("Z"))
        self.assertIsNone(partner_profile(self.dir, "Thornwood-P"))
        save_profile(self.dir, "Thornwood-S", self.session, {})
        self.assertEqual(partner_profile(self.dir, "Thornwood-P")["clientId"], "Thornwood-S")
        self.assertEqual(list_profiles(self.dir), ["Thornwood-P", "Thornwood-S"])

    def test_corrupt_profile_is_absent(self) -> None:
        (self.dir / "taste_profile_Broken.json").write_text("oops")
        self.assertIsNone(load_profile(self.dir, "Broken"))
        self.assertEqual(list_profiles(self.dir), [])


if __name__ == "__main__":
    unittest.main()
