import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from storage import SelectionRow, choice_summary, export_ndjson, load_all, load_sessions
from tasteexplorer.app.session_manager import SessionManager
from tasteexplorer.results.history import record_session, session_rows

from ._fixtures import fake_clock, make_library


class HistoryStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name) / "history"
        sm = SessionManager(make_library(), clock=fake_clock())
        sm.start_session("Thornwood-P")
        sm.record_selection(0)
        sm.record_selection(0)
        sm.record_ranking([1, 0, 2, 3])
        sm.all_work()
        sm.none_appeal()
        self.session = sm.session

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_rows_mirror_selections(self) -> None:
        rows = session_rows(self.session)
        self.assertEqual([r.kind for r in rows], ["pick", "pick", "ranked", "all_work", "none_appeal"])
        self.assertEqual(rows[2].ranking, "1,0,2,3")
        self.assertEqual(rows[3].category, "kitchens")
        self.assertEqual(rows[3].position, 0)
        self.assertEqual(rows[0].session_start.tzinfo, timezone.utc)

    def test_record_and_reload(self) -> None:
        self.assertEqual(record_session(self.session, self.dir, style_label="Transitional"), 5)
        df = load_all(self.dir)
        self.assertEqual(len(df), 5)
        self.assertEqual(int(df["skipped"].sum()), 1)
        sessions = load_sessions(self.dir)
        self.assertEqual(len(sessions), 1)
        self.assertEqual(sessions.loc[0, "style_label"], "Transitional")

        # recording the same session again replaces its rows
        record_session(self.session, self.dir)
        self.assertEqual(len(load_all(self.dir)), 5)
        self.assertEqual(len(load_sessions(self.dir)), 1)

    def test_choice_summary(self) -> None:
        record_session(self.session, self.dir)
        summary = choice_summary(load_all(self.dir)).set_index("category")
        self.assertEqual(int(summary.loc["living", "selections"]), 3)
        self.assertAlmostEqual(summary.loc["living", "pos_0"], 2 / 3)
        self.assertAlmostEqual(summary.loc["living", "pos_1"], 1 / 3)
        self.assertAlmostEqual(summary.loc["kitchens", "all_work_rate"], 0.5)
        self.assertAlmostEqual(summary.loc["kitchens", "skip_rate"], 0.5)
        self.assertAlmostEqual(summary.loc["kitchens", "pos_0"], 0.0)

    def test_empty_store(self) -> None:
        self.assertTrue(load_all(self.dir).empty)
        self.assertTrue(choice_summary(load_all(self.dir)).empty)

    def test_ndjson_export(self) -> None:
        record_session(self.session, self.dir)
        out = self.dir / "rows.ndjson"
        export_ndjson(load_all(self.dir), out)
        lines = out.read_text().strip().splitlines()
        self.assertEqual(len(lines), 5)
        self.assertEqual(json.loads(lines[0])["quad_id"], "L-1")

    def test_row_validation(self) -> None:
        base = dict(
            session_id="s",
            session_start=datetime(2026, 1, 1),
            category="living",
            quad_id="L-1",
            position=0,
        )
        row = SelectionRow(selected_index=2, kind="pick", **base)
        self.assertEqual(row.session_start.tzinfo, timezone.utc)
        with self.assertRaises(ValueError):
            SelectionRow(selected_index=-1, kind="pick", **base)
        with self.assertRaises(ValueError):
            SelectionRow(selected_index=1, kind="ranked", **base)
        with self.assertRaises(ValueError):
            SelectionRow(selected_index=5, kind="pick", **base)


if __name__ == "__main__":
    unittest.main()
