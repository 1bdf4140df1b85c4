import unittest

from tasteexplorer.app import explain
from tasteexplorer.app.session_manager import SessionManager

from ._fixtures import fake_clock, make_library


class ExplainTests(unittest.TestCase):
    def setUp(self) -> None:
        self.lines = []
        explain.enable(True, sink=self.lines.append)

    def tearDown(self) -> None:
        explain.enable(False)

    def test_session_events_are_traced(self) -> None:
        sm = SessionManager(make_library(), clock=fake_clock())
        sm.start_session("Thornwood-P")
        sm.record_selection(2)
        events = [line.split(" ")[1] for line in self.lines]
        self.assertEqual(events, ["session_started", "selection_recorded"])
        self.assertTrue(self.lines[1].endswith(':: {"index":2,"quad":"L-1","ranking":null}'))

    def test_unknown_event_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            explain.trace("sesion_started")
        explain.enable(False)
        with self.assertRaises(ValueError):
            explain.trace("sesion_started")

    def test_disabled_tracer_is_silent(self) -> None:
        explain.enable(False)
        explain.trace("profile_derived", {"label": "Transitional"})
        self.assertEqual(self.lines, [])


if __name__ == "__main__":
    unittest.main()
