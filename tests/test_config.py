import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import yaml

from tasteexplorer.config.config import load_config, validate_config
from tasteexplorer.profile import settings_from_config


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, data) -> str:
        path = self.dir / "cfg.yml"
        path.write_text(yaml.safe_dump(data))
        return str(path)

    def test_defaults(self) -> None:
        cfg = validate_config(load_config())
        self.assertEqual(cfg["session"]["mode"], "pick")
        settings = settings_from_config(cfg)
        self.assertEqual(settings.rank_weights, {1: 4.0, 2: 2.5, 3: 1.0, 4: 0.25})
        self.assertEqual(settings.wc_warm_max, 4)
        self.assertEqual(settings.neutral, 5.0)

    def test_user_file_overrides_single_keys(self) -> None:
        cfg = validate_config(load_config(self._write({"profile": {"wc_warm_max": 5}, "session": {"mode": "rank"}})))
        settings = settings_from_config(cfg)
        self.assertEqual(settings.wc_warm_max, 5)
        self.assertEqual(settings.ct_transitional_max, 6)
        self.assertEqual(cfg["session"]["mode"], "rank")
        self.assertIn("profiles_dir", cfg["storage"])

    def test_unknown_mode_falls_back_with_warning(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            cfg = validate_config(load_config(self._write({"session": {"mode": "swipe"}})))
        self.assertEqual(cfg["session"]["mode"], "pick")
        self.assertIn("WARNING", out.getvalue())

    def test_invalid_profile_numbers_exit(self) -> None:
        path = self._write({"profile": {"rank_weights": {1: 4.0, 2: -1.0, 3: 1.0, 4: 0.25}}})
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            validate_config(load_config(path))

    def test_missing_files_exit(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            load_config(str(self.dir / "absent.yml"))
        path = self._write({"library": {"path": str(self.dir / "no_quads.yml")}})
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            validate_config(load_config(path))


if __name__ == "__main__":
    unittest.main()
