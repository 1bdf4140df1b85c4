from __future__ import annotations

"""Configuration loading and validation for taste-explorer.

This module loads YAML configuration, applies defaults, and validates
enumerations and profile numbers before the CLI touches any data.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..profile.settings import ProfileSettings

ALLOWED_SESSION_MODES = {"pick", "rank"}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML layered over the package defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    cfg = _load_yaml(Path(__file__).with_name("defaults.yml"))
    if path:
        cfg = _merge(cfg, _load_yaml(Path(path)))
    return cfg


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Unsupported enum values are replaced with a warning; invalid profile
    numbers (non-positive weights, inverted thresholds) abort with an error.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated configuration dictionary.
    """
    for section in ("library", "session", "profile", "storage", "report"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    library = cfg["library"]
    session = cfg["session"]
    storage = cfg["storage"]
    report = cfg["report"]

    library.setdefault("path", None)
    library.setdefault("visibility_path", "./taste_data/quad_visibility.json")
    library.setdefault("image_base_url", "")

    session.setdefault("path", "./taste_data/current_session.json")
    session.setdefault("mode", "pick")
    session.setdefault("show_divergence_analysis", True)

    storage.setdefault("profiles_dir", "./taste_data/profiles")
    storage.setdefault("history_dir", "./taste_data/history")
    storage.setdefault("history_enabled", True)

    report.setdefault("output_dir", "./reports")
    report.setdefault("export_dir", "./exports")

    mode = session.get("mode")
    if mode not in ALLOWED_SESSION_MODES:
        print(f"WARNING: Unsupported session mode '{mode}', using 'pick'.")
        session["mode"] = "pick"

    lib_path = library.get("path")
    if lib_path and not Path(lib_path).exists():
        print(f"ERROR: Quad library not found at '{lib_path}'.", file=sys.stderr)
        sys.exit(1)

    try:
        ProfileSettings.model_validate(cfg["profile"])
    except ValidationError as e:
        print(f"ERROR: Invalid profile settings:\n{e}", file=sys.stderr)
        sys.exit(1)

    return cfg
