from __future__ import annotations

"""CLI for taste-explorer using SessionManager and the profile engine."""

import argparse
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .. import __version__
from ..config.config import load_config, validate_config
from ..library.quads import QuadLibrary, image_url, load_library
from ..library.visibility import QuadVisibility
from ..profile import ProfileSettings, compare_profiles, derive_profile, settings_from_config
from ..profile import constants as C
from ..profile.derive import DerivedProfile
from ..report.pdf import write_report
from ..results.export import write_export
from ..results.history import record_session
from ..session import (
    Session,
    clear_session,
    list_profiles,
    load_profile,
    load_session,
    own_role_label,
    partner_client_id,
    partner_role_label,
    save_profile,
    save_session,
)
from .session_manager import SessionManager, Transition

Ui = Dict[str, Callable[..., Any]]


def _default_ui() -> Ui:
    def ask(prompt: str) -> str:
        return input(prompt)

    def inform(msg: str) -> None:
        print(msg)

    return {"ask": ask, "inform": inform}


def _setup(args: argparse.Namespace) -> Tuple[Dict[str, Any], QuadLibrary, ProfileSettings]:
    if getattr(args, "explain", False):
        from .explain import enable as explain_enable
        explain_enable(True)
    cfg = validate_config(load_config(args.config))
    library = load_library(cfg["library"].get("path"))
    return cfg, library, settings_from_config(cfg)


def _visibility(cfg: Dict[str, Any], library: QuadLibrary) -> QuadVisibility:
    return QuadVisibility(library, cfg["library"].get("visibility_path"))


def _load_current(cfg: Dict[str, Any]) -> Optional[Session]:
    return load_session(cfg["session"]["path"])


def _stored_profile(cfg: Dict[str, Any], library: QuadLibrary, settings: ProfileSettings, client_id: str) -> Optional[DerivedProfile]:
    data = load_profile(cfg["storage"]["profiles_dir"], client_id)
    if data is None:
        return None
    try:
        session = Session.from_json(data["session"])
    except (KeyError, TypeError, ValueError):
        print(f"WARNING: Stored profile for '{client_id}' is unreadable; ignoring it.")
        return None
    return derive_profile(session, library, settings)


# --- formatting ---

def format_summary(profile: DerivedProfile, library: QuadLibrary) -> str:
    lines = [f"Style: {profile.style_label}"]
    if profile.style_tags:
        lines.append("Tags: " + ", ".join(profile.style_tags))
    for key, axis in profile.axes.items():
        left, right = C.AXIS_POLES[key]
        lines.append(
            f"  {axis.label:<20} {axis.value:4.1f}  ({profile.five_point(key):.1f}/5, "
            f"{left} → {right}, confidence {axis.confidence:.0%})"
        )
    if profile.top_regions:
        lines.append("Top regions: " + ", ".join(f"{r} ({n})" for r, n in profile.top_regions))
    if profile.top_materials:
        lines.append("Top materials: " + ", ".join(f"{m} ({n})" for m, n in profile.top_materials))
    cx = profile.complexity
    lines.append(f"Complexity: optimal {cx.optimal:.1f}, range {cx.range_min:.1f}-{cx.range_max:.1f}")
    lines.append("Categories:")
    for cid, m in profile.categories.items():
        cat = library.categories.get(cid)
        name = cat.name if cat else cid
        lines.append(
            f"  {name:<22} {m.dominant_style} {m.dominant_label:<26} "
            f"ct {m.ct:.1f}  ml {m.ml:.1f}  wc {m.wc:.1f}  ({m.selections} answered, {m.skipped} skipped)"
        )
    lines.append(f"Selections: {profile.total_selections} (weighted samples {profile.sample_size})")
    return "\n".join(lines)


def format_alignment(report, labels: Tuple[str, str]) -> str:
    lines = [f"{labels[0]} vs {labels[1]}: {report.overall_alignment}% aligned"]
    for axis, diff in report.axis_differences.items():
        lines.append(f"  {C.AXES[axis]:<20} diff {diff:.1f}")
    for d in report.divergences:
        lines.append(f"  ! {d.category_name}: {d.style_p} vs {d.style_s} ({d.severity})")
        lines.append(f"    {d.prompt}")
    return "\n".join(lines)


# --- interactive exploration ---

def parse_ranking(text: str) -> Optional[List[int]]:
    """'2 1 4 3' or '2143' (1-based positions) -> [1, 0, 3, 2]."""
    digits = [ch for ch in text if ch.isdigit()]
    if len(digits) != C.OPTIONS_PER_QUAD:
        return None
    order = [int(d) - 1 for d in digits]
    if sorted(order) != list(range(C.OPTIONS_PER_QUAD)):
        return None
    return order


def _describe_quad(sm: SessionManager, base_url: str) -> str:
    quad = sm.current_quad()
    s = sm.session
    if quad is None or s is None or s.current_category is None:
        return ""
    cat = sm.library.categories.get(s.current_category)
    prog = s.progress[s.current_category]
    lines = [
        f"\n[{cat.name if cat else s.current_category}] {prog.completed_quads + 1}/{prog.total_quads}"
        f"  (overall {sm.overall_progress()}%)",
        f"{quad.title}" + (f" - {quad.subtitle}" if quad.subtitle else ""),
    ]
    for opt in quad.options:
        lines.append(f"  {opt.index + 1}. {image_url(base_url, quad.quad_id, opt.index)}")
    return "\n".join(lines)


def explore(sm: SessionManager, ui: Ui, mode: str, on_change: Callable[[Session], None], base_url: str = "") -> bool:
    """Prompt through quads until the session completes or the user quits.

    Returns True when the session completed.
    """
    if mode == "rank":
        hint = "Rank 1st..4th (e.g. 2 1 4 3), [a]ll work, [n]one appeal, [j]ump <category>, [q]uit: "
    else:
        hint = "Pick 1-4, [a]ll work, [n]one appeal, [j]ump <category>, [q]uit: "
    while not sm.is_complete:
        ui["inform"](_describe_quad(sm, base_url))
        raw = ui["ask"](hint).strip().lower()
        transition: Optional[Transition] = None
        try:
            if raw in ("q", "quit"):
                return False
            if raw.startswith("j"):
                target = raw[1:].strip()
                sm.jump_to_category(target)
                on_change(sm.session)
                continue
            if raw in ("a", "all"):
                transition = sm.all_work()
            elif raw in ("n", "none"):
                transition = sm.none_appeal()
            elif mode == "rank":
                order = parse_ranking(raw)
                if order is None:
                    ui["inform"]("Enter each of 1-4 once, best first.")
                    continue
                transition = sm.record_ranking(order)
            elif raw.isdigit() and 1 <= int(raw) <= C.OPTIONS_PER_QUAD:
                transition = sm.record_selection(int(raw) - 1)
            else:
                ui["inform"]("Invalid input.")
                continue
        except (KeyError, ValueError) as e:
            ui["inform"](f"Cannot do that: {e}")
            continue
        on_change(sm.session)
        if transition is not None and transition.view == "category-complete":
            done = sm.library.categories.get(transition.category or "")
            ui["inform"](f"✓ {done.name if done else transition.category} complete.")
    return True


def _finish(cfg: Dict[str, Any], library: QuadLibrary, settings: ProfileSettings, session: Session) -> DerivedProfile:
    profile = derive_profile(session, library, settings)
    print("\nTaste Profile:")
    print(format_summary(profile, library))
    if session.client_id:
        path = save_profile(cfg["storage"]["profiles_dir"], session.client_id, session, profile.to_metrics_json())
        print(f"Profile saved: {path}")
        partner_id = partner_client_id(session.client_id)
        if partner_id and cfg["session"].get("show_divergence_analysis", True):
            partner = _stored_profile(cfg, library, settings, partner_id)
            if partner is not None:
                report = compare_profiles(profile, partner, settings, {c.id: c.name for c in library.categories.values()})
                labels = (own_role_label(session.client_id), partner_role_label(session.client_id))
                print("\n" + format_alignment(report, labels))
    if cfg["storage"].get("history_enabled", True):
        record_session(session, cfg["storage"]["history_dir"], style_label=profile.style_label, app_version=__version__)
    return profile


# --- commands ---

def _cmd_run(args, ui: Ui) -> int:
    cfg, library, settings = _setup(args)
    session_path = cfg["session"]["path"]
    mode = args.mode or cfg["session"]["mode"]
    vis = _visibility(cfg, library)
    sm = SessionManager(library, vis.state)

    saved = None if args.new else _load_current(cfg)
    if saved is not None and not saved.is_complete:
        sm.resume(saved)
        save_session(sm.session, session_path)
        ui["inform"](f"Resuming {saved.session_id} ({sm.overall_progress()}% done).")
    else:
        sm.start_session(args.client)
        save_session(sm.session, session_path)
        ui["inform"](f"Started {sm.session.session_id}.")

    completed = explore(sm, ui, mode, lambda s: save_session(s, session_path), cfg["library"].get("image_base_url", ""))
    if not completed:
        ui["inform"](f"Progress saved to {session_path}.")
        return 0
    _finish(cfg, library, settings, sm.session)
    return 0


def _require_session(cfg: Dict[str, Any]) -> Optional[Session]:
    session = _load_current(cfg)
    if session is None:
        print("No saved session. Start one with `taste-explorer run`.")
    return session


def _cmd_summary(args) -> int:
    cfg, library, settings = _setup(args)
    session = _require_session(cfg)
    if session is None:
        return 1
    print(format_summary(derive_profile(session, library, settings), library))
    return 0


def _cmd_export(args) -> int:
    cfg, library, settings = _setup(args)
    session = _require_session(cfg)
    if session is None:
        return 1
    write_export(session, derive_profile(session, library, settings), args.out or cfg["report"]["export_dir"])
    return 0


def _cmd_report(args) -> int:
    cfg, library, settings = _setup(args)
    session = _require_session(cfg)
    if session is None:
        return 1
    profile = derive_profile(session, library, settings)
    client_id = args.client or session.client_id
    partner = alignment = None
    labels = ("Client", "Partner")
    if client_id and partner_client_id(client_id):
        partner = _stored_profile(cfg, library, settings, partner_client_id(client_id))
        if partner is not None:
            alignment = compare_profiles(profile, partner, settings, {c.id: c.name for c in library.categories.values()})
            labels = (own_role_label(client_id), partner_role_label(client_id))
    out = Path(args.out) if args.out else Path(cfg["report"]["output_dir"]) / f"taste-report-{session.session_id}.pdf"
    write_report(session, profile, library, out, client_id=client_id, partner=partner, alignment=alignment, role_labels=labels)
    return 0


def _cmd_compare(args) -> int:
    cfg, library, settings = _setup(args)
    first = _stored_profile(cfg, library, settings, args.client)
    other_id = args.other or partner_client_id(args.client)
    if first is None or not other_id:
        print(f"No stored profile pair for '{args.client}'. Known clients: {', '.join(list_profiles(cfg['storage']['profiles_dir'])) or 'none'}")
        return 1
    second = _stored_profile(cfg, library, settings, other_id)
    if second is None:
        print(f"No stored profile for '{other_id}'.")
        return 1
    report = compare_profiles(first, second, settings, {c.id: c.name for c in library.categories.values()})
    print(format_alignment(report, (args.client, other_id)))
    return 0


def _cmd_quads(args) -> int:
    cfg, library, _ = _setup(args)
    vis = _visibility(cfg, library)
    if args.action == "stats":
        stats = library.stats()
        print(f"{stats['totalCategories']} categories, {stats['totalQuads']} quads, {stats['totalImages']} images")
        for row in stats["byCategory"]:
            enabled = vis.enabled_count(row["category"])
            print(f"  {row['category']:<22} {enabled}/{row['quadCount']} enabled")
        return 0
    if args.action == "list":
        quads = library.quads_by_category(args.target) if args.target else list(library.quads.values())
        for q in quads:
            flag = "x" if vis.is_enabled(q.quad_id) else " "
            print(f"[{flag}] {q.quad_id:<28} {q.title}")
        return 0
    if not args.target:
        print("ERROR: a quad id or category is required.")
        return 2
    enable = args.action == "enable"
    try:
        if args.target in library.categories:
            n = vis.set_category(args.target, enable)
            print(f"{'Enabled' if enable else 'Disabled'} {n} quads in {args.target}.")
        else:
            vis.set_enabled(args.target, enable)
            print(f"{'Enabled' if enable else 'Disabled'} {args.target}.")
    except KeyError as e:
        print(f"ERROR: {e.args[0]}")
        return 2
    return 0


def _cmd_history(args) -> int:
    cfg, _, _ = _setup(args)
    from storage import choice_summary, export_ndjson, load_all, load_sessions

    history_dir = Path(cfg["storage"]["history_dir"])
    df = load_all(history_dir)
    sessions = load_sessions(history_dir)
    print(f"{len(sessions)} sessions, {len(df)} selections recorded.")
    if not df.empty:
        print(choice_summary(df).to_string(index=False, float_format=lambda v: f"{v:.2f}"))
    if args.ndjson:
        export_ndjson(df, Path(args.ndjson))
        print(f"NDJSON written: {args.ndjson}")
    return 0


def _cmd_reset(args) -> int:
    cfg, _, _ = _setup(args)
    if clear_session(cfg["session"]["path"]):
        print("Saved session cleared.")
    else:
        print("No saved session.")
    return 0


def main(argv: list[str] | None = None, ui: Ui | None = None) -> int:
    p = argparse.ArgumentParser(prog="taste-explorer")
    p.add_argument("--version", action="version", version=f"taste-explorer {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add(name: str, **kw) -> argparse.ArgumentParser:
        sp = sub.add_parser(name, **kw)
        sp.add_argument("--config", default=None)
        sp.add_argument("--explain", action="store_true")
        return sp

    rp = add("run", help="Explore quads interactively (resumes a saved session)")
    rp.add_argument("--client", default=None, help="Client id, e.g. Thornwood-P")
    rp.add_argument("--mode", choices=sorted(("pick", "rank")), default=None)
    rp.add_argument("--new", action="store_true", help="Ignore any saved session")

    add("summary", help="Print the derived profile of the saved session")

    ep = add("export", help="Write the JSON export")
    ep.add_argument("--out", default=None, help="Output directory")

    rep = add("report", help="Write the PDF report")
    rep.add_argument("--out", default=None, help="Output file")
    rep.add_argument("--client", default=None)

    cp = add("compare", help="Compare two stored client profiles")
    cp.add_argument("client")
    cp.add_argument("other", nargs="?", default=None, help="Defaults to the partner id")

    qp = add("quads", help="Inspect or toggle quads")
    qp.add_argument("action", choices=["list", "enable", "disable", "stats"])
    qp.add_argument("target", nargs="?", default=None, help="Quad id or category")

    hp = add("history", help="Summarize recorded selection history")
    hp.add_argument("--ndjson", default=None, help="Also export rows as NDJSON")

    add("reset", help="Clear the saved session")

    args = p.parse_args(argv)

    if args.cmd == "run":
        return _cmd_run(args, ui or _default_ui())
    handlers = {
        "summary": _cmd_summary,
        "export": _cmd_export,
        "report": _cmd_report,
        "compare": _cmd_compare,
        "quads": _cmd_quads,
        "history": _cmd_history,
        "reset": _cmd_reset,
    }
    return handlers[args.cmd](args)


if __name__ == "__main__":
    raise SystemExit(main())
