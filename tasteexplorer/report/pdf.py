from __future__ import annotations

"""Printable PDF report: style summary, per-category cards, partner alignment."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.backends.backend_pdf import PdfPages  # noqa: E402

from ..app.explain import trace as xtrace  # noqa: E402
from ..library.quads import QuadLibrary  # noqa: E402
from ..profile import constants as C  # noqa: E402
from ..profile.compare import AlignmentReport  # noqa: E402
from ..profile.derive import DerivedProfile  # noqa: E402
from ..session.models import Session  # noqa: E402

PAGE_SIZE = (8.5, 11)
_SLIDER_COLOR = "#8a6d3b"
_TRACK_COLOR = "#e6e0d4"


def _slider(ax, y: float, value: float, left: str, right: str, title: str, second: Optional[float] = None) -> None:
    ax.plot([0, C.FIVE_POINT_MAX], [y, y], color=_TRACK_COLOR, linewidth=8, solid_capstyle="round")
    ax.plot([value], [y], marker="o", markersize=12, color=_SLIDER_COLOR)
    if second is not None:
        ax.plot([second], [y], marker="D", markersize=10, color="#4a6b8a")
    ax.text(0, y + 0.35, left, ha="left", fontsize=8, color="#555555")
    ax.text(C.FIVE_POINT_MAX, y + 0.35, right, ha="right", fontsize=8, color="#555555")
    ax.text(C.FIVE_POINT_MAX / 2, y + 0.6, f"{title}: {value:.1f} / {C.FIVE_POINT_MAX}", ha="center", fontsize=10)


def _summary_page(pdf: PdfPages, session: Session, profile: DerivedProfile, client_id: Optional[str]) -> None:
    fig = plt.figure(figsize=PAGE_SIZE)
    fig.suptitle("Taste Exploration Profile", fontsize=18, y=0.96)
    who = client_id or session.client_id or session.session_id
    fig.text(0.5, 0.915, who, ha="center", fontsize=10, color="#555555")
    fig.text(0.5, 0.87, profile.style_label, ha="center", fontsize=16, weight="bold")
    if profile.style_tags:
        fig.text(0.5, 0.84, " · ".join(profile.style_tags), ha="center", fontsize=9, color="#555555")

    ax = fig.add_axes((0.12, 0.52, 0.76, 0.28))
    ax.set_xlim(-0.3, C.FIVE_POINT_MAX + 0.3)
    ax.set_ylim(-0.5, 3 * 1.6)
    ax.axis("off")
    for i, axis in enumerate(("ct", "ml", "wc")):
        left, right = C.AXIS_POLES[axis]
        _slider(ax, (2 - i) * 1.6, profile.five_point(axis), left, right, C.AXES[axis])

    lines: List[str] = ["Top regions"]
    lines += [f"  {name} ({count})" for name, count in profile.top_regions] or ["  none recorded"]
    lines += ["", "Top materials"]
    lines += [f"  {name} ({count})" for name, count in profile.top_materials] or ["  none recorded"]
    fig.text(0.12, 0.46, "\n".join(lines), va="top", fontsize=10, family="monospace")

    cx = profile.complexity
    conf = ", ".join(f"{C.AXES[k]} {a.confidence:.0%}" for k, a in profile.axes.items())
    fig.text(
        0.55,
        0.46,
        f"Complexity sweet spot: {cx.optimal:.1f}\n"
        f"Range: {cx.range_min:.1f} – {cx.range_max:.1f}\n"
        f"Consistency: {cx.consistency:.0%}\n\n"
        f"Confidence:\n  {conf}\n\n"
        f"Selections: {profile.total_selections}  (samples {profile.sample_size})",
        va="top",
        fontsize=10,
    )
    pdf.savefig(fig)
    plt.close(fig)


def _category_page(pdf: PdfPages, profile: DerivedProfile, library: QuadLibrary) -> None:
    cards = list(profile.categories.values())
    fig = plt.figure(figsize=PAGE_SIZE)
    fig.suptitle("Space-by-Space Profile", fontsize=16, y=0.96)
    cols, rows = 2, max(1, (len(cards) + 1) // 2)
    for i, m in enumerate(cards):
        ax = fig.add_subplot(rows, cols, i + 1)
        vals = [m.ct, m.ml, m.wc]
        ax.barh([C.AXES[a] for a in ("ct", "ml", "wc")], vals, color=_SLIDER_COLOR)
        ax.set_xlim(0, C.FIVE_POINT_MAX)
        ax.invert_yaxis()
        ax.tick_params(labelsize=7)
        cat = library.categories.get(m.category_id)
        name = cat.name if cat else m.category_id
        ax.set_title(f"{name}\n{m.dominant_style} {m.dominant_label}", fontsize=8)
        if m.selections == 0:
            ax.text(C.FIVE_POINT_MAX / 2, 1, "not explored", ha="center", fontsize=7, color="#999999")
    fig.tight_layout(rect=(0, 0, 1, 0.94))
    pdf.savefig(fig)
    plt.close(fig)


def _alignment_page(
    pdf: PdfPages,
    profile: DerivedProfile,
    partner: DerivedProfile,
    report: AlignmentReport,
    labels: Tuple[str, str],
    library: QuadLibrary,
) -> None:
    fig = plt.figure(figsize=PAGE_SIZE)
    fig.suptitle("Partner Alignment", fontsize=16, y=0.96)
    fig.text(0.5, 0.9, f"Overall alignment: {report.overall_alignment}%", ha="center", fontsize=14, weight="bold")
    fig.text(0.5, 0.875, f"● {labels[0]}    ◆ {labels[1]}", ha="center", fontsize=9, color="#555555")

    ax = fig.add_axes((0.12, 0.58, 0.76, 0.26))
    ax.set_xlim(-0.3, C.FIVE_POINT_MAX + 0.3)
    ax.set_ylim(-0.5, 3 * 1.6)
    ax.axis("off")
    for i, axis in enumerate(("ct", "ml", "wc")):
        left, right = C.AXIS_POLES[axis]
        _slider(ax, (2 - i) * 1.6, profile.five_point(axis), left, right, C.AXES[axis], second=partner.five_point(axis))

    names: Dict[str, str] = {cid: c.name for cid, c in library.categories.items()}
    rows = [f"{names.get(cid, cid):<22} {pct:>3}%" for cid, pct in report.category_alignment.items()]
    fig.text(0.12, 0.52, "Category alignment\n" + "\n".join(rows), va="top", fontsize=9, family="monospace")

    if report.divergences:
        text = []
        for d in report.divergences:
            text.append(f"{d.category_name}: {d.style_p} vs {d.style_s} ({d.severity})")
            text.append(f"  {d.prompt}")
        body = "\n".join(text)
    else:
        body = "No significant style divergences."
    fig.text(0.55, 0.52, "Discussion points\n" + body, va="top", fontsize=8, wrap=True)
    pdf.savefig(fig)
    plt.close(fig)


def write_report(
    session: Session,
    profile: DerivedProfile,
    library: QuadLibrary,
    out_path: str | Path,
    *,
    client_id: Optional[str] = None,
    partner: Optional[DerivedProfile] = None,
    alignment: Optional[AlignmentReport] = None,
    role_labels: Tuple[str, str] = ("Client", "Partner"),
) -> Path:
    """Render the report to a multi-page PDF and return its path.

    The alignment page is included only when both `partner` and `alignment`
    are given.
    """
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with PdfPages(path) as pdf:
        _summary_page(pdf, session, profile, client_id)
        _category_page(pdf, profile, library)
        if partner is not None and alignment is not None:
            _alignment_page(pdf, profile, partner, alignment, role_labels, library)
    xtrace("report_written", {"session": session.session_id, "path": str(path), "partner": partner is not None})
    print(f"📄 Report written: {path}")
    return path
