"""
echeancier.viz
==============

Minimal plotting helpers for dashboards and README screenshots: how many
obligations are upcoming / due / overdue at a reference date, and how they
split across workflow statuses.

Outputs are PNGs written to the *images/* folder (created on first
write).  Filenames can be overridden via keyword argument.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .classifier import Instant  # noqa: E402
from .engine import statistics, workflow_summary  # noqa: E402
from .models import Obligation, TemporalStatus, WorkflowStatus  # noqa: E402

# default output dir
_IMG_DIR = Path("images")

_TEMPORAL_COLORS = {
    TemporalStatus.UPCOMING: "#3B82F6",
    TemporalStatus.DUE: "#F59E0B",
    TemporalStatus.OVERDUE: "#EF4444",
}
_WORKFLOW_COLORS = {
    WorkflowStatus.PENDING: "#F59E0B",
    WorkflowStatus.COMPLETED: "#10B981",
    WorkflowStatus.OVERDUE: "#EF4444",
    WorkflowStatus.CANCELLED: "#6B7280",
}


def _bar_chart(labels: Sequence[str], counts: Sequence[int], colors: Sequence[str],
               title: str, out_path: Path) -> Path:
    plt.figure()
    bars = plt.bar(labels, counts, color=colors, edgecolor="#333")
    # add counts on top of each bar
    for rect, cnt in zip(bars, counts):
        plt.text(rect.get_x() + rect.get_width() / 2,
                 rect.get_height() + 0.05,
                 str(cnt), ha="center", va="bottom", fontsize=9)
    plt.title(title)
    plt.ylabel("Obligations")
    plt.tight_layout()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_path, dpi=120)
    plt.close()
    return out_path


# ---------------------------------------------------------------------
# Plot 1 – upcoming / due / overdue at a reference date
# ---------------------------------------------------------------------
def temporal_summary(
    obligations: Iterable[Obligation],
    now: Instant,
    out_path: str | os.PathLike = _IMG_DIR / "temporal_snapshot.png",
) -> Path:
    """
    Generate a bar chart of the temporal partition at *now*.

    Parameters
    ----------
    obligations : iterable of Obligation
        The collection to summarise.
    now : date or datetime
        Reference instant for the classification.
    out_path : str or Path, default='images/temporal_snapshot.png'
        Where to save the PNG.

    Returns
    -------
    pathlib.Path
        Final image path for convenience.
    """
    stats = statistics(obligations, now)
    order = [TemporalStatus.UPCOMING, TemporalStatus.DUE, TemporalStatus.OVERDUE]
    counts = [getattr(stats, s.value) for s in order]
    return _bar_chart([s.value for s in order], counts,
                      [_TEMPORAL_COLORS[s] for s in order],
                      f"Obligations at {now:%Y-%m-%d}", Path(out_path))


# ---------------------------------------------------------------------
# Plot 2 – persisted workflow status
# ---------------------------------------------------------------------
def workflow_chart(
    obligations: Iterable[Obligation],
    out_path: str | os.PathLike = _IMG_DIR / "workflow_snapshot.png",
) -> Path:
    """Bar chart of obligation counts per workflow status."""
    summary = workflow_summary(obligations)
    order = list(WorkflowStatus)
    counts = [getattr(summary, s.value) for s in order]
    return _bar_chart([s.value for s in order], counts,
                      [_WORKFLOW_COLORS[s] for s in order],
                      "Workflow status", Path(out_path))
