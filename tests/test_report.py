"""Smoke tests for the report frames, tables and plots."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

from crew_scheduling.preprocessing.loaders import load_roster  # noqa: E402
from crew_scheduling.solver.construct_roster import solve_initial_roster  # noqa: E402
from crew_scheduling.visualization.report import (  # noqa: E402
    DAY_OFF,
    EMPTY,
    GROUND,
    build_report_frames,
    save_plots,
    save_tables,
)

SAMPLE_DIR = Path(__file__).resolve().parents[1] / "data" / "sample"


def test_frames_before_solving() -> None:
    scenario, roster = load_roster(SAMPLE_DIR, solved=False)

    frames = build_report_frames(roster, scenario)

    cm = frames.calendar_matrix
    assert cm.shape == (6, 7)
    assert frames.duty_metrics.empty
    assert cm.loc["E1"].iloc[2] == GROUND  # SIM on 2024-06-05
    assert cm.loc["E2"].iloc[5] == DAY_OFF
    assert cm.loc["E3"].iloc[0] == EMPTY
    assert frames.workloads["assignments"].sum() == 0


def test_frames_tables_and_plots_after_solving(tmp_path: Path) -> None:
    scenario, roster = load_roster(SAMPLE_DIR, solved=False)
    solve_initial_roster(roster, time_limit=10.0)

    frames = build_report_frames(roster, scenario)

    assert frames.workloads["assignments"].sum() == 20
    assert len(frames.duty_metrics) >= 4
    assert (frames.duty_metrics["fdp_limit_minutes"] > 0).all()
    assert (frames.duty_metrics["over_max_fdp"] >= 0).all()

    paths = save_tables(frames, tmp_path)
    assert all(p.exists() for p in paths)

    save_plots(frames, tmp_path)
    assert (tmp_path / "duty_calendar.png").exists()
    assert (tmp_path / "fdp_utilization.png").exists()
    assert (tmp_path / "flight_minutes.png").exists()
