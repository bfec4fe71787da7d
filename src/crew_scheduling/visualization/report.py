from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import ListedColormap
import pandas as pd

from crew_scheduling.domain.duty import GROUND_DUTY_CODE
from crew_scheduling.domain.roster import Roster
from crew_scheduling.domain.time_zones import REFERENCE_TZ, minutes, to_reference_zone
from crew_scheduling.legality.duty_rules import (
    block_minutes,
    flight_duty_period,
    home_base_inconvenience,
    is_day_after_ground_or_holiday,
    is_day_before_ground_or_holiday,
    is_late_arrival,
    is_night_duty,
    no_local_night,
    over_max_fdp,
    rest_lack,
)
from crew_scheduling.legality.employee_rules import (
    MAX_CONNECTION_TAXI_MINUTES,
    connection_status,
    flight_duration_total_minutes,
    is_first_assignment_departing_from_home,
    is_last_assignment_arriving_at_home,
    total_day_off_encroachment,
)
from crew_scheduling.legality.overlap import ground_overlap_minutes
from crew_scheduling.preprocessing.loaders import Scenario

# calendar cell codes
EMPTY, FLIGHT, GROUND, DAY_OFF, VIOLATION = 0, 1, 2, 3, 4

cmap = ListedColormap([
    "#f2f2f2",  # 0 = nothing (light grey)
    "#2ca02c",  # 1 = flight duty (green)
    "#1f77b4",  # 2 = ground duty (blue)
    "#ff7f0e",  # 3 = day off (orange)
    "#d62728",  # 4 = flight duty with FDP / rest violation (red)
])

DUTY_METRIC_COLUMNS = [
    "employee_id", "date", "code", "segments", "start", "end",
    "block_minutes", "fdp_minutes", "fdp_limit_minutes", "over_max_fdp",
    "rest_lack", "home_base_inconvenience", "ground_overlap",
    "day_before_ground_or_holiday", "day_after_ground_or_holiday",
    "late_arrival", "night_duty", "no_local_night",
]


@dataclass(frozen=True)
class ReportFrames:
    calendar_matrix: pd.DataFrame
    duty_metrics: pd.DataFrame
    workloads: pd.DataFrame


def build_report_frames(roster: Roster, scenario: Optional[Scenario] = None) -> ReportFrames:
    tz = scenario.reference_tz if scenario is not None else REFERENCE_TZ
    max_taxi = scenario.max_connection_taxi_minutes if scenario is not None else MAX_CONNECTION_TAXI_MINUTES
    ground_code = scenario.ground_duty_code if scenario is not None else GROUND_DUTY_CODE

    employees = sorted(roster.employees.values(), key=lambda e: e.employee_id)
    days = roster.horizon_dates()
    max_fdp = roster.reference.max_fdp

    # --- Duty metrics (one row per flight duty) ---
    rows = []
    for e in employees:
        for duty in e.iter_duties():
            if not duty.is_flight_duty:
                continue
            fdp = flight_duty_period(duty)
            local_start = to_reference_zone(duty.start, tz).time()
            limit = max_fdp.max_fdp(local_start, duty.segments)
            rows.append(
                {
                    "employee_id": e.employee_id,
                    "date": duty.date,
                    "code": duty.code,
                    "segments": duty.segments,
                    "start": duty.start,
                    "end": duty.end,
                    "block_minutes": block_minutes(duty),
                    "fdp_minutes": minutes(fdp) if fdp is not None else 0,
                    "fdp_limit_minutes": minutes(limit),
                    "over_max_fdp": over_max_fdp(duty, max_fdp, tz),
                    "rest_lack": rest_lack(duty, e.next_duty(duty), e),
                    "home_base_inconvenience": home_base_inconvenience(duty, e, roster.reference),
                    "ground_overlap": ground_overlap_minutes(duty),
                    "day_before_ground_or_holiday": is_day_before_ground_or_holiday(duty, e, ground_code),
                    "day_after_ground_or_holiday": is_day_after_ground_or_holiday(duty, e, ground_code),
                    "late_arrival": is_late_arrival(duty),
                    "night_duty": is_night_duty(duty),
                    "no_local_night": no_local_night(duty, e.previous_duty(duty)),
                }
            )
    duty_metrics = (
        pd.DataFrame(rows).sort_values(["employee_id", "date"])
        if rows
        else pd.DataFrame(columns=DUTY_METRIC_COLUMNS)
    )

    # --- Calendar matrix (employee x date) ---
    violating = set()
    if rows:
        bad = duty_metrics[(duty_metrics["over_max_fdp"] > 0) | (duty_metrics["rest_lack"] > 0)]
        violating = set(zip(bad["employee_id"], bad["date"]))

    codes = np.zeros((len(employees), len(days)), dtype=int)
    for i, e in enumerate(employees):
        for j, day in enumerate(days):
            duty = e.duty_on(day)
            if duty is not None and duty.is_flight_duty:
                codes[i, j] = VIOLATION if (e.employee_id, day) in violating else FLIGHT
            elif duty is not None and duty.has_code:
                codes[i, j] = GROUND
            elif not e.is_available(day):
                codes[i, j] = DAY_OFF
    calendar_matrix = pd.DataFrame(
        codes,
        index=[e.employee_id for e in employees],
        columns=days,
    )
    calendar_matrix.index.name = "employee_id"

    # --- Workloads (one row per employee) ---
    workload_rows = []
    for e in employees:
        status = connection_status(e, roster.reference, max_taxi)
        workload_rows.append(
            {
                "employee_id": e.employee_id,
                "name": e.name,
                "home_airport": e.home_airport,
                "assignments": e.assignment_count,
                "flight_minutes": flight_duration_total_minutes(e),
                "invalid_connections": status.invalid_connections,
                "taxi_minutes": status.taxi_minutes,
                "day_off_encroachment": total_day_off_encroachment(e, tz),
                "starts_at_home": is_first_assignment_departing_from_home(e),
                "ends_at_home": is_last_assignment_arriving_at_home(e),
            }
        )
    workloads = pd.DataFrame(workload_rows)

    return ReportFrames(
        calendar_matrix=calendar_matrix,
        duty_metrics=duty_metrics,
        workloads=workloads,
    )


def plot_fdp_utilization(frames: ReportFrames, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)

    dm = frames.duty_metrics
    if dm.empty:
        return
    utilization = 100.0 * dm["fdp_minutes"].astype(float) / dm["fdp_limit_minutes"].astype(float)

    plt.figure()
    plt.hist(utilization, bins=10)
    plt.axvline(100.0, linestyle="--", color="#d62728")
    plt.title(f"FDP utilisation\nMean: {utilization.mean():.1f}% | Over limit: {int((utilization > 100).sum())}")
    plt.xlabel("Flight duty period / MaxFDP (%)")
    plt.ylabel("Duties")
    plt.tight_layout()
    plt.savefig(out_dir / "fdp_utilization.png", dpi=200)
    plt.close()


def save_plots(frames: ReportFrames, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)

    # 1) Duty calendar "heatmap" (employee x date)
    cm = frames.calendar_matrix
    fig, ax = plt.subplots(figsize=(12, 6))

    ax.imshow(cm.values, aspect="auto", cmap=cmap, vmin=0, vmax=4)

    ax.set_yticks(range(len(cm.index)))
    ax.set_yticklabels(cm.index, fontsize=11)
    ax.set_xticks(range(len(cm.columns)))
    ax.set_xticklabels([d.strftime("%m-%d") for d in cm.columns], fontsize=9, rotation=90)

    ax.set_xlabel("Date", fontsize=12)
    ax.set_ylabel("Employee", fontsize=12)
    ax.set_title("Duty Calendar", fontsize=16, fontweight="bold")

    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

    legend_patches = [
        mpatches.Patch(color="#f2f2f2", label="No duty"),
        mpatches.Patch(color="#2ca02c", label="Flight duty"),
        mpatches.Patch(color="#1f77b4", label="Ground duty"),
        mpatches.Patch(color="#ff7f0e", label="Day off"),
        mpatches.Patch(color="#d62728", label="FDP / rest violation"),
    ]
    ax.legend(
        handles=legend_patches,
        fontsize=11,
        loc="upper left",
        bbox_to_anchor=(1.02, 1),
        borderaxespad=0,
    )

    plt.tight_layout()
    plt.savefig(out_dir / "duty_calendar.png", dpi=200, bbox_inches="tight")
    plt.close()

    # 2) Flight minutes per employee
    if not frames.workloads.empty:
        plt.figure(figsize=(12, 6))
        plt.bar(frames.workloads["employee_id"], frames.workloads["flight_minutes"])
        plt.xlabel("Employee")
        plt.ylabel("Flight minutes")
        plt.title("Flight time per employee")
        plt.tight_layout()
        plt.savefig(out_dir / "flight_minutes.png", dpi=160)
        plt.close()

    plot_fdp_utilization(frames, out_dir)


def save_tables(frames: ReportFrames, out_dir: Path) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = [
        out_dir / "calendar_matrix.csv",
        out_dir / "duty_metrics.csv",
        out_dir / "workloads.csv",
    ]
    frames.calendar_matrix.to_csv(paths[0])
    frames.duty_metrics.to_csv(paths[1], index=False)
    frames.workloads.to_csv(paths[2], index=False)
    return paths
