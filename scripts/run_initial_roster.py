from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from crew_scheduling.preprocessing.loaders import load_roster
from crew_scheduling.solver.assignment_listener import AssignmentListener
from crew_scheduling.solver.construct_roster import solve_initial_roster
from crew_scheduling.visualization.report import build_report_frames, save_plots, save_tables


DEFAULT_INSTANCE_DIR = Path("data/sample")
DEFAULT_OUT_DIR = Path("outputs")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--instance-dir", type=Path, default=DEFAULT_INSTANCE_DIR)
    parser.add_argument("--out-dir", type=Path, default=DEFAULT_OUT_DIR)
    parser.add_argument("--time-limit", type=float, default=10.0)
    parser.add_argument("--num-workers", type=int, default=4)
    parser.add_argument("--home-base-weight", type=int, default=1)
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--no-plots", action="store_true", help="Only write the CSV tables")
    args = parser.parse_args()
    configure_logging(args.log_level)

    inst = args.instance_dir
    scenario, roster = load_roster(inst)
    listener = AssignmentListener(roster.employees)

    result = solve_initial_roster(
        roster,
        listener,
        time_limit=args.time_limit,
        num_workers=args.num_workers,
        home_base_weight=args.home_base_weight,
    )

    print("Status:", result["status"])
    if result["coverage_issues"]:
        print("Coverage issues:", result["coverage_issues"][:10])
    if result["status"] not in ("OPTIMAL", "FEASIBLE", "NOTHING_TO_DO"):
        print("No feasible roster found. Check eligibility/coverage/conflicts.")
        return
    print(f"Assigned {result['assigned']} of {result['open_seats']} open seats")

    # Print nicely
    print("\nDuties:")
    for e in sorted(roster.employees.values(), key=lambda e: e.employee_id):
        for duty in e.iter_duties():
            if duty.has_code:
                print(f"  {duty}")

    out_dir = args.out_dir
    solutions_dir = out_dir / "solutions"
    solutions_dir.mkdir(parents=True, exist_ok=True)
    out_path = solutions_dir / f"{inst.name}_solution.json"

    owners: Dict[str, Optional[str]] = {
        a.assignment_id: a.owner for a in roster.sorted_assignments()
    }
    payload = {
        "instance_dir": str(inst),
        "status": result["status"],
        "assignments": owners,
    }
    out_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"\nSaved: {out_path}")

    frames = build_report_frames(roster, scenario)
    report_dir = out_dir / "reports" / inst.name
    for path in save_tables(frames, report_dir):
        print(f"Saved: {path}")
    if not args.no_plots:
        save_plots(frames, report_dir)
        print(f"Saved plots to: {report_dir}")


if __name__ == "__main__":
    main()
