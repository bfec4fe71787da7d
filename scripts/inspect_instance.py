from __future__ import annotations

import argparse
import logging
from collections import Counter
from pathlib import Path

from crew_scheduling.preprocessing.loaders import load_roster
from crew_scheduling.solver.repositioning_gaps import find_repositioning_gaps


DEFAULT_INSTANCE_DIR = Path("data/sample")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--instance-dir",
        type=Path,
        default=DEFAULT_INSTANCE_DIR,
        help="Path to instance folder (default: data/sample)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args()
    configure_logging(args.log_level)

    # validation happens while loading
    scenario, roster = load_roster(args.instance_dir)

    print(f"Schedule: {scenario.schedule_first_date} .. {scenario.schedule_last_date}")
    print(f"Airports: {len(roster.reference.airports)}")
    print(f"Flights: {len(roster.flights)}")
    print(f"Seats: {len(roster.assignments)} ({len(roster.unassigned())} unassigned)")
    print("Seats by skill:", dict(Counter(a.required_skill for a in roster.assignments.values())))

    flights_by_day = Counter(f.departure_date for f in roster.flights)
    print("Flights by day:", {str(d): n for d, n in sorted(flights_by_day.items())})

    print(f"Employees: {len(roster.employees)}")
    print("Employees by home airport:", dict(Counter(e.home_airport for e in roster.employees.values())))

    for e in sorted(roster.employees.values(), key=lambda e: e.employee_id):
        ground = sum(1 for d in e.iter_duties() if d.is_ground_duty)
        gaps = find_repositioning_gaps(e, roster.reference)
        print(
            f"  {e.employee_id}: {e.assignment_count} seats, {ground} ground duties, "
            f"{len(e.unavailable_days)} days off, {len(gaps)} repositioning gaps"
        )


if __name__ == "__main__":
    main()
