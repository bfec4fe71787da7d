from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Tuple

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.employee import Employee


@dataclass(frozen=True)
class CoverageIssue:
    assignment_id: str
    flight_id: str
    required_skill: str
    aircraft_type: str
    eligible_count: int


@dataclass(frozen=True)
class FlightCoverageIssue:
    flight_id: str
    seats: int
    available_total: int
    assignment_ids: List[str]
    available_employee_ids: List[str]


def check_coverage_feasibility(
    employees: List[Employee],
    assignments: List[FlightAssignment],
    eligible: Dict[Tuple[str, str], bool],
) -> List[CoverageIssue]:
    """
    For each seat, verify at least one employee is eligible.
    Returns a list of issues (empty => every seat can be covered).
    """
    issues: List[CoverageIssue] = []

    for a in assignments:
        count = sum(
            1 for e in employees if eligible.get((e.employee_id, a.assignment_id), False)
        )
        if count == 0:
            issues.append(
                CoverageIssue(
                    assignment_id=a.assignment_id,
                    flight_id=a.flight.flight_id,
                    required_skill=a.required_skill,
                    aircraft_type=a.flight.aircraft_type,
                    eligible_count=count,
                )
            )

    issues.sort(key=lambda x: (x.flight_id, x.assignment_id))
    return issues


def check_flight_coverage_feasibility(
    employees: List[Employee],
    assignments: List[FlightAssignment],
    eligible: Dict[Tuple[str, str], bool],
) -> List[FlightCoverageIssue]:
    """
    For each flight, verify that enough distinct employees are eligible for
    its seats: nobody can hold two seats of the same flight.
    """
    issues: List[FlightCoverageIssue] = []

    seats_by_flight: Dict[str, List[FlightAssignment]] = defaultdict(list)
    for a in assignments:
        seats_by_flight[a.flight.flight_id].append(a)

    for flight_id, seats in seats_by_flight.items():
        available = sorted(
            {
                e.employee_id
                for e in employees
                for a in seats
                if eligible.get((e.employee_id, a.assignment_id), False)
            }
        )
        if len(available) < len(seats):
            issues.append(
                FlightCoverageIssue(
                    flight_id=flight_id,
                    seats=len(seats),
                    available_total=len(available),
                    assignment_ids=sorted(a.assignment_id for a in seats),
                    available_employee_ids=available,
                )
            )

    # Sort: biggest shortage first
    issues.sort(key=lambda x: (x.available_total - x.seats, x.flight_id))
    return issues
