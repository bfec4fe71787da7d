from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Mapping, Optional, Sequence

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.duty import Duty
from crew_scheduling.domain.employee import Employee
from crew_scheduling.domain.flight import Flight
from crew_scheduling.domain.reference import ReferenceData

if TYPE_CHECKING:
    from crew_scheduling.domain.roster import Roster


def _check_airport(reference: ReferenceData, code: str, where: str) -> None:
    if not reference.has_airport(code):
        raise ValueError(
            f"{where}: airport {code} does not exist in the airports "
            f"({sorted(reference.airports)})"
        )


def validate_reference(
    reference: ReferenceData,
    taxi: Optional[Mapping[str, Mapping[str, int]]] = None,
) -> None:
    if not reference.max_fdp.rules:
        raise ValueError("MaxFDP table is empty")

    for origin, destinations in (taxi or {}).items():
        _check_airport(reference, origin, "Taxi time")
        for destination, minutes in destinations.items():
            _check_airport(reference, destination, f"Taxi time from {origin}")
            if minutes < 0:
                raise ValueError(f"Taxi time {origin}->{destination} must be >= 0")

    for (origin, destination), options in reference.repositioning_flights.items():
        _check_airport(reference, origin, "Repositioning flight")
        _check_airport(reference, destination, "Repositioning flight")
        for rf in options:
            if not rf.days_of_week:
                raise ValueError(f"Repositioning flight {origin}->{destination} never operates")


def validate_flights(
    flights: Sequence[Flight],
    assignments: Sequence[FlightAssignment],
    reference: ReferenceData,
) -> None:
    ids = [f.flight_id for f in flights]
    if len(set(ids)) != len(ids):
        raise ValueError("Duplicate flight number on the same departure date in flights.json")

    for f in flights:
        _check_airport(reference, f.departure_airport, f"Flight {f.flight_id}")
        _check_airport(reference, f.arrival_airport, f"Flight {f.flight_id}")
        if f.arrival_utc <= f.departure_utc:
            raise ValueError(f"Flight {f.flight_id} must depart before it arrives")

    for a in assignments:
        if not a.required_skill:
            raise ValueError(f"Assignment {a.assignment_id} has no required skill")


def validate_employees(employees: Sequence[Employee], reference: ReferenceData) -> None:
    ids = [e.employee_id for e in employees]
    if len(set(ids)) != len(ids):
        raise ValueError("Duplicate employee_id found in employees.json")

    for e in employees:
        _check_airport(reference, e.home_airport, f"Employee {e.employee_id} home airport")
        if not e.skills:
            raise ValueError(f"skills empty for employee {e.employee_id}")


def validate_ground_duties(duties: Sequence[Duty]) -> None:
    for d in duties:
        if not d.ground_code:
            raise ValueError(f"Ground duty {d.duty_id} has no code")
        if d.ground_end < d.ground_start:
            raise ValueError(f"Ground duty {d.ground_code} of {d.duty_id} ends before it starts")


def validate_solution(solution: Dict[str, Optional[str]], roster: "Roster") -> None:
    for assignment_id, employee_id in solution.items():
        if assignment_id not in roster.assignments:
            raise ValueError(f"Solution references unknown assignment: {assignment_id}")
        if employee_id is not None and employee_id not in roster.employees:
            raise ValueError(
                f"Solution assigns {assignment_id} to unknown employee: {employee_id}"
            )
