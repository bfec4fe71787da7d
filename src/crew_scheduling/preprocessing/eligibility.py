from __future__ import annotations

from typing import Dict, List, Tuple

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.employee import Employee


def is_eligible(employee: Employee, assignment: FlightAssignment) -> bool:
    flight = assignment.flight
    return (
        employee.has_skill(assignment.required_skill)
        and employee.is_qualified_for(flight.aircraft_type)
        and employee.is_available(flight.departure_date)
    )


def compute_eligibility(
        employees: List[Employee],
        assignments: List[FlightAssignment],
) -> Dict[Tuple[str, str], bool]:
    """
    Returns dict[(employee_id, assignment_id)] = True/False.
    An employee is eligible for a seat if they:
    - Hold the required skill
    - Are qualified for the aircraft type
    - Are available on the departure date
    """
    eligible: Dict[Tuple[str, str], bool] = {}

    for e in employees:
        for a in assignments:
            eligible[(e.employee_id, a.assignment_id)] = is_eligible(e, a)

    return eligible
