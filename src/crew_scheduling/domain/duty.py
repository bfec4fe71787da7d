from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from crew_scheduling.domain.assignment import FlightAssignment, SortKey

FLIGHT_DUTY_CODE = "FLT"
GROUND_DUTY_CODE = "GND"


def _sort_key(a: FlightAssignment) -> SortKey:
    return a.sort_key


def duty_id_for(employee_id: str, day: date) -> str:
    return f"{employee_id}@{day.isoformat()}"


@dataclass(eq=False)
class Duty:
    """
    Everything one employee does on one calendar date.

    A flight duty groups the employee's assignments whose flight *departs*
    on ``date``, kept sorted by ``FlightAssignment.sort_key``. A pre-assigned
    ground/rest duty carries a code and an explicit interval and no
    assignments.

    ``start``, ``end``, ``last_flight_arrival`` and ``code`` are derived
    fields. They are only written by the assignment listener, which
    brackets every write with change notifications.

    Attributes
    ----------
    duty_id : str
        "<employee_id>@<date>".
    employee_id : str
        Owner of the duty (non-owning handle into the roster registry).
    date : date
        Fixed at creation.
    assignments : List[FlightAssignment]
        Ordered, duplicate-free.
    start : Optional[datetime]
        First departure minus sign-in, or the ground start.
    end : Optional[datetime]
        Last arrival plus sign-off, or the ground end.
    last_flight_arrival : Optional[datetime]
        Last arrival without sign-off (FDP end).
    code : Optional[str]
        "FLT" for flight duties, the ground code for ground duties.
    ground_code, ground_start, ground_end
        Pre-assigned activity loaded with the problem, never mutated.
    """
    duty_id: str
    employee_id: str
    date: date
    assignments: List[FlightAssignment] = field(default_factory=list)
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    last_flight_arrival: Optional[datetime] = None
    code: Optional[str] = None
    ground_code: Optional[str] = None
    ground_start: Optional[datetime] = None
    ground_end: Optional[datetime] = None

    @classmethod
    def placeholder(cls, employee_id: str, day: date) -> "Duty":
        return cls(duty_id=duty_id_for(employee_id, day), employee_id=employee_id, date=day)

    @classmethod
    def ground(
        cls,
        employee_id: str,
        code: str,
        start: datetime,
        end: datetime,
    ) -> "Duty":
        day = start.date()
        return cls(
            duty_id=duty_id_for(employee_id, day),
            employee_id=employee_id,
            date=day,
            start=start,
            end=end,
            code=code,
            ground_code=code,
            ground_start=start,
            ground_end=end,
        )

    # --- membership ---

    @property
    def is_flight_duty(self) -> bool:
        return bool(self.assignments)

    @property
    def is_ground_duty(self) -> bool:
        return self.ground_code is not None

    @property
    def has_code(self) -> bool:
        return self.code is not None

    @property
    def segments(self) -> int:
        return len(self.assignments)

    @property
    def first_assignment(self) -> Optional[FlightAssignment]:
        return self.assignments[0] if self.assignments else None

    @property
    def last_assignment(self) -> Optional[FlightAssignment]:
        return self.assignments[-1] if self.assignments else None

    def index_of(self, assignment: FlightAssignment) -> int:
        """Position of ``assignment`` in the ordered list, -1 if absent."""
        i = bisect_left(self.assignments, assignment.sort_key, key=_sort_key)
        if i < len(self.assignments) and self.assignments[i] is assignment:
            return i
        return -1

    def __contains__(self, assignment: FlightAssignment) -> bool:
        return self.index_of(assignment) >= 0

    def add_assignment(self, assignment: FlightAssignment) -> bool:
        i = bisect_left(self.assignments, assignment.sort_key, key=_sort_key)
        if i < len(self.assignments) and self.assignments[i] is assignment:
            return False
        self.assignments.insert(i, assignment)
        return True

    def remove_assignment(self, assignment: FlightAssignment) -> bool:
        i = self.index_of(assignment)
        if i < 0:
            return False
        del self.assignments[i]
        return True

    def count_before(self, key: SortKey) -> int:
        return bisect_left(self.assignments, key, key=_sort_key)

    def count_up_to(self, key: SortKey) -> int:
        return bisect_right(self.assignments, key, key=_sort_key)

    def __repr__(self) -> str:
        return (
            f"Duty(code={self.code}, date={self.date}, employee={self.employee_id}, "
            f"assignments={[a.assignment_id for a in self.assignments]})"
        )
