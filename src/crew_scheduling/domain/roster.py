from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.employee import Employee
from crew_scheduling.domain.flight import Flight
from crew_scheduling.domain.reference import ReferenceData


@dataclass
class Roster:
    """
    The whole working copy of a scheduling problem.

    Entities reference each other by id; this object owns one registry per
    entity kind so every handle resolves in O(1). Parallel searches work on
    independent deep copies; ``reference`` is read-only and may be shared.
    """
    schedule_first_date: date
    schedule_last_date: date
    reference: ReferenceData
    flights: Dict[str, Flight] = field(default_factory=dict)
    assignments: Dict[str, FlightAssignment] = field(default_factory=dict)
    employees: Dict[str, Employee] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        schedule_first_date: date,
        schedule_last_date: date,
        reference: ReferenceData,
        flights: Iterable[Flight],
        assignments: Iterable[FlightAssignment],
        employees: Iterable[Employee],
    ) -> "Roster":
        roster = cls(
            schedule_first_date=schedule_first_date,
            schedule_last_date=schedule_last_date,
            reference=reference,
            flights={f.flight_id: f for f in flights},
            assignments={a.assignment_id: a for a in assignments},
            employees={e.employee_id: e for e in employees},
        )
        roster.populate_calendars()
        return roster

    def horizon_dates(self) -> List[date]:
        n = (self.schedule_last_date - self.schedule_first_date).days
        return [self.schedule_first_date + timedelta(days=i) for i in range(n + 1)]

    def populate_calendars(self) -> None:
        for employee in self.employees.values():
            employee.populate_calendar(self.schedule_first_date, self.schedule_last_date)

    def employee(self, employee_id: str) -> Employee:
        return self.employees[employee_id]

    def assignment(self, assignment_id: str) -> FlightAssignment:
        return self.assignments[assignment_id]

    def sorted_assignments(self) -> List[FlightAssignment]:
        return sorted(self.assignments.values(), key=lambda a: a.sort_key)

    def unassigned(self) -> List[FlightAssignment]:
        return [a for a in self.sorted_assignments() if a.owner is None]
