from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right, insort
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, FrozenSet, Iterator, List, Optional, Set

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.duty import Duty

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Employee:
    """
    Represents a crew member and their calendar of duties.

    Attributes
    ----------
    employee_id : str
        Unique handle, used as ``FlightAssignment.owner``.
    name : str
        Display name.
    home_airport : str
        Home base IATA code.
    skills : FrozenSet[str]
        Seat skills the employee can fill (e.g. "CP", "FO").
    aircraft_type_qualifications : FrozenSet[str]
        Aircraft types the employee may operate.
    special_qualifications : FrozenSet[str]
        Free-form extra qualifications.
    unavailable_days : Set[date]
        Days off / holidays.
    calendar : Dict[date, Duty]
        One duty per date, pre-populated for the whole horizon.
    """
    employee_id: str
    name: str
    home_airport: str
    skills: FrozenSet[str] = frozenset()
    aircraft_type_qualifications: FrozenSet[str] = frozenset()
    special_qualifications: FrozenSet[str] = frozenset()
    unavailable_days: Set[date] = field(default_factory=set)
    calendar: Dict[date, Duty] = field(default_factory=dict, repr=False)
    _dates: List[date] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._dates = sorted(self.calendar)

    # --- static attributes ---

    def has_skill(self, skill: str) -> bool:
        return skill in self.skills

    def is_qualified_for(self, aircraft_type: str) -> bool:
        return aircraft_type in self.aircraft_type_qualifications

    def has_special_qualification(self, qualification: str) -> bool:
        return qualification in self.special_qualifications

    def is_available(self, day: date) -> bool:
        return day not in self.unavailable_days

    # --- calendar ---

    def populate_calendar(self, first: date, last: date) -> None:
        """Create an empty placeholder duty for every missing date in [first, last]."""
        day = first
        while day <= last:
            if day not in self.calendar:
                self._put(Duty.placeholder(self.employee_id, day))
            day += timedelta(days=1)

    def place_duty(self, duty: Duty) -> None:
        """Install a pre-built (ground) duty, replacing an empty placeholder."""
        if duty.employee_id != self.employee_id:
            raise ValueError(
                f"Duty {duty.duty_id} belongs to {duty.employee_id}, not {self.employee_id}"
            )
        existing = self.calendar.get(duty.date)
        if existing is not None and (existing.is_flight_duty or existing.has_code):
            raise ValueError(f"Employee {self.employee_id} already has a duty on {duty.date}")
        self._put(duty)

    def duty_on(self, day: date) -> Optional[Duty]:
        return self.calendar.get(day)

    def ensure_duty(self, day: date) -> Duty:
        duty = self.calendar.get(day)
        if duty is None:
            logger.debug("Creating duty for %s on %s outside the horizon", self.employee_id, day)
            duty = Duty.placeholder(self.employee_id, day)
            self._put(duty)
        return duty

    def _put(self, duty: Duty) -> None:
        if duty.date not in self.calendar:
            insort(self._dates, duty.date)
        self.calendar[duty.date] = duty

    def iter_duties(self) -> Iterator[Duty]:
        for day in self._dates:
            yield self.calendar[day]

    def previous_duty(self, duty: Duty) -> Optional[Duty]:
        return self.calendar.get(duty.date - timedelta(days=1))

    def next_duty(self, duty: Duty) -> Optional[Duty]:
        return self.calendar.get(duty.date + timedelta(days=1))

    # --- time-ordered assignment view ---

    def iter_assignments(self) -> Iterator[FlightAssignment]:
        # duties group by departure date, so date order + per-duty order is global order
        for duty in self.iter_duties():
            yield from duty.assignments

    @property
    def assignment_count(self) -> int:
        return sum(d.segments for d in self.iter_duties())

    @property
    def first_assignment(self) -> Optional[FlightAssignment]:
        return next(self.iter_assignments(), None)

    @property
    def last_assignment(self) -> Optional[FlightAssignment]:
        for day in reversed(self._dates):
            duty = self.calendar[day]
            if duty.assignments:
                return duty.assignments[-1]
        return None

    def previous_assignment(self, assignment: FlightAssignment) -> Optional[FlightAssignment]:
        """Latest owned assignment ordered strictly before ``assignment``."""
        key = assignment.sort_key
        stop = bisect_right(self._dates, assignment.flight.departure_date)
        for day in reversed(self._dates[:stop]):
            duty = self.calendar[day]
            i = duty.count_before(key)
            if i > 0:
                return duty.assignments[i - 1]
        return None

    def next_assignment(self, assignment: FlightAssignment) -> Optional[FlightAssignment]:
        """Earliest owned assignment ordered strictly after ``assignment``."""
        key = assignment.sort_key
        begin = bisect_left(self._dates, assignment.flight.departure_date)
        for day in self._dates[begin:]:
            duty = self.calendar[day]
            i = duty.count_up_to(key)
            if i < len(duty.assignments):
                return duty.assignments[i]
        return None

    def __str__(self) -> str:
        return self.name
