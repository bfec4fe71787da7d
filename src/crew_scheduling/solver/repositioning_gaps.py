from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from itertools import pairwise
from typing import List, Optional, Tuple

from crew_scheduling.domain.airport import RepositioningFlight
from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.employee import Employee
from crew_scheduling.domain.reference import ReferenceData


@dataclass(frozen=True)
class RepositioningGap:
    """
    Two consecutive legs of an employee on different days, where the
    arrival airport of the first cannot reach the departure airport of the
    second by ground.

    ``options`` lists the commercial flights operating on ``travel_date``
    (the day after the first leg departed) between the two airports.
    """
    previous: FlightAssignment
    following: FlightAssignment
    travel_date: date
    options: Tuple[RepositioningFlight, ...]

    @property
    def origin(self) -> str:
        return self.previous.flight.arrival_airport

    @property
    def destination(self) -> str:
        return self.following.flight.departure_airport

    @property
    def is_fillable(self) -> bool:
        return bool(self.options)

    @property
    def first_option(self) -> Optional[RepositioningFlight]:
        return self.options[0] if self.options else None


def gap_between(
    previous: FlightAssignment,
    following: FlightAssignment,
    reference: ReferenceData,
) -> Optional[RepositioningGap]:
    if following.flight.departure_date <= previous.flight.departure_date:
        return None
    origin = previous.flight.arrival_airport
    destination = following.flight.departure_airport
    if origin == destination or reference.taxi_minutes(origin, destination) is not None:
        return None
    travel_date = previous.flight.departure_date + timedelta(days=1)
    options = reference.repositioning_options(origin, destination, travel_date)
    return RepositioningGap(
        previous=previous,
        following=following,
        travel_date=travel_date,
        options=tuple(options),
    )


def find_repositioning_gaps(employee: Employee, reference: ReferenceData) -> List[RepositioningGap]:
    """Scan the whole time-ordered view of ``employee``."""
    gaps: List[RepositioningGap] = []
    for previous, following in pairwise(employee.iter_assignments()):
        gap = gap_between(previous, following, reference)
        if gap is not None:
            gaps.append(gap)
    return gaps


def gaps_around(
    employee: Employee,
    assignment: FlightAssignment,
    reference: ReferenceData,
) -> List[RepositioningGap]:
    """
    Gaps on either side of one assignment, found through the chronological
    neighbours only. Useful right after an ownership change.
    """
    gaps: List[RepositioningGap] = []
    previous = employee.previous_assignment(assignment)
    following = employee.next_assignment(assignment)
    if previous is not None:
        gap = gap_between(previous, assignment, reference)
        if gap is not None:
            gaps.append(gap)
    if following is not None:
        gap = gap_between(assignment, following, reference)
        if gap is not None:
            gaps.append(gap)
    return gaps
