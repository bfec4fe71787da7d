from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta, tzinfo
from typing import Optional

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.employee import Employee
from crew_scheduling.domain.reference import ReferenceData
from crew_scheduling.domain.time_zones import REFERENCE_TZ, minutes, to_reference_zone

MAX_CONNECTION_TAXI_MINUTES = 240
DAY_OFF_MORNING_LIMIT_HOUR = 8
DAY_OFF_EVENING_LIMIT_HOUR = 22
FULL_DAY_MINUTES = 24 * 60


@dataclass(frozen=True)
class ConnectionStatus:
    """
    Result of a chronological scan of an employee's legs.

    Attributes
    ----------
    invalid_connections : int
        Consecutive legs at different airports with no taxi route, or one
        longer than the allowed maximum.
    taxi_minutes : int
        Ground transfer minutes used by the valid connections.
    """
    invalid_connections: int = 0
    taxi_minutes: int = 0


def connection_status(
    employee: Employee,
    reference: ReferenceData,
    max_taxi_minutes: int = MAX_CONNECTION_TAXI_MINUTES,
) -> ConnectionStatus:
    invalid = 0
    taxi_total = 0
    previous: Optional[FlightAssignment] = None

    for assignment in employee.iter_assignments():
        if previous is not None:
            origin = previous.flight.arrival_airport
            destination = assignment.flight.departure_airport
            if origin != destination:
                taxi = reference.taxi_minutes(origin, destination)
                if taxi is None or taxi > max_taxi_minutes:
                    invalid += 1
                else:
                    taxi_total += taxi
        previous = assignment

    return ConnectionStatus(invalid_connections=invalid, taxi_minutes=taxi_total)


def day_off_encroachment(
    employee: Employee,
    assignment: FlightAssignment,
    tz: tzinfo = REFERENCE_TZ,
) -> int:
    """
    Minutes by which ``assignment`` eats into a day off.

    Checked in order, first hit wins:
      - previous local day off and departure before 08:00 local;
      - next local day off and arrival after 22:00 local;
      - the (UTC) arrival date itself is a day off: a full day, 1440.
    """
    flight = assignment.flight
    one_day = timedelta(days=1)

    departure = to_reference_zone(flight.departure_utc, tz)
    if not employee.is_available(departure.date() - one_day):
        limit = departure.replace(hour=DAY_OFF_MORNING_LIMIT_HOUR, minute=0, second=0, microsecond=0)
        if departure < limit:
            return minutes(limit - departure)

    arrival = to_reference_zone(flight.arrival_utc, tz)
    if not employee.is_available(arrival.date() + one_day):
        limit = arrival.replace(hour=DAY_OFF_EVENING_LIMIT_HOUR, minute=0, second=0, microsecond=0)
        if arrival > limit:
            return minutes(arrival - limit)

    if not employee.is_available(flight.arrival_date):
        return FULL_DAY_MINUTES

    return 0


def total_day_off_encroachment(employee: Employee, tz: tzinfo = REFERENCE_TZ) -> int:
    return sum(day_off_encroachment(employee, a, tz) for a in employee.iter_assignments())


def is_first_assignment_departing_from_home(employee: Employee) -> bool:
    first = employee.first_assignment
    if first is None:
        return True
    return first.flight.departure_airport == employee.home_airport


def is_last_assignment_arriving_at_home(employee: Employee) -> bool:
    last = employee.last_assignment
    if last is None:
        return True
    return last.flight.arrival_airport == employee.home_airport


def flight_duration_total_minutes(employee: Employee) -> int:
    return sum(a.duration_minutes for a in employee.iter_assignments())
