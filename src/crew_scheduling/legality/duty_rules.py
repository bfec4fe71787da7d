from __future__ import annotations

from datetime import time, timedelta, tzinfo
from typing import Optional

from crew_scheduling.domain.duty import GROUND_DUTY_CODE, Duty
from crew_scheduling.domain.employee import Employee
from crew_scheduling.domain.max_fdp import MaxFDPTable
from crew_scheduling.domain.reference import ReferenceData
from crew_scheduling.domain.time_zones import REFERENCE_TZ, minutes, to_reference_zone

MIN_REST_AT_HOME = timedelta(hours=12)
MIN_REST_AWAY = timedelta(hours=10)
OVER_FDP_MINUTES_PER_POINT = 10
UNREACHABLE_HOME_INCONVENIENCE = 10
TAXI_MINUTES_PER_INCONVENIENCE = 50
NIGHT_DUTY_START_LIMIT = time(5, 0)
LATE_FINISH_LIMIT = time(22, 0)
EARLY_START_LIMIT = time(6, 0)
LOCAL_NIGHT_REST = timedelta(hours=8)


def flight_duty_period(duty: Duty) -> Optional[timedelta]:
    """Sign-in to last arrival (sign-off excluded). None when either end is unset."""
    if duty.start is None or duty.last_flight_arrival is None:
        return None
    return duty.last_flight_arrival - duty.start


def block_minutes(duty: Duty) -> int:
    """First departure to last arrival, in minutes."""
    if not duty.is_flight_duty:
        return 0
    first = duty.assignments[0].flight
    last = duty.assignments[-1].flight
    return minutes(last.arrival_utc - first.departure_utc)


def over_max_fdp(
    duty: Duty,
    max_fdp: MaxFDPTable,
    tz: tzinfo = REFERENCE_TZ,
) -> int:
    """
    Penalty points for exceeding the basic maximum daily FDP.

    The applicable limit depends on the local (acclimatised) start time
    and the number of legs. One point per 10 started-and-completed minutes
    of overage, i.e. ``overage_minutes // 10``.
    """
    segments = duty.segments
    if segments == 0 or duty.start is None:
        return 0
    fdp = flight_duty_period(duty)
    if fdp is None:
        return 0
    local_start = to_reference_zone(duty.start, tz).time()
    limit = max_fdp.max_fdp(local_start, segments)
    if fdp <= limit:
        return 0
    return minutes(fdp - limit) // OVER_FDP_MINUTES_PER_POINT


def minimum_rest(duty: Duty, employee: Employee) -> Optional[timedelta]:
    """Rest required after ``duty``: at least the duty length, 12h at home, 10h away."""
    if not duty.is_flight_duty or duty.start is None or duty.end is None:
        return None
    duty_duration = duty.end - duty.start
    if duty.assignments[-1].flight.arrival_airport == employee.home_airport:
        return max(duty_duration, MIN_REST_AT_HOME)
    return max(duty_duration, MIN_REST_AWAY)


def rest_lack(duty: Duty, next_duty: Optional[Duty], employee: Employee) -> int:
    """Minutes by which the rest before ``next_duty`` falls short, 0 if enough."""
    if next_duty is None or not next_duty.has_code or next_duty.start is None:
        return 0
    required = minimum_rest(duty, employee)
    if required is None:
        return 0
    rest = next_duty.start - duty.end
    if rest >= required:
        return 0
    return minutes(required - rest)


def _taxi_inconvenience(reference: ReferenceData, airport: str, home: str) -> int:
    taxi = reference.taxi_minutes(airport, home)
    if taxi is None:
        return UNREACHABLE_HOME_INCONVENIENCE
    return taxi // TAXI_MINUTES_PER_INCONVENIENCE


def starting_inconvenience(duty: Duty, employee: Employee, reference: ReferenceData) -> int:
    if not duty.is_flight_duty:
        return 0
    airport = duty.assignments[0].flight.departure_airport
    return _taxi_inconvenience(reference, airport, employee.home_airport)


def closing_inconvenience(duty: Duty, employee: Employee, reference: ReferenceData) -> int:
    if not duty.is_flight_duty:
        return 0
    airport = duty.assignments[-1].flight.arrival_airport
    return _taxi_inconvenience(reference, airport, employee.home_airport)


def home_base_inconvenience(duty: Duty, employee: Employee, reference: ReferenceData) -> int:
    """
    How far from home the duty starts and ends. Each end weighs 10 when
    home cannot be reached by ground, else one point per 50 taxi minutes.
    """
    return (
        starting_inconvenience(duty, employee, reference)
        + closing_inconvenience(duty, employee, reference)
    )


def _is_ground(adjacent: Optional[Duty], ground_code: str) -> bool:
    return adjacent is not None and adjacent.code == ground_code


def is_day_after_ground_or_holiday(
    duty: Duty,
    employee: Employee,
    ground_code: str = GROUND_DUTY_CODE,
) -> bool:
    """True when the next day is off or a ground duty."""
    if not employee.is_available(duty.date + timedelta(days=1)):
        return True
    return _is_ground(employee.next_duty(duty), ground_code)


def is_day_before_ground_or_holiday(
    duty: Duty,
    employee: Employee,
    ground_code: str = GROUND_DUTY_CODE,
) -> bool:
    """True when the previous day is off or a ground duty."""
    if not employee.is_available(duty.date - timedelta(days=1)):
        return True
    return _is_ground(employee.previous_duty(duty), ground_code)


def is_late_arrival(duty: Duty) -> bool:
    """The duty ends on a later date than the one it belongs to."""
    if duty.end is None:
        return False
    return duty.end.date() > duty.date


def is_night_duty(duty: Duty) -> bool:
    if duty.start is None:
        return False
    return duty.start.time() < NIGHT_DUTY_START_LIMIT


def no_local_night(duty: Duty, previous_duty: Optional[Duty]) -> bool:
    """
    True when the crew member gets no local night between the two duties:
    after a finish past 22:00 less than 8h of rest, otherwise a start
    before 06:00.
    """
    if previous_duty is None or previous_duty.end is None or duty.start is None:
        return False
    if previous_duty.end.time() > LATE_FINISH_LIMIT:
        return duty.start - previous_duty.end < LOCAL_NIGHT_REST
    return duty.start.time() < EARLY_START_LIMIT
