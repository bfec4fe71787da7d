from __future__ import annotations

from datetime import datetime

from crew_scheduling.domain.duty import Duty
from crew_scheduling.domain.flight import Flight
from crew_scheduling.domain.time_zones import minutes


def interval_overlap_minutes(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> int:
    """Minutes shared by [start_a, end_a) and [start_b, end_b), 0 if disjoint."""
    if start_a < end_b and start_b < end_a:
        return minutes(min(end_a, end_b) - max(start_a, start_b))
    return 0


def overlap_minutes(flight_a: Flight, flight_b: Flight) -> int:
    """
    Minutes during which both flights are airborne. Sign-in/sign-off is
    disregarded: legs of the same duty may chain back to back.
    """
    return interval_overlap_minutes(
        flight_a.departure_utc,
        flight_a.arrival_utc,
        flight_b.departure_utc,
        flight_b.arrival_utc,
    )


def ground_overlap_minutes(duty: Duty) -> int:
    """
    Minutes by which the flights of ``duty`` overlap the ground activity
    pre-assigned on the same day. 0 unless the duty has both.
    """
    if not duty.is_flight_duty or duty.ground_start is None or duty.ground_end is None:
        return 0
    return interval_overlap_minutes(
        duty.ground_start,
        duty.ground_end,
        duty.assignments[0].flight.departure_utc,
        duty.assignments[-1].flight.arrival_utc,
    )
