from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from crew_scheduling.domain.flight import Flight

SortKey = Tuple[datetime, str, int]


def assignment_id_for(flight: Flight, seat_index: int) -> str:
    return f"{flight.flight_id}#{seat_index}"


@dataclass(eq=False)
class FlightAssignment:
    """
    One required seat (skill) on one flight.

    Created once at load time; afterwards only ``owner`` changes, and only
    between the listener's before/after hooks.

    Attributes
    ----------
    assignment_id : str
        Stable handle, "<flight_id>#<seat_index>".
    flight : Flight
        The flight this seat belongs to.
    required_skill : str
        Skill the owner must hold (e.g. "CP", "FO").
    seat_index : int
        0 for the primary skill, 1 for the secondary one, ...
    owner : Optional[str]
        Id of the employee holding the seat, None when unassigned.
    """
    assignment_id: str
    flight: Flight
    required_skill: str
    seat_index: int = 0
    owner: Optional[str] = None

    @property
    def sort_key(self) -> SortKey:
        # total order, stable for flights sharing a departure instant
        return (self.flight.departure_utc, self.flight.flight_number, self.seat_index)

    @property
    def duration_minutes(self) -> int:
        return self.flight.duration_minutes

    def __repr__(self) -> str:
        return f"FlightAssignment({self.assignment_id}, owner={self.owner})"
