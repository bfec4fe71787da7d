from __future__ import annotations

from typing import List, Tuple

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.legality.overlap import overlap_minutes


def assignments_conflict(a1: FlightAssignment, a2: FlightAssignment) -> bool:
    """
    True if the same employee cannot hold both seats: they are on the same
    flight or the two flights are airborne at the same time.
    """
    if a1.flight.flight_id == a2.flight.flight_id:
        return True
    return overlap_minutes(a1.flight, a2.flight) > 0


def compute_conflict_pairs(assignments: List[FlightAssignment]) -> List[Tuple[str, str]]:
    """
    Returns list of (assignment_id1, assignment_id2) that conflict, with
    assignment_id1 ordered before assignment_id2 in time.
    """
    ordered = sorted(assignments, key=lambda a: a.sort_key)
    pairs: List[Tuple[str, str]] = []
    n = len(ordered)

    for i in range(n):
        arrival = ordered[i].flight.arrival_utc
        for j in range(i + 1, n):
            # sorted by departure: nothing later can overlap
            if ordered[j].flight.departure_utc >= arrival:
                break
            if assignments_conflict(ordered[i], ordered[j]):
                pairs.append((ordered[i].assignment_id, ordered[j].assignment_id))

    return pairs
