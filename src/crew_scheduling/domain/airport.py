from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Dict, FrozenSet, Optional


@dataclass(frozen=True)
class Airport:
    """
    Represents an airport of the flight network.

    Attributes
    ----------
    code : str
        IATA code, used as the airport identity everywhere else.
    name : str
        City / airport name.
    latitude, longitude : float
        Position, informative only.
    taxi_minutes : Dict[str, int]
        Ground transfer time in minutes to nearby airports, keyed by
        destination code. A missing destination means no ground transfer.
    """
    code: str
    name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    taxi_minutes: Dict[str, int] = field(default_factory=dict, compare=False, repr=False)

    def taxi_minutes_to(self, destination_code: str) -> Optional[int]:
        if destination_code == self.code:
            return 0
        return self.taxi_minutes.get(destination_code)


def parse_days_of_week(value: str) -> FrozenSet[int]:
    """
    Parse a digit string such as "1357" into ISO weekdays (1=Mon .. 7=Sun).
    Any other character is ignored.
    """
    return frozenset(int(c) for c in str(value) if c in "1234567")


@dataclass(frozen=True)
class RepositioningFlight:
    """
    A scheduled commercial (IATA) flight a crew member can ride to be moved
    between two airports that have no ground connection.

    Times are UTC times of day; the flight operates on ``days_of_week``.
    """
    departure_airport: str
    arrival_airport: str
    departure_utc_time: time
    arrival_utc_time: time
    days_of_week: FrozenSet[int] = frozenset()

    def is_available(self, day: date) -> bool:
        return day.isoweekday() in self.days_of_week
