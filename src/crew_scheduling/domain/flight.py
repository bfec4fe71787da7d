from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

SIGN_IN_DURATION = timedelta(minutes=30)
SIGN_OFF_DURATION = timedelta(minutes=30)


@dataclass(frozen=True)
class Flight:
    """
    Represents a single scheduled flight leg.

    Attributes
    ----------
    flight_number : str
        Commercial flight number, unique per departure date.
    departure_airport, arrival_airport : str
        IATA codes, resolved against the reference airports at load time.
    departure_utc, arrival_utc : datetime
        Naive datetimes expressed in UTC.
    aircraft_type : str
        Drives aircraft-type qualification checks.
    aircraft_registration : str
        Tail number, informative only.
    """
    flight_number: str
    departure_airport: str
    arrival_airport: str
    departure_utc: datetime
    arrival_utc: datetime
    aircraft_type: str = ""
    aircraft_registration: str = ""

    @property
    def flight_id(self) -> str:
        return f"{self.flight_number}@{self.departure_date.isoformat()}"

    @property
    def departure_date(self) -> date:
        return self.departure_utc.date()

    @property
    def arrival_date(self) -> date:
        return self.arrival_utc.date()

    @property
    def duration_minutes(self) -> int:
        return int((self.arrival_utc - self.departure_utc).total_seconds() // 60)

    @property
    def sign_in_duration(self) -> timedelta:
        return SIGN_IN_DURATION

    @property
    def sign_off_duration(self) -> timedelta:
        return SIGN_OFF_DURATION

    def __str__(self) -> str:
        return self.flight_id
