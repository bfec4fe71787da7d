"""Shared fixtures: a tiny airport network, MaxFDP table and roster builders.

Also ensures 'src' directory (src layout) is on sys.path for imports.
"""

from __future__ import annotations

import sys
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

_src = Path(__file__).resolve().parents[1] / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from crew_scheduling.domain.airport import Airport, RepositioningFlight  # noqa: E402
from crew_scheduling.domain.assignment import FlightAssignment, assignment_id_for  # noqa: E402
from crew_scheduling.domain.employee import Employee  # noqa: E402
from crew_scheduling.domain.flight import Flight  # noqa: E402
from crew_scheduling.domain.max_fdp import MaxFDPRule, MaxFDPTable  # noqa: E402
from crew_scheduling.domain.reference import ReferenceData  # noqa: E402
from crew_scheduling.domain.roster import Roster  # noqa: E402

FIRST_DAY = date(2024, 6, 3)  # a Monday
LAST_DAY = date(2024, 6, 9)


def at(day_offset: int, hh: int, mm: int = 0) -> datetime:
    """Naive UTC datetime ``day_offset`` days after FIRST_DAY."""
    return datetime.combine(FIRST_DAY + timedelta(days=day_offset), time(hh, mm))


@pytest.fixture
def reference() -> ReferenceData:
    airports = [
        Airport("BRU", "Brussels", taxi_minutes={"LGG": 75, "AMS": 300}),
        Airport("LGG", "Liege", taxi_minutes={"BRU": 75}),
        Airport("AMS", "Amsterdam", taxi_minutes={"BRU": 300}),
        Airport("BCN", "Barcelona"),
        Airport("FAO", "Faro"),
    ]
    max_fdp = MaxFDPTable.of(
        [
            MaxFDPRule.from_segments(
                time(6, 0), time(13, 29), {2: timedelta(hours=10), 3: timedelta(hours=9, minutes=30)}
            ),
            MaxFDPRule.from_segments(time(13, 30), time(23, 59), {2: timedelta(hours=8)}),
        ]
    )
    repositioning = [
        RepositioningFlight("BCN", "BRU", time(15, 5), time(17, 10), frozenset({2, 4})),
        RepositioningFlight("FAO", "BRU", time(13, 30), time(16, 35), frozenset(range(1, 8))),
    ]
    return ReferenceData.build(airports, max_fdp, repositioning)


@pytest.fixture
def make_assignment() -> Callable[..., FlightAssignment]:
    def _make(
        number: str,
        origin: str,
        destination: str,
        departure: datetime,
        arrival: datetime,
        skill: str = "CPT",
        seat_index: int = 0,
        aircraft_type: str = "B737",
    ) -> FlightAssignment:
        flight = Flight(number, origin, destination, departure, arrival, aircraft_type=aircraft_type)
        return FlightAssignment(
            assignment_id=assignment_id_for(flight, seat_index),
            flight=flight,
            required_skill=skill,
            seat_index=seat_index,
        )

    return _make


@pytest.fixture
def make_employee() -> Callable[..., Employee]:
    def _make(
        employee_id: str = "E1",
        home: str = "BRU",
        skills: Sequence[str] = ("CPT",),
        unavailable: Sequence[date] = (),
    ) -> Employee:
        employee = Employee(
            employee_id=employee_id,
            name=f"Crew {employee_id}",
            home_airport=home,
            skills=frozenset(skills),
            aircraft_type_qualifications=frozenset({"B737"}),
            unavailable_days=set(unavailable),
        )
        employee.populate_calendar(FIRST_DAY, LAST_DAY)
        return employee

    return _make


@pytest.fixture
def build_roster(reference: ReferenceData) -> Callable[..., Roster]:
    def _build(
        employees: List[Employee],
        assignments: List[FlightAssignment],
        flights: Optional[List[Flight]] = None,
    ) -> Roster:
        if flights is None:
            flights = list({a.flight.flight_id: a.flight for a in assignments}.values())
        return Roster.build(
            schedule_first_date=FIRST_DAY,
            schedule_last_date=LAST_DAY,
            reference=reference,
            flights=flights,
            assignments=assignments,
            employees=employees,
        )

    return _build
