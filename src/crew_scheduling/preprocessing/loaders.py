from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from crew_scheduling.domain.airport import Airport, RepositioningFlight, parse_days_of_week
from crew_scheduling.domain.assignment import FlightAssignment, assignment_id_for
from crew_scheduling.domain.duty import GROUND_DUTY_CODE, Duty
from crew_scheduling.domain.employee import Employee
from crew_scheduling.domain.flight import Flight
from crew_scheduling.domain.max_fdp import MaxFDPRule, MaxFDPTable
from crew_scheduling.domain.reference import ReferenceData
from crew_scheduling.domain.roster import Roster
from crew_scheduling.domain.time_zones import REFERENCE_UTC_OFFSET_HOURS, reference_tz
from crew_scheduling.preprocessing.validate_instance import (
    validate_employees,
    validate_flights,
    validate_ground_duties,
    validate_reference,
    validate_solution,
)
from crew_scheduling.solver.assignment_listener import AssignmentListener, NullChangeSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scenario:
    schedule_first_date: date
    schedule_last_date: date
    reference_utc_offset_hours: float = REFERENCE_UTC_OFFSET_HOURS
    max_connection_taxi_minutes: int = 240
    ground_duty_code: str = GROUND_DUTY_CODE

    @property
    def reference_tz(self) -> tzinfo:
        return reference_tz(self.reference_utc_offset_hours)


@dataclass(frozen=True)
class EmployeeRecord:
    employee: Employee
    ground_duties: List[Duty]


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _parse_date(value: str) -> date:
    return date.fromisoformat(value)


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _parse_time(value: str) -> time:
    return time.fromisoformat(value)


def _parse_duration(value: Any) -> timedelta:
    """"HH:MM" or an integer number of minutes."""
    if isinstance(value, (int, float)):
        return timedelta(minutes=int(value))
    hours, mins = str(value).split(":")[:2]
    return timedelta(hours=int(hours), minutes=int(mins))


def load_scenario(path: Path) -> Scenario:
    obj = _read_json(path)
    scenario = Scenario(
        schedule_first_date=_parse_date(obj["schedule_first_date"]),
        schedule_last_date=_parse_date(obj["schedule_last_date"]),
        reference_utc_offset_hours=float(obj.get("reference_utc_offset_hours", REFERENCE_UTC_OFFSET_HOURS)),
        max_connection_taxi_minutes=int(obj.get("max_connection_taxi_minutes", 240)),
        ground_duty_code=str(obj.get("ground_duty_code", GROUND_DUTY_CODE)),
    )
    if scenario.schedule_last_date < scenario.schedule_first_date:
        raise ValueError(
            f"schedule_last_date {scenario.schedule_last_date} is before "
            f"schedule_first_date {scenario.schedule_first_date}"
        )
    return scenario


def load_max_fdp(path: Path) -> MaxFDPTable:
    obj = _read_json(path)
    rules = [
        MaxFDPRule.from_segments(
            start=_parse_time(r["start"]),
            end=_parse_time(r["end"]),
            max_fdp_by_segments={
                int(seg): _parse_duration(limit)
                for seg, limit in r["max_fdp_by_segments"].items()
            },
        )
        for r in obj.get("rules", [])
    ]
    return MaxFDPTable.of(rules)


def load_reference_data(airports_path: Path, max_fdp_path: Path) -> ReferenceData:
    obj = _read_json(airports_path)

    taxi: Dict[str, Dict[str, int]] = {}
    for t in obj.get("taxi_minutes", []):
        taxi.setdefault(t["from"], {})[t["to"]] = int(t["minutes"])

    airports = [
        Airport(
            code=a["code"],
            name=a.get("name", ""),
            latitude=float(a.get("latitude", 0.0)),
            longitude=float(a.get("longitude", 0.0)),
            taxi_minutes=taxi.get(a["code"], {}),
        )
        for a in obj.get("airports", [])
    ]

    repositioning = [
        RepositioningFlight(
            departure_airport=r["departure_airport"],
            arrival_airport=r["arrival_airport"],
            departure_utc_time=_parse_time(r["departure_utc_time"]),
            arrival_utc_time=_parse_time(r["arrival_utc_time"]),
            days_of_week=parse_days_of_week(r.get("days_of_week", "1234567")),
        )
        for r in obj.get("repositioning_flights", [])
    ]

    reference = ReferenceData.build(airports, load_max_fdp(max_fdp_path), repositioning)
    # taxi entries may name airports missing from the airport list
    validate_reference(reference, taxi)
    return reference


def load_flights(path: Path) -> Tuple[List[Flight], List[FlightAssignment]]:
    obj = _read_json(path)
    flights: List[Flight] = []
    assignments: List[FlightAssignment] = []
    for f in obj.get("flights", []):
        flight = Flight(
            flight_number=str(f["flight_number"]),
            departure_airport=f["departure_airport"],
            arrival_airport=f["arrival_airport"],
            departure_utc=_parse_datetime(f["departure_utc"]),
            arrival_utc=_parse_datetime(f["arrival_utc"]),
            aircraft_type=f.get("aircraft_type", ""),
            aircraft_registration=f.get("aircraft_registration", ""),
        )
        flights.append(flight)
        for seat_index, skill in enumerate(f.get("required_skills", [])):
            assignments.append(
                FlightAssignment(
                    assignment_id=assignment_id_for(flight, seat_index),
                    flight=flight,
                    required_skill=skill,
                    seat_index=seat_index,
                )
            )
    return flights, assignments


def load_employees(path: Path) -> List[EmployeeRecord]:
    obj = _read_json(path)
    records: List[EmployeeRecord] = []
    for e in obj.get("employees", []):
        employee_id = str(e["employee_id"])
        employee = Employee(
            employee_id=employee_id,
            name=e.get("name", employee_id),
            home_airport=e["home_airport"],
            skills=frozenset(e.get("skills", [])),
            aircraft_type_qualifications=frozenset(e.get("aircraft_type_qualifications", [])),
            special_qualifications=frozenset(e.get("special_qualifications", [])),
            unavailable_days={_parse_date(d) for d in e.get("unavailable_days", [])},
        )
        ground_duties = [
            Duty.ground(
                employee_id=employee_id,
                code=g["code"],
                start=_parse_datetime(g["start"]),
                end=_parse_datetime(g["end"]),
            )
            for g in e.get("ground_duties", [])
        ]
        records.append(EmployeeRecord(employee=employee, ground_duties=ground_duties))
    return records


def load_solution(path: Path) -> Dict[str, Optional[str]]:
    if not path.exists():
        return {}  # unsolved instance

    obj = _read_json(path)
    return {str(k): (None if v is None else str(v)) for k, v in obj.get("assignments", {}).items()}


def apply_solution(
    roster: Roster,
    solution: Dict[str, Optional[str]],
    listener: Optional[AssignmentListener] = None,
) -> int:
    """Give every assignment in ``solution`` its owner, through the listener."""
    validate_solution(solution, roster)
    if listener is None:
        listener = AssignmentListener(roster.employees, NullChangeSink())
    changed = 0
    for assignment_id, employee_id in solution.items():
        assignment = roster.assignment(assignment_id)
        if assignment.owner == employee_id:
            continue
        listener.change_owner(assignment, employee_id)
        changed += 1
    return changed


def load_roster(instance_dir: Path, *, solved: bool = True) -> Tuple[Scenario, Roster]:
    """
    Read an instance directory and build a consistent roster.

    Any reference error (unknown airport, duplicate id, bad interval)
    aborts with ValueError before a roster is returned.
    """
    instance_dir = Path(instance_dir)
    scenario = load_scenario(instance_dir / "scenario.json")
    reference = load_reference_data(instance_dir / "airports.json", instance_dir / "max_fdp.json")
    flights, assignments = load_flights(instance_dir / "flights.json")
    records = load_employees(instance_dir / "employees.json")

    validate_flights(flights, assignments, reference)
    validate_employees([r.employee for r in records], reference)
    validate_ground_duties([d for r in records for d in r.ground_duties])

    employees = [r.employee for r in records]
    for record in records:
        for duty in record.ground_duties:
            record.employee.place_duty(duty)

    roster = Roster.build(
        schedule_first_date=scenario.schedule_first_date,
        schedule_last_date=scenario.schedule_last_date,
        reference=reference,
        flights=flights,
        assignments=assignments,
        employees=employees,
    )
    logger.info(
        "Loaded %s: %d flights, %d seats, %d employees, %d days",
        instance_dir.name,
        len(roster.flights),
        len(roster.assignments),
        len(roster.employees),
        len(roster.horizon_dates()),
    )

    if solved:
        solution = load_solution(instance_dir / "solution.json")
        if solution:
            changed = apply_solution(roster, solution)
            logger.info("Applied %d owned assignments from solution.json", changed)

    return scenario, roster
