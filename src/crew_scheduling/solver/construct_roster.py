from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from ortools.sat.python import cp_model

from crew_scheduling.domain.roster import Roster
from crew_scheduling.model.feasibility_model import build_feasibility_model
from crew_scheduling.preprocessing.coverage_check import (
    check_coverage_feasibility,
    check_flight_coverage_feasibility,
)
from crew_scheduling.preprocessing.eligibility import compute_eligibility
from crew_scheduling.preprocessing.flight_conflicts import compute_conflict_pairs
from crew_scheduling.solver.assignment_listener import AssignmentListener

logger = logging.getLogger(__name__)


def solve_initial_roster(
    roster: Roster,
    listener: Optional[AssignmentListener] = None,
    *,
    time_limit: float = 10.0,
    num_workers: int = 4,
    home_base_weight: int = 1,
) -> Dict[str, Any]:
    """
    Find one feasible owner for every unassigned seat and apply it.

    Ownership is changed through ``listener`` so duties, calendars and any
    score tracking behind the listener's sink stay consistent. Seats that
    already have an owner are left alone and block conflicting seats.

    Returns a result dict with the solver status and counts.
    """
    if listener is None:
        listener = AssignmentListener(roster.employees)

    employees = list(roster.employees.values())
    open_seats = roster.unassigned()

    result: Dict[str, Any] = {
        "status": None,
        "open_seats": len(open_seats),
        "assigned": 0,
        "coverage_issues": [],
    }
    if not open_seats:
        result["status"] = "NOTHING_TO_DO"
        return result

    eligible = compute_eligibility(employees, open_seats)
    _block_owned_conflicts(roster, eligible)

    issues = check_coverage_feasibility(employees, open_seats, eligible)
    flight_issues = check_flight_coverage_feasibility(employees, open_seats, eligible)
    if issues or flight_issues:
        for i in issues[:10]:
            logger.warning("Seat %s (%s) has no eligible employee", i.assignment_id, i.required_skill)
        for fi in flight_issues[:10]:
            logger.warning(
                "Flight %s needs %d crew, only %d eligible", fi.flight_id, fi.seats, fi.available_total
            )
        result["status"] = "COVERAGE_INFEASIBLE"
        result["coverage_issues"] = [i.assignment_id for i in issues] + [fi.flight_id for fi in flight_issues]
        return result

    conflicts = compute_conflict_pairs(open_seats)
    fm = build_feasibility_model(
        employees,
        open_seats,
        eligible,
        conflicts,
        home_base_weight=home_base_weight,
    )
    logger.info(
        "Built feasibility model: %d variables, %d conflict pairs",
        len(fm.x),
        len(conflicts),
    )

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = float(time_limit)
    solver.parameters.num_search_workers = int(num_workers)

    status = solver.Solve(fm.model)
    status_name = solver.StatusName(status)
    result["status"] = status_name
    logger.info("CP-SAT status: %s", status_name)

    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        return result

    for (e_id, a_id), var in fm.x.items():
        if solver.Value(var) == 1:
            listener.change_owner(roster.assignment(a_id), e_id)
            result["assigned"] += 1

    return result


def _block_owned_conflicts(roster: Roster, eligible: Dict[Tuple[str, str], bool]) -> None:
    """An owned seat makes its owner ineligible for every open seat it conflicts with."""
    if not any(a.owner is not None for a in roster.assignments.values()):
        return
    for a1_id, a2_id in compute_conflict_pairs(list(roster.assignments.values())):
        a1 = roster.assignment(a1_id)
        a2 = roster.assignment(a2_id)
        if a1.owner is not None and a2.owner is None:
            eligible[(a1.owner, a2_id)] = False
        elif a2.owner is not None and a1.owner is None:
            eligible[(a2.owner, a1_id)] = False
