from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from ortools.sat.python import cp_model

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.employee import Employee


@dataclass(frozen=True)
class FeasibilityModel:
    model: cp_model.CpModel
    x: Dict[Tuple[str, str], cp_model.IntVar]  # (employee_id, assignment_id) -> var


def _away_legs(employee: Employee, assignment: FlightAssignment) -> int:
    flight = assignment.flight
    return int(flight.departure_airport != employee.home_airport) + int(
        flight.arrival_airport != employee.home_airport
    )


def build_feasibility_model(
        employees: List[Employee],
        assignments: List[FlightAssignment],
        eligible: Dict[Tuple[str, str], bool],
        conflicts: List[Tuple[str, str]],
        home_base_weight: int = 0,
) -> FeasibilityModel:
    """
    Build a CP-SAT model giving every seat an owner.

    Variables:
      x[e,a] = 1 if employee e holds seat a

    Constraints:
      - Coverage: each seat gets exactly one eligible employee
      - Eligibility: x only exists for eligible pairs
      - Conflicts: per employee, at most one of two conflicting seats

    With ``home_base_weight`` > 0, legs that start or end away from the
    employee's home airport are penalised.
    """
    model = cp_model.CpModel()

    employee_ids = [e.employee_id for e in employees]
    employee_by_id = {e.employee_id: e for e in employees}

    # --- Variables (only for eligible pairs) ---
    x: Dict[Tuple[str, str], cp_model.IntVar] = {}
    for e_id in employee_ids:
        for a in assignments:
            if eligible.get((e_id, a.assignment_id), False):
                x[(e_id, a.assignment_id)] = model.NewBoolVar(f"x[{e_id},{a.assignment_id}]")

    # --- Coverage constraints: one owner per seat ---
    for a in assignments:
        seat_vars = [
            x[(e_id, a.assignment_id)]
            for e_id in employee_ids
            if (e_id, a.assignment_id) in x
        ]
        if seat_vars:
            model.Add(sum(seat_vars) == 1)
        else:
            # nobody eligible: the model is infeasible
            model.Add(model.NewConstant(0) == 1)

    # --- Conflict constraints: per employee, cannot take two conflicting seats ---
    for e_id in employee_ids:
        for a1, a2 in conflicts:
            v1 = x.get((e_id, a1))
            v2 = x.get((e_id, a2))
            if v1 is not None and v2 is not None:
                model.Add(v1 + v2 <= 1)

    if home_base_weight > 0:
        assignment_by_id = {a.assignment_id: a for a in assignments}
        terms = []
        for (e_id, a_id), var in x.items():
            cost = _away_legs(employee_by_id[e_id], assignment_by_id[a_id])
            if cost:
                terms.append(cost * var)
        if terms:
            model.Minimize(home_base_weight * sum(terms))

    return FeasibilityModel(model=model, x=x)
