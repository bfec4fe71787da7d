"""Tests for detection of legs that need a commercial repositioning flight."""

from __future__ import annotations

from conftest import at
from crew_scheduling.solver.assignment_listener import AssignmentListener
from crew_scheduling.solver.repositioning_gaps import find_repositioning_gaps, gaps_around


def test_gap_between_unconnected_airports(make_employee, make_assignment, reference) -> None:
    e1 = make_employee()
    out = make_assignment("SN1", "BRU", "BCN", at(0, 8), at(0, 10))
    home = make_assignment("SN2", "BRU", "LGG", at(3, 8), at(3, 9))
    listener = AssignmentListener({"E1": e1})
    listener.change_owner(out, "E1")
    listener.change_owner(home, "E1")

    gaps = find_repositioning_gaps(e1, reference)

    assert len(gaps) == 1
    gap = gaps[0]
    assert (gap.origin, gap.destination) == ("BCN", "BRU")
    assert gap.travel_date == at(1, 0).date()  # Tuesday
    assert gap.is_fillable
    assert gap.first_option.departure_utc_time.hour == 15


def test_gap_without_flight_that_day(make_employee, make_assignment, reference) -> None:
    e1 = make_employee()
    listener = AssignmentListener({"E1": e1})
    # BCN -> BRU only runs Tuesday and Thursday; travel day is Wednesday
    listener.change_owner(make_assignment("SN1", "BRU", "BCN", at(1, 8), at(1, 10)), "E1")
    listener.change_owner(make_assignment("SN2", "BRU", "LGG", at(4, 8), at(4, 9)), "E1")

    gaps = find_repositioning_gaps(e1, reference)

    assert len(gaps) == 1
    assert not gaps[0].is_fillable
    assert gaps[0].first_option is None


def test_no_gap_same_day_or_taxi(make_employee, make_assignment, reference) -> None:
    e1 = make_employee()
    listener = AssignmentListener({"E1": e1})
    listener.change_owner(make_assignment("SN1", "BRU", "BCN", at(0, 8), at(0, 10)), "E1")
    listener.change_owner(make_assignment("SN2", "FAO", "LGG", at(0, 14), at(0, 17)), "E1")
    listener.change_owner(make_assignment("SN3", "BRU", "LGG", at(2, 8), at(2, 9)), "E1")

    # same-day jump BCN -> FAO and LGG -> BRU by taxi are not gaps
    assert find_repositioning_gaps(e1, reference) == []


def test_gaps_around_one_assignment(make_employee, make_assignment, reference) -> None:
    e1 = make_employee()
    a = make_assignment("SN1", "BRU", "FAO", at(0, 8), at(0, 11))
    b = make_assignment("SN2", "BRU", "BCN", at(2, 8), at(2, 10))
    c = make_assignment("SN3", "BRU", "LGG", at(4, 8), at(4, 9))
    listener = AssignmentListener({"E1": e1})
    for leg in (a, b, c):
        listener.change_owner(leg, "E1")

    gaps = gaps_around(e1, b, reference)

    assert [(g.origin, g.destination) for g in gaps] == [("FAO", "BRU"), ("BCN", "BRU")]
    assert len(find_repositioning_gaps(e1, reference)) == 2
