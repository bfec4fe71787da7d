"""Tests for the ownership-change maintenance of duties and calendars.

Covers:
- derived duty fields after insert / retract
- notification bracketing and field order
- reassignment between employees and lazy duty creation
- reverting to a pre-assigned ground duty
- misuse of the before/after hooks
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import FIRST_DAY, LAST_DAY, at
from crew_scheduling.domain.duty import FLIGHT_DUTY_CODE, Duty
from crew_scheduling.solver.assignment_listener import (
    FIELD_ORDER,
    AssignmentListener,
    ListenerStateError,
    RecordingChangeSink,
)


@pytest.fixture
def two_legs(make_assignment):
    out = make_assignment("SN1", "BRU", "BCN", at(0, 8), at(0, 10))
    back = make_assignment("SN2", "BCN", "BRU", at(0, 11), at(0, 13))
    return out, back


def test_single_insert_sets_derived_fields(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    sink = RecordingChangeSink()
    listener = AssignmentListener({"E1": e1}, sink)

    listener.change_owner(out, "E1")

    duty = e1.duty_on(FIRST_DAY)
    assert duty.assignments == [out]
    assert duty.start == at(0, 7, 30)
    assert duty.end == at(0, 10, 30)
    assert duty.last_flight_arrival == at(0, 10)
    assert duty.code == FLIGHT_DUTY_CODE
    assert out.owner == "E1"


def test_notifications_are_bracketed_in_field_order(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    sink = RecordingChangeSink()
    listener = AssignmentListener({"E1": e1}, sink)

    listener.change_owner(out, "E1")

    duty = e1.duty_on(FIRST_DAY)
    assert sink.fields_written() == list(FIELD_ORDER)
    # every write is a before immediately followed by its after
    for before, after in zip(sink.events[0::2], sink.events[1::2]):
        assert before[0] == "before" and after[0] == "after"
        assert before[1] is duty and after[1] is duty
        assert before[2] == after[2]


def test_second_leg_extends_duty(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, back = two_legs
    listener = AssignmentListener({"E1": e1})

    # insertion order does not matter
    listener.change_owner(back, "E1")
    listener.change_owner(out, "E1")

    duty = e1.duty_on(FIRST_DAY)
    assert duty.assignments == [out, back]
    assert duty.start == at(0, 7, 30)
    assert duty.end == at(0, 13, 30)
    assert duty.last_flight_arrival == at(0, 13)
    assert duty.segments == 2


def test_retract_last_leg_clears_duty(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    sink = RecordingChangeSink()
    listener = AssignmentListener({"E1": e1}, sink)

    listener.change_owner(out, "E1")
    sink.clear()
    listener.change_owner(out, None)

    duty = e1.duty_on(FIRST_DAY)
    assert duty.assignments == []
    assert duty.start is None
    assert duty.end is None
    assert duty.last_flight_arrival is None
    assert duty.code is None
    assert out.owner is None
    assert sink.fields_written() == list(FIELD_ORDER)
    # placeholder stays in the calendar
    assert FIRST_DAY in e1.calendar


def test_retract_one_of_two_legs_recomputes_times(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, back = two_legs
    listener = AssignmentListener({"E1": e1})
    listener.change_owner(out, "E1")
    listener.change_owner(back, "E1")

    listener.change_owner(out, None)

    duty = e1.duty_on(FIRST_DAY)
    assert duty.assignments == [back]
    assert duty.start == at(0, 10, 30)
    assert duty.end == at(0, 13, 30)
    assert duty.code == FLIGHT_DUTY_CODE


def test_reassignment_moves_leg_between_employees(make_employee, two_legs) -> None:
    e1 = make_employee("E1")
    e2 = make_employee("E2")
    out, _ = two_legs
    listener = AssignmentListener({"E1": e1, "E2": e2})

    listener.change_owner(out, "E1")
    listener.change_owner(out, "E2")

    assert e1.duty_on(FIRST_DAY).assignments == []
    assert e1.duty_on(FIRST_DAY).code is None
    assert e2.duty_on(FIRST_DAY).assignments == [out]
    assert e1.assignment_count == 0
    assert e2.assignment_count == 1


def test_same_owner_twice_is_idempotent(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, back = two_legs
    listener = AssignmentListener({"E1": e1})
    listener.change_owner(out, "E1")
    listener.change_owner(back, "E1")

    listener.change_owner(out, "E1")

    duty = e1.duty_on(FIRST_DAY)
    assert duty.assignments == [out, back]
    assert duty.start == at(0, 7, 30)
    assert duty.end == at(0, 13, 30)


def test_hooks_can_be_driven_by_hand(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    listener = AssignmentListener({"E1": e1})

    listener.before_owner_change(out)
    out.owner = "E1"
    listener.after_owner_change(out)

    assert e1.duty_on(FIRST_DAY).assignments == [out]


def test_departure_outside_horizon_creates_duty(make_employee, make_assignment) -> None:
    e1 = make_employee()
    late = make_assignment("SN9", "BRU", "FAO", at(10, 8), at(10, 11))
    listener = AssignmentListener({"E1": e1})

    listener.change_owner(late, "E1")

    day = LAST_DAY + timedelta(days=4)
    assert e1.duty_on(day).assignments == [late]
    assert list(e1.iter_duties())[-1].date == day


def test_emptied_ground_day_reverts_to_ground_duty(make_employee, make_assignment) -> None:
    e1 = make_employee()
    e1.place_duty(Duty.ground("E1", "GND", at(2, 6), at(2, 14)))
    leg = make_assignment("SN3", "BRU", "LGG", at(2, 16), at(2, 17))
    listener = AssignmentListener({"E1": e1})

    listener.change_owner(leg, "E1")
    duty = e1.duty_on(FIRST_DAY + timedelta(days=2))
    assert duty.code == FLIGHT_DUTY_CODE
    assert duty.start == at(2, 15, 30)

    listener.change_owner(leg, None)
    assert duty.code == "GND"
    assert duty.start == at(2, 6)
    assert duty.end == at(2, 14)
    assert duty.last_flight_arrival is None


def test_counts_follow_assignments(make_employee, make_assignment) -> None:
    e1 = make_employee()
    legs = [
        make_assignment(f"SN{i}", "BRU", "BRU", at(i % 3, 8 + i), at(i % 3, 9 + i))
        for i in range(6)
    ]
    listener = AssignmentListener({"E1": e1})
    for leg in legs:
        listener.change_owner(leg, "E1")

    assert e1.assignment_count == 6
    assert sum(d.segments for d in e1.iter_duties()) == 6
    ordered = list(e1.iter_assignments())
    assert ordered == sorted(legs, key=lambda a: a.sort_key)

    listener.change_owner(legs[0], None)
    assert e1.assignment_count == 5


def test_before_twice_raises(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, back = two_legs
    listener = AssignmentListener({"E1": e1})

    listener.before_owner_change(out)
    with pytest.raises(ListenerStateError):
        listener.before_owner_change(back)


def test_after_without_before_raises(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    listener = AssignmentListener({"E1": e1})

    out.owner = "E1"
    with pytest.raises(ListenerStateError):
        listener.after_owner_change(out)


def test_owner_mutated_before_hook_is_detected(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    listener = AssignmentListener({"E1": e1})

    # owner written without calling the hooks: E1's calendar does not know it
    out.owner = "E1"
    with pytest.raises(ListenerStateError):
        listener.before_owner_change(out)


def test_unknown_employee_leaves_state_untouched(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    listener = AssignmentListener({"E1": e1})
    listener.change_owner(out, "E1")

    with pytest.raises(ListenerStateError):
        listener.change_owner(out, "NOPE")

    assert out.owner == "E1"
    assert e1.duty_on(FIRST_DAY).assignments == [out]


def test_reinsert_after_emptying_restores_single_leg_duty(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    listener = AssignmentListener({"E1": e1})

    listener.change_owner(out, "E1")
    duty = e1.duty_on(FIRST_DAY)
    expected = (duty.start, duty.end, duty.last_flight_arrival)
    listener.change_owner(out, None)
    listener.change_owner(out, "E1")

    assert (duty.start, duty.end, duty.last_flight_arrival) == expected
    assert duty.code == FLIGHT_DUTY_CODE
    assert duty.assignments == [out]


def test_unknown_owner_in_after_hook_stays_pending(make_employee, two_legs) -> None:
    e1 = make_employee()
    out, _ = two_legs
    listener = AssignmentListener({"E1": e1})

    listener.before_owner_change(out)
    out.owner = "NOPE"
    with pytest.raises(ListenerStateError, match="Unknown employee"):
        listener.after_owner_change(out)

    # the caller can still finish the change with a valid owner
    out.owner = "E1"
    listener.after_owner_change(out)

    assert e1.duty_on(FIRST_DAY).assignments == [out]
    listener.change_owner(out, None)
    assert e1.duty_on(FIRST_DAY).assignments == []
