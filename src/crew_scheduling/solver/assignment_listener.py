from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol, Tuple

from crew_scheduling.domain.assignment import FlightAssignment
from crew_scheduling.domain.duty import FLIGHT_DUTY_CODE, Duty
from crew_scheduling.domain.employee import Employee

# Derived duty fields, in the order they are written.
ASSIGNMENTS = "assignments"
START = "start"
END = "end"
LAST_FLIGHT_ARRIVAL = "last_flight_arrival"
CODE = "code"
FIELD_ORDER = (ASSIGNMENTS, START, END, LAST_FLIGHT_ARRIVAL, CODE)


class ChangeSink(Protocol):
    """
    Receives a notification right before and right after every write of a
    tracked field, so an incremental score calculator can snapshot the old
    dependent state and then recompute the new one.
    """

    def before_field_change(self, entity: Any, field_name: str) -> None: ...

    def after_field_change(self, entity: Any, field_name: str) -> None: ...


class NullChangeSink:
    """Sink for callers that do not track score deltas (loading, construction)."""

    def before_field_change(self, entity: Any, field_name: str) -> None:
        pass

    def after_field_change(self, entity: Any, field_name: str) -> None:
        pass


@dataclass
class RecordingChangeSink:
    """Keeps every notification as ("before"|"after", entity, field_name)."""
    events: List[Tuple[str, Any, str]] = field(default_factory=list)

    def before_field_change(self, entity: Any, field_name: str) -> None:
        self.events.append(("before", entity, field_name))

    def after_field_change(self, entity: Any, field_name: str) -> None:
        self.events.append(("after", entity, field_name))

    def fields_written(self) -> List[str]:
        return [name for phase, _, name in self.events if phase == "after"]

    def clear(self) -> None:
        self.events.clear()


class ListenerStateError(RuntimeError):
    """The before/after ownership hooks were called out of order."""


class AssignmentListener:
    """
    Keeps duties and employee calendars consistent with the ownership of
    every flight assignment.

    The caller must, for every ownership change of an assignment ``a``:

        listener.before_owner_change(a)
        a.owner = new_employee_id   # or None
        listener.after_owner_change(a)

    ``before_owner_change`` retracts ``a`` from its current duty and
    ``after_owner_change`` inserts it into the new one. Skipping a hook or
    reversing them corrupts the sink's score bookkeeping; the listener
    raises ``ListenerStateError`` when it notices.

    Each hook touches a single duty, so the cost is bounded by the number of
    legs flown that day.
    """

    def __init__(
        self,
        employees: Mapping[str, Employee],
        sink: Optional[ChangeSink] = None,
    ) -> None:
        self._employees = employees
        self._sink: ChangeSink = sink if sink is not None else NullChangeSink()
        self._pending: Optional[FlightAssignment] = None

    @property
    def sink(self) -> ChangeSink:
        return self._sink

    def before_owner_change(self, assignment: FlightAssignment) -> None:
        if self._pending is not None:
            raise ListenerStateError(
                f"before_owner_change({assignment.assignment_id}) called while "
                f"{self._pending.assignment_id} is still pending"
            )
        if assignment.owner is None:
            self._pending = assignment
            return
        duty = self._employee(assignment.owner).duty_on(assignment.flight.departure_date)
        if duty is None or assignment not in duty:
            raise ListenerStateError(
                f"{assignment.assignment_id} is not in the calendar of {assignment.owner}"
            )
        self._pending = assignment
        self._retract(duty, assignment)

    def after_owner_change(self, assignment: FlightAssignment) -> None:
        if self._pending is not assignment:
            raise ListenerStateError(
                f"after_owner_change({assignment.assignment_id}) called without "
                f"a matching before_owner_change"
            )
        if assignment.owner is None:
            self._pending = None
            return
        # unknown owner raises with the change still pending
        employee = self._employee(assignment.owner)
        self._pending = None
        self._insert(employee.ensure_duty(assignment.flight.departure_date), assignment)

    def change_owner(self, assignment: FlightAssignment, employee_id: Optional[str]) -> None:
        """Run the full before / mutate / after sequence."""
        if employee_id is not None:
            # fail before touching anything
            self._employee(employee_id)
        self.before_owner_change(assignment)
        assignment.owner = employee_id
        self.after_owner_change(assignment)

    # --- update logic ---

    def _employee(self, employee_id: str) -> Employee:
        try:
            return self._employees[employee_id]
        except KeyError:
            raise ListenerStateError(f"Unknown employee: {employee_id}") from None

    def _retract(self, duty: Duty, assignment: FlightAssignment) -> None:
        self._sink.before_field_change(duty, ASSIGNMENTS)
        duty.remove_assignment(assignment)
        self._sink.after_field_change(duty, ASSIGNMENTS)

        if duty.is_flight_duty:
            self._refresh_times(duty)
        else:
            # back to whatever was pre-assigned for the day (nothing for most duties)
            self._write(duty, START, duty.ground_start)
            self._write(duty, END, duty.ground_end)
            self._write(duty, LAST_FLIGHT_ARRIVAL, None)
            self._write(duty, CODE, duty.ground_code)

    def _insert(self, duty: Duty, assignment: FlightAssignment) -> None:
        self._sink.before_field_change(duty, ASSIGNMENTS)
        duty.add_assignment(assignment)
        self._sink.after_field_change(duty, ASSIGNMENTS)

        self._refresh_times(duty)
        self._write(duty, CODE, FLIGHT_DUTY_CODE)

    def _refresh_times(self, duty: Duty) -> None:
        first = duty.assignments[0].flight
        last = duty.assignments[-1].flight
        self._write(duty, START, first.departure_utc - first.sign_in_duration)
        self._write(duty, END, last.arrival_utc + last.sign_off_duration)
        self._write(duty, LAST_FLIGHT_ARRIVAL, last.arrival_utc)

    def _write(self, duty: Duty, field_name: str, value: Any) -> None:
        self._sink.before_field_change(duty, field_name)
        setattr(duty, field_name, value)
        self._sink.after_field_change(duty, field_name)
