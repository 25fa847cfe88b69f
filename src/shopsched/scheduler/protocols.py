"""Protocol definitions for the scheduling engine.

The validator, dispatch scheduler, repair engine and compaction are written
once against these protocols. ``AggregateView`` and ``NodeGraphView`` adapt
the two concrete schedule shapes to them.
"""

from collections.abc import Sequence
from datetime import timedelta
from typing import Protocol

from shopsched.models import PrecedenceType


class SchedulableTask(Protocol):
    """The task capabilities the algorithms rely on."""

    is_violation: bool
    row_index: int

    @property
    def id(self) -> int: ...

    @property
    def name(self) -> str: ...

    @property
    def start_time(self) -> timedelta: ...

    @property
    def duration(self) -> timedelta: ...

    @property
    def end_time(self) -> timedelta: ...

    @property
    def machine_id(self) -> int | None: ...

    @property
    def priority(self) -> int: ...

    def set_start_time(self, start_time: timedelta) -> None:
        """Move the task, keeping its duration. Clamped at zero."""
        ...

    def shift_by(self, offset: timedelta) -> None:
        """Shift the task by an offset. Clamped at zero."""
        ...


class Constraint(Protocol):
    """A precedence constraint between two tasks."""

    is_violated: bool
    violation_message: str | None

    @property
    def predecessor_task_id(self) -> int: ...

    @property
    def successor_task_id(self) -> int: ...

    @property
    def relation(self) -> PrecedenceType: ...

    @property
    def lag(self) -> timedelta: ...

    def is_satisfied(
        self, predecessor_start: timedelta, predecessor_end: timedelta, successor_start: timedelta
    ) -> bool: ...

    def required_shift(
        self, predecessor_start: timedelta, predecessor_end: timedelta, successor_start: timedelta
    ) -> timedelta: ...

    def is_enforced(self) -> bool:
        """Whether scheduling and validation act on this constraint."""
        ...

    def earliest_successor_start(self, predecessor_end: timedelta) -> timedelta: ...


class ScheduleView(Protocol):
    """Read/write access to a schedule, independent of its concrete shape."""

    def tasks(self) -> Sequence[SchedulableTask]:
        """All schedulable tasks, in collection order."""
        ...

    def get_task(self, task_id: int) -> SchedulableTask | None: ...

    def constraints(self) -> Sequence[Constraint]:
        """All constraints, in insertion order."""
        ...

    def constraints_into(self, task_id: int) -> Sequence[Constraint]:
        """Constraints in which the task is the successor."""
        ...

    def machine_ids(self) -> list[int]:
        """Registered machine IDs, in row order."""
        ...

    def machine_row_index(self, machine_id: int) -> int: ...

    def machine_downtime(self, machine_id: int) -> list[tuple[timedelta, timedelta]]:
        """Downtime windows of a machine as (start, end) tuples."""
        ...

    def makespan(self) -> timedelta: ...

    def clear_violations(self) -> None:
        """Reset violation flags on every task and constraint."""
        ...
