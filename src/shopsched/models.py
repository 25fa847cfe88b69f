"""Data models for machine schedules.

All times are ``timedelta`` offsets from the schedule epoch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, model_validator

if TYPE_CHECKING:
    from collections.abc import Iterable

ZERO = timedelta(0)

# Machine id written into tasks whose machine was removed
UNASSIGNED_MACHINE = 0

DEFAULT_TASK_DURATION = timedelta(minutes=30)


def _default_id_list() -> list[int]:
    return []


def _default_window_list() -> list[TimeWindow]:
    return []


class TimeWindow(BaseModel):
    """A half-open time window [start, end), e.g. a maintenance slot."""

    start: timedelta
    end: timedelta
    label: str | None = None

    @model_validator(mode="after")
    def validate_end_after_start(self) -> TimeWindow:
        """Ensure the window does not end before it starts."""
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, time: timedelta) -> bool:
        """Check whether a point in time falls inside the window."""
        return self.start <= time < self.end

    def overlaps(self, start: timedelta, end: timedelta) -> bool:
        """Check whether the interval [start, end) overlaps this window."""
        return start < self.end and end > self.start


class MachineType(str, Enum):
    """Kinds of machines, used for grouping and display only."""

    MACHINE = "machine"
    WORKSTATION = "workstation"
    ROBOT = "robot"
    CONVEYOR = "conveyor"
    ASSEMBLY = "assembly"
    INSPECTION = "inspection"
    PACKAGING = "packaging"
    STORAGE = "storage"
    CUSTOM = "custom"


class PrecedenceType(str, Enum):
    """Relation kinds of a precedence constraint."""

    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


@dataclass
class Task:
    """An operation processed on one machine as part of a job.

    ``end_time`` is always derived from ``start_time + duration``.
    """

    id: int
    name: str = "Task"
    job_id: int = 0
    machine_id: int = UNASSIGNED_MACHINE
    start_time: timedelta = ZERO
    duration: timedelta = DEFAULT_TASK_DURATION
    setup_time: timedelta = ZERO
    percent_complete: int = 0
    priority: int = 0
    is_violation: bool = False
    is_critical: bool = False
    row_index: int = 0
    description: str | None = None

    @property
    def end_time(self) -> timedelta:
        return self.start_time + self.duration

    def set_end_time(self, end_time: timedelta) -> None:
        """Move the end by changing the duration; ignored unless after the start."""
        if end_time > self.start_time:
            self.duration = end_time - self.start_time

    def set_start_time(self, start_time: timedelta) -> None:
        """Move the start, keeping the duration. Clamped at zero."""
        self.start_time = max(start_time, ZERO)

    def shift_by(self, offset: timedelta) -> None:
        """Shift the task later (positive) or earlier (negative). Clamped at zero."""
        self.set_start_time(self.start_time + offset)


@dataclass
class Machine:
    """A machine (or other resource) with its own timeline row."""

    id: int
    name: str = "Machine"
    row_index: int = 0
    machine_type: MachineType = MachineType.MACHINE
    speed_factor: float = 1.0
    is_available: bool = True
    availability_windows: list[TimeWindow] = field(default_factory=_default_window_list)
    downtime_windows: list[TimeWindow] = field(default_factory=_default_window_list)
    task_ids: list[int] = field(default_factory=_default_id_list)
    color: str | None = None
    description: str | None = None

    def add_task(self, task_id: int) -> None:
        if task_id not in self.task_ids:
            self.task_ids.append(task_id)

    def remove_task(self, task_id: int) -> None:
        if task_id in self.task_ids:
            self.task_ids.remove(task_id)

    def _own_tasks(self, all_tasks: Iterable[Task]) -> list[Task]:
        return [t for t in all_tasks if t.id in self.task_ids]

    def total_processing_time(self, all_tasks: Iterable[Task]) -> timedelta:
        """Sum of durations of the tasks assigned to this machine."""
        return sum((t.duration for t in self._own_tasks(all_tasks)), ZERO)

    def makespan(self, all_tasks: Iterable[Task]) -> timedelta:
        """End time of the last task on this machine, or zero."""
        own = self._own_tasks(all_tasks)
        return max((t.end_time for t in own), default=ZERO)

    def is_time_slot_available(
        self, start: timedelta, end: timedelta, all_tasks: Iterable[Task]
    ) -> bool:
        """Check that [start, end) avoids downtime and every assigned task."""
        if any(window.overlaps(start, end) for window in self.downtime_windows):
            return False
        for task in self._own_tasks(all_tasks):
            if start < task.end_time and end > task.start_time:
                return False
        return True


@dataclass
class Job:
    """An order or batch made of tasks. Its tasks inherit its color for display."""

    id: int
    name: str = "Job"
    color: str = "#3b82f6"
    stroke_color: str = "#1d4ed8"
    priority: int = 1
    release_time: timedelta = ZERO
    due_time: timedelta | None = None
    weight: float = 1.0
    customer_reference: str | None = None
    task_ids: list[int] = field(default_factory=_default_id_list)
    completion_time: timedelta | None = None  # Written by the metrics calculator
    description: str | None = None

    @property
    def flow_time(self) -> timedelta | None:
        if self.completion_time is None:
            return None
        return self.completion_time - self.release_time

    @property
    def tardiness(self) -> timedelta | None:
        if self.completion_time is None or self.due_time is None:
            return None
        return max(self.completion_time - self.due_time, ZERO)

    @property
    def is_late(self) -> bool:
        tardiness = self.tardiness
        return tardiness is not None and tardiness > ZERO

    def add_task(self, task_id: int) -> None:
        if task_id not in self.task_ids:
            self.task_ids.append(task_id)

    def remove_task(self, task_id: int) -> None:
        if task_id in self.task_ids:
            self.task_ids.remove(task_id)


@dataclass
class Precedence:
    """An ordering constraint between two tasks, with optional lag.

    A positive lag is a required delay, a negative lag a permitted overlap.
    Only finish-to-start and start-to-start relations are enforced; the
    finish-to-finish and start-to-finish kinds are informational and always
    count as satisfied.
    """

    id: int
    predecessor_task_id: int
    successor_task_id: int
    relation: PrecedenceType = PrecedenceType.FINISH_TO_START
    lag: timedelta = ZERO
    is_violated: bool = False
    violation_message: str | None = None

    def is_enforced(self) -> bool:
        return self.relation in (PrecedenceType.FINISH_TO_START, PrecedenceType.START_TO_START)

    def _required_start(
        self, predecessor_start: timedelta, predecessor_end: timedelta
    ) -> timedelta:
        if self.relation == PrecedenceType.START_TO_START:
            return predecessor_start + self.lag
        return predecessor_end + self.lag

    def is_satisfied(
        self, predecessor_start: timedelta, predecessor_end: timedelta, successor_start: timedelta
    ) -> bool:
        """Check the constraint against the given task times."""
        if not self.is_enforced():
            return True
        return successor_start >= self._required_start(predecessor_start, predecessor_end)

    def required_shift(
        self, predecessor_start: timedelta, predecessor_end: timedelta, successor_start: timedelta
    ) -> timedelta:
        """How far the successor must move later to satisfy the constraint (never negative)."""
        if not self.is_enforced():
            return ZERO
        return max(self._required_start(predecessor_start, predecessor_end) - successor_start, ZERO)

    def earliest_successor_start(self, predecessor_end: timedelta) -> timedelta:
        """Earliest successor start used when placing tasks: predecessor end plus lag."""
        return predecessor_end + self.lag
