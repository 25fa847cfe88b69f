"""Core dataclasses for the scheduling engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from shopsched.models import ZERO

if TYPE_CHECKING:
    from .protocols import ScheduleView


def _default_violation_list() -> list[PrecedenceViolation]:
    return []


def _default_str_list() -> list[str]:
    return []


def _default_cycle_list() -> list[list[int]]:
    return []


def _default_machine_stat_list() -> list[MachineStat]:
    return []


@dataclass
class PrecedenceViolation:
    """A violated precedence constraint, as reported by the validator."""

    predecessor_task_id: int
    successor_task_id: int
    predecessor_name: str
    successor_name: str
    predecessor_end_time: timedelta
    successor_start_time: timedelta
    required_shift: timedelta  # How far the successor must move later
    message: str


@dataclass
class MachineConflict:
    """Two tasks whose intervals overlap on the same machine."""

    machine_id: int
    first_task_id: int
    second_task_id: int
    overlap: timedelta


@dataclass
class SchedulingResult:
    """Outcome of a validation, scheduling or repair run.

    ``success`` is True when no precedence violations remain.
    """

    success: bool = False
    message: str = ""
    tasks_scheduled: int = 0
    violations_found: int = 0
    makespan: timedelta = ZERO
    violations: list[PrecedenceViolation] = field(default_factory=_default_violation_list)
    iterations: int = 0  # Repair passes used
    cycles: list[list[int]] = field(default_factory=_default_cycle_list)  # Task IDs per cycle
    warnings: list[str] = field(default_factory=_default_str_list)


@dataclass
class MachineStat:
    """Load of one machine: merged busy time and its share of the makespan."""

    machine_id: int
    name: str
    busy_time: timedelta = ZERO  # Overlapping tasks counted once
    utilization: float = 0.0  # Percent, capped at 100
    task_count: int = 0


@dataclass
class ScheduleMetrics:
    """Quality figures derived from a schedule snapshot."""

    task_count: int = 0
    machine_count: int = 0
    job_count: int = 0
    makespan: timedelta = ZERO
    total_processing_time: timedelta = ZERO
    average_flow_time: timedelta = ZERO
    machine_utilization: float = 0.0  # Percent
    violation_count: int = 0
    late_job_count: int = 0
    machine_stats: list[MachineStat] = field(default_factory=_default_machine_stat_list)
    average_machine_utilization: float = 0.0  # Mean of machine_stats utilizations


def earliest_start_after_predecessors(view: ScheduleView, task_id: int) -> timedelta:
    """Earliest start allowed by the task's predecessors.

    This is the maximum of predecessor end plus lag over every enforced
    constraint whose successor is the task, or zero when it has none.
    Finish-to-finish and start-to-finish constraints never delay a task.
    """
    earliest = ZERO
    for constraint in view.constraints_into(task_id):
        if not constraint.is_enforced():
            continue
        predecessor = view.get_task(constraint.predecessor_task_id)
        if predecessor is None:
            continue
        earliest = max(earliest, constraint.earliest_successor_start(predecessor.end_time))
    return earliest
