"""Single-task compaction.

Compaction looks for a better position for one task without disturbing any
other task. It only computes the position; applying it is up to the caller.
"""

from collections.abc import Iterable
from datetime import timedelta

from shopsched.graph import Edge, Node
from shopsched.logger import get_logger
from shopsched.models import PrecedenceType
from shopsched.schedule import Schedule
from shopsched.timeutil import format_time

from .adapters import AggregateView, NodeGraphView
from .core import earliest_start_after_predecessors
from .protocols import SchedulableTask, ScheduleView

logger = get_logger()


def _machine_neighbours(view: ScheduleView, task: SchedulableTask) -> list[SchedulableTask] | None:
    """Other tasks on the task's machine sorted by start, or None if it has no machine."""
    if task.machine_id is None or task.machine_id not in view.machine_ids():
        return None
    others = [t for t in view.tasks() if t.id != task.id and t.machine_id == task.machine_id]
    return sorted(others, key=lambda t: t.start_time)


def compress_task(view: ScheduleView, task: SchedulableTask) -> timedelta | None:
    """Find the earliest start for a task that keeps every constraint and machine slot.

    The scan starts at the earliest start its predecessors allow and walks the
    other tasks of the machine in start order. Tasks starting at or after the
    task's current start are ignored, since the task only ever moves earlier.
    Each overlap advances the candidate to the end of the overlapping task.

    Args:
        view: Schedule the task belongs to (not modified)
        task: Task to compact

    Returns:
        The new start, or None when the task has no machine or cannot move earlier
    """
    neighbours = _machine_neighbours(view, task)
    if neighbours is None:
        return None

    candidate = earliest_start_after_predecessors(view, task.id)
    for other in neighbours:
        if other.start_time >= task.start_time:
            continue
        if candidate < other.end_time and candidate + task.duration > other.start_time:
            candidate = other.end_time

    if candidate < task.start_time:
        logger.checks(
            f"  '{task.name}' can move from {format_time(task.start_time)} "
            f"to {format_time(candidate)}"
        )
        return candidate
    return None


def _latest_start_allowed_by_successors(
    view: ScheduleView, task: SchedulableTask, deadline: timedelta
) -> timedelta:
    latest = deadline - task.duration
    for constraint in view.constraints():
        if constraint.predecessor_task_id != task.id or not constraint.is_enforced():
            continue
        successor = view.get_task(constraint.successor_task_id)
        if successor is None:
            continue
        if constraint.relation == PrecedenceType.FINISH_TO_START:
            latest = min(latest, successor.start_time - constraint.lag - task.duration)
        elif constraint.relation == PrecedenceType.START_TO_START:
            latest = min(latest, successor.start_time - constraint.lag)
    return latest


def compress_task_latest(
    view: ScheduleView, task: SchedulableTask, deadline: timedelta | None = None
) -> timedelta | None:
    """Find the latest start for a task that keeps every constraint and machine slot.

    The scan starts at the latest start the successors and the deadline allow
    and walks the machine's other tasks from the back, moving the candidate in
    front of each task it overlaps. The task may jump past other tasks into
    the rightmost gap it fits.

    Args:
        view: Schedule the task belongs to (not modified)
        task: Task to compact
        deadline: Latest allowed end; defaults to the current makespan

    Returns:
        The new start, or None when no feasible position exists or it is unchanged
    """
    neighbours = _machine_neighbours(view, task)
    if neighbours is None:
        return None

    limit = deadline if deadline is not None else view.makespan()
    candidate = _latest_start_allowed_by_successors(view, task, limit)
    for other in sorted(neighbours, key=lambda t: t.end_time, reverse=True):
        if candidate < other.end_time and candidate + task.duration > other.start_time:
            candidate = other.start_time - task.duration

    if candidate < earliest_start_after_predecessors(view, task.id):
        return None
    if candidate != task.start_time:
        logger.checks(
            f"  '{task.name}' can move from {format_time(task.start_time)} "
            f"to {format_time(candidate)}"
        )
        return candidate
    return None


def compress_schedule_task(schedule: Schedule, task_id: int) -> timedelta | None:
    """Earliest feasible start for a task of a schedule aggregate."""
    task = schedule.get_task(task_id)
    if task is None:
        return None
    return compress_task(AggregateView(schedule), task)


def compress_node(node: Node, nodes: Iterable[Node], edges: Iterable[Edge]) -> timedelta | None:
    """Earliest feasible start for a task node of a node/edge graph."""
    view = NodeGraphView(nodes, edges)
    task = view.get_task(node.id)
    if task is None:
        return None
    return compress_task(view, task)


def compress_node_latest(
    node: Node,
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    deadline: timedelta | None = None,
) -> timedelta | None:
    """Latest feasible start for a task node of a node/edge graph."""
    view = NodeGraphView(nodes, edges)
    task = view.get_task(node.id)
    if task is None:
        return None
    return compress_task_latest(view, task, deadline)
