"""Adapters exposing both schedule shapes through ``ScheduleView``."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

from shopsched.graph import Edge, Node
from shopsched.logger import get_logger
from shopsched.models import ZERO, Precedence, Task
from shopsched.schedule import Schedule

logger = get_logger()


class AggregateView:
    """ScheduleView over a ``Schedule`` aggregate.

    Tasks and precedences are the aggregate's own records, so violation flags
    set by the validator land directly on them.
    """

    def __init__(self, schedule: Schedule) -> None:
        self.schedule = schedule

    def tasks(self) -> list[Task]:
        return self.schedule.tasks

    def get_task(self, task_id: int) -> Task | None:
        return self.schedule.get_task(task_id)

    def constraints(self) -> list[Precedence]:
        return self.schedule.precedences

    def constraints_into(self, task_id: int) -> list[Precedence]:
        return self.schedule.precedences_into(task_id)

    def machine_ids(self) -> list[int]:
        return [m.id for m in self.schedule.machines]

    def machine_row_index(self, machine_id: int) -> int:
        machine = self.schedule.get_machine(machine_id)
        return machine.row_index if machine else 0

    def machine_downtime(self, machine_id: int) -> list[tuple[timedelta, timedelta]]:
        machine = self.schedule.get_machine(machine_id)
        if machine is None:
            return []
        return [(w.start, w.end) for w in machine.downtime_windows]

    def makespan(self) -> timedelta:
        return self.schedule.get_makespan()

    def clear_violations(self) -> None:
        for task in self.schedule.tasks:
            task.is_violation = False
        for precedence in self.schedule.precedences:
            precedence.is_violated = False
            precedence.violation_message = None


class NodeTask:
    """SchedulableTask wrapper around a task node.

    A task node without a start time is treated as starting at the epoch.
    """

    def __init__(self, node: Node) -> None:
        if node.duration is None:
            raise ValueError(f"Node {node.id} has no duration")
        self.node = node

    @property
    def id(self) -> int:
        return self.node.id

    @property
    def name(self) -> str:
        return self.node.text

    @property
    def start_time(self) -> timedelta:
        return self.node.start_time if self.node.start_time is not None else ZERO

    @property
    def duration(self) -> timedelta:
        assert self.node.duration is not None
        return self.node.duration

    @property
    def end_time(self) -> timedelta:
        return self.start_time + self.duration

    @property
    def machine_id(self) -> int | None:
        return self.node.machine_id

    @property
    def priority(self) -> int:
        return self.node.priority

    @property
    def is_violation(self) -> bool:
        return self.node.is_violation

    @is_violation.setter
    def is_violation(self, value: bool) -> None:
        self.node.is_violation = value

    @property
    def row_index(self) -> int:
        return self.node.row_index

    @row_index.setter
    def row_index(self, value: int) -> None:
        self.node.row_index = value

    def set_start_time(self, start_time: timedelta) -> None:
        self.node.start_time = max(start_time, ZERO)

    def shift_by(self, offset: timedelta) -> None:
        self.set_start_time(self.start_time + offset)


class NodeGraphView:
    """ScheduleView over diagram nodes and edges.

    Only task nodes with a duration take part in scheduling. Each edge between
    two such nodes becomes a finish-to-start constraint with zero lag. The
    constraint records live as long as the view, so violation state is kept
    between validation passes on the same view.
    """

    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        self.nodes = list(nodes)
        self._task_nodes = [n for n in self.nodes if n.is_task]
        self._tasks = [NodeTask(n) for n in self._task_nodes if n.duration is not None]
        self._tasks_by_id = {t.id: t for t in self._tasks}
        self._machines = [n for n in self.nodes if n.is_machine]

        self._constraints: list[Precedence] = []
        for edge in edges:
            if edge.source not in self._tasks_by_id or edge.target not in self._tasks_by_id:
                continue
            self._constraints.append(
                Precedence(
                    id=edge.id,
                    predecessor_task_id=edge.source,
                    successor_task_id=edge.target,
                )
            )

    def tasks(self) -> list[NodeTask]:
        return self._tasks

    def get_task(self, task_id: int) -> NodeTask | None:
        return self._tasks_by_id.get(task_id)

    def constraints(self) -> list[Precedence]:
        return self._constraints

    def constraints_into(self, task_id: int) -> list[Precedence]:
        return [c for c in self._constraints if c.successor_task_id == task_id]

    def machine_ids(self) -> list[int]:
        return [m.id for m in self._machines]

    def machine_row_index(self, machine_id: int) -> int:
        machine = next((m for m in self._machines if m.id == machine_id), None)
        return machine.row_index if machine else 0

    def machine_downtime(self, machine_id: int) -> list[tuple[timedelta, timedelta]]:
        return []

    def makespan(self) -> timedelta:
        return max((t.end_time for t in self._tasks), default=ZERO)

    def clear_violations(self) -> None:
        for node in self._task_nodes:
            node.is_violation = False
        for constraint in self._constraints:
            constraint.is_violated = False
            constraint.violation_message = None

    def assign_default_machine(self) -> None:
        """Put task nodes without a valid machine onto the first machine node."""
        if not self._machines:
            return
        known = set(self.machine_ids())
        fallback = self._machines[0]
        for task in self._tasks:
            if task.node.machine_id not in known:
                logger.changes(f"Task '{task.name}' assigned to default machine '{fallback.text}'")
                task.node.machine_id = fallback.id
