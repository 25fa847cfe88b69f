"""Generic node/edge graph shape of a schedule.

Diagram editors hold schedules as visual nodes tagged as tasks, machines or
jobs, with directed edges standing in for precedence constraints. An edge
``source -> target`` means the source task must finish before the target
task starts (finish-to-start, zero lag).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .models import MachineType


@dataclass
class Node:
    """A diagram node. Only the scheduling-relevant attributes are modelled."""

    id: int
    text: str = ""
    is_task: bool = False
    is_machine: bool = False
    is_job: bool = False
    start_time: timedelta | None = None
    duration: timedelta | None = None
    job_id: int | None = None
    machine_id: int | None = None
    row_index: int = -1
    priority: int = 0
    percent_complete: int = 0
    is_violation: bool = False
    release_time: timedelta | None = None
    due_time: timedelta | None = None
    machine_type: MachineType = MachineType.MACHINE
    color: str | None = None

    @property
    def end_time(self) -> timedelta | None:
        if self.start_time is None or self.duration is None:
            return None
        return self.start_time + self.duration

    @classmethod
    def task(  # noqa: PLR0913 - keyword-friendly factory
        cls,
        node_id: int,
        name: str,
        start_time: timedelta,
        duration: timedelta,
        *,
        job_id: int | None = None,
        machine_id: int | None = None,
        priority: int = 0,
    ) -> Node:
        """Create a task node. The row index starts out as the machine id."""
        return cls(
            id=node_id,
            text=name,
            is_task=True,
            start_time=start_time,
            duration=duration,
            job_id=job_id,
            machine_id=machine_id,
            row_index=machine_id if machine_id is not None else 0,
            priority=priority,
        )

    @classmethod
    def machine(
        cls,
        node_id: int,
        name: str,
        row_index: int,
        machine_type: MachineType = MachineType.MACHINE,
    ) -> Node:
        """Create a machine node occupying a timeline row."""
        return cls(
            id=node_id,
            text=name,
            is_machine=True,
            row_index=row_index,
            machine_type=machine_type,
        )

    @classmethod
    def job(cls, node_id: int, name: str, color: str) -> Node:
        return cls(id=node_id, text=name, is_job=True, color=color)


@dataclass
class Edge:
    """A directed diagram edge: ``source`` must finish before ``target`` starts."""

    id: int
    source: int
    target: int
