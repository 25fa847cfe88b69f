"""Pytest configuration and fixtures for shopsched tests."""

from __future__ import annotations

from datetime import timedelta

import pytest

from shopsched.graph import Edge, Node
from shopsched.logger import reset_logger
from shopsched.models import Task
from shopsched.schedule import Schedule


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Reset the shared logger before each test for isolation."""
    reset_logger()


def minutes(value: float) -> timedelta:
    """Shorthand for a duration in minutes."""
    return timedelta(minutes=value)


def single_machine_schedule(*durations: int) -> tuple[Schedule, list[Task]]:
    """Create a schedule with one machine and one job.

    Every task starts at zero, so the tasks overlap until a scheduler places
    them. Tasks are named T1, T2, ... in argument order.

    Example:
        schedule, (t1, t2) = single_machine_schedule(30, 45)
    """
    schedule = Schedule("Test")
    machine = schedule.add_machine("M1")
    job = schedule.add_job("J1")
    tasks = [
        schedule.add_task(f"T{i}", job.id, machine.id, minutes(0), minutes(duration))
        for i, duration in enumerate(durations, start=1)
    ]
    return schedule, tasks


def chain_graph() -> tuple[list[Node], list[Edge]]:
    """Create a two-machine graph with a three-task chain A -> B -> C.

    A (30m) and C (20m) run on machine 1, B (40m) on machine 2. All tasks
    start at zero, so B and C violate their predecessors until scheduled.
    """
    nodes = [
        Node.machine(1, "Lathe", row_index=0),
        Node.machine(2, "Mill", row_index=1),
        Node.task(10, "A", minutes(0), minutes(30), machine_id=1),
        Node.task(11, "B", minutes(0), minutes(40), machine_id=2),
        Node.task(12, "C", minutes(0), minutes(20), machine_id=1),
    ]
    edges = [Edge(100, 10, 11), Edge(101, 11, 12)]
    return nodes, edges
