"""Schedule aggregate: the single owner of machines, jobs, tasks and precedences."""

from __future__ import annotations

import math
from datetime import timedelta

from .exceptions import MissingReferenceError, ValidationError
from .logger import get_logger
from .models import (
    ZERO,
    UNASSIGNED_MACHINE,
    Job,
    Machine,
    MachineType,
    Precedence,
    PrecedenceType,
    Task,
)

logger = get_logger()

DEFAULT_TIMELINE_END = timedelta(hours=8)


class Schedule:
    """A machine schedule.

    The schedule is the only place that wires cross-references: adding a task
    registers it with its job and machine, removing a task drops every
    precedence that mentions it, and removing a machine unassigns its tasks.
    ID counters belong to the instance, so two schedules never share IDs.
    """

    def __init__(
        self,
        name: str = "New Schedule",
        *,
        timeline_start: timedelta = ZERO,
        timeline_end: timedelta = DEFAULT_TIMELINE_END,
        description: str | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.timeline_start = timeline_start
        self.timeline_end = timeline_end
        self.machines: list[Machine] = []
        self.jobs: list[Job] = []
        self.tasks: list[Task] = []
        self.precedences: list[Precedence] = []
        self._next_task_id = 1
        self._next_job_id = 1
        self._next_machine_id = 1
        self._next_precedence_id = 1

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def add_machine(self, name: str, machine_type: MachineType = MachineType.MACHINE) -> Machine:
        """Create a machine on the next free row."""
        machine = Machine(
            id=self._next_machine_id,
            name=name,
            machine_type=machine_type,
            row_index=len(self.machines),
        )
        self._next_machine_id += 1
        self.machines.append(machine)
        return machine

    def add_job(  # noqa: PLR0913 - job attributes are all optional keywords
        self,
        name: str,
        color: str = "#3b82f6",
        *,
        priority: int = 1,
        release_time: timedelta = ZERO,
        due_time: timedelta | None = None,
        weight: float = 1.0,
    ) -> Job:
        """Create a job."""
        job = Job(
            id=self._next_job_id,
            name=name,
            color=color,
            priority=priority,
            release_time=release_time,
            due_time=due_time,
            weight=weight,
        )
        self._next_job_id += 1
        self.jobs.append(job)
        return job

    def add_task(  # noqa: PLR0913 - mirrors the task record
        self,
        name: str,
        job_id: int,
        machine_id: int,
        start_time: timedelta,
        duration: timedelta,
        *,
        priority: int = 0,
        setup_time: timedelta = ZERO,
    ) -> Task:
        """Create a task and register it with its job and machine.

        Raises:
            MissingReferenceError: If the job is unknown, or the machine is neither
                registered nor UNASSIGNED_MACHINE
        """
        job = self.get_job(job_id)
        if job is None:
            raise MissingReferenceError(f"Task '{name}' references unknown job {job_id}")

        machine = self.get_machine(machine_id)
        if machine is None and machine_id != UNASSIGNED_MACHINE:
            raise MissingReferenceError(f"Task '{name}' references unknown machine {machine_id}")

        task = Task(
            id=self._next_task_id,
            name=name,
            job_id=job_id,
            machine_id=machine_id,
            start_time=max(start_time, ZERO),
            duration=duration,
            priority=priority,
            setup_time=setup_time,
        )
        self._next_task_id += 1
        self.tasks.append(task)

        job.add_task(task.id)
        if machine is not None:
            machine.add_task(task.id)
            task.row_index = machine.row_index

        return task

    def add_precedence(
        self,
        predecessor_task_id: int,
        successor_task_id: int,
        lag: timedelta | None = None,
        relation: PrecedenceType = PrecedenceType.FINISH_TO_START,
    ) -> Precedence:
        """Create a precedence constraint between two existing tasks.

        Raises:
            MissingReferenceError: If either task does not exist
            ValidationError: If predecessor and successor are the same task
        """
        for task_id in (predecessor_task_id, successor_task_id):
            if self.get_task(task_id) is None:
                raise MissingReferenceError(f"Precedence references unknown task {task_id}")
        if predecessor_task_id == successor_task_id:
            raise ValidationError(f"Task {predecessor_task_id} cannot precede itself")

        precedence = Precedence(
            id=self._next_precedence_id,
            predecessor_task_id=predecessor_task_id,
            successor_task_id=successor_task_id,
            relation=relation,
            lag=lag if lag is not None else ZERO,
        )
        self._next_precedence_id += 1
        self.precedences.append(precedence)
        return precedence

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_task(self, task_id: int) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def get_job(self, job_id: int) -> Job | None:
        return next((j for j in self.jobs if j.id == job_id), None)

    def get_machine(self, machine_id: int) -> Machine | None:
        return next((m for m in self.machines if m.id == machine_id), None)

    def get_precedence(self, precedence_id: int) -> Precedence | None:
        return next((p for p in self.precedences if p.id == precedence_id), None)

    def tasks_for_job(self, job_id: int) -> list[Task]:
        return [t for t in self.tasks if t.job_id == job_id]

    def tasks_for_machine(self, machine_id: int) -> list[Task]:
        return [t for t in self.tasks if t.machine_id == machine_id]

    def precedences_into(self, task_id: int) -> list[Precedence]:
        """Constraints in which the task is the successor, in insertion order."""
        return [p for p in self.precedences if p.successor_task_id == task_id]

    def predecessors(self, task_id: int) -> list[Task]:
        """Tasks that must finish before this one starts."""
        ids = {p.predecessor_task_id for p in self.precedences if p.successor_task_id == task_id}
        return [t for t in self.tasks if t.id in ids]

    def successors(self, task_id: int) -> list[Task]:
        """Tasks that depend on this one."""
        ids = {p.successor_task_id for p in self.precedences if p.predecessor_task_id == task_id}
        return [t for t in self.tasks if t.id in ids]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def reassign_task(self, task_id: int, machine_id: int) -> None:
        """Move a task to another machine (or to UNASSIGNED_MACHINE).

        Raises:
            MissingReferenceError: If the task or the target machine is unknown
        """
        task = self.get_task(task_id)
        if task is None:
            raise MissingReferenceError(f"Unknown task {task_id}")
        target = self.get_machine(machine_id)
        if target is None and machine_id != UNASSIGNED_MACHINE:
            raise MissingReferenceError(f"Unknown machine {machine_id}")

        current = self.get_machine(task.machine_id)
        if current is not None:
            current.remove_task(task_id)
        task.machine_id = machine_id
        if target is not None:
            target.add_task(task_id)
            task.row_index = target.row_index
        else:
            task.row_index = 0

    def remove_task(self, task_id: int) -> None:
        """Remove a task together with every precedence that mentions it."""
        task = self.get_task(task_id)
        if task is None:
            return

        job = self.get_job(task.job_id)
        if job is not None:
            job.remove_task(task_id)

        machine = self.get_machine(task.machine_id)
        if machine is not None:
            machine.remove_task(task_id)

        self.precedences = [
            p
            for p in self.precedences
            if p.predecessor_task_id != task_id and p.successor_task_id != task_id
        ]
        self.tasks.remove(task)

    def remove_job(self, job_id: int) -> None:
        """Remove a job and all of its tasks."""
        job = self.get_job(job_id)
        if job is None:
            return

        for task_id in list(job.task_ids):
            self.remove_task(task_id)
        self.jobs.remove(job)

    def remove_machine(self, machine_id: int) -> None:
        """Remove a machine. Its tasks are kept but become unassigned."""
        machine = self.get_machine(machine_id)
        if machine is None:
            return

        for task_id in machine.task_ids:
            task = self.get_task(task_id)
            if task is not None:
                task.machine_id = UNASSIGNED_MACHINE
                task.row_index = 0
                logger.changes(f"Task '{task.name}' unassigned (machine '{machine.name}' removed)")

        self.machines.remove(machine)

        # Keep rows contiguous, in existing relative order
        for row, remaining in enumerate(self.machines):
            remaining.row_index = row
            for task_id in remaining.task_ids:
                task = self.get_task(task_id)
                if task is not None:
                    task.row_index = row

    def remove_precedence(self, precedence_id: int) -> None:
        precedence = self.get_precedence(precedence_id)
        if precedence is not None:
            self.precedences.remove(precedence)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def get_makespan(self) -> timedelta:
        """End time of the last task, or zero for an empty schedule."""
        return max((t.end_time for t in self.tasks), default=ZERO)

    def get_violation_count(self) -> int:
        """Number of tasks currently flagged as violating a precedence."""
        return sum(1 for t in self.tasks if t.is_violation)

    def recalculate_timeline_end(self) -> None:
        """Fit the timeline to the makespan plus an hour, never below 8 hours."""
        hours = math.ceil(self.get_makespan() / timedelta(hours=1)) + 1
        self.timeline_end = max(timedelta(hours=hours), DEFAULT_TIMELINE_END)

    @classmethod
    def create_sample(cls) -> Schedule:
        """Build a small three-machine, three-job demonstration schedule."""
        schedule = cls("Sample Schedule")

        m1 = schedule.add_machine("Machine 1")
        m2 = schedule.add_machine("Machine 2")
        m3 = schedule.add_machine("Machine 3")

        job_a = schedule.add_job("Job A", "#ef4444")
        job_b = schedule.add_job("Job B", "#3b82f6")
        job_c = schedule.add_job("Job C", "#22c55e")

        def minutes(value: int) -> timedelta:
            return timedelta(minutes=value)

        a1 = schedule.add_task("A1", job_a.id, m1.id, minutes(0), minutes(45))
        a2 = schedule.add_task("A2", job_a.id, m2.id, minutes(45), minutes(30))
        a3 = schedule.add_task("A3", job_a.id, m3.id, minutes(75), minutes(60))

        b1 = schedule.add_task("B1", job_b.id, m2.id, minutes(0), minutes(60))
        b2 = schedule.add_task("B2", job_b.id, m1.id, minutes(60), minutes(45))
        b3 = schedule.add_task("B3", job_b.id, m3.id, minutes(135), minutes(30))

        c1 = schedule.add_task("C1", job_c.id, m3.id, minutes(0), minutes(30))
        c2 = schedule.add_task("C2", job_c.id, m1.id, minutes(105), minutes(30))

        schedule.add_precedence(a1.id, a2.id)
        schedule.add_precedence(a2.id, a3.id)
        schedule.add_precedence(b1.id, b2.id)
        schedule.add_precedence(b2.id, b3.id)
        schedule.add_precedence(c1.id, c2.id)

        return schedule
