"""Tests for the schedule aggregate."""

from datetime import timedelta

import pytest

from shopsched.exceptions import MissingReferenceError, ValidationError
from shopsched.models import UNASSIGNED_MACHINE, ZERO
from shopsched.schedule import Schedule
from tests.conftest import minutes


class TestIds:
    """Test ID assignment."""

    def test_ids_are_per_schedule(self) -> None:
        """Test that two schedules number their records independently."""
        first = Schedule("First")
        second = Schedule("Second")

        assert first.add_machine("M").id == 1
        assert first.add_machine("M").id == 2
        assert second.add_machine("M").id == 1

    def test_machines_fill_rows_in_order(self) -> None:
        """Test that each new machine takes the next row."""
        schedule = Schedule()
        rows = [schedule.add_machine(f"M{i}").row_index for i in range(3)]
        assert rows == [0, 1, 2]


class TestAddTask:
    """Test task creation and cross-reference wiring."""

    def test_task_registered_with_job_and_machine(self) -> None:
        """Test that a new task is linked from its job and machine."""
        schedule = Schedule()
        schedule.add_machine("M1")
        machine = schedule.add_machine("M2")
        job = schedule.add_job("J")

        task = schedule.add_task("T", job.id, machine.id, minutes(10), minutes(20))

        assert task.id in job.task_ids
        assert task.id in machine.task_ids
        assert task.row_index == 1

    def test_unknown_job_rejected(self) -> None:
        """Test that a task must belong to an existing job."""
        schedule = Schedule()
        machine = schedule.add_machine("M")
        with pytest.raises(MissingReferenceError, match="unknown job 99"):
            schedule.add_task("T", 99, machine.id, ZERO, minutes(10))

    def test_unknown_machine_rejected(self) -> None:
        """Test that a task cannot reference a machine that does not exist."""
        schedule = Schedule()
        job = schedule.add_job("J")
        with pytest.raises(MissingReferenceError, match="unknown machine 5"):
            schedule.add_task("T", job.id, 5, ZERO, minutes(10))

    def test_unassigned_machine_allowed(self) -> None:
        """Test that the unassigned sentinel is accepted."""
        schedule = Schedule()
        job = schedule.add_job("J")
        task = schedule.add_task("T", job.id, UNASSIGNED_MACHINE, ZERO, minutes(10))
        assert task.machine_id == UNASSIGNED_MACHINE


class TestPrecedences:
    """Test precedence creation and lookups."""

    def _two_tasks(self) -> Schedule:
        schedule = Schedule()
        machine = schedule.add_machine("M")
        job = schedule.add_job("J")
        schedule.add_task("A", job.id, machine.id, ZERO, minutes(30))
        schedule.add_task("B", job.id, machine.id, minutes(30), minutes(30))
        return schedule

    def test_unknown_task_rejected(self) -> None:
        """Test that both ends of a precedence must exist."""
        schedule = self._two_tasks()
        with pytest.raises(MissingReferenceError):
            schedule.add_precedence(1, 42)

    def test_self_precedence_rejected(self) -> None:
        """Test that a task cannot precede itself."""
        schedule = self._two_tasks()
        with pytest.raises(ValidationError, match="cannot precede itself"):
            schedule.add_precedence(1, 1)

    def test_predecessor_and_successor_lookups(self) -> None:
        """Test navigation along precedences."""
        schedule = self._two_tasks()
        precedence = schedule.add_precedence(1, 2, lag=minutes(5))

        assert precedence.lag == minutes(5)
        assert [t.name for t in schedule.predecessors(2)] == ["A"]
        assert [t.name for t in schedule.successors(1)] == ["B"]
        assert schedule.precedences_into(2) == [precedence]


class TestRemoval:
    """Test cascading removals."""

    def test_remove_task_drops_its_precedences(self) -> None:
        """Test that removing a task removes every precedence mentioning it."""
        schedule = Schedule.create_sample()
        a2 = next(t for t in schedule.tasks if t.name == "A2")

        schedule.remove_task(a2.id)

        assert schedule.get_task(a2.id) is None
        assert all(
            a2.id not in (p.predecessor_task_id, p.successor_task_id) for p in schedule.precedences
        )
        assert len(schedule.precedences) == 3

    def test_remove_job_removes_its_tasks(self) -> None:
        """Test that a job takes its tasks with it."""
        schedule = Schedule.create_sample()
        job_b = schedule.jobs[1]

        schedule.remove_job(job_b.id)

        assert schedule.get_job(job_b.id) is None
        assert not any(t.name.startswith("B") for t in schedule.tasks)

    def test_remove_machine_unassigns_tasks_and_renumbers_rows(self) -> None:
        """Test that tasks survive machine removal and rows stay contiguous."""
        schedule = Schedule.create_sample()
        first, second, third = schedule.machines
        on_first = [t.id for t in schedule.tasks_for_machine(first.id)]

        schedule.remove_machine(first.id)

        for task_id in on_first:
            task = schedule.get_task(task_id)
            assert task is not None
            assert task.machine_id == UNASSIGNED_MACHINE
        assert (second.row_index, third.row_index) == (0, 1)
        assert all(t.row_index == 1 for t in schedule.tasks_for_machine(third.id))

    def test_removed_machine_tasks_leave_their_row(self) -> None:
        """Test that unassigned tasks do not keep a row now owned by another machine."""
        schedule = Schedule.create_sample()
        _, second, third = schedule.machines
        on_second = [t.id for t in schedule.tasks_for_machine(second.id)]

        schedule.remove_machine(second.id)

        assert third.row_index == 1
        for task_id in on_second:
            task = schedule.get_task(task_id)
            assert task is not None
            assert task.row_index == 0

    def test_reassign_to_unassigned_resets_row(self) -> None:
        """Test that unassigning a task puts it back on row zero."""
        schedule = Schedule.create_sample()
        third = schedule.machines[2]
        task = schedule.tasks_for_machine(third.id)[0]

        schedule.reassign_task(task.id, UNASSIGNED_MACHINE)

        assert task.row_index == 0

    def test_reassign_task_moves_registration(self) -> None:
        """Test that reassigning updates both machines and the row."""
        schedule = Schedule.create_sample()
        first, _, third = schedule.machines
        task = schedule.tasks_for_machine(first.id)[0]

        schedule.reassign_task(task.id, third.id)

        assert task.id not in first.task_ids
        assert task.id in third.task_ids
        assert task.row_index == third.row_index


class TestDerivedValues:
    """Test makespan and timeline sizing."""

    def test_empty_schedule_makespan_is_zero(self) -> None:
        """Test that a schedule without tasks has zero makespan."""
        assert Schedule().get_makespan() == ZERO

    def test_makespan_is_latest_end(self) -> None:
        """Test that makespan is the maximum task end."""
        schedule = Schedule.create_sample()
        assert schedule.get_makespan() == max(t.end_time for t in schedule.tasks)
        assert schedule.get_makespan() == minutes(165)

    def test_timeline_end_never_below_eight_hours(self) -> None:
        """Test timeline fitting for short and long schedules."""
        schedule = Schedule.create_sample()
        schedule.recalculate_timeline_end()
        assert schedule.timeline_end == timedelta(hours=8)

        schedule.tasks[0].duration = timedelta(hours=9, minutes=10)
        schedule.recalculate_timeline_end()
        assert schedule.timeline_end == timedelta(hours=11)


class TestSample:
    """Test the built-in sample schedule."""

    def test_sample_shape(self) -> None:
        """Test the sample's machines, jobs, tasks and precedences."""
        schedule = Schedule.create_sample()
        assert len(schedule.machines) == 3
        assert len(schedule.jobs) == 3
        assert [t.name for t in schedule.tasks] == ["A1", "A2", "A3", "B1", "B2", "B3", "C1", "C2"]
        assert len(schedule.precedences) == 5
