"""Tests for the schedule data models."""

import pydantic
import pytest

from shopsched.models import ZERO, Job, Machine, Precedence, PrecedenceType, Task, TimeWindow
from tests.conftest import minutes


class TestTimeWindow:
    """Test half-open time windows."""

    def test_end_before_start_rejected(self) -> None:
        """Test that a window ending before it starts is invalid."""
        with pytest.raises(pydantic.ValidationError):
            TimeWindow(start=minutes(30), end=minutes(10))

    def test_contains_is_half_open(self) -> None:
        """Test that the start is inside the window and the end is not."""
        window = TimeWindow(start=minutes(10), end=minutes(20))
        assert window.contains(minutes(10))
        assert not window.contains(minutes(20))
        assert window.duration == minutes(10)

    def test_touching_intervals_do_not_overlap(self) -> None:
        """Test that an interval ending at the window start does not overlap."""
        window = TimeWindow(start=minutes(10), end=minutes(20))
        assert not window.overlaps(minutes(0), minutes(10))
        assert window.overlaps(minutes(0), minutes(11))


class TestTask:
    """Test task time handling."""

    def test_end_time_is_derived(self) -> None:
        """Test that the end follows start and duration."""
        task = Task(id=1, start_time=minutes(15), duration=minutes(45))
        assert task.end_time == minutes(60)

        task.set_start_time(minutes(30))
        assert task.end_time == minutes(75)

    def test_set_end_time_changes_duration(self) -> None:
        """Test that moving the end stretches the duration."""
        task = Task(id=1, start_time=minutes(10), duration=minutes(20))
        task.set_end_time(minutes(50))
        assert task.duration == minutes(40)

    def test_set_end_time_before_start_ignored(self) -> None:
        """Test that an end at or before the start is ignored."""
        task = Task(id=1, start_time=minutes(10), duration=minutes(20))
        task.set_end_time(minutes(10))
        assert task.duration == minutes(20)

    def test_start_clamped_at_zero(self) -> None:
        """Test that shifting before the epoch clamps to zero."""
        task = Task(id=1, start_time=minutes(10), duration=minutes(20))
        task.shift_by(minutes(-30))
        assert task.start_time == ZERO
        assert task.duration == minutes(20)


class TestMachine:
    """Test machine-level aggregates."""

    def test_processing_time_and_makespan(self) -> None:
        """Test that only the machine's own tasks are counted."""
        tasks = [
            Task(id=1, start_time=minutes(0), duration=minutes(30)),
            Task(id=2, start_time=minutes(30), duration=minutes(15)),
            Task(id=3, start_time=minutes(100), duration=minutes(50)),
        ]
        machine = Machine(id=1)
        machine.add_task(1)
        machine.add_task(2)
        machine.add_task(2)

        assert machine.task_ids == [1, 2]
        assert machine.total_processing_time(tasks) == minutes(45)
        assert machine.makespan(tasks) == minutes(45)

    def test_empty_machine_makespan_is_zero(self) -> None:
        """Test that a machine without tasks has zero makespan."""
        assert Machine(id=1).makespan([]) == ZERO

    def test_time_slot_checks_tasks_and_downtime(self) -> None:
        """Test that both assigned tasks and downtime block a slot."""
        tasks = [Task(id=1, start_time=minutes(0), duration=minutes(30))]
        machine = Machine(
            id=1,
            task_ids=[1],
            downtime_windows=[TimeWindow(start=minutes(60), end=minutes(90))],
        )

        assert not machine.is_time_slot_available(minutes(20), minutes(40), tasks)
        assert machine.is_time_slot_available(minutes(30), minutes(60), tasks)
        assert not machine.is_time_slot_available(minutes(50), minutes(70), tasks)


class TestJob:
    """Test derived job figures."""

    def test_flow_time_needs_completion(self) -> None:
        """Test that flow time is unknown until the job completes."""
        job = Job(id=1, release_time=minutes(10))
        assert job.flow_time is None

        job.completion_time = minutes(70)
        assert job.flow_time == minutes(60)

    def test_tardiness_and_lateness(self) -> None:
        """Test that only finishing after the due time makes a job late."""
        job = Job(id=1, due_time=minutes(60), completion_time=minutes(60))
        assert job.tardiness == ZERO
        assert not job.is_late

        job.completion_time = minutes(75)
        assert job.tardiness == minutes(15)
        assert job.is_late

    def test_no_due_time_never_late(self) -> None:
        """Test that a job without a due time is never late."""
        job = Job(id=1, completion_time=minutes(500))
        assert job.tardiness is None
        assert not job.is_late


class TestPrecedence:
    """Test constraint satisfaction rules."""

    def test_finish_to_start(self) -> None:
        """Test that the successor must start at or after the predecessor end."""
        precedence = Precedence(id=1, predecessor_task_id=1, successor_task_id=2)
        assert precedence.is_satisfied(minutes(0), minutes(30), minutes(30))
        assert not precedence.is_satisfied(minutes(0), minutes(30), minutes(20))
        assert precedence.required_shift(minutes(0), minutes(30), minutes(20)) == minutes(10)

    def test_positive_lag_adds_delay(self) -> None:
        """Test that a lag pushes the required start later."""
        precedence = Precedence(id=1, predecessor_task_id=1, successor_task_id=2, lag=minutes(15))
        assert not precedence.is_satisfied(minutes(0), minutes(30), minutes(40))
        assert precedence.required_shift(minutes(0), minutes(30), minutes(40)) == minutes(5)
        assert precedence.earliest_successor_start(minutes(30)) == minutes(45)

    def test_negative_lag_allows_overlap(self) -> None:
        """Test that a negative lag lets the successor start early."""
        precedence = Precedence(id=1, predecessor_task_id=1, successor_task_id=2, lag=minutes(-10))
        assert precedence.is_satisfied(minutes(0), minutes(30), minutes(20))

    def test_start_to_start(self) -> None:
        """Test that start-to-start compares against the predecessor start."""
        precedence = Precedence(
            id=1,
            predecessor_task_id=1,
            successor_task_id=2,
            relation=PrecedenceType.START_TO_START,
        )
        assert precedence.is_satisfied(minutes(10), minutes(40), minutes(10))
        assert not precedence.is_satisfied(minutes(10), minutes(40), minutes(5))

    @pytest.mark.parametrize(
        "relation", [PrecedenceType.FINISH_TO_FINISH, PrecedenceType.START_TO_FINISH]
    )
    def test_informational_relations_always_satisfied(self, relation: PrecedenceType) -> None:
        """Test that finish-to-finish and start-to-finish are never violated."""
        precedence = Precedence(id=1, predecessor_task_id=1, successor_task_id=2, relation=relation)
        assert not precedence.is_enforced()
        assert precedence.is_satisfied(minutes(0), minutes(30), minutes(0))
        assert precedence.required_shift(minutes(0), minutes(30), minutes(0)) == ZERO
