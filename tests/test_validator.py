"""Tests for precedence validation and machine conflict detection."""

from shopsched.graph import Edge, Node
from shopsched.models import PrecedenceType
from shopsched.schedule import Schedule
from shopsched.scheduler import (
    AggregateView,
    PrecedenceValidator,
    find_machine_conflicts,
    validate_node_precedences,
    validate_precedences,
)
from tests.conftest import chain_graph, minutes, single_machine_schedule


def _two_task_chain() -> Schedule:
    """Task 1 (30m at 0) must finish before task 2 (45m at 30)."""
    schedule, (first, second) = single_machine_schedule(30, 45)
    second.set_start_time(minutes(30))
    schedule.add_precedence(first.id, second.id)
    return schedule


class TestPrecedenceValidation:
    """Test violation detection on the aggregate."""

    def test_satisfied_chain_has_no_violations(self) -> None:
        """Test that a successor starting at the predecessor end is valid."""
        result = validate_precedences(_two_task_chain())

        assert result.success
        assert result.violations_found == 0
        assert result.message == "All precedence constraints satisfied"
        assert result.makespan == minutes(75)

    def test_early_successor_flagged_with_required_shift(self) -> None:
        """Test that moving the successor to 20 requires a 10 minute shift."""
        schedule = _two_task_chain()
        second = schedule.tasks[1]
        second.set_start_time(minutes(20))

        result = validate_precedences(schedule)

        assert not result.success
        assert result.violations_found == 1
        violation = result.violations[0]
        assert violation.required_shift == minutes(10)
        assert violation.successor_task_id == second.id
        assert violation.message == "Task 'T2' starts at 0:20 but predecessor 'T1' ends at 0:30"
        assert second.is_violation
        assert schedule.precedences[0].is_violated
        assert schedule.precedences[0].violation_message == violation.message
        assert schedule.get_violation_count() == 1

    def test_lag_is_part_of_the_requirement(self) -> None:
        """Test that a positive lag is reported and added to the shift."""
        schedule, (first, second) = single_machine_schedule(30, 45)
        second.set_start_time(minutes(35))
        schedule.add_precedence(first.id, second.id, lag=minutes(10))

        violation = validate_precedences(schedule).violations[0]

        assert violation.required_shift == minutes(5)
        assert violation.message.endswith("(lag 0:10)")

    def test_start_to_start_message_names_predecessor_start(self) -> None:
        """Test start-to-start violations report the predecessor start."""
        schedule, (first, second) = single_machine_schedule(30, 45)
        first.set_start_time(minutes(20))
        schedule.add_precedence(first.id, second.id, relation=PrecedenceType.START_TO_START)

        violation = validate_precedences(schedule).violations[0]

        assert violation.message == "Task 'T2' starts at 0:00 but predecessor 'T1' starts at 0:20"
        assert violation.required_shift == minutes(20)

    def test_informational_relations_never_violate(self) -> None:
        """Test that finish-to-finish constraints are accepted as-is."""
        schedule, (first, second) = single_machine_schedule(30, 45)
        schedule.add_precedence(first.id, second.id, relation=PrecedenceType.FINISH_TO_FINISH)

        assert validate_precedences(schedule).success

    def test_validation_is_idempotent(self) -> None:
        """Test that validating twice yields the same violations in the same order."""
        schedule = Schedule.create_sample()
        for task in schedule.tasks:
            task.set_start_time(minutes(0))
        validator = PrecedenceValidator()
        view = AggregateView(schedule)

        first = validator.validate(view)
        second = validator.validate(view)

        assert first.violations == second.violations
        assert first.violations_found == 5

    def test_fixing_clears_stale_flags(self) -> None:
        """Test that flags from an earlier pass are reset."""
        schedule = _two_task_chain()
        second = schedule.tasks[1]
        second.set_start_time(minutes(20))
        validate_precedences(schedule)

        second.set_start_time(minutes(30))
        result = validate_precedences(schedule)

        assert result.success
        assert not second.is_violation
        assert not schedule.precedences[0].is_violated
        assert schedule.precedences[0].violation_message is None

    def test_violations_reported_in_constraint_order(self) -> None:
        """Test that violation order follows precedence insertion order."""
        schedule, (t1, t2, t3) = single_machine_schedule(10, 10, 10)
        schedule.add_precedence(t2.id, t3.id)
        schedule.add_precedence(t1.id, t3.id)
        schedule.add_precedence(t1.id, t2.id)

        result = validate_precedences(schedule)

        pairs = [(v.predecessor_name, v.successor_name) for v in result.violations]
        assert pairs == [("T2", "T3"), ("T1", "T3"), ("T1", "T2")]


class TestNodeValidation:
    """Test validation of the node/edge graph shape."""

    def test_edges_are_finish_to_start(self) -> None:
        """Test that every edge between task nodes is checked."""
        nodes, edges = chain_graph()

        result = validate_node_precedences(nodes, edges)

        assert result.violations_found == 2
        assert {v.successor_name for v in result.violations} == {"B", "C"}
        assert nodes[3].is_violation
        assert not nodes[2].is_violation

    def test_edges_to_non_task_nodes_ignored(self) -> None:
        """Test that edges touching machine nodes are not constraints."""
        nodes = [
            Node.machine(1, "Lathe", row_index=0),
            Node.task(2, "A", minutes(0), minutes(30), machine_id=1),
        ]
        result = validate_node_precedences(nodes, [Edge(1, 1, 2)])
        assert result.success


class TestMachineConflicts:
    """Test overlap detection between tasks on the same machine."""

    def test_sample_has_one_conflict(self) -> None:
        """Test that the sample's overlap on machine 2 is found."""
        schedule = Schedule.create_sample()

        conflicts = find_machine_conflicts(AggregateView(schedule))

        assert len(conflicts) == 1
        conflict = conflicts[0]
        first = schedule.get_task(conflict.first_task_id)
        second = schedule.get_task(conflict.second_task_id)
        assert first is not None and second is not None
        assert (first.name, second.name) == ("B1", "A2")
        assert conflict.overlap == minutes(15)

    def test_sequential_tasks_do_not_conflict(self) -> None:
        """Test that back-to-back tasks are not reported."""
        schedule = _two_task_chain()
        assert find_machine_conflicts(AggregateView(schedule)) == []
