"""Precedence validation and machine conflict detection."""

from collections.abc import Iterable

from shopsched.graph import Edge, Node
from shopsched.logger import get_logger
from shopsched.models import PrecedenceType
from shopsched.schedule import Schedule
from shopsched.timeutil import format_time

from .adapters import AggregateView, NodeGraphView
from .core import MachineConflict, PrecedenceViolation, SchedulingResult
from .protocols import Constraint, ScheduleView, SchedulableTask

logger = get_logger()


class PrecedenceValidator:
    """Recomputes violation state for every constraint of a schedule.

    Validation is a pure function of the current task times: every pass first
    clears all flags, so running it twice on an unchanged schedule yields the
    same violations in the same (constraint insertion) order.
    """

    def validate(self, view: ScheduleView) -> SchedulingResult:
        """Validate all constraints and flag violating successors.

        Args:
            view: Schedule to validate

        Returns:
            SchedulingResult with the violations found, in constraint order
        """
        result = SchedulingResult()
        view.clear_violations()

        for constraint in view.constraints():
            predecessor = view.get_task(constraint.predecessor_task_id)
            successor = view.get_task(constraint.successor_task_id)
            if predecessor is None or successor is None:
                continue

            logger.checks(
                f"  Checking {predecessor.name} -> {successor.name} "
                f"({constraint.relation.value}, lag {format_time(constraint.lag)})"
            )
            if constraint.is_satisfied(
                predecessor.start_time, predecessor.end_time, successor.start_time
            ):
                continue

            violation = self._build_violation(constraint, predecessor, successor)
            constraint.is_violated = True
            constraint.violation_message = violation.message
            successor.is_violation = True
            result.violations.append(violation)
            logger.changes(f"  Violation: {violation.message}")

        result.violations_found = len(result.violations)
        result.success = result.violations_found == 0
        result.makespan = view.makespan()
        result.message = (
            "All precedence constraints satisfied"
            if result.success
            else f"{result.violations_found} precedence violation(s) found"
        )
        return result

    @staticmethod
    def _build_violation(
        constraint: Constraint,
        predecessor: SchedulableTask,
        successor: SchedulableTask,
    ) -> PrecedenceViolation:
        if constraint.relation == PrecedenceType.START_TO_START:
            anchor = f"starts at {format_time(predecessor.start_time)}"
        else:
            anchor = f"ends at {format_time(predecessor.end_time)}"

        message = (
            f"Task '{successor.name}' starts at {format_time(successor.start_time)} "
            f"but predecessor '{predecessor.name}' {anchor}"
        )
        if constraint.lag:
            message += f" (lag {format_time(constraint.lag)})"

        return PrecedenceViolation(
            predecessor_task_id=predecessor.id,
            successor_task_id=successor.id,
            predecessor_name=predecessor.name,
            successor_name=successor.name,
            predecessor_end_time=predecessor.end_time,
            successor_start_time=successor.start_time,
            required_shift=constraint.required_shift(
                predecessor.start_time, predecessor.end_time, successor.start_time
            ),
            message=message,
        )


def find_machine_conflicts(view: ScheduleView) -> list[MachineConflict]:
    """Find overlapping task pairs on each machine.

    Tasks on a machine are sorted by start and each adjacent pair is checked.
    Nothing is mutated.
    """
    machine_ids = view.machine_ids()
    by_machine: dict[int, list[SchedulableTask]] = {machine_id: [] for machine_id in machine_ids}
    for task in view.tasks():
        if task.machine_id is not None and task.machine_id in by_machine:
            by_machine[task.machine_id].append(task)

    conflicts: list[MachineConflict] = []
    for machine_id in machine_ids:
        ordered = sorted(by_machine[machine_id], key=lambda t: t.start_time)
        for previous, current in zip(ordered, ordered[1:]):
            if current.start_time < previous.end_time:
                conflicts.append(
                    MachineConflict(
                        machine_id=machine_id,
                        first_task_id=previous.id,
                        second_task_id=current.id,
                        overlap=min(previous.end_time, current.end_time) - current.start_time,
                    )
                )
    return conflicts


def validate_precedences(schedule: Schedule) -> SchedulingResult:
    """Validate every precedence of a schedule aggregate."""
    return PrecedenceValidator().validate(AggregateView(schedule))


def validate_node_precedences(nodes: Iterable[Node], edges: Iterable[Edge]) -> SchedulingResult:
    """Validate a node/edge graph; every edge is finish-to-start with zero lag."""
    return PrecedenceValidator().validate(NodeGraphView(nodes, edges))
