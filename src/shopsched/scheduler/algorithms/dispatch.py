"""Dispatch-rule scheduling (SPT, LPT, FIFO).

All three rules share one forward, single-pass placement algorithm and only
differ in the order tasks are placed. The pass never backtracks: when a rule
places a successor before its predecessor, the resulting violation is reported,
not fixed. Repair is a separate step.
"""

from collections.abc import Iterable
from datetime import timedelta

from shopsched.graph import Edge, Node
from shopsched.logger import debug_enabled, get_logger
from shopsched.models import ZERO
from shopsched.schedule import Schedule
from shopsched.timeutil import format_time

from ..adapters import AggregateView, NodeGraphView
from ..calendar import MachineCalendar
from ..config import DispatchRule, SchedulingConfig
from ..core import SchedulingResult, earliest_start_after_predecessors
from ..protocols import SchedulableTask, ScheduleView
from ..validator import PrecedenceValidator

logger = get_logger()


def order_tasks(tasks: list[SchedulableTask], rule: DispatchRule) -> list[SchedulableTask]:
    """Order tasks for placement under a dispatch rule.

    SPT sorts by ascending duration, LPT by descending duration; both break
    ties by ascending priority value. FIFO keeps the collection order. Sorting
    is stable, so equal keys keep their collection order.
    """
    if rule == DispatchRule.SPT:
        return sorted(tasks, key=lambda t: (t.duration, t.priority))
    if rule == DispatchRule.LPT:
        return sorted(tasks, key=lambda t: (-t.duration, t.priority))
    if rule == DispatchRule.FIFO:
        return list(tasks)
    msg = f"Unknown dispatch rule: {rule}"
    raise ValueError(msg)


class DispatchScheduler:
    """Places every task as early as its machine and predecessors allow.

    Algorithm, per task in rule order:
    1. Skip the task if its machine is not registered (left unscheduled)
    2. predecessor_ready = max(predecessor end + lag) over enforced constraints
    3. machine_ready = when the task's machine becomes free
    4. start = max(machine_ready, predecessor_ready), optionally pushed past downtime
    5. Advance the machine's availability to the task's end
    """

    def __init__(
        self,
        view: ScheduleView,
        rule: DispatchRule = DispatchRule.SPT,
        config: SchedulingConfig | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            view: Schedule to place tasks in (mutated in place)
            rule: Dispatch rule deciding placement order
            config: Optional scheduling configuration
        """
        self.view = view
        self.rule = rule
        self.config = config or SchedulingConfig(rule=rule)
        self.validator = PrecedenceValidator()

    def schedule(self) -> SchedulingResult:
        """Assign start times to all tasks and validate the outcome.

        Returns:
            SchedulingResult; ``success`` is True when no violations remain
        """
        result = SchedulingResult()
        availability: dict[int, timedelta] = dict.fromkeys(self.view.machine_ids(), ZERO)
        calendars = self._build_calendars(availability) if self.config.respect_downtime else {}

        for task in order_tasks(list(self.view.tasks()), self.rule):
            machine_id = task.machine_id
            if machine_id is None or machine_id not in availability:
                logger.checks(f"  Skipping '{task.name}': machine {machine_id} not registered")
                continue

            machine_ready = availability[machine_id]
            predecessor_ready = earliest_start_after_predecessors(self.view, task.id)
            start = max(machine_ready, predecessor_ready)

            calendar = calendars.get(machine_id)
            if calendar is not None:
                start = calendar.find_start(start, task.duration)

            if debug_enabled():
                logger.debug(
                    f"    '{task.name}': machine ready {format_time(machine_ready)}, "
                    f"predecessors ready {format_time(predecessor_ready)}"
                )

            task.set_start_time(start)
            task.row_index = self.view.machine_row_index(machine_id)
            availability[machine_id] = task.end_time
            if calendar is not None:
                calendar.add_busy_period(task.start_time, task.end_time)

            logger.changes(
                f"  Placed '{task.name}' on machine {machine_id} at {format_time(task.start_time)}"
                f"-{format_time(task.end_time)}"
            )
            result.tasks_scheduled += 1

        validation = self.validator.validate(self.view)
        result.violations = validation.violations
        result.violations_found = validation.violations_found
        result.makespan = self.view.makespan()
        result.success = validation.success
        result.message = (
            f"{self.rule.name} scheduling complete. {result.tasks_scheduled} tasks scheduled. "
            f"Makespan: {format_time(result.makespan)}"
        )
        if not result.success:
            result.message += (
                f" ({result.violations_found} violations - may need manual adjustment)"
            )
        return result

    def _build_calendars(self, availability: dict[int, timedelta]) -> dict[int, MachineCalendar]:
        return {
            machine_id: MachineCalendar(
                self.view.machine_downtime(machine_id), machine_name=f"machine {machine_id}"
            )
            for machine_id in availability
        }


def schedule_view(
    view: ScheduleView, rule: DispatchRule, config: SchedulingConfig | None = None
) -> SchedulingResult:
    """Run a dispatch rule over any schedule view."""
    return DispatchScheduler(view, rule, config).schedule()


def schedule_spt(schedule: Schedule) -> SchedulingResult:
    """Schedule an aggregate with shortest processing time first."""
    return schedule_view(AggregateView(schedule), DispatchRule.SPT)


def schedule_lpt(schedule: Schedule) -> SchedulingResult:
    """Schedule an aggregate with longest processing time first."""
    return schedule_view(AggregateView(schedule), DispatchRule.LPT)


def schedule_fifo(schedule: Schedule) -> SchedulingResult:
    """Schedule an aggregate in task collection order."""
    return schedule_view(AggregateView(schedule), DispatchRule.FIFO)


def schedule_nodes(
    nodes: Iterable[Node], edges: Iterable[Edge], rule: DispatchRule = DispatchRule.SPT
) -> SchedulingResult:
    """Schedule a node/edge graph.

    Task nodes without a valid machine are first put on the first machine node.
    """
    view = NodeGraphView(nodes, edges)
    view.assign_default_machine()
    return schedule_view(view, rule)


def schedule_nodes_spt(nodes: Iterable[Node], edges: Iterable[Edge]) -> SchedulingResult:
    """Schedule a node/edge graph with shortest processing time first."""
    return schedule_nodes(nodes, edges, DispatchRule.SPT)
