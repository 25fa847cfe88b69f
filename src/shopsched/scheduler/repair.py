"""Greedy repair of precedence violations."""

from collections.abc import Iterable

from shopsched.graph import Edge, Node
from shopsched.logger import get_logger
from shopsched.schedule import Schedule
from shopsched.timeutil import format_time

from .adapters import AggregateView, NodeGraphView
from .config import SchedulingConfig
from .core import SchedulingResult
from .cycles import describe_cycle, find_cycles
from .protocols import ScheduleView
from .validator import PrecedenceValidator

logger = get_logger()

EXHAUSTED_MESSAGE = "Could not fix all violations (possible circular dependencies)"


class RepairEngine:
    """Shifts violating successors later until every constraint holds.

    Each pass validates and moves only the successor of the first reported
    violation, by exactly its required shift. Violations are reported in
    constraint insertion order, so repeated runs on equal input produce equal
    results. The pass count is capped by ``config.max_repair_iterations``.
    """

    def __init__(self, view: ScheduleView, config: SchedulingConfig | None = None) -> None:
        self.view = view
        self.config = config or SchedulingConfig()
        self.validator = PrecedenceValidator()

    def run(self) -> SchedulingResult:
        """Repair the schedule in place.

        Returns:
            SchedulingResult with ``iterations`` set to the number of shifts made
        """
        max_iterations = self.config.max_repair_iterations

        for iteration in range(max_iterations):
            validation = self.validator.validate(self.view)
            if validation.success:
                return self._fixed(iteration)

            violation = validation.violations[0]
            successor = self.view.get_task(violation.successor_task_id)
            if successor is None:
                break
            logger.changes(
                f"  Shifting '{successor.name}' by {format_time(violation.required_shift)} "
                f"(iteration {iteration + 1})"
            )
            successor.shift_by(violation.required_shift)

        final = self.validator.validate(self.view)
        if final.success:
            return self._fixed(max_iterations)

        result = SchedulingResult(
            success=False,
            message=EXHAUSTED_MESSAGE,
            violations_found=final.violations_found,
            violations=final.violations,
            makespan=self.view.makespan(),
            iterations=max_iterations,
        )
        result.cycles = find_cycles(self.view)
        if result.cycles:
            members = "; ".join(describe_cycle(self.view, cycle) for cycle in result.cycles)
            result.message += f". Cycles: {members}"
        logger.warning(result.message)
        return result

    def _fixed(self, iterations: int) -> SchedulingResult:
        logger.checks(f"Repair finished after {iterations} iteration(s)")
        return SchedulingResult(
            success=True,
            message=f"All violations fixed after {iterations} iteration(s)",
            makespan=self.view.makespan(),
            iterations=iterations,
        )


def auto_fix_violations(
    schedule: Schedule, config: SchedulingConfig | None = None
) -> SchedulingResult:
    """Repair every precedence violation of a schedule aggregate."""
    return RepairEngine(AggregateView(schedule), config).run()


def auto_fix_node_violations(
    nodes: Iterable[Node], edges: Iterable[Edge], config: SchedulingConfig | None = None
) -> SchedulingResult:
    """Repair every precedence violation of a node/edge graph."""
    return RepairEngine(NodeGraphView(nodes, edges), config).run()
