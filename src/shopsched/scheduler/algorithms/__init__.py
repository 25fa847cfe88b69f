"""Algorithm factory and exports."""

from ..config import DispatchRule, SchedulingConfig
from ..protocols import ScheduleView
from .dispatch import (
    DispatchScheduler,
    order_tasks,
    schedule_fifo,
    schedule_lpt,
    schedule_nodes,
    schedule_nodes_spt,
    schedule_spt,
    schedule_view,
)


def create_algorithm(
    rule: DispatchRule,
    view: ScheduleView,
    config: SchedulingConfig | None = None,
) -> DispatchScheduler:
    """Create a scheduling algorithm instance.

    Args:
        rule: Dispatch rule to schedule with
        view: Schedule the algorithm places tasks in
        config: Optional scheduling configuration

    Returns:
        Algorithm instance ready to schedule
    """
    if rule in (DispatchRule.SPT, DispatchRule.LPT, DispatchRule.FIFO):
        return DispatchScheduler(view, rule, config)

    msg = f"Unknown dispatch rule: {rule}"
    raise ValueError(msg)


__all__ = [
    "DispatchScheduler",
    "create_algorithm",
    "order_tasks",
    "schedule_fifo",
    "schedule_lpt",
    "schedule_nodes",
    "schedule_nodes_spt",
    "schedule_spt",
    "schedule_view",
]
