"""Schedule quality metrics."""

from collections.abc import Iterable
from datetime import timedelta

from shopsched.graph import Edge, Node
from shopsched.models import ZERO
from shopsched.schedule import Schedule

from .adapters import AggregateView, NodeGraphView
from .core import MachineStat, ScheduleMetrics
from .protocols import ScheduleView
from .validator import PrecedenceValidator


def _utilization(total: timedelta, machine_count: int, makespan: timedelta) -> float:
    """Percent of machine capacity spent processing; zero without capacity."""
    if machine_count == 0 or makespan <= ZERO:
        return 0.0
    return (total * 100) / (makespan * machine_count)


def _busy_time(intervals: list[tuple[timedelta, timedelta]]) -> timedelta:
    """Total length of the intervals, with overlapping ones merged."""
    busy = ZERO
    merged_start: timedelta | None = None
    merged_end = ZERO
    for start, end in sorted(intervals):
        if merged_start is not None and start <= merged_end:
            merged_end = max(merged_end, end)
            continue
        if merged_start is not None:
            busy += merged_end - merged_start
        merged_start, merged_end = start, end
    if merged_start is not None:
        busy += merged_end - merged_start
    return busy


def _machine_stats(
    view: ScheduleView, names: dict[int, str], makespan: timedelta
) -> list[MachineStat]:
    """Per-machine load, most utilized machine first."""
    stats: list[MachineStat] = []
    for machine_id in view.machine_ids():
        machine_tasks = [t for t in view.tasks() if t.machine_id == machine_id]
        busy = _busy_time([(t.start_time, t.end_time) for t in machine_tasks])
        utilization = min(busy * 100 / makespan, 100.0) if makespan > ZERO else 0.0
        stats.append(
            MachineStat(
                machine_id=machine_id,
                name=names.get(machine_id) or f"Machine {machine_id}",
                busy_time=busy,
                utilization=utilization,
                task_count=len(machine_tasks),
            )
        )
    stats.sort(key=lambda s: s.utilization, reverse=True)
    return stats


def _fill_machine_stats(
    metrics: ScheduleMetrics, view: ScheduleView, names: dict[int, str]
) -> None:
    metrics.machine_stats = _machine_stats(view, names, metrics.makespan)
    if metrics.machine_stats:
        metrics.average_machine_utilization = sum(
            s.utilization for s in metrics.machine_stats
        ) / len(metrics.machine_stats)


def calculate_metrics(schedule: Schedule) -> ScheduleMetrics:
    """Derive quality figures from the current state of a schedule.

    Writes each job's ``completion_time`` (the end of its last task) as a side
    effect. Violations are counted by a fresh validation pass. Each machine
    also gets a MachineStat whose busy time merges overlapping tasks.

    Args:
        schedule: Schedule to measure

    Returns:
        ScheduleMetrics; all zero when the schedule has no tasks
    """
    metrics = ScheduleMetrics()
    if not schedule.tasks:
        return metrics

    metrics.task_count = len(schedule.tasks)
    metrics.machine_count = len(schedule.machines)
    metrics.job_count = len(schedule.jobs)
    metrics.makespan = schedule.get_makespan()
    metrics.total_processing_time = sum((t.duration for t in schedule.tasks), ZERO)

    for job in schedule.jobs:
        job_tasks = schedule.tasks_for_job(job.id)
        if job_tasks:
            job.completion_time = max(t.end_time for t in job_tasks)

    flow_times = [job.flow_time for job in schedule.jobs if job.flow_time is not None]
    if flow_times:
        metrics.average_flow_time = sum(flow_times, ZERO) / len(flow_times)

    metrics.machine_utilization = _utilization(
        metrics.total_processing_time, metrics.machine_count, metrics.makespan
    )
    view = AggregateView(schedule)
    _fill_machine_stats(metrics, view, {m.id: m.name for m in schedule.machines})
    validation = PrecedenceValidator().validate(view)
    metrics.violation_count = validation.violations_found
    metrics.late_job_count = sum(1 for job in schedule.jobs if job.is_late)
    return metrics


def calculate_node_metrics(nodes: Iterable[Node], edges: Iterable[Edge]) -> ScheduleMetrics:
    """Derive quality figures for a node/edge graph.

    Graphs carry no job records, so flow time and late jobs stay zero.
    """
    view = NodeGraphView(nodes, edges)
    metrics = ScheduleMetrics()
    tasks = view.tasks()
    if not tasks:
        return metrics

    metrics.task_count = len(tasks)
    metrics.machine_count = len(view.machine_ids())
    metrics.job_count = sum(1 for node in view.nodes if node.is_job)
    metrics.makespan = view.makespan()
    metrics.total_processing_time = sum((t.duration for t in tasks), ZERO)
    metrics.machine_utilization = _utilization(
        metrics.total_processing_time, metrics.machine_count, metrics.makespan
    )
    _fill_machine_stats(metrics, view, {n.id: n.text for n in view.nodes if n.is_machine})
    metrics.violation_count = PrecedenceValidator().validate(view).violations_found
    return metrics
