"""Structural detection of circular precedence graphs."""

from collections.abc import Iterable

from shopsched.exceptions import CircularDependencyError
from shopsched.graph import Edge, Node
from shopsched.schedule import Schedule

from .adapters import AggregateView, NodeGraphView
from .protocols import ScheduleView


def _successor_map(view: ScheduleView) -> dict[int, list[int]]:
    successors: dict[int, list[int]] = {task.id: [] for task in view.tasks()}
    for constraint in view.constraints():
        source = constraint.predecessor_task_id
        target = constraint.successor_task_id
        if source in successors and target in successors:
            successors[source].append(target)
    return successors


def _canonical(cycle: list[int]) -> tuple[int, ...]:
    """Rotate a cycle so its smallest id comes first."""
    pivot = cycle.index(min(cycle))
    return tuple(cycle[pivot:] + cycle[:pivot])


def find_cycles(view: ScheduleView) -> list[list[int]]:
    """Find the cycles of the precedence graph.

    Depth-first search marking the current recursion path; every edge back
    into the path closes a cycle. Each cycle is reported once, as task ids in
    edge order starting from the task first reached by the search.

    Args:
        view: Schedule whose constraints form the graph

    Returns:
        List of cycles, each a list of task ids; empty for an acyclic graph
    """
    successors = _successor_map(view)
    visited: set[int] = set()
    seen: set[tuple[int, ...]] = set()
    cycles: list[list[int]] = []

    def visit(task_id: int, path: list[int]) -> None:
        visited.add(task_id)
        path.append(task_id)
        for next_id in successors[task_id]:
            if next_id in path:
                cycle = path[path.index(next_id) :]
                key = _canonical(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(list(cycle))
            elif next_id not in visited:
                visit(next_id, path)
        path.pop()

    for task_id in successors:
        if task_id not in visited:
            visit(task_id, [])

    return cycles


def describe_cycle(view: ScheduleView, cycle: list[int]) -> str:
    """Render a cycle as ``"A -> B -> A"`` using task names."""
    names = []
    for task_id in [*cycle, cycle[0]]:
        task = view.get_task(task_id)
        names.append(task.name if task else str(task_id))
    return " -> ".join(names)


def check_acyclic(view: ScheduleView) -> None:
    """Raise if the precedence graph has a cycle.

    Raises:
        CircularDependencyError: Naming the first cycle found
    """
    cycles = find_cycles(view)
    if cycles:
        raise CircularDependencyError(
            f"Circular dependency detected: {describe_cycle(view, cycles[0])}"
        )


def find_schedule_cycles(schedule: Schedule) -> list[list[int]]:
    return find_cycles(AggregateView(schedule))


def find_node_cycles(nodes: Iterable[Node], edges: Iterable[Edge]) -> list[list[int]]:
    return find_cycles(NodeGraphView(nodes, edges))
