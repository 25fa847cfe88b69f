"""Scheduler package - machine scheduling with precedence constraints.

This package provides the scheduling engine with:
- Dispatch-rule scheduling (SPT, LPT, FIFO)
- Precedence validation with lag and machine conflict detection
- Greedy repair, single-task compaction and cycle detection
- Quality metrics, including per-machine load

Every algorithm works on a ``ScheduleView``; ``AggregateView`` and
``NodeGraphView`` adapt the schedule aggregate and the node/edge graph.

Main entry points:
- SchedulingService: High-level service for a schedule aggregate
- DispatchScheduler: Low-level dispatch algorithm
- RepairEngine: Greedy violation repair

Configuration:
- SchedulingConfig: Main configuration (rule, repair limit, flags)
- DispatchRule: Placement order
"""

# Adapters
from .adapters import AggregateView, NodeGraphView, NodeTask

# Algorithms
from .algorithms import (
    DispatchScheduler,
    create_algorithm,
    order_tasks,
    schedule_fifo,
    schedule_lpt,
    schedule_nodes,
    schedule_nodes_spt,
    schedule_spt,
    schedule_view,
)

# Machine calendars
from .calendar import MachineCalendar

# Compaction
from .compaction import (
    compress_node,
    compress_node_latest,
    compress_schedule_task,
    compress_task,
    compress_task_latest,
)

# Configuration
from .config import DEFAULT_MAX_REPAIR_ITERATIONS, DispatchRule, SchedulingConfig

# Core dataclasses
from .core import (
    MachineConflict,
    MachineStat,
    PrecedenceViolation,
    ScheduleMetrics,
    SchedulingResult,
    earliest_start_after_predecessors,
)

# Cycle detection
from .cycles import (
    check_acyclic,
    describe_cycle,
    find_cycles,
    find_node_cycles,
    find_schedule_cycles,
)

# Metrics
from .metrics import calculate_metrics, calculate_node_metrics

# Protocols
from .protocols import Constraint, SchedulableTask, ScheduleView

# Repair
from .repair import RepairEngine, auto_fix_node_violations, auto_fix_violations

# High-level service
from .service import SchedulingService

# Validation
from .validator import (
    PrecedenceValidator,
    find_machine_conflicts,
    validate_node_precedences,
    validate_precedences,
)

__all__ = [
    # Core dataclasses
    "MachineConflict",
    "MachineStat",
    "PrecedenceViolation",
    "ScheduleMetrics",
    "SchedulingResult",
    "earliest_start_after_predecessors",
    # Configuration
    "DEFAULT_MAX_REPAIR_ITERATIONS",
    "DispatchRule",
    "SchedulingConfig",
    # Protocols
    "Constraint",
    "SchedulableTask",
    "ScheduleView",
    # Adapters
    "AggregateView",
    "NodeGraphView",
    "NodeTask",
    # High-level service
    "SchedulingService",
    # Validation
    "PrecedenceValidator",
    "find_machine_conflicts",
    "validate_node_precedences",
    "validate_precedences",
    # Algorithms
    "DispatchScheduler",
    "create_algorithm",
    "order_tasks",
    "schedule_fifo",
    "schedule_lpt",
    "schedule_nodes",
    "schedule_nodes_spt",
    "schedule_spt",
    "schedule_view",
    # Machine calendars
    "MachineCalendar",
    # Repair
    "RepairEngine",
    "auto_fix_node_violations",
    "auto_fix_violations",
    # Compaction
    "compress_node",
    "compress_node_latest",
    "compress_schedule_task",
    "compress_task",
    "compress_task_latest",
    # Metrics
    "calculate_metrics",
    "calculate_node_metrics",
    # Cycle detection
    "check_acyclic",
    "describe_cycle",
    "find_cycles",
    "find_node_cycles",
    "find_schedule_cycles",
]
