"""High-level scheduling service."""

from shopsched.logger import get_logger
from shopsched.schedule import Schedule

from .adapters import AggregateView
from .algorithms import create_algorithm
from .config import SchedulingConfig
from .core import ScheduleMetrics, SchedulingResult
from .cycles import describe_cycle, find_cycles
from .metrics import calculate_metrics
from .repair import RepairEngine
from .validator import PrecedenceValidator

logger = get_logger()


class SchedulingService:
    """High-level service for scheduling a schedule aggregate.

    This service coordinates:
    - Cycle detection (reported as warnings before anything moves)
    - The dispatch algorithm selected by ``config.rule``
    - The repair engine, when ``config.auto_fix`` is set

    The schedule is changed in place.
    """

    def __init__(self, schedule: Schedule, config: SchedulingConfig | None = None) -> None:
        """Initialize scheduling service.

        Args:
            schedule: Schedule to operate on
            config: Optional scheduling configuration
        """
        self.schedule = schedule
        self.config = config or SchedulingConfig()
        self.view = AggregateView(schedule)

    def schedule_tasks(self) -> SchedulingResult:
        """Schedule all tasks and optionally repair remaining violations.

        Returns:
            SchedulingResult of the last step run, with warnings from every step
        """
        warnings: list[str] = []
        cycles: list[list[int]] = []
        if self.config.detect_cycles:
            cycles = find_cycles(self.view)
            for cycle in cycles:
                message = f"Circular dependency detected: {describe_cycle(self.view, cycle)}"
                logger.warning(message)
                warnings.append(message)

        algorithm = create_algorithm(self.config.rule, self.view, self.config)
        result = algorithm.schedule()
        result.cycles = cycles

        if self.config.auto_fix and not result.success:
            repair = RepairEngine(self.view, self.config).run()
            result.success = repair.success
            result.iterations = repair.iterations
            result.violations = repair.violations
            result.violations_found = repair.violations_found
            result.makespan = repair.makespan
            result.message = f"{result.message}. {repair.message}"
            if not repair.success:
                warnings.append(repair.message)

        self.schedule.recalculate_timeline_end()
        result.warnings = warnings
        return result

    def validate(self) -> SchedulingResult:
        """Validate the schedule's precedences without moving anything."""
        return PrecedenceValidator().validate(self.view)

    def metrics(self) -> ScheduleMetrics:
        """Compute quality metrics for the current schedule state."""
        return calculate_metrics(self.schedule)
