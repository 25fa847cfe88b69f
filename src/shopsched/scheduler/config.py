"""Configuration classes for the scheduling engine."""

from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_MAX_REPAIR_ITERATIONS = 100


class DispatchRule(str, Enum):
    """Static ordering policies for task placement."""

    SPT = "spt"  # Shortest processing time first
    LPT = "lpt"  # Longest processing time first
    FIFO = "fifo"  # Existing collection order


class SchedulingConfig(BaseModel):
    """Configuration for dispatch scheduling and repair."""

    rule: DispatchRule = DispatchRule.SPT

    # Repair loop limit; guards against circular precedence graphs
    max_repair_iterations: int = Field(default=DEFAULT_MAX_REPAIR_ITERATIONS, ge=1)

    # Run the repair loop after dispatch when violations remain
    auto_fix: bool = False

    # Look for precedence cycles before scheduling and report their members
    detect_cycles: bool = True

    # Push placements past machine downtime windows
    respect_downtime: bool = False
