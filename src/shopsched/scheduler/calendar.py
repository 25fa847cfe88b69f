"""Machine busy-period tracking."""

import bisect
from datetime import timedelta

from shopsched.logger import get_logger

logger = get_logger()


class MachineCalendar:
    """Tracks busy periods of a machine as sorted, non-overlapping intervals.

    Periods are half-open ``[start, end)``. Maintains the invariant that
    ``busy_periods`` is sorted by start and contains no overlapping or touching
    periods, which keeps lookups to a binary search.
    """

    def __init__(
        self,
        downtime: list[tuple[timedelta, timedelta]] | None = None,
        machine_name: str = "",
    ) -> None:
        """Initialize with optional downtime windows.

        Args:
            downtime: Optional list of (start, end) tuples when the machine is down
            machine_name: Name of the machine (for verbose logging)
        """
        self.busy_periods: list[tuple[timedelta, timedelta]] = (
            self._merge_periods(downtime) if downtime else []
        )
        self.machine_name = machine_name

    @staticmethod
    def _merge_periods(
        periods: list[tuple[timedelta, timedelta]],
    ) -> list[tuple[timedelta, timedelta]]:
        """Merge overlapping or touching periods into a sorted list."""
        sorted_periods = sorted(p for p in periods if p[1] > p[0])
        if not sorted_periods:
            return []

        merged: list[tuple[timedelta, timedelta]] = [sorted_periods[0]]
        for start, end in sorted_periods[1:]:
            last_start, last_end = merged[-1]
            if start <= last_end:
                merged[-1] = (last_start, max(last_end, end))
            else:
                merged.append((start, end))
        return merged

    def add_busy_period(self, start: timedelta, end: timedelta) -> None:
        """Add a busy period, merging with neighbours it overlaps or touches."""
        if end <= start:
            return

        idx = bisect.bisect_left(self.busy_periods, start, key=lambda x: x[0])

        if idx > 0:
            prev_start, prev_end = self.busy_periods[idx - 1]
            if prev_end >= start:
                start = prev_start
                end = max(prev_end, end)
                idx -= 1
                del self.busy_periods[idx]

        while idx < len(self.busy_periods):
            next_start, next_end = self.busy_periods[idx]
            if next_start <= end:
                end = max(end, next_end)
                del self.busy_periods[idx]
            else:
                break

        self.busy_periods.insert(idx, (start, end))

    def is_available(self, start: timedelta, duration: timedelta) -> bool:
        """Check that [start, start + duration) touches no busy period."""
        end = start + duration
        for busy_start, busy_end in self.busy_periods:
            if busy_start >= end:
                break
            if busy_start < end and busy_end > start:
                return False
        return True

    def _find_next_busy_period(
        self, current: timedelta
    ) -> tuple[timedelta, timedelta] | None:
        """First busy period that ends after ``current`` (binary search)."""
        lo, hi = 0, len(self.busy_periods)
        while lo < hi:
            mid = (lo + hi) // 2
            if self.busy_periods[mid][1] <= current:
                lo = mid + 1
            else:
                hi = mid
        if lo < len(self.busy_periods):
            return self.busy_periods[lo]
        return None

    def next_available_time(self, from_time: timedelta) -> timedelta:
        """First instant at or after ``from_time`` that is not inside a busy period."""
        period = self._find_next_busy_period(from_time)
        if period is None or from_time < period[0]:
            return from_time
        return period[1]

    def find_start(self, earliest: timedelta, duration: timedelta) -> timedelta:
        """Earliest start >= ``earliest`` whose whole interval is free."""
        candidate = earliest
        while True:
            period = self._find_next_busy_period(candidate)
            if period is None:
                return candidate
            busy_start, busy_end = period
            if candidate < busy_start and candidate + duration <= busy_start:
                return candidate
            logger.debug(
                f"      {self.machine_name}: candidate {candidate} collides with "
                f"busy period [{busy_start}, {busy_end}), moving past it"
            )
            candidate = busy_end
