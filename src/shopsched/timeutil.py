"""Duration parsing and formatting helpers.

All engine times are ``timedelta`` offsets from the schedule epoch, so these
helpers only ever deal with hours and minutes.
"""

import math
import re
from datetime import timedelta

from .exceptions import ParseError

MINUTES_PER_HOUR = 60

_UNIT_PATTERN = re.compile(r"^(?:(?P<hours>[\d.]+)h)?\s*(?:(?P<minutes>[\d.]+)m)?$")
_CLOCK_PATTERN = re.compile(r"^(?P<hours>\d+):(?P<minutes>\d{2})$")


def format_time(value: timedelta) -> str:
    """Format a duration offset as ``H:MM``.

    Hours are not wrapped at 24, so ``timedelta(hours=26)`` formats as ``26:00``.
    Negative values keep their sign.
    """
    total_minutes = value.total_seconds() / MINUTES_PER_HOUR
    sign = "-" if total_minutes < 0 else ""
    total_minutes = abs(total_minutes)
    hours = int(total_minutes // MINUTES_PER_HOUR)
    minutes = int(math.floor(total_minutes - hours * MINUTES_PER_HOUR))
    return f"{sign}{hours}:{minutes:02d}"


def _minutes(amount: float, text: str | int | float) -> timedelta:
    if not math.isfinite(amount) or amount < 0:
        raise ParseError(f"Invalid duration '{text}': must be a finite, non-negative amount")
    try:
        return timedelta(minutes=amount)
    except OverflowError as e:
        raise ParseError(f"Invalid duration '{text}': {e}") from e


def parse_duration(text: str | int | float) -> timedelta:
    """Parse a duration string to a timedelta.

    Supported formats:
    - "45" or 45 - plain minutes
    - "45m" - minutes
    - "2h", "1.5h" - hours
    - "1h30m" - hours and minutes
    - "1:15" - clock notation (hours:minutes)

    Raises:
        ParseError: If the value is not in a supported format, negative, or not finite
    """
    if isinstance(text, (int, float)):
        return _minutes(float(text), text)

    value = text.strip().lower()
    if not value:
        raise ParseError("Empty duration string")

    try:
        amount = float(value)
    except ValueError:
        pass
    else:
        return _minutes(amount, text)

    clock = _CLOCK_PATTERN.match(value)
    if clock:
        return _minutes(int(clock["hours"]) * MINUTES_PER_HOUR + int(clock["minutes"]), text)

    match = _UNIT_PATTERN.match(value)
    if match and (match["hours"] or match["minutes"]):
        try:
            hours = float(match["hours"]) if match["hours"] else 0.0
            minutes = float(match["minutes"]) if match["minutes"] else 0.0
        except ValueError as e:
            raise ParseError(f"Invalid duration '{text}': {e}") from e
        return _minutes(hours * MINUTES_PER_HOUR + minutes, text)

    raise ParseError(f"Invalid duration '{text}' (expected e.g. '45m', '1h30m' or '1:15')")
