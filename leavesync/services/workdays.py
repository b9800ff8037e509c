"""
Working-day calendar used for leave durations.
"""
from datetime import date


def is_working_day(day: date) -> bool:
    # Monday=0 ... Friday=4
    return day.weekday() < 5


def count_working_days(start: date, end: date) -> int:
    """
    Count weekdays (Mon-Fri) in the inclusive range [start, end].

    A request never counts as zero days: ranges that fall entirely on a
    weekend (or are empty) are clamped to 1.

    Args:
        start: First day of leave
        end: Last day of leave

    Returns:
        Number of working days, at least 1
    """
    span = (end - start).days + 1
    if span <= 0:
        return 1
    full_weeks, remainder = divmod(span, 7)
    count = full_weeks * 5
    # Leftover days continue from start's weekday
    first = start.weekday()
    count += sum(1 for offset in range(remainder) if (first + offset) % 7 < 5)
    return count or 1
