"""Date and time utility functions."""
from datetime import datetime, time
from typing import Optional

DEFAULT_DEADLINE_TIME = time(23, 59, 59, 999000)


def parse_date(date_str: str) -> datetime:
    """
    Parse date string in YYYY-MM-DD format.

    Args:
        date_str: Date string (e.g., "2025-11-15")

    Returns:
        datetime object

    Raises:
        ValueError: If date format is invalid
    """
    return datetime.strptime(date_str, "%Y-%m-%d")


def parse_time_of_day(time_str: str) -> time:
    """
    Parse time-of-day string in HH:MM format.

    Args:
        time_str: Time string (e.g., "23:59")

    Returns:
        datetime.time object

    Raises:
        ValueError: If time format is invalid
    """
    try:
        return datetime.strptime(time_str.strip(), "%H:%M").time()
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Invalid time format: {time_str}") from e


def parse_deadline(date_str: str, time_str: Optional[str] = None) -> datetime:
    """
    Build the local deadline instant from a date and optional time of day.

    Args:
        date_str: Deadline date in YYYY-MM-DD format
        time_str: Optional time of day in HH:MM format

    Returns:
        Naive local datetime. Without a time the deadline is the last
        millisecond of the day; with a time it is the last millisecond
        of that minute.
    """
    day = parse_date(date_str).date()
    if not time_str:
        return datetime.combine(day, DEFAULT_DEADLINE_TIME)

    at = parse_time_of_day(time_str)
    return datetime.combine(day, at.replace(second=59, microsecond=999000))
