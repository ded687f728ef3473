"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

RELATIVE_DAYS = {
    "today": 0,
    "hoy": 0,
    "yesterday": -1,
    "ayer": -1,
    "tomorrow": 1,
    "mañana": 1,
}

PERIODS = (
    "this-month",
    "this-year",
    "this-week",
    "last-month",
    "last-year",
    "last-week",
)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative days: "today"/"hoy", "yesterday"/"ayer", "tomorrow"/"mañana"
    - Period starts: "this month", "last month", "next year", "last week", ...

    Args:
        date_str: Date string
        today: Reference date for relative forms (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    if date_str in RELATIVE_DAYS:
        return today + timedelta(days=RELATIVE_DAYS[date_str])

    for prefix, step in (("last ", -1), ("this ", 0), ("next ", 1)):
        if not date_str.startswith(prefix):
            continue
        unit = date_str[len(prefix):]
        if unit == "month":
            return (today + relativedelta(months=step)).replace(day=1)
        if unit == "year":
            return today.replace(month=1, day=1) + relativedelta(years=step)
        if unit == "week":
            return today - timedelta(days=today.weekday()) + timedelta(weeks=step)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last day of the month containing day."""
    start = day.replace(day=1)
    return start, start + relativedelta(months=1) - timedelta(days=1)


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Current periods ("this-*") end today; past periods cover the whole
    calendar month, year or week.

    Args:
        period: One of PERIODS
        today: Reference date (defaults to date.today())

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower().replace("_", "-")
    today = today or date.today()
    this_week = today - timedelta(days=today.weekday())

    if period == "this-month":
        return today.replace(day=1), today
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "this-week":
        return this_week, today
    if period == "last-month":
        return month_bounds(today - relativedelta(months=1))
    if period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    if period == "last-week":
        return this_week - timedelta(weeks=1), this_week - timedelta(days=1)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
