"""Calendar period presets used by reports and dashboards."""
import calendar
import math
from datetime import date, timedelta
from typing import Optional, Tuple

PERIOD_ALIASES = {
    "weekly": "weekly",
    "monthly": "monthly",
    "this-month": "monthly",
    "last-month": "last-month",
    "quarterly": "quarterly",
    "this-quarter": "quarterly",
    "yearly": "yearly",
    "this-year": "yearly",
}


def month_range(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def period_range(
    period: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Resolve a period preset to an inclusive (start, end) date range.

    A custom range wins when both ``start_date`` and ``end_date`` are given.
    Unknown or missing presets fall back to the current month.

    Args:
        period: weekly, monthly/this-month, last-month, quarterly/this-quarter,
            yearly/this-year
        start_date: Custom range start
        end_date: Custom range end
        today: Reference day, defaults to the current date

    Returns:
        Tuple of (first day, last day)
    """
    if start_date is not None and end_date is not None:
        return start_date, end_date

    today = today or date.today()
    preset = PERIOD_ALIASES.get((period or "").lower(), "monthly")

    if preset == "weekly":
        # Sunday through Saturday
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return start, start + timedelta(days=6)
    if preset == "last-month":
        last_of_previous = today.replace(day=1) - timedelta(days=1)
        return month_range(last_of_previous.year, last_of_previous.month)
    if preset == "quarterly":
        first_month = (today.month - 1) // 3 * 3 + 1
        start, _ = month_range(today.year, first_month)
        _, end = month_range(today.year, first_month + 2)
        return start, end
    if preset == "yearly":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    return month_range(today.year, today.month)


def bucket_label(day: date, period: Optional[str]) -> str:
    """
    Label of the bucket a day falls in.

    ``Week N`` (N = week of the month, days 1-7 are week 1) for weekly
    periods, ``Mon YYYY`` otherwise.
    """
    if PERIOD_ALIASES.get((period or "").lower()) == "weekly":
        return f"Week {math.ceil(day.day / 7)}"
    return day.strftime("%b %Y")


def month_label(day: date) -> str:
    """e.g. "January 2024"."""
    return day.strftime("%B %Y")
