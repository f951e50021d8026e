"""Date and timestamp parsing utilities."""

from datetime import date, datetime, timedelta, UTC
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

PERIODS = (
    "this-month",
    "this-year",
    "this-week",
    "last-month",
    "last-year",
    "last-week",
    "this-school-year",
    "last-school-year",
)


def parse_date(date_str: str, today: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-06-15", "June 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this week", "last friday"

    Args:
        date_str: Date string in various formats
        today: Reference day for relative forms (defaults to the current date)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    prefix, _, period = date_str.partition(" ")
    if prefix in ("last", "this", "next") and period:
        shift = {"last": -1, "this": 0, "next": 1}[prefix]
        if period == "month":
            return (today + relativedelta(months=shift)).replace(day=1)
        if period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=shift)
        if period == "week":
            return today - timedelta(days=today.weekday()) + timedelta(weeks=shift)
        if prefix == "last" and period in _WEEKDAYS:
            days_ago = (today.weekday() - _WEEKDAYS.index(period)) % 7
            return today - timedelta(days=days_ago or 7)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from None


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp string into an aware UTC datetime.

    Naive input is taken to be UTC.

    Raises:
        ValueError: If the string cannot be parsed
    """
    try:
        parsed = date_parser.isoparse(value.strip())
    except ValueError:
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Could not parse timestamp '{value}': {e}") from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def get_date_range(period: str, today: date | None = None, school_year_start_month: int = 6) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Args:
        period: One of ``PERIODS``
        today: Reference day (defaults to the current date)
        school_year_start_month: Month in which a school year begins

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return today.replace(day=1), today
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "this-week":
        return today - timedelta(days=today.weekday()), today
    if period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        return start_date, today.replace(day=1) - timedelta(days=1)
    if period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        return start_date, today.replace(month=1, day=1) - timedelta(days=1)
    if period == "last-week":
        start_date = today - timedelta(days=today.weekday() + 7)
        return start_date, start_date + timedelta(days=6)
    if period in ("this-school-year", "last-school-year"):
        first_year = today.year if today.month >= school_year_start_month else today.year - 1
        start_date = date(first_year, school_year_start_month, 1)
        if period == "this-school-year":
            return start_date, today
        previous_start = start_date - relativedelta(years=1)
        return previous_start, start_date - timedelta(days=1)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
