"""Date parsing utilities."""

from datetime import date, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("this-week", "this-month", "this-year", "last-week", "last-month", "last-year")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Accepts ISO and free-form dates understood by dateutil as well as
    "today", "yesterday", "start of month" and "start of year".

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If the string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    keywords = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "start of month": today.replace(day=1),
        "start of year": today.replace(month=1, day=1),
    }
    if text in keywords:
        return keywords[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Return the (start, end) window of a named period.

    Current periods end today; past periods cover the whole week, month or
    year before the current one.

    Raises:
        ValueError: If the period is not one of PERIODS
    """
    name = period.strip().lower()
    today = date.today()
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)
    year_start = today.replace(month=1, day=1)

    if name == "this-week":
        return week_start, today
    if name == "this-month":
        return month_start, today
    if name == "this-year":
        return year_start, today
    if name == "last-week":
        start = week_start - timedelta(days=7)
        return start, start + timedelta(days=6)
    if name == "last-month":
        return month_start - relativedelta(months=1), month_start - timedelta(days=1)
    if name == "last-year":
        return year_start - relativedelta(years=1), year_start - timedelta(days=1)

    raise ValueError(f"Unknown period '{period}'. Supported periods: {', '.join(PERIODS)}")
