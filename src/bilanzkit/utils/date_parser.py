"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - ISO dates: "2024-01-15"
    - German dates: "15.01.2024", "15.1.24"
    - Other absolute dates: "January 15, 2024"
    - Relative dates: "today", "yesterday", "tomorrow", "this year", "last year",
      "next year", "this month", "last month", "next month" (first day of the period)

    Numeric dates are read day first, as is usual in Germany.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    # Handle relative dates
    relative_dates = {
        "today": today,
        "heute": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    offsets = {"last": -1, "this": 0, "next": 1}
    words = date_str.split()
    if len(words) == 2 and words[0] in offsets:
        offset = offsets[words[0]]
        if words[1] == "month":
            return today.replace(day=1) + relativedelta(months=offset)
        if words[1] == "year":
            return today.replace(month=1, day=1) + relativedelta(years=offset)

    # Try parsing as absolute date; ISO dates stay year-month-day
    try:
        is_iso = len(date_str) >= 8 and date_str[:4].isdigit() and date_str[4] == "-"
        dt = date_parser.parse(date_str, dayfirst=not is_iso)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
