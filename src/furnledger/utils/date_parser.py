"""Date parsing utilities."""

import re
from datetime import date, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_OFFSET = re.compile(r"^(?:in\s+)?(\d+)\s+(day|week|month)s?(?:\s+from\s+today)?$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates and the relative forms used for due dates:
    - Absolute dates: "2024-01-15", "15 Jan 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "next month",
      "end of month", "in 30 days", "2 weeks"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
        "end of month": today + relativedelta(day=31),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    # Net payment terms, e.g. "in 30 days"
    match = _OFFSET.match(date_str)
    if match:
        count, unit = int(match.group(1)), match.group(2)
        if unit == "day":
            return today + timedelta(days=count)
        if unit == "week":
            return today + timedelta(weeks=count)
        return today + relativedelta(months=count)

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        # Day-first, e.g. 15/03/2024
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from None
