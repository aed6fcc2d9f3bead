"""Date parsing for CLI options."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DAY_WORDS = {"today": 0, "yesterday": -1, "tomorrow": 1}
PERIOD_OFFSETS = {"last": -1, "this": 0, "next": 1}
NAMED_RANGES = ("this-month", "this-year", "last-month", "last-year")


def period_start(unit: str, offset: int = 0, today: Optional[date] = None) -> date:
    """Return the first day of the week, month or year `offset` periods from today.

    Weeks start on Monday.

    Raises:
        ValueError: If unit is not week, month or year
    """
    today = today or date.today()
    if unit == "week":
        return today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
    if unit == "month":
        return today.replace(day=1) + relativedelta(months=offset)
    if unit == "year":
        return today.replace(month=1, day=1) + relativedelta(years=offset)
    raise ValueError(f"Unknown period unit: '{unit}'")


def parse_date(date_str: str) -> date:
    """Parse a payment or entry date.

    Accepts ISO and other absolute dates ("2024-10-05", "5 October 2024"),
    day words ("today", "yesterday", "tomorrow") and "last/this/next"
    followed by week, month or year, which resolve to the first day of
    that period.

    Raises:
        ValueError: If the string cannot be parsed
    """
    text = date_str.strip().lower()

    if text in DAY_WORDS:
        return date.today() + timedelta(days=DAY_WORDS[text])

    which, _, unit = text.partition(" ")
    if which in PERIOD_OFFSETS and unit in ("week", "month", "year"):
        return period_start(unit, PERIOD_OFFSETS[which])

    try:
        return date_parser.parse(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Return the inclusive (start, end) dates of a named period.

    "this-*" periods end today; "last-*" periods end the day before the
    current period starts.

    Raises:
        ValueError: If period is not one of NAMED_RANGES
    """
    period = period.strip().lower()
    if period not in NAMED_RANGES:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: {', '.join(NAMED_RANGES)}"
        )

    which, _, unit = period.partition("-")
    today = date.today()
    if which == "this":
        return period_start(unit, 0, today), today
    return period_start(unit, -1, today), period_start(unit, 0, today) - timedelta(days=1)
