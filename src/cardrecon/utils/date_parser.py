"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow"

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
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_billing_month(month_str: str) -> str:
    """Parse a month expression into a YYYY-MM billing cycle key.

    Accepts:
    - Cycle keys: "2024-11"
    - Relative months: "this month", "last month", "next month"
    - Month names: "Nov 2024", "November 2024"

    Args:
        month_str: Month expression

    Returns:
        Billing cycle key

    Raises:
        ValueError: If the expression cannot be parsed
    """
    text = month_str.strip().lower()
    today = date.today().replace(day=1)

    relative_months = {
        "this month": today,
        "last month": today - relativedelta(months=1),
        "next month": today + relativedelta(months=1),
    }
    if text in relative_months:
        month = relative_months[text]
        return f"{month.year:04d}-{month.month:02d}"

    try:
        # Pin the day so "2024-11" and "Nov 2024" do not pick up today's day
        dt = date_parser.parse(text, default=datetime(2000, 1, 1))
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse month '{month_str}': {e}")
    return f"{dt.year:04d}-{dt.month:02d}"
