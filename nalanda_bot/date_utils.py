"""
Date utility functions for pending-day discovery.

This module converts between the site's DD/MM/YYYY day format, ISO dates
and MM/YYYY month labels, builds the look-back month window and parses the
hidden pending-dates field.
"""

from datetime import date, datetime
from typing import Iterable, List, NamedTuple, Optional

from .errors import PendingFieldParseError


SITE_DATE_FORMAT = '%d/%m/%Y'
ISO_DATE_FORMAT = '%Y-%m-%d'


class MonthWindow(NamedTuple):
    """A prior month to review and a mid-month day that opens it on the site."""
    label: str
    sample_date: str


def month_label(day: date) -> str:
    """
    Format a month label as the site shows it.

    Examples:
        >>> month_label(date(2025, 1, 17))
        '01/2025'
    """
    return f"{day.month:02d}/{day.year}"


def shift_month(year: int, month: int, delta: int):
    """
    Move a (year, month) pair by delta months, crossing year boundaries.

    Returns:
        Tuple of (year, month)
    """
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def months_to_review(months_back: int, today: Optional[date] = None) -> List[MonthWindow]:
    """
    List the prior months to review, newest first.

    The sample date is the 15th so the date picker renders the right month.

    Args:
        months_back: Number of months before the current one
        today: Reference day (defaults to today)

    Returns:
        List of MonthWindow, one per prior month

    Examples:
        >>> months_to_review(2, date(2025, 2, 3))
        [MonthWindow(label='01/2025', sample_date='15/01/2025'), MonthWindow(label='12/2024', sample_date='15/12/2024')]
    """
    if months_back < 0:
        raise ValueError(f"months_back cannot be negative, got: {months_back}")

    today = today or date.today()
    windows = []
    for offset in range(1, months_back + 1):
        year, month = shift_month(today.year, today.month, -offset)
        windows.append(MonthWindow(
            label=f"{month:02d}/{year}",
            sample_date=f"15/{month:02d}/{year}",
        ))
    return windows


def parse_site_date(value: str) -> date:
    """
    Parse a DD/MM/YYYY day.

    Raises:
        ValueError: If the value is not a valid DD/MM/YYYY date
    """
    return datetime.strptime(value.strip(), SITE_DATE_FORMAT).date()


def format_site_date(day: date) -> str:
    return day.strftime(SITE_DATE_FORMAT)


def iso_to_site_date(value: str) -> str:
    """
    Convert an ISO date (YYYY-MM-DD) to the site's DD/MM/YYYY form.

    Raises:
        ValueError: If the value is not a valid ISO date

    Examples:
        >>> iso_to_site_date('2025-01-05')
        '05/01/2025'
    """
    return format_site_date(datetime.strptime(value.strip(), ISO_DATE_FORMAT).date())


def site_month_label(value: str) -> str:
    """MM/YYYY label of a DD/MM/YYYY day."""
    return month_label(parse_site_date(value))


def dedupe(dates: Iterable[str]) -> List[str]:
    """Remove duplicate days, keeping first-seen order."""
    seen = set()
    unique = []
    for value in dates:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


def parse_pending_field(value: Optional[str]) -> List[str]:
    """
    Parse the hidden pending-dates field into DD/MM/YYYY days.

    The field holds a bracket-delimited, comma-separated list of ISO dates,
    e.g. "[2025-01-05, 2025-01-17]". Brackets and quotes are stripped and the
    rest is split on commas.

    Args:
        value: Raw field value (None or blank means no pending days)

    Returns:
        Unique days in field order

    Raises:
        PendingFieldParseError: If a token is not an ISO date
    """
    if value is None:
        return []

    inner = value.strip().strip('[]()').strip()
    if not inner:
        return []

    days = []
    for token in inner.split(','):
        token = token.strip().strip('"\'').strip()
        if not token:
            continue
        try:
            days.append(iso_to_site_date(token))
        except ValueError:
            raise PendingFieldParseError(f"Invalid date '{token}' in pending-dates field")

    return dedupe(days)


def within_window(value: str, months_back: int, today: Optional[date] = None) -> bool:
    """
    Whether a DD/MM/YYYY day falls in the current month or the look-back window.

    Days after today's month are outside the window too.
    """
    today = today or date.today()
    day = parse_site_date(value)
    oldest_year, oldest_month = shift_month(today.year, today.month, -months_back)
    oldest = date(oldest_year, oldest_month, 1)
    newest_year, newest_month = shift_month(today.year, today.month, 1)
    return oldest <= day < date(newest_year, newest_month, 1)
