"""Fiscal year utilities for the Sri Lankan year of assessment.

The year of assessment runs from April 1 to March 31 and is labelled by its
starting calendar year: "2024" covers 2024-04-01 to 2025-03-31.
"""

import logging
from datetime import date
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

DateLike = Union[date, str]

# April is the first month of the fiscal year
FISCAL_YEAR_START_MONTH = 4


def to_date(value: DateLike) -> date:
    """Coerce a date or ISO date string (YYYY-MM-DD...) to a date."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def fiscal_year_of(value: DateLike) -> str:
    """Get the fiscal year label for a date.

    Args:
        value: Date or ISO date string

    Returns:
        Label of the fiscal year containing the date (e.g. "2024")
    """
    d = to_date(value)
    # January-March belong to the previous year's fiscal year
    if d.month < FISCAL_YEAR_START_MONTH:
        return str(d.year - 1)
    return str(d.year)


def range_of(label: str) -> Tuple[date, date]:
    """Get the (start, end) dates of a fiscal year, both inclusive."""
    start_year = int(label)
    return date(start_year, 4, 1), date(start_year + 1, 3, 31)


def in_year(value: DateLike, label: str) -> bool:
    """Check if a date falls within a fiscal year (inclusive on both ends)."""
    start, end = range_of(label)
    return start <= to_date(value) <= end


def format_fiscal_year(label: str) -> str:
    """Format a fiscal year for display (e.g. "2024/2025")."""
    start_year = int(label)
    return f"{start_year}/{start_year + 1}"


def previous_fiscal_year(label: str) -> str:
    return str(int(label) - 1)


def current_fiscal_year(today: Optional[date] = None) -> str:
    """Get the fiscal year label for today (or the given date)."""
    return fiscal_year_of(today or date.today())


def recent_fiscal_years(count: int = 5, today: Optional[date] = None) -> list[str]:
    """List the most recent fiscal years, newest first."""
    current = int(current_fiscal_year(today))
    return [str(current - i) for i in range(count)]


def fiscal_years_from(start_label: str, today: Optional[date] = None) -> list[str]:
    """List fiscal years from the current year back to start_label, newest first."""
    current = int(current_fiscal_year(today))
    start = int(start_label)
    if start > current:
        logger.debug(f"Start year {start_label} is after current fiscal year {current}")
    return [str(year) for year in range(current, start - 1, -1)]
