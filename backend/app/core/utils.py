"""
Utility functions for the application.
"""
from typing import Any, Dict, Tuple
from datetime import date
import calendar
import re

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def month_name(month: int) -> str:
    """Full English month name for a 1-based month number."""
    return MONTHS[month - 1]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def slugify(value: str) -> str:
    """Lower-case a name and collapse every run of other characters into '-'."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower())


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response
