"""
Date-of-birth similarity for patient deduplication.

This module detects the data entry errors that most often separate two
copies of the same date of birth: a swapped day and month, and a year typed
one off.
"""

from datetime import date
from typing import Optional


def transpose_day_month(dob: date) -> Optional[date]:
    """
    Swap the day and month of a date.

    Returns None when the swapped value is not a calendar date
    (e.g. 1980-01-31 would need month 31).
    """
    try:
        return date(dob.year, dob.day, dob.month)
    except ValueError:
        return None


def shift_year(dob: date, years: int) -> Optional[date]:
    """Move a date by whole years; None when the day does not exist (Feb 29)."""
    try:
        return dob.replace(year=dob.year + years)
    except ValueError:
        return None


def is_day_month_transposition(date1: date, date2: date) -> bool:
    """True if date2 equals date1 with day and month swapped."""
    swapped = transpose_day_month(date1)
    return swapped is not None and swapped == date2


def is_year_off_by_one(date1: date, date2: date) -> bool:
    """True if date2 is exactly one year after or before date1."""
    return date2 in (shift_year(date1, 1), shift_year(date1, -1))


def calculate_dob_similarity(date1: Optional[date], date2: Optional[date]) -> float:
    """
    Calculate similarity between two dates of birth.

    Args:
        date1: First date of birth (None if unknown)
        date2: Second date of birth (None if unknown)

    Returns:
        1.0 for an exact match, 0.8 for a day/month transposition,
        0.7 for a date one year apart, 0.0 otherwise
    """
    if date1 is None or date2 is None:
        return 0.0

    if date1 == date2:
        return 1.0

    if is_day_month_transposition(date1, date2):
        return 0.8

    if is_year_off_by_one(date1, date2):
        return 0.7

    return 0.0
