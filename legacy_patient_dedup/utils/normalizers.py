"""
String, date and timestamp normalization utilities for patient deduplication.

This module provides the normalization functions used throughout the
deduplication engine so that every identity signal is compared in the same
canonical form.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional


_NON_ALNUM = re.compile(r'[^a-z0-9]')
_NON_DIGIT = re.compile(r'[^0-9]')


def normalize_token(s: Optional[str]) -> str:
    """
    Normalize a token by lowercasing, trimming and dropping every character
    that is not an ASCII letter or digit.

    Used for names and for emails: for emails this also strips the
    ``@`` and ``.`` separators.

    Args:
        s: Input string to normalize

    Returns:
        Normalized token, or empty string for empty/None input
    """
    if not s:
        return ""
    return _NON_ALNUM.sub('', s.lower().strip())


def normalize_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """
    Build a phonebook-style normalized name.

    The separating space is inserted after normalization, so it is the only
    non-alphanumeric character a normalized name can contain.

    Example:
    - "  John " + "O'Brien" -> "john obrien"
    - "" + "Smith" -> "smith"
    """
    return f"{normalize_token(first_name)} {normalize_token(last_name)}".strip()


def normalize_phone(s: Optional[str]) -> str:
    """Strip every non-digit character from a phone number."""
    if not s:
        return ""
    return _NON_DIGIT.sub('', s)


def normalize_gender(gender: Optional[str]) -> Optional[str]:
    """
    Normalize gender string to the target schema values.

    Args:
        gender: Input gender string (free form)

    Returns:
        'male', 'female', 'other', 'prefer_not_to_say', or None if empty
    """
    if not gender:
        return None

    gender_normalized = gender.lower().strip()

    male_variants = ['male', 'm']
    female_variants = ['female', 'f']
    other_variants = ['other', 'o']
    undisclosed_variants = ['prefer_not_to_say', 'prefer not to say', 'n/a']

    if gender_normalized in male_variants:
        return 'male'
    elif gender_normalized in female_variants:
        return 'female'
    elif gender_normalized in other_variants:
        return 'other'
    elif gender_normalized in undisclosed_variants:
        return 'prefer_not_to_say'

    return 'other'


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a date string found in legacy exports.

    Supports multiple input formats commonly found in healthcare systems:
    - YYYY-MM-DD (ISO format)
    - MM/DD/YYYY (US format)
    - DD/MM/YYYY (European format)
    - YYYY/MM/DD (Alternative ISO)
    - DD.MM.YYYY

    Args:
        date_str: Input date string in various formats

    Returns:
        Parsed date, or None if no format matches
    """
    if not date_str or not date_str.strip():
        return None

    formats = ['%Y-%m-%d', '%m/%d/%Y', '%d/%m/%Y', '%Y/%m/%d', '%d.%m.%Y']

    date_str = date_str.strip()
    for fmt in formats:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    return None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp, falling back to plain date formats.

    A trailing 'Z' is accepted as UTC. Naive results are returned as UTC.
    """
    if not value or not value.strip():
        return None

    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'

    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError:
        pass

    parsed = parse_date(value)
    if parsed is None:
        return None
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Return an aware datetime, treating naive values as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
