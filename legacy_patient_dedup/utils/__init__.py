"""Utility functions for patient deduplication."""

# Import key functions for easier access
from .normalizers import (
    normalize_token,
    normalize_name,
    normalize_phone,
    normalize_gender,
    parse_date,
    parse_timestamp,
    as_utc
)
from .key_builders import create_patient_number
from .date_similarity import calculate_dob_similarity, is_day_month_transposition, is_year_off_by_one

__all__ = [
    'normalize_token',
    'normalize_name',
    'normalize_phone',
    'normalize_gender',
    'parse_date',
    'parse_timestamp',
    'as_utc',
    'create_patient_number',
    'calculate_dob_similarity',
    'is_day_month_transposition',
    'is_year_off_by_one'
]
