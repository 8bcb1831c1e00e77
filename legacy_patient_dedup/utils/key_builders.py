"""
Identifier builders for target patient records.

This module provides functions to derive the human-facing identifiers the
target schema expects from legacy patient data.
"""

from typing import Optional


def create_patient_number(legacy_id: int, last_name: Optional[str]) -> str:
    """
    Create a patient number from a legacy id and last name.

    Args:
        legacy_id: Legacy patient identifier
        last_name: Patient's last name ('UNK' is used when empty)

    Returns:
        Three-letter upper-case name prefix followed by the zero-padded id

    Example:
    - 42 + "Smith" -> "SMI000042"
    - 7 + "" -> "UNK000007"
    """
    name_prefix = (last_name or 'UNK')[:3].upper()
    return f"{name_prefix}{str(legacy_id).zfill(6)}"
