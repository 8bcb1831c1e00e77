"""Legacy patient record-linkage engine for patient migration."""

__version__ = '0.1.0'

from .core import (
    DeduplicationConfig,
    DeduplicationResult,
    MergeStrategy,
    PatientDeduplicator,
    SourceRecord,
    deduplicate
)

__all__ = [
    'DeduplicationConfig',
    'DeduplicationResult',
    'MergeStrategy',
    'PatientDeduplicator',
    'SourceRecord',
    'deduplicate'
]
