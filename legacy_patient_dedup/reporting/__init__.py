"""Audit logging for patient deduplication."""

from .audit_logger import DeduplicationAuditLogger

__all__ = ['DeduplicationAuditLogger']
