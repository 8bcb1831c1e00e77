"""
Audit logging for patient deduplication decisions.

Provides structured, PII-free log lines suitable for a migration audit
trail: only legacy ids, scores and strategies are written.
"""

import logging
from datetime import datetime

from ..core.data_models import DeduplicationCandidate, DeduplicationResult, MergeStrategy


class DeduplicationAuditLogger:
    """
    Audit logging for deduplication runs.

    One line per candidate decision plus a session summary.
    """

    def __init__(self, logger_name: str = "patient_deduplication"):
        """
        Initialize audit logger.

        Args:
            logger_name: Name for the logger instance
        """
        self.logger = logging.getLogger(logger_name)
        self.session_start_time = datetime.now()

    def log_candidate_decision(self, candidate: DeduplicationCandidate) -> None:
        """
        Log the decision taken for one duplicate cluster.

        Args:
            candidate: Classified candidate
        """
        factors = candidate.similarity_factors
        log_parts = []

        if candidate.merge_strategy == MergeStrategy.AUTOMATIC:
            log_parts.append("AUTOMATIC_MERGE")
        elif candidate.merge_strategy == MergeStrategy.MANUAL_REVIEW:
            log_parts.append("MANUAL_REVIEW_REQUIRED")
        else:
            log_parts.append("SKIPPED")

        log_parts.append(f"Primary: {candidate.primary_record.id}")
        log_parts.append(f"Duplicates: {[r.id for r in candidate.duplicate_records]}")
        log_parts.append(f"Confidence: {candidate.confidence_score:.1%}")
        log_parts.append(
            f"Factors: name={factors.name_score:.2f}, email={factors.email_score:.2f}, "
            f"phone={factors.phone_score:.2f}, dob={factors.dob_score:.2f}"
        )

        if candidate.merged_data is not None:
            log_parts.append(f"Patient number: {candidate.merged_data.patient_number}")

        log_level = logging.WARNING if candidate.merge_strategy == MergeStrategy.MANUAL_REVIEW else logging.INFO
        self.logger.log(log_level, " - ".join(log_parts))

    def log_session_summary(self, result: DeduplicationResult, total_records: int) -> None:
        """
        Log summary statistics for the deduplication run.

        Args:
            result: Final deduplication result
            total_records: Number of input records
        """
        session_duration = datetime.now() - self.session_start_time

        self.logger.info(f"DEDUPLICATION_SESSION_COMPLETE - Duration: {session_duration}")
        self.logger.info(f"RECORDS_IN: {total_records}")
        self.logger.info(f"RECORDS_OUT: {result.total_records_out}")
        self.logger.info(f"CANDIDATES: {result.total_candidates}")
        self.logger.info(f"AUTOMATIC_MERGES: {result.automatic_merges}")
        self.logger.info(f"MANUAL_REVIEW: {result.manual_review_required}")
        self.logger.info(f"SKIPPED: {result.skipped}")
