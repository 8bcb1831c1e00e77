"""
Result aggregation for legacy patient deduplication.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence, Set

from .data_models import (
    DeduplicationCandidate,
    DeduplicationConfig,
    DeduplicationResult,
    MergeStrategy,
    SourceRecord,
    TargetPatient
)
from ..utils.key_builders import create_patient_number
from ..utils.normalizers import as_utc, normalize_gender


class ResultAggregator:
    """Routes candidates by strategy and passes unclustered records through."""

    def __init__(self, config: Optional[DeduplicationConfig] = None):
        self.config = config or DeduplicationConfig()
        self.logger = logging.getLogger(__name__)

    def aggregate(self,
                  candidates: Sequence[DeduplicationCandidate],
                  records: Sequence[SourceRecord],
                  now: datetime) -> DeduplicationResult:
        """
        Build the final deduplication result.

        Args:
            candidates: Classified duplicate clusters
            records: Every input record, in original order
            now: Timestamp used for records without their own timestamps

        Returns:
            DeduplicationResult with merged and passthrough records
        """
        result = DeduplicationResult(total_candidates=len(candidates))

        for candidate in candidates:
            if candidate.merge_strategy == MergeStrategy.AUTOMATIC:
                if candidate.merged_data:
                    result.merged_records.append(candidate.merged_data)
                    result.automatic_merges += 1
            elif candidate.merge_strategy == MergeStrategy.MANUAL_REVIEW:
                result.review_queue.append(candidate)
                result.manual_review_required += 1
            elif candidate.merge_strategy == MergeStrategy.SKIP:
                result.skipped += 1

        clustered_ids: Set[int] = set()
        for candidate in candidates:
            clustered_ids.update(candidate.record_ids)

        passthrough_count = 0
        for record in records:
            if record.id not in clustered_ids:
                result.merged_records.append(self.convert_to_target_patient(record, now))
                passthrough_count += 1

        self.logger.info(
            f"Aggregated {len(candidates)} candidates and "
            f"{passthrough_count} passthrough records"
        )
        return result

    def convert_to_target_patient(self, record: SourceRecord, now: datetime) -> TargetPatient:
        """Convert one unclustered legacy record 1:1, without fusion."""
        target = TargetPatient(
            id=str(uuid.uuid4()),
            practice_id=self.config.practice_id,
            patient_number=create_patient_number(record.id, record.last_name),
            first_name=record.first_name or '',
            last_name=record.last_name or '',
            created_at=as_utc(record.created_at) if record.created_at else now,
            updated_at=as_utc(record.updated_at) if record.updated_at else now,
            medical_history={
                'legacy_patient_id': record.id,
                'merged_from_records': [record.id]
            }
        )

        if record.email:
            target.email = record.email
        if record.date_of_birth:
            target.date_of_birth = record.date_of_birth
        if record.gender:
            target.gender = normalize_gender(record.gender)

        return target
