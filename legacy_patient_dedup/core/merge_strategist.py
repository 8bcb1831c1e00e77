"""
Merge strategy selection and record fusion.

Classifies each duplicate cluster by confidence and, for automatic merges,
deterministically fuses the cluster into one target patient record.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from .data_models import (
    DeduplicationCandidate,
    DeduplicationConfig,
    MergeStrategy,
    RecordCluster,
    SimilarityFactors,
    SimilarityResult,
    SourceRecord,
    TargetPatient
)
from ..utils.key_builders import create_patient_number
from ..utils.normalizers import as_utc, normalize_gender


class MergeStrategist:
    """Decides what happens to a duplicate cluster and builds fused records."""

    def __init__(self, config: Optional[DeduplicationConfig] = None):
        """
        Initialize the strategist.

        Args:
            config: Thresholds and placeholder practice id
        """
        self.config = config or DeduplicationConfig()
        self.logger = logging.getLogger(__name__)

    def determine_merge_strategy(self, confidence_score: float) -> MergeStrategy:
        """
        Classify a representative confidence score.

        SKIP is unreachable for clustered candidates, since clustering only
        admits pairs at or above the manual review threshold.
        """
        if confidence_score >= self.config.automatic_merge_threshold:
            return MergeStrategy.AUTOMATIC
        elif confidence_score >= self.config.manual_review_threshold:
            return MergeStrategy.MANUAL_REVIEW
        else:
            return MergeStrategy.SKIP

    @staticmethod
    def select_best_similarity(similarities: Sequence[SimilarityResult]) -> SimilarityResult:
        """Highest-confidence comparison; the first one wins on ties."""
        best = SimilarityResult(confidence_score=0.0, similarity_factors=SimilarityFactors())
        for similarity in similarities:
            if similarity.confidence_score > best.confidence_score:
                best = similarity
        return best

    def build_candidate(self, cluster: RecordCluster, now: datetime) -> DeduplicationCandidate:
        """
        Turn a cluster into a classified candidate.

        Args:
            cluster: Primary record, its duplicates and their similarities
            now: Fusion timestamp shared by the whole run

        Returns:
            DeduplicationCandidate, with merged_data only for automatic merges
        """
        best = self.select_best_similarity(cluster.similarities)
        merge_strategy = self.determine_merge_strategy(best.confidence_score)

        candidate = DeduplicationCandidate(
            primary_record=cluster.primary_record,
            duplicate_records=list(cluster.duplicate_records),
            confidence_score=best.confidence_score,
            similarity_factors=best.similarity_factors,
            merge_strategy=merge_strategy
        )

        if merge_strategy == MergeStrategy.AUTOMATIC:
            candidate.merged_data = self.merge_patient_data(
                cluster.primary_record, cluster.duplicate_records, now)

        return candidate

    def merge_patient_data(self,
                           primary: SourceRecord,
                           duplicates: Sequence[SourceRecord],
                           now: datetime) -> TargetPatient:
        """
        Fuse a primary record and its duplicates into one target patient.

        Names come from the primary only. Email comes from the member updated
        most recently, date of birth and gender from the first member that has
        one, and created_at is the earliest across the cluster.
        """
        all_records: List[SourceRecord] = [primary, *duplicates]

        merged = TargetPatient(
            id=str(uuid.uuid4()),
            practice_id=self.config.practice_id,
            patient_number=create_patient_number(primary.id, primary.last_name),
            first_name=primary.first_name or '',
            last_name=primary.last_name or '',
            created_at=min(self._timestamp(r.created_at, now) for r in all_records),
            updated_at=now
        )

        # A member without updated_at counts as updated now
        email_records = sorted(
            (r for r in all_records if r.email),
            key=lambda r: self._timestamp(r.updated_at, now),
            reverse=True
        )
        if email_records:
            merged.email = email_records[0].email

        dob_record = next((r for r in all_records if r.date_of_birth), None)
        if dob_record:
            merged.date_of_birth = dob_record.date_of_birth

        gender_record = next((r for r in all_records if r.gender), None)
        if gender_record:
            merged.gender = normalize_gender(gender_record.gender)

        merged.medical_history = {
            'merged_from_records': [r.id for r in all_records],
            'merge_timestamp': now.isoformat(),
            'primary_record_id': primary.id
        }

        self.logger.debug(
            f"Fused records {merged.medical_history['merged_from_records']} "
            f"into {merged.patient_number}"
        )

        return merged

    @staticmethod
    def _timestamp(value: Optional[datetime], now: datetime) -> datetime:
        return as_utc(value) if value else now
