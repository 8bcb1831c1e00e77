"""
Patient Deduplication Data Models

This module defines the core data structures and types used throughout the
legacy patient deduplication engine: source and target records, similarity
factors, configuration, candidate clusters and the final result.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class MergeStrategy(Enum):
    """Action taken for a duplicate cluster based on its confidence score."""
    AUTOMATIC = "automatic"             # >= 95% - fused without review
    MANUAL_REVIEW = "manual_review"     # 75-95% - queued for a human
    SKIP = "skip"                       # < 75% - never produced by clustering


@dataclass(frozen=True)
class SourceRecord:
    """One legacy patient entry. Read-only input to the engine."""
    id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class SimilarityFactors:
    """Per-signal similarity scores for one compared pair."""
    name_score: float = 0.0
    email_score: float = 0.0
    phone_score: float = 0.0
    dob_score: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary representation."""
        return {
            'name_score': self.name_score,
            'email_score': self.email_score,
            'phone_score': self.phone_score,
            'dob_score': self.dob_score
        }


@dataclass(frozen=True)
class SimilarityWeights:
    """Weight of each similarity factor in the combined confidence."""
    name: float = 0.4
    email: float = 0.3
    phone: float = 0.2
    date_of_birth: float = 0.1

    def __post_init__(self):
        """Validate weight configuration."""
        weights = [self.name, self.email, self.phone, self.date_of_birth]
        for weight in weights:
            if not 0.0 <= weight <= 1.0:
                raise ValueError("Weights must be between 0.0 and 1.0")
        if abs(math.fsum(weights) - 1.0) > 1e-9:
            raise ValueError("Weights must sum to 1.0")

    def combine(self, factors: SimilarityFactors) -> float:
        """Weighted sum of the similarity factors."""
        return math.fsum([
            factors.name_score * self.name,
            factors.email_score * self.email,
            factors.phone_score * self.phone,
            factors.dob_score * self.date_of_birth
        ])


@dataclass(frozen=True)
class DeduplicationConfig:
    """Thresholds and weights for a deduplication run."""
    weights: SimilarityWeights = field(default_factory=SimilarityWeights)
    automatic_merge_threshold: float = 0.95
    manual_review_threshold: float = 0.75
    email_similarity_floor: float = 0.8
    name_first_boost: float = 0.2
    name_last_boost: float = 0.3
    practice_id: str = "1"

    def __post_init__(self):
        """Validate threshold configuration."""
        for threshold in (self.automatic_merge_threshold,
                          self.manual_review_threshold,
                          self.email_similarity_floor):
            if not 0.0 <= threshold <= 1.0:
                raise ValueError("Thresholds must be between 0.0 and 1.0")
        if self.manual_review_threshold > self.automatic_merge_threshold:
            raise ValueError(
                "Manual review threshold must not exceed automatic merge threshold")


@dataclass(frozen=True)
class SimilarityResult:
    """Combined confidence and the factors it was computed from."""
    confidence_score: float
    similarity_factors: SimilarityFactors


@dataclass
class RecordCluster:
    """A primary record and the later records that matched it."""
    primary_record: SourceRecord
    duplicate_records: List[SourceRecord]
    similarities: List[SimilarityResult]


@dataclass
class TargetPatient:
    """Canonical patient record for the target schema."""
    id: str
    practice_id: str
    patient_number: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    medical_history: Dict[str, Any] = field(default_factory=dict)
    preferences: Dict[str, Any] = field(default_factory=dict)

    @property
    def source_record_ids(self) -> List[int]:
        """Legacy ids folded into this record."""
        return list(self.medical_history.get('merged_from_records', []))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'id': self.id,
            'practice_id': self.practice_id,
            'patient_number': self.patient_number,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'gender': self.gender,
            'medical_history': self.medical_history,
            'preferences': self.preferences,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat()
        }


@dataclass
class DeduplicationCandidate:
    """A cluster of records judged likely to be the same patient."""
    primary_record: SourceRecord
    duplicate_records: List[SourceRecord]
    confidence_score: float
    similarity_factors: SimilarityFactors
    merge_strategy: MergeStrategy
    merged_data: Optional[TargetPatient] = None

    @property
    def record_ids(self) -> List[int]:
        """Primary id followed by duplicate ids in scan order."""
        return [self.primary_record.id] + [r.id for r in self.duplicate_records]


@dataclass
class DeduplicationResult:
    """Final output of a deduplication run."""
    total_candidates: int = 0
    automatic_merges: int = 0
    manual_review_required: int = 0
    skipped: int = 0
    merged_records: List[TargetPatient] = field(default_factory=list)
    review_queue: List[DeduplicationCandidate] = field(default_factory=list)

    @property
    def total_records_out(self) -> int:
        return len(self.merged_records)

    def get_automatic_merge_rate(self) -> float:
        """Share of candidates merged automatically."""
        if self.total_candidates == 0:
            return 0.0
        return self.automatic_merges / self.total_candidates

    def get_review_rate(self) -> float:
        """Share of candidates sent to manual review."""
        if self.total_candidates == 0:
            return 0.0
        return self.manual_review_required / self.total_candidates


@dataclass
class DeduplicationProgress:
    """Progress snapshot reported to an optional callback."""
    step: str
    percentage: int
    total_records: int = 0
    processed_records: int = 0
    phase: str = "deduplication"


ProgressCallback = Callable[[DeduplicationProgress], None]
