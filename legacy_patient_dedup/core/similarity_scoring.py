"""
Similarity scoring for legacy patient deduplication.

This module compares two legacy patient records on four weakly reliable
identity signals (name, email, phone, date of birth) and combines them
into one weighted confidence score.
"""

import logging
from typing import Optional

from rapidfuzz.distance import Levenshtein

from .data_models import (
    DeduplicationConfig,
    SimilarityFactors,
    SimilarityResult,
    SourceRecord
)
from ..utils.normalizers import normalize_token, normalize_name, normalize_phone
from ..utils.date_similarity import calculate_dob_similarity


def levenshtein_similarity(a: str, b: str) -> float:
    """
    Edit-distance similarity normalized by the longer string.

    Returns 1 - distance / max(len(a), len(b)); two empty strings are identical.
    """
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / max_length


class SimilarityScorer:
    """
    Computes the similarity between two legacy patient records.

    Each factor is scored in [0.0, 1.0]; a factor that is missing on either
    side scores 0 and never aborts the comparison.
    """

    def __init__(self, config: Optional[DeduplicationConfig] = None):
        """
        Initialize the scorer.

        Args:
            config: Weights and thresholds (default: DeduplicationConfig())
        """
        self.config = config or DeduplicationConfig()
        self.logger = logging.getLogger(__name__)

    def score(self, record1: SourceRecord, record2: SourceRecord) -> SimilarityResult:
        """
        Calculate the weighted similarity between two records.

        Args:
            record1: First legacy record
            record2: Second legacy record

        Returns:
            SimilarityResult with the combined confidence and its factors
        """
        factors = SimilarityFactors(
            name_score=self.calculate_name_similarity(record1, record2),
            email_score=self.calculate_email_similarity(record1, record2),
            phone_score=self.calculate_phone_similarity(record1, record2),
            dob_score=self.calculate_dob_similarity(record1, record2)
        )
        confidence_score = self.config.weights.combine(factors)

        self.logger.debug(
            f"Compared records {record1.id} and {record2.id}: "
            f"name={factors.name_score:.3f} email={factors.email_score:.3f} "
            f"phone={factors.phone_score:.3f} dob={factors.dob_score:.3f} "
            f"(confidence: {confidence_score:.3f})"
        )

        return SimilarityResult(
            confidence_score=confidence_score,
            similarity_factors=factors
        )

    def calculate_name_similarity(self, record1: SourceRecord, record2: SourceRecord) -> float:
        """
        Name similarity from edit distance, boosted for matching name parts.

        Boosts apply to the individual first and last name fields, not the
        combined name, and the total is capped at 1.0.
        """
        name1 = normalize_name(record1.first_name, record1.last_name)
        name2 = normalize_name(record2.first_name, record2.last_name)

        if not name1 or not name2:
            return 0.0

        if name1 == name2:
            return 1.0

        similarity = levenshtein_similarity(name1, name2)

        boost = 0.0
        if normalize_token(record1.first_name) == normalize_token(record2.first_name):
            boost += self.config.name_first_boost
        if normalize_token(record1.last_name) == normalize_token(record2.last_name):
            boost += self.config.name_last_boost

        return min(1.0, similarity + boost)

    def calculate_email_similarity(self, record1: SourceRecord, record2: SourceRecord) -> float:
        """
        Email similarity on fully normalized addresses.

        normalize_token removes '@' and '.', so the local part and domain
        are compared as one run of characters.
        """
        email1 = normalize_token(record1.email)
        email2 = normalize_token(record2.email)

        if not email1 or not email2:
            return 0.0

        if email1 == email2:
            return 1.0

        # Typos in emails are rare; only near-identical addresses count.
        similarity = levenshtein_similarity(email1, email2)
        return similarity if similarity > self.config.email_similarity_floor else 0.0

    def calculate_phone_similarity(self, record1: SourceRecord, record2: SourceRecord) -> float:
        """Phone similarity on digit strings; containment covers prefixes."""
        phone1 = normalize_phone(record1.phone)
        phone2 = normalize_phone(record2.phone)

        if not phone1 or not phone2:
            return 0.0

        if phone1 == phone2:
            return 1.0

        if phone1 in phone2 or phone2 in phone1:
            return 0.8

        return 0.0

    def calculate_dob_similarity(self, record1: SourceRecord, record2: SourceRecord) -> float:
        """Date of birth similarity tolerant to common entry errors."""
        return calculate_dob_similarity(record1.date_of_birth, record2.date_of_birth)
