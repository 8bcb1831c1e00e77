"""
Patient Deduplicator - Core deduplication engine.

This module drives one deterministic, single-pass, in-memory deduplication
run over a fully materialized set of legacy patient records.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .data_models import (
    DeduplicationCandidate,
    DeduplicationConfig,
    DeduplicationProgress,
    DeduplicationResult,
    ProgressCallback,
    SourceRecord
)
from .similarity_scoring import SimilarityScorer
from .candidate_clusterer import CandidateClusterer
from .merge_strategist import MergeStrategist
from .result_aggregator import ResultAggregator
from ..reporting.audit_logger import DeduplicationAuditLogger


class PatientDeduplicator:
    """
    Record-linkage engine for legacy patient migration.

    The clusterer drives the pass and calls the scorer per pair; each cluster
    is classified by the strategist, and the aggregator assembles merged,
    passthrough and review-queue output.
    """

    def __init__(self,
                 config: Optional[DeduplicationConfig] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        """
        Initialize the deduplicator.

        Args:
            config: Weights and thresholds (default: DeduplicationConfig())
            progress_callback: Called with a DeduplicationProgress at each stage
        """
        self.config = config or DeduplicationConfig()
        self.progress_callback = progress_callback

        self.scorer = SimilarityScorer(self.config)
        self.clusterer = CandidateClusterer(self.scorer)
        self.strategist = MergeStrategist(self.config)
        self.aggregator = ResultAggregator(self.config)

        self.logger = logging.getLogger(__name__)

    def deduplicate(self, records: Sequence[SourceRecord]) -> DeduplicationResult:
        """
        Deduplicate a set of legacy patient records.

        Args:
            records: Legacy records; collection order affects clustering

        Returns:
            DeduplicationResult with merged records and the review queue
        """
        audit_logger = DeduplicationAuditLogger()
        now = datetime.now(timezone.utc)
        total = len(records)

        self._update_progress('Starting patient deduplication analysis', 0, total, 0)

        self._update_progress('Analyzing patient similarities', 25, total, 0)
        clusters = self.clusterer.find_clusters(records)

        candidates: List[DeduplicationCandidate] = []
        for cluster in clusters:
            candidate = self.strategist.build_candidate(cluster, now)
            audit_logger.log_candidate_decision(candidate)
            candidates.append(candidate)

        self._update_progress('Processing deduplication candidates', 75, total, total)
        result = self.aggregator.aggregate(candidates, records, now)

        self._update_progress('Patient deduplication completed', 100, total, total)
        audit_logger.log_session_summary(result, total)

        return result

    def _update_progress(self, step: str, percentage: int, total: int, processed: int):
        """Report progress to the callback, if any."""
        self.logger.debug(f"{step} ({percentage}%)")
        if self.progress_callback:
            self.progress_callback(DeduplicationProgress(
                step=step,
                percentage=percentage,
                total_records=total,
                processed_records=processed
            ))


def deduplicate(records: Sequence[SourceRecord],
                config: Optional[DeduplicationConfig] = None) -> DeduplicationResult:
    """Deduplicate legacy patient records with the given (or default) config."""
    return PatientDeduplicator(config).deduplicate(records)
