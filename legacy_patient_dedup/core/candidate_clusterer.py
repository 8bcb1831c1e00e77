"""
Candidate clustering for legacy patient deduplication.

Groups likely duplicates in a single forward pass over the record list.
"""

import logging
from typing import List, Sequence

from .data_models import RecordCluster, SimilarityResult, SourceRecord
from .similarity_scoring import SimilarityScorer


class CandidateClusterer:
    """
    Greedy, forward-only, single-link clustering of patient records.

    Each unprocessed record collects every later unprocessed record whose
    confidence against it reaches the manual review threshold. Members are
    never re-clustered around a tighter match, and two already-processed
    records are never compared, so the clusters depend on input order.
    """

    def __init__(self, scorer: SimilarityScorer):
        self.scorer = scorer
        self.review_threshold = scorer.config.manual_review_threshold
        self.logger = logging.getLogger(__name__)

    def find_clusters(self, records: Sequence[SourceRecord]) -> List[RecordCluster]:
        """
        Find duplicate clusters in a fully materialized record list.

        Args:
            records: Legacy records in their original collection order

        Returns:
            Clusters in the order their primary record was scanned
        """
        processed = [False] * len(records)
        clusters: List[RecordCluster] = []

        for i, primary in enumerate(records):
            if processed[i]:
                continue

            duplicates: List[SourceRecord] = []
            similarities: List[SimilarityResult] = []

            for j in range(i + 1, len(records)):
                if processed[j]:
                    continue

                similarity = self.scorer.score(primary, records[j])
                if similarity.confidence_score >= self.review_threshold:
                    duplicates.append(records[j])
                    similarities.append(similarity)
                    processed[j] = True

            if duplicates:
                processed[i] = True
                clusters.append(RecordCluster(
                    primary_record=primary,
                    duplicate_records=duplicates,
                    similarities=similarities
                ))
                self.logger.debug(
                    f"Cluster found: primary {primary.id} with duplicates "
                    f"{[r.id for r in duplicates]}"
                )

        self.logger.info(f"Found {len(clusters)} duplicate clusters in {len(records)} records")
        return clusters
