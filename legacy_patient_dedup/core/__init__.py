"""Core patient deduplication engine."""

# Import main classes for easier access
from .data_models import (
    MergeStrategy,
    SourceRecord,
    SimilarityFactors,
    SimilarityWeights,
    SimilarityResult,
    DeduplicationConfig,
    RecordCluster,
    TargetPatient,
    DeduplicationCandidate,
    DeduplicationResult,
    DeduplicationProgress
)
from .similarity_scoring import SimilarityScorer, levenshtein_similarity
from .candidate_clusterer import CandidateClusterer
from .merge_strategist import MergeStrategist
from .result_aggregator import ResultAggregator
from .patient_deduplicator import PatientDeduplicator, deduplicate

__all__ = [
    'MergeStrategy',
    'SourceRecord',
    'SimilarityFactors',
    'SimilarityWeights',
    'SimilarityResult',
    'DeduplicationConfig',
    'RecordCluster',
    'TargetPatient',
    'DeduplicationCandidate',
    'DeduplicationResult',
    'DeduplicationProgress',
    'SimilarityScorer',
    'levenshtein_similarity',
    'CandidateClusterer',
    'MergeStrategist',
    'ResultAggregator',
    'PatientDeduplicator',
    'deduplicate'
]
