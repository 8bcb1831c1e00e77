"""
Deduplication Reporting Service

Service for generating deduplication audit reports on stderr.
"""

import sys
from typing import List

from .data_models import DeduplicationResult


class DeduplicationReportingService:
    """Service for generating deduplication reports and audit trails."""

    @staticmethod
    def generate_audit_report(result: DeduplicationResult, total_records: int, manual_review_queue: List[dict]):
        """Generate comprehensive deduplication audit report."""
        print("\n" + "="*70, file=sys.stderr)
        print("PATIENT DEDUPLICATION AUDIT REPORT", file=sys.stderr)
        print("="*70, file=sys.stderr)

        DeduplicationReportingService._print_overall_statistics(result, total_records)
        DeduplicationReportingService._print_factor_summary(manual_review_queue)
        DeduplicationReportingService._print_manual_review_queue(manual_review_queue)

    @staticmethod
    def _print_overall_statistics(result: DeduplicationResult, total_records: int):
        """Print overall statistics section."""
        print(f"\nOVERALL STATISTICS:", file=sys.stderr)
        print(f"Legacy records processed: {total_records:,}", file=sys.stderr)
        print(f"Target records produced: {result.total_records_out:,}", file=sys.stderr)
        print(f"Duplicate clusters found: {result.total_candidates:,}", file=sys.stderr)
        print(f"Automatic merges: {result.automatic_merges:,} ({result.get_automatic_merge_rate():.1%})", file=sys.stderr)
        print(f"Manual review required: {result.manual_review_required:,} ({result.get_review_rate():.1%})", file=sys.stderr)
        print(f"Skipped: {result.skipped:,}", file=sys.stderr)

    @staticmethod
    def _print_factor_summary(manual_review_queue: List[dict]):
        """Print average similarity factors across the review queue."""
        if not manual_review_queue:
            return

        count = len(manual_review_queue)
        print(f"\nREVIEW QUEUE FACTOR AVERAGES:", file=sys.stderr)
        for factor in ('name_score', 'email_score', 'phone_score', 'dob_score'):
            average = sum(item['similarity_factors'][factor] for item in manual_review_queue) / count
            print(f"  {factor}: {average:.2f}", file=sys.stderr)

    @staticmethod
    def _print_manual_review_queue(manual_review_queue: List[dict]):
        """Print manual review queue details."""
        if not manual_review_queue:
            return

        print(f"\nMANUAL REVIEW QUEUE ({len(manual_review_queue)} items):", file=sys.stderr)
        print("-" * 50, file=sys.stderr)

        for i, item in enumerate(manual_review_queue[:10], 1):
            duplicates = ", ".join(str(d) for d in item['duplicate_record_ids'])
            print(f"{i:2d}. Primary: {item['primary_record_id']:<10} | "
                  f"Duplicates: {duplicates:<20} | "
                  f"Confidence: {item['confidence_score']:.1%}", file=sys.stderr)

        if len(manual_review_queue) > 10:
            print(f"... and {len(manual_review_queue) - 10} more items", file=sys.stderr)

    @staticmethod
    def print_session_summary(result: DeduplicationResult):
        """Print final session summary."""
        print(f"\nDeduplication complete!", file=sys.stderr)
        print(f"Automatic merge rate: {result.get_automatic_merge_rate():.1%} | "
              f"Review rate: {result.get_review_rate():.1%}", file=sys.stderr)
