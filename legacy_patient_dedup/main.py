#!/usr/bin/env python3
"""
Legacy Patient Deduplication - Main Entrypoint

Finds and resolves duplicate legacy patient records before migration to the
new patient schema. Automatic merges and unique records are written as
target patient rows; uncertain clusters are written to a review queue.
"""

import argparse
import logging
import sys
from pathlib import Path

from .core.data_models import DeduplicationConfig
from .core.deduplication_service import DeduplicationService
from .core.reporting_service import DeduplicationReportingService


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = '%(asctime)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Legacy Patient Deduplication - fuzzy record linkage for patient migration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s legacy_patients.csv -o patients.csv --review-output review.json
  %(prog)s legacy_patients.csv --auto-merge-threshold 0.98 --verbose
  %(prog)s legacy_patients.csv --audit-only
        """
    )

    parser.add_argument('source_file', help='Legacy patient CSV file path')
    parser.add_argument('-o', '--output', help='Output CSV file for target patients (default: stdout)')
    parser.add_argument('--review-output', help='Output JSON file for the manual review queue')
    parser.add_argument('--auto-merge-threshold', type=float, default=0.95,
                        help='Minimum confidence for automatic merging (default: 0.95)')
    parser.add_argument('--review-threshold', type=float, default=0.75,
                        help='Minimum confidence for clustering and manual review (default: 0.75)')
    parser.add_argument('--practice-id', default='1',
                        help='Placeholder practice id for target records (default: 1)')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable verbose logging')
    parser.add_argument('--audit-only', action='store_true',
                        help='Generate audit report only, no output files')
    return parser


def main(argv=None):
    """Main entrypoint for legacy patient deduplication."""
    args = build_parser().parse_args(argv)

    # Setup logging
    setup_logging(args.verbose)

    # Validate input file
    if not Path(args.source_file).exists():
        print(f"Error: Source file not found: {args.source_file}", file=sys.stderr)
        sys.exit(1)

    try:
        config = DeduplicationConfig(
            automatic_merge_threshold=args.auto_merge_threshold,
            manual_review_threshold=args.review_threshold,
            practice_id=args.practice_id
        )
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        service = DeduplicationService(config)
        records = service.load_source_records(args.source_file)

        print(f"Auto-merge threshold: {config.automatic_merge_threshold:.1%} | "
              f"Review threshold: {config.manual_review_threshold:.1%}", file=sys.stderr)

        if args.audit_only:
            print("Audit-only mode: No output file will be generated", file=sys.stderr)

        result = service.process_records(records)

        if not args.audit_only:
            service.write_merged_output_file(result, args.output)
            if args.review_output:
                service.write_review_queue_file(args.review_output)

        DeduplicationReportingService.generate_audit_report(
            result, len(records), service.get_manual_review_queue())
        DeduplicationReportingService.print_session_summary(result)

    except KeyboardInterrupt:
        print("\n\nProcess interrupted by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logging.error(f"Processing failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
