"""
Patient Deduplication Service

Service layer for loading legacy patient exports, running the deduplication
engine and writing merged records and the manual review queue.
"""

import csv
import json
import logging
import sys
from typing import Any, Dict, List, Optional, TextIO

from .data_models import DeduplicationCandidate, DeduplicationConfig, DeduplicationResult, SourceRecord
from .patient_deduplicator import PatientDeduplicator
from ..utils.normalizers import parse_date, parse_timestamp


MERGED_FIELDNAMES = [
    'id', 'practice_id', 'patient_number', 'first_name', 'last_name',
    'email', 'date_of_birth', 'gender', 'medical_history', 'preferences',
    'created_at', 'updated_at'
]


class DeduplicationService:
    """Service for legacy patient deduplication operations."""

    def __init__(self, config: Optional[DeduplicationConfig] = None):
        """
        Initialize the deduplication service.

        Args:
            config: Weights and thresholds for the engine
        """
        self.config = config or DeduplicationConfig()
        self.deduplicator = PatientDeduplicator(self.config)
        self.manual_review_queue: List[dict] = []

    def load_source_records(self, source_file: str) -> List[SourceRecord]:
        """
        Load legacy patient records from a CSV export.

        Args:
            source_file: Path to CSV with id, first_name, last_name, email,
                phone, date_of_birth, gender, created_at, updated_at columns

        Returns:
            Records in file order
        """
        records: List[SourceRecord] = []

        logging.info(f"Loading legacy patient records from: {source_file}")

        with open(source_file, 'r', encoding='utf-8') as file:
            reader = csv.DictReader(file)

            for line_number, row in enumerate(reader, start=2):
                record = self._parse_source_row(row, line_number)
                if record is not None:
                    records.append(record)

        logging.info(f"Loaded {len(records)} legacy patient records")
        return records

    def process_records(self, records: List[SourceRecord]) -> DeduplicationResult:
        """
        Deduplicate records and collect the manual review queue.

        Args:
            records: Legacy patient records

        Returns:
            Deduplication result
        """
        # Reset for new session
        self.manual_review_queue = []

        result = self.deduplicator.deduplicate(records)

        for candidate in result.review_queue:
            self._handle_manual_review(candidate)

        return result

    def get_manual_review_queue(self) -> List[dict]:
        """Get the current manual review queue."""
        return self.manual_review_queue.copy()

    def write_merged_records(self, result: DeduplicationResult, output: TextIO):
        """Write merged and passthrough records as CSV."""
        writer = csv.DictWriter(output, fieldnames=MERGED_FIELDNAMES)
        writer.writeheader()
        for patient in result.merged_records:
            row = patient.to_dict()
            row['medical_history'] = json.dumps(row['medical_history'])
            row['preferences'] = json.dumps(row['preferences'])
            writer.writerow({k: '' if v is None else v for k, v in row.items()})

    def write_merged_output_file(self, result: DeduplicationResult, output_file: Optional[str] = None):
        """Write merged records to a file, or stdout if no file is given."""
        if output_file:
            with open(output_file, 'w', newline='', encoding='utf-8') as outfile:
                self.write_merged_records(result, outfile)
        else:
            self.write_merged_records(result, sys.stdout)

    def write_review_queue_file(self, review_file: str):
        """Write the manual review queue as JSON."""
        with open(review_file, 'w', encoding='utf-8') as outfile:
            json.dump(self.manual_review_queue, outfile, indent=2)
        logging.info(f"Wrote {len(self.manual_review_queue)} review items to: {review_file}")

    def _parse_source_row(self, row: Dict[str, str], line_number: int) -> Optional[SourceRecord]:
        """Parse one CSV row; rows without a numeric id are skipped."""
        raw_id = (row.get('id') or '').strip()
        try:
            legacy_id = int(raw_id)
        except ValueError:
            logging.warning(f"Skipping row {line_number}: invalid legacy id '{raw_id}'")
            return None

        return SourceRecord(
            id=legacy_id,
            first_name=(row.get('first_name') or '').strip(),
            last_name=(row.get('last_name') or '').strip(),
            email=(row.get('email') or '').strip() or None,
            phone=(row.get('phone') or '').strip() or None,
            date_of_birth=parse_date(row.get('date_of_birth')),
            gender=(row.get('gender') or '').strip() or None,
            created_at=parse_timestamp(row.get('created_at')),
            updated_at=parse_timestamp(row.get('updated_at'))
        )

    def _handle_manual_review(self, candidate: DeduplicationCandidate):
        """Queue a candidate for a human operator."""
        self.manual_review_queue.append(self._candidate_to_review_item(candidate))

    @staticmethod
    def _candidate_to_review_item(candidate: DeduplicationCandidate) -> Dict[str, Any]:
        return {
            'primary_record_id': candidate.primary_record.id,
            'duplicate_record_ids': [r.id for r in candidate.duplicate_records],
            'confidence_score': round(candidate.confidence_score, 4),
            'similarity_factors': candidate.similarity_factors.to_dict(),
            'merge_strategy': candidate.merge_strategy.value,
            'reason': f"Confidence {candidate.confidence_score:.1%} below automatic merge threshold"
        }
