"""
End-to-end tests for the deduplication engine.
"""

import unittest
from datetime import date, datetime, timezone

from legacy_patient_dedup.core.data_models import DeduplicationConfig, MergeStrategy, SourceRecord
from legacy_patient_dedup.core.patient_deduplicator import PatientDeduplicator, deduplicate


def ts(year: int) -> datetime:
    return datetime(year, 1, 1, tzinfo=timezone.utc)


class TestDeduplicationScenarios(unittest.TestCase):

    def setUp(self):
        self.deduplicator = PatientDeduplicator()

    def test_name_typo_with_matching_contact_merges_automatically(self):
        records = [
            SourceRecord(id=1, first_name="John", last_name="Smith", email="john@x.com",
                         phone="555-123-4567", date_of_birth=date(1980, 1, 1)),
            SourceRecord(id=2, first_name="Jon", last_name="Smith", email="john@x.com",
                         phone="(555) 123-4567", date_of_birth=date(1980, 1, 1))
        ]
        result = self.deduplicator.deduplicate(records)

        self.assertEqual(result.total_candidates, 1)
        self.assertEqual(result.automatic_merges, 1)
        self.assertEqual(result.total_records_out, 1)
        merged = result.merged_records[0]
        self.assertEqual(merged.first_name, "John")
        self.assertEqual(merged.medical_history['merged_from_records'], [1, 2])
        self.assertEqual(merged.medical_history['primary_record_id'], 1)

    def test_name_typo_without_phone_needs_review(self):
        records = [
            SourceRecord(id=1, first_name="John", last_name="Smith", email="john@x.com",
                         date_of_birth=date(1980, 1, 1)),
            SourceRecord(id=2, first_name="Jon", last_name="Smith", email="john@x.com",
                         date_of_birth=date(1980, 1, 1))
        ]
        result = self.deduplicator.deduplicate(records)

        self.assertEqual(result.manual_review_required, 1)
        self.assertEqual(result.automatic_merges, 0)
        self.assertEqual(result.merged_records, [])
        candidate = result.review_queue[0]
        self.assertEqual(candidate.merge_strategy, MergeStrategy.MANUAL_REVIEW)
        self.assertAlmostEqual(candidate.confidence_score, 0.8)
        self.assertIsNone(candidate.merged_data)

    def test_phone_formatting_alone_does_not_cluster(self):
        records = [
            SourceRecord(id=3, first_name="Jane", last_name="Doe", phone="(555) 123-4567"),
            SourceRecord(id=4, first_name="Jane", last_name="Doe", phone="5551234567")
        ]
        result = self.deduplicator.deduplicate(records)

        self.assertEqual(self.deduplicator.scorer.score(*records).similarity_factors.phone_score, 1.0)
        self.assertEqual(result.total_candidates, 0)
        self.assertEqual(result.total_records_out, 2)

    def test_phone_formatting_with_shared_details_merges(self):
        records = [
            SourceRecord(id=3, first_name="Jane", last_name="Doe", phone="(555) 123-4567",
                         email="jane@x.com", date_of_birth=date(1990, 5, 3)),
            SourceRecord(id=4, first_name="Jane", last_name="Doe", phone="5551234567",
                         email="jane@x.com", date_of_birth=date(1990, 5, 3))
        ]
        result = self.deduplicator.deduplicate(records)
        self.assertEqual(result.automatic_merges, 1)

    def test_distinct_patients_pass_through(self):
        records = [
            SourceRecord(id=5, first_name="Alice", last_name="Brown", email="alice@a.com",
                         phone="5550001111", date_of_birth=date(1970, 4, 4)),
            SourceRecord(id=6, first_name="Robert", last_name="Green", email="rob@b.org",
                         phone="5552223333", date_of_birth=date(1985, 9, 19))
        ]
        result = self.deduplicator.deduplicate(records)

        self.assertEqual(result.total_candidates, 0)
        self.assertEqual(
            [p.medical_history['legacy_patient_id'] for p in result.merged_records], [5, 6])

    def test_transposed_birth_date_still_merges(self):
        records = [
            SourceRecord(id=7, first_name="Maria", last_name="Garcia", email="maria@x.com",
                         phone="5554445555", date_of_birth=date(1975, 3, 5),
                         updated_at=ts(2019)),
            SourceRecord(id=8, first_name="Maria", last_name="Garcia", email="maria@x.com",
                         phone="5554445555", date_of_birth=date(1975, 5, 3),
                         updated_at=ts(2021))
        ]
        result = self.deduplicator.deduplicate(records)

        # 0.4 + 0.3 + 0.2 + 0.1 * 0.8
        self.assertEqual(result.automatic_merges, 1)
        self.assertEqual(result.merged_records[0].date_of_birth, date(1975, 3, 5))


class TestDeduplicationProperties(unittest.TestCase):

    def setUp(self):
        self.records = [
            SourceRecord(id=1, first_name="John", last_name="Smith", email="john@x.com",
                         phone="5551234567", date_of_birth=date(1980, 1, 1)),
            SourceRecord(id=2, first_name="Jon", last_name="Smith", email="john@x.com",
                         phone="5551234567", date_of_birth=date(1980, 1, 1)),
            SourceRecord(id=3, first_name="John", last_name="Smith", email="john@x.com",
                         date_of_birth=date(1980, 1, 1)),
            SourceRecord(id=4, first_name="Alice", last_name="Brown", email="alice@a.com"),
            SourceRecord(id=5, first_name="Alice", last_name="Brown", email="alice@a.com",
                         phone="5550001111", date_of_birth=date(1970, 4, 4)),
            SourceRecord(id=6, first_name="Robert", last_name="Green", email="rob@b.org")
        ]

    def _accounted_ids(self, result):
        ids = []
        for patient in result.merged_records:
            ids.extend(patient.source_record_ids)
        for candidate in result.review_queue:
            ids.extend(candidate.record_ids)
        return ids

    def test_every_record_accounted_for_exactly_once(self):
        result = deduplicate(self.records)
        ids = self._accounted_ids(result)
        self.assertEqual(sorted(ids), [1, 2, 3, 4, 5, 6])

    def test_empty_input(self):
        result = deduplicate([])
        self.assertEqual(result.total_candidates, 0)
        self.assertEqual(result.merged_records, [])
        self.assertEqual(result.review_queue, [])

    def test_single_record(self):
        result = deduplicate(self.records[:1])
        self.assertEqual(result.total_records_out, 1)

    def test_exact_duplicates_collapse(self):
        record = self.records[0]
        copies = [SourceRecord(id=i, first_name=record.first_name, last_name=record.last_name,
                               email=record.email, phone=record.phone,
                               date_of_birth=record.date_of_birth) for i in range(10, 14)]
        result = deduplicate(copies)

        self.assertEqual(result.automatic_merges, 1)
        self.assertEqual(result.total_records_out, 1)
        self.assertEqual(result.merged_records[0].source_record_ids, [10, 11, 12, 13])

    def test_raising_review_threshold_never_adds_clusters(self):
        loose = deduplicate(self.records, DeduplicationConfig(manual_review_threshold=0.6))
        default = deduplicate(self.records)
        strict = deduplicate(self.records, DeduplicationConfig(manual_review_threshold=0.9))

        self.assertGreaterEqual(loose.total_candidates, default.total_candidates)
        self.assertGreaterEqual(default.total_candidates, strict.total_candidates)

    def test_alternate_thresholds_change_routing(self):
        # name, email and dob match but phone is missing: 0.8
        records = [self.records[0], self.records[2]]
        default = deduplicate(records)
        lenient = deduplicate(records, DeduplicationConfig(automatic_merge_threshold=0.8))

        self.assertEqual(default.automatic_merges, 0)
        self.assertEqual(default.manual_review_required, 1)
        self.assertEqual(lenient.automatic_merges, 1)
        self.assertEqual(lenient.merged_records[0].source_record_ids, [1, 3])

    def test_primary_absorbs_every_close_neighbour(self):
        result = deduplicate(self.records[:3])

        self.assertEqual(result.automatic_merges, 1)
        self.assertEqual(result.merged_records[0].source_record_ids, [1, 2, 3])

    def test_progress_callback(self):
        updates = []
        PatientDeduplicator(progress_callback=updates.append).deduplicate(self.records)

        self.assertEqual([u.percentage for u in updates], [0, 25, 75, 100])
        self.assertTrue(all(u.total_records == 6 for u in updates))
        self.assertEqual(updates[-1].processed_records, 6)
        self.assertEqual(updates[-1].phase, "deduplication")

    def test_audit_log_lines(self):
        with self.assertLogs('patient_deduplication', level='INFO') as logs:
            deduplicate(self.records)

        output = "\n".join(logs.output)
        self.assertIn("AUTOMATIC_MERGE", output)
        self.assertIn("DEDUPLICATION_SESSION_COMPLETE", output)
        self.assertIn("RECORDS_IN: 6", output)


if __name__ == '__main__':
    unittest.main()
