"""
Tests for ``ReferenceNumberService``.
"""

from __future__ import annotations

import datetime

import pytest

from complaints.models import Complaint, DailyReferenceCounter
from complaints.services import ReferenceNumberService


class TestFormatReference:

    def test_format(self):
        day = datetime.date(2025, 3, 15)
        assert ReferenceNumberService.format_reference(day, 1) == "C202503150001"
        assert ReferenceNumberService.format_reference(day, 42) == "C202503150042"

    def test_sequence_wider_than_padding_is_not_truncated(self):
        day = datetime.date(2025, 3, 15)
        assert ReferenceNumberService.format_reference(day, 12345) == "C2025031512345"


@pytest.mark.django_db
class TestNextReference:

    def test_first_number_of_the_day(self):
        day = datetime.date(2025, 3, 15)
        assert ReferenceNumberService.next_reference(day) == "C202503150001"
        assert DailyReferenceCounter.objects.get(day=day).last_value == 1

    def test_sequential_calls_strictly_increase(self):
        day = datetime.date(2025, 3, 15)
        issued = [ReferenceNumberService.next_reference(day) for _ in range(5)]

        assert len(set(issued)) == 5
        assert issued == sorted(issued)
        assert issued[-1] == "C202503150005"

    def test_counter_restarts_each_day(self):
        ReferenceNumberService.next_reference(datetime.date(2025, 3, 15))
        ReferenceNumberService.next_reference(datetime.date(2025, 3, 15))

        assert ReferenceNumberService.next_reference(datetime.date(2025, 3, 16)) == "C202503160001"

    def test_new_counter_continues_after_existing_numbers(self, create_user):
        citizen = create_user()
        Complaint.objects.create(
            reference_number="C202503150001",
            citizen=citizen,
            complaint_type="Noise",
            location="Park",
            description="Loud music",
        )

        assert ReferenceNumberService.next_reference(datetime.date(2025, 3, 15)) == "C202503150002"

    def test_new_counter_skips_past_gap_left_by_deleted_complaint(self, create_user):
        citizen = create_user()
        for seq in (1, 2, 3):
            Complaint.objects.create(
                reference_number=f"C20250315000{seq}",
                citizen=citizen,
                complaint_type="Noise",
                location="Park",
                description="Loud music",
            )
        Complaint.objects.get(reference_number="C202503150002").delete()
        assert not DailyReferenceCounter.objects.filter(day=datetime.date(2025, 3, 15)).exists()

        day = datetime.date(2025, 3, 15)
        assert ReferenceNumberService.next_reference(day) == "C202503150004"
        assert ReferenceNumberService.next_reference(day) == "C202503150005"

    def test_new_counter_orders_widened_sequences_numerically(self, create_user):
        citizen = create_user()
        for ref in ("C202503159999", "C2025031510000"):
            Complaint.objects.create(
                reference_number=ref,
                citizen=citizen,
                complaint_type="Noise",
                location="Park",
                description="Loud music",
            )

        assert ReferenceNumberService.next_reference(datetime.date(2025, 3, 15)) == "C2025031510001"
