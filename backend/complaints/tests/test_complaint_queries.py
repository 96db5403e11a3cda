"""
Integration tests for listing, retrieving, statistics and deletion.
"""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status

from complaints.models import Complaint, ComplaintComment, ComplaintHistory, ComplaintStatus
from core.models import AuditAction, AuditLog, Notification

from .base import ComplaintAPITestCase


class TestComplaintList(ComplaintAPITestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse("complaint-list")
        self.water_1 = self.file_complaint(complaint_type="Water leak")
        self.water_2 = self.file_complaint(citizen=self.other_citizen, complaint_type="Low pressure")
        self.road_1 = self.file_complaint(department=self.roads, complaint_type="Pothole")

    def _ids(self, resp) -> set[int]:
        return {item["id"] for item in resp.data["items"]}

    def test_citizen_sees_only_own_complaints(self):
        self.auth_as(self.citizen)
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(self._ids(resp), {self.water_1.pk, self.road_1.pk})
        self.assertEqual(resp.data["meta"]["total"], 2)

    def test_employee_sees_own_department_only(self):
        self.auth_as(self.employee_a)
        resp = self.client.get(self.url)
        self.assertEqual(self._ids(resp), {self.water_1.pk, self.water_2.pk})

    def test_employee_without_department_sees_nothing(self):
        Complaint.objects.filter(pk=self.road_1.pk).update(department=None)
        self.auth_as(self.employee_unassigned)
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["items"], [])
        self.assertEqual(resp.data["meta"]["total"], 0)

    def test_admin_sees_everything(self):
        self.auth_as(self.admin)
        resp = self.client.get(self.url)
        self.assertEqual(self._ids(resp), {self.water_1.pk, self.water_2.pk, self.road_1.pk})

    def test_scope_applies_before_explicit_filters(self):
        self.auth_as(self.employee_a)
        resp = self.client.get(self.url, {"department": self.roads.pk})
        self.assertEqual(resp.data["items"], [])

    def test_filter_by_status_and_citizen(self):
        Complaint.objects.filter(pk=self.water_2.pk).update(status=ComplaintStatus.IN_PROGRESS)
        self.auth_as(self.admin)

        by_status = self.client.get(self.url, {"status": ComplaintStatus.IN_PROGRESS})
        self.assertEqual(self._ids(by_status), {self.water_2.pk})

        by_citizen = self.client.get(self.url, {"citizen": self.citizen.pk})
        self.assertEqual(self._ids(by_citizen), {self.water_1.pk, self.road_1.pk})

    def test_search_matches_type_description_and_reference(self):
        self.auth_as(self.admin)

        by_type = self.client.get(self.url, {"search": "pothole"})
        self.assertEqual(self._ids(by_type), {self.road_1.pk})

        by_reference = self.client.get(self.url, {"search": self.water_2.reference_number})
        self.assertEqual(self._ids(by_reference), {self.water_2.pk})

        by_description = self.client.get(self.url, {"search": "PIPE BURST"})
        self.assertEqual(len(by_description.data["items"]), 3)

    def test_pagination_meta(self):
        self.auth_as(self.admin)
        resp = self.client.get(self.url, {"page": 2, "limit": 2})

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            resp.data["meta"],
            {"total": 3, "page": 2, "limit": 2, "total_pages": 2},
        )
        self.assertEqual(len(resp.data["items"]), 1)

    def test_newest_first(self):
        self.auth_as(self.admin)
        resp = self.client.get(self.url)
        self.assertEqual(
            [item["id"] for item in resp.data["items"]],
            [self.road_1.pk, self.water_2.pk, self.water_1.pk],
        )

    def test_invalid_page_rejected(self):
        self.auth_as(self.admin)
        self.assertEqual(self.client.get(self.url, {"page": 0}).status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get(self.url, {"limit": 0}).status_code, status.HTTP_400_BAD_REQUEST)


class TestComplaintRetrieve(ComplaintAPITestCase):

    def setUp(self):
        super().setUp()
        self.complaint = self.file_complaint()
        self.url = reverse("complaint-detail", kwargs={"pk": self.complaint.pk})

    def test_owner_retrieves_complaint(self):
        self.auth_as(self.citizen)
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["reference_number"], self.complaint.reference_number)
        self.assertEqual(resp.data["citizen_name"], "Sara Karimi")
        self.assertEqual(resp.data["department_name"], self.water.name)
        self.assertEqual(len(resp.data["history"]), 1)

    def test_other_citizen_forbidden(self):
        self.auth_as(self.other_citizen)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_of_other_department_forbidden(self):
        self.auth_as(self.employee_roads)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_complaint_is_404(self):
        self.auth_as(self.admin)
        url = reverse("complaint-detail", kwargs={"pk": 999999})
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)


class TestComplaintStatistics(ComplaintAPITestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse("complaint-statistics")
        first = self.file_complaint()
        self.file_complaint()
        self.file_complaint(department=self.roads)
        Complaint.objects.filter(pk=first.pk).update(status=ComplaintStatus.COMPLETED)

    def test_employee_statistics_scoped_to_department(self):
        self.auth_as(self.employee_a)
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["total"], 2)
        self.assertEqual(
            resp.data["by_status"],
            {"NEW": 1, "IN_PROGRESS": 0, "COMPLETED": 1, "REJECTED": 0},
        )

    def test_admin_statistics_unscoped(self):
        self.auth_as(self.admin)
        resp = self.client.get(self.url)
        self.assertEqual(resp.data["total"], 3)
        self.assertEqual(resp.data["by_status"]["NEW"], 2)

    def test_employee_without_department_gets_zeroes(self):
        self.auth_as(self.employee_unassigned)
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["total"], 0)

    def test_citizen_forbidden(self):
        self.auth_as(self.citizen)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)


class TestComplaintDelete(ComplaintAPITestCase):

    def setUp(self):
        super().setUp()
        self.complaint = self.file_complaint()
        ComplaintComment.objects.create(complaint=self.complaint, author=self.citizen, content="Hi")
        self.url = reverse("complaint-detail", kwargs={"pk": self.complaint.pk})

    def test_admin_deletes_complaint(self):
        self.auth_as(self.admin)
        resp = self.client.delete(self.url)

        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Complaint.objects.filter(pk=self.complaint.pk).exists())
        self.assertFalse(ComplaintHistory.objects.filter(complaint_id=self.complaint.pk).exists())
        self.assertFalse(ComplaintComment.objects.filter(complaint_id=self.complaint.pk).exists())

        entry = AuditLog.objects.get(action=AuditAction.DELETE_COMPLAINT)
        self.assertEqual(entry.entity_id, str(self.complaint.pk))
        self.assertEqual(entry.details, {"reference_number": self.complaint.reference_number})

    def test_notifications_survive_deletion(self):
        self.auth_as(self.admin)
        self.client.delete(self.url)

        survivors = Notification.objects.filter(recipient=self.citizen)
        self.assertTrue(survivors.exists())
        self.assertTrue(all(n.complaint_id is None for n in survivors))

    def test_employee_cannot_delete(self):
        self.auth_as(self.employee_a)
        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Complaint.objects.filter(pk=self.complaint.pk).exists())

    def test_owner_cannot_delete(self):
        self.auth_as(self.citizen)
        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_complaint_is_404_for_admin(self):
        self.auth_as(self.admin)
        url = reverse("complaint-detail", kwargs={"pk": 999999})
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)
