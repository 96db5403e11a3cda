"""
Integration tests for ``POST /api/complaints/{id}/comments/`` and the
visibility of internal notes.
"""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status

from complaints.models import ComplaintComment, ComplaintHistory, HistoryAction
from core.models import AuditAction, AuditLog, Notification, NotificationType

from .base import ComplaintAPITestCase


class TestComplaintComments(ComplaintAPITestCase):

    def setUp(self):
        super().setUp()
        self.complaint = self.file_complaint()
        self.url = reverse("complaint-comments", kwargs={"pk": self.complaint.pk})
        self.detail_url = reverse("complaint-detail", kwargs={"pk": self.complaint.pk})

    def _comment_notifications(self):
        return Notification.objects.filter(type=NotificationType.NEW_COMMENT)

    def test_employee_comment_notifies_citizen(self):
        self.auth_as(self.employee_a)
        resp = self.client.post(self.url, {"content": "We are on it."}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertFalse(resp.data["is_internal"])
        self.assertEqual(resp.data["author"], self.employee_a.pk)

        note = self._comment_notifications().get()
        self.assertEqual(note.recipient_id, self.citizen.pk)

        history = ComplaintHistory.objects.get(complaint=self.complaint, action=HistoryAction.ADD_COMMENT)
        self.assertEqual(history.description, "Comment added.")
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.ADD_COMMENT).exists())

    def test_citizen_comment_does_not_notify_self(self):
        self.auth_as(self.citizen)
        resp = self.client.post(self.url, {"content": "Any news?"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertFalse(self._comment_notifications().exists())

    def test_internal_note_is_not_notified(self):
        self.auth_as(self.employee_a)
        resp = self.client.post(self.url, {"content": "Crew booked.", "is_internal": True}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertTrue(resp.data["is_internal"])
        self.assertFalse(self._comment_notifications().exists())
        history = ComplaintHistory.objects.get(complaint=self.complaint, action=HistoryAction.ADD_COMMENT)
        self.assertEqual(history.description, "Internal note added.")

    def test_citizen_cannot_post_internal_note(self):
        self.auth_as(self.citizen)
        resp = self.client.post(self.url, {"content": "Secret", "is_internal": True}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(ComplaintComment.objects.exists())

    def test_blank_content_rejected(self):
        self.auth_as(self.employee_a)
        resp = self.client.post(self.url, {"content": "   "}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_citizen_cannot_comment(self):
        self.auth_as(self.other_citizen)
        resp = self.client.post(self.url, {"content": "Me too"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_of_other_department_cannot_comment(self):
        self.auth_as(self.employee_roads)
        resp = self.client.post(self.url, {"content": "Hello"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_internal_notes_hidden_from_citizen(self):
        ComplaintComment.objects.create(
            complaint=self.complaint, author=self.employee_a, content="Public reply",
        )
        ComplaintComment.objects.create(
            complaint=self.complaint, author=self.employee_a, content="Staff only", is_internal=True,
        )

        self.auth_as(self.citizen)
        citizen_view = self.client.get(self.detail_url)
        self.assertEqual(citizen_view.status_code, status.HTTP_200_OK)
        self.assertEqual([c["content"] for c in citizen_view.data["comments"]], ["Public reply"])

        self.auth_as(self.employee_b)
        staff_view = self.client.get(self.detail_url)
        self.assertEqual(
            {c["content"] for c in staff_view.data["comments"]},
            {"Public reply", "Staff only"},
        )

    def test_list_comment_count_excludes_internal_notes_for_citizen(self):
        ComplaintComment.objects.create(
            complaint=self.complaint, author=self.employee_a, content="Public reply",
        )
        ComplaintComment.objects.create(
            complaint=self.complaint, author=self.employee_a, content="Staff only", is_internal=True,
        )

        self.auth_as(self.citizen)
        resp = self.client.get(reverse("complaint-list"))
        self.assertEqual(resp.data["items"][0]["comment_count"], 1)

        self.auth_as(self.employee_a)
        resp = self.client.get(reverse("complaint-list"))
        self.assertEqual(resp.data["items"][0]["comment_count"], 2)
