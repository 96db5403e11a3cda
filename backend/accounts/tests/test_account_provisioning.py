"""
Integration tests for admin account provisioning
(``POST /api/accounts/users/``).
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import UserRole
from core.models import AuditAction, AuditLog, Notification, NotificationType
from departments.models import Department

User = get_user_model()


class TestAccountProvisioning(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.water = Department.objects.create(name="Water Authority")
        cls.admin = User.objects.create_user(
            username="prov_admin",
            password="Admin!Pass42",
            email="prov_admin@example.com",
            phone_number="09160000001",
            role=UserRole.ADMIN,
        )
        cls.employee = User.objects.create_user(
            username="prov_employee",
            password="Employee!Pass42",
            email="prov_employee@example.com",
            phone_number="09160000002",
            role=UserRole.EMPLOYEE,
            department=cls.water,
        )

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("accounts:user-list")
        self.payload = {
            "username": "new_employee",
            "email": "new_employee@example.com",
            "phone_number": "+989121234567",
            "first_name": "Reza",
            "last_name": "Ahmadi",
            "role": UserRole.EMPLOYEE,
            "department": self.water.pk,
            "password": "Initial!Pass42",
        }

    def auth_as(self, user: User) -> None:
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")

    def test_admin_creates_employee_account(self):
        self.auth_as(self.admin)
        resp = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(resp.data["role"], UserRole.EMPLOYEE)
        self.assertEqual(resp.data["department"], self.water.pk)
        self.assertNotIn("password", resp.data)

        user = User.objects.get(username="new_employee")
        self.assertTrue(user.check_password("Initial!Pass42"))

        note = Notification.objects.get(recipient=user)
        self.assertEqual(note.type, NotificationType.ACCOUNT_CREATED)

        entry = AuditLog.objects.get(action=AuditAction.CREATE_USER)
        self.assertEqual(entry.user_id, self.admin.pk)
        self.assertEqual(entry.details["username"], "new_employee")
        self.assertNotIn("password", entry.details)

    def test_account_without_password_is_unusable(self):
        self.auth_as(self.admin)
        payload = {**self.payload}
        payload.pop("password")
        resp = self.client.post(self.url, payload, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertFalse(User.objects.get(username="new_employee").has_usable_password())

    def test_duplicate_email_is_conflict(self):
        self.auth_as(self.admin)
        resp = self.client.post(self.url, {**self.payload, "email": self.employee.email}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("email", resp.data["detail"])
        self.assertFalse(User.objects.filter(username="new_employee").exists())

    def test_duplicate_phone_is_conflict(self):
        self.auth_as(self.admin)
        resp = self.client.post(
            self.url,
            {**self.payload, "phone_number": self.employee.phone_number},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_citizen_with_department_rejected(self):
        self.auth_as(self.admin)
        resp = self.client.post(self.url, {**self.payload, "role": UserRole.CITIZEN}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_phone_rejected(self):
        self.auth_as(self.admin)
        resp = self.client.post(self.url, {**self.payload, "phone_number": "12ab"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("phone_number", resp.data)

    def test_non_admin_forbidden(self):
        self.auth_as(self.employee)
        resp = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(User.objects.filter(username="new_employee").exists())
