"""
Shared fixtures for the complaints API tests.

Every test class gets the same small world: two active departments and
an inactive one, two citizens, employees in and out of the main
department, and an admin.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import UserRole
from complaints.models import Complaint
from complaints.services import ComplaintLifecycleService
from core.domain.access import Principal
from departments.models import Department

User = get_user_model()


class ComplaintAPITestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.water = Department.objects.create(name="Water Authority")
        cls.roads = Department.objects.create(name="Roads Department")
        cls.closed = Department.objects.create(name="Closed Office", is_active=False)

        cls.citizen = cls._user("citizen_u1", UserRole.CITIZEN, first_name="Sara", last_name="Karimi")
        cls.other_citizen = cls._user("citizen_u2", UserRole.CITIZEN)
        cls.employee_a = cls._user("employee_a", UserRole.EMPLOYEE, department=cls.water)
        cls.employee_b = cls._user("employee_b", UserRole.EMPLOYEE, department=cls.water)
        cls.employee_roads = cls._user("employee_roads", UserRole.EMPLOYEE, department=cls.roads)
        cls.employee_unassigned = cls._user("employee_free", UserRole.EMPLOYEE)
        cls.admin = cls._user("admin_user", UserRole.ADMIN)

    _phone_seq = 0

    @classmethod
    def _user(cls, username: str, role: str, **extra) -> User:
        ComplaintAPITestCase._phone_seq += 1
        return User.objects.create_user(
            username=username,
            password="Complaints!Pass42",
            email=f"{username}@example.com",
            phone_number=f"0913{ComplaintAPITestCase._phone_seq:07d}",
            role=role,
            **extra,
        )

    def setUp(self):
        self.client = APIClient()

    def auth_as(self, user: User) -> None:
        token = AccessToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def file_complaint(self, *, citizen: User | None = None, department=None, **overrides) -> Complaint:
        """File a complaint through the service layer, defaulting to the water department."""
        data = {
            "complaint_type": "Water leak",
            "location": "12 Main St",
            "description": "Pipe burst in front of the building.",
            "priority": 3,
            "department": self.water if department is None else department,
        }
        data.update(overrides)
        return ComplaintLifecycleService.create_complaint(
            data,
            Principal.from_user(citizen or self.citizen),
        )
