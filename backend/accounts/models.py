"""
Accounts app models.

Defines the custom ``User`` model used by the complaints system.  Every
user holds exactly one role (citizen, employee or admin) and employees
belong to at most one department, which is what scopes their access to
complaints.

Credentials and sessions are handled by the external identity provider;
this model only carries the directory data the lifecycle engine reads.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    """The three roles recognised by the access-control matrix."""

    CITIZEN = "CITIZEN", "Citizen"
    EMPLOYEE = "EMPLOYEE", "Employee"
    ADMIN = "ADMIN", "Admin"


class User(AbstractUser):
    """
    Custom user model for the government complaints system.

    * Citizens file complaints and see only their own.
    * Employees process complaints of the department they are assigned to.
    * Admins are unrestricted (superusers are always treated as admins).
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    phone_number = models.CharField(
        max_length=15,
        unique=True,
        verbose_name="Phone Number",
        db_index=True,
    )
    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=UserRole.CITIZEN,
        verbose_name="Role",
        db_index=True,
    )
    department = models.ForeignKey(
        "departments.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
        verbose_name="Department",
    )

    REQUIRED_FIELDS = ["email", "phone_number"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    @property
    def is_citizen(self) -> bool:
        return self.role == UserRole.CITIZEN
