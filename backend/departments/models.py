"""
Departments app models.

A ``Department`` is a government body that complaints are routed to.
Employees are linked through ``accounts.User.department``; the lifecycle
engine reads that link to scope employee access.
"""

from django.db import models

from core.models import TimeStampedModel


class Department(TimeStampedModel):
    """
    Government department that processes complaints.

    Departments are deactivated rather than deleted; inactive departments
    accept neither new complaints nor new employees.
    """

    name = models.CharField(
        max_length=255,
        unique=True,
        verbose_name="Department Name",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name="Active",
        db_index=True,
    )

    class Meta:
        verbose_name = "Department"
        verbose_name_plural = "Departments"
        ordering = ["name"]

    def __str__(self):
        return self.name
