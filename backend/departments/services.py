"""
Departments app Service Layer.

Architecture
------------
- ``DepartmentStaffService`` — assign an employee to a department and
  remove them again.

Both operations change which complaints the employee can see, so both
leave an audit entry and notify the employee.  Department CRUD itself is
handled through the Django admin.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.models import UserRole
from core.domain.access import Principal, ensure_role
from core.domain.audit import AuditService
from core.domain.exceptions import NotFound, ValidationError
from core.domain.notifications import NotificationService
from core.domain.transactions import lock_for_update
from core.models import AuditAction, NotificationType

from .models import Department

User = get_user_model()
logger = logging.getLogger(__name__)


class DepartmentStaffService:
    """
    Links employees to departments.  Admin only.
    """

    @staticmethod
    @transaction.atomic
    def assign_employee(
        department_id: int,
        user_id: int,
        principal: Principal,
    ) -> Any:
        """
        Assign ``user_id`` to ``department_id``.

        Raises
        ------
        PermissionDenied
            If the principal is not an admin.
        NotFound
            If the user or the department does not exist.
        ValidationError
            If the user is a citizen or the department is inactive.
        """
        ensure_role(principal, UserRole.ADMIN, message="Only administrators can assign employees.")

        user = lock_for_update(User, user_id, label="User")
        if user.role == UserRole.CITIZEN:
            raise ValidationError("A citizen cannot be assigned to a department.")

        try:
            department = Department.objects.get(pk=department_id)
        except Department.DoesNotExist:
            raise NotFound(f"Department with id={department_id} does not exist.")
        if not department.is_active:
            raise ValidationError("The department is not active.")

        user.department = department
        user.save(update_fields=["department"])

        AuditService.record(
            action=AuditAction.ASSIGN_EMPLOYEE,
            entity="User",
            entity_id=user.pk,
            actor_id=principal.id,
            details={"department_id": department.pk, "department_name": department.name},
        )
        NotificationService.create(
            actor_id=principal.id,
            recipients=user,
            event_type=NotificationType.ASSIGNMENT,
            context={"department_name": department.name},
        )
        logger.info("User %s assigned to department %s", user.pk, department.pk)
        return user

    @staticmethod
    @transaction.atomic
    def remove_employee(user_id: int, principal: Principal) -> Any:
        """
        Detach ``user_id`` from whatever department they belong to.

        Raises
        ------
        PermissionDenied
            If the principal is not an admin.
        NotFound
            If the user does not exist.
        ValidationError
            If the user is not assigned to any department.
        """
        ensure_role(principal, UserRole.ADMIN, message="Only administrators can remove employees.")

        user = lock_for_update(User, user_id, label="User")
        if user.department_id is None:
            raise ValidationError("The user is not assigned to any department.")

        department = user.department
        user.department = None
        user.save(update_fields=["department"])

        AuditService.record(
            action=AuditAction.REMOVE_EMPLOYEE,
            entity="User",
            entity_id=user.pk,
            actor_id=principal.id,
            details={"department_id": department.pk, "department_name": department.name},
        )
        NotificationService.create(
            actor_id=principal.id,
            recipients=user,
            event_type=NotificationType.REMOVAL,
            context={"department_name": department.name},
        )
        logger.info("User %s removed from department %s", user.pk, department.pk)
        return user
