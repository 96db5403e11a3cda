"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the result
wrapped in a DRF ``Response``.

Architecture
------------
- ``AccountProvisioningService`` — admin-driven account creation.

Login, OTP verification and password changes are owned by the external
identity provider; only the directory record and its side effects
(audit entry + ``ACCOUNT_CREATED`` notification) are produced here.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from core.domain.access import Principal, ensure_role
from core.domain.audit import AuditService
from core.domain.exceptions import Conflict, ValidationError
from core.domain.notifications import NotificationService
from core.models import AuditAction, NotificationType

from .models import UserRole

User = get_user_model()
logger = logging.getLogger(__name__)


class AccountProvisioningService:
    """
    Creates user accounts on behalf of an administrator.
    """

    #: Fields checked for uniqueness before insert, in reporting order.
    UNIQUE_FIELDS: tuple[str, ...] = ("username", "email", "phone_number")

    @staticmethod
    @transaction.atomic
    def create_account(
        validated_data: dict[str, Any],
        principal: Principal,
    ) -> User:
        """
        Create a new user account.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``AccountCreateSerializer``: ``username``,
            ``email``, ``phone_number``, ``role`` and optionally
            ``first_name``, ``last_name``, ``department``, ``password``.
        principal : Principal
            Must be an ADMIN.

        Returns
        -------
        User
            The saved user.

        Raises
        ------
        PermissionDenied
            If the principal is not an admin.
        ValidationError
            If a citizen account is given a department.
        Conflict
            If username, email or phone number is already taken.
        """
        ensure_role(principal, UserRole.ADMIN, message="Only administrators can create accounts.")

        data = dict(validated_data)
        password = data.pop("password", None)

        if data.get("role") == UserRole.CITIZEN and data.get("department") is not None:
            raise ValidationError("Citizen accounts cannot belong to a department.")

        conflicts = [
            field
            for field in AccountProvisioningService.UNIQUE_FIELDS
            if User.objects.filter(**{field: data.get(field)}).exists()
        ]
        if conflicts:
            raise Conflict(
                f"The following field(s) already exist: {', '.join(conflicts)}."
            )

        # Without a password the account gets an unusable one; credentials
        # are then issued by the identity provider.
        try:
            with transaction.atomic():
                user = User.objects.create_user(password=password, **data)
        except IntegrityError:
            raise Conflict(
                "A user with one of the provided unique fields already exists."
            )

        AuditService.record(
            action=AuditAction.CREATE_USER,
            entity="User",
            entity_id=user.pk,
            actor_id=principal.id,
            details={
                "username": user.username,
                "role": user.role,
                "email": user.email,
                "phone_number": user.phone_number,
            },
        )
        NotificationService.create(
            actor_id=principal.id,
            recipients=user,
            event_type=NotificationType.ACCOUNT_CREATED,
        )
        logger.info("Account %s (%s) created by admin=%s", user.pk, user.role, principal.id)
        return user
