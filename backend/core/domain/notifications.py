"""
core.domain.notifications — Synchronous notification creation helper.

Centralises notification creation so every app uses one consistent
entry-point rather than directly constructing ``Notification`` objects.

Design decisions
----------------
* **Persistence only** — a notification is a write-once record.  Delivery
  over SMS / e-mail and read receipts belong to external consumers.
* **Same transaction as the caller** — rows are written in the calling
  thread, so they commit or roll back together with the lifecycle change
  that triggered them.
* **Supports multiple recipients** — pass a single ``User`` / PK or an
  iterable of them; one row is written per recipient.

Fan-out table
-------------
====================================  ==================================
Event                                 Type
====================================  ==================================
complaint created (citizen)           ``COMPLAINT_CREATED``
complaint created (department staff)  ``NEW_COMPLAINT``
status changed                        ``STATUS_UPDATE``
public comment by non-citizen         ``NEW_COMMENT``
employee assigned to department       ``ASSIGNMENT``
employee removed from department      ``REMOVAL``
account created by admin              ``ACCOUNT_CREATED``
====================================  ==================================

Usage::

    from core.domain.notifications import NotificationService
    from core.models import NotificationType

    NotificationService.create(
        actor_id=principal.id,
        recipients=complaint.citizen_id,
        event_type=NotificationType.STATUS_UPDATE,
        complaint=complaint,
        context={"reference_number": complaint.reference_number,
                 "status": complaint.status},
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from django.db import models

if TYPE_CHECKING:
    from complaints.models import Complaint
    from core.models import Notification

logger = logging.getLogger(__name__)

# ── Event-type → (title, message) templates ────────────────────────
# Messages are ``str.format`` templates filled from ``context``.
_EVENT_TEMPLATES: dict[str, tuple[str, str]] = {
    "COMPLAINT_CREATED": ("Complaint Received",     "Your complaint has been received with reference number {reference_number}."),
    "NEW_COMPLAINT":     ("New Complaint",          "A new complaint {reference_number} was filed for your department."),
    "STATUS_UPDATE":     ("Complaint Status Updated", "The status of your complaint {reference_number} is now {status}."),
    "NEW_COMMENT":       ("New Comment",            "A new comment was added to your complaint {reference_number}."),
    "ASSIGNMENT":        ("Department Assignment",  "You have been assigned to the department: {department_name}."),
    "REMOVAL":           ("Department Removal",     "You have been removed from the department: {department_name}."),
    "ACCOUNT_CREATED":   ("Account Created",        "An account has been created for you in the complaints system."),
}


def _render(event_type: str, context: dict[str, Any]) -> tuple[str, str]:
    title, template = _EVENT_TEMPLATES.get(
        event_type,
        (event_type.replace("_", " ").title(), f"Event: {event_type}"),
    )
    try:
        message = template.format(**context)
    except KeyError as exc:
        logger.warning(
            "Notification template for %s is missing context key %s",
            event_type,
            exc,
        )
        message = template
    return title, message


class NotificationService:
    """
    Stateless helper for creating ``Notification`` records.

    All methods are classmethods — no instance state is needed.
    """

    @classmethod
    def create(
        cls,
        *,
        actor_id: int | None,
        recipients: Any | Iterable[Any],
        event_type: str,
        complaint: Complaint | None = None,
        context: dict[str, Any] | None = None,
    ) -> list[Notification]:
        """
        Create one ``Notification`` per recipient.

        Args:
            actor_id:   PK of the user who performed the action (used for
                        logging only).
            recipients: A ``User``, a user PK, or an iterable of either.
            event_type: A ``NotificationType`` value; unknown values fall
                        back to a generic title.
            complaint:  Optional complaint the notification refers to.
            context:    Values interpolated into the message template.

        Returns:
            List of created ``Notification`` instances.
        """
        from core.models import Notification  # lazy import — avoids circular deps

        if isinstance(recipients, (models.Model, int)):
            recipients = [recipients]
        recipient_ids = []
        for recipient in recipients:
            pk = recipient.pk if isinstance(recipient, models.Model) else recipient
            if pk is not None and pk not in recipient_ids:
                recipient_ids.append(pk)

        if not recipient_ids:
            logger.info(
                "No recipients for event_type=%s by actor=%s",
                event_type,
                actor_id,
            )
            return []

        title, message = _render(str(event_type), context or {})

        notifications = Notification.objects.bulk_create(
            [
                Notification(
                    recipient_id=recipient_id,
                    complaint=complaint,
                    type=event_type,
                    title=title,
                    message=message,
                )
                for recipient_id in recipient_ids
            ]
        )

        logger.info(
            "Created %d notification(s) [%s] by actor=%s",
            len(notifications),
            event_type,
            actor_id,
        )
        return notifications
