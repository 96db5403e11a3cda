"""
Core app services — **Service Layer**.

Read-only endpoints that do not belong to a single app: the caller's
notification inbox and the system-wide enumerations the frontend needs.

Models from other apps are imported inside the methods that need them
so ``core`` never pulls another app in at module load time.
"""

from __future__ import annotations

from typing import Any

from django.conf import settings
from django.db.models import QuerySet

from core.domain.access import Principal


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations into a single dict for
    the frontend.

    This service is **stateless**: it does not depend on the requesting
    user.  All constants are public information needed by the frontend
    to render dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import UserRole
        from complaints.models import (
            MAX_PRIORITY,
            MIN_PRIORITY,
            ComplaintStatus,
            HistoryAction,
        )
        from core.models import NotificationType

        to_list = SystemConstantsService._choices_to_list

        return {
            "complaint_statuses": to_list(ComplaintStatus),
            "user_roles": to_list(UserRole),
            "notification_types": to_list(NotificationType),
            "history_actions": to_list(HistoryAction),
            "priority_range": {"min": MIN_PRIORITY, "max": MAX_PRIORITY},
            "lock_ttl_seconds": settings.COMPLAINT_LOCK_TTL_SECONDS,
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]


# ═══════════════════════════════════════════════════════════════════
#  Notification Inbox Service
# ═══════════════════════════════════════════════════════════════════

class NotificationInboxService:
    """
    Lists the notifications addressed to one principal.

    Records are write-once; there is no read-receipt state to update.
    """

    def __init__(self, principal: Principal) -> None:
        self.principal = principal

    def list_notifications(self, *, complaint_id: int | None = None) -> QuerySet:
        """Return the principal's notifications, most recent first."""
        from core.models import Notification

        qs = Notification.objects.filter(recipient_id=self.principal.id)
        if complaint_id is not None:
            qs = qs.filter(complaint_id=complaint_id)
        return qs.select_related("complaint").order_by("-created_at", "-id")
