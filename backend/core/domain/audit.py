"""
core.domain.audit — Append-only, system-wide audit trail.

One ``AuditLog`` row is written per mutating operation (complaint
create / update / lock / unlock / renew / comment / delete, employee
assignment and removal, account creation, plus the identity-layer
events ``LOGIN`` / ``VERIFY`` / ``CHANGE_PASSWORD``).

There is intentionally no query, update or redaction API here.  Callers
must never put secrets (passwords, OTP codes, tokens) into ``details``.

Usage::

    from core.domain.audit import AuditService
    from core.models import AuditAction

    AuditService.record(
        action=AuditAction.LOCK_COMPLAINT,
        entity="Complaint",
        entity_id=complaint.pk,
        actor_id=principal.id,
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from core.models import AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    """Stateless writer for ``AuditLog`` rows."""

    @staticmethod
    def record(
        *,
        action: str,
        entity: str,
        entity_id: Any,
        actor_id: int | None,
        details: dict[str, Any] | None = None,
    ) -> AuditLog:
        """
        Append one immutable audit entry.

        Args:
            action:    An ``AuditAction`` value.
            entity:    Model name of the affected entity (``"Complaint"``,
                       ``"User"`` …).
            entity_id: PK of the affected entity; stored as text so that
                       deleted rows keep their trace.
            actor_id:  PK of the user who performed the action.
            details:   Optional JSON-serialisable context.

        Returns:
            The created ``AuditLog`` instance.
        """
        from core.models import AuditLog  # lazy import — avoids circular deps

        entry = AuditLog.objects.create(
            action=action,
            entity=entity,
            entity_id=str(entity_id),
            user_id=actor_id,
            details=details,
        )
        logger.debug(
            "Audit %s %s#%s by user=%s",
            action,
            entity,
            entity_id,
            actor_id,
        )
        return entry
