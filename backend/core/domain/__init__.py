"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions     Domain-specific exceptions that map cleanly to HTTP responses.
access         ``Principal`` and the complaint access-control decisions.
notifications  Synchronous notification-record fan-out.
audit          Append-only audit trail writer.
transactions   Row locking and compare-and-set helpers.

Usage from any app::

    from core.domain.exceptions import LockConflict, NotFound
    from core.domain.access import Principal, ensure_can_view
    from core.domain.notifications import NotificationService
    from core.domain.audit import AuditService
    from core.domain.transactions import compare_and_set, lock_for_update
"""
