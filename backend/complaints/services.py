"""
Complaints app Service Layer.

This module is the **single source of truth** for all business logic
in the ``complaints`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``ReferenceNumberService``    — atomic, date-coded reference numbers.
- ``ComplaintLockService``      — exclusive processing lock (leased).
- ``ComplaintQueryService``     — scoped listing, detail and statistics.
- ``ComplaintLifecycleService`` — create / update / comment / delete.

Every mutating method runs in one ``transaction.atomic()`` block that
also holds its history, notification and audit writes, so either all of
them commit or none does.  Authorization always goes through
``core.domain.access``; nothing here re-implements the role matrix.

Lock semantics
--------------
The processing lock is a lease of ``COMPLAINT_LOCK_TTL_SECONDS``.  It is
taken with a single conditional ``UPDATE`` (compare-and-set) whose
affected-row count decides the winner, so two employees racing for the
same complaint cannot both succeed.  A lapsed lease stops blocking other
actors; the holder can extend a live lease with ``renew``.

Status transitions
------------------
Any authorized actor not blocked by another actor's lock may set any
status.  Only status changes are written to the history timeline;
reassigning the department or the employee alone is audited but leaves
no history entry.
"""

from __future__ import annotations

import datetime
import logging
import math
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Prefetch, Q, QuerySet
from django.db.models.functions import Length
from django.utils import timezone

from accounts.models import UserRole
from core.domain.access import (
    Principal,
    ScopeRules,
    apply_role_scope,
    can_comment,
    ensure_can_mutate_status,
    ensure_can_view,
    ensure_role,
)
from core.domain.audit import AuditService
from core.domain.exceptions import (
    Conflict,
    LockConflict,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from core.domain.notifications import NotificationService
from core.domain.transactions import compare_and_set, lock_for_update
from core.models import AuditAction, NotificationType

from .models import (
    MAX_PRIORITY,
    MIN_PRIORITY,
    REFERENCE_PREFIX,
    REFERENCE_SEQUENCE_WIDTH,
    RESOLVED_STATUSES,
    Complaint,
    ComplaintComment,
    ComplaintHistory,
    ComplaintStatus,
    DailyReferenceCounter,
    HistoryAction,
)

User = get_user_model()
logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


def _employee_scope(qs: QuerySet, principal: Principal) -> QuerySet:
    # An employee without a department sees nothing, not the unrouted
    # complaints (``department_id=None`` would match IS NULL).
    if principal.department_id is None:
        return qs.none()
    return qs.filter(department_id=principal.department_id)


#: Role → queryset scope.  Mirrors ``core.domain.access.can_view``.
COMPLAINT_SCOPE_RULES: ScopeRules = {
    UserRole.ADMIN.value: lambda qs, p: qs,
    UserRole.CITIZEN.value: lambda qs, p: qs.filter(citizen_id=p.id),
    UserRole.EMPLOYEE.value: _employee_scope,
}


def _get_complaint(complaint_id: Any) -> Complaint:
    try:
        return Complaint.objects.get(pk=complaint_id)
    except Complaint.DoesNotExist:
        raise NotFound(f"Complaint with id={complaint_id} does not exist.")


# ═══════════════════════════════════════════════════════════════════
#  Reference Number Service
# ═══════════════════════════════════════════════════════════════════


class ReferenceNumberService:
    """
    Allocates ``C<yyyy><mm><dd><nnnn>`` reference numbers.

    The sequence lives in ``DailyReferenceCounter`` and is advanced with
    an in-database increment, never with a count-then-insert.  The
    unique constraint on ``Complaint.reference_number`` is the last line
    of defence: a collision there surfaces as ``Conflict``.
    """

    @staticmethod
    def format_reference(day: datetime.date, sequence: int) -> str:
        """Render a reference number, e.g. ``C202503150001``."""
        return f"{REFERENCE_PREFIX}{day:%Y%m%d}{sequence:0{REFERENCE_SEQUENCE_WIDTH}d}"

    @staticmethod
    def _highest_issued(day: datetime.date) -> int:
        """
        Highest sequence already present for ``day`` (0 if none).

        Sequences may outgrow the zero padding, so longer numbers sort
        first.  Gaps left by deleted complaints are irrelevant here.
        """
        prefix = f"{REFERENCE_PREFIX}{day:%Y%m%d}"
        highest = (
            Complaint.objects
            .filter(reference_number__startswith=prefix)
            .order_by(Length("reference_number").desc(), "-reference_number")
            .values_list("reference_number", flat=True)
            .first()
        )
        if highest is None:
            return 0
        return int(highest[len(prefix):])

    @staticmethod
    @transaction.atomic
    def next_reference(on_date: datetime.date | None = None) -> str:
        """
        Issue the next reference number for ``on_date`` (default: today in
        the configured time zone).

        The counter row is created on first use of a day, seeded with the
        highest sequence already issued that day.  The increment itself is a
        single ``UPDATE … SET last_value = last_value + 1``, so concurrent
        callers are serialised by the database and each receives a
        distinct, strictly increasing value.
        """
        day = on_date or timezone.localdate()
        counter, _ = DailyReferenceCounter.objects.get_or_create(
            day=day,
            defaults={"last_value": ReferenceNumberService._highest_issued(day)},
        )
        DailyReferenceCounter.objects.filter(pk=counter.pk).update(
            last_value=F("last_value") + 1,
        )
        counter.refresh_from_db(fields=["last_value"])
        return ReferenceNumberService.format_reference(day, counter.last_value)


# ═══════════════════════════════════════════════════════════════════
#  Complaint Lock Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintLockService:
    """
    Exclusive processing lock on a single complaint.

    Only principals allowed to mutate the complaint may touch its lock
    (citizens never can).  All three operations are compare-and-set
    updates; none of them waits or retries on contention.
    """

    @staticmethod
    def lease_duration() -> datetime.timedelta:
        return datetime.timedelta(seconds=settings.COMPLAINT_LOCK_TTL_SECONDS)

    @staticmethod
    @transaction.atomic
    def acquire(complaint_id: Any, principal: Principal) -> Complaint:
        """
        Take (or re-take) the processing lock.

        Succeeds when the complaint is unlocked, already locked by
        ``principal`` (idempotent; refreshes ``locked_at`` and the lease),
        or locked under a lapsed lease.

        Raises
        ------
        NotFound
            If the complaint does not exist.
        PermissionDenied
            If ``principal`` may not mutate the complaint.
        LockConflict
            If another actor holds a live lock.
        """
        complaint = _get_complaint(complaint_id)
        ensure_can_mutate_status(principal, complaint)

        now = timezone.now()
        claimed = compare_and_set(
            Complaint.objects.filter(pk=complaint.pk).filter(
                Q(is_locked=False)
                | Q(locked_by_id=principal.id)
                | Q(lock_expires_at__lte=now)
            ),
            is_locked=True,
            locked_by_id=principal.id,
            locked_at=now,
            lock_expires_at=now + ComplaintLockService.lease_duration(),
            updated_at=now,
        )
        complaint.refresh_from_db()
        if not claimed:
            raise LockConflict(
                "This complaint is locked for processing by another user.",
                holder_id=complaint.locked_by_id,
            )

        AuditService.record(
            action=AuditAction.LOCK_COMPLAINT,
            entity="Complaint",
            entity_id=complaint.pk,
            actor_id=principal.id,
            details={"lock_expires_at": complaint.lock_expires_at.isoformat()},
        )
        logger.info("Complaint %s locked by user=%s", complaint.reference_number, principal.id)
        return complaint

    @staticmethod
    @transaction.atomic
    def release(complaint_id: Any, principal: Principal) -> Complaint:
        """
        Release the processing lock and clear all lock fields.

        Admins may release any lock; everyone else only their own.
        Releasing an unlocked complaint, or one whose lease has lapsed,
        succeeds without effect on ownership.

        Raises
        ------
        NotFound
            If the complaint does not exist.
        PermissionDenied
            If ``principal`` may not mutate the complaint, or a live lock
            is held by somebody else and ``principal`` is not an admin.
        """
        complaint = _get_complaint(complaint_id)
        ensure_can_mutate_status(principal, complaint)
        previous_holder = complaint.locked_by_id

        now = timezone.now()
        qs = Complaint.objects.filter(pk=complaint.pk)
        if not principal.is_admin:
            qs = qs.filter(
                Q(is_locked=False)
                | Q(locked_by_id=principal.id)
                | Q(lock_expires_at__lte=now)
            )
        released = compare_and_set(
            qs,
            is_locked=False,
            locked_by=None,
            locked_at=None,
            lock_expires_at=None,
            updated_at=now,
        )
        if not released:
            raise PermissionDenied("You cannot release a lock held by another user.")

        complaint.refresh_from_db()
        AuditService.record(
            action=AuditAction.UNLOCK_COMPLAINT,
            entity="Complaint",
            entity_id=complaint.pk,
            actor_id=principal.id,
            details={"previous_holder": previous_holder},
        )
        logger.info("Complaint %s unlocked by user=%s", complaint.reference_number, principal.id)
        return complaint

    @staticmethod
    @transaction.atomic
    def renew(complaint_id: Any, principal: Principal) -> Complaint:
        """
        Extend the lease of a live lock held by ``principal``.

        Raises
        ------
        NotFound
            If the complaint does not exist.
        PermissionDenied
            If ``principal`` may not mutate the complaint.
        LockConflict
            If ``principal`` does not hold a live lock.
        """
        complaint = _get_complaint(complaint_id)
        ensure_can_mutate_status(principal, complaint)

        now = timezone.now()
        renewed = compare_and_set(
            Complaint.objects.filter(
                pk=complaint.pk,
                is_locked=True,
                locked_by_id=principal.id,
            ).filter(Q(lock_expires_at__isnull=True) | Q(lock_expires_at__gt=now)),
            lock_expires_at=now + ComplaintLockService.lease_duration(),
            updated_at=now,
        )
        complaint.refresh_from_db()
        if not renewed:
            if complaint.is_held_by_other(principal.id, now):
                raise LockConflict(
                    "This complaint is locked for processing by another user.",
                    holder_id=complaint.locked_by_id,
                )
            raise LockConflict("You do not hold a live lock on this complaint; acquire it first.")

        AuditService.record(
            action=AuditAction.RENEW_LOCK,
            entity="Complaint",
            entity_id=complaint.pk,
            actor_id=principal.id,
            details={"lock_expires_at": complaint.lock_expires_at.isoformat()},
        )
        return complaint


# ═══════════════════════════════════════════════════════════════════
#  Complaint Query Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintQueryService:
    """
    Read side: scoped, filtered, paginated listing; detail with
    role-filtered comments; per-status statistics.
    """

    @staticmethod
    def scoped_queryset(principal: Principal) -> QuerySet:
        """All complaints ``principal`` may see, before any filter."""
        return apply_role_scope(
            Complaint.objects.all(),
            principal,
            scope_rules=COMPLAINT_SCOPE_RULES,
        )

    @staticmethod
    def list_complaints(principal: Principal, filters: dict[str, Any]) -> dict[str, Any]:
        """
        Return one page of complaints visible to ``principal``.

        Parameters
        ----------
        principal : Principal
            Role scoping is applied before any explicit filter.
        filters : dict
            Cleaned data from ``ComplaintFilterSerializer``.  Supported
            keys: ``status``, ``department``, ``citizen`` (PKs),
            ``search`` (reference number / description / type),
            ``page`` and ``limit``.

        Returns
        -------
        dict
            ``{"items": [...], "meta": {"total", "page", "limit",
            "total_pages"}}``.
        """
        qs = ComplaintQueryService.scoped_queryset(principal)

        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("department"):
            qs = qs.filter(department_id=filters["department"])
        if filters.get("citizen"):
            qs = qs.filter(citizen_id=filters["citizen"])
        search = filters.get("search")
        if search:
            qs = qs.filter(
                Q(reference_number__icontains=search)
                | Q(description__icontains=search)
                | Q(complaint_type__icontains=search)
            )

        comment_filter = Q(comments__is_internal=False) if principal.is_citizen else None
        qs = (
            qs.select_related("citizen", "department", "assigned_employee")
            .annotate(comment_count=Count("comments", filter=comment_filter, distinct=True))
            .order_by("-created_at", "-id")
        )

        page = filters.get("page") or DEFAULT_PAGE
        limit = filters.get("limit") or DEFAULT_PAGE_SIZE
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers.")

        total = qs.count()
        offset = (page - 1) * limit
        return {
            "items": list(qs[offset:offset + limit]),
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": math.ceil(total / limit),
            },
        }

    @staticmethod
    def get_complaint(
        complaint_id: Any,
        principal: Principal,
        *,
        check_access: bool = True,
    ) -> Complaint:
        """
        Return a complaint with its comments and history prefetched.

        Comments are exposed as ``visible_comments`` (newest first);
        internal notes are left out for citizens.  History is
        chronological.  ``check_access=False`` is for re-reading a
        complaint the principal has just been allowed to mutate (it may
        have been moved out of their department by that change).

        Raises
        ------
        NotFound
            If the complaint does not exist.
        PermissionDenied
            If ``principal`` may not view it.
        """
        comments = ComplaintComment.objects.select_related("author").order_by("-created_at", "-id")
        if principal.is_citizen:
            comments = comments.filter(is_internal=False)

        try:
            complaint = (
                Complaint.objects
                .select_related("citizen", "department", "assigned_employee", "locked_by")
                .prefetch_related(
                    Prefetch("comments", queryset=comments, to_attr="visible_comments"),
                    Prefetch(
                        "history",
                        queryset=ComplaintHistory.objects
                            .select_related("performed_by")
                            .order_by("created_at", "id"),
                    ),
                )
                .get(pk=complaint_id)
            )
        except Complaint.DoesNotExist:
            raise NotFound(f"Complaint with id={complaint_id} does not exist.")

        if check_access:
            ensure_can_view(principal, complaint)
        return complaint

    @staticmethod
    def get_statistics(principal: Principal) -> dict[str, Any]:
        """
        Count complaints per status within the principal's scope.

        Employees see their department only; admins see everything.

        Returns
        -------
        dict
            ``{"total": int, "by_status": {"NEW": int, ...}}``.
        """
        ensure_role(
            principal,
            UserRole.EMPLOYEE,
            UserRole.ADMIN,
            message="Only employees and administrators can view statistics.",
        )
        qs = ComplaintQueryService.scoped_queryset(principal)
        counts = qs.aggregate(
            total=Count("id"),
            **{
                status.value: Count("id", filter=Q(status=status))
                for status in ComplaintStatus
            },
        )
        return {
            "total": counts["total"],
            "by_status": {status.value: counts[status.value] for status in ComplaintStatus},
        }


# ═══════════════════════════════════════════════════════════════════
#  Complaint Lifecycle Service
# ═══════════════════════════════════════════════════════════════════


def _require_text(data: dict[str, Any], key: str, label: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{label}' is required.")
    return value.strip()


def _validate_new_complaint(data: dict[str, Any]) -> dict[str, Any]:
    """Check required fields and the priority range; return cleaned values."""
    cleaned = {
        "complaint_type": _require_text(data, "complaint_type", "type"),
        "location": _require_text(data, "location", "location"),
        "description": _require_text(data, "description", "description"),
    }
    priority = data.get("priority")
    if priority is None:
        priority = MIN_PRIORITY
    if isinstance(priority, bool) or not isinstance(priority, int) or not (
        MIN_PRIORITY <= priority <= MAX_PRIORITY
    ):
        raise ValidationError(
            f"'priority' must be an integer between {MIN_PRIORITY} and {MAX_PRIORITY}."
        )
    cleaned["priority"] = priority

    department = data.get("department")
    if department is not None and not department.is_active:
        raise ValidationError("The selected department is not active.")
    cleaned["department"] = department
    return cleaned


def _patch_details(data: dict[str, Any]) -> dict[str, Any]:
    """JSON-safe rendering of an update patch for the audit log."""
    details: dict[str, Any] = {}
    for key, value in data.items():
        details[key] = getattr(value, "pk", value)
    return details


class ComplaintLifecycleService:
    """
    Write side of the complaint lifecycle.
    """

    @staticmethod
    @transaction.atomic
    def create_complaint(validated_data: dict[str, Any], principal: Principal) -> Complaint:
        """
        File a new complaint on behalf of a citizen.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``ComplaintCreateSerializer``:
            ``complaint_type``, ``location``, ``description`` (required),
            ``priority`` (1–5, default 1), ``department`` (optional).
        principal : Principal
            Must be a CITIZEN; becomes the complaint's owner.

        Returns
        -------
        Complaint
            The new complaint, ``NEW`` and unlocked.

        Raises
        ------
        PermissionDenied
            If the principal is not a citizen.
        ValidationError
            On a missing field, out-of-range priority or inactive
            department.
        Conflict
            If the allocated reference number already exists.
        """
        ensure_role(principal, UserRole.CITIZEN, message="Only citizens can file complaints.")
        data = _validate_new_complaint(validated_data)

        reference_number = ReferenceNumberService.next_reference()
        try:
            with transaction.atomic():
                complaint = Complaint.objects.create(
                    reference_number=reference_number,
                    citizen_id=principal.id,
                    status=ComplaintStatus.NEW,
                    is_locked=False,
                    **data,
                )
        except IntegrityError:
            raise Conflict(f"Reference number {reference_number} has already been issued.")

        ComplaintHistory.objects.create(
            complaint=complaint,
            action=HistoryAction.CREATE,
            new_value=ComplaintStatus.NEW,
            description="Complaint created.",
            performed_by_id=principal.id,
        )

        context = {"reference_number": reference_number}
        NotificationService.create(
            actor_id=principal.id,
            recipients=principal.id,
            event_type=NotificationType.COMPLAINT_CREATED,
            complaint=complaint,
            context=context,
        )
        if complaint.department_id is not None:
            staff_ids = User.objects.filter(
                department_id=complaint.department_id,
                role__in=[UserRole.EMPLOYEE, UserRole.ADMIN],
                is_active=True,
            ).values_list("pk", flat=True)
            NotificationService.create(
                actor_id=principal.id,
                recipients=list(staff_ids),
                event_type=NotificationType.NEW_COMPLAINT,
                complaint=complaint,
                context=context,
            )

        AuditService.record(
            action=AuditAction.CREATE_COMPLAINT,
            entity="Complaint",
            entity_id=complaint.pk,
            actor_id=principal.id,
            details={"reference_number": reference_number},
        )
        logger.info("Complaint %s filed by citizen=%s", reference_number, principal.id)
        return complaint

    @staticmethod
    @transaction.atomic
    def update_complaint(
        complaint_id: Any,
        validated_data: dict[str, Any],
        principal: Principal,
    ) -> Complaint:
        """
        Apply a patch of ``status`` / ``department`` / ``assigned_employee``.

        The complaint row is locked (``SELECT … FOR UPDATE``) for the
        duration of the change.  A status change appends exactly one
        ``STATUS_CHANGE`` history entry and notifies the citizen; other
        field changes are only audited.

        Raises
        ------
        NotFound
            If the complaint does not exist.
        PermissionDenied
            For citizens (always) and employees of another department.
        LockConflict
            If another actor holds a live processing lock.
        ValidationError
            If the target department is inactive or the assignee is a
            citizen, or the patch is empty.
        """
        complaint = lock_for_update(Complaint, complaint_id, label="Complaint")
        ensure_can_mutate_status(principal, complaint)

        now = timezone.now()
        if complaint.is_held_by_other(principal.id, now):
            raise LockConflict(
                "This complaint is locked for processing by another user.",
                holder_id=complaint.locked_by_id,
            )

        if not validated_data:
            raise ValidationError(
                "Provide at least one of: status, department, assigned_employee."
            )

        old_status = complaint.status
        update_fields = ["updated_at"]

        if validated_data.get("status") is not None:
            complaint.status = validated_data["status"]
            update_fields.append("status")

        if "department" in validated_data:
            department = validated_data["department"]
            if department is not None and not department.is_active:
                raise ValidationError("The selected department is not active.")
            complaint.department = department
            update_fields.append("department")

        if "assigned_employee" in validated_data:
            employee = validated_data["assigned_employee"]
            if employee is not None and employee.role == UserRole.CITIZEN:
                raise ValidationError("A citizen cannot be assigned to process a complaint.")
            complaint.assigned_employee = employee
            update_fields.append("assigned_employee")

        status_changed = complaint.status != old_status
        if status_changed:
            if complaint.status in RESOLVED_STATUSES:
                complaint.resolved_at = now
            else:
                complaint.resolved_at = None
            update_fields.append("resolved_at")

        complaint.save(update_fields=update_fields)

        if status_changed:
            ComplaintHistory.objects.create(
                complaint=complaint,
                action=HistoryAction.STATUS_CHANGE,
                old_value=old_status,
                new_value=complaint.status,
                description=f"Status changed from {old_status} to {complaint.status}.",
                performed_by_id=principal.id,
            )
            NotificationService.create(
                actor_id=principal.id,
                recipients=complaint.citizen_id,
                event_type=NotificationType.STATUS_UPDATE,
                complaint=complaint,
                context={
                    "reference_number": complaint.reference_number,
                    "status": complaint.status,
                },
            )

        AuditService.record(
            action=AuditAction.UPDATE_COMPLAINT,
            entity="Complaint",
            entity_id=complaint.pk,
            actor_id=principal.id,
            details=_patch_details(validated_data),
        )
        return complaint

    @staticmethod
    @transaction.atomic
    def add_comment(
        complaint_id: Any,
        content: str,
        is_internal: bool,
        principal: Principal,
    ) -> ComplaintComment:
        """
        Add a comment (or staff-only internal note) to a complaint.

        Raises
        ------
        NotFound
            If the complaint does not exist.
        PermissionDenied
            If ``principal`` may not view the complaint, or a citizen
            tries to add an internal note.
        ValidationError
            If ``content`` is blank.
        """
        complaint = _get_complaint(complaint_id)
        if not can_comment(principal, complaint):
            raise PermissionDenied("You do not have access to this complaint.")
        if not content or not content.strip():
            raise ValidationError("'content' is required.")
        if is_internal and principal.is_citizen:
            raise PermissionDenied("Citizens cannot add internal notes.")

        comment = ComplaintComment.objects.create(
            complaint=complaint,
            author_id=principal.id,
            content=content,
            is_internal=is_internal,
        )
        ComplaintHistory.objects.create(
            complaint=complaint,
            action=HistoryAction.ADD_COMMENT,
            description="Internal note added." if is_internal else "Comment added.",
            performed_by_id=principal.id,
        )

        if not is_internal and principal.id != complaint.citizen_id:
            NotificationService.create(
                actor_id=principal.id,
                recipients=complaint.citizen_id,
                event_type=NotificationType.NEW_COMMENT,
                complaint=complaint,
                context={"reference_number": complaint.reference_number},
            )

        AuditService.record(
            action=AuditAction.ADD_COMMENT,
            entity="Complaint",
            entity_id=complaint.pk,
            actor_id=principal.id,
            details={"comment_id": comment.pk, "is_internal": is_internal},
        )
        return comment

    @staticmethod
    @transaction.atomic
    def delete_complaint(complaint_id: Any, principal: Principal) -> None:
        """
        Irreversibly delete a complaint with its comments and history.

        Raises
        ------
        PermissionDenied
            If the principal is not an admin.
        NotFound
            If the complaint does not exist.
        """
        ensure_role(principal, UserRole.ADMIN, message="Only administrators can delete complaints.")
        complaint = lock_for_update(Complaint, complaint_id, label="Complaint")
        pk, reference_number = complaint.pk, complaint.reference_number

        complaint.delete()

        AuditService.record(
            action=AuditAction.DELETE_COMPLAINT,
            entity="Complaint",
            entity_id=pk,
            actor_id=principal.id,
            details={"reference_number": reference_number},
        )
        logger.info("Complaint %s deleted by admin=%s", reference_number, principal.id)
