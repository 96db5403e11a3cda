"""
Complaints app models.

Covers the complaint lifecycle: a citizen files a complaint, it is routed
to a department, an employee takes the processing lock, moves it through
its statuses and exchanges comments with the citizen, until it is
completed or rejected.

Field shapes that surrounding tooling depends on (status values, the
lock field triple, the reference-number format) must not change.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.models import TimeStampedModel

#: Reference numbers look like ``C202503150001``.
REFERENCE_PREFIX = "C"

#: Width of the zero-padded daily sequence in a reference number.
REFERENCE_SEQUENCE_WIDTH = 4

MIN_PRIORITY = 1
MAX_PRIORITY = 5


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ComplaintStatus(models.TextChoices):
    """
    Processing status.  Any value may follow any other; the lifecycle
    services do not enforce a transition table.
    """

    NEW = "NEW", "New"
    IN_PROGRESS = "IN_PROGRESS", "In Progress"
    COMPLETED = "COMPLETED", "Completed"
    REJECTED = "REJECTED", "Rejected"


#: Statuses that close a complaint and stamp ``resolved_at``.
RESOLVED_STATUSES = frozenset({ComplaintStatus.COMPLETED, ComplaintStatus.REJECTED})


class HistoryAction(models.TextChoices):
    """Kinds of entries on a complaint's history timeline."""

    CREATE = "CREATE", "Created"
    STATUS_CHANGE = "STATUS_CHANGE", "Status Change"
    ADD_COMMENT = "ADD_COMMENT", "Comment Added"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Complaint(TimeStampedModel):
    """
    A citizen complaint routed to a government department.

    * Born ``NEW`` and unlocked.
    * While one employee holds the processing lock nobody else may
      change it; the lock is a lease that lapses at ``lock_expires_at``.
    * Hard-deleted only by an admin (comments and history cascade).
    """

    reference_number = models.CharField(
        max_length=20,
        unique=True,
        verbose_name="Reference Number",
    )
    citizen = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaints",
        verbose_name="Citizen",
    )
    department = models.ForeignKey(
        "departments.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="complaints",
        verbose_name="Department",
    )
    assigned_employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_complaints",
        verbose_name="Assigned Employee",
    )

    complaint_type = models.CharField(
        max_length=100,
        verbose_name="Complaint Type",
    )
    location = models.CharField(
        max_length=500,
        verbose_name="Location",
    )
    description = models.TextField(
        verbose_name="Description",
    )
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.NEW,
        verbose_name="Status",
        db_index=True,
    )
    priority = models.PositiveSmallIntegerField(
        default=MIN_PRIORITY,
        validators=[MinValueValidator(MIN_PRIORITY), MaxValueValidator(MAX_PRIORITY)],
        verbose_name="Priority",
        help_text="1 (lowest) to 5 (highest).",
    )

    # ── Processing lock ─────────────────────────────────────────────
    is_locked = models.BooleanField(
        default=False,
        verbose_name="Locked",
    )
    locked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="locked_complaints",
        verbose_name="Locked By",
    )
    locked_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Locked At",
    )
    lock_expires_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Lock Expires At",
    )

    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Resolved At",
    )

    class Meta:
        verbose_name = "Complaint"
        verbose_name_plural = "Complaints"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["department", "status"], name="complaint_dept_status_idx"),
            models.Index(fields=["citizen", "created_at"], name="complaint_citizen_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(is_locked=True, locked_by__isnull=False, locked_at__isnull=False)
                    | Q(is_locked=False, locked_by__isnull=True, locked_at__isnull=True)
                ),
                name="complaint_lock_fields_consistent",
            ),
            models.CheckConstraint(
                condition=Q(priority__gte=MIN_PRIORITY, priority__lte=MAX_PRIORITY),
                name="complaint_priority_in_range",
            ),
        ]

    def __str__(self):
        return f"{self.reference_number} ({self.status})"

    def lock_is_live(self, now=None) -> bool:
        """Return True if the complaint is locked and the lease has not lapsed."""
        if not self.is_locked:
            return False
        if self.lock_expires_at is None:
            return True
        return self.lock_expires_at > (now or timezone.now())

    def is_held_by_other(self, user_id: int, now=None) -> bool:
        """Return True if a live lock is held by someone other than ``user_id``."""
        return self.lock_is_live(now) and self.locked_by_id != user_id


class ComplaintHistory(TimeStampedModel):
    """
    Append-only timeline of a complaint.

    One ``CREATE`` entry at birth (``new_value=NEW``), one
    ``STATUS_CHANGE`` entry per status transition carrying the exact
    old → new pair, and one ``ADD_COMMENT`` entry per comment.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="history",
        verbose_name="Complaint",
    )
    action = models.CharField(
        max_length=20,
        choices=HistoryAction.choices,
        verbose_name="Action",
    )
    old_value = models.CharField(
        max_length=20,
        null=True,
        blank=True,
        verbose_name="Old Value",
    )
    new_value = models.CharField(
        max_length=20,
        null=True,
        blank=True,
        verbose_name="New Value",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="complaint_actions",
        verbose_name="Performed By",
    )

    class Meta:
        verbose_name = "Complaint History Entry"
        verbose_name_plural = "Complaint History"
        ordering = ["created_at", "id"]

    def __str__(self):
        if self.action == HistoryAction.STATUS_CHANGE:
            return f"{self.complaint_id}: {self.old_value} → {self.new_value}"
        return f"{self.complaint_id}: {self.action}"


class ComplaintComment(TimeStampedModel):
    """
    Comment on a complaint.  Internal notes (``is_internal=True``) are
    staff-only and never shown to citizens.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="comments",
        verbose_name="Complaint",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="complaint_comments",
        verbose_name="Author",
    )
    content = models.TextField(verbose_name="Content")
    is_internal = models.BooleanField(
        default=False,
        verbose_name="Internal Note",
    )

    class Meta:
        verbose_name = "Complaint Comment"
        verbose_name_plural = "Complaint Comments"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        kind = "Internal note" if self.is_internal else "Comment"
        return f"{kind} by {self.author_id} on {self.complaint_id}"


class DailyReferenceCounter(models.Model):
    """
    Per-day sequence behind complaint reference numbers.

    ``last_value`` is only ever advanced with an in-database
    ``F("last_value") + 1`` update, which serialises concurrent
    allocators on the row.
    """

    day = models.DateField(unique=True, verbose_name="Day")
    last_value = models.PositiveIntegerField(default=0, verbose_name="Last Issued Value")

    class Meta:
        verbose_name = "Daily Reference Counter"
        verbose_name_plural = "Daily Reference Counters"
        ordering = ["-day"]

    def __str__(self):
        return f"{self.day:%Y-%m-%d}: {self.last_value}"
