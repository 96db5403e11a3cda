"""
Core app models.

Provides the abstract timestamp base model plus the two system-wide,
write-once record types: ``Notification`` and ``AuditLog``.
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class NotificationType(models.TextChoices):
    """Lifecycle events that fan out notification records."""

    COMPLAINT_CREATED = "COMPLAINT_CREATED", "Complaint Created"
    NEW_COMPLAINT = "NEW_COMPLAINT", "New Complaint"
    STATUS_UPDATE = "STATUS_UPDATE", "Status Update"
    NEW_COMMENT = "NEW_COMMENT", "New Comment"
    ASSIGNMENT = "ASSIGNMENT", "Assignment"
    REMOVAL = "REMOVAL", "Removal"
    ACCOUNT_CREATED = "ACCOUNT_CREATED", "Account Created"


class AuditAction(models.TextChoices):
    """Every mutating action that leaves a trace in the audit log."""

    CREATE_COMPLAINT = "CREATE_COMPLAINT", "Create Complaint"
    UPDATE_COMPLAINT = "UPDATE_COMPLAINT", "Update Complaint"
    LOCK_COMPLAINT = "LOCK_COMPLAINT", "Lock Complaint"
    UNLOCK_COMPLAINT = "UNLOCK_COMPLAINT", "Unlock Complaint"
    RENEW_LOCK = "RENEW_LOCK", "Renew Lock"
    ADD_COMMENT = "ADD_COMMENT", "Add Comment"
    DELETE_COMPLAINT = "DELETE_COMPLAINT", "Delete Complaint"
    ASSIGN_EMPLOYEE = "ASSIGN_EMPLOYEE", "Assign Employee"
    REMOVE_EMPLOYEE = "REMOVE_EMPLOYEE", "Remove Employee"
    CREATE_USER = "CREATE_USER", "Create User"
    # Written by the identity layer; listed so the vocabulary is shared.
    LOGIN = "LOGIN", "Login"
    VERIFY = "VERIFY", "Verify"
    CHANGE_PASSWORD = "CHANGE_PASSWORD", "Change Password"


class Notification(TimeStampedModel):
    """
    Write-once notification record addressed to a single user.

    Delivery (SMS / e-mail / push) is handled outside this system; the
    row is the only artefact produced here.  The ``complaint`` link is
    nulled if the complaint is later deleted so the record survives.
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        verbose_name="Recipient",
    )
    complaint = models.ForeignKey(
        "complaints.Complaint",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
        verbose_name="Complaint",
    )
    type = models.CharField(
        max_length=30,
        choices=NotificationType.choices,
        verbose_name="Type",
    )
    title = models.CharField(max_length=255, verbose_name="Title")
    message = models.TextField(verbose_name="Message")

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["recipient", "created_at"], name="notif_recipient_created_idx"),
        ]

    def __str__(self):
        return f"[{self.recipient_id}] {self.title}"


class AuditLog(models.Model):
    """
    Immutable, system-wide record of a mutating action.

    ``entity_id`` is stored as text and ``user`` is nulled on user
    deletion so that entries outlive the rows they describe.
    """

    action = models.CharField(
        max_length=40,
        choices=AuditAction.choices,
        verbose_name="Action",
        db_index=True,
    )
    entity = models.CharField(max_length=50, verbose_name="Entity")
    entity_id = models.CharField(max_length=64, verbose_name="Entity ID")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
        verbose_name="Performed By",
    )
    details = models.JSONField(null=True, blank=True, verbose_name="Details")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created At")

    class Meta:
        verbose_name = "Audit Log Entry"
        verbose_name_plural = "Audit Log"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["entity", "entity_id"], name="audit_entity_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.entity}#{self.entity_id}"
