"""
Complaints app serializers.

Serializers handle field definitions, read/write constraints, and
field-level validation only.  **No business logic, locking or
authorization lives here**; those belong in ``services.py``.

Structure
---------
1. Filter / query-param serializers
2. Complaint read serializers (list, detail, statistics)
3. Complaint write serializers (create, update, comment)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from departments.models import Department

from .models import (
    MAX_PRIORITY,
    MIN_PRIORITY,
    Complaint,
    ComplaintComment,
    ComplaintHistory,
    ComplaintStatus,
)

User = get_user_model()


def _full_name(user) -> str | None:
    if user is None:
        return None
    return f"{user.first_name} {user.last_name}".strip() or user.username


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintFilterSerializer(serializers.Serializer):
    """
    Validates query parameters for ``GET /api/complaints/``.

    Query Parameters
    ----------------
    ``status``      : str — one of ``ComplaintStatus`` values
    ``department``  : int — department PK
    ``citizen``     : int — citizen PK
    ``search``      : str — matches reference number, description or type
    ``page``        : int — 1-based page number (default 1)
    ``limit``       : int — page size (default 10)
    """

    status = serializers.ChoiceField(
        choices=ComplaintStatus.choices,
        required=False,
        help_text="Filter by status. Options: " + ", ".join(ComplaintStatus.values) + ".",
    )
    department = serializers.IntegerField(required=False, min_value=1)
    citizen = serializers.IntegerField(required=False, min_value=1)
    search = serializers.CharField(
        required=False,
        max_length=255,
        allow_blank=False,
        help_text="Case-insensitive match on reference number, description or type.",
    )
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)


# ═══════════════════════════════════════════════════════════════════
#  2. Complaint Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintHistorySerializer(serializers.ModelSerializer):
    """Read-only serializer for the history timeline."""

    performed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = ComplaintHistory
        fields = [
            "id",
            "action",
            "old_value",
            "new_value",
            "description",
            "performed_by",
            "performed_by_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_performed_by_name(self, obj: ComplaintHistory) -> str | None:
        return _full_name(obj.performed_by)


class ComplaintCommentSerializer(serializers.ModelSerializer):
    """Read-only serializer for a comment or internal note."""

    author_name = serializers.SerializerMethodField()

    class Meta:
        model = ComplaintComment
        fields = [
            "id",
            "author",
            "author_name",
            "content",
            "is_internal",
            "created_at",
        ]
        read_only_fields = fields

    def get_author_name(self, obj: ComplaintComment) -> str | None:
        return _full_name(obj.author)


class ComplaintListSerializer(serializers.ModelSerializer):
    """
    Compact representation for the list endpoint.

    ``comment_count`` is annotated by ``ComplaintQueryService`` and only
    counts comments the caller is allowed to see.
    """

    type = serializers.CharField(source="complaint_type", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    citizen_name = serializers.SerializerMethodField()
    department_name = serializers.SerializerMethodField()
    comment_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "reference_number",
            "type",
            "location",
            "description",
            "status",
            "status_display",
            "priority",
            "citizen",
            "citizen_name",
            "department",
            "department_name",
            "assigned_employee",
            "is_locked",
            "locked_by",
            "comment_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_citizen_name(self, obj: Complaint) -> str | None:
        return _full_name(obj.citizen)

    def get_department_name(self, obj: Complaint) -> str | None:
        return obj.department.name if obj.department_id else None


class ComplaintDetailSerializer(serializers.ModelSerializer):
    """
    **Full complaint detail serializer.**

    The service MUST prefetch ``visible_comments`` (already filtered by
    role) and ``history`` before the instance reaches this serializer.
    """

    type = serializers.CharField(source="complaint_type", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    citizen_name = serializers.SerializerMethodField()
    department_name = serializers.SerializerMethodField()
    assigned_employee_name = serializers.SerializerMethodField()
    comments = ComplaintCommentSerializer(source="visible_comments", many=True, read_only=True)
    history = ComplaintHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "reference_number",
            "type",
            "location",
            "description",
            "status",
            "status_display",
            "priority",
            "citizen",
            "citizen_name",
            "department",
            "department_name",
            "assigned_employee",
            "assigned_employee_name",
            "is_locked",
            "locked_by",
            "locked_at",
            "lock_expires_at",
            "resolved_at",
            "comments",
            "history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_citizen_name(self, obj: Complaint) -> str | None:
        return _full_name(obj.citizen)

    def get_department_name(self, obj: Complaint) -> str | None:
        return obj.department.name if obj.department_id else None

    def get_assigned_employee_name(self, obj: Complaint) -> str | None:
        return _full_name(obj.assigned_employee)


class ComplaintLockSerializer(serializers.ModelSerializer):
    """Lock state returned by the lock / unlock / renew actions."""

    class Meta:
        model = Complaint
        fields = [
            "id",
            "reference_number",
            "is_locked",
            "locked_by",
            "locked_at",
            "lock_expires_at",
        ]
        read_only_fields = fields


class ComplaintStatisticsSerializer(serializers.Serializer):
    """Response shape of ``GET /api/complaints/statistics/``."""

    total = serializers.IntegerField(read_only=True)
    by_status = serializers.DictField(child=serializers.IntegerField(), read_only=True)


# ═══════════════════════════════════════════════════════════════════
#  3. Complaint Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintCreateSerializer(serializers.Serializer):
    """
    Validates input for ``POST /api/complaints/``.

    ``reference_number``, ``status``, ``citizen`` and the lock fields are
    set by the service layer and are never accepted from the client.
    The public field ``type`` maps to ``Complaint.complaint_type``.
    """

    type = serializers.CharField(source="complaint_type", max_length=100)
    location = serializers.CharField(max_length=500)
    description = serializers.CharField()
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(),
        required=False,
        allow_null=True,
    )
    priority = serializers.IntegerField(
        required=False,
        min_value=MIN_PRIORITY,
        max_value=MAX_PRIORITY,
        default=MIN_PRIORITY,
    )


class ComplaintUpdateSerializer(serializers.Serializer):
    """
    Validates the patch body for ``PATCH /api/complaints/{id}/``.

    Only the keys present in the request are applied.  An empty body is
    rejected by the service, after the caller's right to update has been
    checked.
    """

    status = serializers.ChoiceField(choices=ComplaintStatus.choices, required=False)
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(),
        required=False,
        allow_null=True,
    )
    assigned_employee = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True,
    )


class ComplaintCommentCreateSerializer(serializers.Serializer):
    """Validates input for ``POST /api/complaints/{id}/comments/``."""

    content = serializers.CharField(max_length=5000)
    is_internal = serializers.BooleanField(required=False, default=False)
