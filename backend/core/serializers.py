"""
Core app serializers.

Response shapes for the system constants and the notification inbox.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import Notification


# ════════════════════════════════════════════════════════════════════
#  System Constants
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """A single ``{value, label}`` pair from a ``TextChoices`` class."""

    value = serializers.CharField(read_only=True)
    label = serializers.CharField(read_only=True)


class PriorityRangeSerializer(serializers.Serializer):
    min = serializers.IntegerField(read_only=True)
    max = serializers.IntegerField(read_only=True)


class SystemConstantsSerializer(serializers.Serializer):
    """
    Aggregated system constants for frontend dropdowns and labels.
    """

    complaint_statuses = ChoiceItemSerializer(
        many=True,
        read_only=True,
        help_text="Complaint processing statuses.",
    )
    user_roles = ChoiceItemSerializer(
        many=True,
        read_only=True,
        help_text="Account roles.",
    )
    notification_types = ChoiceItemSerializer(
        many=True,
        read_only=True,
        help_text="Kinds of notification records.",
    )
    history_actions = ChoiceItemSerializer(
        many=True,
        read_only=True,
        help_text="Kinds of complaint history entries.",
    )
    priority_range = PriorityRangeSerializer(read_only=True)
    lock_ttl_seconds = serializers.IntegerField(
        read_only=True,
        help_text="Lease length of the processing lock, in seconds.",
    )


# ════════════════════════════════════════════════════════════════════
#  Notifications
# ════════════════════════════════════════════════════════════════════

class NotificationFilterSerializer(serializers.Serializer):
    complaint = serializers.IntegerField(required=False, min_value=1)


class NotificationSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for ``Notification`` instances.
    """

    reference_number = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            "id",
            "type",
            "title",
            "message",
            "complaint",
            "reference_number",
            "created_at",
        ]
        read_only_fields = fields

    def get_reference_number(self, obj: Notification) -> str | None:
        """Reference number of the related complaint, if it still exists."""
        if obj.complaint is None:
            return None
        return obj.complaint.reference_number
