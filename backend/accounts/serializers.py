"""
Accounts app serializers.

Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

import re

from django.contrib.auth import get_user_model
from rest_framework import serializers

from departments.models import Department

from .models import UserRole

User = get_user_model()

# ── Phone number validation regex ───────────────────────────────────
_PHONE_REGEX = re.compile(r"^\+?\d{7,15}$")


class AccountCreateSerializer(serializers.Serializer):
    """
    Validates the payload of ``POST /api/accounts/users/``.

    Uniqueness of ``username`` / ``email`` / ``phone_number`` is checked
    by the service layer so that duplicates surface as 409 Conflict.
    """

    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone_number = serializers.CharField(max_length=15)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserRole.choices)
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(),
        required=False,
        allow_null=True,
        help_text="Department PK for employee / admin accounts.",
    )
    password = serializers.CharField(
        write_only=True,
        required=False,
        min_length=8,
        style={"input_type": "password"},
        help_text="Optional; omit when credentials are issued by the identity provider.",
    )

    def validate_phone_number(self, value: str) -> str:
        if not _PHONE_REGEX.match(value):
            raise serializers.ValidationError("Enter a valid phone number (7-15 digits).")
        return value


class UserDetailSerializer(serializers.ModelSerializer):
    """Read representation of a user account."""

    role_display = serializers.CharField(source="get_role_display", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone_number",
            "first_name",
            "last_name",
            "role",
            "role_display",
            "department",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields
