"""
Departments app serializers.

Input validation only; business rules live in ``services.py``.
"""

from __future__ import annotations

from rest_framework import serializers


class EmployeeReferenceSerializer(serializers.Serializer):
    """Body of the assign / remove employee actions."""

    user = serializers.IntegerField(min_value=1, help_text="PK of the employee.")
