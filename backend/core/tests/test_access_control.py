"""
Unit tests for ``core.domain.access``.

The decision functions are pure, so complaints are stand-ins exposing
only ``citizen_id`` and ``department_id``.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from accounts.models import UserRole
from core.domain.access import (
    Principal,
    apply_role_scope,
    can_comment,
    can_mutate_status,
    can_view,
    ensure_can_mutate_status,
    ensure_can_view,
    ensure_role,
)
from core.domain.exceptions import PermissionDenied


def _complaint(citizen_id=1, department_id=10):
    return SimpleNamespace(citizen_id=citizen_id, department_id=department_id)


ADMIN = Principal(id=99, role=UserRole.ADMIN)
OWNER = Principal(id=1, role=UserRole.CITIZEN)
OTHER_CITIZEN = Principal(id=2, role=UserRole.CITIZEN)
EMPLOYEE_SAME = Principal(id=3, role=UserRole.EMPLOYEE, department_id=10)
EMPLOYEE_OTHER = Principal(id=4, role=UserRole.EMPLOYEE, department_id=20)
EMPLOYEE_NONE = Principal(id=5, role=UserRole.EMPLOYEE, department_id=None)


# ════════════════════════════════════════════════════════════════════
#  Decision matrix
# ════════════════════════════════════════════════════════════════════

class TestCanView:

    @pytest.mark.parametrize(
        "principal,expected",
        [
            (ADMIN, True),
            (OWNER, True),
            (OTHER_CITIZEN, False),
            (EMPLOYEE_SAME, True),
            (EMPLOYEE_OTHER, False),
            (EMPLOYEE_NONE, False),
        ],
    )
    def test_matrix(self, principal, expected):
        assert can_view(principal, _complaint()) is expected

    def test_employee_never_sees_unrouted_complaint(self):
        assert can_view(EMPLOYEE_NONE, _complaint(department_id=None)) is False
        assert can_view(EMPLOYEE_SAME, _complaint(department_id=None)) is False

    def test_admin_sees_unrouted_complaint(self):
        assert can_view(ADMIN, _complaint(department_id=None)) is True

    def test_unknown_role_denied(self):
        stranger = Principal(id=7, role="AUDITOR")
        assert can_view(stranger, _complaint()) is False

    def test_comment_follows_view(self):
        for principal in (ADMIN, OWNER, OTHER_CITIZEN, EMPLOYEE_SAME, EMPLOYEE_OTHER):
            assert can_comment(principal, _complaint()) == can_view(principal, _complaint())


class TestCanMutateStatus:

    @pytest.mark.parametrize(
        "principal,expected",
        [
            (ADMIN, True),
            (OWNER, False),
            (OTHER_CITIZEN, False),
            (EMPLOYEE_SAME, True),
            (EMPLOYEE_OTHER, False),
            (EMPLOYEE_NONE, False),
        ],
    )
    def test_matrix(self, principal, expected):
        assert can_mutate_status(principal, _complaint()) is expected

    def test_citizen_denied_even_on_own_complaint(self):
        assert can_view(OWNER, _complaint()) is True
        assert can_mutate_status(OWNER, _complaint()) is False


# ════════════════════════════════════════════════════════════════════
#  Guards
# ════════════════════════════════════════════════════════════════════

class TestGuards:

    def test_ensure_can_view_raises(self):
        with pytest.raises(PermissionDenied):
            ensure_can_view(OTHER_CITIZEN, _complaint())

    def test_ensure_can_view_passes(self):
        ensure_can_view(OWNER, _complaint())

    def test_ensure_can_mutate_status_citizen_message(self):
        with pytest.raises(PermissionDenied, match="Citizens"):
            ensure_can_mutate_status(OWNER, _complaint())

    def test_ensure_can_mutate_status_other_department(self):
        with pytest.raises(PermissionDenied, match="another department"):
            ensure_can_mutate_status(EMPLOYEE_OTHER, _complaint())

    def test_ensure_role_raises_with_custom_message(self):
        with pytest.raises(PermissionDenied, match="admins only"):
            ensure_role(EMPLOYEE_SAME, UserRole.ADMIN, message="admins only")

    def test_ensure_role_accepts_any_listed_role(self):
        ensure_role(EMPLOYEE_SAME, UserRole.EMPLOYEE, UserRole.ADMIN)


# ════════════════════════════════════════════════════════════════════
#  Principal
# ════════════════════════════════════════════════════════════════════

class TestPrincipal:

    def test_superuser_is_admin(self):
        user = MagicMock(pk=8, is_superuser=True, role=UserRole.CITIZEN, department_id=None)
        principal = Principal.from_user(user)
        assert principal.is_admin
        assert principal.id == 8

    def test_employee_carries_department(self):
        user = MagicMock(pk=3, is_superuser=False, role=UserRole.EMPLOYEE, department_id=10)
        principal = Principal.from_user(user)
        assert principal.is_employee
        assert principal.department_id == 10


# ════════════════════════════════════════════════════════════════════
#  Queryset scoping
# ════════════════════════════════════════════════════════════════════

class TestApplyRoleScope:

    def test_unknown_role_default_none(self):
        qs = MagicMock()
        apply_role_scope(qs, Principal(id=1, role="AUDITOR"), scope_rules={})
        qs.none.assert_called_once()

    def test_unknown_role_default_all(self):
        qs = MagicMock()
        result = apply_role_scope(qs, Principal(id=1, role="AUDITOR"), scope_rules={}, default="all")
        assert result is qs

    def test_rule_is_applied(self):
        qs = MagicMock()
        rules = {UserRole.CITIZEN.value: lambda q, p: q.filter(citizen_id=p.id)}
        apply_role_scope(qs, OWNER, scope_rules=rules)
        qs.filter.assert_called_once_with(citizen_id=1)

    def test_complaint_rules_employee_without_department_sees_nothing(self):
        from complaints.services import COMPLAINT_SCOPE_RULES

        qs = MagicMock()
        apply_role_scope(qs, EMPLOYEE_NONE, scope_rules=COMPLAINT_SCOPE_RULES)
        qs.none.assert_called_once()
        qs.filter.assert_not_called()
