"""
core.domain.access — The single access-control decision module.

Every complaint operation delegates its authorization here instead of
re-implementing the role matrix.  The functions are **pure**: they look
only at the ``Principal`` and at the complaint's ``citizen_id`` /
``department_id`` attributes, never at the database, so they can be unit
tested with plain objects.

╔══════════════════════════════════════════════════════════════════╗
║  Rule order (first match wins)                                 ║
║    1) ADMIN    → always allowed.                               ║
║    2) CITIZEN  → only own complaints; never mutates status.    ║
║    3) EMPLOYEE → only when both department ids are set and     ║
║                  equal.                                        ║
║    Anything else → denied.                                     ║
╚══════════════════════════════════════════════════════════════════╝

Architecture overview
---------------------

    ┌─────────┐      ┌────────────────┐      ┌──────────────────┐
    │  View   │─────▶│  App service   │─────▶│ core.domain      │
    │ (thin)  │      │ (owns logic)   │      │   .access        │
    └─────────┘      └────────────────┘      │ (decisions)      │
                                             └──────────────────┘

List endpoints use the same matrix through ``apply_role_scope``::

    COMPLAINT_SCOPE_RULES = {
        UserRole.ADMIN:    lambda qs, p: qs,
        UserRole.CITIZEN:  lambda qs, p: qs.filter(citizen_id=p.id),
        UserRole.EMPLOYEE: lambda qs, p: (
            qs.filter(department_id=p.department_id)
            if p.department_id is not None else qs.none()
        ),
    }

    qs = apply_role_scope(Complaint.objects.all(), principal,
                          scope_rules=COMPLAINT_SCOPE_RULES)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from django.db.models import QuerySet

from accounts.models import UserRole
from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User

# Takes (queryset, principal) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "Principal"], QuerySet]

# Role value → scope filter.
ScopeRules = dict[str, ScopeFilter]


@dataclass(frozen=True)
class Principal:
    """
    The authenticated actor performing an operation.

    Built once per request from the verified user handed over by the
    identity layer.  Never persisted.
    """

    id: int
    role: str
    department_id: int | None = None

    @classmethod
    def from_user(cls, user: User) -> Principal:
        """
        Build a principal from an authenticated ``User``.

        Superusers are always treated as ``ADMIN`` regardless of the
        stored role.
        """
        role = UserRole.ADMIN if user.is_superuser else user.role
        return cls(
            id=user.pk,
            role=str(role),
            department_id=user.department_id,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_citizen(self) -> bool:
        return self.role == UserRole.CITIZEN

    @property
    def is_employee(self) -> bool:
        return self.role == UserRole.EMPLOYEE


# ── Decisions ───────────────────────────────────────────────────────


def _same_department(principal: Principal, complaint: Any) -> bool:
    department_id = getattr(complaint, "department_id", None)
    return (
        principal.department_id is not None
        and department_id is not None
        and principal.department_id == department_id
    )


def can_view(principal: Principal, complaint: Any) -> bool:
    """
    Return ``True`` if ``principal`` may read ``complaint``.

    Args:
        principal: The acting principal.
        complaint: Any object exposing ``citizen_id`` and ``department_id``.
    """
    if principal.is_admin:
        return True
    if principal.is_citizen:
        return getattr(complaint, "citizen_id", None) == principal.id
    if principal.is_employee:
        return _same_department(principal, complaint)
    return False


def can_comment(principal: Principal, complaint: Any) -> bool:
    """Commenting follows the read matrix exactly."""
    return can_view(principal, complaint)


def can_mutate_status(principal: Principal, complaint: Any) -> bool:
    """
    Return ``True`` if ``principal`` may change status, lock or reassign
    ``complaint``.

    Citizens are always denied, even on their own complaints.
    """
    if principal.is_admin:
        return True
    if principal.is_citizen:
        return False
    if principal.is_employee:
        return _same_department(principal, complaint)
    return False


# ── Guards ──────────────────────────────────────────────────────────


def ensure_can_view(principal: Principal, complaint: Any) -> None:
    """Raise ``PermissionDenied`` unless ``can_view`` allows access."""
    if not can_view(principal, complaint):
        raise PermissionDenied("You do not have access to this complaint.")


def ensure_can_mutate_status(principal: Principal, complaint: Any) -> None:
    """Raise ``PermissionDenied`` unless ``can_mutate_status`` allows it."""
    if principal.is_citizen:
        raise PermissionDenied("Citizens cannot modify complaint processing state.")
    if not can_mutate_status(principal, complaint):
        raise PermissionDenied("You cannot modify complaints of another department.")


def ensure_role(principal: Principal, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``PermissionDenied`` if the principal's role is not
    among ``allowed_roles``.

    Example::

        ensure_role(principal, UserRole.ADMIN)
    """
    if principal.role not in allowed_roles:
        raise PermissionDenied(
            message
            or (
                f"Role '{principal.role}' is not permitted for this operation. "
                f"Required: {', '.join(str(r) for r in allowed_roles)}."
            )
        )


# ── Queryset scoping ────────────────────────────────────────────────


def apply_role_scope(
    queryset: QuerySet,
    principal: Principal,
    *,
    scope_rules: ScopeRules,
    default: str = "none",
) -> QuerySet:
    """
    Apply the scope rule registered for the principal's role.

    Args:
        queryset:    Base (unfiltered) queryset.
        principal:   The acting principal.
        scope_rules: Mapping of role value → ``filter_fn(qs, principal)``.
        default:     What to do when no rule matches the role.
                     ``"none"`` (default) → empty queryset.
                     ``"all"`` → return unfiltered.

    Returns:
        The (possibly filtered) queryset.
    """
    filter_fn = scope_rules.get(principal.role)
    if filter_fn is not None:
        return filter_fn(queryset, principal)

    if default == "none":
        return queryset.none()
    return queryset
