"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  The global DRF exception handler in
``core.domain.exception_handler`` maps them to HTTP responses.

Mapping cheatsheet
------------------
┌─────────────────────┬──────────────────────────────┬──────┐
│ Domain Exception    │ Meaning                      │ Code │
├─────────────────────┼──────────────────────────────┼──────┤
│ DomainError         │ generic business-rule error  │ 400  │
│ ValidationError     │ missing / out-of-range input │ 400  │
│ PermissionDenied    │ role or department mismatch  │ 403  │
│ NotFound            │ referenced entity absent     │ 404  │
│ Conflict            │ duplicate unique value       │ 409  │
│ LockConflict        │ complaint held by another    │ 409  │
└─────────────────────┴──────────────────────────────┴──────┘

None of these is retried by the service layer; callers surface them as
user-visible failures.

Recommended usage inside a service::

    from core.domain.exceptions import LockConflict

    if complaint.is_held_by_other(principal.id):
        raise LockConflict("Complaint is being processed by another employee.")
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """
    Input that the service layer rejects: a missing required field, a
    value outside its allowed range, or a reference to an inactive
    entity.

    Maps to HTTP 400.
    """

    def __init__(self, message: str = "The submitted data is invalid.") -> None:
        super().__init__(message)


class PermissionDenied(DomainError):
    """
    The principal's role or department scope does not allow this
    operation on this resource.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist.

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Typical usage: duplicate email / phone / department name, or a
    reference number that was already issued.  Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class LockConflict(Conflict):
    """
    The complaint's processing lock is held by another actor.

    Maps to HTTP 409.  ``holder_id`` carries the PK of the current lock
    holder when it is known.
    """

    def __init__(
        self,
        message: str = "This complaint is locked for processing by another user.",
        *,
        holder_id: int | None = None,
    ) -> None:
        super().__init__(message)
        self.holder_id = holder_id
