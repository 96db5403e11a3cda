"""
core.domain.transactions — Helpers for safe, atomic mutations.

Provides utilities that wrap ``transaction.atomic``,
``select_for_update`` and conditional ``UPDATE`` statements into
reusable patterns so that every service follows the same
concurrency-safe approach.

Design goals
------------
* State reads that precede a write always lock the row first
  (``select_for_update``) so that a concurrent request cannot act on a
  stale value.
* Compare-and-set updates report success through the affected row
  count; no read-then-write without a transaction boundary.

Usage::

    from core.domain.transactions import compare_and_set, lock_for_update

    with transaction.atomic():
        complaint = lock_for_update(Complaint, pk)
        ...

    claimed = compare_and_set(
        Complaint.objects.filter(pk=pk, is_locked=False),
        is_locked=True,
        locked_by_id=user_id,
    )
"""

from __future__ import annotations

from typing import Any, TypeVar

from django.db import models
from django.db.models import QuerySet

from core.domain.exceptions import NotFound

M = TypeVar("M", bound=models.Model)


def lock_for_update(model_class: type[M], pk: Any, *, label: str | None = None) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Args:
        model_class: The Django model class.
        pk:          Primary key value.
        label:       Human-readable entity name for the error message.

    Returns:
        The locked model instance.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{label or model_class.__name__} with id={pk} does not exist.")


def compare_and_set(queryset: QuerySet, **values: Any) -> bool:
    """
    Apply ``values`` to the rows matched by ``queryset`` in a single
    ``UPDATE`` statement and report whether any row matched.

    The filter on ``queryset`` is the *compare* half: only rows still in
    the expected state are written.  The database evaluates it atomically
    with the write, so two concurrent callers cannot both succeed on a
    single-row filter.

    Returns:
        ``True`` if at least one row was updated.
    """
    return queryset.update(**values) > 0
