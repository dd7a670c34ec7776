"""
echeancier.classifier
=====================

Calendar position of an obligation relative to a caller‑supplied
reference instant.

The classification looks at ``due_date`` only.  A completed or cancelled
obligation can still be ``overdue`` here; callers that want to hide
resolved items filter on ``workflow_status`` separately.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

from .models import Obligation, Priority, TemporalStatus

Instant = Union[date, datetime]

# "due soon" window, inclusive of the due date itself
DUE_SOON_DAYS = 7


def as_date(now: Instant) -> date:
    """Reduce a datetime to its calendar date; pass dates through."""
    if isinstance(now, datetime):
        return now.date()
    if isinstance(now, date):
        return now
    raise TypeError(f"expected a date or datetime, got {type(now).__name__}")


def days_remaining(due_date: date, now: Instant) -> int:
    """Whole calendar days from *now* to *due_date* (negative once past)."""
    return (as_date(due_date) - as_date(now)).days


def classify(obligation: Obligation, now: Instant) -> TemporalStatus:
    """
    Return ``overdue``, ``due`` or ``upcoming`` for *obligation* at *now*.

    Examples
    --------
    >>> ob = Obligation("c:r:2025:01", "c", "r", "VAT", "TVA", date(2025, 1, 20))
    >>> classify(ob, date(2025, 1, 20))
    <TemporalStatus.DUE: 'due'>
    >>> classify(ob, date(2025, 1, 21))
    <TemporalStatus.OVERDUE: 'overdue'>
    """
    remaining = days_remaining(obligation.due_date, now)
    if remaining < 0:
        return TemporalStatus.OVERDUE
    if remaining <= DUE_SOON_DAYS:
        return TemporalStatus.DUE
    return TemporalStatus.UPCOMING


def suggest_priority(due_date: date, now: Instant) -> Priority:
    """
    Priority hint derived from the distance to *due_date*.

    Never applied automatically; the persisted priority stays whatever the
    user last chose.
    """
    remaining = days_remaining(due_date, now)
    if remaining < 0:
        return Priority.URGENT
    if remaining <= DUE_SOON_DAYS:
        return Priority.HIGH
    if remaining <= 30:
        return Priority.MEDIUM
    return Priority.LOW
