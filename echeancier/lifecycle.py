"""
echeancier.lifecycle
====================

User‑driven changes to an obligation's persisted ``workflow_status`` and
``priority``.

There is no transition table: any status may move to any other so that a
mistaken completion can be undone.  Each helper mutates the obligation
**in‑place**, stamps ``last_edited`` with the caller's instant and returns
the same object.  Persisting the change is the caller's job.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from .models import Obligation, Priority, WorkflowStatus

# "tap to bump" order, wrapping from the last back to the first
PRIORITY_CYCLE = list(Priority)


def _touch(ob: Obligation, at: datetime, edited_by: Optional[str]) -> Obligation:
    ob.last_edited = at
    if edited_by is not None:
        ob.edited_by = edited_by
    return ob


def set_status(
    ob: Obligation,
    new_status: Union[WorkflowStatus, str],
    *,
    at: datetime,
    edited_by: Optional[str] = None,
) -> Obligation:
    """
    Overwrite :pyattr:`ob.workflow_status`.

    Raises :class:`ValueError` for a value outside
    :class:`~echeancier.models.WorkflowStatus`; the record is left
    untouched in that case.

    Examples
    --------
    >>> set_status(ob, "completed", at=datetime(2025, 1, 21, 9, 0)).workflow_status
    <WorkflowStatus.COMPLETED: 'completed'>
    >>> set_status(ob, "archived", at=datetime(2025, 1, 21, 9, 0))
    Traceback (most recent call last):
        ...
    ValueError: unknown WorkflowStatus 'archived' (expected one of: ...)
    """
    status = WorkflowStatus.coerce(new_status)
    ob.workflow_status = status
    return _touch(ob, at, edited_by)


def cycle_priority(ob: Obligation, *, at: datetime, edited_by: Optional[str] = None) -> Obligation:
    """Advance low → medium → high → urgent → low."""
    idx = PRIORITY_CYCLE.index(ob.priority)
    ob.priority = PRIORITY_CYCLE[(idx + 1) % len(PRIORITY_CYCLE)]
    return _touch(ob, at, edited_by)


def toggle_completion(ob: Obligation, *, at: datetime, edited_by: Optional[str] = None) -> Obligation:
    """
    Completed goes back to pending; anything else becomes completed.

    Overdue and cancelled items are normalised to completed in one step
    rather than cycled through pending.
    """
    if ob.workflow_status is WorkflowStatus.COMPLETED:
        ob.workflow_status = WorkflowStatus.PENDING
    else:
        ob.workflow_status = WorkflowStatus.COMPLETED
    return _touch(ob, at, edited_by)
