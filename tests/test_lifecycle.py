"""
tests/test_lifecycle.py
=======================

Unit tests for echeancier.lifecycle: set_status, cycle_priority and
toggle_completion.
"""

from datetime import date, datetime

import pytest

from echeancier.lifecycle import cycle_priority, set_status, toggle_completion
from echeancier.models import Obligation, Priority, WorkflowStatus

AT = datetime(2025, 3, 1, 9, 30)


def _ob(**kw):
    return Obligation("acme:tva:2025:01", "acme", "tva", "VAT", "TVA - January", date(2025, 1, 20), **kw)


def test_any_status_can_move_to_any_other():
    """COMPLETED → PENDING (un-completing a mistake) is allowed."""
    ob = _ob(workflow_status=WorkflowStatus.COMPLETED)
    set_status(ob, WorkflowStatus.PENDING, at=AT)
    assert ob.workflow_status is WorkflowStatus.PENDING
    set_status(ob, "cancelled", at=AT)
    assert ob.workflow_status is WorkflowStatus.CANCELLED


def test_set_status_stamps_edit():
    ob = _ob()
    returned = set_status(ob, "completed", at=AT, edited_by="amina@example.org")
    assert returned is ob
    assert ob.last_edited == AT
    assert ob.edited_by == "amina@example.org"


def test_unknown_status_raises_and_leaves_record_untouched():
    ob = _ob()
    with pytest.raises(ValueError):
        set_status(ob, "archived", at=AT)
    assert ob.workflow_status is WorkflowStatus.PENDING
    assert ob.last_edited is None


def test_cycle_priority_order():
    ob = _ob(priority=Priority.LOW)
    seen = []
    for _ in range(4):
        cycle_priority(ob, at=AT)
        seen.append(ob.priority)
    assert seen == [Priority.MEDIUM, Priority.HIGH, Priority.URGENT, Priority.LOW]


def test_cycle_priority_wraps_from_urgent():
    ob = _ob(priority=Priority.URGENT)
    cycle_priority(ob, at=AT)
    assert ob.priority is Priority.LOW
    assert ob.last_edited == AT


def test_toggle_from_overdue_then_back():
    ob = _ob(workflow_status=WorkflowStatus.OVERDUE)
    toggle_completion(ob, at=AT)
    assert ob.workflow_status is WorkflowStatus.COMPLETED
    toggle_completion(ob, at=AT)
    assert ob.workflow_status is WorkflowStatus.PENDING


@pytest.mark.parametrize(
    "start, expected",
    [
        (WorkflowStatus.PENDING, WorkflowStatus.COMPLETED),
        (WorkflowStatus.COMPLETED, WorkflowStatus.PENDING),
        (WorkflowStatus.CANCELLED, WorkflowStatus.COMPLETED),
    ],
)
def test_toggle_completion(start, expected):
    ob = _ob(workflow_status=start)
    toggle_completion(ob, at=AT)
    assert ob.workflow_status is expected


def test_mutations_do_not_touch_dates():
    ob = _ob()
    toggle_completion(ob, at=AT)
    cycle_priority(ob, at=AT)
    assert ob.due_date == date(2025, 1, 20)
