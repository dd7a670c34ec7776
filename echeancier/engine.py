"""
echeancier.engine
=================

Filtering, counting and period drill‑down over collections of
:class:`~echeancier.models.Obligation`.

Every collection returned here is sorted ascending by due date with ties
broken by obligation id.  Nothing in this module reads a clock: whenever
the temporal status matters the caller passes ``now``.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from .classifier import Instant, classify
from .models import Obligation, Priority, TemporalStatus, WorkflowStatus


class PeriodFilterError(ValueError):
    """Invalid combination or range of year / month / week / day."""


def sort_obligations(obligations: Iterable[Obligation]) -> List[Obligation]:
    """Return a new list ordered by ``(due_date, id)``."""
    return sorted(obligations, key=lambda o: o.sort_key)


# ---------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------
@dataclass
class ObligationFilter:
    """
    Conjunctive filter criteria; ``None`` matches everything.

    String values are accepted for the enum fields and coerced, so a bad
    value from a query string fails here rather than matching nothing.
    """
    company_id: Optional[str] = None
    workflow_status: Optional[WorkflowStatus] = None
    temporal_status: Optional[TemporalStatus] = None
    obligation_type: Optional[str] = None
    tag: Optional[str] = None
    priority: Optional[Priority] = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None

    def __post_init__(self):
        if self.workflow_status is not None:
            self.workflow_status = WorkflowStatus.coerce(self.workflow_status)
        if self.temporal_status is not None:
            self.temporal_status = TemporalStatus.coerce(self.temporal_status)
        if self.priority is not None:
            self.priority = Priority.coerce(self.priority)
        if self.due_from and self.due_to and self.due_from > self.due_to:
            raise ValueError(f"due_from {self.due_from} is after due_to {self.due_to}")

    def matches(self, ob: Obligation, now: Optional[Instant] = None) -> bool:
        if self.company_id is not None and ob.company_id != self.company_id:
            return False
        if self.workflow_status is not None and ob.workflow_status != self.workflow_status:
            return False
        if self.obligation_type is not None and ob.obligation_type != self.obligation_type:
            return False
        if self.tag is not None and ob.tag != self.tag:
            return False
        if self.priority is not None and ob.priority != self.priority:
            return False
        if self.due_from is not None and ob.due_date < self.due_from:
            return False
        if self.due_to is not None and ob.due_date > self.due_to:
            return False
        if self.temporal_status is not None and classify(ob, now) != self.temporal_status:
            return False
        return True


def filter_obligations(
    obligations: Iterable[Obligation],
    criteria: Optional[ObligationFilter] = None,
    now: Optional[Instant] = None,
) -> List[Obligation]:
    """
    Return the obligations matching every set criterion, sorted.

    Raises
    ------
    ValueError
        If ``criteria.temporal_status`` is set but *now* is not given.
    """
    criteria = criteria or ObligationFilter()
    if criteria.temporal_status is not None and now is None:
        raise ValueError("filtering on temporal_status requires an explicit 'now'")
    return sort_obligations(ob for ob in obligations if criteria.matches(ob, now))


# ---------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class Statistics:
    total: int
    upcoming: int
    due: int
    overdue: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def statistics(obligations: Iterable[Obligation], now: Instant) -> Statistics:
    """Count obligations per temporal status; the three parts sum to total."""
    counts = Counter(classify(ob, now) for ob in obligations)
    return Statistics(
        total=sum(counts.values()),
        upcoming=counts[TemporalStatus.UPCOMING],
        due=counts[TemporalStatus.DUE],
        overdue=counts[TemporalStatus.OVERDUE],
    )


@dataclass(frozen=True)
class WorkflowSummary:
    """Counts per persisted workflow status plus the due‑date span."""
    total: int
    pending: int
    completed: int
    overdue: int
    cancelled: int
    earliest_due: Optional[date] = None
    latest_due: Optional[date] = None

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


def group_by_type(obligations: Iterable[Obligation]) -> Dict[str, int]:
    """Count obligations per ``obligation_type``."""
    return dict(Counter(ob.obligation_type for ob in obligations))


def workflow_summary(obligations: Iterable[Obligation]) -> WorkflowSummary:
    obligations = list(obligations)
    counts = Counter(ob.workflow_status for ob in obligations)
    dues = [ob.due_date for ob in obligations]
    return WorkflowSummary(
        total=len(obligations),
        pending=counts[WorkflowStatus.PENDING],
        completed=counts[WorkflowStatus.COMPLETED],
        overdue=counts[WorkflowStatus.OVERDUE],
        cancelled=counts[WorkflowStatus.CANCELLED],
        earliest_due=min(dues) if dues else None,
        latest_due=max(dues) if dues else None,
    )


# ---------------------------------------------------------------------
# Period drill-down (year → month → week → day)
# ---------------------------------------------------------------------
def _check_range(name: str, value: Optional[int], low: int, high: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise PeriodFilterError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise PeriodFilterError(f"{name} {value} is outside {low}-{high}")


def validate_period(
    year: Optional[int],
    month: Optional[int] = None,
    week: Optional[int] = None,
    day: Optional[int] = None,
) -> None:
    """Fail fast on an impossible drill‑down instead of clamping it."""
    if year is None:
        given = [n for n, v in (("month", month), ("week", week), ("day", day)) if v is not None]
        if given:
            raise PeriodFilterError(f"{', '.join(given)} given without year")
        raise PeriodFilterError("year is required")
    if day is not None and month is None:
        raise PeriodFilterError("day given without month")
    _check_range("year", year, 1, 9999)
    _check_range("month", month, 1, 12)
    _check_range("week", week, 1, 53)
    _check_range("day", day, 1, 31)


def in_period(
    due: date,
    year: int,
    month: Optional[int] = None,
    week: Optional[int] = None,
    day: Optional[int] = None,
) -> bool:
    # an ISO week belongs to its ISO year, which can differ from due.year
    # for the last days of December and the first days of January
    if week is not None:
        if tuple(due.isocalendar()[:2]) != (year, week):
            return False
    elif due.year != year:
        return False
    if month is not None and due.month != month:
        return False
    if day is not None and due.day != day:
        return False
    return True


def for_period(
    obligations: Iterable[Obligation],
    now: Optional[Instant],
    year: Optional[int],
    month: Optional[int] = None,
    week: Optional[int] = None,
    day: Optional[int] = None,
) -> List[Obligation]:
    """
    Obligations due inside the selected period, sorted.

    The parameters layer like a drill‑down view: *month* narrows *year*,
    *week* (ISO week number) and *day* narrow further.  With *week*, *year*
    is read as the ISO year, so ``year=2025, week=1`` covers
    2024‑12‑30 to 2025‑01‑05.  *now* is accepted
    so views can pass the same arguments everywhere; selection depends on
    the due date only.

    Raises
    ------
    PeriodFilterError
        If the combination is incomplete or a value is out of range.
    """
    validate_period(year, month, week, day)
    return sort_obligations(
        ob for ob in obligations if in_period(ob.due_date, year, month, week, day)
    )
