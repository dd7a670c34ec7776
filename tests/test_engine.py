"""
tests/test_engine.py
====================

Unit tests for echeancier.engine: conjunctive filters, the temporal
partition, workflow summary and the year → month → week → day drill-down.
"""

from datetime import date, timedelta

import pytest

from echeancier.engine import (
    ObligationFilter,
    PeriodFilterError,
    filter_obligations,
    for_period,
    group_by_type,
    statistics,
    workflow_summary,
)
from echeancier.instantiator import instantiate
from echeancier.models import (
    CompanyProfile,
    Obligation,
    Priority,
    RuleCatalogEntry,
    TemporalStatus,
    WorkflowStatus,
)

NOW = date(2025, 6, 5)


def _ob(ob_id, due, company="acme", status="pending", priority="medium", kind="VAT", tag="TVA"):
    return Obligation(ob_id, company, "r", kind, f"{tag} {ob_id}", due, tag=tag,
                      workflow_status=status, priority=priority)


def _sample():
    return [
        _ob("c", date(2025, 6, 1), status="completed"),
        _ob("a", date(2025, 6, 10), priority="high"),
        _ob("b", date(2025, 6, 10), company="atlas", kind="CIT", tag="IS"),
        _ob("d", date(2025, 7, 20), status="cancelled", priority="low"),
        _ob("e", date(2024, 12, 31), status="overdue", priority="urgent"),
    ]


# ---------------------------------------------------------------------------
# filter_obligations
# ---------------------------------------------------------------------------
def test_no_criteria_returns_everything_sorted():
    out = filter_obligations(_sample())
    assert [o.id for o in out] == ["e", "c", "a", "b", "d"]


def test_ties_break_by_id():
    obs = [_ob("z", date(2025, 1, 1)), _ob("m", date(2025, 1, 1)), _ob("a", date(2025, 1, 1))]
    assert [o.id for o in filter_obligations(obs)] == ["a", "m", "z"]


def test_criteria_are_conjunctive():
    crit = ObligationFilter(company_id="acme", workflow_status="pending")
    assert [o.id for o in filter_obligations(_sample(), crit)] == ["a"]


def test_filter_by_type_tag_priority():
    assert [o.id for o in filter_obligations(_sample(), ObligationFilter(obligation_type="CIT"))] == ["b"]
    assert [o.id for o in filter_obligations(_sample(), ObligationFilter(tag="IS"))] == ["b"]
    assert [o.id for o in filter_obligations(_sample(), ObligationFilter(priority=Priority.URGENT))] == ["e"]


def test_filter_by_temporal_status():
    crit = ObligationFilter(temporal_status=TemporalStatus.OVERDUE)
    assert [o.id for o in filter_obligations(_sample(), crit, NOW)] == ["e", "c"]
    crit = ObligationFilter(temporal_status="due")
    assert [o.id for o in filter_obligations(_sample(), crit, NOW)] == ["a", "b"]


def test_temporal_filter_requires_now():
    with pytest.raises(ValueError, match="now"):
        filter_obligations(_sample(), ObligationFilter(temporal_status="due"))


def test_due_date_bounds_are_inclusive():
    crit = ObligationFilter(due_from=date(2025, 6, 1), due_to=date(2025, 6, 10))
    assert [o.id for o in filter_obligations(_sample(), crit)] == ["c", "a", "b"]


def test_inverted_bounds_raise():
    with pytest.raises(ValueError):
        ObligationFilter(due_from=date(2025, 7, 1), due_to=date(2025, 6, 1))


def test_unknown_enum_criterion_raises():
    with pytest.raises(ValueError):
        ObligationFilter(priority="critical")


# ---------------------------------------------------------------------------
# statistics / summaries
# ---------------------------------------------------------------------------
def test_statistics_counts():
    stats = statistics(_sample(), NOW)
    assert stats.as_dict() == {"total": 5, "upcoming": 1, "due": 2, "overdue": 2}


def test_statistics_empty():
    assert statistics([], NOW).as_dict() == {"total": 0, "upcoming": 0, "due": 0, "overdue": 0}


def test_partition_invariant_over_a_year():
    """upcoming + due + overdue == total for every reference day of the year."""
    rules = [
        RuleCatalogEntry("tva", "legal entity", "VAT", "TVA", "monthly", 20, 1),
        RuleCatalogEntry("is", "legal entity", "CIT", "IS", "quarterly", 31, 3),
        RuleCatalogEntry("ann", "legal entity", "CIT", "IS", "annual", 31, 2),
    ]
    obs = instantiate(rules, CompanyProfile("acme", "legal entity"), 2025).obligations
    day = date(2024, 12, 1)
    while day <= date(2026, 1, 31):
        s = statistics(obs, day)
        assert s.upcoming + s.due + s.overdue == s.total == len(obs)
        day += timedelta(days=1)


def test_workflow_summary():
    summary = workflow_summary(_sample())
    assert summary.total == 5
    assert (summary.pending, summary.completed, summary.overdue, summary.cancelled) == (2, 1, 1, 1)
    assert summary.earliest_due == date(2024, 12, 31)
    assert summary.latest_due == date(2025, 7, 20)


def test_workflow_summary_empty():
    summary = workflow_summary([])
    assert summary.total == 0
    assert summary.earliest_due is None


def test_group_by_type():
    assert group_by_type(_sample()) == {"VAT": 4, "CIT": 1}


# ---------------------------------------------------------------------------
# for_period
# ---------------------------------------------------------------------------
def test_period_year():
    assert [o.id for o in for_period(_sample(), NOW, 2025)] == ["c", "a", "b", "d"]
    assert [o.id for o in for_period(_sample(), NOW, 2024)] == ["e"]


def test_period_month():
    assert [o.id for o in for_period(_sample(), NOW, 2025, month=6)] == ["c", "a", "b"]


def test_period_iso_week():
    # 2025-06-10 falls in ISO week 24, 2025-06-01 (a Sunday) in week 22
    assert [o.id for o in for_period(_sample(), NOW, 2025, week=24)] == ["a", "b"]
    assert [o.id for o in for_period(_sample(), NOW, 2025, month=6, week=22)] == ["c"]


def test_period_iso_week_across_year_boundary():
    obs = [
        _ob("dec24", date(2024, 12, 30)),
        _ob("jan", date(2025, 1, 2)),
        _ob("dec25", date(2025, 12, 30)),
    ]
    # 2024-12-30 opens ISO week 2025-W01; 2025-12-30 belongs to 2026-W01
    assert [o.id for o in for_period(obs, NOW, 2025, week=1)] == ["dec24", "jan"]
    assert [o.id for o in for_period(obs, NOW, 2026, week=1)] == ["dec25"]
    assert [o.id for o in for_period(obs, NOW, 2025, month=1, week=1)] == ["jan"]
    assert [o.id for o in for_period(obs, NOW, 2025, month=12)] == ["dec25"]


def test_period_day():
    assert [o.id for o in for_period(_sample(), NOW, 2025, month=6, day=10)] == ["a", "b"]
    assert for_period(_sample(), NOW, 2025, month=7, day=10) == []


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(year=None, month=6),
        dict(year=None),
        dict(year=2025, day=10),
        dict(year=2025, month=13),
        dict(year=2025, month=0),
        dict(year=2025, week=54),
        dict(year=2025, month=2, day=32),
    ],
)
def test_invalid_period_fails_fast(kwargs):
    with pytest.raises(PeriodFilterError):
        for_period(_sample(), NOW, **kwargs)


def test_period_error_is_a_value_error():
    assert issubclass(PeriodFilterError, ValueError)


def test_workflow_status_values_are_shared():
    """The filter accepts exactly the statuses the mutator can store."""
    for status in WorkflowStatus:
        ObligationFilter(workflow_status=status.value)
