"""
echeancier.instantiator
=======================

Expands catalog entries into dated :class:`~echeancier.models.Obligation`
records for one company and one calendar year.

Every occurrence gets a deterministic id built from
``(company id, rule id, year, occurrence index)`` so materialising the same
year twice yields the same set of obligations.  A malformed catalog entry
is skipped with an :class:`~echeancier.models.InstantiationWarning`; it
never aborts the batch.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .engine import group_by_type
from .models import (
    CompanyProfile,
    Frequency,
    InstantiationResult,
    InstantiationWarning,
    Obligation,
    RuleCatalogEntry,
)

logger = logging.getLogger(__name__)

# sub-category values the catalog uses to mean "every sub-category"
WILDCARD_SUB_CATEGORIES = frozenset({"", "toutes", "all"})

MONTH_NAMES = [calendar.month_name[m] for m in range(1, 13)]

# fields carried over from a previously persisted obligation with the same id
_PERSISTED_FIELDS = (
    "workflow_status",
    "priority",
    "amount",
    "currency",
    "created_at",
    "created_by",
    "last_edited",
    "edited_by",
)


class MalformedRule(ValueError):
    """Raised internally when a catalog entry cannot be scheduled."""


# ---------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------
def clamp_date(year: int, month: int, day: int) -> date:
    """Return ``date(year, month, day)``, pulling *day* back to month end."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last))


def obligation_id(company_id: str, rule_id: str, year: int, index: int) -> str:
    """Stable key for one occurrence of one rule for one company."""
    return f"{company_id}:{rule_id}:{year}:{index:02d}"


def _parse_int(raw, name: str, low: int, high: int) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise MalformedRule(f"missing {name}")
    if isinstance(raw, bool):
        raise MalformedRule(f"invalid {name} {raw!r}")
    try:
        value = int(str(raw).strip()) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError, OverflowError):
        raise MalformedRule(f"invalid {name} {raw!r}") from None
    if isinstance(raw, float) and raw != value:
        raise MalformedRule(f"invalid {name} {raw!r}")
    if not low <= value <= high:
        raise MalformedRule(f"{name} {value} outside {low}-{high}")
    return value


def quarter_month(quarter: int, due_month: int) -> int:
    """
    Due month of *quarter* (1–4) for a quarterly rule anchored on *due_month*.

    A month of 1–3 is an offset inside every quarter.  A later month is
    used verbatim for the quarter containing it and keeps the same position
    within the other quarters.
    """
    offset = (due_month - 1) % 3 + 1
    first = (quarter - 1) * 3 + 1
    if first <= due_month <= first + 2:
        return due_month
    return first + offset - 1


def occurrences(rule: RuleCatalogEntry, year: int) -> List[Tuple[int, date]]:
    """
    Return ``[(index, due_date), ...]`` for *rule* in *year*.

    Raises
    ------
    MalformedRule
        If the frequency is unknown or the day/month anchor is missing or
        out of range.
    """
    if not isinstance(rule.frequency, Frequency):
        raise MalformedRule(f"unsupported frequency {rule.frequency!r}")
    day = _parse_int(rule.due_day, "due day", 1, 31)
    month = _parse_int(rule.due_month, "due month", 1, 12)

    if rule.frequency is Frequency.ANNUAL:
        return [(1, clamp_date(year, month, day))]
    if rule.frequency is Frequency.QUARTERLY:
        return [(q, clamp_date(year, quarter_month(q, month), day)) for q in range(1, 5)]
    return [(m, clamp_date(year, m, day)) for m in range(1, 13)]


# ---------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------
def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def rule_applies(rule: RuleCatalogEntry, company: CompanyProfile) -> bool:
    """True when *rule* targets the category (and sub‑category) of *company*."""
    if rule.person_category != company.person_category:
        return False
    wanted = _norm(rule.person_sub_category)
    if wanted in WILDCARD_SUB_CATEGORIES:
        return True
    return wanted == _norm(company.person_sub_category)


# ---------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------
def period_label(rule: RuleCatalogEntry, year: int, index: int) -> str:
    if rule.reference_period:
        return rule.reference_period
    if rule.frequency is Frequency.MONTHLY:
        return f"{MONTH_NAMES[index - 1]} {year}"
    if rule.frequency is Frequency.QUARTERLY:
        return f"Q{index} {year}"
    return str(year)


def title_for(rule: RuleCatalogEntry, period: str) -> str:
    return f"{rule.tag} - {rule.detail or 'Declaration'} {period}"


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------
def instantiate(
    rules: Iterable[RuleCatalogEntry],
    company: CompanyProfile,
    year: int,
    *,
    previous: Optional[Iterable[Obligation]] = None,
    created_at: Optional[datetime] = None,
    created_by: Optional[str] = None,
    currency: Optional[str] = None,
) -> InstantiationResult:
    """
    Materialise *company*'s obligations for *year*.

    Parameters
    ----------
    rules : iterable of RuleCatalogEntry
        The catalog; entries for other categories are ignored.
    company : CompanyProfile
        Taxpayer whose calendar is produced.
    year : int
        Target calendar year.
    previous : iterable of Obligation, optional
        Already persisted obligations.  When an id matches, the persisted
        workflow status, priority and bookkeeping fields win over the
        defaults.
    created_at, created_by, currency : optional
        Stamped on newly created obligations.

    Returns
    -------
    InstantiationResult
        Obligations sorted by ``(due_date, id)`` plus one warning per
        skipped rule.
    """
    known: Dict[str, Obligation] = {ob.id: ob for ob in (previous or ())}
    result = InstantiationResult()

    for rule in rules:
        if not rule_applies(rule, company):
            continue
        try:
            dates = occurrences(rule, year)
        except MalformedRule as exc:
            logger.warning(f"Skipping rule {rule.id} for company {company.id} ({year}): {exc}")
            result.warnings.append(InstantiationWarning(rule_id=rule.id, reason=str(exc)))
            continue

        for index, due in dates:
            label = period_label(rule, year, index)
            ob = Obligation(
                id=obligation_id(company.id, rule.id, year, index),
                company_id=company.id,
                source_rule_id=rule.id,
                obligation_type=rule.obligation_type,
                tag=rule.tag,
                title=title_for(rule, label),
                description=rule.detail or rule.comment or "",
                period_label=label,
                due_date=due,
                link=rule.link,
                form_reference=rule.form_reference,
                created_at=created_at,
                created_by=created_by,
                currency=currency,
            )
            prior = known.get(ob.id)
            if prior is not None:
                for name in _PERSISTED_FIELDS:
                    setattr(ob, name, getattr(prior, name))
            result.obligations.append(ob)

    result.obligations.sort(key=lambda o: o.sort_key)
    logger.debug(
        f"Instantiated {len(result.obligations)} obligations for company {company.id} "
        f"({year}), {len(result.warnings)} rule(s) skipped"
    )
    return result


@dataclass
class PortfolioRun:
    """Outcome of materialising one year for many companies."""
    year: int
    obligations: List[Obligation] = field(default_factory=list)
    warnings: Dict[str, List[InstantiationWarning]] = field(default_factory=dict)
    obligations_by_company: Dict[str, int] = field(default_factory=dict)
    types_by_company: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def total_companies(self) -> int:
        return len(self.obligations_by_company)

    @property
    def total_obligations(self) -> int:
        return len(self.obligations)

    @property
    def companies_with_obligations(self) -> int:
        return sum(1 for n in self.obligations_by_company.values() if n)


def instantiate_portfolio(
    rules: Iterable[RuleCatalogEntry],
    companies: Iterable[CompanyProfile],
    year: int,
    **kwargs,
) -> PortfolioRun:
    """Run :func:`instantiate` for every company; keyword args are forwarded."""
    rules = list(rules)
    run = PortfolioRun(year=year)
    for company in companies:
        res = instantiate(rules, company, year, **kwargs)
        run.obligations.extend(res.obligations)
        run.obligations_by_company[company.id] = len(res.obligations)
        run.types_by_company[company.id] = group_by_type(res.obligations)
        if res.warnings:
            run.warnings[company.id] = list(res.warnings)
    run.obligations.sort(key=lambda o: o.sort_key)
    logger.info(
        f"Generated {run.total_obligations} obligations for "
        f"{run.companies_with_obligations}/{run.total_companies} companies ({year})"
    )
    return run
