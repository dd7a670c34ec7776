"""
echeancier.catalog
==================

An in‑memory registry of :class:`echeancier.models.RuleCatalogEntry`
objects keyed by rule id.

Editing a rule means adding a new entry under the same id; the previous
entry is superseded, never mutated.  Only the standard library is used so
the registry can be unit‑tested without a database.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .instantiator import rule_applies
from .models import (
    CompanyProfile,
    DeclarationKind,
    Frequency,
    PersonCategory,
    RuleCatalogEntry,
)


@dataclass
class CatalogFilter:
    """Catalog search criteria; unset fields match everything."""
    person_category: Optional[PersonCategory] = None
    person_sub_category: Optional[str] = None
    kind: Optional[DeclarationKind] = None
    tag: Optional[str] = None
    frequency: Optional[Frequency] = None
    due_month: Optional[int] = None
    form_reference: Optional[str] = None

    def __post_init__(self):
        if self.person_category is not None:
            self.person_category = PersonCategory.coerce(self.person_category)
        if self.kind is not None:
            self.kind = DeclarationKind.coerce(self.kind)
        if self.frequency is not None:
            self.frequency = Frequency.coerce(self.frequency)

    def matches(self, rule: RuleCatalogEntry) -> bool:
        if self.person_category is not None and rule.person_category != self.person_category:
            return False
        if self.person_sub_category is not None and rule.person_sub_category != self.person_sub_category:
            return False
        if self.kind is not None and rule.kind != self.kind:
            return False
        if self.tag is not None and rule.tag != self.tag:
            return False
        if self.frequency is not None and rule.frequency != self.frequency:
            return False
        if self.due_month is not None and _month_of(rule) != self.due_month:
            return False
        if self.form_reference is not None and rule.form_reference != self.form_reference:
            return False
        return True


def _month_of(rule: RuleCatalogEntry) -> Optional[int]:
    try:
        return int(str(rule.due_month).strip())
    except (TypeError, ValueError):
        return None


@dataclass
class CatalogStats:
    total_entries: int = 0
    by_kind: Dict[str, int] = field(default_factory=dict)
    by_frequency: Dict[str, int] = field(default_factory=dict)
    by_category: Dict[str, int] = field(default_factory=dict)
    by_tag: Dict[str, int] = field(default_factory=dict)


class RuleCatalog:
    """
    Dictionary‑backed registry of catalog entries.

    Example
    -------
    >>> cat = RuleCatalog()
    >>> cat.add(RuleCatalogEntry("1", "legal entity", "VAT", "TVA", "monthly", 20, 1))
    >>> len(cat)
    1
    """

    def __init__(self, rules=None) -> None:
        self._rules: Dict[str, RuleCatalogEntry] = {}
        for rule in rules or ():
            self.add(rule)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def add(self, rule: RuleCatalogEntry) -> None:
        """Insert a rule or supersede the one with the same id."""
        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> RuleCatalogEntry:
        """Retrieve by id (raise KeyError if not present)."""
        return self._rules[rule_id]

    def remove(self, rule_id: str) -> None:
        del self._rules[rule_id]

    def find(self, criteria: Optional[CatalogFilter] = None) -> List[RuleCatalogEntry]:
        """Return matching rules ordered like the catalog screen: tag, frequency, month, day."""
        criteria = criteria or CatalogFilter()
        hits = [r for r in self._rules.values() if criteria.matches(r)]
        return sorted(hits, key=lambda r: (r.tag, str(r.frequency), str(r.due_month), str(r.due_day), r.id))

    def applicable_to(self, company: CompanyProfile) -> List[RuleCatalogEntry]:
        """Rules whose category and sub‑category select *company*."""
        return [r for r in self.find() if rule_applies(r, company)]

    def stats(self) -> CatalogStats:
        rules = list(self._rules.values())
        return CatalogStats(
            total_entries=len(rules),
            by_kind=dict(Counter(str(r.kind) for r in rules if r.kind is not None)),
            by_frequency=dict(Counter(str(r.frequency) for r in rules)),
            by_category=dict(Counter(str(r.person_category) for r in rules)),
            by_tag=dict(Counter(r.tag for r in rules)),
        )

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[RuleCatalogEntry]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules
