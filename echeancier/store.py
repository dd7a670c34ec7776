"""
echeancier.store
================

An in‑memory obligation store keyed by obligation id.

The engine never calls a store; callers hand it the output of the
instantiator and of the workflow helpers.  This module is intentionally
simple (standard library only) so that it can stand in for the
SQLite‑backed :class:`echeancier.store_db.DBObligationStore` in tests.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List

from .models import Obligation


class ObligationStore:
    """
    Dictionary‑backed registry of obligations.

    Example
    -------
    >>> store = ObligationStore()
    >>> store.add_many(instantiate(rules, company, 2025).obligations)
    >>> store.for_company(company.id)
    [Obligation(id='acme:tva:2025:01', ...), ...]
    """

    def __init__(self) -> None:
        self._obligations: Dict[str, Obligation] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def add(self, ob: Obligation) -> None:
        """Insert or overwrite an obligation."""
        self._obligations[ob.id] = ob

    def add_many(self, obligations: Iterable[Obligation]) -> None:
        for ob in obligations:
            self.add(ob)

    def get(self, obligation_id: str) -> Obligation:
        """Retrieve by id (raise KeyError if not present)."""
        return self._obligations[obligation_id]

    def for_company(self, company_id: str) -> List[Obligation]:
        """All obligations of *company_id*, ordered by due date then id."""
        hits = [o for o in self._obligations.values() if o.company_id == company_id]
        return sorted(hits, key=lambda o: o.sort_key)

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[Obligation]:
        return iter(self._obligations.values())

    def __len__(self) -> int:
        return len(self._obligations)
