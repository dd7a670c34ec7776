"""
echeancier.store_db
===================

SQLite‑backed implementation of the ObligationStore public surface.

This adapter wraps the CRUD helpers in :pymod:`echeancier.db` so that any
code expecting the in‑memory ObligationStore can switch to a persistent
store without changing its API calls.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

from sqlmodel import Session

from echeancier.db import SessionLocal, all_obligations, get_obligation, upsert_obligation
from echeancier.models import Obligation


class DBObligationStore:
    """
    Drop‑in replacement backed by SQLite.

    Methods mirror the in‑memory ObligationStore:
    * add(ob) / add_many(obs)
    * get(obligation_id)
    * for_company(company_id)
    * iteration / len()
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session = session or SessionLocal()

    # ------------------------------------------------------------------ CRUD
    def add(self, ob: Obligation) -> None:
        upsert_obligation(self._session, ob)

    def add_many(self, obligations: Iterable[Obligation]) -> None:
        for ob in obligations:
            upsert_obligation(self._session, ob, commit=False)
        self._session.commit()

    def get(self, obligation_id: str) -> Obligation:
        ob = get_obligation(self._session, obligation_id)
        if ob is None:
            raise KeyError(obligation_id)
        return ob

    def for_company(self, company_id: str) -> List[Obligation]:
        return all_obligations(self._session, company_id)

    # ------------------------------------------------------ dunder helpers
    def __iter__(self) -> Iterator[Obligation]:
        yield from all_obligations(self._session)

    def __len__(self) -> int:
        return len(all_obligations(self._session))

    # ----------------------------------------------------- context manager
    def __enter__(self) -> "DBObligationStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._session.close()
