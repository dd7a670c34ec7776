"""
echeancier.db
=============

SQLite persistence layer for materialised obligations.

This module exposes:

* ``engine`` – a global SQLModel engine pointing at the configured DB file
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` – helper to create tables at first run
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, Session, SQLModel, create_engine, select

from echeancier.models import Obligation, Priority, WorkflowStatus
from echeancier.settings import DB_ECHO, DB_URL

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine (SQLite file location comes from echeancier.settings)
# ---------------------------------------------------------------------------
engine = create_engine(DB_URL, echo=DB_ECHO)


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal() -> Session:  # noqa: N802 (factory camel‑case for consistency with FastAPI docs)
    """Return a new Session bound to the global engine."""
    return Session(engine)


def _to_utc(value: datetime | None) -> datetime | None:
    """Aware UTC copy of *value*; naive timestamps are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# ORM model that mirrors echeancier.models.Obligation
# ---------------------------------------------------------------------------
class ObligationDB(SQLModel, table=True):
    """
    SQLite‑backed representation of an :class:`echeancier.models.Obligation`.

    The primary key is the deterministic obligation id, so re‑saving a
    re‑materialised year overwrites rows instead of duplicating them.
    Timestamps are stored and returned as aware UTC datetimes.
    """

    __tablename__ = "fiscal_obligations"

    id: str = Field(primary_key=True, index=True)
    company_id: str = Field(index=True)
    source_rule_id: str
    obligation_type: str
    tag: str = ""
    title: str
    description: str = ""
    period_label: str = ""
    due_date: date = Field(index=True)
    workflow_status: str = WorkflowStatus.PENDING.value
    priority: str = Priority.MEDIUM.value
    amount: Optional[float] = None
    currency: Optional[str] = None
    link: Optional[str] = None
    form_reference: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    last_edited: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    created_by: Optional[str] = None
    edited_by: Optional[str] = None

    # ---------------------------------------------------------------------
    # Converters
    # ---------------------------------------------------------------------
    @classmethod
    def from_obligation(cls, ob: Obligation) -> "ObligationDB":
        """Create a DB row from an in‑memory obligation."""
        return cls(
            id=ob.id,
            company_id=ob.company_id,
            source_rule_id=ob.source_rule_id,
            obligation_type=ob.obligation_type,
            tag=ob.tag,
            title=ob.title,
            description=ob.description,
            period_label=ob.period_label,
            due_date=ob.due_date,
            workflow_status=ob.workflow_status.value,
            priority=ob.priority.value,
            amount=ob.amount,
            currency=ob.currency,
            link=ob.link,
            form_reference=ob.form_reference,
            created_at=_to_utc(ob.created_at),
            last_edited=_to_utc(ob.last_edited),
            created_by=ob.created_by,
            edited_by=ob.edited_by,
        )

    def to_obligation(self) -> Obligation:
        """Convert the DB row back into a plain Obligation."""
        return Obligation(
            id=self.id,
            company_id=self.company_id,
            source_rule_id=self.source_rule_id,
            obligation_type=self.obligation_type,
            tag=self.tag,
            title=self.title,
            description=self.description,
            period_label=self.period_label,
            due_date=self.due_date,
            workflow_status=WorkflowStatus(self.workflow_status),
            priority=Priority(self.priority),
            amount=self.amount,
            currency=self.currency,
            link=self.link,
            form_reference=self.form_reference,
            created_at=_to_utc(self.created_at),
            last_edited=_to_utc(self.last_edited),
            created_by=self.created_by,
            edited_by=self.edited_by,
        )


# ---------------------------------------------------------------------------
# Convenience CRUD helpers
# ---------------------------------------------------------------------------
def upsert_obligation(s: Session, ob: Obligation, commit: bool = True) -> None:
    """Insert or update an obligation row."""
    s.merge(ObligationDB.from_obligation(ob))
    if commit:
        s.commit()
    logger.debug(f"Upserted obligation {ob.id}")


def get_obligation(s: Session, obligation_id: str) -> Obligation | None:
    """Return an obligation by id or *None* if missing."""
    db_row = s.get(ObligationDB, obligation_id)
    return db_row.to_obligation() if db_row else None


def all_obligations(s: Session, company_id: str | None = None) -> list[Obligation]:
    """Return every obligation, optionally restricted to one company."""
    stmt = select(ObligationDB)
    if company_id is not None:
        stmt = stmt.where(ObligationDB.company_id == company_id)
    rows = s.exec(stmt.order_by(ObligationDB.due_date, ObligationDB.id)).all()
    return [row.to_obligation() for row in rows]


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all() -> None:
    """Create all tables for imported SQLModel subclasses, including ObligationDB."""
    SQLModel.metadata.create_all(engine)


# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap helper.

    Examples
    --------
    $ python -m echeancier.db --create        # first‑time table creation
    """
    import argparse

    parser = argparse.ArgumentParser(
        prog="python -m echeancier.db",
        description="Echeancier DB utilities",
    )
    parser.add_argument("--create", action="store_true", help="create tables")
    args = parser.parse_args()

    if args.create:
        create_all()
        print(f"✅ schema initialised at {DB_URL}")
