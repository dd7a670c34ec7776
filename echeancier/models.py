"""
echeancier.models
=================

Dataclasses and enums describing the catalog of filing rules, the
taxpayer profile they are matched against, and the dated obligations
derived from them.  Like the rest of the engine these objects carry
**no** external‑library dependencies so that importing `echeancier`
stays fast and the core can be unit‑tested without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union


class _ValueEnum(str, Enum):
    """String‑valued enum whose ``str()`` is the persisted value."""

    def __str__(self) -> str:        # nicer REPL display
        return self.value

    @classmethod
    def coerce(cls, value):
        """Return the member for *value*, raising a readable ValueError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValueError(
                f"unknown {cls.__name__} {value!r} (expected one of: {allowed})"
            ) from None


class PersonCategory(_ValueEnum):
    """Taxpayer category shared by catalog entries and companies."""
    LEGAL_ENTITY = "legal entity"
    NATURAL_PERSON = "natural person"
    SELF_EMPLOYED = "self-employed"
    ASSOCIATION = "association"


class Frequency(_ValueEnum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class DeclarationKind(_ValueEnum):
    """Nature of a declaration as recorded in the catalog."""
    FISCAL = "fiscal"
    SOCIAL = "social"
    PARA_FISCAL = "para-fiscal"
    REGULATORY = "regulatory"


class WorkflowStatus(_ValueEnum):
    """Persisted workflow state, set by users or the system."""
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Priority(_ValueEnum):
    """Persisted priority.  Declaration order is the bump cycle order."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TemporalStatus(_ValueEnum):
    """Position of a due date relative to a reference instant."""
    UPCOMING = "upcoming"
    DUE = "due"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class RuleCatalogEntry:
    """
    Administrator‑maintained declarative filing rule.

    Parameters
    ----------
    id : str
        Opaque identifier, used only as a key.
    person_category : PersonCategory
        Taxpayer category the rule applies to.
    obligation_type : str
        Statutory instrument (VAT, corporate income tax, ...).
    tag : str
        Short code used for display ("TVA", "IS", "CNSS", ...).
    frequency : Frequency | str
        ``monthly``, ``quarterly`` or ``annual``.  Any other raw value is
        kept as‑is and reported as malformed at instantiation time.
    due_day, due_month : int | str | None
        Raw day‑of‑month and month anchor.  Validation is deferred to the
        instantiator so one bad entry never blocks a whole catalog.
    person_sub_category : str | None
        Optional refinement; blank means "every sub‑category".
    reference_period : str | None
        Optional label of the sub‑period addressed ("Q4", "previous year").
    kind : DeclarationKind | None
        Fiscal, social, para‑fiscal or regulatory.
    detail, form_reference, link, comment : str | None
        Descriptive, non‑computational fields.
    """
    id: str
    person_category: PersonCategory
    obligation_type: str
    tag: str
    frequency: Union[Frequency, str]
    due_day: Optional[Union[int, str]] = None
    due_month: Optional[Union[int, str]] = None
    person_sub_category: Optional[str] = None
    reference_period: Optional[str] = None
    kind: Optional[DeclarationKind] = None
    detail: Optional[str] = None
    form_reference: Optional[str] = None
    link: Optional[str] = None
    comment: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "person_category", PersonCategory.coerce(self.person_category))
        if self.kind is not None:
            object.__setattr__(self, "kind", DeclarationKind.coerce(self.kind))
        try:
            object.__setattr__(self, "frequency", Frequency(self.frequency))
        except ValueError:
            pass  # left raw; the instantiator reports it


@dataclass
class CompanyProfile:
    """
    Taxpayer classification of a company.

    The VAT flags are carried for downstream matching rules but are opaque
    to the engine.
    """
    id: str
    person_category: PersonCategory
    person_sub_category: Optional[str] = None
    name: Optional[str] = None
    vat_subject: bool = False
    vat_regime: Optional[str] = None
    pro_rata_deduction: bool = False

    def __post_init__(self):
        self.person_category = PersonCategory.coerce(self.person_category)


@dataclass
class Obligation:
    """
    A dated filing derived from one catalog entry for one company.

    Descriptive fields are a snapshot of the rule at instantiation time;
    later rule edits never change an existing obligation.
    """
    id: str
    company_id: str
    source_rule_id: str
    obligation_type: str
    title: str
    due_date: date
    tag: str = ""
    description: str = ""
    period_label: str = ""
    workflow_status: WorkflowStatus = WorkflowStatus.PENDING
    priority: Priority = Priority.MEDIUM
    amount: Optional[float] = None
    currency: Optional[str] = None
    link: Optional[str] = None
    form_reference: Optional[str] = None
    created_at: Optional[datetime] = None
    last_edited: Optional[datetime] = None
    created_by: Optional[str] = None
    edited_by: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.due_date, datetime):
            self.due_date = self.due_date.date()
        self.workflow_status = WorkflowStatus.coerce(self.workflow_status)
        self.priority = Priority.coerce(self.priority)

    @property
    def sort_key(self):
        """Ascending due date, ties broken by id."""
        return (self.due_date, self.id)


@dataclass(frozen=True)
class InstantiationWarning:
    """A catalog entry skipped for one company/year, and why."""
    rule_id: str
    reason: str


@dataclass
class InstantiationResult:
    obligations: List[Obligation] = field(default_factory=list)
    warnings: List[InstantiationWarning] = field(default_factory=list)

    def __iter__(self):
        return iter(self.obligations)

    def __len__(self) -> int:
        return len(self.obligations)
