"""
Echeancier
==========

A lightweight toolkit for deriving, classifying and tracking recurring
statutory filing deadlines ("fiscal obligations") for companies.

Import structure
----------------
`import echeancier` is intentionally cheap: the engine sub‑modules use
the standard library only.  SQLModel is imported when you access
:pymod:`echeancier.db` / :pymod:`echeancier.store_db`, and *matplotlib*
only when you access :pymod:`echeancier.viz`.

Sub‑modules
~~~~~~~~~~~
- :pymod:`echeancier.models`        – catalog entry, company profile, ``Obligation`` + shared enums
- :pymod:`echeancier.instantiator`  – expands catalog rules into dated obligations for a year
- :pymod:`echeancier.classifier`    – upcoming / due / overdue relative to a reference date
- :pymod:`echeancier.engine`        – filtering, statistics and period drill‑down
- :pymod:`echeancier.lifecycle`     – workflow status / priority mutations
- :pymod:`echeancier.catalog`       – ``RuleCatalog`` in‑memory registry
- :pymod:`echeancier.store`         – ``ObligationStore`` in‑memory registry
- :pymod:`echeancier.store_db`      – SQLite‑backed ``DBObligationStore``
- :pymod:`echeancier.viz`           – plotting helpers (bar charts)

Quick start
-----------
>>> from datetime import date
>>> from echeancier.models import CompanyProfile, RuleCatalogEntry
>>> from echeancier.instantiator import instantiate
>>> from echeancier.engine import statistics
>>> rule = RuleCatalogEntry("cnss", "legal entity", "Social security", "CNSS", "monthly", 10, 1)
>>> acme = CompanyProfile("acme", "legal entity")
>>> obs = instantiate([rule], acme, 2025).obligations
>>> statistics(obs, date(2025, 6, 5))
Statistics(total=12, upcoming=6, due=1, overdue=5)

"""

__all__ = [
    "models",
    "instantiator",
    "classifier",
    "engine",
    "lifecycle",
    "catalog",
    "store",
    "store_db",
    "viz",
]

__version__ = "0.1.0"
