"""
api.deps
========

FastAPI dependency providers.

`get_store` returns a **DBObligationStore** so every request talks to the
persistent SQLite store; tests override it with the in‑memory
ObligationStore.  The rule catalog is kept in memory for the lifetime of
the process.
"""

from functools import lru_cache

from echeancier.catalog import RuleCatalog
from echeancier.settings import settings
from echeancier.store_db import DBObligationStore


@lru_cache
def get_store() -> DBObligationStore:
    """Singleton DB‑backed obligation store (persists across requests)."""
    return DBObligationStore()


@lru_cache
def get_catalog() -> RuleCatalog:
    """Singleton rule catalog (persists across requests)."""
    return RuleCatalog()


@lru_cache
def get_settings():
    """Return application settings."""
    return settings
