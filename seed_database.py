#!/usr/bin/env python
"""
Seed database with a demo catalog and one year of obligations.

This script materialises the sample catalog for a handful of demo
companies and stores the result so the dashboard has meaningful data.
Re-running it is safe: obligation ids are deterministic, so existing rows
are overwritten with their persisted status and priority intact.
"""

import json
import sys
from datetime import date, datetime, timezone

from echeancier.instantiator import instantiate_portfolio
from echeancier.models import CompanyProfile, RuleCatalogEntry
from echeancier.settings import settings
from echeancier.store_db import DBObligationStore

# Sample catalog covering every frequency
SAMPLE_RULES = [
    RuleCatalogEntry(
        id="tva-monthly",
        person_category="legal entity",
        obligation_type="VAT",
        tag="TVA",
        frequency="monthly",
        due_day=20,
        due_month=1,
        kind="fiscal",
        detail="Monthly VAT return",
        form_reference="TVA-ADC",
    ),
    RuleCatalogEntry(
        id="cnss-monthly",
        person_category="legal entity",
        person_sub_category="Employer",
        obligation_type="Social security",
        tag="CNSS",
        frequency="monthly",
        due_day=10,
        due_month=1,
        kind="social",
        detail="Payroll declaration",
        form_reference="DAMANCOM",
    ),
    RuleCatalogEntry(
        id="is-instalments",
        person_category="legal entity",
        obligation_type="Corporate income tax",
        tag="IS",
        frequency="quarterly",
        due_day=31,
        due_month=3,
        kind="fiscal",
        detail="Corporate tax instalment",
    ),
    RuleCatalogEntry(
        id="is-annual",
        person_category="legal entity",
        obligation_type="Corporate income tax",
        tag="IS",
        frequency="annual",
        due_day=31,
        due_month=3,
        kind="fiscal",
        reference_period="previous year",
        detail="Annual corporate tax return",
        form_reference="IS205",
    ),
    RuleCatalogEntry(
        id="ir-annual",
        person_category="natural person",
        obligation_type="Income tax",
        tag="IR",
        frequency="annual",
        due_day=28,
        due_month=2,
        kind="fiscal",
        detail="Annual income declaration",
    ),
    RuleCatalogEntry(
        id="tp-annual",
        person_category="self-employed",
        obligation_type="Business tax",
        tag="TP",
        frequency="annual",
        due_day=31,
        due_month=12,
        kind="para-fiscal",
        detail="Business tax payment",
    ),
]

SAMPLE_COMPANIES = [
    CompanyProfile("acme", "legal entity", "Employer", name="Acme SARL", vat_subject=True, vat_regime="monthly"),
    CompanyProfile("atlas", "legal entity", name="Atlas Trading SA", vat_subject=True, vat_regime="monthly"),
    CompanyProfile("karim", "natural person", "Employee", name="Karim B."),
    CompanyProfile("studio-nour", "self-employed", name="Studio Nour"),
]

# Add additional rules from sample_catalog.json if available
try:
    with open('sample_catalog.json', 'r') as f:
        sample_data = json.load(f)

    for rule_data in sample_data:
        try:
            SAMPLE_RULES.append(RuleCatalogEntry(**rule_data))
        except (TypeError, ValueError) as exc:
            print(f"Skipping catalog entry {rule_data.get('id')!r}: {exc}", file=sys.stderr)
except (FileNotFoundError, json.JSONDecodeError):
    # Continue with default sample catalog
    pass


def seed_database(year: int):
    """Materialise *year* (plus the configured horizon) for the demo companies."""
    with DBObligationStore() as store:
        for offset in range(settings.generation_horizon_years):
            target = year + offset
            run = instantiate_portfolio(
                SAMPLE_RULES,
                SAMPLE_COMPANIES,
                target,
                previous=list(store),
                created_at=datetime.now(timezone.utc),
                created_by=settings.system_user,
                currency=settings.default_currency,
            )
            store.add_many(run.obligations)

            for company_id, count in run.obligations_by_company.items():
                print(f"Added: {company_id} → {count} obligations for {target}")
            for company_id, warnings in run.warnings.items():
                for w in warnings:
                    print(f"  ⚠️  {company_id}: rule {w.rule_id} skipped ({w.reason})")

        print(f"\n{len(store)} obligations stored in the database!")


if __name__ == "__main__":
    # Initialize DB if needed
    from echeancier.db import create_all
    print("Ensuring database tables exist...")
    create_all()

    year = int(sys.argv[1]) if len(sys.argv) > 1 else date.today().year
    print(f"Seeding database with sample obligations for {year}...")
    seed_database(year)

    print("\nDone! You can now run the API server with:")
    print("uvicorn api.main:app --reload --port 8000")
