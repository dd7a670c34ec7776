import logging
from datetime import date, datetime, timezone
from typing import Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from echeancier.catalog import CatalogFilter, RuleCatalog
from echeancier.engine import ObligationFilter, filter_obligations, for_period, statistics, workflow_summary
from echeancier.instantiator import instantiate
from echeancier.lifecycle import cycle_priority, set_status, toggle_completion
from echeancier.models import CompanyProfile, RuleCatalogEntry
from echeancier.settings import API_DEBUG, settings as app_settings
from .deps import get_catalog, get_settings, get_store

logging.basicConfig(level=app_settings.log_level.upper())
logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


app = FastAPI(
    title="Echeancier API",
    version="0.1.0",
    description="HTTP layer over the fiscal obligation engine and its obligation store.",
    debug=API_DEBUG,
)

# --- CORS ----------------------------------------------------------
# dev-only origins for the mobile / web front-end
origins = [
    "http://localhost:8081",    # Expo dev server
    "http://127.0.0.1:8081",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ---------- request bodies ----------
class RulePayload(BaseModel):
    id: str
    person_category: str
    obligation_type: str
    tag: str
    frequency: str
    due_day: Optional[Union[int, str]] = None
    due_month: Optional[Union[int, str]] = None
    person_sub_category: Optional[str] = None
    reference_period: Optional[str] = None
    kind: Optional[str] = None
    detail: Optional[str] = None
    form_reference: Optional[str] = None
    link: Optional[str] = None
    comment: Optional[str] = None


class CompanyPayload(BaseModel):
    person_category: str
    person_sub_category: Optional[str] = None
    name: Optional[str] = None
    vat_subject: bool = False
    vat_regime: Optional[str] = None
    pro_rata_deduction: bool = False


class StatusPayload(BaseModel):
    status: str
    edited_by: Optional[str] = None


def _load(store, obligation_id: str):
    try:
        return store.get(obligation_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Obligation not found")


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "Echeancier API is alive"}


# ---------- catalog ----------
@app.post("/catalog", status_code=201)
def add_rule(payload: RulePayload, catalog: RuleCatalog = Depends(get_catalog)):
    rule = RuleCatalogEntry(**payload.model_dump())
    catalog.add(rule)
    return {"id": rule.id}


@app.get("/catalog")
def list_rules(
    person_category: Optional[str] = None,
    tag: Optional[str] = None,
    frequency: Optional[str] = None,
    kind: Optional[str] = None,
    due_month: Optional[int] = Query(None, ge=1, le=12),
    catalog: RuleCatalog = Depends(get_catalog),
):
    criteria = CatalogFilter(
        person_category=person_category, tag=tag, frequency=frequency,
        kind=kind, due_month=due_month,
    )
    return jsonable_encoder(catalog.find(criteria))


@app.get("/catalog/stats")
def catalog_stats(catalog: RuleCatalog = Depends(get_catalog)):
    return jsonable_encoder(catalog.stats())


# ---------- POST /companies/{company_id}/obligations/{year} ----------
@app.post("/companies/{company_id}/obligations/{year}", status_code=201)
def materialise_year(
    company_id: str,
    year: int,
    payload: CompanyPayload,
    catalog: RuleCatalog = Depends(get_catalog),
    store=Depends(get_store),
    settings=Depends(get_settings),
):
    """
    Expand the catalog into *company_id*'s obligations for *year*.

    Already stored obligations keep their workflow status and priority;
    the call is safe to repeat.
    """
    company = CompanyProfile(id=company_id, **payload.model_dump())
    result = instantiate(
        catalog,
        company,
        year,
        previous=store.for_company(company_id),
        created_at=_utcnow(),
        created_by=settings.system_user,
        currency=settings.default_currency,
    )
    store.add_many(result.obligations)
    logger.info(f"Materialised {len(result)} obligations for {company_id} ({year})")
    return jsonable_encoder({"obligations": result.obligations, "warnings": result.warnings})


# ---------- GET /obligations ----------
@app.get("/obligations")
def list_obligations(
    company_id: Optional[str] = None,
    status: Optional[str] = None,
    temporal_status: Optional[str] = None,
    obligation_type: Optional[str] = None,
    tag: Optional[str] = None,
    priority: Optional[str] = None,
    due_from: Optional[date] = None,
    due_to: Optional[date] = None,
    now: Optional[date] = Query(None, description="Reference date for temporal_status (defaults to today)"),
    store=Depends(get_store),
):
    criteria = ObligationFilter(
        company_id=company_id,
        workflow_status=status,
        temporal_status=temporal_status,
        obligation_type=obligation_type,
        tag=tag,
        priority=priority,
        due_from=due_from,
        due_to=due_to,
    )
    return jsonable_encoder(filter_obligations(store, criteria, now or date.today()))


@app.get("/obligations/stats")
def obligation_stats(
    company_id: Optional[str] = None,
    now: Optional[date] = None,
    store=Depends(get_store),
):
    obligations = filter_obligations(store, ObligationFilter(company_id=company_id))
    return {
        "temporal": statistics(obligations, now or date.today()).as_dict(),
        "workflow": jsonable_encoder(workflow_summary(obligations).as_dict()),
    }


@app.get("/obligations/period")
def obligations_for_period(
    year: Optional[int] = None,
    month: Optional[int] = None,
    week: Optional[int] = None,
    day: Optional[int] = None,
    company_id: Optional[str] = None,
    now: Optional[date] = None,
    store=Depends(get_store),
):
    obligations = filter_obligations(store, ObligationFilter(company_id=company_id))
    return jsonable_encoder(for_period(obligations, now or date.today(), year, month, week, day))


@app.get("/obligations/{obligation_id}")
def get_obligation(obligation_id: str, store=Depends(get_store)):
    return jsonable_encoder(_load(store, obligation_id))


# ---------- mutations ----------
@app.patch("/obligations/{obligation_id}/status")
def update_status(obligation_id: str, payload: StatusPayload, store=Depends(get_store)):
    ob = _load(store, obligation_id)
    set_status(ob, payload.status, at=_utcnow(), edited_by=payload.edited_by)
    store.add(ob)
    return jsonable_encoder(ob)


@app.post("/obligations/{obligation_id}/priority/cycle")
def bump_priority(obligation_id: str, store=Depends(get_store)):
    ob = _load(store, obligation_id)
    cycle_priority(ob, at=_utcnow())
    store.add(ob)
    return jsonable_encoder(ob)


@app.post("/obligations/{obligation_id}/completion/toggle")
def toggle(obligation_id: str, store=Depends(get_store)):
    ob = _load(store, obligation_id)
    toggle_completion(ob, at=_utcnow())
    store.add(ob)
    return jsonable_encoder(ob)
