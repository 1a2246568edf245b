"""ADBOARD — Metrics API Routes."""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.analyzer.kpi_engine import compute_derived, recompute_for_patch, total_and_average
from app.analyzer.trend_engine import compute_period_changes, month_number, sort_by_period
from app.auth.dependencies import get_current_user, require_role
from app.auth.permissions import STAFF, can_view_customer, has_permission
from app.core.errors import NotFound
from app.database import get_store
from app.models.analysis_models import MetricsSummary
from app.models.api_models import MetricCreate, MetricUpdate
from app.models.domain_models import Metric, User
from app.store.base import RecordStore
from app.core.logging import get_logger

logger = get_logger("api.metrics")

router = APIRouter(prefix="/metrics", tags=["Metrics"])

require_staff = require_role(STAFF)


def _visible_metrics(
    store: RecordStore,
    user: User,
    customer_id: Optional[str],
    years: Optional[List[str]] = None,
    months: Optional[List[str]] = None,
) -> List[Any]:
    """Metrics the caller may see, ordered by period.

    `years` and `months` narrow the rows the way the dashboard's period
    filters do; a month matches by number or by name.
    """
    if customer_id:
        customer = store.get("customers", customer_id)
        if not can_view_customer(user, customer):
            raise HTTPException(status_code=404, detail="Customer not found")
        rows = store.list("metrics", {"customer_id": customer_id})
    elif has_permission(user, STAFF):
        rows = store.list("metrics")
    else:
        allowed = {c.id for c in store.list("customers", {"user_id": user.id})}
        rows = [m for m in store.list("metrics") if m.customer_id in allowed]
    if years:
        wanted_years = {y.strip() for y in years}
        rows = [m for m in rows if m.year.strip() in wanted_years]
    if months:
        # "3" and "March" name the same month
        wanted_months = {month_number(m) for m in months}
        rows = [m for m in rows if month_number(m.month) in wanted_months]
    return sort_by_period(rows)


def _get_visible_metric(store: RecordStore, user: User, metric_id: str) -> Metric:
    metric = store.get("metrics", metric_id)
    customer = store.get("customers", metric.customer_id)
    if not can_view_customer(user, customer):
        # Same response as a missing record; do not leak existence
        raise NotFound("metrics", metric_id)
    return metric


@router.get("", response_model=List[Metric])
def list_metrics(
    customer_id: Optional[str] = Query(None, description="Filter by customer"),
    year: Optional[List[str]] = Query(None, description="Filter by year; repeatable"),
    month: Optional[List[str]] = Query(None, description="Filter by month name or number; repeatable"),
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    """List metrics ordered by year, month, week."""
    return _visible_metrics(store, user, customer_id, year, month)


@router.get("/summary", response_model=MetricsSummary)
def get_summary(
    customer_id: Optional[str] = Query(None, description="Filter by customer"),
    year: Optional[List[str]] = Query(None, description="Filter by year; repeatable"),
    month: Optional[List[str]] = Query(None, description="Filter by month name or number; repeatable"),
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    """Totals, totals-based averages and latest period-over-period changes."""
    rows = _visible_metrics(store, user, customer_id, year, month)
    return MetricsSummary(
        customer_id=customer_id or "",
        period_count=len(rows),
        totals=total_and_average(rows),
        trend_signals=compute_period_changes(rows),
    )


@router.get("/{metric_id}", response_model=Metric)
def get_metric(
    metric_id: str,
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    return _get_visible_metric(store, user, metric_id)


@router.post("", response_model=Metric, status_code=201)
def create_metric(
    request: MetricCreate,
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
):
    """Record metrics for one reporting period. Derived ratios are computed here."""
    store.get("customers", request.customer_id)

    derived = compute_derived(
        request.impressions, request.clicks, request.conversions, request.cost
    )
    record = {**request.model_dump(), **derived.model_dump()}
    metric = store.insert("metrics", record)
    logger.info(
        f"Metrics added for {request.year}-{request.month}-{request.week}",
        extra={"entity_id": metric.id, "user_id": user.id},
    )
    return metric


@router.put("/{metric_id}", response_model=Metric)
def update_metric(
    metric_id: str,
    request: MetricUpdate,
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
):
    """Edit a metric row in place; derived ratios follow the merged counters."""
    current = store.get("metrics", metric_id)
    patch = request.model_dump(exclude_none=True)
    updates = recompute_for_patch(current, patch)
    metric = store.update("metrics", metric_id, updates)
    logger.info("Metrics updated", extra={"entity_id": metric_id, "user_id": user.id})
    return metric


@router.delete("/{metric_id}")
def delete_metric(
    metric_id: str,
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
):
    store.delete("metrics", metric_id)
    logger.info("Metrics deleted", extra={"entity_id": metric_id, "user_id": user.id})
    return {"success": True}
