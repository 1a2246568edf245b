"""ADBOARD — KPI Engine.

Computes derived KPIs from raw counters:
CTR, CPC, CPA, plus totals and totals-based averages across periods.

Every division is guarded: a zero denominator yields 0 so dashboards stay
renderable on sparse data.
"""

import math
from numbers import Real
from typing import Any, Dict, Iterable, Mapping

from app.core.errors import ValidationError
from app.core.metric_registry import DERIVED_FIELDS, RAW_FIELDS
from app.models.analysis_models import DerivedMetrics, MetricTotals
from app.core.logging import get_logger

logger = get_logger("analyzer.kpi")


def _field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def validate_counters(**counters: Any) -> None:
    """Reject negative, non-finite or non-numeric raw counters."""
    for name, value in counters.items():
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ValidationError(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ValidationError(f"{name} must be finite, got {value!r}")
        if value < 0:
            raise ValidationError(f"{name} must be non-negative, got {value!r}")


def compute_derived(
    impressions: float, clicks: float, conversions: float, cost: float
) -> DerivedMetrics:
    """Compute CTR (percent), CPC and CPA from raw counters."""
    validate_counters(
        impressions=impressions, clicks=clicks, conversions=conversions, cost=cost
    )

    ctr = (clicks / impressions * 100) if impressions > 0 else 0.0
    cpc = (cost / clicks) if clicks > 0 else 0.0
    cpa = (cost / conversions) if conversions > 0 else 0.0

    return DerivedMetrics(ctr=ctr, cpc=cpc, cpa=cpa)


def recompute_for_patch(stored: Any, patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Build the write payload for a partial metric update.

    Raw counters in `patch` override the stored values; missing ones fall
    back to `stored`. When any raw counter is touched, all three derived
    fields are recomputed from the merged view. Derived values supplied in
    the patch are dropped.
    """
    updates = {k: v for k, v in patch.items() if k not in DERIVED_FIELDS}

    touched = [f for f in RAW_FIELDS if updates.get(f) is not None]
    if not touched:
        return updates

    merged = {}
    for f in RAW_FIELDS:
        value = updates.get(f)
        merged[f] = value if value is not None else _field(stored, f, 0)

    derived = compute_derived(**merged)
    updates.update(derived.model_dump())
    logger.debug(
        f"Recomputed derived metrics after patching {', '.join(touched)}",
        extra={"entity_id": _field(stored, "id", "")},
    )
    return updates


def total_and_average(metrics: Iterable[Any]) -> MetricTotals:
    """Sum raw counters and compute averages from the totals.

    Averages are ratios of totals, not means of per-period ratios, so
    high-volume periods weigh in proportionally.
    """
    total_impressions = 0
    total_clicks = 0
    total_conversions = 0
    total_cost = 0.0

    for m in metrics:
        total_impressions += _field(m, "impressions", 0) or 0
        total_clicks += _field(m, "clicks", 0) or 0
        total_conversions += _field(m, "conversions", 0) or 0
        total_cost += _field(m, "cost", 0) or 0

    derived = compute_derived(
        total_impressions, total_clicks, total_conversions, total_cost
    )

    return MetricTotals(
        total_impressions=total_impressions,
        total_clicks=total_clicks,
        total_conversions=total_conversions,
        total_cost=total_cost,
        avg_ctr=derived.ctr,
        avg_cpc=derived.cpc,
        avg_cpa=derived.cpa,
    )
