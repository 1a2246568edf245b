"""ADBOARD — Metric Registry.

Defines the canonical set of advertising metrics tracked per customer and
reporting period, and how each one should be read.
"""

from enum import Enum
from typing import Dict


class MetricType(str, Enum):
    """How a metric is categorised."""

    VOLUME = "volume"  # Raw counts: impressions, clicks, conversions
    COST = "cost"  # Monetary: cost
    DERIVED = "derived"  # Computed from raw counters: ctr, cpc, cpa


class MetricDefinition:
    """Describes a single metric."""

    def __init__(
        self,
        name: str,
        metric_type: MetricType,
        unit: str = "",
        description: str = "",
        higher_is_better: bool = True,
    ):
        self.name = name
        self.metric_type = metric_type
        self.unit = unit
        self.description = description
        self.higher_is_better = higher_is_better

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.metric_type.value})>"


# ─────────────────────────────────────────────
# RAW COUNTERS — Entered per reporting period
# ─────────────────────────────────────────────

RAW_METRICS: Dict[str, MetricDefinition] = {
    "impressions": MetricDefinition(
        "impressions", MetricType.VOLUME, "count", "Number of times ad was shown"
    ),
    "clicks": MetricDefinition("clicks", MetricType.VOLUME, "count", "Total clicks"),
    "conversions": MetricDefinition(
        "conversions", MetricType.VOLUME, "count", "Completed acquisitions"
    ),
    "cost": MetricDefinition(
        "cost",
        MetricType.COST,
        "currency",
        "Total amount spent",
        higher_is_better=False,
    ),
}


# ─────────────────────────────────────────────
# DERIVED METRICS — Never entered, always recomputed
# ─────────────────────────────────────────────

DERIVED_METRICS: Dict[str, MetricDefinition] = {
    "ctr": MetricDefinition("ctr", MetricType.DERIVED, "%", "Clicks / Impressions"),
    "cpc": MetricDefinition(
        "cpc", MetricType.DERIVED, "currency", "Cost per click", higher_is_better=False
    ),
    "cpa": MetricDefinition(
        "cpa",
        MetricType.DERIVED,
        "currency",
        "Cost per acquisition",
        higher_is_better=False,
    ),
}


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

ALL_METRICS = {**RAW_METRICS, **DERIVED_METRICS}

RAW_FIELDS = tuple(RAW_METRICS)
DERIVED_FIELDS = tuple(DERIVED_METRICS)


def get_metric(name: str) -> MetricDefinition | None:
    """Look up a metric by name."""
    return ALL_METRICS.get(name)


def metrics_by_type(metric_type: MetricType) -> list[MetricDefinition]:
    """Return all metrics of a given type."""
    return [m for m in ALL_METRICS.values() if m.metric_type == metric_type]


def is_cost_metric(name: str) -> bool:
    """True when a decrease in this metric is the good direction."""
    metric = get_metric(name)
    return metric is not None and not metric.higher_is_better
