"""ADBOARD — Reporting Output Models."""

from typing import List
from pydantic import BaseModel


class DerivedMetrics(BaseModel):
    """Ratios computed from raw counters."""

    ctr: float = 0.0
    cpc: float = 0.0
    cpa: float = 0.0


class MetricTotals(BaseModel):
    """Totals across periods, with averages computed from the totals."""

    total_impressions: int = 0
    total_clicks: int = 0
    total_conversions: int = 0
    total_cost: float = 0.0
    avg_ctr: float = 0.0
    avg_cpc: float = 0.0
    avg_cpa: float = 0.0


class TrendSignal(BaseModel):
    """Latest period compared with the one before it."""

    metric_name: str
    current_value: float
    previous_value: float
    change_pct: float
    direction: str  # "up" | "down" | "flat"
    signal: str = ""  # "improving" | "declining" | "stable" | "insufficient_data"
    current_period: str = ""
    previous_period: str = ""
    previous_period_available: bool = True


class MetricsSummary(BaseModel):
    """Dashboard header cards for one customer (or all visible customers)."""

    customer_id: str = ""
    period_count: int = 0
    totals: MetricTotals = MetricTotals()
    trend_signals: List[TrendSignal] = []
