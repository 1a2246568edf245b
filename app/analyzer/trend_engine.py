"""ADBOARD — Trend Engine.

Compares the latest reporting period with the one before it.
Produces trend signals: direction, % change, signal flags.
"""

import re
from typing import Any, List, Sequence

from app.core.metric_registry import is_cost_metric
from app.models.analysis_models import TrendSignal
from app.core.logging import get_logger

logger = get_logger("analyzer.trend")

# Metrics shown with a change badge on the dashboard
TREND_METRICS = ("clicks", "conversions", "ctr", "cpa")


def _field(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


MONTHS = {
    name: i
    for i, name in enumerate(
        [
            "january",
            "february",
            "march",
            "april",
            "may",
            "june",
            "july",
            "august",
            "september",
            "october",
            "november",
            "december",
        ],
        start=1,
    )
}

_TRAILING_NUMBER = re.compile(r"(\d+)\s*$")


def _as_int(value: Any) -> int:
    """Integer from "3", "Week 3" or 3; 0 when there is no number."""
    if isinstance(value, int):
        return value
    match = _TRAILING_NUMBER.search(str(value or "").strip())
    return int(match.group(1)) if match else 0


def month_number(value: Any) -> int:
    """Month as 1-12 from a name ("March", "Mar") or a number ("3")."""
    text = str(value or "").strip().lower()
    if text in MONTHS:
        return MONTHS[text]
    for name, number in MONTHS.items():
        if len(text) >= 3 and name.startswith(text):
            return number
    return _as_int(text)


def week_number(value: Any) -> int:
    """Week as an integer from "Week 2" or "2"."""
    return _as_int(value)


def period_key(metric: Any) -> tuple[int, int, int]:
    """Sort key for a metric row: (year, month, week) in calendar order."""
    return (
        _as_int(_field(metric, "year")),
        month_number(_field(metric, "month")),
        week_number(_field(metric, "week")),
    )


def period_label(metric: Any) -> str:
    return f"{_field(metric, 'year')}-{_field(metric, 'month')}-{_field(metric, 'week')}"


def sort_by_period(metrics: Sequence[Any]) -> List[Any]:
    return sorted(metrics, key=period_key)


def period_over_period_change(current: float, previous: float, field: str) -> float:
    """Percent change from `previous` to `current`, signed as good/bad.

    For cost-type metrics (cpa, cpc, cost) a decrease is reported as a
    positive change. A zero previous value yields 0.
    """
    if not previous:
        return 0.0
    if is_cost_metric(field):
        return (previous - current) / previous * 100
    return (current - previous) / previous * 100


def _direction(current: float, previous: float) -> str:
    raw_change = (current - previous) / previous * 100
    if raw_change > 2:
        return "up"
    elif raw_change < -2:
        return "down"
    return "flat"


def _signal(change_pct: float, direction: str) -> str:
    """Signal follows the polarity-adjusted change."""
    if direction == "flat":
        return "stable"
    return "improving" if change_pct > 0 else "declining"


def compute_period_changes(metrics: Sequence[Any]) -> List[TrendSignal]:
    """Compare the last two periods for the dashboard's trend metrics."""
    ordered = sort_by_period(metrics)
    if len(ordered) < 2:
        return []

    current, previous = ordered[-1], ordered[-2]
    signals: List[TrendSignal] = []

    for mname in TREND_METRICS:
        curr_val = float(_field(current, mname, 0) or 0)
        prev_val = float(_field(previous, mname, 0) or 0)

        # Handle zero baseline — insufficient data, not +100%
        if prev_val == 0:
            signals.append(
                TrendSignal(
                    metric_name=mname,
                    current_value=round(curr_val, 4),
                    previous_value=0,
                    change_pct=0,
                    direction="flat",
                    signal="insufficient_data",
                    current_period=period_label(current),
                    previous_period=period_label(previous),
                    previous_period_available=False,
                )
            )
            continue

        change = period_over_period_change(curr_val, prev_val, mname)
        d = _direction(curr_val, prev_val)

        signals.append(
            TrendSignal(
                metric_name=mname,
                current_value=round(curr_val, 4),
                previous_value=round(prev_val, 4),
                change_pct=round(change, 2),
                direction=d,
                signal=_signal(change, d),
                current_period=period_label(current),
                previous_period=period_label(previous),
            )
        )

    logger.debug(f"Computed {len(signals)} trend signals")
    return signals
