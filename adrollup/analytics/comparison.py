"""Period-over-period comparison of KPI totals."""

import polars as pl

from .aggregator import frame_totals
from .metrics import delta_pct
from .models import AggregatedGroup, MetricTotals, PeriodComparison

# Scalars shown with a trend indicator on the KPI cards.
COMPARED_METRICS = (
    "spend",
    "impressions",
    "clicks",
    "leads",
    "purchases",
    "purchase_value",
    "reach",
    "cpl",
    "ctr",
    "cpm",
    "cpc",
    "frequency",
    "roas",
)


def compare_totals(
    current: MetricTotals, previous: MetricTotals | None
) -> PeriodComparison:
    """Delta percentage per compared metric.

    Without a previous window every delta is None, meaning "hide the trend"
    rather than 0% or infinity.
    """
    if previous is None:
        return PeriodComparison(
            current=current,
            previous=None,
            deltas={name: None for name in COMPARED_METRICS},
        )

    now = AggregatedGroup(key="current", totals=current)
    before = AggregatedGroup(key="previous", totals=previous)
    deltas: dict[str, float | None] = {
        name: delta_pct(now.metric(name), before.metric(name))
        for name in COMPARED_METRICS
    }
    return PeriodComparison(current=current, previous=previous, deltas=deltas)


def compare_periods(
    current_df: pl.DataFrame, previous_df: pl.DataFrame | None
) -> PeriodComparison:
    """Aggregate both windows independently and diff their totals.

    Pass ``previous_df=None`` when there is no comparison window; an empty
    previous frame is a real window with zero totals.
    """
    previous = frame_totals(previous_df) if previous_df is not None else None
    return compare_totals(frame_totals(current_df), previous)
