"""Aggregation, comparison and ranking of ad-performance rows."""

from .aggregator import flat_aggregate, frame_totals, summary_frame
from .calculator import DashboardEngine, build_funnel
from .comparison import compare_periods, compare_totals
from .grouping import (
    BUILTIN_KEYS,
    GroupingKey,
    by_account,
    by_ad,
    by_age_bin,
    by_campaign,
    by_city,
    by_franchise,
    by_interest,
    by_objective,
    by_platform,
    by_weekday,
    clean_location_name,
    get_key,
)
from .hierarchy import build_hierarchy, flatten_hierarchy
from .models import (
    AggregatedGroup,
    DateRange,
    FunnelStage,
    HierarchyNode,
    MetricTotals,
    PeriodComparison,
    PeriodPair,
)
from .periods import (
    DateRangeMode,
    build_period_pair,
    filter_by_range,
    get_previous_period,
    resolve_range,
    shift_months,
)
from .ranking import rank, sort_age_bins

__all__ = [
    "BUILTIN_KEYS",
    "AggregatedGroup",
    "DashboardEngine",
    "DateRange",
    "DateRangeMode",
    "FunnelStage",
    "GroupingKey",
    "HierarchyNode",
    "MetricTotals",
    "PeriodComparison",
    "PeriodPair",
    "build_funnel",
    "build_hierarchy",
    "build_period_pair",
    "by_account",
    "by_ad",
    "by_age_bin",
    "by_campaign",
    "by_city",
    "by_franchise",
    "by_interest",
    "by_objective",
    "by_platform",
    "by_weekday",
    "clean_location_name",
    "compare_periods",
    "compare_totals",
    "filter_by_range",
    "flat_aggregate",
    "flatten_hierarchy",
    "frame_totals",
    "get_key",
    "get_previous_period",
    "rank",
    "resolve_range",
    "shift_months",
    "sort_age_bins",
    "summary_frame",
]
