"""Dashboard Engine - one entry point for every dashboard view."""

from dataclasses import dataclass

import polars as pl

from .aggregator import flat_aggregate, frame_totals, summary_frame
from .comparison import compare_periods
from .expressions import funnel_totals_expr, share_of_total_expr
from .grouping import (
    NO_INTEREST,
    WEEKDAY_LABELS,
    GroupingKey,
    by_account,
    by_ad,
    by_age_bin,
    by_city,
    by_interest,
    by_objective,
    by_weekday,
)
from .hierarchy import build_hierarchy
from .metrics import safe_ratio
from .models import (
    AggregatedGroup,
    FunnelStage,
    HierarchyNode,
    MetricTotals,
    PeriodComparison,
)
from .ranking import rank, sort_age_bins


def build_funnel(stages: list[tuple[str, float]], spend: float) -> list[FunnelStage]:
    """Funnel steps with unit cost and step-to-step conversion.

    The first step converts at 100%; an empty prior step converts at 0%.
    """
    funnel: list[FunnelStage] = []
    previous: float | None = None
    for name, volume in stages:
        conversion = 100.0 if previous is None else safe_ratio(volume, previous, 100)
        funnel.append(
            FunnelStage(
                name=name,
                volume=volume,
                unit_cost=safe_ratio(spend, volume),
                conversion_pct=conversion,
            )
        )
        previous = volume
    return funnel


@dataclass
class DashboardEngine:
    """Aggregates for every dashboard view over one normalized frame.

    All methods are pure - they do not mutate the input DataFrame, and every
    view shares the frame's single ``leads`` column.

    Attributes:
        df: Normalized and enriched frame for the current window
        top_creatives: Default size of the top creatives list
        top_cities: Default size of the city ranking
        top_interests: Default size of the interest cloud
    """

    df: pl.DataFrame
    top_creatives: int = 5
    top_cities: int = 10
    top_interests: int = 25

    def __post_init__(self) -> None:
        """Validate input DataFrame has required columns."""
        required = {
            "spend",
            "impressions",
            "clicks",
            "leads",
            "reach",
            "date_start",
            "weekday",
            "age_bin",
        }
        available = set(self.df.columns)
        missing = required - available
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    # =========================================================================
    # KPI CARDS
    # =========================================================================

    def get_totals(self) -> MetricTotals:
        return frame_totals(self.df)

    def get_kpis(self, previous_df: pl.DataFrame | None = None) -> PeriodComparison:
        """KPI totals with deltas against the previous window.

        Args:
            previous_df: Normalized frame of the comparison window, or None
                when the selected range has no comparison

        Returns:
            PeriodComparison whose deltas are None without a previous window.
        """
        return compare_periods(self.df, previous_df)

    # =========================================================================
    # FUNNELS
    # =========================================================================

    def get_funnel(self) -> list[FunnelStage]:
        """Impressions -> reach -> clicks -> leads."""
        t = self.get_totals()
        return build_funnel(
            [
                ("Impressões", t.impressions),
                ("Alcance", t.reach),
                ("Cliques", t.clicks),
                ("Leads", t.leads),
            ],
            t.spend,
        )

    def get_messaging_funnel(self) -> list[FunnelStage]:
        """Conversation depth: started -> connected -> new contact -> depth 2 -> 3."""
        spend = self.get_totals().spend
        volumes = self.df.select(funnel_totals_expr()).row(0, named=True)

        return build_funnel(
            [
                ("Conversas Iniciadas", volumes["messages_started"]),
                ("Conexões", volumes["messages_connections"]),
                ("Novos Contatos", volumes["messages_new_contacts"]),
                ("Profundidade 2", volumes["messages_depth_2"]),
                ("Profundidade 3", volumes["messages_depth_3"]),
            ],
            spend,
        )

    # =========================================================================
    # RANKED BREAKDOWNS
    # =========================================================================

    def get_top_creatives(
        self, n: int | None = None, sort_key: str = "spend"
    ) -> list[AggregatedGroup]:
        """Best ads by spend (or another metric), with image and copy."""
        ads = flat_aggregate(self.df, by_ad()).values()
        return rank(ads, sort_key, top_n=n or self.top_creatives)

    def get_objectives_breakdown(self) -> list[AggregatedGroup]:
        """Spend and cost per result per campaign objective."""
        return rank(flat_aggregate(self.df, by_objective()).values(), "spend")

    def get_city_ranking(self, n: int | None = None) -> list[AggregatedGroup]:
        """Top cities by spend, coordinate pins included."""
        cities = flat_aggregate(self.df, by_city()).values()
        return rank(cities, "spend", top_n=n or self.top_cities)

    def get_age_performance(self) -> list[AggregatedGroup]:
        """Age bins youngest first."""
        return sort_age_bins(flat_aggregate(self.df, by_age_bin()).values())

    def get_interest_cloud(self, n: int | None = None) -> list[AggregatedGroup]:
        """Most frequent targeting interests.

        ``count`` is the number of rows naming the interest; spend is split
        evenly across a row's interests.
        """
        interests = [
            g for g in flat_aggregate(self.df, by_interest()).values()
            if g.key != NO_INTEREST
        ]
        return rank(interests, "count", top_n=n or self.top_interests)

    def get_account_summary(self) -> list[AggregatedGroup]:
        """Per-account totals, highest spend first."""
        return rank(flat_aggregate(self.df, by_account()).values(), "spend")

    # =========================================================================
    # TEMPORAL
    # =========================================================================

    def get_weekday_trend(self) -> list[AggregatedGroup]:
        """One group per weekday, Sunday first; days without rows are zero."""
        groups = flat_aggregate(self.df, by_weekday())
        return [
            groups.get(label) or AggregatedGroup(key=label, totals=MetricTotals())
            for label in WEEKDAY_LABELS
        ]

    # =========================================================================
    # HIERARCHY
    # =========================================================================

    def get_campaign_hierarchy(
        self,
        sort_key: str = "spend",
        descending: bool = True,
        search: str | None = None,
    ) -> list[HierarchyNode]:
        """Campaign tree sorted at every level.

        A search term keeps campaigns whose name, or any ad set or ad name
        below them, contains it.
        """
        return rank(
            build_hierarchy(self.df),
            sort_key,
            descending=descending,
            search=search,
            recursive=True,
        )

    # =========================================================================
    # TABLES
    # =========================================================================

    def get_breakdown_table(self, key: GroupingKey | str) -> pl.DataFrame:
        """Totals, ratios and spend share per group, as a frame."""
        total_spend = self.get_totals().spend
        return summary_frame(self.df, key).with_columns(
            share_of_total_expr("spend", total_spend)
        )
