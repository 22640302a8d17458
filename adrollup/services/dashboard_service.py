"""Dashboard service - orchestrates fetching, filtering and aggregation."""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import polars as pl

from ..analytics import (
    DashboardEngine,
    DateRange,
    DateRangeMode,
    PeriodPair,
    build_period_pair,
    filter_by_range,
)
from ..exceptions import InvalidDateRangeError
from ..ingestion import DataIngestionPipeline, SourceSchema, normalize_rows
from ..models.snapshot import DashboardSnapshot
from ..settings import DashboardSettings
from .generation import GenerationGuard

logger = logging.getLogger(__name__)

ALL = "all"

RecordSource = Callable[["DashboardFilter"], Iterable[Mapping[str, Any]]]


@dataclass(frozen=True)
class DashboardFilter:
    """Header selections: franchise, account and date range.

    ``reference`` anchors the relative modes; None means today.
    """

    franchise: str = ALL
    account: str = ALL
    mode: DateRangeMode = DateRangeMode.LAST_30
    custom_start: date | None = None
    custom_end: date | None = None
    reference: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", DateRangeMode(self.mode))

    def period_pair(self) -> PeriodPair:
        return build_period_pair(
            self.mode,
            self.reference or date.today(),
            self.custom_start,
            self.custom_end,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "franchise": self.franchise,
            "account": self.account,
            "mode": self.mode.value,
            "custom_start": self.custom_start.isoformat() if self.custom_start else None,
            "custom_end": self.custom_end.isoformat() if self.custom_end else None,
            "reference": self.reference.isoformat() if self.reference else None,
        }


def apply_filters(
    df: pl.DataFrame,
    franchise: str = ALL,
    account: str = ALL,
    date_range: DateRange | None = None,
) -> pl.DataFrame:
    """Rows matching the franchise, account and (inclusive) date range.

    ``"all"`` disables the franchise or account filter.
    """
    if franchise != ALL:
        df = df.filter(pl.col("franchise") == franchise)
    if account != ALL:
        df = df.filter(pl.col("account_name") == account)
    return filter_by_range(df, date_range)


def list_franchises(df: pl.DataFrame, placeholder: str = "-") -> list[str]:
    """Franchises present in the data, sorted."""
    values = df["franchise"].unique().to_list()
    return sorted(v for v in values if v and v != placeholder)


def list_accounts(
    df: pl.DataFrame, franchise: str = ALL, placeholder: str = "-"
) -> list[str]:
    """Accounts available for a franchise (or all of them), sorted."""
    if franchise != ALL:
        df = df.filter(pl.col("franchise") == franchise)
    values = df["account_name"].unique().to_list()
    return sorted(v for v in values if v and v != placeholder)


class DashboardService:
    """Service producing dashboard snapshots from a record source.

    Orchestrates:
    1. Fetching raw rows once per filter change (source failures -> no rows)
    2. Normalizing them into one frame
    3. Splitting current and previous windows from that same frame
    4. Running every view and packing a DashboardSnapshot
    5. Dropping results from requests superseded by a newer one

    Usage:
        service = DashboardService(source=fetch_rows)
        snapshot = service.refresh(DashboardFilter(mode="this-month"))
    """

    def __init__(
        self,
        source: RecordSource,
        settings: DashboardSettings | None = None,
        schema: SourceSchema | None = None,
    ):
        """Initialize service.

        Args:
            source: Callable returning raw backend rows for a filter
            settings: Lead definition and top-N sizes. Defaults to bundled config.
            schema: Backend column layout. Defaults to bundled config.
        """
        self.source = source
        self.settings = settings or DashboardSettings.from_yaml()
        self.schema = schema or SourceSchema.default()
        self.guard = GenerationGuard()
        self.latest: DashboardSnapshot | None = None
        self._cache: tuple[DashboardFilter, pl.DataFrame] | None = None

    @classmethod
    def from_file(
        cls, file_path: Path, settings: DashboardSettings | None = None
    ) -> "DashboardService":
        """Service over an exported CSV / Parquet / JSON / Excel file."""
        pipeline = DataIngestionPipeline()
        return cls(
            source=lambda _filters: pipeline.read_rows(file_path),
            settings=settings,
            schema=pipeline.schema,
        )

    def fetch(self, filters: DashboardFilter) -> pl.DataFrame:
        """Fetch and normalize the master rows for a filter state.

        A failing source is logged and treated as returning no rows.
        """
        if self._cache is not None and self._cache[0] == filters:
            return self._cache[1]

        try:
            rows = list(self.source(filters))
        except Exception:
            logger.exception("Record source failed; continuing with no rows")
            rows = []

        df = normalize_rows(rows, self.schema, self.settings.lead_definition)
        self._cache = (filters, df)
        return df

    def invalidate(self) -> None:
        """Forget cached rows so the next refresh fetches again."""
        self._cache = None

    def build_snapshot(
        self, df: pl.DataFrame, filters: DashboardFilter, generation: int = 0
    ) -> DashboardSnapshot:
        """Run every view for the filter state over the master frame.

        An inverted custom range selects no rows and has no comparison.
        """
        try:
            period = filters.period_pair()
        except InvalidDateRangeError:
            logger.warning(
                "Custom range %s..%s is inverted; no rows selected",
                filters.custom_start,
                filters.custom_end,
            )
            period = PeriodPair(mode=filters.mode.value, current=None, previous=None)
            df = df.clear()

        current_df = apply_filters(df, filters.franchise, filters.account, period.current)
        previous_df = (
            apply_filters(df, filters.franchise, filters.account, period.previous)
            if period.previous is not None
            else None
        )

        engine = DashboardEngine(
            df=current_df,
            top_creatives=self.settings.top_creatives,
            top_cities=self.settings.top_cities,
            top_interests=self.settings.top_interests,
        )

        return DashboardSnapshot(
            generated_at=datetime.now(),
            generation=generation,
            filters=filters.to_dict(),
            period=period,
            total_rows=len(current_df),
            kpis=engine.get_kpis(previous_df),
            funnel=engine.get_funnel(),
            messaging_funnel=engine.get_messaging_funnel(),
            top_creatives=engine.get_top_creatives(),
            objectives=engine.get_objectives_breakdown(),
            cities=engine.get_city_ranking(),
            age_bins=engine.get_age_performance(),
            interests=engine.get_interest_cloud(),
            weekday_trend=engine.get_weekday_trend(),
            accounts=engine.get_account_summary(),
            hierarchy=engine.get_campaign_hierarchy(),
        )

    def refresh(self, filters: DashboardFilter) -> DashboardSnapshot | None:
        """Recompute the dashboard for a filter state.

        Returns:
            The new snapshot, or None when a newer refresh started while this
            one was running; ``latest`` then keeps the newer result.
        """
        generation = self.guard.begin()
        df = self.fetch(filters)
        snapshot = self.build_snapshot(df, filters, generation)

        if not self.guard.publish(generation, lambda: self._store(snapshot)):
            logger.info(
                "Discarding snapshot %d superseded by %d",
                generation,
                self.guard.current,
            )
            return None

        logger.info(
            "Dashboard snapshot %d: %d rows, mode=%s",
            generation,
            snapshot.total_rows,
            filters.mode.value,
        )
        return snapshot

    def _store(self, snapshot: DashboardSnapshot) -> None:
        self.latest = snapshot

    def available_franchises(self, filters: DashboardFilter | None = None) -> list[str]:
        return list_franchises(self.fetch(filters or DashboardFilter()))

    def available_accounts(
        self, franchise: str = ALL, filters: DashboardFilter | None = None
    ) -> list[str]:
        return list_accounts(self.fetch(filters or DashboardFilter()), franchise)
