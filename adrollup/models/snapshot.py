"""DashboardSnapshot - consolidated dashboard output for rendering."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..analytics.models import (
    AggregatedGroup,
    FunnelStage,
    HierarchyNode,
    PeriodComparison,
    PeriodPair,
)


def _groups(groups: list[AggregatedGroup]) -> list[dict[str, Any]]:
    return [g.to_dict() for g in groups]


def _funnel(stages: list[FunnelStage]) -> list[dict[str, Any]]:
    return [
        {
            "stage": s.name,
            "volume": s.volume,
            "unit_cost": round(s.unit_cost, 4),
            "conversion_pct": round(s.conversion_pct, 2),
        }
        for s in stages
    ]


@dataclass
class DashboardSnapshot:
    """Every aggregate one dashboard render needs, for one filter state.

    All data is pre-computed and JSON-serializable through ``to_dict``.
    """

    # Metadata
    generated_at: datetime
    generation: int
    filters: dict[str, Any]
    period: PeriodPair
    total_rows: int

    # Summary cards
    kpis: PeriodComparison

    # Funnels
    funnel: list[FunnelStage] = field(default_factory=list)
    messaging_funnel: list[FunnelStage] = field(default_factory=list)

    # Tables and charts
    top_creatives: list[AggregatedGroup] = field(default_factory=list)
    objectives: list[AggregatedGroup] = field(default_factory=list)
    cities: list[AggregatedGroup] = field(default_factory=list)
    age_bins: list[AggregatedGroup] = field(default_factory=list)
    interests: list[AggregatedGroup] = field(default_factory=list)
    weekday_trend: list[AggregatedGroup] = field(default_factory=list)
    accounts: list[AggregatedGroup] = field(default_factory=list)
    hierarchy: list[HierarchyNode] = field(default_factory=list)

    def kpis_dict(self) -> dict[str, Any]:
        """Current totals and derived KPIs with their deltas."""
        current = AggregatedGroup(key="current", totals=self.kpis.current)
        return {
            "current": current.metrics_dict(),
            "previous": (
                AggregatedGroup(key="previous", totals=self.kpis.previous).metrics_dict()
                if self.kpis.previous is not None
                else None
            ),
            "deltas_pct": {
                k: round(v, 2) if v is not None else None
                for k, v in self.kpis.deltas.items()
            },
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "meta": {
                "generated_at": self.generated_at.isoformat(),
                "generation": self.generation,
                "filters": self.filters,
                "total_rows": self.total_rows,
            },
            "period": {
                "mode": self.period.mode,
                "current": self.period.current.to_dict() if self.period.current else None,
                "previous": (
                    self.period.previous.to_dict() if self.period.previous else None
                ),
            },
            "kpis": self.kpis_dict(),
            "funnels": {
                "conversion": _funnel(self.funnel),
                "messaging": _funnel(self.messaging_funnel),
            },
            "creatives": _groups(self.top_creatives),
            "objectives": _groups(self.objectives),
            "demographics": {
                "cities": _groups(self.cities),
                "age_bins": _groups(self.age_bins),
                "interests": _groups(self.interests),
            },
            "weekday_trend": _groups(self.weekday_trend),
            "accounts": _groups(self.accounts),
            "campaigns": [n.to_dict() for n in self.hierarchy],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)
