"""Output models for aggregation and comparison."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, Literal

from ..exceptions import InvalidDateRangeError
from . import metrics

# Additive totals carried by every group and node.
TOTAL_FIELDS = (
    "spend",
    "impressions",
    "clicks",
    "leads",
    "purchases",
    "purchase_value",
    "reach",
    "messages_started",
    "count",
)

# Ratios recomputed from totals; never accumulated.
DERIVED_METRICS = (
    "cpl",
    "ctr",
    "cpm",
    "cpc",
    "frequency",
    "roas",
    "cost_per_purchase",
    "conversion_rate",
    "cost_per_result",
)


@dataclass(frozen=True)
class MetricTotals:
    """Summed volumes for a set of rows."""

    spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    leads: float = 0.0
    purchases: float = 0.0
    purchase_value: float = 0.0
    reach: float = 0.0
    messages_started: float = 0.0
    count: int = 0  # source rows

    def __add__(self, other: "MetricTotals") -> "MetricTotals":
        if not isinstance(other, MetricTotals):
            return NotImplemented
        return MetricTotals(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    @classmethod
    def total(cls, items: Iterable["MetricTotals"]) -> "MetricTotals":
        """Left-to-right sum of several totals."""
        result = cls()
        for item in items:
            result = result + item
        return result

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "MetricTotals":
        """Build from an aggregated row; missing or null values read as 0."""
        values = {name: row.get(name) or 0 for name in TOTAL_FIELDS}
        values["count"] = int(values["count"])
        return cls(**{k: v if k == "count" else float(v) for k, v in values.items()})


class DerivedMetrics:
    """Derived ratios for anything exposing ``totals: MetricTotals``."""

    totals: MetricTotals
    objective: str | None = None

    @property
    def spend(self) -> float:
        return self.totals.spend

    @property
    def impressions(self) -> float:
        return self.totals.impressions

    @property
    def clicks(self) -> float:
        return self.totals.clicks

    @property
    def leads(self) -> float:
        return self.totals.leads

    @property
    def purchases(self) -> float:
        return self.totals.purchases

    @property
    def purchase_value(self) -> float:
        return self.totals.purchase_value

    @property
    def reach(self) -> float:
        return self.totals.reach

    @property
    def messages_started(self) -> float:
        return self.totals.messages_started

    @property
    def count(self) -> int:
        return self.totals.count

    @property
    def cpl(self) -> float:
        return metrics.cpl(self.totals.spend, self.totals.leads)

    @property
    def ctr(self) -> float:
        return metrics.ctr(self.totals.clicks, self.totals.impressions)

    @property
    def cpm(self) -> float:
        return metrics.cpm(self.totals.spend, self.totals.impressions)

    @property
    def cpc(self) -> float:
        return metrics.cpc(self.totals.spend, self.totals.clicks)

    @property
    def frequency(self) -> float:
        return metrics.frequency(self.totals.impressions, self.totals.reach)

    @property
    def roas(self) -> float:
        return metrics.roas(self.totals.purchase_value, self.totals.spend)

    @property
    def cost_per_purchase(self) -> float:
        return metrics.cost_per_purchase(self.totals.spend, self.totals.purchases)

    @property
    def conversion_rate(self) -> float:
        return metrics.conversion_rate(self.totals.leads, self.totals.clicks)

    @property
    def cost_per_result(self) -> float:
        t = self.totals
        return metrics.cost_per_result(
            t.spend, t.purchases, t.leads, t.clicks, t.messages_started, self.objective
        )

    def metric(self, name: str) -> float:
        """Value of a total or derived metric by name."""
        return getattr(self, name)

    def metrics_dict(self, decimals: int = 2) -> dict[str, float]:
        """Totals and derived metrics rounded for output."""
        out: dict[str, float] = {}
        for name in TOTAL_FIELDS:
            value = getattr(self.totals, name)
            out[name] = value if name == "count" else round(value, decimals)
        for name in DERIVED_METRICS:
            out[name] = round(getattr(self, name), decimals)
        return out


@dataclass(frozen=True)
class AggregatedGroup(DerivedMetrics):
    """Totals for one grouping key plus descriptive attributes.

    ``key`` is the display label of the group (first spelling seen when the
    key is case-insensitive). ``attributes`` holds first-seen descriptive
    fields such as an ad's name and image.
    """

    key: str
    totals: MetricTotals
    attributes: dict[str, str] = field(default_factory=dict)
    objective: str | None = None  # set when results depend on the objective

    @property
    def name(self) -> str:
        return self.attributes.get("name", self.key)

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, **self.attributes, **self.metrics_dict()}


NodeLevel = Literal["campaign", "adset", "ad"]


@dataclass
class HierarchyNode(DerivedMetrics):
    """One node of the campaign -> ad set -> ad tree."""

    id: str
    name: str
    level: NodeLevel
    totals: MetricTotals = field(default_factory=MetricTotals)
    children: list["HierarchyNode"] = field(default_factory=list)
    image_url: str = ""
    post_link: str = ""
    objective: str | None = None

    @property
    def status(self) -> Literal["active", "inactive"]:
        return "active" if self.totals.spend > 0 else "inactive"

    def walk(self) -> Iterable["HierarchyNode"]:
        """This node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "status": self.status,
            **self.metrics_dict(),
        }
        if self.level == "ad":
            out["image_url"] = self.image_url
            out["post_link"] = self.post_link
        else:
            out["children"] = [c.to_dict() for c in self.children]
        return out


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"Range start {self.start} is after its end {self.end}"
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class PeriodPair:
    """Current window and the window it is compared against.

    ``current`` is None when the mode covers all data; ``previous`` is None
    whenever no comparison should be shown.
    """

    mode: str
    current: DateRange | None
    previous: DateRange | None

    @property
    def has_comparison(self) -> bool:
        return self.current is not None and self.previous is not None


@dataclass(frozen=True)
class PeriodComparison:
    """KPI totals for two windows and their percentage deltas."""

    current: MetricTotals
    previous: MetricTotals | None
    deltas: dict[str, float | None]  # None = no comparison window

    @property
    def has_comparison(self) -> bool:
        return self.previous is not None


@dataclass(frozen=True)
class FunnelStage:
    """One funnel step with unit cost and conversion from the prior step."""

    name: str
    volume: float
    unit_cost: float  # spend / volume
    conversion_pct: float  # volume / previous stage volume * 100; 100 for the first
