"""Sorting, filtering and top-N truncation of aggregated results."""

import dataclasses
import re
from collections.abc import Iterable, Sequence
from typing import TypeVar

from ..exceptions import UnknownMetricError
from .models import DERIVED_METRICS, TOTAL_FIELDS, AggregatedGroup, HierarchyNode

RANKABLE_METRICS = [*TOTAL_FIELDS, *DERIVED_METRICS]

Rankable = TypeVar("Rankable", AggregatedGroup, HierarchyNode)


def metric_value(item: AggregatedGroup | HierarchyNode, metric: str) -> float:
    """Total or derived metric of a group or node.

    Raises:
        UnknownMetricError: metric is not a total or derived metric
    """
    if metric not in RANKABLE_METRICS:
        raise UnknownMetricError(metric, RANKABLE_METRICS)
    return item.metric(metric)


def field_value(item: AggregatedGroup | HierarchyNode, field_name: str) -> str:
    """Text value of a descriptive field; "" when the item lacks it."""
    if isinstance(item, AggregatedGroup):
        if field_name == "key":
            return item.key
        if field_name in item.attributes:
            return item.attributes[field_name]
    value = getattr(item, field_name, None)
    return "" if value is None else str(value)


def matches_search(
    item: AggregatedGroup | HierarchyNode, term: str, fields: Sequence[str]
) -> bool:
    """Case-insensitive substring match on any of the fields.

    Hierarchy nodes also match when any descendant does.
    """
    lowered = term.lower()
    if any(lowered in field_value(item, f).lower() for f in fields):
        return True
    if isinstance(item, HierarchyNode):
        return any(matches_search(child, term, fields) for child in item.children)
    return False


def sort_items(
    items: Iterable[Rankable], sort_key: str, descending: bool = True
) -> list[Rankable]:
    """Sort by a metric, keeping input order among equal values.

    ``sorted`` is guaranteed stable, and ``reverse=True`` keeps equal
    elements in their original order rather than reversing them.
    """
    items = list(items)
    # Rejects unknown metrics even for an empty list
    if sort_key not in RANKABLE_METRICS:
        raise UnknownMetricError(sort_key, RANKABLE_METRICS)
    return sorted(items, key=lambda item: metric_value(item, sort_key), reverse=descending)


def _sorted_subtree(node: HierarchyNode, sort_key: str, descending: bool) -> HierarchyNode:
    children = [
        _sorted_subtree(child, sort_key, descending)
        for child in sort_items(node.children, sort_key, descending)
    ]
    return dataclasses.replace(node, children=children)


def rank(
    items: Iterable[Rankable],
    sort_key: str = "spend",
    descending: bool = True,
    top_n: int | None = None,
    search: str | None = None,
    search_fields: Sequence[str] = ("name",),
    category: tuple[str, str] | None = None,
    nonzero_spend: bool = False,
    recursive: bool = False,
) -> list[Rankable]:
    """Filter, sort and truncate groups or hierarchy nodes.

    Args:
        items: AggregatedGroups or top-level HierarchyNodes
        sort_key: Any total or derived metric name
        descending: Largest first (default)
        top_n: Keep only the first N after sorting
        search: Substring matched case-insensitively against ``search_fields``
        search_fields: Fields searched; hierarchy nodes also search descendants
        category: (field, value) equality filter, e.g. ("objective", "Vendas")
        nonzero_spend: Drop items without spend
        recursive: Also sort the children of hierarchy nodes by the same key

    Returns:
        New list; the input is not modified. Ties keep their input order.

    Raises:
        UnknownMetricError: sort_key is not a known metric
    """
    selected = list(items)

    if search:
        selected = [i for i in selected if matches_search(i, search, search_fields)]
    if category is not None:
        field_name, expected = category
        selected = [i for i in selected if field_value(i, field_name) == expected]
    if nonzero_spend:
        selected = [i for i in selected if i.totals.spend > 0]

    ranked = sort_items(selected, sort_key, descending)
    if recursive:
        ranked = [
            _sorted_subtree(i, sort_key, descending) if isinstance(i, HierarchyNode) else i
            for i in ranked
        ]

    if top_n is not None:
        ranked = ranked[: max(top_n, 0)]
    return ranked


_LEADING_NUMBER_RE = re.compile(r"\d+")


def age_bin_lower_bound(label: str) -> int:
    """Lower age of a bin label; labels without a number sort last."""
    match = _LEADING_NUMBER_RE.search(label)
    return int(match.group()) if match else 999


def sort_age_bins(groups: Iterable[AggregatedGroup]) -> list[AggregatedGroup]:
    """Order age-bin groups youngest first ("18-24", "25-34", ..., "65+")."""
    return sorted(groups, key=lambda g: age_bin_lower_bound(g.key))
