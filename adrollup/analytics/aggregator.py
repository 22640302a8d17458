"""Flat aggregation: one pass over the frame per grouping key."""

import logging

import polars as pl

from .expressions import derived_metrics_expr, first_value_expr, totals_expr
from .grouping import GroupingKey, get_key
from .models import AggregatedGroup, MetricTotals

logger = logging.getLogger(__name__)

LABEL = "_label"
GROUP = "_group"
WEIGHT = "_weight"


def label_frame(df: pl.DataFrame, key: GroupingKey) -> pl.DataFrame:
    """Attach the display label, group id and (for multi-valued keys) weight.

    Multi-valued rows are exploded into one row per label; each copy carries
    ``1 / n`` as its weight. Rows with no labels keep weight 1 and fall into
    ``key.empty_label``.
    """
    frame = df.with_columns(key.expr.alias(LABEL))

    if key.multi_valued:
        frame = frame.with_columns(
            (
                1.0 / pl.max_horizontal(pl.col(LABEL).list.len(), pl.lit(1))
            ).alias(WEIGHT)
        ).explode(LABEL)

    frame = frame.with_columns(pl.col(LABEL).fill_null(key.empty_label))

    group = pl.col(LABEL).str.to_lowercase() if key.case_insensitive else pl.col(LABEL)
    return frame.with_columns(group.alias(GROUP))


def aggregate_frame(df: pl.DataFrame, key: GroupingKey) -> pl.DataFrame:
    """Group-by result with summed totals and first-seen attributes.

    Groups appear in first-seen order.
    """
    frame = label_frame(df, key)
    weight = pl.col(WEIGHT) if key.multi_valued else None

    label = pl.col(LABEL).first()
    if key.case_insensitive:
        # An all-lowercase spelling labels the group only when it is the only one
        capitalized = pl.col(LABEL).filter(
            pl.col(LABEL) != pl.col(LABEL).str.to_lowercase()
        )
        label = pl.coalesce(capitalized.first(), label)

    aggs = [
        label.alias(LABEL),
        *totals_expr(weight),
        *[first_value_expr(col).alias(name) for name, col in key.attributes.items()],
    ]
    return frame.group_by(GROUP, maintain_order=True).agg(aggs)


def flat_aggregate(
    df: pl.DataFrame, key: GroupingKey | str
) -> dict[str, AggregatedGroup]:
    """Aggregate rows into one group per key value.

    Args:
        df: Normalized and enriched frame
        key: A GroupingKey or the name of a built-in key ("city", "ad", ...)

    Returns:
        Groups keyed by display label, in first-seen order. Totals across all
        groups equal the frame's totals.
    """
    if isinstance(key, str):
        key = get_key(key)

    grouped = aggregate_frame(df, key)

    groups: dict[str, AggregatedGroup] = {}
    for row in grouped.iter_rows(named=True):
        attributes = {name: row[name] for name in key.attributes}
        label = row[LABEL]
        groups[label] = AggregatedGroup(
            key=label,
            totals=MetricTotals.from_mapping(row),
            attributes=attributes,
            objective=attributes.get("objective", label) if key.objective_aware else None,
        )

    logger.debug("Aggregated %d rows into %d '%s' groups", len(df), len(groups), key.name)
    return groups


def summary_frame(df: pl.DataFrame, key: GroupingKey | str) -> pl.DataFrame:
    """Tabular variant of ``flat_aggregate`` with derived ratio columns.

    The label column is named after the key.
    """
    if isinstance(key, str):
        key = get_key(key)

    return (
        aggregate_frame(df, key)
        .with_columns(derived_metrics_expr())
        .drop(GROUP)
        .rename({LABEL: key.name})
    )


def frame_totals(df: pl.DataFrame) -> MetricTotals:
    """Totals over every row of the frame."""
    if df.is_empty():
        return MetricTotals()
    return MetricTotals.from_mapping(df.select(totals_expr()).row(0, named=True))
