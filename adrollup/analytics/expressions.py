"""Reusable Polars expressions for aggregation passes."""

import polars as pl

# Volumes summed by every aggregation pass.
SUM_COLUMNS = (
    "spend",
    "impressions",
    "clicks",
    "leads",
    "purchases",
    "purchase_value",
    "reach",
    "messages_started",
)

FUNNEL_COLUMNS = (
    "messages_started",
    "messages_connections",
    "messages_new_contacts",
    "messages_depth_2",
    "messages_depth_3",
)


# =============================================================================
# TOTALS
# =============================================================================


def totals_expr(weight: pl.Expr | None = None) -> list[pl.Expr]:
    """Summed volumes plus a row count, named after ``MetricTotals`` fields.

    A ``weight`` scales every volume before summing; multi-valued keys use it
    to split a row evenly across its values.
    """
    exprs = [
        (pl.col(c) if weight is None else pl.col(c) * weight).sum().alias(c)
        for c in SUM_COLUMNS
    ]
    exprs.append(pl.len().alias("count"))
    return exprs


def funnel_totals_expr() -> list[pl.Expr]:
    """Summed conversation-depth volumes."""
    return [pl.col(c).sum().alias(c) for c in FUNNEL_COLUMNS]


def first_value_expr(column: str) -> pl.Expr:
    """First non-empty value of a text column within a group."""
    return (
        pl.col(column)
        .filter(pl.col(column).is_not_null() & (pl.col(column) != ""))
        .first()
        .fill_null("")
        .alias(column)
    )


# =============================================================================
# DERIVED RATIOS
# =============================================================================


def safe_ratio_expr(num: str, den: str, scale: float = 1.0) -> pl.Expr:
    """num / den * scale, or 0.0 when den is not positive."""
    return (
        pl.when(pl.col(den) > 0)
        .then(pl.col(num) / pl.col(den) * scale)
        .otherwise(pl.lit(0.0))
    )


def derived_metrics_expr() -> list[pl.Expr]:
    """Ratios recomputed from already-summed columns.

    Apply after ``totals_expr``; ratios are never averaged across rows.
    """
    return [
        safe_ratio_expr("spend", "leads").alias("cpl"),
        # CTR in percent
        safe_ratio_expr("clicks", "impressions", 100).alias("ctr"),
        safe_ratio_expr("spend", "impressions", 1000).alias("cpm"),
        safe_ratio_expr("spend", "clicks").alias("cpc"),
        safe_ratio_expr("impressions", "reach").alias("frequency"),
        safe_ratio_expr("purchase_value", "spend").alias("roas"),
        safe_ratio_expr("spend", "purchases").alias("cost_per_purchase"),
        safe_ratio_expr("leads", "clicks", 100).alias("conversion_rate"),
    ]


def share_of_total_expr(column: str, total: float) -> pl.Expr:
    """Column as a percentage of a precomputed total."""
    if total <= 0:
        return pl.lit(0.0).alias(f"{column}_share")
    return (pl.col(column) / total * 100).alias(f"{column}_share")
