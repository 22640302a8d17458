"""Data cleaning functions using Polars expressions."""

import polars as pl

from ..models.coercion import coerce_number


def clean_numeric_column(col_name: str, dtype: pl.DataType) -> pl.Expr:
    """Convert to a finite float; null, NaN, inf and garbage become 0.0.

    Text columns go through the same parser as single rows, so
    "R$ 1.234,50" and "1234.5" both read as numbers.
    """
    col = pl.col(col_name)
    if dtype.is_numeric():
        number = col.cast(pl.Float64)
    else:
        number = col.cast(pl.Utf8).map_elements(coerce_number, return_dtype=pl.Float64)
    return (
        pl.when(number.is_null() | number.is_nan() | number.is_infinite())
        .then(pl.lit(0.0))
        .otherwise(number)
        .alias(col_name)
    )


def clean_text_column(col_name: str, placeholder: str) -> pl.Expr:
    """Strip whitespace and replace empty values with the placeholder."""
    text = pl.col(col_name).cast(pl.Utf8).str.strip_chars()
    return (
        pl.when(text.is_null() | (text == ""))
        .then(pl.lit(placeholder))
        .otherwise(text)
        .alias(col_name)
    )


def clean_date_column(col_name: str, dtype: pl.DataType) -> pl.Expr:
    """Convert to a calendar day, handling pre-parsed dates and timestamps.

    Strings keep their first ten characters ("2024-03-15T10:30:00Z" reads as
    2024-03-15); the day is never shifted to another timezone.
    """
    col = pl.col(col_name)

    if dtype == pl.Date:
        return col.alias(col_name)
    elif dtype.base_type() == pl.Datetime:
        return col.dt.date().alias(col_name)
    else:
        return (
            col.cast(pl.Utf8)
            .str.strip_chars()
            .str.slice(0, 10)
            .str.to_date("%Y-%m-%d", strict=False)
            .alias(col_name)
        )


def ensure_columns(df: pl.DataFrame, columns: list[str]) -> pl.DataFrame:
    """Add any missing columns as nulls so every cleaning rule can apply."""
    missing = [c for c in columns if c not in df.columns]
    if not missing:
        return df
    return df.with_columns([pl.lit(None, dtype=pl.Utf8).alias(c) for c in missing])


def has_identity_expr(identity_cols: list[str]) -> pl.Expr:
    """True for rows where at least one identifying column is non-empty."""
    return pl.any_horizontal(
        [
            pl.col(c).cast(pl.Utf8).str.strip_chars().fill_null("") != ""
            for c in identity_cols
        ]
    )


def apply_cleaning(
    df: pl.DataFrame,
    numeric_cols: list[str],
    placeholders: dict[str, str],
    date_col: str,
    identity_cols: list[str] | None = None,
) -> pl.DataFrame:
    """Apply all cleaning transformations to DataFrame.

    Rows with every identity column empty are dropped before placeholders are
    filled in; every other row is kept.
    """
    df = ensure_columns(df, [*numeric_cols, *placeholders, date_col])

    if identity_cols:
        present = [c for c in identity_cols if c in df.columns]
        if present:
            df = df.filter(has_identity_expr(present))

    schema = df.schema
    exprs: list[pl.Expr] = []

    for col in numeric_cols:
        exprs.append(clean_numeric_column(col, schema[col]))

    for col, placeholder in placeholders.items():
        exprs.append(clean_text_column(col, placeholder))

    exprs.append(clean_date_column(date_col, schema[date_col]))

    return df.with_columns(exprs)
