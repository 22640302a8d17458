"""Data enrichment functions - add derived columns."""

from enum import Enum

import polars as pl

UNKNOWN_AGE_BIN = "Desconhecido"
OPEN_ENDED_AGE = 65


class LeadDefinition(str, Enum):
    """Which volumes count as a "lead".

    The dashboard views disagreed on this; one definition is chosen per run
    and written to the ``leads`` column so every view reads the same number.
    """

    MESSAGES = "messages"  # msgs_iniciadas
    MESSAGES_AND_PURCHASES = "messages_and_purchases"  # msgs_iniciadas + compras
    FORMS_AND_NEW_CONTACTS = "forms_and_new_contacts"  # leads_total + msgs_novos_contatos
    FORMS_AND_MESSAGES = "forms_and_messages"  # leads_total + msgs_iniciadas


def lead_expr(definition: LeadDefinition | str) -> pl.Expr:
    """Expression computing ``leads`` for the given definition."""
    definition = LeadDefinition(definition)
    if definition is LeadDefinition.MESSAGES:
        expr = pl.col("messages_started")
    elif definition is LeadDefinition.MESSAGES_AND_PURCHASES:
        expr = pl.col("messages_started") + pl.col("purchases")
    elif definition is LeadDefinition.FORMS_AND_NEW_CONTACTS:
        expr = pl.col("form_leads") + pl.col("messages_new_contacts")
    else:
        expr = pl.col("form_leads") + pl.col("messages_started")
    return expr.alias("leads")


def add_leads(
    df: pl.DataFrame, definition: LeadDefinition | str = LeadDefinition.MESSAGES
) -> pl.DataFrame:
    """Add the ``leads`` column."""
    return df.with_columns(lead_expr(definition))


def add_weekday(df: pl.DataFrame, date_col: str = "date_start") -> pl.DataFrame:
    """Add weekday index with Sunday = 0 through Saturday = 6.

    Polars numbers ISO weekdays Monday = 1 .. Sunday = 7.
    """
    return df.with_columns((pl.col(date_col).dt.weekday() % 7).alias("weekday"))


def age_bin_expr() -> pl.Expr:
    """Targeting age bin label: "25-34", "45+" or "Desconhecido".

    An upper bound of 65 or more is treated as open-ended.
    """
    age_min = pl.col("age_min")
    age_max = pl.col("age_max")
    min_text = age_min.cast(pl.Int64).cast(pl.Utf8)
    max_text = age_max.cast(pl.Int64).cast(pl.Utf8)
    return (
        pl.when((age_min > 0) & (age_max >= OPEN_ENDED_AGE))
        .then(pl.concat_str([min_text, pl.lit("+")]))
        .when((age_min > 0) & (age_max > 0))
        .then(pl.concat_str([min_text, pl.lit("-"), max_text]))
        .when(age_min > 0)
        .then(pl.concat_str([min_text, pl.lit("+")]))
        .otherwise(pl.lit(UNKNOWN_AGE_BIN))
        .alias("age_bin")
    )


def add_age_bin(df: pl.DataFrame) -> pl.DataFrame:
    return df.with_columns(age_bin_expr())


def enrich(
    df: pl.DataFrame, lead_definition: LeadDefinition | str = LeadDefinition.MESSAGES
) -> pl.DataFrame:
    """Apply all enrichment transformations."""
    df = add_leads(df, lead_definition)
    df = add_weekday(df)
    df = add_age_bin(df)
    return df
