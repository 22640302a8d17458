"""Grouping key definitions for flat aggregation."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

import polars as pl

NO_LOCATION = "Sem Localização"
NO_INTEREST = "Sem Interesses"
NO_DATE = "Sem Data"
COORDS_PIN = "📍 Pin (Coords)"

# Sunday first, matching the ``weekday`` column.
WEEKDAY_LABELS = ("Dom", "Seg", "Ter", "Qua", "Qui", "Sex", "Sáb")

_COORDS_RE = re.compile(r"Lat:\s*([-0-9.]+).*Long:\s*([-0-9.]+)")


def clean_location_name(raw: str | None) -> str:
    """Reduce a targeting location to a city label.

    "Patrocínio, Minas Gerais (+20km)" -> "Patrocínio"
    "Lat: -18.923 Long: -46.992"        -> "📍 -18.9, -47.0"
    """
    if not raw or not raw.strip():
        return NO_LOCATION

    if "Lat:" in raw and "Long:" in raw:
        match = _COORDS_RE.search(raw)
        if match:
            try:
                lat, long = float(match.group(1)), float(match.group(2))
            except ValueError:
                return COORDS_PIN
            return f"📍 {lat:.1f}, {long:.1f}"
        return COORDS_PIN

    cleaned = raw.split("(")[0].split(",")[0].strip()
    return cleaned or NO_LOCATION


@dataclass(frozen=True, eq=False)
class GroupingKey:
    """How rows are bucketed for one view.

    Attributes:
        name: Key identifier, e.g. "city"
        expr: Polars expression giving each row's label; a list of labels
            when ``multi_valued``
        case_insensitive: Group labels ignoring case; the first spelling
            seen that is not all lowercase becomes the group key
        multi_valued: Rows count toward every label in their list, with
            volumes split evenly so overall totals are preserved
        attributes: {output_name: column} copied from the first row of each
            group that has a non-empty value
        objective_aware: Cost per result follows the group's objective
        empty_label: Label for rows with a null label or an empty list
    """

    name: str
    expr: pl.Expr
    case_insensitive: bool = False
    multi_valued: bool = False
    attributes: Mapping[str, str] = field(default_factory=dict)
    objective_aware: bool = False
    empty_label: str = ""


def text_key(column: str, **kwargs) -> GroupingKey:
    """Key on a plain text column."""
    return GroupingKey(name=column, expr=pl.col(column), **kwargs)


def ad_identity_expr() -> pl.Expr:
    """Ad id, else the row's unique id, else the ad name."""
    return (
        pl.when(pl.col("ad_id") != "")
        .then(pl.col("ad_id"))
        .when(pl.col("unique_id") != "")
        .then(pl.col("unique_id"))
        .otherwise(pl.col("ad_name"))
    )


def by_ad() -> GroupingKey:
    return GroupingKey(
        name="ad",
        expr=ad_identity_expr(),
        attributes={
            "name": "ad_name",
            "campaign_name": "campaign_name",
            "adset_name": "adset_name",
            "objective": "objective",
            "image_url": "image_url",
            "post_link": "post_link",
            "title": "title",
            "body": "body",
        },
        objective_aware=True,
    )


def by_campaign() -> GroupingKey:
    return text_key(
        "campaign_name",
        attributes={"objective": "objective"},
        objective_aware=True,
    )


def by_account() -> GroupingKey:
    return text_key("account_name", attributes={"franchise": "franchise"})


def by_franchise() -> GroupingKey:
    return text_key("franchise")


def by_objective() -> GroupingKey:
    return text_key("objective", objective_aware=True)


def by_platform() -> GroupingKey:
    return text_key("platform", case_insensitive=True)


def by_age_bin() -> GroupingKey:
    return text_key("age_bin")


def by_city() -> GroupingKey:
    return GroupingKey(
        name="city",
        expr=pl.col("location").map_elements(
            clean_location_name, return_dtype=pl.Utf8
        ),
        case_insensitive=True,
    )


def by_interest() -> GroupingKey:
    return GroupingKey(
        name="interest",
        expr=pl.col("interests")
        .str.split(",")
        .list.eval(pl.element().str.strip_chars())
        .list.eval(pl.element().filter(pl.element() != "")),
        multi_valued=True,
        empty_label=NO_INTEREST,
    )


def by_weekday() -> GroupingKey:
    return GroupingKey(
        name="weekday",
        expr=pl.col("weekday").cast(pl.Int64).replace_strict(
            dict(enumerate(WEEKDAY_LABELS)), default=NO_DATE, return_dtype=pl.Utf8
        ),
        empty_label=NO_DATE,
    )


BUILTIN_KEYS = {
    "ad": by_ad,
    "campaign": by_campaign,
    "account": by_account,
    "franchise": by_franchise,
    "objective": by_objective,
    "platform": by_platform,
    "age_bin": by_age_bin,
    "city": by_city,
    "interest": by_interest,
    "weekday": by_weekday,
}


def get_key(name: str) -> GroupingKey:
    """Built-in grouping key by name."""
    try:
        return BUILTIN_KEYS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown grouping key '{name}'. Available: {sorted(BUILTIN_KEYS)}"
        ) from None
