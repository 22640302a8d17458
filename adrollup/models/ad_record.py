"""Pydantic models for ad-performance rows."""

from datetime import date
from typing import Any, Optional

import polars as pl
from pydantic import BaseModel, ConfigDict, field_validator

from .coercion import coerce_date, coerce_number, coerce_text

TEXT_FIELDS = (
    "unique_id",
    "franchise",
    "account_id",
    "account_name",
    "campaign_id",
    "campaign_name",
    "adset_id",
    "adset_name",
    "ad_id",
    "ad_name",
    "objective",
    "platform",
    "interests",
    "location",
    "image_url",
    "title",
    "body",
    "post_link",
)

NUMERIC_FIELDS = (
    "spend",
    "cpc",
    "ctr",
    "cpm",
    "frequency",
    "reach",
    "impressions",
    "clicks",
    "form_leads",
    "purchases",
    "purchase_value",
    "messages_started",
    "messages_connections",
    "messages_new_contacts",
    "messages_depth_2",
    "messages_depth_3",
    "age_min",
    "age_max",
)

# Column order and dtypes of a normalized frame (before enrichment).
FRAME_SCHEMA: dict[str, pl.DataType] = {
    **{name: pl.Utf8 for name in TEXT_FIELDS},
    "date_start": pl.Date,
    **{name: pl.Float64 for name in NUMERIC_FIELDS},
}


class RawAdRow(BaseModel):
    """Loosely typed backend row, keyed by internal column names.

    Every field is optional and coerced on the way in: numbers default to 0.0,
    text to "" and unparseable dates to None. Validation never fails.
    """

    model_config = ConfigDict(extra="ignore")

    unique_id: str = ""
    franchise: str = ""
    account_id: str = ""
    account_name: str = ""
    campaign_id: str = ""
    campaign_name: str = ""
    adset_id: str = ""
    adset_name: str = ""
    ad_id: str = ""
    ad_name: str = ""
    objective: str = ""
    platform: str = ""
    interests: str = ""
    location: str = ""
    image_url: str = ""
    title: str = ""
    body: str = ""
    post_link: str = ""

    date_start: Optional[date] = None

    spend: float = 0.0
    cpc: float = 0.0
    ctr: float = 0.0
    cpm: float = 0.0
    frequency: float = 0.0
    reach: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    form_leads: float = 0.0
    purchases: float = 0.0
    purchase_value: float = 0.0
    messages_started: float = 0.0
    messages_connections: float = 0.0
    messages_new_contacts: float = 0.0
    messages_depth_2: float = 0.0
    messages_depth_3: float = 0.0
    age_min: float = 0.0
    age_max: float = 0.0

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return coerce_text(value)

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _number(cls, value: Any) -> float:
        return coerce_number(value)

    @field_validator("date_start", mode="before")
    @classmethod
    def _day(cls, value: Any) -> date | None:
        return coerce_date(value)

    def has_identity(self, identity_columns: list[str]) -> bool:
        """True when at least one identifying field is non-empty."""
        return any(getattr(self, name, "") for name in identity_columns)


class AdRecord(BaseModel):
    """Canonical normalized row.

    Numeric metrics are finite floats, categorical fields carry their
    placeholder when the source was empty, and ``date_start`` is a calendar
    day (or None when the source date could not be read).
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    # Identification
    unique_id: str
    franchise: str
    account_id: str
    account_name: str
    campaign_id: str
    campaign_name: str
    adset_id: str
    adset_name: str
    ad_id: str
    ad_name: str
    objective: str
    date_start: Optional[date] = None

    # Cost metrics as reported per row
    spend: float
    cpc: float
    ctr: float
    cpm: float
    frequency: float
    reach: float

    # Funnel volumes
    impressions: float
    clicks: float
    form_leads: float
    purchases: float
    purchase_value: float
    messages_started: float
    messages_connections: float
    messages_new_contacts: float
    messages_depth_2: float
    messages_depth_3: float

    # Targeting
    platform: str
    interests: str
    location: str
    age_min: float
    age_max: float

    # Creative
    image_url: str
    title: str
    body: str
    post_link: str
