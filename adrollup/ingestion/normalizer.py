"""Record normalizer: raw backend rows to canonical records."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import polars as pl

from ..models.ad_record import FRAME_SCHEMA, AdRecord, RawAdRow
from .enricher import LeadDefinition, enrich
from .schema import SourceSchema

logger = logging.getLogger(__name__)


def rename_row(raw: Mapping[str, Any], schema: SourceSchema) -> dict[str, Any]:
    """Re-key a backend row by internal column names.

    Keys already using an internal name are accepted as well.
    """
    raw_to_internal = schema.raw_to_internal
    renamed: dict[str, Any] = {}
    for key, value in raw.items():
        internal = raw_to_internal.get(key, key)
        # Raw names win over internal aliases when both are present
        if internal in renamed and key not in raw_to_internal:
            continue
        renamed[internal] = value
    return renamed


def normalize_row(raw: Mapping[str, Any], schema: SourceSchema) -> AdRecord | None:
    """Map one raw backend row to an AdRecord.

    Never raises: numbers are coerced, empty text gets its placeholder.
    Returns None when every identity field is empty.
    """
    row = RawAdRow.model_validate(rename_row(raw, schema))
    if not row.has_identity(schema.identity_columns):
        return None

    values = row.model_dump()
    for name, placeholder in schema.placeholders.items():
        if not values.get(name):
            values[name] = placeholder
    return AdRecord.model_validate(values)


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    schema: SourceSchema | None = None,
    lead_definition: LeadDefinition | str = LeadDefinition.MESSAGES,
) -> pl.DataFrame:
    """Normalize and enrich a batch of backend rows into a frame."""
    schema = schema or SourceSchema.default()

    records: list[dict[str, Any]] = []
    skipped = 0
    for raw in rows:
        record = normalize_row(raw, schema)
        if record is None:
            skipped += 1
            continue
        records.append(record.model_dump())

    if skipped:
        logger.debug("Skipped %d rows without any identifying field", skipped)

    if records:
        df = pl.from_dicts(records, schema=FRAME_SCHEMA)
    else:
        df = pl.DataFrame(schema=FRAME_SCHEMA)
    return enrich(df, lead_definition)


def empty_frame(
    lead_definition: LeadDefinition | str = LeadDefinition.MESSAGES,
) -> pl.DataFrame:
    """Normalized frame with no rows."""
    return enrich(pl.DataFrame(schema=FRAME_SCHEMA), lead_definition)
