"""Shared fixtures: raw backend rows and normalized frames."""

from collections.abc import Callable
from typing import Any

import polars as pl
import pytest

from adrollup.ingestion import LeadDefinition, SourceSchema, normalize_rows


@pytest.fixture(scope="session")
def schema() -> SourceSchema:
    return SourceSchema.default()


@pytest.fixture
def make_frame(schema: SourceSchema) -> Callable[..., pl.DataFrame]:
    """Normalize raw backend rows (backend column names) into a frame."""

    def _make(
        rows: list[dict[str, Any]],
        lead_definition: LeadDefinition = LeadDefinition.MESSAGES,
    ) -> pl.DataFrame:
        return normalize_rows(rows, schema, lead_definition)

    return _make
