"""Main data ingestion pipeline."""

import logging
from pathlib import Path
from typing import Any

import polars as pl
from pydantic import ValidationError

from ..exceptions import ColumnMappingError, DataValidationError
from ..models.ad_record import FRAME_SCHEMA, AdRecord
from .cleaner import apply_cleaning
from .enricher import LeadDefinition, enrich
from .schema import DEFAULT_SCHEMA_NAME, SourceSchema, load_registry

logger = logging.getLogger(__name__)


class DataIngestionPipeline:
    """Pipeline for loading, cleaning, enriching, and validating ad rows.

    Usage:
        pipeline = DataIngestionPipeline()
        df = pipeline.ingest(Path("exports/dashboard_view.csv"))
    """

    def __init__(
        self,
        schema_path: Path | None = None,
        schema_name: str = DEFAULT_SCHEMA_NAME,
    ):
        self.registry = load_registry(schema_path)
        self.schema = SourceSchema.from_registry(self.registry, schema_name)
        self.lead_definition = LeadDefinition(
            self.registry.get("lead_definition", LeadDefinition.MESSAGES.value)
        )

    def ingest(
        self,
        file_path: Path,
        lead_definition: LeadDefinition | str | None = None,
        validate: bool = False,
    ) -> pl.DataFrame:
        """Full pipeline: Load -> Rename -> Clean -> Enrich -> Validate.

        Args:
            file_path: Path to CSV, Parquet, JSON, NDJSON or Excel file
            lead_definition: Overrides the registry's lead definition
            validate: Whether to run Pydantic validation (default: False)

        Returns:
            Normalized and enriched Polars DataFrame
        """
        df = self._load(file_path)
        return self.ingest_frame(df, lead_definition=lead_definition, validate=validate)

    def ingest_frame(
        self,
        df: pl.DataFrame,
        lead_definition: LeadDefinition | str | None = None,
        validate: bool = False,
    ) -> pl.DataFrame:
        """Run Rename -> Clean -> Enrich -> Validate on an in-memory frame."""
        rows_in = len(df)

        # Rename columns to internal names
        df = self._rename_columns(df)

        # Coerce metrics, fill placeholders, parse dates
        df = self._clean(df)
        if len(df) < rows_in:
            logger.debug(
                "Dropped %d rows without any identifying field", rows_in - len(df)
            )

        # Canonical column order, extra source columns dropped
        df = df.select(list(FRAME_SCHEMA))

        df = enrich(df, lead_definition or self.lead_definition)

        if validate:
            self._validate(df)

        logger.info("Ingested %d ad rows", len(df))
        return df

    def read_rows(self, file_path: Path) -> list[dict[str, Any]]:
        """Raw rows of a file, keyed by its own column names."""
        return self._load(file_path).to_dicts()

    def _load(self, path: Path) -> pl.DataFrame:
        """Load data from CSV, Parquet, JSON or Excel."""
        suffix = path.suffix.lower()
        if suffix == ".csv":
            # Every column as text; the cleaner decides types
            return pl.read_csv(path, infer_schema_length=0)
        elif suffix == ".parquet":
            return pl.read_parquet(path)
        elif suffix == ".json":
            return pl.read_json(path)
        elif suffix in (".ndjson", ".jsonl"):
            return pl.read_ndjson(path)
        elif suffix in (".xlsx", ".xls"):
            return pl.read_excel(path)
        else:
            raise ValueError(f"Unsupported file type: {suffix}")

    def _rename_columns(self, df: pl.DataFrame) -> pl.DataFrame:
        """Rename columns from raw names to internal names.

        Columns already carrying an internal name are left as they are.
        """
        available = set(df.columns)
        rename_dict = {
            raw: internal
            for raw, internal in self.schema.raw_to_internal.items()
            if raw in available and raw != internal and internal not in available
        }
        df = df.rename(rename_dict)

        missing = [c for c in self.schema.required_columns if c not in df.columns]
        if missing:
            raise ColumnMappingError(
                [self.schema.column_map.get(c, c) for c in missing], sorted(available)
            )
        return df

    def _clean(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply cleaning transformations based on schema."""
        return apply_cleaning(
            df,
            numeric_cols=self.schema.numeric_columns,
            placeholders=self.schema.placeholders,
            date_col=self.schema.date_column,
            identity_cols=self.schema.identity_columns,
        )

    def _validate(self, df: pl.DataFrame) -> None:
        """Validate each row against the AdRecord model.

        Collects all errors before raising, for better debugging.
        """
        errors: list[dict[str, Any]] = []
        rows = df.to_dicts()

        for i, row in enumerate(rows):
            try:
                AdRecord.model_validate(row)
            except ValidationError as e:
                errors.append({"row": i, "errors": e.errors()})

        if errors:
            raise DataValidationError(errors, len(rows))
