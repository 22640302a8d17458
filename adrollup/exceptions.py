"""Custom exceptions for ingestion and aggregation."""

from typing import Any


class IngestionError(Exception):
    """Base exception for problems reading backend rows or exports."""

    pass


class SchemaLoadError(IngestionError):
    """Schema registry or dashboard settings could not be loaded."""

    pass


class DataValidationError(IngestionError):
    """Normalized rows failed validation against the AdRecord model."""

    def __init__(self, errors: list[dict[str, Any]], row_count: int):
        self.errors = errors
        self.row_count = row_count
        first = errors[0] if errors else "N/A"
        super().__init__(
            f"{len(errors)} of {row_count} ad rows are invalid. First error: {first}"
        )


class ColumnMappingError(IngestionError):
    """Export lacks backend columns the dashboard needs."""

    def __init__(self, missing_columns: list[str], available_columns: list[str]):
        self.missing_columns = missing_columns
        self.available_columns = available_columns
        shown = ", ".join(available_columns[:10])
        super().__init__(
            f"Export is missing backend columns {missing_columns} "
            f"(found: {shown}{', ...' if len(available_columns) > 10 else ''})"
        )


class UnknownMetricError(ValueError):
    """Sort or lookup requested for a metric that groups do not carry."""

    def __init__(self, metric: str, available: list[str]):
        self.metric = metric
        self.available = available
        super().__init__(f"Unknown metric '{metric}'. Available: {available}")


class InvalidDateRangeError(ValueError):
    """Date range whose start falls after its end."""

    pass
