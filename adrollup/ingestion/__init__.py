from .cleaner import apply_cleaning
from .enricher import LeadDefinition, enrich
from .loader import DataIngestionPipeline
from .normalizer import empty_frame, normalize_row, normalize_rows
from .schema import SourceSchema, load_registry

__all__ = [
    "DataIngestionPipeline",
    "LeadDefinition",
    "SourceSchema",
    "apply_cleaning",
    "empty_frame",
    "enrich",
    "load_registry",
    "normalize_row",
    "normalize_rows",
]
