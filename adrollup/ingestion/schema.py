"""Schema registry loading."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import SchemaLoadError

DEFAULT_REGISTRY_PATH = Path(__file__).parent.parent / "config" / "schema_registry.yaml"
DEFAULT_SCHEMA_NAME = "dashboard_view"


def load_registry(path: Path | None = None) -> dict[str, Any]:
    """Load the YAML schema registry."""
    path = path or DEFAULT_REGISTRY_PATH
    try:
        with open(path, encoding="utf-8") as f:
            registry = yaml.safe_load(f)
    except Exception as e:
        raise SchemaLoadError(f"Failed to load schema from {path}: {e}") from e
    if not isinstance(registry, dict):
        raise SchemaLoadError(f"Schema registry at {path} is not a mapping")
    return registry


@dataclass(frozen=True)
class SourceSchema:
    """Column layout of one backend source.

    Attributes:
        column_map: {internal_name: raw_column_name}
        required_columns: Internal names a loaded file must provide
        numeric_columns: Internal names coerced to finite floats
        placeholders: {internal_name: text used when the value is empty}
        identity_columns: A row with all of these empty is skipped
        date_column: Internal name of the per-row calendar day
    """

    column_map: dict[str, str]
    required_columns: list[str] = field(default_factory=list)
    numeric_columns: list[str] = field(default_factory=list)
    placeholders: dict[str, str] = field(default_factory=dict)
    identity_columns: list[str] = field(default_factory=list)
    date_column: str = "date_start"

    @property
    def raw_to_internal(self) -> dict[str, str]:
        return {raw: internal for internal, raw in self.column_map.items()}

    @classmethod
    def from_registry(
        cls, registry: dict[str, Any], name: str = DEFAULT_SCHEMA_NAME
    ) -> "SourceSchema":
        try:
            section = registry[name]
        except KeyError as e:
            raise SchemaLoadError(f"Unknown schema '{name}' in registry") from e
        return cls(
            column_map=dict(section["column_map"]),
            required_columns=list(section.get("required_columns", [])),
            numeric_columns=list(section.get("numeric_columns", [])),
            placeholders={
                k: "" if v is None else str(v)
                for k, v in (section.get("placeholders") or {}).items()
            },
            identity_columns=list(section.get("identity_columns", [])),
            date_column=section.get("date_column", "date_start"),
        )

    @classmethod
    def default(cls) -> "SourceSchema":
        """Schema for the unified dashboard view from the bundled registry."""
        return cls.from_registry(load_registry())
