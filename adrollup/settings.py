"""Dashboard defaults read from the schema registry."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import SchemaLoadError
from .ingestion.enricher import LeadDefinition
from .ingestion.schema import load_registry


@dataclass(frozen=True)
class DashboardSettings:
    """Run-wide choices shared by every view.

    Attributes:
        lead_definition: Which volumes count as leads
        top_creatives: Size of the top creatives list
        top_cities: Size of the city ranking
        top_interests: Size of the interest cloud
    """

    lead_definition: LeadDefinition = LeadDefinition.MESSAGES
    top_creatives: int = 5
    top_cities: int = 10
    top_interests: int = 25

    @classmethod
    def from_registry(cls, registry: dict[str, Any]) -> "DashboardSettings":
        top_n = registry.get("top_n") or {}
        try:
            return cls(
                lead_definition=LeadDefinition(
                    registry.get("lead_definition", LeadDefinition.MESSAGES.value)
                ),
                top_creatives=int(top_n.get("creatives", 5)),
                top_cities=int(top_n.get("cities", 10)),
                top_interests=int(top_n.get("interests", 25)),
            )
        except (TypeError, ValueError) as e:
            raise SchemaLoadError(f"Invalid dashboard settings: {e}") from e

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "DashboardSettings":
        """Load from a registry file; the bundled one by default."""
        return cls.from_registry(load_registry(path))
