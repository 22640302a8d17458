"""Services layer for dashboard generation."""

from .dashboard_service import (
    ALL,
    DashboardFilter,
    DashboardService,
    apply_filters,
    list_accounts,
    list_franchises,
)
from .generation import GenerationGuard

__all__ = [
    "ALL",
    "DashboardFilter",
    "DashboardService",
    "GenerationGuard",
    "apply_filters",
    "list_accounts",
    "list_franchises",
]
