"""
Shared utilities for campaign budget services.

This package contains code shared across services and scripts:
- budget_settings: Environment-driven planning constants and defaults
- observability: Telemetry and structured logging utilities
"""

from .budget_settings import (
    SUPPORTED_PROJECTS,
    BudgetSettings,
    BudgetSettingsError,
    load_budget_settings,
)

__all__ = [
    "SUPPORTED_PROJECTS",
    "BudgetSettings",
    "BudgetSettingsError",
    "load_budget_settings",
]
