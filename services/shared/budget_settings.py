from __future__ import annotations

"""
Shared helpers for configuring the budget model service.

Labor-planning constants (work week, weeks per month) and the underwater
pricing markup are read from the environment once so every calculator in the
service works from the same numbers. Defaults reproduce the planning sheet the
field team already uses: a 40-hour week, 4.33 weeks per month, and a 15%
markup on the break-even price when a budget runs underwater.
"""

import os
from dataclasses import dataclass
from typing import Optional

SUPPORTED_PROJECTS = frozenset({"ca-45", "nj-11", "va-24"})

HOURS_PER_WEEK_ENV = "BUDGET_HOURS_PER_WEEK"
WEEKS_PER_MONTH_ENV = "BUDGET_WEEKS_PER_MONTH"
UNDERWATER_MARKUP_ENV = "BUDGET_UNDERWATER_MARKUP"
DEFAULT_PROJECT_ENV = "BUDGET_DEFAULT_PROJECT"


class BudgetSettingsError(RuntimeError):
    """Raised when budget service configuration cannot be constructed."""


@dataclass(frozen=True, slots=True)
class BudgetSettings:
    hours_per_week: float = 40.0
    weeks_per_month: float = 4.33
    underwater_markup: float = 1.15
    default_project: str = "ca-45"


def load_budget_settings(
    *,
    default_hours_per_week: float = 40.0,
    default_weeks_per_month: float = 4.33,
    default_underwater_markup: float = 1.15,
    default_project: str = "ca-45",
) -> BudgetSettings:
    """
    Construct BudgetSettings from the environment.

    Args:
        default_*: Fallback values when the env var is unset/empty.
    Raises:
        BudgetSettingsError: when a value is non-numeric or outside its allowed range.
    """

    hours_per_week = _parse_float(os.getenv(HOURS_PER_WEEK_ENV), default_hours_per_week, HOURS_PER_WEEK_ENV)
    weeks_per_month = _parse_float(os.getenv(WEEKS_PER_MONTH_ENV), default_weeks_per_month, WEEKS_PER_MONTH_ENV)
    underwater_markup = _parse_float(
        os.getenv(UNDERWATER_MARKUP_ENV), default_underwater_markup, UNDERWATER_MARKUP_ENV
    )
    project = _normalize_project(os.getenv(DEFAULT_PROJECT_ENV, default_project))

    if hours_per_week <= 0:
        raise BudgetSettingsError(f"{HOURS_PER_WEEK_ENV} must be positive (received {hours_per_week})")
    if weeks_per_month <= 0:
        raise BudgetSettingsError(f"{WEEKS_PER_MONTH_ENV} must be positive (received {weeks_per_month})")
    if underwater_markup < 1.0:
        raise BudgetSettingsError(
            f"{UNDERWATER_MARKUP_ENV} must be at least 1.0 (received {underwater_markup})"
        )

    return BudgetSettings(
        hours_per_week=hours_per_week,
        weeks_per_month=weeks_per_month,
        underwater_markup=underwater_markup,
        default_project=project,
    )


def _normalize_project(raw_value: Optional[str]) -> str:
    candidate = (raw_value or "").strip().lower()
    if not candidate:
        candidate = "ca-45"

    if candidate not in SUPPORTED_PROJECTS:
        raise BudgetSettingsError(f"Unsupported project '{candidate}'")
    return candidate


def _parse_float(raw_value: Optional[str], default: float, env_key: str) -> float:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return float(raw_value)
    except ValueError as exc:
        raise BudgetSettingsError(f"{env_key} must be numeric (received '{raw_value}')") from exc
