"""Pytest configuration for budget-model-service tests.

Puts the service root on sys.path so tests import the service as `src`, and the
services root so `shared` resolves without installing the project.
"""

import sys
from pathlib import Path

import pytest

SERVICE_ROOT = Path(__file__).resolve().parents[1]
SERVICES_ROOT = SERVICE_ROOT.parent

for path in (SERVICE_ROOT, SERVICES_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from shared.budget_settings import BudgetSettings  # noqa: E402


@pytest.fixture
def settings() -> BudgetSettings:
    return BudgetSettings()
