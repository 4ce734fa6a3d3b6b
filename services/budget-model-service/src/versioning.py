"""
Budget version workflow: draft -> approved -> in-flight -> closed.

Locking captures an immutable copy of the working model under its version tag
and records the status transition. A locked model rejects every edit; editing
resumes only on a forked copy, which starts over as a draft under a new tag
while the locked copy stays retrievable for audit and delta comparison.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from shared.budget_settings import BudgetSettings
from shared.observability.fingerprint import hash_payload
from shared.observability.telemetry import current_request_id

from .budget_model import STATUS_ORDER, BudgetModel, BudgetStatus, next_status, touch
from .commands import VERSION_OPS, BudgetCommand, CommandResult, apply_command
from .errors import (
    InvalidInputError,
    InvalidStatusTransitionError,
    UnknownCommandError,
    VersionNotFoundError,
)
from .summary import BudgetSummary, build_summary
from .validation import require_text

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"^v(\d+)$")


@dataclass
class LockedVersion:
    version: str
    status: BudgetStatus
    locked_at: datetime
    fingerprint: str
    model: BudgetModel


@dataclass
class VersionDelta:
    """Working version minus the most recently locked version."""

    previous_version: str
    current_version: str
    total_overhead_budgeted: float
    total_overhead_actual: float
    profit_budgeted: float
    profit_actual: float
    margin_budgeted: Optional[float]


def resolve_target_status(current: BudgetStatus, requested: Optional[str]) -> BudgetStatus:
    """
    Pick the status a lock moves to.

    Defaults to the next status in the workflow. An explicit target may skip
    ahead but never stay put or move backwards.
    """
    if requested is None:
        target = next_status(current)
        if target is None:
            raise InvalidStatusTransitionError(f"A {current} budget cannot advance further", field="status")
        return target

    if requested not in STATUS_ORDER:
        raise InvalidInputError(f"Unknown budget status '{requested}'", field="status")
    if STATUS_ORDER.index(requested) <= STATUS_ORDER.index(current):
        raise InvalidStatusTransitionError(
            f"Cannot move a {current} budget to {requested}; statuses only move forward", field="status"
        )
    return requested  # type: ignore[return-value]


def increment_version(version: str, taken: set[str]) -> str:
    match = _VERSION_PATTERN.match(version)
    number = int(match.group(1)) + 1 if match else 2
    candidate = f"v{number}"
    while candidate in taken:
        number += 1
        candidate = f"v{number}"
    return candidate


class BudgetWorkspace:
    """
    Single-editor holder for one project's working budget and its locked history.

    `dispatch` is the entry point for every command; each call either replaces
    the working model with a fully recomputed copy or raises without changing
    anything.
    """

    def __init__(self, model: BudgetModel, settings: BudgetSettings) -> None:
        self._model = model
        self._settings = settings
        self._history: Dict[str, LockedVersion] = {}

    @property
    def current(self) -> BudgetModel:
        return self._model

    @property
    def settings(self) -> BudgetSettings:
        return self._settings

    def dispatch(self, command: BudgetCommand) -> CommandResult:
        if command.op not in VERSION_OPS:
            result = apply_command(self._model, command, self._settings)
            self._model = result.model
            return result

        payload = command.payload or {}
        if command.op == "lockVersion":
            status = payload.get("status")
            if status is not None:
                status = require_text("status", status)
            self.lock_version(status)
        elif command.op == "forkVersion":
            version = payload.get("version")
            if version is not None:
                version = require_text("version", version)
            self.fork_version(version)
        else:  # pragma: no cover - VERSION_OPS and the branches above move together
            raise UnknownCommandError(f"Unsupported budget command '{command.op}'", field="op")
        return CommandResult(model=self._model)

    def lock_version(self, status: Optional[str] = None) -> LockedVersion:
        """
        Freeze the working model under its current tag and advance its status.

        Locking an already-locked version only moves its status forward
        (approved -> in-flight -> closed); its numbers stay frozen and the
        snapshot under the same tag is replaced with the new status.

        Raises:
            InvalidStatusTransitionError: `status` is not after the current status,
                or the version is already closed.
        """
        model = self._model
        target = resolve_target_status(model.status, status)

        locked = copy.deepcopy(model)
        locked.status = target
        locked.locked = True
        touch(locked)

        snapshot = LockedVersion(
            version=locked.version,
            status=target,
            locked_at=locked.updated_at,
            fingerprint=hash_payload(build_summary(locked, self._settings).to_dict()),
            model=copy.deepcopy(locked),
        )
        self._history[locked.version] = snapshot
        self._model = locked

        logger.info(
            {
                "event": "budget_version_locked",
                "request_id": current_request_id(),
                "project_id": locked.project_id,
                "version": locked.version,
                "from_status": model.status,
                "to_status": target,
                "relocked": model.locked,
                "fingerprint": snapshot.fingerprint,
            }
        )
        return snapshot

    def fork_version(self, version: Optional[str] = None) -> BudgetModel:
        """
        Start a new draft from the locked working model (copy-on-write).

        Raises:
            InvalidInputError: the working model is not locked, or `version` is
                already in use.
        """
        source = self._model
        if not source.locked:
            raise InvalidInputError(
                f"Budget version '{source.version}' is still editable; lock it before forking",
                field="version",
            )

        taken = set(self._history) | {source.version}
        if version is None:
            version = increment_version(source.version, taken)
        elif not version.strip():
            raise InvalidInputError("version must not be blank", field="version")
        elif version in taken:
            raise InvalidInputError(f"Budget version '{version}' already exists", field="version")

        forked = copy.deepcopy(source)
        forked.version = version
        forked.status = "draft"
        forked.locked = False
        touch(forked)
        self._model = forked

        logger.info(
            {
                "event": "budget_version_forked",
                "request_id": current_request_id(),
                "project_id": forked.project_id,
                "from_version": source.version,
                "version": version,
            }
        )
        return forked

    def get_version(self, version: str) -> LockedVersion:
        snapshot = self._history.get(version)
        if snapshot is None:
            raise VersionNotFoundError(version)
        return snapshot

    def list_versions(self) -> List[LockedVersion]:
        return list(self._history.values())

    def summary(self) -> BudgetSummary:
        return build_summary(self._model, self._settings)

    def version_summary(self, version: str) -> BudgetSummary:
        return build_summary(self.get_version(version).model, self._settings)

    def version_delta(self) -> Optional[VersionDelta]:
        """Compare the working model with the latest locked version under another tag."""
        previous = None
        for snapshot in reversed(list(self._history.values())):
            if snapshot.version != self._model.version:
                previous = snapshot
                break
        if previous is None:
            return None

        current_summary = self.summary()
        previous_summary = build_summary(previous.model, self._settings)

        margin_delta: Optional[float] = None
        if current_summary.margin_budgeted is not None and previous_summary.margin_budgeted is not None:
            margin_delta = current_summary.margin_budgeted - previous_summary.margin_budgeted

        return VersionDelta(
            previous_version=previous.version,
            current_version=self._model.version,
            total_overhead_budgeted=current_summary.total_overhead_budgeted
            - previous_summary.total_overhead_budgeted,
            total_overhead_actual=current_summary.total_overhead_actual - previous_summary.total_overhead_actual,
            profit_budgeted=current_summary.profit_budgeted - previous_summary.profit_budgeted,
            profit_actual=current_summary.profit_actual - previous_summary.profit_actual,
            margin_budgeted=margin_delta,
        )
