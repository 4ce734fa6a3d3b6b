"""
Edit-command dispatch for a single budget version.

`apply_command` is the only way edits reach a BudgetModel: it validates the
command against a deep copy, recomputes the copy, and returns it. The caller's
model is never touched, so a rejected command leaves the prior state intact.
Version commands (lock/fork) are routed by the workspace in `versioning`.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from shared.budget_settings import BudgetSettings

from .aggregator import estimate_labor
from .assumptions import edit_assumption
from .budget_model import HOURLY_LABOR, BudgetModel, ensure_mutable, get_block, recompute, touch
from .errors import InvalidInputError, UnknownCommandError
from .summary import build_summary
from .validation import require_non_negative, require_text

CommandOp = Literal[
    "add",
    "remove",
    "editField",
    "editAssumption",
    "editPrice",
    "lockVersion",
    "forkVersion",
    "seedHourlyLabor",
]

MODEL_OPS = frozenset({"add", "remove", "editField", "editAssumption", "editPrice", "seedHourlyLabor"})
VERSION_OPS = frozenset({"lockVersion", "forkVersion"})


@dataclass
class BudgetCommand:
    op: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CommandResult:
    model: BudgetModel
    last_line_id: Optional[str] = None


def apply_command(model: BudgetModel, command: BudgetCommand, settings: BudgetSettings) -> CommandResult:
    """
    Apply one edit command and return the recomputed result.

    Raises:
        ImmutableBudgetError: the model is locked or closed.
        RowNotFoundError: remove/editField referenced an unknown line id.
        InvalidInputError: malformed payload, out-of-constraint value, or a value
            large enough to overflow a computed total or ratio.
        UnknownCommandError: `command.op` is not an edit operation.
    """
    if command.op not in MODEL_OPS:
        raise UnknownCommandError(f"Unsupported budget command '{command.op}'", field="op")

    ensure_mutable(model)
    working = copy.deepcopy(model)
    payload = command.payload or {}
    last_line_id: Optional[str] = None

    if command.op == "add":
        block = get_block(working, require_text("block", _require(payload, "block")))
        fields = payload.get("fields") or {}
        if not isinstance(fields, dict):
            raise InvalidInputError("fields must be an object", field="fields")
        last_line_id = block.add_line(working.assumptions.timeframe_months, fields)
    elif command.op == "remove":
        block = get_block(working, require_text("block", _require(payload, "block")))
        block.remove_line(require_text("line_id", _require(payload, "line_id")))
    elif command.op == "editField":
        block = get_block(working, require_text("block", _require(payload, "block")))
        block.edit_line(
            require_text("line_id", _require(payload, "line_id")),
            require_text("field", _require(payload, "field")),
            _require(payload, "value"),
            working.assumptions.timeframe_months,
        )
    elif command.op == "editAssumption":
        working.assumptions = edit_assumption(
            working.assumptions,
            require_text("field", _require(payload, "field")),
            _require(payload, "value"),
        )
    elif command.op == "editPrice":
        working.price_per_unit = require_non_negative("price_per_unit", _require(payload, "value"))
    elif command.op == "seedHourlyLabor":
        last_line_id = _seed_hourly_labor(working, settings)

    recompute(working)
    _ensure_finite_outputs(working, settings, _edited_field(command.op, payload))
    touch(working)
    return CommandResult(model=working, last_line_id=last_line_id)


def _seed_hourly_labor(model: BudgetModel, settings: BudgetSettings) -> str:
    """Copy the loaded labor estimate into the Hourly Labor block's budgeted line."""
    loaded_labor_cost = estimate_labor(model.assumptions, settings).loaded_labor_cost
    if loaded_labor_cost is None:
        raise InvalidInputError(
            "Loaded labor cost is undefined while units_per_hour is zero", field="units_per_hour"
        )

    block = get_block(model, HOURLY_LABOR)
    if not block.lines:
        return block.add_line(
            model.assumptions.timeframe_months,
            {"type": "Production Labor", "estimated_cost": loaded_labor_cost},
        )

    line = block.lines[0]
    block.edit_line(line.id, "estimated_cost", loaded_labor_cost, model.assumptions.timeframe_months)
    return line.id


def _require(payload: Dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise InvalidInputError(f"Command payload is missing '{key}'", field=key)
    return payload[key]


_EDITED_FIELD_BY_OP = {
    "add": "fields",
    "remove": "line_id",
    "editPrice": "price_per_unit",
    "seedHourlyLabor": "estimated_cost",
}


def _edited_field(op: str, payload: Dict[str, Any]) -> str:
    if op in ("editField", "editAssumption"):
        return payload["field"]
    return _EDITED_FIELD_BY_OP[op]


def _ensure_finite_outputs(model: BudgetModel, settings: BudgetSettings, field_name: str) -> None:
    """Reject an edit whose inputs are finite but whose derived figures overflow to inf/NaN."""
    path = _first_non_finite(build_summary(model, settings).to_dict())
    if path is not None:
        raise InvalidInputError(
            f"{field_name} is too large: {path} would not be a finite number", field=field_name
        )


def _first_non_finite(value: Any, path: str = "") -> Optional[str]:
    """Return the dotted path of the first inf/NaN float inside a summary payload."""
    if isinstance(value, float):
        return None if math.isfinite(value) else path
    if isinstance(value, dict):
        items = [(f"{path}.{key}" if path else str(key), child) for key, child in value.items()]
    elif isinstance(value, list):
        items = [(f"{path}[{index}]", child) for index, child in enumerate(value)]
    else:
        return None
    for child_path, child in items:
        found = _first_non_finite(child, child_path)
        if found is not None:
            return found
    return None
