"""
Line-item variants for budget blocks.

Each variant carries an id, a free-entry `actual`, and a `budgeted` value that is
always derived from the variant's own inputs through `compute_budgeted`. Blocks
never trust a stored `budgeted`; `refresh_budgeted` rewrites it from the inputs
after every mutation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, ClassVar, Dict, Literal, Union
from uuid import uuid4

from .errors import InvalidInputError
from .validation import require_count, require_finite, require_text

LineKind = Literal["salary", "expense", "simple_cost"]


@dataclass
class SalaryLine:
    id: str
    position: str
    pay_per_month: float
    role_count: int
    actual: float = 0.0
    budgeted: float = 0.0

    kind: ClassVar[LineKind] = "salary"

    def compute_budgeted(self, timeframe_months: int) -> float:
        return self.pay_per_month * self.role_count * timeframe_months


@dataclass
class ExpenseLine:
    id: str
    type: str
    monthly_cost: float
    units: int
    months: int
    actual: float = 0.0
    budgeted: float = 0.0

    kind: ClassVar[LineKind] = "expense"

    def compute_budgeted(self, timeframe_months: int) -> float:
        # Expense lines carry their own month count; the block timeframe does not apply.
        return self.monthly_cost * self.units * self.months


@dataclass
class SimpleCostLine:
    """Flat estimate used for hourly-labor overrides, recruiting, and misc costs."""

    id: str
    type: str
    estimated_cost: float
    actual: float = 0.0
    budgeted: float = 0.0

    kind: ClassVar[LineKind] = "simple_cost"

    def compute_budgeted(self, timeframe_months: int) -> float:
        return self.estimated_cost


LineItem = Union[SalaryLine, ExpenseLine, SimpleCostLine]

LINE_CLASSES: Dict[LineKind, type] = {
    "salary": SalaryLine,
    "expense": ExpenseLine,
    "simple_cost": SimpleCostLine,
}

_Validator = Callable[[str, Any], Any]

# Editable fields per variant; `id` and `budgeted` are read-only.
EDITABLE_FIELDS: Dict[LineKind, Dict[str, _Validator]] = {
    "salary": {
        "position": require_text,
        "pay_per_month": require_finite,
        "role_count": require_count,
        "actual": require_finite,
    },
    "expense": {
        "type": require_text,
        "monthly_cost": require_finite,
        "units": require_count,
        "months": require_count,
        "actual": require_finite,
    },
    "simple_cost": {
        "type": require_text,
        "estimated_cost": require_finite,
        "actual": require_finite,
    },
}


def new_line_id() -> str:
    return uuid4().hex[:12]


def refresh_budgeted(line: LineItem, timeframe_months: int) -> LineItem:
    """Recompute `line.budgeted` in place from the line's own inputs and return it."""
    line.budgeted = float(line.compute_budgeted(timeframe_months))
    return line


def validate_line_field(kind: LineKind, field: str, value: Any) -> Any:
    """
    Validate a single field edit for a line variant.

    Raises:
        InvalidInputError: the field is unknown/read-only for this variant, or the
            value violates the field's constraint.
    """
    validators = EDITABLE_FIELDS[kind]
    validator = validators.get(field)
    if validator is None:
        raise InvalidInputError(f"Field '{field}' is not editable on {kind} lines", field=field)
    return validator(field, value)


def build_line(kind: LineKind, fields: Dict[str, Any], timeframe_months: int) -> LineItem:
    """
    Construct a validated line of `kind` from `fields` and compute its budgeted value.

    `fields` must provide every input of the variant; `id` is generated when absent
    and `actual` defaults to zero.
    """
    validators = EDITABLE_FIELDS[kind]
    unknown = set(fields) - set(validators) - {"id"}
    if unknown:
        name = sorted(unknown)[0]
        raise InvalidInputError(f"Field '{name}' is not editable on {kind} lines", field=name)

    values: Dict[str, Any] = {"actual": 0.0}
    for field, value in fields.items():
        if field == "id":
            values["id"] = require_text("id", value)
        else:
            values[field] = validate_line_field(kind, field, value)

    missing = [field for field in validators if field not in values]
    if missing:
        raise InvalidInputError(f"{kind} line is missing '{missing[0]}'", field=missing[0])

    line_id = values.pop("id", None) or new_line_id()
    line = LINE_CLASSES[kind](id=line_id, **values)
    return refresh_budgeted(line, timeframe_months)


def with_field(line: LineItem, field: str, value: Any, timeframe_months: int) -> LineItem:
    """Return a copy of `line` with one validated field changed and budgeted recomputed."""
    validated = validate_line_field(line.kind, field, value)
    updated = replace(line, **{field: validated})
    return refresh_budgeted(updated, timeframe_months)


def line_to_dict(line: LineItem) -> Dict[str, Any]:
    payload = asdict(line)
    payload["kind"] = line.kind
    payload["delta"] = line.actual - line.budgeted
    return payload
