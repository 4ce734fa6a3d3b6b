from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import InvalidInputError, RowNotFoundError
from .line_items import LineItem, LineKind, build_line, line_to_dict, refresh_budgeted, with_field


@dataclass
class Block:
    """
    A named ledger of line items that all share one row shape.

    Totals are computed from the current lines on every read so they can never
    drift from `sum(line.budgeted)` / `sum(line.actual)`. Line order is display
    order only.
    """

    key: str
    label: str
    kind: LineKind
    lines: List[LineItem] = field(default_factory=list)
    add_defaults: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_budgeted(self) -> float:
        return float(sum(line.budgeted for line in self.lines))

    @property
    def total_actual(self) -> float:
        return float(sum(line.actual for line in self.lines))

    @property
    def delta(self) -> float:
        return self.total_actual - self.total_budgeted

    def find_line(self, line_id: str) -> LineItem:
        return self.lines[self._index_of(line_id)]

    def add_line(self, timeframe_months: int, defaults: Optional[Dict[str, Any]] = None) -> str:
        """
        Append a line built from the block's add defaults overlaid with `defaults`.

        Expense lines without an explicit `months` inherit the current timeframe.
        Returns the new line id.
        """
        fields = {**self.add_defaults, **(defaults or {})}
        if self.kind == "expense":
            fields.setdefault("months", timeframe_months)

        line = build_line(self.kind, fields, timeframe_months)
        if any(existing.id == line.id for existing in self.lines):
            raise InvalidInputError(f"Block '{self.key}' already has a line with id '{line.id}'", field="id")

        self.lines.append(line)
        return line.id

    def remove_line(self, line_id: str) -> LineItem:
        return self.lines.pop(self._index_of(line_id))

    def edit_line(self, line_id: str, field_name: str, value: Any, timeframe_months: int) -> LineItem:
        """
        Set one field on a line and recompute that line's budgeted value.

        The replacement line is fully validated before it is swapped in, so a
        rejected edit leaves the block untouched.
        """
        index = self._index_of(line_id)
        updated = with_field(self.lines[index], field_name, value, timeframe_months)
        self.lines[index] = updated
        return updated

    def recompute(self, timeframe_months: int) -> None:
        for line in self.lines:
            refresh_budgeted(line, timeframe_months)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.label,
            "kind": self.kind,
            "lines": [line_to_dict(line) for line in self.lines],
            "total_budgeted": self.total_budgeted,
            "total_actual": self.total_actual,
            "delta": self.delta,
        }

    def _index_of(self, line_id: str) -> int:
        for index, line in enumerate(self.lines):
            if line.id == line_id:
                return index
        raise RowNotFoundError(self.key, line_id)
