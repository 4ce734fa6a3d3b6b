"""
Error taxonomy for budget mutations.

Every error is recoverable at the single command call site: the command that
raised it leaves the working model exactly as it was before the call.
"""

from __future__ import annotations


class BudgetModelError(Exception):
    """Base class for recoverable budget model failures."""

    code = "budget_model_error"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidInputError(BudgetModelError):
    """A field received a non-finite, mistyped, or out-of-constraint value."""

    code = "invalid_input"


class InvalidStatusTransitionError(InvalidInputError):
    """A lock requested a status that is not strictly after the current one."""

    code = "invalid_status_transition"


class UnknownCommandError(InvalidInputError):
    code = "unknown_command"


class RowNotFoundError(BudgetModelError):
    """A remove/edit referenced a line id that the block does not contain."""

    code = "row_not_found"

    def __init__(self, block_key: str, line_id: str) -> None:
        super().__init__(f"Block '{block_key}' has no line with id '{line_id}'", field="line_id")
        self.block_key = block_key
        self.line_id = line_id


class ImmutableBudgetError(BudgetModelError):
    """A mutation targeted a locked or closed budget version."""

    code = "immutable_budget"

    def __init__(self, version: str, status: str) -> None:
        super().__init__(
            f"Budget version '{version}' ({status}) is locked; fork a new version to keep editing"
        )
        self.version = version
        self.status = status


class VersionNotFoundError(BudgetModelError):
    code = "version_not_found"

    def __init__(self, version: str) -> None:
        super().__init__(f"No locked budget version '{version}'", field="version")
        self.version = version


class UnknownProjectError(BudgetModelError):
    code = "project_not_found"

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Unknown project '{project_id}'", field="project_id")
        self.project_id = project_id
