"""
Budget Model Service applies campaign budget edits and serves the computed
budget, profitability, and version history to the dashboard and exporters.
"""

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from shared.budget_settings import BudgetSettings, BudgetSettingsError, load_budget_settings
from shared.observability.telemetry import (
    bind_request_context,
    current_request_id,
    ensure_request_id,
    reset_request_context,
    setup_telemetry,
)

from .budget_model import PROJECTS, create_default_budget, get_project
from .commands import BudgetCommand, CommandResult
from .errors import (
    BudgetModelError,
    ImmutableBudgetError,
    RowNotFoundError,
    UnknownProjectError,
    VersionNotFoundError,
)
from .formatting import format_summary_headlines
from .summary import BudgetSummary
from .versioning import BudgetWorkspace

logger = logging.getLogger(__name__)

app = FastAPI(title="Budget Model Service")
setup_telemetry(app, service_name="budget-model-service")


def _load_settings() -> BudgetSettings:
    return load_budget_settings()


try:
    BUDGET_SETTINGS = _load_settings()
except BudgetSettingsError as exc:
    logger.error("Failed to load budget settings: %s", exc)
    raise

_WORKSPACES: Dict[str, BudgetWorkspace] = {}


def reload_settings_for_tests() -> None:
    """
    Refresh settings and drop in-memory workspaces after tests mutate environment variables.
    """

    global BUDGET_SETTINGS

    BUDGET_SETTINGS = _load_settings()
    _WORKSPACES.clear()


def get_workspace(project_id: str) -> BudgetWorkspace:
    """Return the project's workspace, seeding a default budget on first access."""
    profile = get_project(project_id)
    workspace = _WORKSPACES.get(profile.id)
    if workspace is None:
        workspace = BudgetWorkspace(create_default_budget(profile.id), BUDGET_SETTINGS)
        _WORKSPACES[profile.id] = workspace
    return workspace


class ProjectModel(BaseModel):
    id: str
    label: str
    timeframe_months: int
    start_date: str
    end_date: str


class ProjectCatalogModel(BaseModel):
    default_project: str
    projects: List[ProjectModel]


class BudgetCommandPayload(BaseModel):
    op: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    def to_command(self) -> BudgetCommand:
        """Convert the validated request body into the internal command representation."""
        return BudgetCommand(op=self.op, payload=dict(self.payload))


class BlockSummaryModel(BaseModel):
    key: str
    name: str
    kind: str
    lines: List[Dict[str, Any]]
    total_budgeted: float
    total_actual: float
    delta: float


class BudgetSummaryModel(BaseModel):
    project_id: str
    project_label: str
    version: str
    status: str
    locked: bool
    updated_at: str
    assumptions: Dict[str, Any]
    price_per_unit: float
    blocks: List[BlockSummaryModel]
    labor_hours: float | None = None
    base_labor_cost: float | None = None
    effective_cost_multiplier: float
    loaded_labor_cost: float | None = None
    implied_staffing: int | None = None
    total_overhead_budgeted: float
    total_overhead_actual: float
    total_billed: float
    profit_budgeted: float
    profit_actual: float
    margin_budgeted: float | None = None
    margin_actual: float | None = None
    cost_per_unit: float | None = None
    break_even_price: float | None = None
    suggested_price_if_underwater: float | None = None
    underwater: bool
    recommendations: List[str]
    cost_per_cleared_applicant: float | None = None
    display: Dict[str, str]
    last_line_id: str | None = None


class LockedVersionModel(BaseModel):
    version: str
    status: str
    locked_at: str
    fingerprint: str


class VersionListModel(BaseModel):
    project_id: str
    current_version: str
    versions: List[LockedVersionModel]


class VersionDeltaModel(BaseModel):
    previous_version: str
    current_version: str
    total_overhead_budgeted: float
    total_overhead_actual: float
    profit_budgeted: float
    profit_actual: float
    margin_budgeted: float | None = None


def error_response(status_code: int, error_code: str, details: str, field: str | None = None) -> JSONResponse:
    content: Dict[str, Any] = {"error": error_code, "details": details}
    if field is not None:
        content["field"] = field
    return JSONResponse(status_code=status_code, content=content)


def _status_code_for(exc: BudgetModelError) -> int:
    if isinstance(exc, (RowNotFoundError, UnknownProjectError, VersionNotFoundError)):
        return 404
    if isinstance(exc, ImmutableBudgetError):
        return 409
    return 400


def _budget_error_response(exc: BudgetModelError) -> JSONResponse:
    return error_response(_status_code_for(exc), exc.code, exc.message, exc.field)


def _summary_payload(summary: BudgetSummary, result: CommandResult | None = None) -> Dict[str, Any]:
    payload = summary.to_dict()
    payload["display"] = format_summary_headlines(summary)
    payload["last_line_id"] = result.last_line_id if result else None
    return payload


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = ensure_request_id(request)
    token = bind_request_context(request_id)
    try:
        response = await call_next(request)
        response.headers.setdefault("x-request-id", request_id)
        return response
    finally:
        reset_request_context(token)


@app.get("/health")
def health_check() -> dict:
    """
    Report Budget Model Service readiness; expects no payload.
    Returns a static status document for load balancers and uptime checks.
    """
    return {"status": "ok", "service": "budget-model-service"}


@app.get("/projects", response_model=ProjectCatalogModel)
def list_projects() -> Dict[str, Any]:
    """List the campaign projects budgets can be opened for and the configured default."""
    return {
        "default_project": BUDGET_SETTINGS.default_project,
        "projects": [
            {
                "id": profile.id,
                "label": profile.label,
                "timeframe_months": profile.timeframe_months,
                "start_date": profile.start_date.isoformat(),
                "end_date": profile.end_date.isoformat(),
            }
            for profile in PROJECTS.values()
        ],
    }


@app.get("/budgets/{project_id}/summary", response_model=BudgetSummaryModel)
def get_budget_summary(project_id: str) -> Dict[str, Any] | JSONResponse:
    """Return the computed summary of the project's working budget version."""
    try:
        workspace = get_workspace(project_id)
    except BudgetModelError as exc:
        return _budget_error_response(exc)
    return _summary_payload(workspace.summary())


@app.post("/budgets/{project_id}/commands", response_model=BudgetSummaryModel)
def apply_budget_command(
    project_id: str,
    payload: BudgetCommandPayload,
) -> Dict[str, Any] | JSONResponse:
    """
    Apply one edit/version command to the project's working budget.
    Expects a `BudgetCommandPayload` (`op` plus an op-specific `payload`).
    Returns the recomputed summary, or a typed error with the offending field; a
    rejected command leaves the budget unchanged.
    """
    request_id = current_request_id()
    try:
        workspace = get_workspace(project_id)
    except BudgetModelError as exc:
        return _budget_error_response(exc)

    command = payload.to_command()
    try:
        result = workspace.dispatch(command)
    except BudgetModelError as exc:
        logger.warning(
            {
                "event": "budget_command_rejected",
                "request_id": request_id,
                "project_id": project_id,
                "op": command.op,
                "error": exc.code,
                "field": exc.field,
            }
        )
        return _budget_error_response(exc)

    summary = workspace.summary()
    logger.info(
        {
            "event": "budget_command_applied",
            "request_id": request_id,
            "project_id": project_id,
            "op": command.op,
            "version": summary.version,
            "status": summary.status,
            "total_overhead_budgeted": summary.total_overhead_budgeted,
            "profit_budgeted": summary.profit_budgeted,
        }
    )
    return _summary_payload(summary, result)


@app.get("/budgets/{project_id}/versions", response_model=VersionListModel)
def list_budget_versions(project_id: str) -> Dict[str, Any] | JSONResponse:
    """List the project's locked versions in the order they were locked."""
    try:
        workspace = get_workspace(project_id)
    except BudgetModelError as exc:
        return _budget_error_response(exc)

    return {
        "project_id": workspace.current.project_id,
        "current_version": workspace.current.version,
        "versions": [
            {
                "version": snapshot.version,
                "status": snapshot.status,
                "locked_at": snapshot.locked_at.isoformat(),
                "fingerprint": snapshot.fingerprint,
            }
            for snapshot in workspace.list_versions()
        ],
    }


@app.get("/budgets/{project_id}/versions/{version}/summary", response_model=BudgetSummaryModel)
def get_locked_version_summary(project_id: str, version: str) -> Dict[str, Any] | JSONResponse:
    """Return the computed summary of a locked version for audit or export."""
    try:
        workspace = get_workspace(project_id)
        summary = workspace.version_summary(version)
    except BudgetModelError as exc:
        return _budget_error_response(exc)
    return _summary_payload(summary)


@app.get("/budgets/{project_id}/version-delta", response_model=VersionDeltaModel)
def get_version_delta(project_id: str) -> Dict[str, Any] | JSONResponse:
    """Compare the working version with the most recently locked one."""
    try:
        workspace = get_workspace(project_id)
    except BudgetModelError as exc:
        return _budget_error_response(exc)

    delta = workspace.version_delta()
    if delta is None:
        return error_response(404, "no_previous_version", "No locked version to compare against.")
    return {
        "previous_version": delta.previous_version,
        "current_version": delta.current_version,
        "total_overhead_budgeted": delta.total_overhead_budgeted,
        "total_overhead_actual": delta.total_overhead_actual,
        "profit_budgeted": delta.profit_budgeted,
        "profit_actual": delta.profit_actual,
        "margin_budgeted": delta.margin_budgeted,
    }
