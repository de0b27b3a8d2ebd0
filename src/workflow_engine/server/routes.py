"""Workflow REST API.

Routes are thin: they look up the registry on the app, call it, and turn a
:class:`Rejected` into an HTTP error. No workflow rule is decided here.
"""

from __future__ import annotations

from typing import TypeVar

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from workflow_engine import __version__
from workflow_engine.engine.registry import WorkflowRegistry
from workflow_engine.engine.workflow import (
    Accepted,
    Rejected,
    WorkflowDefinition,
    WorkflowInstance,
)
from workflow_engine.server.models import AvailableActions, ErrorResponse, HealthResponse

T = TypeVar("T")

router = APIRouter()

_ERRORS: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse, "description": "Request rejected by a workflow rule"},
    404: {"model": ErrorResponse, "description": "Workflow or instance not found"},
}


def _registry(request: Request) -> WorkflowRegistry:
    registry = getattr(request.app.state, "registry", None)
    if not isinstance(registry, WorkflowRegistry):
        # This should never happen for the real app, but keeps the API fail-fast.
        raise HTTPException(status_code=500, detail="Workflow registry not configured")
    return registry


def _unwrap(result: Accepted[T] | Rejected) -> T:
    if isinstance(result, Rejected):
        status = 404 if result.kind.is_not_found else 400
        raise HTTPException(status_code=status, detail=result.to_json())
    return result.value


@router.get("/", response_class=PlainTextResponse)
def welcome() -> str:
    return "Welcome to the Workflow Engine API"


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@router.post("/workflows", response_model=WorkflowDefinition, responses=_ERRORS)
def create_workflow(request: Request, definition: WorkflowDefinition) -> WorkflowDefinition:
    return _unwrap(_registry(request).create_definition(definition))


@router.get("/workflows", response_model=list[WorkflowDefinition])
def list_workflows(request: Request) -> list[WorkflowDefinition]:
    return _registry(request).list_definitions()


@router.get("/workflows/{definition_id}", response_model=WorkflowDefinition, responses=_ERRORS)
def get_workflow(request: Request, definition_id: str) -> WorkflowDefinition:
    return _unwrap(_registry(request).get_definition(definition_id))


@router.post(
    "/workflows/{definition_id}/instances", response_model=WorkflowInstance, responses=_ERRORS
)
def start_instance(request: Request, definition_id: str) -> WorkflowInstance:
    return _unwrap(_registry(request).create_instance(definition_id))


@router.get("/instances", response_model=list[WorkflowInstance])
def list_instances(request: Request) -> list[WorkflowInstance]:
    return _registry(request).list_instances()


@router.get("/instances/{instance_id}", response_model=WorkflowInstance, responses=_ERRORS)
def get_instance(request: Request, instance_id: str) -> WorkflowInstance:
    return _unwrap(_registry(request).get_instance(instance_id))


@router.get(
    "/instances/{instance_id}/actions", response_model=AvailableActions, responses=_ERRORS
)
def list_available_actions(request: Request, instance_id: str) -> AvailableActions:
    choices = _unwrap(_registry(request).available_actions(instance_id))
    return AvailableActions(
        instanceId=choices.instance.id,
        currentStateId=choices.instance.current_state_id,
        actions=choices.actions,
    )


@router.post(
    "/instances/{instance_id}/actions/{action_id}",
    response_model=WorkflowInstance,
    responses=_ERRORS,
)
def apply_action(request: Request, instance_id: str, action_id: str) -> WorkflowInstance:
    return _unwrap(_registry(request).apply_action(instance_id, action_id))
