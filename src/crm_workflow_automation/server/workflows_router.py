"""Workflow automation REST API.

All routes are mounted under `/api`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, Response

from crm_workflow_automation.automation.workflow.builder import WorkflowBuilder
from crm_workflow_automation.automation.workflow.errors import DefinitionError, NotFoundError
from crm_workflow_automation.automation.workflow.manager import WorkflowManager
from crm_workflow_automation.automation.workflow.models import (
    Workflow,
    WorkflowStats,
    WorkflowTemplate,
)
from crm_workflow_automation.automation.workflow.state_machine import ExecutionRecord
from crm_workflow_automation.server.models import (
    CancelResponse,
    CreateWorkflowRequest,
    FromTemplateRequest,
    ImportRequest,
    TriggerEventRequest,
)

router = APIRouter()


def _manager(request: Request) -> WorkflowManager:
    manager = getattr(request.app.state, "manager", None)
    if not isinstance(manager, WorkflowManager):
        raise HTTPException(status_code=500, detail="Workflow manager not configured")
    return manager


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def _invalid(e: DefinitionError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/templates", response_model=list[WorkflowTemplate])
def list_templates(
    request: Request,
    category: str | None = Query(default=None),
    tag: str | None = Query(default=None),
) -> list[WorkflowTemplate]:
    manager = _manager(request)
    templates = manager.get_templates()
    if category:
        templates = [t for t in templates if t.category == category]
    if tag:
        ids = {t.id for t in manager.search_templates(tag)}
        templates = [t for t in templates if t.id in ids]
    return templates


@router.get("/templates/categories")
def list_categories(request: Request) -> list[str]:
    return _manager(request).get_categories()


@router.get("/workflows", response_model=list[Workflow])
def list_workflows(request: Request, active_only: bool = Query(default=False)) -> list[Workflow]:
    manager = _manager(request)
    return manager.get_active_workflows() if active_only else manager.list_workflows()


@router.post("/workflows", response_model=Workflow, status_code=201)
def create_workflow(request: Request, req: CreateWorkflowRequest) -> Workflow:
    builder = (
        WorkflowBuilder()
        .set_name(req.name)
        .set_description(req.description)
        .set_trigger(req.trigger.type, req.trigger.conditions, req.trigger.time_delay)
        .set_active(req.is_active)
        .set_created_by(req.created_by)
    )
    for action in req.actions:
        builder.add_action(action)
    try:
        workflow = builder.build()
    except DefinitionError as e:
        raise _invalid(e) from e
    return _manager(request).register_workflow(workflow)


@router.post("/workflows/from-template", response_model=Workflow, status_code=201)
def create_from_template(request: Request, req: FromTemplateRequest) -> Workflow:
    try:
        return _manager(request).create_from_template(req.template_id, req.user_id)
    except NotFoundError as e:
        raise _not_found(e) from e


@router.post("/workflows/import", response_model=Workflow, status_code=201)
def import_workflow(request: Request, req: ImportRequest) -> Workflow:
    try:
        return _manager(request).import_workflow(req.workflow_json, req.user_id)
    except DefinitionError as e:
        raise _invalid(e) from e


@router.get("/workflows/{workflow_id}", response_model=Workflow)
def get_workflow(request: Request, workflow_id: str) -> Workflow:
    workflow = _manager(request).get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Workflow not found: {workflow_id}")
    return workflow


@router.patch("/workflows/{workflow_id}", response_model=Workflow)
def update_workflow(request: Request, workflow_id: str, updates: dict[str, Any]) -> Workflow:
    try:
        return _manager(request).update_workflow(workflow_id, updates)
    except NotFoundError as e:
        raise _not_found(e) from e
    except DefinitionError as e:
        raise _invalid(e) from e


@router.delete("/workflows/{workflow_id}", status_code=204)
def delete_workflow(request: Request, workflow_id: str) -> Response:
    _manager(request).delete_workflow(workflow_id)
    return Response(status_code=204)


@router.post("/workflows/{workflow_id}/activate", response_model=Workflow)
def activate_workflow(request: Request, workflow_id: str) -> Workflow:
    try:
        return _manager(request).activate_workflow(workflow_id)
    except NotFoundError as e:
        raise _not_found(e) from e


@router.post("/workflows/{workflow_id}/deactivate", response_model=Workflow)
def deactivate_workflow(request: Request, workflow_id: str) -> Workflow:
    try:
        return _manager(request).deactivate_workflow(workflow_id)
    except NotFoundError as e:
        raise _not_found(e) from e


@router.get("/workflows/{workflow_id}/export")
def export_workflow(request: Request, workflow_id: str) -> Response:
    try:
        exported = _manager(request).export_workflow(workflow_id)
    except NotFoundError as e:
        raise _not_found(e) from e
    return Response(content=exported, media_type="application/json")


@router.get("/workflows/{workflow_id}/executions", response_model=list[ExecutionRecord])
def list_executions(request: Request, workflow_id: str) -> list[ExecutionRecord]:
    return _manager(request).get_execution_history(workflow_id)


@router.get("/workflows/{workflow_id}/stats", response_model=WorkflowStats)
def workflow_stats(request: Request, workflow_id: str) -> WorkflowStats:
    return _manager(request).get_workflow_stats(workflow_id)


# Async so runs and cancellation share the app's event loop.
@router.post("/events", response_model=list[ExecutionRecord])
async def trigger_event(request: Request, req: TriggerEventRequest) -> list[ExecutionRecord]:
    return await _manager(request).trigger_workflows(req.type, req.context)


@router.post("/executions/{execution_id}/cancel", response_model=CancelResponse)
async def cancel_execution(request: Request, execution_id: str) -> CancelResponse:
    cancelled = _manager(request).cancel_execution(execution_id)
    if not cancelled:
        raise HTTPException(
            status_code=409, detail=f"Execution is not in flight: {execution_id}"
        )
    return CancelResponse(execution_id=execution_id, cancelled=True)
