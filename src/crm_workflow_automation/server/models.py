"""Request and response bodies for the REST server.

Field names follow the camelCase interchange shape of workflows.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from crm_workflow_automation.automation.workflow.models import (
    CamelModel,
    TriggerType,
    WorkflowAction,
    WorkflowTrigger,
)


class CreateWorkflowRequest(CamelModel):
    name: str
    description: str
    trigger: WorkflowTrigger
    actions: list[WorkflowAction] = Field(default_factory=list)
    is_active: bool = True
    created_by: str


class FromTemplateRequest(CamelModel):
    template_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)


class ImportRequest(CamelModel):
    workflow_json: str
    user_id: str = Field(min_length=1)


class TriggerEventRequest(CamelModel):
    type: TriggerType
    context: dict[str, Any] = Field(default_factory=dict)


class CancelResponse(CamelModel):
    execution_id: str
    cancelled: bool
