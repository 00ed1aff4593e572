"""Fluent construction of custom workflows.

Example::

    workflow = (
        create_workflow()
        .set_name("Deal Stage Change Follow-up")
        .set_description("Schedule a follow-up when a deal reaches proposal")
        .set_trigger(TriggerType.DEAL_STAGE_CHANGED)
        .add_trigger_condition("newStage", "equals", "proposal")
        .add_schedule_activity_action(ActivityType.CALL, "Follow-up call", "Discuss proposal", 2)
        .add_send_email_action("proposal_sent", "Proposal Sent")
        .set_created_by("user123")
        .build()
    )
"""

from __future__ import annotations

import copy
import uuid
from typing import Any

from pydantic import ValidationError

from .errors import DefinitionError
from .models import (
    ActivityType,
    AssignOwnerAction,
    AssignOwnerConfig,
    ConditionOperator,
    CreateTaskAction,
    CreateTaskConfig,
    DueDate,
    ScheduleActivityAction,
    ScheduleActivityConfig,
    SendEmailAction,
    SendEmailConfig,
    SendNotificationAction,
    SendNotificationConfig,
    TriggerCondition,
    TriggerType,
    UpdateFieldAction,
    UpdateFieldConfig,
    WebhookAction,
    WebhookConfig,
    Workflow,
    WorkflowAction,
    WorkflowTrigger,
    utc_now,
)
from .registry import WorkflowRegistry


def new_workflow_id() -> str:
    return f"workflow_{uuid.uuid4().hex}"


class WorkflowBuilder:
    def __init__(self) -> None:
        now = utc_now()
        self._id: str | None = None
        self._name: str | None = None
        self._description: str | None = None
        self._trigger_type: TriggerType | None = None
        self._conditions: list[TriggerCondition] = []
        self._time_delay: float | None = None
        self._actions: list[WorkflowAction] = []
        self._is_active = True
        self._created_by: str | None = None
        self._created_at = now
        self._updated_at = now
        self._execution_count = 0

    def set_name(self, name: str) -> WorkflowBuilder:
        self._name = name
        return self

    def set_description(self, description: str) -> WorkflowBuilder:
        self._description = description
        return self

    def set_trigger(
        self,
        trigger_type: TriggerType | str,
        conditions: list[TriggerCondition] | None = None,
        time_delay: float | None = None,
    ) -> WorkflowBuilder:
        self._trigger_type = TriggerType(trigger_type)
        self._conditions = list(conditions or [])
        self._time_delay = time_delay
        return self

    def add_trigger_condition(
        self, field: str, operator: ConditionOperator | str, value: Any
    ) -> WorkflowBuilder:
        if self._trigger_type is None:
            raise DefinitionError("Trigger must be set before adding conditions")
        try:
            condition = TriggerCondition(field=field, operator=operator, value=value)
        except ValidationError as e:
            raise DefinitionError(f"Invalid trigger condition: {e}") from e
        self._conditions.append(condition)
        return self

    def add_schedule_activity_action(
        self,
        activity_type: ActivityType | str,
        subject: str,
        description: str,
        due_date: DueDate,
        assign_to: str | None = None,
    ) -> WorkflowBuilder:
        config = ScheduleActivityConfig(
            activity_type=ActivityType(activity_type),
            subject=subject,
            description=description,
            due_date=due_date,
            assign_to=assign_to,
        )
        return self._add(ScheduleActivityAction(config=config))

    def add_send_email_action(
        self, email_template: str, subject: str, email_to: list[str] | None = None
    ) -> WorkflowBuilder:
        config = SendEmailConfig(email_template=email_template, subject=subject, email_to=email_to)
        return self._add(SendEmailAction(config=config))

    def add_update_field_action(self, field_name: str, field_value: Any) -> WorkflowBuilder:
        config = UpdateFieldConfig(field_name=field_name, field_value=field_value)
        return self._add(UpdateFieldAction(config=config))

    def add_create_task_action(
        self,
        subject: str,
        description: str,
        due_date: DueDate,
        assign_to: str | None = None,
    ) -> WorkflowBuilder:
        config = CreateTaskConfig(
            subject=subject, description=description, due_date=due_date, assign_to=assign_to
        )
        return self._add(CreateTaskAction(config=config))

    def add_assign_owner_action(self, assign_to: str) -> WorkflowBuilder:
        return self._add(AssignOwnerAction(config=AssignOwnerConfig(assign_to=assign_to)))

    def add_send_notification_action(
        self, message: str, assign_to: str | None = None
    ) -> WorkflowBuilder:
        config = SendNotificationConfig(notification_message=message, assign_to=assign_to)
        return self._add(SendNotificationAction(config=config))

    def add_webhook_action(self, webhook_url: str) -> WorkflowBuilder:
        return self._add(WebhookAction(config=WebhookConfig(webhook_url=webhook_url)))

    def add_action(self, action: WorkflowAction) -> WorkflowBuilder:
        return self._add(action)

    def set_active(self, is_active: bool) -> WorkflowBuilder:
        self._is_active = is_active
        return self

    def set_created_by(self, user_id: str) -> WorkflowBuilder:
        self._created_by = user_id
        return self

    def build(self) -> Workflow:
        if not self._name:
            raise DefinitionError("Workflow name is required")
        if not self._description:
            raise DefinitionError("Workflow description is required")
        if self._trigger_type is None:
            raise DefinitionError("Workflow trigger is required")
        if not self._actions:
            raise DefinitionError("At least one action is required")
        if not self._created_by:
            raise DefinitionError("Workflow creator is required")

        if self._id is None:
            self._id = new_workflow_id()

        try:
            trigger = WorkflowTrigger(
                type=self._trigger_type,
                conditions=list(self._conditions),
                time_delay=self._time_delay,
            )
            return Workflow(
                id=self._id,
                name=self._name,
                description=self._description,
                is_active=self._is_active,
                trigger=trigger,
                actions=list(self._actions),
                created_by=self._created_by,
                created_at=self._created_at,
                updated_at=self._updated_at,
                execution_count=self._execution_count,
            )
        except ValidationError as e:
            raise DefinitionError(f"Invalid workflow definition: {e}") from e

    def build_and_register(self, registry: WorkflowRegistry) -> Workflow:
        workflow = self.build()
        registry.register(workflow)
        return workflow

    @classmethod
    def from_workflow(cls, workflow: Workflow) -> WorkflowBuilder:
        builder = cls()
        builder._id = workflow.id
        builder._name = workflow.name
        builder._description = workflow.description
        builder._trigger_type = workflow.trigger.type
        builder._conditions = list(workflow.trigger.conditions)
        builder._time_delay = workflow.trigger.time_delay
        builder._actions = list(workflow.actions)
        builder._is_active = workflow.is_active
        builder._created_by = workflow.created_by
        builder._created_at = workflow.created_at
        builder._updated_at = workflow.updated_at
        builder._execution_count = workflow.execution_count
        return builder

    def clone(self) -> WorkflowBuilder:
        return copy.deepcopy(self)

    def _add(self, action: WorkflowAction) -> WorkflowBuilder:
        self._actions.append(action)
        return self


def create_workflow() -> WorkflowBuilder:
    return WorkflowBuilder()
