"""Workflow definition models.

Python code uses snake_case attribute names; the interchange shape (exports,
REST payloads) uses the camelCase aliases, e.g. ``isActive``,
``trigger.timeDelay``, ``actions[].config.dueDate``.

Models are frozen. Changing a workflow means building a new instance
(``model_copy(update=...)``) and re-registering it under the same id.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class TriggerType(str, Enum):
    DEAL_STAGE_CHANGED = "deal_stage_changed"
    DEAL_CREATED = "deal_created"
    DEAL_WON = "deal_won"
    DEAL_LOST = "deal_lost"
    CONTACT_CREATED = "contact_created"
    ACTIVITY_COMPLETED = "activity_completed"
    FIELD_UPDATED = "field_updated"
    TIME_BASED = "time_based"


class ActionType(str, Enum):
    SCHEDULE_ACTIVITY = "schedule_activity"
    SEND_EMAIL = "send_email"
    UPDATE_FIELD = "update_field"
    CREATE_TASK = "create_task"
    ASSIGN_OWNER = "assign_owner"
    SEND_NOTIFICATION = "send_notification"
    WEBHOOK = "webhook"


class ActivityType(str, Enum):
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    FOLLOW_UP = "follow_up"
    TASK = "task"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


DueDate = str | int | float | None


class TriggerCondition(CamelModel):
    field: str = Field(min_length=1, description="Dot-separated path into the event context")
    operator: ConditionOperator
    value: Any = None


class WorkflowTrigger(CamelModel):
    type: TriggerType
    conditions: list[TriggerCondition] = Field(default_factory=list)
    time_delay: float | None = Field(
        default=None, ge=0, description="Minutes to wait before running any action"
    )


class ScheduleActivityConfig(CamelModel):
    activity_type: ActivityType | None = None
    subject: str | None = None
    description: str | None = None
    due_date: DueDate = None
    assign_to: str | None = None


class SendEmailConfig(CamelModel):
    email_template: str | None = None
    subject: str | None = None
    email_to: list[str] | None = None


class UpdateFieldConfig(CamelModel):
    field_name: str | None = None
    field_value: Any = None


class CreateTaskConfig(CamelModel):
    subject: str | None = None
    description: str | None = None
    due_date: DueDate = None
    assign_to: str | None = None


class AssignOwnerConfig(CamelModel):
    assign_to: str | None = None


class SendNotificationConfig(CamelModel):
    notification_message: str | None = None
    assign_to: str | None = None


class WebhookConfig(CamelModel):
    webhook_url: str | None = None


class ScheduleActivityAction(CamelModel):
    type: Literal["schedule_activity"] = "schedule_activity"
    config: ScheduleActivityConfig = Field(default_factory=ScheduleActivityConfig)


class SendEmailAction(CamelModel):
    type: Literal["send_email"] = "send_email"
    config: SendEmailConfig = Field(default_factory=SendEmailConfig)


class UpdateFieldAction(CamelModel):
    type: Literal["update_field"] = "update_field"
    config: UpdateFieldConfig = Field(default_factory=UpdateFieldConfig)


class CreateTaskAction(CamelModel):
    type: Literal["create_task"] = "create_task"
    config: CreateTaskConfig = Field(default_factory=CreateTaskConfig)


class AssignOwnerAction(CamelModel):
    type: Literal["assign_owner"] = "assign_owner"
    config: AssignOwnerConfig = Field(default_factory=AssignOwnerConfig)


class SendNotificationAction(CamelModel):
    type: Literal["send_notification"] = "send_notification"
    config: SendNotificationConfig = Field(default_factory=SendNotificationConfig)


class WebhookAction(CamelModel):
    type: Literal["webhook"] = "webhook"
    config: WebhookConfig = Field(default_factory=WebhookConfig)


WorkflowAction = Annotated[
    ScheduleActivityAction
    | SendEmailAction
    | UpdateFieldAction
    | CreateTaskAction
    | AssignOwnerAction
    | SendNotificationAction
    | WebhookAction,
    Field(discriminator="type"),
]


class Workflow(CamelModel):
    id: str
    name: str
    description: str
    is_active: bool = True
    trigger: WorkflowTrigger
    actions: list[WorkflowAction]
    created_by: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    execution_count: int = Field(default=0, ge=0)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class WorkflowTemplate(CamelModel):
    id: str
    name: str
    description: str
    category: str
    trigger: WorkflowTrigger
    actions: list[WorkflowAction]
    tags: list[str] = Field(default_factory=list)


class WorkflowStats(CamelModel):
    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    average_execution_time_millis: float = 0.0
