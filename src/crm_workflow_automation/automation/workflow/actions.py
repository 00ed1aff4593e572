from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any, Protocol

from .errors import ActionExecutionError, UnknownActionKindError
from .models import (
    ActivityType,
    AssignOwnerAction,
    CreateTaskAction,
    DueDate,
    ScheduleActivityAction,
    SendEmailAction,
    SendNotificationAction,
    UpdateFieldAction,
    WebhookAction,
    WorkflowAction,
    utc_now,
)

logger = logging.getLogger(__name__)


class EffectHandlers(Protocol):
    """Outbound ports, one per action type.

    Implementations signal failure by raising. The dispatcher awaits each call
    before moving on, so later actions may rely on earlier side effects.
    """

    async def schedule_activity(
        self,
        *,
        activity_type: ActivityType | None,
        subject: str | None,
        description: str | None,
        due_at: str,
        assign_to: str | None,
        context: Mapping[str, Any],
    ) -> None: ...

    async def send_email(
        self,
        *,
        template: str | None,
        subject: str | None,
        recipients: list[str] | None,
        context: Mapping[str, Any],
    ) -> None: ...

    async def update_field(
        self, *, field_name: str | None, field_value: Any, entity_id: str | None
    ) -> None: ...

    async def create_task(
        self,
        *,
        subject: str | None,
        description: str | None,
        due_at: str,
        assign_to: str | None,
    ) -> None: ...

    async def assign_owner(self, *, assign_to: str | None, entity_id: str | None) -> None: ...

    async def send_notification(self, *, message: str | None, recipient: str | None) -> None: ...

    async def call_webhook(self, *, url: str | None, payload: Mapping[str, Any]) -> None: ...


def resolve_due_date(due_date: DueDate, now: datetime) -> str:
    """Turn a configured due date into an absolute ISO timestamp.

    Numbers are days from ``now``; strings are passed through unchanged.
    """

    if due_date is None or due_date == "":
        return now.isoformat()
    if isinstance(due_date, str):
        return due_date
    return (now + timedelta(days=due_date)).isoformat()


def _entity_id(context: Mapping[str, Any]) -> str | None:
    entity = context.get("dealId") or context.get("contactId")
    return None if entity is None else str(entity)


class ActionDispatcher:
    """Map an action to its effect-handler port and invoke it."""

    def __init__(
        self,
        handlers: EffectHandlers,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._handlers = handlers
        self._clock = clock

    async def dispatch(self, action: WorkflowAction, context: Mapping[str, Any]) -> None:
        action_type = getattr(action, "type", None)
        logger.debug("Dispatching action", extra={"action_type": action_type})
        try:
            await self._invoke(action, context)
        except ActionExecutionError:
            raise
        except Exception as e:
            raise ActionExecutionError(str(e) or type(e).__name__, action_type=action_type) from e

    async def _invoke(self, action: WorkflowAction, context: Mapping[str, Any]) -> None:
        h = self._handlers
        match action:
            case ScheduleActivityAction(config=cfg):
                await h.schedule_activity(
                    activity_type=cfg.activity_type,
                    subject=cfg.subject,
                    description=cfg.description,
                    due_at=resolve_due_date(cfg.due_date, self._clock()),
                    assign_to=cfg.assign_to,
                    context=context,
                )
            case SendEmailAction(config=cfg):
                await h.send_email(
                    template=cfg.email_template,
                    subject=cfg.subject,
                    recipients=cfg.email_to,
                    context=context,
                )
            case UpdateFieldAction(config=cfg):
                await h.update_field(
                    field_name=cfg.field_name,
                    field_value=cfg.field_value,
                    entity_id=_entity_id(context),
                )
            case CreateTaskAction(config=cfg):
                await h.create_task(
                    subject=cfg.subject,
                    description=cfg.description,
                    due_at=resolve_due_date(cfg.due_date, self._clock()),
                    assign_to=cfg.assign_to,
                )
            case AssignOwnerAction(config=cfg):
                await h.assign_owner(assign_to=cfg.assign_to, entity_id=_entity_id(context))
            case SendNotificationAction(config=cfg):
                await h.send_notification(message=cfg.notification_message, recipient=cfg.assign_to)
            case WebhookAction(config=cfg):
                await h.call_webhook(url=cfg.webhook_url, payload=context)
            case _:
                raise UnknownActionKindError(getattr(action, "type", type(action).__name__))
