"""Log-backed effect handlers.

Activities, emails, tasks and ownership live in other systems; these handlers
record each request as a structured log line so that a deployment without
those integrations still shows what the workflows decided. Webhooks are sent
for real when a :class:`WebhookClient` is configured; a relative webhook URL
is skipped with a warning when the client has no base URL to resolve it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from crm_workflow_automation.automation.effects.webhook import WebhookClient, is_absolute_url
from crm_workflow_automation.automation.workflow.models import ActivityType

logger = logging.getLogger(__name__)


class DefaultEffectHandlers:
    def __init__(self, *, webhook: WebhookClient | None = None) -> None:
        self._webhook = webhook

    async def schedule_activity(
        self,
        *,
        activity_type: ActivityType | None,
        subject: str | None,
        description: str | None,
        due_at: str,
        assign_to: str | None,
        context: Mapping[str, Any],
    ) -> None:
        logger.info(
            "Scheduling activity",
            extra={
                "activity_type": activity_type.value if activity_type else None,
                "subject": subject,
                "description": description,
                "due_at": due_at,
                "assign_to": assign_to,
                "deal_id": context.get("dealId"),
                "contact_id": context.get("contactId"),
            },
        )

    async def send_email(
        self,
        *,
        template: str | None,
        subject: str | None,
        recipients: list[str] | None,
        context: Mapping[str, Any],
    ) -> None:
        logger.info(
            "Sending email",
            extra={
                "template": template,
                "subject": subject,
                "recipients": recipients,
                "contact_id": context.get("contactId"),
            },
        )

    async def update_field(
        self, *, field_name: str | None, field_value: Any, entity_id: str | None
    ) -> None:
        logger.info(
            "Updating field",
            extra={"field_name": field_name, "field_value": field_value, "entity_id": entity_id},
        )

    async def create_task(
        self,
        *,
        subject: str | None,
        description: str | None,
        due_at: str,
        assign_to: str | None,
    ) -> None:
        logger.info(
            "Creating task",
            extra={
                "subject": subject,
                "description": description,
                "due_at": due_at,
                "assign_to": assign_to,
            },
        )

    async def assign_owner(self, *, assign_to: str | None, entity_id: str | None) -> None:
        logger.info("Assigning owner", extra={"assign_to": assign_to, "entity_id": entity_id})

    async def send_notification(self, *, message: str | None, recipient: str | None) -> None:
        logger.info("Sending notification", extra={"notification": message, "recipient": recipient})

    async def call_webhook(self, *, url: str | None, payload: Mapping[str, Any]) -> None:
        if self._webhook is None:
            logger.info("Webhook skipped (no client configured)", extra={"url": url})
            return
        target = url or ""
        if target.strip() and not is_absolute_url(target) and not self._webhook.has_base_url:
            logger.warning(
                "Webhook skipped (relative URL and no AUTOMATION_WEBHOOK_BASE_URL)",
                extra={"url": url},
            )
            return
        # requests is blocking; keep the event loop free for sibling runs.
        await asyncio.to_thread(self._webhook.post, target, payload)
