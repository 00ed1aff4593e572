"""Factory for wiring a workflow manager from settings."""

from __future__ import annotations

import asyncio
import logging

from crm_workflow_automation.automation.config import AutomationSettings
from crm_workflow_automation.automation.effects import DefaultEffectHandlers, WebhookClient
from crm_workflow_automation.automation.workflow.actions import ActionDispatcher, EffectHandlers
from crm_workflow_automation.automation.workflow.engine import SleepFn, WorkflowEngine
from crm_workflow_automation.automation.workflow.history import ExecutionHistory
from crm_workflow_automation.automation.workflow.manager import WorkflowManager
from crm_workflow_automation.automation.workflow.registry import WorkflowRegistry
from crm_workflow_automation.automation.workflow.store import WorkflowStore

logger = logging.getLogger(__name__)


def build_manager(
    settings: AutomationSettings,
    *,
    effects: EffectHandlers | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> WorkflowManager:
    """Create a manager backed by the JSON store named in ``settings``.

    Args:
        settings: Loaded automation settings.
        effects: Effect handlers to dispatch to. Defaults to
            :class:`DefaultEffectHandlers` with a webhook client configured
            from ``settings``.
        sleep: Coroutine used for trigger delays.

    Returns:
        A manager whose registry has been seeded from the store.
    """

    if effects is None:
        effects = DefaultEffectHandlers(
            webhook=WebhookClient(
                base_url=settings.webhook_base_url,
                timeout_seconds=settings.webhook_timeout_seconds,
            )
        )

    registry = WorkflowRegistry()
    engine = WorkflowEngine(
        registry=registry,
        dispatcher=ActionDispatcher(effects),
        history=ExecutionHistory(max_records=settings.max_execution_history),
        strict_contains=settings.strict_contains,
        sleep=sleep,
    )
    logger.debug(
        "Workflow manager configured",
        extra={"path": str(settings.workflows_state_path)},
    )
    return WorkflowManager(
        registry=registry,
        engine=engine,
        store=WorkflowStore(settings.workflows_state_path),
    )
