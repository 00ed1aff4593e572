"""Default implementations of the workflow effect-handler ports."""

from crm_workflow_automation.automation.effects.handlers import DefaultEffectHandlers
from crm_workflow_automation.automation.effects.webhook import WebhookClient

__all__ = ["DefaultEffectHandlers", "WebhookClient"]
