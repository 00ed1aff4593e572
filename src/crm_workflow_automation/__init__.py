"""CRM Workflow Automation.

A rule-driven engine that matches CRM events (deal and contact changes,
completed activities, scheduler ticks) against registered workflows and runs
their ordered actions.
"""

__version__ = "0.1.0"

from crm_workflow_automation.automation.config import AutomationSettings

__all__ = ["__version__", "AutomationSettings"]
