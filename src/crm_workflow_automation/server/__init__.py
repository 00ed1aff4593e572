"""FastAPI server adapter for crm-workflow-automation.

This module exposes a REST API over the workflow manager.

Design intent:
- Keep business logic in `crm_workflow_automation.automation.*`
- Keep server-specific concerns (routing, CORS, HTTP error mapping) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from crm_workflow_automation.server.app import create_app
