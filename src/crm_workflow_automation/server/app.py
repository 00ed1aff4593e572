"""FastAPI app factory.

Endpoints are thin wrappers over the workflow manager.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm_workflow_automation import __version__
from crm_workflow_automation.automation.factory import build_manager
from crm_workflow_automation.automation.workflow.actions import EffectHandlers
from crm_workflow_automation.server.config import ServerSettings
from crm_workflow_automation.server.workflows_router import router as workflows_router

logger = logging.getLogger(__name__)


def create_app(
    settings: ServerSettings | None = None,
    *,
    effects: EffectHandlers | None = None,
) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="CRM Workflow Automation",
        version=__version__,
        description="REST API over the workflow automation manager.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.settings = settings
    app.state.manager = build_manager(settings, effects=effects)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(workflows_router, prefix="/api")

    logger.info(
        "Workflow automation API ready",
        extra={"workflows_path": str(settings.workflows_state_path)},
    )
    return app
