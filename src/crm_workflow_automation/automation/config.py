"""Configuration for workflow automation.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AutomationSettings(BaseSettings):
    """Settings for the automation engine and its CLI.

    Environment variables:
    - LOG_LEVEL                           (optional)
    - AUTOMATION_WORKFLOWS_PATH           (optional)
    - AUTOMATION_STRICT_CONTAINS          (optional)
    - AUTOMATION_MAX_EXECUTION_HISTORY    (optional)
    - AUTOMATION_WEBHOOK_BASE_URL         (optional)
    - AUTOMATION_WEBHOOK_TIMEOUT_SECONDS  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `AutomationSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    workflows_state_path: Path = Field(
        default=Path("automation_state/workflows.json"),
        validation_alias="AUTOMATION_WORKFLOWS_PATH",
        description="JSON file where registered workflows are persisted",
    )

    strict_contains: bool = Field(
        default=False,
        validation_alias="AUTOMATION_STRICT_CONTAINS",
        description=(
            "If true, a missing or null field never satisfies a 'contains' condition. "
            "By default such fields compare as the strings 'undefined' and 'null'."
        ),
    )

    max_execution_history: int | None = Field(
        default=None,
        validation_alias="AUTOMATION_MAX_EXECUTION_HISTORY",
        description="Maximum execution records kept in memory (unset means unbounded)",
        ge=1,
    )

    webhook_base_url: str = Field(
        default="",
        validation_alias="AUTOMATION_WEBHOOK_BASE_URL",
        description="Base URL joined with relative webhook URLs",
    )
    webhook_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="AUTOMATION_WEBHOOK_TIMEOUT_SECONDS",
        description="HTTP timeout (seconds) for webhook calls",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )
