"""Unit tests for wiring a manager from settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from crm_workflow_automation.automation.config import AutomationSettings
from crm_workflow_automation.automation.factory import build_manager
from crm_workflow_automation.automation.workflow.models import TriggerType


@pytest.fixture
def settings(monkeypatch, tmp_path: Path) -> AutomationSettings:
    monkeypatch.setenv("AUTOMATION_WORKFLOWS_PATH", str(tmp_path / "workflows.json"))
    monkeypatch.setenv("AUTOMATION_MAX_EXECUTION_HISTORY", "1")
    monkeypatch.delenv("AUTOMATION_STRICT_CONTAINS", raising=False)
    return AutomationSettings(_env_file=None)


@pytest.mark.asyncio
async def test_history_cap_applies_to_built_manager(settings, effects, fake_sleep) -> None:
    manager = build_manager(settings, effects=effects, sleep=fake_sleep)
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    for deal_id in ("d1", "d2", "d3"):
        await manager.trigger_workflows(TriggerType.DEAL_WON, {"dealId": deal_id})

    [kept] = manager.get_execution_history(wf.id)
    assert kept.context == {"dealId": "d3"}
    assert manager.get_workflow(wf.id).execution_count == 3


def test_built_manager_uses_configured_store(settings, effects) -> None:
    manager = build_manager(settings, effects=effects)
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    reloaded = build_manager(settings, effects=effects)

    assert reloaded.get_workflow(wf.id) is not None
