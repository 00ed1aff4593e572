"""Unit tests for the workflow manager facade."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from crm_workflow_automation.automation.workflow.actions import ActionDispatcher
from crm_workflow_automation.automation.workflow.engine import WorkflowEngine
from crm_workflow_automation.automation.workflow.errors import DefinitionError, NotFoundError
from crm_workflow_automation.automation.workflow.manager import WorkflowManager
from crm_workflow_automation.automation.workflow.models import TriggerType, utc_now
from crm_workflow_automation.automation.workflow.registry import WorkflowRegistry
from crm_workflow_automation.automation.workflow.store import WorkflowStore


def test_create_from_template_copies_definition(manager) -> None:
    wf = manager.create_from_template("template_stale_deal_alert", "user1")
    template = manager.catalog.get("template_stale_deal_alert")

    assert wf.id.startswith("workflow_")
    assert wf.name == template.name
    assert wf.created_by == "user1"
    assert wf.is_active is True
    assert wf.execution_count == 0
    assert wf.trigger == template.trigger
    assert wf.actions == template.actions
    assert manager.get_workflow(wf.id) == wf


def test_create_from_unknown_template(manager) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        manager.create_from_template("template_missing", "user1")
    assert exc_info.value.kind == "template"
    assert str(exc_info.value) == "Template not found: template_missing"


def test_template_queries(manager) -> None:
    assert len(manager.get_templates()) == 8
    assert manager.get_categories()[0] == "Deal Management"
    assert [t.id for t in manager.get_templates_by_category("Sales Process")] == [
        "template_proposal_sent"
    ]
    assert [t.id for t in manager.search_templates("lead")] == ["template_new_lead_assignment"]


def test_update_workflow_replaces_record_and_keeps_id(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    updated = manager.update_workflow(wf.id, {"name": "Renamed", "isActive": False})

    assert updated.id == wf.id
    assert updated.name == "Renamed"
    assert updated.is_active is False
    assert updated.created_at == wf.created_at
    assert updated.updated_at > wf.updated_at
    assert manager.get_workflow(wf.id) == updated


def test_update_cannot_change_id(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    updated = manager.update_workflow(wf.id, {"id": "workflow_other"})

    assert updated.id == wf.id
    assert manager.get_workflow("workflow_other") is None


def test_update_rejects_unknown_fields_and_invalid_values(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    with pytest.raises(DefinitionError):
        manager.update_workflow(wf.id, {"colour": "red"})
    with pytest.raises(DefinitionError):
        manager.update_workflow(wf.id, {"trigger": {"type": "deal_exploded"}})

    assert manager.get_workflow(wf.id) == wf


def test_update_missing_workflow(manager) -> None:
    with pytest.raises(NotFoundError):
        manager.update_workflow("workflow_missing", {"name": "x"})
    with pytest.raises(NotFoundError):
        manager.activate_workflow("workflow_missing")


def test_activate_and_deactivate(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    assert manager.deactivate_workflow(wf.id).is_active is False
    assert manager.get_active_workflows() == []
    assert manager.activate_workflow(wf.id).is_active is True
    assert [w.id for w in manager.get_active_workflows()] == [wf.id]


def test_delete_is_idempotent(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    manager.delete_workflow(wf.id)
    manager.delete_workflow(wf.id)

    assert manager.get_workflow(wf.id) is None
    assert manager.list_workflows() == []


def test_export_then_import_creates_a_fresh_copy(manager) -> None:
    original = manager.create_from_template("template_high_value_deal", "user1")
    manager.registry.increment_execution_count(original.id)

    exported = manager.export_workflow(original.id)
    data = json.loads(exported)
    assert data["executionCount"] == 1
    assert data["trigger"]["conditions"][0]["operator"] == "greater_than"

    imported = manager.import_workflow(exported, "user2")

    assert imported.id != original.id
    assert imported.name == original.name
    assert imported.description == original.description
    assert imported.trigger == original.trigger
    assert imported.actions == original.actions
    assert imported.created_by == "user2"
    assert imported.execution_count == 0
    assert len(manager.list_workflows()) == 2


def test_export_missing_workflow(manager) -> None:
    with pytest.raises(NotFoundError):
        manager.export_workflow("workflow_missing")


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        "[1, 2, 3]",
        json.dumps({"name": "x", "description": "y"}),
        json.dumps(
            {
                "name": "x",
                "description": "y",
                "trigger": {"type": "deal_won"},
                "actions": [{"type": "launch_rocket", "config": {}}],
            }
        ),
    ],
)
def test_import_rejects_malformed_payloads(manager, payload: str) -> None:
    with pytest.raises(DefinitionError):
        manager.import_workflow(payload, "user2")
    assert manager.list_workflows() == []


@pytest.mark.asyncio
async def test_stats_average_completed_runs_only(manager, effects) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    await manager.trigger_workflows(TriggerType.DEAL_WON, {"dealId": "d1"})
    await manager.trigger_workflows(TriggerType.DEAL_WON, {"dealId": "d2"})
    effects.fail_on = {"send_email"}
    await manager.trigger_workflows(TriggerType.DEAL_WON, {"dealId": "d3"})

    stats = manager.get_workflow_stats(wf.id)

    assert stats.total_executions == 3
    assert stats.successful_executions == 2
    assert stats.failed_executions == 1
    # The engine clock ticks 250 ms between trigger and completion.
    assert stats.average_execution_time_millis == 250.0
    assert manager.get_workflow(wf.id).execution_count == 2
    assert len(manager.get_execution_history(wf.id)) == 3


def test_stats_for_unused_workflow_are_zero(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")

    stats = manager.get_workflow_stats(wf.id)

    assert stats.total_executions == 0
    assert stats.average_execution_time_millis == 0.0
    assert manager.get_workflow_stats("workflow_missing").total_executions == 0


@pytest.mark.asyncio
async def test_stats_survive_workflow_deletion(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")
    await manager.trigger_workflows(TriggerType.DEAL_WON, {"dealId": "d1"})

    manager.delete_workflow(wf.id)
    stats = manager.get_workflow_stats(wf.id)

    assert stats.total_executions == 1
    assert stats.successful_executions == 1
    assert [r.status.value for r in manager.get_execution_history(wf.id)] == ["completed"]


def test_update_keeps_execution_count_bumped_during_update(registry, engine) -> None:
    def clock_with_finishing_run():
        # A run completes while the update is being prepared.
        for workflow in registry.list_all():
            registry.increment_execution_count(workflow.id)
        return utc_now()

    wf = WorkflowManager(registry=registry, engine=engine).create_from_template(
        "template_deal_won_followup", "user1"
    )
    manager = WorkflowManager(registry=registry, engine=engine, clock=clock_with_finishing_run)

    updated = manager.update_workflow(wf.id, {"name": "renamed"})

    assert updated.name == "renamed"
    assert updated.execution_count == 1
    assert registry.get(wf.id).execution_count == 1


def test_update_can_set_execution_count_explicitly(manager) -> None:
    wf = manager.create_from_template("template_deal_won_followup", "user1")
    manager.registry.increment_execution_count(wf.id)

    assert manager.update_workflow(wf.id, {"executionCount": 0}).execution_count == 0


@pytest.mark.asyncio
async def test_store_is_loaded_and_saved(tmp_path: Path, effects, fake_sleep) -> None:
    path = tmp_path / "state" / "workflows.json"

    def _manager() -> WorkflowManager:
        registry = WorkflowRegistry()
        engine = WorkflowEngine(
            registry=registry, dispatcher=ActionDispatcher(effects), sleep=fake_sleep
        )
        return WorkflowManager(registry=registry, engine=engine, store=WorkflowStore(path))

    first = _manager()
    wf = first.create_from_template("template_deal_won_followup", "user1")
    await first.trigger_workflows(TriggerType.DEAL_WON, {"dealId": "d1"})

    second = _manager()
    loaded = second.get_workflow(wf.id)
    assert loaded is not None
    assert loaded.execution_count == 1
    assert [a.type for a in loaded.actions] == [a.type for a in wf.actions]

    second.delete_workflow(wf.id)
    assert _manager().list_workflows() == []


def test_create_custom_workflow_returns_builder(manager) -> None:
    wf = (
        manager.create_custom_workflow()
        .set_name("Custom")
        .set_description("d")
        .set_trigger(TriggerType.CONTACT_CREATED)
        .add_assign_owner_action("round_robin")
        .set_created_by("user1")
        .build()
    )
    manager.register_workflow(wf)

    assert manager.get_workflow(wf.id) == wf
    assert manager.cancel_execution("exec_missing") is False


@pytest.mark.asyncio
async def test_trigger_saves_store_off_the_event_loop(tmp_path: Path, effects, fake_sleep) -> None:
    saved_from: list[int] = []

    class RecordingStore(WorkflowStore):
        def save(self, workflows) -> None:
            saved_from.append(threading.get_ident())
            super().save(workflows)

    registry = WorkflowRegistry()
    engine = WorkflowEngine(registry=registry, dispatcher=ActionDispatcher(effects), sleep=fake_sleep)
    manager = WorkflowManager(
        registry=registry, engine=engine, store=RecordingStore(tmp_path / "workflows.json")
    )
    manager.create_from_template("template_deal_won_followup", "user1")
    saved_from.clear()

    await manager.trigger_workflows(TriggerType.DEAL_WON, {"dealId": "d1"})

    assert len(saved_from) == 1
    assert saved_from[0] != threading.get_ident()
