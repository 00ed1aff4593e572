#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the automation components directly:

* build a custom workflow with the fluent builder
* instantiate a template
* fire a CRM event and inspect the execution records

Nothing is persisted; effects are written to the structured log.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from crm_workflow_automation.automation.effects import DefaultEffectHandlers
from crm_workflow_automation.automation.logging import configure_logging
from crm_workflow_automation.automation.workflow import (
    ActionDispatcher,
    ActivityType,
    TriggerType,
    WorkflowEngine,
    WorkflowManager,
    WorkflowRegistry,
)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a CRM workflow (programmatic example).")
    parser.add_argument("--deal-value", type=float, default=75000.0, help="Value of the new deal")
    parser.add_argument("--log-level", default="INFO", help="Root logging level")
    return parser.parse_args(argv)


async def _run(deal_value: float) -> None:
    registry = WorkflowRegistry()
    engine = WorkflowEngine(
        registry=registry,
        dispatcher=ActionDispatcher(DefaultEffectHandlers()),
    )
    manager = WorkflowManager(registry=registry, engine=engine)

    custom = (
        manager.create_custom_workflow()
        .set_name("New deal qualification")
        .set_description("Book a qualification call for every deal above 1000")
        .set_trigger(TriggerType.DEAL_CREATED)
        .add_trigger_condition("value", "greater_than", 1000)
        .add_schedule_activity_action(ActivityType.CALL, "Qualification call", "Qualify need", 1)
        .set_created_by("example")
        .build()
    )
    manager.register_workflow(custom)
    manager.create_from_template("template_high_value_deal", "example")

    records = await manager.trigger_workflows(
        TriggerType.DEAL_CREATED, {"dealId": "deal-42", "value": deal_value}
    )
    if not records:
        print("No workflow matched")
    for record in records:
        workflow = manager.get_workflow(record.workflow_id)
        name = workflow.name if workflow else record.workflow_id
        print(f"{name}: {record.status.value}" + (f" ({record.error})" if record.error else ""))


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)
    asyncio.run(_run(args.deal_value))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
