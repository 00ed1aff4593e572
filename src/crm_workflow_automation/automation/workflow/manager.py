"""High-level API for workflows, templates and executions.

The manager composes a :class:`WorkflowRegistry`, a :class:`WorkflowEngine`
and a :class:`TemplateCatalog`. It is the only place workflows are mutated
after registration: every change builds a new record and re-registers it
under the same id.

If a :class:`WorkflowStore` is given, the registry is seeded from it and
saved after each mutation.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from .builder import WorkflowBuilder, new_workflow_id
from .engine import WorkflowEngine
from .errors import DefinitionError, NotFoundError
from .models import TriggerType, Workflow, WorkflowStats, WorkflowTemplate, utc_now
from .registry import WorkflowRegistry
from .state_machine import ExecutionRecord, ExecutionStatus
from .store import WorkflowStore
from .templates import TemplateCatalog

logger = logging.getLogger(__name__)

_WORKFLOW_FIELDS: frozenset[str] = frozenset(
    to_camel(name) for name in Workflow.model_fields
)


class WorkflowManager:
    def __init__(
        self,
        *,
        registry: WorkflowRegistry,
        engine: WorkflowEngine,
        catalog: TemplateCatalog | None = None,
        store: WorkflowStore | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.catalog = catalog if catalog is not None else TemplateCatalog()
        self._store = store
        self._clock = clock
        self._persist_lock = threading.Lock()

        if store is not None:
            loaded = store.load()
            for workflow in loaded:
                registry.register(workflow)
            logger.info(
                "Workflows loaded",
                extra={"path": str(store.path), "count": len(loaded)},
            )

    # Templates

    def get_templates(self) -> list[WorkflowTemplate]:
        return self.catalog.list()

    def get_templates_by_category(self, category: str) -> list[WorkflowTemplate]:
        return self.catalog.by_category(category)

    def search_templates(self, tag: str) -> list[WorkflowTemplate]:
        return self.catalog.search_by_tag(tag)

    def get_categories(self) -> list[str]:
        return self.catalog.categories()

    def create_from_template(self, template_id: str, user_id: str) -> Workflow:
        template = self.catalog.get(template_id)
        if template is None:
            raise NotFoundError("template", template_id)

        now = self._clock()
        workflow = Workflow(
            id=new_workflow_id(),
            name=template.name,
            description=template.description,
            is_active=True,
            trigger=template.trigger.model_copy(deep=True),
            actions=[a.model_copy(deep=True) for a in template.actions],
            created_by=user_id,
            created_at=now,
            updated_at=now,
            execution_count=0,
        )
        self.register_workflow(workflow)
        logger.info(
            "Workflow created from template",
            extra={"workflow_id": workflow.id, "template_id": template_id},
        )
        return workflow

    # Lifecycle

    def create_custom_workflow(self) -> WorkflowBuilder:
        return WorkflowBuilder()

    def register_workflow(self, workflow: Workflow) -> Workflow:
        self.registry.register(workflow)
        self._persist()
        return workflow

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        return self.registry.get(workflow_id)

    def list_workflows(self) -> list[Workflow]:
        return self.registry.list_all()

    def get_active_workflows(self) -> list[Workflow]:
        return self.registry.list_active()

    def update_workflow(self, workflow_id: str, updates: Mapping[str, Any]) -> Workflow:
        """Merge ``updates`` over the stored record and re-register it.

        Keys may be snake_case or camelCase. ``id`` can never change and
        ``updatedAt`` is always regenerated.
        """

        changes: dict[str, Any] = {}
        for key, value in updates.items():
            alias = key if key in _WORKFLOW_FIELDS else to_camel(key)
            if alias not in _WORKFLOW_FIELDS:
                raise DefinitionError(f"Unknown workflow field: {key}")
            changes[alias] = value
        changes["id"] = workflow_id
        changes["updatedAt"] = self._clock()

        def merge(existing: Workflow) -> Workflow:
            # Runs under the registry lock; a count bumped by a finishing run
            # is carried over unless the caller set one.
            merged: dict[str, Any] = existing.model_dump(by_alias=True)
            merged.update(changes)
            try:
                return Workflow.model_validate(merged)
            except ValidationError as e:
                raise DefinitionError(f"Invalid workflow update: {e}") from e

        updated = self.registry.replace(workflow_id, merge)
        if updated is None:
            raise NotFoundError("workflow", workflow_id)

        self._persist()
        logger.info("Workflow updated", extra={"workflow_id": workflow_id})
        return updated

    def activate_workflow(self, workflow_id: str) -> Workflow:
        return self.update_workflow(workflow_id, {"is_active": True})

    def deactivate_workflow(self, workflow_id: str) -> Workflow:
        return self.update_workflow(workflow_id, {"is_active": False})

    def delete_workflow(self, workflow_id: str) -> None:
        if self.registry.unregister(workflow_id):
            self._persist()
            logger.info("Workflow deleted", extra={"workflow_id": workflow_id})

    # Export / import

    def export_workflow(self, workflow_id: str) -> str:
        workflow = self._require(workflow_id)
        return json.dumps(workflow.to_json(), indent=2, ensure_ascii=False)

    def import_workflow(self, payload: str, user_id: str) -> Workflow:
        """Register a workflow from an exported JSON document.

        The payload's id, creator, timestamps and execution count are replaced.
        """

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise DefinitionError(f"Workflow import is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise DefinitionError("Workflow import must be a JSON object")

        for key in ("created_by", "created_at", "updated_at", "execution_count"):
            data.pop(key, None)

        now = self._clock()
        data.update(
            {
                "id": new_workflow_id(),
                "createdBy": user_id,
                "createdAt": now,
                "updatedAt": now,
                "executionCount": 0,
            }
        )

        try:
            workflow = Workflow.model_validate(data)
        except ValidationError as e:
            raise DefinitionError(f"Invalid workflow import: {e}") from e

        self.register_workflow(workflow)
        logger.info("Workflow imported", extra={"workflow_id": workflow.id, "user_id": user_id})
        return workflow

    # Executions

    async def trigger_workflows(
        self, trigger_type: TriggerType, context: Mapping[str, Any]
    ) -> list[ExecutionRecord]:
        records = await self.engine.trigger_workflows(trigger_type, context)
        if any(r.status == ExecutionStatus.COMPLETED for r in records):
            await asyncio.to_thread(self._persist)
        return records

    def get_execution_history(self, workflow_id: str) -> list[ExecutionRecord]:
        return self.engine.get_execution_history(workflow_id)

    def cancel_execution(self, execution_id: str) -> bool:
        return self.engine.cancel_execution(execution_id)

    def get_workflow_stats(self, workflow_id: str) -> WorkflowStats:
        """Summarize a workflow's runs from history.

        History outlives the workflow, so a deleted or unknown id is not an
        error; it simply has no runs.
        """

        executions = self.engine.get_execution_history(workflow_id)

        completed = [e for e in executions if e.status == ExecutionStatus.COMPLETED]
        failed = [e for e in executions if e.status == ExecutionStatus.FAILED]
        durations = [d for d in (e.duration_millis for e in completed) if d is not None]

        return WorkflowStats(
            total_executions=len(executions),
            successful_executions=len(completed),
            failed_executions=len(failed),
            average_execution_time_millis=sum(durations) / len(durations) if durations else 0.0,
        )

    def _require(self, workflow_id: str) -> Workflow:
        workflow = self.registry.get(workflow_id)
        if workflow is None:
            raise NotFoundError("workflow", workflow_id)
        return workflow

    def _persist(self) -> None:
        if self._store is None:
            return
        # Snapshot and write together so an older snapshot never lands last.
        with self._persist_lock:
            self._store.save(self.registry.list_all())
