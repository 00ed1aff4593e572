from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .models import Workflow

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """In-memory mapping of workflow id -> workflow.

    ``register`` is an upsert: registering an existing id replaces the record in
    place (creation, update, activate and deactivate all go through it).
    """

    def __init__(self, workflows: list[Workflow] | None = None) -> None:
        self._workflows: dict[str, Workflow] = {}
        self._lock = threading.RLock()
        for workflow in workflows or []:
            self.register(workflow)

    def register(self, workflow: Workflow) -> None:
        with self._lock:
            replaced = workflow.id in self._workflows
            self._workflows[workflow.id] = workflow
        logger.debug(
            "Workflow registered",
            extra={"workflow_id": workflow.id, "replaced": replaced},
        )

    def replace(
        self, workflow_id: str, fn: Callable[[Workflow], Workflow]
    ) -> Workflow | None:
        """Swap the stored record for ``fn(current)`` under the lock.

        Returns None, calling nothing, when the id is not registered. If ``fn``
        raises, the stored record is left as it was.
        """

        with self._lock:
            current = self._workflows.get(workflow_id)
            if current is None:
                return None
            updated = fn(current)
            if updated.id != workflow_id:
                raise ValueError(f"Replacement must keep id {workflow_id}, got {updated.id}")
            self._workflows[workflow_id] = updated
        logger.debug("Workflow replaced", extra={"workflow_id": workflow_id})
        return updated

    def unregister(self, workflow_id: str) -> bool:
        with self._lock:
            removed = self._workflows.pop(workflow_id, None) is not None
        if removed:
            logger.debug("Workflow unregistered", extra={"workflow_id": workflow_id})
        return removed

    def get(self, workflow_id: str) -> Workflow | None:
        with self._lock:
            return self._workflows.get(workflow_id)

    def list_all(self) -> list[Workflow]:
        with self._lock:
            return list(self._workflows.values())

    def list_active(self) -> list[Workflow]:
        with self._lock:
            return [w for w in self._workflows.values() if w.is_active]

    def increment_execution_count(self, workflow_id: str) -> Workflow | None:
        """Atomically bump ``execution_count``.

        Returns None when the workflow was unregistered while it was running.
        """

        with self._lock:
            current = self._workflows.get(workflow_id)
            if current is None:
                return None
            updated = current.model_copy(update={"execution_count": current.execution_count + 1})
            self._workflows[workflow_id] = updated
            return updated

    def __contains__(self, workflow_id: object) -> bool:
        with self._lock:
            return workflow_id in self._workflows

    def __len__(self) -> int:
        with self._lock:
            return len(self._workflows)
