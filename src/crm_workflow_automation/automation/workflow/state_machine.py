from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from .models import CamelModel, utc_now


class ExecutionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[ExecutionStatus, set[ExecutionStatus]] = {
    ExecutionStatus.PENDING: {ExecutionStatus.RUNNING},
    ExecutionStatus.RUNNING: {ExecutionStatus.COMPLETED, ExecutionStatus.FAILED},
    ExecutionStatus.COMPLETED: set(),
    ExecutionStatus.FAILED: set(),
}

TERMINAL_STATUSES = frozenset({ExecutionStatus.COMPLETED, ExecutionStatus.FAILED})


class IllegalTransitionError(ValueError):
    pass


class ExecutionRecord(CamelModel):
    """One run of one workflow in response to one matching event."""

    id: str
    workflow_id: str
    triggered_at: datetime
    completed_at: datetime | None = None
    status: ExecutionStatus
    error: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def duration_millis(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.triggered_at).total_seconds() * 1000.0


def new_execution_id() -> str:
    return f"exec_{uuid.uuid4().hex}"


def start_execution(
    *,
    workflow_id: str,
    context: Mapping[str, Any],
    triggered_at: datetime | None = None,
) -> ExecutionRecord:
    """Create a record directly in RUNNING; PENDING is never observable."""

    return ExecutionRecord(
        id=new_execution_id(),
        workflow_id=workflow_id,
        triggered_at=triggered_at or utc_now(),
        status=ExecutionStatus.RUNNING,
        context=dict(context),
    )


def transition(
    *,
    current: ExecutionRecord,
    to: ExecutionStatus,
    at: datetime | None = None,
    error: str | None = None,
) -> ExecutionRecord:
    allowed = ALLOWED_TRANSITIONS.get(current.status, set())
    if to not in allowed:
        raise IllegalTransitionError(
            f"Illegal transition: {current.status.value} -> {to.value}"
        )
    updates: dict[str, Any] = {"status": to}
    if to in TERMINAL_STATUSES:
        updates["completed_at"] = at or utc_now()
    if error is not None:
        updates["error"] = error
    return current.model_copy(update=updates)
