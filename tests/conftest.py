"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from crm_workflow_automation.automation.workflow.actions import ActionDispatcher
from crm_workflow_automation.automation.workflow.engine import WorkflowEngine
from crm_workflow_automation.automation.workflow.history import ExecutionHistory
from crm_workflow_automation.automation.workflow.manager import WorkflowManager
from crm_workflow_automation.automation.workflow.registry import WorkflowRegistry

T0 = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)


class RecordingEffects:
    """Effect handlers that record every call.

    Ports named in ``fail_on`` raise ``RuntimeError`` instead.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_on: set[str] = set()

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    async def schedule_activity(self, **kwargs: Any) -> None:
        self._record("schedule_activity", **kwargs)

    async def send_email(self, **kwargs: Any) -> None:
        self._record("send_email", **kwargs)

    async def update_field(self, **kwargs: Any) -> None:
        self._record("update_field", **kwargs)

    async def create_task(self, **kwargs: Any) -> None:
        self._record("create_task", **kwargs)

    async def assign_owner(self, **kwargs: Any) -> None:
        self._record("assign_owner", **kwargs)

    async def send_notification(self, **kwargs: Any) -> None:
        self._record("send_notification", **kwargs)

    async def call_webhook(self, *, url: str | None, payload: Mapping[str, Any]) -> None:
        self._record("call_webhook", url=url, payload=dict(payload))


class TickingClock:
    """Deterministic clock advancing by ``step`` on every call."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(milliseconds=250)):
        self._now = start
        self._step = step

    def __call__(self) -> datetime:
        now = self._now
        self._now = now + self._step
        return now


class FakeSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def effects() -> RecordingEffects:
    return RecordingEffects()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def registry() -> WorkflowRegistry:
    return WorkflowRegistry()


@pytest.fixture
def history() -> ExecutionHistory:
    return ExecutionHistory()


@pytest.fixture
def engine(
    registry: WorkflowRegistry,
    history: ExecutionHistory,
    effects: RecordingEffects,
    fake_sleep: FakeSleep,
    clock: TickingClock,
) -> WorkflowEngine:
    return WorkflowEngine(
        registry=registry,
        dispatcher=ActionDispatcher(effects, clock=lambda: T0),
        history=history,
        clock=clock,
        sleep=fake_sleep,
    )


@pytest.fixture
def manager(registry: WorkflowRegistry, engine: WorkflowEngine) -> WorkflowManager:
    return WorkflowManager(
        registry=registry,
        engine=engine,
        clock=TickingClock(step=timedelta(seconds=1)),
    )
