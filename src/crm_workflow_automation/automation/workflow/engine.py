"""Workflow execution engine.

For each event the engine:

1. selects active workflows whose trigger type matches,
2. evaluates their trigger conditions against the event context,
3. creates a RUNNING execution record per match and appends it to history,
4. waits out the trigger's delay, then dispatches actions strictly in order,
5. finalizes the record as COMPLETED or FAILED.

Action failures are contained in the run's record; they never abort sibling
runs and never propagate out of :meth:`WorkflowEngine.trigger_workflows`.

The delay is an in-memory cooperative wait. It does not survive a process
restart.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Any

from .actions import ActionDispatcher
from .conditions import evaluate_conditions
from .errors import ExecutionCancelledError
from .events import TriggerEvent
from .history import ExecutionHistory
from .models import TriggerType, Workflow, utc_now
from .registry import WorkflowRegistry
from .state_machine import ExecutionRecord, ExecutionStatus, start_execution, transition

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


class WorkflowEngine:
    def __init__(
        self,
        *,
        registry: WorkflowRegistry,
        dispatcher: ActionDispatcher,
        history: ExecutionHistory | None = None,
        strict_contains: bool = False,
        clock: Callable[[], datetime] = utc_now,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.registry = registry
        self.history = history if history is not None else ExecutionHistory()
        self._dispatcher = dispatcher
        self._strict_contains = strict_contains
        self._clock = clock
        self._sleep = sleep
        self._cancel_events: dict[str, asyncio.Event] = {}

    def find_matching_workflows(
        self, trigger_type: TriggerType, context: Mapping[str, Any]
    ) -> list[Workflow]:
        return [
            workflow
            for workflow in self.registry.list_active()
            if workflow.trigger.type == trigger_type
            and evaluate_conditions(
                workflow.trigger.conditions, context, strict_contains=self._strict_contains
            )
        ]

    async def trigger_workflows(
        self, trigger_type: TriggerType, context: Mapping[str, Any]
    ) -> list[ExecutionRecord]:
        """Run every matching workflow and return one record per run.

        An event matching no workflow returns an empty list.
        """

        trigger_type = TriggerType(trigger_type)
        matching = self.find_matching_workflows(trigger_type, context)
        logger.info(
            "Trigger received",
            extra={"trigger_type": trigger_type.value, "matched": len(matching)},
        )
        if not matching:
            return []

        started: list[tuple[Workflow, ExecutionRecord]] = []
        for workflow in matching:
            record = start_execution(
                workflow_id=workflow.id, context=context, triggered_at=self._clock()
            )
            self._cancel_events[record.id] = asyncio.Event()
            self.history.add(record)
            started.append((workflow, record))

        return list(
            await asyncio.gather(
                *(self._run(workflow, record) for workflow, record in started)
            )
        )

    async def handle_event(self, event: TriggerEvent) -> list[ExecutionRecord]:
        return await self.trigger_workflows(event.type, event.payload)

    def cancel_execution(self, execution_id: str) -> bool:
        """Request cancellation of an in-flight run.

        Honoured before and after the trigger delay and between actions.
        """

        token = self._cancel_events.get(execution_id)
        if token is None:
            return False
        token.set()
        logger.info("Execution cancellation requested", extra={"execution_id": execution_id})
        return True

    def get_execution(self, execution_id: str) -> ExecutionRecord | None:
        return self.history.get(execution_id)

    def get_execution_history(self, workflow_id: str) -> list[ExecutionRecord]:
        return self.history.for_workflow(workflow_id)

    async def _run(self, workflow: Workflow, record: ExecutionRecord) -> ExecutionRecord:
        token = self._cancel_events[record.id]
        try:
            delay = workflow.trigger.time_delay
            if delay:
                _checkpoint(token)
                await self._wait(delay * 60, token)
            for action in workflow.actions:
                _checkpoint(token)
                await self._dispatcher.dispatch(action, record.context)
        except asyncio.CancelledError:
            self._finish(record, ExecutionStatus.FAILED, error="Execution cancelled")
            raise
        except Exception as e:
            logger.exception(
                "Workflow execution failed",
                extra={"workflow_id": workflow.id, "execution_id": record.id},
            )
            return self._finish(record, ExecutionStatus.FAILED, error=str(e) or type(e).__name__)
        finally:
            self._cancel_events.pop(record.id, None)

        finished = self._finish(record, ExecutionStatus.COMPLETED)
        self.registry.increment_execution_count(workflow.id)
        logger.info(
            "Workflow execution completed",
            extra={"workflow_id": workflow.id, "execution_id": record.id},
        )
        return finished

    def _finish(
        self, record: ExecutionRecord, to: ExecutionStatus, *, error: str | None = None
    ) -> ExecutionRecord:
        finished = transition(current=record, to=to, at=self._clock(), error=error)
        self.history.finalize(finished)
        return finished

    async def _wait(self, seconds: float, token: asyncio.Event) -> None:
        sleeper = asyncio.ensure_future(self._sleep(seconds))
        cancelled = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({sleeper, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, cancelled):
                if not task.done():
                    task.cancel()
        _checkpoint(token)
        sleeper.result()


def _checkpoint(token: asyncio.Event) -> None:
    if token.is_set():
        raise ExecutionCancelledError()
