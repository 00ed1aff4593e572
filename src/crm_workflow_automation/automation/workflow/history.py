"""Append-only execution history.

Records are keyed by execution id and never deleted automatically unless a
retention cap is configured, in which case the oldest *terminal* records are
evicted first. Running records are never evicted.
"""

from __future__ import annotations

import logging
import threading

from .state_machine import ExecutionRecord, IllegalTransitionError

logger = logging.getLogger(__name__)


class ExecutionHistory:
    def __init__(self, *, max_records: int | None = None) -> None:
        if max_records is not None and max_records <= 0:
            raise ValueError("max_records must be a positive integer")
        self._records: dict[str, ExecutionRecord] = {}
        self._max_records = max_records
        self._lock = threading.Lock()

    def add(self, record: ExecutionRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"Execution already recorded: {record.id}")
            self._records[record.id] = record
            self._evict_unlocked()

    def finalize(self, record: ExecutionRecord) -> None:
        """Replace a running record with its terminal version."""

        if not record.is_terminal:
            raise IllegalTransitionError(f"Execution {record.id} is not in a terminal state")
        with self._lock:
            existing = self._records.get(record.id)
            if existing is not None and existing.is_terminal:
                raise IllegalTransitionError(f"Execution {record.id} is already finalized")
            self._records[record.id] = record
            self._evict_unlocked()

    def get(self, execution_id: str) -> ExecutionRecord | None:
        with self._lock:
            return self._records.get(execution_id)

    def for_workflow(self, workflow_id: str) -> list[ExecutionRecord]:
        """Records for one workflow, newest first."""

        with self._lock:
            matching = [r for r in self._records.values() if r.workflow_id == workflow_id]
        return sorted(matching, key=lambda r: r.triggered_at, reverse=True)

    def list(self) -> list[ExecutionRecord]:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _evict_unlocked(self) -> None:
        if self._max_records is None:
            return
        overflow = len(self._records) - self._max_records
        if overflow <= 0:
            return
        # dicts keep insertion order, so the first terminal records are the oldest.
        evictable = [rid for rid, r in self._records.items() if r.is_terminal][:overflow]
        for rid in evictable:
            del self._records[rid]
        if evictable:
            logger.debug("Evicted execution records", extra={"count": len(evictable)})
