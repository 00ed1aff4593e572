from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from .models import Workflow

logger = logging.getLogger(__name__)


class WorkflowStore:
    """JSON-file backed store for registered workflows.

    The file holds a list of workflows in their camelCase export shape, so an
    exported workflow and a stored one are interchangeable. Saves are
    serialized, so route threads and the event loop can share one store.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Workflow]:
        if not self._path.exists():
            return []

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(
                "Workflow state file is not valid JSON; treating as empty",
                extra={"path": str(self._path)},
            )
            return []

        if not isinstance(raw, list):
            logger.warning(
                "Workflow state file is not a list; treating as empty",
                extra={"path": str(self._path)},
            )
            return []

        workflows: list[Workflow] = []
        for item in raw:
            try:
                workflows.append(Workflow.model_validate(item))
            except ValidationError:
                logger.warning(
                    "Skipping invalid workflow entry",
                    extra={"path": str(self._path), "workflow_id": _entry_id(item)},
                )
        return workflows

    def save(self, workflows: Iterable[Workflow]) -> None:
        payload = [w.to_json() for w in workflows]
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")


def _entry_id(item: object) -> str | None:
    if isinstance(item, dict):
        value = item.get("id")
        return value if isinstance(value, str) else None
    return None
