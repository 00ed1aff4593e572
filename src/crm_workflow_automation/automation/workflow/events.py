from __future__ import annotations

from dataclasses import dataclass, field

from .models import TriggerType


@dataclass(frozen=True, slots=True)
class TriggerEvent:
    """A business event emitted by the surrounding application.

    Examples: a deal moved stage, a contact was created, a scheduler tick.
    Events carry facts only; the engine decides which workflows fire.
    """

    type: TriggerType
    payload: dict[str, object] = field(default_factory=dict)

    @staticmethod
    def from_json(obj: dict[str, object]) -> TriggerEvent:
        raw_type = obj.get("type")
        if not isinstance(raw_type, str):
            raise ValueError("Trigger event requires a string 'type'")
        payload = obj.get("payload") or obj.get("context") or {}
        if not isinstance(payload, dict):
            raise ValueError("Trigger event payload must be an object")
        return TriggerEvent(type=TriggerType(raw_type), payload=dict(payload))
