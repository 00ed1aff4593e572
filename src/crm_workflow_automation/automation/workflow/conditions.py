"""Trigger condition evaluation.

Conditions are ANDed. Field values are looked up by dot path in the event
context; a path that cannot be resolved yields :data:`MISSING` rather than an
error.

Comparison semantics follow the loosely-typed rules that existing
workflow definitions were written against:

- ``equals`` / ``not_equals`` use strict equality (no type coercion).
- ``contains`` compares string forms, so a missing field reads as
  ``"undefined"`` and ``None`` as ``"null"``. Pass ``strict_contains=True`` to
  treat missing/``None`` as containing nothing.
- ``greater_than`` / ``less_than`` coerce both sides to numbers; anything
  non-numeric becomes NaN and every comparison with NaN is false.

Matching is case-sensitive.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from .models import ConditionOperator, TriggerCondition

logger = logging.getLogger(__name__)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def get_nested_value(obj: Mapping[str, Any], path: str) -> Any:
    """Resolve a dot-separated path, returning MISSING when any segment is absent."""

    current: Any = obj
    for key in path.split("."):
        if isinstance(current, Mapping):
            if key not in current:
                return MISSING
            current = current[key]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not key.isdigit() or int(key) >= len(current):
                return MISSING
            current = current[int(key)]
        else:
            return MISSING
    return current


def _strict_equals(left: Any, right: Any) -> bool:
    if left is MISSING or right is MISSING:
        return False
    # bool is an int subclass; keep True distinct from 1.
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return bool(left == right)


def _to_text(value: Any) -> str:
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return "[object Object]"
    if isinstance(value, Sequence):
        return ",".join("" if item is None else _to_text(item) for item in value)
    return str(value)


def _to_number(value: Any) -> float:
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        unsigned = text.lstrip("+-")
        if unsigned == "Infinity" and len(text) - len(unsigned) <= 1:
            return -math.inf if text.startswith("-") else math.inf
        # float() also takes "inf", "nan" and digit separators; numbers here don't.
        if "_" in text or unsigned.lower() in {"inf", "infinity", "nan"}:
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    if isinstance(value, Sequence) and not isinstance(value, bytes):
        if len(value) == 0:
            return 0.0
        if len(value) == 1:
            return _to_number(value[0])
    return math.nan


def _is_empty(value: Any) -> bool:
    return value is MISSING or value is None or value == ""


def evaluate_condition(
    condition: TriggerCondition,
    context: Mapping[str, Any],
    *,
    strict_contains: bool = False,
) -> bool:
    actual = get_nested_value(context, condition.field)
    expected = condition.value
    op = condition.operator

    if op == ConditionOperator.EQUALS:
        return _strict_equals(actual, expected)
    if op == ConditionOperator.NOT_EQUALS:
        return not _strict_equals(actual, expected)
    if op == ConditionOperator.CONTAINS:
        if strict_contains and (actual is MISSING or actual is None):
            return False
        return _to_text(expected) in _to_text(actual)
    if op == ConditionOperator.GREATER_THAN:
        return _to_number(actual) > _to_number(expected)
    if op == ConditionOperator.LESS_THAN:
        return _to_number(actual) < _to_number(expected)
    if op == ConditionOperator.IS_EMPTY:
        return _is_empty(actual)
    if op == ConditionOperator.IS_NOT_EMPTY:
        return not _is_empty(actual)

    logger.warning(
        "Unknown condition operator; failing closed",
        extra={"operator": str(op), "field": condition.field},
    )
    return False


def evaluate_conditions(
    conditions: Sequence[TriggerCondition],
    context: Mapping[str, Any],
    *,
    strict_contains: bool = False,
) -> bool:
    """True when every condition holds. An empty sequence always matches."""

    return all(
        evaluate_condition(c, context, strict_contains=strict_contains) for c in conditions
    )
