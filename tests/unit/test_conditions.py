"""Unit tests for trigger condition evaluation."""

from __future__ import annotations

import pytest

from crm_workflow_automation.automation.workflow.conditions import (
    MISSING,
    evaluate_condition,
    evaluate_conditions,
    get_nested_value,
)
from crm_workflow_automation.automation.workflow.models import TriggerCondition


def _cond(field: str, operator: str, value=None) -> TriggerCondition:
    return TriggerCondition(field=field, operator=operator, value=value)


def test_get_nested_value_walks_mappings_and_lists() -> None:
    context = {"deal": {"owner": {"name": "Ada"}, "tags": ["hot", "q1"]}}

    assert get_nested_value(context, "deal.owner.name") == "Ada"
    assert get_nested_value(context, "deal.tags.1") == "q1"
    assert get_nested_value(context, "deal.tags.7") is MISSING
    assert get_nested_value(context, "deal.missing.name") is MISSING
    assert get_nested_value(context, "deal.owner.name.first") is MISSING
    assert get_nested_value({"a": None}, "a.b") is MISSING


def test_empty_conditions_always_match() -> None:
    assert evaluate_conditions([], {}) is True
    assert evaluate_conditions([], {"anything": 1}) is True


def test_conditions_are_anded() -> None:
    conditions = [_cond("value", "greater_than", 1000), _cond("stage", "equals", "open")]

    assert evaluate_conditions(conditions, {"value": 5000, "stage": "open"}) is True
    assert evaluate_conditions(conditions, {"value": 5000, "stage": "won"}) is False
    assert evaluate_conditions(conditions, {"value": 10, "stage": "open"}) is False
    assert evaluate_conditions(list(reversed(conditions)), {"value": 10, "stage": "open"}) is False


def test_equals_is_strict() -> None:
    assert evaluate_condition(_cond("n", "equals", 1), {"n": 1}) is True
    assert evaluate_condition(_cond("n", "equals", "1"), {"n": 1}) is False
    assert evaluate_condition(_cond("n", "equals", 1), {"n": True}) is False
    assert evaluate_condition(_cond("s", "equals", "Won"), {"s": "won"}) is False


def test_not_equals_on_missing_field_is_true() -> None:
    assert evaluate_condition(_cond("stage", "not_equals", "won"), {}) is True
    assert evaluate_condition(_cond("stage", "equals", None), {}) is False


def test_contains_uses_string_forms() -> None:
    assert evaluate_condition(_cond("title", "contains", "Corp"), {"title": "Acme Corp"}) is True
    assert evaluate_condition(_cond("title", "contains", "corp"), {"title": "Acme Corp"}) is False
    assert evaluate_condition(_cond("tags", "contains", "hot"), {"tags": ["hot", "q1"]}) is True
    assert evaluate_condition(_cond("n", "contains", 23), {"n": 1234}) is True


def test_contains_on_missing_or_null_field_keeps_string_quirk() -> None:
    assert evaluate_condition(_cond("title", "contains", "def"), {}) is True
    assert evaluate_condition(_cond("title", "contains", "ul"), {"title": None}) is True


def test_strict_contains_never_matches_missing_or_null() -> None:
    assert evaluate_condition(_cond("title", "contains", "def"), {}, strict_contains=True) is False
    assert (
        evaluate_condition(_cond("title", "contains", "ul"), {"title": None}, strict_contains=True)
        is False
    )


@pytest.mark.parametrize(
    ("actual", "expected"),
    [
        (5000, True),
        ("5000", True),
        (" 1500 ", True),
        (1000, False),
        ("abc", False),
        (None, False),
        (True, False),
        ("1_500", False),
        ("inf", False),
        ("nan", False),
        ("Infinity", True),
        ("+-Infinity", False),
    ],
)
def test_greater_than_coerces_numbers(actual, expected: bool) -> None:
    assert evaluate_condition(_cond("value", "greater_than", 1000), {"value": actual}) is expected


def test_numeric_comparison_with_missing_field_is_false() -> None:
    assert evaluate_condition(_cond("value", "greater_than", 0), {}) is False
    assert evaluate_condition(_cond("value", "less_than", 0), {}) is False


def test_less_than_treats_null_and_blank_as_zero() -> None:
    assert evaluate_condition(_cond("value", "less_than", 1), {"value": None}) is True
    assert evaluate_condition(_cond("value", "less_than", 1), {"value": ""}) is True


def test_is_empty_and_is_not_empty() -> None:
    for context in ({}, {"email": None}, {"email": ""}):
        assert evaluate_condition(_cond("email", "is_empty"), context) is True
        assert evaluate_condition(_cond("email", "is_not_empty"), context) is False

    for value in ("a@b.c", 0, False, []):
        assert evaluate_condition(_cond("email", "is_empty"), {"email": value}) is False


def test_unknown_operator_fails_closed(caplog) -> None:
    condition = TriggerCondition.model_construct(field="x", operator="matches_regex", value=".*")

    assert evaluate_condition(condition, {"x": "anything"}) is False
    assert "Unknown condition operator" in caplog.text


def test_less_than_accepts_negative_infinity_spelling() -> None:
    assert evaluate_condition(_cond("value", "less_than", 0), {"value": "-Infinity"}) is True
    assert evaluate_condition(_cond("value", "less_than", 0), {"value": "-inf"}) is False
