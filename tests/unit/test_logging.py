"""Unit tests for structured logging."""

from __future__ import annotations

import json
import logging
import sys

from crm_workflow_automation.automation.logging import JsonFormatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="crm.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Workflow execution completed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_lifts_run_ids_to_top_level() -> None:
    payload = json.loads(
        JsonFormatter().format(
            _record(workflow_id="workflow_1", execution_id="exec_1", count=2)
        )
    )

    assert payload["level"] == "INFO"
    assert payload["logger"] == "crm.test"
    assert payload["message"] == "Workflow execution completed"
    assert payload["workflow_id"] == "workflow_1"
    assert payload["execution_id"] == "exec_1"
    assert payload["extra"] == {"count": 2}


def test_json_formatter_omits_extra_when_only_ids_given() -> None:
    payload = json.loads(JsonFormatter().format(_record(trigger_type="deal_won")))

    assert payload["trigger_type"] == "deal_won"
    assert "extra" not in payload
    assert "taskName" not in payload


def test_json_formatter_renders_non_serializable_values() -> None:
    payload = json.loads(JsonFormatter().format(_record(path=object())))

    assert payload["extra"]["path"].startswith("<object object")


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["exception"]


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("debug")
        configure_logging("warning")

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("requests").level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
