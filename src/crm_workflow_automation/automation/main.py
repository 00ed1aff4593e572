"""CLI entrypoint for workflow automation.

Every command operates on the JSON workflow store named by
``AUTOMATION_WORKFLOWS_PATH``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from crm_workflow_automation import __version__
from crm_workflow_automation.automation.config import AutomationSettings
from crm_workflow_automation.automation.factory import build_manager
from crm_workflow_automation.automation.logging import configure_logging
from crm_workflow_automation.automation.workflow.errors import DefinitionError, NotFoundError
from crm_workflow_automation.automation.workflow.models import TriggerType
from crm_workflow_automation.automation.workflow.state_machine import ExecutionStatus

logger = logging.getLogger(__name__)


async def _no_sleep(_seconds: float) -> None:
    return None


def _parse_context(value: str | None, path: str | None) -> dict[str, Any]:
    if path is not None:
        value = Path(path).read_text(encoding="utf-8")
    if value is None:
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise DefinitionError(f"Event context is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise DefinitionError("Event context must be a JSON object")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-automation",
        description="Rule-driven CRM workflow automation",
    )
    parser.add_argument(
        "--version", action="version", version=f"crm-workflow-automation {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    templates = subparsers.add_parser("templates", help="List workflow templates")
    templates.add_argument("--category", default=None, help="Only templates in this category")
    templates.add_argument("--tag", default=None, help="Only templates with a matching tag")

    subparsers.add_parser("categories", help="List template categories")

    from_template = subparsers.add_parser(
        "create-from-template", help="Create and register a workflow from a template"
    )
    from_template.add_argument("--template-id", required=True, help="Template id")
    from_template.add_argument("--user", required=True, help="Creator user id")

    import_cmd = subparsers.add_parser("import", help="Import a workflow from an exported JSON file")
    import_cmd.add_argument("--file", required=True, help="Path to the exported workflow JSON")
    import_cmd.add_argument("--user", required=True, help="Importing user id")

    export_cmd = subparsers.add_parser("export", help="Print a workflow as JSON")
    export_cmd.add_argument("--workflow-id", required=True, help="Workflow id")
    export_cmd.add_argument("--output", default=None, help="Write to this file instead of stdout")

    list_cmd = subparsers.add_parser("list", help="List registered workflows")
    list_cmd.add_argument("--active-only", action="store_true", help="Only active workflows")

    for name, help_text in (
        ("activate", "Activate a workflow"),
        ("deactivate", "Deactivate a workflow"),
        ("delete", "Delete a workflow (no-op if absent)"),
    ):
        cmd = subparsers.add_parser(name, help=help_text)
        cmd.add_argument("--workflow-id", required=True, help="Workflow id")

    trigger = subparsers.add_parser("trigger", help="Fire an event and run matching workflows")
    trigger.add_argument(
        "--type",
        dest="trigger_type",
        required=True,
        choices=[t.value for t in TriggerType],
        help="Trigger type",
    )
    trigger.add_argument("--context", default=None, help="Event context as a JSON object")
    trigger.add_argument("--context-file", default=None, help="Path to an event context JSON file")
    trigger.add_argument(
        "--skip-delays",
        action="store_true",
        help="Run delayed workflows immediately instead of waiting",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = AutomationSettings()
    except ValidationError as e:
        # Logging isn't configured yet.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    skip_delays = getattr(args, "skip_delays", False)
    manager = build_manager(settings, sleep=_no_sleep) if skip_delays else build_manager(settings)

    try:
        if args.command == "templates":
            found = manager.get_templates()
            if args.category:
                found = [t for t in found if t.category == args.category]
            if args.tag:
                tagged = {t.id for t in manager.search_templates(args.tag)}
                found = [t for t in found if t.id in tagged]
            for template in found:
                print(f"{template.id}\t{template.category}\t{template.name}")
            return 0

        if args.command == "categories":
            for category in manager.get_categories():
                print(category)
            return 0

        if args.command == "create-from-template":
            workflow = manager.create_from_template(args.template_id, args.user)
            print(f"Created workflow {workflow.id}: {workflow.name}")
            return 0

        if args.command == "import":
            text = Path(args.file).read_text(encoding="utf-8")
            workflow = manager.import_workflow(text, args.user)
            print(f"Imported workflow {workflow.id}: {workflow.name}")
            return 0

        if args.command == "export":
            exported = manager.export_workflow(args.workflow_id)
            if args.output:
                Path(args.output).write_text(exported + "\n", encoding="utf-8")
                print(f"Exported workflow {args.workflow_id} to {args.output}")
            else:
                print(exported)
            return 0

        if args.command == "list":
            workflows = (
                manager.get_active_workflows() if args.active_only else manager.list_workflows()
            )
            for workflow in workflows:
                state = "active" if workflow.is_active else "inactive"
                print(
                    f"{workflow.id}\t{state}\t{workflow.trigger.type.value}\t"
                    f"{workflow.execution_count}\t{workflow.name}"
                )
            return 0

        if args.command == "activate":
            workflow = manager.activate_workflow(args.workflow_id)
            print(f"Activated workflow {workflow.id}")
            return 0

        if args.command == "deactivate":
            workflow = manager.deactivate_workflow(args.workflow_id)
            print(f"Deactivated workflow {workflow.id}")
            return 0

        if args.command == "delete":
            manager.delete_workflow(args.workflow_id)
            print(f"Deleted workflow {args.workflow_id}")
            return 0

        if args.command == "trigger":
            context = _parse_context(args.context, args.context_file)
            records = asyncio.run(
                manager.trigger_workflows(TriggerType(args.trigger_type), context)
            )
            if not records:
                print("No matching workflows")
            for record in records:
                line = f"{record.workflow_id}\t{record.id}\t{record.status.value}"
                if record.status == ExecutionStatus.FAILED and record.error:
                    line += f"\t{record.error}"
                print(line)
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except (NotFoundError, DefinitionError) as e:
        logger.warning(str(e), extra={"command": args.command})
        print(str(e), file=sys.stderr)
        return 1

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
