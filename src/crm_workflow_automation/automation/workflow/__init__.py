"""Workflow domain concepts.

This package holds first-class types and services for:
- Workflow definitions (triggers, conditions, actions) and the template catalog
- Condition evaluation against an event context
- Action dispatch through injected effect-handler ports
- The execution engine and its record state machine
- The registry, the JSON-file store and the manager facade
"""

from crm_workflow_automation.automation.workflow.actions import ActionDispatcher, EffectHandlers
from crm_workflow_automation.automation.workflow.builder import WorkflowBuilder, create_workflow
from crm_workflow_automation.automation.workflow.conditions import (
    evaluate_condition,
    evaluate_conditions,
    get_nested_value,
)
from crm_workflow_automation.automation.workflow.engine import WorkflowEngine
from crm_workflow_automation.automation.workflow.errors import (
    ActionExecutionError,
    DefinitionError,
    ExecutionCancelledError,
    NotFoundError,
    UnknownActionKindError,
    WorkflowAutomationError,
)
from crm_workflow_automation.automation.workflow.events import TriggerEvent
from crm_workflow_automation.automation.workflow.history import ExecutionHistory
from crm_workflow_automation.automation.workflow.manager import WorkflowManager
from crm_workflow_automation.automation.workflow.models import (
    ActionType,
    ActivityType,
    ConditionOperator,
    TriggerCondition,
    TriggerType,
    Workflow,
    WorkflowAction,
    WorkflowStats,
    WorkflowTemplate,
    WorkflowTrigger,
)
from crm_workflow_automation.automation.workflow.registry import WorkflowRegistry
from crm_workflow_automation.automation.workflow.state_machine import (
    ExecutionRecord,
    ExecutionStatus,
)
from crm_workflow_automation.automation.workflow.store import WorkflowStore
from crm_workflow_automation.automation.workflow.templates import (
    WORKFLOW_TEMPLATES,
    TemplateCatalog,
)

__all__ = [
    "ActionDispatcher",
    "ActionExecutionError",
    "ActionType",
    "ActivityType",
    "ConditionOperator",
    "DefinitionError",
    "EffectHandlers",
    "ExecutionCancelledError",
    "ExecutionHistory",
    "ExecutionRecord",
    "ExecutionStatus",
    "NotFoundError",
    "TemplateCatalog",
    "TriggerCondition",
    "TriggerEvent",
    "TriggerType",
    "UnknownActionKindError",
    "WORKFLOW_TEMPLATES",
    "Workflow",
    "WorkflowAction",
    "WorkflowAutomationError",
    "WorkflowBuilder",
    "WorkflowEngine",
    "WorkflowManager",
    "WorkflowRegistry",
    "WorkflowStats",
    "WorkflowStore",
    "WorkflowTemplate",
    "WorkflowTrigger",
    "create_workflow",
    "evaluate_condition",
    "evaluate_conditions",
    "get_nested_value",
]
