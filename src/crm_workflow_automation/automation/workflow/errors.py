from __future__ import annotations


class WorkflowAutomationError(Exception):
    """Base class for all workflow automation errors."""


class DefinitionError(WorkflowAutomationError, ValueError):
    """A workflow definition is incomplete or malformed.

    Raised synchronously (builder, update, import) before anything is registered.
    """


class NotFoundError(WorkflowAutomationError, LookupError):
    """A referenced workflow or template id does not exist."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind.capitalize()} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class ActionExecutionError(WorkflowAutomationError):
    """An action failed while a workflow was executing.

    Contained within the execution record; never escapes a trigger batch.
    """

    def __init__(self, message: str, *, action_type: str | None = None) -> None:
        super().__init__(message)
        self.action_type = action_type


class UnknownActionKindError(ActionExecutionError):
    def __init__(self, action_type: object) -> None:
        super().__init__(f"Unknown action type: {action_type}", action_type=str(action_type))


class ExecutionCancelledError(ActionExecutionError):
    def __init__(self) -> None:
        super().__init__("Execution cancelled")
