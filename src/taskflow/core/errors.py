"""Error types shared by the lock, plugin registry, and engine."""

from __future__ import annotations

from typing import Any


class WorkflowError(Exception):
    """Base class for every error taskflow raises on purpose.

    ``code`` is a stable machine-readable string used in the CLI's JSON
    error envelope.
    """

    code = "WORKFLOW_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ---------------------------------------------------------------------------
# Lock errors
# ---------------------------------------------------------------------------


class LockError(WorkflowError):
    code = "LOCK_ERROR"


class LockTimeoutError(LockError):
    """Raised when the lock stays contended for the whole retry budget."""

    code = "LOCK_TIMEOUT"


class LockAlreadyHeldError(LockError):
    """Raised when ``acquire`` is called on a handle that already holds the lock."""

    code = "LOCK_ALREADY_HELD"


class LockAcquisitionError(LockError):
    """The locking primitive failed for a reason other than contention."""

    code = "LOCK_FAILED"


# ---------------------------------------------------------------------------
# Plugin errors
# ---------------------------------------------------------------------------


class PluginError(WorkflowError):
    code = "PLUGIN_ERROR"

    def __init__(self, plugin_id: str, message: str) -> None:
        super().__init__(message, {"plugin_id": plugin_id})
        self.plugin_id = plugin_id


class DuplicatePluginError(PluginError):
    code = "CONFLICT"

    def __init__(self, plugin_id: str) -> None:
        super().__init__(plugin_id, f"Plugin {plugin_id} is already registered")


class PluginNotFoundError(PluginError):
    code = "NOT_FOUND"

    def __init__(self, plugin_id: str) -> None:
        super().__init__(plugin_id, f"Plugin {plugin_id} not found")


# ---------------------------------------------------------------------------
# Engine errors
# ---------------------------------------------------------------------------


class TaskError(WorkflowError):
    code = "TASK_ERROR"


class NoActiveTaskError(TaskError):
    code = "NO_ACTIVE_TASK"

    def __init__(self) -> None:
        super().__init__("No active task. Run 'taskflow create' first.")


class StateTransitionError(WorkflowError):
    code = "INVALID_TRANSITION"

    def __init__(self, from_state: str, to_state: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Invalid state transition: {from_state} -> {to_state}",
            {"from": from_state, "to": to_state},
        )
        self.from_state = from_state
        self.to_state = to_state
