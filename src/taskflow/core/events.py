"""Lifecycle events broadcast to plugins.

Each event type names the plugin hook it is delivered to and carries its
payload as typed fields, so dispatch never relies on free-form hook names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class StateChanged:
    hook: ClassVar[str] = "on_state_change"

    from_state: str
    to_state: str

    def args(self) -> tuple[Any, ...]:
        return (self.from_state, self.to_state)


@dataclass(frozen=True)
class TaskCreated:
    hook: ClassVar[str] = "on_task_create"

    task: dict

    def args(self) -> tuple[Any, ...]:
        return (self.task,)


@dataclass(frozen=True)
class TaskCompleted:
    hook: ClassVar[str] = "on_task_complete"

    task: dict

    def args(self) -> tuple[Any, ...]:
        return (self.task,)


LifecycleEvent = Union[StateChanged, TaskCreated, TaskCompleted]

# Hook names a plugin may implement, in the order they usually fire.
LIFECYCLE_HOOKS: tuple[str, ...] = (
    TaskCreated.hook,
    StateChanged.hook,
    TaskCompleted.hook,
)
