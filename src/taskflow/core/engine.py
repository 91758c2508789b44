"""Workflow engine: task lifecycle over the locked state file.

Every mutation follows the same shape: take the lock, read-modify-write
``current-task.json``, release, and only then notify plugins. Hooks never run
inside the critical section, so a slow or lock-using plugin cannot stall
other processes or deadlock on the state lock.
"""

from __future__ import annotations

import copy
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import cast

from taskflow.core import states
from taskflow.core.config import TaskflowConfig, load_config
from taskflow.core.errors import NoActiveTaskError, StateTransitionError, TaskError
from taskflow.core.events import StateChanged, TaskCompleted, TaskCreated
from taskflow.core.ids import generate_task_id
from taskflow.core.plugins import PluginManager
from taskflow.storage.fs import HISTORY_FILE, jsonl_append
from taskflow.storage.locks import ExclusiveLock, LockSettings, TaskFileLock
from taskflow.storage.state_file import TaskStateStore


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class WorkflowEngine:
    def __init__(
        self,
        context_dir: Path,
        plugins: PluginManager | None = None,
        lock: ExclusiveLock | None = None,
        config: TaskflowConfig | None = None,
    ) -> None:
        self.context_dir = Path(context_dir)
        self.config = config if config is not None else load_config(self.context_dir)
        self.workflow = states.validate_workflow(self.config["workflow"]["states"])
        if lock is None:
            lock = TaskFileLock(self.context_dir, LockSettings.from_config(self.config["lock"]))
        self.store = TaskStateStore(self.context_dir, lock)
        self.plugins = plugins if plugins is not None else PluginManager()
        self.plugins.set_engine(self)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_task(self) -> dict | None:
        return self.store.read()

    def current_state(self) -> str | None:
        task = self.store.read()
        return task["status"] if task else None

    def progress(self) -> int:
        task = self.store.read()
        if task is None:
            return 0
        return states.progress(task["status"], self.workflow)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_task(self, goal: str) -> dict:
        """Start a new task at the initial state."""
        goal = goal.strip()
        if not goal:
            raise TaskError("Task goal must not be empty.")

        def _create(current: dict | None) -> dict:
            if current is not None:
                raise TaskError(
                    f"Task {current['id']} is still active. Complete it first.",
                    {"task_id": current["id"]},
                )
            return {
                "id": generate_task_id(),
                "goal": goal,
                "status": self.workflow[0],
                "started_at": _now(),
                "completed_at": None,
                "history": [],
            }

        task = cast(dict, self.store.update(_create))
        self.plugins.dispatch(TaskCreated(copy.deepcopy(task)))
        return task

    def transition(self, to_state: str) -> dict:
        """Move the active task to *to_state* (same or later state only)."""
        target = states.normalize_state(to_state)
        result: dict[str, str] = {}

        def _transition(current: dict | None) -> dict:
            if current is None:
                raise NoActiveTaskError()
            from_state = current["status"]
            if not states.is_known_state(target, self.workflow):
                raise StateTransitionError(
                    from_state,
                    target,
                    f"Unknown state '{to_state}'. Valid states: {', '.join(self.workflow)}",
                )
            if not states.can_transition(from_state, target, self.workflow):
                raise StateTransitionError(from_state, target)
            updated = copy.deepcopy(current)
            updated["status"] = target
            updated.setdefault("history", []).append(
                {"from": from_state, "to": target, "ts": _now()}
            )
            result["from"] = from_state
            return updated

        task = cast(dict, self.store.update(_transition))
        self.plugins.dispatch(StateChanged(result["from"], target))
        return task

    def complete_task(self) -> dict:
        """Finish the active task, archive it to the history log, and clear it."""
        completed: list[dict] = []

        def _complete(current: dict | None) -> None:
            if current is None:
                raise NoActiveTaskError()
            task = copy.deepcopy(current)
            task["completed_at"] = _now()
            task["status"] = self.workflow[-1]
            jsonl_append(
                self.context_dir / HISTORY_FILE,
                json.dumps(task, sort_keys=True, separators=(",", ":")),
            )
            completed.append(task)
            return None

        self.store.update(_complete)
        task = completed[0]
        self.plugins.dispatch(TaskCompleted(copy.deepcopy(task)))
        return task
