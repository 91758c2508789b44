"""Read and update the single JSON task-state document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

from taskflow.storage.fs import STATE_FILE, atomic_write
from taskflow.storage.locks import ExclusiveLock, TaskFileLock


def serialize_state(state: dict) -> str:
    """Pretty-print a task state as sorted JSON with trailing newline."""
    return json.dumps(state, sort_keys=True, indent=2) + "\n"


class TaskStateStore:
    """``current-task.json`` plus the lock that serializes its writers."""

    def __init__(self, context_dir: Path, lock: ExclusiveLock | None = None) -> None:
        self.context_dir = Path(context_dir)
        self.path = self.context_dir / STATE_FILE
        self.lock = lock if lock is not None else TaskFileLock(self.context_dir)

    def read(self) -> dict | None:
        """Return the current state, or ``None`` when no task is active.

        Reads are not locked: writers replace the file atomically, so a
        reader sees either the old or the new document.
        """
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            return None
        if not text.strip():
            return None
        return json.loads(text)

    def update(self, fn: Callable[[dict | None], dict | None]) -> dict | None:
        """Apply *fn* to the current state under the lock and persist the result.

        *fn* receives the current state (or ``None``). Returning a dict writes
        it; returning ``None`` removes the state file. Returns *fn*'s result.
        """

        def _critical_section() -> dict | None:
            new_state = fn(self.read())
            if new_state is None:
                self.path.unlink(missing_ok=True)
            else:
                atomic_write(self.path, serialize_state(new_state))
            return new_state

        return self.lock.with_exclusive(_critical_section)
