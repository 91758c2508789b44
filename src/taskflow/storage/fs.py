"""Context directory layout, root discovery, and atomic writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

CONTEXT_DIR = ".ai-context"
STATE_FILE = "current-task.json"
LOCK_FILE = f"{STATE_FILE}.lock"
HISTORY_FILE = "completed-tasks.jsonl"
CONFIG_FILE = "config.json"

ROOT_ENV_VAR = "TASKFLOW_ROOT"


class TaskflowRootError(Exception):
    """Raised when the project root cannot be resolved."""


def find_root(start: Path | None = None) -> Path | None:
    """Return the directory containing ``.ai-context/``, or ``None``.

    ``TASKFLOW_ROOT`` takes precedence over walking up from *start* (or the
    current directory). An invalid or empty ``TASKFLOW_ROOT`` raises
    :class:`TaskflowRootError` instead of falling back to the walk-up.
    """
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root is not None:
        if not env_root.strip():
            raise TaskflowRootError(f"{ROOT_ENV_VAR} is set but empty")
        root = Path(env_root)
        if not root.is_dir():
            raise TaskflowRootError(f"{ROOT_ENV_VAR} points to '{root}', which does not exist")
        if not (root / CONTEXT_DIR).is_dir():
            raise TaskflowRootError(f"{ROOT_ENV_VAR} points to '{root}', which has no {CONTEXT_DIR}/")
        return root

    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / CONTEXT_DIR).is_dir():
            return candidate
    return None


def ensure_context_dir(root: Path) -> Path:
    """Create ``<root>/.ai-context/`` if needed and return it."""
    context_dir = root / CONTEXT_DIR
    context_dir.mkdir(parents=True, exist_ok=True)
    return context_dir


def atomic_write(path: Path, content: str | bytes) -> None:
    """Write *content* to *path* via temp file + fsync + rename.

    The parent directory must already exist.
    """
    parent = path.parent
    if not parent.is_dir():
        raise FileNotFoundError(f"Parent directory does not exist: {parent}")

    data = content.encode("utf-8") if isinstance(content, str) else content
    fd, tmp_name = tempfile.mkstemp(dir=parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]
        os.fsync(fd)
        os.close(fd)
        fd = -1
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        if fd != -1:
            os.close(fd)
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def jsonl_append(path: Path, line: str) -> None:
    """Append a single serialized JSON line to *path*."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(line if line.endswith("\n") else line + "\n")
        f.flush()
        os.fsync(f.fileno())
