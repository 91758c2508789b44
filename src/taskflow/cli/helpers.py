"""Shared CLI helpers: output envelopes, root resolution, engine wiring."""

from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any, Callable, NoReturn

import click

from taskflow.core.config import load_config
from taskflow.core.engine import WorkflowEngine
from taskflow.core.errors import PluginError, WorkflowError
from taskflow.core.plugins import PluginManager, discover_plugins
from taskflow.storage.fs import CONTEXT_DIR, TaskflowRootError, find_root


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def json_envelope(ok: bool, data: Any = None, error: dict | None = None) -> str:
    """Build the ``{"ok": ..., "data"|"error": ...}`` JSON envelope."""
    payload: dict[str, Any] = {"ok": ok}
    if ok:
        payload["data"] = data
    else:
        payload["error"] = error
    return json.dumps(payload, sort_keys=True, indent=2)


def json_error_obj(code: str, message: str) -> dict:
    return {"code": code, "message": message}


def output_error(message: str, code: str, is_json: bool) -> NoReturn:
    """Print an error in the requested format and exit with status 1."""
    if is_json:
        click.echo(json_envelope(False, error=json_error_obj(code, message)))
    else:
        click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def output_result(
    data: Any,
    human_message: str,
    quiet_value: str,
    is_json: bool,
    is_quiet: bool = False,
) -> None:
    if is_json:
        click.echo(json_envelope(True, data=data))
    elif is_quiet:
        click.echo(quiet_value)
    else:
        click.echo(human_message)


def common_options(fn: Callable) -> Callable:
    """Attach ``--json`` and ``--quiet`` to a command."""
    fn = click.option("--quiet", is_flag=True, help="Print only the essential value.")(fn)
    fn = click.option("--json", "output_json", is_flag=True, help="Output structured JSON.")(fn)
    return fn


def handle_workflow_errors(is_json_kwarg: str = "output_json") -> Callable:
    """Turn :class:`WorkflowError` into the standard error output."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except WorkflowError as exc:
                output_error(exc.message, exc.code, bool(kwargs.get(is_json_kwarg)))

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# Root and engine
# ---------------------------------------------------------------------------


def require_root(is_json: bool) -> Path:
    """Return the ``.ai-context/`` directory or exit with a NOT_INITIALIZED error."""
    try:
        root = find_root()
    except TaskflowRootError as exc:
        output_error(str(exc), "INVALID_ROOT", is_json)
    if root is None:
        output_error(
            f"No {CONTEXT_DIR}/ directory found. Run 'taskflow init' first.",
            "NOT_INITIALIZED",
            is_json,
        )
    return root / CONTEXT_DIR


def build_engine(context_dir: Path, is_json: bool) -> WorkflowEngine:
    """Create an engine with every installed, non-disabled plugin registered."""
    try:
        config = load_config(context_dir)
    except (ValueError, OSError) as exc:
        output_error(f"Cannot read config: {exc}", "CONFIG_ERROR", is_json)

    manager = PluginManager()
    engine = WorkflowEngine(context_dir, plugins=manager, config=config)
    try:
        for plugin in discover_plugins(config["plugins"]["disabled"]):
            manager.register(plugin)
    except PluginError as exc:
        output_error(exc.message, exc.code, is_json)
    return engine
