"""CLI entry point and commands."""

from __future__ import annotations

from pathlib import Path

import click

from taskflow.core.config import default_config, serialize_config
from taskflow.storage.fs import CONFIG_FILE, CONTEXT_DIR, atomic_write, ensure_context_dir


@click.group()
def cli() -> None:
    """taskflow: file-based workflow tracker for AI-assisted development."""


@cli.command()
@click.option(
    "--path",
    "target_path",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    default=".",
    help="Directory to initialize taskflow in (defaults to current directory).",
)
def init(target_path: str) -> None:
    """Initialize a new taskflow project."""
    root = Path(target_path)
    context_dir = root / CONTEXT_DIR

    if context_dir.is_dir():
        click.echo(f"taskflow already initialized in {CONTEXT_DIR}/")
        return

    # Fail clearly if .ai-context exists as a file (not a directory)
    if context_dir.exists():
        raise click.ClickException(
            f"Cannot initialize: '{CONTEXT_DIR}' exists but is not a directory. "
            "Remove it and try again."
        )

    try:
        ensure_context_dir(root)
        atomic_write(context_dir / CONFIG_FILE, serialize_config(default_config()))
    except PermissionError:
        raise click.ClickException(f"Permission denied: cannot create {CONTEXT_DIR}/ in {root}")
    except OSError as e:
        raise click.ClickException(f"Failed to initialize taskflow: {e}")

    click.echo(f"taskflow initialized in {CONTEXT_DIR}/")


# ---------------------------------------------------------------------------
# Register command modules (must be after cli group is defined)
# ---------------------------------------------------------------------------
from taskflow.cli import task_cmds as _task_cmds  # noqa: E402, F401
from taskflow.cli import plugin_cmds as _plugin_cmds  # noqa: E402, F401

if __name__ == "__main__":
    cli()
