"""Task lifecycle commands: create, show, transition, complete."""

from __future__ import annotations

import click

from taskflow.cli.helpers import (
    build_engine,
    common_options,
    handle_workflow_errors,
    output_error,
    output_result,
    require_root,
)
from taskflow.cli.main import cli
from taskflow.core import states


@cli.command()
@click.argument("goal")
@common_options
@handle_workflow_errors()
def create(goal: str, output_json: bool, quiet: bool) -> None:
    """Start a new task with GOAL."""
    context_dir = require_root(output_json)
    engine = build_engine(context_dir, output_json)

    task = engine.create_task(goal)

    output_result(
        data=task,
        human_message=f"Created task {task['id']}: {task['goal']} [{task['status']}]",
        quiet_value=task["id"],
        is_json=output_json,
        is_quiet=quiet,
    )


@cli.command()
@common_options
@handle_workflow_errors()
def show(output_json: bool, quiet: bool) -> None:
    """Show the active task."""
    context_dir = require_root(output_json)
    engine = build_engine(context_dir, output_json)

    task = engine.current_task()
    if task is None:
        output_error("No active task.", "NO_ACTIVE_TASK", output_json)

    status = task.get("status")
    if not isinstance(status, str) or not states.is_known_state(status, engine.workflow):
        output_error(
            f"Task {task.get('id')} has state '{status}', which is not in the configured "
            f"workflow ({', '.join(engine.workflow)}).",
            "INVALID_STATE",
            output_json,
        )

    pct = states.progress(status, engine.workflow)
    upcoming = states.next_state(status, engine.workflow)
    output_result(
        data={**task, "progress": pct, "next_state": upcoming},
        human_message=(
            f"{task['id']}  {task['goal']}\n"
            f"  status:   {status} ({pct}%)\n"
            f"  next:     {upcoming or '(final state)'}\n"
            f"  started:  {task['started_at']}"
        ),
        quiet_value=task["status"],
        is_json=output_json,
        is_quiet=quiet,
    )


@cli.command()
@click.argument("state")
@common_options
@handle_workflow_errors()
def transition(state: str, output_json: bool, quiet: bool) -> None:
    """Move the active task to STATE."""
    context_dir = require_root(output_json)
    engine = build_engine(context_dir, output_json)

    task = engine.transition(state)
    last = task["history"][-1]

    output_result(
        data=task,
        human_message=f"{task['id']}: {last['from']} -> {last['to']}",
        quiet_value=task["status"],
        is_json=output_json,
        is_quiet=quiet,
    )


@cli.command()
@common_options
@handle_workflow_errors()
def complete(output_json: bool, quiet: bool) -> None:
    """Complete the active task."""
    context_dir = require_root(output_json)
    engine = build_engine(context_dir, output_json)

    task = engine.complete_task()

    output_result(
        data=task,
        human_message=f"Completed task {task['id']}",
        quiet_value=task["id"],
        is_json=output_json,
        is_quiet=quiet,
    )
