"""Plugin inspection commands: plugins, validate."""

from __future__ import annotations

from dataclasses import asdict

import click

from taskflow.cli.helpers import build_engine, json_envelope, require_root
from taskflow.cli.main import cli
from taskflow.core.plugins import implemented_hooks


@cli.command("plugins")
@click.option("--json", "output_json", is_flag=True, help="Output structured JSON.")
def plugins_cmd(output_json: bool) -> None:
    """List registered plugins."""
    context_dir = require_root(output_json)
    engine = build_engine(context_dir, output_json)

    rows = [
        {
            "id": p.id,
            "name": getattr(p, "name", p.id),
            "version": getattr(p, "version", None),
            "hooks": implemented_hooks(p),
        }
        for p in engine.plugins.get_all()
    ]

    if output_json:
        click.echo(json_envelope(True, data=rows))
        return
    if not rows:
        click.echo("No plugins registered.")
        return
    for row in rows:
        version = f" {row['version']}" if row["version"] else ""
        hooks = ", ".join(row["hooks"]) or "no hooks"
        click.echo(f"{row['id']}  {row['name']}{version}  [{hooks}]")


@cli.command("validate")
@click.option("--json", "output_json", is_flag=True, help="Output structured JSON.")
def validate_cmd(output_json: bool) -> None:
    """Run every plugin's validation hook."""
    context_dir = require_root(output_json)
    engine = build_engine(context_dir, output_json)

    results = engine.plugins.validate_all()
    ok = all(r.valid for r in results.values())

    if output_json:
        click.echo(json_envelope(True, data={
            "valid": ok,
            "plugins": {pid: asdict(r) for pid, r in results.items()},
        }))
    else:
        if not results:
            click.echo("No plugins define a validation hook.")
        for pid, r in results.items():
            click.echo(f"{pid}: {'ok' if r.valid else 'FAILED'}")
            for err in r.errors:
                click.echo(f"  error: {err}")
            for warning in r.warnings:
                click.echo(f"  warning: {warning}")

    if not ok:
        raise SystemExit(1)
