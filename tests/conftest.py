"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from taskflow.storage.locks import LockSettings


@pytest.fixture()
def fast_settings() -> LockSettings:
    """Short retry budget so contention tests finish quickly."""
    return LockSettings(retries=3, min_timeout=0.01, max_timeout=0.02)


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    """Return a temporary directory suitable for initializing .ai-context/ in."""
    return tmp_path


@pytest.fixture()
def context_dir(project_root: Path) -> Path:
    """Return an initialized .ai-context/ directory."""
    from taskflow.core.config import default_config, serialize_config
    from taskflow.storage.fs import CONFIG_FILE, atomic_write, ensure_context_dir

    ctx = ensure_context_dir(project_root)
    atomic_write(ctx / CONFIG_FILE, serialize_config(default_config()))
    return ctx


@pytest.fixture()
def invoke(context_dir: Path, project_root: Path, monkeypatch: pytest.MonkeyPatch):
    """Invoke the CLI against the initialized project root."""
    from taskflow.cli.main import cli

    monkeypatch.setenv("TASKFLOW_ROOT", str(project_root))
    # No installed third-party plugins leak into CLI tests.
    monkeypatch.setattr("taskflow.cli.helpers.discover_plugins", lambda disabled=(): [])
    runner = CliRunner()

    def _invoke(*args: str):
        return runner.invoke(cli, list(args))

    return _invoke
