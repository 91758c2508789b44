"""Default config generation and loading."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TypedDict

from taskflow.core.states import WORKFLOW_STATES, validate_workflow
from taskflow.storage.fs import CONFIG_FILE


class LockConfig(TypedDict):
    retries: int
    min_timeout_ms: int
    max_timeout_ms: int
    factor: float


class PluginConfig(TypedDict):
    disabled: list[str]


class WorkflowConfig(TypedDict):
    states: list[str]


class TaskflowConfig(TypedDict):
    schema_version: int
    workflow: WorkflowConfig
    lock: LockConfig
    plugins: PluginConfig


def default_config() -> TaskflowConfig:
    """Return the default taskflow configuration.

    The lock defaults leave room for parallel test workers and slow
    filesystems: 30 retries starting at 200ms, doubling, capped at 3s.
    """
    return {
        "schema_version": 1,
        "workflow": {
            "states": list(WORKFLOW_STATES),
        },
        "lock": {
            "retries": 30,
            "min_timeout_ms": 200,
            "max_timeout_ms": 3000,
            "factor": 2.0,
        },
        "plugins": {
            "disabled": [],
        },
    }


def serialize_config(config: TaskflowConfig | dict[str, object]) -> str:
    """Serialize a config dict to the canonical JSON format."""
    return json.dumps(config, sort_keys=True, indent=2) + "\n"


def load_config(context_dir: Path) -> TaskflowConfig:
    """Load ``config.json`` from *context_dir*, filling gaps with defaults.

    A missing file yields the defaults. Sections present on disk are merged
    key-by-key over the default sections so older configs keep working.
    ``workflow.states`` is normalized and must be non-empty without
    duplicates; ``ValueError`` otherwise.
    """
    config = default_config()
    path = context_dir / CONFIG_FILE
    if not path.exists():
        return config

    on_disk = json.loads(path.read_text())
    if not isinstance(on_disk, dict):
        raise ValueError(f"{path} must contain a JSON object")

    for section in ("workflow", "lock", "plugins"):
        value = on_disk.get(section)
        if isinstance(value, dict):
            config[section].update(value)  # type: ignore[literal-required]
    config["workflow"]["states"] = list(validate_workflow(config["workflow"]["states"]))
    if "schema_version" in on_disk:
        config["schema_version"] = on_disk["schema_version"]
    return config
