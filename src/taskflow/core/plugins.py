"""Plugin registry and lifecycle hook dispatch.

A plugin is any object with an ``id`` attribute. Everything else is
optional; the manager checks for each hook before calling it:

* ``initialize(engine)`` -- called once on registration if an engine is bound
* ``on_state_change(from_state, to_state)``
* ``on_task_create(task)``
* ``on_task_complete(task)``
* ``validate() -> ValidationResult``

Hooks run synchronously, one plugin at a time, in registration order. A
hook that raises stops the dispatch and the error reaches the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib.metadata import entry_points
from typing import Any, Iterable, Protocol, runtime_checkable

from taskflow.core.errors import DuplicatePluginError, PluginError, PluginNotFoundError
from taskflow.core.events import LIFECYCLE_HOOKS, LifecycleEvent

ENTRY_POINT_GROUP = "taskflow.plugins"


@dataclass
class ValidationResult:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@runtime_checkable
class WorkflowPlugin(Protocol):
    """Minimum surface of a plugin; hooks are looked up by name at dispatch."""

    id: str


class PluginManager:
    """Holds registered plugins keyed by id, in registration order."""

    def __init__(self, engine: Any = None) -> None:
        self._plugins: dict[str, WorkflowPlugin] = {}
        self._engine = engine

    def set_engine(self, engine: Any) -> None:
        """Bind the engine passed to future ``initialize`` calls.

        Plugins registered before the bind are not re-initialized.
        """
        self._engine = engine

    def register(self, plugin: WorkflowPlugin) -> None:
        """Register *plugin* and run its ``initialize`` hook if an engine is bound.

        If ``initialize`` raises, the plugin stays registered and the error
        propagates; call :meth:`unregister` to roll back.
        """
        plugin_id = plugin.id
        if plugin_id in self._plugins:
            raise DuplicatePluginError(plugin_id)

        self._plugins[plugin_id] = plugin

        initialize = getattr(plugin, "initialize", None)
        if callable(initialize) and self._engine is not None:
            initialize(self._engine)

    def unregister(self, plugin_id: str) -> None:
        if plugin_id not in self._plugins:
            raise PluginNotFoundError(plugin_id)
        del self._plugins[plugin_id]

    def dispatch(self, event: LifecycleEvent) -> None:
        """Deliver *event* to every plugin implementing its hook, in order."""
        args = event.args()
        for plugin in list(self._plugins.values()):
            hook = getattr(plugin, event.hook, None)
            if callable(hook):
                hook(*args)

    def validate_all(self) -> dict[str, ValidationResult]:
        """Run every plugin's ``validate`` hook; plugins without one are omitted."""
        results: dict[str, ValidationResult] = {}
        for plugin_id, plugin in list(self._plugins.items()):
            validate = getattr(plugin, "validate", None)
            if callable(validate):
                results[plugin_id] = validate()
        return results

    def get(self, plugin_id: str) -> WorkflowPlugin | None:
        return self._plugins.get(plugin_id)

    def get_all(self) -> list[WorkflowPlugin]:
        return list(self._plugins.values())

    def has(self, plugin_id: str) -> bool:
        return plugin_id in self._plugins

    def count(self) -> int:
        return len(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def clear(self) -> None:
        """Drop every plugin. No teardown hook is called."""
        self._plugins.clear()


def implemented_hooks(plugin: WorkflowPlugin) -> list[str]:
    """Names of the optional hooks *plugin* defines, in the order they fire."""
    names = ("initialize", *LIFECYCLE_HOOKS, "validate")
    return [name for name in names if callable(getattr(plugin, name, None))]


# ---------------------------------------------------------------------------
# Entry-point discovery
# ---------------------------------------------------------------------------


def discover_plugins(disabled: Iterable[str] = ()) -> list[WorkflowPlugin]:
    """Load plugins advertised under the ``taskflow.plugins`` entry-point group.

    An entry point may resolve to a plugin instance, or to a class/factory
    that is called with no arguments. Plugins whose id (or entry-point name)
    is in *disabled* are skipped.
    """
    skip = set(disabled)
    found: list[WorkflowPlugin] = []
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        if ep.name in skip:
            continue
        try:
            obj = ep.load()
            if isinstance(obj, type) or (callable(obj) and not hasattr(obj, "id")):
                obj = obj()
        except Exception as exc:
            raise PluginError(ep.name, f"Failed to load plugin '{ep.name}': {exc}") from exc
        if not isinstance(obj, WorkflowPlugin):
            raise PluginError(ep.name, f"Entry point '{ep.name}' did not produce a plugin with an id")
        if obj.id in skip:
            continue
        found.append(obj)
    return found
