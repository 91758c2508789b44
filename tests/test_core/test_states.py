"""Tests for workflow state progression and lifecycle event types."""

from __future__ import annotations

import dataclasses

import pytest

from taskflow.core import states
from taskflow.core.events import LIFECYCLE_HOOKS, StateChanged, TaskCompleted, TaskCreated


class TestTransitions:
    def test_forward_allowed(self) -> None:
        assert states.can_transition("UNDERSTANDING", "TESTING")

    def test_staying_allowed(self) -> None:
        assert states.can_transition("DESIGNING", "DESIGNING")

    def test_backward_rejected(self) -> None:
        assert not states.can_transition("REVIEWING", "DESIGNING")

    def test_unknown_rejected(self) -> None:
        assert not states.can_transition("UNDERSTANDING", "SHIPPING")

    def test_next_state(self) -> None:
        assert states.next_state("UNDERSTANDING") == "DESIGNING"
        assert states.next_state("READY_TO_COMMIT") is None

    def test_progress(self) -> None:
        assert states.progress("UNDERSTANDING") == 0
        assert states.progress("READY_TO_COMMIT") == 100
        assert states.progress("TESTING") == 60

    @pytest.mark.parametrize("raw", ["testing", " Testing ", "TESTING"])
    def test_normalize(self, raw: str) -> None:
        assert states.normalize_state(raw) == "TESTING"

    def test_normalize_dashes(self) -> None:
        assert states.normalize_state("ready-to-commit") == "READY_TO_COMMIT"


class TestEvents:
    def test_hooks_and_payloads(self) -> None:
        task = {"id": "task_1"}
        assert StateChanged("A", "B").hook == "on_state_change"
        assert StateChanged("A", "B").args() == ("A", "B")
        assert TaskCreated(task).hook == "on_task_create"
        assert TaskCreated(task).args() == (task,)
        assert TaskCompleted(task).hook == "on_task_complete"

    def test_events_are_immutable(self) -> None:
        event = StateChanged("A", "B")
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.to_state = "C"  # type: ignore[misc]

    def test_lifecycle_hooks_listed(self) -> None:
        assert set(LIFECYCLE_HOOKS) == {"on_task_create", "on_state_change", "on_task_complete"}


class TestCustomWorkflow:
    WORKFLOW = ("DRAFT", "ACTIVE", "DONE")

    def test_transitions_follow_given_order(self) -> None:
        assert states.can_transition("DRAFT", "DONE", self.WORKFLOW)
        assert not states.can_transition("DONE", "ACTIVE", self.WORKFLOW)
        assert not states.can_transition("DRAFT", "TESTING", self.WORKFLOW)

    def test_next_state_and_progress(self) -> None:
        assert states.next_state("ACTIVE", self.WORKFLOW) == "DONE"
        assert states.progress("ACTIVE", self.WORKFLOW) == 50

    def test_single_state_workflow_is_complete(self) -> None:
        assert states.progress("ONLY", ("ONLY",)) == 100
        assert states.next_state("ONLY", ("ONLY",)) is None

    def test_validate_workflow(self) -> None:
        assert states.validate_workflow(["draft", "ready-to-ship"]) == ("DRAFT", "READY_TO_SHIP")
        with pytest.raises(ValueError, match="at least one state"):
            states.validate_workflow([])
        with pytest.raises(ValueError, match="duplicates"):
            states.validate_workflow(["a", "A"])
