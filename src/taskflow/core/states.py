"""Linear workflow progression: forward-only transitions.

Every function takes the ordered state list to use; the default is the
built-in progression, and the engine passes ``config["workflow"]["states"]``.
"""

from __future__ import annotations

from typing import Sequence

WORKFLOW_STATES: tuple[str, ...] = (
    "UNDERSTANDING",
    "DESIGNING",
    "IMPLEMENTING",
    "TESTING",
    "REVIEWING",
    "READY_TO_COMMIT",
)


def normalize_state(state: str) -> str:
    """Accept lower-case and dashed spellings (``ready-to-commit``)."""
    return state.strip().upper().replace("-", "_")


def validate_workflow(workflow: Sequence[str]) -> tuple[str, ...]:
    """Return *workflow* as a normalized tuple, rejecting empty or repeated states."""
    normalized = tuple(normalize_state(s) for s in workflow)
    if not normalized:
        raise ValueError("workflow.states must list at least one state")
    if len(set(normalized)) != len(normalized):
        raise ValueError(f"workflow.states contains duplicates: {list(workflow)}")
    return normalized


def is_known_state(state: str, workflow: Sequence[str] = WORKFLOW_STATES) -> bool:
    return state in workflow


def can_transition(
    from_state: str, to_state: str, workflow: Sequence[str] = WORKFLOW_STATES
) -> bool:
    """Return ``True`` if moving from *from_state* to *to_state* is allowed.

    Staying put and moving forward are allowed; moving backward is not.
    """
    if not (is_known_state(from_state, workflow) and is_known_state(to_state, workflow)):
        return False
    return list(workflow).index(to_state) >= list(workflow).index(from_state)


def next_state(state: str, workflow: Sequence[str] = WORKFLOW_STATES) -> str | None:
    """Return the state after *state*, or ``None`` at the final state."""
    idx = list(workflow).index(state)
    if idx == len(workflow) - 1:
        return None
    return workflow[idx + 1]


def progress(state: str, workflow: Sequence[str] = WORKFLOW_STATES) -> int:
    """Percentage of workflow steps reached (0-100)."""
    if len(workflow) == 1:
        return 100
    idx = list(workflow).index(state)
    return round(idx * 100 / (len(workflow) - 1))
