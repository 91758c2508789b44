"""ULID-based identifiers."""

from ulid import ULID


def generate_task_id() -> str:
    """Generate a new task ID with the task_ prefix."""
    return f"task_{ULID()}"
