"""Cross-process advisory lock guarding the task-state file.

Every process that touches ``current-task.json`` agrees to hold
``current-task.json.lock`` while it reads, modifies, and writes the state.
Contention between short-lived CLI invocations (a background hook racing a
user command, parallel test workers) is absorbed by retrying with
exponential backoff instead of failing on the first conflict.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Callable, Iterator, Protocol, TypeVar

from filelock import FileLock, Timeout

from taskflow.core.config import LockConfig
from taskflow.core.errors import (
    LockAcquisitionError,
    LockAlreadyHeldError,
    LockTimeoutError,
)
from taskflow.storage.fs import CONTEXT_DIR, LOCK_FILE

T = TypeVar("T")


@dataclass(frozen=True)
class LockSettings:
    """Retry policy for :meth:`TaskFileLock.acquire` (times in seconds)."""

    retries: int = 30
    min_timeout: float = 0.2
    max_timeout: float = 3.0
    factor: float = 2.0

    @classmethod
    def from_config(cls, lock_config: LockConfig) -> LockSettings:
        return cls(
            retries=int(lock_config["retries"]),
            min_timeout=lock_config["min_timeout_ms"] / 1000,
            max_timeout=lock_config["max_timeout_ms"] / 1000,
            factor=float(lock_config["factor"]),
        )

    def delays(self) -> Iterator[float]:
        """Yield the sleep before each retry; one value per retry."""
        for attempt in range(self.retries):
            yield min(self.min_timeout * self.factor**attempt, self.max_timeout)


class ExclusiveLock(Protocol):
    """What callers need from a lock; file locks are one implementation."""

    def acquire(self) -> None: ...

    def release(self) -> None: ...

    def with_exclusive(self, fn: Callable[[], T]) -> T: ...


class TaskFileLock:
    """Advisory file lock on ``<context_dir>/current-task.json.lock``.

    A handle is not reentrant: a second :meth:`acquire` while held raises
    :class:`LockAlreadyHeldError`. Use separate handles on the same
    directory when independent callers need exclusion from each other.
    """

    def __init__(
        self,
        context_dir: Path | str = CONTEXT_DIR,
        settings: LockSettings | None = None,
    ) -> None:
        self.lock_path = Path(context_dir) / LOCK_FILE
        self.settings = settings or LockSettings()
        self._held: FileLock | None = None

    @property
    def is_held(self) -> bool:
        return self._held is not None

    def acquire(self) -> None:
        """Take the lock, retrying with backoff while another process holds it.

        Raises:
            LockAlreadyHeldError: this handle already holds the lock.
            LockTimeoutError: still contended after every retry.
            LockAcquisitionError: the locking primitive itself failed.
            OSError: the lock directory or file could not be created.
        """
        if self._held is not None:
            raise LockAlreadyHeldError(f"Lock already acquired: {self.lock_path}")

        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        # Pre-touch so the primitive always finds an existing target.
        self.lock_path.touch(exist_ok=True)

        lock = FileLock(str(self.lock_path))
        delays = self.settings.delays()
        attempts = 0
        while True:
            attempts += 1
            try:
                lock.acquire(blocking=False)
            except Timeout:
                delay = next(delays, None)
                if delay is None:
                    break
                time.sleep(delay)
                continue
            except OSError as exc:
                raise LockAcquisitionError(
                    f"Lock acquisition failed for {self.lock_path}: {exc}"
                ) from exc
            self._held = lock
            return

        raise LockTimeoutError(
            f"Failed to acquire lock {self.lock_path} after {attempts} attempts. "
            "Another process may be holding the lock; try again shortly.",
            {"lock_path": str(self.lock_path), "attempts": attempts},
        )

    def release(self) -> None:
        """Release the lock if held. Never raises for OS-level release failures."""
        lock = self._held
        if lock is None:
            return
        try:
            lock.release()
        except OSError as exc:
            print(
                f"Warning: failed to release lock {self.lock_path}: {exc}",
                file=sys.stderr,
            )
        finally:
            self._held = None

    def with_exclusive(self, fn: Callable[[], T]) -> T:
        """Run *fn* while holding the lock; release on every exit path."""
        self.acquire()
        try:
            return fn()
        finally:
            self.release()

    def __enter__(self) -> TaskFileLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "held" if self.is_held else "free"
        return f"TaskFileLock({str(self.lock_path)!r}, {state})"
