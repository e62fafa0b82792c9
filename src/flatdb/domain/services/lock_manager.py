"""Advisory reader/writer locks for databases and tables.

Every table operation runs under a lock so that a writer never interleaves
with another writer or with a reader of the same table. A concurrent append
during another writer's rewrite could otherwise merge partial lines.

Lock Hierarchy:
    Database -> Table

    A table operation takes the database lock SHARED, then the table lock
    (SHARED for reads, EXCLUSIVE for mutations). Dropping a database takes
    the database lock EXCLUSIVE. Locks are always acquired top-down, so
    two callers can never wait on each other in a cycle.

Fairness:
    Once a writer is waiting on a resource, new SHARED requests queue
    behind it so a stream of readers cannot starve the writer.

The locks are advisory and in-process: they coordinate threads sharing
one TableLockManager, not independent processes.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Generator, Hashable

from flatdb.domain.errors import LockTimeoutError
from flatdb.domain.value_objects import LockMode


WaitObserver = Callable[[LockMode, float], None]


@dataclass
class LockEntry:
    """Lock table entry for one resource."""

    mode: LockMode | None = None
    holders: int = 0
    waiting_writers: int = 0

    def can_grant(self, mode: LockMode) -> bool:
        """Check if a request in ``mode`` can be granted right now."""
        if mode is LockMode.EXCLUSIVE:
            return self.holders == 0
        if self.waiting_writers:
            return False
        return self.holders == 0 or LockMode.is_compatible(self.mode, mode)

    def is_idle(self) -> bool:
        return self.holders == 0 and self.waiting_writers == 0


class TableLockManager:
    """Reader/writer lock table keyed by resource.

    Thread Safety:
        All state is guarded by a single condition variable; waiters are
        woken on every release.
    """

    def __init__(
        self,
        timeout_seconds: float | None = 30.0,
        wait_observer: WaitObserver | None = None,
    ) -> None:
        """Initialize the lock manager.

        Args:
            timeout_seconds: Default max wait per acquisition (None = forever).
            wait_observer: Called with (mode, seconds waited) after each grant.
        """
        self._cond = threading.Condition()
        self._timeout = timeout_seconds
        self._wait_observer = wait_observer
        self._lock_table: Dict[Hashable, LockEntry] = {}

    def acquire(
        self,
        resource: Hashable,
        mode: LockMode,
        timeout_seconds: float | None = None,
    ) -> None:
        """Acquire a lock, blocking until granted.

        Args:
            resource: The resource key, e.g. ("/db/shop", "users").
            mode: SHARED or EXCLUSIVE.
            timeout_seconds: Overrides the default timeout.

        Raises:
            LockTimeoutError: If the lock is not granted in time.
        """
        timeout = self._timeout if timeout_seconds is None else timeout_seconds
        started = time.monotonic()
        deadline = None if timeout is None else started + timeout

        with self._cond:
            entry = self._lock_table.setdefault(resource, LockEntry())
            if mode is LockMode.EXCLUSIVE:
                entry.waiting_writers += 1
            try:
                while not entry.can_grant(mode):
                    remaining = None if deadline is None else deadline - time.monotonic()
                    if remaining is not None and remaining <= 0:
                        raise LockTimeoutError(
                            f"Timed out waiting for {mode.value} lock on {_describe(resource)}",
                            field=_describe(resource),
                            rule="lock_timeout",
                        )
                    self._cond.wait(remaining)
            except LockTimeoutError:
                if mode is LockMode.EXCLUSIVE:
                    entry.waiting_writers -= 1
                if entry.is_idle():
                    del self._lock_table[resource]
                # Readers held back by this writer may proceed now
                self._cond.notify_all()
                raise

            if mode is LockMode.EXCLUSIVE:
                entry.waiting_writers -= 1
            entry.mode = mode
            entry.holders += 1

        if self._wait_observer is not None:
            self._wait_observer(mode, time.monotonic() - started)

    def release(self, resource: Hashable) -> None:
        """Release one hold on a resource.

        Raises:
            RuntimeError: If the resource is not locked.
        """
        with self._cond:
            entry = self._lock_table.get(resource)
            if entry is None or entry.holders == 0:
                raise RuntimeError(f"{_describe(resource)} is not locked")

            entry.holders -= 1
            if entry.holders == 0:
                entry.mode = None
            if entry.is_idle():
                del self._lock_table[resource]
            self._cond.notify_all()

    @contextmanager
    def hold(
        self,
        resource: Hashable,
        mode: LockMode,
    ) -> Generator[None, None, None]:
        """Hold a lock for the duration of a with-block."""
        self.acquire(resource, mode)
        try:
            yield
        finally:
            self.release(resource)

    @contextmanager
    def database(self, database: str, mode: LockMode) -> Generator[None, None, None]:
        """Lock a whole database."""
        with self.hold((database,), mode):
            yield

    @contextmanager
    def table(
        self,
        database: str,
        table: str,
        mode: LockMode,
    ) -> Generator[None, None, None]:
        """Lock one table, holding its database SHARED."""
        with self.hold((database,), LockMode.SHARED):
            with self.hold((database, table), mode):
                yield

    def held_mode(self, resource: Hashable) -> LockMode | None:
        """Mode a resource is currently held in, or None."""
        with self._cond:
            entry = self._lock_table.get(resource)
            return entry.mode if entry is not None else None


def _describe(resource: Hashable) -> str:
    if isinstance(resource, tuple):
        return "/".join(str(part) for part in resource)
    return str(resource)
