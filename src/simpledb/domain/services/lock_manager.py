"""Read/write guard for tables and the table catalog.

Each Table owns one ReadWriteLock protecting its record sequence, and the
Database owns one protecting its name -> Table mapping. Readers share the
lock; a writer holds it exclusively.

The lock is writer-preferring: once a writer is waiting, new readers queue
behind it so a steady stream of selects cannot starve an insert. It is not
reentrant; a thread holding the lock must not acquire it again.
"""

from __future__ import annotations

import threading
from contextlib import AbstractContextManager, contextmanager
from typing import Iterator

from simpledb.domain.value_objects import LockMode


class ReadWriteLock:
    """Shared/exclusive lock built on a condition variable.

    Thread Safety:
        All state is guarded by an internal mutex; waiting threads block on
        a single condition and re-check their predicate when woken.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire(self, mode: LockMode) -> None:
        """Block until the lock is held in the given mode."""
        with self._cond:
            if mode == LockMode.SHARED:
                while self._writer or self._waiting_writers:
                    self._cond.wait()
                self._readers += 1
            else:
                self._waiting_writers += 1
                acquired = False
                try:
                    while self._writer or self._readers:
                        self._cond.wait()
                    self._writer = acquired = True
                finally:
                    self._waiting_writers -= 1
                    if not acquired:
                        # readers queued behind this writer may proceed
                        self._cond.notify_all()

    def release(self, mode: LockMode) -> None:
        """Release a lock previously acquired in the given mode.

        Raises:
            RuntimeError: If the lock is not held in that mode.
        """
        with self._cond:
            if mode == LockMode.SHARED:
                if self._readers == 0:
                    raise RuntimeError("release of unheld shared lock")
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()
            else:
                if not self._writer:
                    raise RuntimeError("release of unheld exclusive lock")
                self._writer = False
                self._cond.notify_all()

    @contextmanager
    def held(self, mode: LockMode) -> Iterator[None]:
        """Hold the lock in the given mode for the duration of a block."""
        self.acquire(mode)
        try:
            yield
        finally:
            self.release(mode)

    def read_locked(self) -> AbstractContextManager[None]:
        """Shorthand for held(LockMode.SHARED)."""
        return self.held(LockMode.SHARED)

    def write_locked(self) -> AbstractContextManager[None]:
        """Shorthand for held(LockMode.EXCLUSIVE)."""
        return self.held(LockMode.EXCLUSIVE)

    @property
    def readers(self) -> int:
        """Number of threads currently holding the lock in shared mode."""
        with self._cond:
            return self._readers

    @property
    def write_held(self) -> bool:
        """Whether a writer currently holds the lock."""
        with self._cond:
            return self._writer
