"""Per-key mutual exclusion.

KeyedLock hands out one lock per key and drops it once no caller holds or
waits for it, so the number of live locks stays bounded by concurrency.
"""

from contextlib import contextmanager
from threading import Lock
from typing import Hashable, Iterator


class KeyedLock:
    """Reference-counted map of per-key locks."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[Hashable, tuple[Lock, int]] = {}

    @contextmanager
    def acquire(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        with self._guard:
            lock, refs = self._locks.get(key, (None, 0))
            if lock is None:
                lock = Lock()
            self._locks[key] = (lock, refs + 1)

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                lock, refs = self._locks[key]
                if refs <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, refs - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
