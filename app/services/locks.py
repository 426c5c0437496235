"""
Process-wide mutual exclusion keyed by string.

Rule mutations against one space are read-modify-write cycles over the whole
remote ruleset, so two of them must never overlap.  `KeyedMutex` hands out one
lock per key, created lazily:

    with space_locks.hold(space_id):
        ...  # fetch, mutate, replace

Locks are not reentrant and are only shared within this process.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class KeyedMutex:
    """Mapping of key -> ``threading.Lock`` guarded by its own lock."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock for *key* for the duration of the block."""
        lock = self._lock_for(key)
        lock.acquire()
        try:
            yield
        finally:
            lock.release()


space_locks = KeyedMutex()
