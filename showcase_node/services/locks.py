from __future__ import annotations

import threading


class KeyedLocks:
    """One lock per key. Work on different keys never contends."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()   # protects the registry only

    def get(self, key: str) -> threading.Lock:
        lock = self._locks.get(key)
        if lock is None:
            with self._guard:
                lock = self._locks.setdefault(key, threading.Lock())
        return lock
