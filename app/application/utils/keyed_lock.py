from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """
    One lock per key, so work for the same key runs one at a time.

    A key's lock exists only while someone holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}
        self._lock_lock = threading.Lock()  # guards both dicts

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock_lock:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._lock_lock:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._lock_lock:
            return len(self._locks)
