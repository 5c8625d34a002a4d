"""
Per-key in-process locks.

Writers on the same key are serialized; different keys never contend.
Entries are reference counted and dropped once no thread holds or waits
on them, so the registry does not grow with the number of keys seen.
"""
from contextlib import contextmanager
from threading import Lock
from typing import Dict, Hashable, Iterator, List


class KeyedLock:
    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: Dict[Hashable, List] = {}  # key -> [lock, refcount]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
