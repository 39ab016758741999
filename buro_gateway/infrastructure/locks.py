"""Per-person write serialization"""

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, List
from buro_gateway.config import settings


class PersonLockRegistry:
    """
    Striped in-process locks keyed by person identifier.

    Writers hold the lock from their existence check until commit, so a
    concurrent writer for the same person re-checks after the first one
    committed and skips instead of inserting duplicates. Only serializes
    within one process; multi-worker deployments share nothing here.
    """

    def __init__(self, stripes: int = 64):
        self._stripes = [threading.Lock() for _ in range(max(1, stripes))]

    def _index(self, person_id: str) -> int:
        return hash(person_id) % len(self._stripes)

    @contextmanager
    def hold(self, person_id: str) -> Iterator[None]:
        """Hold the lock of a single person"""
        lock = self._stripes[self._index(person_id)]
        with lock:
            yield

    @contextmanager
    def hold_many(self, person_ids: Iterable[str]) -> Iterator[None]:
        """Hold the locks of several persons, acquired in stripe order"""
        indexes = sorted({self._index(pid) for pid in person_ids})
        acquired: List[threading.Lock] = []
        try:
            for index in indexes:
                lock = self._stripes[index]
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


person_locks = PersonLockRegistry(settings.lock_stripes)
