from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock

from timetabler.core.exceptions import GenerationInProgressError


class TermLockRegistry:
    """One process-local lock per (semester, academic year)."""

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], Lock] = {}
        self._guard = Lock()

    def _lock_for(self, semester: str, academic_year: str) -> Lock:
        key = (semester, academic_year)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, semester: str, academic_year: str, *, timeout: float | None = None) -> Iterator[None]:
        """Hold the term lock.

        ``timeout=None`` fails immediately when the term is busy; otherwise the
        caller waits up to ``timeout`` seconds.
        """
        lock = self._lock_for(semester, academic_year)
        if timeout is None:
            acquired = lock.acquire(blocking=False)
        else:
            acquired = lock.acquire(timeout=timeout)
        if not acquired:
            raise GenerationInProgressError(semester, academic_year)
        try:
            yield
        finally:
            lock.release()

    def is_locked(self, semester: str, academic_year: str) -> bool:
        return self._lock_for(semester, academic_year).locked()

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


term_locks = TermLockRegistry()
