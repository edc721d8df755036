"""
Reader–writer lock with bounded waits.

Many readers may hold the lock together; a writer holds it alone. Waiting
writers block new readers so a steady stream of reads cannot starve the
tick loop. Every acquire takes a timeout; the context managers raise
LockTimeoutError instead of blocking forever.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from chott.errors import LockTimeoutError


class ReadWriteLock:
    """Writer-preferring reader–writer lock built on a Condition."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self, timeout: float | None = None) -> bool:
        with self._cond:
            ok = self._cond.wait_for(
                lambda: not self._writer and self._writers_waiting == 0,
                timeout=timeout,
            )
            if not ok:
                return False
            self._readers += 1
            return True

    def release_read(self) -> None:
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read without matching acquire_read")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: float | None = None) -> bool:
        with self._cond:
            self._writers_waiting += 1
            try:
                ok = self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0,
                    timeout=timeout,
                )
            finally:
                self._writers_waiting -= 1
            if not ok:
                # Readers held back by this writer may proceed now.
                self._cond.notify_all()
                return False
            self._writer = True
            return True

    def release_write(self) -> None:
        with self._cond:
            if not self._writer:
                raise RuntimeError("release_write without matching acquire_write")
            self._writer = False
            self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer

    @contextmanager
    def read_locked(self, timeout: float | None = None) -> Iterator[None]:
        if not self.acquire_read(timeout):
            raise LockTimeoutError(f"Timed out after {timeout}s waiting for read lock")
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked_section(self, timeout: float | None = None) -> Iterator[None]:
        if not self.acquire_write(timeout):
            raise LockTimeoutError(f"Timed out after {timeout}s waiting for write lock")
        try:
            yield
        finally:
            self.release_write()
