"""
Supervised periodic tick loop.

A daemon thread calls ``ActorManager.tick_some`` every
``tick_interval_seconds``. A tick that cannot get the world lock in time is
skipped; a tick that raises is logged and counted. Neither stops the loop.
``stop()`` is honored between ticks, never in the middle of one.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable

from chott.core.clock import WorldTime
from chott.core.manager import ActorManager, TickReport
from chott.errors import LockTimeoutError

logger = logging.getLogger(__name__)


class TickOutcome(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class TickScheduler:
    """Runs the world tick on a fixed interval in a background thread."""

    def __init__(
        self,
        manager: ActorManager,
        interval: float | None = None,
        clock: Callable[[], WorldTime] | None = None,
    ):
        self.manager = manager
        cfg = manager.config
        self.interval = interval if interval is not None else cfg.tick_interval_seconds
        self.clock = clock or (
            lambda: WorldTime.now(day_start=cfg.day_start_hour, day_end=cfg.day_end_hour)
        )

        self.completed = 0
        self.skipped = 0
        self.failed = 0
        self.last_report: TickReport | None = None
        self.last_error: str | None = None

        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._stats_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_tick(self) -> tuple[TickOutcome, TickReport | None, str | None]:
        """Run a single supervised tick and say how it ended.

        Returns ``(outcome, report, error)``; ``report`` is None unless the
        tick completed.
        """
        try:
            report = self.manager.tick_some(self.clock())
        except LockTimeoutError as exc:
            logger.warning("World tick skipped: %s", exc)
            error = str(exc)
            with self._stats_lock:
                self.skipped += 1
                self.last_error = error
            return TickOutcome.SKIPPED, None, error
        except Exception as exc:
            logger.exception("World tick failed; continuing on next interval")
            error = f"{type(exc).__name__}: {exc}"
            with self._stats_lock:
                self.failed += 1
                self.last_error = error
            return TickOutcome.FAILED, None, error
        with self._stats_lock:
            self.completed += 1
            self.last_report = report
        return TickOutcome.COMPLETED, report, None

    def run_once(self) -> TickReport | None:
        """Run a single supervised tick. Returns None if it was skipped or failed."""
        return self.run_tick()[1]

    def _loop(self) -> None:
        logger.info("Tick scheduler started (interval=%.2fs)", self.interval)
        while not self._stop.is_set():
            self.run_once()
            if self._stop.wait(self.interval):
                break
        logger.info("Tick scheduler stopped")

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="chott-tick", daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit after the current tick and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Tick scheduler did not stop within %ss", timeout)
            else:
                self._thread = None

    def stats(self) -> dict[str, Any]:
        with self._stats_lock:
            return {
                "running": self.is_running,
                "interval_seconds": self.interval,
                "completed": self.completed,
                "skipped": self.skipped,
                "failed": self.failed,
                "last_error": self.last_error,
                "last_report": self.last_report.to_dict() if self.last_report else None,
            }
